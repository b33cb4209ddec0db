"""Common模块 - 公共工具和基础设施

该模块提供：
- 全局配置管理
- 日志系统
- 异常类
- 线格式常量
- 宿主契约类型
"""

from .config import Config, DateListingsConfig, ParserConfig
from .logger import console, get_logger
from .exceptions import (
    XPathFilterError,
    RuleValidationError,
    ExtractionError,
    BadRegexError,
    HtmlCleanError,
    XmlParseError,
    XPathEvalError,
    EncodingError,
    IndexingError,
    BadUrlError,
    DateParseError,
    DateRuleError,
)
from .constants import MULTI_VALUE_SEPARATOR, MULTI_VALUE_SEPARATOR_BYTES, PUBLISH_DATE_KEY
from .types import IndexDocument, ParseResult, ParseStatus, WebPage

__all__ = [
    # 配置
    "Config",
    "ParserConfig",
    "DateListingsConfig",
    # 日志
    "get_logger",
    "console",
    # 异常
    "XPathFilterError",
    "RuleValidationError",
    "ExtractionError",
    "BadRegexError",
    "HtmlCleanError",
    "XmlParseError",
    "XPathEvalError",
    "EncodingError",
    "IndexingError",
    "BadUrlError",
    "DateParseError",
    "DateRuleError",
    # 常量
    "MULTI_VALUE_SEPARATOR",
    "MULTI_VALUE_SEPARATOR_BYTES",
    "PUBLISH_DATE_KEY",
    # 宿主契约
    "IndexDocument",
    "ParseResult",
    "ParseStatus",
    "WebPage",
]
