"""自定义异常类

定义项目中使用的所有自定义异常，用于更精细的错误处理。
每个异常带有 ``kind`` 标识，对应宿主日志与解析状态中的错误类别。
"""

from __future__ import annotations


class XPathFilterError(Exception):
    """XPathFilter 基础异常类

    所有自定义异常的基类。
    """

    kind: str = "error"


class RuleValidationError(XPathFilterError):
    """规则集验证失败

    规则文件加载或校验时抛出，属于配置期的致命错误。
    """

    kind = "rule_validation"

    def __init__(self, message: str, source: str | None = None):
        if source:
            message = f"{message} ({source})"
        super().__init__(message)
        self.source = source


class ExtractionError(XPathFilterError):
    """页面级致命错误的基类

    抛出后当前页面的解析结果会被标记为 FAILED。
    """

    pass


class BadRegexError(ExtractionError, ValueError):
    """正则表达式无效"""

    kind = "bad_regex"

    def __init__(self, pattern: str, reason: str = "无效的正则表达式"):
        super().__init__(f"{reason}: {pattern}")
        self.pattern = pattern


class HtmlCleanError(ExtractionError):
    """HTML 清洗失败"""

    kind = "html_clean_error"


class XmlParseError(ExtractionError):
    """XML 内容解析失败"""

    kind = "xml_parse_error"


class XPathEvalError(ExtractionError):
    """XPath 编译或求值失败"""

    kind = "xpath_error"

    def __init__(self, expression: str, reason: str):
        super().__init__(f"XPath 错误 [{expression}]: {reason}")
        self.expression = expression


class EncodingError(XPathFilterError):
    """声明的字符编码无法识别

    非致命：调用方记录警告后回退到默认编码。
    """

    kind = "encoding_error"

    def __init__(self, encoding: str):
        super().__init__(f"未知的字符编码: {encoding}")
        self.encoding = encoding


class IndexingError(XPathFilterError):
    """索引阶段错误的基类"""

    pass


class BadUrlError(IndexingError):
    """URL 无法解析出主机名"""

    kind = "bad_url"

    def __init__(self, url: str | None, reason: str = "URL 解析失败"):
        super().__init__(f"{reason}: {url}")
        self.url = url


class DateParseError(IndexingError):
    """日期字符串与配置的格式不匹配"""

    kind = "date_parse_error"

    def __init__(self, raw_date: str | None, pattern: str):
        super().__init__(f"无法按格式 '{pattern}' 解析日期: {raw_date!r}")
        self.raw_date = raw_date
        self.pattern = pattern


class DateRuleError(XPathFilterError):
    """日期规则配置错误（格式模式不受支持、规则文件不存在等）"""

    kind = "date_rule_error"
