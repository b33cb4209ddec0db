"""配置管理"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    CONF_DATE_DEFAULT_FORMAT,
    CONF_DATE_DEFAULT_LOCALE,
    CONF_DATE_OUTPUT_FORMAT,
    CONF_DATE_RULES_FILE,
    CONF_DEFAULT_ENCODING,
    CONF_MULTIVALUED,
    CONF_RULES_FILE,
    DEFAULT_DATE_FORMAT,
    DEFAULT_DATE_LOCALE,
    DEFAULT_DATE_OUTPUT_FORMAT,
    DEFAULT_ENCODING,
)

# 加载 .env 文件
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class ParserConfig(BaseModel):
    """解析阶段配置"""

    model_config = ConfigDict(frozen=True)

    # 未声明原始编码时 HTML 内容使用的默认编码
    default_encoding: str = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_DEFAULT_ENCODING", DEFAULT_ENCODING)
    )
    # XPath 规则文件路径（XML 或 YAML）
    rules_file: str | None = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_RULES_FILE", None)
    )
    # 非拼接模式下是否以分隔符累积多个值（默认关闭，保持覆盖写语义）
    multivalued: bool = Field(default_factory=lambda: _env_bool("XPATHFILTER_MULTIVALUED"))


class DateListingsConfig(BaseModel):
    """日期规范化配置

    格式串沿用 Java SimpleDateFormat 写法（如 ``dd-MM-yyyy``）。
    """

    model_config = ConfigDict(frozen=True)

    rules_file: str | None = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_DATE_RULES_FILE", None)
    )
    default_format: str = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_DATE_DEFAULT_FORMAT", DEFAULT_DATE_FORMAT)
    )
    output_format: str = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_DATE_OUTPUT_FORMAT", DEFAULT_DATE_OUTPUT_FORMAT)
    )
    default_locale: str = Field(
        default_factory=lambda: os.getenv("XPATHFILTER_DATE_DEFAULT_LOCALE", DEFAULT_DATE_LOCALE)
    )


# 宿主点分配置键 -> (子配置, 字段名)
PROPERTY_MAP: dict[str, tuple[str, str]] = {
    CONF_DEFAULT_ENCODING: ("parser", "default_encoding"),
    CONF_RULES_FILE: ("parser", "rules_file"),
    CONF_MULTIVALUED: ("parser", "multivalued"),
    CONF_DATE_RULES_FILE: ("date", "rules_file"),
    CONF_DATE_DEFAULT_FORMAT: ("date", "default_format"),
    CONF_DATE_OUTPUT_FORMAT: ("date", "output_format"),
    CONF_DATE_DEFAULT_LOCALE: ("date", "default_locale"),
}


class Config(BaseModel):
    """全局配置

    在 ``set_configuration`` 时构建一次，之后只读，可在线程间共享。
    """

    model_config = ConfigDict(frozen=True)

    parser: ParserConfig = Field(default_factory=ParserConfig)
    date: DateListingsConfig = Field(default_factory=DateListingsConfig)

    @classmethod
    def load(cls) -> "Config":
        """从环境变量加载配置"""
        return cls()

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "Config":
        """从宿主的点分配置键构建配置

        未出现的键使用环境变量/默认值，未知键被忽略。

        Args:
            properties: 形如 ``{"parser.xmlhtml.file": "rules.xml"}`` 的映射

        Returns:
            配置实例
        """
        sections: dict[str, dict[str, Any]] = {"parser": {}, "date": {}}
        for key, value in properties.items():
            target = PROPERTY_MAP.get(key)
            if target is None:
                continue
            section, field_name = target
            sections[section][field_name] = value

        return cls(
            parser=ParserConfig(**sections["parser"]),
            date=DateListingsConfig(**sections["date"]),
        )
