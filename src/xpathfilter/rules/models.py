"""XPath 规则集数据模型

规则集在进程内加载一次，之后不可变；正则与 XPath 在校验阶段编译并缓存在模型上。
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from ..common.exceptions import BadRegexError, XPathEvalError
from ..parse.xpath_eval import compile_xpath


class FieldType(str, Enum):
    """字段类型（仅供下游索引使用，提取器不关心）"""

    STRING = "STRING"
    INTEGER = "INTEGER"
    LONG = "LONG"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """编译正则表达式

    Raises:
        BadRegexError: 正则无效
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise BadRegexError(pattern, f"无效的正则表达式 ({e})") from e


def _check_xpath(expression: str) -> str:
    try:
        compile_xpath(expression)
    except XPathEvalError as e:
        raise ValueError(str(e)) from e
    return expression


class FieldRule(BaseModel):
    """字段规则：一个命名的 XPath 提取"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="目标字段名")
    xpath: str = Field(..., alias="xPath", description="XPath 表达式")
    trim: bool = Field(default=True, alias="trimXPathData", description="是否去除首尾空白")
    concat: bool = Field(default=False, description="是否拼接所有匹配值")
    concat_delim: str = Field(default="", alias="concatDelimiter", description="拼接分隔符")
    type: FieldType = Field(default=FieldType.STRING, description="字段类型")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("xpath")
    @classmethod
    def _validate_xpath(cls, value: str) -> str:
        return _check_xpath(value)


class RuleGroup(BaseModel):
    """规则组：URL 作用域内的一组字段规则，外加可选的内容门控"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url_filter_regex: str = Field(..., min_length=1, alias="pageUrlFilterRegex")
    content_filter_xpath: str | None = Field(default=None, alias="pageContentFilterXPath")
    content_filter_regex: str | None = Field(default=None, alias="pageContentFilterRegex")
    content_filter_concat: bool = Field(default=False, alias="concatPageContentFilterXPathData")
    content_filter_concat_delim: str = Field(
        default="", alias="concatPageContentFilterXPathDataDelimiter"
    )
    content_filter_trim: bool = Field(default=True, alias="trimPageContentFilterXPathData")
    fields: tuple[FieldRule, ...] = Field(..., min_length=1)

    _url_pattern: re.Pattern[str] = PrivateAttr()
    _content_pattern: re.Pattern[str] | None = PrivateAttr(default=None)

    @field_validator("url_filter_regex", "content_filter_regex")
    @classmethod
    def _validate_regex(cls, value: str | None) -> str | None:
        if value is not None:
            # BadRegexError 同时是 ValueError，会被 pydantic 收集为校验错误
            compile_pattern(value)
        return value

    @field_validator("content_filter_xpath")
    @classmethod
    def _validate_content_xpath(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return _check_xpath(value)

    @model_validator(mode="after")
    def _check_unique_names(self) -> "RuleGroup":
        seen: set[str] = set()
        for rule in self.fields:
            if rule.name in seen:
                raise ValueError(f"规则组内字段名重复: {rule.name}")
            seen.add(rule.name)
        return self

    def model_post_init(self, __context) -> None:
        self._url_pattern = compile_pattern(self.url_filter_regex)
        if self.content_filter_regex is not None:
            self._content_pattern = compile_pattern(self.content_filter_regex)

    @property
    def url_pattern(self) -> re.Pattern[str]:
        return self._url_pattern

    @property
    def content_pattern(self) -> re.Pattern[str] | None:
        return self._content_pattern


class RuleSet(BaseModel):
    """有序的规则组列表"""

    model_config = ConfigDict(frozen=True)

    groups: tuple[RuleGroup, ...] = Field(default_factory=tuple)

    def __iter__(self):
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def field_names(self) -> list[str]:
        """返回所有规则组中出现的字段名（按配置顺序去重）"""
        names: list[str] = []
        for group in self.groups:
            for rule in group.fields:
                if rule.name not in names:
                    names.append(rule.name)
        return names
