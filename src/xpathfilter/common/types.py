"""宿主契约数据类型

爬虫宿主提供的页面对象、解析结果以及索引文档。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .constants import ORIGINAL_CHAR_ENCODING_KEY


class ParseStatus(str, Enum):
    """解析状态码"""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class ParseResult:
    """解析结果

    过滤器成功时原样返回宿主传入的结果；失败时返回一个空的 FAILED 结果。
    """

    base_url: str
    status: ParseStatus = ParseStatus.SUCCESS
    text: str = ""
    title: str = ""
    message: str | None = None

    @classmethod
    def failed(cls, base_url: str, message: str | None = None) -> "ParseResult":
        """构建携带基础 URL 的空失败结果"""
        return cls(base_url=base_url, status=ParseStatus.FAILED, message=message)

    @property
    def is_success(self) -> bool:
        return self.status == ParseStatus.SUCCESS


@dataclass
class WebPage:
    """已抓取页面

    ``metadata`` 是页面元数据载体：UTF-8 字节键 -> UTF-8 字节值，键唯一。
    """

    url: str
    content: bytes = b""
    content_type: str = ""
    base_url: str | None = None
    repr_url: str | None = None
    original_encoding: str | None = None
    metadata: dict[bytes, bytes] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.base_url:
            self.base_url = self.url

    def get_original_encoding(self) -> str | None:
        """返回页面原始编码：显式字段优先，其次是载体中的编码探测结果"""
        if self.original_encoding:
            return self.original_encoding
        raw = self.metadata.get(ORIGINAL_CHAR_ENCODING_KEY)
        if raw:
            return raw.decode("ascii", errors="ignore").strip() or None
        return None


@dataclass
class IndexDocument:
    """索引文档（多值字段，按添加顺序保存）"""

    fields: dict[str, list[str]] = field(default_factory=dict)

    def add(self, name: str, value: str) -> None:
        self.fields.setdefault(name, []).append(value)

    def get(self, name: str) -> str | None:
        values = self.fields.get(name)
        return values[0] if values else None

    def get_values(self, name: str) -> list[str]:
        return list(self.fields.get(name, []))

    def field_names(self) -> list[str]:
        return list(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields
