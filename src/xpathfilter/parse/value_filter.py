"""提取值过滤：空白过滤、去首尾空白与 HTML 实体反转义"""

from __future__ import annotations

import re
from html.entities import name2codepoint

# 仅由这些字符组成的值视为空
_BLANK_CHARS = frozenset(" \n\t")
# 去除首尾空白时使用的字符集
_TRIM_CHARS = " \t\r\n\f"

# 实体必须以分号结尾：&name; / &#N; / &#xN;
_ENTITY_RE = re.compile(r"&(?:#([0-9]+)|#[xX]([0-9a-fA-F]+)|([A-Za-z][A-Za-z0-9]*));")


def _replace_entity(match: re.Match[str]) -> str:
    decimal, hexadecimal, name = match.groups()
    if name is not None:
        # name2codepoint 即 HTML 4 实体表
        codepoint = name2codepoint.get(name)
        return chr(codepoint) if codepoint is not None else match.group(0)

    codepoint = int(decimal) if decimal is not None else int(hexadecimal, 16)
    if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
        return match.group(0)
    return chr(codepoint)


def unescape_html(value: str) -> str:
    """反转义 HTML 4 命名实体与数字实体，未知实体与缺少分号的写法保持原样"""
    if "&" not in value:
        return value
    return _ENTITY_RE.sub(_replace_entity, value)


def is_blank(value: str) -> bool:
    return not value or all(ch in _BLANK_CHARS for ch in value)


def filter_value(value: str | None, trim: bool = True) -> str | None:
    """过滤单个提取值

    Args:
        value: XPath 节点提取出的原始字符串
        trim: 是否去除首尾空白

    Returns:
        过滤后的字符串；空串或纯空白（空格/换行/制表符）返回 None
    """
    if value is None or is_blank(value):
        return None
    if trim:
        value = value.strip(_TRIM_CHARS)
    return unescape_html(value)
