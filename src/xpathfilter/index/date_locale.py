"""按区域匹配日期中的月份、星期与上下午名称

``strptime`` 的 ``%b/%B/%a/%A/%p`` 只认进程自身的 LC_TIME。这里改为用 Babel（CLDR）
取主机区域的名称表，把日期文本中的名称替换为数字（月份 -> ``%m``，星期 -> ``%w``），
上下午标记替换为 ``AM``/``PM``，再交给 ``strptime``。
"""

from __future__ import annotations

import re
from functools import lru_cache

from babel import Locale, UnknownLocaleError
from babel.dates import get_day_names, get_month_names, get_period_names

from ..common.logger import get_logger

logger = get_logger(__name__)

FALLBACK_LOCALE = "en"

_DIRECTIVE_RE = re.compile(r"%(.)")
_WIDTHS = ("wide", "abbreviated")
_CONTEXTS = ("format", "stand-alone")


@lru_cache(maxsize=64)
def resolve_locale(locale_tag: str | None) -> Locale:
    """把 BCP-47 标签解析为 Babel 区域；无法识别时使用英文"""
    if locale_tag and locale_tag.strip():
        try:
            return Locale.parse(locale_tag.strip().replace("_", "-"), sep="-")
        except (ValueError, TypeError, UnknownLocaleError) as e:
            logger.debug(f"[DateLocale] 无法识别区域 {locale_tag!r} ({e})，使用 {FALLBACK_LOCALE}")
    return Locale.parse(FALLBACK_LOCALE)


class NameTable:
    """名称 -> 替换文本，大小写不敏感，按最长名称优先匹配"""

    def __init__(self, names: dict[str, str]):
        self.names = names
        alternatives = sorted(names, key=len, reverse=True)
        # 名称前后不能紧邻字母（数字可以，如 27Nov2015）
        self.pattern = re.compile(
            r"(?<![^\W\d_])(" + "|".join(re.escape(name) for name in alternatives) + r")(?![^\W\d_])",
            re.IGNORECASE,
        )

    def replace(self, text: str) -> str:
        if not self.names:
            return text
        return self.pattern.sub(lambda m: self.names.get(m.group(1).casefold(), m.group(1)), text)


def _add_name(names: dict[str, str], name: str, replacement: str) -> None:
    name = name.strip()
    if not name:
        return
    names.setdefault(name.casefold(), replacement)
    # 缩写常带句点（如 "nov."），日期文本里可能省略
    if name.endswith(".") and len(name) > 1:
        names.setdefault(name[:-1].casefold(), replacement)


@lru_cache(maxsize=64)
def month_names(locale_tag: str | None) -> NameTable:
    locale = resolve_locale(locale_tag)
    names: dict[str, str] = {}
    for width in _WIDTHS:
        for context in _CONTEXTS:
            for number, name in get_month_names(width, context, locale).items():
                _add_name(names, name, f"{number:02d}")
    return NameTable(names)


@lru_cache(maxsize=64)
def weekday_names(locale_tag: str | None) -> NameTable:
    locale = resolve_locale(locale_tag)
    names: dict[str, str] = {}
    for width in _WIDTHS:
        for context in _CONTEXTS:
            # Babel 以周一为 0，%w 以周日为 0
            for index, name in get_day_names(width, context, locale).items():
                _add_name(names, name, str((index + 1) % 7))
    return NameTable(names)


@lru_cache(maxsize=64)
def period_names(locale_tag: str | None) -> NameTable:
    locale = resolve_locale(locale_tag)
    names: dict[str, str] = {}
    for width in _WIDTHS:
        for context in _CONTEXTS:
            periods = get_period_names(width, context, locale)
            for key in ("am", "pm"):
                if key in periods:
                    _add_name(names, periods[key], key.upper())
    return NameTable(names)


def localize(text: str, fmt: str, locale_tag: str | None) -> tuple[str, str]:
    """按区域改写日期文本与 strptime 格式串

    Args:
        text: 原始日期文本
        fmt: strptime 格式串
        locale_tag: BCP-47 语言标签

    Returns:
        (改写后的文本, 改写后的格式串)
    """
    directives = {m.group(1) for m in _DIRECTIVE_RE.finditer(fmt)}
    rewrites: dict[str, str] = {}

    if directives & {"b", "B"}:
        text = month_names(locale_tag).replace(text)
        rewrites.update({"b": "%m", "B": "%m"})
    if directives & {"a", "A"}:
        text = weekday_names(locale_tag).replace(text)
        rewrites.update({"a": "%w", "A": "%w"})
    if "p" in directives:
        text = period_names(locale_tag).replace(text)

    if rewrites:
        fmt = _DIRECTIVE_RE.sub(lambda m: rewrites.get(m.group(1), m.group(0)), fmt)
    return text, fmt
