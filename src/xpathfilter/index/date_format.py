"""日期格式模式转换

把 Java ``SimpleDateFormat`` 风格的模式（如 ``dd-MM-yyyy``）转换为
``strptime`` / ``strftime`` 指令（如 ``%d-%m-%Y``）。

支持的模式字母：

=====  =========================  ==========
字母    含义                        指令
=====  =========================  ==========
y      年（``yy`` 为两位年）        %Y / %y
M      月（``MMM`` 缩写名，更长为全名） %m / %b / %B
d      月内日                       %d
D      年内日                       %j
H      小时 (0-23)                  %H
h      小时 (1-12)                  %I
m      分钟                         %M
s      秒                           %S
S      毫秒（按微秒解析）           %f
E      星期（``EEEE`` 为全名）       %a / %A
a      上午/下午                    %p
z Z X  时区偏移                     %z
=====  =========================  ==========

单引号包围的内容按字面量处理，``''`` 表示一个单引号。
"""

from __future__ import annotations

from functools import lru_cache

from ..common.exceptions import DateRuleError


def _directive(letter: str, count: int, pattern: str) -> str:
    if letter == "y":
        return "%y" if count == 2 else "%Y"
    if letter == "M":
        if count <= 2:
            return "%m"
        return "%b" if count == 3 else "%B"
    if letter == "E":
        return "%A" if count >= 4 else "%a"
    simple = {
        "d": "%d",
        "D": "%j",
        "H": "%H",
        "h": "%I",
        "m": "%M",
        "s": "%S",
        "S": "%f",
        "a": "%p",
        "z": "%z",
        "Z": "%z",
        "X": "%z",
    }
    directive = simple.get(letter)
    if directive is None:
        raise DateRuleError(f"不支持的日期模式字母 '{letter}': {pattern}")
    return directive


@lru_cache(maxsize=128)
def to_strftime(pattern: str) -> str:
    """把 SimpleDateFormat 模式转换为 strftime 格式串

    Raises:
        DateRuleError: 模式包含不支持的字母或未闭合的引号
    """
    result: list[str] = []
    i = 0
    length = len(pattern)

    while i < length:
        ch = pattern[i]

        if ch == "'":
            # '' -> 单引号字面量
            if i + 1 < length and pattern[i + 1] == "'":
                result.append("'")
                i += 2
                continue
            end = pattern.find("'", i + 1)
            if end < 0:
                raise DateRuleError(f"日期模式中引号未闭合: {pattern}")
            literal = pattern[i + 1 : end]
            result.append(literal.replace("%", "%%"))
            i = end + 1
            continue

        if ch.isascii() and ch.isalpha():
            j = i
            while j < length and pattern[j] == ch:
                j += 1
            result.append(_directive(ch, j - i, pattern))
            i = j
            continue

        result.append("%%" if ch == "%" else ch)
        i += 1

    return "".join(result)