"""XPath 求值器

基于 lxml 的 XPath 1.0 求值：选择节点（文档顺序），并从不同类型的节点中提取文本。
"""

from __future__ import annotations

import math
import threading
from typing import Any

from lxml import etree

from ..common.exceptions import XPathEvalError

# 每个线程持有自己的已编译 XPath 对象，同一表达式在同一线程内只编译一次
_local = threading.local()


def compile_xpath(expression: str) -> etree.XPath:
    """编译 XPath 表达式

    libxml2 在编译阶段不检查函数名、变量、命名空间前缀和参数个数，
    因此编译后在空元素上试求值一次，使这些错误在加载期暴露。

    Raises:
        XPathEvalError: 表达式无效
    """
    try:
        compiled = etree.XPath(expression, smart_strings=True)
        compiled(etree.Element("x"))
    except etree.XPathError as e:
        raise XPathEvalError(expression, str(e)) from e
    return compiled


def get_compiled(expression: str) -> etree.XPath:
    """获取当前线程缓存的已编译 XPath"""
    cache: dict[str, etree.XPath] | None = getattr(_local, "cache", None)
    if cache is None:
        cache = {}
        _local.cache = cache
    compiled = cache.get(expression)
    if compiled is None:
        compiled = compile_xpath(expression)
        cache[expression] = compiled
    return compiled


def select_nodes(expression: str, dom: Any) -> list[Any]:
    """在 DOM 上求值 XPath，返回按文档顺序排列的结果列表

    非节点集结果（字符串、数字、布尔值）被包装为单元素列表。

    Args:
        expression: XPath 表达式
        dom: lxml ElementTree 或元素

    Returns:
        节点列表

    Raises:
        XPathEvalError: 求值失败
    """
    compiled = get_compiled(expression)
    try:
        result = compiled(dom)
    except etree.XPathError as e:
        raise XPathEvalError(expression, str(e)) from e

    if isinstance(result, list):
        return result
    return [result]


def _format_number(value: float) -> str:
    # XPath 1.0 number -> string 规则
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value):
        return str(int(value))
    return repr(value)


def text_of(node: Any) -> str:
    """提取节点文本

    - 元素：所有后代文本节点按文档顺序拼接
    - 属性 / 文本 / CDATA：字符串值
    - 注释、处理指令等其他节点：空字符串
    """
    if isinstance(node, etree._Element):
        if not isinstance(node.tag, str):
            return ""
        return "".join(
            text for text in node.xpath("descendant::text()") if isinstance(text, str)
        )
    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, str):
        return str(node)
    if isinstance(node, (int, float)):
        return _format_number(float(node))
    return ""
