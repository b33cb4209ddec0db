"""页面门控：判断一个规则组是否作用于当前页面

先做 URL 正则过滤，再（可选）做内容 XPath + 正则过滤。门控没有副作用。
"""

from __future__ import annotations

import re
from typing import Any

from ..common.logger import get_logger
from ..rules.models import RuleGroup
from .value_filter import filter_value
from .xpath_eval import select_nodes, text_of

logger = get_logger(__name__)


def is_match(pattern: re.Pattern[str] | None, value: str) -> bool:
    """正则在字符串任意位置匹配即视为命中；未配置正则时总是命中"""
    if pattern is None:
        return True
    return pattern.search(value) is not None


def url_matches(group: RuleGroup, url: str) -> bool:
    return is_match(group.url_pattern, url or "")


def collect_values(expression: str, dom: Any, trim: bool) -> list[str]:
    """求值 XPath，逐节点提取文本并过滤，返回保留下来的值"""
    values: list[str] = []
    for node in select_nodes(expression, dom):
        value = filter_value(text_of(node), trim)
        if value is not None:
            values.append(value)
    return values


def join_values(values: list[str], delimiter: str) -> str:
    """拼接保留值：累积结果为空时直接取当前值，否则追加分隔符与当前值"""
    accumulator = ""
    for value in values:
        if not accumulator:
            accumulator = value
        else:
            accumulator = accumulator + delimiter + value
    return accumulator


def page_to_process(group: RuleGroup, dom: Any, url: str) -> bool:
    """判断规则组是否适用于页面

    Args:
        group: 规则组
        dom: 页面文档树
        url: 页面基础 URL

    Returns:
        True 表示规则组应当被应用

    Raises:
        XPathEvalError: 内容门控 XPath 求值失败
    """
    if not url_matches(group, url):
        return False

    if group.content_filter_xpath is None:
        return True

    values = collect_values(group.content_filter_xpath, dom, group.content_filter_trim)

    if group.content_filter_concat:
        joined = join_values(values, group.content_filter_concat_delim)
        accepted = is_match(group.content_pattern, joined)
    else:
        # 所有保留值都必须命中；节点集为空时直接接受
        accepted = all(is_match(group.content_pattern, value) for value in values)

    logger.debug(
        f"[PageGate] {group.url_filter_regex} 内容门控 "
        f"({len(values)} 个值) -> {'接受' if accepted else '拒绝'}: {url}"
    )
    return accepted
