"""索引阶段：多值展开与发布日期规范化"""

from .emitter import XPathIndexingFilter, join_multi_value, split_multi_value
from .date_normalizer import DateListingsFilter
from .date_rules import DateRule, load_date_rules, parse_date_rules

__all__ = [
    "XPathIndexingFilter",
    "join_multi_value",
    "split_multi_value",
    "DateListingsFilter",
    "DateRule",
    "load_date_rules",
    "parse_date_rules",
]
