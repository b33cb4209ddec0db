"""XPathFilter - 基于 XPath 规则的网页字段提取引擎"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .index.date_normalizer import DateListingsFilter as DateListingsFilter
    from .index.emitter import XPathIndexingFilter as XPathIndexingFilter
    from .parse.extractor import XPathParseFilter as XPathParseFilter
    from .rules.loader import load_rule_set as load_rule_set

__all__ = [
    "__version__",
    "XPathParseFilter",
    "XPathIndexingFilter",
    "DateListingsFilter",
    "load_rule_set",
]


def __getattr__(name: str) -> Any:
    """Lazy exports to avoid import cycles between the parse and rules packages."""
    if name == "XPathParseFilter":
        from .parse.extractor import XPathParseFilter

        return XPathParseFilter
    if name == "XPathIndexingFilter":
        from .index.emitter import XPathIndexingFilter

        return XPathIndexingFilter
    if name == "DateListingsFilter":
        from .index.date_normalizer import DateListingsFilter

        return DateListingsFilter
    if name == "load_rule_set":
        from .rules.loader import load_rule_set

        return load_rule_set
    raise AttributeError(f"module 'xpathfilter' has no attribute '{name}'")
