"""索引阶段过滤器：读取元数据载体，把字段值展开写入索引文档"""

from __future__ import annotations

from ..common.config import Config
from ..common.constants import MULTI_VALUE_SEPARATOR, MULTI_VALUE_SEPARATOR_BYTES
from ..common.logger import get_logger
from ..common.types import IndexDocument, WebPage
from ..parse.page_gate import url_matches
from ..rules.loader import load_configured_rules
from ..rules.models import RuleSet

logger = get_logger(__name__)


def split_multi_value(raw: bytes) -> list[str]:
    """按多值分隔符拆分载体值（保留空片段）"""
    return raw.decode("utf-8", errors="replace").split(MULTI_VALUE_SEPARATOR)


def join_multi_value(values: list[str]) -> bytes:
    """把多个值编码为单个载体值"""
    return MULTI_VALUE_SEPARATOR_BYTES.join(value.encode("utf-8") for value in values)


class XPathIndexingFilter:
    """索引阶段过滤器

    不重新校验或过滤值，值的形态完全由解析阶段决定。
    """

    def __init__(self, config: Config | None = None, rule_set: RuleSet | None = None):
        self.config: Config = config or Config.load()
        if rule_set is None:
            rule_set = load_configured_rules(self.config.parser.rules_file)
        self.rule_set: RuleSet = rule_set

    def set_configuration(self, config: Config) -> None:
        self.config = config
        self.rule_set = load_configured_rules(config.parser.rules_file)

    def filter(self, doc: IndexDocument | None, url: str, page: WebPage) -> IndexDocument | None:
        """把载体中的字段值写入索引文档

        Args:
            doc: 索引文档（None 时原样返回）
            url: 页面 URL
            page: 宿主页面对象

        Returns:
            修改后的索引文档
        """
        if doc is None:
            return None

        for group in self.rule_set:
            if not url_matches(group, url):
                continue
            for rule in group.fields:
                raw = page.metadata.get(rule.name.encode("utf-8"))
                if raw is None:
                    continue
                values = split_multi_value(raw)
                for value in values:
                    doc.add(rule.name, value)
                logger.debug(f"[XPathIndexingFilter] {rule.name}: {len(values)} 个值")

        return doc
