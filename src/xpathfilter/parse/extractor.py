"""解析阶段过滤器：按规则组提取字段并写入页面元数据载体

处理流程：
1. 根据内容类型构建 DOM（HTML 清洗 / 严格 XML），删除 script 元素。
2. 按配置顺序遍历规则组，经页面门控判断是否适用。
3. 对每个字段规则求值 XPath，逐节点提取文本、过滤，按 concat 策略写入载体。

载体键唯一：拼接模式下每个字段写入一个拼接值；非拼接模式下后写覆盖先写，
开启 ``multivalued`` 后改为以多值分隔符累积。
写入先暂存在本地，整页成功后才提交到载体，失败时载体保持不变。
"""

from __future__ import annotations

from typing import Any

from ..common.config import Config
from ..common.constants import MULTI_VALUE_SEPARATOR_BYTES
from ..common.exceptions import ExtractionError
from ..common.logger import get_logger
from ..common.types import ParseResult, WebPage
from ..rules.loader import load_configured_rules
from ..rules.models import FieldRule, RuleSet
from .dom_builder import build_dom
from .page_gate import collect_values, join_values, page_to_process

logger = get_logger(__name__)


def _extract_field(
    rule: FieldRule,
    dom: Any,
    staged: dict[bytes, bytes],
    appended: set[bytes],
    multivalued: bool,
) -> int:
    """提取单个字段规则，返回写入次数"""
    key = rule.name.encode("utf-8")
    values = collect_values(rule.xpath, dom, rule.trim)

    if rule.concat:
        # 即使没有保留值也写入空串
        staged[key] = join_values(values, rule.concat_delim).encode("utf-8")
        return 1

    for value in values:
        encoded = value.encode("utf-8")
        if multivalued and key in appended:
            staged[key] = staged[key] + MULTI_VALUE_SEPARATOR_BYTES + encoded
        else:
            staged[key] = encoded
            appended.add(key)
    return len(values)


def extract_fields(
    rule_set: RuleSet,
    dom: Any,
    url: str,
    multivalued: bool = False,
) -> dict[bytes, bytes]:
    """对一个页面应用全部规则组，返回待写入载体的键值

    Args:
        rule_set: 规则集
        dom: 页面文档树
        url: 页面基础 URL（用于 URL 门控）
        multivalued: 非拼接模式下是否以分隔符累积多个值

    Returns:
        字段名字节 -> 值字节

    Raises:
        XPathEvalError: 任一 XPath 求值失败（整页中止）
    """
    staged: dict[bytes, bytes] = {}
    appended: set[bytes] = set()

    for index, group in enumerate(rule_set):
        if not page_to_process(group, dom, url):
            continue
        for rule in group.fields:
            count = _extract_field(rule, dom, staged, appended, multivalued)
            logger.debug(f"[XPathParseFilter] 规则组 #{index} 字段 {rule.name}: 写入 {count} 次")

    return staged


class XPathParseFilter:
    """解析阶段过滤器

    实例只持有不可变的配置与规则集，可在多个线程中并发调用 ``filter``。
    """

    def __init__(self, config: Config | None = None, rule_set: RuleSet | None = None):
        """
        初始化过滤器

        Args:
            config: 全局配置，默认从环境变量加载
            rule_set: 规则集；未提供时从 ``config.parser.rules_file`` 加载
        """
        self.config: Config = config or Config.load()
        if rule_set is None:
            rule_set = load_configured_rules(self.config.parser.rules_file)
        self.rule_set: RuleSet = rule_set

    def set_configuration(self, config: Config) -> None:
        """更新配置并重新加载规则集"""
        self.config = config
        self.rule_set = load_configured_rules(config.parser.rules_file)

    def filter(self, url: str, page: WebPage, parse: ParseResult) -> ParseResult:
        """对页面执行字段提取

        Args:
            url: 页面 URL
            page: 宿主页面对象（其 metadata 会被修改）
            parse: 宿主传入的解析结果

        Returns:
            成功时原样返回 ``parse``；失败时返回携带基础 URL 的 FAILED 空结果
        """
        base_url = page.base_url or url

        try:
            dom = build_dom(
                page.content,
                page.content_type,
                page.get_original_encoding(),
                self.config.parser.default_encoding,
            )
            if dom is None:
                return parse

            staged = extract_fields(
                self.rule_set,
                dom,
                base_url,
                multivalued=self.config.parser.multivalued,
            )
        except ExtractionError as e:
            logger.error(f"[XPathParseFilter] {e.kind}: {e} ({base_url})")
            return ParseResult.failed(base_url, str(e))

        page.metadata.update(staged)
        return parse
