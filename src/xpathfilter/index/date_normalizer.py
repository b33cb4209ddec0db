"""发布日期规范化过滤器（索引阶段）

从载体键 ``pd`` 读取原始发布日期，按页面主机对应的格式与语言解析，输出：

- ``listingDate``：按输出格式（默认 ``yyyy-MM-dd``）重新格式化的日期
- ``reverseDate``：``(2^63 - 1) - epoch 毫秒``，用于以升序索引实现按日期倒序

日期无法解析时丢弃整个文档（返回 None）。
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

from ..common.config import Config
from ..common.constants import (
    LISTING_DATE_FIELD,
    LONG_MAX,
    PUBLISH_DATE_KEY,
    REVERSE_DATE_FIELD,
)
from ..common.exceptions import BadUrlError, DateParseError
from ..common.logger import get_logger
from ..common.types import IndexDocument, WebPage
from .date_format import to_strftime
from .date_locale import localize
from .date_rules import DateRule, load_date_rules

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_UNCONVERTED_PREFIX = "unconverted data remains: "


def host_of(url: str | None) -> str:
    """解析 URL 中的主机名

    Raises:
        BadUrlError: URL 无法解析或不含主机名
    """
    if not url:
        raise BadUrlError(url, "URL 为空")
    try:
        host = urlsplit(url).hostname
    except ValueError as e:
        raise BadUrlError(url) from e
    if not host:
        raise BadUrlError(url, "URL 中没有主机名")
    return host


def parse_date(raw: str | None, pattern: str, locale_tag: str | None = None) -> datetime:
    """按 SimpleDateFormat 模式与区域解析日期

    与 SimpleDateFormat 一致，只要求从开头匹配，末尾多余的文本被忽略。
    不含时区的日期按 UTC 处理。月份、星期与上下午名称按 ``locale_tag`` 对应的区域匹配，
    未指定或无法识别时按英文匹配。

    Raises:
        DateParseError: 日期与模式不匹配
    """
    if raw is None:
        raise DateParseError(raw, pattern)

    text, fmt = localize(raw.strip(), to_strftime(pattern), locale_tag)
    try:
        parsed = datetime.strptime(text, fmt)
    except ValueError as e:
        message = str(e)
        if not message.startswith(_UNCONVERTED_PREFIX):
            raise DateParseError(raw, pattern) from e
        remains = message[len(_UNCONVERTED_PREFIX):]
        try:
            parsed = datetime.strptime(text[: len(text) - len(remains)], fmt)
        except ValueError as retry_error:
            raise DateParseError(raw, pattern) from retry_error

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def epoch_millis(date: datetime) -> int:
    return (date - EPOCH) // timedelta(milliseconds=1)


def reverse_date(date: datetime) -> int:
    """(2^63 - 1) - epoch 毫秒，日期越晚值越小"""
    return LONG_MAX - epoch_millis(date)


def format_date(date: datetime, pattern: str) -> str:
    return date.strftime(to_strftime(pattern))


class DateListingsFilter:
    """按主机规则规范化发布日期的索引过滤器"""

    def __init__(
        self,
        config: Config | None = None,
        rules: dict[str, DateRule] | None = None,
    ):
        """
        初始化过滤器

        Args:
            config: 全局配置，默认从环境变量加载
            rules: 主机 -> 日期规则；未提供时从 ``config.date.rules_file`` 加载

        Raises:
            DateRuleError: 规则文件无法读取，或任一格式模式不受支持
        """
        self.config: Config = config or Config.load()
        if rules is None:
            rules = self._load_rules(self.config)
        self.rules: dict[str, DateRule] = {host.lower(): rule for host, rule in rules.items()}
        self._check_patterns()

    @staticmethod
    def _load_rules(config: Config) -> dict[str, DateRule]:
        if not config.date.rules_file:
            logger.warning("[DateListingsFilter] 未配置日期规则文件，全部主机使用默认规则")
            return {}
        return load_date_rules(config.date.rules_file)

    def _check_patterns(self) -> None:
        # 配置期就暴露不支持的模式，而不是在每个文档上失败
        to_strftime(self.config.date.default_format)
        to_strftime(self.config.date.output_format)
        for rule in self.rules.values():
            if rule.format:
                to_strftime(rule.format)

    def set_configuration(self, config: Config) -> None:
        self.config = config
        self.rules = {host.lower(): rule for host, rule in self._load_rules(config).items()}
        self._check_patterns()

    def rule_for(self, host: str) -> tuple[str, str]:
        """返回主机对应的 (格式, 语言标签)；无规则的主机使用默认值"""
        rule = self.rules.get(host.lower()) or DateRule()
        pattern = rule.format or self.config.date.default_format
        locale_tag = rule.locale or self.config.date.default_locale
        return pattern, locale_tag

    def filter(self, doc: IndexDocument | None, url: str, page: WebPage) -> IndexDocument | None:
        """规范化发布日期

        Args:
            doc: 索引文档（None 时直接返回 None）
            url: 页面 URL
            page: 宿主页面对象

        Returns:
            写入日期字段后的文档；日期无法解析时返回 None（通知宿主丢弃）

        Raises:
            BadUrlError: URL 无法解析出主机名
        """
        if doc is None:
            return None

        host = host_of(page.repr_url or url)
        pattern, locale_tag = self.rule_for(host)

        raw = page.metadata.get(PUBLISH_DATE_KEY)
        raw_date = raw.decode("utf-8", errors="replace") if raw is not None else None

        try:
            date = parse_date(raw_date, pattern, locale_tag)
        except DateParseError as e:
            logger.warning(f"[DateListingsFilter] 无法格式化日期: {url} ({e})")
            return None

        doc.add(LISTING_DATE_FIELD, format_date(date, self.config.date.output_format))
        doc.add(REVERSE_DATE_FIELD, str(reverse_date(date)))
        return doc
