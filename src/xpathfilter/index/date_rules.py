"""按主机配置的日期规则

规则文件每行形如 ``host|key=value``，``#`` 开头为注释，空行忽略。
识别的键：``format``（SimpleDateFormat 模式）、``locale``（BCP-47 语言标签）。
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..common.exceptions import DateRuleError
from ..common.logger import get_logger

logger = get_logger(__name__)


class DateRule(BaseModel):
    """单个主机的日期规则"""

    model_config = ConfigDict(frozen=True)

    format: str | None = Field(default=None, description="日期解析模式")
    locale: str | None = Field(default=None, description="BCP-47 语言标签")


RULE_KEYS = frozenset({"format", "locale"})


def parse_date_rules(text: str) -> dict[str, DateRule]:
    """解析日期规则文本

    同一主机的同一键出现多次时，后出现的生效；未识别的键记录警告后忽略。

    Returns:
        主机名 -> 日期规则
    """
    raw: dict[str, dict[str, str]] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if "=" not in line or "|" not in line:
            continue

        left, value = line.split("=", 1)
        if "|" not in left:
            continue
        host, key = left.split("|", 1)
        host, key = host.strip(), key.strip()
        if not host or not key:
            continue
        if key not in RULE_KEYS:
            logger.warning(f"[DateRules] 第 {number} 行: 未识别的键 {key!r}（{host}），已忽略")
            continue
        raw.setdefault(host, {})[key] = value

    return {
        host: DateRule(format=values.get("format"), locale=values.get("locale"))
        for host, values in raw.items()
    }


def load_date_rules(path: str | Path) -> dict[str, DateRule]:
    """加载日期规则文件

    Raises:
        DateRuleError: 文件不存在或无法读取
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DateRuleError(f"无法读取日期规则文件 {path}: {e}") from e

    rules = parse_date_rules(text)
    logger.info(f"[DateRules] 已加载 {path.name}: {len(rules)} 个主机规则")
    return rules
