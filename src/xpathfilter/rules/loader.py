"""规则文件加载

支持两种格式：
1. XML：根元素下的每个 ``xpathIndexerProperties`` 是一个规则组，
   其 ``xpathIndexerPropertiesField`` 子元素是字段规则（属性名沿用爬虫插件的写法）。
2. YAML：``groups`` 列表，键名与模型字段名一致（snake_case）。

任何校验失败都抛出 RuleValidationError，属于加载期致命错误。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from lxml import etree
from pydantic import ValidationError

from ..common.exceptions import RuleValidationError
from ..common.logger import get_logger
from .models import RuleGroup, RuleSet

logger = get_logger(__name__)

GROUP_TAG = "xpathIndexerProperties"
FIELD_TAG = "xpathIndexerPropertiesField"


def _local_name(tag: Any) -> str | None:
    if not isinstance(tag, str):
        return None
    return etree.QName(tag).localname


def _local_attrib(element: etree._Element) -> dict[str, str]:
    return {etree.QName(key).localname: value for key, value in element.attrib.items()}


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return "; ".join(parts)


def build_rule_set(groups: list[dict[str, Any]], source: str | None = None) -> RuleSet:
    """由原始字典列表构建并校验规则集

    Args:
        groups: 规则组字典列表（可使用别名或字段名）
        source: 来源描述（用于错误消息）

    Returns:
        不可变的规则集

    Raises:
        RuleValidationError: 任一规则组无效
    """
    if not groups:
        raise RuleValidationError("规则集中没有任何规则组", source)

    built: list[RuleGroup] = []
    for index, raw in enumerate(groups):
        if not isinstance(raw, dict):
            raise RuleValidationError(f"规则组 #{index} 必须是对象", source)
        try:
            built.append(RuleGroup.model_validate(raw))
        except ValidationError as e:
            raise RuleValidationError(
                f"规则组 #{index} 无效: {_format_validation_error(e)}", source
            ) from e

    return RuleSet(groups=tuple(built))


def parse_rule_xml(content: bytes | str, source: str | None = None) -> RuleSet:
    """解析 XML 规则文件内容"""
    if isinstance(content, str):
        content = content.encode("utf-8")

    parser = etree.XMLParser(remove_comments=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as e:
        raise RuleValidationError(f"规则文件 XML 格式错误: {e}", source) from e

    groups: list[dict[str, Any]] = []
    for group_el in root:
        if _local_name(group_el.tag) != GROUP_TAG:
            continue
        group = _local_attrib(group_el)
        group["fields"] = [
            _local_attrib(field_el)
            for field_el in group_el
            if _local_name(field_el.tag) == FIELD_TAG
        ]
        groups.append(group)

    return build_rule_set(groups, source)


def parse_rule_yaml(content: str, source: str | None = None) -> RuleSet:
    """解析 YAML 规则文件内容"""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RuleValidationError(f"规则文件 YAML 格式错误: {e}", source) from e

    if not isinstance(data, dict) or not isinstance(data.get("groups"), list):
        raise RuleValidationError("YAML 规则文件必须包含 groups 列表", source)

    return build_rule_set(data["groups"], source)


def load_rule_set(path: str | Path) -> RuleSet:
    """按文件后缀加载规则文件

    Raises:
        RuleValidationError: 文件不存在或内容无效
    """
    path = Path(path)
    if not path.is_file():
        raise RuleValidationError("规则文件不存在", str(path))

    if path.suffix.lower() in {".yml", ".yaml"}:
        rule_set = parse_rule_yaml(path.read_text(encoding="utf-8"), str(path))
    else:
        rule_set = parse_rule_xml(path.read_bytes(), str(path))

    logger.info(
        f"[RuleLoader] 已加载规则文件 {path.name}: "
        f"{len(rule_set)} 个规则组, 字段 {rule_set.field_names()}"
    )
    return rule_set


def load_configured_rules(rules_file: str | None) -> RuleSet:
    """加载配置中指定的规则文件；未配置时返回空规则集"""
    if not rules_file:
        logger.warning("[RuleLoader] 未配置规则文件，规则集为空")
        return RuleSet()
    return load_rule_set(rules_file)
