"""规则模型与规则文件加载"""

from .models import FieldRule, FieldType, RuleGroup, RuleSet, compile_pattern
from .loader import build_rule_set, load_configured_rules, load_rule_set, parse_rule_xml, parse_rule_yaml

__all__ = [
    "FieldRule",
    "FieldType",
    "RuleGroup",
    "RuleSet",
    "compile_pattern",
    "build_rule_set",
    "load_configured_rules",
    "load_rule_set",
    "parse_rule_xml",
    "parse_rule_yaml",
]
