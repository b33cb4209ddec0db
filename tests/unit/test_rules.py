"""规则模型与规则加载单元测试"""

import pytest

from xpathfilter.common.exceptions import RuleValidationError
from xpathfilter.rules import (
    FieldType,
    RuleSet,
    build_rule_set,
    load_configured_rules,
    load_rule_set,
    parse_rule_xml,
    parse_rule_yaml,
)


class TestLoadXml:
    """XML 规则文件加载测试"""

    def test_load_sample_file(self, rules_xml_file):
        """测试加载带命名空间和注释的规则文件"""
        rule_set = load_rule_set(rules_xml_file)

        assert len(rule_set) == 2
        article, fallback = rule_set.groups
        assert article.url_filter_regex == r"^http://example\.com/article/"
        assert article.content_filter_xpath == "//meta[@name='type']/@content"
        assert article.content_filter_regex == "^article$"
        assert [rule.name for rule in article.fields] == ["title", "tags", "body"]
        assert fallback.fields[0].type == FieldType.DATE

    def test_field_attributes_use_plugin_names(self, rules_xml_file):
        """测试字段属性沿用插件写法（xPath / concatDelimiter / trimXPathData）"""
        title, tags, body = load_rule_set(rules_xml_file).groups[0].fields

        assert title.xpath == "//h1"
        assert title.trim is True
        assert title.concat is False
        assert tags.concat is True
        assert tags.concat_delim == "½é½"
        assert body.trim is False

    def test_field_names_in_order(self, rules_xml_file):
        """测试字段名按配置顺序去重"""
        assert load_rule_set(rules_xml_file).field_names() == ["title", "tags", "body", "pd"]

    def test_unknown_elements_are_ignored(self):
        """测试非规则元素被忽略"""
        content = (
            "<config><note>ignored</note>"
            "<xpathIndexerProperties pageUrlFilterRegex='.*'>"
            "<xpathIndexerPropertiesField name='t' xPath='//h1'/>"
            "<other/>"
            "</xpathIndexerProperties></config>"
        )
        rule_set = parse_rule_xml(content)
        assert len(rule_set) == 1
        assert len(rule_set.groups[0].fields) == 1

    def test_malformed_xml_raises(self):
        """测试 XML 格式错误"""
        with pytest.raises(RuleValidationError) as exc_info:
            parse_rule_xml("<config><xpathIndexerProperties>", source="broken.xml")
        assert exc_info.value.kind == "rule_validation"
        assert "broken.xml" in str(exc_info.value)

    def test_missing_file_raises(self, tmp_path):
        """测试规则文件不存在"""
        with pytest.raises(RuleValidationError):
            load_rule_set(tmp_path / "missing.xml")


class TestLoadYaml:
    """YAML 规则文件加载测试"""

    def test_load_yaml_file(self, tmp_path):
        """测试 YAML 规则文件"""
        path = tmp_path / "rules.yaml"
        path.write_text(
            "groups:\n"
            "  - url_filter_regex: '^https://news\\.example\\.com/'\n"
            "    content_filter_xpath: //meta[@name='section']/@content\n"
            "    content_filter_regex: sport\n"
            "    fields:\n"
            "      - name: headline\n"
            "        xpath: //h1\n"
            "      - name: tags\n"
            "        xpath: //a[@rel='tag']\n"
            "        concat: true\n"
            "        concat_delim: ', '\n",
            encoding="utf-8",
        )
        rule_set = load_rule_set(path)

        group = rule_set.groups[0]
        assert group.content_filter_regex == "sport"
        assert group.fields[1].concat_delim == ", "

    def test_groups_list_is_required(self):
        """测试缺少 groups 列表"""
        with pytest.raises(RuleValidationError):
            parse_rule_yaml("fields: []")

    def test_invalid_yaml_raises(self):
        """测试 YAML 语法错误"""
        with pytest.raises(RuleValidationError):
            parse_rule_yaml("groups: [unclosed")


class TestValidation:
    """规则校验测试"""

    def test_empty_rule_set_is_rejected(self):
        """测试规则组列表为空"""
        with pytest.raises(RuleValidationError):
            build_rule_set([])

    def test_group_without_fields_is_rejected(self):
        """测试规则组没有字段规则"""
        with pytest.raises(RuleValidationError):
            build_rule_set([{"url_filter_regex": ".*", "fields": []}])

    def test_missing_url_regex_is_rejected(self):
        """测试缺少 URL 正则"""
        with pytest.raises(RuleValidationError):
            build_rule_set([{"fields": [{"name": "t", "xpath": "//h1"}]}])

    def test_invalid_url_regex_is_rejected(self):
        """测试 URL 正则无效"""
        with pytest.raises(RuleValidationError) as exc_info:
            build_rule_set([{"url_filter_regex": "(", "fields": [{"name": "t", "xpath": "//h1"}]}])
        assert "#0" in str(exc_info.value)

    def test_invalid_content_regex_is_rejected(self):
        """测试内容正则无效"""
        with pytest.raises(RuleValidationError):
            build_rule_set(
                [
                    {
                        "url_filter_regex": ".*",
                        "content_filter_xpath": "//title",
                        "content_filter_regex": "[a-",
                        "fields": [{"name": "t", "xpath": "//h1"}],
                    }
                ]
            )

    def test_invalid_xpath_is_rejected(self):
        """测试字段 XPath 语法错误在加载期暴露"""
        with pytest.raises(RuleValidationError):
            build_rule_set([{"url_filter_regex": ".*", "fields": [{"name": "t", "xpath": "//h1["}]}])

    @pytest.mark.parametrize("xpath", ["count(", "foo(//h1)", "$v", "//x:h1"])
    def test_xpath_failing_at_evaluation_is_rejected(self, xpath):
        """测试未知函数、未绑定变量与未声明前缀在加载期即被拒绝"""
        with pytest.raises(RuleValidationError):
            build_rule_set([{"url_filter_regex": ".*", "fields": [{"name": "t", "xpath": xpath}]}])

    @pytest.mark.parametrize("xpath", ["count(", "foo(//h1)", "$v", "//x:h1"])
    def test_content_xpath_failing_at_evaluation_is_rejected(self, xpath):
        """测试内容门控 XPath 同样在加载期校验"""
        with pytest.raises(RuleValidationError):
            build_rule_set(
                [
                    {
                        "url_filter_regex": ".*",
                        "content_filter_xpath": xpath,
                        "fields": [{"name": "t", "xpath": "//h1"}],
                    }
                ]
            )

    def test_duplicate_field_names_are_rejected(self):
        """测试同一规则组内字段名重复"""
        with pytest.raises(RuleValidationError):
            build_rule_set(
                [
                    {
                        "url_filter_regex": ".*",
                        "fields": [
                            {"name": "t", "xpath": "//h1"},
                            {"name": "t", "xpath": "//h2"},
                        ],
                    }
                ]
            )

    def test_same_name_across_groups_is_allowed(self):
        """测试不同规则组可以使用相同字段名"""
        rule_set = build_rule_set(
            [
                {"url_filter_regex": "a", "fields": [{"name": "t", "xpath": "//h1"}]},
                {"url_filter_regex": "b", "fields": [{"name": "t", "xpath": "//h2"}]},
            ]
        )
        assert rule_set.field_names() == ["t"]

    def test_type_is_case_insensitive(self):
        """测试字段类型大小写不敏感"""
        rule_set = build_rule_set(
            [{"url_filter_regex": ".*", "fields": [{"name": "n", "xpath": "//b", "type": "long"}]}]
        )
        assert rule_set.groups[0].fields[0].type == FieldType.LONG

    def test_unknown_type_is_rejected(self):
        """测试未知字段类型"""
        with pytest.raises(RuleValidationError):
            build_rule_set(
                [{"url_filter_regex": ".*", "fields": [{"name": "n", "xpath": "//b", "type": "blob"}]}]
            )

    def test_blank_content_xpath_disables_gate(self):
        """测试空内容 XPath 等同于未配置内容门控"""
        rule_set = build_rule_set(
            [
                {
                    "url_filter_regex": ".*",
                    "content_filter_xpath": "  ",
                    "fields": [{"name": "t", "xpath": "//h1"}],
                }
            ]
        )
        assert rule_set.groups[0].content_filter_xpath is None

    def test_patterns_are_compiled_once(self):
        """测试正则在加载期编译并缓存在规则组上"""
        group = build_rule_set(
            [
                {
                    "url_filter_regex": "^http://",
                    "content_filter_xpath": "//title",
                    "content_filter_regex": "News",
                    "fields": [{"name": "t", "xpath": "//h1"}],
                }
            ]
        ).groups[0]
        assert group.url_pattern is group.url_pattern
        assert group.url_pattern.pattern == "^http://"
        assert group.content_pattern.pattern == "News"


class TestConfiguredRules:
    """按配置加载规则测试"""

    def test_unset_path_gives_empty_rule_set(self):
        """测试未配置规则文件时得到空规则集"""
        rule_set = load_configured_rules(None)
        assert isinstance(rule_set, RuleSet)
        assert len(rule_set) == 0

    def test_configured_path_is_loaded(self, rules_xml_file):
        """测试按配置路径加载"""
        assert len(load_configured_rules(str(rules_xml_file))) == 2
