"""索引阶段多值展开单元测试"""

from xpathfilter.common.types import IndexDocument, ParseResult
from xpathfilter.index.emitter import XPathIndexingFilter, join_multi_value, split_multi_value
from xpathfilter.parse.extractor import XPathParseFilter
from xpathfilter.parse.page_gate import join_values


class TestSplitMultiValue:
    """多值拆分测试"""

    def test_split_on_separator(self):
        assert split_multi_value("red½é½green½é½blue".encode("utf-8")) == ["red", "green", "blue"]

    def test_single_value(self):
        assert split_multi_value(b"solo") == ["solo"]

    def test_empty_pieces_are_kept(self):
        """测试空片段原样保留"""
        assert split_multi_value("a½é½½é½b".encode("utf-8")) == ["a", "", "b"]
        assert split_multi_value(b"") == [""]

    def test_join_is_inverse(self):
        values = ["x", "y z", "北京"]
        assert split_multi_value(join_multi_value(values)) == values


class TestXPathIndexingFilter:
    """索引过滤器测试"""

    def test_multi_value_emit(self, config, single_field_rules, make_page):
        """测试多值载体拆分为多次添加，顺序不变"""
        page = make_page("", metadata={b"tags": "red½é½green½é½blue".encode("utf-8")})
        doc = XPathIndexingFilter(config, single_field_rules("//li", name="tags")).filter(
            IndexDocument(), page.url, page
        )
        assert doc.get_values("tags") == ["red", "green", "blue"]

    def test_absent_key_is_skipped(self, config, single_field_rules, make_page):
        page = make_page("")
        doc = XPathIndexingFilter(config, single_field_rules("//li", name="tags")).filter(
            IndexDocument(), page.url, page
        )
        assert "tags" not in doc

    def test_empty_value_is_emitted(self, config, single_field_rules, make_page):
        """测试空串值同样写入文档"""
        page = make_page("", metadata={b"t": b""})
        doc = XPathIndexingFilter(config, single_field_rules("//li")).filter(
            IndexDocument(), page.url, page
        )
        assert doc.get_values("t") == [""]

    def test_url_mismatch_is_skipped(self, config, single_field_rules, make_page):
        """测试 URL 不匹配的规则组不输出"""
        page = make_page("", url="http://other.org/", metadata={b"t": b"v"})
        rules = single_field_rules("//h1", url=r"^http://example\.com/")
        doc = XPathIndexingFilter(config, rules).filter(IndexDocument(), page.url, page)
        assert doc.field_names() == []

    def test_none_doc_passes_through(self, config, single_field_rules, make_page):
        page = make_page("", metadata={b"t": b"v"})
        assert XPathIndexingFilter(config, single_field_rules("//h1")).filter(None, page.url, page) is None

    def test_existing_fields_are_kept(self, config, single_field_rules, make_page):
        page = make_page("", metadata={b"t": b"v"})
        doc = IndexDocument()
        doc.add("id", "1")
        XPathIndexingFilter(config, single_field_rules("//h1")).filter(doc, page.url, page)
        assert doc.fields == {"id": ["1"], "t": ["v"]}

    def test_configured_rules_file(self, config, rules_xml_file, make_page):
        """测试从配置路径加载规则"""
        configured = config.model_copy(
            update={"parser": config.parser.model_copy(update={"rules_file": str(rules_xml_file)})}
        )
        page = make_page("", url="http://example.com/article/9", metadata={b"title": b"T"})
        doc = XPathIndexingFilter(configured).filter(IndexDocument(), page.url, page)
        assert doc.get("title") == "T"


class TestConcatRoundTrip:
    """拼接后展开的往返测试"""

    def test_rejoined_values_match_direct_concat(self, config, single_field_rules, make_page):
        """测试解析阶段拼接、索引阶段展开后再以分隔符连接等于直接拼接"""
        values = ["alpha", "beta", "gamma"]
        for delim in [",", " | ", "", "½é½"[:1]]:
            rules = single_field_rules("//li", concat=True, concat_delim=delim)
            page = make_page("<ul>" + "".join(f"<li>{v}</li>" for v in values) + "</ul>")
            XPathParseFilter(config, rules).filter(page.url, page, ParseResult(base_url=page.url))
            doc = XPathIndexingFilter(config, rules).filter(IndexDocument(), page.url, page)

            assert delim.join(doc.get_values("t")) == join_values(values, delim)

    def test_sentinel_delimiter_splits_into_values(self, config, single_field_rules, make_page):
        """测试以多值分隔符拼接时展开为原始值序列"""
        rules = single_field_rules("//li", concat=True, concat_delim="½é½")
        page = make_page("<ul><li>a</li><li>b</li></ul>")
        XPathParseFilter(config, rules).filter(page.url, page, ParseResult(base_url=page.url))
        doc = XPathIndexingFilter(config, rules).filter(IndexDocument(), page.url, page)

        assert doc.get_values("t") == ["a", "b"]
