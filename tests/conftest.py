"""pytest 全局配置和 fixtures

提供测试所需的基础设施：规则集构建、页面构建与临时规则文件。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xpathfilter.common.config import Config, DateListingsConfig, ParserConfig  # noqa: E402
from xpathfilter.common.types import WebPage  # noqa: E402
from xpathfilter.rules.loader import build_rule_set  # noqa: E402


# ============================================================================
# 规则集
# ============================================================================

@pytest.fixture
def make_rules():
    """由规则组字典构建规则集"""

    def _make(*groups: dict):
        return build_rule_set(list(groups))

    return _make


@pytest.fixture
def single_field_rules(make_rules):
    """单字段规则集构建器：url 正则 + 一个字段"""

    def _make(xpath: str, name: str = "t", url: str = ".*", **field_options):
        return make_rules(
            {
                "url_filter_regex": url,
                "fields": [{"name": name, "xpath": xpath, **field_options}],
            }
        )

    return _make


# ============================================================================
# 页面
# ============================================================================

@pytest.fixture
def make_page():
    """构建宿主页面对象"""

    def _make(
        body: str | bytes,
        content_type: str = "text/html",
        url: str = "http://example.com/page",
        **kwargs,
    ) -> WebPage:
        content = body.encode("utf-8") if isinstance(body, str) else body
        return WebPage(url=url, content=content, content_type=content_type, **kwargs)

    return _make


# ============================================================================
# 配置
# ============================================================================

@pytest.fixture
def config():
    """不依赖环境变量的默认配置"""
    return Config(
        parser=ParserConfig(default_encoding="UTF-8", rules_file=None, multivalued=False),
        date=DateListingsConfig(
            rules_file=None,
            default_format="dd-MM-yyyy",
            output_format="yyyy-MM-dd",
            default_locale="US",
        ),
    )


@pytest.fixture
def multivalued_config(config):
    return config.model_copy(update={"parser": config.parser.model_copy(update={"multivalued": True})})


# ============================================================================
# 临时规则文件
# ============================================================================

SAMPLE_RULES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<config xmlns="http://www.example.com/xpathfilter/schema">
    <!-- 文章页 -->
    <xpathIndexerProperties pageUrlFilterRegex="^http://example\\.com/article/"
                            pageContentFilterXPath="//meta[@name='type']/@content"
                            pageContentFilterRegex="^article$">
        <xpathIndexerPropertiesField name="title" xPath="//h1" type="STRING"/>
        <xpathIndexerPropertiesField name="tags" xPath="//ul[@class='tags']/li"
                                     concat="true" concatDelimiter="½é½"/>
        <xpathIndexerPropertiesField name="body" xPath="//div[@id='body']" trimXPathData="false"/>
    </xpathIndexerProperties>
    <xpathIndexerProperties pageUrlFilterRegex=".*">
        <xpathIndexerPropertiesField name="pd" xPath="//span[@class='date']" type="date"/>
    </xpathIndexerProperties>
</config>
"""


@pytest.fixture
def rules_xml_file(tmp_path):
    path = tmp_path / "xpath-rules.xml"
    path.write_text(SAMPLE_RULES_XML, encoding="utf-8")
    return path
