"""DOM 构建器

根据内容类型把原始字节构建为规范化的 lxml 文档树：

1. ``text/html`` / ``application/xhtml+xml``：按原始编码（或默认编码）解码后交给
   lxml 的容错 HTML 解析器清洗，注释被丢弃。
2. 内容类型包含 ``/xml`` 或 ``+xml``：严格 XML 解析（编码由 XML 声明决定），
   随后去掉命名空间，使 XPath 与命名空间无关。
3. 其他类型：不构建 DOM，调用方跳过提取。

构建完成后删除所有 ``script`` 元素（保留其尾随文本并与相邻文本合并）。
解析器对象均为每次调用新建，不在线程间共享。
"""

from __future__ import annotations

import codecs
import re

from lxml import etree
from lxml import html as lxml_html

from ..common.constants import DEFAULT_ENCODING, HTML_MIME_TYPES, XML_MIME_MARKERS
from ..common.exceptions import EncodingError, HtmlCleanError, XmlParseError
from ..common.logger import get_logger

logger = get_logger(__name__)

# lxml 不接受带编码声明的 Unicode 字符串
_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)

PRUNED_TAG = "script"


def is_html_content(content_type: str | None) -> bool:
    return (content_type or "") in HTML_MIME_TYPES


def is_xml_content(content_type: str | None) -> bool:
    content_type = content_type or ""
    return any(marker in content_type for marker in XML_MIME_MARKERS)


def resolve_encoding(encoding: str | None, default_encoding: str = DEFAULT_ENCODING) -> str:
    """解析实际使用的编码名

    Raises:
        EncodingError: 声明的编码无法识别
    """
    name = (encoding or default_encoding or DEFAULT_ENCODING).strip()
    try:
        return codecs.lookup(name).name
    except LookupError as e:
        raise EncodingError(name) from e


def decode_content(
    raw: bytes,
    encoding: str | None,
    default_encoding: str = DEFAULT_ENCODING,
) -> str:
    """按原始编码解码页面内容，编码未知时回退到默认编码"""
    try:
        codec = resolve_encoding(encoding, default_encoding)
    except EncodingError as e:
        logger.warning(f"[DomBuilder] {e}，回退到默认编码 {default_encoding}")
        try:
            codec = resolve_encoding(None, default_encoding)
        except EncodingError:
            logger.warning(f"[DomBuilder] 默认编码 {default_encoding} 同样未知，使用 {DEFAULT_ENCODING}")
            codec = resolve_encoding(None, DEFAULT_ENCODING)
    return raw.decode(codec, errors="replace")


def build_html_dom(text: str) -> etree._ElementTree:
    """使用容错 HTML 解析器清洗文本并构建文档树

    Raises:
        HtmlCleanError: 解析器无法处理输入
    """
    text = _XML_DECLARATION_RE.sub("", text, count=1)
    if not text.strip():
        return _empty_html()

    parser = lxml_html.HTMLParser(remove_comments=True, remove_pis=True)
    try:
        root = lxml_html.document_fromstring(text, parser=parser)
    except etree.ParserError as e:
        # 只有注释等内容被全部清除后的文档
        if "empty" in str(e).lower():
            return _empty_html()
        raise HtmlCleanError(f"HTML 清洗失败: {e}") from e
    except (etree.XMLSyntaxError, ValueError) as e:
        raise HtmlCleanError(f"HTML 清洗失败: {e}") from e
    return etree.ElementTree(root)


def _empty_html() -> etree._ElementTree:
    return etree.ElementTree(lxml_html.Element("html"))


def strip_namespaces(root: etree._Element) -> None:
    """把元素与属性名还原为本地名，去掉命名空间声明"""
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        element.tag = etree.QName(element).localname
        if any(key.startswith("{") for key in element.attrib):
            attrib = {etree.QName(key).localname: value for key, value in element.attrib.items()}
            element.attrib.clear()
            element.attrib.update(attrib)
    etree.cleanup_namespaces(root)


def build_xml_dom(raw: bytes) -> etree._ElementTree:
    """严格 XML 解析，编码由 XML 声明决定

    Raises:
        XmlParseError: 内容不是格式良好的 XML
    """
    parser = etree.XMLParser(
        remove_comments=True,
        resolve_entities=False,
        no_network=True,
        strip_cdata=True,
    )
    try:
        root = etree.fromstring(raw, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise XmlParseError(f"XML 解析失败: {e}") from e
    if root is None:
        raise XmlParseError("XML 解析失败: 文档为空")

    strip_namespaces(root)
    return etree.ElementTree(root)


def _drop_element(element: etree._Element) -> None:
    parent = element.getparent()
    if parent is None:
        return
    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)


def prune(tree: etree._ElementTree, tag: str = PRUNED_TAG) -> etree._ElementTree:
    """删除所有指定标签的元素（区分大小写），返回处理后的文档树"""
    root = tree.getroot()
    if root.tag == tag:
        return _empty_html()

    for element in list(root.iter(tag)):
        _drop_element(element)
    return tree


def build_dom(
    raw: bytes,
    content_type: str | None,
    original_encoding: str | None = None,
    default_encoding: str = DEFAULT_ENCODING,
) -> etree._ElementTree | None:
    """根据内容类型构建并规范化文档树

    Args:
        raw: 页面原始字节
        content_type: 内容类型
        original_encoding: 页面原始编码（可选）
        default_encoding: 默认编码

    Returns:
        文档树；内容类型不受支持时返回 None

    Raises:
        HtmlCleanError: HTML 清洗失败
        XmlParseError: XML 解析失败
    """
    if is_html_content(content_type):
        text = decode_content(raw, original_encoding, default_encoding)
        tree = build_html_dom(text)
    elif is_xml_content(content_type):
        tree = build_xml_dom(raw)
    else:
        logger.debug(f"[DomBuilder] 不支持的内容类型 {content_type!r}，跳过")
        return None

    return prune(tree)
