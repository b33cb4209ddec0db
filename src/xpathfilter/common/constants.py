"""常量定义

解析阶段与索引阶段之间共享的线格式常量，以及宿主配置键名。
"""

from __future__ import annotations

# ============================================================================
# 元数据载体（parse -> index 线格式）
# ============================================================================

# 多值分隔符，UTF-8 字节序列为 C2 BD C3 A9 C2 BD，必须逐字节保持不变
MULTI_VALUE_SEPARATOR = "½é½"
MULTI_VALUE_SEPARATOR_BYTES = MULTI_VALUE_SEPARATOR.encode("utf-8")

# 原始发布日期字符串所在的载体键
PUBLISH_DATE_KEY = b"pd"

# 爬虫编码探测结果所在的载体键
ORIGINAL_CHAR_ENCODING_KEY = b"OriginalCharEncoding"

# ============================================================================
# 内容类型
# ============================================================================

HTML_MIME_TYPES = frozenset({"text/html", "application/xhtml+xml"})
XML_MIME_MARKERS = ("/xml", "+xml")

# ============================================================================
# 宿主配置键
# ============================================================================

CONF_DEFAULT_ENCODING = "parser.character.encoding.default"
CONF_RULES_FILE = "parser.xmlhtml.file"
CONF_MULTIVALUED = "parser.xmlhtml.multivalued"
CONF_DATE_RULES_FILE = "date.listingsfilter.file"
CONF_DATE_DEFAULT_FORMAT = "date.listingsfilter.default.format"
CONF_DATE_OUTPUT_FORMAT = "date.listingsfilter.output.format"
CONF_DATE_DEFAULT_LOCALE = "date.listingsfilter.default.locale"

DEFAULT_ENCODING = "UTF-8"
DEFAULT_DATE_FORMAT = "dd-MM-yyyy"
DEFAULT_DATE_OUTPUT_FORMAT = "yyyy-MM-dd"
DEFAULT_DATE_LOCALE = "US"

# ============================================================================
# 索引字段
# ============================================================================

LISTING_DATE_FIELD = "listingDate"
REVERSE_DATE_FIELD = "reverseDate"

# 有符号 64 位整数最大值，reverseDate = LONG_MAX - epoch 毫秒
LONG_MAX = 2**63 - 1
