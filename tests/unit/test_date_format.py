"""日期模式转换单元测试"""

import pytest

from xpathfilter.common.exceptions import DateRuleError
from xpathfilter.index.date_format import to_strftime


class TestToStrftime:
    """SimpleDateFormat -> strftime 转换测试"""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("dd-MM-yyyy", "%d-%m-%Y"),
            ("yyyy-MM-dd", "%Y-%m-%d"),
            ("dd MM yyyy", "%d %m %Y"),
            ("d/M/yy", "%d/%m/%y"),
            ("dd MMM yyyy", "%d %b %Y"),
            ("EEEE, dd MMMM yyyy", "%A, %d %B %Y"),
            ("EEE, d MMM yyyy HH:mm:ss Z", "%a, %d %b %Y %H:%M:%S %z"),
            ("hh:mm a", "%I:%M %p"),
            ("yyyy-MM-dd'T'HH:mm:ss.SSSXXX", "%Y-%m-%dT%H:%M:%S.%f%z"),
            ("yyyy.DDD", "%Y.%j"),
        ],
    )
    def test_patterns(self, pattern, expected):
        assert to_strftime(pattern) == expected

    def test_escaped_quote(self):
        """测试 '' 表示单引号字面量"""
        assert to_strftime("HH'h'mm''") == "%Hh%M'"

    def test_literal_percent_is_escaped(self):
        assert to_strftime("dd'%'MM") == "%d%%%m"
        assert to_strftime("dd%MM") == "%d%%%m"

    def test_unsupported_letter_raises(self):
        """测试不支持的模式字母"""
        with pytest.raises(DateRuleError) as exc_info:
            to_strftime("yyyy-ww")
        assert exc_info.value.kind == "date_rule_error"

    def test_unclosed_quote_raises(self):
        with pytest.raises(DateRuleError):
            to_strftime("yyyy 'at")
