"""
Unit tests for request context extraction
"""

import unittest
from datetime import datetime, timezone

from ipgot.services.browser_info import extract_browser_info, get_header, parse_languages

CHROME_WINDOWS = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36")
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
SAFARI_IPHONE = ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
                 "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1")

class TestBrowserInfo(unittest.TestCase):
    """Test extract_browser_info"""

    def test_chrome_on_windows(self):
        info = extract_browser_info({"User-Agent": CHROME_WINDOWS})
        self.assertEqual(info.browser_name, "Google Chrome")
        self.assertEqual(info.os, "Windows")
        self.assertFalse(info.is_mobile)

    def test_first_match_wins(self):
        # Edge user agents also contain "Chrome"
        edge = CHROME_WINDOWS + " Edg/120.0 Edge/120"
        self.assertEqual(extract_browser_info({"User-Agent": edge}).browser_name, "Google Chrome")

        info = extract_browser_info({"User-Agent": FIREFOX_LINUX})
        self.assertEqual(info.browser_name, "Mozilla Firefox")
        self.assertEqual(info.os, "Linux")

    def test_mobile_safari(self):
        info = extract_browser_info({"User-Agent": SAFARI_IPHONE})
        self.assertEqual(info.browser_name, "Apple Safari")
        # "like Mac OS X" is neither "Macintosh" nor "iOS"
        self.assertEqual(info.os, "未知操作系统")
        self.assertTrue(info.is_mobile)

    def test_unknown_values(self):
        info = extract_browser_info({"User-Agent": "curl/8.4.0"})
        self.assertEqual(info.browser_name, "未知浏览器")
        self.assertEqual(info.os, "未知操作系统")

        empty = extract_browser_info({})
        self.assertEqual(empty.user_agent, "未知")
        self.assertEqual(empty.accept_language, "未知")
        self.assertEqual(empty.cf_ray, "未知")
        self.assertEqual(empty.cf_connecting_ip, "未知")
        self.assertEqual(empty.languages, ["未知"])

    def test_cloudflare_headers_case_insensitive(self):
        info = extract_browser_info({"cf-ray": "8abc123-SJC", "cf-connecting-ip": "203.0.113.9"})
        self.assertEqual(info.cf_ray, "8abc123-SJC")
        self.assertEqual(info.cf_connecting_ip, "203.0.113.9")

    def test_get_header_default(self):
        self.assertEqual(get_header({"X-Other": "1"}, "CF-Connecting-IP", ""), "")
        self.assertEqual(get_header({"Cf-Connecting-Ip": "1.2.3.4"}, "CF-Connecting-IP", ""), "1.2.3.4")

    def test_languages(self):
        info = extract_browser_info({"Accept-Language": "zh-CN,zh;q=0.9,en-US;q=0.8, en;q=0.7"})
        self.assertEqual(info.languages, ["zh-CN", "zh", "en-US", "en"])
        self.assertEqual(parse_languages("fr"), ["fr"])

    def test_timestamp_in_timezone(self):
        now = datetime(2026, 10, 19, 16, 30, 5, tzinfo=timezone.utc)
        info = extract_browser_info({}, now=now, tz_name="Asia/Shanghai")
        self.assertEqual(info.timestamp, "2026/10/20 00:30:05")

        utc = extract_browser_info({}, now=now, tz_name="UTC")
        self.assertEqual(utc.timestamp, "2026/10/19 16:30:05")

if __name__ == "__main__":
    unittest.main()
