"""
Unit tests for the web server request handling
"""

import re
import threading
import unittest
from http.server import HTTPServer
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import requests

from ipgot.core.models import IpRecord, LookupFailure
from ipgot.interfaces.web_server import IPGotApp, WebServer
from ipgot.services.analysis import AnalysisGenerator
from ipgot.services.ip_lookup import IPLookupService, adapt_ipinfo

def make_config():
    return SimpleNamespace(
        debug=False,
        display_timezone="Asia/Shanghai",
        baidu_map_ak="test-ak",
        server_bind_addr="127.0.0.1",
        server_bind_port=0,
    )

class TestIPGotApp(unittest.TestCase):
    """Test IPGotApp.handle_request"""

    def setUp(self):
        self.config = make_config()
        self.primary = MagicMock()
        self.primary.name = "ipinfo"
        self.fallback = MagicMock()
        self.fallback.name = "ip-api"
        self.service = IPLookupService(self.config, resolvers=[self.primary, self.fallback],
                                       analyzer=AnalysisGenerator())
        self.app = IPGotApp(self.config, self.service)

    def test_end_to_end_google_dns(self):
        self.primary.lookup.return_value = adapt_ipinfo(
            {"ip": "8.8.8.8", "country": "US", "org": "Google LLC"})

        response = self.app.handle_request("GET", "/?ip=8.8.8.8", {"User-Agent": "Chrome"})

        self.assertEqual(response.status, 200)
        self.assertTrue(response.content_type.startswith("text/html"))
        self.assertIn("8.8.8.8", response.body)
        self.assertIn("Google Cloud", response.body)
        score = int(re.search(r"(\d+)/100", response.body).group(1))
        self.assertGreaterEqual(score, 15)
        self.assertLessEqual(score, 24)
        self.primary.lookup.assert_called_once_with("8.8.8.8")
        self.fallback.lookup.assert_not_called()

    def test_invalid_ip_returns_400(self):
        for bad in ("8.8.8.256", "::1", "abc", "%208.8.8.8", "8.8.8.8%20", "%20"):
            response = self.app.handle_request("GET", f"/?ip={bad}", {}, client_ip="1.2.3.4")
            self.assertEqual(response.status, 400)
            self.assertTrue(response.content_type.startswith("text/plain"))
            self.assertEqual(response.body, "无效的IP地址格式")
        self.primary.lookup.assert_not_called()

    def test_both_resolvers_fail_renders_no_data(self):
        self.primary.lookup.return_value = LookupFailure("IP信息获取失败")
        self.fallback.lookup.return_value = LookupFailure("所有API请求失败")

        response = self.app.handle_request("GET", "/?ip=1.2.3.4", {})

        self.assertEqual(response.status, 200)
        self.assertIn("所有API请求失败", response.body)
        self.assertNotIn("高级威胁分析", response.body)

    def test_fallback_fields_used(self):
        self.primary.lookup.return_value = LookupFailure("IP信息获取失败")
        self.fallback.lookup.return_value = IpRecord(
            ip="1.2.3.4", isp="Example ISP", asn="AS64500 Example", source="ip-api")

        response = self.app.handle_request("GET", "/?ip=1.2.3.4", {})

        self.assertEqual(response.status, 200)
        self.assertIn("Example ISP", response.body)
        self.assertIn("AS64500 Example", response.body)

    def test_unexpected_exception_returns_500(self):
        self.primary.lookup.side_effect = RuntimeError("upstream exploded")

        with self.assertLogs(level="ERROR"):
            response = self.app.handle_request("GET", "/?ip=1.2.3.4", {})

        self.assertEqual(response.status, 500)
        self.assertTrue(response.content_type.startswith("text/plain"))
        self.assertIn("upstream exploded", response.body)

    def test_caller_address_used_without_query(self):
        self.primary.lookup.return_value = IpRecord(ip="203.0.113.7", source="ipinfo")

        self.app.handle_request("GET", "/", {"CF-Connecting-IP": "203.0.113.7"})
        self.primary.lookup.assert_called_with("203.0.113.7")

        self.app.handle_request("GET", "/", {}, client_ip="198.51.100.1")
        self.primary.lookup.assert_called_with("198.51.100.1")

    def test_connecting_ip_header_is_case_insensitive(self):
        self.primary.lookup.return_value = IpRecord(ip="203.0.113.9", source="ipinfo")

        response = self.app.handle_request("GET", "/", {"cf-connecting-ip": "203.0.113.9"},
                                           client_ip="198.51.100.1")

        self.primary.lookup.assert_called_once_with("203.0.113.9")
        self.assertIn("目标IP: 203.0.113.9", response.body)

    def test_empty_ip_parameter_uses_caller_address(self):
        self.primary.lookup.return_value = IpRecord(ip="198.51.100.1", source="ipinfo")

        response = self.app.handle_request("GET", "/?ip=", {}, client_ip="198.51.100.1")

        self.assertEqual(response.status, 200)
        self.primary.lookup.assert_called_once_with("198.51.100.1")

    def test_non_get_returns_search_form(self):
        for method in ("POST", "PUT", "DELETE"):
            response = self.app.handle_request(method, "/?ip=8.8.8.8", {})
            self.assertEqual(response.status, 200)
            self.assertIn('name="ip"', response.body)
            self.assertNotIn("<!DOCTYPE html>", response.body)
        self.primary.lookup.assert_not_called()

class TestWebServer(unittest.TestCase):
    """Test the http.server transport"""

    def setUp(self):
        self.app = MagicMock()
        self.server = WebServer(make_config(), app=self.app)
        self.httpd = HTTPServer(("127.0.0.1", 0), self.server.create_handler())
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self.thread.start()
        self.base_url = f"http://127.0.0.1:{self.httpd.server_port}"
        self.session = requests.Session()
        self.session.trust_env = False

    def tearDown(self):
        self.session.close()
        self.httpd.shutdown()
        self.httpd.server_close()
        self.thread.join(timeout=5)

    def test_response_is_written(self):
        self.app.handle_request.return_value = SimpleNamespace(
            status=400, body="无效的IP地址格式", content_type="text/plain; charset=utf-8")

        response = self.session.get(f"{self.base_url}/?ip=bad", headers={"CF-Ray": "abc"}, timeout=5)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.content.decode("utf-8"), "无效的IP地址格式")
        method, path, headers, client_ip = self.app.handle_request.call_args[0]
        self.assertEqual(method, "GET")
        self.assertEqual(path, "/?ip=bad")
        self.assertEqual(headers.get("cf-ray"), "abc")
        self.assertEqual(client_ip, "127.0.0.1")

    def test_post_is_dispatched(self):
        self.app.handle_request.return_value = SimpleNamespace(
            status=200, body="<form></form>", content_type="text/html; charset=utf-8")

        response = self.session.post(self.base_url, timeout=5)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.app.handle_request.call_args[0][0], "POST")

class TestWebServerRun(unittest.TestCase):
    """Test WebServer.run"""

    @patch("ipgot.interfaces.web_server.HTTPServer")
    def test_lookup_session_closed_on_shutdown(self, mock_server_cls):
        mock_server_cls.return_value.serve_forever.side_effect = KeyboardInterrupt
        app = MagicMock()
        server = WebServer(make_config(), app=app)

        self.assertEqual(server.run(port=0), 0)

        mock_server_cls.return_value.server_close.assert_called_once()
        app.ip_lookup.close.assert_called_once()

if __name__ == "__main__":
    unittest.main()
