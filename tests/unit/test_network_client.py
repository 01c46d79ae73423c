"""
Unit tests for NetworkClient
"""

import unittest
from unittest.mock import MagicMock

import requests

from ipgot.core.exceptions import APIError, DataParsingError, NetworkError, RateLimitError
from ipgot.utils.network_client import APIConfig, NetworkClient

def make_response(status_code=200, json_data=None, json_error=None, headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response

class TestNetworkClient(unittest.TestCase):
    """Test NetworkClient class"""

    def setUp(self):
        self.session = MagicMock()
        self.client = NetworkClient(APIConfig(timeout=4, user_agent="test-agent"), session=self.session)

    def test_get_json_success(self):
        """Test a 200 JSON response is decoded"""
        self.session.get.return_value = make_response(json_data={"ip": "8.8.8.8"})

        data = self.client.get_json("https://ipinfo.io/8.8.8.8/json", params={"token": "x"})

        self.assertEqual(data, {"ip": "8.8.8.8"})
        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["timeout"], 4)
        self.assertEqual(kwargs["params"], {"token": "x"})
        self.assertEqual(kwargs["headers"]["Accept"], "application/json")
        self.session.headers.update.assert_called_with({"User-Agent": "test-agent"})

    def test_http_error_raises_api_error(self):
        """Test non-2xx status raises APIError with the status code"""
        self.session.get.return_value = make_response(status_code=503)

        with self.assertRaises(APIError) as ctx:
            self.client.get_json("https://ipinfo.io/8.8.8.8/json")
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.service, "IPINFO")

    def test_rate_limit(self):
        """Test 429 raises RateLimitError"""
        self.session.get.return_value = make_response(status_code=429, headers={"Retry-After": "30"})

        with self.assertRaises(RateLimitError) as ctx:
            self.client.get_json("http://ip-api.com/json/8.8.8.8")
        self.assertEqual(ctx.exception.retry_after, 30)
        self.assertIsInstance(ctx.exception, APIError)

    def test_invalid_json(self):
        """Test a non-JSON body raises DataParsingError"""
        self.session.get.return_value = make_response(json_error=ValueError("no json"))

        with self.assertRaises(DataParsingError):
            self.client.get_json("https://ipinfo.io/8.8.8.8/json")

    def test_network_errors(self):
        """Test transport errors raise NetworkError"""
        for error in (requests.exceptions.Timeout("slow"),
                      requests.exceptions.ConnectionError("refused"),
                      requests.exceptions.TooManyRedirects("loop")):
            self.session.get.side_effect = error
            with self.assertRaises(NetworkError):
                self.client.get_json("https://ipinfo.io/8.8.8.8/json")

    def test_single_attempt(self):
        """Test a failed request is not retried"""
        self.session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(NetworkError):
            self.client.get_json("https://ipinfo.io/8.8.8.8/json")
        self.assertEqual(self.session.get.call_count, 1)

    def test_service_name(self):
        """Test _get_service_name method"""
        self.assertEqual(NetworkClient._get_service_name("https://ipinfo.io/json"), "IPINFO")
        self.assertEqual(NetworkClient._get_service_name("http://ip-api.com/json/1.1.1.1"), "IP-API")
        self.assertEqual(NetworkClient._get_service_name("https://api.example.com/x"), "EXAMPLE")
        self.assertEqual(NetworkClient._get_service_name("not a url"), "API")

if __name__ == "__main__":
    unittest.main()
