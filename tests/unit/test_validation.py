"""
Unit tests for Validator class
"""

import unittest

from ipgot.core.exceptions import ValidationError
from ipgot.utils.validation import Validator

class TestValidator(unittest.TestCase):
    """Test Validator class"""

    def test_is_valid_ipv4(self):
        """Test is_valid_ipv4 method"""
        for ip in ("8.8.8.8", "0.0.0.0", "255.255.255.255", "192.168.1.1", "10.0.0.01"):
            self.assertTrue(Validator.is_valid_ipv4(ip), ip)

        for ip in ("8.8.8.256", "256.0.0.1", "192.168.1", "192.168.1.1.1",
                   "::1", "2001:db8::1", "example.com", " 8.8.8.8", "8.8.8.8\n",
                   "1.2.3.0004", "a.b.c.d", ""):
            self.assertFalse(Validator.is_valid_ipv4(ip), repr(ip))

        self.assertFalse(Validator.is_valid_ipv4(None))

    def test_validate_query_ip(self):
        """Test validate_query_ip method"""
        # Valid values should not raise exceptions
        Validator.validate_query_ip("8.8.8.8")
        Validator.validate_query_ip("")
        Validator.validate_query_ip(None)

        # Invalid values should raise exceptions
        with self.assertRaises(ValidationError):
            Validator.validate_query_ip("8.8.8.256")

        with self.assertRaises(ValidationError):
            Validator.validate_query_ip("::1")

        with self.assertRaises(ValidationError) as ctx:
            Validator.validate_query_ip("not-an-ip")
        self.assertEqual(str(ctx.exception), "无效的IP地址格式")

if __name__ == "__main__":
    unittest.main()
