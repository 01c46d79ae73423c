"""
Input validation utilities for IPGOT
"""

import re
from typing import Optional

from ipgot.core.exceptions import ValidationError

# Strict dotted-quad IPv4, each octet 0-255
_OCTET = r'(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)'
IPV4_REGEX = re.compile(rf'^{_OCTET}\.{_OCTET}\.{_OCTET}\.{_OCTET}$')

INVALID_IP_MESSAGE = "无效的IP地址格式"

class Validator:
    """Input validation utilities"""

    @staticmethod
    def is_valid_ipv4(ip: Optional[str]) -> bool:
        """
        Check if the string is a strict dotted-quad IPv4 address

        Args:
            ip: String to check

        Returns:
            True if valid IPv4 address, False otherwise
        """
        if not isinstance(ip, str):
            return False
        return IPV4_REGEX.fullmatch(ip) is not None

    @staticmethod
    def validate_query_ip(value: Optional[str]) -> None:
        """
        Validate the optional ``ip`` query parameter

        An empty value is accepted and means "look up the caller's own address".

        Args:
            value: Query parameter value

        Raises:
            ValidationError: If a non-empty value is not a valid IPv4 address
        """
        if not value:
            return

        if not Validator.is_valid_ipv4(value):
            raise ValidationError(INVALID_IP_MESSAGE)
