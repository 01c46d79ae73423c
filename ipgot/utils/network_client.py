"""
IPGOT Network Client - HTTP client for the upstream IP information APIs

Each call is a single attempt: the lookup service falls back to another
provider instead of retrying the same one.
"""

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from ipgot.core.exceptions import (
    APIError,
    NetworkError,
    DataParsingError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

class APIConfig:
    """Configuration for API client"""

    def __init__(
        self,
        timeout: float = 10,
        verify_ssl: bool = True,
        user_agent: str = "IPGOT/1.0.0",
    ):
        """
        Initialize API configuration

        Args:
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            user_agent: User agent string
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, config) -> "APIConfig":
        """Build API settings from the application Config"""
        return cls(timeout=config.request_timeout, user_agent=config.user_agent)


class NetworkClient:
    """Synchronous HTTP client for JSON APIs"""

    def __init__(self, config: Optional[APIConfig] = None, session: Optional[requests.Session] = None):
        """
        Initialize network client

        Args:
            config: API configuration
            session: Pre-built requests session (optional)
        """
        self.config = config or APIConfig()

        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.config.user_agent})

    def __enter__(self):
        """Support context manager protocol"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close session when exiting context"""
        self.close()

    def close(self):
        """Close the session"""
        self.session.close()

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform a GET request and decode the JSON body

        Args:
            url: URL to request
            params: Query parameters
            headers: Additional headers
            timeout: Request timeout override

        Returns:
            Decoded JSON document

        Raises:
            NetworkError: For connection and timeout issues
            APIError: For non-2xx responses
            RateLimitError: For rate limiting (429)
            DataParsingError: For bodies that are not JSON
        """
        service = self._get_service_name(url)
        request_timeout = timeout or self.config.timeout
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            start_time = time.time()
            response = self.session.get(
                url,
                params=params,
                headers=request_headers,
                timeout=request_timeout,
                verify=self.config.verify_ssl,
            )
            elapsed = time.time() - start_time
            logger.debug(f"GET {url} completed in {elapsed:.3f}s with status {response.status_code}")

        except requests.exceptions.Timeout as e:
            logger.warning(f"Request to {url} timed out after {request_timeout}s")
            raise NetworkError(f"Request timed out: {e}", service)

        except requests.exceptions.ConnectionError as e:
            logger.warning(f"Connection error for {url}: {e}")
            raise NetworkError(f"Connection error: {e}", service)

        except requests.exceptions.RequestException as e:
            logger.warning(f"Request error for {url}: {e}")
            raise NetworkError(f"Request failed: {e}", service)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_after = int(retry_after) if retry_after else None
            except (ValueError, TypeError):
                retry_after = None
            raise RateLimitError(service, retry_after)

        if not 200 <= response.status_code < 300:
            logger.warning(f"HTTP error for {url}: status {response.status_code}")
            raise APIError(service, f"HTTP status {response.status_code}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DataParsingError(f"Failed to parse JSON response: {e}", service)

    @staticmethod
    def _get_service_name(url: str) -> str:
        """
        Extract service name from URL

        Args:
            url: URL to analyze

        Returns:
            Service name, e.g. "IPINFO" for https://ipinfo.io/...
        """
        domain = urlparse(url).netloc.split(':')[0]
        if not domain:
            return "API"
        service = domain.split('.')[0]
        if service in ('www', 'api') and domain.count('.') > 1:
            service = domain.split('.')[1]
        return service.upper()
