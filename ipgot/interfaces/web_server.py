"""
Web server interface for IPGOT
"""

import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Mapping, Optional
from urllib.parse import parse_qs, urlparse

from ipgot.core.config import Config
from ipgot.core.exceptions import ValidationError
from ipgot.interfaces.html import render_page, render_search_form
from ipgot.services.browser_info import extract_browser_info, get_header
from ipgot.services.ip_lookup import IPLookupService
from ipgot.utils.validation import Validator

@dataclass
class HTTPResponse:
    """Response produced by the request handler"""
    status: int
    body: str
    content_type: str = "text/html; charset=utf-8"

class IPGotApp:
    """Single-route request handler, independent of the HTTP transport"""

    def __init__(self, config: Config, ip_lookup: Optional[IPLookupService] = None):
        """
        Initialize the application

        Args:
            config: Configuration object
            ip_lookup: Lookup service (optional)
        """
        self.config = config
        self.ip_lookup = ip_lookup or IPLookupService(config)

    def handle_request(self, method: str, path: str, headers: Mapping[str, str],
                       client_ip: str = "") -> HTTPResponse:
        """
        Handle one request

        Args:
            method: HTTP method
            path: Request path including the query string
            headers: Request headers
            client_ip: Socket peer address, used when no ip is given

        Returns:
            HTTPResponse
        """
        if method.upper() != "GET":
            return HTTPResponse(200, render_search_form())

        params = parse_qs(urlparse(path).query)
        query_ip = params.get("ip", [""])[0]

        try:
            Validator.validate_query_ip(query_ip)
        except ValidationError as e:
            return HTTPResponse(400, str(e), "text/plain; charset=utf-8")

        display_ip = query_ip or get_header(headers, "CF-Connecting-IP", "") or client_ip

        try:
            report = self.ip_lookup.lookup(display_ip)
        except Exception as e:
            logging.error(f"API请求失败: {e}", exc_info=True)
            return HTTPResponse(500, f"获取数据时出错: {e}", "text/plain; charset=utf-8")

        browser = extract_browser_info(headers, tz_name=self.config.display_timezone)
        html = render_page(display_ip, report.result, report.analysis, browser,
                           map_ak=self.config.baidu_map_ak)
        return HTTPResponse(200, html)

class WebServer:
    """Web server interface for IPGOT"""

    def __init__(self, config: Config, app: Optional[IPGotApp] = None):
        """
        Initialize web server interface

        Args:
            config: Configuration object
            app: Request handler (optional)
        """
        self.config = config
        self.app = app or IPGotApp(config)

        # Server settings
        self.address = config.server_bind_addr
        self.port = config.server_bind_port
        self.server = None

    def create_handler(self):
        """Create a request handler class bound to this server's app"""
        context = self

        class IPGotRequestHandler(BaseHTTPRequestHandler):
            def log_message(self, format, *args):
                """Override log_message to use our logging setup"""
                if context.config.debug:
                    logging.info(f"{self.address_string()} - {format % args}")

            def _dispatch(self):
                response = context.app.handle_request(
                    self.command, self.path, self.headers, self.client_address[0]
                )
                body = response.body.encode("utf-8")
                self.send_response(response.status)
                self.send_header("Content-Type", response.content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                if self.command != "HEAD":
                    self.wfile.write(body)

            do_GET = _dispatch
            do_POST = _dispatch
            do_PUT = _dispatch
            do_DELETE = _dispatch
            do_PATCH = _dispatch
            do_HEAD = _dispatch
            do_OPTIONS = _dispatch

        return IPGotRequestHandler

    def run(self, address: Optional[str] = None, port: Optional[int] = None) -> int:
        """
        Run the web server

        Args:
            address: Bind address (default: from config)
            port: Bind port (default: from config)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        self.address = address or self.address
        self.port = port if port is not None else self.port

        try:
            self.server = HTTPServer((self.address, self.port), self.create_handler())
        except OSError as e:
            logging.error(f"Could not bind {self.address}:{self.port}: {e}")
            return 1

        logging.info(f"IPGOT listening on http://{self.address}:{self.server.server_port}/")
        try:
            self.server.serve_forever()
        except KeyboardInterrupt:
            logging.info("Shutting down")
        finally:
            self.server.server_close()
            self.app.ip_lookup.close()
        return 0
