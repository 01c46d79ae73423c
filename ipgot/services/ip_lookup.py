"""
IP lookup implementation

Two free providers are queried in order: ipinfo.io first, ip-api.com only
after the first one has failed. Each provider's JSON is mapped onto the
canonical IpRecord by its own adapter function.
"""

import logging
from typing import Any, Dict, List, Optional

from ipgot.core.config import Config
from ipgot.core.exceptions import IPGotError, APIError, DataParsingError
from ipgot.core.models import IpRecord, LookupFailure, LookupResult, LookupReport
from ipgot.services import IPResolver, IPService
from ipgot.services.analysis import AnalysisGenerator
from ipgot.utils.network_client import APIConfig, NetworkClient

logger = logging.getLogger(__name__)

def _text(value: Any) -> Optional[str]:
    """Normalize a provider value to an optional string"""
    if value is None or value == "":
        return None
    return str(value)

def adapt_ipinfo(payload: Dict[str, Any]) -> IpRecord:
    """
    Map an ipinfo.io response onto the canonical record

    Args:
        payload: Decoded JSON body

    Returns:
        IpRecord tagged with source "ipinfo"

    Raises:
        DataParsingError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise DataParsingError("ipinfo response is not a JSON object", "ipinfo")

    return IpRecord(
        ip=_text(payload.get("ip")),
        city=_text(payload.get("city")),
        region=_text(payload.get("region")),
        country=_text(payload.get("country")),
        loc=_text(payload.get("loc")),
        org=_text(payload.get("org")),
        postal=_text(payload.get("postal")),
        timezone=_text(payload.get("timezone")),
        hostname=_text(payload.get("hostname")),
        source=IpinfoResolver.name,
    )

def adapt_ip_api(ip: str, payload: Dict[str, Any]) -> IpRecord:
    """
    Map an ip-api.com response onto the canonical record

    A body with status "fail" (reserved ranges, malformed queries) is raised
    as an APIError so the caller gets the no-data panel rather than a
    record of empty fields with a bogus "undefined,undefined" location.

    Args:
        ip: The queried IP address
        payload: Decoded JSON body

    Returns:
        IpRecord tagged with source "ip-api"

    Raises:
        DataParsingError: If the payload is not a JSON object
        APIError: If ip-api reports a failed query
    """
    if not isinstance(payload, dict):
        raise DataParsingError("ip-api response is not a JSON object", "ip-api")

    # ip-api answers 200 with status "fail" for reserved ranges and bad queries
    if payload.get("status") == "fail":
        raise APIError("ip-api", payload.get("message") or "query failed")

    lat, lon = payload.get("lat"), payload.get("lon")
    loc = f"{lat},{lon}" if lat is not None and lon is not None else None

    return IpRecord(
        ip=ip or _text(payload.get("query")),
        city=_text(payload.get("city")),
        region=_text(payload.get("regionName")),
        country=_text(payload.get("country")),
        loc=loc,
        org=_text(payload.get("org")),
        isp=_text(payload.get("isp")),
        asn=_text(payload.get("as")),
        postal=_text(payload.get("zip")),
        timezone=_text(payload.get("timezone")),
        hostname=_text(payload.get("reverse")),
        source=IpApiResolver.name,
    )

class IpinfoResolver(IPResolver):
    """Primary resolver backed by ipinfo.io"""

    name = "ipinfo"
    http_error_message = "IP信息获取失败"
    error_message = "API请求失败"

    def __init__(self, config: Config, client: Optional[NetworkClient] = None):
        self.config = config
        self.client = client or NetworkClient(APIConfig.from_config(config))

    def build_url(self, ip: str) -> str:
        base = self.config.primary_api_url.rstrip("/")
        return f"{base}/{ip}/json" if ip else f"{base}/json"

    def lookup(self, ip: str) -> LookupResult:
        params = {"token": self.config.ipinfo_token} if self.config.ipinfo_token else None
        try:
            payload = self.client.get_json(self.build_url(ip), params=params)
            return adapt_ipinfo(payload)
        except APIError as e:
            logger.warning(f"{self.name} lookup for {ip or 'caller'} failed: {e}")
            return LookupFailure(self.http_error_message, source=self.name)
        except IPGotError as e:
            logger.warning(f"{self.name} lookup for {ip or 'caller'} failed: {e}")
            return LookupFailure(self.error_message, source=self.name)

class IpApiResolver(IPResolver):
    """Fallback resolver backed by ip-api.com (free tier is HTTP only)"""

    name = "ip-api"
    http_error_message = "备用API请求失败"
    error_message = "所有API请求失败"

    def __init__(self, config: Config, client: Optional[NetworkClient] = None):
        self.config = config
        self.client = client or NetworkClient(APIConfig.from_config(config))

    def build_url(self, ip: str) -> str:
        base = self.config.fallback_api_url.rstrip("/")
        return f"{base}/{ip}" if ip else f"{base}/"

    def lookup(self, ip: str) -> LookupResult:
        params = {"fields": self.config.fallback_api_fields}
        try:
            payload = self.client.get_json(self.build_url(ip), params=params)
            return adapt_ip_api(ip, payload)
        except APIError as e:
            logger.warning(f"{self.name} lookup for {ip or 'caller'} failed: {e}")
            return LookupFailure(self.http_error_message, source=self.name)
        except IPGotError as e:
            logger.warning(f"{self.name} lookup for {ip or 'caller'} failed: {e}")
            return LookupFailure(self.error_message, source=self.name)

class IPLookupService(IPService):
    """IP lookup service implementation"""

    def __init__(self, config: Config, resolvers: Optional[List[IPResolver]] = None,
                 analyzer: Optional[AnalysisGenerator] = None):
        """
        Initialize IP lookup service

        Args:
            config: Configuration object
            resolvers: Providers to try in order (default: ipinfo, then ip-api)
            analyzer: Synthetic analysis generator (optional)
        """
        self.config = config
        self.client = None
        if resolvers is None:
            client = self.client = NetworkClient(APIConfig.from_config(config))
            resolvers = [IpinfoResolver(config, client), IpApiResolver(config, client)]
        self.resolvers = resolvers
        self.analyzer = analyzer or AnalysisGenerator()

    def resolve(self, ip: str) -> LookupResult:
        result: LookupResult = LookupFailure("未找到该IP地址的相关信息")
        for resolver in self.resolvers:
            result = resolver.lookup(ip)
            if not result.error:
                logger.debug(f"Resolved {ip or 'caller'} via {resolver.name}")
                return result
        return result

    def lookup(self, ip: str) -> LookupReport:
        result = self.resolve(ip)
        report = LookupReport(display_ip=ip, result=result)
        if not result.error:
            report.analysis = self.analyzer.generate(ip or result.ip or "", result)
        return report

    def close(self):
        """Close the HTTP session shared by the default resolvers"""
        if self.client is not None:
            self.client.close()
