"""
Browser metadata derived from request headers
"""

from datetime import datetime
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from ipgot.core.models import BrowserContext

UNKNOWN = "未知"

# Ordered: the first substring found in the User-Agent wins
BROWSERS = (
    ("Chrome", "Google Chrome"),
    ("Firefox", "Mozilla Firefox"),
    ("Safari", "Apple Safari"),
    ("Edge", "Microsoft Edge"),
    ("Opera", "Opera"),
)
UNKNOWN_BROWSER = "未知浏览器"

OPERATING_SYSTEMS = (
    ("Windows", "Windows"),
    ("Macintosh", "macOS"),
    ("Linux", "Linux"),
    ("Android", "Android"),
    ("iOS", "iOS"),
)
UNKNOWN_OS = "未知操作系统"

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"

def get_header(headers: Mapping[str, str], name: str, default: str = UNKNOWN) -> str:
    """Case-insensitive header lookup"""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return value or default

def _first_match(user_agent: str, table, default: str) -> str:
    for needle, label in table:
        if needle in user_agent:
            return label
    return default

def parse_languages(accept_language: str):
    """Split an Accept-Language value into bare language tags"""
    return [part.split(';')[0].strip() for part in accept_language.split(',')]

def extract_browser_info(headers: Mapping[str, str], now: Optional[datetime] = None,
                         tz_name: str = "Asia/Shanghai") -> BrowserContext:
    """
    Build the BrowserContext for a request

    Args:
        headers: Request headers
        now: Current time (default: now in tz_name)
        tz_name: IANA timezone used for the timestamp

    Returns:
        BrowserContext
    """
    user_agent = get_header(headers, "User-Agent")
    accept_language = get_header(headers, "Accept-Language")

    tz = ZoneInfo(tz_name)
    now = now.astimezone(tz) if now is not None else datetime.now(tz)

    return BrowserContext(
        user_agent=user_agent,
        accept_language=accept_language,
        cf_ray=get_header(headers, "CF-Ray"),
        cf_connecting_ip=get_header(headers, "CF-Connecting-IP"),
        browser_name=_first_match(user_agent, BROWSERS, UNKNOWN_BROWSER),
        os=_first_match(user_agent, OPERATING_SYSTEMS, UNKNOWN_OS),
        is_mobile="Mobile" in user_agent,
        languages=parse_languages(accept_language),
        timestamp=now.strftime(TIMESTAMP_FORMAT),
    )
