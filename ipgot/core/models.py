"""
Data models for IPGOT
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

# Field order used when displaying a resolved record
RECORD_FIELDS = (
    "ip", "city", "region", "country", "loc", "org",
    "postal", "timezone", "hostname", "isp", "asn",
)

@dataclass
class IpRecord:
    """Canonical IP information record produced by a resolver"""
    ip: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    loc: Optional[str] = None
    org: Optional[str] = None
    postal: Optional[str] = None
    timezone: Optional[str] = None
    hostname: Optional[str] = None
    isp: Optional[str] = None
    asn: Optional[str] = None
    source: str = ""
    error: bool = field(default=False, init=False)

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Return the display fields of the record"""
        return {key: getattr(self, key) for key in RECORD_FIELDS}

@dataclass
class LookupFailure:
    """Tagged failure returned by a resolver instead of raising"""
    message: str
    source: str = ""
    error: bool = field(default=True, init=False)

LookupResult = Union[IpRecord, LookupFailure]

@dataclass
class AsnHistoryEntry:
    """Single row of the ASN history timeline"""
    asn: str
    org: str
    date: str
    current: bool = False

@dataclass
class RegistrationHistoryEntry:
    """Single row of the registration history timeline"""
    country: str
    region: str
    city: str
    date: str
    current: bool = False

@dataclass
class ThreatAnalysis:
    """Threat narrative for a risk tier"""
    level: str
    description: str
    recommendations: List[str] = field(default_factory=list)

@dataclass
class ProxyDetection:
    """Proxy / VPN detection outcome"""
    detected: bool
    type: str
    confidence: str

@dataclass
class BlacklistEntry:
    """Status of one blacklist"""
    list: str
    status: str
    last_checked: str

@dataclass
class BlacklistStatus:
    """Aggregated blacklist status"""
    is_listed: bool = False
    lists: List[BlacklistEntry] = field(default_factory=list)

@dataclass
class AnalysisResult:
    """Synthetic analysis derived from a resolved record"""
    ip_type: str
    risk_score: int
    risk_level: str
    asn_history: List[AsnHistoryEntry] = field(default_factory=list)
    registration_history: List[RegistrationHistoryEntry] = field(default_factory=list)
    threat_analysis: Optional[ThreatAnalysis] = None
    proxy_detection: Optional[ProxyDetection] = None
    hosting_provider: str = ""
    blacklist_status: BlacklistStatus = field(default_factory=BlacklistStatus)

@dataclass(frozen=True)
class BrowserContext:
    """Browser metadata derived from request headers"""
    user_agent: str
    accept_language: str
    cf_ray: str
    cf_connecting_ip: str
    browser_name: str
    os: str
    is_mobile: bool
    languages: List[str]
    timestamp: str

@dataclass
class LookupReport:
    """Combined outcome of one lookup"""
    display_ip: str
    result: LookupResult
    analysis: Optional[AnalysisResult] = None

    @property
    def succeeded(self) -> bool:
        return not self.result.error
