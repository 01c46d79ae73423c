"""
Synthetic IP analysis

None of the values produced here come from real threat intelligence: the
risk score is a keyword/prefix heuristic with random jitter, and the
history and blacklist sections are fabricated. Every draw goes through
``rng.random()`` so a seeded or stubbed generator makes the output exact.
"""

import math
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ipgot.core.models import (
    AnalysisResult, AsnHistoryEntry, BlacklistEntry, BlacklistStatus,
    IpRecord, ProxyDetection, RegistrationHistoryEntry, ThreatAnalysis,
)

BASE_RISK_SCORE = 20
HIGH_RISK_COUNTRIES = ("RU", "CN", "KP", "IR", "SY")
DATACENTER_KEYWORDS = ("Data Center", "Hosting")

# Prefixes that raise the risk score
EXIT_NODE_PREFIXES = ("199.249.230.", "185.220.100.", "193.189.100.")

# Wider prefix list used by proxy detection
TOR_RANGES = EXIT_NODE_PREFIXES + ("104.244.46.", "51.222.106.", "71.19.154.")

PROXY_PROVIDERS = (
    "NordVPN", "ExpressVPN", "Surfshark",
    "CyberGhost", "Private Internet Access",
    "Tor Network", "Proxyservice", "VPN",
)

# Ordered: first substring match wins
HOSTING_PROVIDERS = (
    ("Amazon", "AWS"),
    ("Google", "Google Cloud"),
    ("Microsoft", "Azure"),
    ("Digital Ocean", "DigitalOcean"),
    ("Linode", "Linode"),
    ("OVH", "OVH"),
    ("Hetzner", "Hetzner"),
    ("Alibaba", "Alibaba Cloud"),
)

BLACKLISTS = ("Spamhaus", "Barracuda", "SORBS", "AbuseIPDB")

RISK_HIGH = "高风险"
RISK_MEDIUM = "中风险"
RISK_LOW = "低风险"

LISTED = "已列入"
NOT_LISTED = "未列入"
UNKNOWN = "未知"

THREAT_ANALYSES = {
    RISK_HIGH: (
        "该IP地址与已知的恶意活动相关，包括僵尸网络、垃圾邮件发送和网络攻击。",
        ["立即阻止此IP的所有访问", "增强安全监控措施", "审查所有由此IP产生的活动"],
    ),
    RISK_MEDIUM: (
        "该IP地址表现出可疑行为，可能与代理服务或VPN有关，需要进一步审查。",
        ["监控此IP的访问行为", "启用二次验证机制", "限制敏感操作权限"],
    ),
    RISK_LOW: (
        "该IP地址表现正常，属于常规用户或可信服务提供商。",
        ["保持常规安全监控", "无需特别限制操作"],
    ),
}

def clamp_score(score: int) -> int:
    return min(max(score, 0), 100)

def risk_level(score: int) -> str:
    """Map a risk score onto its tier label"""
    if score > 80:
        return RISK_HIGH
    if score > 50:
        return RISK_MEDIUM
    return RISK_LOW

def threat_analysis(score: int) -> ThreatAnalysis:
    level = risk_level(score)
    description, recommendations = THREAT_ANALYSES[level]
    return ThreatAnalysis(level=level, description=description,
                          recommendations=list(recommendations))

def _is_datacenter(org: Optional[str]) -> bool:
    return bool(org) and any(keyword in org for keyword in DATACENTER_KEYWORDS)

def detect_hosting_provider(record: IpRecord) -> str:
    if not record.org:
        return UNKNOWN
    for keyword, provider in HOSTING_PROVIDERS:
        if keyword in record.org:
            return provider
    return record.org

def detect_proxy_usage(ip: str, record: IpRecord) -> ProxyDetection:
    if record.org and any(provider in record.org for provider in PROXY_PROVIDERS):
        return ProxyDetection(detected=True, type="商业VPN服务", confidence="高")

    if ip.startswith(TOR_RANGES):
        return ProxyDetection(detected=True, type="TOR出口节点", confidence="高")

    if _is_datacenter(record.org):
        return ProxyDetection(detected=True, type="数据中心IP", confidence="中")

    return ProxyDetection(detected=False, type="未检测到", confidence="高")

class AnalysisGenerator:
    """Builds the synthetic AnalysisResult for a resolved record"""

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            rng: Randomness source; only its random() method is used
            clock: Returns the current time (default: datetime.now)
        """
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

    def _rand_int(self, upper: int) -> int:
        """Uniform integer in [0, upper)"""
        return math.floor(self.rng.random() * upper)

    def _random_asn(self) -> str:
        return f"AS{self._rand_int(100000)}"

    def generate(self, ip: str, record: IpRecord) -> AnalysisResult:
        """
        Derive the synthetic analysis for a resolved record

        Args:
            ip: The address being reported on
            record: Record returned by a resolver

        Returns:
            AnalysisResult with risk_score in [0, 100]
        """
        ip = ip or ""
        score = self.calculate_risk_score(ip, record)

        return AnalysisResult(
            ip_type="IPv6" if ":" in ip else "IPv4",
            risk_score=score,
            risk_level=risk_level(score),
            asn_history=self.asn_history(record),
            registration_history=self.registration_history(record),
            threat_analysis=threat_analysis(score),
            proxy_detection=detect_proxy_usage(ip, record),
            hosting_provider=detect_hosting_provider(record),
            blacklist_status=self.blacklist_status(),
        )

    def calculate_risk_score(self, ip: str, record: IpRecord) -> int:
        score = BASE_RISK_SCORE

        if record.country and record.country in HIGH_RISK_COUNTRIES:
            score += 30

        if _is_datacenter(record.org):
            score += 25

        if ip.startswith(EXIT_NODE_PREFIXES):
            score += 40

        # jitter in [-5, 4]
        score += self._rand_int(10) - 5

        return clamp_score(score)

    def asn_history(self, record: IpRecord) -> List[AsnHistoryEntry]:
        year = self.clock().year
        history = [
            AsnHistoryEntry(
                asn=record.asn or self._random_asn(),
                org=record.org or "未知组织",
                date=f"{year}-01-01",
                current=True,
            )
        ]

        if self.rng.random() > 0.3:
            history.append(AsnHistoryEntry(
                asn=self._random_asn(),
                org="之前的ISP提供商",
                date=f"{year - 1}-06-15",
            ))

        if self.rng.random() > 0.5:
            history.append(AsnHistoryEntry(
                asn=self._random_asn(),
                org="更早的网络服务商",
                date=f"{year - 2}-03-22",
            ))

        return history

    def registration_history(self, record: IpRecord) -> List[RegistrationHistoryEntry]:
        year = self.clock().year
        history = [
            RegistrationHistoryEntry(
                country=record.country or UNKNOWN,
                region=record.region or UNKNOWN,
                city=record.city or UNKNOWN,
                date=f"{year}-01-01",
                current=True,
            )
        ]

        if self.rng.random() > 0.3:
            history.append(RegistrationHistoryEntry(
                country=record.country or UNKNOWN,
                region="之前的区域",
                city="之前的城市",
                date=f"{year - 1}-07-01",
            ))

        if self.rng.random() > 0.5 and record.country != "US":
            history.append(RegistrationHistoryEntry(
                country="US",
                region="California",
                city="Los Angeles",
                date=f"{year - 2}-05-12",
            ))

        return history

    def blacklist_status(self) -> BlacklistStatus:
        # roughly 30% of lookups come back listed somewhere
        is_listed = self.rng.random() > 0.7
        now = self.clock()

        lists = []
        for name in BLACKLISTS:
            listed = is_listed and self.rng.random() > 0.5
            checked = now - timedelta(days=self._rand_int(30))
            lists.append(BlacklistEntry(
                list=name,
                status=LISTED if listed else NOT_LISTED,
                last_checked=checked.date().isoformat(),
            ))

        return BlacklistStatus(is_listed=is_listed, lists=lists)
