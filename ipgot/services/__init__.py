"""
IPGOT service interfaces
"""

from abc import ABC, abstractmethod

from ipgot.core.models import LookupResult, LookupReport

class IPResolver(ABC):
    """Interface for a single upstream IP information provider"""

    name = "resolver"

    @abstractmethod
    def lookup(self, ip: str) -> LookupResult:
        """
        Look up information for an IP address

        Args:
            ip: The IP address to look up (empty for the caller's own address)

        Returns:
            IpRecord on success, LookupFailure otherwise. Provider errors
            are never raised.
        """
        pass

class IPService(ABC):
    """Interface for IP lookup services"""

    @abstractmethod
    def resolve(self, ip: str) -> LookupResult:
        """
        Resolve an IP address through the provider chain

        Args:
            ip: The IP address to look up

        Returns:
            The first successful IpRecord, or the last LookupFailure
        """
        pass

    @abstractmethod
    def lookup(self, ip: str) -> LookupReport:
        """
        Resolve an IP address and attach the synthetic analysis

        Args:
            ip: The IP address to look up

        Returns:
            LookupReport combining the resolved record and its analysis
        """
        pass
