"""
IP address classifier
"""

import ipaddress
from enum import Enum
from typing import Optional, Union


class IPFamily(Enum):
    """Address family as reported in observations"""
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    UNKNOWN = "unknown"


class IPClassifier:
    """
    Classify client addresses reported by probe endpoints.

    Detects:
    - family: ipv4 / ipv6 (IPv4-mapped IPv6 counts as ipv4)
    - tunnels: Teredo (2001::/32) and 6to4 (2002::/16)
    """

    TEREDO = "Teredo"
    SIX_TO_FOUR = "6to4"

    @staticmethod
    def _parse(ip: str) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
        if not ip:
            return None
        try:
            return ipaddress.ip_address(ip.strip())
        except ValueError:
            return None

    @classmethod
    def family(cls, ip: str) -> IPFamily:
        """
        Classify an address by family.

        Args:
            ip: IPv4 or IPv6 address string

        Returns:
            IPFamily enum value
        """
        addr = cls._parse(ip)
        if addr is None:
            return IPFamily.UNKNOWN

        if addr.version == 6 and addr.ipv4_mapped is not None:
            return IPFamily.IPV4

        return IPFamily.IPV4 if addr.version == 4 else IPFamily.IPV6

    @classmethod
    def tunnel_subtype(cls, ip: str) -> Optional[str]:
        """Get tunnel subtype for transition-mechanism addresses, None otherwise"""
        addr = cls._parse(ip)
        if addr is None or addr.version != 6:
            return None

        if addr.teredo is not None:
            return cls.TEREDO

        if addr.sixtofour is not None:
            return cls.SIX_TO_FOUR

        return None

    @classmethod
    def should_enrich(cls, ip: str) -> bool:
        """Check if IP should have ASN enrichment"""
        addr = cls._parse(ip)
        return addr is not None and addr.is_global
