"""
ASN lookup via Team Cymru DNS service
"""

import asyncio
import ipaddress
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Optional

import dns.exception
import dns.resolver

from ..models import IpObservation
from .ip_classifier import IPClassifier


logger = logging.getLogger(__name__)


@dataclass
class ASNInfo:
    """ASN information"""
    asn: int  # e.g., 15169
    org: Optional[str] = None
    prefix: Optional[str] = None
    country: Optional[str] = None


class ASNLookup:
    """
    ASN lookup via Team Cymru DNS service.

    Uses DNS TXT queries to:
    1. Get ASN from IP: <reversed-ip>.origin.asn.cymru.com
       (<reversed-nibbles>.origin6.asn.cymru.com for IPv6)
    2. Get org name: AS<asn>.asn.cymru.com

    Free, no API key required.
    """

    ORIGIN_SUFFIX = "origin.asn.cymru.com"
    ORIGIN6_SUFFIX = "origin6.asn.cymru.com"
    ASN_SUFFIX = "asn.cymru.com"

    def __init__(self, timeout: float = 3.0, max_workers: int = 4):
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._resolver = dns.resolver.Resolver()
        self._resolver.timeout = timeout
        self._resolver.lifetime = timeout

    @classmethod
    def origin_domain(cls, ip: str) -> Optional[str]:
        """Build the origin query name for an address"""
        try:
            addr = ipaddress.ip_address(ip)
        except ValueError:
            return None

        if addr.version == 4:
            return f"{'.'.join(reversed(str(addr).split('.')))}.{cls.ORIGIN_SUFFIX}"

        nibbles = addr.exploded.replace(':', '')
        return f"{'.'.join(reversed(nibbles))}.{cls.ORIGIN6_SUFFIX}"

    def _query_txt(self, domain: str) -> Optional[str]:
        """Query TXT record"""
        try:
            answers = self._resolver.resolve(domain, 'TXT')
            for rdata in answers:
                return str(rdata).strip('"')
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer,
                dns.resolver.NoNameservers, dns.exception.Timeout) as e:
            logger.debug("TXT lookup for %s failed: %s", domain, e)
        return None

    @staticmethod
    def parse_origin_response(txt: Optional[str]) -> Optional[tuple[int, str, str]]:
        """
        Parse origin response.
        Format: "ASN [ASN...] | Prefix | CC | Registry | Date"
        """
        if not txt:
            return None

        parts = [p.strip() for p in txt.split('|')]
        if len(parts) < 3 or not parts[0]:
            return None

        try:
            asn = int(parts[0].split()[0])
        except ValueError:
            return None
        return asn, parts[1], parts[2]

    @staticmethod
    def parse_asn_response(txt: Optional[str]) -> Optional[str]:
        """
        Parse AS<num>.asn.cymru.com response.
        Format: "ASN | CC | Registry | Date | Description"
        """
        if not txt:
            return None

        parts = [p.strip() for p in txt.split('|')]
        if len(parts) >= 5:
            return parts[4]
        return None

    def _lookup_sync(self, ip: str) -> Optional[ASNInfo]:
        origin = self.origin_domain(ip)
        if not origin:
            return None

        parsed = self.parse_origin_response(self._query_txt(origin))
        if not parsed:
            return None

        asn, prefix, country = parsed
        org = self.parse_asn_response(self._query_txt(f"AS{asn}.{self.ASN_SUFFIX}"))

        return ASNInfo(asn=asn, org=org, prefix=prefix, country=country)

    async def lookup(self, ip: str) -> Optional[ASNInfo]:
        """
        Async ASN lookup for single IP.

        Args:
            ip: IP address

        Returns:
            ASNInfo or None
        """
        if not ip or not IPClassifier.should_enrich(ip):
            return None

        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, self._lookup_sync, ip),
                timeout=self.timeout * 2  # Allow for two queries
            )
        except asyncio.TimeoutError:
            logger.info("ASN lookup for %s timed out", ip)
            return None

    async def annotate(self, obs: Optional[IpObservation]) -> Optional[IpObservation]:
        """Return the observation with ASN fields filled, if they were missing"""
        if obs is None or not obs.ip or obs.asn:
            return obs

        info = await self.lookup(obs.ip)
        if info is None:
            return obs
        return replace(obs, asn=info.asn, asn_name=obs.asn_name or info.org)

    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
