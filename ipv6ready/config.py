"""
Endpoint configuration and probe catalog
"""

from dataclasses import dataclass, field, replace
from typing import Optional
from urllib.parse import quote_plus

from . import __version__
from .models import ProbeName, ProbeDefinition, RunOverrides


DEFAULT_DOMAIN = "test-ipv6.com"
DEFAULT_TIMEOUT = 15.0  # seconds
DEFAULT_SLOW_THRESHOLD = 5.0  # seconds
DEFAULT_PACKET_SIZE = 1600  # bytes
DEFAULT_USER_AGENT = f"ipv6ready/{__version__}"
MAX_BODY_BYTES = 4 << 20  # 4 MiB

ENV_PREFIX = "IPV6READY"


@dataclass(frozen=True)
class Options:
    """How probe URLs are built and executed"""
    domain: str = DEFAULT_DOMAIN
    endpoints: dict[ProbeName, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    slow_threshold: float = DEFAULT_SLOW_THRESHOLD
    packet_size: int = DEFAULT_PACKET_SIZE
    user_agent: str = DEFAULT_USER_AGENT

    def with_overrides(self, overrides: Optional[RunOverrides]) -> 'Options':
        """Apply positive override values on top of these options"""
        if overrides is None:
            return self
        changes = {}
        if overrides.timeout and overrides.timeout > 0:
            changes['timeout'] = overrides.timeout
        if overrides.slow_threshold and overrides.slow_threshold > 0:
            changes['slow_threshold'] = overrides.slow_threshold
        if overrides.packet_size and overrides.packet_size > 0:
            changes['packet_size'] = overrides.packet_size
        return replace(self, **changes) if changes else self


def default_endpoints(domain: str = DEFAULT_DOMAIN,
                      lookup_domain: Optional[str] = None,
                      packet_size: int = DEFAULT_PACKET_SIZE) -> dict[ProbeName, str]:
    """
    Build the probe URL map for a base domain.

    Args:
        domain: Base domain hosting the ipv4/ipv6/ds/mtu1280 names
        lookup_domain: Domain hosting the ASN lookup names (defaults to domain)
        packet_size: Fill size for the large-payload probes

    Returns:
        Dict mapping ProbeName -> URL
    """
    domain = (domain or '').strip() or DEFAULT_DOMAIN
    lookup_domain = (lookup_domain or '').strip() or domain
    fill = quote_plus('x' * packet_size)

    def mk(prefix: str) -> str:
        return f"https://{prefix}.{domain}/ip/?callback=?"

    def mk_mtu(prefix: str) -> str:
        return f"https://{prefix}.{domain}/ip/?callback=?&size={packet_size}&fill={fill}"

    return {
        ProbeName.IPV4_DNS: mk("ipv4"),
        ProbeName.IPV6_DNS: mk("ipv6"),
        ProbeName.DUAL_STACK: mk("ds"),
        ProbeName.DUAL_STACK_MTU: mk_mtu("ds"),
        ProbeName.IPV6_MTU: mk_mtu("mtu1280"),
        ProbeName.DNS_V6_RESOLVER: mk("ds.v6ns"),
        ProbeName.ASN_V4: f"https://ipv4.lookup.{lookup_domain}/ip/?callback=?&asn=1",
        ProbeName.ASN_V6: f"https://ipv6.lookup.{lookup_domain}/ip/?callback=?&asn=1",
    }


def default_options(domain: str = DEFAULT_DOMAIN,
                    lookup_domain: Optional[str] = None,
                    packet_size: int = DEFAULT_PACKET_SIZE,
                    timeout: float = DEFAULT_TIMEOUT,
                    slow_threshold: float = DEFAULT_SLOW_THRESHOLD,
                    user_agent: str = DEFAULT_USER_AGENT) -> Options:
    """Build ready-to-use Options for a base domain"""
    return Options(
        domain=domain,
        endpoints=default_endpoints(domain, lookup_domain, packet_size),
        timeout=timeout,
        slow_threshold=slow_threshold,
        packet_size=packet_size,
        user_agent=user_agent or DEFAULT_USER_AGENT
    )


def catalog(options: Options) -> list[ProbeDefinition]:
    """List supported probes with their example URLs"""
    urls = options.endpoints
    return [
        ProbeDefinition(ProbeName.IPV4_DNS, "A-only hostname reachability",
                        "connectivity", example_url=urls.get(ProbeName.IPV4_DNS, '')),
        ProbeDefinition(ProbeName.IPV6_DNS, "AAAA-only hostname reachability",
                        "connectivity", requires_ipv6=True,
                        example_url=urls.get(ProbeName.IPV6_DNS, '')),
        ProbeDefinition(ProbeName.DUAL_STACK, "Dual-stack hostname reachability",
                        "connectivity", example_url=urls.get(ProbeName.DUAL_STACK, '')),
        ProbeDefinition(ProbeName.DUAL_STACK_MTU, "Dual-stack large-payload reachability",
                        "mtu", large_payload=True,
                        example_url=urls.get(ProbeName.DUAL_STACK_MTU, ''),
                        packet_size=options.packet_size),
        ProbeDefinition(ProbeName.IPV6_MTU, "IPv6 large-payload reachability",
                        "mtu", requires_ipv6=True, large_payload=True,
                        example_url=urls.get(ProbeName.IPV6_MTU, ''),
                        packet_size=options.packet_size),
        ProbeDefinition(ProbeName.DNS_V6_RESOLVER, "Resolver reachability to IPv6-only auth",
                        "dns", example_url=urls.get(ProbeName.DNS_V6_RESOLVER, '')),
        ProbeDefinition(ProbeName.ASN_V4, "ASN lookup over IPv4",
                        "metadata", example_url=urls.get(ProbeName.ASN_V4, '')),
        ProbeDefinition(ProbeName.ASN_V6, "ASN lookup over IPv6",
                        "metadata", requires_ipv6=True,
                        example_url=urls.get(ProbeName.ASN_V6, '')),
    ]
