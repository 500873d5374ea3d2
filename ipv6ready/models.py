"""
Data models for ipv6ready
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ProbeName(str, Enum):
    """Fixed set of connectivity probes, in declaration order"""
    IPV4_DNS = "ipv4_dns"                # A-only name reachability
    IPV6_DNS = "ipv6_dns"                # AAAA-only name reachability
    DUAL_STACK = "dual_stack"            # A+AAAA reachability
    DUAL_STACK_MTU = "dual_stack_mtu"    # large payload via dual-stack
    IPV6_MTU = "ipv6_mtu"                # large payload via IPv6-only host
    DNS_V6_RESOLVER = "dns_v6_resolver"  # resolver can reach IPv6-only auth
    ASN_V4 = "asn_v4"                    # ASN lookup over IPv4
    ASN_V6 = "asn_v6"                    # ASN lookup over IPv6

    @classmethod
    def parse(cls, value: str) -> 'ProbeName':
        """Parse a probe name, raising ValueError for unknown names"""
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ', '.join(p.value for p in cls)
            raise ValueError(f"Unknown probe '{value}'. Supported: {known}")


ALL_PROBES: tuple[ProbeName, ...] = tuple(ProbeName)


class Status(str, Enum):
    """Outcome of a single probe"""
    OK = "ok"
    SLOW = "slow"
    BAD = "bad"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"
    ERROR = "error"

    @property
    def healthy(self) -> bool:
        return self in (Status.OK, Status.SLOW)

    @property
    def unhealthy(self) -> bool:
        return self in (Status.BAD, Status.TIMEOUT, Status.ERROR)

    @property
    def char(self) -> str:
        """Single-character code used in the compact status strings"""
        return STATUS_CHARS.get(self, 'b')


STATUS_CHARS = {
    Status.OK: 'o',
    Status.SLOW: 's',
    Status.TIMEOUT: 't',
    Status.BAD: 'b',
    Status.ERROR: 'b',
    Status.SKIPPED: 'x',
}


@dataclass(frozen=True)
class IpObservation:
    """What a probe endpoint reported about the client address"""
    ip: str = ''
    type: str = ''  # ipv4, ipv6, unknown
    subtype: Optional[str] = None  # Teredo, 6to4
    via: Optional[str] = None
    asn: Optional[int] = None
    asn_name: Optional[str] = None

    @property
    def usable(self) -> bool:
        return bool(self.ip or self.type)

    def is_subtype(self, name: str) -> bool:
        return bool(self.subtype) and self.subtype.lower() == name.lower()

    @property
    def is_tunnel(self) -> bool:
        return self.is_subtype('Teredo') or self.is_subtype('6to4')


@dataclass(frozen=True)
class ProbeResult:
    """Result of a single probe"""
    name: ProbeName
    status: Status
    sequence: int = 0  # declaration index within the run
    elapsed_ms: Optional[float] = None
    url: str = ''
    packet_size: int = 0
    http_status: Optional[int] = None
    ip: Optional[IpObservation] = None
    error: Optional[str] = None
    notes: Optional[str] = None

    @property
    def time_ms(self) -> int:
        return int(self.elapsed_ms) if self.elapsed_ms is not None else 0


@dataclass(frozen=True)
class RunResult:
    """Complete outcome of one probe run"""
    run_id: str
    started_at: datetime
    duration_ms: int = 0
    ipv4: Optional[IpObservation] = None
    ipv6: Optional[IpObservation] = None
    results: tuple[ProbeResult, ...] = ()
    timeout_ms: int = 0
    slow_threshold_ms: int = 0
    packet_size: int = 0


@dataclass
class StatusIndex:
    """Per-signal status slots derived from a run"""
    a: Optional[Status] = None       # ipv4_dns
    aaaa: Optional[Status] = None    # ipv6_dns
    ds4: Optional[Status] = None     # dual_stack answered over IPv4
    ds6: Optional[Status] = None     # dual_stack answered over IPv6
    v6mtu: Optional[Status] = None
    dsmtu: Optional[Status] = None
    v6ns: Optional[Status] = None
    ipv4: Optional[IpObservation] = None
    ipv6: Optional[IpObservation] = None

    @property
    def has_ipv4(self) -> bool:
        return self.ipv4 is not None and bool(self.ipv4.ip)

    @property
    def has_ipv6(self) -> bool:
        return self.ipv6 is not None and bool(self.ipv6.ip)

    @property
    def mini_primary(self) -> str:
        return ''.join(s.char for s in (self.a, self.aaaa, self.ds4, self.ds6))

    @property
    def mini_secondary(self) -> str:
        return self.v6mtu.char + self.v6ns.char


@dataclass(frozen=True)
class TokenDetail:
    """Diagnostic token expanded with its scores and message"""
    token: str
    score_transition: int
    score_strict: int
    color: str
    message: str
    more_info: Optional[str] = None
    unknown: bool = False


@dataclass(frozen=True)
class Analysis:
    """Final verdict for a run"""
    tokens: tuple[TokenDetail, ...] = ()
    score_transition: int = -1
    score_strict: int = -1
    mini_primary: str = ''
    mini_secondary: str = ''


@dataclass(frozen=True)
class ProbeDefinition:
    """Catalog entry describing a probe"""
    name: ProbeName
    description: str
    category: str
    requires_ipv6: bool = False
    large_payload: bool = False
    example_url: str = ''
    packet_size: int = 0


@dataclass
class RunOverrides:
    """Per-run overrides; non-positive values keep the configured ones"""
    timeout: Optional[float] = None
    slow_threshold: Optional[float] = None
    packet_size: Optional[int] = None
