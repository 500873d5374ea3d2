"""Builders for runs and probe results used across tests."""

from datetime import datetime, timezone
from typing import Optional

from ipv6ready.models import IpObservation, ProbeName, ProbeResult, RunResult, Status
from ipv6ready.probe import first_observations


def v4(ip: str = "192.0.2.10", **kwargs) -> IpObservation:
    return IpObservation(ip=ip, type="ipv4", **kwargs)


def v6(ip: str = "2600:db8::10", **kwargs) -> IpObservation:
    return IpObservation(ip=ip, type="ipv6", **kwargs)


def result(name: ProbeName, status: Status = Status.OK,
           ip: Optional[IpObservation] = None, sequence: Optional[int] = None,
           elapsed_ms: Optional[float] = 42.0) -> ProbeResult:
    if sequence is None:
        sequence = list(ProbeName).index(name)
    if status == Status.SKIPPED:
        elapsed_ms = None
    return ProbeResult(name=name, status=status, sequence=sequence,
                       elapsed_ms=elapsed_ms, url=f"https://{name.value}.example/ip/",
                       ip=ip)


def make_run(*results: ProbeResult, run_id: str = "run-test") -> RunResult:
    ipv4, ipv6 = first_observations(results)
    return RunResult(
        run_id=run_id,
        started_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        duration_ms=123,
        ipv4=ipv4,
        ipv6=ipv6,
        results=tuple(sorted(results, key=lambda r: r.sequence)),
        timeout_ms=15000,
        slow_threshold_ms=5000,
        packet_size=1600,
    )


def healthy_dual_stack_run() -> RunResult:
    """Every probe ok, IPv4 on ipv4_dns, IPv6 on ipv6_dns and dual_stack."""
    return make_run(
        result(ProbeName.IPV4_DNS, ip=v4()),
        result(ProbeName.IPV6_DNS, ip=v6()),
        result(ProbeName.DUAL_STACK, ip=v6()),
        result(ProbeName.DUAL_STACK_MTU, ip=v6()),
        result(ProbeName.IPV6_MTU, ip=v6()),
        result(ProbeName.DNS_V6_RESOLVER, ip=v6()),
        result(ProbeName.ASN_V4, ip=v4(asn=64500, asn_name="EXAMPLE-NET")),
        result(ProbeName.ASN_V6, ip=v6(asn=64500, asn_name="EXAMPLE-NET")),
    )
