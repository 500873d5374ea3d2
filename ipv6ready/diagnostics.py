"""
Diagnostic analysis for probe runs
"""

from typing import Iterable, Optional

from .models import (
    Analysis, IpObservation, ProbeName, RunResult, Status, StatusIndex, TokenDetail
)
from .tokens import SCORE_MAX, SCORE_NA, TOKEN_TABLE, unknown_entry


def analyze(run: RunResult) -> Analysis:
    """
    Turn a run into findings and readiness scores.

    Pure function of the run's results: calling it twice on the same
    run yields the same Analysis.
    """
    index = build_status_index(run)

    tokens = derive_tokens(run, index)
    details = expand_tokens(tokens)
    score_transition, score_strict = compute_scores(details)

    return Analysis(
        tokens=tuple(details),
        score_transition=score_transition,
        score_strict=score_strict,
        mini_primary=index.mini_primary,
        mini_secondary=index.mini_secondary
    )


def _family(obs: Optional[IpObservation]) -> str:
    return (obs.type or '').lower() if obs else ''


def build_status_index(run: RunResult) -> StatusIndex:
    """
    Fold per-probe results into one status per signal.

    The dual-stack probe is answered over whichever family the client
    picked: its status lands in that family's slot, and the other
    family's slot becomes bad unless something already set it.
    """
    idx = StatusIndex()

    for result in sorted(run.results, key=lambda r: r.sequence):
        obs = result.ip
        family = _family(obs)

        if result.name == ProbeName.IPV4_DNS:
            idx.a = result.status
            if family == 'ipv4' and idx.ipv4 is None:
                idx.ipv4 = obs

        elif result.name == ProbeName.IPV6_DNS:
            idx.aaaa = result.status
            if family == 'ipv6' and idx.ipv6 is None:
                idx.ipv6 = obs

        elif result.name == ProbeName.DUAL_STACK:
            if family == 'ipv6':
                idx.ds6 = result.status
                if idx.ds4 is None:
                    idx.ds4 = Status.BAD
                if idx.ipv6 is None:
                    idx.ipv6 = obs
            else:
                idx.ds4 = result.status
                if idx.ds6 is None:
                    idx.ds6 = Status.BAD
                if family == 'ipv4' and idx.ipv4 is None:
                    idx.ipv4 = obs

        elif result.name == ProbeName.DUAL_STACK_MTU:
            idx.dsmtu = result.status

        elif result.name == ProbeName.IPV6_MTU:
            idx.v6mtu = result.status

        elif result.name == ProbeName.DNS_V6_RESOLVER:
            idx.v6ns = result.status

    # Run-level observations fill what the dedicated probes did not
    if idx.ipv4 is None and run.ipv4 is not None:
        idx.ipv4 = run.ipv4
    if idx.ipv6 is None and run.ipv6 is not None:
        idx.ipv6 = run.ipv6

    for slot in ('a', 'aaaa', 'ds4', 'ds6', 'v6mtu', 'dsmtu', 'v6ns'):
        if getattr(idx, slot) is None:
            setattr(idx, slot, Status.SKIPPED)

    return idx


def derive_tokens(run: RunResult, idx: StatusIndex) -> list[str]:
    """
    Apply the diagnostic rules in order and return deduplicated tokens.

    Order reflects rule evaluation, not severity.
    """
    tokens: list[str] = []
    has_ipv4 = idx.has_ipv4
    has_ipv6 = idx.has_ipv6

    # Address presence
    if not has_ipv4 and not has_ipv6:
        tokens.append("no_address")
    elif not has_ipv4:
        tokens.append("ipv4:no_address")
    elif not has_ipv6:
        tokens.append("ipv6:no_address")

    # Primary bucket, mutually exclusive
    if has_ipv4 and not has_ipv6:
        ds = idx.ds6.char
        if ds == 's':
            tokens.append("ipv4_only:ds_slow")
        elif ds in ('t', 'b'):
            tokens.append("ipv4_only:ds_timeout")
        else:
            tokens.append("ipv4_only:ds_good")
        tokens.append("ipv4_only")
    elif has_ipv6 and not has_ipv4:
        tokens.append("ipv6_only")
    elif has_ipv4 and has_ipv6:
        if idx.ds6.char in ('t', 'b'):
            tokens.append("avoids_ipv6")
        else:
            tokens.append("dualstack:safe")

    # Resolver reachability to IPv6-only authoritative servers
    if (idx.ds4.healthy or idx.ds6.healthy) and idx.v6ns != Status.SKIPPED:
        tokens.append("v6ns:ok" if idx.v6ns.healthy else "v6ns:bad")

    # MTU: only meaningful once basic IPv6 works
    if idx.aaaa.healthy and (idx.v6mtu.unhealthy or idx.dsmtu.unhealthy):
        tokens.append("IPv6 MTU")

    tunnel = idx.ipv6 is not None and idx.ipv6.is_tunnel
    if not has_ipv6 or tunnel:
        if idx.dsmtu.healthy or idx.dsmtu == Status.SKIPPED:
            tokens.append("needs_ipv6")
    elif not idx.dsmtu.healthy and idx.dsmtu != Status.SKIPPED:
        tokens.append("dualstack:unsafe")

    if idx.ipv6 is not None:
        if idx.ipv6.is_subtype("Teredo"):
            tokens.append("teredo")
        if idx.ipv6.is_subtype("6to4"):
            tokens.append("6to4")

    if not tokens:
        tokens.append(idx.mini_primary)

    return dedupe(tokens)


def dedupe(tokens: Iterable[str]) -> list[str]:
    """Drop repeated tokens, keeping first occurrence"""
    seen = set()
    out = []
    for token in tokens:
        if token not in seen:
            seen.add(token)
            out.append(token)
    return out


def expand_tokens(tokens: Iterable[str]) -> list[TokenDetail]:
    """Look up each token in the catalog; result is sorted by token"""
    details = []
    for token in tokens:
        entry = TOKEN_TABLE.get(token)
        unknown = entry is None
        if unknown:
            entry = unknown_entry(token)

        details.append(TokenDetail(
            token=token,
            score_transition=entry.transition,
            score_strict=entry.strict,
            color=entry.color,
            message=entry.message,
            more_info=entry.more_info,
            unknown=unknown
        ))

    return sorted(details, key=lambda d: d.token)


def _clamp(score: int) -> int:
    return max(SCORE_NA, min(SCORE_MAX, score))


def compute_scores(details: Iterable[TokenDetail]) -> tuple[int, int]:
    """
    Overall (transition, strict) scores: the minimum contribution of each.

    Returns (-1, -1) when there are no tokens.
    """
    details = list(details)
    if not details:
        return SCORE_NA, SCORE_NA

    transition = min(d.score_transition for d in details)
    strict = min(d.score_strict for d in details)
    return _clamp(transition), _clamp(strict)
