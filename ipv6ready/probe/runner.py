"""
Probe runner - executes the connectivity probes of one run
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

import httpx

from .. import config
from ..config import Options
from ..models import (
    ALL_PROBES, IpObservation, ProbeName, ProbeResult, RunOverrides, RunResult, Status
)
from .observation import parse_observation


logger = logging.getLogger(__name__)


def new_run_id() -> str:
    return f"run-{time.time_ns()}-{uuid.uuid4().hex[:12]}"


def first_observations(results: Iterable[ProbeResult]) -> tuple[Optional[IpObservation],
                                                              Optional[IpObservation]]:
    """
    First IPv4 and IPv6 observation across results, in declaration order.

    Results are ordered by their sequence index, so completion order of
    concurrently executed probes never changes the outcome.
    """
    ipv4: Optional[IpObservation] = None
    ipv6: Optional[IpObservation] = None

    for result in sorted(results, key=lambda r: r.sequence):
        obs = result.ip
        if obs is None or not obs.ip:
            continue
        if obs.type == 'ipv4' and ipv4 is None:
            ipv4 = obs
        elif obs.type == 'ipv6' and ipv6 is None:
            ipv6 = obs

    return ipv4, ipv6


class Runner:
    """
    Probe orchestrator.

    Runs each requested probe as one HTTP GET, concurrently, and
    classifies the outcome:

    - no endpoint configured        -> skipped
    - deadline / timeout            -> timeout
    - other transport failure       -> error
    - HTTP 2xx/3xx within threshold -> ok
    - HTTP 2xx/3xx over threshold   -> slow
    - any other HTTP status         -> bad
    """

    def __init__(self, options: Optional[Options] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 max_body_bytes: int = config.MAX_BODY_BYTES):
        self.options = options or config.default_options()
        self.max_body_bytes = max_body_bytes
        self._transport = transport

    async def run(self, probes: Optional[Iterable[ProbeName]] = None,
                  overrides: Optional[RunOverrides] = None,
                  deadline: Optional[float] = None) -> RunResult:
        """
        Execute a batch of probes.

        Args:
            probes: Probe names to run (empty or None runs all eight)
            overrides: Per-run timeout / slow threshold / packet size
            deadline: Optional overall budget in seconds; probes still in
                flight when it expires are aborted and reported as timeout

        Returns:
            RunResult with per-probe results in declaration order

        Each probe is bounded by the configured timeout as a whole, body
        included. Cancelling the awaiting task is not turned into timeout
        results: CancelledError propagates to the caller, use deadline to
        get a partial RunResult instead.
        """
        opts = self.options.with_overrides(overrides)
        names = list(probes or ()) or list(ALL_PROBES)

        loop = asyncio.get_running_loop()
        deadline_at = loop.time() + deadline if deadline is not None else None

        run_id = new_run_id()
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        logger.debug("Run %s: %d probe(s), timeout=%.1fs slow=%.1fs",
                     run_id, len(names), opts.timeout, opts.slow_threshold)

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=opts.timeout,
            follow_redirects=True,
            headers={'User-Agent': opts.user_agent}
        ) as client:
            results = await asyncio.gather(*[
                self._run_single(client, opts, name, seq, deadline_at)
                for seq, name in enumerate(names)
            ])

        results = sorted(results, key=lambda r: r.sequence)
        ipv4, ipv6 = first_observations(results)

        return RunResult(
            run_id=run_id,
            started_at=started_at,
            duration_ms=int((time.perf_counter() - start) * 1000),
            ipv4=ipv4,
            ipv6=ipv6,
            results=tuple(results),
            timeout_ms=int(opts.timeout * 1000),
            slow_threshold_ms=int(opts.slow_threshold * 1000),
            packet_size=opts.packet_size
        )

    async def _fetch(self, client: httpx.AsyncClient, url: str,
                     start: float) -> tuple[int, bytes, float]:
        """GET url; returns status code, capped body and elapsed ms at response"""
        async with client.stream('GET', url) as response:
            elapsed_ms = (time.perf_counter() - start) * 1000
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk[:self.max_body_bytes - len(body)])
                if len(body) >= self.max_body_bytes:
                    break
            return response.status_code, bytes(body), elapsed_ms

    async def _run_single(self, client: httpx.AsyncClient, opts: Options,
                          name: ProbeName, sequence: int,
                          deadline_at: Optional[float]) -> ProbeResult:
        url = opts.endpoints.get(name, '')
        if not url:
            logger.debug("%s: no endpoint configured, skipping", name.value)
            return ProbeResult(name=name, status=Status.SKIPPED, sequence=sequence,
                               notes="no endpoint configured")

        start = time.perf_counter()
        # httpx timeouts apply per connect/read/write; bound the whole exchange too
        limit = opts.timeout
        reason = f"timed out after {opts.timeout:g}s"
        if deadline_at is not None:
            remaining = max(0.0, deadline_at - asyncio.get_running_loop().time())
            if remaining < limit:
                limit, reason = remaining, "deadline exceeded"

        try:
            if limit <= 0:
                raise asyncio.TimeoutError()
            status_code, body, elapsed_ms = await asyncio.wait_for(
                self._fetch(client, url, start), timeout=limit
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            error = str(e) or reason
            logger.info("%s: timeout (%s)", name.value, error)
            return ProbeResult(name=name, status=Status.TIMEOUT, sequence=sequence,
                               elapsed_ms=(time.perf_counter() - start) * 1000,
                               url=url, packet_size=opts.packet_size, error=error)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = str(e) or type(e).__name__
            logger.info("%s: error (%s)", name.value, error)
            return ProbeResult(name=name, status=Status.ERROR, sequence=sequence,
                               elapsed_ms=(time.perf_counter() - start) * 1000,
                               url=url, packet_size=opts.packet_size, error=error)

        error = None
        if 200 <= status_code < 400:
            slow = elapsed_ms > opts.slow_threshold * 1000
            status = Status.SLOW if slow else Status.OK
        else:
            status = Status.BAD
            error = f"http status {status_code}"

        obs = parse_observation(body)
        logger.debug("%s: %s in %.0fms (HTTP %d, ip=%s)", name.value, status.value,
                     elapsed_ms, status_code, obs.ip if obs else '-')

        return ProbeResult(
            name=name,
            status=status,
            sequence=sequence,
            elapsed_ms=elapsed_ms,
            url=url,
            packet_size=opts.packet_size,
            http_status=status_code,
            ip=obs,
            error=error
        )
