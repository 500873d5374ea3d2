import asyncio

import httpx
import pytest

from ipv6ready.config import Options, default_endpoints
from ipv6ready.models import ALL_PROBES, ProbeName, RunOverrides, Status
from ipv6ready.probe import Runner


V4_BODY = b'callback({"ip":"192.0.2.1","type":"ipv4"});'
V6_BODY = b'{"ip":"2600:db8::1","type":"ipv6"}'


def make_options(endpoints, timeout=5.0, slow_threshold=5.0, packet_size=1600):
    return Options(
        domain="probe.test",
        endpoints=endpoints,
        timeout=timeout,
        slow_threshold=slow_threshold,
        packet_size=packet_size,
        user_agent="ipv6ready-test",
    )


def by_name(run):
    return {r.name: r for r in run.results}


@pytest.mark.asyncio
async def test_outcomes_are_classified() -> None:
    seen_agents = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_agents.append(request.headers.get("user-agent"))
        host = request.url.host
        if host == "ok.test":
            return httpx.Response(200, content=V4_BODY)
        if host == "bad.test":
            return httpx.Response(500, content=V6_BODY)
        if host == "timeout.test":
            raise httpx.ReadTimeout("read timed out", request=request)
        raise httpx.ConnectError("connection refused", request=request)

    options = make_options({
        ProbeName.IPV4_DNS: "https://ok.test/ip/",
        ProbeName.IPV6_DNS: "https://bad.test/ip/",
        ProbeName.DUAL_STACK: "https://timeout.test/ip/",
        ProbeName.DUAL_STACK_MTU: "https://refused.test/ip/",
        ProbeName.IPV6_MTU: "",
    })
    runner = Runner(options, transport=httpx.MockTransport(handler))

    run = await runner.run([
        ProbeName.IPV4_DNS, ProbeName.IPV6_DNS, ProbeName.DUAL_STACK,
        ProbeName.DUAL_STACK_MTU, ProbeName.IPV6_MTU, ProbeName.ASN_V4,
    ])
    results = by_name(run)

    ok = results[ProbeName.IPV4_DNS]
    assert ok.status == Status.OK
    assert ok.http_status == 200
    assert ok.ip.ip == "192.0.2.1"
    assert ok.elapsed_ms is not None

    bad = results[ProbeName.IPV6_DNS]
    assert bad.status == Status.BAD
    assert bad.error == "http status 500"
    assert bad.ip.ip == "2600:db8::1"

    assert results[ProbeName.DUAL_STACK].status == Status.TIMEOUT
    assert results[ProbeName.DUAL_STACK].error

    assert results[ProbeName.DUAL_STACK_MTU].status == Status.ERROR
    assert "connection refused" in results[ProbeName.DUAL_STACK_MTU].error

    for name in (ProbeName.IPV6_MTU, ProbeName.ASN_V4):
        skipped = results[name]
        assert skipped.status == Status.SKIPPED
        assert skipped.elapsed_ms is None
        assert skipped.notes == "no endpoint configured"

    assert set(seen_agents) == {"ipv6ready-test"}
    assert run.ipv4.ip == "192.0.2.1"
    assert run.ipv6.ip == "2600:db8::1"


@pytest.mark.asyncio
async def test_slow_response() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.05)
        return httpx.Response(200, content=V4_BODY)

    options = make_options({ProbeName.IPV4_DNS: "https://ok.test/ip/"}, slow_threshold=0.01)
    run = await Runner(options, transport=httpx.MockTransport(handler)).run([ProbeName.IPV4_DNS])

    assert run.results[0].status == Status.SLOW
    assert run.slow_threshold_ms == 10


@pytest.mark.asyncio
async def test_deadline_aborts_inflight_probes() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "hang.test":
            await asyncio.sleep(1.0)
        return httpx.Response(200, content=V4_BODY)

    options = make_options({
        ProbeName.IPV4_DNS: "https://fast.test/ip/",
        ProbeName.IPV6_DNS: "https://hang.test/ip/",
    })
    runner = Runner(options, transport=httpx.MockTransport(handler))
    run = await runner.run([ProbeName.IPV4_DNS, ProbeName.IPV6_DNS], deadline=0.05)
    results = by_name(run)

    assert results[ProbeName.IPV4_DNS].status == Status.OK
    assert results[ProbeName.IPV6_DNS].status == Status.TIMEOUT
    assert run.duration_ms < 1000


@pytest.mark.asyncio
async def test_first_observation_follows_declaration_order() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "first.test":
            await asyncio.sleep(0.05)
            return httpx.Response(200, content=b'{"ip":"192.0.2.1","type":"ipv4"}')
        return httpx.Response(200, content=b'{"ip":"198.51.100.7","type":"ipv4"}')

    options = make_options({
        ProbeName.IPV4_DNS: "https://first.test/ip/",
        ProbeName.ASN_V4: "https://second.test/ip/",
    })
    runner = Runner(options, transport=httpx.MockTransport(handler))
    run = await runner.run([ProbeName.IPV4_DNS, ProbeName.ASN_V4])

    assert [r.name for r in run.results] == [ProbeName.IPV4_DNS, ProbeName.ASN_V4]
    assert run.ipv4.ip == "192.0.2.1"


@pytest.mark.asyncio
async def test_empty_probe_list_runs_all_probes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=V4_BODY)

    options = make_options(default_endpoints("probe.test"))
    run = await Runner(options, transport=httpx.MockTransport(handler)).run([])

    assert tuple(r.name for r in run.results) == ALL_PROBES
    assert [r.sequence for r in run.results] == list(range(len(ALL_PROBES)))
    assert all(r.status == Status.OK for r in run.results)
    assert run.run_id.startswith("run-")


@pytest.mark.asyncio
async def test_overrides_apply_to_run() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=V4_BODY)

    options = make_options({ProbeName.IPV4_DNS: "https://ok.test/ip/"})
    runner = Runner(options, transport=httpx.MockTransport(handler))
    run = await runner.run(
        [ProbeName.IPV4_DNS],
        overrides=RunOverrides(timeout=2.5, slow_threshold=0, packet_size=1400),
    )

    assert run.timeout_ms == 2500
    assert run.slow_threshold_ms == 5000
    assert run.packet_size == 1400
    assert run.results[0].packet_size == 1400


@pytest.mark.asyncio
async def test_body_is_capped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=V4_BODY)

    options = make_options({ProbeName.IPV4_DNS: "https://ok.test/ip/"})
    runner = Runner(options, transport=httpx.MockTransport(handler), max_body_bytes=16)
    run = await runner.run([ProbeName.IPV4_DNS])

    assert run.results[0].status == Status.OK
    assert run.results[0].ip is None
    assert run.ipv4 is None


@pytest.mark.asyncio
async def test_unparseable_body_still_counts_as_ok() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    options = make_options({ProbeName.DUAL_STACK: "https://ok.test/ip/"})
    run = await Runner(options, transport=httpx.MockTransport(handler)).run([ProbeName.DUAL_STACK])

    assert run.results[0].status == Status.OK
    assert run.results[0].ip is None


PROXY_VARS = ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy")


@pytest.mark.asyncio
async def test_timeout_bounds_whole_exchange(monkeypatch) -> None:
    for var in PROXY_VARS:
        monkeypatch.delenv(var, raising=False)

    async def trickle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                     b"Content-Length: 12\r\n\r\n")
        try:
            await writer.drain()
            for _ in range(12):
                await asyncio.sleep(0.2)
                writer.write(b" ")
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(trickle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    options = make_options({ProbeName.IPV4_DNS: f"http://127.0.0.1:{port}/ip/"}, timeout=0.5)

    loop = asyncio.get_running_loop()
    started = loop.time()
    try:
        run = await Runner(options).run([ProbeName.IPV4_DNS])
    finally:
        server.close()
    elapsed = loop.time() - started

    result = run.results[0]
    assert result.status == Status.TIMEOUT
    assert result.error == "timed out after 0.5s"
    assert elapsed < 2.0


@pytest.mark.asyncio
async def test_undecodable_body_does_not_abort_run() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "inf.test":
            return httpx.Response(200, content=b'{"ip":"192.0.2.1","type":"ipv4","asn":Infinity}')
        if request.url.host == "deep.test":
            return httpx.Response(200, content=b"cb(" + b'{"a":' * 50000 + b"1" + b"}" * 50000)
        return httpx.Response(200, content=V6_BODY)

    options = make_options({
        ProbeName.IPV4_DNS: "https://inf.test/ip/",
        ProbeName.IPV6_DNS: "https://ok.test/ip/",
        ProbeName.DUAL_STACK: "https://deep.test/ip/",
    })
    runner = Runner(options, transport=httpx.MockTransport(handler))
    run = await runner.run([ProbeName.IPV4_DNS, ProbeName.IPV6_DNS, ProbeName.DUAL_STACK])
    results = by_name(run)

    assert all(r.status == Status.OK for r in run.results)
    assert results[ProbeName.IPV4_DNS].ip.asn is None
    assert results[ProbeName.DUAL_STACK].ip is None
    assert run.ipv4.ip == "192.0.2.1"
    assert run.ipv6.ip == "2600:db8::1"
