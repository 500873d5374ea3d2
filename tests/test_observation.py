import pytest

from ipv6ready.probe import parse_observation


def test_plain_json() -> None:
    obs = parse_observation(b'{"ip":"192.0.2.1","type":"ipv4","asn":"64500","asn_name":"EX"}')

    assert obs.ip == "192.0.2.1"
    assert obs.type == "ipv4"
    assert obs.asn == 64500
    assert obs.asn_name == "EX"
    assert obs.subtype is None


def test_jsonp_wrapper() -> None:
    obs = parse_observation(b'callback({"ip":"2001:db8::1","type":"ipv6"});')

    assert obs.ip == "2001:db8::1"
    assert obs.type == "ipv6"


def test_family_inferred_from_address() -> None:
    assert parse_observation(b'{"ip":"2600:db8::1"}').type == "ipv6"
    assert parse_observation(b'{"ip":"198.51.100.4","type":"unknown"}').type == "ipv4"


def test_family_is_lowercased() -> None:
    assert parse_observation(b'{"ip":"192.0.2.1","type":"IPv4"}').type == "ipv4"


@pytest.mark.parametrize("address,subtype", [
    ("2001:0:4136:e378:8000:63bf:3fff:fdd2", "Teredo"),
    ("2002:c000:204::1", "6to4"),
])
def test_tunnel_subtype_inferred(address: str, subtype: str) -> None:
    body = ('{"ip":"%s","type":"ipv6"}' % address).encode()

    assert parse_observation(body).subtype == subtype


def test_reported_subtype_is_kept() -> None:
    obs = parse_observation(b'{"ip":"2002:c000:204::1","type":"ipv6","subtype":"teredo"}')

    assert obs.subtype == "teredo"


def test_type_only_observation_is_usable() -> None:
    obs = parse_observation(b'{"type":"ipv6"}')

    assert obs.ip == ""
    assert obs.usable


@pytest.mark.parametrize("body", [
    b"",
    b"not json at all",
    b"callback(nope);",
    b"[1, 2, 3]",
    b"{}",
    b'{"via":"proxy"}',
    b"\xff\xfe{garbage}",
    b"} backwards {",
    pytest.param(b"[" * 100000, id="deep-array"),
    pytest.param(b"cb(" + b'{"a":' * 50000 + b"1" + b"}" * 50000 + b");", id="deep-jsonp"),
    pytest.param(b'{"ip":' + b"[" * 100000, id="deep-unterminated"),
])
def test_unusable_bodies(body: bytes) -> None:
    assert parse_observation(body) is None


@pytest.mark.parametrize("asn", [b"Infinity", b"-Infinity", b"NaN", b"1e400", b'"12x"'])
def test_unrepresentable_asn_is_dropped(asn: bytes) -> None:
    obs = parse_observation(b'{"ip":"192.0.2.1","type":"ipv4","asn":' + asn + b"}")

    assert obs.ip == "192.0.2.1"
    assert obs.asn is None


def test_nested_address_value_is_ignored() -> None:
    obs = parse_observation(b'{"ip":[["192.0.2.1"]],"type":"ipv4"}')

    assert obs.ip == ""
    assert obs.type == "ipv4"
