"""
IP observation parsing for probe response bodies
"""

import json
from typing import Any, Optional

from ..enrichment.ip_classifier import IPClassifier, IPFamily
from ..models import IpObservation


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value) or None
    except (TypeError, ValueError, OverflowError):
        return None


def _decode(raw: bytes) -> Optional[IpObservation]:
    """Decode a JSON object into an observation, None if it has no ip/type"""
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None

    ip = _text(data.get('ip')) or ''
    family = (_text(data.get('type')) or '').lower()
    if not ip and not family:
        return None

    subtype = _text(data.get('subtype'))

    # Fill gaps from the address structure
    if ip and family in ('', IPFamily.UNKNOWN.value):
        detected = IPClassifier.family(ip)
        if detected != IPFamily.UNKNOWN:
            family = detected.value
    if ip and not subtype:
        subtype = IPClassifier.tunnel_subtype(ip)

    return IpObservation(
        ip=ip,
        type=family,
        subtype=subtype,
        via=_text(data.get('via')),
        asn=_int(data.get('asn')),
        asn_name=_text(data.get('asn_name'))
    )


def parse_observation(body: bytes) -> Optional[IpObservation]:
    """
    Extract an IP observation from a probe response body.

    Tries the body as plain JSON first, then the span between the first
    '{' and the last '}' so JSONP payloads like callback({...}); work too.

    Args:
        body: Raw (already size-capped) response body

    Returns:
        IpObservation or None if nothing usable was found
    """
    if not body:
        return None

    obs = _decode(body)
    if obs is not None:
        return obs

    start = body.find(b'{')
    if start < 0:
        return None
    end = body.rfind(b'}')
    if end <= start:
        return None

    return _decode(body[start:end + 1])
