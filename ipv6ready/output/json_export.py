"""
JSON export for ipv6ready
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..models import (
    Analysis, IpObservation, ProbeDefinition, ProbeName, ProbeResult, RunResult,
    Status, TokenDetail
)
from .. import __version__


def _prune(data: dict) -> dict:
    """Drop empty optional fields, like omitempty"""
    return {k: v for k, v in data.items() if v not in (None, '', 0)}


class JsonExporter:
    """
    Export runs and analyses to JSON.

    Key names follow the camelCase wire format of the readiness service
    (runId, startedAt, timeMs, ...).
    """

    def export(self, run: RunResult, analysis: Optional[Analysis] = None,
               output_path: Optional[Path] = None) -> dict:
        """
        Export a run (and optionally its analysis) to JSON.

        Args:
            run: Run result
            analysis: Diagnostic analysis
            output_path: Optional file path to write

        Returns:
            JSON-serializable dict
        """
        data = {
            "meta": {
                "version": __version__,
                "generator": "ipv6ready",
                "generated_at": datetime.now().isoformat()
            },
            **self.serialize_run(run)
        }
        if analysis is not None:
            data["analysis"] = self.serialize_analysis(analysis)

        if output_path:
            self._write_file(data, output_path)

        return data

    def serialize_run(self, run: RunResult) -> dict:
        data = {
            "runId": run.run_id,
            "startedAt": run.started_at.isoformat(),
            "durationMs": run.duration_ms,
            "results": [self._serialize_result(r) for r in run.results],
            "slowThresholdMs": run.slow_threshold_ms,
            "timeoutMs": run.timeout_ms,
            "packetSizeBytes": run.packet_size,
        }
        if run.ipv4:
            data["ipv4"] = self._serialize_ip(run.ipv4)
        if run.ipv6:
            data["ipv6"] = self._serialize_ip(run.ipv6)
        return data

    def serialize_analysis(self, analysis: Analysis) -> dict:
        return {
            "tokens": [self._serialize_token(t) for t in analysis.tokens],
            "scoreTransition": analysis.score_transition,
            "scoreStrict": analysis.score_strict,
            "miniPrimary": analysis.mini_primary,
            "miniSecondary": analysis.mini_secondary,
        }

    def serialize_catalog(self, definitions: list[ProbeDefinition]) -> dict:
        return {
            "tests": [
                {
                    "name": d.name.value,
                    "description": d.description,
                    "category": d.category,
                    "requiresIPv6": d.requires_ipv6,
                    "largePayload": d.large_payload,
                    "exampleURL": d.example_url,
                    **_prune({"packetSize": d.packet_size}),
                }
                for d in definitions
            ]
        }

    def _serialize_result(self, result: ProbeResult) -> dict:
        data = {
            "name": result.name.value,
            "status": result.status.value,
            "timeMs": result.time_ms,
            "url": result.url,
        }
        data.update(_prune({
            "packetSizeBytes": result.packet_size,
            "ip": self._serialize_ip(result.ip) if result.ip else None,
            "notes": result.notes,
            "httpStatusCode": result.http_status,
            "error": result.error,
        }))
        return data

    def _serialize_ip(self, obs: IpObservation) -> dict:
        return _prune({
            "ip": obs.ip,
            "type": obs.type,
            "subtype": obs.subtype,
            "via": obs.via,
            "asn": obs.asn,
            "asn_name": obs.asn_name,
        })

    def _serialize_token(self, detail: TokenDetail) -> dict:
        data = {
            "token": detail.token,
            "scoreTransition": detail.score_transition,
            "scoreStrict": detail.score_strict,
            "color": detail.color,
            "message": detail.message,
        }
        if detail.more_info:
            data["moreInfo"] = detail.more_info
        if detail.unknown:
            data["unknown"] = True
        return data

    def _write_file(self, data: dict, path: Path):
        """Write JSON to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


def _load_ip(data: Optional[dict]) -> Optional[IpObservation]:
    if not data:
        return None
    return IpObservation(
        ip=data.get('ip', ''),
        type=data.get('type', ''),
        subtype=data.get('subtype'),
        via=data.get('via'),
        asn=data.get('asn'),
        asn_name=data.get('asn_name')
    )


def load_run(data: dict[str, Any]) -> RunResult:
    """
    Rebuild a RunResult from its exported JSON form.

    Raises:
        KeyError / ValueError: if the document is not an exported run
    """
    results = []
    for seq, item in enumerate(data.get('results', [])):
        time_ms = item.get('timeMs', 0)
        status = Status(item['status'])
        results.append(ProbeResult(
            name=ProbeName(item['name']),
            status=status,
            sequence=seq,
            elapsed_ms=None if status == Status.SKIPPED else float(time_ms),
            url=item.get('url', ''),
            packet_size=item.get('packetSizeBytes', 0),
            http_status=item.get('httpStatusCode'),
            ip=_load_ip(item.get('ip')),
            error=item.get('error'),
            notes=item.get('notes')
        ))

    return RunResult(
        run_id=data['runId'],
        started_at=datetime.fromisoformat(data['startedAt']),
        duration_ms=data.get('durationMs', 0),
        ipv4=_load_ip(data.get('ipv4')),
        ipv6=_load_ip(data.get('ipv6')),
        results=tuple(results),
        timeout_ms=data.get('timeoutMs', 0),
        slow_threshold_ms=data.get('slowThresholdMs', 0),
        packet_size=data.get('packetSizeBytes', 0)
    )
