"""
Simple JSON file store for completed runs
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional

from .models import RunResult
from .output.json_export import JsonExporter, load_run


logger = logging.getLogger(__name__)


class RunStore:
    """
    Simple JSON file store keyed by run id.

    Stores exported runs in ~/.ipv6ready/runs.json with TTL support.
    No database required - just a JSON file.
    """

    DEFAULT_PATH = Path.home() / '.ipv6ready' / 'runs.json'
    DEFAULT_TTL = 7 * 24 * 3600  # 7 days in seconds

    def __init__(self, path: Optional[Path] = None, ttl: Optional[int] = None):
        self.path = Path(path) if path else self.DEFAULT_PATH
        self.ttl = ttl or self.DEFAULT_TTL
        self._data: dict[str, dict] = {}
        self._dirty = False
        self._exporter = JsonExporter()
        self._load()

    def _load(self):
        """Load store from file"""
        if not self.path.exists():
            return
        try:
            content = self.path.read_text(encoding='utf-8')
            data = json.loads(content)
        except (ValueError, OSError, RecursionError) as e:
            logger.warning("Ignoring unreadable run store %s: %s", self.path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring run store %s: expected an object, got %s",
                           self.path, type(data).__name__)
            return

        self._data = {k: v for k, v in data.items() if isinstance(v, dict)}
        if len(self._data) != len(data):
            logger.warning("Dropped %d malformed run store entries",
                           len(data) - len(self._data))
            self._dirty = True
        self._cleanup_expired()

    def _save(self):
        """Save store to file"""
        if not self._dirty:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            content = json.dumps(self._data, indent=2, ensure_ascii=False)
            self.path.write_text(content, encoding='utf-8')
            self._dirty = False
        except OSError as e:
            logger.warning("Could not write run store %s: %s", self.path, e)

    def _cleanup_expired(self):
        """Remove expired entries"""
        expired = [
            run_id for run_id, entry in self._data.items()
            if not self._is_valid(entry)
        ]

        for run_id in expired:
            del self._data[run_id]

        if expired:
            logger.debug("Dropped %d expired run(s)", len(expired))
            self._dirty = True

    def _is_valid(self, entry: dict) -> bool:
        """Check if entry is still valid"""
        ts = entry.get('_ts', 0)
        if not isinstance(ts, (int, float)):
            return False
        return time.time() - ts < self.ttl

    def put(self, run: RunResult):
        """Store a run under its run id"""
        self._data[run.run_id] = {
            '_ts': time.time(),
            'run': self._exporter.serialize_run(run),
        }
        self._dirty = True

    def get(self, run_id: str) -> Optional[RunResult]:
        """
        Get a stored run.

        Args:
            run_id: Run identifier

        Returns:
            RunResult or None if not found/expired/unreadable
        """
        entry = self._data.get(run_id)
        if not entry or not self._is_valid(entry):
            return None
        try:
            return load_run(entry['run'])
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Stored run %s is malformed: %s", run_id, e)
            return None

    def run_ids(self) -> list[str]:
        """Valid run ids, oldest first"""
        valid = [(e.get('_ts', 0), rid) for rid, e in self._data.items() if self._is_valid(e)]
        return [rid for _, rid in sorted(valid)]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._save()
        return False
