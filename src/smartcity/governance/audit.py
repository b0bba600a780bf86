"""Append-only, hash-chained audit trail of complaint mutations.

Every entry is written as one JSONL line carrying the SHA-256 of the
previous entry's hash concatenated with its own event JSON. Editing or
removing a line breaks the chain for every entry after it.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from smartcity.core.config import AuditConfig
from smartcity.core.types import AuditEvent

_GENESIS = hashlib.sha256(b"smartcity-genesis").hexdigest()


class AuditEntry:
    """An AuditEvent plus its position in the hash chain."""

    def __init__(self, event: AuditEvent, previous_hash: str, entry_hash: str) -> None:
        self.event = event
        self.previous_hash = previous_hash
        self.entry_hash = entry_hash

    def to_dict(self) -> dict[str, Any]:
        return {
            "previous_hash": self.previous_hash,
            "entry_hash": self.entry_hash,
            "event": json.loads(self.event.model_dump_json()),
        }


def _chain_hash(previous_hash: str, event_json: str) -> str:
    return hashlib.sha256((previous_hash + event_json).encode("utf-8")).hexdigest()


class AuditLogger:
    """Writes complaint audit events to ``<log_dir>/<log_file>``."""

    def __init__(self, config: AuditConfig | None = None, log_file: str = "complaints.jsonl") -> None:
        self._config = config or AuditConfig()
        log_dir = Path(self._config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        self._log_path = log_dir / log_file
        self._last_hash = _GENESIS
        for data in self._read_lines():
            self._last_hash = data["entry_hash"]

    def _read_lines(self):
        if not self._log_path.exists():
            return
        with open(self._log_path) as fh:
            for line in fh:
                stripped = line.strip()
                if stripped:
                    yield json.loads(stripped)

    def record(
        self,
        actor: str,
        action: str,
        complaint_id: str,
        details: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """Convenience wrapper building the event for a complaint mutation."""
        return self.log(
            AuditEvent(
                actor=actor,
                action=action,
                resource=f"complaint:{complaint_id}",
                details=details or {},
            )
        )

    def log(self, event: AuditEvent) -> AuditEntry:
        event_json = event.model_dump_json()
        entry = AuditEntry(
            event=event,
            previous_hash=self._last_hash,
            entry_hash=_chain_hash(self._last_hash, event_json),
        )
        with open(self._log_path, "a") as fh:
            fh.write(json.dumps(entry.to_dict()) + "\n")
        self._last_hash = entry.entry_hash
        return entry

    def verify_chain(self) -> bool:
        """Recompute every hash; False as soon as one link does not match."""
        previous_hash = _GENESIS
        for data in self._read_lines():
            if data["previous_hash"] != previous_hash:
                return False
            event_json = AuditEvent(**data["event"]).model_dump_json()
            if data["entry_hash"] != _chain_hash(previous_hash, event_json):
                return False
            previous_hash = data["entry_hash"]
        return True

    def query(self, filters: dict[str, Any] | None = None) -> list[AuditEvent]:
        """Return events matching all given filters.

        Supported keys: ``actor``, ``action``, ``resource`` (exact match) and
        ``after`` (ISO datetime, exclusive).
        """
        filters = filters or {}
        after = None
        if "after" in filters:
            after = datetime.fromisoformat(filters["after"])
            if after.tzinfo is None:
                after = after.replace(tzinfo=timezone.utc)

        results: list[AuditEvent] = []
        for data in self._read_lines():
            event = AuditEvent(**data["event"])
            if any(
                key in filters and getattr(event, key) != filters[key]
                for key in ("actor", "action", "resource")
            ):
                continue
            if after and event.timestamp <= after:
                continue
            results.append(event)
        return results

    @property
    def log_path(self) -> Path:
        return self._log_path

    @property
    def last_hash(self) -> str:
        return self._last_hash
