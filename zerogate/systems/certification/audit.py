"""
ZeroGate — Certification Audit Trail

Append-only, in-memory action log owned by one certification engine
instance. Entries are never mutated or removed. Each entry carries the
run id of the workflow that produced it so interleaved concurrent runs
on one engine can be told apart.
"""

from __future__ import annotations

from typing import Any

import structlog

from zerogate.systems.certification.types import AuditEntry

logger = structlog.get_logger().bind(system="zerogate.certification.audit")


class AuditTrail:
    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    def record(
        self,
        action: str,
        *,
        actor: str = "SYSTEM",
        run_id: str | None = None,
        **details: Any,
    ) -> AuditEntry:
        entry = AuditEntry(action=action, actor=actor, details=details, run_id=run_id)
        self._entries.append(entry)
        logger.debug("audit_recorded", action=action, actor=actor, run_id=run_id)
        return entry

    def entries(self, run_id: str | None = None) -> tuple[AuditEntry, ...]:
        """Snapshot of the trail, optionally limited to one run."""
        if run_id is None:
            return tuple(self._entries)
        return tuple(e for e in self._entries if e.run_id == run_id)

    def actions(self, run_id: str | None = None) -> list[str]:
        return [e.action for e in self.entries(run_id)]

    def __len__(self) -> int:
        return len(self._entries)
