"""
ZeroGate — Verification Registry

Catalog of verification-point definitions. A pure in-memory store with
query and statistics operations; no execution happens here.

Seeding is done by an external bootstrap before any run. Once seeded the
registry can be sealed, after which it is read-only and safe to share
across concurrent certification runs.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator

import structlog

from zerogate.errors import RegistrySealedError
from zerogate.primitives.common import (
    Criticality,
    ImplementationStatus,
    TestCategory,
    ValidationLayer,
)
from zerogate.systems.registry.types import (
    ExecutionPhase,
    ExecutionPlan,
    ImplementationStatusSummary,
    RegistryStats,
    VerificationPointDefinition,
)

logger = structlog.get_logger().bind(system="zerogate.registry")

DEFAULT_TARGET_TOTAL = 2847

# Execution plan phases, most critical first
_PLAN_PHASES: tuple[tuple[Criticality, str], ...] = (
    (Criticality.CRITICAL, "Critical Path Validation"),
    (Criticality.HIGH, "High Priority Testing"),
    (Criticality.MEDIUM, "Medium Priority Validation"),
    (Criticality.LOW, "Low Priority Checks"),
)


class VerificationRegistry:
    """
    Registry of verification points keyed by id.

    Registration is an idempotent upsert: registering an existing id
    replaces the prior definition (last write wins).
    """

    def __init__(self, target_total: int = DEFAULT_TARGET_TOTAL) -> None:
        self._entries: dict[str, VerificationPointDefinition] = {}
        self._target_total = target_total
        self._sealed = False
        self._log = logger

    # ─── Registration ────────────────────────────────────────────────

    def register(self, definition: VerificationPointDefinition) -> None:
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register {definition.id!r}: registry is sealed"
            )
        if definition.id in self._entries:
            self._log.debug("verification_point_replaced", verification_id=definition.id)
        self._entries[definition.id] = definition

    def register_many(self, definitions: Iterable[VerificationPointDefinition]) -> int:
        count = 0
        for definition in definitions:
            self.register(definition)
            count += 1
        self._log.info("verification_points_registered", count=count, total=len(self))
        return count

    def seal(self) -> None:
        """End the initialization phase. Further registration raises."""
        self._sealed = True
        self._log.info("registry_sealed", total=len(self), target=self._target_total)

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    @property
    def target_total(self) -> int:
        return self._target_total

    # ─── Queries ─────────────────────────────────────────────────────

    def get(self, verification_id: str) -> VerificationPointDefinition | None:
        return self._entries.get(verification_id)

    def all(self) -> list[VerificationPointDefinition]:
        return list(self._entries.values())

    def by_layer(self, layer: ValidationLayer) -> list[VerificationPointDefinition]:
        return [d for d in self._entries.values() if d.layer == layer]

    def by_criticality(self, level: Criticality) -> list[VerificationPointDefinition]:
        return [d for d in self._entries.values() if d.criticality == level]

    def by_category(self, category: TestCategory) -> list[VerificationPointDefinition]:
        return [d for d in self._entries.values() if d.category == category]

    def by_tags(self, tags: Iterable[str]) -> list[VerificationPointDefinition]:
        """Definitions carrying at least one of the given tags."""
        wanted = set(tags)
        if not wanted:
            return []
        return [d for d in self._entries.values() if wanted.intersection(d.tags)]

    def critical_path(self) -> list[VerificationPointDefinition]:
        return self.by_criticality(Criticality.CRITICAL)

    # ─── Statistics ──────────────────────────────────────────────────

    def implementation_status(self) -> ImplementationStatusSummary:
        counts = Counter(d.implementation_status for d in self._entries.values())
        total = len(self._entries)
        implemented = counts[ImplementationStatus.IMPLEMENTED]
        return ImplementationStatusSummary(
            implemented=implemented,
            planned=counts[ImplementationStatus.PLANNED],
            in_progress=counts[ImplementationStatus.IN_PROGRESS],
            total=total,
            percentage=(implemented / total) * 100 if total else 0.0,
        )

    def stats(self) -> RegistryStats:
        entries = self._entries.values()
        by_category = {c: 0 for c in TestCategory}
        by_layer = {layer: 0 for layer in ValidationLayer}
        by_criticality = {level: 0 for level in Criticality}
        for d in entries:
            by_category[d.category] += 1
            by_layer[d.layer] += 1
            by_criticality[d.criticality] += 1

        total = len(self._entries)
        if self._target_total:
            progress = (total / self._target_total) * 100
        else:
            progress = 100.0

        return RegistryStats(
            total_registered=total,
            target_total=self._target_total,
            registration_progress=progress,
            implementation=self.implementation_status(),
            by_category=by_category,
            by_layer=by_layer,
            by_criticality=by_criticality,
        )

    def execution_plan(self) -> ExecutionPlan:
        """Group every definition into four phases by descending criticality."""
        phases: list[ExecutionPhase] = []
        for number, (level, name) in enumerate(_PLAN_PHASES, start=1):
            tests = self.by_criticality(level)
            phases.append(
                ExecutionPhase(
                    phase=number,
                    name=name,
                    criticality=level,
                    tests=tests,
                    estimated_duration_ms=sum(t.estimated_execution_time_ms for t in tests),
                )
            )
        return ExecutionPlan(
            phases=phases,
            total_duration_ms=sum(p.estimated_duration_ms for p in phases),
        )

    # ─── Container protocol ──────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, verification_id: object) -> bool:
        return verification_id in self._entries

    def __iter__(self) -> Iterator[VerificationPointDefinition]:
        return iter(list(self._entries.values()))
