"""
ZeroGate — Verification Registry Types

The catalog entry for a verification point plus the read-only summaries
the registry derives from the catalog (stats, execution plan).
"""

from __future__ import annotations

from pydantic import Field

from zerogate.primitives.common import (
    Criticality,
    ImplementationStatus,
    TestCategory,
    ValidationLayer,
    ZeroGateBaseModel,
)


class VerificationPointDefinition(ZeroGateBaseModel):
    """
    A single named, independently pass/fail check in the catalog.

    Frozen: a definition changes only by re-registering its id.
    """

    model_config = {"populate_by_name": True, "from_attributes": True, "frozen": True}

    id: str = Field(min_length=1)
    category: TestCategory
    subcategory: str = ""
    description: str = ""
    criticality: Criticality
    layer: ValidationLayer
    implementation_status: ImplementationStatus = ImplementationStatus.PLANNED
    dependencies: tuple[str, ...] = ()
    estimated_execution_time_ms: int = Field(default=0, ge=0)
    tags: tuple[str, ...] = ()


class ImplementationStatusSummary(ZeroGateBaseModel):
    implemented: int = 0
    planned: int = 0
    in_progress: int = 0
    total: int = 0
    percentage: float = 0.0


class RegistryStats(ZeroGateBaseModel):
    """Registration progress against the target catalog size."""

    total_registered: int = 0
    target_total: int = 0
    registration_progress: float = 0.0
    implementation: ImplementationStatusSummary = Field(
        default_factory=ImplementationStatusSummary
    )
    by_category: dict[TestCategory, int] = Field(default_factory=dict)
    by_layer: dict[ValidationLayer, int] = Field(default_factory=dict)
    by_criticality: dict[Criticality, int] = Field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return self.total_registered >= self.target_total


class ExecutionPhase(ZeroGateBaseModel):
    phase: int
    name: str
    criticality: Criticality
    tests: list[VerificationPointDefinition] = Field(default_factory=list)
    estimated_duration_ms: int = 0


class ExecutionPlan(ZeroGateBaseModel):
    """Criticality-ordered plan. Not used by the pipeline's layer ordering."""

    phases: list[ExecutionPhase] = Field(default_factory=list)
    total_duration_ms: int = 0
