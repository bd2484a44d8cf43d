"""
ZeroGate — Validation Pipeline Types

Per-test, per-layer and per-run results, plus the certification snapshot
derived from the attempted layers.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

from pydantic import Field

from zerogate.primitives.common import (
    Criticality,
    TestCategory,
    Timestamped,
    ValidationLayer,
    ZeroGateBaseModel,
    new_id,
    utc_now,
)


class VerificationMetadata(ZeroGateBaseModel):
    """Definition attributes copied onto each TestResult."""

    category: TestCategory | None = None
    subcategory: str = ""
    criticality: Criticality | None = None
    layer: ValidationLayer | None = None


class TestResult(Timestamped):
    """Outcome of one execution attempt of one verification point."""

    __test__ = False

    passed: bool
    verification_id: str
    execution_time_ms: int = 0
    error_details: str | None = None
    metadata: VerificationMetadata = Field(default_factory=VerificationMetadata)


# An async zero-argument check bound to one verification point. May raise.
Validator = Callable[[], Awaitable[TestResult]]


class LayerResult(ZeroGateBaseModel):
    layer: ValidationLayer
    layer_name: str
    passed: bool
    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    execution_time_ms: int = 0
    results: list[TestResult] = Field(default_factory=list)
    critical_failures: list[str] = Field(default_factory=list)

    @property
    def pass_rate(self) -> float:
        if self.total_tests == 0:
            return 0.0
        return (self.passed_tests / self.total_tests) * 100


class DeploymentCertification(Timestamped):
    """Immutable snapshot of what the attempted layers prove."""

    model_config = {"populate_by_name": True, "from_attributes": True, "frozen": True}

    certified: bool = False
    verification_count: int = 0
    pass_rate: float = 0.0
    deployment_authorized: bool = False
    failed_verifications: tuple[str, ...] = ()


class PipelineResult(ZeroGateBaseModel):
    pipeline_id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(default_factory=utc_now)
    overall_passed: bool = False
    total_layers: int = 0
    passed_layers: int = 0
    total_execution_time_ms: int = 0
    layer_results: list[LayerResult] = Field(default_factory=list)
    certification: DeploymentCertification = Field(default_factory=DeploymentCertification)
    executed: bool = True

    def failed_results(self) -> list[TestResult]:
        """Every failing TestResult across attempted layers, in layer order."""
        return [r for layer in self.layer_results for r in layer.results if not r.passed]


class PipelineStats(ZeroGateBaseModel):
    total_layers: int = 0
    layer_names: list[str] = Field(default_factory=list)
    estimated_execution_time_ms: int = 0
    total_tests: int = 0
    tests_by_layer: dict[ValidationLayer, int] = Field(default_factory=dict)
