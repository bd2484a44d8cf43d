"""
Integration tests: registry -> pipeline -> certification engine, end to end.

Each scenario is wired through build_quality_gate with real components;
only the environment probe is substituted.
"""

from __future__ import annotations

import pytest

from zerogate.bootstrap import build_quality_gate
from zerogate.config import ZeroGateConfig
from zerogate.errors import RegistrySealedError
from zerogate.primitives.common import (
    Criticality,
    RiskLevel,
    TestCategory,
    ValidationLayer,
)
from zerogate.systems.certification import (
    CertificationOutcome,
    EnvironmentProbe,
    WorkflowState,
)
from zerogate.systems.pipeline import TestResult
from zerogate.systems.registry import VerificationPointDefinition


class FakeProbe(EnvironmentProbe):
    def runtime_version(self) -> str:
        return "3.12.0"

    def available_memory_mb(self) -> float:
        return 16384.0

    def is_resolvable(self, module_name: str) -> bool:
        return True


def _make_config(target_total: int) -> ZeroGateConfig:
    return ZeroGateConfig(
        registry={"target_total": target_total},
        pipeline={"max_concurrency": 4, "validator_timeout_s": 1.0},
        certification={"required_dependencies": []},
    )


def _make_definition(
    vid: str,
    layer: ValidationLayer = ValidationLayer.CODE_QUALITY,
    criticality: Criticality = Criticality.HIGH,
) -> VerificationPointDefinition:
    return VerificationPointDefinition(
        id=vid,
        category=TestCategory.FUNCTIONAL,
        criticality=criticality,
        layer=layer,
    )


def _passing():
    async def validator() -> TestResult:
        return TestResult(passed=True, verification_id="")

    return validator


def _raising():
    async def validator() -> TestResult:
        raise RuntimeError("element not found")

    return validator


class TestScenarios:
    @pytest.mark.asyncio
    async def test_all_pass_is_authorized(self):
        definitions = [_make_definition(f"CQ_{i}") for i in range(3)]
        gate = build_quality_gate(
            _make_config(3),
            definitions,
            {d.id: _passing() for d in definitions},
            probe=FakeProbe(),
        )
        report = await gate.engine.execute_certification_workflow()

        assert report.pipeline_result.overall_passed
        assert report.pipeline_result.certification.pass_rate == 100.0
        assert report.certified
        assert report.overall_score == 100.0
        assert report.deployment_authorization.authorized
        assert report.outcome == CertificationOutcome.CERTIFIED_AUTHORIZED
        assert report.exit_code == 0

    @pytest.mark.asyncio
    async def test_single_failure_blocks_deployment(self):
        definitions = [
            _make_definition("CQ_0"),
            _make_definition("CQ_1"),
            _make_definition("CQ_2"),
            _make_definition("FN_0", ValidationLayer.FUNCTIONALITY),
        ]
        validators = {
            "CQ_0": _passing(),
            "CQ_1": _raising(),
            "CQ_2": _passing(),
            "FN_0": _passing(),
        }
        gate = build_quality_gate(_make_config(4), definitions, validators, probe=FakeProbe())
        report = await gate.engine.execute_certification_workflow()

        layer = report.pipeline_result.layer_results[0]
        assert layer.failed_tests == 1
        assert not layer.passed
        # Fail-fast: the functionality layer is never attempted
        assert len(report.pipeline_result.layer_results) == 1
        assert report.pipeline_result.certification.pass_rate == pytest.approx(66.6667, abs=1e-3)
        assert not report.certified
        assert not report.deployment_authorization.authorized
        assert report.failure_analysis.total_failures == 1
        assert report.failure_analysis.high_priority_failures == 1
        assert report.pipeline_result.failed_results()[0].error_details == "element not found"
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_incomplete_registry_never_runs_pipeline(self):
        called: list[str] = []

        def tracked(vid: str):
            async def validator() -> TestResult:
                called.append(vid)
                return TestResult(passed=True, verification_id=vid)

            return validator

        definitions = [_make_definition(f"CQ_{i}") for i in range(5)]
        gate = build_quality_gate(
            _make_config(10),
            definitions,
            {d.id: tracked(d.id) for d in definitions},
            probe=FakeProbe(),
        )
        report = await gate.engine.execute_certification_workflow()

        assert called == []
        assert not report.certified
        assert report.overall_score == 0.0
        assert report.failure_analysis.risk_assessment == RiskLevel.CRITICAL
        assert report.workflow_state == WorkflowState.FAILED_PRE_VALIDATION
        assert report.pre_validation is not None
        assert report.pre_validation.issues == [
            "Incomplete test registry: 5/10 tests registered"
        ]

    @pytest.mark.asyncio
    async def test_critical_path_with_no_critical_points(self):
        definitions = [
            _make_definition("CQ_0", criticality=Criticality.HIGH),
            _make_definition("SEC_0", ValidationLayer.SECURITY, Criticality.MEDIUM),
        ]
        gate = build_quality_gate(
            _make_config(2),
            definitions,
            {d.id: _passing() for d in definitions},
            probe=FakeProbe(),
        )
        result = await gate.pipeline.execute_critical_path()

        assert result.layer_results == []
        assert result.overall_passed
        assert result.certification.pass_rate == 0.0
        assert not result.certification.certified


class TestBootstrap:
    def test_registry_sealed_after_build(self):
        gate = build_quality_gate(_make_config(1), [_make_definition("CQ_0")], probe=FakeProbe())
        assert gate.registry.is_sealed
        with pytest.raises(RegistrySealedError):
            gate.registry.register(_make_definition("CQ_1"))

    def test_unsealed_build(self):
        gate = build_quality_gate(_make_config(1), [], probe=FakeProbe(), seal=False)
        gate.registry.register(_make_definition("CQ_0"))
        assert len(gate.registry) == 1
        assert gate.pipeline.unbound() == ["CQ_0"]

    def test_components_share_registry(self):
        gate = build_quality_gate(_make_config(1), [_make_definition("CQ_0")], probe=FakeProbe())
        assert gate.engine.registry is gate.registry
        assert gate.pipeline.stats().total_tests == 1
