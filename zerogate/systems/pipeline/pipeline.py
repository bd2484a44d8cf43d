"""
ZeroGate — Seven-Layer Validation Pipeline

Runs registered verification points layer by layer:

  CODE_QUALITY → FUNCTIONALITY → PERFORMANCE → SECURITY →
  ACCESSIBILITY → CROSS_BROWSER → USER_EXPERIENCE

Within a layer every validator runs concurrently (bounded by the
executor). A layer passes only with zero failed tests. The first failed
layer stops the run; later layers are never attempted and never appear
in the result.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence

import structlog

from zerogate.primitives.common import LAYER_ORDER, Criticality, ValidationLayer, new_id
from zerogate.systems.pipeline.executor import ValidatorExecutor
from zerogate.systems.pipeline.types import (
    DeploymentCertification,
    LayerResult,
    PipelineResult,
    PipelineStats,
    Validator,
)
from zerogate.systems.registry.registry import VerificationRegistry
from zerogate.systems.registry.types import VerificationPointDefinition

logger = structlog.get_logger().bind(system="zerogate.pipeline")


class ValidationPipeline:
    """
    Fail-fast, zero-defect executor of the seven validation layers.

    Holds only run-scoped state; the registry and validator bindings are
    read during a run and never mutated by it.
    """

    def __init__(
        self,
        registry: VerificationRegistry,
        validators: Mapping[str, Validator] | None = None,
        executor: ValidatorExecutor | None = None,
    ) -> None:
        self._registry = registry
        self._validators: dict[str, Validator] = dict(validators or {})
        self._executor = executor or ValidatorExecutor()
        self._layers: tuple[ValidationLayer, ...] = LAYER_ORDER
        self._log = logger

    # ─── Validator binding ───────────────────────────────────────────

    def bind(self, verification_id: str, validator: Validator) -> None:
        self._validators[verification_id] = validator

    def bind_many(self, validators: Mapping[str, Validator]) -> None:
        self._validators.update(validators)

    def unbound(self) -> list[str]:
        """Registered ids without a validator. Each will fail when executed."""
        return [d.id for d in self._registry if d.id not in self._validators]

    @property
    def layers(self) -> tuple[ValidationLayer, ...]:
        return self._layers

    # ─── Execution ───────────────────────────────────────────────────

    async def execute_full_pipeline(self) -> PipelineResult:
        start = time.monotonic()
        pipeline_id = f"PIPELINE_{new_id()}"
        log = self._log.bind(pipeline_id=pipeline_id)
        log.info("pipeline_started", layers=len(self._layers), tolerance="zero_defect")

        layer_results: list[LayerResult] = []
        for layer in self._layers:
            result = await self.execute_layer(layer)
            layer_results.append(result)
            if not result.passed:
                log.error(
                    "pipeline_failed_at_layer",
                    layer=layer.value,
                    failed_tests=result.failed_tests,
                    total_tests=result.total_tests,
                    critical_failures=result.critical_failures,
                )
                break
            log.info(
                "pipeline_layer_passed",
                layer=layer.value,
                passed_tests=result.passed_tests,
                total_tests=result.total_tests,
            )

        pipeline_result = self._build_result(
            pipeline_id=pipeline_id,
            layer_results=layer_results,
            total_layers=len(self._layers),
            start=start,
        )
        self._log_pipeline_result(pipeline_result)
        return pipeline_result

    async def execute_layer(self, layer: ValidationLayer) -> LayerResult:
        """Run every definition of one layer; passed iff nothing failed."""
        definitions = self._registry.by_layer(layer)
        return await self._run_layer(layer, definitions, critical_only=False)

    async def execute_specific_layer(self, layer: ValidationLayer) -> LayerResult:
        """Targeted re-run of one layer, independent of fail-fast."""
        self._log.info("specific_layer_requested", layer=layer.value)
        return await self.execute_layer(layer)

    async def execute_critical_path(self) -> PipelineResult:
        """
        Fail-fast run over CRITICAL definitions only.

        Layers without CRITICAL definitions are skipped entirely. Advisory:
        this is a fast pre-check, not a deployment gate.
        """
        start = time.monotonic()
        pipeline_id = f"CRITICAL_PIPELINE_{new_id()}"
        log = self._log.bind(pipeline_id=pipeline_id)
        log.info("critical_path_started")

        layer_results: list[LayerResult] = []
        for layer in self._layers:
            critical = [
                d for d in self._registry.by_layer(layer)
                if d.criticality == Criticality.CRITICAL
            ]
            if not critical:
                continue
            result = await self._run_layer(layer, critical, critical_only=True)
            layer_results.append(result)
            if not result.passed:
                log.error("critical_path_failed_at_layer", layer=layer.value)
                break

        return self._build_result(
            pipeline_id=pipeline_id,
            layer_results=layer_results,
            total_layers=len(layer_results),
            start=start,
        )

    async def _run_layer(
        self,
        layer: ValidationLayer,
        definitions: Sequence[VerificationPointDefinition],
        *,
        critical_only: bool,
    ) -> LayerResult:
        start = time.monotonic()
        self._log.debug(
            "layer_queued",
            layer=layer.value,
            tests=len(definitions),
            critical_only=critical_only,
        )

        results = await self._executor.run_batch(definitions, self._validators)

        critical_failures = [
            d.id
            for d, r in zip(definitions, results)
            if not r.passed and (critical_only or d.criticality == Criticality.CRITICAL)
        ]
        passed_tests = sum(1 for r in results if r.passed)
        failed_tests = len(results) - passed_tests

        return LayerResult(
            layer=layer,
            layer_name=layer.display_name,
            passed=failed_tests == 0,
            total_tests=len(definitions),
            passed_tests=passed_tests,
            failed_tests=failed_tests,
            execution_time_ms=int((time.monotonic() - start) * 1000),
            results=results,
            critical_failures=critical_failures,
        )

    # ─── Certification ───────────────────────────────────────────────

    def derive_certification(
        self,
        layer_results: Sequence[LayerResult],
        overall_passed: bool,
    ) -> DeploymentCertification:
        total_tests = sum(r.total_tests for r in layer_results)
        total_passed = sum(r.passed_tests for r in layer_results)
        pass_rate = (total_passed / total_tests) * 100 if total_tests > 0 else 0.0

        failed_verifications = [fid for r in layer_results for fid in r.critical_failures]
        failed_verifications.extend(
            f"LAYER_{r.layer.value}_FAILED" for r in layer_results if not r.passed
        )

        certified = overall_passed and pass_rate == 100.0
        return DeploymentCertification(
            certified=certified,
            verification_count=total_tests,
            pass_rate=pass_rate,
            deployment_authorized=certified,
            failed_verifications=tuple(failed_verifications),
        )

    def _build_result(
        self,
        *,
        pipeline_id: str,
        layer_results: list[LayerResult],
        total_layers: int,
        start: float,
    ) -> PipelineResult:
        overall_passed = all(r.passed for r in layer_results)
        return PipelineResult(
            pipeline_id=pipeline_id,
            overall_passed=overall_passed,
            total_layers=total_layers,
            passed_layers=sum(1 for r in layer_results if r.passed),
            total_execution_time_ms=int((time.monotonic() - start) * 1000),
            layer_results=layer_results,
            certification=self.derive_certification(layer_results, overall_passed),
        )

    # ─── Introspection ───────────────────────────────────────────────

    def stats(self) -> PipelineStats:
        tests_by_layer: dict[ValidationLayer, int] = {}
        estimated = 0
        for layer in self._layers:
            definitions = self._registry.by_layer(layer)
            tests_by_layer[layer] = len(definitions)
            estimated += sum(d.estimated_execution_time_ms for d in definitions)
        return PipelineStats(
            total_layers=len(self._layers),
            layer_names=[layer.display_name for layer in self._layers],
            estimated_execution_time_ms=estimated,
            total_tests=sum(tests_by_layer.values()),
            tests_by_layer=tests_by_layer,
        )

    def _log_pipeline_result(self, result: PipelineResult) -> None:
        cert = result.certification
        self._log.info(
            "pipeline_complete",
            pipeline_id=result.pipeline_id,
            overall_passed=result.overall_passed,
            passed_layers=result.passed_layers,
            total_layers=result.total_layers,
            pass_rate=round(cert.pass_rate, 2),
            certified=cert.certified,
            execution_time_ms=result.total_execution_time_ms,
        )
        if not cert.certified:
            self._log.error(
                "deployment_blocked",
                pipeline_id=result.pipeline_id,
                failed_verifications=len(cert.failed_verifications),
                pass_rate=round(cert.pass_rate, 2),
                required_pass_rate=100.0,
            )
