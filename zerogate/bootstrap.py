"""
ZeroGate — Composition Root

Builds the registry → pipeline → certification engine chain from
configuration. Each call returns fresh instances; nothing is shared at
module level.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import NamedTuple

import structlog

from zerogate.config import ZeroGateConfig
from zerogate.systems.certification.audit import AuditTrail
from zerogate.systems.certification.engine import CertificationEngine
from zerogate.systems.certification.environment import EnvironmentProbe
from zerogate.systems.certification.types import QualityCounters
from zerogate.systems.pipeline.executor import ValidatorExecutor
from zerogate.systems.pipeline.pipeline import ValidationPipeline
from zerogate.systems.pipeline.types import Validator
from zerogate.systems.registry.registry import VerificationRegistry
from zerogate.systems.registry.types import VerificationPointDefinition
from zerogate.telemetry.logging import setup_logging

logger = structlog.get_logger().bind(system="zerogate.bootstrap")


class QualityGate(NamedTuple):
    registry: VerificationRegistry
    pipeline: ValidationPipeline
    engine: CertificationEngine


def build_quality_gate(
    config: ZeroGateConfig,
    definitions: Iterable[VerificationPointDefinition] = (),
    validators: Mapping[str, Validator] | None = None,
    *,
    probe: EnvironmentProbe | None = None,
    audit: AuditTrail | None = None,
    counters: QualityCounters | None = None,
    seal: bool = True,
    configure_logging: bool = False,
    run_label: str = "",
) -> QualityGate:
    """
    Seed a registry, bind validators and wire the certification engine.

    With seal=True the registry is closed for registration before it is
    handed to the pipeline. With configure_logging=True the process-wide
    structlog setup is applied from config.logging first; embedders that
    own logging leave it off.
    """
    if configure_logging:
        setup_logging(config.logging, run_label=run_label)

    registry = VerificationRegistry(target_total=config.registry.target_total)
    registry.register_many(definitions)
    if seal:
        registry.seal()

    executor = ValidatorExecutor(
        max_concurrency=config.pipeline.max_concurrency,
        timeout_s=config.pipeline.validator_timeout_s,
    )
    pipeline = ValidationPipeline(registry, validators, executor)

    unbound = pipeline.unbound()
    if unbound:
        logger.warning("verification_points_without_validator", count=len(unbound))

    engine = CertificationEngine(
        pipeline,
        registry,
        config.certification,
        probe=probe,
        audit=audit,
        counters=counters,
    )
    return QualityGate(registry=registry, pipeline=pipeline, engine=engine)
