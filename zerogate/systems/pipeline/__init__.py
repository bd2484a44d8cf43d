"""
ZeroGate — Validation Pipeline

Seven fixed layers, zero-defect per layer, fail-fast across layers, with
a bounded, time-limited validator fan-out inside each layer.
"""

from zerogate.systems.pipeline.executor import ValidatorExecutor
from zerogate.systems.pipeline.pipeline import ValidationPipeline
from zerogate.systems.pipeline.types import (
    DeploymentCertification,
    LayerResult,
    PipelineResult,
    PipelineStats,
    TestResult,
    Validator,
    VerificationMetadata,
)

__all__ = [
    "DeploymentCertification",
    "LayerResult",
    "PipelineResult",
    "PipelineStats",
    "TestResult",
    "ValidationPipeline",
    "Validator",
    "ValidatorExecutor",
    "VerificationMetadata",
]
