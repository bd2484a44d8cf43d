"""
ZeroGate — Verification Registry

Catalog of independently pass/fail verification points, queryable by
layer, criticality, category and tag.
"""

from zerogate.systems.registry.registry import DEFAULT_TARGET_TOTAL, VerificationRegistry
from zerogate.systems.registry.types import (
    ExecutionPhase,
    ExecutionPlan,
    ImplementationStatusSummary,
    RegistryStats,
    VerificationPointDefinition,
)

__all__ = [
    "DEFAULT_TARGET_TOTAL",
    "ExecutionPhase",
    "ExecutionPlan",
    "ImplementationStatusSummary",
    "RegistryStats",
    "VerificationPointDefinition",
    "VerificationRegistry",
]
