"""
ZeroGate — Certification

Pre-flight checks, criteria evaluation, failure analysis, scoring and the
binary deployment decision, with an append-only audit trail.
"""

from zerogate.systems.certification.analysis import (
    analyze_failures,
    assess_risk,
    calculate_overall_score,
    evaluate_criteria,
    generate_recommendations,
)
from zerogate.systems.certification.audit import AuditTrail
from zerogate.systems.certification.engine import PRE_VALIDATION_FAILED, CertificationEngine
from zerogate.systems.certification.environment import (
    EnvironmentProbe,
    PreValidator,
    is_version_compatible,
)
from zerogate.systems.certification.types import (
    ADVISORY_TRANSITIONS,
    WORKFLOW_TRANSITIONS,
    AuditEntry,
    BlockingIssue,
    CertificationCriteria,
    CertificationOutcome,
    CertificationReport,
    CriteriaEvaluation,
    DeploymentAuthorization,
    FailureAnalysis,
    PreValidationResult,
    QualityCounters,
    WorkflowState,
)

__all__ = [
    "ADVISORY_TRANSITIONS",
    "PRE_VALIDATION_FAILED",
    "WORKFLOW_TRANSITIONS",
    "AuditEntry",
    "AuditTrail",
    "BlockingIssue",
    "CertificationCriteria",
    "CertificationEngine",
    "CertificationOutcome",
    "CertificationReport",
    "CriteriaEvaluation",
    "DeploymentAuthorization",
    "EnvironmentProbe",
    "FailureAnalysis",
    "PreValidationResult",
    "PreValidator",
    "QualityCounters",
    "WorkflowState",
    "analyze_failures",
    "assess_risk",
    "calculate_overall_score",
    "evaluate_criteria",
    "generate_recommendations",
    "is_version_compatible",
]
