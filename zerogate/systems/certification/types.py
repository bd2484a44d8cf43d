"""
ZeroGate — Certification Types

Criteria, failure analysis, the deployment decision, audit entries and
the certification report that bundles them. Everything here is produced
once per workflow run; AuditEntry is append-only.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import Field

from zerogate.config import CriteriaConfig
from zerogate.primitives.common import (
    Criticality,
    RiskLevel,
    Timestamped,
    ZeroGateBaseModel,
    new_id,
    utc_now,
)
from zerogate.systems.pipeline.types import PipelineResult


class WorkflowState(enum.StrEnum):
    """Lifecycle of one certification run."""

    CREATED = "created"
    PRE_VALIDATING = "pre_validating"
    FAILED_PRE_VALIDATION = "failed_pre_validation"  # terminal
    PIPELINE_RUNNING = "pipeline_running"
    EVALUATING = "evaluating"
    ANALYZING = "analyzing"
    REPORTING = "reporting"
    DECIDING = "deciding"
    DONE = "done"  # terminal


# Legal transitions; anything else is an orchestration defect
WORKFLOW_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.CREATED: frozenset({WorkflowState.PRE_VALIDATING}),
    WorkflowState.PRE_VALIDATING: frozenset(
        {WorkflowState.FAILED_PRE_VALIDATION, WorkflowState.PIPELINE_RUNNING}
    ),
    WorkflowState.FAILED_PRE_VALIDATION: frozenset(),
    WorkflowState.PIPELINE_RUNNING: frozenset({WorkflowState.EVALUATING}),
    WorkflowState.EVALUATING: frozenset({WorkflowState.ANALYZING}),
    WorkflowState.ANALYZING: frozenset({WorkflowState.REPORTING}),
    WorkflowState.REPORTING: frozenset({WorkflowState.DECIDING}),
    WorkflowState.DECIDING: frozenset({WorkflowState.DONE}),
    WorkflowState.DONE: frozenset(),
}

# Critical-path runs: no pre-validation and no deployment decision
ADVISORY_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.CREATED: frozenset({WorkflowState.PIPELINE_RUNNING}),
    WorkflowState.PIPELINE_RUNNING: frozenset({WorkflowState.EVALUATING}),
    WorkflowState.EVALUATING: frozenset({WorkflowState.ANALYZING}),
    WorkflowState.ANALYZING: frozenset({WorkflowState.REPORTING}),
    WorkflowState.REPORTING: frozenset({WorkflowState.DONE}),
    WorkflowState.DONE: frozenset(),
}


class CertificationOutcome(enum.StrEnum):
    CERTIFIED_AUTHORIZED = "certified_authorized"
    # Structurally possible; unreachable while criteria stay zero-tolerance
    CERTIFIED_NOT_AUTHORIZED = "certified_not_authorized"
    NOT_CERTIFIED = "not_certified"
    FAILED_PRE_VALIDATION = "failed_pre_validation"
    ADVISORY = "advisory"


class CertificationCriteria(CriteriaConfig):
    """The zero-tolerance criteria a run is judged against."""

    model_config = {"frozen": True}


class QualityCounters(ZeroGateBaseModel):
    """
    Counters collected outside the pipeline (browser console, perf
    baselines, scanners). Supplied by an external collaborator; when
    absent, the matching criteria are declared but not evaluated.
    """

    console_errors: int = 0
    console_warnings: int = 0
    performance_regressions: int = 0
    security_vulnerabilities: int = 0
    accessibility_violations: int = 0


class CriteriaEvaluation(ZeroGateBaseModel):
    passed: bool = True
    violations: list[str] = Field(default_factory=list)
    counters_evaluated: bool = False


class PreValidationResult(ZeroGateBaseModel):
    passed: bool = True
    issues: list[str] = Field(default_factory=list)


class BlockingIssue(ZeroGateBaseModel):
    issue_id: str
    severity: Criticality = Criticality.CRITICAL
    category: str = "UNKNOWN"
    description: str = ""
    impact: str = ""
    resolution: str = ""
    estimated_fix_time_min: int = 0


class FailureAnalysis(ZeroGateBaseModel):
    total_failures: int = 0
    critical_failures: int = 0
    high_priority_failures: int = 0
    medium_priority_failures: int = 0
    low_priority_failures: int = 0
    failures_by_category: dict[str, int] = Field(default_factory=dict)
    failures_by_layer: dict[str, int] = Field(default_factory=dict)
    blocking_issues: list[BlockingIssue] = Field(default_factory=list)
    risk_assessment: RiskLevel = RiskLevel.NONE


class DeploymentAuthorization(ZeroGateBaseModel):
    authorized: bool = False
    authorized_by: str = "AUTOMATED_CERTIFICATION_ENGINE"
    authorization_timestamp: datetime = Field(default_factory=utc_now)
    restrictions: list[str] = Field(default_factory=list)
    rollback_plan: str = ""
    monitoring_requirements: list[str] = Field(default_factory=list)
    emergency_contacts: list[str] = Field(default_factory=list)


class AuditEntry(Timestamped):
    """One immutable line in the audit trail."""

    model_config = {"frozen": True}

    action: str
    actor: str = "SYSTEM"
    details: dict[str, Any] = Field(default_factory=dict)
    run_id: str | None = None


class CertificationReport(Timestamped):
    """
    The sole output artifact of a certification run.

    Callers must treat certified=False as an expected outcome, not an error.
    """

    certification_id: str = Field(default_factory=new_id)
    application_version: str = ""
    git_commit_hash: str = "UNKNOWN"
    build_number: str = "LOCAL"
    certified: bool = False
    overall_score: float = 0.0
    criteria: CertificationCriteria = Field(default_factory=CertificationCriteria)
    criteria_evaluation: CriteriaEvaluation = Field(default_factory=CriteriaEvaluation)
    pipeline_result: PipelineResult = Field(default_factory=PipelineResult)
    failure_analysis: FailureAnalysis = Field(default_factory=FailureAnalysis)
    recommendations: list[str] = Field(default_factory=list)
    deployment_authorization: DeploymentAuthorization = Field(
        default_factory=DeploymentAuthorization
    )
    audit_trail: list[AuditEntry] = Field(default_factory=list)
    workflow_state: WorkflowState = WorkflowState.CREATED
    outcome: CertificationOutcome = CertificationOutcome.NOT_CERTIFIED
    advisory: bool = False
    pre_validation: PreValidationResult | None = None

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = deployment authorized, 1 = blocked."""
        return 0 if self.deployment_authorization.authorized else 1
