"""
ZeroGate — Automated Certification Engine

Turns a pipeline run into a binary production-deployment decision.
Six phases run in sequence:
  1. Pre-validation -- registry completeness, environment, dependencies
  2. Pipeline execution -- full seven-layer, fail-fast run
  3. Criteria evaluation -- zero-tolerance thresholds
  4. Failure analysis -- tier counts, frequency maps, blocking issues, risk
  5. Report assembly -- score, certified flag, recommendations
  6. Deployment decision -- authorization re-checked against the report

A pre-validation failure short-circuits into a synthesized failing report;
the pipeline is never run on that path. Every state transition is
appended to the engine's audit trail under the run's certification id.

Only orchestration defects raise (WorkflowError). certified=False is an
ordinary outcome.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from zerogate.config import CertificationConfig
from zerogate.errors import WorkflowError
from zerogate.primitives.common import Criticality, RiskLevel, new_id, utc_now
from zerogate.systems.certification.analysis import (
    analyze_failures,
    calculate_overall_score,
    evaluate_criteria,
    generate_recommendations,
)
from zerogate.systems.certification.audit import AuditTrail
from zerogate.systems.certification.environment import EnvironmentProbe, PreValidator
from zerogate.systems.certification.types import (
    ADVISORY_TRANSITIONS,
    WORKFLOW_TRANSITIONS,
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
from zerogate.systems.pipeline.types import DeploymentCertification, PipelineResult

if TYPE_CHECKING:
    from zerogate.systems.pipeline.pipeline import ValidationPipeline
    from zerogate.systems.registry.registry import VerificationRegistry

logger = structlog.get_logger().bind(system="zerogate.certification")

PRE_VALIDATION_FAILED = "PRE_VALIDATION_FAILED"


class _Run:
    """Run-scoped state: certification id, current state, legal transitions, bound logger."""

    def __init__(
        self,
        certification_id: str,
        transitions: Mapping[WorkflowState, frozenset[WorkflowState]],
        log: Any,
    ) -> None:
        self.certification_id = certification_id
        self.state = WorkflowState.CREATED
        self.transitions = transitions
        self.log = log


class CertificationEngine:
    """
    Enforces zero-tolerance quality standards for production deployment.

    Holds no state across runs except the append-only audit trail.
    """

    def __init__(
        self,
        pipeline: ValidationPipeline,
        registry: VerificationRegistry,
        config: CertificationConfig | None = None,
        *,
        probe: EnvironmentProbe | None = None,
        audit: AuditTrail | None = None,
        counters: QualityCounters | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._registry = registry
        self._config = config or CertificationConfig()
        self._criteria = CertificationCriteria(**self._config.criteria.model_dump())
        self._pre_validator = PreValidator(
            registry,
            probe,
            required_runtime_version=self._config.required_runtime_version,
            min_memory_mb=self._config.min_memory_mb,
            required_dependencies=self._config.required_dependencies,
        )
        self._audit = audit or AuditTrail()
        self._counters = counters
        self.engine_id = new_id()
        self._log = logger.bind(engine_id=self.engine_id)

        self._audit.record(
            "CERTIFICATION_ENGINE_INITIALIZED",
            engine_id=self.engine_id,
            criteria=self._criteria.model_dump(),
        )

    @property
    def registry(self) -> VerificationRegistry:
        return self._registry

    @property
    def audit_trail(self) -> AuditTrail:
        return self._audit

    @property
    def criteria(self) -> CertificationCriteria:
        return self._criteria

    def set_quality_counters(self, counters: QualityCounters | None) -> None:
        self._counters = counters

    # ─── Workflows ───────────────────────────────────────────────────

    async def execute_certification_workflow(self) -> CertificationReport:
        run = self._start_run("FULL_CERTIFICATION")
        run.log.info("certification_workflow_started", tolerance="zero_defect")

        try:
            # Phase 1
            self._transition(run, WorkflowState.PRE_VALIDATING)
            pre_validation = self._pre_validator.validate()
            if not pre_validation.passed:
                self._transition(run, WorkflowState.FAILED_PRE_VALIDATION)
                return await self._failed_pre_validation_report(run, pre_validation)

            # Phase 2
            self._transition(run, WorkflowState.PIPELINE_RUNNING)
            pipeline_result = await self._pipeline.execute_full_pipeline()

            # Phase 3
            self._transition(run, WorkflowState.EVALUATING)
            evaluation = evaluate_criteria(pipeline_result, self._criteria, self._counters)
            self._log_evaluation(run, evaluation)

            # Phase 4
            self._transition(run, WorkflowState.ANALYZING)
            analysis = analyze_failures(pipeline_result)

            # Phase 5
            self._transition(run, WorkflowState.REPORTING)
            report = await self._assemble_report(run, pipeline_result, evaluation, analysis)
            report.pre_validation = pre_validation

            # Phase 6
            self._transition(run, WorkflowState.DECIDING)
            report.deployment_authorization = self._decide(run, report)

            self._transition(run, WorkflowState.DONE)
            report.outcome = self._outcome(report)
            self._audit.record(
                "CERTIFICATION_WORKFLOW_COMPLETED",
                run_id=run.certification_id,
                certified=report.certified,
                deployment_authorized=report.deployment_authorization.authorized,
                overall_score=report.overall_score,
            )
            return self._finalize(run, report)

        except Exception as exc:
            self._audit.record(
                "CERTIFICATION_WORKFLOW_ERROR",
                run_id=run.certification_id,
                state=run.state.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            run.log.error(
                "certification_workflow_error",
                state=run.state.value,
                error=str(exc),
                exc_info=True,
            )
            if isinstance(exc, WorkflowError):
                raise
            raise WorkflowError(
                f"Certification workflow {run.certification_id} failed "
                f"in state {run.state.value}: {exc}"
            ) from exc

    async def execute_critical_path_certification(self) -> CertificationReport:
        """
        Advisory certification over CRITICAL verification points only.

        Reuses criteria evaluation, failure analysis and report assembly;
        never grants deployment authorization.
        """
        run = self._start_run("CRITICAL_PATH_CERTIFICATION", ADVISORY_TRANSITIONS)
        run.log.info("critical_path_certification_started")

        try:
            self._transition(run, WorkflowState.PIPELINE_RUNNING)
            pipeline_result = await self._pipeline.execute_critical_path()

            self._transition(run, WorkflowState.EVALUATING)
            evaluation = evaluate_criteria(pipeline_result, self._criteria, self._counters)
            self._log_evaluation(run, evaluation)

            self._transition(run, WorkflowState.ANALYZING)
            analysis = analyze_failures(pipeline_result)

            self._transition(run, WorkflowState.REPORTING)
            report = await self._assemble_report(run, pipeline_result, evaluation, analysis)

            self._transition(run, WorkflowState.DONE)
        except Exception as exc:
            self._audit.record(
                "CERTIFICATION_WORKFLOW_ERROR",
                run_id=run.certification_id,
                state=run.state.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            run.log.error(
                "critical_path_certification_error",
                state=run.state.value,
                error=str(exc),
                exc_info=True,
            )
            if isinstance(exc, WorkflowError):
                raise
            raise WorkflowError(
                f"Critical path certification {run.certification_id} failed: {exc}"
            ) from exc

        report.advisory = True
        report.outcome = CertificationOutcome.ADVISORY
        report.deployment_authorization.restrictions.append(
            "Critical path certification is advisory and does not authorize deployment"
        )
        self._audit.record(
            "CRITICAL_PATH_CERTIFICATION_COMPLETED",
            run_id=run.certification_id,
            certified=report.certified,
            overall_score=report.overall_score,
        )
        return self._finalize(run, report)

    # ─── Phases ──────────────────────────────────────────────────────

    async def _assemble_report(
        self,
        run: _Run,
        pipeline_result: PipelineResult,
        evaluation: CriteriaEvaluation,
        analysis: FailureAnalysis,
    ) -> CertificationReport:
        overall_score = calculate_overall_score(pipeline_result.certification.pass_rate, analysis)
        return CertificationReport(
            certification_id=run.certification_id,
            application_version=self._config.application_version,
            git_commit_hash=await self._git_commit_hash(),
            build_number=self._config.build_number,
            # certified implies a 100% pass rate, whatever the configured criteria
            certified=evaluation.passed and pipeline_result.certification.certified,
            overall_score=overall_score,
            criteria=self._criteria,
            criteria_evaluation=evaluation,
            pipeline_result=pipeline_result,
            failure_analysis=analysis,
            recommendations=generate_recommendations(analysis),
            deployment_authorization=DeploymentAuthorization(
                authorized=False,
                authorized_by=self._config.authorized_by,
                rollback_plan=self._config.rollback_plan,
                monitoring_requirements=list(self._config.monitoring_requirements),
                emergency_contacts=list(self._config.emergency_contacts),
            ),
        )

    def _decide(self, run: _Run, report: CertificationReport) -> DeploymentAuthorization:
        analysis = report.failure_analysis
        # Re-checks what certified already implies; kept as an independent gate
        authorized = (
            report.certified
            and report.overall_score >= 100
            and analysis.critical_failures == 0
            and analysis.high_priority_failures == 0
        )

        restrictions: list[str] = []
        if not authorized:
            restrictions.append("Deployment blocked due to quality gate failures")
            restrictions.append("All critical and high priority issues must be resolved")

        self._audit.record(
            "DEPLOYMENT_DECISION",
            actor=self._config.authorized_by,
            run_id=run.certification_id,
            authorized=authorized,
            score=report.overall_score,
            critical_failures=analysis.critical_failures,
            restrictions=restrictions,
        )

        return DeploymentAuthorization(
            authorized=authorized,
            authorized_by=self._config.authorized_by,
            restrictions=restrictions,
            rollback_plan=self._config.rollback_plan,
            monitoring_requirements=list(self._config.monitoring_requirements),
            emergency_contacts=list(self._config.emergency_contacts),
        )

    async def _failed_pre_validation_report(
        self,
        run: _Run,
        pre_validation: PreValidationResult,
    ) -> CertificationReport:
        self._audit.record(
            "CERTIFICATION_FAILED",
            run_id=run.certification_id,
            reason=PRE_VALIDATION_FAILED,
            issues=pre_validation.issues,
        )

        pipeline_result = PipelineResult(
            pipeline_id=PRE_VALIDATION_FAILED,
            overall_passed=False,
            executed=False,
            certification=DeploymentCertification(
                certified=False,
                verification_count=0,
                pass_rate=0.0,
                deployment_authorized=False,
                failed_verifications=(PRE_VALIDATION_FAILED,),
            ),
        )
        analysis = FailureAnalysis(
            total_failures=1,
            critical_failures=1,
            failures_by_category={PRE_VALIDATION_FAILED: 1},
            failures_by_layer={"PRE_VALIDATION": 1},
            blocking_issues=[
                BlockingIssue(
                    issue_id=PRE_VALIDATION_FAILED,
                    severity=Criticality.CRITICAL,
                    category="PRE_VALIDATION",
                    description=f"Pre-validation failed: {PRE_VALIDATION_FAILED}",
                    impact="Blocks certification process",
                    resolution="Fix pre-validation issues",
                    estimated_fix_time_min=60,
                )
            ],
            risk_assessment=RiskLevel.CRITICAL,
        )
        report = CertificationReport(
            certification_id=run.certification_id,
            application_version=self._config.application_version,
            git_commit_hash=await self._git_commit_hash(),
            build_number=self._config.build_number,
            certified=False,
            overall_score=0.0,
            criteria=self._criteria,
            criteria_evaluation=CriteriaEvaluation(
                passed=False, violations=list(pre_validation.issues)
            ),
            pipeline_result=pipeline_result,
            failure_analysis=analysis,
            recommendations=["Fix pre-validation issues before proceeding"],
            deployment_authorization=DeploymentAuthorization(
                authorized=False,
                authorized_by=self._config.authorized_by,
                restrictions=["Pre-validation failed"],
                rollback_plan="N/A - No deployment attempted",
            ),
            outcome=CertificationOutcome.FAILED_PRE_VALIDATION,
            pre_validation=pre_validation,
        )
        return self._finalize(run, report)

    # ─── Helpers ─────────────────────────────────────────────────────

    def _start_run(
        self,
        workflow_type: str,
        transitions: Mapping[WorkflowState, frozenset[WorkflowState]] = WORKFLOW_TRANSITIONS,
    ) -> _Run:
        certification_id = f"CERT_{new_id()}"
        run = _Run(
            certification_id,
            transitions,
            self._log.bind(certification_id=certification_id, workflow=workflow_type),
        )
        self._audit.record(
            "CERTIFICATION_WORKFLOW_STARTED",
            run_id=certification_id,
            workflow_type=workflow_type,
        )
        return run

    def _transition(self, run: _Run, target: WorkflowState) -> None:
        if target not in run.transitions[run.state]:
            raise WorkflowError(
                f"Illegal workflow transition {run.state.value} -> {target.value}"
            )
        previous = run.state
        run.state = target
        self._audit.record(
            f"STATE_{target.name}",
            run_id=run.certification_id,
            from_state=previous.value,
            to_state=target.value,
        )
        run.log.debug("workflow_transition", from_state=previous.value, to_state=target.value)

    def _finalize(self, run: _Run, report: CertificationReport) -> CertificationReport:
        report.workflow_state = run.state
        report.audit_trail = list(self._audit.entries(run.certification_id))
        self._log_report(run, report)
        return report

    @staticmethod
    def _outcome(report: CertificationReport) -> CertificationOutcome:
        if not report.certified:
            return CertificationOutcome.NOT_CERTIFIED
        if report.deployment_authorization.authorized:
            return CertificationOutcome.CERTIFIED_AUTHORIZED
        return CertificationOutcome.CERTIFIED_NOT_AUTHORIZED

    async def _git_commit_hash(self) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                "git", "rev-parse", "HEAD",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._config.repo_root,
            )
            try:
                stdout, _ = await asyncio.wait_for(
                    proc.communicate(), timeout=self._config.git_timeout_s,
                )
            except TimeoutError:
                proc.kill()
                await proc.communicate()
                self._log.warning("git_commit_hash_timeout")
                return "UNKNOWN"
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            self._log.debug("git_not_available")
            return "UNKNOWN"

        if proc.returncode != 0:
            return "UNKNOWN"
        return stdout.decode("utf-8", errors="replace").strip() or "UNKNOWN"

    def _log_evaluation(self, run: _Run, evaluation: CriteriaEvaluation) -> None:
        if evaluation.passed:
            run.log.info(
                "certification_criteria_met",
                counters_evaluated=evaluation.counters_evaluated,
            )
        else:
            run.log.error("certification_criteria_violated", violations=evaluation.violations)

    def _log_report(self, run: _Run, report: CertificationReport) -> None:
        analysis = report.failure_analysis
        run.log.info(
            "certification_results",
            timestamp=utc_now().isoformat(),
            version=report.application_version,
            build=report.build_number,
            commit=report.git_commit_hash[:8],
            overall_score=report.overall_score,
            certified=report.certified,
            authorized=report.deployment_authorization.authorized,
            outcome=report.outcome.value,
            total_failures=analysis.total_failures,
            critical_failures=analysis.critical_failures,
            high_priority_failures=analysis.high_priority_failures,
            risk=analysis.risk_assessment.value,
            recommendations=report.recommendations,
        )
        if not report.deployment_authorization.authorized:
            run.log.warning(
                "deployment_not_authorized",
                restrictions=report.deployment_authorization.restrictions,
            )
