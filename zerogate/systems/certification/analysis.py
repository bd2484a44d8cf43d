"""
ZeroGate — Criteria Evaluation & Failure Analysis

Pure functions over a PipelineResult:
  - evaluate_criteria: compare against the zero-tolerance criteria
  - analyze_failures: tier counts, frequency maps, blocking issues, risk
  - calculate_overall_score: pass rate minus weighted deductions
  - generate_recommendations: small deterministic rule set
"""

from __future__ import annotations

from collections import Counter

from zerogate.primitives.common import Criticality, RiskLevel
from zerogate.systems.certification.types import (
    BlockingIssue,
    CertificationCriteria,
    CriteriaEvaluation,
    FailureAnalysis,
    QualityCounters,
)
from zerogate.systems.pipeline.types import PipelineResult, TestResult

# Score deduction per failure, by criticality
SCORE_DEDUCTIONS: dict[Criticality, int] = {
    Criticality.CRITICAL: 10,
    Criticality.HIGH: 5,
    Criticality.MEDIUM: 2,
    Criticality.LOW: 1,
}

BLOCKING_IMPACT = "Blocks production deployment"
BLOCKING_RESOLUTION = "Fix critical issue and re-run validation"
BLOCKING_FIX_TIME_MIN = 120

_UNKNOWN = "UNKNOWN"


def count_failures_by_criticality(
    pipeline_result: PipelineResult,
    level: Criticality,
) -> int:
    return sum(1 for r in pipeline_result.failed_results() if r.metadata.criticality == level)


def evaluate_criteria(
    pipeline_result: PipelineResult,
    criteria: CertificationCriteria,
    counters: QualityCounters | None = None,
) -> CriteriaEvaluation:
    """
    Check every criterion and collect all violations.

    The counter-based criteria are only checked when counters are supplied.
    """
    violations: list[str] = []

    pass_rate = pipeline_result.certification.pass_rate
    if pass_rate < criteria.required_pass_rate:
        violations.append(
            f"Pass rate below threshold: {pass_rate:.2f}% < {criteria.required_pass_rate}%"
        )

    critical = count_failures_by_criticality(pipeline_result, Criticality.CRITICAL)
    if critical > criteria.max_critical_failures:
        violations.append(
            f"Critical failures exceed threshold: {critical} > {criteria.max_critical_failures}"
        )

    high = count_failures_by_criticality(pipeline_result, Criticality.HIGH)
    if high > criteria.max_high_failures:
        violations.append(
            f"High priority failures exceed threshold: {high} > {criteria.max_high_failures}"
        )

    if counters is not None:
        checks = (
            ("Console errors", counters.console_errors, criteria.max_console_errors),
            ("Console warnings", counters.console_warnings, criteria.max_console_warnings),
            (
                "Performance regressions",
                counters.performance_regressions,
                criteria.max_performance_regressions,
            ),
            (
                "Security vulnerabilities",
                counters.security_vulnerabilities,
                criteria.max_security_vulnerabilities,
            ),
            (
                "Accessibility violations",
                counters.accessibility_violations,
                criteria.max_accessibility_violations,
            ),
        )
        for label, observed, limit in checks:
            if observed > limit:
                violations.append(f"{label} exceed threshold: {observed} > {limit}")

    return CriteriaEvaluation(
        passed=not violations,
        violations=violations,
        counters_evaluated=counters is not None,
    )


def assess_risk(critical: int, high: int, medium: int) -> RiskLevel:
    if critical > 0:
        return RiskLevel.CRITICAL
    if high > 0:
        return RiskLevel.HIGH
    if medium > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.NONE


def identify_blocking_issues(failures: list[TestResult]) -> list[BlockingIssue]:
    """One BlockingIssue per CRITICAL failure, numbered by failure position."""
    issues: list[BlockingIssue] = []
    for index, failure in enumerate(failures, start=1):
        if failure.metadata.criticality != Criticality.CRITICAL:
            continue
        category = failure.metadata.category
        issues.append(
            BlockingIssue(
                issue_id=f"BLOCKING_{index}",
                severity=Criticality.CRITICAL,
                category=category.value if category is not None else _UNKNOWN,
                description=f"Critical test failure: {failure.verification_id}",
                impact=BLOCKING_IMPACT,
                resolution=BLOCKING_RESOLUTION,
                estimated_fix_time_min=BLOCKING_FIX_TIME_MIN,
            )
        )
    return issues


def analyze_failures(pipeline_result: PipelineResult) -> FailureAnalysis:
    failures = pipeline_result.failed_results()

    tiers = Counter(f.metadata.criticality for f in failures)
    by_category: Counter[str] = Counter()
    by_layer: Counter[str] = Counter()
    for failure in failures:
        category = failure.metadata.category
        layer = failure.metadata.layer
        by_category[category.value if category is not None else _UNKNOWN] += 1
        by_layer[layer.value if layer is not None else _UNKNOWN] += 1

    critical = tiers[Criticality.CRITICAL]
    high = tiers[Criticality.HIGH]
    medium = tiers[Criticality.MEDIUM]

    return FailureAnalysis(
        total_failures=len(failures),
        critical_failures=critical,
        high_priority_failures=high,
        medium_priority_failures=medium,
        low_priority_failures=tiers[Criticality.LOW],
        failures_by_category=dict(by_category),
        failures_by_layer=dict(by_layer),
        blocking_issues=identify_blocking_issues(failures),
        risk_assessment=assess_risk(critical, high, medium),
    )


def calculate_overall_score(pass_rate: float, analysis: FailureAnalysis) -> float:
    """Pass rate minus weighted deductions per failure, floored at zero."""
    deductions = (
        analysis.critical_failures * SCORE_DEDUCTIONS[Criticality.CRITICAL]
        + analysis.high_priority_failures * SCORE_DEDUCTIONS[Criticality.HIGH]
        + analysis.medium_priority_failures * SCORE_DEDUCTIONS[Criticality.MEDIUM]
        + analysis.low_priority_failures * SCORE_DEDUCTIONS[Criticality.LOW]
    )
    return max(0.0, pass_rate - deductions)


def generate_recommendations(analysis: FailureAnalysis) -> list[str]:
    recommendations: list[str] = []
    if analysis.critical_failures > 0:
        recommendations.append(
            f"URGENT: Fix {analysis.critical_failures} critical failures before deployment"
        )
    if analysis.high_priority_failures > 0:
        recommendations.append(
            f"Address {analysis.high_priority_failures} high priority issues"
        )
    if analysis.risk_assessment != RiskLevel.NONE:
        recommendations.append(
            f"Risk level: {analysis.risk_assessment.value} - Additional review required"
        )
    if analysis.total_failures == 0:
        recommendations.append("Excellent quality! Ready for production deployment")
    return recommendations
