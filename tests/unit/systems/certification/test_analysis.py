"""
Unit tests for criteria evaluation, failure analysis, scoring and recommendations.
"""

from __future__ import annotations

import pytest

from zerogate.primitives.common import (
    Criticality,
    RiskLevel,
    TestCategory,
    ValidationLayer,
)
from zerogate.systems.certification import (
    CertificationCriteria,
    FailureAnalysis,
    QualityCounters,
    analyze_failures,
    assess_risk,
    calculate_overall_score,
    evaluate_criteria,
    generate_recommendations,
)
from zerogate.systems.pipeline.types import (
    DeploymentCertification,
    LayerResult,
    PipelineResult,
    TestResult,
    VerificationMetadata,
)


def _make_result(
    vid: str,
    passed: bool,
    criticality: Criticality | None = Criticality.HIGH,
    category: TestCategory | None = TestCategory.FUNCTIONAL,
    layer: ValidationLayer | None = ValidationLayer.FUNCTIONALITY,
) -> TestResult:
    return TestResult(
        passed=passed,
        verification_id=vid,
        error_details=None if passed else "failed",
        metadata=VerificationMetadata(category=category, criticality=criticality, layer=layer),
    )


def _make_pipeline_result(results: list[TestResult], pass_rate: float | None = None) -> PipelineResult:
    passed = sum(1 for r in results if r.passed)
    if pass_rate is None:
        pass_rate = (passed / len(results)) * 100 if results else 0.0
    layer = LayerResult(
        layer=ValidationLayer.FUNCTIONALITY,
        layer_name=ValidationLayer.FUNCTIONALITY.display_name,
        passed=passed == len(results),
        total_tests=len(results),
        passed_tests=passed,
        failed_tests=len(results) - passed,
        results=results,
    )
    return PipelineResult(
        overall_passed=layer.passed,
        total_layers=7,
        passed_layers=1 if layer.passed else 0,
        layer_results=[layer],
        certification=DeploymentCertification(
            certified=layer.passed and pass_rate == 100.0,
            verification_count=len(results),
            pass_rate=pass_rate,
            deployment_authorized=layer.passed and pass_rate == 100.0,
        ),
    )


class TestEvaluateCriteria:
    def test_clean_run_passes(self):
        result = _make_pipeline_result([_make_result("A", True), _make_result("B", True)])
        evaluation = evaluate_criteria(result, CertificationCriteria())
        assert evaluation.passed
        assert evaluation.violations == []
        assert not evaluation.counters_evaluated

    def test_all_violations_collected(self):
        result = _make_pipeline_result([
            _make_result("A", True),
            _make_result("B", False, Criticality.CRITICAL),
            _make_result("C", False, Criticality.HIGH),
            _make_result("D", False, Criticality.LOW),
        ])
        evaluation = evaluate_criteria(result, CertificationCriteria())
        assert not evaluation.passed
        assert evaluation.violations == [
            "Pass rate below threshold: 25.00% < 100.0%",
            "Critical failures exceed threshold: 1 > 0",
            "High priority failures exceed threshold: 1 > 0",
        ]

    def test_relaxed_criteria(self):
        result = _make_pipeline_result([
            _make_result("A", True),
            _make_result("B", False, Criticality.HIGH),
        ])
        criteria = CertificationCriteria(required_pass_rate=50.0, max_high_failures=1)
        assert evaluate_criteria(result, criteria).passed

    def test_counters_checked_only_when_supplied(self):
        result = _make_pipeline_result([_make_result("A", True)])
        counters = QualityCounters(console_errors=2, accessibility_violations=1)

        evaluation = evaluate_criteria(result, CertificationCriteria(), counters)
        assert evaluation.counters_evaluated
        assert not evaluation.passed
        assert "Console errors exceed threshold: 2 > 0" in evaluation.violations
        assert "Accessibility violations exceed threshold: 1 > 0" in evaluation.violations
        assert len(evaluation.violations) == 2

    def test_zero_counters_pass(self):
        result = _make_pipeline_result([_make_result("A", True)])
        evaluation = evaluate_criteria(result, CertificationCriteria(), QualityCounters())
        assert evaluation.passed
        assert evaluation.counters_evaluated


class TestRiskAssessment:
    @pytest.mark.parametrize(
        ("critical", "high", "medium", "expected"),
        [
            (0, 0, 0, RiskLevel.NONE),
            (0, 0, 3, RiskLevel.MEDIUM),
            (0, 1, 3, RiskLevel.HIGH),
            (1, 0, 0, RiskLevel.CRITICAL),
            (2, 5, 9, RiskLevel.CRITICAL),
        ],
    )
    def test_precedence(self, critical, high, medium, expected):
        assert assess_risk(critical, high, medium) == expected

    def test_low_failures_alone_are_no_risk(self):
        result = _make_pipeline_result([_make_result("A", False, Criticality.LOW)])
        assert analyze_failures(result).risk_assessment == RiskLevel.NONE


class TestAnalyzeFailures:
    def test_tier_counts_and_frequency_maps(self):
        result = _make_pipeline_result([
            _make_result("OK", True),
            _make_result("C1", False, Criticality.CRITICAL, TestCategory.SECURITY, ValidationLayer.SECURITY),
            _make_result("H1", False, Criticality.HIGH),
            _make_result("M1", False, Criticality.MEDIUM),
            _make_result("L1", False, Criticality.LOW, category=None, layer=None),
        ])
        analysis = analyze_failures(result)

        assert analysis.total_failures == 4
        assert analysis.critical_failures == 1
        assert analysis.high_priority_failures == 1
        assert analysis.medium_priority_failures == 1
        assert analysis.low_priority_failures == 1
        assert analysis.failures_by_category == {
            "SECURITY": 1,
            "FUNCTIONAL": 2,
            "UNKNOWN": 1,
        }
        assert analysis.failures_by_layer == {
            "SECURITY": 1,
            "FUNCTIONALITY": 2,
            "UNKNOWN": 1,
        }
        assert analysis.risk_assessment == RiskLevel.CRITICAL

    def test_blocking_issue_per_critical_failure(self):
        result = _make_pipeline_result([
            _make_result("H1", False, Criticality.HIGH),
            _make_result("C1", False, Criticality.CRITICAL, TestCategory.SECURITY),
            _make_result("C2", False, Criticality.CRITICAL, category=None),
        ])
        issues = analyze_failures(result).blocking_issues

        assert [i.issue_id for i in issues] == ["BLOCKING_2", "BLOCKING_3"]
        assert issues[0].description == "Critical test failure: C1"
        assert issues[0].category == "SECURITY"
        assert issues[0].impact == "Blocks production deployment"
        assert issues[0].resolution == "Fix critical issue and re-run validation"
        assert issues[0].estimated_fix_time_min == 120
        assert issues[1].category == "UNKNOWN"

    def test_no_failures(self):
        analysis = analyze_failures(_make_pipeline_result([_make_result("A", True)]))
        assert analysis.total_failures == 0
        assert analysis.blocking_issues == []
        assert analysis.risk_assessment == RiskLevel.NONE


class TestScore:
    def test_perfect_score(self):
        assert calculate_overall_score(100.0, FailureAnalysis()) == 100.0

    def test_weighted_deductions(self):
        analysis = FailureAnalysis(
            critical_failures=1,
            high_priority_failures=2,
            medium_priority_failures=3,
            low_priority_failures=4,
        )
        # 10 + 10 + 6 + 4
        assert calculate_overall_score(90.0, analysis) == pytest.approx(60.0)

    def test_floored_at_zero(self):
        analysis = FailureAnalysis(critical_failures=20)
        assert calculate_overall_score(80.0, analysis) == 0.0

    def test_each_critical_failure_costs_ten(self):
        previous = calculate_overall_score(100.0, FailureAnalysis())
        for count in range(1, 6):
            score = calculate_overall_score(100.0, FailureAnalysis(critical_failures=count))
            assert score == pytest.approx(previous - 10)
            previous = score

    def test_score_never_increases_with_more_failures(self):
        base = FailureAnalysis(high_priority_failures=1)
        worse = FailureAnalysis(high_priority_failures=1, low_priority_failures=1)
        assert calculate_overall_score(95.0, worse) <= calculate_overall_score(95.0, base)


class TestRecommendations:
    def test_clean_run(self):
        assert generate_recommendations(FailureAnalysis()) == [
            "Excellent quality! Ready for production deployment",
        ]

    def test_critical_and_high(self):
        analysis = FailureAnalysis(
            total_failures=3,
            critical_failures=2,
            high_priority_failures=1,
            risk_assessment=RiskLevel.CRITICAL,
        )
        assert generate_recommendations(analysis) == [
            "URGENT: Fix 2 critical failures before deployment",
            "Address 1 high priority issues",
            "Risk level: CRITICAL - Additional review required",
        ]

    def test_low_only_failures_yield_no_recommendation(self):
        analysis = FailureAnalysis(total_failures=1, low_priority_failures=1)
        assert generate_recommendations(analysis) == []
