"""
Unit tests for pre-certification validation.
"""

from __future__ import annotations

import pytest

from zerogate.primitives.common import Criticality, TestCategory, ValidationLayer
from zerogate.systems.certification import EnvironmentProbe, PreValidator, is_version_compatible
from zerogate.systems.certification.environment import parse_version
from zerogate.systems.registry import VerificationPointDefinition, VerificationRegistry


class FakeProbe(EnvironmentProbe):
    def __init__(
        self,
        version: str = "3.12.0",
        memory_mb: float = 8192.0,
        missing: tuple[str, ...] = (),
    ) -> None:
        self._version = version
        self._memory_mb = memory_mb
        self._missing = set(missing)

    def runtime_version(self) -> str:
        return self._version

    def available_memory_mb(self) -> float:
        return self._memory_mb

    def is_resolvable(self, module_name: str) -> bool:
        return module_name not in self._missing


def _make_registry(registered: int, target: int) -> VerificationRegistry:
    registry = VerificationRegistry(target_total=target)
    registry.register_many(
        VerificationPointDefinition(
            id=f"T_{i:03d}",
            category=TestCategory.FUNCTIONAL,
            criticality=Criticality.HIGH,
            layer=ValidationLayer.FUNCTIONALITY,
        )
        for i in range(registered)
    )
    return registry


class TestVersionCompare:
    @pytest.mark.parametrize(
        ("current", "required", "expected"),
        [
            ("3.11.0", "3.11.0", True),
            ("3.12.1", "3.11.0", True),
            ("3.10.9", "3.11.0", False),
            ("3.9.0", "3.11.0", False),
            ("v18.2.0", "18.0.0", True),
            ("3.13.0rc1", "3.11", True),
            ("4.0", "3.99.99", True),
        ],
    )
    def test_compatible(self, current, required, expected):
        assert is_version_compatible(current, required) is expected

    def test_parse_pads_missing_parts(self):
        assert parse_version("3") == (3, 0, 0)


class TestPreValidator:
    def test_all_checks_pass(self):
        validator = PreValidator(
            _make_registry(3, 3),
            FakeProbe(),
            required_dependencies=["pydantic"],
        )
        result = validator.validate()
        assert result.passed
        assert result.issues == []

    def test_incomplete_registry(self):
        validator = PreValidator(_make_registry(5, 10), FakeProbe())
        result = validator.validate()
        assert not result.passed
        assert result.issues == ["Incomplete test registry: 5/10 tests registered"]

    def test_old_runtime_and_low_memory(self):
        validator = PreValidator(
            _make_registry(1, 1),
            FakeProbe(version="3.9.7", memory_mb=256.0),
            required_runtime_version="3.11.0",
            min_memory_mb=1024,
        )
        issues = validator.check_environment()
        assert len(issues) == 2
        assert "3.9.7" in issues[0]
        assert issues[1].startswith("Insufficient memory")

    def test_missing_dependency(self):
        validator = PreValidator(
            _make_registry(1, 1),
            FakeProbe(missing=("playwright",)),
            required_dependencies=["pydantic", "playwright"],
        )
        assert validator.check_dependencies() == ["Critical dependency missing: playwright"]

    def test_issues_accumulate_across_checks(self):
        validator = PreValidator(
            _make_registry(0, 2),
            FakeProbe(version="2.7.18", missing=("yaml",)),
            required_dependencies=["yaml"],
        )
        assert len(validator.validate().issues) == 3


class TestEnvironmentProbe:
    def test_resolves_installed_module(self):
        probe = EnvironmentProbe()
        assert probe.is_resolvable("structlog")
        assert not probe.is_resolvable("zerogate_definitely_not_installed")

    def test_reports_runtime_and_memory(self):
        probe = EnvironmentProbe()
        assert is_version_compatible(probe.runtime_version(), "3.11.0")
        assert probe.available_memory_mb() > 0
