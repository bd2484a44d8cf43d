"""
ZeroGate — Pre-Certification Validation

Checks that must hold before running the pipeline is meaningful:
  1. Registry completeness -- registered count >= target total
  2. Environment readiness -- runtime version and available memory
  3. Dependency presence   -- required modules resolvable

Environment signals are read through an EnvironmentProbe so they can be
substituted in tests and in non-standard runtimes. Failures are returned
as issue strings, never raised.
"""

from __future__ import annotations

import importlib.util
import platform
from collections.abc import Sequence

import psutil
import structlog

from zerogate.systems.certification.types import PreValidationResult
from zerogate.systems.registry.registry import VerificationRegistry

logger = structlog.get_logger().bind(system="zerogate.certification.pre_validation")

_BYTES_PER_MB = 1024 * 1024


def parse_version(version: str) -> tuple[int, int, int]:
    """'v3.11.4' / '3.12' / '3.13.0rc1' -> (major, minor, patch)."""
    parts: list[int] = []
    for raw in version.strip().lstrip("vV").split(".")[:3]:
        digits = ""
        for ch in raw:
            if not ch.isdigit():
                break
            digits += ch
        parts.append(int(digits) if digits else 0)
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def is_version_compatible(current: str, required: str) -> bool:
    """True when current >= required, comparing major.minor.patch numerically."""
    return parse_version(current) >= parse_version(required)


class EnvironmentProbe:
    """Reads the environment signals consulted during pre-validation."""

    def runtime_version(self) -> str:
        return platform.python_version()

    def available_memory_mb(self) -> float:
        return psutil.virtual_memory().available / _BYTES_PER_MB

    def is_resolvable(self, module_name: str) -> bool:
        try:
            return importlib.util.find_spec(module_name) is not None
        except (ImportError, ValueError):
            return False


class PreValidator:
    def __init__(
        self,
        registry: VerificationRegistry,
        probe: EnvironmentProbe | None = None,
        *,
        required_runtime_version: str = "3.11.0",
        min_memory_mb: int = 1024,
        required_dependencies: Sequence[str] = (),
    ) -> None:
        self._registry = registry
        self._probe = probe or EnvironmentProbe()
        self._required_runtime_version = required_runtime_version
        self._min_memory_mb = min_memory_mb
        self._required_dependencies = tuple(required_dependencies)
        self._log = logger

    def validate(self) -> PreValidationResult:
        issues = [
            *self.check_registry(),
            *self.check_environment(),
            *self.check_dependencies(),
        ]
        result = PreValidationResult(passed=not issues, issues=issues)
        if issues:
            self._log.warning("pre_validation_failed", issues=issues)
        else:
            self._log.info("pre_validation_passed")
        return result

    def check_registry(self) -> list[str]:
        stats = self._registry.stats()
        if stats.total_registered < stats.target_total:
            return [
                "Incomplete test registry: "
                f"{stats.total_registered}/{stats.target_total} tests registered"
            ]
        return []

    def check_environment(self) -> list[str]:
        issues: list[str] = []

        version = self._probe.runtime_version()
        if not is_version_compatible(version, self._required_runtime_version):
            issues.append(
                f"Runtime version {version} not compatible with "
                f"required {self._required_runtime_version}"
            )

        available = self._probe.available_memory_mb()
        if available < self._min_memory_mb:
            issues.append(
                f"Insufficient memory: {available:.0f}MB available, "
                f"{self._min_memory_mb}MB required"
            )
        return issues

    def check_dependencies(self) -> list[str]:
        return [
            f"Critical dependency missing: {name}"
            for name in self._required_dependencies
            if not self._probe.is_resolvable(name)
        ]
