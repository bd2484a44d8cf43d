"""
ZeroGate — Configuration System

All configuration is Pydantic-validated and loaded from:
1. A YAML file (defaults)
2. Environment variables (overrides)

Every tunable parameter of the quality gate lives here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── Sub-configs ──────────────────────────────────────────────────


class RegistryConfig(BaseModel):
    # Size of the complete verification catalog; pre-validation fails below it
    target_total: int = 2847

    @field_validator("target_total")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("target_total must be >= 0")
        return v


class PipelineConfig(BaseModel):
    # Max validator calls in flight within one layer
    max_concurrency: int = 16
    # Per-validator wall-clock budget; expiry fails the verification point
    validator_timeout_s: float = 30.0

    @field_validator("max_concurrency")
    @classmethod
    def _positive_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be >= 1")
        return v

    @field_validator("validator_timeout_s")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("validator_timeout_s must be > 0")
        return v


class CriteriaConfig(BaseModel):
    """Zero-tolerance thresholds. Anything above zero defects is a violation."""

    required_pass_rate: float = 100.0
    max_critical_failures: int = 0
    max_high_failures: int = 0
    max_console_errors: int = 0
    max_console_warnings: int = 0
    max_performance_regressions: int = 0
    max_security_vulnerabilities: int = 0
    max_accessibility_violations: int = 0


class CertificationConfig(BaseModel):
    criteria: CriteriaConfig = Field(default_factory=CriteriaConfig)

    # Pre-validation: environment readiness
    required_runtime_version: str = "3.11.0"
    min_memory_mb: int = 1024
    required_dependencies: list[str] = Field(
        default_factory=lambda: ["pydantic", "structlog", "yaml", "pytest"]
    )

    # Report provenance
    application_version: str = "2.0.0"
    build_number: str = "LOCAL"
    repo_root: str = "."
    git_timeout_s: float = 5.0

    # Deployment authorization attachments
    authorized_by: str = "AUTOMATED_CERTIFICATION_ENGINE"
    rollback_plan: str = "Automated rollback to previous stable version"
    monitoring_requirements: list[str] = Field(
        default_factory=lambda: [
            "Real-time error monitoring",
            "Performance tracking",
            "Crisis response time monitoring",
            "User session quality tracking",
        ]
    )
    emergency_contacts: list[str] = Field(
        default_factory=lambda: [
            "crisis-team@astralcore.app",
            "devops-team@astralcore.app",
            "security-team@astralcore.app",
        ]
    )


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


# ─── Root Configuration ──────────────────────────────────────────


class ZeroGateConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZEROGATE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    certification: CertificationConfig = Field(default_factory=CertificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ZeroGateConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    if overrides:
        raw = _deep_merge(raw, overrides)

    import os

    # CI systems export these without the ZEROGATE_ prefix
    if build_number := os.environ.get("BUILD_NUMBER"):
        raw.setdefault("certification", {})["build_number"] = build_number
    if build_number := os.environ.get("ZEROGATE_BUILD_NUMBER"):
        raw.setdefault("certification", {})["build_number"] = build_number
    if app_version := os.environ.get("ZEROGATE_APPLICATION_VERSION"):
        raw.setdefault("certification", {})["application_version"] = app_version
    if log_level := os.environ.get("ZEROGATE_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    return ZeroGateConfig(**raw)
