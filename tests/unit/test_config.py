"""Unit tests for configuration loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from zerogate.config import PipelineConfig, RegistryConfig, ZeroGateConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BUILD_NUMBER",
        "ZEROGATE_BUILD_NUMBER",
        "ZEROGATE_APPLICATION_VERSION",
        "ZEROGATE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_zero_tolerance_defaults(self):
        config = ZeroGateConfig()
        criteria = config.certification.criteria
        assert criteria.required_pass_rate == 100.0
        assert criteria.max_critical_failures == 0
        assert criteria.max_accessibility_violations == 0
        assert config.registry.target_total == 2847
        assert config.pipeline.max_concurrency == 16

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            RegistryConfig(target_total=-1)
        with pytest.raises(ValidationError):
            PipelineConfig(max_concurrency=0)
        with pytest.raises(ValidationError):
            PipelineConfig(validator_timeout_s=0)


class TestLoadConfig:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "zerogate.yaml"
        path.write_text(
            "registry:\n"
            "  target_total: 12\n"
            "pipeline:\n"
            "  validator_timeout_s: 2.5\n"
            "certification:\n"
            "  application_version: 3.1.0\n"
            "  criteria:\n"
            "    max_console_warnings: 5\n"
        )
        config = load_config(path)
        assert config.registry.target_total == 12
        assert config.pipeline.validator_timeout_s == 2.5
        assert config.certification.application_version == "3.1.0"
        assert config.certification.criteria.max_console_warnings == 5
        assert config.certification.criteria.max_console_errors == 0

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config.registry.target_total == 2847

    def test_overrides_merge_deeply(self, tmp_path):
        path = tmp_path / "zerogate.yaml"
        path.write_text("certification:\n  build_number: '41'\n  min_memory_mb: 512\n")
        config = load_config(path, overrides={"certification": {"build_number": "42"}})
        assert config.certification.build_number == "42"
        assert config.certification.min_memory_mb == 512

    def test_ci_environment_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUILD_NUMBER", "1337")
        monkeypatch.setenv("ZEROGATE_APPLICATION_VERSION", "9.9.9")
        monkeypatch.setenv("ZEROGATE_LOG_LEVEL", "DEBUG")
        config = load_config()
        assert config.certification.build_number == "1337"
        assert config.certification.application_version == "9.9.9"
        assert config.logging.level == "DEBUG"

    def test_prefixed_build_number_wins(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUILD_NUMBER", "1")
        monkeypatch.setenv("ZEROGATE_BUILD_NUMBER", "2")
        assert load_config().certification.build_number == "2"
