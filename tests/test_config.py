"""Tests for settings loaded from the environment."""

from pathlib import Path

import pytest

from meshmetrics.config import MetricsSettings
from meshmetrics.errors import ConfigError


def test_defaults():
    settings = MetricsSettings.from_env({})

    assert settings.metrics_dir == Path.home() / ".ai-mesh" / "metrics"
    assert settings.api_url is None
    assert settings.remote_enabled is False
    assert settings.api_timeout == 2.0
    assert settings.performance_budget_ms == 30.0
    assert settings.memory_budget_mb == 20.0


def test_overrides(tmp_path):
    settings = MetricsSettings.from_env(
        {
            "AI_MESH_METRICS_DIR": str(tmp_path),
            "AI_MESH_METRICS_API_URL": "https://metrics.example.com/",
            "AI_MESH_METRICS_API_KEY": "k",
            "AI_MESH_METRICS_API_TIMEOUT": "0.5",
            "AI_MESH_METRICS_BUDGET_MS": "50",
        }
    )

    assert settings.metrics_dir == tmp_path
    assert settings.api_url == "https://metrics.example.com"
    assert settings.remote_enabled is True
    assert settings.api_key == "k"
    assert settings.api_timeout == 0.5
    assert settings.performance_budget_ms == 50.0


def test_blank_values_use_defaults():
    settings = MetricsSettings.from_env(
        {"AI_MESH_METRICS_API_URL": "", "AI_MESH_METRICS_API_TIMEOUT": " "}
    )

    assert settings.remote_enabled is False
    assert settings.api_timeout == 2.0


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_invalid_timeout(value):
    with pytest.raises(ConfigError, match="AI_MESH_METRICS_API_TIMEOUT"):
        MetricsSettings.from_env({"AI_MESH_METRICS_API_TIMEOUT": value})
