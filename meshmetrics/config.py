"""Runtime settings for the metrics hook, read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from meshmetrics.constants import (
    API_KEY_ENV,
    API_TIMEOUT_ENV,
    API_URL_ENV,
    BUDGET_MS_ENV,
    DEFAULT_API_TIMEOUT,
    MEMORY_BUDGET_MB,
    METRICS_DIR,
    METRICS_DIR_ENV,
    PERFORMANCE_BUDGET_MS,
)
from meshmetrics.errors import ConfigError


def default_metrics_dir() -> Path:
    return Path.home() / METRICS_DIR


@dataclass
class MetricsSettings:
    """Settings shared by the sink, aggregator and orchestrator.

    ``api_url`` left unset disables remote submission; every event then goes
    straight to the local store.
    """

    metrics_dir: Path = field(default_factory=default_metrics_dir)
    api_url: str | None = None
    api_key: str | None = None
    api_timeout: float = DEFAULT_API_TIMEOUT
    performance_budget_ms: float = PERFORMANCE_BUDGET_MS
    memory_budget_mb: float = MEMORY_BUDGET_MB

    @property
    def remote_enabled(self) -> bool:
        return bool(self.api_url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MetricsSettings:
        """Build settings from ``AI_MESH_METRICS_*`` variables.

        Raises:
            ConfigError: If a numeric variable is not a positive number.
        """
        env = os.environ if environ is None else environ

        metrics_dir = env.get(METRICS_DIR_ENV)
        return cls(
            metrics_dir=Path(metrics_dir).expanduser() if metrics_dir else default_metrics_dir(),
            api_url=(env.get(API_URL_ENV) or "").rstrip("/") or None,
            api_key=env.get(API_KEY_ENV) or None,
            api_timeout=_positive_float(env, API_TIMEOUT_ENV, DEFAULT_API_TIMEOUT),
            performance_budget_ms=_positive_float(env, BUDGET_MS_ENV, PERFORMANCE_BUDGET_MS),
        )


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
