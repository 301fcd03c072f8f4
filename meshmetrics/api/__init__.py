"""Remote metrics API client."""

from meshmetrics.api.client import MetricsApiClient

__all__ = ["MetricsApiClient"]
