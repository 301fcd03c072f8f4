"""Exception types raised by meshmetrics."""


class MeshMetricsError(Exception):
    """Base class for all meshmetrics errors."""


class ConfigError(MeshMetricsError):
    """Raised when an environment setting cannot be parsed."""


class RemoteUnavailableError(MeshMetricsError):
    """Raised when no remote metrics API is configured."""
