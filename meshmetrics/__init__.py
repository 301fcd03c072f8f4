"""meshmetrics - tool usage metrics hook for AI coding assistants."""

__version__ = "0.1.0"
__logo__ = "📊"
