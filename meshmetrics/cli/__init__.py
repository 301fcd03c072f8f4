"""CLI module for meshmetrics."""
