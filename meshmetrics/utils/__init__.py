"""Utility helpers."""

from meshmetrics.utils.helpers import ensure_dir, now_iso

__all__ = ["ensure_dir", "now_iso"]
