"""Normalize raw PostToolUse data into an EventContext."""

from __future__ import annotations

import platform
import sys
from collections.abc import Mapping
from typing import Any

from meshmetrics.constants import UNKNOWN_TOOL
from meshmetrics.metrics.models import EventContext
from meshmetrics.utils.helpers import now_iso


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-empty value among *keys* (snake_case or camelCase)."""
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def build_context(raw: Any) -> EventContext:
    """Build the context for one tool invocation.

    Accepts both the hook payload keys (``tool_name``, ``tool_input``) and the
    camelCase keys used by the simulator. Anything malformed is replaced by
    its default, so this never fails.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    tool_name = _pick(raw, "tool_name", "toolName")
    tool_input = _pick(raw, "tool_input", "toolInput")

    return EventContext(
        tool_name=str(tool_name) if tool_name else UNKNOWN_TOOL,
        tool_input=dict(tool_input) if isinstance(tool_input, Mapping) else {},
        error=_pick(raw, "error"),
        timestamp=now_iso(),
        environment={
            "python_version": platform.python_version(),
            "platform": sys.platform,
            "architecture": platform.machine(),
        },
    )
