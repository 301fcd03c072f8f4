"""Tool-specific metric extraction.

Each known tool kind has one extractor that turns the raw ``tool_input`` into
the metric fields recorded with the event. Tools without a dedicated
extractor get the generic fields (input key names only, never values).
"""

from __future__ import annotations

import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from meshmetrics.metrics.models import EventContext


class ToolKind(Enum):
    READ = "Read"
    EDIT = "Edit"
    WRITE = "Write"
    BASH = "Bash"
    TASK = "Task"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, tool_name: str) -> ToolKind:
        """Map a tool name to its kind; names are case-sensitive."""
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == tool_name:
                return kind
        return cls.UNKNOWN


def count_lines(text: str) -> int:
    """Number of newline-separated segments; 0 for the empty string."""
    if not text:
        return 0
    return len(text.split("\n"))


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def extract_read_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics from Read tool input.

    Args:
        tool_input: The tool_input dict from the event.

    Returns:
        Dict with file_path, file_size_bytes and lines_requested. The size is
        0 when the file is missing or cannot be stat'ed.
    """
    file_path = _text(tool_input.get("file_path"))
    file_size = 0
    if file_path:
        try:
            file_size = os.stat(file_path).st_size
        except (OSError, ValueError):
            file_size = 0

    return {
        "file_path": file_path,
        "file_size_bytes": file_size,
        "lines_requested": tool_input.get("limit") or "all",
    }


def extract_edit_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics from Edit tool input.

    Args:
        tool_input: The tool_input dict from the event.

    Returns:
        Dict with file_path, lines_added, lines_removed, net_lines and
        replace_all.
    """
    lines_removed = count_lines(_text(tool_input.get("old_string")))
    lines_added = count_lines(_text(tool_input.get("new_string")))

    return {
        "file_path": _text(tool_input.get("file_path")),
        "lines_added": lines_added,
        "lines_removed": lines_removed,
        "net_lines": lines_added - lines_removed,
        "replace_all": bool(tool_input.get("replace_all", False)),
    }


def extract_write_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics from Write tool input.

    Args:
        tool_input: The tool_input dict from the event.

    Returns:
        Dict with file_path, content_length, lines_written and file_type.
    """
    file_path = _text(tool_input.get("file_path"))
    content = _text(tool_input.get("content"))

    return {
        "file_path": file_path,
        "content_length": len(content),
        "lines_written": count_lines(content),
        "file_type": Path(file_path).suffix if file_path else "unknown",
    }


def extract_bash_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics from Bash tool input.

    Args:
        tool_input: The tool_input dict from the event.

    Returns:
        Dict with command, command_type (first token), background and timeout.
    """
    command = _text(tool_input.get("command"))
    tokens = command.split()

    return {
        "command": command,
        "command_type": tokens[0] if tokens else "unknown",
        "background": bool(tool_input.get("run_in_background", False)),
        "timeout": tool_input.get("timeout") or None,
    }


def extract_task_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics from Task (sub-agent delegation) input."""
    return {
        "subagent_type": _text(tool_input.get("subagent_type")) or "unknown",
        "task_description": _text(tool_input.get("description")),
        "delegation": True,
    }


def extract_generic_metrics(tool_input: dict[str, Any]) -> dict[str, Any]:
    return {
        "generic_tool": True,
        "input_keys": [str(key) for key in tool_input],
    }


_EXTRACTORS: dict[ToolKind, Callable[[dict[str, Any]], dict[str, Any]]] = {
    ToolKind.READ: extract_read_metrics,
    ToolKind.EDIT: extract_edit_metrics,
    ToolKind.WRITE: extract_write_metrics,
    ToolKind.BASH: extract_bash_metrics,
    ToolKind.TASK: extract_task_metrics,
    ToolKind.UNKNOWN: extract_generic_metrics,
}

_missing = set(ToolKind) - set(_EXTRACTORS)
if _missing:
    raise RuntimeError(f"No metric extractor for tool kinds: {sorted(k.name for k in _missing)}")


def extract_tool_metrics(tool_name: str, tool_input: dict[str, Any]) -> dict[str, Any]:
    """Extract metrics for *tool_name*, falling back to the generic fields."""
    kind = ToolKind.from_name(tool_name)
    try:
        return _EXTRACTORS[kind](tool_input)
    except Exception as e:
        logger.warning(f"Metric extraction failed for {tool_name}: {e}")
        return extract_generic_metrics(tool_input)


def extract_metrics(context: EventContext) -> dict[str, Any]:
    """Extract tool-specific metrics from a built context."""
    return extract_tool_metrics(context.tool_name, context.tool_input)
