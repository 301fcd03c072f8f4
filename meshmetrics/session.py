"""Session id resolution shared by all hooks."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from meshmetrics.config import default_metrics_dir
from meshmetrics.constants import DEFAULT_SESSION_ID, SESSION_ID_ENV, SESSION_ID_FILE
from meshmetrics.utils.helpers import ensure_dir


def resolve_session_id(
    metrics_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the active session id.

    Resolution order:
        1. ``CLAUDE_SESSION_ID`` (set by the session-start hook)
        2. ``<metrics_dir>/.current-session-id``, whitespace-trimmed
        3. ``"default-session"``

    Never raises; an unreadable session file counts as missing.
    """
    env = os.environ if environ is None else environ
    session_id = env.get(SESSION_ID_ENV)
    if session_id:
        return session_id

    session_file = (metrics_dir or default_metrics_dir()) / SESSION_ID_FILE
    try:
        if session_file.is_file():
            session_id = session_file.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read session id file ({session_file}): {e}")
        session_id = None

    return session_id or DEFAULT_SESSION_ID


def write_session_id(session_id: str, metrics_dir: Path | None = None) -> Path:
    """Persist *session_id* as the fallback for hooks started without the env var."""
    directory = ensure_dir(metrics_dir or default_metrics_dir())
    path = directory / SESSION_ID_FILE
    path.write_text(session_id.strip() + "\n", encoding="utf-8")
    return path
