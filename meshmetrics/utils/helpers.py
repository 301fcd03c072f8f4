"""Small filesystem and time helpers."""

from datetime import datetime
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def now_iso() -> str:
    """Current local time as ISO-8601 with UTC offset, second precision."""
    return datetime.now().astimezone().isoformat(timespec="seconds")
