"""
Local paths built from untrusted names (webhook emails, CRM file names).
"""

import re
from pathlib import Path

_SEPARATORS = re.compile(r"[/\\\x00]")


def safe_segment(value: str | None, fallback: str = "unknown") -> str:
    """Reduce value to one path segment: no separators, no leading dots."""
    segment = _SEPARATORS.sub("_", value or "").strip(". ")
    return segment or fallback


def contained_path(base: Path, *parts: str | None) -> Path:
    """
    base joined with each part as a single safe segment.

    Raises:
        ValueError: if the result still resolves outside base
    """
    root = Path(base).resolve()
    path = root.joinpath(*(safe_segment(p) for p in parts)).resolve()
    if root not in path.parents:
        raise ValueError(f"Path {path} is outside {root}")
    return path
