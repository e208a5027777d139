"""
Shared utility functions for the scribe service.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "user", "post", "cmt")

    Returns:
        A unique ID like "post_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def split_tags(raw: str | list[str] | None) -> list[str]:
    """
    Normalize tag input into an ordered list of trimmed, non-empty tags.

    Accepts a comma separated string (form input) or a list of strings.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [tag.strip() for tag in raw if tag and tag.strip()]
