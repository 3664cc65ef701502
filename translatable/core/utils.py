"""
Shared utility functions for the translation engine.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_provisional_id() -> str:
    """
    Generate a globally unique provisional identifier.

    Used for entities that have no final key yet. The value is a bare
    UUID4 hex string (32 chars) so it fits the index id column and is safe
    as a file name.
    """
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
