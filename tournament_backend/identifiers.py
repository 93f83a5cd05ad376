"""UUID validation for tournament identifiers."""

from __future__ import annotations

import re

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def is_valid_uuid(value: object) -> bool:
    """True if value is a UUID in canonical 8-4-4-4-12 form (any version)."""
    return isinstance(value, str) and bool(UUID_PATTERN.fullmatch(value))
