"""Shaping stored user rows into API payloads."""

import json
import logging
from typing import Any, Optional

from .models import BOOL_FIELDS, JSON_FIELDS

logger = logging.getLogger(__name__)

SECRET_FIELDS = ("password_hash",)


def sanitize_user(row: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """
    Strip secrets and normalize typed columns of a user row.

    JSON columns are decoded; a value that does not parse is returned
    unchanged. Flag columns are coerced to real booleans.
    """
    if row is None:
        return None

    safe = {k: v for k, v in row.items() if k not in SECRET_FIELDS}

    for field in JSON_FIELDS:
        value = safe.get(field)
        if isinstance(value, str) and value:
            try:
                safe[field] = json.loads(value)
            except ValueError:
                logger.warning(f"Column {field} of user {safe.get('id')} holds malformed JSON")

    for field in BOOL_FIELDS:
        if field in safe:
            safe[field] = bool(safe[field])

    return safe


def sanitize_users(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [sanitize_user(row) for row in rows]
