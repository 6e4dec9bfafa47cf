"""
Field validation for projects.

A field in a request is in one of three states:
  - omitted: key missing or None, leave the column alone
  - explicit-empty: "" on due/position, clear the column to NULL
  - value: validate, then write it
Only `title` is required, and only at creation.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Mapping, Optional

TITLE_MAX_LEN = 128
UPDATABLE_FIELDS = ("title", "due", "position", "completed")
CLEARABLE_FIELDS = ("due", "position")

MESSAGES = {
    "title_required": "Title is required",
    "title": "Title must be a string of 1 to 128 characters",
    "due": "Due must be a valid ISO 8601 date",
    "position": "Position must be an integer greater than or equal to 0",
    "completed": "Completed must be a boolean",
}

POSITION_MAX = 2**63 - 1  # SQLite INTEGER upper bound

_INT_RE = re.compile(r"[+-]?[0-9]{1,19}")
_TRUE = ("true", "1")
_FALSE = ("false", "0")


def field_error(field: str, key: str | None = None) -> dict:
    return {"field": field, "error": MESSAGES[key or field]}


def is_utf8(value: str) -> bool:
    try:
        value.encode("utf-8")
        return True
    except UnicodeEncodeError:
        return False


def is_clear(value: Any) -> bool:
    return isinstance(value, str) and value == ""


def is_iso8601(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    v = value.strip()
    if not v or v != value:
        return False
    if v[-1] in "Zz":
        v = v[:-1] + "+00:00"
    try:
        datetime.fromisoformat(v)
        return True
    except ValueError:
        pass
    try:
        date.fromisoformat(v)
        return True
    except ValueError:
        return False


def normalize_position(value: Any) -> Optional[int]:
    """int in [0, POSITION_MAX] from an int or a decimal string; None when not acceptable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        n = value
    elif isinstance(value, float) and value.is_integer():
        n = int(value)
    elif isinstance(value, str) and _INT_RE.fullmatch(value):
        n = int(value)
    else:
        return None
    return n if 0 <= n <= POSITION_MAX else None


def normalize_completed(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    return None


def validate_required(title: Any) -> list[dict]:
    if title is None or is_clear(title):
        return [field_error("title", "title_required")]
    return []


def validate_fields(
    title: Any = None,
    due: Any = None,
    position: Any = None,
    completed: Any = None,
) -> list[dict]:
    """Check every supplied field and report all violations, in field order."""
    errors: list[dict] = []

    if title is not None:
        if (
            not isinstance(title, str)
            or not (1 <= len(title) <= TITLE_MAX_LEN)
            or not is_utf8(title)
        ):
            errors.append(field_error("title"))

    if due is not None and not is_clear(due):
        if not is_iso8601(due):
            errors.append(field_error("due"))

    if position is not None and not is_clear(position):
        if normalize_position(position) is None:
            errors.append(field_error("position"))

    if completed is not None:
        if normalize_completed(completed) is None:
            errors.append(field_error("completed"))

    return errors


def partition_update(fields: Mapping[str, Any]) -> tuple[list[str], dict[str, Any]]:
    """
    Split already-validated update fields into (clears, assigns).

    clears: columns to set NULL, in field order.
    assigns: column -> stored value for every field carrying a value.
    Omitted fields appear in neither.
    """
    clears: list[str] = []
    assigns: dict[str, Any] = {}
    for name in UPDATABLE_FIELDS:
        value = fields.get(name)
        if value is None:
            continue
        if name in CLEARABLE_FIELDS and is_clear(value):
            clears.append(name)
        elif name == "position":
            assigns[name] = normalize_position(value)
        elif name == "completed":
            assigns[name] = normalize_completed(value)
        else:
            assigns[name] = value
    return clears, assigns
