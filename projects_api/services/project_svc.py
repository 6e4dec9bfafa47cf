from __future__ import annotations

import logging
from sqlite3 import Connection
from typing import Any, Mapping, Optional

from ..db import get_conn
from ..logs import ProjectAudit
from ..repository import project_repo
from .validation import (
    is_clear,
    normalize_completed,
    normalize_position,
    partition_update,
    validate_fields,
    validate_required,
)

logger = logging.getLogger(__name__)


class ProjectNotFound(LookupError):
    """Raised when no project row exists for an id."""

    def __init__(self, project_id):
        self.project_id = project_id
        super().__init__(f"project {project_id} not found")


class ValidationFailed(ValueError):
    """Raised with every field error found in a request."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors)
        super().__init__(f"invalid fields: {fields}")


def ensure_project_schema():
    with get_conn() as conn:
        project_repo.ensure_schema(conn)
        conn.commit()


def _to_item(row) -> dict:
    it = dict(row)
    if it.get("completed") is not None:
        it["completed"] = bool(it["completed"])
    return it


def _require(conn: Connection, project_id: int) -> dict:
    row = project_repo.get_one(conn, project_id)
    if row is None:
        raise ProjectNotFound(project_id)
    return _to_item(row)


def list_projects(conn: Connection, order: str = "asc", completed: Optional[bool] = None) -> list[dict]:
    rows = project_repo.list_projects(conn, descending=(order == "desc"), completed=completed)
    return [_to_item(r) for r in rows]


def get_one(conn: Connection, project_id: int) -> dict:
    return _require(conn, project_id)


def create_project(
    conn: Connection,
    title: Any,
    due: Any = None,
    position: Any = None,
    completed: Any = None,
    log: ProjectAudit | None = None,
) -> dict:
    errors = validate_required(title)
    if errors:
        raise ValidationFailed(errors)
    errors = validate_fields(title, due, position, completed)
    if errors:
        raise ValidationFailed(errors)

    new_id = project_repo.insert_project(
        conn,
        title,
        due=None if due is None or is_clear(due) else due,
        position=None if position is None or is_clear(position) else normalize_position(position),
        completed=None if completed is None else normalize_completed(completed),
    )
    conn.commit()
    # read back by the id this insert produced, not "the latest row"
    after = _require(conn, new_id)
    logger.info("created project %s", new_id)
    if log:
        log.track(new_id)
        log.set_after(after)
    return after


def update_project(
    conn: Connection,
    project_id: int,
    fields: Mapping[str, Any],
    log: ProjectAudit | None = None,
) -> dict:
    """
    Partial update: only fields present in `fields` are touched.

    "" on due/position clears the column; each clear is its own statement,
    then all value fields go out in one UPDATE. The row is re-read by id
    afterwards and returned as the post-update state.
    """
    if log:
        log.track(project_id)
    before = _require(conn, project_id)
    if log:
        log.set_before(before)

    errors = validate_fields(
        fields.get("title"),
        fields.get("due"),
        fields.get("position"),
        fields.get("completed"),
    )
    if errors:
        raise ValidationFailed(errors)

    clears, assigns = partition_update(fields)
    if not clears and not assigns:
        if log:
            log.set_after(before)
        return before

    for column in clears:
        logger.debug("project %s: clear %s", project_id, column)
        project_repo.clear_column(conn, project_id, column)
    if assigns:
        logger.debug("project %s: assign %s", project_id, sorted(assigns))
        project_repo.assign_columns(conn, project_id, assigns)
    conn.commit()

    after = _require(conn, project_id)
    if log:
        log.set_after(after)
    return after


def delete_project(conn: Connection, project_id: int, log: ProjectAudit | None = None) -> dict:
    if log:
        log.track(project_id)
    before = _require(conn, project_id)
    if log:
        log.set_before(before)
    project_repo.delete_project(conn, project_id)
    conn.commit()
    logger.info("deleted project %s", project_id)
    return {"message": "Project deleted"}
