from __future__ import annotations

import logging
from sqlite3 import Connection
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..db import get_db
from ..logs import ERROR, INVALID, NOT_FOUND, ProjectAudit
from ..services.project_svc import (
    ProjectNotFound,
    ValidationFailed,
    create_project,
    delete_project,
    get_one,
    list_projects,
    update_project,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_BODY = {"error": "Item not found"}


# Untyped fields: the validator reports type problems as 400 field errors.
class ProjectBody(BaseModel):
    title: Any = None
    due: Any = None
    position: Any = None
    completed: Any = None


def _record_failure(log: ProjectAudit, outcome: str, detail: str):
    # the response for a failed request must not depend on the audit insert
    try:
        log.write(outcome, detail)
    except Exception:
        logger.exception("audit write failed for %s (%s)", log.action, outcome)


@router.get("/")
def api_project_list(
    order: str | None = Query(None, description="asc | desc; anything else means asc"),
    completed: bool | None = Query(None),
    conn: Connection = Depends(get_db),
):
    return list_projects(conn, order or "asc", completed)


@router.get("/{project_id}")
def api_project_get(project_id: int, conn: Connection = Depends(get_db)):
    try:
        return get_one(conn, project_id)
    except ProjectNotFound:
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)


@router.post("/")
def api_project_create(body: ProjectBody | None = None, conn: Connection = Depends(get_db)):
    body = body or ProjectBody()
    log = ProjectAudit("CREATE_PROJECT", body.dict(exclude_unset=True))
    try:
        item = create_project(conn, body.title, body.due, body.position, body.completed, log)
        log.write()
        return item
    except ValidationFailed as ve:
        _record_failure(log, INVALID, str(ve))
        return JSONResponse(status_code=400, content=ve.errors)
    except Exception:
        _record_failure(log, ERROR, "internal error")
        raise HTTPException(status_code=500, detail="internal error")


@router.patch("/{project_id}")
def api_project_update(project_id: int, body: ProjectBody | None = None, conn: Connection = Depends(get_db)):
    fields = body.dict(exclude_unset=True) if body else {}
    log = ProjectAudit("UPDATE_PROJECT", fields)
    try:
        item = update_project(conn, project_id, fields, log)
        log.write()
        return item
    except ProjectNotFound as nf:
        _record_failure(log, NOT_FOUND, str(nf))
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
    except ValidationFailed as ve:
        _record_failure(log, INVALID, str(ve))
        return JSONResponse(status_code=400, content=ve.errors)
    except Exception:
        _record_failure(log, ERROR, "internal error")
        raise HTTPException(status_code=500, detail="internal error")


@router.delete("/{project_id}")
def api_project_delete(project_id: int, conn: Connection = Depends(get_db)):
    log = ProjectAudit("DELETE_PROJECT", {"id": project_id})
    try:
        out = delete_project(conn, project_id, log)
        log.write()
        return out
    except ProjectNotFound as nf:
        _record_failure(log, NOT_FOUND, str(nf))
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
    except Exception:
        _record_failure(log, ERROR, "internal error")
        raise HTTPException(status_code=500, detail="internal error")
