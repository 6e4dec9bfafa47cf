from __future__ import annotations

from fastapi import APIRouter, Query

from ..logs import search_audit

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    action: str | None = None,
    outcome: str | None = None,
    project_id: int | None = None,
    query: str | None = None,
):
    total, items = search_audit(action, outcome, project_id, query, page, size)
    return {"total": total, "items": items}
