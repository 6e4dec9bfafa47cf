"""
Audit trail for project mutations.

Every create/update/delete request leaves one `audit_log` row: which project,
what was asked, the row before and after, and how the request ended.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from .db import get_conn

logger = logging.getLogger(__name__)

OK = "OK"
INVALID = "INVALID"
NOT_FOUND = "NOT_FOUND"
ERROR = "ERROR"
OUTCOMES = (OK, INVALID, NOT_FOUND, ERROR)
_OUTCOME_SQL = ", ".join(f"'{o}'" for o in OUTCOMES)

DDL = f"""
CREATE TABLE IF NOT EXISTS audit_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  action TEXT NOT NULL,
  project_id INTEGER,
  outcome TEXT NOT NULL CHECK (outcome IN ({_OUTCOME_SQL})),
  detail TEXT,
  payload_json TEXT,
  before_json TEXT,
  after_json TEXT,
  latency_ms INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_audit_project ON audit_log(project_id);
CREATE INDEX IF NOT EXISTS idx_audit_action ON audit_log(action);
"""


def ensure_log_schema():
    with get_conn() as conn:
        conn.executescript(DDL)
        conn.commit()


def _dump(obj: Any) -> Optional[str]:
    if obj is None:
        return None
    text = json.dumps(obj, ensure_ascii=False)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        # lone surrogates from the request: keep them as \u escapes
        text = json.dumps(obj)
    return text


class ProjectAudit:
    """Collects one request's audit facts; write() stores them."""

    def __init__(self, action: str, payload: Any = None):
        self.action = action
        self.payload = payload
        self.project_id: Optional[int] = None
        self.before: Optional[dict] = None
        self.after: Optional[dict] = None
        self._start = time.perf_counter()

    def track(self, project_id: int):
        self.project_id = project_id

    def set_before(self, row: Optional[dict]):
        self.before = row

    def set_after(self, row: Optional[dict]):
        self.after = row

    def write(self, outcome: str = OK, detail: Optional[str] = None):
        if outcome not in OUTCOMES:
            raise ValueError(f"unknown audit outcome: {outcome}")
        latency_ms = int((time.perf_counter() - self._start) * 1000)
        level = logging.INFO if outcome in (OK, INVALID, NOT_FOUND) else logging.WARNING
        logger.log(level, "%s project=%s %s %s", self.action, self.project_id, outcome, detail or "")
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO audit_log(ts, action, project_id, outcome, detail, "
                "payload_json, before_json, after_json, latency_ms) VALUES(?,?,?,?,?,?,?,?,?)",
                (
                    datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
                    self.action,
                    self.project_id,
                    outcome,
                    detail,
                    _dump(self.payload),
                    _dump(self.before),
                    _dump(self.after),
                    latency_ms,
                ),
            )
            conn.commit()


def search_audit(
    action: Optional[str] = None,
    outcome: Optional[str] = None,
    project_id: Optional[int] = None,
    q: Optional[str] = None,
    page: int = 1,
    size: int = 20,
) -> tuple[int, list[dict]]:
    """Newest first. `q` matches inside payload / before / after JSON."""
    where = []
    params: list[Any] = []
    if action:
        where.append("action = ?")
        params.append(action)
    if outcome:
        where.append("outcome = ?")
        params.append(outcome)
    if project_id is not None:
        where.append("project_id = ?")
        params.append(project_id)
    if q:
        where.append("(payload_json LIKE ? OR before_json LIKE ? OR after_json LIKE ?)")
        params.extend([f"%{q}%"] * 3)
    wh = " WHERE " + " AND ".join(where) if where else ""
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM audit_log{wh}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM audit_log{wh} ORDER BY id DESC LIMIT ? OFFSET ?",
            (*params, size, (page - 1) * size),
        ).fetchall()
    items = []
    for r in rows:
        it = dict(r)
        for k in ("payload_json", "before_json", "after_json"):
            raw = it.pop(k)
            it[k[: -len("_json")]] = json.loads(raw) if raw else None
        items.append(it)
    return total, items
