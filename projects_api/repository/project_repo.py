from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Mapping, Optional

_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

DDL = f"""
CREATE TABLE IF NOT EXISTS projects (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  title TEXT NOT NULL CHECK (length(title) BETWEEN 1 AND 128),
  due TEXT,
  position INTEGER CHECK (position IS NULL OR position >= 0),
  completed INTEGER CHECK (completed IN (0, 1)),
  created TEXT NOT NULL DEFAULT ({_NOW}),
  updated TEXT NOT NULL DEFAULT ({_NOW})
);
CREATE INDEX IF NOT EXISTS idx_projects_completed ON projects(completed);
CREATE TRIGGER IF NOT EXISTS trg_projects_updated
AFTER UPDATE ON projects
FOR EACH ROW WHEN NEW.updated = OLD.updated
BEGIN
  UPDATE projects SET updated = {_NOW} WHERE id = NEW.id;
END;
"""

COLUMNS = "id, title, due, position, completed, created, updated"

# columns a client may write; only the optional ones can be cleared
MUTABLE_COLUMNS = ("title", "due", "position", "completed")
CLEARABLE_COLUMNS = ("due", "position")


def ensure_schema(conn: Connection):
    conn.executescript(DDL)


def _check_columns(cols, allowed):
    bad = [c for c in cols if c not in allowed]
    if bad:
        raise ValueError(f"column not writable: {', '.join(bad)}")


def _db_bool(v: Optional[bool]):
    return None if v is None else (1 if v else 0)


def list_projects(conn: Connection, descending: bool = False, completed: Optional[bool] = None):
    sql = f"SELECT {COLUMNS} FROM projects"
    params: list[Any] = []
    if completed is not None:
        sql += " WHERE completed = ?"
        params.append(_db_bool(completed))
    sql += " ORDER BY id DESC" if descending else " ORDER BY id ASC"
    return conn.execute(sql, params).fetchall()


def get_one(conn: Connection, project_id: int):
    return conn.execute(
        f"SELECT {COLUMNS} FROM projects WHERE id = ?", (project_id,)
    ).fetchone()


def insert_project(
    conn: Connection,
    title: str,
    due: Optional[str] = None,
    position: Optional[int] = None,
    completed: Optional[bool] = None,
) -> int:
    cur = conn.execute(
        "INSERT INTO projects(title, due, position, completed) VALUES(?,?,?,?)",
        (title, due, position, _db_bool(completed)),
    )
    return int(cur.lastrowid)


def clear_column(conn: Connection, project_id: int, column: str) -> int:
    _check_columns([column], CLEARABLE_COLUMNS)
    cur = conn.execute(f"UPDATE projects SET {column} = NULL WHERE id = ?", (project_id,))
    return cur.rowcount


def assign_columns(conn: Connection, project_id: int, values: Mapping[str, Any]) -> int:
    """One UPDATE covering exactly the given columns; no-op for an empty mapping."""
    if not values:
        return 0
    cols = list(values.keys())
    _check_columns(cols, MUTABLE_COLUMNS)
    params = [_db_bool(values[c]) if c == "completed" else values[c] for c in cols]
    assignments = ", ".join(f"{c} = ?" for c in cols)
    cur = conn.execute(
        f"UPDATE projects SET {assignments} WHERE id = ?",
        (*params, project_id),
    )
    return cur.rowcount


def delete_project(conn: Connection, project_id: int) -> int:
    cur = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
    return cur.rowcount
