"""
SQLite access for the projects API.

Where the database file lives, first match wins:
  1. env PROJECTS_DB_PATH
  2. `test_db_path` from the config file, when APP_ENV=test or under pytest
  3. `db_path` from the config file
  4. projects.db next to the package
The config file is env PROJECTS_CONFIG, else config.yaml at the project root.
"""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

import yaml

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DB = os.path.join(PROJECT_ROOT, "projects.db")
MEMORY = ":memory:"


def config_path() -> str:
    return os.environ.get("PROJECTS_CONFIG") or os.path.join(PROJECT_ROOT, "config.yaml")


def load_db_settings() -> dict[str, str]:
    """db_path / test_db_path from the config file; missing file means no settings."""
    path = config_path()
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return {
        k: raw[k].strip()
        for k in ("db_path", "test_db_path")
        if isinstance(raw.get(k), str) and raw[k].strip()
    }


def running_tests() -> bool:
    return os.environ.get("APP_ENV") == "test" or "PYTEST_CURRENT_TEST" in os.environ


def get_db_path() -> str:
    settings = load_db_settings()
    path = (
        os.environ.get("PROJECTS_DB_PATH")
        or (settings.get("test_db_path") if running_tests() else None)
        or settings.get("db_path")
        or DEFAULT_DB
    )
    if path != MEMORY:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return path


def configure(conn: sqlite3.Connection) -> sqlite3.Connection:
    """Row factory so repositories can address columns by name."""
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """Autocommit connection: each statement stands alone, nothing spans a transaction."""
    conn = sqlite3.connect(db_path or get_db_path(), check_same_thread=False, isolation_level=None)
    try:
        yield configure(conn)
    finally:
        conn.close()


def get_db() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency: one connection per request."""
    with get_conn() as conn:
        yield conn
