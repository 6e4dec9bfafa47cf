import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "projects_test.db"
    # Point the app to this temp DB
    os.environ["PROJECTS_DB_PATH"] = str(path)
    from projects_api.logs import ensure_log_schema
    from projects_api.services.project_svc import ensure_project_schema
    ensure_log_schema()
    ensure_project_schema()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from projects_api.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: only ever wipe the temp DB
    assert os.environ.get("PROJECTS_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("projects", "audit_log"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def conn():
    """In-memory storage handed straight to the service/repository functions."""
    from projects_api.db import configure
    from projects_api.repository import project_repo
    c = configure(sqlite3.connect(":memory:"))
    project_repo.ensure_schema(c)
    try:
        yield c
    finally:
        c.close()
