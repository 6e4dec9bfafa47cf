from projects_api.db import get_conn, get_db_path


def test_env_path_wins(monkeypatch, tmp_path):
    target = tmp_path / "env" / "p.db"
    monkeypatch.setenv("PROJECTS_DB_PATH", str(target))
    assert get_db_path() == str(target)
    assert target.parent.is_dir()


def test_config_yaml_paths(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        f"db_path: {tmp_path / 'prod.db'}\ntest_db_path: {tmp_path / 'test.db'}\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("PROJECTS_DB_PATH", raising=False)
    monkeypatch.setenv("PROJECTS_CONFIG", str(cfg))

    # running under pytest: test path is chosen
    assert get_db_path() == str(tmp_path / "test.db")

    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_db_path() == str(tmp_path / "prod.db")


def test_connection_rows_are_addressable_by_name(tmp_path):
    with get_conn(str(tmp_path / "x.db")) as conn:
        row = conn.execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1
