"""Tests for the schema migration runner."""
from contextlib import asynccontextmanager

import pytest

from app.db.migrate import SCHEMA_PATH, migrate, split_statements


# ─── Helpers ──────────────────────────────────────────────────────────────────

class FakeConnection:
    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.executed: list[str] = []
        self.synced = False

    async def exec_driver_sql(self, statement: str):
        if self.fail_on and self.fail_on in statement:
            raise RuntimeError(f"relation does not exist: {statement}")
        self.executed.append(statement)

    async def run_sync(self, fn):
        self.synced = True


class FakeEngine:
    """Mimics AsyncEngine.begin(): commit on clean exit, rollback on error."""

    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.committed = False
        self.rolled_back = False

    @asynccontextmanager
    async def begin(self):
        try:
            yield self.conn
        except Exception:
            self.rolled_back = True
            raise
        self.committed = True


# ─── split_statements ─────────────────────────────────────────────────────────

def test_split_statements_drops_empty_and_comment_only_parts():
    sql = """
    -- header comment
    CREATE TABLE a (id int);

    ;
    CREATE INDEX ix_a ON a (id);
    -- trailing comment
    """
    assert split_statements(sql) == [
        "CREATE TABLE a (id int)",
        "CREATE INDEX ix_a ON a (id)",
    ]


def test_split_statements_keeps_multiline_statements_intact():
    sql = "CREATE TABLE b (\n  id int,\n  name text\n);"
    assert split_statements(sql) == ["CREATE TABLE b (\n  id int,\n  name text\n)"]


def test_bundled_schema_creates_all_tables():
    statements = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
    joined = "\n".join(statements)

    assert statements[0] == "CREATE EXTENSION IF NOT EXISTS pgcrypto"
    for table in ("users", "tenders", "consignees"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in joined
    # Re-runnable: no bare CREATE without IF NOT EXISTS
    for statement in statements:
        assert "IF NOT EXISTS" in statement


# ─── migrate ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_migrate_runs_statements_in_order_then_syncs_models(tmp_path):
    schema = tmp_path / "schema.sql"
    schema.write_text("CREATE TABLE a (id int);\nCREATE TABLE b (id int);\n", encoding="utf-8")
    conn = FakeConnection()
    engine = FakeEngine(conn)

    count = await migrate(engine, schema)

    assert count == 2
    assert conn.executed == ["CREATE TABLE a (id int)", "CREATE TABLE b (id int)"]
    assert conn.synced is True
    assert engine.committed is True
    assert engine.rolled_back is False


@pytest.mark.asyncio
async def test_migrate_stops_and_rolls_back_on_first_failure(tmp_path):
    schema = tmp_path / "schema.sql"
    schema.write_text(
        "CREATE TABLE a (id int);\nCREATE TABLE broken (id int);\nCREATE TABLE c (id int);\n",
        encoding="utf-8",
    )
    conn = FakeConnection(fail_on="broken")
    engine = FakeEngine(conn)

    with pytest.raises(RuntimeError):
        await migrate(engine, schema)

    assert conn.executed == ["CREATE TABLE a (id int)"]
    assert conn.synced is False
    assert engine.rolled_back is True
    assert engine.committed is False
