"""Apply schema.sql, then create any ORM tables it does not cover.

Everything runs inside a single transaction: the first failing statement
rolls back the whole migration and the process exits non-zero.

Run: python -m app.db.migrate
"""
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.db.base import Base

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def split_statements(sql: str) -> list[str]:
    """Split a SQL script on ';', dropping `--` comment lines and empty statements.

    Statements must not contain literal semicolons (no function bodies).
    """
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


async def apply_statements(conn: AsyncConnection, statements: list[str]) -> None:
    for index, statement in enumerate(statements, start=1):
        logger.debug("Executing statement %d/%d: %s", index, len(statements), statement.splitlines()[0])
        await conn.exec_driver_sql(statement)


async def migrate(engine: AsyncEngine, schema_path: Path = SCHEMA_PATH) -> int:
    """Run the migration; returns the number of schema.sql statements executed."""
    import app.models  # noqa: F401  registers tables on Base.metadata

    statements = split_statements(schema_path.read_text(encoding="utf-8"))
    async with engine.begin() as conn:
        await apply_statements(conn, statements)
        logger.info("Schema migration completed: %d statement(s)", len(statements))
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Model synchronization completed")
    return len(statements)


async def main() -> int:
    from app.db.session import engine

    try:
        await migrate(engine)
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        await engine.dispose()
    return 0


if __name__ == "__main__":
    from app.core.logging import setup_logging

    setup_logging()
    sys.exit(asyncio.run(main()))
