"""Tests for the seed workflow.

Uses mocked sessions; the real steps are exercised with password hashing patched out.
"""
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.seed import (
    DEFAULT_USERS,
    SAMPLE_TENDERS,
    SEED_STEPS,
    run_steps,
    seed_sample_consignees,
    seed_users,
)
from app.models.tender import Consignee, Tender
from app.models.user import User


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _result(first=None) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.first.return_value = first
    return result


def make_mock_session(first=None) -> AsyncMock:
    db = AsyncMock()
    db.execute = AsyncMock(return_value=_result(first))
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


# ─── run_steps ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_run_steps_executes_in_order_and_commits_once():
    order: list[str] = []

    def make_step(name):
        async def step(db, ctx):
            order.append(name)
            ctx[name] = True
        return step

    db = make_mock_session()
    ctx = await run_steps(db, [("one", make_step("one")), ("two", make_step("two"))])

    assert order == ["one", "two"]
    assert ctx == {"one": True, "two": True}
    db.commit.assert_awaited_once()
    db.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_run_steps_rolls_back_everything_on_failure():
    ran: list[str] = []

    async def ok(db, ctx):
        ran.append("ok")

    async def boom(db, ctx):
        raise RuntimeError("insert failed")

    async def never(db, ctx):
        ran.append("never")

    db = make_mock_session()
    with pytest.raises(RuntimeError, match="insert failed"):
        await run_steps(db, [("ok", ok), ("boom", boom), ("never", never)])

    assert ran == ["ok"]
    db.rollback.assert_awaited_once()
    db.commit.assert_not_awaited()


def test_seed_steps_order():
    assert [name for name, _ in SEED_STEPS] == ["users", "sample tenders", "sample consignees"]


# ─── Steps ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_seed_users_creates_missing_users_with_one_hash():
    db = make_mock_session(first=None)
    ctx: dict = {}

    with patch("app.core.seed.hash_password", return_value="hashed") as hasher:
        await seed_users(db, ctx)

    assert hasher.call_count == 1
    added = [call.args[0] for call in db.add.call_args_list]
    assert [u.username for u in added] == [u for u, _, _ in DEFAULT_USERS]
    assert all(isinstance(u, User) and u.password_hash == "hashed" for u in added)
    assert set(ctx["users"]) == {"admin", "logistics"}
    assert ctx["users"]["admin"].role == "admin"


@pytest.mark.asyncio
async def test_seed_users_skips_existing():
    existing = User(username="admin", email="admin@example.com", password_hash="x", role="admin")
    db = make_mock_session(first=existing)
    ctx: dict = {}

    with patch("app.core.seed.hash_password") as hasher:
        await seed_users(db, ctx)

    hasher.assert_not_called()
    db.add.assert_not_called()
    assert ctx["users"]["admin"] is existing


@pytest.mark.asyncio
async def test_seed_sample_consignees_uses_deterministic_serials():
    tender = Tender(id=uuid.uuid4(), **SAMPLE_TENDERS[0])
    db = make_mock_session(first=None)

    await seed_sample_consignees(db, {"tenders": [tender]})

    consignee = db.add.call_args.args[0]
    assert isinstance(consignee, Consignee)
    assert consignee.sr_no == "SR001"
    assert consignee.tender_id == tender.id
    assert consignee.consignment_status == "Processing"
