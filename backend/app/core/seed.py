"""Seed default users and sample tender data into the database.

Steps run in order on one session and commit together; any failure rolls
back every step. Each step skips rows that already exist, so re-running is
safe.

Run: python -m app.core.seed
"""
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.models.tender import Consignee, ConsignmentStatus, Tender, TenderStatus
from app.models.user import User

logger = logging.getLogger(__name__)

SeedContext = dict[str, Any]
SeedStep = Callable[[AsyncSession, SeedContext], Awaitable[None]]

# (username, email, role)
DEFAULT_USERS = [
    ("admin", "admin@example.com", "admin"),
    ("logistics", "logistics@example.com", "logistics"),
]

SAMPLE_TENDERS = [
    {
        "tender_number": "TENDER/2024/001",
        "authority_type": "UPMSCL",
        "po_date": date(2024, 3, 1),
        "contract_date": date(2024, 2, 15),
        "lead_time_to_install": 30,
        "lead_time_to_deliver": 15,
        "equipment_name": "X-Ray Machine",
        "equipment_specification": {
            "model": "XR-2000",
            "manufacturer": "Medical Systems Inc",
            "features": ["Digital imaging", "Cloud storage"],
        },
        "warranty_period": 24,
    },
]

SAMPLE_CONSIGNEE = {
    "district_name": "Sample District",
    "block_name": "Sample Block",
    "facility_name": "District Hospital",
    "facility_type": "Hospital",
    "contact_person": "John Doe",
    "contact_number": "9876543210",
    "email": "hospital@example.com",
    "address": "Sample Address",
    "pincode": "123456",
}


# ─── Steps ───

async def seed_users(db: AsyncSession, ctx: SeedContext) -> None:
    users: dict[str, User] = {}
    password_hash = None
    for username, email, role in DEFAULT_USERS:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalars().first()
        if user is None:
            # bcrypt is slow; hash once and share across default accounts
            password_hash = password_hash or hash_password(settings.DEFAULT_PASSWORD)
            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                is_active=True,
            )
            db.add(user)
            logger.info("Seeded user: %s (%s)", username, role)
        else:
            logger.info("User already exists: %s, skipping", username)
        users[username] = user
    await db.flush()
    ctx["users"] = users


async def seed_sample_tenders(db: AsyncSession, ctx: SeedContext) -> None:
    admin = ctx["users"]["admin"]
    tenders: list[Tender] = []
    for spec in SAMPLE_TENDERS:
        result = await db.execute(
            select(Tender).where(Tender.tender_number == spec["tender_number"])
        )
        tender = result.scalars().first()
        if tender is None:
            tender = Tender(
                **spec,
                status=TenderStatus.draft.value,
                created_by=admin.id,
            )
            db.add(tender)
            logger.info("Seeded tender: %s", spec["tender_number"])
        else:
            logger.info("Tender already exists: %s, skipping", spec["tender_number"])
        tenders.append(tender)
    await db.flush()
    ctx["tenders"] = tenders


async def seed_sample_consignees(db: AsyncSession, ctx: SeedContext) -> None:
    for index, tender in enumerate(ctx["tenders"], start=1):
        sr_no = f"SR{index:03d}"
        result = await db.execute(
            select(Consignee).where(Consignee.tender_id == tender.id, Consignee.sr_no == sr_no)
        )
        if result.scalars().first() is not None:
            logger.info("Consignee %s for %s already exists, skipping", sr_no, tender.tender_number)
            continue
        db.add(Consignee(
            tender_id=tender.id,
            sr_no=sr_no,
            consignment_status=ConsignmentStatus.processing.value,
            accessories_pending={"status": False, "count": 0, "items": []},
            **SAMPLE_CONSIGNEE,
        ))
        logger.info("Seeded consignee %s for %s", sr_no, tender.tender_number)
    await db.flush()


SEED_STEPS: list[tuple[str, SeedStep]] = [
    ("users", seed_users),
    ("sample tenders", seed_sample_tenders),
    ("sample consignees", seed_sample_consignees),
]


# ─── Runner ───

async def run_steps(db: AsyncSession, steps: list[tuple[str, SeedStep]]) -> SeedContext:
    """Run steps in order and commit once; roll everything back on the first failure."""
    ctx: SeedContext = {}
    try:
        for name, step in steps:
            logger.info("Seed step: %s", name)
            await step(db, ctx)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error("Seeding failed; all steps rolled back", exc_info=True)
        raise
    return ctx


async def run_seed() -> None:
    from app.db.session import AsyncSessionLocal

    async with AsyncSessionLocal() as db:
        await run_steps(db, SEED_STEPS)
    logger.info("Database seeded successfully!")


if __name__ == "__main__":
    from app.core.logging import setup_logging

    setup_logging()
    try:
        asyncio.run(run_seed())
    except Exception:
        sys.exit(1)
