"""Installation request endpoints: tenders with their consignees, plus consignee CSV import."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.deps import get_current_user, require_role
from app.db.session import get_session
from app.models.tender import Consignee, ConsignmentStatus, Tender, TenderStatus
from app.models.user import User
from app.schemas.consignee_import import ImportResult
from app.schemas.tender import InstallationRequestCreate, TenderOut
from app.services.consignee_import import (
    TEMPLATE_FILENAME,
    ParseError,
    generate_template,
    import_locations,
)

logger = logging.getLogger(__name__)

router = APIRouter()

WRITE_ROLES = ("admin", "logistics")


# ─── Helpers ───

def _sr_sort_key(consignee) -> tuple[int, str]:
    # "2" before "10"
    return (len(consignee.sr_no), consignee.sr_no)


def _to_out(tender: Tender) -> TenderOut:
    out = TenderOut.model_validate(tender)
    out.consignees.sort(key=_sr_sort_key)
    return out


async def _load_tender(db: AsyncSession, tender_id: uuid.UUID) -> Tender:
    stmt = (
        select(Tender)
        .where(Tender.id == tender_id)
        .options(selectinload(Tender.consignees))
    )
    return (await db.execute(stmt)).scalar_one()


# ─── POST /installation-requests ───

@router.post(
    "",
    response_model=TenderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tender with its consignee locations (admin, logistics)",
)
async def create_installation_request(
    body: InstallationRequestCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(require_role(*WRITE_ROLES))],
):
    existing = (
        await db.execute(select(Tender.id).where(Tender.tender_number == body.tender_number))
    ).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tender '{body.tender_number}' already exists.",
        )

    pending = body.accessories_pending
    consignee_accessories = {
        "status": pending,
        "count": len(body.selected_accessories),
        "items": list(body.selected_accessories),
    }

    tender = Tender(
        tender_number=body.tender_number,
        authority_type=body.authority_type,
        po_date=body.po_contract_date,
        contract_date=body.po_contract_date,
        equipment_name=body.equipment,
        lead_time_to_deliver=body.lead_time_to_deliver,
        lead_time_to_install=body.lead_time_to_install,
        remarks=body.remarks,
        has_accessories=body.has_accessories,
        accessories=list(body.selected_accessories),
        accessories_pending=pending,
        status=TenderStatus.draft.value,
        created_by=current_user.id,
        consignees=[
            Consignee(
                sr_no=str(index),
                district_name=loc.district_name,
                block_name=loc.block_name,
                facility_name=loc.facility_name,
                contact_person=loc.contact_name or None,
                contact_number=loc.contact_phone or None,
                email=loc.contact_email or None,
                consignment_status=ConsignmentStatus.processing.value,
                accessories_pending=dict(consignee_accessories),
            )
            for index, loc in enumerate(body.locations, start=1)
        ],
    )
    db.add(tender)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Tender %s rejected by constraint: %s", body.tender_number, exc.orig)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tender '{body.tender_number}' already exists.",
        )
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Error creating tender/installation request: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not create installation request.",
        )

    logger.info(
        "Tender/installation request created: %s (%d consignee(s))",
        tender.id, len(body.locations),
    )
    return _to_out(await _load_tender(db, tender.id))


# ─── GET /installation-requests ───

@router.get(
    "",
    response_model=list[TenderOut],
    summary="List tenders with consignees, newest first",
)
async def list_installation_requests(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    stmt = (
        select(Tender)
        .options(selectinload(Tender.consignees))
        .order_by(Tender.created_at.desc())
    )
    tenders = (await db.execute(stmt)).scalars().all()
    return [_to_out(t) for t in tenders]


# ─── POST /installation-requests/consignees/upload ───

@router.post(
    "/consignees/upload",
    response_model=ImportResult,
    summary="Parse a consignee CSV and return locations plus duplicate warnings (admin, logistics)",
)
async def upload_consignee_csv(
    current_user: Annotated[User, Depends(require_role(*WRITE_ROLES))],
    file: UploadFile | None = File(default=None),
):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes",
        )

    try:
        return import_locations(content)
    except ParseError as exc:
        logger.warning("Error processing CSV '%s': %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# ─── GET /installation-requests/consignees/template ───

@router.get(
    "/consignees/template",
    response_class=Response,
    summary="Download an empty consignee CSV template",
)
async def download_consignee_template(
    current_user: Annotated[User, Depends(get_current_user)],
):
    return Response(
        content=generate_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={TEMPLATE_FILENAME}"},
    )
