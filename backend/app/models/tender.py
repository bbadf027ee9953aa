import enum
import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin, UUIDMixin


class TenderStatus(str, enum.Enum):
    draft = "Draft"
    submitted = "Submitted"
    in_progress = "In Progress"
    completed = "Completed"
    closed = "Closed"


class ConsignmentStatus(str, enum.Enum):
    processing = "Processing"
    dispatched = "Dispatched"
    delivered = "Delivered"
    installed = "Installed"


class Tender(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "tenders"

    tender_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    authority_type: Mapped[str] = mapped_column(String(50), nullable=False)
    po_date: Mapped[date] = mapped_column(Date, nullable=False)
    contract_date: Mapped[date] = mapped_column(Date, nullable=False)
    equipment_name: Mapped[str] = mapped_column(String(255), nullable=False)
    equipment_specification: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    warranty_period: Mapped[int | None] = mapped_column(Integer, nullable=True)  # months
    lead_time_to_deliver: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    lead_time_to_install: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_accessories: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accessories: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    accessories_pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=TenderStatus.draft.value
    )  # Draft, Submitted, In Progress, Completed, Closed
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True
    )

    consignees: Mapped[list["Consignee"]] = relationship(
        "Consignee",
        back_populates="tender",
        cascade="all, delete-orphan",
    )


class Consignee(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "consignees"

    tender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sr_no: Mapped[str] = mapped_column(String(50), nullable=False)
    district_name: Mapped[str] = mapped_column(String(255), nullable=False)
    block_name: Mapped[str] = mapped_column(String(255), nullable=False)
    facility_name: Mapped[str] = mapped_column(String(255), nullable=False)
    facility_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    consignment_status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ConsignmentStatus.processing.value
    )
    # {"status": bool, "count": int, "items": [str, ...]}
    accessories_pending: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    tender: Mapped["Tender"] = relationship("Tender", back_populates="consignees")
