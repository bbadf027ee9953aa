"""Pydantic schemas for tender / installation-request endpoints."""
import uuid
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ─── Request ───

class LocationIn(CamelModel):
    """A consignee row as sent by the client (usually straight from the CSV import)."""
    district_name: NonEmptyStr
    block_name: NonEmptyStr
    facility_name: NonEmptyStr
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None


class InstallationRequestCreate(BaseModel):
    tender_number: NonEmptyStr
    authority_type: NonEmptyStr
    po_contract_date: date
    equipment: NonEmptyStr
    lead_time_to_deliver: int = Field(ge=0)
    lead_time_to_install: int = Field(ge=0)
    remarks: str | None = None
    has_accessories: bool = False
    selected_accessories: list[NonEmptyStr] = []
    locations: list[LocationIn] = []

    @property
    def accessories_pending(self) -> bool:
        return self.has_accessories and bool(self.selected_accessories)


# ─── Response ───

class ConsigneeOut(CamelModel):
    id: uuid.UUID
    tender_id: uuid.UUID
    sr_no: str
    district_name: str
    block_name: str
    facility_name: str
    facility_type: str | None = None
    contact_person: str | None = None
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    pincode: str | None = None
    consignment_status: str
    accessories_pending: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class TenderOut(CamelModel):
    id: uuid.UUID
    tender_number: str
    authority_type: str
    po_date: date
    contract_date: date
    equipment_name: str
    equipment_specification: dict[str, Any] | None = None
    warranty_period: int | None = None
    lead_time_to_deliver: int
    lead_time_to_install: int
    remarks: str | None = None
    has_accessories: bool
    accessories: list[str] = []
    accessories_pending: bool
    status: str
    created_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    consignees: list[ConsigneeOut] = []
