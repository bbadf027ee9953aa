"""Pydantic schemas for consignee CSV import results."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LocationRecord(BaseModel):
    """One parsed delivery location; serialised with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    serial_number: str
    district_name: str = ""
    block_name: str = ""
    facility_name: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    contact_email: str = ""

    @property
    def location_key(self) -> tuple[str, str, str]:
        return (self.district_name, self.block_name, self.facility_name)


class ImportResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    locations: list[LocationRecord]
    warnings: list[str] | None = None
