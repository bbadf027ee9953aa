from app.models.user import User
from app.models.tender import Tender, Consignee, TenderStatus, ConsignmentStatus

__all__ = [
    "User",
    "Tender", "Consignee", "TenderStatus", "ConsignmentStatus",
]
