"""
Repair Order Domain Model

Maintenance jobs taken in for customers. Like purchases, repair orders are
plain records and never touch stock.
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, Literal, Optional

from pydantic import BaseModel, Field

from stockledger.domain.common import RequestModel, new_id, utc_now

RepairStatus = Literal["received", "in_progress", "completed", "delivered", "cancelled"]


class RepairOrder(BaseModel):
    COLLECTION: ClassVar[str] = "repair_orders"

    id: str = Field(..., description="Repair order ID")
    customer_name: str = Field(..., description="Customer name")
    customer_phone: Optional[str] = None
    device: str = Field(..., description="Item being repaired")
    issue_description: Optional[str] = None
    status: RepairStatus = "received"
    received_at: datetime = Field(default_factory=utc_now)
    details: Dict[str, Any] = Field(default_factory=dict, description="Free-form details")
    updated_at: Optional[datetime] = None

    def to_record(self) -> dict:
        return self.model_dump(mode="json")

    def to_dict(self) -> dict:
        return self.to_record()


class RepairOrderCreate(RequestModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    device: str = Field(..., min_length=1)
    issue_description: Optional[str] = None
    status: RepairStatus = "received"
    details: Dict[str, Any] = Field(default_factory=dict)

    def build(self) -> RepairOrder:
        return RepairOrder(id=new_id(), **self.model_dump())


class RepairOrderStatusUpdate(RequestModel):
    status: RepairStatus
