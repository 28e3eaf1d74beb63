"""
Purchase Domain Model

Plain bookkeeping record of stock bought from a supplier. Purchases are
stored as-is; they do not change product stock.
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, Field

from stockledger.domain.common import RequestModel, new_id, utc_now


class Purchase(BaseModel):
    COLLECTION: ClassVar[str] = "purchases"

    id: str = Field(..., description="Purchase ID")
    product_id: Optional[str] = Field(None, description="Product bought, if catalogued")
    product_name: Optional[str] = Field(None, description="Product name as bought")
    supplier: Optional[str] = Field(None, description="Supplier name")
    quantity: int = Field(..., description="Units bought", ge=1)
    purchase_date: datetime = Field(default_factory=utc_now, description="Purchase date")
    notes: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict, description="Free-form details")
    created_at: datetime = Field(default_factory=utc_now)

    def to_record(self) -> dict:
        return self.model_dump(mode="json")

    def to_dict(self) -> dict:
        return self.to_record()


class PurchaseCreate(RequestModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    supplier: Optional[str] = None
    quantity: int = Field(..., ge=1)
    purchase_date: Optional[datetime] = None
    notes: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    def build(self) -> Purchase:
        data = self.model_dump(exclude_none=True)
        return Purchase(id=new_id(), **data)
