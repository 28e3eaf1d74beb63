"""
Sale Domain Model

A sale is created only by TransactionCoordinator.sell and changed at most
once afterwards, by UndoCoordinator.undo_sale setting ``is_cancelled``.
Sales are never deleted; they may outlive the product they reference.
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, Field

from stockledger.domain.common import RequestModel, new_id, utc_now


class Sale(BaseModel):
    """
    Sale domain model

    Fields:
        id: Opaque sale id assigned at creation
        product_id: Product sold (may no longer exist)
        quantity_sold: Units sold, fixed at creation
        sale_date: When the sale was recorded (UTC)
        is_cancelled: One-way flag set by undo
        cancelled_at: When the sale was undone
        sale_data: Caller metadata, stored verbatim
    """

    COLLECTION: ClassVar[str] = "sales"

    id: str = Field(..., description="Sale ID")
    product_id: str = Field(..., description="Product sold")
    quantity_sold: int = Field(..., description="Units sold", gt=0)
    sale_date: datetime = Field(..., description="Sale timestamp")
    is_cancelled: bool = Field(False, description="Whether the sale was undone")
    cancelled_at: Optional[datetime] = Field(None, description="Cancellation timestamp")
    sale_data: Dict[str, Any] = Field(default_factory=dict, description="Sale metadata")

    @classmethod
    def new(cls, product_id: str, quantity_sold: int,
            sale_data: Optional[Dict[str, Any]] = None) -> "Sale":
        return cls(
            id=new_id(),
            product_id=product_id,
            quantity_sold=quantity_sold,
            sale_date=utc_now(),
            sale_data=dict(sale_data or {}),
        )

    @classmethod
    def from_record(cls, record: dict) -> "Sale":
        return cls.model_validate(record)

    def to_record(self) -> dict:
        return self.model_dump(mode="json")

    def to_dict(self) -> dict:
        return self.to_record()


class SellRequest(RequestModel):
    """Body of POST /products/{id}/sell"""

    # Validated by check_quantity: missing or non-integer values are InvalidQuantity
    quantity_sold: Any = Field(None, description="Units to sell")
    sale_data: Dict[str, Any] = Field(default_factory=dict, description="Sale metadata")


class UndoRequest(RequestModel):
    """
    Body of PUT /sales/{id}/undo

    Both fields are informational: the stored sale decides which product is
    restored and by how much.
    """

    product_id: Optional[str] = None
    quantity_sold: Optional[int] = None


class UndoResult(BaseModel):
    """Outcome of a committed undo"""

    sale_id: str
    product_id: str
    quantity_restored: int
    product_restored: bool
    warning: Optional[str] = None
