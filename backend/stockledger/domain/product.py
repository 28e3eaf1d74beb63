"""
Product Domain Model

Represents a product in a user's inventory.

``quantity`` belongs to the sell/undo engine: it can be set when a product
is created, but afterwards only TransactionCoordinator and UndoCoordinator
change it. ProductUpdate therefore has no quantity field and rejects unknown
fields.
"""
from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from stockledger.domain.common import RequestModel, new_id, utc_now


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Opaque product id, unique within the owner's namespace
        name: Product name
        quantity: Units in stock, never negative
        sku: Stock Keeping Unit (optional)
        description: Product description (optional)
        category: Product category (optional)
        unit: Unit description (e.g., "1un", "100gr")
        min_stock: Low-stock alert threshold
        created_at: When product was created
        updated_at: When product was last updated

    Any other descriptive fields are kept verbatim.
    """

    COLLECTION: ClassVar[str] = "products"

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    quantity: int = Field(0, description="Units in stock", ge=0)

    sku: Optional[str] = Field(None, description="Stock Keeping Unit")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Product category")
    unit: Optional[str] = Field(None, description="Unit description (1un, 100gr, etc.)")
    min_stock: int = Field(0, description="Minimum stock threshold", ge=0)

    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(extra="allow")

    @property
    def is_low_stock(self) -> bool:
        """Check if product stock is at or below minimum threshold"""
        return self.quantity <= self.min_stock

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.quantity <= 0

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        return cls.model_validate(record)

    def to_record(self) -> dict:
        """JSON-ready dict for storage"""
        return self.model_dump(mode="json")

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.to_record()
        data['is_low_stock'] = self.is_low_stock
        data['is_out_of_stock'] = self.is_out_of_stock
        return data


# Assigned or computed by the server; dropped when a client re-posts a fetched product
SERVER_FIELDS = {
    "id", "created_at", "updated_at", "createdAt", "updatedAt",
    "is_low_stock", "is_out_of_stock", "isLowStock", "isOutOfStock",
}


class ProductCreate(RequestModel):
    """Schema for creating a new product"""

    name: str = Field(..., min_length=1)
    quantity: int = Field(0, ge=0)
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    min_stock: int = Field(0, ge=0)

    model_config = ConfigDict(extra="allow")

    def build(self) -> Product:
        data = {k: v for k, v in self.model_dump().items() if k not in SERVER_FIELDS}
        return Product(id=new_id(), created_at=utc_now(), **data)


class ProductUpdate(RequestModel):
    """Schema for updating an existing product (stock is not editable here)"""

    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    min_stock: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")

    def apply_to(self, product: Product) -> Product:
        changes = self.model_dump(exclude_unset=True)
        data = product.to_record()
        data.update(changes)
        data['updated_at'] = utc_now()
        return Product.model_validate(data)
