from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from inventory_service.models.purchase import PurchaseStatus


class PurchaseCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class PurchaseOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    status: PurchaseStatus
    notes: str
    purchased_at: datetime

    model_config = {"from_attributes": True}


class PurchasePage(BaseModel):
    items: list[PurchaseOut]
    page: int
    size: int
    total: int


class PurchaseVerification(BaseModel):
    product_id: int
    quantity: int
    can_process: bool


class PurchaseStatistics(BaseModel):
    total_purchases: int
    total_sales: Decimal
    completed: int
    cancelled: int


class ProductSales(BaseModel):
    product_id: int
    total_sales: Decimal
