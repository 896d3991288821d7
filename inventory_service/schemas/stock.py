from datetime import datetime

from pydantic import BaseModel, Field


class StockCreate(BaseModel):
    product_id: int
    quantity: int = Field(ge=0)
    min_quantity: int | None = Field(default=None, ge=0)
    max_quantity: int | None = Field(default=None, ge=0)


class StockQuantity(BaseModel):
    quantity: int = Field(ge=0)


class StockAdjust(BaseModel):
    quantity: int


class StockOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    min_quantity: int
    max_quantity: int | None
    active: bool
    is_low_stock: bool
    is_at_maximum: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StockPage(BaseModel):
    items: list[StockOut]
    page: int
    size: int
    total: int


class StockCheck(BaseModel):
    product_id: int
    quantity: int
    sufficient: bool


class StockStatistics(BaseModel):
    active_records: int
    total_units: int
    low_stock_count: int
