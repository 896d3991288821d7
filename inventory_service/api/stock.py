from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from inventory_service.api.deps import get_stock_ledger
from inventory_service.config import settings
from inventory_service.database import get_db
from inventory_service.schemas.stock import (
    StockAdjust,
    StockCheck,
    StockCreate,
    StockOut,
    StockPage,
    StockQuantity,
    StockStatistics,
)
from inventory_service.services.stock_ledger import StockLedger

router = APIRouter(prefix="/stock", tags=["Stock"])


def _commit(db: Session, record):
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(record)
    return record


@router.post("", response_model=StockOut, status_code=201)
def create_stock(data: StockCreate, db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    record = ledger.create(db, data.product_id, data.quantity, data.min_quantity, data.max_quantity)
    return _commit(db, record)


@router.get("", response_model=StockPage)
def list_stock(
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    items, total = ledger.list_active(db, page=page, size=size)
    return {"items": items, "page": page, "size": size, "total": total}


@router.get("/low-stock", response_model=list[StockOut])
def low_stock(db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    return ledger.low_stock(db)


@router.get("/statistics", response_model=StockStatistics)
def stock_statistics(db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    return ledger.statistics(db)


@router.get("/{stock_id}", response_model=StockOut)
def get_stock(stock_id: int, db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    record = ledger.get_by_id(db, stock_id)
    if not record:
        raise HTTPException(404, "Stock record not found")
    return record


@router.get("/product/{product_id}", response_model=StockOut)
def get_stock_by_product(product_id: int, db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    record = ledger.get_by_product(db, product_id)
    if not record:
        raise HTTPException(404, "Stock record not found")
    return record


@router.put("/product/{product_id}/quantity", response_model=StockOut)
def set_quantity(
    product_id: int,
    data: StockQuantity,
    db: Session = Depends(get_db),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    return _commit(db, ledger.set_quantity(db, product_id, data.quantity))


@router.post("/product/{product_id}/increase", response_model=StockOut)
def increase_stock(
    product_id: int,
    data: StockAdjust,
    db: Session = Depends(get_db),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    return _commit(db, ledger.increase(db, product_id, data.quantity))


@router.post("/product/{product_id}/decrease", response_model=StockOut)
def decrease_stock(
    product_id: int,
    data: StockAdjust,
    db: Session = Depends(get_db),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    return _commit(db, ledger.decrease(db, product_id, data.quantity))


@router.get("/product/{product_id}/check", response_model=StockCheck)
def check_stock(
    product_id: int,
    quantity: int = Query(...),
    db: Session = Depends(get_db),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    sufficient = ledger.has_sufficient_stock(db, product_id, quantity)
    return {"product_id": product_id, "quantity": quantity, "sufficient": sufficient}


@router.delete("/product/{product_id}", status_code=204)
def deactivate_stock(product_id: int, db: Session = Depends(get_db), ledger: StockLedger = Depends(get_stock_ledger)):
    ledger.deactivate(db, product_id)
    db.commit()
    return Response(status_code=204)
