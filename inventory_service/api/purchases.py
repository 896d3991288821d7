from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from inventory_service.api.deps import get_purchase_workflow
from inventory_service.config import settings
from inventory_service.database import get_db
from inventory_service.models.purchase import PurchaseStatus
from inventory_service.schemas.purchase import (
    ProductSales,
    PurchaseCreate,
    PurchaseOut,
    PurchasePage,
    PurchaseStatistics,
    PurchaseVerification,
)
from inventory_service.services import purchase_ledger
from inventory_service.services.purchase_workflow import PurchaseWorkflow

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("", response_model=PurchaseOut, status_code=201)
def create_purchase(
    data: PurchaseCreate,
    db: Session = Depends(get_db),
    workflow: PurchaseWorkflow = Depends(get_purchase_workflow),
):
    return workflow.process_purchase(db, data.product_id, data.quantity)


@router.get("", response_model=PurchasePage)
def list_purchases(
    product_id: int | None = None,
    status: PurchaseStatus | None = None,
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    items, total = purchase_ledger.list_purchases(db, page=page, size=size, product_id=product_id, status=status)
    return {"items": items, "page": page, "size": size, "total": total}


@router.get("/recent", response_model=list[PurchaseOut])
def recent_purchases(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return purchase_ledger.recent_purchases(db, limit=limit)


@router.get("/statistics", response_model=PurchaseStatistics)
def purchase_statistics(db: Session = Depends(get_db)):
    return purchase_ledger.statistics(db)


@router.get("/verify", response_model=PurchaseVerification)
def verify_purchase(
    product_id: int,
    quantity: int,
    db: Session = Depends(get_db),
    workflow: PurchaseWorkflow = Depends(get_purchase_workflow),
):
    can_process = workflow.can_process_purchase(db, product_id, quantity)
    return {"product_id": product_id, "quantity": quantity, "can_process": can_process}


@router.get("/product/{product_id}/total-sales", response_model=ProductSales)
def product_total_sales(product_id: int, db: Session = Depends(get_db)):
    return {"product_id": product_id, "total_sales": purchase_ledger.total_sales_for_product(db, product_id)}


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase = purchase_ledger.get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")
    return purchase


@router.post("/{purchase_id}/cancel", response_model=PurchaseOut)
def cancel_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    workflow: PurchaseWorkflow = Depends(get_purchase_workflow),
):
    return workflow.cancel_purchase(db, purchase_id)
