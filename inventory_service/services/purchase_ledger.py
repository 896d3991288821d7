from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from inventory_service.models.purchase import PurchaseRecord, PurchaseStatus


def get_purchase(db: Session, purchase_id: int) -> PurchaseRecord | None:
    return db.get(PurchaseRecord, purchase_id)


def list_purchases(
    db: Session,
    page: int = 0,
    size: int = 10,
    product_id: int | None = None,
    status: PurchaseStatus | None = None,
) -> tuple[list[PurchaseRecord], int]:
    q = db.query(PurchaseRecord)
    if product_id is not None:
        q = q.filter(PurchaseRecord.product_id == product_id)
    if status:
        q = q.filter(PurchaseRecord.status == status)
    return q.order_by(PurchaseRecord.id).offset(page * size).limit(size).all(), q.count()


def recent_purchases(db: Session, limit: int = 10) -> list[PurchaseRecord]:
    return (
        db.query(PurchaseRecord)
        .order_by(PurchaseRecord.purchased_at.desc(), PurchaseRecord.id.desc())
        .limit(limit)
        .all()
    )


def total_sales_for_product(db: Session, product_id: int) -> Decimal:
    total = (
        db.query(func.sum(PurchaseRecord.total_price))
        .filter(
            PurchaseRecord.product_id == product_id,
            PurchaseRecord.status == PurchaseStatus.COMPLETED,
        )
        .scalar()
    )
    return Decimal(total) if total is not None else Decimal("0.00")


def statistics(db: Session) -> dict:
    by_status = dict(
        db.query(PurchaseRecord.status, func.count(PurchaseRecord.id)).group_by(PurchaseRecord.status).all()
    )
    total_sales = (
        db.query(func.sum(PurchaseRecord.total_price))
        .filter(PurchaseRecord.status == PurchaseStatus.COMPLETED)
        .scalar()
    )
    return {
        "total_purchases": sum(by_status.values()),
        "total_sales": Decimal(total_sales) if total_sales is not None else Decimal("0.00"),
        "completed": by_status.get(PurchaseStatus.COMPLETED, 0),
        "cancelled": by_status.get(PurchaseStatus.CANCELLED, 0),
    }
