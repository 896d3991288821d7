import logging

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_service.clients.product_directory import ProductDirectoryClient
from inventory_service.errors import (
    ConflictError,
    ExceedsMaximumError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from inventory_service.models.stock import StockRecord

logger = logging.getLogger(__name__)


class StockLedger:
    """Per-product stock records and the only place stock quantities change.

    Methods work inside the caller's session and flush, they never commit or
    roll back: the API route or the purchase workflow owns the transaction.

    ``increase`` and ``decrease`` are conditional UPDATEs that re-check both
    the bound and ``active``, so they hold under concurrent callers even when
    an earlier read (``has_sufficient_stock`` or the active check) is stale.
    """

    def __init__(self, products: ProductDirectoryClient):
        self.products = products

    # --- Reads ---

    def get_by_product(self, db: Session, product_id: int) -> StockRecord | None:
        return db.query(StockRecord).filter(StockRecord.product_id == product_id).first()

    def get_by_id(self, db: Session, stock_id: int) -> StockRecord | None:
        return db.get(StockRecord, stock_id)

    def list_active(self, db: Session, page: int = 0, size: int = 10) -> tuple[list[StockRecord], int]:
        q = db.query(StockRecord).filter(StockRecord.active.is_(True))
        return q.order_by(StockRecord.id).offset(page * size).limit(size).all(), q.count()

    def low_stock(self, db: Session) -> list[StockRecord]:
        return (
            db.query(StockRecord)
            .filter(StockRecord.active.is_(True), StockRecord.quantity <= StockRecord.min_quantity)
            .order_by(StockRecord.quantity)
            .all()
        )

    def statistics(self, db: Session) -> dict:
        active = StockRecord.active.is_(True)
        active_records, total_units = (
            db.query(func.count(StockRecord.id), func.coalesce(func.sum(StockRecord.quantity), 0))
            .filter(active)
            .one()
        )
        low_stock_count = (
            db.query(func.count(StockRecord.id))
            .filter(active, StockRecord.quantity <= StockRecord.min_quantity)
            .scalar()
        )
        return {
            "active_records": active_records,
            "total_units": total_units,
            "low_stock_count": low_stock_count,
        }

    def has_sufficient_stock(self, db: Session, product_id: int, requested: int) -> bool:
        record = self.get_by_product(db, product_id)
        if record is None:
            logger.warning("No stock record for product %s", product_id)
            return False
        if requested < 0:
            return False
        return record.quantity >= requested

    # --- Mutations ---

    def create(
        self,
        db: Session,
        product_id: int,
        quantity: int,
        min_quantity: int | None = None,
        max_quantity: int | None = None,
    ) -> StockRecord:
        logger.info("Creating stock record for product %s with quantity %s", product_id, quantity)
        min_quantity = 0 if min_quantity is None else min_quantity
        _validate_bounds(quantity, min_quantity, max_quantity)

        if not self.products.exists(product_id):
            logger.warning("Product %s does not exist in products service", product_id)
            raise NotFoundError(f"Product not found with id: {product_id}")

        if self.get_by_product(db, product_id) is not None:
            logger.warning("Stock record already exists for product %s", product_id)
            raise ConflictError(f"Stock record already exists for product with id: {product_id}")

        record = StockRecord(
            product_id=product_id,
            quantity=quantity,
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            active=True,
        )
        db.add(record)
        try:
            db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent create for the same product
            logger.warning("Concurrent stock record create for product %s", product_id)
            raise ConflictError(f"Stock record already exists for product with id: {product_id}") from e

        logger.info("Stock record %s created for product %s", record.id, product_id)
        return record

    def increase(self, db: Session, product_id: int, quantity: int) -> StockRecord:
        logger.info("Increasing stock for product %s by %s", product_id, quantity)
        record = self._require_active(db, product_id)
        if quantity <= 0:
            logger.debug("Ignoring non-positive increase of %s for product %s", quantity, product_id)
            return record

        result = db.execute(
            update(StockRecord)
            .where(
                StockRecord.product_id == product_id,
                StockRecord.active.is_(True),
                or_(
                    StockRecord.max_quantity.is_(None),
                    StockRecord.quantity + quantity <= StockRecord.max_quantity,
                ),
            )
            .values(quantity=StockRecord.quantity + quantity, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        record = self._reload(db, product_id)
        if result.rowcount == 0:
            _raise_if_inactive(record)
            logger.warning(
                "Increase of %s for product %s would exceed maximum %s (current %s)",
                quantity, product_id, record.max_quantity, record.quantity,
            )
            raise ExceedsMaximumError(
                f"Quantity for product {product_id} would exceed the maximum allowed stock of {record.max_quantity}"
            )
        return record

    def decrease(self, db: Session, product_id: int, quantity: int) -> StockRecord:
        logger.info("Decreasing stock for product %s by %s", product_id, quantity)
        record = self._require_active(db, product_id)
        if quantity <= 0:
            raise InsufficientStockError(
                f"Cannot decrease stock for product {product_id} by {quantity}",
                details={"quantity": "must be greater than zero"},
            )

        result = db.execute(
            update(StockRecord)
            .where(
                StockRecord.product_id == product_id,
                StockRecord.active.is_(True),
                StockRecord.quantity >= quantity,
            )
            .values(quantity=StockRecord.quantity - quantity, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        record = self._reload(db, product_id)
        if result.rowcount == 0:
            _raise_if_inactive(record)
            logger.warning(
                "Insufficient stock for product %s: requested %s, available %s",
                product_id, quantity, record.quantity,
            )
            raise InsufficientStockError(
                f"Insufficient stock for product {product_id}: requested {quantity}, available {record.quantity}"
            )
        return record

    def set_quantity(self, db: Session, product_id: int, quantity: int) -> StockRecord:
        """Administrative overwrite. Ignores min/max; only rejects negatives."""
        logger.info("Setting stock for product %s to %s", product_id, quantity)
        record = self._require_active(db, product_id)
        if quantity < 0:
            raise InvalidArgumentError("Quantity cannot be negative", details={"quantity": "must be >= 0"})
        record.quantity = quantity
        db.flush()
        return record

    def deactivate(self, db: Session, product_id: int) -> None:
        logger.info("Deactivating stock record for product %s", product_id)
        record = self._require(db, product_id)
        record.active = False
        db.flush()

    # --- Helpers ---

    def _require(self, db: Session, product_id: int) -> StockRecord:
        record = self.get_by_product(db, product_id)
        if record is None:
            raise NotFoundError(f"Stock record not found for product with id: {product_id}")
        return record

    def _require_active(self, db: Session, product_id: int) -> StockRecord:
        record = self._require(db, product_id)
        _raise_if_inactive(record)
        return record

    def _reload(self, db: Session, product_id: int) -> StockRecord:
        return (
            db.query(StockRecord)
            .filter(StockRecord.product_id == product_id)
            .populate_existing()
            .one()
        )


def _raise_if_inactive(record: StockRecord) -> None:
    if not record.active:
        logger.warning("Stock record for product %s is inactive", record.product_id)
        raise ConflictError(f"Stock record for product {record.product_id} is inactive")


def _validate_bounds(quantity: int, min_quantity: int, max_quantity: int | None) -> None:
    errors = {}
    if quantity < 0:
        errors["quantity"] = "must be >= 0"
    if min_quantity < 0:
        errors["min_quantity"] = "must be >= 0"
    if max_quantity is not None and max_quantity < quantity:
        errors["max_quantity"] = "must be >= quantity"
    if errors:
        raise InvalidArgumentError("Invalid stock quantities", details=errors)
