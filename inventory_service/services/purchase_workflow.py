"""Purchase processing and cancellation.

A purchase runs in two phases:

1. The product price is fetched from the products service. No database
   transaction is open while this network call runs.
2. Stock check, purchase insert and stock decrement run in one transaction on
   the caller's session and are committed together.

``has_sufficient_stock`` in phase 2 is only a fast fail. The authoritative
check is the conditional UPDATE inside ``StockLedger.decrease``: when two
purchases race for the same stock, the loser fails there and its purchase
row is rolled back with it.
"""

import logging

from sqlalchemy.orm import Session

from inventory_service.clients.product_directory import ProductDirectoryClient
from inventory_service.errors import (
    AlreadyCancelledError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
    ProductUnavailableError,
)
from inventory_service.models.purchase import (
    PURCHASE_CANCELLED_NOTE,
    PURCHASE_COMPLETED_NOTE,
    PurchaseRecord,
    PurchaseStatus,
    compute_total,
)
from inventory_service.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class PurchaseWorkflow:
    def __init__(self, stock_ledger: StockLedger, products: ProductDirectoryClient):
        self.stock_ledger = stock_ledger
        self.products = products

    def process_purchase(self, db: Session, product_id: int, quantity: int) -> PurchaseRecord:
        if quantity is None or quantity <= 0:
            raise InvalidArgumentError(
                "Quantity must be greater than zero",
                details={"quantity": "must be greater than zero"},
            )

        logger.info("Processing purchase for product %s with quantity %s", product_id, quantity)

        # Raises ProductUnavailableError; nothing has been written yet
        product = self.products.get_product(product_id)
        unit_price = product.price

        try:
            if not self.stock_ledger.has_sufficient_stock(db, product_id, quantity):
                logger.warning("Insufficient stock for product %s, requested %s", product_id, quantity)
                raise InsufficientStockError(f"Insufficient stock for product with id: {product_id}")

            purchase = PurchaseRecord(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                total_price=compute_total(unit_price, quantity),
                status=PurchaseStatus.COMPLETED,
                notes=PURCHASE_COMPLETED_NOTE,
            )
            db.add(purchase)
            db.flush()

            try:
                self.stock_ledger.decrease(db, product_id, quantity)
            except InsufficientStockError:
                logger.warning(
                    "Stock for product %s changed after the availability check; rolling back purchase",
                    product_id,
                )
                raise

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(purchase)
        logger.info("Purchase %s processed for product %s", purchase.id, product_id)
        return purchase

    def cancel_purchase(self, db: Session, purchase_id: int) -> PurchaseRecord:
        logger.info("Cancelling purchase %s", purchase_id)

        try:
            purchase = db.get(PurchaseRecord, purchase_id, with_for_update=True)
            if purchase is None:
                raise NotFoundError(f"Purchase not found with id: {purchase_id}")

            if purchase.status == PurchaseStatus.CANCELLED:
                logger.warning("Purchase %s is already cancelled", purchase_id)
                raise AlreadyCancelledError(f"Purchase {purchase_id} is already cancelled")

            # Only completed purchases took stock out, so only they put it back.
            # A failed restore leaves the status untouched.
            if purchase.status == PurchaseStatus.COMPLETED:
                self.stock_ledger.increase(db, purchase.product_id, purchase.quantity)
                logger.info("Restored %s units for product %s", purchase.quantity, purchase.product_id)

            purchase.status = PurchaseStatus.CANCELLED
            purchase.notes = PURCHASE_CANCELLED_NOTE
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(purchase)
        logger.info("Purchase %s cancelled", purchase_id)
        return purchase

    def can_process_purchase(self, db: Session, product_id: int, quantity: int) -> bool:
        """Advisory check: any product lookup failure answers False instead of raising."""
        try:
            self.products.get_product(product_id)
        except ProductUnavailableError as e:
            logger.warning("Product %s unavailable for purchase check: %s", product_id, e)
            return False

        can_process = self.stock_ledger.has_sufficient_stock(db, product_id, quantity)
        logger.debug("Purchase of %s units of product %s can be processed: %s", quantity, product_id, can_process)
        return can_process
