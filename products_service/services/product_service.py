import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from products_service.models.product import Product
from products_service.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class DuplicateProductError(ValueError):
    pass


def _name_taken(db: Session, name: str, exclude_id: int | None = None) -> bool:
    q = db.query(Product).filter(func.lower(Product.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    return q.first() is not None


def create_product(db: Session, data: ProductCreate) -> Product:
    logger.info("Creating product %r", data.name)
    if _name_taken(db, data.name):
        raise DuplicateProductError(f"A product named '{data.name}' already exists")
    product = Product(name=data.name, price=data.price, description=data.description)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created", product.id)
    return product


def get_product(db: Session, product_id: int) -> Product | None:
    return db.query(Product).filter(Product.id == product_id).first()


def list_products(db: Session, page: int = 0, size: int = 10) -> tuple[list[Product], int]:
    q = db.query(Product)
    return q.order_by(Product.id).offset(page * size).limit(size).all(), q.count()


def search_by_name(db: Session, term: str) -> list[Product]:
    return (
        db.query(Product)
        .filter(func.lower(Product.name).contains(term.lower()))
        .order_by(Product.name)
        .all()
    )


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product | None:
    product = get_product(db, product_id)
    if not product:
        return None
    if _name_taken(db, data.name, exclude_id=product_id):
        raise DuplicateProductError(f"A product named '{data.name}' already exists")
    for field, value in data.model_dump().items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    logger.info("Product %s updated", product_id)
    return product


def delete_product(db: Session, product_id: int) -> bool:
    product = get_product(db, product_id)
    if not product:
        return False
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted", product_id)
    return True


def product_exists(db: Session, product_id: int) -> bool:
    return db.query(Product.id).filter(Product.id == product_id).first() is not None


def statistics(db: Session) -> dict:
    count, avg_price, min_price, max_price = db.query(
        func.count(Product.id),
        func.avg(Product.price),
        func.min(Product.price),
        func.max(Product.price),
    ).one()
    zero = Decimal("0.00")
    return {
        "total_products": count,
        "average_price": Decimal(str(avg_price)).quantize(Decimal("0.01")) if avg_price is not None else zero,
        "min_price": min_price if min_price is not None else zero,
        "max_price": max_price if max_price is not None else zero,
    }
