from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from products_service.database import get_db
from products_service.schemas.product import (
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductStatistics,
    ProductUpdate,
)
from products_service.services import product_service
from products_service.services.product_service import DuplicateProductError

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    try:
        return product_service.create_product(db, data)
    except DuplicateProductError as e:
        raise HTTPException(409, str(e))


@router.get("", response_model=ProductPage)
def list_products(page: int = Query(0, ge=0), size: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    items, total = product_service.list_products(db, page=page, size=size)
    return {"items": items, "page": page, "size": size, "total": total}


@router.get("/search", response_model=list[ProductOut])
def search_products(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return product_service.search_by_name(db, name)


@router.get("/statistics", response_model=ProductStatistics)
def product_statistics(db: Session = Depends(get_db)):
    return product_service.statistics(db)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.get("/{product_id}/exists", response_model=bool)
def product_exists(product_id: int, db: Session = Depends(get_db)):
    return product_service.product_exists(db, product_id)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    try:
        product = product_service.update_product(db, product_id, data)
    except DuplicateProductError as e:
        raise HTTPException(409, str(e))
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    if not product_service.delete_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return Response(status_code=204)
