# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, raise_for_error
from storefront.data.database import get_db
from storefront.domain.schemas import ProductIn, ProductMessageOut, ProductOut
from storefront.services.product_service import ProductService
from storefront.utils.result import Err

router = APIRouter(prefix="/api/v1/products", tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).create_product(payload)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.get("", response_model=List[ProductOut])
def list_products(
    category: str | None = Query(None),
    db: Session = Depends(get_db),
):
    result = get_service(db).get_products(category)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.get("/random", response_model=ProductOut)
def random_product(
    category: str | None = Query(None),
    db: Session = Depends(get_db),
):
    result = get_service(db).get_random_product(category)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    result = get_service(db).get_categories()
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    result = get_service(db).get_product(product_id)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.put("/{product_id}", response_model=ProductMessageOut)
def update_product(
    product_id: int,
    payload: ProductIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).update_product(product_id, payload)
    if isinstance(result, Err):
        raise_for_error(result)
    return {"message": "The product has been successfully updated.", "product": result.value}


@router.delete("/{product_id}", response_model=ProductMessageOut)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).delete_product(product_id)
    if isinstance(result, Err):
        raise_for_error(result)
    return {"message": "The product has been successfully deleted.", "product": result.value}
