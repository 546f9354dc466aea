# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, raise_for_error
from storefront.data.database import get_db
from storefront.domain.schemas import CartItemIn, CartOut, UpdateQuantityIn
from storefront.services.cart_service import CartService
from storefront.utils.result import Err

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).get_cart(user_id)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).add_item(
        user_id=user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item_quantity(
    item_id: int,
    payload: UpdateQuantityIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).update_item_quantity(user_id, item_id, payload.quantity)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    quantity: int = Query(1, description="O ile zmniejszyc ilosc; 0 pozostalych usuwa pozycje"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).remove_item(user_id, item_id, quantity)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


@router.delete("", response_model=CartOut)
def clear_cart(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
):
    result = get_service(db).clear_cart(user_id)
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value
