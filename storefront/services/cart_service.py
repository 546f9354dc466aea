# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.repos.cart_repo import CartRepo
from storefront.services.product_service import ProductService, product_to_dict
from storefront.utils import messages
from storefront.utils.logging import get_logger
from storefront.utils.result import Err, ErrorKind, Ok, Result

logger = get_logger(__name__)


def cart_to_dict(cart: CartModel) -> Dict[str, Any]:
    items = []
    total_price = Decimal("0.00")
    total_items = 0

    for i in cart.items:
        subtotal = i.product.price * i.quantity
        items.append(
            {
                "id": i.id,
                "product": product_to_dict(i.product),
                "quantity": i.quantity,
                "subtotal": subtotal,
            }
        )
        total_price += subtotal
        total_items += i.quantity

    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "items": items,
        "total_price": total_price,
        "total_items": total_items,
        "created_at": cart.created_at,
        "updated_at": cart.updated_at,
    }


def _map(result: Result[CartModel]) -> Result[Dict[str, Any]]:
    if isinstance(result, Err):
        return result
    return Ok(cart_to_dict(result.value))


class CartService:
    """
    Use case'y koszyka uzytkownika.
    Koszyk powstaje przy pierwszym odczycie, kazda komenda zwraca caly koszyk
    z przeliczonymi sumami. Ilosc w koszyku nigdy nie przekracza stanu produktu.
    """

    def __init__(self, db: Session, product_service: ProductService | None = None):
        self.repo = CartRepo(db)
        self.product_service = product_service or ProductService(db)

    #query
    def get_cart(self, user_id: str) -> Result[Dict[str, Any]]:
        return _map(self.repo.get_cart(user_id))

    #commands
    def add_item(self, user_id: str, product_id: int, quantity: int) -> Result[Dict[str, Any]]:
        if quantity < 1:
            return Err(messages.QUANTITY_AT_LEAST_ONE, ErrorKind.VALIDATION)

        product_result = self.product_service.get_product(product_id)
        if isinstance(product_result, Err):
            if product_result.kind == ErrorKind.NOT_FOUND:
                return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)
            return product_result
        product = product_result.value

        cart_result = self.repo.get_cart(user_id)
        if isinstance(cart_result, Err):
            return cart_result
        cart = cart_result.value

        existing = next((i for i in cart.items if i.product_id == product_id), None)
        current = existing.quantity if existing else 0

        if current + quantity > product["stock"]:
            logger.info(
                f"Rejected adding {quantity} x product {product_id} to cart {cart.id}: "
                f"stock {product['stock']}, in cart {current}"
            )
            return Err(messages.insufficient_stock(product["stock"], current), ErrorKind.STOCK_CONFLICT)

        # repo powtarza warunek na stanie atomowo przy zapisie
        return _map(self.repo.add_item(user_id, product_id, quantity))

    def update_item_quantity(self, user_id: str, cart_item_id: int, quantity: int) -> Result[Dict[str, Any]]:
        item_result = self.repo.get_item(user_id, cart_item_id)
        if isinstance(item_result, Err):
            return item_result
        item = item_result.value

        product_result = self.product_service.get_product(item.product_id)
        if isinstance(product_result, Err):
            if product_result.kind == ErrorKind.NOT_FOUND:
                return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)
            return product_result
        product = product_result.value

        #absolutna ilosc vs stan, nie przyrost
        if quantity > product["stock"]:
            logger.info(
                f"Rejected setting item {cart_item_id} to {quantity}: stock {product['stock']}"
            )
            return Err(messages.insufficient_stock(product["stock"]), ErrorKind.STOCK_CONFLICT)

        return _map(self.repo.update_item_quantity(user_id, cart_item_id, quantity))

    def remove_item(self, user_id: str, cart_item_id: int, quantity: int = 1) -> Result[Dict[str, Any]]:
        if quantity <= 0:
            return Err(messages.QUANTITY_POSITIVE, ErrorKind.VALIDATION)

        return _map(self.repo.remove_item(user_id, cart_item_id, quantity))

    def clear_cart(self, user_id: str) -> Result[Dict[str, Any]]:
        return _map(self.repo.clear_cart(user_id))
