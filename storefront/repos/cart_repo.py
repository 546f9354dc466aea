# storefront/repos/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import DateTime, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel
from storefront.utils import messages
from storefront.utils.logging import get_logger
from storefront.utils.result import Err, ErrorKind, Ok, Result
from storefront.utils.retry import conflict_retry

logger = get_logger(__name__)

_carts = CartModel.__table__
_items = CartItemModel.__table__
_products = ProductModel.__table__


def _stock_of_item_product():
    # skorelowane podzapytanie: aktualny stan produktu dla wiersza cart_items
    return (
        select(_products.c.stock)
        .where(_products.c.id == _items.c.product_id)
        .scalar_subquery()
    )


class CartRepo:
    """
    Trwalosc koszyka.
    Sprawdzenie stanu i zapis ilosci sa jednym warunkowym UPDATE/INSERT,
    rowcount == 0 oznacza ze warunek nie przeszedl (rollback, Err).
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # odczyt
    # =====================================================
    def _load_cart(self, user_id: str) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .options(selectinload(CartModel.items).selectinload(CartItemModel.product))
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    @conflict_retry()
    def _get_or_create_cart(self, user_id: str) -> CartModel:
        return self._load_or_create_cart(user_id)

    def _load_or_create_cart(self, user_id: str) -> CartModel:
        # jedna proba, IntegrityError lapie retry wolajacego
        cart = self._load_cart(user_id)
        if cart:
            return cart

        logger.info(f"Creating cart for user {user_id}")
        self.db.add(CartModel(user_id=user_id))
        try:
            self.db.commit()
        except IntegrityError:
            #ktos inny utworzyl koszyk w miedzyczasie, retry go odczyta
            self.db.rollback()
            raise

        return self._load_cart(user_id)

    def _find_item(self, cart_id: int, item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .where(CartItemModel.id == item_id, CartItemModel.cart_id == cart_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _find_item_by_product(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .where(CartItemModel.cart_id == cart_id, CartItemModel.product_id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _failed(self, operation: str, exc: Exception) -> Err:
        self.db.rollback()
        logger.error(f"Failed to {operation}: {exc}")
        return Err(f"Failed to {operation}.", ErrorKind.PERSISTENCE)

    def _stock_conflict(self, cart_id: int, product_id: int, with_current: bool) -> Err:
        self.db.rollback()
        product = self.db.get(ProductModel, product_id, populate_existing=True)
        if product is None:
            return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)

        if not with_current:
            return Err(messages.insufficient_stock(product.stock), ErrorKind.STOCK_CONFLICT)

        item = self._find_item_by_product(cart_id, product_id)
        current = item.quantity if item else 0
        return Err(messages.insufficient_stock(product.stock, current), ErrorKind.STOCK_CONFLICT)

    def _touch(self, cart_id: int, now: datetime):
        self.db.execute(_carts.update().where(_carts.c.id == cart_id).values(updated_at=now))

    def get_cart(self, user_id: str) -> Result[CartModel]:
        try:
            return Ok(self._get_or_create_cart(user_id))
        except SQLAlchemyError as e:
            return self._failed("get cart", e)

    def get_item(self, user_id: str, item_id: int) -> Result[CartItemModel]:
        try:
            cart = self._get_or_create_cart(user_id)
            item = self._find_item(cart.id, item_id)
        except SQLAlchemyError as e:
            return self._failed("get cart item", e)

        if item is None:
            return Err(messages.ITEM_NOT_FOUND, ErrorKind.NOT_FOUND)
        return Ok(item)

    # =====================================================
    # zapis
    # =====================================================
    def add_item(self, user_id: str, product_id: int, quantity: int) -> Result[CartModel]:
        try:
            return self._add_item(user_id, product_id, quantity)
        except SQLAlchemyError as e:
            return self._failed("add item to cart", e)

    @conflict_retry()
    def _add_item(self, user_id: str, product_id: int, quantity: int) -> Result[CartModel]:
        cart = self._load_or_create_cart(user_id)
        now = datetime.now(timezone.utc)
        existing = self._find_item_by_product(cart.id, product_id)

        if existing is not None:
            # UPDATE ... SET quantity = quantity + n WHERE quantity + n <= stock
            rowcount = self.db.execute(
                _items.update()
                .where(
                    _items.c.id == existing.id,
                    _items.c.quantity + quantity <= _stock_of_item_product(),
                )
                .values(quantity=_items.c.quantity + quantity, updated_at=now)
            ).rowcount
        else:
            # INSERT ... SELECT z warunkiem na stan, unique (cart_id, product_id) pilnuje duplikatow
            source = (
                select(
                    literal(cart.id),
                    literal(product_id),
                    literal(quantity),
                    literal(now, DateTime(timezone=True)),
                    literal(now, DateTime(timezone=True)),
                )
                .select_from(_products)
                .where(_products.c.id == product_id, _products.c.stock >= quantity)
            )
            try:
                rowcount = self.db.execute(
                    _items.insert().from_select(
                        ["cart_id", "product_id", "quantity", "created_at", "updated_at"],
                        source,
                    )
                ).rowcount
            except IntegrityError:
                self.db.rollback()
                logger.info(f"Concurrent insert of product {product_id} into cart {cart.id}, retrying")
                raise

        if rowcount == 0:
            logger.info(f"Stock check failed adding {quantity} x product {product_id} to cart {cart.id}")
            return self._stock_conflict(cart.id, product_id, with_current=True)

        self._touch(cart.id, now)
        self.db.commit()

        logger.info(f"Added {quantity} x product {product_id} to cart {cart.id}")
        return Ok(self._load_cart(user_id))

    def update_item_quantity(self, user_id: str, item_id: int, quantity: int) -> Result[CartModel]:
        try:
            cart = self._get_or_create_cart(user_id)
            item = self._find_item(cart.id, item_id)
            if item is None:
                return Err(messages.ITEM_NOT_FOUND, ErrorKind.NOT_FOUND)

            now = datetime.now(timezone.utc)

            if quantity <= 0:
                # ilosc <= 0 nigdy nie jest zapisywana, pozycja znika
                self.db.execute(_items.delete().where(_items.c.id == item.id))
                logger.info(f"Removed item {item.id} from cart {cart.id} (quantity set to {quantity})")
            else:
                rowcount = self.db.execute(
                    _items.update()
                    .where(_items.c.id == item.id, _stock_of_item_product() >= quantity)
                    .values(quantity=quantity, updated_at=now)
                ).rowcount
                if rowcount == 0:
                    return self._stock_conflict(cart.id, item.product_id, with_current=False)
                logger.info(f"Set quantity of item {item.id} in cart {cart.id} to {quantity}")

            self._touch(cart.id, now)
            self.db.commit()
            return Ok(self._load_cart(user_id))
        except SQLAlchemyError as e:
            return self._failed("update item quantity", e)

    def remove_item(self, user_id: str, item_id: int, quantity: int = 1) -> Result[CartModel]:
        try:
            cart = self._get_or_create_cart(user_id)
            item = self._find_item(cart.id, item_id)
            if item is None:
                return Err(messages.ITEM_NOT_FOUND, ErrorKind.NOT_FOUND)

            now = datetime.now(timezone.utc)

            #zmniejsz tylko gdy zostaje > 0, inaczej usun wiersz
            rowcount = self.db.execute(
                _items.update()
                .where(_items.c.id == item.id, _items.c.quantity - quantity > 0)
                .values(quantity=_items.c.quantity - quantity, updated_at=now)
            ).rowcount
            if rowcount == 0:
                self.db.execute(_items.delete().where(_items.c.id == item.id))
                logger.info(f"Removed item {item.id} from cart {cart.id}")
            else:
                logger.info(f"Decremented item {item.id} in cart {cart.id} by {quantity}")

            self._touch(cart.id, now)
            self.db.commit()
            return Ok(self._load_cart(user_id))
        except SQLAlchemyError as e:
            return self._failed("remove item from cart", e)

    def clear_cart(self, user_id: str) -> Result[CartModel]:
        try:
            cart = self._get_or_create_cart(user_id)
            now = datetime.now(timezone.utc)

            self.db.execute(_items.delete().where(_items.c.cart_id == cart.id))
            self._touch(cart.id, now)
            self.db.commit()

            logger.info(f"Cleared cart {cart.id}")
            return Ok(self._load_cart(user_id))
        except SQLAlchemyError as e:
            return self._failed("clear cart", e)
