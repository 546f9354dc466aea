# storefront/repos/product_repo.py
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.utils import messages
from storefront.utils.logging import get_logger
from storefront.utils.result import Err, ErrorKind, Ok, Result
from storefront.utils.retry import db_retry

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("name", "description", "price", "stock", "category", "image_url", "link")


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    @db_retry()
    def _scalars(self, stmt) -> list:
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _read_failed(self, operation: str, exc: Exception) -> Err:
        logger.error(f"Failed to {operation}: {exc}")
        return Err(messages.DB_READ_FAILED, ErrorKind.PERSISTENCE)

    def _update_failed(self, operation: str, exc: Exception) -> Err:
        self.db.rollback()
        logger.error(f"Failed to {operation}: {exc}")
        return Err(messages.DB_UPDATE_FAILED, ErrorKind.PERSISTENCE)

    def create_product(self, product: ProductModel) -> Result[ProductModel]:
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
            return Ok(product)
        except SQLAlchemyError as e:
            return self._update_failed("create product", e)

    def get_products(self, category: str | None = None) -> Result[List[ProductModel]]:
        stmt = select(ProductModel).order_by(ProductModel.id)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        try:
            return Ok(self._scalars(stmt))
        except SQLAlchemyError as e:
            return self._read_failed("list products", e)

    def get_product(self, product_id: int) -> Result[ProductModel]:
        try:
            found = self._scalars(select(ProductModel).where(ProductModel.id == product_id))
        except SQLAlchemyError as e:
            return self._read_failed(f"get product {product_id}", e)

        if not found:
            return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)
        return Ok(found[0])

    def get_random_product(self, category: str | None = None) -> Result[ProductModel]:
        stmt = select(ProductModel).order_by(func.random()).limit(1)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        try:
            found = self._scalars(stmt)
        except SQLAlchemyError as e:
            return self._read_failed("get random product", e)

        if not found:
            if category:
                return Err(messages.no_products_for_category(category), ErrorKind.NOT_FOUND)
            return Err(messages.NO_PRODUCTS, ErrorKind.NOT_FOUND)
        return Ok(found[0])

    def get_categories(self) -> Result[List[str]]:
        stmt = (
            select(ProductModel.category)
            .where(ProductModel.category.is_not(None))
            .distinct()
            .order_by(ProductModel.category)
        )
        try:
            return Ok(self._scalars(stmt))
        except SQLAlchemyError as e:
            return self._read_failed("list categories", e)

    def update_product(self, product_id: int, data: dict) -> Result[ProductModel]:
        try:
            existing = self.db.get(ProductModel, product_id)
            if existing is None:
                return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)

            # pelna podmiana pol, bez czesciowego update
            for field in _EDITABLE_FIELDS:
                if field in data:
                    setattr(existing, field, data[field])

            self.db.commit()
            self.db.refresh(existing)
            return Ok(existing)
        except SQLAlchemyError as e:
            return self._update_failed(f"update product {product_id}", e)

    def delete_product(self, product_id: int) -> Result[ProductModel]:
        try:
            existing = self.db.get(ProductModel, product_id)
            if existing is None:
                return Err(messages.PRODUCT_NOT_FOUND, ErrorKind.NOT_FOUND)

            self.db.delete(existing)
            self.db.commit()
            return Ok(existing)
        except SQLAlchemyError as e:
            return self._update_failed(f"delete product {product_id}", e)
