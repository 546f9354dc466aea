# storefront/services/product_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.schemas import ProductIn
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger
from storefront.utils.result import Err, Ok, Result

logger = get_logger(__name__)


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description or "",
        "price": product.price,
        "stock": product.stock,
        "category": product.category,
        "image_url": product.image_url,
        "link": product.link,
    }


def _map(result: Result) -> Result[Dict[str, Any]]:
    if isinstance(result, Err):
        return result
    return Ok(product_to_dict(result.value))


class ProductService:
    """Katalog produktow, cienka warstwa nad ProductRepo."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def create_product(self, payload: ProductIn) -> Result[Dict[str, Any]]:
        result = self.repo.create_product(ProductModel(**payload.model_dump()))
        if isinstance(result, Ok):
            logger.info(f"Created product {result.value.id} ({result.value.name})")
        return _map(result)

    def get_products(self, category: str | None = None) -> Result[List[Dict[str, Any]]]:
        result = self.repo.get_products(category)
        if isinstance(result, Err):
            return result
        return Ok([product_to_dict(p) for p in result.value])

    def get_product(self, product_id: int) -> Result[Dict[str, Any]]:
        return _map(self.repo.get_product(product_id))

    def get_random_product(self, category: str | None = None) -> Result[Dict[str, Any]]:
        return _map(self.repo.get_random_product(category))

    def get_categories(self) -> Result[List[str]]:
        return self.repo.get_categories()

    def update_product(self, product_id: int, payload: ProductIn) -> Result[Dict[str, Any]]:
        result = self.repo.update_product(product_id, payload.model_dump())
        if isinstance(result, Ok):
            logger.info(f"Updated product {product_id}")
        return _map(result)

    def delete_product(self, product_id: int) -> Result[Dict[str, Any]]:
        result = self.repo.delete_product(product_id)
        if isinstance(result, Ok):
            logger.info(f"Deleted product {product_id}")
        return _map(result)
