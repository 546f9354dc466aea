# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class ProductIn(BaseModel):
    """Schema dla tworzenia i pelnej aktualizacji produktu."""

    name: str = Field(..., min_length=2, max_length=100, description="Nazwa produktu")
    description: str = Field("", description="Opis produktu")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Cena (>= 0)")
    stock: int = Field(0, ge=0, le=99, description="Stan magazynowy (0-99)")
    category: str | None = Field(None, max_length=100)
    image_url: str | None = None
    link: str | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    category: str | None = None
    image_url: str | None = None
    link: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductMessageOut(BaseModel):
    message: str
    product: ProductOut


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., ge=0, description="ID produktu")
    quantity: int = Field(1, ge=1, description="Ilosc produktu (musi byc >= 1)")


class UpdateQuantityIn(BaseModel):
    """Ilosc 0 usuwa pozycje z koszyka."""

    quantity: int = Field(1, ge=0, le=99, description="Nowa ilosc (0-99)")


class CartItemOut(BaseModel):
    id: int
    product: ProductOut
    quantity: int
    subtotal: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    id: int
    user_id: str
    items: List[CartItemOut]
    total_price: Decimal
    total_items: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AuthStatusOut(BaseModel):
    is_authenticated: bool
    user_id: str | None = None
