# storefront/data/models/product.py
from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    category = Column(String(100), nullable=True, index=True)
    image_url = Column(String, nullable=True)
    link = Column(String, nullable=True)

    #usuniecie produktu usuwa tez pozycje z koszykow
    cart_items = relationship(
        "CartItemModel",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0 AND stock <= 99", name="ck_products_stock_range"),
    )
