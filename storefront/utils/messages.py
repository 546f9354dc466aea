# storefront/utils/messages.py

DB_READ_FAILED = "Database read failed."
DB_UPDATE_FAILED = "Database update failed."
PRODUCT_NOT_FOUND = "Product not found."
NO_PRODUCTS = "No products available."
ITEM_NOT_FOUND = "Item not found in cart."
QUANTITY_AT_LEAST_ONE = "Quantity must be at least 1."
QUANTITY_POSITIVE = "Quantity must be greater than zero."


def no_products_for_category(category: str) -> str:
    return f"No products found for category: {category}."


def insufficient_stock(stock: int, in_cart: int | None = None) -> str:
    if in_cart is None:
        return f"Insufficient stock. Only {stock} available."
    return (
        f"Insufficient stock. Only {stock} available, "
        f"and you already have {in_cart} in your cart."
    )
