"""
Cart operations.

A cart holds at most one line per product. Adding a product that is already
in the cart is rejected; quantities change only through update_item_quantity.
Every mutation normalizes line items back to raw product ids and rewrites
the whole item list.
"""
from typing import Any, Dict, List, Optional

from errors import Conflict, InvalidArgument, NotFound
from logger import get_logger
from repositories import carts, products
from schemas import Cart, product_ref_id

_logger = get_logger(__name__)


def _raw_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{"product": product_ref_id(it.get("product")), "quantity": it.get("quantity", 1)} for it in items]


def _index_of(items: List[Dict[str, Any]], product_id: str) -> int:
    for i, it in enumerate(items):
        if product_ref_id(it.get("product")) == str(product_id):
            return i
    return -1


def get_or_create_cart(user_id: str) -> Dict[str, Any]:
    cart = carts.find_by_user_id(user_id)
    if cart is None:
        cart = carts.create(Cart(user=str(user_id), items=[]))
        _logger.debug(f"Created cart for user {user_id}")
    return cart


def add_item(user_id: str, product_id: str, quantity: Optional[int] = 1) -> Dict[str, Any]:
    if not product_id:
        raise InvalidArgument("Product ID is required")
    quantity = 1 if quantity is None else quantity
    if quantity < 1:
        raise InvalidArgument("Quantity must be at least 1")
    if products.find_by_id(product_id) is None:
        raise NotFound("Product not found")

    cart = carts.find_by_user_id(user_id)
    items = _raw_items(cart.get("items", [])) if cart else []
    if _index_of(items, product_id) > -1:
        raise Conflict("This product is already in your cart")

    items.append({"product": str(product_id), "quantity": quantity})
    return carts.update(user_id, {"items": items})


def update_item_quantity(user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
    if not product_id:
        raise InvalidArgument("Product ID is required")
    if quantity is None or quantity < 1:
        raise InvalidArgument("Quantity must be at least 1")

    cart = carts.find_by_user_id(user_id)
    if cart is None:
        raise NotFound("Cart not found")

    items = _raw_items(cart.get("items", []))
    index = _index_of(items, product_id)
    if index == -1:
        raise NotFound("Item not found in cart")

    items[index]["quantity"] = quantity
    return carts.update(user_id, {"items": items})


def remove_item(user_id: str, product_id: str) -> Dict[str, Any]:
    if not product_id:
        raise InvalidArgument("Product ID is required")

    cart = carts.find_by_user_id(user_id)
    if cart is None:
        raise NotFound("Cart not found")

    items = [it for it in _raw_items(cart.get("items", [])) if it["product"] != str(product_id)]
    return carts.update(user_id, {"items": items})


def clear(user_id: str) -> Dict[str, Any]:
    return carts.clear_cart(user_id)
