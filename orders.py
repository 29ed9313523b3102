"""
Checkout and order lifecycle.

Orders are snapshots: each line keeps the unit price read from the catalog at
checkout and is never re-priced afterwards. Status changes follow

    pending -> processing -> shipped -> delivered

with ``cancelled`` reachable from any state before ``delivered``.
"""
from typing import Any, Dict, List, Optional, Sequence

import config
import cart
from errors import Conflict, Forbidden, InvalidArgument, NotFound
from logger import get_logger
from repositories import orders, products
from schemas import BillingDetails, Order, OrderItem, OrderItemRequest, OrderStatus

_logger = get_logger(__name__)

TRANSITIONS = {
    OrderStatus.pending: {OrderStatus.processing, OrderStatus.cancelled},
    OrderStatus.processing: {OrderStatus.shipped, OrderStatus.cancelled},
    OrderStatus.shipped: {OrderStatus.delivered, OrderStatus.cancelled},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}


def _owner_id(order: Dict[str, Any]) -> Optional[str]:
    owner = order.get("user")
    if isinstance(owner, dict):
        return owner.get("id")
    return owner


def create_order(user_id: str, items: Sequence[OrderItemRequest], billing_details: Optional[BillingDetails],
                 payment_method: Optional[str] = None) -> Dict[str, Any]:
    if not items:
        raise InvalidArgument("Order items are required")
    if billing_details is None:
        raise InvalidArgument("Billing details are required")
    for item in items:
        if not item.product or item.quantity is None or item.quantity < 1:
            raise InvalidArgument("Each item must have a product ID and a quantity of at least 1")

    # Resolve every product before writing anything
    total_amount = 0.0
    order_items: List[OrderItem] = []
    for item in items:
        product = products.find_by_id(item.product)
        if product is None:
            raise NotFound(f"Product {item.product} not found")
        price = float(product["price"])
        total_amount += price * item.quantity
        order_items.append(OrderItem(product=product["id"], quantity=item.quantity, price=price))

    shipping_cost = config.SHIPPING_COST
    order = Order(
        user=str(user_id),
        items=order_items,
        billing_details=billing_details,
        total_amount=total_amount + shipping_cost,
        shipping_cost=shipping_cost,
        payment_method=payment_method or config.DEFAULT_PAYMENT_METHOD,
        status=OrderStatus.pending,
    )
    created = orders.create(order)
    _logger.info(f"Order {created['id']} created for user {user_id}, total {created['totalAmount']}")

    # The order stands even if the cart cannot be cleared
    try:
        cart.clear(user_id)
    except Exception:
        _logger.exception(f"Failed to clear cart for user {user_id} after order {created['id']}")

    return created


def list_my_orders(user_id: str) -> List[Dict[str, Any]]:
    return orders.find_by_user_id(user_id)


def get_order_for_user(order_id: str, user_id: str) -> Dict[str, Any]:
    order = orders.find_by_id(order_id)
    if order is None:
        raise NotFound("Order not found")
    if _owner_id(order) != str(user_id):
        raise Forbidden("Not authorized to access this order")
    return order


def list_all_orders() -> List[Dict[str, Any]]:
    return orders.find_all()


def update_order_status(order_id: str, status: str) -> Dict[str, Any]:
    try:
        new_status = OrderStatus(status)
    except ValueError:
        raise InvalidArgument("Invalid status")

    order = orders.find_by_id(order_id)
    if order is None:
        raise NotFound("Order not found")

    current = OrderStatus(order["status"])
    if new_status == current:
        return order
    if new_status not in TRANSITIONS[current]:
        raise Conflict(f"Cannot change order status from {current.value} to {new_status.value}")

    updated = orders.update(order_id, {"status": new_status.value})
    _logger.info(f"Order {order_id} status {current.value} -> {new_status.value}")
    return updated
