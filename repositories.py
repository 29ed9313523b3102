"""
Repositories wrap the MongoDB collections with fixed query shapes so route
handlers and services never build queries themselves.

Every ``find_*`` returns plain dicts with ``_id`` replaced by a string ``id``;
missing or malformed ids come back as ``None``.
"""
import re
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING, ReturnDocument

import database
from database import create_document, get_documents, now, serialize_doc, to_object_id
from schemas import product_ref_id

CART_PRODUCT_FIELDS = ("title", "image", "price", "stock")
ORDER_PRODUCT_FIELDS = ("title", "image", "price")
ORDER_USER_FIELDS = ("name", "email")

NEWEST_FIRST = [("createdAt", DESCENDING)]


class Repository:
    collection_name: str = ""

    @property
    def collection(self):
        if database.db is None:
            raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
        return database.db[self.collection_name]

    def _insert(self, data) -> Dict[str, Any]:
        new_id = create_document(self.collection_name, data)
        return self.find_by_id(new_id)

    def find_by_id(self, id) -> Optional[Dict[str, Any]]:
        oid = to_object_id(id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def _update_one(self, query: dict, patch: dict, upsert: bool = False) -> Optional[Dict[str, Any]]:
        update = {"$set": {**patch, "updatedAt": now()}}
        if upsert:
            update["$setOnInsert"] = {"createdAt": now()}
        doc = self.collection.find_one_and_update(
            query, update, upsert=upsert, return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def update(self, id, patch: dict) -> Optional[Dict[str, Any]]:
        oid = to_object_id(id)
        if oid is None:
            return None
        return self._update_one({"_id": oid}, patch)

    def delete(self, id) -> Optional[Dict[str, Any]]:
        oid = to_object_id(id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one_and_delete({"_id": oid}))


def _expand(collection_name: str, ids: Iterable[Any], fields: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Load the referenced documents (selected fields only) keyed by string id."""
    oids = [oid for oid in (to_object_id(i) for i in ids if i is not None) if oid is not None]
    if not oids:
        return {}
    projection = {f: 1 for f in fields}
    found = database.db[collection_name].find({"_id": {"$in": oids}}, projection)
    return {str(d["_id"]): serialize_doc(d) for d in found}


def _expand_line_items(items: List[Dict[str, Any]], fields: Iterable[str]) -> List[Dict[str, Any]]:
    products = _expand("product", (product_ref_id(it.get("product")) for it in items), fields)
    expanded = []
    for it in items:
        pid = product_ref_id(it.get("product"))
        # Dangling references to deleted products stay as raw ids
        expanded.append({**it, "product": products.get(pid, pid)})
    return expanded


class ProductRepository(Repository):
    collection_name = "product"

    def create(self, data) -> Dict[str, Any]:
        return self._insert(data)

    def find_all(self, category: Optional[str] = None, featured: Optional[bool] = None,
                 search: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"isActive": True}
        if category:
            query["category"] = category
        if featured is not None:
            query["featured"] = featured
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
            ]
        return [serialize_doc(d) for d in get_documents(self.collection_name, query, sort=NEWEST_FIRST)]

    def find_all_for_admin(self) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in get_documents(self.collection_name, sort=NEWEST_FIRST)]


class UserRepository(Repository):
    collection_name = "user"

    def create(self, data) -> Dict[str, Any]:
        return self._insert(data)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return serialize_doc(self.collection.find_one({"email": email.strip().lower()}))


class AdminRepository(Repository):
    collection_name = "admin"

    def create(self, data) -> Dict[str, Any]:
        return self._insert(data)

    def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return serialize_doc(self.collection.find_one({"username": username.strip()}))


class CartRepository(Repository):
    collection_name = "cart"

    def _expanded(self, cart: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if cart is None:
            return None
        cart["items"] = _expand_line_items(cart.get("items", []), CART_PRODUCT_FIELDS)
        return cart

    def find_by_user_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._expanded(serialize_doc(self.collection.find_one({"user": str(user_id)})))

    def create(self, data) -> Dict[str, Any]:
        return self._expanded(self._insert(data))

    def update(self, user_id: str, patch: dict) -> Dict[str, Any]:
        return self._expanded(self._update_one({"user": str(user_id)}, patch, upsert=True))

    def clear_cart(self, user_id: str) -> Dict[str, Any]:
        return self._update_one({"user": str(user_id)}, {"items": []}, upsert=True)

    def delete(self, user_id: str) -> Optional[Dict[str, Any]]:
        return serialize_doc(self.collection.find_one_and_delete({"user": str(user_id)}))


class OrderRepository(Repository):
    collection_name = "order"

    def _expanded(self, orders: List[Dict[str, Any]], with_user: bool = True) -> List[Dict[str, Any]]:
        users = _expand("user", (o.get("user") for o in orders), ORDER_USER_FIELDS) if with_user else {}
        for order in orders:
            order["items"] = _expand_line_items(order.get("items", []), ORDER_PRODUCT_FIELDS)
            if with_user:
                order["user"] = users.get(order.get("user"), order.get("user"))
        return orders

    def create(self, data) -> Dict[str, Any]:
        return self._insert(data)

    def find_by_id(self, id) -> Optional[Dict[str, Any]]:
        order = super().find_by_id(id)
        if order is None:
            return None
        return self._expanded([order])[0]

    def find_by_user_id(self, user_id: str) -> List[Dict[str, Any]]:
        orders = [serialize_doc(d) for d in get_documents(self.collection_name, {"user": str(user_id)}, sort=NEWEST_FIRST)]
        return self._expanded(orders, with_user=False)

    def find_all(self) -> List[Dict[str, Any]]:
        orders = [serialize_doc(d) for d in get_documents(self.collection_name, sort=NEWEST_FIRST)]
        return self._expanded(orders)

    def update(self, id, patch: dict) -> Optional[Dict[str, Any]]:
        if super().update(id, patch) is None:
            return None
        return self.find_by_id(id)


class ContactRepository(Repository):
    collection_name = "contact"

    def create(self, data) -> Dict[str, Any]:
        return self._insert(data)

    def find_all(self) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in get_documents(self.collection_name, sort=NEWEST_FIRST)]


products = ProductRepository()
users = UserRepository()
admins = AdminRepository()
carts = CartRepository()
orders = OrderRepository()
contacts = ContactRepository()
