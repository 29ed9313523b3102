import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

import cart
import config
import database
import orders
import repositories
from auth import (
    ADMIN_ROLE,
    USER_ROLE,
    create_access_token,
    get_current_admin,
    get_current_user,
    login_admin,
    login_user,
    public_admin,
    public_user,
    register_user,
)
from errors import Conflict, NotFound, StoreError
from logger import get_logger
from schemas import (
    AddToCartRequest,
    AdminLoginRequest,
    Contact,
    ContactCreate,
    CreateOrderRequest,
    LoginRequest,
    Product,
    ProductCreate,
    ProductUpdate,
    ProfileUpdate,
    RegisterRequest,
    StatusUpdateRequest,
    UpdateCartRequest,
)

_logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.ensure_indexes()
    _logger.info("Storefront API started")
    yield


app = FastAPI(title="Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")


# Error envelope

def fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return fail(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = err["loc"][-1] if err.get("loc") else "body"
        messages.append(f"{field}: {err['msg']}")
    return fail(400, ", ".join(messages) or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return fail(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    _logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return fail(500, "Server error")


def ok(status_code: int = 200, **payload) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"success": True, **payload}))


@app.get("/")
def root():
    return {"message": "Storefront Backend Running"}


# Simple health and db test
@app.get("/test")
def test_database():
    if database.db is None:
        return {"backend": "ok", "db": "not_configured"}
    try:
        collections = database.db.list_collection_names()
        return {"backend": "ok", "db": "ok", "collections": collections}
    except Exception as e:
        return {"backend": "ok", "db": f"error: {str(e)[:80]}"}


# Auth endpoints
@app.post("/api/auth/register")
def register(payload: RegisterRequest):
    user = register_user(payload)
    token = create_access_token(user["id"], USER_ROLE)
    return ok(201, token=token, user=public_user(user))


@app.post("/api/auth/login")
def login(payload: LoginRequest):
    user = login_user(payload.email, payload.password)
    token = create_access_token(user["id"], USER_ROLE)
    return ok(token=token, user=public_user(user))


@app.get("/api/auth/me")
def get_me(user=Depends(get_current_user)):
    return ok(user=public_user(user))


@app.put("/api/auth/profile")
def update_profile(payload: ProfileUpdate, user=Depends(get_current_user)):
    patch: Dict[str, Any] = {}
    if payload.name:
        patch["name"] = payload.name.strip()
    if payload.email:
        email = payload.email.strip().lower()
        existing = repositories.users.find_by_email(email)
        if existing and existing["id"] != user["id"]:
            raise Conflict("User already exists with this email")
        patch["email"] = email
    for field in ("location", "phone", "avatar"):
        value = getattr(payload, field)
        if value is not None:
            patch[field] = value
    updated = repositories.users.update(user["id"], patch) if patch else user
    return ok(user=public_user(updated))


# Admin auth
@app.post("/api/admin/login")
def admin_login(payload: AdminLoginRequest):
    admin = login_admin(payload.username, payload.password)
    token = create_access_token(admin["id"], ADMIN_ROLE)
    return ok(token=token, admin=public_admin(admin))


@app.get("/api/admin/me")
def admin_me(admin=Depends(get_current_admin)):
    return ok(admin=public_admin(admin))


# Products public endpoints
@app.get("/api/products")
def list_products(featured: Optional[str] = None, category: Optional[str] = None, search: Optional[str] = None):
    items = repositories.products.find_all(
        category=category,
        featured=True if featured == "true" else None,
        search=search,
    )
    return ok(count=len(items), products=items)


# Declared before /api/products/{product_id} so "admin" is not taken as an id
@app.get("/api/products/admin")
def admin_list_products(admin=Depends(get_current_admin)):
    items = repositories.products.find_all_for_admin()
    return ok(count=len(items), products=items)


@app.get("/api/products/{product_id}")
def get_product(product_id: str):
    product = repositories.products.find_by_id(product_id)
    if not product:
        raise NotFound("Product not found")
    return ok(product=product)


# Admin product management
@app.post("/api/products")
def admin_create_product(payload: ProductCreate, admin=Depends(get_current_admin)):
    product = repositories.products.create(Product(**payload.model_dump()))
    _logger.info(f"Product {product['id']} created by admin {admin['id']}")
    return ok(201, product=product)


@app.put("/api/products/{product_id}")
def admin_update_product(product_id: str, payload: ProductUpdate, admin=Depends(get_current_admin)):
    patch = payload.model_dump(by_alias=True, exclude_none=True)
    if patch:
        product = repositories.products.update(product_id, patch)
    else:
        product = repositories.products.find_by_id(product_id)
    if not product:
        raise NotFound("Product not found")
    return ok(product=product)


@app.delete("/api/products/{product_id}")
def admin_delete_product(product_id: str, admin=Depends(get_current_admin)):
    if not repositories.products.delete(product_id):
        raise NotFound("Product not found")
    _logger.info(f"Product {product_id} deleted by admin {admin['id']}")
    return ok(message="Product deleted successfully")


# Cart
@app.get("/api/cart")
def get_cart(user=Depends(get_current_user)):
    return ok(cart=cart.get_or_create_cart(user["id"]))


@app.post("/api/cart/add")
def add_to_cart(payload: AddToCartRequest, user=Depends(get_current_user)):
    return ok(cart=cart.add_item(user["id"], payload.product_id, payload.quantity))


@app.put("/api/cart/update")
def update_cart_item(payload: UpdateCartRequest, user=Depends(get_current_user)):
    return ok(cart=cart.update_item_quantity(user["id"], payload.product_id, payload.quantity))


@app.delete("/api/cart/item/{product_id}")
def remove_from_cart(product_id: str, user=Depends(get_current_user)):
    return ok(cart=cart.remove_item(user["id"], product_id))


@app.delete("/api/cart/clear")
def clear_cart(user=Depends(get_current_user)):
    return ok(cart=cart.clear(user["id"]))


# Orders
@app.post("/api/orders")
def create_order(payload: CreateOrderRequest, user=Depends(get_current_user)):
    order = orders.create_order(user["id"], payload.items, payload.billing_details, payload.payment_method)
    return ok(201, order=order)


@app.get("/api/orders/my-orders")
def my_orders(user=Depends(get_current_user)):
    items = orders.list_my_orders(user["id"])
    return ok(count=len(items), orders=items)


# Declared before /api/orders/{order_id} so "admin" is not taken as an id
@app.get("/api/orders/admin/all")
def admin_list_orders(admin=Depends(get_current_admin)):
    items = orders.list_all_orders()
    return ok(count=len(items), orders=items)


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, user=Depends(get_current_user)):
    return ok(order=orders.get_order_for_user(order_id, user["id"]))


@app.put("/api/orders/{order_id}/status")
def admin_change_status(order_id: str, payload: StatusUpdateRequest, admin=Depends(get_current_admin)):
    return ok(order=orders.update_order_status(order_id, payload.status))


# Contact form
@app.post("/api/contact")
def submit_contact(payload: ContactCreate):
    contact = repositories.contacts.create(Contact(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email.strip().lower(),
        phone_number=payload.phone_number or "",
        subject=payload.subject or "General Inquiry",
        message=payload.message.strip(),
    ))
    return ok(201, message="Contact message sent successfully", contact=contact)


@app.get("/api/contact/admin")
def admin_list_contacts(admin=Depends(get_current_admin)):
    items = repositories.contacts.find_all()
    return ok(count=len(items), contacts=items)


@app.get("/api/contact/admin/{contact_id}")
def admin_get_contact(contact_id: str, admin=Depends(get_current_admin)):
    contact = repositories.contacts.find_by_id(contact_id)
    if not contact:
        raise NotFound("Contact not found")
    return ok(contact=contact)


@app.put("/api/contact/admin/{contact_id}/read")
def admin_mark_contact_read(contact_id: str, admin=Depends(get_current_admin)):
    contact = repositories.contacts.update(contact_id, {"isRead": True})
    if not contact:
        raise NotFound("Contact not found")
    return ok(contact=contact)


@app.delete("/api/contact/admin/{contact_id}")
def admin_delete_contact(contact_id: str, admin=Depends(get_current_admin)):
    if not repositories.contacts.delete(contact_id):
        raise NotFound("Contact not found")
    return ok(message="Contact deleted successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
