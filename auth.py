from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

import config
from errors import Conflict, Unauthorized
from logger import get_logger
from repositories import admins, users
from schemas import RegisterRequest, User

_logger = get_logger(__name__)

USER_ROLE = "user"
ADMIN_ROLE = "admin"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# Missing headers are rejected in decode_access_token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


# Helper functions for auth

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None):
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(subject), "role": role, "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: Optional[str], role: str) -> str:
    """Verify signature, expiry and principal kind; return the principal id."""
    if not token:
        raise Unauthorized("Not authorized to access this route")
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        _logger.debug(f"Rejected token: {e}")
        raise Unauthorized("Not authorized to access this route")
    subject = payload.get("sub")
    if subject is None or payload.get("role") != role:
        raise Unauthorized("Not authorized to access this route")
    return subject


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": user["id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "dateOfBirth": user.get("dateOfBirth", ""),
        "location": user.get("location", ""),
        "phone": user.get("phone", ""),
        "avatar": user.get("avatar", ""),
    }


def public_admin(admin: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": admin["id"], "username": admin.get("username"), "email": admin.get("email")}


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    user = users.find_by_id(decode_access_token(token, USER_ROLE))
    if not user:
        raise Unauthorized("User not found")
    return user


def get_current_admin(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    admin = admins.find_by_id(decode_access_token(token, ADMIN_ROLE))
    if not admin:
        raise Unauthorized("Admin not found")
    return admin


# Credential flows

def register_user(payload: RegisterRequest) -> Dict[str, Any]:
    email = payload.email.strip().lower()
    if users.find_by_email(email):
        raise Conflict("User already exists with this email")
    user = User(
        name=payload.name.strip(),
        email=email,
        password=get_password_hash(payload.password),
        date_of_birth=payload.date_of_birth or "",
        location=payload.location or "",
    )
    created = users.create(user)
    _logger.info(f"Registered user {created['id']}")
    return created


def login_user(email: str, password: str) -> Dict[str, Any]:
    user = users.find_by_email(email)
    if not user or not verify_password(password, user.get("password", "")):
        _logger.info("Failed user login")
        raise Unauthorized("Invalid credentials")
    return user


def login_admin(username: str, password: str) -> Dict[str, Any]:
    admin = admins.find_by_username(username)
    if not admin or not verify_password(password, admin.get("password", "")):
        _logger.info("Failed admin login")
        raise Unauthorized("Invalid credentials")
    return admin
