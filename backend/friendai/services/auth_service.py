# auth service: jwt token management, password hashing, register and login
# the token's signature is the only trust anchor, verify_token never reads storage

import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from friendai.config import settings
from friendai.errors import AuthError, ConflictError, ValidationError
from friendai.models.user import PublicUser
from friendai.services.storage import Storage, UserQuery
from friendai.utils import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """hash a plaintext password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """verify a plaintext password against a bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # unrecognized or corrupt hash
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """create a signed token whose only claim is the user id"""
    expire = utcnow() + (expires_delta or timedelta(days=settings.JWT_EXPIRE_DAYS))
    to_encode = {"userId": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """decode and validate a jwt token, returns payload or none"""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token decode failed: {e}")
        return None


def verify_token(token: Optional[str]) -> str:
    """return the user id embedded in a bearer token"""
    if not token:
        raise AuthError("Access token required", status_code=401)
    payload = decode_token(token)
    if payload is None or not payload.get("userId"):
        raise AuthError("Invalid token", status_code=403)
    return str(payload["userId"])


async def register(storage: Storage, email: Optional[str], password: Optional[str], name: Optional[str]) -> tuple[str, PublicUser]:
    """create a user account and return a fresh token with the public user"""
    email = (email or "").strip().lower()
    name = (name or "").strip()
    if not email or not password or not name:
        raise ValidationError("Email, password, and name are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if await storage.users.find_one(UserQuery(email=email)):
        raise ConflictError("User already exists")

    now = utcnow()
    try:
        user = await storage.users.create({
            "email": email,
            "password": hash_password(password),
            "name": name,
            "created_at": now,
            "updated_at": now,
        })
    except ConflictError:
        # a concurrent registration won the unique email index
        raise ConflictError("User already exists")
    logger.info(f"User registered: {user.id}")
    return create_access_token(user.id), user.public()


async def login(storage: Storage, email: Optional[str], password: Optional[str]) -> tuple[str, PublicUser]:
    """check credentials. unknown email and wrong password fail identically."""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await storage.users.find_one(UserQuery(email=email.strip().lower()))
    if user is None or not verify_password(password, user.password):
        raise AuthError("Invalid credentials")

    updated = await storage.users.update(user.id, {"updated_at": utcnow()})
    user = updated or user
    logger.info(f"User logged in: {user.id}")
    return create_access_token(user.id), user.public()


async def get_user(storage: Storage, user_id: str) -> Optional[PublicUser]:
    user = await storage.users.find_one(UserQuery(id=user_id))
    return user.public() if user else None
