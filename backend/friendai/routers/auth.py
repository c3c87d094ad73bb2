# auth router: register, login, current user
# register and login are public, /me needs a bearer token

import logging

from fastapi import APIRouter, Depends, status

from friendai.dependencies import get_current_user
from friendai.errors import NotFoundError
from friendai.models.user import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from friendai.services import auth_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, storage: Storage = Depends(get_storage)):
    """create an account and return a token"""
    token, user = await auth_service.register(storage, body.email, body.password, body.name)
    return AuthResponse(token=token, user=user, message="User created successfully")


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, storage: Storage = Depends(get_storage)):
    token, user = await auth_service.login(storage, body.email, body.password)
    return AuthResponse(token=token, user=user, message="Login successful")


@router.get("/me", response_model=MeResponse)
async def get_me(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """current user profile, the token may outlive the account"""
    user = await auth_service.get_user(storage, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return MeResponse(user=user)
