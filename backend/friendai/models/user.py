# user models: stored record, auth payloads and the public view

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    """user as stored: password holds the bcrypt hash"""
    id: str
    email: str
    password: str
    name: str
    created_at: datetime
    updated_at: datetime

    def public(self) -> "PublicUser":
        return PublicUser(**self.model_dump(exclude={"password"}))


class PublicUser(BaseModel):
    """user as returned to clients, never carries the credential hash"""
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


# auth payloads: fields optional so missing values reach the service as a 400

class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: PublicUser
    message: str = ""


class MeResponse(BaseModel):
    user: PublicUser = Field(..., description="current user without password")
