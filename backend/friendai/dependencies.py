# fastapi dependency injection
# provides the authenticated user id from the bearer token

import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from friendai.services.auth_service import verify_token

logger = logging.getLogger(__name__)

# auto_error off so a missing header becomes our own 401 instead of fastapi's default
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """extract and validate the current user id from the jwt bearer token"""
    token = credentials.credentials if credentials else None
    return verify_token(token)
