"""Authentication router: caller identity and stored user roles."""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.models.auth_models import (
    Identity,
    RoleUpdateRequest,
    UserResponse,
    UserSyncRequest,
)
from app.services.auth_service import auth_service
from app.services.authorization import require_identity
from app.services.mongodb_service import MongoUserStore, mongodb_service
from app.services.store_interfaces import UserStore
from app.utils.errors import NotFoundError

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    """
    Dependency resolving the caller identity from the bearer token.

    Returns None when no token was sent so that each operation decides how to
    reject anonymous callers; an invalid token is rejected right away.
    """
    if credentials is None:
        return None
    return auth_service.identity_from_token(credentials.credentials)


def get_user_store() -> UserStore:
    """Dependency to get the user store."""
    return MongoUserStore(mongodb_service)


@router.post("/auth/sync", response_model=UserResponse)
async def sync_user(
    request: UserSyncRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> UserResponse:
    """Create or refresh the caller's user record from the identity provider profile."""
    identity = require_identity(identity)
    return await users.upsert(identity, request)


@router.get("/auth/me", response_model=UserResponse)
async def get_me(
    identity: Optional[Identity] = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> UserResponse:
    """Get current user info (requires authentication)."""
    identity = require_identity(identity)
    user = await users.get_by_subject(identity.subject)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.put("/auth/me/role", response_model=UserResponse)
async def update_my_role(
    request: RoleUpdateRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> UserResponse:
    """Switch the caller between the candidate and interviewer roles."""
    identity = require_identity(identity)
    return await users.update_role(identity.subject, request.role)
