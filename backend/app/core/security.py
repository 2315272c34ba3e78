"""
Security and Authentication for TailorReach API.

Sign-in is handled by the external identity provider; this module only
verifies the bearer JWTs it issues (shared-secret HS256) and maps the
caller onto a tenant and a set of scopes.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, SecurityScopes
from jose import JWTError, jwt
from pydantic import BaseModel

from backend.app.core.config import get_settings
from backend.app.core.logging import tenant_id_ctx

settings = get_settings()

# CRM scopes
CRM_READ = "crm:read"
CRM_WRITE = "crm:write"

# AI scopes (scoring, drafting, onboarding chat)
AI_GENERATE = "ai:generate"

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """
    Generate a signed JWT token in the identity provider's format.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    if settings.auth_issuer and "iss" not in to_encode:
        to_encode["iss"] = settings.auth_issuer
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    return encoded_jwt


# Role definitions
class Role:
    OWNER = "owner"
    MEMBER = "member"
    VIEWER = "viewer"

ROLE_SCOPES = {
    Role.OWNER: [CRM_READ, CRM_WRITE, AI_GENERATE],
    Role.MEMBER: [CRM_READ, CRM_WRITE, AI_GENERATE],
    Role.VIEWER: [CRM_READ],
}

class User(BaseModel):
    id: str
    role: str
    scopes: List[str] = []
    tenant_id: str


async def get_current_user(
    request: Request,
    security_scopes: SecurityScopes,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Validate the bearer JWT and check required scopes based on the caller's role.
    """
    if security_scopes.scopes:
        authenticate_value = f'Bearer scope="{security_scopes.scope_str}"'
    else:
        authenticate_value = "Bearer"

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized: User not authenticated",
        headers={"WWW-Authenticate": authenticate_value},
    )

    if credentials is None:
        raise credentials_exception

    try:
        decode_kwargs = {"algorithms": [settings.algorithm]}
        if settings.auth_issuer:
            decode_kwargs["issuer"] = settings.auth_issuer
        payload = jwt.decode(credentials.credentials, settings.secret_key, **decode_kwargs)
    except JWTError:
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    if not user_id:
        raise credentials_exception

    role: str = payload.get("role", Role.OWNER)
    # One user owns one tenant unless the provider says otherwise
    tenant_id: str = payload.get("tenant_id") or user_id
    token_scopes = payload.get("scopes") or ROLE_SCOPES.get(role, [])

    for scope in security_scopes.scopes:
        if scope not in token_scopes:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not enough permissions. Required scope: {scope}",
                headers={"WWW-Authenticate": authenticate_value},
            )

    tenant_id_ctx.set(tenant_id)
    # Read back by the access log, which sits outside this context
    request.state.tenant_id = tenant_id
    return User(id=user_id, role=role, scopes=token_scopes, tenant_id=tenant_id)


def ensure_same_tenant(current_user: User, claimed_user_id: Optional[str]) -> None:
    """Reject request bodies that name a different tenant than the token."""
    if claimed_user_id and claimed_user_id not in (current_user.id, current_user.tenant_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="userId does not match the authenticated user",
        )
