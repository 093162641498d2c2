"""
Shared FastAPI dependency helpers.

- `get_db`: one SQLAlchemy session per request.
- `get_current_user`: resolves the caller from the X-API-Key header.
- `get_tenant_id`: the church (tenant) the request targets, from X-Church-Id.
- `get_request_context`: bundles tenant, actor and granted permissions into a
  StatementContext so services never look these up ambiently.
- `require_permission`: dependency factory enforcing one permission string.
"""

import hashlib
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from app import settings
from app.db import get_db
from app.models.church import Church
from app.models.rbac import ChurchUser, User
from app.services.permissions import has_permission, permissions_for_role
from app.services.statements.types import StatementContext

DEV_USER_ID = "00000000-0000-0000-0000-000000000000"


class _DevPrincipal:
    id = DEV_USER_ID
    email = "dev@local"
    display_name = "Dev"
    api_key_hash = None
    is_active = True


def _hash_api_key(api_key_plain: str) -> str:
    """Hash the plaintext API key. (sha256 hex; store only the hash)."""
    h = hashlib.sha256()
    h.update((api_key_plain + settings.api_key_pepper()).encode("utf-8"))
    return h.hexdigest()


def get_current_user(
    db: Session = Depends(get_db),
    api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> User:
    """
    Resolve the calling user. In dev (AUTH_ENFORCE=false), return a lightweight
    dev principal and skip DB lookups entirely.
    """
    if not settings.auth_enforced():
        return _DevPrincipal()  # type: ignore[return-value]

    if not api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = (
        db.execute(
            select(User).where(and_(User.api_key_hash == _hash_api_key(api_key), User.is_active.is_(True)))
        )
        .scalars()
        .first()
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_tenant_id(church_id: Optional[str] = Header(default=None, alias="X-Church-Id")) -> str:
    if not church_id or not church_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return church_id.strip()


def get_request_context(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    church_id: str = Depends(get_tenant_id),
) -> StatementContext:
    if not settings.auth_enforced():
        return StatementContext(church_id=church_id, actor_id=user.id, permissions=frozenset({"*"}))

    row = db.execute(
        select(ChurchUser.role, Church.subscription_plan)
        .join(Church, Church.id == ChurchUser.church_id)
        .where(ChurchUser.user_id == user.id, ChurchUser.church_id == church_id)
    ).first()
    perms = permissions_for_role(row[0], row[1]) if row else frozenset()
    return StatementContext(church_id=church_id, actor_id=user.id, permissions=perms)


def require_permission(required_permission: str, detail: Optional[str] = None) -> Callable[..., StatementContext]:
    """Dependency factory to enforce a specific permission (wildcards supported)."""
    def _inner(ctx: StatementContext = Depends(get_request_context)) -> StatementContext:
        if not has_permission(ctx.permissions, required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail or f"Missing permission: {required_permission}",
            )
        return ctx
    return _inner
