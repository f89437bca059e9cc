"""FastAPI dependencies for caller roles.

Authentication happens upstream; the auth layer forwards the caller's role
for the current site in the ``X-Site-Role`` header.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from site_admin.models import UserRole, role_satisfies

ROLE_HEADER = "X-Site-Role"


def caller_role(
    x_site_role: Annotated[str | None, Header(alias=ROLE_HEADER)] = None,
) -> UserRole | None:
    """Return the caller's role, or None when the header is absent."""
    if x_site_role is None:
        return None
    try:
        return UserRole(x_site_role.lower())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_site_role}") from e


def require_admin(
    role: Annotated[UserRole | None, Depends(caller_role)],
) -> UserRole:
    """Require admin role or above."""
    if not role_satisfies(role, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Admin access required")
    return role  # type: ignore[return-value]


def require_super_admin(
    role: Annotated[UserRole | None, Depends(caller_role)],
) -> UserRole:
    """Require super admin role."""
    if not role_satisfies(role, UserRole.SUPER_ADMIN):
        raise HTTPException(status_code=403, detail="Super admin access required")
    return role  # type: ignore[return-value]
