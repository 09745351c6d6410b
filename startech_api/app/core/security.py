"""
Request identity helpers.

Authentication itself is handled by the external identity provider used
by the frontend.  The API trusts the ``X-User-ID`` header sent with each
request and resolves it against the ``users`` table; the matching row
becomes the *current user* for the request.  No token is verified here.

Role checks are expressed as FastAPI dependencies, e.g.
``Depends(require_roles("admin"))``.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header, HTTPException, status

from .db import Database, get_db

# Roles that can see and manage every record regardless of ownership.
PRIVILEGED_ROLES = {"admin", "administrator", "manager"}
ADMIN_ROLES = {"admin", "administrator"}


def normalize_role(role: Optional[str]) -> str:
    return (role or "").strip().lower()


def is_admin(user: Dict[str, Any]) -> bool:
    return normalize_role(user.get("role")) in ADMIN_ROLES


def is_privileged(user: Dict[str, Any]) -> bool:
    """Return True for administrators and managers."""
    return normalize_role(user.get("role")) in PRIVILEGED_ROLES


def display_name(user: Dict[str, Any]) -> str:
    """Name used in ``created_by``/``assigned_to`` columns and history entries."""
    return user.get("name") or user.get("email") or "Unknown"


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    """Dependency that resolves the caller from the ``X-User-ID`` header.

    Raises HTTP 401 when the header is missing, when it does not match
    any user, or when the account has been deactivated.  On success the
    user row is returned as a plain dictionary.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID mungon",
        )
    with db.cursor() as cursor:
        row = cursor.execute(
            "SELECT id, name, email, role, department, is_active FROM users WHERE id = ?",
            (x_user_id,),
        ).fetchone()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profili i përdoruesit nuk u gjet",
        )
    if not row["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Llogaria e përdoruesit është çaktivizuar",
        )
    return dict(row)


# ---------------------------------------------------------------------------
# Role-based access control (RBAC) helpers
# ---------------------------------------------------------------------------

def require_roles(*roles: str) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Dependency factory to enforce that the current user has one of the given roles.

    Role names are compared case‑insensitively.  ``"admin"`` also admits
    users whose role is spelled ``"Administrator"``, which is how the
    frontend labels the same role.

    Parameters
    ----------
    *roles : str
        One or more role names permitted to access the endpoint.

    Returns
    -------
    Callable
        A dependency function that validates the current user's role and
        returns the user on success.
    """
    allowed = {normalize_role(r) for r in roles}
    if "admin" in allowed:
        allowed |= ADMIN_ROLES

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if normalize_role(current_user.get("role")) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Kërkohet roli i adminit",
            )
        return current_user

    return _role_dependency
