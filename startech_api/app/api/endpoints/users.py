"""
User profile endpoints.

Listing, creating and deleting profiles is reserved to administrators.
A user may read and edit their own profile; only administrators can
change a role or deactivate an account.
"""

from fastapi import APIRouter, Depends, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.common import envelope
from ...schemas.user import UserCreate, UserUpdate
from ...services.activity_service import ActivityService
from ...services.user_service import UserService

router = APIRouter()


@router.get("/")
async def list_users(
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    users = await UserService.list_users(db)
    body = envelope(users)
    body["count"] = len(users)
    return body


@router.get("/me")
async def read_me(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Return the profile resolved from the ``X-User-ID`` header and record the login time."""
    await UserService.touch_last_login(db, current_user["id"])
    return envelope(
        {
            "id": current_user["id"],
            "name": current_user["name"],
            "email": current_user["email"],
            "role": current_user["role"],
            "department": current_user["department"],
        }
    )


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await UserService.get_user(db, user_id, current_user))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        created = await UserService.create_user(db, user.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "users", "user", created["id"],
        {"email": created["email"], "role": created["role"]}, request,
    )
    return envelope(created, "Përdoruesi u krijua me sukses")


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    updates: UserUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await UserService.update_user(db, user_id, updates.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(db, current_user, "UPDATE", "users", "user", user_id, request=request)
    return envelope(updated, "Përdoruesi u përditësua me sukses")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await UserService.delete_user(db, user_id, current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(db, current_user, "DELETE", "users", "user", user_id, request=request)
    return envelope(message="Përdoruesi u fshi me sukses")
