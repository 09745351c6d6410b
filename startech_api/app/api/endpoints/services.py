"""
Repair service endpoints.

Besides CRUD these routes expose the service history and the relational
comment thread of a service.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.comment import CommentCreate
from ...schemas.common import build_pagination, envelope
from ...schemas.service import ServiceCreate, ServiceHistoryCreate, ServiceUpdate
from ...services.activity_service import ActivityService
from ...services.comment_service import CommentService
from ...services.service_service import ServiceService

router = APIRouter()


@router.get("/")
async def list_services(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    services, total = await ServiceService.list_services(
        db, status=status_filter, category=category, page=page, limit=limit
    )
    return envelope(services, pagination=build_pagination(page, limit, total))


@router.get("/stats/overview")
async def service_stats(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await ServiceService.stats(db))


@router.get("/{service_id}")
async def get_service(
    service_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await ServiceService.get_service(db, service_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_service(
    service: ServiceCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await ServiceService.create_service(db, service.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "services", "service", created["id"], request=request
    )
    return envelope(created, "Shërbimi u krijua me sukses")


@router.put("/{service_id}")
async def update_service(
    service_id: str,
    updates: ServiceUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await ServiceService.update_service(
            db, service_id, updates.to_payload(), current_user
        )
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "services", "service", service_id,
        {"status": updated["status"]}, request,
    )
    return envelope(updated, "Shërbimi u përditësua me sukses")


@router.delete("/{service_id}")
async def delete_service(
    service_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await ServiceService.delete_service(db, service_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "DELETE", "services", "service", service_id, request=request
    )
    return envelope(message="Shërbimi u fshi me sukses")


@router.post("/{service_id}/history", status_code=status.HTTP_201_CREATED)
async def add_history(
    service_id: str,
    entry: ServiceHistoryCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await ServiceService.add_history_entry(
            db, service_id, entry.action, entry.notes, current_user, bool(entry.email_sent)
        )
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(created, "Hyrja në histori u shtua me sukses")


@router.get("/{service_id}/comments")
async def list_service_comments(
    service_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await CommentService.list_comments(db, "service", service_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/{service_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_service_comment(
    service_id: str,
    comment: CommentCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await CommentService.create_comment(
            db, current_user, "service", service_id, comment.content, comment.parent_id
        )
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(created, "Komenti u shtua me sukses")
