"""Support ticket endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...schemas.task import EmbeddedCommentCreate
from ...schemas.ticket import TicketCreate, TicketUpdate
from ...services.activity_service import ActivityService
from ...services.ticket_service import TicketService

router = APIRouter()


@router.get("/")
async def list_tickets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    tickets, total = await TicketService.list_tickets(
        db, status=status_filter, priority=priority, page=page, limit=limit
    )
    return envelope(tickets, pagination=build_pagination(page, limit, total))


@router.get("/stats/overview")
async def ticket_stats(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await TicketService.stats(db))


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await TicketService.get_ticket(db, ticket_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket: TicketCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Open a ticket.

    A collision on the generated identifier is answered with 409 by the
    application-level integrity error handler.
    """
    try:
        created = await TicketService.create_ticket(db, ticket.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "tickets", "ticket", created["id"],
        {"title": created["title"]}, request,
    )
    return envelope(created, "Tiketa u krijua me sukses")


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    updates: TicketUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await TicketService.update_ticket(db, ticket_id, updates.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "tickets", "ticket", ticket_id,
        {"status": updated["status"]}, request,
    )
    return envelope(updated, "Tiketa u përditësua me sukses")


@router.delete("/{ticket_id}")
async def delete_ticket(
    ticket_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await TicketService.delete_ticket(db, ticket_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "DELETE", "tickets", "ticket", ticket_id, request=request
    )
    return envelope(message="Tiketa u fshi me sukses")


@router.post("/{ticket_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_ticket_comment(
    ticket_id: str,
    comment: EmbeddedCommentCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await TicketService.add_comment(
            db, ticket_id, comment.content or comment.text, current_user
        )
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(created, "Komenti u shtua me sukses")
