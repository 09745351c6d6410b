"""
Threaded comment endpoints for tasks, services and tickets.

Only the author of a comment may edit or delete it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user
from ...schemas.comment import CommentCreate, CommentUpdate, CommentVote
from ...schemas.common import envelope
from ...services.comment_service import CommentService

router = APIRouter()


@router.get("/")
async def list_comments(
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await CommentService.list_comments(db, entity_type, entity_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment: CommentCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await CommentService.create_comment(
            db,
            current_user,
            comment.entity_type,
            comment.entity_id,
            comment.content,
            comment.parent_id,
        )
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(created, "Komenti u krijua me sukses")


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    updates: CommentUpdate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await CommentService.update_comment(db, comment_id, updates.content, current_user)
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(updated, "Komenti u përditësua me sukses")


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        await CommentService.delete_comment(db, comment_id, current_user)
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(message="Komenti u fshi me sukses")


@router.post("/{comment_id}/vote")
async def vote_comment(
    comment_id: int,
    vote: CommentVote,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Up- or down-vote a comment.

    Repeating the same vote withdraws it; the opposite vote replaces it.
    """
    try:
        counters = await CommentService.vote(db, comment_id, vote.vote_type, current_user)
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(counters, "Votimi u përditësua me sukses")
