"""Request bodies for threaded comments and votes."""

from typing import Optional

from .common import CamelModel


class CommentCreate(CamelModel):
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    content: Optional[str] = None
    parent_id: Optional[int] = None


class CommentUpdate(CamelModel):
    content: Optional[str] = None


class CommentVote(CamelModel):
    vote_type: Optional[str] = None
