"""Loads boards, notes, checklist items and comments on behalf of an actor.

Every loader enforces the same ladder: missing or soft-deleted rows are 404,
rows in another organization are 403, and mutating callers must be the
author or an organization admin.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.errors import AccessDenied, NotFound
from gumboard.security import Actor
from models.board import Board
from models.comments import Comment
from models.notes import ChecklistItem, Note

logger = logging.getLogger("gumboard.access")


def ensure_author_or_admin(created_by: str | None, actor: Actor, message: str = "Only the note author or admin can edit this note") -> None:
    if created_by == actor.user_id or actor.is_admin:
        return
    logger.info("ACCESS_DENY rule=author_or_admin user=%s", actor.user_id)
    raise AccessDenied(message)


def ensure_same_organization(organization_id: str | None, actor: Actor) -> None:
    if organization_id != actor.organization_id:
        logger.info("ACCESS_DENY rule=organization user=%s", actor.user_id)
        raise AccessDenied()


async def load_board(db: AsyncSession, board_id: str, actor: Actor) -> Board:
    board = (await db.execute(select(Board).where(Board.id == board_id))).scalar_one_or_none()
    if not board:
        raise NotFound("Board not found")
    ensure_same_organization(board.organization_id, actor)
    return board


async def load_note(
    db: AsyncSession,
    note_id: str,
    actor: Actor,
    *,
    for_edit: bool = True,
    board_id: str | None = None,
    message: str = "Only the note author or admin can edit this note",
) -> tuple[Note, Board]:
    row = (await db.execute(
        select(Note, Board).join(Board, Board.id == Note.board_id).where(Note.id == note_id)
    )).first()
    if not row:
        raise NotFound("Note not found")
    note, board = row
    if note.deleted_at is not None:
        raise NotFound("Note not found")
    ensure_same_organization(board.organization_id, actor)
    if board_id is not None and note.board_id != board_id:
        raise AccessDenied()
    if for_edit:
        ensure_author_or_admin(note.created_by, actor, message)
    return note, board


async def load_item(db: AsyncSession, note: Note, item_id: str) -> ChecklistItem:
    item = (await db.execute(select(ChecklistItem).where(ChecklistItem.id == item_id))).scalar_one_or_none()
    if not item or item.note_id != note.id:
        raise NotFound("Checklist item not found")
    return item


async def load_item_for_read(db: AsyncSession, item_id: str, actor: Actor) -> tuple[ChecklistItem, Note, Board]:
    row = (await db.execute(
        select(ChecklistItem, Note, Board)
        .join(Note, Note.id == ChecklistItem.note_id)
        .join(Board, Board.id == Note.board_id)
        .where(ChecklistItem.id == item_id)
    )).first()
    if not row:
        raise NotFound("Checklist item not found")
    item, note, board = row
    if note.deleted_at is not None:
        raise NotFound("Checklist item not found")
    ensure_same_organization(board.organization_id, actor)
    return item, note, board


async def load_comment_for_author(db: AsyncSession, item_id: str, comment_id: str, actor: Actor) -> Comment:
    comment = (await db.execute(
        select(Comment).where(Comment.id == comment_id, Comment.deleted_at.is_(None))
    )).scalar_one_or_none()
    if not comment or comment.checklist_item_id != item_id:
        raise NotFound("Comment not found")
    # comments have no admin override
    if comment.author_id != actor.user_id:
        logger.info("ACCESS_DENY rule=comment_author user=%s", actor.user_id)
        raise AccessDenied()
    return comment
