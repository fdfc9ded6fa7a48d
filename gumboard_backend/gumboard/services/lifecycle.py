import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import ensure_author_or_admin
from gumboard.errors import NotFound
from gumboard.security import Actor
from models.board import Board
from models.comments import Comment
from models.common import utcnow
from models.notes import ChecklistItem, Note
from models.reactions import Reaction

logger = logging.getLogger("gumboard.notes")

ARCHIVE_FILTERS = {"false", "true", "all"}


async def touch_board(db: AsyncSession, board_id: str) -> None:
    # last-activity signal used to sort boards on the dashboard
    await db.execute(update(Board).where(Board.id == board_id).values(updated_at=utcnow()))


def soft_delete(note: Note) -> None:
    note.deleted_at = utcnow()


def set_archived(note: Note, archived: bool) -> None:
    if archived:
        if note.archived_at is None:
            note.archived_at = utcnow()
    else:
        note.archived_at = None


async def restore(db: AsyncSession, board_id: str, note_id: str, actor: Actor) -> Note:
    row = (await db.execute(
        select(Note, Board).join(Board, Board.id == Note.board_id).where(Note.id == note_id)
    )).first()
    # a note moved off the requested board is reported as missing
    if not row or row[1].organization_id != actor.organization_id or row[0].board_id != board_id:
        raise NotFound("Note not found")
    note = row[0]
    ensure_author_or_admin(note.created_by, actor, "Only the note author or admin can restore this note")
    note.deleted_at = None
    await touch_board(db, note.board_id)
    logger.info("NOTE_RESTORE note=%s user=%s", note.id, actor.user_id)
    return note


def visible_notes_query(board_id: str | None = None, archived: str = "false"):
    query = select(Note).where(Note.deleted_at.is_(None))
    if board_id is not None:
        query = query.where(Note.board_id == board_id)
    if archived == "false":
        query = query.where(Note.archived_at.is_(None))
    elif archived == "true":
        query = query.where(Note.archived_at.is_not(None))
    return query


async def delete_board(db: AsyncSession, board: Board, actor: Actor) -> None:
    """Hard delete a board with its notes, checklist items, comments and reactions."""
    note_ids = select(Note.id).where(Note.board_id == board.id)
    item_ids = select(ChecklistItem.id).where(ChecklistItem.note_id.in_(note_ids))
    await db.execute(delete(Comment).where(Comment.checklist_item_id.in_(item_ids)))
    await db.execute(delete(ChecklistItem).where(ChecklistItem.note_id.in_(note_ids)))
    await db.execute(delete(Reaction).where(Reaction.note_id.in_(note_ids)))
    await db.execute(delete(Note).where(Note.board_id == board.id))
    await db.delete(board)
    await db.flush()
    logger.info("BOARD_DELETE board=%s user=%s", board.id, actor.user_id)
