"""Batch note transitions.

A batch is validated as a whole before any row changes: every id must be a
live note on the board, inside the caller's organization, and authored by the
caller unless the caller is an admin. Then a single UPDATE applies the
transition to all of them.
"""

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import ensure_author_or_admin, ensure_same_organization
from gumboard.errors import SomeNotFound
from gumboard.security import Actor
from gumboard.services.lifecycle import touch_board
from models.board import Board
from models.common import utcnow
from models.notes import Note

logger = logging.getLogger("gumboard.notes")


async def resolve_batch(
    db: AsyncSession,
    board_id: str,
    note_ids: Sequence[str],
    actor: Actor,
    *,
    verb: str = "update",
) -> list[Note]:
    ids = list(note_ids)
    rows = await db.execute(
        select(Note, Board)
        .join(Board, Board.id == Note.board_id)
        .where(Note.id.in_(ids), Note.board_id == board_id, Note.deleted_at.is_(None))
    )
    resolved = rows.all()
    # a repeated id counts as unresolved
    if len(resolved) != len(ids):
        logger.info("BULK_REJECT reason=not_found board=%s requested=%d found=%d", board_id, len(ids), len(resolved))
        raise SomeNotFound()
    for _, board in resolved:
        ensure_same_organization(board.organization_id, actor)
    for note, _ in resolved:
        ensure_author_or_admin(note.created_by, actor, f"Only the note author or admin can {verb} this note")
    return [note for note, _ in resolved]


async def bulk_archive(
    db: AsyncSession,
    board_id: str,
    note_ids: Sequence[str],
    archived_at: datetime | None,
    actor: Actor,
) -> int:
    notes = await resolve_batch(db, board_id, note_ids, actor, verb="update")
    ids = [note.id for note in notes]
    await db.execute(
        update(Note)
        .where(Note.id.in_(ids))
        .values(archived_at=archived_at, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await touch_board(db, board_id)
    logger.info("BULK_ARCHIVE board=%s count=%d archived=%s user=%s", board_id, len(ids), archived_at is not None, actor.user_id)
    return len(ids)


async def bulk_soft_delete(db: AsyncSession, board_id: str, note_ids: Sequence[str], actor: Actor) -> list[str]:
    notes = await resolve_batch(db, board_id, note_ids, actor, verb="delete")
    ids = [note.id for note in notes]
    await db.execute(
        update(Note)
        .where(Note.id.in_(ids))
        .values(deleted_at=utcnow(), updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await touch_board(db, board_id)
    logger.info("BULK_DELETE board=%s count=%d user=%s", board_id, len(ids), actor.user_id)
    return ids
