from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import load_note
from gumboard.database import get_db
from gumboard.security import Actor, get_current_actor
from gumboard.utils.operation_log import log_request_action
from models.reactions import Reaction
from models.user import User
from schemas.reactions import ReactionEntry, ReactionListResponse, ReactionToggle

router = APIRouter()


async def _list_reactions(db: AsyncSession, note_id: str) -> ReactionListResponse:
    rows = await db.execute(
        select(Reaction, User)
        .outerjoin(User, User.id == Reaction.user_id)
        .where(Reaction.note_id == note_id)
        .order_by(Reaction.created_at.asc(), Reaction.id.asc())
    )
    return ReactionListResponse(reactions=[
        ReactionEntry(
            id=r.id,
            note_id=r.note_id,
            user_id=r.user_id,
            user_name=u.display_name if u else None,
            emoji=r.emoji,
            created_at=r.created_at,
        )
        for r, u in rows.all()
    ])


@router.get("/{note_id}", response_model=ReactionListResponse)
async def get_reactions(
    note_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    note, _ = await load_note(db, note_id, actor, for_edit=False)
    return await _list_reactions(db, note.id)


@router.post("/{note_id}", response_model=ReactionListResponse)
async def toggle_reaction(
    note_id: str,
    payload: ReactionToggle,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    note, board = await load_note(db, note_id, actor, for_edit=False)
    existing = (await db.execute(
        select(Reaction).where(
            Reaction.note_id == note.id,
            Reaction.user_id == actor.user_id,
            Reaction.emoji == payload.emoji,
        )
    )).scalar_one_or_none()
    if existing:
        await db.delete(existing)
        action = "reaction_remove"
    else:
        db.add(Reaction(note_id=note.id, user_id=actor.user_id, emoji=payload.emoji))
        action = "reaction_add"
    log_request_action(db, request, actor, action, board_id=board.id, detail={"note_id": note.id, "emoji": payload.emoji})
    await db.commit()
    return await _list_reactions(db, note.id)
