from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import ensure_author_or_admin, ensure_same_organization, load_board
from gumboard.database import get_db
from gumboard.errors import NotFound, Unauthenticated
from gumboard.security import Actor, get_current_actor, get_optional_actor
from gumboard.services import lifecycle
from gumboard.utils.operation_log import log_request_action
from models.board import Board
from models.common import utcnow
from models.notes import Note
from schemas.boards import BoardCreate, BoardEnvelope, BoardListResponse, BoardResponse, BoardUpdate

router = APIRouter()


def _build_board_response(board: Board, note_count: int = 0) -> BoardResponse:
    return BoardResponse(
        id=board.id,
        name=board.name,
        description=board.description,
        organization_id=board.organization_id,
        is_public=bool(board.is_public),
        send_slack_updates=bool(board.send_slack_updates),
        archived_at=board.archived_at,
        note_count=note_count,
        last_activity_at=board.updated_at or board.created_at,
    )


async def _note_counts(db: AsyncSession, board_ids: list[str]) -> dict[str, int]:
    if not board_ids:
        return {}
    rows = await db.execute(
        select(Note.board_id, func.count(Note.id))
        .where(Note.board_id.in_(board_ids), Note.deleted_at.is_(None), Note.archived_at.is_(None))
        .group_by(Note.board_id)
    )
    return {board_id: count for board_id, count in rows.all()}


@router.get("", response_model=BoardListResponse)
async def get_boards(
    archived: str = Query("false", pattern="^(false|true|all)$"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    query = select(Board).where(Board.organization_id == actor.organization_id)
    if archived == "false":
        query = query.where(Board.archived_at.is_(None))
    elif archived == "true":
        query = query.where(Board.archived_at.is_not(None))
    query = query.order_by(Board.updated_at.desc(), Board.id.desc())
    boards = (await db.execute(query)).scalars().all()
    counts = await _note_counts(db, [b.id for b in boards])
    return BoardListResponse(boards=[_build_board_response(b, counts.get(b.id, 0)) for b in boards])


@router.post("", response_model=BoardEnvelope, status_code=201)
async def create_board(
    payload: BoardCreate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    board = Board(
        name=payload.name,
        description=(payload.description or "").strip() or None,
        is_public=payload.is_public,
        organization_id=actor.organization_id,
        created_by=actor.user_id,
    )
    db.add(board)
    await db.flush()
    log_request_action(db, request, actor, "board_create", board_id=board.id)
    await db.commit()
    return BoardEnvelope(board=_build_board_response(board))


@router.get("/{board_id}", response_model=BoardEnvelope)
async def get_board(
    board_id: str,
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    board = (await db.execute(select(Board).where(Board.id == board_id))).scalar_one_or_none()
    if not board:
        raise NotFound("Board not found")
    # public boards are readable without a session
    if not board.is_public:
        if actor is None:
            raise Unauthenticated()
        ensure_same_organization(board.organization_id, actor)
    counts = await _note_counts(db, [board.id])
    return BoardEnvelope(board=_build_board_response(board, counts.get(board.id, 0)))


@router.put("/{board_id}", response_model=BoardEnvelope)
async def update_board(
    board_id: str,
    payload: BoardUpdate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    board = await load_board(db, board_id, actor)
    data = payload.model_dump(exclude_unset=True)
    # any member may mute or unmute slack updates; everything else is creator-or-admin
    if set(data) - {"send_slack_updates"}:
        ensure_author_or_admin(board.created_by, actor, "Only the board creator or admin can edit this board")
    if data.get("name") is not None:
        name = data["name"].strip()
        if name:
            board.name = name
    if "description" in data:
        board.description = (data["description"] or "").strip() or None
    if data.get("is_public") is not None:
        board.is_public = data["is_public"]
    if data.get("send_slack_updates") is not None:
        board.send_slack_updates = data["send_slack_updates"]
    if data.get("archived") is not None:
        board.archived_at = utcnow() if data["archived"] else None
    log_request_action(db, request, actor, "board_update", board_id=board.id, detail=sorted(data))
    await db.commit()
    counts = await _note_counts(db, [board.id])
    return BoardEnvelope(board=_build_board_response(board, counts.get(board.id, 0)))


@router.delete("/{board_id}")
async def delete_board(
    board_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    board = await load_board(db, board_id, actor)
    ensure_author_or_admin(board.created_by, actor, "Only the board creator or admin can delete this board")
    await lifecycle.delete_board(db, board, actor)
    log_request_action(db, request, actor, "board_delete", board_id=board_id)
    await db.commit()
    return {"success": True}
