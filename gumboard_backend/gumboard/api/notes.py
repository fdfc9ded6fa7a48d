from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import load_board, load_note
from gumboard.api.items import build_item_response
from gumboard.database import get_db
from gumboard.security import Actor, get_current_actor
from gumboard.services import bulk, lifecycle
from gumboard.utils.operation_log import log_request_action
from models.board import Board
from models.notes import ChecklistItem, Note as DBNote
from models.user import User
from schemas.notes import (
    BulkArchiveRequest,
    BulkDeleteRequest,
    BulkIdsRequest,
    NoteAuthor,
    NoteBoard,
    NoteCreate,
    NoteEnvelope,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)

router = APIRouter()


def _build_note_response(
    note: DBNote,
    authors: dict[str, User],
    items: list[ChecklistItem],
    board: Board | None = None,
) -> NoteResponse:
    author = authors.get(note.created_by)
    return NoteResponse(
        id=note.id,
        board_id=note.board_id,
        created_by=note.created_by,
        color=note.color,
        done=bool(note.done),
        archived_at=note.archived_at,
        version=note.version or 1,
        user=NoteAuthor(id=author.id, name=author.name, email=author.email) if author else None,
        board=NoteBoard(id=board.id, name=board.name) if board else None,
        checklist_items=[build_item_response(i) for i in items],
        created_at=note.created_at,
        updated_at=note.updated_at or note.created_at,
    )


async def _note_responses(
    db: AsyncSession,
    notes: list[DBNote],
    boards: dict[str, Board] | None = None,
) -> list[NoteResponse]:
    if not notes:
        return []
    note_ids = [n.id for n in notes]
    author_ids = {n.created_by for n in notes}
    author_rows = await db.execute(select(User).where(User.id.in_(author_ids)))
    authors = {u.id: u for u in author_rows.scalars().all()}
    item_rows = await db.execute(
        select(ChecklistItem)
        .where(ChecklistItem.note_id.in_(note_ids))
        .order_by(ChecklistItem.order.asc(), ChecklistItem.created_at.asc())
    )
    items_by_note: dict[str, list[ChecklistItem]] = {}
    for item in item_rows.scalars().all():
        items_by_note.setdefault(item.note_id, []).append(item)
    boards = boards or {}
    return [
        _build_note_response(n, authors, items_by_note.get(n.id, []), boards.get(n.board_id))
        for n in notes
    ]


@router.get("/all-notes/notes", response_model=NoteListResponse)
async def get_organization_notes(
    archived: str = Query("false", pattern="^(false|true|all)$"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    query = (
        lifecycle.visible_notes_query(archived=archived)
        .add_columns(Board)
        .join(Board, Board.id == DBNote.board_id)
        .where(Board.organization_id == actor.organization_id)
        .order_by(DBNote.created_at.desc(), DBNote.id.desc())
    )
    rows = (await db.execute(query)).all()
    notes = [note for note, _ in rows]
    boards = {board.id: board for _, board in rows}
    return NoteListResponse(notes=await _note_responses(db, notes, boards))


@router.get("/{board_id}/notes", response_model=NoteListResponse)
async def get_notes(
    board_id: str,
    archived: str = Query("false", pattern="^(false|true|all)$"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await load_board(db, board_id, actor)
    query = lifecycle.visible_notes_query(board_id, archived).order_by(DBNote.created_at.desc(), DBNote.id.desc())
    notes = list((await db.execute(query)).scalars().all())
    return NoteListResponse(notes=await _note_responses(db, notes))


@router.post("/{board_id}/notes", response_model=NoteEnvelope)
async def create_note(
    board_id: str,
    payload: NoteCreate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    board = await load_board(db, board_id, actor)
    db_note = DBNote(board_id=board.id, created_by=actor.user_id)
    if payload.color:
        db_note.color = payload.color
    db.add(db_note)
    await db.flush()
    await lifecycle.touch_board(db, board.id)
    log_request_action(db, request, actor, "note_create", board_id=board.id, detail={"note_id": db_note.id})
    await db.commit()
    responses = await _note_responses(db, [db_note])
    return NoteEnvelope(note=responses[0])


@router.put("/{board_id}/notes/bulk-actions")
async def bulk_archive_notes(
    board_id: str,
    payload: BulkArchiveRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    count = await bulk.bulk_archive(db, board_id, payload.ids, payload.archived_at, actor)
    action = "archived" if payload.archived_at is not None else "unarchived"
    log_request_action(db, request, actor, "notes_bulk_archive", board_id=board_id, detail={"action": action, "count": count})
    await db.commit()
    return {"success": True, "action": action, "count": count}


@router.delete("/{board_id}/notes/bulk-actions")
async def bulk_delete_notes(
    board_id: str,
    payload: BulkIdsRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    deleted_ids = await bulk.bulk_soft_delete(db, board_id, payload.ids, actor)
    log_request_action(db, request, actor, "notes_bulk_delete", board_id=board_id, detail={"count": len(deleted_ids)})
    await db.commit()
    return {"success": True, "deleted": len(deleted_ids)}


@router.post("/{board_id}/notes/bulk-delete")
async def bulk_delete_notes_by_ids(
    board_id: str,
    payload: BulkDeleteRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    deleted_ids = await bulk.bulk_soft_delete(db, board_id, payload.note_ids, actor)
    log_request_action(db, request, actor, "notes_bulk_delete", board_id=board_id, detail={"count": len(deleted_ids)})
    await db.commit()
    return {"deleted": len(deleted_ids), "deletedIds": deleted_ids}


@router.put("/{board_id}/notes/{note_id}", response_model=NoteEnvelope)
async def update_note(
    board_id: str,
    note_id: str,
    payload: NoteUpdate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    db_note, board = await load_note(db, note_id, actor, board_id=board_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("color"):
        db_note.color = data["color"]
    if data.get("done") is not None:
        db_note.done = data["done"]
    if data.get("archived") is not None:
        lifecycle.set_archived(db_note, data["archived"])
    await lifecycle.touch_board(db, board.id)
    log_request_action(db, request, actor, "note_update", board_id=board.id, detail={"note_id": db_note.id})
    await db.commit()
    responses = await _note_responses(db, [db_note])
    return NoteEnvelope(note=responses[0])


@router.delete("/{board_id}/notes/{note_id}")
async def delete_note(
    board_id: str,
    note_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    db_note, board = await load_note(
        db, note_id, actor, board_id=board_id, message="Only the note author or admin can delete this note"
    )
    lifecycle.soft_delete(db_note)
    await lifecycle.touch_board(db, board.id)
    log_request_action(db, request, actor, "note_delete", board_id=board.id, detail={"note_id": db_note.id})
    await db.commit()
    return {"success": True}


@router.post("/{board_id}/notes/{note_id}/restore")
async def restore_note(
    board_id: str,
    note_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    db_note = await lifecycle.restore(db, board_id, note_id, actor)
    log_request_action(db, request, actor, "note_restore", board_id=board_id, detail={"note_id": db_note.id})
    await db.commit()
    return {"success": True}
