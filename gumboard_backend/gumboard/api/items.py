from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import load_item, load_note
from gumboard.database import get_db
from gumboard.security import Actor, get_current_actor
from gumboard.services import checklist
from gumboard.services.debounce import NotificationDebouncer, get_debouncer
from gumboard.services.slack_notifier import (
    SlackClientFactory,
    get_slack_client_factory,
    load_organization,
    schedule_todo_notification,
)
from gumboard.utils.operation_log import log_request_action
from models.notes import ChecklistItem
from schemas.items import (
    ItemCreate,
    ItemEnvelope,
    ItemListResponse,
    ItemResponse,
    ItemUpdate,
    ReorderRequest,
)

router = APIRouter()


def build_item_response(item: ChecklistItem) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        note_id=item.note_id,
        content=item.content or "",
        checked=bool(item.checked),
        order=item.order,
        version=item.version or 1,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


@router.get("/{note_id}/items", response_model=ItemListResponse)
async def list_items(
    note_id: str,
    view: str = Query("stored", pattern="^(stored|display)$"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    note, _ = await load_note(db, note_id, actor, for_edit=False)
    items = await checklist.list_items(db, note.id)
    if view == "display":
        items = checklist.sort_unchecked_first(items)
    return ItemListResponse(items=[build_item_response(i) for i in items], version=note.version)


@router.post("/{note_id}/items", response_model=ItemEnvelope)
async def create_item(
    note_id: str,
    payload: ItemCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    debouncer: NotificationDebouncer = Depends(get_debouncer),
    client_factory: SlackClientFactory = Depends(get_slack_client_factory),
):
    note, board = await load_note(db, note_id, actor)
    item = await checklist.append_item(db, note, payload.content, payload.checked)
    log_request_action(db, request, actor, "item_create", board_id=board.id, detail={"note_id": note.id, "item_id": item.id})
    await db.commit()
    schedule_todo_notification(
        background_tasks,
        debouncer=debouncer,
        client_factory=client_factory,
        organization=await load_organization(db, actor.organization_id),
        board=board,
        actor=actor,
        content=item.content,
        action="added",
    )
    return ItemEnvelope(item=build_item_response(item))


@router.put("/{note_id}/items/reorder", response_model=ItemListResponse)
async def reorder_items(
    note_id: str,
    payload: ReorderRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    note, board = await load_note(db, note_id, actor, message="Only the note author or admin can reorder items")
    items = await checklist.reorder_items(db, note, payload.items, expected_version=payload.version)
    log_request_action(db, request, actor, "items_reorder", board_id=board.id, detail={"note_id": note.id, "count": len(items)})
    await db.commit()
    return ItemListResponse(items=[build_item_response(i) for i in items], version=note.version)


@router.put("/{note_id}/items/{item_id}", response_model=ItemEnvelope)
async def update_item(
    note_id: str,
    item_id: str,
    payload: ItemUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    debouncer: NotificationDebouncer = Depends(get_debouncer),
    client_factory: SlackClientFactory = Depends(get_slack_client_factory),
):
    note, board = await load_note(db, note_id, actor)
    item = await load_item(db, note, item_id)
    was_checked = await checklist.update_item(
        db,
        note,
        item,
        content=payload.content,
        checked=payload.checked,
        expected_version=payload.version,
    )
    log_request_action(db, request, actor, "item_update", board_id=board.id, detail={"note_id": note.id, "item_id": item.id})
    await db.commit()
    if payload.checked is True and not was_checked:
        schedule_todo_notification(
            background_tasks,
            debouncer=debouncer,
            client_factory=client_factory,
            organization=await load_organization(db, actor.organization_id),
            board=board,
            actor=actor,
            content=item.content,
            action="completed",
        )
    return ItemEnvelope(item=build_item_response(item))


@router.delete("/{note_id}/items/{item_id}")
async def delete_item(
    note_id: str,
    item_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    note, board = await load_note(db, note_id, actor)
    item = await load_item(db, note, item_id)
    await checklist.delete_item(db, note, item)
    log_request_action(db, request, actor, "item_delete", board_id=board.id, detail={"note_id": note.id, "item_id": item_id})
    await db.commit()
    return {"success": True}
