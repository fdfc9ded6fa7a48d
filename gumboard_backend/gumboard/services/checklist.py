"""Checklist ordering.

Within one note the stored ``order`` values are always ``0..N-1``: append
takes the next slot, delete compacts, and reorder applies the caller's full
list in one transaction.
"""

import logging
from typing import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.errors import CountMismatch, NotFound, ValidationFailed, VersionConflict
from gumboard.services.lifecycle import touch_board
from models.comments import Comment
from models.common import utcnow
from models.notes import ChecklistItem, Note
from schemas.items import ReorderEntry

logger = logging.getLogger("gumboard.checklist")


def next_order(orders: Iterable[int]) -> int:
    return max(orders, default=-1) + 1


def sort_by_order(items: Sequence[ChecklistItem]) -> list[ChecklistItem]:
    return sorted(items, key=lambda item: item.order)


def sort_unchecked_first(items: Sequence[ChecklistItem]) -> list[ChecklistItem]:
    """Display order only; stored orders are left untouched."""
    unchecked = sort_by_order([i for i in items if not i.checked])
    checked = sort_by_order([i for i in items if i.checked])
    return unchecked + checked


def are_all_checked(items: Sequence[ChecklistItem]) -> bool:
    return bool(items) and all(i.checked for i in items)


def compact_orders(items: Sequence[ChecklistItem]) -> list[ChecklistItem]:
    ordered = sort_by_order(items)
    for index, item in enumerate(ordered):
        if item.order != index:
            item.order = index
    return ordered


def move_item(items: Sequence, from_index: int, to_index: int) -> list:
    clone = list(items)
    moved = clone.pop(from_index)
    clone.insert(to_index, moved)
    for index, item in enumerate(clone):
        item.order = index
    return clone


def check_version(expected: int | None, current: int) -> None:
    if expected is not None and expected != current:
        raise VersionConflict()


async def list_items(db: AsyncSession, note_id: str) -> list[ChecklistItem]:
    rows = await db.execute(
        select(ChecklistItem)
        .where(ChecklistItem.note_id == note_id)
        .order_by(ChecklistItem.order.asc(), ChecklistItem.created_at.asc())
    )
    return list(rows.scalars().all())


def _bump_note(note: Note) -> None:
    note.version = (note.version or 1) + 1
    note.updated_at = utcnow()


async def append_item(db: AsyncSession, note: Note, content: str, checked: bool = False) -> ChecklistItem:
    orders = (await db.execute(select(ChecklistItem.order).where(ChecklistItem.note_id == note.id))).scalars().all()
    item = ChecklistItem(note_id=note.id, content=content.strip(), checked=checked, order=next_order(orders))
    db.add(item)
    _bump_note(note)
    await touch_board(db, note.board_id)
    await db.flush()
    return item


async def update_item(
    db: AsyncSession,
    note: Note,
    item: ChecklistItem,
    *,
    content: str | None = None,
    checked: bool | None = None,
    expected_version: int | None = None,
) -> bool:
    """Apply content/checked changes. Returns the item's previous checked state."""
    check_version(expected_version, item.version)
    was_checked = bool(item.checked)
    if content is not None:
        item.content = content.strip()
    if checked is not None:
        item.checked = checked
    item.version = (item.version or 1) + 1
    await touch_board(db, note.board_id)
    await db.flush()
    return was_checked


async def delete_item(db: AsyncSession, note: Note, item: ChecklistItem) -> list[ChecklistItem]:
    # comments go with their item
    await db.execute(delete(Comment).where(Comment.checklist_item_id == item.id))
    await db.delete(item)
    await db.flush()
    remaining = compact_orders(await list_items(db, note.id))
    _bump_note(note)
    await touch_board(db, note.board_id)
    await db.flush()
    return remaining


async def reorder_items(
    db: AsyncSession,
    note: Note,
    entries: Sequence[ReorderEntry],
    expected_version: int | None = None,
) -> list[ChecklistItem]:
    current = await list_items(db, note.id)
    if len(entries) != len(current):
        logger.info("REORDER_REJECT note=%s submitted=%d current=%d", note.id, len(entries), len(current))
        raise CountMismatch(
            f"Expected {len(current)} items, got {len(entries)}"
        )
    by_id = {item.id: item for item in current}
    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            raise ValidationFailed(details=[{"loc": ["body", "items"], "msg": f"Duplicate item id {entry.id}", "type": "value_error"}])
        seen.add(entry.id)
        if entry.id not in by_id:
            raise NotFound("Checklist item not found")
    check_version(expected_version, note.version)

    for entry in entries:
        item = by_id[entry.id]
        if item.order != entry.order:
            item.order = entry.order
    _bump_note(note)
    await touch_board(db, note.board_id)
    await db.flush()
    return sort_by_order(current)
