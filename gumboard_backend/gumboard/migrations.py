import logging
from sqlalchemy import text

from models.common import utcnow

logger = logging.getLogger("gumboard.migrations")


async def ensure_migrations_table(conn):
    await conn.execute(text(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            name TEXT PRIMARY KEY,
            applied_at TEXT DEFAULT (datetime('now'))
        )
        """
    ))


async def has_migration(conn, name: str) -> bool:
    result = await conn.execute(text("SELECT 1 FROM schema_migrations WHERE name = :name"), {"name": name})
    return result.first() is not None


async def mark_migration(conn, name: str):
    await conn.execute(text("INSERT INTO schema_migrations(name, applied_at) VALUES (:name, :applied_at)"), {
        "name": name,
        "applied_at": utcnow().isoformat()
    })


async def column_exists(conn, table: str, column: str) -> bool:
    result = await conn.execute(text(f"PRAGMA table_info({table})"))
    for row in result.mappings():
        if row.get("name") == column:
            return True
    return False


async def add_archived_at_to_notes(conn):
    if await column_exists(conn, "notes", "archived_at"):
        return
    await conn.execute(text("ALTER TABLE notes ADD COLUMN archived_at DATETIME"))


async def add_version_columns(conn):
    for table in ("notes", "checklist_items"):
        if await column_exists(conn, table, "version"):
            continue
        await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN version INTEGER NOT NULL DEFAULT 1"))


async def compact_checklist_orders(conn):
    # older rows kept gaps left behind by item deletion
    rows = await conn.execute(text(
        'SELECT id, note_id FROM checklist_items ORDER BY note_id, "order", created_at'
    ))
    position: dict[str, int] = {}
    for item_id, note_id in rows.all():
        index = position.get(note_id, 0)
        await conn.execute(
            text('UPDATE checklist_items SET "order" = :order WHERE id = :id'),
            {"order": index, "id": item_id},
        )
        position[note_id] = index + 1


MIGRATIONS = [
    ("202501_add_archived_at_to_notes", add_archived_at_to_notes),
    ("202502_add_version_columns", add_version_columns),
    ("202502_compact_checklist_orders", compact_checklist_orders),
]


async def run_migrations(conn):
    await ensure_migrations_table(conn)
    for name, handler in MIGRATIONS:
        if await has_migration(conn, name):
            continue
        await handler(conn)
        await mark_migration(conn, name)
        logger.info("MIGRATION_APPLIED name=%s", name)
