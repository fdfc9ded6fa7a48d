import os
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ.setdefault("LOG_LEVEL", "WARNING")
import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from gumboard.database import create_tables, get_db
from gumboard.main import app
from gumboard.security import create_session_token
from gumboard.services.debounce import InMemoryDebounceStore, NotificationDebouncer, get_debouncer
from gumboard.services.slack_notifier import get_slack_client_factory
from models.board import Board
from models.common import utcnow
from models.notes import ChecklistItem, Note
from models.organization import Organization, OrganizationMember
from models.user import User


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSlackClient:
    def __init__(self):
        self.sent: list[tuple[str | None, str]] = []

    async def send_message(self, channel, text):
        self.sent.append((channel, text))
        return "1700000000.000100"

    def factory(self, organization):
        return self


class Seeder:
    """Inserts rows straight into the test database, outside any request."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _add(self, *rows):
        async def _run():
            async with self.session_factory() as session:
                session.add_all(rows)
                await session.commit()
        asyncio.run(_run())
        return rows[0]

    def organization(self, name="Acme", *, slack=True) -> Organization:
        org = Organization(name=name)
        if slack:
            org.slack_bot_token = "xoxb-test"
            org.slack_channel_id = "C0TEST"
        return self._add(org)

    def user(self, org: Organization | None, name="Member", *, role=OrganizationMember.ROLE_MEMBER) -> User:
        user = User(name=name, email=f"{name.lower().replace(' ', '.')}@example.com",
                    organization_id=org.id if org else None)
        self._add(user)
        if org:
            self._add(OrganizationMember(organization_id=org.id, user_id=user.id, role=role))
        return user

    def board(self, org: Organization, creator: User, name="Sprint", *, send_slack_updates=True) -> Board:
        return self._add(Board(
            name=name,
            organization_id=org.id,
            created_by=creator.id,
            send_slack_updates=send_slack_updates,
        ))

    def note(self, board: Board, author: User, *, archived=False, deleted=False) -> Note:
        note = Note(board_id=board.id, created_by=author.id)
        if archived:
            note.archived_at = utcnow()
        if deleted:
            note.deleted_at = utcnow()
        return self._add(note)

    def item(self, note: Note, content: str, order: int, *, checked=False) -> ChecklistItem:
        return self._add(ChecklistItem(note_id=note.id, content=content, order=order, checked=checked))

    def fetch(self, model, **filters):
        async def _run():
            async with self.session_factory() as session:
                query = select(model).filter_by(**filters)
                return list((await session.execute(query)).scalars().all())
        return asyncio.run(_run())

    def get(self, model, row_id):
        rows = self.fetch(model, id=row_id)
        return rows[0] if rows else None


@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    asyncio.run(create_tables(bind=engine))
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    asyncio.run(engine.dispose())


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def debouncer(clock):
    debouncer = NotificationDebouncer(
        InMemoryDebounceStore(100),
        window_seconds=60,
        prune_interval_seconds=60,
        clock=clock,
    )
    app.dependency_overrides[get_debouncer] = lambda: debouncer
    yield debouncer
    app.dependency_overrides.pop(get_debouncer, None)


@pytest.fixture
def slack():
    recorder = RecordingSlackClient()
    app.dependency_overrides[get_slack_client_factory] = lambda: recorder.factory
    yield recorder
    app.dependency_overrides.pop(get_slack_client_factory, None)


@pytest.fixture
def client(session_factory, debouncer, slack):
    return TestClient(app)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user.id, email=user.email)}"}


@pytest.fixture
def team(seed):
    """An organization with an admin, two members, one board and one note owned by alice."""
    org = seed.organization()
    admin = seed.user(org, "Admin", role=OrganizationMember.ROLE_ADMIN)
    alice = seed.user(org, "Alice")
    bob = seed.user(org, "Bob")
    board = seed.board(org, admin)
    note = seed.note(board, alice)
    return {"org": org, "admin": admin, "alice": alice, "bob": bob, "board": board, "note": note}


@pytest.fixture
def auth():
    return auth_headers
