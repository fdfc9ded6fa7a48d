from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from gumboard.config import settings
from gumboard.migrations import run_migrations

DATABASE_URL = f"sqlite+aiosqlite:///{settings.DATABASE_PATH}"

engine = create_async_engine(DATABASE_URL, echo=settings.SQL_ECHO)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def import_models():
    # register every table on Base.metadata
    import models.organization  # noqa: F401
    import models.user  # noqa: F401
    import models.board  # noqa: F401
    import models.notes  # noqa: F401
    import models.comments  # noqa: F401
    import models.reactions  # noqa: F401
    import models.logs  # noqa: F401


async def create_tables(bind=None):
    import_models()
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await run_migrations(conn)
