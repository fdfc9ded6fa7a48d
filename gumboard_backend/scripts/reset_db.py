import asyncio
import sys
from pathlib import Path

# Ensure backend root on import path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from gumboard.config import settings  # noqa: E402
from gumboard.database import create_tables  # noqa: E402


async def recreate_db():
    # DATABASE_PATH is resolved against the working directory, same as the engine
    db_path = Path(settings.DATABASE_PATH)
    if db_path.exists():
        db_path.unlink()
    await create_tables()
    return db_path


if __name__ == '__main__':
    path = asyncio.run(recreate_db())
    print(f'Database recreated at {path.resolve()}.')
