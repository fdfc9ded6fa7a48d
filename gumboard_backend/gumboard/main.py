import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gumboard.api import boards, comments, items, notes, reactions
from gumboard.config import settings
from gumboard.database import create_tables
from gumboard.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="Gumboard")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# routes
app.include_router(boards.router, prefix="/api/boards", tags=["boards"])
app.include_router(notes.router, prefix="/api/boards", tags=["notes"])
app.include_router(items.router, prefix="/api/notes", tags=["checklist"])
app.include_router(comments.router, prefix="/api/checklist-items", tags=["comments"])
app.include_router(reactions.router, prefix="/api/reactions", tags=["reactions"])


@app.on_event("startup")
async def startup():
    await create_tables()


@app.get("/")
async def root():
    return {"message": "Gumboard API"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("gumboard.main:app", host=settings.HOST, port=settings.PORT)
