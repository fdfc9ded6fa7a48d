from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.access import load_comment_for_author, load_item_for_read
from gumboard.database import get_db
from gumboard.security import Actor, get_current_actor
from gumboard.utils.operation_log import log_request_action
from models.comments import Comment
from models.common import utcnow
from models.user import User
from schemas.comments import (
    CommentAuthor,
    CommentCreate,
    CommentEnvelope,
    CommentResponse,
    CommentsListResponse,
    CommentUpdate,
)

router = APIRouter()


def _build_comment_response(comment: Comment, author: User | None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        checklist_item_id=comment.checklist_item_id,
        content=comment.content,
        author=CommentAuthor(
            id=comment.author_id,
            name=author.name if author else None,
            email=author.email if author else None,
        ),
        created_at=comment.created_at,
        updated_at=comment.updated_at or comment.created_at,
    )


async def _load_author(db: AsyncSession, user_id: str) -> User | None:
    return (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()


@router.get("/{item_id}/comments", response_model=CommentsListResponse)
async def get_comments(
    item_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await load_item_for_read(db, item_id, actor)
    rows = await db.execute(
        select(Comment, User)
        .outerjoin(User, User.id == Comment.author_id)
        .where(Comment.checklist_item_id == item_id, Comment.deleted_at.is_(None))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return CommentsListResponse(comments=[_build_comment_response(c, u) for c, u in rows.all()])


@router.post("/{item_id}/comments", response_model=CommentEnvelope)
async def create_comment(
    item_id: str,
    payload: CommentCreate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    item, note, board = await load_item_for_read(db, item_id, actor)
    comment = Comment(checklist_item_id=item.id, author_id=actor.user_id, content=payload.content)
    db.add(comment)
    await db.flush()
    log_request_action(db, request, actor, "comment_create", board_id=board.id, detail={"note_id": note.id, "comment_id": comment.id})
    await db.commit()
    return CommentEnvelope(comment=_build_comment_response(comment, await _load_author(db, actor.user_id)))


@router.patch("/{item_id}/comments/{comment_id}", response_model=CommentEnvelope)
async def update_comment(
    item_id: str,
    comment_id: str,
    payload: CommentUpdate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    item, note, board = await load_item_for_read(db, item_id, actor)
    comment = await load_comment_for_author(db, item.id, comment_id, actor)
    comment.content = payload.content
    await db.flush()
    log_request_action(db, request, actor, "comment_update", board_id=board.id, detail={"note_id": note.id, "comment_id": comment.id})
    await db.commit()
    return CommentEnvelope(comment=_build_comment_response(comment, await _load_author(db, actor.user_id)))


@router.delete("/{item_id}/comments/{comment_id}")
async def delete_comment(
    item_id: str,
    comment_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    item, note, board = await load_item_for_read(db, item_id, actor)
    comment = await load_comment_for_author(db, item.id, comment_id, actor)
    comment.deleted_at = utcnow()
    log_request_action(db, request, actor, "comment_delete", board_id=board.id, detail={"note_id": note.id, "comment_id": comment.id})
    await db.commit()
    return {"success": True}
