import json

from fastapi import Request

from gumboard.security import Actor
from models.logs import OperationLog


def add_operation_log(
    db,
    *,
    user_id: str | None,
    action: str | None,
    organization_id: str | None = None,
    board_id: str | None = None,
    detail=None,
    ip: str | None = None,
    user_agent: str | None = None,
):
    if not user_id or not action:
        return
    detail_value = detail
    if detail is not None and not isinstance(detail, str):
        try:
            detail_value = json.dumps(detail, ensure_ascii=False)
        except (TypeError, ValueError):
            detail_value = str(detail)
    db.add(OperationLog(
        user_id=user_id,
        action=action,
        organization_id=organization_id,
        board_id=board_id,
        detail=detail_value,
        ip=ip,
        user_agent=user_agent
    ))


def log_request_action(db, request: Request, actor: Actor, action: str, *, board_id: str | None = None, detail=None):
    add_operation_log(
        db,
        user_id=actor.user_id,
        action=action,
        organization_id=actor.organization_id,
        board_id=board_id,
        detail=detail,
        ip=(request.client.host if request.client else None),
        user_agent=request.headers.get("user-agent"),
    )
