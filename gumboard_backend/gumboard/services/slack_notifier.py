import logging
import re
from typing import Callable

import httpx
from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.config import settings
from gumboard.security import Actor
from gumboard.services.debounce import NotificationDebouncer
from models.board import Board
from models.organization import Organization

logger = logging.getLogger("gumboard.notify")

TODO_ACTIONS = {"added", "completed"}

_ACTION_EMOJI = {
    "added": ":heavy_plus_sign:",
    "completed": ":white_check_mark:",
}

# letters or digits: latin, latin-1 accented, CJK, hiragana, katakana
_SUBSTANTIVE_RE = re.compile(r"[a-zA-Z0-9\u00C0-\u017F\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff]")


def has_valid_content(content: str | None) -> bool:
    text = (content or "").strip()
    if not text:
        return False
    return bool(_SUBSTANTIVE_RE.search(text))


def format_todo_for_slack(content: str, board_name: str, user_name: str, action: str) -> str:
    emoji = _ACTION_EMOJI.get(action, _ACTION_EMOJI["added"])
    return f"{emoji} {content} by {user_name} in {board_name}"


class SlackClient:
    """Posts messages through the Slack Web API, or a legacy incoming webhook."""

    def __init__(self, token: str | None = None, *, webhook_url: str | None = None):
        self.token = (token or "").strip() or None
        self.webhook_url = (webhook_url or "").strip() or None

    async def send_message(self, channel: str | None, text: str) -> str | None:
        timeout = httpx.Timeout(settings.SLACK_TIMEOUT_SECONDS, connect=5.0)
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                if self.token:
                    resp = await client.post(
                        f"{settings.SLACK_API_BASE}/chat.postMessage",
                        headers={"Authorization": f"Bearer {self.token}"},
                        json={
                            "channel": channel,
                            "text": text,
                            "username": settings.SLACK_BOT_USERNAME,
                            "icon_emoji": settings.SLACK_ICON_EMOJI,
                        },
                    )
                    if resp.status_code >= 400:
                        logger.error("SLACK_SEND_FAIL status=%s", resp.status_code)
                        return None
                    payload = resp.json()
                    if not payload.get("ok"):
                        logger.error("SLACK_SEND_FAIL error=%s", payload.get("error"))
                        return None
                    return payload.get("ts")
                if self.webhook_url:
                    resp = await client.post(self.webhook_url, json={"text": text})
                    if resp.status_code >= 400:
                        logger.error("SLACK_WEBHOOK_FAIL status=%s", resp.status_code)
                        return None
                    return "webhook"
        except (httpx.HTTPError, ValueError):
            logger.exception("SLACK_SEND_ERROR channel=%s", channel)
            return None
        return None


SlackClientFactory = Callable[[Organization], SlackClient]


def slack_client_for(organization: Organization) -> SlackClient:
    return SlackClient(organization.slack_bot_token, webhook_url=organization.slack_webhook_url)


def get_slack_client_factory() -> SlackClientFactory:
    return slack_client_for


def slack_enabled(organization: Organization | None) -> bool:
    if not organization:
        return False
    if organization.slack_bot_token and organization.slack_channel_id:
        return True
    return bool(organization.slack_webhook_url)


async def load_organization(db: AsyncSession, organization_id: str) -> Organization | None:
    return (await db.execute(select(Organization).where(Organization.id == organization_id))).scalar_one_or_none()


def schedule_todo_notification(
    background_tasks: BackgroundTasks,
    *,
    debouncer: NotificationDebouncer,
    client_factory: SlackClientFactory,
    organization: Organization | None,
    board: Board,
    actor: Actor,
    content: str,
    action: str,
) -> bool:
    """Decide now, send after the response. Returns whether a message was queued."""
    if action not in TODO_ACTIONS:
        return False
    if not slack_enabled(organization):
        return False
    if not has_valid_content(content):
        return False
    if not debouncer.should_send(actor.user_id, board.id, bool(board.send_slack_updates)):
        return False
    text = format_todo_for_slack(content.strip(), board.name, actor.display_name, action)
    client = client_factory(organization)
    background_tasks.add_task(client.send_message, organization.slack_channel_id, text)
    logger.info("NOTIFY_QUEUED board=%s action=%s user=%s", board.id, action, actor.user_id)
    return True
