# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Slack event handling for the backtick hint bot."""

import logging
from typing import Any

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from bthint.chat.responder import HintResponder, MessageEvent
from bthint.checkers import php_checker
from bthint.config import Settings
from bthint.detector import SnippetDetector

logger = logging.getLogger(__name__)


def unescape_text(text: str) -> str:
    """Decode the three entities Slack escapes in message text."""
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")


def escape_text(text: str) -> str:
    """Escape control characters before posting text to Slack."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def to_message_event(event: dict[str, Any], body: dict[str, Any] | None = None) -> MessageEvent:
    """Convert a Slack ``message`` event payload to a ``MessageEvent``.

    Direct messages carry no workspace so they are never filtered by it.
    """
    workspace_id: str | None = None
    if event.get("channel_type") != "im":
        workspace_id = event.get("team") or (body or {}).get("team_id")
    return MessageEvent(
        text=unescape_text(event.get("text", "")),
        author_id=event.get("user", ""),
        workspace_id=workspace_id,
        channel_id=event.get("channel", ""),
        message_id=event.get("ts", ""),
    )


async def handle_message_event(
    event: dict[str, Any],
    client: AsyncWebClient,
    responder: HintResponder,
    body: dict[str, Any] | None = None,
) -> None:
    """Answer one Slack message in its thread when the responder has a reply."""
    # edits, deletions, joins and bot posts
    if event.get("subtype"):
        return

    message = to_message_event(event, body)
    reply = await responder.respond(message)
    if reply is None:
        return
    try:
        await client.chat_postMessage(
            channel=message.channel_id,
            thread_ts=event.get("thread_ts") or message.message_id,
            text=escape_text(reply),
        )
    except SlackApiError as exc:
        logger.error(
            f"Error replying to Slack (channel={message.channel_id} error={exc})"
        )


def register_handlers(app: AsyncApp, responder: HintResponder) -> None:
    """Register the message handler on the app."""

    @app.event("message")
    async def handle_message(
        event: dict[str, Any], body: dict[str, Any], client: AsyncWebClient
    ) -> None:
        await handle_message_event(event, client, responder, body=body)


def build_detectors(settings: Settings) -> list[SnippetDetector]:
    """Build the detectors configured by ``settings``."""
    return [
        SnippetDetector(
            checker=php_checker(settings.checker_executable),
            deadline_policy=settings.deadline_policy,
        )
    ]


async def serve(settings: Settings) -> None:
    """Connect to Slack over Socket Mode and answer messages until stopped.

    Args:
        settings: Loaded settings with both Slack tokens set.

    Raises:
        ValueError: If a Slack token is missing.
    """
    if not settings.slack_bot_token or not settings.slack_app_token:
        raise ValueError("slack_bot_token and slack_app_token are required")

    app = AsyncApp(token=settings.slack_bot_token)
    auth = await app.client.auth_test()
    bot_user_id = auth["user_id"]
    logger.info(
        f"Connected to Slack (bot_user_id={bot_user_id} "
        f"target_workspace={settings.target_workspace})"
    )
    if settings.invite_link:
        logger.info(f"Invite link: {settings.invite_link}")

    responder = HintResponder(
        detectors=build_detectors(settings),
        bot_user_id=bot_user_id,
        target_workspace=settings.target_workspace,
        invite_link=settings.invite_link,
        invite_command=settings.invite_command,
    )
    register_handlers(app, responder)
    await AsyncSocketModeHandler(app, settings.slack_app_token).start_async()
