# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decide whether and how to answer an inbound chat message."""

import logging
from dataclasses import dataclass

from bthint.detector import SnippetDetector, detect_language

logger = logging.getLogger(__name__)

CODE_FENCE = "```"


@dataclass(frozen=True)
class MessageEvent:
    """Represent one inbound chat message.

    Attributes:
        text: Raw message text.
        author_id: Id of the message author.
        workspace_id: Workspace the message was posted in; ``None`` for
            direct messages.
        channel_id: Channel the message was posted in.
        message_id: Platform id of the message, used to reply in thread.
    """

    text: str
    author_id: str
    workspace_id: str | None = None
    channel_id: str = ""
    message_id: str = ""


def format_hint(language: str, fragment: str) -> str:
    """Build the reminder shown for an unfenced fragment.

    Args:
        language: Language tag placed after the opening fence.
        fragment: Detected fragment.

    Returns:
        Reply text showing the fence markup to type and the rendered result.
    """
    typed = [f"{CODE_FENCE}{language}", *fragment.split("\n"), CODE_FENCE]
    quoted = "\n".join(f"> {line}" for line in typed)
    return (
        f"Hint: use three backticks {CODE_FENCE} to wrap your code.\n"
        f"So this:\n{quoted}\n"
        f"Turns into this:\n{CODE_FENCE}{language}\n{fragment}\n{CODE_FENCE}"
    )


class HintResponder:
    """Apply the bot's reply rules to inbound messages."""

    def __init__(
        self,
        detectors: list[SnippetDetector],
        bot_user_id: str,
        target_workspace: str | None = None,
        invite_link: str | None = None,
        invite_command: str = "bthint invite",
    ) -> None:
        """Initialize the responder.

        Args:
            detectors: Detectors tried in order on unfenced messages.
            bot_user_id: Id of the bot's own user; its messages are ignored.
            target_workspace: Only messages from this workspace (or without a
                workspace) are answered. ``None`` answers every workspace.
            invite_link: Link returned by the invite command.
            invite_command: Exact text that requests the invite link.
        """
        self._detectors = detectors
        self._bot_user_id = bot_user_id
        self._target_workspace = target_workspace
        self._invite_link = invite_link
        self._invite_command = invite_command

    async def respond(self, event: MessageEvent) -> str | None:
        """Return the reply text for ``event``, or ``None`` to stay silent."""
        if (
            self._target_workspace is not None
            and event.workspace_id is not None
            and event.workspace_id != self._target_workspace
        ):
            return None
        if event.author_id == self._bot_user_id:
            return None

        if event.text == self._invite_command:
            if not self._invite_link:
                logger.info(f"Invite requested but no link is configured (author={event.author_id})")
                return None
            return f"Invite link: {self._invite_link}"

        if CODE_FENCE in event.text:
            return None

        detection = await detect_language(event.text, self._detectors)
        if detection is None:
            return None
        logger.info(
            f"Replying with code fence hint (channel={event.channel_id} "
            f"author={event.author_id} language={detection.language})"
        )
        return format_hint(detection.language, detection.fragment)
