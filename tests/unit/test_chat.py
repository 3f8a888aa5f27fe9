# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import asyncio

from slack_sdk.errors import SlackApiError

from bthint.chat import HintResponder, MessageEvent, format_hint
from bthint.chat.slack import (
    escape_text,
    handle_message_event,
    to_message_event,
    unescape_text,
)
from bthint.checkers import php_checker
from bthint.detector import Detection, SnippetDetector

CODE = "hello();\n$world = foo();\nbar($baz);\n$qux = 1;\n$corge += $qux;"


class _StaticDetector:
    def __init__(self, detection: Detection | None) -> None:
        self._detection = detection
        self.calls: list[str] = []

    async def detect(self, message_text: str) -> Detection | None:
        self.calls.append(message_text)
        return self._detection


class _RecordingClient:
    def __init__(self, error: SlackApiError | None = None) -> None:
        self._error = error
        self.posted: list[dict] = []

    async def chat_postMessage(self, **kwargs) -> dict:
        self.posted.append(kwargs)
        if self._error is not None:
            raise self._error
        return {"ok": True}


def _responder(detector: _StaticDetector, **kwargs) -> HintResponder:
    options = {"bot_user_id": "UBOT", "target_workspace": "T1"}
    options.update(kwargs)
    return HintResponder(detectors=[detector], **options)  # type: ignore[list-item]


def test_ph5_chat_001_hint_shows_raw_and_fenced_fragment() -> None:
    hint = format_hint("php", "a();\nb();")

    assert hint.startswith("Hint: use three backticks ``` to wrap your code.")
    assert "So this:\n> ```php\n> a();\n> b();\n> ```\n" in hint
    assert hint.endswith("```php\na();\nb();\n```")


def test_ph5_chat_002_unfenced_code_gets_a_hint() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    event = MessageEvent(text="look:\n" + CODE, author_id="U1", workspace_id="T1")

    reply = asyncio.run(_responder(detector).respond(event))

    assert reply == format_hint("php", CODE)
    assert detector.calls == [event.text]


def test_ph5_chat_003_other_workspace_and_own_messages_are_ignored() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    responder = _responder(detector)

    foreign = MessageEvent(text=CODE, author_id="U1", workspace_id="T2")
    own = MessageEvent(text=CODE, author_id="UBOT", workspace_id="T1")

    assert asyncio.run(responder.respond(foreign)) is None
    assert asyncio.run(responder.respond(own)) is None
    assert detector.calls == []


def test_ph5_chat_004_direct_messages_are_not_filtered_by_workspace() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    event = MessageEvent(text=CODE, author_id="U1", workspace_id=None)

    assert asyncio.run(_responder(detector).respond(event)) is not None


def test_ph5_chat_005_fenced_messages_are_left_alone() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    event = MessageEvent(text=f"```\n{CODE}\n```", author_id="U1", workspace_id="T1")

    assert asyncio.run(_responder(detector).respond(event)) is None
    assert detector.calls == []


def test_ph5_chat_006_invite_command_returns_configured_link() -> None:
    detector = _StaticDetector(None)
    event = MessageEvent(text="bthint invite", author_id="U1", workspace_id="T1")

    with_link = _responder(detector, invite_link="https://example.com/install")
    without_link = _responder(detector)

    assert asyncio.run(with_link.respond(event)) == "Invite link: https://example.com/install"
    assert asyncio.run(without_link.respond(event)) is None
    assert detector.calls == []


def test_ph5_chat_007_no_detection_means_no_reply() -> None:
    event = MessageEvent(text="a;\nb;", author_id="U1", workspace_id="T1")

    assert asyncio.run(_responder(_StaticDetector(None)).respond(event)) is None


def test_ph5_chat_008_slack_event_conversion_uses_team_except_for_dms() -> None:
    channel_event = {"text": "x", "user": "U1", "channel": "C1", "ts": "1.0", "team": "T1"}
    dm_event = dict(channel_event, channel_type="im")

    assert to_message_event(channel_event) == MessageEvent(
        text="x", author_id="U1", workspace_id="T1", channel_id="C1", message_id="1.0"
    )
    assert to_message_event(dm_event).workspace_id is None
    assert to_message_event({"text": "x"}, body={"team_id": "T9"}).workspace_id == "T9"


def test_ph5_chat_009_slack_reply_is_posted_in_thread() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    client = _RecordingClient()
    event = {"text": CODE, "user": "U1", "channel": "C1", "ts": "10.5", "team": "T1"}

    asyncio.run(handle_message_event(event, client, _responder(detector)))  # type: ignore[arg-type]

    assert client.posted == [
        {"channel": "C1", "thread_ts": "10.5", "text": format_hint("php", CODE)}
    ]


def test_ph5_chat_010_slack_subtypes_are_ignored() -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    client = _RecordingClient()
    event = {"text": CODE, "user": "U1", "channel": "C1", "ts": "1.0", "subtype": "message_changed"}

    asyncio.run(handle_message_event(event, client, _responder(detector)))  # type: ignore[arg-type]

    assert client.posted == []
    assert detector.calls == []


def test_ph5_chat_011_slack_api_error_is_logged_not_raised(caplog) -> None:
    detector = _StaticDetector(Detection(language="php", fragment=CODE))
    error = SlackApiError("posting failed", {"ok": False, "error": "not_in_channel"})
    client = _RecordingClient(error=error)
    event = {"text": CODE, "user": "U1", "channel": "C1", "ts": "1.0", "team": "T1"}

    asyncio.run(handle_message_event(event, client, _responder(detector)))  # type: ignore[arg-type]

    assert len(client.posted) == 1
    assert "Error replying to Slack" in caplog.text


def test_ph5_chat_012_slack_entities_are_decoded_before_detection() -> None:
    event = {
        "text": "&lt;?php\n$a-&gt;b();\nif ($x &amp;&amp; $y) { $z = ['k' =&gt; 1]; }",
        "user": "U1",
        "team": "T1",
    }

    message = to_message_event(event)

    assert message.text == "<?php\n$a->b();\nif ($x && $y) { $z = ['k' => 1]; }"
    assert unescape_text("&amp;lt;") == "&lt;"
    assert escape_text("$a->b() && <x>") == "$a-&gt;b() &amp;&amp; &lt;x&gt;"


def test_ph5_chat_013_escaped_slack_code_is_detected_and_reply_is_escaped(
    make_checker,
) -> None:
    statements = ["$a->b();", "$c = ['k' => 1];", "$d = $a && $c;", "$e->f($d);", "g();"]
    escaped = [escape_text(line) for line in statements]
    event = {
        "text": "\n".join(["look at this", *escaped, "why is it broken"]),
        "user": "U1",
        "channel": "C1",
        "ts": "2.0",
        "team": "T1",
    }
    detector = SnippetDetector(checker=php_checker(str(make_checker("php_like"))))
    responder = HintResponder(detectors=[detector], bot_user_id="UBOT", target_workspace="T1")
    client = _RecordingClient()

    asyncio.run(handle_message_event(event, client, responder))  # type: ignore[arg-type]

    assert len(client.posted) == 1
    assert client.posted[0]["text"] == escape_text(format_hint("php", "\n".join(statements)))
