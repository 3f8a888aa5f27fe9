# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Chat integration for the backtick hint bot."""

from bthint.chat.responder import HintResponder, MessageEvent, format_hint

__all__ = ["HintResponder", "MessageEvent", "format_hint"]
