# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Detect unfenced code in chat messages."""

from bthint.detector import Detection, SnippetDetector, detect_language

__all__ = ["Detection", "SnippetDetector", "detect_language"]
