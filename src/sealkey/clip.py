"""Clipboard hand-off for retrieved secrets."""

from __future__ import annotations

import time

import pyperclip

from .errors import ClipboardUnavailable

CLEAR_AFTER = 10


def copy_then_clear(text: str, timeout: float = CLEAR_AFTER) -> None:
    """Put *text* on the clipboard, wait *timeout* seconds, then blank it."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise ClipboardUnavailable() from exc
    try:
        time.sleep(timeout)
    finally:
        try:
            pyperclip.copy("")
        except pyperclip.PyperclipException as exc:
            raise ClipboardUnavailable() from exc
