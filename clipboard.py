"""Clipboard collaborator for copying transcripts."""

from __future__ import annotations

from loguru import logger

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore


class PyperclipClipboard:
    def write_text(self, text: str) -> None:
        """Copy ``text`` to the system clipboard; failures are only logged."""
        if not text:
            return
        if pyperclip is None:
            logger.warning("pyperclip is not installed; transcript not copied")
            return
        try:
            pyperclip.copy(text)
        except Exception as exc:
            logger.warning(f"Copying transcript to the clipboard failed: {exc}")
