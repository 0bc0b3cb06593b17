"""Text helpers shared by the note tools."""

from __future__ import annotations

import logging
import re
from datetime import datetime

from .errors import JoplinApiError
from .joplin_client import JoplinClient
from .models import UNKNOWN_NOTEBOOK, Note

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 100

_HEADING_RE = re.compile(r"#{1,6}\s+")
_BOLD_RE = re.compile(r"\*\*|__")
_ITALIC_RE = re.compile(r"[*_]")
_CODE_RE = re.compile(r"`{1,3}")


def format_timestamp(epoch_ms: int | None) -> str:
    """Render Joplin's epoch milliseconds in local time."""
    if not epoch_ms:
        return "Unknown"
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def todo_status_lines(note: Note) -> list[str]:
    if not note.is_todo:
        return []
    lines = [f"Status: {'Completed' if note.todo_completed else 'Not completed'}"]
    if note.todo_due:
        lines.append(f"Due: {format_timestamp(note.todo_due)}")
    return lines


def clean_snippet(text: str, length: int = SNIPPET_LENGTH) -> str:
    """Strip common Markdown markers and cut ``text`` to ``length`` characters."""
    plain = _HEADING_RE.sub("", text)
    plain = _BOLD_RE.sub("", plain)
    plain = _ITALIC_RE.sub("", plain)
    plain = _CODE_RE.sub("", plain)
    plain = plain.replace("\n", " ").strip()
    if len(plain) > length:
        return f"{plain[: length - 3]}..."
    return plain


async def resolve_notebook_title(client: JoplinClient, notebook_id: str) -> str:
    """Look up a notebook title, falling back to ``Unknown Notebook``."""
    if not notebook_id:
        return UNKNOWN_NOTEBOOK
    try:
        notebook = await client.read(f"/folders/{notebook_id}", {"query": {"fields": "id,title"}})
    except JoplinApiError as exc:
        logger.debug("Could not resolve notebook %s: %s", notebook_id, exc)
        return UNKNOWN_NOTEBOOK
    if not isinstance(notebook, dict) or not notebook.get("title"):
        return UNKNOWN_NOTEBOOK
    return str(notebook["title"])
