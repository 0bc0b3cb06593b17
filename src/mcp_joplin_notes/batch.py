"""Best-effort retrieval of several notes in one call."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from .errors import JoplinApiError
from .formatting import format_timestamp, resolve_notebook_title, todo_status_lines
from .joplin_client import JoplinClient
from .models import BatchResult, Note, NoteWithNotebook

logger = logging.getLogger(__name__)

NOTE_FIELDS = "id,title,body,parent_id,created_time,updated_time,is_todo,todo_completed,todo_due"


async def fetch_note_with_notebook(client: JoplinClient, note_id: str) -> NoteWithNotebook:
    raw = await client.read(f"/notes/{note_id}", {"query": {"fields": NOTE_FIELDS}})
    note = Note.model_validate(raw)
    notebook_title = await resolve_notebook_title(client, note.parent_id)
    return NoteWithNotebook(**note.model_dump(), notebook_title=notebook_title)


async def read_many_notes(client: JoplinClient, note_ids: Sequence[str]) -> BatchResult:
    """Fetch each note in turn; a failing id is recorded and the batch continues.

    Ids are processed sequentially so each error maps to exactly one id and the
    local Joplin instance never sees a burst of parallel requests.
    """
    result = BatchResult(requested=len(note_ids))
    for note_id in note_ids:
        try:
            note = await fetch_note_with_notebook(client, note_id)
        except (JoplinApiError, ValidationError) as exc:
            logger.info("Could not read note %s: %s", note_id, exc)
            result.errors[note_id] = str(exc)
            continue
        result.notes.append(note)
        result.successful += 1
    return result


def format_batch_report(result: BatchResult) -> str:
    lines = [f"# Reading {result.requested} notes\n"]

    total = len(result.notes)
    for number, note in enumerate(result.notes, start=1):
        lines.append(f"## Note {number} of {total} (ID: {note.id})\n")
        lines.append(f'### Note: "{note.title}"')
        lines.append(f'Notebook: "{note.notebook_title}" (notebook_id: "{note.parent_id}")')
        lines.extend(todo_status_lines(note))
        lines.append(f"Created: {format_timestamp(note.created_time)}")
        lines.append(f"Updated: {format_timestamp(note.updated_time)}")
        lines.append("\n---\n")
        lines.append(note.body)
        lines.append("\n---\n")

    if result.errors:
        lines.append("## Errors")
        for note_id, message in result.errors.items():
            lines.append(f'- Note ID "{note_id}": {message}')
        lines.append("")

    lines.append("# Summary")
    lines.append(f"Total notes requested: {result.requested}")
    lines.append(f"Successfully retrieved: {result.successful}")
    if result.errors:
        lines.append(f"Failed to retrieve: {len(result.errors)}")
    return "\n".join(lines)
