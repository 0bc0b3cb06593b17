"""Text-returning note operations exposed to MCP clients.

Every public coroutine here returns a formatted string. Upstream failures are
turned into ``Error: ...`` messages and never propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .batch import fetch_note_with_notebook, format_batch_report, read_many_notes
from .errors import JoplinApiError
from .formatting import (
    clean_snippet,
    format_timestamp,
    resolve_notebook_title,
    todo_status_lines,
)
from .joplin_client import JoplinClient
from .models import Note, Notebook, SearchHit
from .notebook_tree import render_notebook_tree

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = (
    "Error: Joplin service is not available. Please make sure Joplin is running "
    "and the Web Clipper service is enabled."
)
PREVIEW_LENGTH = 200


def _error_text(exc: Exception) -> str:
    return str(exc) or "Unknown error"


class NoteTools:
    def __init__(self, client: JoplinClient) -> None:
        self._client = client

    async def list_notebooks(self) -> str:
        logger.info("list_notebooks")
        try:
            raw = await self._client.read_all_pages(
                "/folders", {"query": {"fields": "id,title,parent_id"}}
            )
            return render_notebook_tree(Notebook.model_validate(item) for item in raw)
        except Exception as exc:
            logger.exception("Error listing notebooks")
            return f"Error listing notebooks: {_error_text(exc)}"

    async def read_note(self, note_id: str) -> str:
        logger.info("read_note note_id=%s", note_id)
        if not note_id or not note_id.strip():
            return "Error: Note ID cannot be empty"
        try:
            note = await fetch_note_with_notebook(self._client, note_id)
        except JoplinApiError as exc:
            if exc.not_found:
                return (
                    f'Error: Note with ID "{note_id}" not found. '
                    "Please check the ID and try again."
                )
            logger.error("Error reading note %s: %s", note_id, exc)
            return f"Error reading note: {_error_text(exc)}"
        except Exception as exc:
            logger.exception("Error reading note %s", note_id)
            return f"Error reading note: {_error_text(exc)}"

        lines = [
            f'# Note: "{note.title}"',
            f"Note ID: {note.id}",
            f'Notebook: "{note.notebook_title}" (notebook_id: "{note.parent_id}")',
            f"Created: {format_timestamp(note.created_time)}",
            f"Updated: {format_timestamp(note.updated_time)}",
            *todo_status_lines(note),
            "\n---\n",
            note.body,
            "\n---\n",
            "Related commands:",
            "- To view the notebook containing this note: "
            f'read_notebook notebook_id="{note.parent_id}"',
            '- To search for more notes: search_notes query="your search term"',
        ]
        return "\n".join(lines)

    async def read_notebook(self, notebook_id: str) -> str:
        logger.info("read_notebook notebook_id=%s", notebook_id)
        if not notebook_id or not notebook_id.strip():
            return "Error: Notebook ID cannot be empty"
        try:
            raw_notebook = await self._client.read(
                f"/folders/{notebook_id}", {"query": {"fields": "id,title,parent_id"}}
            )
            notebook = Notebook.model_validate(raw_notebook)
            raw_notes = await self._client.read_all_pages(
                f"/folders/{notebook_id}/notes",
                {"query": {"fields": "id,title,updated_time,is_todo,todo_completed,todo_due"}},
            )
            notes = [Note.model_validate(item) for item in raw_notes]
        except JoplinApiError as exc:
            if exc.not_found:
                return (
                    f'Error: Notebook with ID "{notebook_id}" not found. '
                    "Please check the ID and try again."
                )
            logger.error("Error reading notebook %s: %s", notebook_id, exc)
            return f"Error reading notebook: {_error_text(exc)}"
        except Exception as exc:
            logger.exception("Error reading notebook %s", notebook_id)
            return f"Error reading notebook: {_error_text(exc)}"

        heading = f'# Notebook: "{notebook.title}" (notebook_id: "{notebook_id}")'
        if not notes:
            return f"{heading}\nThis notebook is empty."

        lines = [
            heading,
            f"Contains {len(notes)} notes:",
            f'NOTE: This is showing the contents of notebook "{notebook.title}", '
            "not a specific note.\n",
        ]
        newest_first = sorted(notes, key=lambda n: n.updated_time or 0, reverse=True)
        for index, note in enumerate(newest_first):
            marker = ""
            if note.is_todo:
                marker = "✅ " if note.todo_completed else "☐ "
            lines.append(f'- {marker}Note: "{note.title}" (note_id: "{note.id}")')
            lines.append(f"  Updated: {format_timestamp(note.updated_time)}")
            if index < len(newest_first) - 1:
                lines.append("")

        lines.append('\nTo read a specific note, use: read_note note_id="note-id-here"')
        lines.append(
            'To read multiple notes at once, use: read_multinote note_ids=["id1", "id2", "id3"]'
        )
        return "\n".join(lines)

    async def read_multi_note(self, note_ids: Sequence[str]) -> str:
        logger.info("read_multinote count=%d", len(note_ids or []))
        if not note_ids:
            return "Error: Note IDs array cannot be empty"
        try:
            result = await read_many_notes(self._client, note_ids)
            return format_batch_report(result)
        except Exception as exc:
            logger.exception("Error reading multiple notes")
            return f"Error reading multiple notes: {_error_text(exc)}"

    async def search_notes(self, query: str) -> str:
        logger.info("search_notes query=%r", query)
        if not query or not query.strip():
            return "Error: Search query cannot be empty"
        try:
            raw = await self._client.read_all_pages(
                "/search",
                {
                    "query": {
                        "query": query,
                        "type": "note",
                        "fields": "id,title,parent_id,updated_time,body",
                    }
                },
            )
            hits = [SearchHit.model_validate(item) for item in raw]
            if not hits:
                return f'No notes found matching query: "{query}"'

            titles: dict[str, str] = {}
            for hit in hits:
                if hit.parent_id not in titles:
                    titles[hit.parent_id] = await resolve_notebook_title(
                        self._client, hit.parent_id
                    )
        except Exception as exc:
            logger.exception("Error searching notes")
            return f"Error searching notes: {_error_text(exc)}"

        lines = [
            f'Found {len(hits)} notes matching query: "{query}"',
            "NOTE: To read a notebook, use the notebook ID (not the note title)\n",
        ]
        for index, hit in enumerate(hits):
            lines.append(f'- Note: "{hit.title}" (note_id: "{hit.id}")')
            lines.append(f'  Notebook: "{titles[hit.parent_id]}" (notebook_id: "{hit.parent_id}")')
            lines.append(f"  Updated: {format_timestamp(hit.updated_time)}")
            lines.append(f"  Snippet: {clean_snippet(hit.body)}")
            lines.append(f'  To read this notebook: read_notebook notebook_id="{hit.parent_id}"')
            if index < len(hits) - 1:
                lines.append("")
        return "\n".join(lines)

    async def create_note(
        self,
        title: str,
        body: str = "",
        parent_id: str | None = None,
        is_todo: bool = False,
    ) -> str:
        logger.info("create_note title=%r", title)
        if not await self._client.service_available():
            return SERVICE_UNAVAILABLE
        if not title:
            return "Error: title is required"

        payload: dict[str, Any] = {"title": title, "body": body or "", "is_todo": int(is_todo)}
        if parent_id:
            payload["parent_id"] = parent_id
        try:
            created = Note.model_validate(await self._client.create("/notes", payload))
        except Exception as exc:
            logger.exception("Error creating note")
            return f"Error creating note: {_error_text(exc)}"

        lines = [
            "# Note Created Successfully\n",
            f"Note ID: {created.id}",
            f"Title: {created.title}",
            f"Type: {'Todo item' if created.is_todo else 'Regular note'}",
        ]
        if created.parent_id:
            lines.append(await self._notebook_line(created.parent_id))
        lines.append("\n## Related Commands")
        lines.append(f'- To view the created note: read_note note_id="{created.id}"')
        if created.parent_id:
            lines.append(
                "- To view the notebook containing this note: "
                f'read_notebook notebook_id="{created.parent_id}"'
            )
        return "\n".join(lines) + "\n"

    async def update_note(
        self,
        note_id: str,
        title: str | None = None,
        body: str | None = None,
        parent_id: str | None = None,
        is_todo: bool | None = None,
    ) -> str:
        logger.info("update_note note_id=%s", note_id)
        if not await self._client.service_available():
            return SERVICE_UNAVAILABLE
        if not note_id:
            return "Error: note_id is required"

        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if body is not None:
            payload["body"] = body
        if parent_id is not None:
            payload["parent_id"] = parent_id
        if is_todo is not None:
            payload["is_todo"] = int(is_todo)
        if not payload:
            return (
                "Error: At least one update field (title, body, parent_id, or is_todo) "
                "must be provided"
            )

        try:
            original = Note.model_validate(
                await self._client.read(
                    f"/notes/{note_id}", {"query": {"fields": "id,title,parent_id,is_todo"}}
                )
            )
            await self._client.replace(f"/notes/{note_id}", payload)
            updated = Note.model_validate(
                await self._client.read(
                    f"/notes/{note_id}", {"query": {"fields": "id,title,parent_id,is_todo"}}
                )
            )
        except JoplinApiError as exc:
            if exc.not_found:
                return f'Error updating note: Note with ID "{note_id}" not found'
            logger.error("Error updating note %s: %s", note_id, exc)
            return f"Error updating note: {_error_text(exc)}"
        except Exception as exc:
            logger.exception("Error updating note %s", note_id)
            return f"Error updating note: {_error_text(exc)}"

        lines = [
            "# Note Updated Successfully\n",
            f"Note ID: {updated.id}",
            f"Title: {updated.title}\n",
            "## Changes Made\n",
        ]
        if title is not None and original.title != updated.title:
            lines.append(f'- Title: "{original.title}" → "{updated.title}"')
        if body is not None:
            lines.append("- Content was updated")
        if parent_id is not None and original.parent_id != updated.parent_id:
            lines.append("- Moved to different notebook")
        if is_todo is not None and original.is_todo != updated.is_todo:
            before = "Yes" if original.is_todo else "No"
            after = "Yes" if updated.is_todo else "No"
            lines.append(f"- Todo status: {before} → {after}")
        lines.append("\n## Related Commands")
        lines.append(f'- To view the updated note: read_note note_id="{updated.id}"')
        return "\n".join(lines) + "\n"

    async def delete_note(self, note_id: str, permanent: bool = False) -> str:
        logger.info("delete_note note_id=%s permanent=%s", note_id, permanent)
        if not await self._client.service_available():
            return SERVICE_UNAVAILABLE
        if not note_id:
            return "Error: note_id is required"

        try:
            existing = Note.model_validate(
                await self._client.read(f"/notes/{note_id}", {"query": {"fields": "id,title"}})
            )
        except JoplinApiError as exc:
            if exc.not_found:
                return f'Error deleting note: Note with ID "{note_id}" not found'
            logger.error("Could not retrieve note %s before deletion: %s", note_id, exc)
            return f"Error deleting note: {_error_text(exc)}"

        options = {"query": {"permanent": 1}} if permanent else None
        try:
            await self._client.remove(f"/notes/{note_id}", options)
        except JoplinApiError as exc:
            logger.error("Error deleting note %s: %s", note_id, exc)
            return f"Error deleting note: {_error_text(exc)}"

        lines = [
            "# Note Deleted Successfully\n",
            f"Note ID: {note_id}",
            f"Title: {existing.title}",
            f"Deletion type: {'Permanent' if permanent else 'Moved to trash'}\n",
        ]
        if permanent:
            lines.append("Note: This note has been permanently deleted and cannot be recovered.")
        else:
            lines.append(
                "Note: The note has been moved to the trash. It can be restored from within Joplin."
            )
        return "\n".join(lines) + "\n"

    async def import_markdown(self, file_path: str, parent_id: str | None = None) -> str:
        logger.info("import_markdown file_path=%s", file_path)
        if not await self._client.service_available():
            return SERVICE_UNAVAILABLE
        if not file_path:
            return "Error: file_path is required"

        path = Path(file_path)
        if not path.is_file():
            return f"Error: File not found at path: {file_path}"
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading %s: %s", file_path, exc)
            return f"Error importing markdown: {_error_text(exc)}"

        title = path.stem
        for line in content.splitlines():
            if line.startswith("# ") and line[2:].strip():
                title = line[2:].strip()
                break

        payload: dict[str, Any] = {"title": title, "body": content}
        if parent_id:
            payload["parent_id"] = parent_id
        try:
            created = Note.model_validate(await self._client.create("/notes", payload))
        except Exception as exc:
            logger.exception("Error importing markdown")
            return f"Error importing markdown: {_error_text(exc)}"

        preview = content[:PREVIEW_LENGTH] + ("..." if len(content) > PREVIEW_LENGTH else "")
        lines = [
            "# Markdown File Imported Successfully\n",
            f"Source file: {file_path}",
            f"Note ID: {created.id}",
            f"Title: {created.title}",
        ]
        if created.parent_id:
            lines.append(await self._notebook_line(created.parent_id))
        lines.append("\n## Content Preview")
        lines.append(f"```markdown\n{preview}\n```")
        lines.append("\n## Related Commands")
        lines.append(f'- To view the imported note: read_note note_id="{created.id}"')
        if created.parent_id:
            lines.append(
                "- To view the notebook containing this note: "
                f'read_notebook notebook_id="{created.parent_id}"'
            )
        return "\n".join(lines) + "\n"

    async def _notebook_line(self, notebook_id: str) -> str:
        title = await resolve_notebook_title(self._client, notebook_id)
        return f'Notebook: "{title}" ({notebook_id})'
