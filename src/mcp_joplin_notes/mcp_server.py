"""FastMCP server definition (tools)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import Context, FastMCP

from .joplin_client import JoplinClient
from .settings import Settings
from .tools import NoteTools


@dataclass(slots=True)
class AppContext:
    settings: Settings
    joplin: JoplinClient
    tools: NoteTools


def create_mcp_server(settings: Settings) -> FastMCP:
    @asynccontextmanager
    async def lifespan(_: FastMCP) -> AsyncIterator[AppContext]:
        joplin = JoplinClient(settings.client_config())
        try:
            yield AppContext(settings=settings, joplin=joplin, tools=NoteTools(joplin))
        finally:
            await joplin.aclose()

    mcp = FastMCP(
        "Joplin",
        instructions=(
            "Read and manage Joplin notes via the local Joplin Data API (Web Clipper). "
            "Start with list_notebooks or search_notes to discover ids."
        ),
        lifespan=lifespan,
        stateless_http=True,
        json_response=True,
    )

    def _tools(ctx: Context) -> NoteTools:
        app: AppContext = ctx.request_context.lifespan_context
        return app.tools

    @mcp.tool()
    async def list_notebooks(ctx: Context) -> str:
        """Retrieve the complete notebook hierarchy from Joplin."""
        return await _tools(ctx).list_notebooks()

    @mcp.tool()
    async def search_notes(query: str, ctx: Context) -> str:
        """Search for notes in Joplin and return matching notebooks."""
        return await _tools(ctx).search_notes(query)

    @mcp.tool()
    async def read_notebook(notebook_id: str, ctx: Context) -> str:
        """Read the contents of a specific notebook."""
        return await _tools(ctx).read_notebook(notebook_id)

    @mcp.tool()
    async def read_note(note_id: str, ctx: Context) -> str:
        """Read the full content of a specific note."""
        return await _tools(ctx).read_note(note_id)

    @mcp.tool()
    async def read_multinote(note_ids: list[str], ctx: Context) -> str:
        """Read the full content of multiple notes at once."""
        return await _tools(ctx).read_multi_note(note_ids)

    @mcp.tool()
    async def create_note(
        title: str,
        ctx: Context,
        body: str = "",
        parent_id: str | None = None,
        is_todo: bool = False,
    ) -> str:
        """Create a new note, optionally inside a notebook."""
        return await _tools(ctx).create_note(
            title, body=body, parent_id=parent_id, is_todo=is_todo
        )

    @mcp.tool()
    async def update_note(
        note_id: str,
        ctx: Context,
        title: str | None = None,
        body: str | None = None,
        parent_id: str | None = None,
        is_todo: bool | None = None,
    ) -> str:
        """Update fields of an existing note."""
        return await _tools(ctx).update_note(
            note_id, title=title, body=body, parent_id=parent_id, is_todo=is_todo
        )

    @mcp.tool()
    async def delete_note(note_id: str, ctx: Context, permanent: bool = False) -> str:
        """Delete a note (moved to trash unless permanent is set)."""
        return await _tools(ctx).delete_note(note_id, permanent=permanent)

    @mcp.tool()
    async def import_markdown(file_path: str, ctx: Context, parent_id: str | None = None) -> str:
        """Import a local Markdown file as a new note."""
        return await _tools(ctx).import_markdown(file_path, parent_id=parent_id)

    return mcp
