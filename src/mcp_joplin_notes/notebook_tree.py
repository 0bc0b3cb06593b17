"""Render Joplin's flat folder listing as an indented notebook tree."""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable

from .errors import NotebookCycleError
from .models import Notebook

logger = logging.getLogger(__name__)

INDENT_STEP = 2

# Sorts bracket-prefixed titles such as "[0] Inbox" ahead of plain names.
CHARACTER_BEFORE_A = chr(ord("A") - 1)

TREE_HEADER = (
    "Joplin Notebooks:\n"
    "NOTE: To read a notebook, use the notebook_id with the read_notebook command\n"
    'Example: read_notebook notebook_id="your-notebook-id"\n\n'
)


# Punctuation and symbols in CLDR root collation order; all of them sort
# before digits, and digits before letters.
ROOT_SYMBOL_ORDER = "_-,;:!?.'\"()[]{}§¶@*/\\&#%`^+<=>|~¤¢$£¥"

_SPACE, _SYMBOL, _DIGIT, _LETTER = range(4)


def _collation_element(ch: str) -> tuple[int, int, str]:
    if ch.isspace():
        return _SPACE, 0, ""
    if ch.isdigit():
        return _DIGIT, unicodedata.digit(ch, ord(ch)), ""
    if ch.isalpha():
        return _LETTER, 0, ch
    rank = ROOT_SYMBOL_ORDER.find(ch)
    if rank < 0:
        rank = len(ROOT_SYMBOL_ORDER) + ord(ch)
    return _SYMBOL, rank, ""


def notebook_sort_key(title: str) -> tuple[tuple[tuple[int, int, str], ...], str]:
    """Root-locale collation key; a leading ``[`` compares as ``@``.

    Accents and case are ignored at the primary level and the raw title breaks ties.
    """
    if title.startswith("["):
        title = CHARACTER_BEFORE_A + title[1:]
    decomposed = unicodedata.normalize("NFKD", title)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return tuple(_collation_element(ch) for ch in folded), title


def group_by_parent(notebooks: Iterable[Notebook]) -> dict[str, list[Notebook]]:
    by_parent: dict[str, list[Notebook]] = {}
    for nb in notebooks:
        by_parent.setdefault(nb.parent_id or "", []).append(nb)
    return by_parent


def _find_cycle(notebooks: list[Notebook]) -> list[str] | None:
    parents = {nb.id: nb.parent_id or "" for nb in notebooks}
    for start in parents:
        chain: list[str] = []
        seen: set[str] = set()
        current = start
        while current in parents and current not in seen:
            seen.add(current)
            chain.append(current)
            current = parents[current]
        if current in seen:
            return chain[chain.index(current) :]
    return None


def render_notebook_lines(notebooks: list[Notebook]) -> list[str]:
    """Return one line per reachable notebook, roots first, depth-first.

    Raises :class:`NotebookCycleError` if the parent references loop.
    """
    cycle = _find_cycle(notebooks)
    if cycle:
        raise NotebookCycleError(cycle)

    by_parent = group_by_parent(notebooks)
    lines: list[str] = []
    visited: set[str] = set()

    def walk(parent_id: str, indent: int, path: frozenset[str]) -> None:
        for nb in sorted(by_parent.get(parent_id, []), key=lambda n: notebook_sort_key(n.title)):
            if nb.id in path:
                raise NotebookCycleError(sorted(path | {nb.id}))
            visited.add(nb.id)
            lines.append(f'{" " * indent}Notebook: "{nb.title}" (notebook_id: "{nb.id}")')
            walk(nb.id, indent + INDENT_STEP, path | {nb.id})

    walk("", 0, frozenset())

    orphans = [nb.id for nb in notebooks if nb.id not in visited]
    if orphans:
        logger.debug("Skipping notebooks with unknown parents: %s", ", ".join(orphans))
    return lines


def render_notebook_tree(notebooks: Iterable[Notebook]) -> str:
    lines = render_notebook_lines(list(notebooks))
    return TREE_HEADER + "".join(f"{line}\n" for line in lines)
