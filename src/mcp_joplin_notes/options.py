"""Request option merging shared by every Joplin API call."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypedDict


class RequestOptions(TypedDict, total=False):
    query: dict[str, str | int | float | bool]
    headers: dict[str, str]
    timeout: float


def merge_request_options(
    base: Mapping[str, Any] | None = None,
    override: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Combine two option mappings; ``override`` wins on every conflict.

    ``query`` maps are merged key by key. Any other key present on ``override``
    replaces the base value wholesale. Neither input is mutated.
    """
    base = base or {}
    override = override or {}

    query: dict[str, Any] = dict(base.get("query") or {})
    query.update(override.get("query") or {})

    merged: dict[str, Any] = {k: v for k, v in base.items() if k != "query"}
    merged.update({k: v for k, v in override.items() if k != "query"})
    merged["query"] = query
    return merged
