"""Domain errors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """What went wrong talking to the Joplin Data API."""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    NOT_FOUND = "not_found"
    DECODE = "decode"
    UNEXPECTED_SHAPE = "unexpected_shape"
    PAGINATION_LIMIT = "pagination_limit"


@dataclass(slots=True, eq=False)
class JoplinApiError(RuntimeError):
    """Raised when a request to the Joplin Data API does not yield usable JSON.

    The message never includes the full request URL, which carries the token.
    """

    kind: ErrorKind
    method: str
    path: str
    detail: str
    status_code: int | None = None

    @property
    def not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        if self.status_code is not None:
            return (
                f"Joplin API error {self.status_code} for {self.method} {self.path}: "
                f"{self.detail}"
            )
        return f"Joplin API {self.kind.value} error for {self.method} {self.path}: {self.detail}"


class NotebookCycleError(ValueError):
    """Raised when notebook parent references form a loop."""

    def __init__(self, notebook_ids: list[str]) -> None:
        self.notebook_ids = notebook_ids
        super().__init__(
            "Notebook hierarchy contains a cycle involving: " + ", ".join(notebook_ids)
        )
