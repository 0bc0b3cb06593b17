"""Structured views of Joplin API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_NOTEBOOK = "Unknown Notebook"


class Notebook(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    parent_id: str = ""

    @field_validator("title", "parent_id", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class Note(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    body: str = ""
    parent_id: str = ""
    created_time: int | None = None
    updated_time: int | None = None
    is_todo: int = 0
    todo_completed: int | None = None
    todo_due: int | None = None

    @field_validator("title", "body", "parent_id", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class NoteWithNotebook(Note):
    notebook_title: str = UNKNOWN_NOTEBOOK


class SearchHit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    parent_id: str = ""
    updated_time: int | None = None
    body: str = ""


class BatchResult(BaseModel):
    """Outcome of reading several notes; failures never abort the batch."""

    requested: int = Field(ge=0)
    successful: int = Field(default=0, ge=0)
    notes: list[NoteWithNotebook] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
