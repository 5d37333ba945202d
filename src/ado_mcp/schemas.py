"""Pydantic schemas for structured tool parameters."""
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .models import LINK_TYPES

PatchOp = Literal["add", "replace", "remove"]
FieldFormat = Literal["Markdown", "Html"]


class WorkItemField(BaseModel):
    """A single field value for a new work item."""

    name: str = Field(..., min_length=1, description="Field reference name, e.g. 'System.Title'")
    value: str
    format: Optional[FieldFormat] = None


class WorkItemUpdate(BaseModel):
    """One field mutation against one work item.

    ``op`` is accepted in any case ("Add", "REPLACE") and stored lower-cased.
    """

    id: int = Field(..., description="ID of the work item to update")
    op: PatchOp = "add"
    path: str = Field(..., min_length=1, description="Field path, e.g. '/fields/System.Title'")
    value: Optional[str] = None
    format: Optional[FieldFormat] = None

    @field_validator("op", mode="before")
    @classmethod
    def normalize_op(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class WorkItemLink(BaseModel):
    """A link to create from one work item to another."""

    id: int = Field(..., description="ID of the work item to update")
    link_to_id: int = Field(..., description="ID of the work item to link to")
    type: str = "related"
    comment: Optional[str] = None

    @field_validator("type")
    @classmethod
    def known_link_type(cls, value: str) -> str:
        if value.lower() not in LINK_TYPES:
            raise ValueError(f"Unknown link type: {value}")
        return value
