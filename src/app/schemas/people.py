"""Pydantic schemas for people."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Person(BaseModel):
    """A person as stored, returned by the API and served by the external directory.

    Unknown keys in incoming payloads are ignored.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[int] = None
    name: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)


class PersonListResponse(BaseModel):
    """Schema for paginated person list response."""
    people: List[Person]
    total: int
    page: int
    size: int


class PersonLookupResponse(BaseModel):
    status: str
    task: str
    task_id: Optional[str] = None


class PersonLookupScheduleResponse(BaseModel):
    task: str
    cron: str
    description: str
    timezone: str
    next_run_at: str
