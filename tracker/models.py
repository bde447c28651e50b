"""
Tracked-course records as exchanged with the backend.

The backend speaks camelCase JSON and stores records in MongoDB, so the
record id arrives as "_id". Both are mapped onto snake_case fields here.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class Status(str, Enum):
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    PLANNED = "Planned"


def to_calendar_date(value: Any) -> date | None:
    """Reduce a wire date ("2024-05-01" or an ISO timestamp) to a plain date.

    Aware timestamps are read in UTC, matching how the backend stores them.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_calendar_date(datetime.fromisoformat(text))


class TrackedCourse(BaseModel):
    """One user's record of progress in an online course (read side)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    user_id: str | None = None
    course_name: str
    status: Status = Status.ONGOING
    instructor: str | None = None
    completion_date: date | None = None
    certificate_link: str | None = None
    progress: int = Field(default=0, ge=0, le=100)
    notes: str | None = None

    @field_validator("instructor", "certificate_link", "notes", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("completion_date", mode="before")
    @classmethod
    def _calendar_date(cls, value: Any) -> date | None:
        return to_calendar_date(value)


class CoursePayload(BaseModel):
    """Body of the add and update requests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    course_name: str
    status: Status
    instructor: str | None = None
    completion_date: date | None = None
    certificate_link: str | None = None
    progress: int = Field(ge=0, le=100)
    notes: str | None = None

    @field_serializer("completion_date")
    def _iso_date(self, value: date | None) -> str | None:
        return value.isoformat() if value else None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
