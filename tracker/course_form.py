"""
Add / edit forms for a tracked course.

Both forms edit one ``CourseFormState`` record, validate it locally before
any request goes out, and on success schedule a redirect back to the list.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import BaseModel

from tracker.gateway import CourseGateway, GatewayError
from tracker.identity import UserContext
from tracker.models import CoursePayload, Status, TrackedCourse, to_calendar_date
from tracker.scheduling import ScheduledAction

log = logging.getLogger(__name__)

LIST_PATH = "/"
DEFAULT_REDIRECT_DELAY = 2.0

NAME_REQUIRED = "Course Name is required."
PROGRESS_RANGE = "Progress must be between 0 and 100."
PROGRESS_NOT_NUMBER = "Progress must be a whole number."
STATUS_INVALID = "Status must be one of: Ongoing, Completed, Planned."
DATE_INVALID = "Completion Date must be a valid date (YYYY-MM-DD)."

ADD_NOT_LOGGED_IN = "Please log in to add courses."
ADD_OK = "Course added."
ADD_FAILED = "Failed to add course. Please try again."

EDIT_NOT_LOGGED_IN = "Please log in to edit courses."
EDIT_NO_ID = "No course ID provided for editing."
EDIT_LOAD_FAILED = "Failed to load course details. It might not exist or you might not have access."
UPDATE_OK = "Course updated."
UPDATE_FAILED = "Failed to update course. Please try again."


# ---------------------------------------------------------------------------
# Form state
# ---------------------------------------------------------------------------

class CourseFormState(BaseModel):
    """Raw field values as typed by the user.

    Values that cannot be parsed are kept as typed; ``validate_form``
    reports them so the form can be corrected in place.
    """

    course_name: str = ""
    status: Status | str = Status.ONGOING
    instructor: str = ""
    completion_date: date | str | None = None
    certificate_link: str = ""
    progress: int | str = 0
    notes: str = ""

    def update_field(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields:
            raise KeyError(f"unknown form field: {name!r}")
        if name == "status":
            value = _parse_status(value) or value
        elif name == "completion_date":
            parsed = _parse_date(value)
            value = value if parsed is _INVALID else parsed
        setattr(self, name, value)

    def reset(self) -> None:
        for name, field in type(self).model_fields.items():
            setattr(self, name, field.default)

    @classmethod
    def from_course(cls, course: TrackedCourse) -> "CourseFormState":
        return cls(
            course_name=course.course_name,
            status=course.status,
            instructor=course.instructor or "",
            completion_date=course.completion_date,
            certificate_link=course.certificate_link or "",
            progress=course.progress,
            notes=course.notes or "",
        )


_INVALID = object()


def _parse_status(value: Any) -> Status | None:
    try:
        return Status(value)
    except ValueError:
        return None


def _parse_date(value: Any) -> Any:
    """A calendar date, None for blank, or ``_INVALID``."""
    try:
        return to_calendar_date(value)
    except (TypeError, ValueError):
        return _INVALID


def _parse_progress(value: int | str) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def validate_form(state: CourseFormState) -> str | None:
    """Return the first validation error, or None if the form can be sent."""
    if not state.course_name.strip():
        return NAME_REQUIRED
    if _parse_status(state.status) is None:
        return STATUS_INVALID
    if _parse_date(state.completion_date) is _INVALID:
        return DATE_INVALID
    progress = _parse_progress(state.progress)
    if progress is None:
        return PROGRESS_NOT_NUMBER
    if not 0 <= progress <= 100:
        return PROGRESS_RANGE
    return None


def _blank_to_none(value: str) -> str | None:
    return value.strip() or None


def build_payload(state: CourseFormState, user_id: str) -> CoursePayload:
    """Wire body for a validated form. Blank optional fields become null."""
    return CoursePayload(
        user_id=user_id,
        course_name=state.course_name.strip(),
        status=_parse_status(state.status),
        instructor=_blank_to_none(state.instructor),
        completion_date=_parse_date(state.completion_date),
        certificate_link=_blank_to_none(state.certificate_link),
        progress=_parse_progress(state.progress),
        notes=_blank_to_none(state.notes),
    )


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class CourseFormView(ABC):
    """What the add and edit pages have in common."""

    success_message = ""
    failure_message = ""

    def __init__(
        self,
        gateway: CourseGateway,
        navigate: Callable[[str], None],
        redirect_delay: float = DEFAULT_REDIRECT_DELAY,
        clock: Callable[[], float] | None = None,
    ):
        self.gateway = gateway
        self.navigate = navigate
        self.redirect_delay = redirect_delay
        self.clock = clock
        self.user = UserContext()
        self.form = CourseFormState()
        self.message = ""
        self.submit_error = ""
        self.navigation: ScheduledAction | None = None

    def update_field(self, name: str, value: Any) -> None:
        self.form.update_field(name, value)

    @abstractmethod
    def _send(self, payload: CoursePayload) -> str:
        """Send the payload; return the backend's message."""

    def _on_success(self) -> None:
        pass

    def _precondition_error(self) -> str | None:
        return None

    def submit(self) -> bool:
        """Validate and send the form. Returns True if the backend accepted it."""
        self.submit_error = ""
        self.message = ""

        error = self._precondition_error() or validate_form(self.form)
        if error:
            self.submit_error = error
            log.warning("Submit blocked: %s", error)
            return False

        payload = build_payload(self.form, self.user.user_id)
        try:
            message = self._send(payload)
        except GatewayError as exc:
            self.submit_error = exc.message or self.failure_message
            log.error("Error submitting course form: %s", self.submit_error)
            return False

        self.message = message or self.success_message
        self._on_success()
        self._schedule_redirect()
        return True

    def _schedule_redirect(self) -> None:
        if self.navigation is not None:
            self.navigation.cancel()
        kwargs = {"clock": self.clock} if self.clock is not None else {}
        self.navigation = ScheduledAction(
            self.redirect_delay, lambda: self.navigate(LIST_PATH), **kwargs
        )

    def close(self) -> None:
        """Tear the view down: a pending redirect must not outlive it."""
        if self.navigation is not None:
            self.navigation.cancel()


class AddCourseView(CourseFormView):
    success_message = ADD_OK
    failure_message = ADD_FAILED

    def activate(self, user: UserContext) -> None:
        self.user = user

    def _precondition_error(self) -> str | None:
        if not self.user.logged_in:
            return ADD_NOT_LOGGED_IN
        return None

    def _send(self, payload: CoursePayload) -> str:
        log.info("Adding course %r for user=%s", payload.course_name, payload.user_id)
        return self.gateway.add_course(payload)

    def _on_success(self) -> None:
        self.form.reset()


class EditCourseView(CourseFormView):
    success_message = UPDATE_OK
    failure_message = UPDATE_FAILED

    def __init__(self, gateway: CourseGateway, navigate: Callable[[str], None], **kwargs):
        super().__init__(gateway, navigate, **kwargs)
        self.course_id: str | None = None
        self.fetch_error = ""
        self.loaded = False
        self._activated_for: tuple[str | None, str | None] | None = None

    @property
    def show_form(self) -> bool:
        """The form is only drawn once the record loaded without error."""
        return self.loaded and not self.fetch_error

    def activate(self, user: UserContext, course_id: str | None) -> None:
        """Load the record. Same user and id as last time means no new request."""
        key = (user.user_id, course_id)
        if key == self._activated_for:
            return
        self._activated_for = key
        self.user = user
        self.course_id = course_id
        self.loaded = False

        if not user.logged_in:
            self.fetch_error = EDIT_NOT_LOGGED_IN
        elif not course_id:
            self.fetch_error = EDIT_NO_ID
        else:
            self._load()
            return
        log.warning("Edit view not loaded: %s", self.fetch_error)

    def _load(self) -> None:
        log.info("Fetching course=%s for user=%s", self.course_id, self.user.user_id)
        try:
            course = self.gateway.get_course(self.course_id, self.user.user_id)
        except GatewayError as exc:
            self.fetch_error = exc.message or EDIT_LOAD_FAILED
            log.error("Error fetching course for edit: %s", self.fetch_error)
            return
        self.form = CourseFormState.from_course(course)
        self.fetch_error = ""
        self.loaded = True

    def _precondition_error(self) -> str | None:
        if not self.show_form:
            return self.fetch_error or EDIT_LOAD_FAILED
        return None

    def _send(self, payload: CoursePayload) -> str:
        log.info("Updating course=%s for user=%s", self.course_id, payload.user_id)
        return self.gateway.update_course(self.course_id, payload)
