"""
The "My Courses" list: fetch, filter, sort, delete.

The fetched list is held as-is; what the user sees is derived on demand by
filtering on status and then sorting the filtered subset. Neither step
touches the stored list.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from tracker.gateway import CourseGateway, GatewayError
from tracker.identity import UserContext
from tracker.models import Status, TrackedCourse

log = logging.getLogger(__name__)

FILTER_ALL = "All"
STATUS_FILTERS = [FILTER_ALL] + [s.value for s in Status]

NOT_LOGGED_IN = "Please log in to view your courses."
FETCH_FAILED = "Failed to load courses."
DELETE_FAILED = "Failed to delete course."

RECOGNIZED_SCHEMES = ("http://", "https://")
DEFAULT_SCHEME = "http://"


class SortKey(str, Enum):
    NONE = "none"
    COURSE_NAME = "courseName"
    COMPLETION_DATE = "completionDate"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------

def filter_courses(courses: list[TrackedCourse], status: str = FILTER_ALL) -> list[TrackedCourse]:
    """Keep courses whose status equals ``status``; "All" keeps everything."""
    if status == FILTER_ALL:
        return list(courses)
    return [c for c in courses if c.status.value == status]


def sort_courses(
    courses: list[TrackedCourse],
    key: SortKey = SortKey.NONE,
    order: SortOrder = SortOrder.ASC,
) -> list[TrackedCourse]:
    """
    Return a sorted copy.

    Names compare case-insensitively. Courses without a completion date
    always come last, whichever way dates are sorted. Ties keep their
    incoming order.
    """
    descending = order == SortOrder.DESC

    if key == SortKey.COURSE_NAME:
        return sorted(courses, key=lambda c: c.course_name.lower(), reverse=descending)

    if key == SortKey.COMPLETION_DATE:
        dated = [c for c in courses if c.completion_date is not None]
        dateless = [c for c in courses if c.completion_date is None]
        return sorted(dated, key=lambda c: c.completion_date, reverse=descending) + dateless

    return list(courses)


def visible_courses(
    courses: list[TrackedCourse],
    status: str = FILTER_ALL,
    key: SortKey = SortKey.NONE,
    order: SortOrder = SortOrder.ASC,
) -> list[TrackedCourse]:
    return sort_courses(filter_courses(courses, status), key, order)


# ---------------------------------------------------------------------------
# Row presentation
# ---------------------------------------------------------------------------

def certificate_href(link: str | None) -> str | None:
    """Outbound href for a stored certificate link, with a scheme if it lacks one."""
    if not link:
        return None
    if link.lower().startswith(RECOGNIZED_SCHEMES):
        return link
    return f"{DEFAULT_SCHEME}{link}"


@dataclass(frozen=True)
class CourseRow:
    course_id: str
    course_name: str
    status: str
    completion_date: str
    progress: int
    show_progress_bar: bool
    edit_path: str
    certificate_href: str | None

    @property
    def progress_label(self) -> str:
        return f"{self.progress}%"


def present_row(course: TrackedCourse) -> CourseRow:
    return CourseRow(
        course_id=course.id,
        course_name=course.course_name,
        status=course.status.value,
        completion_date=course.completion_date.isoformat() if course.completion_date else "-",
        progress=course.progress,
        show_progress_bar=course.status == Status.ONGOING,
        edit_path=f"/edit-tracked/{course.id}",
        certificate_href=certificate_href(course.certificate_link),
    )


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------

class CourseListView:
    """State behind the list page for one user."""

    def __init__(self, gateway: CourseGateway):
        self.gateway = gateway
        self.user = UserContext()
        self.courses: list[TrackedCourse] = []
        self.fetch_error = ""
        self.delete_error = ""
        self.status_filter = FILTER_ALL
        self.sort_key = SortKey.NONE
        self.sort_order = SortOrder.ASC
        self.pending_delete: str | None = None
        self._activated_for: str | None = None
        self._activated = False

    def activate(self, user: UserContext) -> None:
        """Load the list for ``user``. Re-activating for the same user is a no-op."""
        if self._activated and user.user_id == self._activated_for:
            return
        self._activated = True
        self._activated_for = user.user_id
        self.user = user
        self.reload()

    def reload(self) -> None:
        if not self.user.logged_in:
            self.courses = []
            self.fetch_error = NOT_LOGGED_IN
            log.warning("Course list requested without a logged-in user")
            return

        log.info("Fetching tracked courses for user=%s", self.user.user_id)
        try:
            courses = self.gateway.list_courses(self.user.user_id)
        except GatewayError as exc:
            self.courses = []
            self.fetch_error = exc.message or FETCH_FAILED
            log.error("Error fetching tracked courses: %s", self.fetch_error)
            return

        self.courses = courses
        self.fetch_error = ""
        self.delete_error = ""
        log.info("  %d courses loaded.", len(courses))

    # ------------------------------------------------------------------
    # Filter / sort controls
    # ------------------------------------------------------------------

    def set_filter(self, status: str) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"unknown status filter: {status!r}")
        self.status_filter = status

    def set_sort_key(self, key: SortKey | str) -> None:
        self.sort_key = SortKey(key)

    def toggle_sort_order(self) -> None:
        if self.sort_key == SortKey.NONE:
            return
        self.sort_order = SortOrder.DESC if self.sort_order == SortOrder.ASC else SortOrder.ASC

    @property
    def can_toggle_order(self) -> bool:
        return self.sort_key != SortKey.NONE

    def visible(self) -> list[TrackedCourse]:
        return visible_courses(self.courses, self.status_filter, self.sort_key, self.sort_order)

    def rows(self) -> list[CourseRow]:
        return [present_row(c) for c in self.visible()]

    # ------------------------------------------------------------------
    # Delete (ask, then confirm or cancel)
    # ------------------------------------------------------------------

    def request_delete(self, course_id: str) -> None:
        self.pending_delete = course_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        """Delete the course awaiting confirmation. Returns True on success."""
        course_id, self.pending_delete = self.pending_delete, None
        if course_id is None or not self.user.logged_in:
            return False

        log.info("Deleting course=%s for user=%s", course_id, self.user.user_id)
        try:
            message = self.gateway.delete_course(course_id, self.user.user_id)
        except GatewayError as exc:
            self.delete_error = exc.message or DELETE_FAILED
            log.error("Error deleting tracked course %s: %s", course_id, self.delete_error)
            return False

        log.info("  %s", message or "deleted")
        # The backend confirmed; drop the row locally instead of re-fetching.
        self.courses = [c for c in self.courses if c.id != course_id]
        self.delete_error = ""
        return True

    def close(self) -> None:
        self.pending_delete = None
