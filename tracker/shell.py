"""
Navigation shell: maps paths to views and owns view lifetimes.

Routes:
    /                    → course list
    /add-tracked         → add form
    /edit-tracked/{id}   → edit form for one course

Exactly one view is mounted at a time. Moving to a different path tears the
old view down (cancelling any redirect it scheduled) and mounts a fresh one,
which fetches its own data. Moving to the path already shown keeps the
mounted view, so nothing is fetched twice.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from tracker.course_form import LIST_PATH, AddCourseView, EditCourseView
from tracker.course_list import CourseListView
from tracker.gateway import CourseGateway
from tracker.identity import UserContext

log = logging.getLogger(__name__)

ADD_PATH = "/add-tracked"

_EDIT_RE = re.compile(r"^/edit-tracked/([^/]*)/?$")


class RouteName(str, Enum):
    LIST = "list"
    ADD = "add"
    EDIT = "edit"


@dataclass(frozen=True)
class Route:
    name: RouteName
    course_id: str | None = None


def resolve_route(path: str) -> Route:
    """Parse a path. Anything unrecognised lands on the list."""
    path = (path or LIST_PATH).split("?", 1)[0]
    if path.rstrip("/") == ADD_PATH:
        return Route(RouteName.ADD)
    m = _EDIT_RE.match(path)
    if m:
        return Route(RouteName.EDIT, m.group(1) or None)
    return Route(RouteName.LIST)


class AppShell:
    """Holds the active route and view for one browser session."""

    def __init__(
        self,
        gateway: CourseGateway,
        user: UserContext,
        redirect_delay: float = 2.0,
        clock: Callable[[], float] | None = None,
    ):
        self.gateway = gateway
        self.user = user
        self.redirect_delay = redirect_delay
        self.clock = clock
        self.path: str | None = None
        self.route: Route | None = None
        self.view: CourseListView | AddCourseView | EditCourseView | None = None

    def navigate(self, path: str) -> None:
        route = resolve_route(path)
        if self.view is not None and route == self.route:
            return

        if self.view is not None:
            self.view.close()
        log.info("Navigating to %s", path)
        self.path = path
        self.route = route
        self.view = self._mount(route)

    def set_user(self, user: UserContext) -> None:
        """Swap identity (e.g. after a real login) and reload the current view."""
        self.user = user
        if self.route is not None:
            self._activate(self.view, self.route)

    def _mount(self, route: Route):
        form_kwargs = {"redirect_delay": self.redirect_delay}
        if self.clock is not None:
            form_kwargs["clock"] = self.clock

        if route.name == RouteName.ADD:
            view = AddCourseView(self.gateway, self.navigate, **form_kwargs)
        elif route.name == RouteName.EDIT:
            view = EditCourseView(self.gateway, self.navigate, **form_kwargs)
        else:
            view = CourseListView(self.gateway)
        self._activate(view, route)
        return view

    def _activate(self, view, route: Route) -> None:
        if route.name == RouteName.EDIT:
            view.activate(self.user, route.course_id)
        else:
            view.activate(self.user)
