"""
HTTP client for the course-tracking REST API.

Endpoints (all under the configured base URL):
    GET    /tracked-courses/?userId=U        → [TrackedCourse, ...]
    GET    /tracked-courses/{id}?userId=U    → TrackedCourse
    POST   /tracked-courses/add              → {"message": str}
    POST   /tracked-courses/update/{id}      → {"message": str}
    DELETE /tracked-courses/{id}  {userId}   → {"message": str}

Ownership is enforced by the backend; this client only passes the user id
along. Requests are never retried here: every retry is a user action.
"""

import logging
from typing import Any

import requests
from pydantic import ValidationError

from tracker.models import CoursePayload, TrackedCourse

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class GatewayError(Exception):
    """A request to the backend failed.

    ``message`` is the backend's own explanation when the error body
    carried one, else None (callers substitute their generic text).
    """

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or f"backend request failed (status={status_code})")
        self.message = message
        self.status_code = status_code


def _error_message(resp: Any) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class CourseGateway:
    """Thin wrapper over a requests.Session bound to one backend."""

    def __init__(self, base_url: str, session: Any = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("%s %s failed: %s", method, url, exc)
            raise GatewayError() from exc

        if resp.status_code >= 400:
            message = _error_message(resp)
            log.error("%s %s → %d  %s", method, url, resp.status_code, message or "(no message)")
            raise GatewayError(message, status_code=resp.status_code)

        if resp.status_code == 204 or not (resp.text or "").strip():
            return None

        try:
            return resp.json()
        except ValueError as exc:
            log.error("%s %s → %d with a non-JSON body", method, url, resp.status_code)
            raise GatewayError(status_code=resp.status_code) from exc

    def _message(self, body: Any) -> str:
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return ""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_courses(self, user_id: str) -> list[TrackedCourse]:
        body = self._request("GET", "/tracked-courses/", params={"userId": user_id})
        if not isinstance(body, list):
            log.error("Course list response is not an array: %r", type(body).__name__)
            raise GatewayError()
        try:
            return [TrackedCourse.model_validate(item) for item in body]
        except ValidationError as exc:
            log.error("Malformed course in list response: %s", exc)
            raise GatewayError() from exc

    def get_course(self, course_id: str, user_id: str) -> TrackedCourse:
        body = self._request("GET", f"/tracked-courses/{course_id}", params={"userId": user_id})
        try:
            return TrackedCourse.model_validate(body)
        except ValidationError as exc:
            log.error("Malformed course %s in response: %s", course_id, exc)
            raise GatewayError() from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_course(self, payload: CoursePayload) -> str:
        body = self._request("POST", "/tracked-courses/add", json=payload.to_wire())
        return self._message(body)

    def update_course(self, course_id: str, payload: CoursePayload) -> str:
        body = self._request("POST", f"/tracked-courses/update/{course_id}", json=payload.to_wire())
        return self._message(body)

    def delete_course(self, course_id: str, user_id: str) -> str:
        body = self._request("DELETE", f"/tracked-courses/{course_id}", json={"userId": user_id})
        return self._message(body)
