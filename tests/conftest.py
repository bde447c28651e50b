import json
import uuid

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from tracker.gateway import CourseGateway
from tracker.identity import UserContext

USER_ID = "681f5e03a1e2df137b1f3330"
OTHER_USER_ID = "000000000000000000000001"
BASE_URL = "http://testserver"


class FakeBackend:
    """In-memory stand-in for the course-tracking API.

    Records every request as (method, path) so tests can count calls.
    ``fail_with`` forces the next requests to fail: set it to a message
    string, or to "" for an error body without a message.
    """

    def __init__(self):
        self.courses: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: str | None = None
        self.fail_status = 500
        self.app = self._build_app()

    def seed(self, **fields) -> dict:
        record = {
            "_id": fields.pop("_id", uuid.uuid4().hex[:24]),
            "userId": USER_ID,
            "status": "Ongoing",
            "instructor": None,
            "completionDate": None,
            "certificateLink": None,
            "progress": 0,
            "notes": None,
        }
        record.update(fields)
        self.courses[record["_id"]] = record
        return record

    def calls_to(self, method: str) -> list[str]:
        return [path for m, path in self.calls if m == method]

    def _failure(self):
        if self.fail_with is None:
            return None
        body = {"message": self.fail_with} if self.fail_with else {}
        return JSONResponse(status_code=self.fail_status, content=body)

    def _owned(self, course_id: str, user_id: str):
        record = self.courses.get(course_id)
        if record is None:
            return None, JSONResponse(status_code=404, content={"message": "Tracked course not found."})
        if record["userId"] != user_id:
            return None, JSONResponse(status_code=403, content={"message": "Not authorized."})
        return record, None

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.middleware("http")
        async def record_calls(request: Request, call_next):
            self.calls.append((request.method, request.url.path))
            return await call_next(request)

        @app.get("/tracked-courses/")
        def list_courses(userId: str):
            failure = self._failure()
            if failure:
                return failure
            return [c for c in self.courses.values() if c["userId"] == userId]

        @app.get("/tracked-courses/{course_id}")
        def get_course(course_id: str, userId: str):
            failure = self._failure()
            if failure:
                return failure
            record, error = self._owned(course_id, userId)
            if error:
                return error
            return record

        @app.post("/tracked-courses/add")
        async def add_course(request: Request):
            failure = self._failure()
            if failure:
                return failure
            body = await request.json()
            record = {"_id": uuid.uuid4().hex[:24], **body}
            self.courses[record["_id"]] = record
            return {"message": "Tracked course added!"}

        @app.post("/tracked-courses/update/{course_id}")
        async def update_course(course_id: str, request: Request):
            failure = self._failure()
            if failure:
                return failure
            body = await request.json()
            record, error = self._owned(course_id, body.get("userId"))
            if error:
                return error
            record.update({k: v for k, v in body.items() if k != "userId"})
            return {"message": "Tracked course updated!"}

        @app.delete("/tracked-courses/{course_id}")
        async def delete_course(course_id: str, request: Request):
            failure = self._failure()
            if failure:
                return failure
            body = await request.json()
            record, error = self._owned(course_id, body.get("userId"))
            if error:
                return error
            del self.courses[course_id]
            return {"message": "Tracked course deleted."}

        return app


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gateway(backend):
    """CourseGateway wired to the fake backend through FastAPI's TestClient."""
    return CourseGateway(BASE_URL, session=TestClient(backend.app))


@pytest.fixture
def user():
    return UserContext(USER_ID)


class StubResponse:
    """Just enough of a requests.Response for the gateway."""

    def __init__(self, status_code, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class StubSession:
    """Returns the same canned response for every request."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        return self.response


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
