from datetime import date

import pytest
import requests

from conftest import USER_ID, StubResponse, StubSession
from tracker.gateway import CourseGateway, GatewayError
from tracker.models import CoursePayload, Status, TrackedCourse


class DownSession:
    """A session whose every request fails to connect."""

    def request(self, method, url, **kwargs):
        raise requests.exceptions.ConnectionError(f"cannot reach {url}")


def _payload(**overrides):
    fields = {"user_id": USER_ID, "course_name": "Algorithms", "status": Status.PLANNED, "progress": 0}
    fields.update(overrides)
    return CoursePayload(**fields)


class TestTrackedCourseParsing:
    """Wire JSON → TrackedCourse."""

    def test_mongo_style_record(self):
        course = TrackedCourse.model_validate({
            "_id": "abc",
            "userId": USER_ID,
            "courseName": "Networks",
            "status": "Completed",
            "instructor": "",
            "completionDate": "2024-05-01T00:00:00.000Z",
            "certificateLink": None,
            "progress": 100,
            "__v": 0,
        })
        assert course.id == "abc"
        assert course.user_id == USER_ID
        assert course.status == Status.COMPLETED
        assert course.completion_date == date(2024, 5, 1)
        assert course.instructor is None
        assert course.notes is None

    def test_plain_date_and_id_key(self):
        course = TrackedCourse.model_validate({
            "id": "x", "userId": USER_ID, "courseName": "A", "completionDate": "2023-12-31",
        })
        assert course.id == "x"
        assert course.completion_date == date(2023, 12, 31)
        assert course.status == Status.ONGOING

    def test_aware_timestamp_read_in_utc(self):
        course = TrackedCourse.model_validate({
            "_id": "x", "userId": USER_ID, "courseName": "A",
            "completionDate": "2024-05-01T22:30:00-05:00",
        })
        assert course.completion_date == date(2024, 5, 2)


class TestGateway:
    """Request shapes and error mapping."""

    def test_list_sends_user_scope(self, backend, gateway):
        backend.seed(courseName="Algorithms")
        courses = gateway.list_courses(USER_ID)
        assert [c.course_name for c in courses] == ["Algorithms"]
        assert backend.calls == [("GET", "/tracked-courses/")]

    def test_add_returns_backend_message(self, backend, gateway):
        assert gateway.add_course(_payload()) == "Tracked course added!"
        assert backend.calls == [("POST", "/tracked-courses/add")]

    def test_update_path(self, backend, gateway):
        backend.seed(_id="c1", courseName="Old")
        gateway.update_course("c1", _payload(course_name="New"))
        assert backend.calls == [("POST", "/tracked-courses/update/c1")]
        assert backend.courses["c1"]["courseName"] == "New"

    def test_delete_sends_user_id_in_body(self, backend, gateway):
        backend.seed(_id="c1", courseName="Old")
        assert gateway.delete_course("c1", USER_ID) == "Tracked course deleted."
        assert backend.courses == {}

    def test_error_message_carried(self, gateway):
        with pytest.raises(GatewayError) as exc_info:
            gateway.get_course("missing", USER_ID)
        assert exc_info.value.message == "Tracked course not found."
        assert exc_info.value.status_code == 404

    def test_error_without_message(self, backend, gateway):
        backend.fail_with = ""
        with pytest.raises(GatewayError) as exc_info:
            gateway.list_courses(USER_ID)
        assert exc_info.value.message is None
        assert exc_info.value.status_code == 500

    def test_connection_error_becomes_gateway_error(self):
        gateway = CourseGateway("http://localhost:1", session=DownSession())
        with pytest.raises(GatewayError) as exc_info:
            gateway.list_courses(USER_ID)
        assert exc_info.value.message is None
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_non_json_error_body(self):
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(502, text="Bad Gateway")))
        with pytest.raises(GatewayError) as exc_info:
            gateway.add_course(_payload())
        assert exc_info.value.message is None
        assert exc_info.value.status_code == 502

    def test_list_must_be_an_array(self):
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(200, {"courses": []})))
        with pytest.raises(GatewayError):
            gateway.list_courses(USER_ID)

    def test_malformed_record_rejected(self):
        body = [{"_id": "x", "userId": USER_ID, "courseName": "A", "progress": 140}]
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(200, body)))
        with pytest.raises(GatewayError):
            gateway.list_courses(USER_ID)

    def test_base_url_and_timeout(self):
        session = StubSession(StubResponse(200, []))
        gateway = CourseGateway("http://api/", session=session, timeout=3)
        gateway.list_courses(USER_ID)
        method, url, kwargs = session.requests[0]
        assert (method, url) == ("GET", "http://api/tracked-courses/")
        assert kwargs["params"] == {"userId": USER_ID}
        assert kwargs["timeout"] == 3

    def test_no_content_delete_is_success(self):
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(204)))
        assert gateway.delete_course("c1", USER_ID) == ""

    def test_empty_ok_body_is_success(self):
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(200, text="")))
        assert gateway.add_course(_payload()) == ""

    def test_ok_body_without_message(self):
        gateway = CourseGateway("http://api", session=StubSession(StubResponse(200, {})))
        assert gateway.update_course("c1", _payload()) == ""
