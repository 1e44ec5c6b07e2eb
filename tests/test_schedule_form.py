"""LinkedIn scheduling form and the HTTP client behind it."""
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.client.api_client import ApiError, SchedulerClient
from app.client.schedule_form import LinkedInScheduleForm

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


class RecordingClient:
    def __init__(self, error: ApiError | None = None):
        self.calls = []
        self.error = error

    def schedule_linkedin_post(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"id": 1, "status": "scheduled"}


@pytest.fixture
def api():
    return RecordingClient()


@pytest.fixture
def form(api):
    return LinkedInScheduleForm(client=api, now=lambda: NOW)


def test_defaults_to_tomorrow_noon(form):
    assert form.scheduled_for == datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)
    assert form.character_count == "0/3000 characters"
    assert not form.can_submit


def test_empty_content_sends_nothing(form, api):
    form.content = "   "
    assert form.submit() is False
    assert api.calls == []
    assert form.messages[-1].level == "error"
    assert form.messages[-1].text == "Post content is required"


def test_missing_date_sends_nothing(form, api):
    form.content = "Hello world"
    form.scheduled_for = None
    assert form.submit() is False
    assert api.calls == []
    assert form.messages[-1].text == "Please select a valid date and time to schedule"


def test_past_date_sends_nothing(form, api):
    form.content = "Hello world"
    form.set_date(NOW - timedelta(minutes=1))
    assert form.submit() is False
    assert api.calls == []
    assert form.messages[-1].text == "Please select a future date and time"


def test_clearing_picker_keeps_date(form):
    before = form.scheduled_for
    form.set_date(None)
    assert form.scheduled_for == before


def test_success_resets_fields(form, api):
    form.content = "Hello world"
    form.title = "Big news"
    form.set_date(NOW + timedelta(days=2))

    assert form.submit() is True

    assert api.calls == [
        {"content": "Hello world", "scheduled_for": NOW + timedelta(days=2), "title": "Big news", "image_url": None}
    ]
    assert form.messages[-1].level == "success"
    assert form.messages[-1].text == "LinkedIn post scheduled successfully!"
    assert (form.content, form.title, form.image_url) == ("", "", "")
    assert form.scheduled_for == datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)
    assert form.is_submitting is False


def test_failure_keeps_fields_and_reenables(api):
    api.error = ApiError("LinkedIn account not connected", 400)
    form = LinkedInScheduleForm(client=api, now=lambda: NOW)
    form.content = "Hello world"

    assert form.submit() is False

    assert form.messages[-1].level == "error"
    assert form.messages[-1].text == "Error scheduling post: LinkedIn account not connected"
    assert form.content == "Hello world"
    assert form.is_submitting is False
    assert form.can_submit


def test_submit_while_in_flight_is_ignored(form, api):
    form.content = "Hello world"
    form.is_submitting = True
    assert form.submit() is False
    assert api.calls == []
    assert form.messages == []


def test_client_sends_camel_case_and_omits_empty_fields():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 3, "status": "scheduled"})

    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    client = SchedulerClient(token="tok", http_client=http)
    when = datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)

    assert client.schedule_linkedin_post("Hello world", when)["status"] == "scheduled"
    assert seen["path"] == "/schedule/linkedin"
    assert seen["auth"] == "Bearer tok"
    assert seen["body"] == {"content": "Hello world", "scheduledFor": "2026-03-11T12:00:00+00:00"}


def test_client_surfaces_server_detail():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "Failed to schedule linkedin post"})

    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    client = SchedulerClient(http_client=http)

    with pytest.raises(ApiError) as exc:
        client.schedule_linkedin_post("Hello", datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc))
    assert exc.value.message == "Failed to schedule linkedin post"
    assert exc.value.status_code == 500


def test_form_against_real_client_reports_validation_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422, json={"detail": [{"loc": ["body", "scheduledFor"], "msg": "Value error, must be in the future"}]}
        )

    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    form = LinkedInScheduleForm(client=SchedulerClient(http_client=http), now=lambda: NOW)
    form.content = "Hello world"

    assert form.submit() is False
    assert form.messages[-1].text == "Error scheduling post: scheduledFor: Value error, must be in the future"


def test_non_json_success_body_reenables_form():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, text="<html>ok</html>")

    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    form = LinkedInScheduleForm(client=SchedulerClient(http_client=http), now=lambda: NOW)
    form.content = "Hello world"

    assert form.submit() is False
    assert form.is_submitting is False
    assert form.messages[-1].text == "Error scheduling post: Unexpected response from server"
    assert form.content == "Hello world"


def test_error_body_that_is_not_an_object():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json=["bad gateway"])

    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    client = SchedulerClient(http_client=http)

    with pytest.raises(ApiError) as exc:
        client.schedule_linkedin_post("Hello", datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc))
    assert exc.value.message == "HTTP 502"


def test_unexpected_client_error_reenables_form(api):
    def explode(**kwargs):
        raise RuntimeError("connection reset")

    api.schedule_linkedin_post = explode
    form = LinkedInScheduleForm(client=api, now=lambda: NOW)
    form.content = "Hello world"

    assert form.submit() is False
    assert form.is_submitting is False
    assert form.can_submit
    assert form.messages[-1].text == "Error scheduling post: connection reset"
