# Copyright 2025 The py-uplink Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import math

import httpx
import pytest
from pytest_httpx import HTTPXMock

from py_uplink.config import Settings
from py_uplink.models import Delivered, SubmissionRecord, TransportFailure
from py_uplink.submitter import SerializationError, Submitter, serialize_record

pytestmark = pytest.mark.unit

ENDPOINT = "http://collector.test/uplink/events"


@pytest.fixture
def mock_settings() -> Settings:
    """Fixture for settings pointing at the test endpoint."""
    return Settings(endpoint=ENDPOINT, timeout=1.0)


@pytest.fixture
def record() -> SubmissionRecord:
    return SubmissionRecord.build("test-data", "a" * 64, {"count": 2})


@pytest.mark.asyncio
async def test_send_posts_json_record(
    mock_settings: Settings, record: SubmissionRecord, httpx_mock: HTTPXMock
):
    """
    Tests that the record is POSTed once as a JSON body and a 200 is reported
    with its status line.
    """
    httpx_mock.add_response(method="POST", url=ENDPOINT, status_code=200)

    async with Submitter(settings=mock_settings) as submitter:
        outcome = await submitter.send(ENDPOINT, record)

    assert outcome == Delivered(status_line="200 OK")
    request = httpx_mock.get_request()
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"] == mock_settings.user_agent
    assert json.loads(request.content) == {
        "type": "test-data",
        "correlator": "a" * 64,
        "count": 2,
    }


@pytest.mark.asyncio
async def test_send_reports_error_status_as_delivered(
    mock_settings: Settings, record: SubmissionRecord, httpx_mock: HTTPXMock
):
    """Tests that a 5xx response is not classified differently from a 200."""
    httpx_mock.add_response(method="POST", url=ENDPOINT, status_code=500)

    async with Submitter(settings=mock_settings) as submitter:
        outcome = await submitter.send(ENDPOINT, record)

    assert outcome == Delivered(status_line="500 Internal Server Error")


@pytest.mark.asyncio
async def test_send_does_not_follow_redirects(
    mock_settings: Settings, record: SubmissionRecord, httpx_mock: HTTPXMock
):
    """Tests that a redirect is reported as the response to the POST itself."""
    httpx_mock.add_response(
        method="POST",
        url=ENDPOINT,
        status_code=302,
        headers={"Location": "http://collector.test/moved"},
    )

    async with Submitter(settings=mock_settings) as submitter:
        outcome = await submitter.send(ENDPOINT, record)

    assert outcome == Delivered(status_line="302 Found")
    requests = httpx_mock.get_requests()
    assert [(r.method, str(r.url)) for r in requests] == [("POST", ENDPOINT)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("Connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
async def test_send_returns_transport_failure(
    mock_settings: Settings, record: SubmissionRecord, httpx_mock: HTTPXMock, error
):
    """Tests that network errors are returned, not raised."""
    httpx_mock.add_exception(error, url=ENDPOINT)

    async with Submitter(settings=mock_settings) as submitter:
        outcome = await submitter.send(ENDPOINT, record)

    assert isinstance(outcome, TransportFailure)
    assert str(error) in outcome.cause


@pytest.mark.asyncio
async def test_send_to_malformed_endpoint_returns_transport_failure(
    mock_settings: Settings, record: SubmissionRecord
):
    async with Submitter(settings=mock_settings) as submitter:
        outcome = await submitter.send("not-a-url", record)

    assert isinstance(outcome, TransportFailure)


@pytest.mark.asyncio
async def test_send_does_not_retry(mock_settings: Settings, record: SubmissionRecord):
    calls = []

    def handler(request: httpx.Request):
        calls.append(request)
        raise httpx.ConnectError("Connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        submitter = Submitter(settings=mock_settings, client=client)
        outcome = await submitter.send(ENDPOINT, record)

    assert isinstance(outcome, TransportFailure)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_send_raises_on_unserializable_record(mock_settings: Settings):
    record = SubmissionRecord.build("bad", "a" * 64, {"when": object()})

    def handler(request: httpx.Request):
        raise AssertionError("nothing should be sent")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        submitter = Submitter(settings=mock_settings, client=client)
        with pytest.raises(SerializationError):
            await submitter.send(ENDPOINT, record)


def test_serialize_record_rejects_nan():
    record = SubmissionRecord.build("bad", "a" * 64, {"ratio": math.nan})

    with pytest.raises(SerializationError, match="bad"):
        serialize_record(record)


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open(mock_settings: Settings):
    async with httpx.AsyncClient() as client:
        submitter = Submitter(settings=mock_settings, client=client)
        await submitter.aclose()
        assert not client.is_closed


@pytest.mark.asyncio
async def test_aclose_closes_owned_client(mock_settings: Settings):
    submitter = Submitter(settings=mock_settings)
    await submitter.aclose()

    assert submitter.client.is_closed
