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
"""Provides a class to deliver submission records to the collection endpoint."""

import json
import logging
import types

import httpx

from .config import Settings
from .models import Delivered, SubmissionOutcome, SubmissionRecord, TransportFailure

logger = logging.getLogger(__name__)


class SerializationError(ValueError):
    """A record cannot be represented as a JSON document."""


def serialize_record(record: SubmissionRecord) -> bytes:
    """Encode a record as the UTF-8 JSON request body.

    Raises:
        SerializationError: If the trial content holds values JSON cannot carry.
    """
    try:
        return json.dumps(record.model_dump(), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Record of type '{record.type}' is not JSON serializable: {e}"
        ) from e


def status_line(response: httpx.Response) -> str:
    """Render the response status the way it appears on the wire, e.g. '200 OK'."""
    return f"{response.status_code} {response.reason_phrase}".strip()


class Submitter:
    """One-shot, best-effort delivery of submission records over HTTP."""

    def __init__(
        self, settings: Settings, client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the submitter with settings and an optional HTTP client."""
        self.settings = settings
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.timeout,
        )

    async def send(self, endpoint: str, record: SubmissionRecord) -> SubmissionOutcome:
        """POST a record once and classify what happened.

        Any HTTP response counts as delivered, whatever its status code. Errors
        that keep the request from completing are returned as a
        TransportFailure and never raised. No retry is attempted.

        Raises:
            SerializationError: If the record cannot be encoded.
        """
        body = serialize_record(record)
        try:
            response = await self.client.post(
                endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Telemetry POST to %s failed: %r", endpoint, e)
            return TransportFailure(cause=str(e) or type(e).__name__)
        logger.debug("Telemetry POST to %s: HTTP %d", endpoint, response.status_code)
        return Delivered(status_line=status_line(response))

    async def aclose(self) -> None:
        """Close the HTTP client if this submitter created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "Submitter":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()
