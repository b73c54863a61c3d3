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
"""Defines the Pydantic data models for the application."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StaticTrial(BaseModel):
    """A trial whose content is a fixed document.

    Used for trials declared in YAML configuration. Any other object exposing
    the same members works as a trial too.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Routing key and hash input.")
    display_name: str = Field(default="", description="Human-readable label.")
    start: date | None = Field(
        default=None, description="First active day (inclusive). None is open."
    )
    end: date | None = Field(
        default=None, description="Last active day (inclusive). None is open."
    )
    payload: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_display_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display_name"):
            data = {**data, "display_name": data.get("id", "")}
        return data

    def content(self) -> dict[str, Any]:
        return dict(self.payload)


class SubmissionRecord(BaseModel):
    """The JSON document posted for one trial.

    Trial content fields are carried as extra fields at the top level.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    correlator: str

    @classmethod
    def build(
        cls, trial_id: str, correlator: str, content: dict[str, Any]
    ) -> "SubmissionRecord":
        """Merge trial content under the envelope; envelope keys win."""
        fields = {str(key): value for key, value in dict(content).items()}
        fields["type"] = trial_id
        fields["correlator"] = correlator
        return cls(**fields)


class Delivered(BaseModel):
    """The endpoint answered, with any status code."""

    status_line: str


class TransportFailure(BaseModel):
    """The request could not be sent or completed."""

    cause: str


SubmissionOutcome = Delivered | TransportFailure


class TrialState(str, Enum):
    SKIPPED_NOT_STARTED = "SKIPPED_NOT_STARTED"
    SKIPPED_ENDED = "SKIPPED_ENDED"
    CONTENT_FAILED = "CONTENT_FAILED"
    DELIVERED = "DELIVERED"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    TRIAL_FAILED = "TRIAL_FAILED"


class TrialResult(BaseModel):
    """Final state of one trial within one cycle."""

    trial_id: str
    state: TrialState
    detail: str = ""
    correlator: str | None = None


class CycleReport(BaseModel):
    """Everything that happened during one collection cycle."""

    today: date
    disabled: bool = False
    results: list[TrialResult] = Field(default_factory=list)

    def _with_states(self, *states: TrialState) -> list[TrialResult]:
        return [r for r in self.results if r.state in states]

    @property
    def delivered(self) -> list[TrialResult]:
        return self._with_states(TrialState.DELIVERED)

    @property
    def skipped(self) -> list[TrialResult]:
        return self._with_states(
            TrialState.SKIPPED_NOT_STARTED, TrialState.SKIPPED_ENDED
        )

    @property
    def failed(self) -> list[TrialResult]:
        return self._with_states(
            TrialState.CONTENT_FAILED,
            TrialState.TRANSPORT_FAILED,
            TrialState.TRIAL_FAILED,
        )
