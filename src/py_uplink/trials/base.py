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
"""Defines the capability interface every trial implements."""

from datetime import date
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Trial(Protocol):
    """A pluggable telemetry source active during a calendar window.

    Any object exposing these members is a trial; no base class is needed.
    The engine reads the members once per cycle and treats them as immutable.

    Attributes:
        id: Stable short identifier, unique among registered trials. It is
            sent as the record ``type`` and feeds the correlator hash.
        display_name: Human-readable label used in log messages.
        start: First day the trial is active (inclusive), or None if it has
               always been active.
        end: Last day the trial is active (inclusive), or None if it never ends.
    """

    id: str
    display_name: str
    start: date | None
    end: date | None

    def content(self) -> dict[str, Any]:
        """Build the document to submit.

        Only called for trials active on the cycle's date. It may be slow and
        must not change engine state.
        """
        ...
