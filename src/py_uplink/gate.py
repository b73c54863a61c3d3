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
"""Decides whether a trial is eligible for collection on a given day."""

from datetime import date
from enum import Enum

from .trials.base import Trial


class GateDecision(str, Enum):
    ACTIVE = "ACTIVE"
    NOT_STARTED = "NOT_STARTED"
    ENDED = "ENDED"


def evaluate(trial: Trial, today: date) -> GateDecision:
    """Compare ``today`` with the trial's inclusive window.

    A missing start or end is an open bound. Only the window members are read;
    the trial's content is never produced here.
    """
    if trial.start is not None and today < trial.start:
        return GateDecision.NOT_STARTED
    if trial.end is not None and today > trial.end:
        return GateDecision.ENDED
    return GateDecision.ACTIVE


def is_active(trial: Trial, today: date) -> bool:
    return evaluate(trial, today) is GateDecision.ACTIVE
