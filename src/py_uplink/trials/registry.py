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
"""Holds the trials registered at startup."""

import logging
from collections.abc import Iterable, Iterator

from .base import Trial

logger = logging.getLogger(__name__)


class TrialRegistry:
    """Registration list of trials, kept in registration order."""

    def __init__(self, trials: Iterable[Trial] = ()) -> None:
        self._trials: dict[str, Trial] = {}
        self.register_all(trials)

    def register(self, trial: Trial) -> Trial:
        """Add a trial.

        Raises:
            TypeError: If the object does not expose the trial members.
            ValueError: If another trial already uses the same id.
        """
        if not isinstance(trial, Trial):
            raise TypeError(f"{trial!r} does not implement the Trial interface")
        if trial.id in self._trials:
            raise ValueError(f"A trial with id '{trial.id}' is already registered")
        self._trials[trial.id] = trial
        logger.debug("Registered telemetry trial '%s'", trial.id)
        return trial

    def register_all(self, trials: Iterable[Trial]) -> None:
        for trial in trials:
            self.register(trial)

    def get(self, trial_id: str) -> Trial | None:
        return self._trials.get(trial_id)

    def __iter__(self) -> Iterator[Trial]:
        return iter(list(self._trials.values()))

    def __len__(self) -> int:
        return len(self._trials)

    def __contains__(self, trial_id: object) -> bool:
        return trial_id in self._trials
