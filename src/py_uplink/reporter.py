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
"""Runs one collection cycle over the registered trials."""

import asyncio
import logging
from collections.abc import Iterable
from datetime import date

from .config import Settings
from .correlator import Correlator
from .gate import GateDecision, evaluate
from .models import (
    CycleReport,
    Delivered,
    SubmissionRecord,
    TrialResult,
    TrialState,
)
from .submitter import SerializationError, Submitter
from .trials.base import Trial
from .trials.registry import TrialRegistry

logger = logging.getLogger(__name__)


class Reporter:
    """Collects content from every active trial and submits it.

    The reporter holds no timer. A host scheduler calls ``run_cycle`` on each
    tick; every call re-evaluates all trials from scratch.
    """

    def __init__(
        self,
        settings: Settings,
        correlator: Correlator,
        submitter: Submitter,
        registry: TrialRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.correlator = correlator
        self.submitter = submitter
        self.registry = registry if registry is not None else TrialRegistry()

    async def run_cycle(
        self, today: date | None = None, trials: Iterable[Trial] | None = None,
    ) -> CycleReport:
        """Gate, collect and submit every trial once.

        Args:
            today: The day to evaluate trial windows against. Defaults to the
                   current local date.
            trials: Trials to process instead of the registered ones.

        Returns:
            A report holding one result per trial. Failures of individual
            trials are recorded there and logged; they are never raised.
        """
        today = today or date.today()
        if not self.settings.enabled:
            logger.info("Telemetry is disabled; skipping collection cycle")
            return CycleReport(today=today, disabled=True)

        selected = list(trials if trials is not None else self.registry)
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def bounded(trial: Trial) -> TrialResult:
            async with semaphore:
                try:
                    return await self._process(trial, today)
                except Exception as e:
                    label = _trial_label(trial)
                    logger.warning("Telemetry collection failed for: %s: %s", label, e)
                    return TrialResult(
                        trial_id=label, state=TrialState.TRIAL_FAILED, detail=str(e)
                    )

        results = await asyncio.gather(*(bounded(trial) for trial in selected))
        return CycleReport(today=today, results=list(results))

    def run_cycle_sync(
        self, today: date | None = None, trials: Iterable[Trial] | None = None,
    ) -> CycleReport:
        """Synchronous wrapper for hosts without an event loop."""
        return asyncio.run(self.run_cycle(today=today, trials=trials))

    async def _process(self, trial: Trial, today: date) -> TrialResult:
        decision = evaluate(trial, today)
        if decision is GateDecision.NOT_STARTED:
            logger.debug(
                "Skipping telemetry for '%s' as it is configured to start later",
                trial.display_name,
            )
            return TrialResult(trial_id=trial.id, state=TrialState.SKIPPED_NOT_STARTED)
        if decision is GateDecision.ENDED:
            logger.debug(
                "Skipping telemetry for '%s' as it is configured to end in the past",
                trial.display_name,
            )
            return TrialResult(trial_id=trial.id, state=TrialState.SKIPPED_ENDED)

        correlator = self.correlator.derive(trial.id)
        try:
            content = await asyncio.to_thread(trial.content)
            record = SubmissionRecord.build(trial.id, correlator, content)
        except Exception as e:
            return self._content_failed(trial, correlator, e)

        try:
            outcome = await self.submitter.send(self.settings.endpoint, record)
        except SerializationError as e:
            return self._content_failed(trial, correlator, e)

        if isinstance(outcome, Delivered):
            logger.info(
                "Telemetry submission received response '%s' for: %s",
                outcome.status_line,
                trial.id,
            )
            return TrialResult(
                trial_id=trial.id,
                state=TrialState.DELIVERED,
                detail=outcome.status_line,
                correlator=correlator,
            )
        logger.warning(
            "Telemetry submission failed for: %s: %s", trial.id, outcome.cause,
        )
        return TrialResult(
            trial_id=trial.id,
            state=TrialState.TRANSPORT_FAILED,
            detail=outcome.cause,
            correlator=correlator,
        )

    @staticmethod
    def _content_failed(trial: Trial, correlator: str, error: Exception) -> TrialResult:
        logger.warning(
            "Telemetry content production failed for: %s: %s", trial.id, error,
        )
        return TrialResult(
            trial_id=trial.id,
            state=TrialState.CONTENT_FAILED,
            detail=str(error),
            correlator=correlator,
        )


def _trial_label(trial: object) -> str:
    try:
        return str(trial.id)
    except Exception:
        return repr(trial)
