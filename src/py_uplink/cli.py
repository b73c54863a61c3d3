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
"""Command line entry point for running telemetry collection cycles."""

import asyncio
import logging
from datetime import date
from typing import Any, Dict

import typer
from pydantic import ValidationError

from py_uplink.config import Settings, load_config
from py_uplink.correlator import Correlator
from py_uplink.gate import evaluate
from py_uplink.models import CycleReport, StaticTrial
from py_uplink.reporter import Reporter
from py_uplink.submitter import Submitter
from py_uplink.trials.registry import TrialRegistry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Collect and submit telemetry from active trials.")


def _parse_today(today: str | None) -> date:
    if not today:
        return date.today()
    try:
        return date.fromisoformat(today)
    except ValueError as e:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got '{today}'") from e


def build_settings(config: Dict[str, Any], **overrides: Any) -> Settings:
    """Create settings from the YAML 'settings' section plus CLI overrides."""
    values = dict(config.get("settings") or {})
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**values)
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2) from e


def build_registry(config: Dict[str, Any]) -> TrialRegistry:
    """Register every trial declared in the YAML 'trials' list."""
    try:
        return TrialRegistry(
            StaticTrial(**definition) for definition in config.get("trials") or []
        )
    except (ValidationError, ValueError, TypeError) as e:
        typer.echo(f"Invalid trial definition: {e}", err=True)
        raise typer.Exit(code=2) from e


async def arun_cycle(
    settings: Settings,
    registry: TrialRegistry,
    today: date,
    correlation_id: str | None = None,
) -> CycleReport:
    """Run a single cycle with a submitter scoped to this call."""
    correlator = Correlator(correlation_id)
    async with Submitter(settings) as submitter:
        reporter = Reporter(settings, correlator, submitter, registry)
        return await reporter.run_cycle(today=today)


@app.command()
def run(
    config_file: str = typer.Option("uplink.yaml", help="Path to YAML config file."),
    endpoint: str = typer.Option(None, help="Override the collection endpoint URL."),
    today: str = typer.Option(None, help="Evaluate trial windows as of YYYY-MM-DD."),
    correlation_id: str = typer.Option(
        None, help="Fixed correlation id, for reproducible runs."
    ),
):
    """Run one collection cycle over the configured trials."""
    config = load_config(config_file)
    settings = build_settings(config, endpoint=endpoint)
    registry = build_registry(config)
    cycle_date = _parse_today(today)

    logger.info(
        "Starting telemetry cycle for %d trial(s) as of %s", len(registry), cycle_date
    )
    report = asyncio.run(arun_cycle(settings, registry, cycle_date, correlation_id))
    if report.disabled:
        typer.echo("Telemetry is disabled.")
        return
    typer.echo(
        f"delivered={len(report.delivered)} skipped={len(report.skipped)} "
        f"failed={len(report.failed)}"
    )


@app.command()
def status(
    config_file: str = typer.Option("uplink.yaml", help="Path to YAML config file."),
    today: str = typer.Option(None, help="Evaluate trial windows as of YYYY-MM-DD."),
):
    """Show which configured trials are active, without submitting anything."""
    registry = build_registry(load_config(config_file))
    cycle_date = _parse_today(today)
    for trial in registry:
        typer.echo(f"{trial.id}\t{trial.display_name}\t{evaluate(trial, cycle_date).value}")


@app.command()
def correlator(
    trial_id: str = typer.Argument(..., help="Trial id to derive the hash for."),
    correlation_id: str = typer.Option(..., help="Correlation id to hash with."),
):
    """Print the correlator hash a trial would be submitted with."""
    typer.echo(Correlator(correlation_id).derive(trial_id))


def main():
    app()


if __name__ == "__main__":
    main()
