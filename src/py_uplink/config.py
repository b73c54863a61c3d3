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
"""Manages the application's configuration using Pydantic."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_VERSION = "0.1.0"
DEFAULT_ENDPOINT = "https://uplink.py-uplink.dev/events"

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Manages configuration for the telemetry engine.

    Reads settings from environment variables with the prefix 'UPLINK_'.
    """

    model_config = SettingsConfigDict(env_prefix="UPLINK_")

    # Collection service that receives one POST per active trial
    endpoint: str = DEFAULT_ENDPOINT

    # Host opt-out switch. When False a cycle does nothing.
    enabled: bool = True

    # Per-request timeout in seconds
    timeout: float = Field(default=10.0, gt=0)

    # Upper bound on trials processed at the same time within one cycle
    max_concurrency: int = Field(default=4, ge=1)

    user_agent: str = f"py-uplink/{PACKAGE_VERSION}"


def load_config(config_file: str | Path | None) -> dict[str, Any]:
    """Loads configuration from a YAML file.

    Returns an empty mapping when no file is given or the file does not exist.
    """
    if config_file:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file not found: %s", config_file)
    return {}
