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
"""Provides the pseudonymous per-trial correlator hash."""

import hashlib
import threading
import uuid


class Correlator:
    """Holds one random correlation id for its lifetime.

    The id is never persisted, so hashes only link submissions made by the
    same installation, for the same trial, while this object lives. Construct
    one at startup and hand it to the reporter.
    """

    def __init__(self, correlation_id: str | None = None) -> None:
        self._lock = threading.Lock()
        self._correlation_id = correlation_id or None

    @property
    def current_id(self) -> str:
        """Return the correlation id, generating a UUID4 on first use."""
        with self._lock:
            if self._correlation_id is None:
                self._correlation_id = str(uuid.uuid4())
            return self._correlation_id

    def reset(self, new_id: str) -> None:
        """Replace the correlation id. Intended for deterministic tests."""
        if not new_id:
            raise ValueError("Correlation id must not be empty")
        with self._lock:
            self._correlation_id = new_id

    def derive(self, trial_id: str) -> str:
        """Return sha256(correlation id + trial id) as 64 lowercase hex chars."""
        digest = hashlib.sha256((self.current_id + trial_id).encode("utf-8"))
        return digest.hexdigest()
