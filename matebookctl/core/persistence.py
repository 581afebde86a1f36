"""Mirror of threshold writes to a location that survives reboots."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from matebookctl.core.errors import EndpointError
from matebookctl.core.model import ThresholdPair
from matebookctl.endpoints.sysfs import SingleFileEndpoint

LOGGER = logging.getLogger(__name__)


class PersistenceStore:
    """Write-only mirror; never read back after startup."""

    def __init__(self, endpoint: SingleFileEndpoint) -> None:
        self.endpoint = endpoint

    @classmethod
    def discover(cls, paths: Iterable[str | Path]) -> PersistenceStore | None:
        for path in paths:
            endpoint = SingleFileEndpoint(path)
            try:
                endpoint.get()
            except EndpointError as exc:
                LOGGER.debug("No persistence at %s: %s", path, exc)
                continue
            LOGGER.debug("Saving values for persistence to %s", path)
            return cls(endpoint)
        return None

    def mirror(self, pair: ThresholdPair) -> bool:
        try:
            self.endpoint.set(pair)
        except EndpointError as exc:
            LOGGER.warning("Failed to save thresholds for persistence: %s", exc)
            return False
        return True

    def describe(self) -> str:
        return self.endpoint.describe()
