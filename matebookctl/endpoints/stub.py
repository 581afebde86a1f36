"""Placeholder endpoint for platforms without a working write mechanism."""

from __future__ import annotations

from matebookctl.core.errors import ReadError, WriteError
from matebookctl.core.model import ThresholdPair


class StubEndpoint:
    """Never writes. Reads `value` when one is given, otherwise fails."""

    def __init__(self, value: ThresholdPair | None = None) -> None:
        self.value = value

    def get(self) -> ThresholdPair:
        if self.value is None:
            raise ReadError("No interface available to read thresholds")
        return self.value

    def set(self, pair: ThresholdPair) -> None:
        raise WriteError("Setting thresholds is not implemented for this interface")

    def is_writable(self) -> bool:
        return False

    def describe(self) -> str:
        return "stub"
