"""Endpoint interfaces.

An endpoint is one concrete mechanism for reading and writing a firmware
setting. Every implementation raises `ReadError` (or its subclasses
`AccessError` / `ParseError`) from `get()` and `WriteError` from writes.

`is_writable()` is NOT a pure capability flag. For file-backed endpoints it
reads the current value and writes the same value back, so calling it issues
one real write to the firmware interface. It is meant to be called once per
candidate during endpoint selection; the result is cached in `Selection`.
"""

from __future__ import annotations

from typing import Protocol

from matebookctl.core.model import ThresholdPair


class ThresholdEndpoint(Protocol):
    def get(self) -> ThresholdPair:
        """Read the current charge thresholds."""

    def set(self, pair: ThresholdPair) -> None:
        """Write new charge thresholds."""

    def is_writable(self) -> bool:
        """Probe writability with a read/write-back round trip."""

    def describe(self) -> str:
        """Short human-readable description of the mechanism."""


class LockEndpoint(Protocol):
    def get(self) -> bool:
        """Read the current Fn-Lock state."""

    def toggle(self) -> None:
        """Flip the Fn-Lock state."""

    def is_writable(self) -> bool:
        """Probe writability with a read/write-back round trip."""

    def describe(self) -> str:
        """Short human-readable description of the mechanism."""
