"""Stable public API for building tooling on top of matebookctl.

This module is the supported integration surface for third-party callers,
such as a tray applet or a windowed front end. Avoid importing from
private/internal modules unless intentionally depending on non-stable
internals.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from matebookctl.core.errors import (
    AccessError,
    EndpointError,
    MatebookctlError,
    ParseError,
    ProfileLoadError,
    ProfileValidationError,
    ReadError,
    SettingsError,
    WriteError,
)
from matebookctl.core.model import (
    ApplyResult,
    LockStatus,
    LockStatusKind,
    Preset,
    Profile,
    Settings,
    ThresholdPair,
    ThresholdStatus,
    ThresholdStatusKind,
    ToggleResult,
)
from matebookctl.core.service import Configuration, configure

__all__ = [
    "MatebookctlError",
    "EndpointError",
    "ReadError",
    "AccessError",
    "ParseError",
    "WriteError",
    "ProfileLoadError",
    "ProfileValidationError",
    "SettingsError",
    "ApplyResult",
    "LockStatus",
    "LockStatusKind",
    "Preset",
    "Settings",
    "ThresholdPair",
    "ThresholdStatus",
    "ThresholdStatusKind",
    "ToggleResult",
    "EndpointInfo",
    "Client",
]


@dataclass(frozen=True)
class EndpointInfo:
    """Which mechanism backs each capability."""

    threshold: str | None
    threshold_writable: bool
    fnlock: str | None
    fnlock_writable: bool
    persistence: str | None


class Client:
    """Public client for reading and changing firmware settings.

    Endpoints are probed once, when the client is created. Probing a
    file-backed endpoint writes its current value back to the driver.
    Use the client as a context manager, or call `close()`, so that no
    helper process outlives it.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        profile: Profile | None = None,
        configuration: Configuration | None = None,
    ) -> None:
        self._config = configuration or configure(settings=settings, profile=profile)
        self._thresholds = self._config.threshold_controller()
        self._fnlock = self._config.lock_controller()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._config.warnings

    @property
    def thresholds_writable(self) -> bool:
        return self._thresholds.writable

    @property
    def fnlock_writable(self) -> bool:
        return self._fnlock.writable

    def threshold_status(self) -> ThresholdStatus:
        return self._thresholds.status()

    def set_mode(self, mode: Preset | str, *, cancel: threading.Event | None = None) -> ApplyResult:
        preset = mode if isinstance(mode, Preset) else Preset.from_name(mode)
        return self._thresholds.set_mode(preset, cancel=cancel)

    def set_custom(self, low: int, high: int, *, cancel: threading.Event | None = None) -> ApplyResult:
        return self._thresholds.set_custom(low, high, cancel=cancel)

    def lock_status(self) -> LockStatus:
        return self._fnlock.status()

    def toggle_lock(self) -> ToggleResult:
        return self._fnlock.toggle()

    def describe(self) -> EndpointInfo:
        threshold, fnlock = self._config.threshold, self._config.fnlock
        persistence = self._config.persistence
        return EndpointInfo(
            threshold=threshold.endpoint.describe() if threshold else None,
            threshold_writable=bool(threshold and threshold.writable),
            fnlock=fnlock.endpoint.describe() if fnlock else None,
            fnlock_writable=bool(fnlock and fnlock.writable),
            persistence=persistence.describe() if persistence else None,
        )

    def close(self) -> None:
        self._config.close()
