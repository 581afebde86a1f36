"""Controllers called by the CLI and the public client.

Controllers never raise for endpoint failures; they report them through
status and result objects.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from matebookctl.core.errors import EndpointError
from matebookctl.core.model import (
    ApplyResult,
    LockStatus,
    LockStatusKind,
    Preset,
    Selection,
    Settings,
    ThresholdPair,
    ThresholdStatus,
    ThresholdStatusKind,
    ToggleResult,
)
from matebookctl.core.persistence import PersistenceStore

LOGGER = logging.getLogger(__name__)

_PRESET_KINDS = {
    Preset.OFF: ThresholdStatusKind.OFF,
    Preset.TRAVEL: ThresholdStatusKind.TRAVEL,
    Preset.OFFICE: ThresholdStatusKind.OFFICE,
    Preset.HOME: ThresholdStatusKind.HOME,
}


def classify_thresholds(pair: ThresholdPair) -> ThresholdStatus:
    if not pair.is_valid:
        LOGGER.warning("BP thresholds don't make sense: min %d%%, max %d%%", pair.min, pair.max)
        return ThresholdStatus(ThresholdStatusKind.NONSENSICAL, pair, "ON, but thresholds make no sense.")

    preset = Preset.classify(pair)
    if preset is Preset.OFF:
        return ThresholdStatus(ThresholdStatusKind.OFF, pair, "Battery protection is OFF")
    if preset is None:
        text = f"Battery protection mode: CUSTOM ({pair.min}%-{pair.max}%)"
        return ThresholdStatus(ThresholdStatusKind.CUSTOM, pair, text)
    return ThresholdStatus(_PRESET_KINDS[preset], pair, f"Battery protection mode: {preset.name}")


class ThresholdController:
    def __init__(
        self,
        selection: Selection | None,
        *,
        persistence: PersistenceStore | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.selection = selection
        self.persistence = persistence
        self.settings = settings or Settings()
        self._sleep = sleep

    @property
    def available(self) -> bool:
        return self.selection is not None

    @property
    def writable(self) -> bool:
        return self.selection is not None and self.selection.writable

    def status(self) -> ThresholdStatus:
        if self.selection is None:
            return ThresholdStatus(
                ThresholdStatusKind.UNAVAILABLE, None, "Battery protection status unavailable"
            )
        try:
            pair = self.selection.endpoint.get()
        except EndpointError as exc:
            LOGGER.error("Failed to get thresholds: %s", exc)
            return ThresholdStatus(ThresholdStatusKind.UNAVAILABLE, None, "ERROR: can not get BP status!")
        return classify_thresholds(pair)

    def set_mode(self, preset: Preset, *, cancel: threading.Event | None = None) -> ApplyResult:
        return self.set_thresholds(preset.pair, cancel=cancel)

    def set_custom(self, low: int, high: int, *, cancel: threading.Event | None = None) -> ApplyResult:
        return self.set_thresholds(ThresholdPair(low, high), cancel=cancel)

    def set_thresholds(self, pair: ThresholdPair, *, cancel: threading.Event | None = None) -> ApplyResult:
        if not pair.is_valid:
            return self._result(pair, applied=False, error=f"Invalid thresholds: min {pair.min}%, max {pair.max}%")
        if self.selection is None:
            return self._result(pair, applied=False, error="Battery protection is not available")

        try:
            self.selection.endpoint.set(pair)
        except EndpointError as exc:
            LOGGER.error("Failed to set thresholds: %s", exc)
            return self._result(pair, applied=False, error=str(exc))

        settled = self._wait_settled(pair, cancel) if self.settings.wait else None

        persisted = None
        if self.persistence is not None:
            LOGGER.debug("Saving values for persistence...")
            persisted = self.persistence.mirror(pair)

        return self._result(pair, applied=True, persisted=persisted, settled=settled)

    def _wait_settled(self, pair: ThresholdPair, cancel: threading.Event | None) -> bool:
        """Poll until the driver reports `pair`; gives up silently.

        The driver applies values with a delay due to an ACPI bug.
        """
        LOGGER.debug("Thresholds pushed to driver, will wait for them to be set")
        for attempt in range(1, self.settings.settle_attempts + 1):
            if cancel is not None:
                if cancel.wait(self.settings.settle_interval_s):
                    LOGGER.debug("Settle wait cancelled")
                    return False
            else:
                self._sleep(self.settings.settle_interval_s)
            LOGGER.debug("Checking thresholds, attempt %d", attempt)
            try:
                current = self.selection.endpoint.get()
            except EndpointError:
                current = None
            if current is not None and current.normalized() == pair.normalized():
                LOGGER.debug("Thresholds set as expected")
                return True
            LOGGER.debug("Not set yet")
        LOGGER.debug("Alright, going on")
        return False

    def _result(
        self,
        pair: ThresholdPair,
        *,
        applied: bool,
        persisted: bool | None = None,
        settled: bool | None = None,
        error: str | None = None,
    ) -> ApplyResult:
        return ApplyResult(
            requested=pair,
            applied=applied,
            persisted=persisted,
            settled=settled,
            error=error,
            status=self.status(),
        )


class LockController:
    def __init__(self, selection: Selection | None) -> None:
        self.selection = selection

    @property
    def available(self) -> bool:
        return self.selection is not None

    @property
    def writable(self) -> bool:
        return self.selection is not None and self.selection.writable

    def status(self) -> LockStatus:
        if self.selection is None:
            return LockStatus(LockStatusKind.UNAVAILABLE, "Fn-Lock status unavailable")
        try:
            state = self.selection.endpoint.get()
        except EndpointError as exc:
            LOGGER.error("Could not read Fn-Lock state: %s", exc)
            return LockStatus(LockStatusKind.UNAVAILABLE, "ERROR: Fn-Lock state unknown")
        if state:
            return LockStatus(LockStatusKind.ON, "Fn-Lock is ON")
        return LockStatus(LockStatusKind.OFF, "Fn-Lock is OFF")

    def toggle(self) -> ToggleResult:
        if self.selection is None:
            return ToggleResult(toggled=False, error="Fn-Lock is not available", status=self.status())

        endpoint = self.selection.endpoint
        try:
            endpoint.get()
        except EndpointError as exc:
            LOGGER.error("Could not read Fn-Lock state: %s", exc)
            return ToggleResult(toggled=False, error=f"Fn-Lock state unknown: {exc}", status=self.status())

        try:
            endpoint.toggle()
        except EndpointError as exc:
            LOGGER.warning("Could not set Fn-Lock status: %s", exc)
            return ToggleResult(toggled=False, error=str(exc), status=self.status())
        return ToggleResult(toggled=True, error=None, status=self.status())
