from __future__ import annotations

import threading
from pathlib import Path

import pytest
from fakes import FakeLockEndpoint, FakeThresholdEndpoint

from matebookctl.core.controllers import LockController, ThresholdController
from matebookctl.core.model import (
    LockStatusKind,
    Preset,
    Selection,
    Settings,
    ThresholdPair,
    ThresholdStatusKind,
)
from matebookctl.core.persistence import PersistenceStore


def _controller(endpoint: FakeThresholdEndpoint, **kwargs) -> ThresholdController:
    return ThresholdController(Selection(endpoint=endpoint, writable=True), **kwargs)


@pytest.mark.parametrize(
    ("pair", "kind", "text"),
    [
        (ThresholdPair(0, 100), ThresholdStatusKind.OFF, "Battery protection is OFF"),
        (ThresholdPair(0, 0), ThresholdStatusKind.OFF, "Battery protection is OFF"),
        (ThresholdPair(95, 100), ThresholdStatusKind.TRAVEL, "Battery protection mode: TRAVEL"),
        (ThresholdPair(70, 90), ThresholdStatusKind.OFFICE, "Battery protection mode: OFFICE"),
        (ThresholdPair(40, 70), ThresholdStatusKind.HOME, "Battery protection mode: HOME"),
        (ThresholdPair(60, 75), ThresholdStatusKind.CUSTOM, "Battery protection mode: CUSTOM (60%-75%)"),
        (ThresholdPair(101, 50), ThresholdStatusKind.NONSENSICAL, "ON, but thresholds make no sense."),
        (ThresholdPair(80, 60), ThresholdStatusKind.NONSENSICAL, "ON, but thresholds make no sense."),
    ],
)
def test_status_classification(pair: ThresholdPair, kind: ThresholdStatusKind, text: str) -> None:
    status = _controller(FakeThresholdEndpoint("drv", pair)).status()
    assert status.kind is kind
    assert status.text == text


def test_status_read_error_is_unavailable() -> None:
    status = _controller(FakeThresholdEndpoint("drv", readable=False)).status()
    assert status.kind is ThresholdStatusKind.UNAVAILABLE
    assert status.pair is None


def test_no_endpoint_everything_is_noop() -> None:
    controller = ThresholdController(None)
    assert controller.available is False
    assert controller.writable is False
    assert controller.status().kind is ThresholdStatusKind.UNAVAILABLE

    result = controller.set_mode(Preset.HOME)
    assert result.applied is False
    assert result.error


def test_set_mode_writes_preset() -> None:
    endpoint = FakeThresholdEndpoint("drv")
    result = _controller(endpoint).set_mode(Preset.OFFICE)

    assert endpoint.sets == [ThresholdPair(70, 90)]
    assert result.applied is True
    assert result.settled is None
    assert result.persisted is None
    assert result.status.kind is ThresholdStatusKind.OFFICE


def test_set_custom_rejects_invalid_range() -> None:
    endpoint = FakeThresholdEndpoint("drv")
    result = _controller(endpoint).set_custom(80, 60)

    assert result.applied is False
    assert "Invalid thresholds" in result.error
    assert endpoint.sets == []


def test_failed_write_skips_persistence(tmp_path: Path) -> None:
    saved = tmp_path / "charge_control_thresholds"
    saved.write_text("40 70\n", encoding="utf-8")
    store = PersistenceStore.discover([saved])
    endpoint = FakeThresholdEndpoint("drv", ThresholdPair(40, 70), writable=False)

    result = _controller(endpoint, persistence=store).set_custom(60, 75)

    assert result.applied is False
    assert result.persisted is None
    assert saved.read_text(encoding="utf-8") == "40 70\n"
    assert result.status.kind is ThresholdStatusKind.HOME


def test_persistence_failure_is_tolerated(tmp_path: Path) -> None:
    saved = tmp_path / "charge_thresholds"
    saved.write_text("40 70\n", encoding="utf-8")
    store = PersistenceStore.discover([tmp_path / "missing", saved])
    assert store is not None
    saved.unlink()
    saved.mkdir()

    endpoint = FakeThresholdEndpoint("drv")
    result = _controller(endpoint, persistence=store).set_custom(60, 75)

    assert result.applied is True
    assert result.persisted is False
    assert endpoint.value == ThresholdPair(60, 75)


class DelayedEndpoint(FakeThresholdEndpoint):
    """Reports the new value only after a number of reads."""

    def __init__(self, delay: int) -> None:
        super().__init__("slow", ThresholdPair(0, 100))
        self.delay = delay
        self.pending: ThresholdPair | None = None

    def set(self, pair: ThresholdPair) -> None:
        self.sets.append(pair)
        self.pending = pair

    def get(self) -> ThresholdPair:
        self.gets += 1
        if self.pending is not None:
            self.delay -= 1
            if self.delay <= 0:
                self.value, self.pending = self.pending, None
        return self.value


def test_settle_wait_stops_when_value_applies() -> None:
    endpoint = DelayedEndpoint(delay=2)
    sleeps: list[float] = []
    controller = _controller(endpoint, settings=Settings(wait=True), sleep=sleeps.append)

    result = controller.set_custom(60, 75)

    assert result.settled is True
    assert sleeps == [0.9, 0.9]


def test_settle_wait_gives_up_without_error() -> None:
    endpoint = DelayedEndpoint(delay=100)
    sleeps: list[float] = []
    settings = Settings(wait=True, settle_attempts=4, settle_interval_s=0.5)
    controller = _controller(endpoint, settings=settings, sleep=sleeps.append)

    result = controller.set_custom(60, 75)

    assert result.applied is True
    assert result.settled is False
    assert result.error is None
    assert sleeps == [0.5] * 4


def test_settle_wait_can_be_cancelled() -> None:
    endpoint = DelayedEndpoint(delay=100)
    cancel = threading.Event()
    cancel.set()
    controller = _controller(endpoint, settings=Settings(wait=True))

    result = controller.set_custom(60, 75, cancel=cancel)

    assert result.applied is True
    assert result.settled is False
    assert endpoint.gets == 1  # only the status read after the write


def test_lock_status() -> None:
    assert LockController(Selection(FakeLockEndpoint(True), True)).status().kind is LockStatusKind.ON
    status = LockController(Selection(FakeLockEndpoint(False), True)).status()
    assert status.text == "Fn-Lock is OFF"
    assert status.enabled is False
    assert LockController(None).status().kind is LockStatusKind.UNAVAILABLE


def test_toggle_flips_state() -> None:
    endpoint = FakeLockEndpoint(False)
    result = LockController(Selection(endpoint, True)).toggle()

    assert result.toggled is True
    assert endpoint.toggles == 1
    assert result.status.kind is LockStatusKind.ON


def test_toggle_skipped_when_state_unknown() -> None:
    endpoint = FakeLockEndpoint(readable=False)
    result = LockController(Selection(endpoint, True)).toggle()

    assert result.toggled is False
    assert result.error
    assert endpoint.toggles == 0
    assert result.status.kind is LockStatusKind.UNAVAILABLE
