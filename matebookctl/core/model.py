"""Core data models used across endpoints, controllers, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from matebookctl.endpoints.base import LockEndpoint, ThresholdEndpoint


@dataclass(frozen=True)
class ThresholdPair:
    """Charge thresholds: charging stops above `max` and resumes below `min`.

    Construction never validates, since firmware can report nonsense.
    """

    min: int
    max: int

    @property
    def is_valid(self) -> bool:
        return 0 <= self.min <= self.max <= 100

    @property
    def is_off(self) -> bool:
        return self.min == 0 and self.max in (0, 100)

    def normalized(self) -> ThresholdPair:
        if self.is_off:
            return OFF_PAIR
        return self

    def as_text(self) -> str:
        return f"{self.min} {self.max}\n"


OFF_PAIR = ThresholdPair(0, 100)


class Preset(Enum):
    OFF = ThresholdPair(0, 100)
    TRAVEL = ThresholdPair(95, 100)
    OFFICE = ThresholdPair(70, 90)
    HOME = ThresholdPair(40, 70)

    @property
    def pair(self) -> ThresholdPair:
        return self.value

    @classmethod
    def classify(cls, pair: ThresholdPair) -> Preset | None:
        if pair.is_off:
            return cls.OFF
        for preset in cls:
            if preset.pair == pair:
                return preset
        return None

    @classmethod
    def from_name(cls, name: str) -> Preset:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            allowed = ", ".join(p.name.lower() for p in cls)
            raise ValueError(f"Unknown mode '{name}'. Allowed: {allowed}") from None


class ThresholdStatusKind(Enum):
    OFF = "off"
    TRAVEL = "travel"
    OFFICE = "office"
    HOME = "home"
    CUSTOM = "custom"
    NONSENSICAL = "nonsensical"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ThresholdStatus:
    kind: ThresholdStatusKind
    pair: ThresholdPair | None
    text: str


class LockStatusKind(Enum):
    ON = "on"
    OFF = "off"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LockStatus:
    kind: LockStatusKind
    text: str

    @property
    def enabled(self) -> bool | None:
        if self.kind is LockStatusKind.UNAVAILABLE:
            return None
        return self.kind is LockStatusKind.ON


@dataclass(frozen=True)
class ApplyResult:
    requested: ThresholdPair
    applied: bool
    persisted: bool | None
    settled: bool | None
    error: str | None
    status: ThresholdStatus


@dataclass(frozen=True)
class ToggleResult:
    toggled: bool
    error: str | None
    status: LockStatus


@dataclass(frozen=True)
class Selection:
    """Endpoint picked for a capability, with its one-time writability probe."""

    endpoint: ThresholdEndpoint | LockEndpoint
    writable: bool


@dataclass(frozen=True)
class Settings:
    wait: bool = False
    use_scripts: bool = False
    save_values: bool = True
    settle_attempts: int = 4
    settle_interval_s: float = 0.9
    stream_settle_s: float = 0.2
    dump_settle_s: float = 0.5


@dataclass(frozen=True)
class EndpointSpec:
    type: str
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Profile:
    platform: str
    threshold: tuple[EndpointSpec, ...]
    fnlock: tuple[EndpointSpec, ...]
    persistence: tuple[str, ...]
