"""Driver interface endpoints backed by sysfs-like files."""

from __future__ import annotations

import logging
from pathlib import Path

from matebookctl.core.codec import (
    format_lock_text,
    parse_int_text,
    parse_lock_text,
    parse_pair_text,
)
from matebookctl.core.errors import AccessError, EndpointError, ReadError, WriteError
from matebookctl.core.model import OFF_PAIR, ThresholdPair

LOGGER = logging.getLogger(__name__)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, PermissionError) as exc:
        LOGGER.debug("Couldn't access %s", path)
        raise AccessError(f"Could not access {path}: {exc}") from exc
    except OSError as exc:
        raise ReadError(f"Could not read {path}: {exc}") from exc


def _write(path: Path, content: str) -> None:
    # Direct, non-atomic write: driver attributes can not be replaced by rename.
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Could not write {path}: {exc}") from exc


class _ThresholdFile:
    def get(self) -> ThresholdPair:
        raise NotImplementedError

    def set(self, pair: ThresholdPair) -> None:
        raise NotImplementedError

    def is_writable(self) -> bool:
        """Read the thresholds and write them back unchanged.

        Performs one real write to the driver interface.
        """
        LOGGER.debug("Checking if the threshold endpoint %s is writable...", self.describe())
        try:
            self.set(self.get())
        except EndpointError as exc:
            LOGGER.debug("%s", exc)
            LOGGER.warning("Driver interface %s is readable but not writeable.", self.describe())
            return False
        return True

    def describe(self) -> str:
        raise NotImplementedError


class SingleFileEndpoint(_ThresholdFile):
    """One attribute holding ``"<min> <max>"``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self) -> ThresholdPair:
        pair = parse_pair_text(_read(self.path))
        LOGGER.debug("Got thresholds %d-%d from %s", pair.min, pair.max, self.path)
        return pair

    def set(self, pair: ThresholdPair) -> None:
        _write(self.path, pair.as_text())
        LOGGER.debug("Successful write to %s", self.path)

    def describe(self) -> str:
        return f"file {self.path}"


class SplitFileEndpoint(_ThresholdFile):
    """Separate start/end attributes, as exposed by the kernel battery class."""

    def __init__(self, min_path: str | Path, max_path: str | Path) -> None:
        self.min_path = Path(min_path)
        self.max_path = Path(max_path)

    def get(self) -> ThresholdPair:
        low = parse_int_text(_read(self.min_path))
        high = parse_int_text(_read(self.max_path))
        LOGGER.debug("Got thresholds %d-%d from %s", low, high, self.min_path.parent)
        return ThresholdPair(low, high)

    def set(self, pair: ThresholdPair) -> None:
        # Firmware ignores tightened bounds unless they are widened first.
        self._write_pair(OFF_PAIR)
        self._write_pair(pair)
        LOGGER.debug("Successful write to %s", self.min_path.parent)

    def _write_pair(self, pair: ThresholdPair) -> None:
        _write(self.min_path, str(pair.min))
        _write(self.max_path, str(pair.max))

    def describe(self) -> str:
        return f"files {self.min_path}, {self.max_path}"


class FileLockEndpoint:
    """Fn-Lock attribute holding ``"0"`` or ``"1"``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self) -> bool:
        state = parse_lock_text(_read(self.path))
        LOGGER.debug("Fn-Lock is %s", "ON" if state else "OFF")
        return state

    def toggle(self) -> None:
        self._write(not self.get())

    def is_writable(self) -> bool:
        """Read the Fn-Lock state and write it back unchanged.

        Performs one real write to the driver interface.
        """
        LOGGER.debug("Checking if the Fn-Lock endpoint %s is writable...", self.path)
        try:
            self._write(self.get())
        except EndpointError as exc:
            LOGGER.debug("%s", exc)
            LOGGER.warning("Driver interface %s is readable but not writeable.", self.path)
            return False
        return True

    def _write(self, state: bool) -> None:
        _write(self.path, format_lock_text(state))
        LOGGER.debug("Successful write to %s", self.path)

    def describe(self) -> str:
        return f"file {self.path}"
