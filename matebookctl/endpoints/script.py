"""Endpoints driven by privileged helper scripts (``batpro``, ``fnlock``)."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from matebookctl.core.codec import parse_on_off, parse_threshold_text
from matebookctl.core.errors import ParseError, ReadError, WriteError
from matebookctl.core.model import OFF_PAIR, ThresholdPair

LOGGER = logging.getLogger(__name__)


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            list(cmd),
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return None


def _failure(cmd: Sequence[str], result: subprocess.CompletedProcess[str] | None) -> str | None:
    if result is None:
        return f"{' '.join(cmd)} -> command not found"
    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        return f"{' '.join(cmd)} -> exit status {result.returncode}" + (f": {stderr}" if stderr else "")
    return None


class ScriptThresholdEndpoint:
    """Runs ``<command> status | custom <min> <max> | off``.

    Authorization through the helper implies writability, so `is_writable`
    never probes.
    """

    def __init__(self, command: Sequence[str]) -> None:
        self.command = tuple(command)

    def get(self) -> ThresholdPair:
        cmd = [*self.command, "status"]
        result = _run(cmd)
        failure = _failure(cmd, result)
        if failure:
            LOGGER.error("Failed to get battery protection status from script")
            raise ReadError(failure)

        state, low, high = parse_threshold_text(result.stdout)
        if state == "off":
            return OFF_PAIR
        if state == "on":
            return ThresholdPair(low, high)
        raise ParseError(f"Can not make sense of script output {result.stdout!r}")

    def set(self, pair: ThresholdPair) -> None:
        if pair.normalized() == OFF_PAIR:
            cmd = [*self.command, "off"]
        else:
            cmd = [*self.command, "custom", str(pair.min), str(pair.max)]
        failure = _failure(cmd, _run(cmd))
        if failure:
            LOGGER.error("Failed to set thresholds")
            raise WriteError(failure)

    def is_writable(self) -> bool:
        return True

    def describe(self) -> str:
        return f"script {' '.join(self.command)}"


class ScriptLockEndpoint:
    """Runs ``<command> status | toggle``."""

    def __init__(self, command: Sequence[str]) -> None:
        self.command = tuple(command)

    def get(self) -> bool:
        cmd = [*self.command, "status"]
        result = _run(cmd)
        failure = _failure(cmd, result)
        if failure:
            LOGGER.error("Failed to get Fn-Lock status from script")
            raise ReadError(failure)

        state = parse_on_off(result.stdout)
        if not state:
            raise ParseError(f"Can not make sense of script output {result.stdout!r}")
        return state == "on"

    def toggle(self) -> None:
        cmd = [*self.command, "toggle"]
        failure = _failure(cmd, _run(cmd))
        if failure:
            LOGGER.error("Failed to toggle Fn-Lock")
            raise WriteError(failure)

    def is_writable(self) -> bool:
        return True

    def describe(self) -> str:
        return f"script {' '.join(self.command)}"
