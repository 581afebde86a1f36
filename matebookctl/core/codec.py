"""Parsing and serialization of raw endpoint payloads. No I/O here."""

from __future__ import annotations

import re

from matebookctl.core.errors import ParseError
from matebookctl.core.model import ThresholdPair

_STATE_RE = re.compile(r"^battery protection is (o[a-z]+)")
_MIN_RE = re.compile(r"^minimum (\d*) %$")
_MAX_RE = re.compile(r"^maximum (\d*) %$")
_ON_OFF_RE = re.compile(r"^o(?:n|ff)$")
_LOG_MARKER = "Reading (hexadecimal values):"


def _percent(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        return 0


def parse_threshold_text(text: str) -> tuple[str, int, int]:
    """Scan helper output for the protection state and both thresholds.

    Returns ``(state, min, max)`` where state is ``"on"``, ``"off"`` or ``""``
    when no state line was found. Missing threshold lines yield 0. Line order
    does not matter and the last match for each field wins.
    """
    state = ""
    low = 0
    high = 0
    for line in text.split("\n"):
        match = _STATE_RE.match(line)
        if match:
            state = match.group(1)
        match = _MIN_RE.match(line)
        if match:
            low = _percent(match.group(1))
        match = _MAX_RE.match(line)
        if match:
            high = _percent(match.group(1))
    return state, low, high


def parse_on_off(text: str) -> str:
    state = ""
    for line in text.split("\n"):
        if _ON_OFF_RE.match(line):
            state = line
    return state


def parse_log_fragment(text: str) -> ThresholdPair:
    """Extract the two threshold bytes dumped to the system log.

    The fragment looks like ``"Reading (hexadecimal values):", 0x28, 0x3c,``
    and yields ``ThresholdPair(40, 60)``.
    """
    _, marker, tail = text.partition(_LOG_MARKER)
    if not marker:
        raise ParseError("Failed to parse log fragment: marker not found")

    values: list[int] = []
    for token in tail.split(","):
        index = token.find("x")
        if index == -1:
            continue
        if len(token) != index + 3:
            raise ParseError(f"Failed to parse log fragment: bad hex token {token.strip()!r}")
        try:
            values.append(int(token[index + 1 :], 16))
        except ValueError as exc:
            raise ParseError(f"Failed to parse log fragment: bad hex token {token.strip()!r}") from exc

    if len(values) != 2:
        raise ParseError(f"Failed to parse log fragment: expected 2 values, found {len(values)}")
    return ThresholdPair(values[0], values[1])


def encode_pair_argument(low: int, high: int) -> str:
    """Pack thresholds as the decimal form of the bytes ``max, min, 0, 0``.

    This is the argument format the ACPI debug method expects, e.g.
    ``encode_pair_argument(60, 80) == "1346109440"``.
    """
    if not (0 <= low <= 0xFF and 0 <= high <= 0xFF):
        raise ValueError(f"Thresholds out of byte range: {low}, {high}")
    return str(int(f"{high:02x}{low:02x}0000", 16))


def parse_pair_text(text: str) -> ThresholdPair:
    fields = text.strip().split(" ")
    if len(fields) != 2:
        raise ParseError(f"Can not make sense of driver interface value {text!r}")
    low, high = (parse_int_text(f) for f in fields)
    return ThresholdPair(low, high)


def parse_int_text(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError as exc:
        raise ParseError(f"Expected an integer, got {text!r}") from exc


def parse_lock_text(text: str) -> bool:
    value = text.strip()
    if value == "1":
        return True
    if value == "0":
        return False
    raise ParseError(f"Fn-Lock state reported as {value!r}")


def format_lock_text(state: bool) -> str:
    return "1" if state else "0"
