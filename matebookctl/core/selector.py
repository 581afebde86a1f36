"""Endpoint selection: a single linear probe over prioritized candidates."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from matebookctl.core.errors import EndpointError
from matebookctl.core.model import Selection
from matebookctl.endpoints.base import LockEndpoint, ThresholdEndpoint

LOGGER = logging.getLogger(__name__)


def select_endpoint(candidates: Iterable[ThresholdEndpoint] | Iterable[LockEndpoint]) -> Selection | None:
    """Pick the first candidate that is readable and writable.

    Inaccessible candidates are skipped. When none of the accessible ones
    pass the writability probe, the last accessible candidate is kept as a
    read-only fallback. Returns None when nothing responds.

    Each accessible candidate is probed with `is_writable()` exactly once,
    which may write its current value back to the firmware.
    """
    selected: Selection | None = None
    for candidate in candidates:
        try:
            candidate.get()
        except EndpointError as exc:
            LOGGER.debug("Skipping %s: %s", candidate.describe(), exc)
            continue

        writable = candidate.is_writable()
        selected = Selection(endpoint=candidate, writable=writable)
        if writable:
            LOGGER.debug("Selected %s", candidate.describe())
            return selected
        LOGGER.debug("%s is read-only, remembering it as fallback", candidate.describe())

    if selected is None:
        LOGGER.debug("No candidate endpoint responded")
    return selected
