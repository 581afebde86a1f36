"""Turns a platform profile into ordered endpoint candidates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from matebookctl.core.errors import ProfileValidationError
from matebookctl.core.model import EndpointSpec, Profile, Settings, ThresholdPair
from matebookctl.endpoints.base import LockEndpoint, ThresholdEndpoint
from matebookctl.endpoints.logscrape import IoioWriter, LogScrapeEndpoint
from matebookctl.endpoints.script import ScriptLockEndpoint, ScriptThresholdEndpoint
from matebookctl.endpoints.sysfs import FileLockEndpoint, SingleFileEndpoint, SplitFileEndpoint
from matebookctl.endpoints.stub import StubEndpoint

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointRegistry:
    """Candidates per capability; position is priority."""

    threshold: tuple[ThresholdEndpoint, ...]
    fnlock: tuple[LockEndpoint, ...]
    persistence: tuple[str, ...]


def _threshold_endpoints(spec: EndpointSpec, settings: Settings) -> list[ThresholdEndpoint]:
    opts = spec.options
    if spec.type == "single":
        return [SingleFileEndpoint(opts["path"])]
    if spec.type == "split":
        if "batteries" not in opts:
            return [SplitFileEndpoint(opts["min_path"], opts["max_path"])]
        try:
            return [
                SplitFileEndpoint(opts["min_path"].format(n=n), opts["max_path"].format(n=n))
                for n in range(int(opts["batteries"]))
            ]
        except (KeyError, IndexError, ValueError) as exc:
            raise ProfileValidationError(
                f"Invalid battery path template {opts['min_path']!r} or {opts['max_path']!r}: {exc!r}"
            ) from exc
    if spec.type == "script":
        return [ScriptThresholdEndpoint(opts["command"])]
    if spec.type == "log_scrape":
        writer = None
        if "writer" in opts:
            writer = IoioWriter(opts["writer"]["off_command"], opts["writer"]["set_command"])
        return [
            LogScrapeEndpoint(
                opts["stream_command"],
                opts["trigger_command"],
                writer=writer,
                stream_settle_s=settings.stream_settle_s,
                dump_settle_s=settings.dump_settle_s,
            )
        ]
    if spec.type == "stub":
        value = opts.get("value")
        return [StubEndpoint(ThresholdPair(*value) if value else None)]
    raise ProfileValidationError(f"Unsupported threshold endpoint type '{spec.type}'")


def _lock_endpoint(spec: EndpointSpec) -> LockEndpoint:
    if spec.type == "file":
        return FileLockEndpoint(spec.options["path"])
    if spec.type == "script":
        return ScriptLockEndpoint(spec.options["command"])
    raise ProfileValidationError(f"Unsupported Fn-Lock endpoint type '{spec.type}'")


def build_registry(profile: Profile, settings: Settings) -> EndpointRegistry:
    threshold: list[ThresholdEndpoint] = []
    for spec in profile.threshold:
        if spec.type == "script" and not settings.use_scripts:
            LOGGER.debug("Scripts disabled, skipping %s", spec.options.get("command"))
            continue
        threshold.extend(_threshold_endpoints(spec, settings))

    fnlock: list[LockEndpoint] = []
    for spec in profile.fnlock:
        if spec.type == "script" and not settings.use_scripts:
            LOGGER.debug("Scripts disabled, skipping %s", spec.options.get("command"))
            continue
        fnlock.append(_lock_endpoint(spec))

    persistence = profile.persistence if settings.save_values else ()
    return EndpointRegistry(threshold=tuple(threshold), fnlock=tuple(fnlock), persistence=persistence)
