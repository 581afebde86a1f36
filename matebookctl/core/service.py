"""Startup configuration: probe endpoints once and wire controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from matebookctl.core.controllers import LockController, ThresholdController
from matebookctl.core.loader import load_profile, load_settings
from matebookctl.core.model import Profile, Selection, Settings
from matebookctl.core.persistence import PersistenceStore
from matebookctl.core.registry import EndpointRegistry, build_registry
from matebookctl.core.selector import select_endpoint

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Configuration:
    """Endpoints chosen at startup; read-only for the process lifetime."""

    settings: Settings
    threshold: Selection | None
    fnlock: Selection | None
    persistence: PersistenceStore | None
    warnings: tuple[str, ...] = field(default=())

    def threshold_controller(self) -> ThresholdController:
        return ThresholdController(self.threshold, persistence=self.persistence, settings=self.settings)

    def lock_controller(self) -> LockController:
        return LockController(self.fnlock)

    def close(self) -> None:
        for selection in (self.threshold, self.fnlock):
            if selection is None:
                continue
            close = getattr(selection.endpoint, "close", None)
            if close is not None:
                close()


def configure_from_registry(
    registry: EndpointRegistry,
    settings: Settings,
    warnings: tuple[str, ...] = (),
) -> Configuration:
    threshold = select_endpoint(registry.threshold)
    fnlock = select_endpoint(registry.fnlock)

    persistence = None
    if threshold is not None and registry.persistence:
        persistence = PersistenceStore.discover(registry.persistence)

    runtime_warnings = list(warnings)
    if threshold is None:
        runtime_warnings.append("No access to battery protection information")
    elif not threshold.writable:
        runtime_warnings.append("Battery protection interface is read-only")
    if fnlock is None:
        runtime_warnings.append("No access to Fn-Lock setting")
    elif not fnlock.writable:
        runtime_warnings.append("Fn-Lock interface is read-only")

    return Configuration(
        settings=settings,
        threshold=threshold,
        fnlock=fnlock,
        persistence=persistence,
        warnings=tuple(runtime_warnings),
    )


def configure(
    settings: Settings | None = None,
    profile: Profile | None = None,
) -> Configuration:
    """Load settings and profile, then select one endpoint per capability."""
    settings = settings or load_settings()
    warnings: tuple[str, ...] = ()
    if profile is None:
        loaded = load_profile()
        profile, warnings = loaded.profile, loaded.warnings

    LOGGER.debug("Probing endpoints for platform '%s'", profile.platform)
    return configure_from_registry(build_registry(profile, settings), settings, warnings)
