"""Loading and validation of the settings file and platform profiles."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from matebookctl.core.errors import MatebookctlError, ProfileLoadError, ProfileValidationError, SettingsError
from matebookctl.core.model import EndpointSpec, Profile, Settings

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# "on"/"off"/"yes"/"no" stay strings; flags go through _normalize_bool.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfile:
    profile: Profile
    warnings: tuple[str, ...]


def _load_schema_validator(name: str) -> Any:
    schema_text = resources.files("matebookctl.schemas").joinpath(name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _config_dir() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "matebookctl"


def current_platform() -> str:
    return "darwin" if sys.platform == "darwin" else "linux"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"{path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], schema: str, source: Path | Traversable) -> None:
    validator = _load_schema_validator(schema)
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise SettingsError(f"{context} must be boolean true/false")


def load_settings(path: Path | None = None) -> Settings:
    """Read behavior flags, falling back to defaults when no file exists."""
    source = path or _config_dir() / "config.yaml"
    if not source.is_file():
        LOGGER.debug("No settings file at %s, using defaults", source)
        return Settings()

    try:
        doc = _read_yaml(source)
        _validate(doc, "settings.schema.json", source)
    except MatebookctlError as exc:
        raise SettingsError(str(exc)) from exc

    defaults = Settings()
    settle = doc.get("settle", {})
    log_scrape = doc.get("log_scrape", {})
    return Settings(
        wait=_normalize_bool(doc.get("wait", defaults.wait), context="wait"),
        use_scripts=_normalize_bool(doc.get("use_scripts", defaults.use_scripts), context="use_scripts"),
        save_values=_normalize_bool(doc.get("save_values", defaults.save_values), context="save_values"),
        settle_attempts=int(settle.get("attempts", defaults.settle_attempts)),
        settle_interval_s=float(settle.get("interval_s", defaults.settle_interval_s)),
        stream_settle_s=float(log_scrape.get("stream_settle_s", defaults.stream_settle_s)),
        dump_settle_s=float(log_scrape.get("dump_settle_s", defaults.dump_settle_s)),
    )


def _entries(doc: dict[str, Any], key: str) -> tuple[EndpointSpec, ...]:
    specs: list[EndpointSpec] = []
    for entry in doc.get(key, []):
        options = {name: value for name, value in entry.items() if name != "type"}
        specs.append(EndpointSpec(type=entry["type"], options=options))
    return tuple(specs)


def _build_profile(doc: dict[str, Any], source: Path | Traversable) -> Profile:
    _validate(doc, "profile.schema.json", source)
    return Profile(
        platform=doc["platform"],
        threshold=_entries(doc, "threshold"),
        fnlock=_entries(doc, "fnlock"),
        persistence=tuple(doc.get("persistence", [])),
    )


def load_profile(platform: str | None = None) -> LoadedProfile:
    """Load the packaged profile for `platform`, or the user's override of it."""
    platform = platform or current_platform()
    warnings: list[str] = []

    user_path = _config_dir() / "profiles" / f"{platform}.yaml"
    if user_path.is_file():
        profile = _build_profile(_read_yaml(user_path), user_path)
        warning = f"User profile {user_path} overrides packaged '{platform}' profile"
        LOGGER.warning(warning)
        warnings.append(warning)
        return LoadedProfile(profile=profile, warnings=tuple(warnings))

    packaged = resources.files("matebookctl.profiles").joinpath(f"{platform}.yaml")
    if not packaged.is_file():
        raise ProfileLoadError(f"No endpoint profile for platform '{platform}'")
    return LoadedProfile(profile=_build_profile(_read_yaml(packaged), packaged), warnings=tuple(warnings))
