from __future__ import annotations

from pathlib import Path

import pytest

from matebookctl.core.errors import ProfileLoadError, ProfileValidationError, SettingsError
from matebookctl.core.loader import load_profile, load_settings
from matebookctl.core.model import Settings


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))


def test_load_packaged_linux_profile() -> None:
    loaded = load_profile("linux")
    profile = loaded.profile
    assert loaded.warnings == ()
    assert profile.threshold[0].options["path"] == "/sys/devices/platform/huawei-wmi/charge_control_thresholds"
    assert [spec.type for spec in profile.threshold] == ["single", "single", "split", "script"]
    assert profile.threshold[2].options["batteries"] == 10
    assert [spec.type for spec in profile.fnlock] == ["file", "script"]
    assert profile.persistence[0] == "/etc/default/huawei-wmi/charge_control_thresholds"


def test_load_packaged_darwin_profile() -> None:
    profile = load_profile("darwin").profile
    assert [spec.type for spec in profile.threshold] == ["log_scrape", "stub"]
    assert profile.threshold[0].options["trigger_command"] == ["ioio", "-s", "org_rehabman_ACPIDebug", "dbg4", "0"]
    assert profile.threshold[0].options["writer"]["off_command"] == ["ioio", "-s", "org_rehabman_ACPIDebug", "dbg0", "5"]
    assert profile.threshold[1].options["value"] == [0, 100]
    assert profile.fnlock == ()
    assert profile.persistence == ()


def test_unknown_platform() -> None:
    with pytest.raises(ProfileLoadError):
        load_profile("plan9")


def test_user_profile_overrides_packaged(tmp_path: Path) -> None:
    _write(
        tmp_path / "cfg" / "matebookctl" / "profiles" / "linux.yaml",
        """
platform: linux
threshold:
  - type: single
    path: /tmp/thresholds
""",
    )
    loaded = load_profile("linux")
    assert loaded.profile.threshold[0].options == {"path": "/tmp/thresholds"}
    assert any("overrides" in warning for warning in loaded.warnings)


def test_unknown_endpoint_type_rejected(tmp_path: Path) -> None:
    _write(
        tmp_path / "cfg" / "matebookctl" / "profiles" / "linux.yaml",
        """
platform: linux
threshold:
  - type: smbus
    path: /dev/i2c-0
""",
    )
    with pytest.raises(ProfileValidationError):
        load_profile("linux")


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    _write(
        tmp_path / "cfg" / "matebookctl" / "profiles" / "linux.yaml",
        """
platform: linux
threshold:
  - type: single
    path: /a
    path: /b
""",
    )
    with pytest.raises(ProfileValidationError):
        load_profile("linux")


def test_settings_default_without_file() -> None:
    assert load_settings() == Settings()


def test_settings_from_file(tmp_path: Path) -> None:
    _write(
        tmp_path / "cfg" / "matebookctl" / "config.yaml",
        """
wait: true
use_scripts: True
save_values: false
settle:
  attempts: 2
  interval_s: 0.25
log_scrape:
  dump_settle_s: 1
""",
    )
    settings = load_settings()
    assert settings.wait is True
    assert settings.use_scripts is True
    assert settings.save_values is False
    assert settings.settle_attempts == 2
    assert settings.settle_interval_s == 0.25
    assert settings.stream_settle_s == 0.2
    assert settings.dump_settle_s == 1.0


def test_settings_invalid_flag(tmp_path: Path) -> None:
    _write(tmp_path / "cfg" / "matebookctl" / "config.yaml", "wait: sometimes\n")
    with pytest.raises(SettingsError):
        load_settings()


def test_settings_unknown_key(tmp_path: Path) -> None:
    _write(tmp_path / "cfg" / "matebookctl" / "config.yaml", "colour: blue\n")
    with pytest.raises(SettingsError):
        load_settings()
