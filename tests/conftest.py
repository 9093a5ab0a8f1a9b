"""Shared fixtures for proton-launch tests."""

from pathlib import Path
from typing import Callable

import pytest

from proton_launcher.core.config_manager import ConfigManager, LaunchConfig
from proton_launcher.utils.logger import setup_logger

MANAGED_ENV = [env for env, _ in ConfigManager.SETTINGS_FIELDS.values()] + [
    "PROTON_LAUNCH_CONFIG",
    "PROTON_LAUNCH_CONFIG_HOME",
    "XDG_CONFIG_HOME",
    "XDG_DATA_HOME",
    "STEAM_COMPAT_DATA_PATH",
    "STEAM_COMPAT_CLIENT_INSTALL_PATH",
]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir and clear every variable the launcher reads."""
    home = tmp_path / "home"
    home.mkdir()
    for name in MANAGED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(home))
    # the console handler binds sys.stdout when created; rebind per test
    setup_logger()
    return home


@pytest.fixture
def steam_root(tmp_path: Path) -> Path:
    root = tmp_path / "Steam"
    (root / "steamapps" / "common").mkdir(parents=True)
    return root


def _install(common: Path, name: str, executable: bool = True) -> Path:
    install_dir = common / name
    install_dir.mkdir(parents=True)
    binary = install_dir / "proton"
    binary.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    binary.chmod(0o755 if executable else 0o644)
    return install_dir


@pytest.fixture
def make_proton(steam_root: Path) -> Callable[..., Path]:
    """Create `<steam_root>/steamapps/common/<name>/proton`."""

    def factory(name: str, executable: bool = True, common: Path = None) -> Path:
        return _install(common or steam_root / "steamapps" / "common", name, executable)

    return factory


@pytest.fixture
def make_config(steam_root: Path, tmp_path: Path) -> Callable[..., LaunchConfig]:
    def factory(**overrides) -> LaunchConfig:
        values = {
            "steam_root": steam_root,
            "config_home": tmp_path / "config",
            "data_home": tmp_path / "data",
        }
        values.update(overrides)
        return LaunchConfig(**values)

    return factory
