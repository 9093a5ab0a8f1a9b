"""Tests for proton_launcher.core.version_manager."""

from pathlib import Path

import pytest

from proton_launcher.core.local_manager import (
    Classification,
    LocalManager,
    NoCandidatesError,
    ProtonInstall,
)
from proton_launcher.core.version_manager import (
    BinaryNotExecutableError,
    VersionManager,
    VersionNotFoundError,
)
from proton_launcher.core.version_utils import CUSTOM, EXPERIMENTAL, STABLE, parse_version


def _install(name: str, kind: str = STABLE, root: str = "/lib") -> ProtonInstall:
    return ProtonInstall(path=Path(root) / name, kind=kind, version=parse_version(name))


def _classification(*installs: ProtonInstall) -> Classification:
    result = Classification()
    for install in installs:
        (result.experimental if install.is_experimental else result.stable).append(install)
    return result


def test_default_picks_highest_stable_version(make_config):
    classification = _classification(
        _install("Proton 10.0"),
        _install("Proton 7.0"),
        _install("Proton 9.0.3"),
        _install("Proton 9.0"),
        _install("Proton - Experimental", EXPERIMENTAL),
    )

    chosen = VersionManager(make_config()).select_default(classification)

    assert chosen.name == "Proton 10.0"


def test_default_is_independent_of_input_order(make_config):
    installs = [_install("Proton 8.0"), _install("Proton 9.0.1"), _install("Proton 9.0")]
    manager = VersionManager(make_config())

    forward = manager.select_default(_classification(*installs))
    backward = manager.select_default(_classification(*reversed(installs)))

    assert forward == backward
    assert forward.name == "Proton 9.0.1"


def test_default_tie_keeps_search_order(make_config):
    first = _install("Proton 9.0", root="/first")
    second = _install("Proton 9.0", root="/second")

    chosen = VersionManager(make_config()).select_default(_classification(first, second))

    assert chosen.path == Path("/first/Proton 9.0")


def test_experimental_preferred_only_when_included(make_config):
    classification = _classification(
        _install("Proton 9.0"),
        _install("Proton - Experimental", EXPERIMENTAL),
    )

    assert VersionManager(make_config()).select_default(classification).name == "Proton 9.0"
    included = VersionManager(make_config(include_experimental=True))
    assert included.select_default(classification).name == "Proton - Experimental"


def test_only_experimental_without_inclusion_fails(make_config):
    classification = _classification(_install("Proton - Experimental", EXPERIMENTAL))

    with pytest.raises(NoCandidatesError, match="PROTON_INCLUDE_EXPERIMENTAL"):
        VersionManager(make_config()).select_default(classification)


def test_no_candidates_fails(make_config):
    with pytest.raises(NoCandidatesError):
        VersionManager(make_config()).select_default(Classification())


def test_resolve_install_scans_when_no_override(make_proton, make_config):
    make_proton("Proton 8.0")
    make_proton("Proton 9.0")

    assert VersionManager(make_config()).resolve_install().name == "Proton 9.0"


def test_version_override_never_scans(make_proton, make_config, monkeypatch):
    make_proton("Proton 8.0")
    make_proton("Proton 9.0")
    config = make_config(version="8.0")
    local_manager = LocalManager(config)

    def fail(*_args, **_kwargs):
        raise AssertionError("explicit version must not scan for defaults")

    monkeypatch.setattr(local_manager, "scan_candidates", fail)
    monkeypatch.setattr(local_manager, "list_subdirectories", fail)

    install = VersionManager(config, local_manager).resolve_install()

    assert install.name == "Proton 8.0"
    assert install.kind == STABLE


def test_version_override_accepts_full_directory_name(make_proton, make_config):
    make_proton("Proton - Experimental")
    make_proton("GE-Proton9-20")

    manager = VersionManager(make_config(version="Proton - Experimental"))
    assert manager.resolve_install().kind == EXPERIMENTAL

    custom = VersionManager(make_config(version="GE-Proton9-20")).resolve_install()
    assert custom.kind == CUSTOM


def test_version_override_with_search_path(tmp_path, make_proton, make_config):
    listed = make_proton("Proton 7.0", common=tmp_path / "custom")
    config = make_config(version="7.0", search_path=(listed,))

    assert VersionManager(config).resolve_install().path == listed


def test_missing_override_raises(make_proton, make_config):
    make_proton("Proton 9.0")

    with pytest.raises(VersionNotFoundError):
        VersionManager(make_config(version="6.3")).resolve_install()


def test_resolve_binary_from_install(make_proton, make_config):
    install_dir = make_proton("Proton 9.0")

    binary = VersionManager(make_config()).resolve_binary()

    assert binary == install_dir / "proton"


def test_resolve_binary_not_executable(make_proton, make_config):
    make_proton("Proton 9.0", executable=False)

    with pytest.raises(BinaryNotExecutableError):
        VersionManager(make_config()).resolve_binary()


def test_resolve_binary_custom_name_missing(make_proton, make_config):
    make_proton("Proton 9.0")

    with pytest.raises(BinaryNotExecutableError):
        VersionManager(make_config(binary_name="proton-custom")).resolve_binary()


def test_binary_path_override_skips_resolution(tmp_path, make_config, monkeypatch):
    binary = tmp_path / "my-proton"
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    binary.chmod(0o755)
    manager = VersionManager(make_config(binary_path=binary))

    def fail():
        raise AssertionError("binary override must not resolve an install")

    monkeypatch.setattr(manager, "resolve_install", fail)

    assert manager.resolve_binary() == binary
