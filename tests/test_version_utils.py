"""Tests for proton_launcher.core.version_utils."""

import pytest

from proton_launcher.core import version_utils
from proton_launcher.core.version_utils import EXPERIMENTAL, STABLE


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Proton 8.0", STABLE),
        ("Proton 9.0.3", STABLE),
        ("Proton 10.12", STABLE),
        ("Proton - Experimental", EXPERIMENTAL),
        ("Proton Experimental", EXPERIMENTAL),
        ("Proton 9.0 Experimental", EXPERIMENTAL),
        ("Proton 9.0 (Beta)", None),
        ("Proton 9", None),
        ("Proton Hotfix", None),
        ("Proton EasyAntiCheat Runtime", None),
        ("GE-Proton9-20", None),
        ("Half-Life 2", None),
        ("proton 8.0", None),
    ],
)
def test_classify_name(name, expected):
    assert version_utils.classify_name(name) == expected


def test_classify_name_custom_prefix():
    assert version_utils.classify_name("Wine 9.1", name_prefix="Wine") == STABLE
    assert version_utils.classify_name("Proton 9.1", name_prefix="Wine") is None


def test_parse_version_pads_missing_parts():
    assert version_utils.parse_version("Proton 8.0") == (8, 0, 0)
    assert version_utils.parse_version("Proton 9.0.3") == (9, 0, 3)
    assert version_utils.parse_version("Proton - Experimental") == ()


def test_selection_key_ranks_experimental_above_stable():
    stable = version_utils.selection_key(STABLE, (99, 0, 0), "Proton 99.0")
    experimental = version_utils.selection_key(EXPERIMENTAL, (), "Proton - Experimental")
    assert experimental > stable


def test_looks_like_bare_version():
    assert version_utils.looks_like_bare_version("8.0")
    assert version_utils.looks_like_bare_version(" 9.0.3 ")
    assert not version_utils.looks_like_bare_version("Proton 8.0")
    assert not version_utils.looks_like_bare_version("Experimental")


def test_selection_key_orders_numerically_not_lexically():
    names = ["Proton 9.0", "Proton 10.0", "Proton 9.0.3", "Proton 7.0"]
    ranked = sorted(
        names,
        key=lambda n: version_utils.selection_key(STABLE, version_utils.parse_version(n), n),
        reverse=True,
    )
    assert ranked == ["Proton 10.0", "Proton 9.0.3", "Proton 9.0", "Proton 7.0"]


def test_selection_key_between_experimentals():
    unversioned = version_utils.selection_key(EXPERIMENTAL, (), "Proton - Experimental")
    versioned = version_utils.selection_key(EXPERIMENTAL, (9, 0, 0), "Proton 9.0 Experimental")
    assert versioned > unversioned
