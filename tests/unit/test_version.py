"""Unit tests for version management."""

import tomllib
from pathlib import Path

from clusteraddon import __version__


def test_version_format():
    """Test version follows semantic versioning format."""
    parts = __version__.split(".")
    assert len(parts) >= 3, f"Version {__version__} should have at least 3 parts"

    major, minor, patch_full = parts[0], parts[1], parts[2]
    patch = patch_full.split("-")[0].split("+")[0]

    assert major.isdigit(), f"Major version '{major}' should be numeric"
    assert minor.isdigit(), f"Minor version '{minor}' should be numeric"
    if "dev" in patch:
        patch_base = patch.split("dev")[0].rstrip(".")
        assert patch_base == "" or patch_base.isdigit()
    else:
        assert patch.isdigit(), f"Patch version '{patch}' should be numeric"


def test_version_matches_pyproject():
    """Test version matches pyproject.toml."""
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    with open(pyproject_path, "rb") as f:
        pyproject_data = tomllib.load(f)

    expected_version = pyproject_data["project"]["version"]

    assert __version__ == expected_version or __version__.startswith(
        expected_version
    ), f"Version {__version__} should match pyproject.toml version {expected_version}"
