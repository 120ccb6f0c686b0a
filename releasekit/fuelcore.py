"""Record and verify the fuel-core version a Cargo workspace depends on."""

from __future__ import annotations

import argparse
import re
import sys
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import semver

_VERSION_FILE = "scripts/fuel-core-version/version.rs"
_VERSION_NEW_RE = re.compile(r"Version::new\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")


class VersionMismatchError(Exception):
    """The recorded fuel-core version differs from the one in the manifest."""


def find_dependency_version(toml: Mapping[str, Any]) -> str | None:
    """Return the ``fuel-core`` version under ``[workspace.dependencies]``, if any."""
    workspace = toml.get("workspace")
    if not isinstance(workspace, Mapping):
        return None
    dependencies = workspace.get("dependencies")
    if not isinstance(dependencies, Mapping):
        return None
    dependency = dependencies.get("fuel-core")
    if isinstance(dependency, str):
        return dependency
    if isinstance(dependency, Mapping):
        version = dependency.get("version")
        return version if isinstance(version, str) else None
    return None


def read_fuel_core_version(path: str | Path) -> semver.Version:
    """Read the workspace's fuel-core dependency version from a Cargo.toml."""
    with open(path, "rb") as manifest:
        cargo_toml = tomllib.load(manifest)
    version = find_dependency_version(cargo_toml)
    if version is None:
        raise ValueError("could not find fuel-core version")
    return semver.Version.parse(version)


def write_version_to_file(version: semver.Version, version_file_path: str | Path) -> None:
    """Write ``version`` as a ``Version::new(major, minor, patch)`` expression."""
    text = f"Version::new({version.major}, {version.minor}, {version.patch})"
    Path(version_file_path).write_text(text, encoding="utf-8")


def read_supported_version(version_file_path: str | Path) -> semver.Version:
    """Read back the version recorded by :func:`write_version_to_file`."""
    text = Path(version_file_path).read_text(encoding="utf-8")
    match = _VERSION_NEW_RE.search(text)
    if match is None:
        raise ValueError(f"no Version::new(..) expression in {str(version_file_path)!r}")
    major, minor, patch = (int(group) for group in match.groups())
    return semver.Version(major, minor, patch)


def get_version_file_path(manifest_path: str | Path) -> Path:
    """Return where the version file lives for the given workspace manifest."""
    manifest_path = Path(manifest_path)
    if not manifest_path.name:
        raise ValueError("Invalid manifest path")
    return manifest_path.parent / _VERSION_FILE


def verify_version(version: semver.Version, supported: semver.Version) -> None:
    """Raise :class:`VersionMismatchError` unless both versions are equal."""
    if version != supported:
        raise VersionMismatchError(
            f"fuel_core version in version.rs ({supported}) doesn't match "
            f"one in Cargo.toml ({version})"
        )
    print(f"fuel_core versions in versions.rs and Cargo.toml match ({version})")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fuel-core-version",
        description="Write or verify the recorded fuel-core version.",
    )
    parser.add_argument("--manifest-path", type=Path, required=True)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("write", help="record the version found in Cargo.toml")
    commands.add_parser("verify", help="check the recorded version against Cargo.toml")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``write`` or ``verify`` command; return the exit status."""
    args = _parse_args(argv)
    try:
        version = read_fuel_core_version(args.manifest_path)
        version_file_path = get_version_file_path(args.manifest_path)
        if args.command == "write":
            write_version_to_file(version, version_file_path)
        else:
            verify_version(version, read_supported_version(version_file_path))
    except (OSError, ValueError, VersionMismatchError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())