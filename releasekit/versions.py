"""Replace ``{{versions.<package>}}`` placeholders with versions from a Cargo workspace."""

from __future__ import annotations

import argparse
import json
import os
import re
import subprocess
import sys
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

VERSIONS_REGEX = re.compile(r"\{\{versions\.([\w_-]+)\}\}")


def replace_versions_in_string(s: str, versions: Mapping[str, str]) -> tuple[str, int]:
    """Substitute known package versions in ``s``; return (new text, replacement count)."""
    count = 0

    def _substitute(match: re.Match[str]) -> str:
        nonlocal count
        version = versions.get(match[1])
        if version is None:
            return match[0]
        count += 1
        return version

    return VERSIONS_REGEX.sub(_substitute, s), count


def replace_versions_in_file(path: str | Path, versions: Mapping[str, str]) -> int:
    """Replace placeholders in the file in place; return how many were replaced."""
    path = Path(path)
    contents = path.read_text(encoding="utf-8")
    replaced, count = replace_versions_in_string(contents, versions)
    if count > 0:
        path.write_text(replaced, encoding="utf-8")
    return count


def collect_versions_from_cargo_toml(manifest_path: str | Path) -> dict[str, str]:
    """Return package name to version for every package ``cargo metadata`` reports."""
    command = [
        "cargo",
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(manifest_path),
    ]
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as err:
        raise RuntimeError(f"failed to execute 'cargo metadata': {err}") from err
    if result.returncode != 0:
        raise RuntimeError(f"failed to execute 'cargo metadata': {result.stderr.strip()}")
    try:
        metadata = json.loads(result.stdout)
        return {package["name"]: str(package["version"]) for package in metadata["packages"]}
    except (ValueError, KeyError, TypeError) as err:
        raise RuntimeError("failed to parse 'cargo metadata' output") from err


def _walk_files(root: Path) -> Iterator[Path]:
    if root.is_file():
        yield root
        return
    for directory, subdirs, files in os.walk(root):
        subdirs.sort()
        for name in sorted(files):
            candidate = Path(directory) / name
            if candidate.is_file():
                yield candidate


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="versions-replacer",
        description=(
            "Replace variables like '{{versions.fuels}}' with correct versions "
            "from Cargo.toml."
        ),
    )
    parser.add_argument("path", type=Path, help="path to directory with files containing variables")
    parser.add_argument(
        "--manifest-path", type=Path, required=True, help="path to Cargo.toml with versions"
    )
    parser.add_argument(
        "--filename-regex",
        type=re.compile,
        default=None,
        help=r'regex to filter filenames (example: "\.md$")',
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Replace version placeholders under a path; return the exit status."""
    args = _parse_args(argv)
    try:
        versions = collect_versions_from_cargo_toml(args.manifest_path)
    except RuntimeError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    replacements: list[int] = []
    for file in _walk_files(args.path):
        if args.filename_regex is not None and not args.filename_regex.search(file.name):
            continue
        try:
            count = replace_versions_in_file(file, versions)
        except (OSError, UnicodeDecodeError) as err:
            print(f"Error: failed to replace versions in {str(file)!r}: {err}", file=sys.stderr)
            return 1
        if count > 0:
            replacements.append(count)

    print(f"replaced {sum(replacements)} variables across {len(replacements)} files")
    return 0


if __name__ == "__main__":
    sys.exit(main())