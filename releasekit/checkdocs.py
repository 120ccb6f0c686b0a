"""Check that documentation anchors, includes and Markdown pages are consistent."""

from __future__ import annotations

import argparse
import re
import subprocess
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

_INCLUDE_RE = re.compile(
    r"^(\S+):(\d+):\s*\{\{\s*#include\s*(\S+?)\s*(?::\s*(\S+)\s*)?\}\}"
)
_ANCHOR_START_RE = re.compile(
    r"^(.+):(\d+):\s*(?:/{2,}|/\*)\s*ANCHOR\s*:\s*([\w_-]+)\s*(?:\*/)?"
)
_ANCHOR_END_RE = re.compile(
    r"^(.+):(\d+):\s*(?:/{2,}|/\*)\s*ANCHOR_END\s*:\s*([\w_-]+)\s*(?:\*/)?"
)
_MD_LINK_RE = re.compile(r"\((.*\.md)\)")


class CheckDocsError(Exception):
    """A problem found in the documentation, or a failure while looking for one."""


@dataclass(frozen=True)
class Anchor:
    """An ``ANCHOR`` or ``ANCHOR_END`` marker found in a source file."""

    line_no: int
    name: str
    file: Path


@dataclass(frozen=True)
class Include:
    """An ``{{#include ...}}`` directive found in a documentation file."""

    anchor_name: str
    anchor_file: Path
    include_file: Path
    line_no: int


def _canonical(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except OSError as err:
        raise CheckDocsError(f"could not canonicalize {str(path)!r}: {err}") from err


def report_errors(error_type: str, errors: Sequence[Exception]) -> None:
    """Print the errors of one kind to standard error, if there are any."""
    if errors:
        print(f"\nInvalid {error_type} detected!\n", file=sys.stderr)
        for error in errors:
            print(f"{error}\n", file=sys.stderr)


def report_warnings(warnings: Sequence[Exception]) -> None:
    """Print warnings to standard error, if there are any."""
    if warnings:
        print("\nWarnings detected!\n", file=sys.stderr)
        for warning in warnings:
            print(f"{warning}\n", file=sys.stderr)


def validate_includes(
    includes: Iterable[Include], valid_anchors: Sequence[Anchor]
) -> tuple[list[CheckDocsError], list[CheckDocsError]]:
    """Match includes against anchors; return (errors, warnings about unused anchors)."""
    used: list[Anchor] = []
    errors: list[CheckDocsError] = []
    for include in includes:
        if not include.anchor_name:
            continue
        anchor = next(
            (
                anchor
                for anchor in valid_anchors
                if anchor.file == include.anchor_file
                and anchor.name == include.anchor_name
            ),
            None,
        )
        if anchor is None:
            errors.append(
                CheckDocsError(f"No anchor available to satisfy include {include!r}")
            )
        else:
            used.append(anchor)

    warnings = [
        CheckDocsError(f"Anchor unused: {anchor!r}!")
        for anchor in valid_anchors
        if anchor not in used
    ]
    return errors, warnings


def _parse_include_line(match: re.Match[str]) -> Include:
    include_file = _canonical(Path(match[1]))
    line_no = int(match[2])
    anchor_name = match[4] or ""
    the_path = include_file.parent / match[3]
    try:
        anchor_file = the_path.resolve(strict=True)
    except OSError as err:
        raise CheckDocsError(
            f"{str(the_path)!r} when canonicalized gives error {err!r}\n"
            f"include_file: {str(include_file)!r}"
        ) from err
    return Include(
        anchor_name=anchor_name,
        anchor_file=anchor_file,
        include_file=include_file,
        line_no=line_no,
    )


def parse_includes(text_w_includes: str) -> tuple[list[Include], list[CheckDocsError]]:
    """Parse ``grep`` output for include directives; return (includes, errors)."""
    includes: list[Include] = []
    errors: list[CheckDocsError] = []
    for line in text_w_includes.splitlines():
        match = _INCLUDE_RE.search(line)
        if match is None:
            continue
        try:
            includes.append(_parse_include_line(match))
        except CheckDocsError as err:
            errors.append(err)
    return includes, errors


def filter_valid_anchors(
    starts: Iterable[Anchor], ends: Sequence[Anchor]
) -> tuple[list[Anchor], list[CheckDocsError]]:
    """Pair each start anchor with its end; return (valid starts, errors)."""
    pairs: list[tuple[Anchor, Anchor]] = []
    errors: list[CheckDocsError] = []

    for start in starts:
        matches = [end for end in ends if end.name == start.name and end.file == start.file]
        if not matches:
            errors.append(
                CheckDocsError(f"Couldn't find a matching end anchor for {start!r}")
            )
            continue
        if len(matches) > 1:
            errors.append(
                CheckDocsError(
                    f"Found too many matching anchor ends for anchor: {start!r}. "
                    f"The matching ends are: {matches!r}"
                )
            )
            continue
        end = matches[0]
        problem = check_validity_of_anchor_pair(start, end)
        if problem is None:
            pairs.append((start, end))
        else:
            errors.append(problem)

    errors.extend(
        CheckDocsError(f"Missing anchor start for {unused!r}")
        for unused in filter_unused_ends(ends, pairs)
    )
    return [begin for begin, _ in pairs], errors


def filter_unused_ends(
    ends: Iterable[Anchor], pairs: Sequence[tuple[Anchor, Anchor]]
) -> list[Anchor]:
    """Return the end anchors that belong to none of the pairs."""
    used = [used_end for _, used_end in pairs]
    return [end for end in ends if end not in used]


def check_validity_of_anchor_pair(begin: Anchor, end: Anchor) -> CheckDocsError | None:
    """Return an error if the end anchor comes before its start, else ``None``."""
    if begin.line_no > end.line_no:
        return CheckDocsError(
            "The end of the anchor appears before the beginning. "
            f"End anchor: {end!r}. Begin anchor: {begin!r}"
        )
    return None


def _anchors_matching(pattern: re.Pattern[str], text: str) -> list[Anchor]:
    anchors = []
    for line in text.splitlines():
        match = pattern.search(line)
        if match is None:
            continue
        anchors.append(
            Anchor(line_no=int(match[2]), name=match[3], file=_canonical(Path(match[1])))
        )
    return anchors


def extract_starts_and_ends(text_w_anchors: str) -> tuple[list[Anchor], list[Anchor]]:
    """Parse ``grep`` output for anchor markers; return (starts, ends)."""
    return (
        _anchors_matching(_ANCHOR_START_RE, text_w_anchors),
        _anchors_matching(_ANCHOR_END_RE, text_w_anchors),
    )


def parse_md_files(text_w_files: str, path: str | Path) -> set[Path]:
    """Collect the Markdown files linked from summary lines, relative to ``path``."""
    files = set()
    for line in text_w_files.splitlines():
        match = _MD_LINK_RE.search(line)
        if match is not None:
            files.add(_canonical(Path(path) / match[1]))
    return files


def validate_md_files(
    md_files_summary: set[Path], md_files_in_src: str
) -> list[CheckDocsError]:
    """Report Markdown files (one path per line) that the summary does not list."""
    errors = []
    for line in md_files_in_src.splitlines():
        file = _canonical(Path(line))
        if file not in md_files_summary:
            errors.append(CheckDocsError(f"file `{file}` not in SUMMARY.md"))
    return errors


def _run(command: list[str], failure: str) -> str:
    try:
        result = subprocess.run(command, capture_output=True, check=False)
    except OSError as err:
        raise CheckDocsError(f"could not run `{command[0]}`: {err}") from err
    if result.returncode != 0:
        raise CheckDocsError(failure)
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as err:
        raise CheckDocsError(f"output of `{command[0]}` is not valid UTF-8") from err


def search_for_pattern(pattern: str, location: str | Path) -> str:
    """Run ``grep`` recursively and return its ``file:line:text`` output."""
    return _run(
        [
            "grep",
            "-H",
            "-n",
            "-r",
            "--binary-files=without-match",
            "--exclude-dir=check-docs",
            pattern,
            str(location),
        ],
        f"Failed running `grep` command for pattern '{pattern}'",
    )


def find_files(pattern: str, location: str | Path, exclude: str) -> str:
    """Run ``find`` for files named ``pattern`` but not ``exclude``."""
    return _run(
        ["find", str(location), "-type", "f", "-name", pattern, "!", "-name", exclude],
        f"Failed running `find` command for pattern {pattern}",
    )


def _check() -> bool:
    text_w_anchors = search_for_pattern("ANCHOR", ".")
    starts, ends = extract_starts_and_ends(text_w_anchors)
    valid_anchors, anchor_errors = filter_valid_anchors(starts, ends)

    text_mentioning_include = search_for_pattern("{{#include", ".")
    includes, include_path_errors = parse_includes(text_mentioning_include)
    include_errors, additional_warnings = validate_includes(includes, valid_anchors)

    text_with_md_files = search_for_pattern(".md", "./docs/src/SUMMARY.md")
    md_files_in_summary = parse_md_files(text_with_md_files, "./docs/src/")
    md_files_in_src = find_files("*.md", "./docs/src/", "SUMMARY.md")
    md_files_errors = validate_md_files(md_files_in_summary, md_files_in_src)

    report_errors("warning", additional_warnings)
    report_errors("include paths", include_path_errors)
    report_errors("anchors", anchor_errors)
    report_errors("includes", include_errors)
    report_errors("md files", md_files_errors)

    return not any(
        (
            anchor_errors,
            include_errors,
            include_path_errors,
            additional_warnings,
            md_files_errors,
        )
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Check the documentation under the current directory; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="check-docs",
        description="Check documentation anchors, includes and SUMMARY.md entries.",
    )
    parser.parse_args(argv)
    try:
        ok = _check()
    except CheckDocsError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    if not ok:
        print("Error: Finished with errors", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())