"""Changelog entries and their rendering as Markdown release notes."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

CATEGORIES = ("Features", "Fixes", "Chores")

_CATEGORY_BY_TYPE = {
    "feat": "Features",
    "fix": "Fixes",
    "chore": "Chores",
}


@dataclass(frozen=True)
class ChangelogInfo:
    """What a single merged pull request contributes to the changelog."""

    is_breaking: bool
    pr_type: str
    bullet_point: str
    migration_note: str
    release_notes: str


class GitHubPort(Protocol):
    """Source of changelog information for a repository."""

    def get_changelog_infos(
        self, owner: str, repo: str, base: str, head: str
    ) -> list[ChangelogInfo]:
        """Return changelog infos for the commits between ``base`` and ``head``."""
        ...

    def get_latest_release_tag(self, owner: str, repo: str) -> str:
        """Return the tag of the latest release of the repository."""
        ...


def category_from_pr_type(pr_type: str) -> str | None:
    """Map a conventional-commit type such as ``feat!`` to its section title."""
    return _CATEGORY_BY_TYPE.get(pr_type.rstrip("!"))


def _section(title: str, items: list[str]) -> str:
    if not items:
        return ""
    return f"# {title}\n\n" + "\n\n".join(items) + "\n\n"


def generate_changelog(changelogs: Iterable[ChangelogInfo]) -> str:
    """Render the given entries as a Markdown changelog."""
    non_breaking: dict[str, list[str]] = defaultdict(list)
    breaking: dict[str, list[str]] = defaultdict(list)
    migration_notes: list[str] = []
    summary: set[str] = set()

    for changelog in changelogs:
        if changelog.release_notes:
            summary.add(changelog.release_notes)
        category = category_from_pr_type(changelog.pr_type)
        if category is None:
            continue
        if changelog.is_breaking:
            breaking[category].append(changelog.bullet_point)
            migration_notes.append(changelog.migration_note)
        else:
            non_breaking[category].append(changelog.bullet_point)

    parts: list[str] = []

    if summary:
        parts.append("# Summary\n\nIn this release, we:\n")
        parts.extend(f"{line}\n" for line in sorted(summary))
        parts.append("\n")

    if breaking:
        parts.append("# Breaking\n\n")
        for category in CATEGORIES:
            items = breaking.get(category)
            if items:
                parts.append(f"- {category}\n")
                parts.append("\n".join(f"\t{item}" for item in items) + "\n\n")

    for category in CATEGORIES:
        parts.append(_section(category, non_breaking.get(category, [])))

    parts.append(_section("Migration Notes", migration_notes))

    return "".join(parts).strip()


def capitalize(s: str) -> str:
    """Upper-case the first character of ``s`` and leave the rest unchanged."""
    if not s:
        return ""
    return s[0].upper() + s[1:]