import pytest

from releasekit.changelog import (
    ChangelogInfo,
    capitalize,
    category_from_pr_type,
    generate_changelog,
)


def test_generate_changelog_exact():
    changelog1 = ChangelogInfo(
        is_breaking=False,
        pr_type="feat",
        bullet_point="- [#1](http://example.com) - Added feature, by @alice",
        migration_note="",
        release_notes="Added feature",
    )
    changelog2 = ChangelogInfo(
        is_breaking=True,
        pr_type="fix!",
        bullet_point="- [#2](http://example.com) - Fixed bug, by @bob",
        migration_note="### [2 - Fixed bug](http://example.com)\n\nCritical fix",
        release_notes="Fixed bug",
    )
    changelog3 = ChangelogInfo(
        is_breaking=False,
        pr_type="chore",
        bullet_point="- [#3](http://example.com) - Update dependencies, by @carol",
        migration_note="",
        release_notes="",
    )

    markdown = generate_changelog([changelog1, changelog2, changelog3])

    expected = (
        "# Summary\n"
        "\n"
        "In this release, we:\n"
        "Added feature\n"
        "Fixed bug\n"
        "\n"
        "# Breaking\n"
        "\n"
        "- Fixes\n"
        "\t- [#2](http://example.com) - Fixed bug, by @bob\n"
        "\n"
        "# Features\n"
        "\n"
        "- [#1](http://example.com) - Added feature, by @alice\n"
        "\n"
        "# Chores\n"
        "\n"
        "- [#3](http://example.com) - Update dependencies, by @carol\n"
        "\n"
        "# Migration Notes\n"
        "\n"
        "### [2 - Fixed bug](http://example.com)\n"
        "\n"
        "Critical fix"
    )
    assert markdown == expected


def test_empty_changelog_is_empty_string():
    assert generate_changelog([]) == ""


def test_unknown_type_is_left_out_but_summary_kept():
    info = ChangelogInfo(
        is_breaking=False,
        pr_type="docs",
        bullet_point="- docs bullet",
        migration_note="",
        release_notes="Improved docs",
    )
    markdown = generate_changelog([info])
    assert markdown == "# Summary\n\nIn this release, we:\nImproved docs"
    assert "- docs bullet" not in markdown


def test_summary_lines_deduplicated_and_sorted():
    infos = [
        ChangelogInfo(False, "misc", "", "", "b note"),
        ChangelogInfo(False, "misc", "", "", "a note"),
        ChangelogInfo(False, "misc", "", "", "b note"),
    ]
    assert generate_changelog(infos) == "# Summary\n\nIn this release, we:\na note\nb note"


def test_breaking_items_grouped_in_category_order():
    infos = [
        ChangelogInfo(True, "chore!", "- c", "note c", ""),
        ChangelogInfo(True, "feat!", "- f1", "note f1", ""),
        ChangelogInfo(True, "feat!", "- f2", "note f2", ""),
    ]
    markdown = generate_changelog(infos)
    assert markdown.startswith("# Breaking\n\n- Features\n\t- f1\n\t- f2\n\n- Chores\n\t- c")
    assert markdown.endswith("# Migration Notes\n\nnote c\n\nnote f1\n\nnote f2")


@pytest.mark.parametrize(
    ("pr_type", "expected"),
    [
        ("feat", "Features"),
        ("fix", "Fixes"),
        ("chore", "Chores"),
        ("feat!", "Features"),
        ("fix!!", "Fixes"),
        ("docs", None),
        ("", None),
    ],
)
def test_category_from_pr_type(pr_type, expected):
    assert category_from_pr_type(pr_type) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", ""),
        ("fixed bug", "Fixed bug"),
        ("Already", "Already"),
        ("x", "X"),
    ],
)
def test_capitalize(text, expected):
    assert capitalize(text) == expected