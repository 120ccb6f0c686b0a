# releasekit

Small tools for keeping a Rust workspace's release material in order:

- **Documentation checks** for mdBook-style `ANCHOR` / `ANCHOR_END` markers,
  `{{#include ...}}` directives and `SUMMARY.md` coverage
  (`releasekit.checkdocs`).
- **Version placeholders**: replace `{{versions.<package>}}` in text files
  with the versions of the workspace's packages (`releasekit.versions`).
- **fuel-core version pinning**: record or verify the `fuel-core` version
  declared in a workspace `Cargo.toml` (`releasekit.fuelcore`).
- **Changelog generation** from the pull requests merged between two refs
  (`releasekit.changelog`, `releasekit.github`).

## Installation

```
pip install releasekit
```

Python 3.11 or later is needed. The documentation checker runs `grep` and
`find`, and version collection runs `cargo metadata`, so those programs must be
on `PATH`.

## Checking documentation

Run from the root of the repository:

```
releasekit-check-docs
```

It searches the tree with `grep` (skipping directories named `check-docs`)
and checks that:

- every `ANCHOR: name` has exactly one matching `ANCHOR_END: name` in the same
  file, at or after it, and every `ANCHOR_END` has its start;
- every `{{#include file:anchor}}` points at an existing file and, when an
  anchor is named, at a valid anchor in that file;
- every valid anchor is used by some include;
- every Markdown file under `docs/src/` is listed in `docs/src/SUMMARY.md`.

Problems are printed to standard error, grouped by kind, and the command exits
with status 1 (unused anchors count as problems too). It exits with 0 when
everything is consistent.

The same steps are available from Python. Failures to run `grep` or `find`, or
paths that cannot be resolved, raise `CheckDocsError`; problems found in the
documentation are returned as lists of `CheckDocsError`:

```python
from releasekit.checkdocs import (
    extract_starts_and_ends,
    filter_valid_anchors,
    parse_includes,
    search_for_pattern,
    validate_includes,
)

starts, ends = extract_starts_and_ends(search_for_pattern("ANCHOR", "."))
anchors, anchor_errors = filter_valid_anchors(starts, ends)
includes, path_errors = parse_includes(search_for_pattern("{{#include", "."))
include_errors, unused_anchor_warnings = validate_includes(includes, anchors)
```

`Anchor` and `Include` are frozen dataclasses. `parse_md_files`,
`validate_md_files`, `find_files`, `report_errors` and `report_warnings` cover
the remaining steps.

## Replacing version placeholders

```
releasekit-versions docs/ --manifest-path Cargo.toml --filename-regex '\.md$'
```

Package versions are taken from `cargo metadata` for the given manifest. Every
file under the given path (optionally only those whose file name matches
`--filename-regex`) has each `{{versions.<package>}}` replaced with that
package's version, and is rewritten only if something was replaced.
Placeholders naming an unknown package are left untouched. The command prints
`replaced N variables across M files`.

```python
from releasekit.versions import replace_versions_in_string

text, count = replace_versions_in_string(
    "docs.rs/fuels/{{versions.fuels}}/fuels", {"fuels": "0.47.0"}
)
# text == "docs.rs/fuels/0.47.0/fuels", count == 1
```

`replace_versions_in_file(path, versions)` does the same for a file in place
and returns the count; `collect_versions_from_cargo_toml(manifest_path)`
returns the name-to-version mapping.

## Pinning the fuel-core version

```
releasekit-fuel-core-version --manifest-path Cargo.toml write
releasekit-fuel-core-version --manifest-path Cargo.toml verify
```

The version is read from `[workspace.dependencies] fuel-core`, given either as
a plain string or as a table with a `version` key. `write` stores it in
`scripts/fuel-core-version/version.rs` next to the manifest as
`Version::new(major, minor, patch)`. `verify` reads that file back and exits
with status 1 when the stored version and the manifest disagree; otherwise it
prints that they match.

From Python: `read_fuel_core_version`, `find_dependency_version`,
`write_version_to_file`, `read_supported_version`, `get_version_file_path` and
`verify_version` (which raises `VersionMismatchError`).

## Generating a changelog

```python
from releasekit.changelog import generate_changelog
from releasekit.github import GitHubClient

with GitHubClient(token="token") as client:
    base = client.get_latest_release_tag("owner", "repo")
    infos = client.get_changelog_infos("owner", "repo", base, "master")
print(generate_changelog(infos))
```

Pull request titles are expected in the form `type: description`; a `!`
anywhere in the title marks a breaking change. `feat`, `fix` and `chore` are
grouped under Features, Fixes and Chores; other types only contribute to the
summary. The text after `In this release, we:` in a pull request body feeds the
summary, and the text after `# Breaking Changes` feeds the migration notes.
Commits without a pull request, or whose pull request was opened by
`fuel-service-user`, are reported on standard error and skipped. GitHub
failures raise `GitHubError`.

`GitHubClient` also offers `search_branches`, `get_releases`,
`get_pr_for_commit` and `build_changelog_info`; `changelog_info_from_pr` builds
a `ChangelogInfo` from a pull request as returned by the REST API. Anything
with `get_changelog_infos` and `get_latest_release_tag` satisfies the
`GitHubPort` protocol.

## What is not included

Changelog generation is a library only: there is no command that picks refs,
asks for input or writes a changelog file. Call the functions above from your
own script.

## Running the tests

```
pip install "releasekit[test]"
pytest
```