"""GitHub REST and GraphQL client that gathers changelog information."""

from __future__ import annotations

import re
import sys
from typing import Any

import requests

from releasekit.changelog import ChangelogInfo, capitalize

_IGNORED_AUTHOR = "fuel-service-user"

_BRANCHES_QUERY = """
    query($owner: String!, $repo: String!, $query: String!) {
        repository(owner: $owner, name: $repo) {
            refs(refPrefix: "refs/heads/", query: $query, first: 100) {
                nodes {
                    name
                }
            }
        }
    }
"""

_BREAKING_CHANGES_RE = re.compile(r"# Breaking Changes\s*(.*)", re.DOTALL)
_RELEASE_NOTES_RE = re.compile(r"In this release, we:\s*(.*)", re.DOTALL)


class GitHubError(Exception):
    """Raised when GitHub cannot provide the requested information."""


def _section_after(pattern: re.Pattern[str], body: str) -> str:
    match = pattern.search(body)
    if match is None:
        return ""
    return match.group(1).split("\n# ", 1)[0].strip()


def changelog_info_from_pr(pr: dict[str, Any]) -> ChangelogInfo:
    """Build a changelog entry from a pull request as returned by the REST API."""
    title = pr.get("title") or ""
    pieces = title.split(":")
    pr_type = pieces[0]
    is_breaking = "!" in title
    description = pieces[1].strip() if len(pieces) > 1 else ""
    number = pr.get("number")
    author = (pr.get("user") or {}).get("login") or ""
    url = pr.get("html_url") or ""
    body = pr.get("body") or ""

    bullet_point = f"- [#{number}]({url}) - {description}, by @{author}"
    breaking_changes = _section_after(_BREAKING_CHANGES_RE, body)
    release_notes = _section_after(_RELEASE_NOTES_RE, body)
    migration_note = (
        f"### [{number} - {capitalize(description)}]({url})\n\n{breaking_changes}"
    )

    return ChangelogInfo(
        is_breaking=is_breaking,
        pr_type=pr_type,
        bullet_point=bullet_point,
        migration_note=migration_note,
        release_notes=release_notes,
    )


class GitHubClient:
    """Talks to GitHub with a personal access token."""

    API_URL = "https://api.github.com"

    def __init__(self, token: str) -> None:
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
            }
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._session.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.API_URL}{path}"
        try:
            response = self._session.request(method, url, **kwargs)
        except requests.RequestException as err:
            raise GitHubError(f"request to {url} failed: {err}") from err
        if not response.ok:
            raise GitHubError(
                f"GitHub responded with {response.status_code} for {url}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as err:
            raise GitHubError(f"invalid JSON from {url}") from err

    def get_pr_for_commit(self, owner: str, repo: str, commit_sha: str) -> dict[str, Any]:
        """Return the first pull request associated with a commit."""
        pulls = self._request("GET", f"/repos/{owner}/{repo}/commits/{commit_sha}/pulls")
        if not pulls:
            raise GitHubError("No PR found for this commit SHA")
        pr = pulls[0]
        if (pr.get("user") or {}).get("login") == _IGNORED_AUTHOR:
            raise GitHubError(f"PR from {_IGNORED_AUTHOR} ignored")
        return pr

    def search_branches(self, owner: str, repo: str, query: str) -> list[str]:
        """Return names of branches matching ``query`` (at most 100)."""
        payload = {
            "query": _BRANCHES_QUERY,
            "variables": {"owner": owner, "repo": repo, "query": query},
        }
        response = self._request("POST", "/graphql", json=payload)
        try:
            nodes = response["data"]["repository"]["refs"]["nodes"]
        except (KeyError, TypeError):
            nodes = None
        if not isinstance(nodes, list):
            raise GitHubError("Could not parse branch nodes from response")
        return [
            node["name"]
            for node in nodes
            if isinstance(node, dict) and isinstance(node.get("name"), str)
        ]

    def get_releases(self, owner: str, repo: str) -> list[str]:
        """Return the tags of the repository's releases (first page of 100)."""
        releases = self._request(
            "GET", f"/repos/{owner}/{repo}/releases", params={"per_page": 100}
        )
        return [release["tag_name"] for release in releases]

    def build_changelog_info(self, owner: str, repo: str, commit_sha: str) -> ChangelogInfo:
        """Build the changelog entry for the pull request behind a commit."""
        return changelog_info_from_pr(self.get_pr_for_commit(owner, repo, commit_sha))

    def get_changelog_infos(
        self, owner: str, repo: str, base: str, head: str
    ) -> list[ChangelogInfo]:
        """Return entries for commits between ``base`` and ``head``, sorted by type."""
        comparison = self._request("GET", f"/repos/{owner}/{repo}/compare/{base}...{head}")
        changelogs: list[ChangelogInfo] = []
        for commit in comparison.get("commits", []):
            sha = commit["sha"]
            try:
                changelogs.append(self.build_changelog_info(owner, repo, sha))
            except GitHubError as err:
                print(f"Error retrieving PR for commit {sha}: {err}", file=sys.stderr)
        return sorted(changelogs, key=lambda info: info.pr_type)

    def get_latest_release_tag(self, owner: str, repo: str) -> str:
        """Return the tag of the latest published release."""
        release = self._request("GET", f"/repos/{owner}/{repo}/releases/latest")
        return release["tag_name"]