import json
import subprocess
from unittest import mock

import pytest

from releasekit.versions import (
    collect_versions_from_cargo_toml,
    main,
    replace_versions_in_file,
    replace_versions_in_string,
)


@pytest.fixture
def versions():
    return {"fuels": "0.47.0", "fuel-types": "0.35.3"}


def _metadata_result(packages, returncode=0, stderr=""):
    return subprocess.CompletedProcess(
        args=["cargo", "metadata"],
        returncode=returncode,
        stdout=json.dumps({"packages": packages}),
        stderr=stderr,
    )


def test_valid_replacements(versions):
    s = (
        "docs.rs/fuels/{{versions.fuels}}/fuels\n"
        "docs.rs/fuel-types/{{versions.fuel-types}}/fuel-types"
    )
    replaced, count = replace_versions_in_string(s, versions)
    assert replaced == (
        f"docs.rs/fuels/{versions['fuels']}/fuels\n"
        f"docs.rs/fuel-types/{versions['fuel-types']}/fuel-types"
    )
    assert count == 2


def test_invalid_replacement(versions):
    s = "```rust,ignore\n{{#include ../../../examples/contracts/src/lib.rs:deployed_contracts}}\n```"
    replaced, count = replace_versions_in_string(s, versions)
    assert replaced == s
    assert count == 0


def test_invalid_package_name(versions):
    s = "docs.rs/fuels-wrong-name/{{versions.fuels-wrong-name}}/fuels-wrong-name"
    replaced, count = replace_versions_in_string(s, versions)
    assert replaced == s
    assert count == 0


def test_replace_in_file_writes_back(tmp_path, versions):
    target = tmp_path / "page.md"
    target.write_text("fuels = {{versions.fuels}}\n", encoding="utf-8")
    assert replace_versions_in_file(target, versions) == 1
    assert target.read_text(encoding="utf-8") == "fuels = 0.47.0\n"


def test_replace_in_file_leaves_unmatched_file(tmp_path, versions):
    target = tmp_path / "page.md"
    original = "nothing {{versions.unknown}} here\n"
    target.write_text(original, encoding="utf-8")
    assert replace_versions_in_file(target, versions) == 0
    assert target.read_text(encoding="utf-8") == original


def test_replace_in_missing_file_raises(tmp_path, versions):
    with pytest.raises(FileNotFoundError):
        replace_versions_in_file(tmp_path / "absent.md", versions)


def test_collect_versions_from_metadata(tmp_path):
    packages = [
        {"name": "fuels", "version": "0.75.0"},
        {"name": "fuel-core", "version": "0.44.0"},
    ]
    with mock.patch(
        "releasekit.versions.subprocess.run", return_value=_metadata_result(packages)
    ) as run:
        result = collect_versions_from_cargo_toml(tmp_path / "Cargo.toml")
    assert result == {"fuels": "0.75.0", "fuel-core": "0.44.0"}
    command = run.call_args.args[0]
    assert command[:2] == ["cargo", "metadata"]
    assert str(tmp_path / "Cargo.toml") in command


def test_collect_versions_failure_raises(tmp_path):
    with mock.patch(
        "releasekit.versions.subprocess.run",
        return_value=_metadata_result([], returncode=101, stderr="boom"),
    ):
        with pytest.raises(RuntimeError, match="failed to execute 'cargo metadata'"):
            collect_versions_from_cargo_toml(tmp_path / "Cargo.toml")


def test_collect_versions_missing_cargo_raises(tmp_path):
    with mock.patch(
        "releasekit.versions.subprocess.run", side_effect=FileNotFoundError("cargo")
    ):
        with pytest.raises(RuntimeError, match="cargo metadata"):
            collect_versions_from_cargo_toml(tmp_path / "Cargo.toml")


def test_main_replaces_filtered_files(tmp_path, capsys):
    docs = tmp_path / "docs"
    (docs / "sub").mkdir(parents=True)
    md_a = docs / "a.md"
    md_b = docs / "sub" / "b.md"
    txt = docs / "c.txt"
    md_a.write_text("{{versions.fuels}} and {{versions.fuels}}", encoding="utf-8")
    md_b.write_text("{{versions.fuels}}", encoding="utf-8")
    txt.write_text("{{versions.fuels}}", encoding="utf-8")
    packages = [{"name": "fuels", "version": "0.75.0"}]
    with mock.patch(
        "releasekit.versions.subprocess.run", return_value=_metadata_result(packages)
    ):
        status = main(
            [
                str(docs),
                "--manifest-path",
                str(tmp_path / "Cargo.toml"),
                "--filename-regex",
                r"\.md$",
            ]
        )
    assert status == 0
    assert md_a.read_text(encoding="utf-8") == "0.75.0 and 0.75.0"
    assert md_b.read_text(encoding="utf-8") == "0.75.0"
    assert txt.read_text(encoding="utf-8") == "{{versions.fuels}}"
    assert "replaced 3 variables across 2 files" in capsys.readouterr().out


def test_main_reports_metadata_failure(tmp_path):
    with mock.patch(
        "releasekit.versions.subprocess.run",
        return_value=_metadata_result([], returncode=1, stderr="bad manifest"),
    ):
        status = main([str(tmp_path), "--manifest-path", str(tmp_path / "Cargo.toml")])
    assert status == 1