"""Tests for ``specresolve resolve``.

Verifies:
    - Successful resolution prints every target's specifications (exit 0).
    - ``--json`` emits machine-readable output.
    - An existing lockfile pins versions unless ``--update`` or ``--no-lock``.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from specresolve.cli.main import cli


def _add_alamofire_release(manifest: Path, version: str) -> None:
    data = yaml.safe_load(manifest.read_text(encoding="utf-8"))
    data["sources"]["Alamofire"].append({"version": version, "platforms": {"ios": "10.0"}})
    manifest.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


def _resolved_json(runner: CliRunner, *args: str) -> dict:
    result = runner.invoke(cli, ["resolve", *args, "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestResolveOutput:
    def test_success(self, runner: CliRunner, project_manifest: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(project_manifest)])
        assert result.exit_code == 0
        assert "Kingfisher" in result.output
        assert "Alamofire" in result.output
        assert "2 packages resolved for 1 targets" in result.output

    def test_json(self, runner: CliRunner, project_manifest: Path) -> None:
        data = _resolved_json(runner, str(project_manifest))
        assert data == {
            "App": {
                "platform": "iOS 12.0",
                "specifications": [
                    {"name": "Alamofire", "version": "5.0.0", "head": False},
                    {"name": "Kingfisher", "version": "5.15.0", "head": False},
                ],
            }
        }

    def test_missing_manifest_is_usage_error(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 2

    def test_verbose(self, runner: CliRunner, project_manifest: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(project_manifest), "--verbose"])
        assert result.exit_code == 0


class TestResolveWithLockfile:
    def test_lockfile_pins_versions(self, runner: CliRunner, project_manifest: Path) -> None:
        assert runner.invoke(cli, ["lock", str(project_manifest)]).exit_code == 0
        _add_alamofire_release(project_manifest, "5.1.0")

        data = _resolved_json(runner, str(project_manifest))
        versions = {s["name"]: s["version"] for s in data["App"]["specifications"]}
        assert versions["Alamofire"] == "5.0.0"

    def test_update_releases_lock(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        _add_alamofire_release(project_manifest, "5.1.0")

        data = _resolved_json(runner, str(project_manifest), "--update", "Alamofire")
        versions = {s["name"]: s["version"] for s in data["App"]["specifications"]}
        assert versions["Alamofire"] == "5.1.0"

    def test_no_lock_ignores_lockfile(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        _add_alamofire_release(project_manifest, "5.1.0")

        data = _resolved_json(runner, str(project_manifest), "--no-lock")
        versions = {s["name"]: s["version"] for s in data["App"]["specifications"]}
        assert versions["Alamofire"] == "5.1.0"

    def test_explicit_lockfile_option(
        self, runner: CliRunner, project_manifest: Path, tmp_path: Path
    ) -> None:
        lock_path = tmp_path / "other.json"
        runner.invoke(cli, ["lock", str(project_manifest), "-o", str(lock_path)])
        _add_alamofire_release(project_manifest, "5.1.0")

        data = _resolved_json(runner, str(project_manifest), "-l", str(lock_path))
        versions = {s["name"]: s["version"] for s in data["App"]["specifications"]}
        assert versions["Alamofire"] == "5.0.0"
