"""Tests for ``specresolve lock``.

Verifies:
    - Locking writes spec-lock.json next to the manifest.
    - Lockfile content is valid JSON with the expected structure.
    - Custom output path works.
    - Re-locking reports unchanged or changed packages.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from specresolve.cli.main import cli
from specresolve.core.lockfile import Lockfile


class TestLockWrites:
    def test_creates_lockfile(self, runner: CliRunner, project_manifest: Path) -> None:
        result = runner.invoke(cli, ["lock", str(project_manifest)])
        assert result.exit_code == 0, result.output
        lock_path = project_manifest.parent / "spec-lock.json"
        assert lock_path.exists()
        assert "Wrote 2 packages" in result.output

    def test_lockfile_structure(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        data = json.loads((project_manifest.parent / "spec-lock.json").read_text())
        assert data["lockfile_version"] == "1.0"
        assert data["packages"]["Alamofire"]["version"] == "5.0.0"
        assert data["packages"]["Kingfisher"]["dependencies"] == ["Alamofire (>= 4.0)"]
        assert data["targets"] == {"App": ["Alamofire", "Kingfisher"]}
        assert data["metadata"]["total_packages"] == 2

    def test_lockfile_is_valid(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        lockfile = Lockfile.read(project_manifest.parent / "spec-lock.json")
        assert lockfile.validate() == []

    def test_custom_output(
        self, runner: CliRunner, project_manifest: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out" / "custom.json"
        result = runner.invoke(cli, ["lock", str(project_manifest), "-o", str(out)])
        assert result.exit_code == 0
        assert out.exists()
        assert not (project_manifest.parent / "spec-lock.json").exists()

    def test_lockfile_is_deterministic(self, runner: CliRunner, project_manifest: Path) -> None:
        lock_path = project_manifest.parent / "spec-lock.json"
        runner.invoke(cli, ["lock", str(project_manifest)])
        first = lock_path.read_text()
        runner.invoke(cli, ["lock", str(project_manifest)])
        assert lock_path.read_text() == first


class TestLockChanges:
    def test_first_lock_lists_added(self, runner: CliRunner, project_manifest: Path) -> None:
        result = runner.invoke(cli, ["lock", str(project_manifest)])
        assert "+ Alamofire" in result.output
        assert "+ Kingfisher" in result.output

    def test_relock_unchanged(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        result = runner.invoke(cli, ["lock", str(project_manifest)])
        assert "Lockfile unchanged." in result.output

    def test_update_reports_change(self, runner: CliRunner, project_manifest: Path) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        data = yaml.safe_load(project_manifest.read_text())
        data["sources"]["Alamofire"].append({"version": "5.2.0"})
        project_manifest.write_text(yaml.safe_dump(data))

        result = runner.invoke(cli, ["lock", str(project_manifest), "-u", "Alamofire"])
        assert result.exit_code == 0
        assert "~ Alamofire 5.0.0 -> 5.2.0" in result.output

    def test_edited_requirement_releases_lock(
        self, runner: CliRunner, project_manifest: Path
    ) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        data = yaml.safe_load(project_manifest.read_text())
        data["targets"][0]["dependencies"]["Alamofire"] = "< 5.0"
        project_manifest.write_text(yaml.safe_dump(data))

        result = runner.invoke(cli, ["lock", str(project_manifest)])
        assert result.exit_code == 0, result.output
        assert "~ Alamofire 5.0.0 -> 4.9.0" in result.output

    def test_unchanged_requirement_keeps_lock(
        self, runner: CliRunner, project_manifest: Path
    ) -> None:
        runner.invoke(cli, ["lock", str(project_manifest)])
        data = yaml.safe_load(project_manifest.read_text())
        data["sources"]["Alamofire"].append({"version": "5.2.0"})
        data["targets"][0]["dependencies"]["Alamofire"] = ">= 5.0"
        project_manifest.write_text(yaml.safe_dump(data))

        result = runner.invoke(cli, ["lock", str(project_manifest)])
        assert result.exit_code == 0, result.output
        assert "Lockfile unchanged." in result.output
