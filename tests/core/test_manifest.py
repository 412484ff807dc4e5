"""Tests for loading YAML project manifests."""

from __future__ import annotations

from pathlib import Path

import pytest

from specresolve.core.dependency import Platform, RequirementKind, Specification, Version
from specresolve.core.manifest import DEFAULT_LOCKFILE_NAME, load_manifest, parse_manifest
from specresolve.core.sources import InMemorySource
from specresolve.exceptions import ManifestError


class TestLoadManifest:
    def test_targets_and_sources(self, write_manifest, simple_manifest_data: dict) -> None:
        path = write_manifest(simple_manifest_data)
        project = load_manifest(path)
        [app] = project.consumers
        assert app.name == "App"
        assert app.platform == Platform.parse("ios", "12.0")
        assert app.dependency_names == ["Kingfisher"]
        found = project.source.search("Alamofire")
        assert found is not None and len(found) == 2
        assert project.lockfile_path == path.parent / DEFAULT_LOCKFILE_NAME

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "specs.yaml"
        path.write_text("targets: [unclosed\n", encoding="utf-8")
        with pytest.raises(ManifestError, match="not valid YAML"):
            load_manifest(path)

    def test_custom_lockfile(self, write_manifest, simple_manifest_data: dict) -> None:
        simple_manifest_data["lockfile"] = "locks/app.lock.json"
        path = write_manifest(simple_manifest_data)
        assert load_manifest(path).lockfile_path == path.parent / "locks" / "app.lock.json"


class TestParseManifest:
    def test_not_a_mapping(self) -> None:
        with pytest.raises(ManifestError):
            parse_manifest(["targets"])

    def test_requires_targets(self) -> None:
        with pytest.raises(ManifestError, match="at least one target"):
            parse_manifest({"sources": {}})

    def test_target_needs_name(self) -> None:
        with pytest.raises(ManifestError, match="name"):
            parse_manifest({"targets": [{"dependencies": {}}]})

    def test_unique_target_names(self) -> None:
        with pytest.raises(ManifestError, match="unique"):
            parse_manifest({"targets": [{"name": "App"}, {"name": "App"}]})

    def test_platform_forms(self, tmp_path: Path) -> None:
        project = parse_manifest(
            {
                "targets": [
                    {"name": "A", "platform": "ios"},
                    {"name": "B", "platform": {"macos": "10.15"}},
                    {"name": "C"},
                ]
            },
            base_dir=tmp_path,
        )
        platforms = [c.platform for c in project.consumers]
        assert platforms == [Platform("ios"), Platform.parse("osx", "10.15"), None]

    def test_several_platforms_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="exactly one platform"):
            parse_manifest(
                {"targets": [{"name": "A", "platform": {"ios": "9.0", "osx": "10.9"}}]},
                base_dir=tmp_path,
            )

    def test_external_dependencies(self, tmp_path: Path) -> None:
        project = parse_manifest(
            {
                "external": {
                    "Internal": {"git": "https://x/internal.git", "version": "0.3"},
                },
                "targets": [
                    {
                        "name": "App",
                        "dependencies": {"Internal": {"git": "https://x/internal.git"}},
                    }
                ],
            },
            base_dir=tmp_path,
        )
        [req] = project.consumers[0].requirements
        assert req.kind is RequirementKind.EXTERNAL
        pinned = project.pinned.specification("Internal")
        assert pinned is not None and str(pinned.version) == "0.3"
        assert project.external_sources == {"Internal": "https://x/internal.git"}

    def test_source_urls_are_fetched(self, tmp_path: Path) -> None:
        fetched: list[str] = []

        def fake_fetch(url: str) -> InMemorySource:
            fetched.append(url)
            return InMemorySource([Specification("Remote", Version.parse("3.0"))])

        project = parse_manifest(
            {
                "source_urls": ["https://index.example.org/a.json"],
                "targets": [{"name": "App", "dependencies": {"Remote": None}}],
            },
            base_dir=tmp_path,
            fetch=fake_fetch,
        )
        assert fetched == ["https://index.example.org/a.json"]
        assert project.source.search("Remote") is not None
