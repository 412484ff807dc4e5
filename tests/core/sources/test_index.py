"""Tests for parsing index documents into specifications."""

from __future__ import annotations

import pytest

from specresolve.core.dependency import (
    Consumer,
    Platform,
    Requirement,
    RequirementKind,
    Version,
    resolve,
)
from specresolve.core.sources import (
    InMemorySource,
    parse_index,
    parse_requirement,
    parse_requirements,
    parse_specification,
)
from specresolve.exceptions import ManifestError


class TestParseRequirement:
    def test_none_is_any_version(self) -> None:
        req = parse_requirement("A", None)
        assert req.constraint.is_any

    def test_constraint_string(self) -> None:
        req = parse_requirement("A", "~> 1.2")
        assert req.is_satisfied_by(Version.parse("1.9"))
        assert not req.is_satisfied_by(Version.parse("2.0"))

    def test_list_is_conjunction(self) -> None:
        req = parse_requirement("A", [">= 1.0", "< 2.0"])
        assert str(req.constraint) == ">= 1.0, < 2.0"

    def test_head(self) -> None:
        assert parse_requirement("A", "HEAD").head

    def test_external_git(self) -> None:
        req = parse_requirement("A", {"git": "https://x/a.git", "tag": "v1"})
        assert req.kind is RequirementKind.EXTERNAL
        assert req.external_source is not None
        assert req.external_source.kind == "git"
        assert req.external_source.reference == "v1"

    def test_mapping_options(self) -> None:
        req = parse_requirement("A", {"version": ">= 2.0", "prerelease": True})
        assert req.allow_prerelease
        assert not req.is_satisfied_by(Version.parse("1.0"))

    def test_invalid_constraint(self) -> None:
        with pytest.raises(ManifestError, match="Invalid dependency `A`"):
            parse_requirement("A", ">> 1.0")

    def test_requirements_must_be_mapping(self) -> None:
        with pytest.raises(ManifestError):
            parse_requirements(["A"], "target `App`")
        assert parse_requirements(None, "target `App`") == ()


class TestParseSpecification:
    def test_full_entry(self) -> None:
        spec = parse_specification("A", {
            "version": "2.6.3",
            "platforms": {"ios": "7.0", "macos": "10.9"},
            "dependencies": {"B": ">= 3.0"},
            "subspecs": [{"name": "Security", "dependencies": {"C": None}}],
            "default_subspecs": ["Security"],
        })
        assert spec.name == "A"
        assert str(spec.version) == "2.6.3"
        assert spec.platforms == (Platform.parse("ios", "7.0"), Platform.parse("osx", "10.9"))
        assert [r.name for r in spec.dependencies] == ["B"]
        assert spec.default_subspecs == ("Security",)
        sub = spec.subspec_by_name("A/Security")
        assert sub is not None
        assert [r.name for r in sub.dependencies] == ["B", "C"]

    def test_single_default_subspec_name(self) -> None:
        spec = parse_specification("A", {
            "version": "1.0",
            "subspecs": [{"name": "Core"}, {"name": "Extra"}],
            "default_subspecs": "Core",
        })
        assert spec.default_subspecs == ("Core",)

    def test_single_default_subspec_resolves(self) -> None:
        spec = parse_specification("A", {
            "version": "1.0",
            "subspecs": [{"name": "Core"}, {"name": "Extra"}],
            "default_subspecs": "Core",
        })
        app = Consumer("App", (Requirement.parse("A"),))
        result = resolve([app], InMemorySource([spec]))
        assert sorted(s.name for s in result[app]) == ["A", "A/Core"]

    def test_nested_default_subspec_name(self) -> None:
        spec = parse_specification("A", {
            "version": "1.0",
            "subspecs": [{
                "name": "UI",
                "subspecs": [{"name": "Base"}, {"name": "Fancy"}],
                "default_subspecs": "Base",
            }],
        })
        sub = spec.subspec_by_name("A/UI")
        assert sub is not None
        assert sub.default_subspecs == ("Base",)

    def test_numeric_version(self) -> None:
        assert str(parse_specification("A", {"version": 1.5}).version) == "1.5"

    def test_platform_without_target(self) -> None:
        spec = parse_specification("A", {"version": "1.0", "platforms": {"ios": None}})
        assert spec.platforms == (Platform("ios"),)

    @pytest.mark.parametrize(
        "entry",
        [
            "1.0",
            {"dependencies": {}},
            {"version": "x.y"},
            {"version": "1.0", "platforms": ["ios"]},
            {"version": "1.0", "subspecs": [{"dependencies": {}}]},
            {"version": "1.0", "default_subspecs": {"Core": True}},
        ],
    )
    def test_malformed_entries(self, entry: object) -> None:
        with pytest.raises(ManifestError):
            parse_specification("A", entry)


class TestParseIndex:
    def test_flattens_all_versions(self) -> None:
        specs = parse_index({
            "A": [{"version": "1.0"}, {"version": "2.0"}],
            "B": {"version": "0.1"},
        })
        assert sorted(f"{s.name} {s.version}" for s in specs) == ["A 1.0", "A 2.0", "B 0.1"]

    def test_empty(self) -> None:
        assert parse_index(None) == []
        assert parse_index({}) == []

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ManifestError):
            parse_index(["A"])

    def test_versions_must_be_listed(self) -> None:
        with pytest.raises(ManifestError):
            parse_index({"A": "1.0"})
