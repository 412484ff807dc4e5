"""Shared fixtures for CLI tests.

Provides a Click runner and manifests for the common scenarios: a plain
resolvable project, one with conflicting targets, and one whose package
only supports another platform.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def project_manifest(write_manifest, simple_manifest_data: dict) -> Path:
    """A resolvable manifest: App -> Kingfisher -> Alamofire."""
    return write_manifest(simple_manifest_data)


@pytest.fixture
def conflicting_manifest(write_manifest) -> Path:
    """Two targets whose constraints on Alamofire are disjoint."""
    return write_manifest({
        "sources": {
            "Alamofire": [{"version": "4.9.0"}, {"version": "5.0.0"}],
        },
        "targets": [
            {"name": "App", "dependencies": {"Alamofire": ">= 5.0"}},
            {"name": "Legacy", "dependencies": {"Alamofire": "< 5.0"}},
        ],
    })


@pytest.fixture
def wrong_platform_manifest(write_manifest) -> Path:
    """A macOS target depending on an iOS-only package."""
    return write_manifest({
        "sources": {
            "UIKitExtras": [{"version": "1.0", "platforms": {"ios": "11.0"}}],
        },
        "targets": [
            {
                "name": "MacApp",
                "platform": {"osx": "10.15"},
                "dependencies": {"UIKitExtras": None},
            },
        ],
    })
