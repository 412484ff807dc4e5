"""Shared fixtures for specresolve tests."""

from __future__ import annotations

import pathlib

import pytest
import yaml


@pytest.fixture
def write_manifest(tmp_path: pathlib.Path):
    """Return a helper that writes a manifest dict as YAML into tmp_path."""

    def _write(data: dict, name: str = "specs.yaml") -> pathlib.Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def simple_manifest_data() -> dict:
    """A manifest with one target depending on a small two-level tree."""
    return {
        "sources": {
            "Alamofire": [
                {"version": "4.9.0", "platforms": {"ios": "8.0"}},
                {"version": "5.0.0", "platforms": {"ios": "10.0"}},
            ],
            "Kingfisher": [
                {
                    "version": "5.15.0",
                    "platforms": {"ios": "10.0"},
                    "dependencies": {"Alamofire": ">= 4.0"},
                },
            ],
        },
        "targets": [
            {
                "name": "App",
                "platform": {"ios": "12.0"},
                "dependencies": {"Kingfisher": "~> 5.0"},
            },
        ],
    }
