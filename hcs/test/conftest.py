from __future__ import annotations

import json
from pathlib import Path

import pytest

APP_ID = "com.example.lights"
APP_VERSION = "1.2.0"


def write_app(root: Path, **overrides: object) -> Path:
    manifest: dict[str, object] = {
        "id": APP_ID,
        "version": APP_VERSION,
        "sdk": 3,
        "compatibility": ">=5.0.0",
        "name": {"en": "Lights", "nl": "Lampen"},
        "description": {"en": "Control your lights", "nl": "Bedien je lampen"},
        "tags": {"en": ["light", "bulb"], "de": ["licht"]},
        "category": "lights",
        "permissions": [],
        "author": {"name": "Jane Doe", "email": "jane@example.com"},
        "images": {"small": "/assets/images/small.png", "large": "/assets/images/large.png"},
        "drivers": [{"id": "bulb"}],
    }
    manifest.update(overrides)
    (root / "app.json").write_text(json.dumps(manifest), encoding="utf-8")
    return root


@pytest.fixture
def app_project(tmp_path: Path) -> Path:
    """A small but complete app folder."""
    root = tmp_path / "app"
    root.mkdir()
    write_app(root)

    (root / "app.js").write_text("module.exports = {};\n", encoding="utf-8")
    (root / "README.txt").write_text("Control lights.", encoding="utf-8")
    (root / "README.nl.txt").write_text("Bedien lampen.", encoding="utf-8")
    (root / ".gitignore").write_text("node_modules\n", encoding="utf-8")
    (root / ".homeychangelog.json").write_text(
        json.dumps({"1.2.0": {"en": "Bug fixes", "nl": "Bugfixes"}}), encoding="utf-8"
    )

    images = root / "assets" / "images"
    images.mkdir(parents=True)
    (root / "assets" / "icon.svg").write_text("<svg/>", encoding="utf-8")
    (images / "small.png").write_bytes(b"\x89PNG small")
    (images / "large.png").write_bytes(b"\x89PNG large")

    driver_images = root / "drivers" / "bulb" / "assets" / "images"
    driver_images.mkdir(parents=True)
    (driver_images / "small.jpg").write_bytes(b"\xff\xd8 jpg")
    (root / "drivers" / "bulb" / "device.js").write_text("// device\n", encoding="utf-8")

    deps = root / "node_modules" / "lib"
    deps.mkdir(parents=True)
    (deps / "index.js").write_text("// dep\n", encoding="utf-8")
    (deps / "logo.png").write_bytes(b"\x89PNG dep")

    github = root / ".github" / "workflows"
    github.mkdir(parents=True)
    (github / "ci.yml").write_text("on: push\n", encoding="utf-8")
    (root / ".github" / "banner.png").write_bytes(b"\x89PNG banner")

    return root
