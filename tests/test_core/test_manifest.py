"""
Unit tests for the release manifest and dist files
"""
import json

import pytest

from component_build.core.errors import AggregateTaskError
from component_build.core.manifest import (
    copy_dist_files,
    create_package_manifest,
    release_manifest,
    sort_manifest,
    write_json,
)


def test_sort_manifest_canonical_then_alphabetical():
    manifest = {"zeta": 1, "dependencies": {}, "version": "1.0.0", "alpha": 2, "name": "x"}

    assert list(sort_manifest(manifest)) == ["name", "version", "dependencies", "alpha", "zeta"]


def test_release_manifest_strips_build_fields():
    manifest = {
        "name": "my-element",
        "scripts": {"test": "component-build test"},
        "devDependencies": {"typescript": "^3"},
        "dependencies": {"lit-element": "^2"},
    }

    released = release_manifest(manifest)

    assert released == {"name": "my-element", "dependencies": {"lit-element": "^2"}}
    assert "scripts" in manifest


def test_write_json_trailing_newline(tmp_path):
    path = write_json(tmp_path / "nested" / "out.json", {"name": "é"})

    assert path.read_text(encoding="utf-8") == '{\n  "name": "é"\n}\n'


@pytest.mark.asyncio
async def test_create_package_manifest(tmp_path):
    path = await create_package_manifest(
        {"version": "1.0.0", "name": "my-element", "scripts": {}},
        tmp_path / "dist",
    )

    assert path == tmp_path / "dist" / "package.json"
    text = path.read_text(encoding="utf-8")
    assert list(json.loads(text)) == ["name", "version"]


@pytest.mark.asyncio
async def test_copy_dist_files(tmp_path):
    (tmp_path / "LICENSE").write_text("MIT", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide", encoding="utf-8")

    copied = await copy_dist_files(["LICENSE", "docs/guide.md"], tmp_path, tmp_path / "dist")

    assert copied == [tmp_path / "dist" / "LICENSE", tmp_path / "dist" / "docs" / "guide.md"]
    assert (tmp_path / "dist" / "docs" / "guide.md").read_text(encoding="utf-8") == "guide"


@pytest.mark.asyncio
async def test_copy_dist_files_reports_missing(tmp_path):
    (tmp_path / "LICENSE").write_text("MIT", encoding="utf-8")

    with pytest.raises(AggregateTaskError) as exc_info:
        await copy_dist_files(["README.md", "LICENSE", "CHANGELOG.md"], tmp_path, tmp_path / "dist")

    assert exc_info.value.labels == ["README.md", "CHANGELOG.md"]
    assert all(isinstance(e, FileNotFoundError) for e in exc_info.value.errors)
    assert (tmp_path / "dist" / "LICENSE").exists()


@pytest.mark.asyncio
async def test_copy_dist_files_none(tmp_path):
    assert await copy_dist_files([], tmp_path, tmp_path / "dist") == []


def test_release_manifest_points_at_built_files():
    manifest = {
        "name": "my-element",
        "main": "src/my-element.ts",
        "scripts": {"build": "component-build build"},
    }

    released = release_manifest(manifest, main_file="my-element.js", module_file="my-element.mjs")

    assert released == {"name": "my-element", "main": "my-element.js", "module": "my-element.mjs"}
    assert list(released) == ["name", "main", "module"]
    assert manifest == {
        "name": "my-element",
        "main": "src/my-element.ts",
        "scripts": {"build": "component-build build"},
    }


def test_release_manifest_keeps_entries_without_built_files():
    released = release_manifest({"name": "x", "main": "index.js"})
    assert released == {"name": "x", "main": "index.js"}


@pytest.mark.asyncio
async def test_create_package_manifest_with_entries(tmp_path):
    path = await create_package_manifest({"name": "x"}, tmp_path, "x.js", "x.mjs")

    assert json.loads(path.read_text(encoding="utf-8")) == {"name": "x", "main": "x.js", "module": "x.mjs"}
