"""
Release Manifest

Writes the package.json that is published from the dist folder and copies
the other release files next to it.
"""

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from component_build.utils.concurrency import labelled, run_all

# Fields only needed while developing the component
BUILD_ONLY_FIELDS = ("scripts", "devDependencies")

# Canonical package.json key order; keys not listed follow alphabetically
KEY_ORDER = (
    "$schema", "name", "displayName", "version", "private", "description",
    "categories", "keywords", "homepage", "bugs", "repository", "funding",
    "license", "qna", "author", "maintainers", "contributors", "publisher",
    "sideEffects", "type", "imports", "exports", "main", "svelte", "umd:main",
    "jsdelivr", "unpkg", "module", "source", "jsnext:main", "browser",
    "react-native", "types", "typesVersions", "typings", "style", "example",
    "examplestyle", "assets", "bin", "man", "directories", "files",
    "workspaces", "binary", "scripts", "betterScripts", "contributes",
    "activationEvents", "husky", "simple-git-hooks", "pre-commit",
    "commitlint", "lint-staged", "config", "nodemonConfig", "browserify",
    "babel", "browserslist", "xo", "prettier", "eslintConfig",
    "eslintIgnore", "npmpackagejsonlint", "release", "remarkConfig",
    "stylelint", "ava", "jest", "mocha", "nyc", "tap", "oclif", "resolutions",
    "dependencies", "devDependencies", "dependenciesMeta",
    "peerDependencies", "peerDependenciesMeta", "optionalDependencies",
    "bundledDependencies", "bundleDependencies", "extensionPack",
    "extensionDependencies", "flat", "packageManager", "engines",
    "engineStrict", "volta", "languageName", "os", "cpu",
    "preferGlobal", "publishConfig", "icon", "badges", "galleryBanner",
    "preview", "markdown",
)

_RANK = {key: index for index, key in enumerate(KEY_ORDER)}


def sort_manifest(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    """Order the top-level keys canonically"""
    known = sorted((key for key in manifest if key in _RANK), key=_RANK.__getitem__)
    unknown = sorted(key for key in manifest if key not in _RANK)
    return {key: manifest[key] for key in known + unknown}


def release_manifest(
    manifest: Mapping[str, Any],
    main_file: Optional[str] = None,
    module_file: Optional[str] = None,
) -> Dict[str, Any]:
    """
    The project's manifest as published from the dist folder

    Build-only fields are dropped, ``main`` and ``module`` point at the built
    script and module entry files (when given) and keys are canonically
    ordered. ``manifest`` itself is left untouched.
    """
    stripped = {key: value for key, value in manifest.items() if key not in BUILD_ONLY_FIELDS}
    if main_file is not None:
        stripped["main"] = main_file
    if module_file is not None:
        stripped["module"] = module_file
    return sort_manifest(stripped)


def write_json(path: Path, data: Mapping[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path


async def create_package_manifest(
    manifest: Mapping[str, Any],
    dist_path: Path,
    main_file: Optional[str] = None,
    module_file: Optional[str] = None,
) -> Path:
    """
    Write ``<dist>/package.json`` for release

    Args:
        manifest: The project's parsed package.json
        dist_path: Distribution folder
        main_file: Built script entry file, relative to ``dist_path``
        module_file: Built module entry file, relative to ``dist_path``

    Returns:
        Path to the written file
    """
    return await asyncio.to_thread(
        write_json,
        Path(dist_path) / "package.json",
        release_manifest(manifest, main_file, module_file),
    )


def _copy_file(source: Path, destination: Path) -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination


async def copy_dist_files(files: Sequence[str], project_root: Path, dist_path: Path) -> List[Path]:
    """
    Copy release files (license, readme, ...) verbatim into the dist folder

    Raises:
        AggregateTaskError: Listing every file that could not be copied
    """
    root = Path(project_root)
    dist = Path(dist_path)

    tasks = [
        labelled(name, lambda name=name: asyncio.to_thread(_copy_file, root / name, dist / name), "copy")
        for name in files
    ]
    return await run_all(tasks, labels=list(files))
