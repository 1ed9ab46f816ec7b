"""
Unit tests for build descriptor expansion
"""
import json

import pytest

from component_build.config.defaults import default_config
from component_build.core.config_loader import resolve, validate_config
from component_build.core.descriptors import (
    BUILTIN_MODULES,
    CLI_BANNER,
    BuildDescriptor,
    Format,
    cli_descriptor,
    expand,
    format_extension,
    library_descriptors,
    resolve_externals,
)
from component_build.core.descriptors import test_bundle_descriptor as bundle_descriptor_for_tests
from component_build.core.errors import ConfigError
from component_build.models.options import BuildEnv


def make_config(overrides=None, package=None):
    tree = resolve(default_config("true"), overrides)
    tree["package"] = package or {"name": "my-element"}
    return validate_config(tree)


def fake_glob(*matches):
    calls = []

    async def glob(pattern, cwd=None):
        calls.append((pattern, cwd))
        return list(matches)

    glob.calls = calls
    return glob


def test_expand_empty_entries():
    """No entries, no descriptors, even with an incomplete config"""
    assert expand(validate_config({}), [], Format.ESM) == []


def test_expand_one_per_entry():
    config = make_config()

    descriptors = expand(config, ["src/a.ts", "src/b.ts"], Format.ESM)

    assert [d.input for d in descriptors] == ["src/a.ts", "src/b.ts"]
    first = descriptors[0]
    assert first.output_dir == "dist"
    assert first.entry_file_names == "[name].mjs"
    assert first.chunk_file_names == "common/[hash].mjs"
    assert first.format is Format.ESM
    assert first.external == BUILTIN_MODULES
    assert first.tsconfig == "tsconfig.json"


def test_expand_script_extension():
    descriptors = expand(make_config(), ["src/a.ts"], Format.CJS)

    assert descriptors[0].entry_file_names == "[name].js"
    assert descriptors[0].chunk_file_names == "common/[hash].js"
    assert descriptors[0].entry_file_name == "a.js"


def test_expand_missing_dist_path():
    config = make_config()
    tree = config.to_tree()
    del tree["dist"]["path"]

    with pytest.raises(ConfigError, match="config.dist.path"):
        expand(validate_config(tree), ["src/a.ts"], Format.ESM)


def test_format_extension():
    config = make_config({"build": {"module": {"extension": ".esm.js"}}})
    assert format_extension(config, Format.ESM) == ".esm.js"
    assert format_extension(config, Format.CJS) == ".js"


def test_entry_file_name():
    descriptor = BuildDescriptor(
        input="src/lib/my-element.ts",
        output_dir="dist",
        entry_file_names="[name].mjs",
        chunk_file_names="common/[hash].mjs",
        format=Format.ESM,
    )
    assert descriptor.entry_file_name == "my-element.mjs"


def test_resolve_externals(tmp_path):
    installed = tmp_path / "node_modules" / "lit-element"
    installed.mkdir(parents=True)
    (installed / "package.json").write_text(json.dumps({"name": "lit-element"}), encoding="utf-8")
    project = tmp_path / "packages" / "my-element"
    project.mkdir(parents=True)

    external = resolve_externals({"dependencies": {"lit-element": "^2", "missing": "^1"}}, project)

    assert external[0] == str(installed.resolve())
    assert external[1:] == BUILTIN_MODULES


def test_resolve_externals_no_dependencies(tmp_path):
    assert resolve_externals({"name": "x"}, tmp_path) == BUILTIN_MODULES
    assert resolve_externals(None, tmp_path) == BUILTIN_MODULES


def test_cli_descriptor():
    descriptor = cli_descriptor(make_config())

    assert descriptor.input == "src/bin/cli.ts"
    assert descriptor.output_dir == "dist/bin"
    assert descriptor.format is Format.CJS
    assert descriptor.banner == CLI_BANNER
    assert descriptor.entry_file_name == "cli.js"


def test_bundle_descriptor_for_tests():
    descriptor = bundle_descriptor_for_tests(make_config())

    assert descriptor.input == "test/index.ts"
    assert descriptor.output_dir == "test"
    assert descriptor.entry_file_names == "index.js"
    assert descriptor.chunk_file_names == "index-[hash].js"
    assert descriptor.format is Format.IIFE
    assert descriptor.name == "moduleExports"
    assert descriptor.tools_env == "test"


@pytest.mark.asyncio
async def test_library_descriptors_development(tmp_path):
    glob = fake_glob("src/a.ts", "src/b.ts")

    descriptors = await library_descriptors(make_config(), BuildEnv.DEVELOPMENT, glob, tmp_path)

    assert glob.calls == [("src/**/*{[!.d].ts,.js}", tmp_path)]
    assert [(d.input, d.format) for d in descriptors] == [
        ("src/a.ts", Format.ESM),
        ("src/b.ts", Format.ESM),
    ]
    assert all(d.tools_env == "development" for d in descriptors)


@pytest.mark.asyncio
async def test_library_descriptors_production(tmp_path):
    config = make_config({"build": {"cli": {"create": True}}})

    descriptors = await library_descriptors(config, BuildEnv.PRODUCTION, fake_glob("src/a.ts"), tmp_path)

    assert [(d.input, d.format) for d in descriptors] == [
        ("src/a.ts", Format.ESM),
        ("src/a.ts", Format.CJS),
        ("src/bin/cli.ts", Format.CJS),
    ]


@pytest.mark.asyncio
async def test_library_descriptors_script_only(tmp_path):
    config = make_config({"build": {"module": {"create": False}}})

    development = await library_descriptors(config, BuildEnv.DEVELOPMENT, fake_glob("src/a.ts"), tmp_path)
    production = await library_descriptors(config, BuildEnv.PRODUCTION, fake_glob("src/a.ts"), tmp_path)

    assert development == []
    assert [d.format for d in production] == [Format.CJS]


@pytest.mark.asyncio
async def test_library_descriptors_missing_field(tmp_path):
    config = make_config()
    tree = config.to_tree()
    del tree["src"]["entrypoint"]

    with pytest.raises(ConfigError, match="config.src.entrypoint"):
        await library_descriptors(validate_config(tree), BuildEnv.DEVELOPMENT, fake_glob(), tmp_path)
