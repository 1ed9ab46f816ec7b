"""
Unit tests for glob matching
"""
import pytest

from component_build.core.errors import ConfigError
from component_build.utils.glob import expand_braces, glob


def make_files(root, *names):
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


def test_expand_braces():
    assert expand_braces("*.ts") == ["*.ts"]
    assert expand_braces("**/*{.ts,.js}") == ["**/*.ts", "**/*.js"]
    assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]


@pytest.mark.asyncio
async def test_glob_default_entrypoint(tmp_path):
    """Type declaration files are not entry files"""
    make_files(tmp_path, "src/index.ts", "src/types.d.ts", "src/lib/util.js", "src/style.css")

    matches = await glob("src/**/*{[!.d].ts,.js}", cwd=tmp_path)

    assert matches == ["src/index.ts", "src/lib/util.js"]


@pytest.mark.asyncio
async def test_glob_union_sorted_unique(tmp_path):
    make_files(tmp_path, "b.js", "a.js", "c.ts")

    matches = await glob(["*.js", "a.*", "*.ts"], cwd=tmp_path)

    assert matches == ["a.js", "b.js", "c.ts"]


@pytest.mark.asyncio
async def test_glob_no_matches(tmp_path):
    assert await glob("src/**/*.ts", cwd=tmp_path) == []


@pytest.mark.asyncio
async def test_glob_empty_pattern_list():
    with pytest.raises(ConfigError):
        await glob([])
