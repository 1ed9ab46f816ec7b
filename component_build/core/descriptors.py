"""
Build Descriptors

A build descriptor is one self-contained unit of bundler work: one input
file bundled into one output format. This module expands a resolved config
and the matched entry files into descriptors.
"""

import logging
import posixpath
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple

from component_build.config.schema import Config
from component_build.core.config_loader import (
    LIBRARY_BUILD_FIELDS,
    TEST_BUILD_FIELDS,
    get_field,
    require_fields,
)
from component_build.models.options import BuildEnv

logger = logging.getLogger(__name__)

GlobFn = Callable[..., Awaitable[List[str]]]

CHUNK_DIR = "common"

# Modules provided by the runtime itself; never bundled
BUILTIN_MODULES: Tuple[str, ...] = (
    "assert", "buffer", "child_process", "crypto", "events", "fs", "http",
    "https", "module", "net", "os", "path", "readline", "stream",
    "string_decoder", "tty", "url", "util", "zlib",
)

CLI_BANNER = "#!/usr/bin/env node"


class Format(Enum):
    """Output module format"""
    ESM = "esm"
    CJS = "cjs"
    IIFE = "iife"


@dataclass(frozen=True)
class BuildDescriptor:
    """One unit of bundler work"""
    input: str
    output_dir: str
    entry_file_names: str
    chunk_file_names: str
    format: Format
    external: Tuple[str, ...] = ()
    tsconfig: Optional[str] = None
    tools_env: Optional[str] = None
    banner: Optional[str] = None
    name: Optional[str] = None

    @property
    def entry_file_name(self) -> str:
        """Name of the entry artifact relative to ``output_dir``"""
        stem = posixpath.splitext(posixpath.basename(self.input))[0]
        return self.entry_file_names.replace("[name]", stem)


def _join(*parts: str) -> str:
    return posixpath.normpath(posixpath.join(*parts))


def format_extension(config: Config, output_format: Format) -> str:
    """Extension of the files produced for ``output_format``"""
    kind = "module" if output_format is Format.ESM else "script"
    require_fields(config, (("build", kind, "extension"),))
    return get_field(config, ("build", kind, "extension"))


def _find_installed(dependency: str, project_root: Path) -> Optional[Path]:
    for folder in (project_root, *project_root.parents):
        candidate = folder / "node_modules" / dependency
        if (candidate / "package.json").is_file():
            return candidate
    return None


def resolve_externals(
    manifest: Optional[Mapping[str, Any]],
    project_root: Optional[Path] = None,
) -> Tuple[str, ...]:
    """
    Modules to leave out of library bundles

    Every runtime dependency that can be found installed is listed by its
    installed location; dependencies that can't be found are dropped. The
    runtime's built-in modules are always listed.

    Args:
        manifest: Parsed package.json
        project_root: Folder to start the node_modules lookup from
    """
    root = Path(project_root or Path.cwd()).resolve()
    dependencies = (manifest or {}).get("dependencies") or {}

    external = []
    for dependency in dependencies:
        location = _find_installed(dependency, root)
        if location is None:
            logger.debug(f"Dependency '{dependency}' is not installed; not marking it external")
            continue
        external.append(str(location))

    return tuple(external) + BUILTIN_MODULES


def expand(
    config: Config,
    entry_paths: List[str],
    output_format: Format,
    external: Tuple[str, ...] = BUILTIN_MODULES,
    tools_env: Optional[str] = None,
) -> List[BuildDescriptor]:
    """
    One library descriptor per entry file

    Args:
        config: Resolved config (``dist.path`` and the build section are read)
        entry_paths: Matched entry files
        output_format: Format of every descriptor
        external: Modules left out of the bundles
        tools_env: Key of the tool option bag under ``build.tools``

    Returns:
        Descriptors in ``entry_paths`` order; empty for no entries
    """
    if not entry_paths:
        return []

    require_fields(config, (("dist", "path"),))
    extension = format_extension(config, output_format)
    tsconfig = None
    if get_field(config, ("src", "path")) and get_field(config, ("src", "configFiles", "tsconfig")):
        tsconfig = _join(config.src.path, config.src.config_files.tsconfig)

    return [
        BuildDescriptor(
            input=entry,
            output_dir=config.dist.path,
            entry_file_names=f"[name]{extension}",
            chunk_file_names=f"{CHUNK_DIR}/[hash]{extension}",
            format=output_format,
            external=tuple(external),
            tsconfig=tsconfig,
            tools_env=tools_env,
        )
        for entry in entry_paths
    ]


def cli_descriptor(config: Config, external: Tuple[str, ...] = BUILTIN_MODULES) -> BuildDescriptor:
    """Descriptor of the command-line bundle"""
    require_fields(config, LIBRARY_BUILD_FIELDS + (("build", "cli", "entrypoint"), ("build", "cli", "path")))

    return BuildDescriptor(
        input=_join(config.src.path, config.build.cli.entrypoint),
        output_dir=_join(config.dist.path, config.build.cli.path),
        entry_file_names="[name].js",
        chunk_file_names=f"{CHUNK_DIR}/[hash].js",
        format=Format.CJS,
        external=tuple(external),
        tsconfig=_join(config.src.path, config.src.config_files.tsconfig),
        tools_env=BuildEnv.PRODUCTION.value,
        banner=CLI_BANNER,
    )


def test_bundle_descriptor(config: Config) -> BuildDescriptor:
    """Descriptor of the browser test bundle"""
    require_fields(config, TEST_BUILD_FIELDS)

    return BuildDescriptor(
        input=_join(config.tests.path, config.tests.test_files),
        output_dir=config.tests.path,
        entry_file_names="index.js",
        chunk_file_names="index-[hash].js",
        format=Format.IIFE,
        tsconfig=_join(config.src.path, config.src.config_files.tsconfig),
        tools_env=BuildEnv.TEST.value,
        name="moduleExports",
    )


async def library_descriptors(
    config: Config,
    env: BuildEnv,
    glob: GlobFn,
    project_root: Optional[Path] = None,
) -> List[BuildDescriptor]:
    """
    Every descriptor of a library build

    Development builds produce the module bundles. Production builds add the
    script bundles and, when enabled, the command-line bundle.

    Args:
        config: Resolved config
        env: Build environment
        glob: Async glob collaborator, ``glob(pattern, cwd=...)``
        project_root: Folder paths in the config are relative to
    """
    require_fields(config, LIBRARY_BUILD_FIELDS)

    pattern = _join(config.src.path, config.src.entrypoint)
    entry_paths = await glob(pattern, cwd=project_root)
    logger.info(f"Found {len(entry_paths)} entry file(s) matching {pattern}")

    external = resolve_externals(config.package, project_root)

    formats = []
    if get_field(config, ("build", "module", "create")):
        formats.append(Format.ESM)
    if env is BuildEnv.PRODUCTION and get_field(config, ("build", "script", "create")):
        formats.append(Format.CJS)

    descriptors = []
    for output_format in formats:
        descriptors.extend(expand(config, entry_paths, output_format, external, tools_env=env.value))

    cli = get_field(config, ("build", "cli"))
    if env is BuildEnv.PRODUCTION and cli is not None and cli.create:
        descriptors.append(cli_descriptor(config, external))

    return descriptors
