"""
Project Runner

Runs one recognised command against a component project. Bundling goes
through the build orchestrator; the other commands are thin calls into
external tools.
"""

import asyncio
import json
import logging
import posixpath
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from component_build.config.commands import Command
from component_build.config.schema import Config
from component_build.core.bundler import Bundler, RollupBundler
from component_build.core.config_loader import require_fields
from component_build.core.descriptors import test_bundle_descriptor
from component_build.core.errors import BuildEnvironmentError, InternalError
from component_build.core.manifest import write_json
from component_build.core.orchestrator import BuildOrchestrator, BuildRun, build
from component_build.models.options import BuildEnv, Options
from component_build.utils.command_runner import CommandRunner
from component_build.utils.concurrency import labelled, run_all
from component_build.utils.glob import glob

logger = logging.getLogger(__name__)

ANALYSIS_FILENAME = "auto-analysis.json"
WCT_CONFIG_FILENAME = "wct.conf.json"


class ProjectRunner:
    """Runs commands for one component project"""

    def __init__(
        self,
        options: Options,
        config: Config,
        project_root: Optional[Path] = None,
        command_runner: Optional[CommandRunner] = None,
        bundler: Optional[Bundler] = None,
    ):
        """
        Initialize project runner

        Args:
            options: Run options
            config: Resolved config, shared read-only by every task
            project_root: Component project folder (default: working dir)
            command_runner: Runner for external tools
            bundler: Bundler collaborator (default: rollup)
        """
        self.options = options
        self.config = config
        self.project_root = Path(project_root or Path.cwd())
        self.command_runner = command_runner or CommandRunner(cwd=self.project_root)
        self.bundler = bundler or RollupBundler(self.command_runner)

    def _path(self, *parts: str) -> Path:
        return self.project_root.joinpath(*parts)

    async def run(self, command: Command) -> Any:
        """
        Dispatch ``command``

        Raises:
            InternalError: For help, which the CLI handles itself
        """
        handlers = {
            Command.BUILD: self.build,
            Command.BUILD_DOCS: self.build_docs,
            Command.LINT: self.lint,
            Command.ANALYZE: self.analyze,
            Command.TEST: self.test,
        }
        if command not in handlers:
            raise InternalError(f"No runner for command '{command.value}'")

        logger.info(f"Running '{command.value}' ({self.options.env.value})")
        return await handlers[command]()

    async def build(self) -> List[str]:
        """
        Build the component

        Raises:
            BuildEnvironmentError: Outside development and production
        """
        if self.options.env not in (BuildEnv.DEVELOPMENT, BuildEnv.PRODUCTION):
            raise BuildEnvironmentError(self.options.env.value)

        orchestrator = BuildOrchestrator(self.config, self.bundler, self.project_root)
        return await orchestrator.build_all(self.options.env)

    async def test(self) -> List[str]:
        """
        Compile the test bundle and, unless compile-only, run the tests

        Raises:
            BuildEnvironmentError: Outside the test environment
        """
        if self.options.env is not BuildEnv.TEST:
            raise BuildEnvironmentError(self.options.env.value, "Invalid testing environment")

        artifacts = await build([test_bundle_descriptor(self.config)], self.bundler.bundle, BuildRun("test bundle"))

        if not self.options.compile_only:
            config_file = await asyncio.to_thread(self._write_wct_config)
            await self.command_runner.run(["wct", "--config-file", str(config_file)])

        return artifacts

    def _write_wct_config(self) -> Path:
        require_fields(self.config, (("tests", "wctConfig"), ("temp", "path")))
        config_file = self._path(self.config.temp.path, WCT_CONFIG_FILENAME)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config.tests.wct_config, f, indent=2)
        return config_file

    async def lint(self) -> None:
        """Lint scripts and styles concurrently"""
        require_fields(self.config, (
            ("src", "path"),
            ("src", "configFiles", "tslint"),
            ("src", "configFiles", "styleLint"),
            ("src", "configFiles", "tsconfig"),
        ))
        src = self.config.src
        tsconfig = posixpath.normpath(posixpath.join(src.path, src.config_files.tsconfig))
        tslint = posixpath.normpath(posixpath.join(src.path, src.config_files.tslint))
        style_lint = posixpath.normpath(posixpath.join(src.path, src.config_files.style_lint))

        commands = {
            "tslint": ["tslint", "--project", tsconfig, "--config", tslint],
            "stylelint": [
                "stylelint", f"{src.path}/**/*.{{css,scss,sass}}",
                "--config", style_lint, "--allow-empty-input",
            ],
        }

        await run_all(
            [labelled(name, lambda argv=argv: self.command_runner.run(argv), "lint") for name, argv in commands.items()],
            labels=list(commands),
        )

    async def _analysis(self) -> Dict[str, Any]:
        require_fields(self.config, (("dist", "path"),))
        files = await glob(f"{self.config.dist.path}/**/*.mjs", cwd=self.project_root)
        if not files:
            return {"schema_version": "1.0.0"}
        result = await self.command_runner.run(["polymer", "analyze", *files])
        return json.loads(result.stdout)

    async def analyze(self) -> Path:
        """Generate an analysis of the component from its dist files"""
        analysis = await self._analysis()
        return await asyncio.to_thread(write_json, self._path(ANALYSIS_FILENAME), analysis)

    async def build_docs(self) -> Path:
        """Stage dist files, demos and the analysis in the docs folder"""
        require_fields(self.config, (
            ("docs", "path"),
            ("docs", "analysisFilename"),
            ("dist", "path"),
            ("demos", "path"),
        ))
        docs = self._path(self.config.docs.path)

        copies = {
            "dist": (self._path(self.config.dist.path), docs / self.config.dist.path),
            "demos": (self._path(self.config.demos.path), docs / self.config.demos.path),
        }
        await run_all(
            [
                labelled(name, lambda src=src, dst=dst: asyncio.to_thread(_copy_tree, src, dst), "docs")
                for name, (src, dst) in copies.items()
            ],
            labels=list(copies),
        )

        analysis = await self._analysis()
        return await asyncio.to_thread(write_json, docs / self.config.docs.analysis_filename, analysis)


def _copy_tree(source: Path, destination: Path) -> Path:
    shutil.copytree(source, destination, dirs_exist_ok=True)
    return destination


async def run_project(
    command: Command,
    options: Options,
    config: Config,
    project_root: Optional[Path] = None,
) -> Any:
    """
    Convenience function to run one command

    Returns:
        Whatever the command produces (artifact list for build and test)
    """
    runner = ProjectRunner(options, config, project_root)
    return await runner.run(command)
