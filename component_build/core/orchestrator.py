"""
Build Orchestrator

Runs every build descriptor through the bundler concurrently, flattens the
artifacts of all descriptors into one list and, for a full production build,
runs the post-build release steps once bundling has succeeded.
"""

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from component_build.config.schema import Config
from component_build.core.bundler import Bundler
from component_build.core.config_loader import require_fields
from component_build.core.descriptors import BuildDescriptor, Format, GlobFn, library_descriptors
from component_build.core.errors import InternalError
from component_build.core.manifest import copy_dist_files, create_package_manifest
from component_build.models.options import BuildEnv
from component_build.utils.concurrency import labelled, run_all
from component_build.utils.glob import glob as default_glob

BundleFn = Callable[[BuildDescriptor], Awaitable[List[str]]]

logger = logging.getLogger(__name__)


class RunState(Enum):
    """State of one orchestration run"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BuildRun:
    """Tracks one orchestration run; terminal states are final"""

    _VALID_TRANSITIONS = {
        RunState.PENDING: (RunState.RUNNING,),
        RunState.RUNNING: (RunState.SUCCEEDED, RunState.FAILED),
    }

    def __init__(self, label: str = "build"):
        self.label = label
        self.state = RunState.PENDING
        self.state_history = [(RunState.PENDING, datetime.now())]

    def transition_to(self, new_state: RunState) -> None:
        if new_state not in self._VALID_TRANSITIONS.get(self.state, ()):
            raise InternalError(
                f"Invalid state transition for run '{self.label}': "
                f"{self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.state_history.append((new_state, datetime.now()))

    @property
    def finished(self) -> bool:
        return self.state in (RunState.SUCCEEDED, RunState.FAILED)


def _describe(descriptor: BuildDescriptor) -> str:
    return f"{descriptor.input} ({descriptor.format.value})"


async def bundle_each(
    descriptors: Sequence[BuildDescriptor],
    bundle: BundleFn,
    run: Optional[BuildRun] = None,
) -> List[List[str]]:
    """
    Bundle every descriptor concurrently

    Args:
        descriptors: Units of bundler work
        bundle: Bundler collaborator, called once per descriptor
        run: Optional run tracker; must be pending

    Returns:
        The artifacts of each descriptor, index-aligned with ``descriptors``

    Raises:
        AggregateTaskError: If any descriptor failed; no artifacts are
            returned in that case even though every bundle ran to completion
    """
    run = run or BuildRun()
    run.transition_to(RunState.RUNNING)

    tasks = [
        labelled(_describe(descriptor), lambda descriptor=descriptor: bundle(descriptor), run.label)
        for descriptor in descriptors
    ]

    try:
        outputs = await run_all(tasks, labels=[_describe(d) for d in descriptors])
    except Exception:
        run.transition_to(RunState.FAILED)
        raise

    run.transition_to(RunState.SUCCEEDED)
    return [list(artifacts) for artifacts in outputs]


async def build(
    descriptors: Sequence[BuildDescriptor],
    bundle: BundleFn,
    run: Optional[BuildRun] = None,
) -> List[str]:
    """
    Bundle every descriptor and flatten the produced artifact names

    Returns:
        The artifacts of every descriptor, concatenated in submission order
        (duplicates kept)

    Raises:
        AggregateTaskError: If any descriptor failed
    """
    outputs = await bundle_each(descriptors, bundle, run)
    return [artifact for artifacts in outputs for artifact in artifacts]


class BuildOrchestrator:
    """Builds a component: bundles, then release manifest and extra files"""

    def __init__(
        self,
        config: Config,
        bundler: Bundler,
        project_root: Optional[Path] = None,
        glob: GlobFn = default_glob,
    ):
        """
        Args:
            config: Resolved, read-only config
            bundler: Bundler collaborator
            project_root: Folder holding package.json (default: working dir)
            glob: Glob collaborator
        """
        self.config = config
        self.bundler = bundler
        self.project_root = Path(project_root or Path.cwd())
        self.glob = glob

    async def _bundle(self, env: BuildEnv) -> List[Tuple[BuildDescriptor, List[str]]]:
        descriptors = await library_descriptors(self.config, env, self.glob, self.project_root)
        logger.info(f"Bundling {len(descriptors)} descriptor(s) for {env.value}")
        outputs = await bundle_each(descriptors, self.bundler.bundle, BuildRun(f"bundle ({env.value})"))
        return list(zip(descriptors, outputs))

    async def bundle(self, env: BuildEnv) -> List[str]:
        """Expand the library descriptors for ``env`` and bundle them"""
        return [artifact for _, artifacts in await self._bundle(env) for artifact in artifacts]

    def release_entries(
        self,
        outputs: Sequence[Tuple[BuildDescriptor, List[str]]],
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Pick the script (``main``) and module (``module``) entry files

        Only bundles written directly into the dist folder count; the cli
        bundle lives in a sub folder.

        Returns:
            ``(main_file, module_file)``; ``None`` for a bundle kind that was
            not built

        Raises:
            InternalError: If a bundle kind produced more than one file
        """
        require_fields(self.config, (("dist", "path"),))
        dist_path = self.config.dist.path

        files = {Format.ESM: [], Format.CJS: []}
        for descriptor, artifacts in outputs:
            if descriptor.format in files and descriptor.output_dir == dist_path:
                files[descriptor.format].extend(artifacts)

        for output_format, names in files.items():
            if len(names) > 1:
                raise InternalError(
                    f"There should be at most one {output_format.value} output file, "
                    f"got {len(names)}: {', '.join(names)}"
                )

        main_file = files[Format.CJS][0] if files[Format.CJS] else None
        module_file = files[Format.ESM][0] if files[Format.ESM] else None
        return main_file, module_file

    async def post_build(self, main_file: Optional[str] = None, module_file: Optional[str] = None) -> None:
        """Write the release manifest and copy extra files, concurrently"""
        require_fields(self.config, (("dist", "path"), ("package",)))
        dist_path = self.project_root / self.config.dist.path
        files = self.config.dist.files or []

        await run_all(
            [
                labelled(
                    "package.json",
                    lambda: create_package_manifest(self.config.package, dist_path, main_file, module_file),
                ),
                labelled("dist files", lambda: copy_dist_files(files, self.project_root, dist_path)),
            ],
            labels=["package.json", "dist files"],
        )

    async def build_all(self, env: BuildEnv) -> List[str]:
        """
        Build everything for ``env``

        Development builds only bundle. Production builds then write the
        release manifest and copy the release files, once every bundle
        succeeded.

        Returns:
            Artifact names produced by the bundler
        """
        outputs = await self._bundle(env)
        artifacts = [artifact for _, names in outputs for artifact in names]
        logger.info(f"Bundled {len(artifacts)} artifact(s)")

        if env is BuildEnv.PRODUCTION:
            main_file, module_file = self.release_entries(outputs)
            await self.post_build(main_file, module_file)

        return artifacts
