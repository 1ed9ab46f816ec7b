"""
Bundler

The bundler is an external tool: given a descriptor it writes the bundle and
reports the names of the files it produced.
"""

import json
import logging
from typing import List, Optional, Protocol

from component_build.core.descriptors import BuildDescriptor
from component_build.utils.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class Bundler(Protocol):
    """Anything that can turn a descriptor into output files"""

    async def bundle(self, descriptor: BuildDescriptor) -> List[str]:
        ...


class RollupBundler:
    """Runs the rollup CLI for each descriptor"""

    def __init__(self, runner: Optional[CommandRunner] = None, executable: str = "rollup"):
        """
        Args:
            runner: Command runner (defaults to one in the working directory)
            executable: Rollup executable, e.g. ``npx rollup``'s resolved path
        """
        self.runner = runner or CommandRunner()
        self.executable = executable

    def command_for(self, descriptor: BuildDescriptor) -> List[str]:
        """Rollup command line for ``descriptor``"""
        command = [
            self.executable,
            descriptor.input,
            "--dir", descriptor.output_dir,
            "--format", descriptor.format.value,
            "--entryFileNames", descriptor.entry_file_names,
            "--chunkFileNames", descriptor.chunk_file_names,
            "--plugin", "node-resolve",
            "--plugin", "commonjs",
            "--silent",
        ]

        if descriptor.tsconfig:
            command += ["--plugin", "typescript=" + json.dumps({"tsconfig": descriptor.tsconfig})]
        if descriptor.external:
            command += ["--external", ",".join(descriptor.external)]
        if descriptor.banner:
            command += ["--banner", descriptor.banner]
        if descriptor.name:
            command += ["--name", descriptor.name]

        return command

    async def bundle(self, descriptor: BuildDescriptor) -> List[str]:
        """
        Bundle one descriptor

        Returns:
            The entry artifact name, relative to the descriptor's output dir.
            Shared chunks are content addressed and not reported.

        Raises:
            CommandError: If rollup fails
        """
        await self.runner.run(self.command_for(descriptor))
        logger.debug(f"Bundled {descriptor.input} ({descriptor.format.value})")
        return [descriptor.entry_file_name]
