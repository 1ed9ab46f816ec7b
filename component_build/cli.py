#!/usr/bin/env python
"""
Component Build CLI

Command-line entry point: build, test, lint, analyze and document a
web component project.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from component_build import __version__
from component_build.config.commands import COMMAND_ALIASES, Command, resolve_command
from component_build.config.settings import BuildSettings
from component_build.core.config_loader import load_config
from component_build.core.errors import BuildToolError, format_error_for_cli
from component_build.core.runner import run_project
from component_build.models.options import Options, select_environment


def setup_logging(level: str = "INFO"):
    """Setup basic logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='[%(levelname)s] %(message)s'
    )


def print_success(message: str):
    """Print success message"""
    print(f"✓ {message}")


def print_error(message: str):
    """Print error message"""
    print(f"✗ {message}", file=sys.stderr)


def print_info(message: str):
    """Print info message"""
    print(f"ℹ {message}")


def build_parser() -> argparse.ArgumentParser:
    """Argument parser; help is a command, so argparse's own -h is off"""
    commands = "\n".join(
        f"  {', '.join(aliases)}" for aliases in COMMAND_ALIASES.values()
    )
    parser = argparse.ArgumentParser(
        prog="component-build",
        description="Build tooling for web component projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog=f"""
Commands:
{commands}

Examples:
  # Development build
  component-build build

  # Production build with a user config
  component-build build --production --config build.config.yaml

  # Override a config value
  component-build build --override dist.path=build

  # Only compile the tests
  component-build test --compile-only
"""
    )

    parser.add_argument('command', nargs='?', help='Command to execute')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-p', '--production', action='store_true', help='Build for production')
    parser.add_argument('-c', '--config', dest='config_file', metavar='FILE', help='User config file (YAML or JSON)')
    parser.add_argument('--debug', action='store_true', help='Verbose logging')
    parser.add_argument('--compile-only', action='store_true', help="Compile the tests but don't run them")
    parser.add_argument(
        '--override',
        action='append',
        help='Override config values (e.g., dist.path=build)',
        metavar='KEY=VALUE'
    )
    parser.add_argument('--project-root', default='.', help='Component project folder (default: .)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    help_aliases = COMMAND_ALIASES[Command.HELP]
    help_flags = [alias for alias in help_aliases if alias.startswith('-')]
    if (argv and argv[0] in help_aliases) or any(arg in help_flags for arg in argv):
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    load_dotenv()
    settings = BuildSettings()
    setup_logging("DEBUG" if args.debug else settings.log_level)

    try:
        command = resolve_command(args.command)
        if command is Command.HELP:
            parser.print_help()
            return 0

        options = Options(
            env=select_environment(command, args.production, settings.node_env),
            debug=args.debug,
            user_config_file=args.config_file,
            compile_only=args.compile_only,
        )

        project_root = Path(args.project_root).resolve()
        config = load_config(
            options,
            project_root,
            ci=settings.ci,
            command=command,
            overrides=args.override,
        )

        print_info(f"Running {command.value} ({options.env.value})")
        result = asyncio.run(run_project(command, options, config, project_root))

        if isinstance(result, list):
            for artifact in result:
                print_info(f"  {artifact}")
        print_success(f"{command.value} complete")
        return 0

    except BuildToolError as e:
        print_error(format_error_for_cli(e))
        return 1
    except KeyboardInterrupt:
        print()
        print_info("Cancelled by user")
        return 130
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logging.exception("Full traceback:")
        return 1


if __name__ == '__main__':
    sys.exit(main())
