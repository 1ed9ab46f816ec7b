"""
Configuration Loader

Resolves the configuration for a run: defaults, values derived from the
project's package.json and the user's overrides are deep merged (in that
order), then validated into a ``Config`` model.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, ValidationError

from component_build.config.commands import Command, needs_build_config
from component_build.config.defaults import default_config
from component_build.config.schema import Config
from component_build.core.errors import ConfigError
from component_build.models.options import Options

logger = logging.getLogger(__name__)

FieldPath = Sequence[str]

# Fields every library build reads
LIBRARY_BUILD_FIELDS: Tuple[FieldPath, ...] = (
    ("src", "path"),
    ("src", "entrypoint"),
    ("dist", "path"),
    ("src", "configFiles", "tsconfig"),
)

# Fields the test bundle reads
TEST_BUILD_FIELDS: Tuple[FieldPath, ...] = (
    ("tests", "path"),
    ("tests", "testFiles"),
    ("src", "path"),
    ("src", "configFiles", "tsconfig"),
)


def deep_merge(base: Mapping[str, Any], update: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two configuration trees

    Nested mappings present on both sides are merged recursively. Any other
    value in ``update`` (lists included) replaces the one in ``base`` unless
    it is ``None``. Neither input is modified.

    Args:
        base: Default tree
        update: Override tree

    Returns:
        A new merged tree
    """
    result = {key: copy.deepcopy(value) for key, value in base.items()}

    for key, value in update.items():
        if value is None:
            continue
        if isinstance(result.get(key), Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def resolve(defaults: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Merge user overrides onto the defaults"""
    return deep_merge(defaults, overrides or {})


def _child(node: Any, key: str) -> Any:
    if node is None:
        return None
    if isinstance(node, BaseModel):
        for name, field in type(node).model_fields.items():
            if key in (name, field.alias):
                return getattr(node, name)
        return (node.model_extra or {}).get(key)
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def get_field(config: Union[Config, Mapping[str, Any]], path: FieldPath) -> Any:
    """Look up a value by key path; ``None`` when any step is missing"""
    node: Any = config
    for key in path:
        node = _child(node, key)
        if node is None:
            return None
    return node


def require_fields(config, paths: Sequence[FieldPath]):
    """
    Check that every field an operation reads is set

    The paths are checked in order and the first missing one is reported.

    Args:
        config: Resolved config (model or plain tree)
        paths: Key paths, e.g. ``("src", "path")``

    Returns:
        The config, unchanged

    Raises:
        ConfigError: Naming the first missing field
    """
    for path in paths:
        if get_field(config, path) is None:
            dotted = ".".join(path)
            raise ConfigError(
                f'"config.{dotted}" is not set.',
                hint=f"Set {dotted} in your config file or remove the override that clears it",
            )
    return config


def validate_config(tree: Mapping[str, Any]) -> Config:
    """
    Validate a merged tree into a ``Config`` model

    Raises:
        ConfigError: If the tree is structurally invalid
    """
    try:
        return Config.model_validate(tree)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error['loc'])
            error_messages.append(f"  {loc}: {error['msg']}")
        raise ConfigError("Configuration validation failed:\n" + "\n".join(error_messages))


def load_user_config(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    """
    Load the user's partial config from a YAML or JSON file

    Args:
        path: Config file path; ``None`` means no user config

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    if path is None:
        return {}

    config_path = Path(path).resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            if config_path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Unable to load config \"{config_path}\"\n{e}")
    except OSError as e:
        raise ConfigError(f"Unable to read config \"{config_path}\": {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config \"{config_path}\" must contain a mapping at the top level")

    logger.debug(f"Loaded user config from {config_path}")
    return data


def load_package_manifest(project_root: Path) -> Dict[str, Any]:
    """
    Read and sanity check the project's package.json

    Raises:
        ConfigError: If the file is missing, malformed or has no usable name
    """
    manifest_path = Path(project_root) / "package.json"
    try:
        with open(manifest_path, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"package.json not found in {project_root}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {manifest_path}: {e}")

    name = manifest.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError("package.json does not contain a valid name property.")
    if name.count("/") > 1:
        raise ConfigError("Too many slashes (/) found in package.json's name property.")

    return manifest


def component_identity(manifest: Mapping[str, Any]) -> Tuple[Optional[str], str]:
    """Split ``@scope/name`` into ``(scope, name)``; scope is ``None`` when absent"""
    parts = manifest["name"].split("/")
    if len(parts) == 1:
        return None, parts[0]
    return parts[0], parts[1]


def check_build_config(config: Config) -> None:
    """
    Check the build section is usable

    Raises:
        ConfigError: On a missing field or an impossible combination
    """
    require_fields(config, (
        ("build", "module", "create"),
        ("build", "module", "extension"),
        ("build", "script", "create"),
        ("build", "script", "extension"),
    ))

    module = config.build.module
    script = config.build.script
    if not (module.create or script.create):
        raise ConfigError("Both building of the module and the script cannot be turned off.")
    if module.extension == script.extension:
        raise ConfigError("The module and the script cannot both have the same file extension.")


def parse_override(override: str) -> Dict[str, Any]:
    """
    Turn ``key.subkey=value`` into a nested override tree

    The value is parsed as YAML, so ``true``, ``3`` and ``[a, b]`` become
    the matching Python values.

    Raises:
        ConfigError: If the override is malformed
    """
    if '=' not in override:
        raise ConfigError(
            f"Invalid config override '{override}': expected key=value",
            hint="Example: --override dist.path=build",
        )

    key_path, value_str = override.split('=', 1)
    keys = [key for key in key_path.strip().split('.') if key]
    if not keys:
        raise ConfigError(f"Invalid config override '{override}': empty key")

    try:
        value = yaml.safe_load(value_str) if value_str.strip() else ""
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config override '{override}': {e}")

    tree: Dict[str, Any] = {keys[-1]: value}
    for key in reversed(keys[:-1]):
        tree = {key: tree}
    return tree


def apply_cli_overrides(tree: Mapping[str, Any], overrides: List[str]) -> Dict[str, Any]:
    """Merge every ``key=value`` override onto ``tree``, in order"""
    result = dict(tree)
    for override in overrides or []:
        result = deep_merge(result, parse_override(override))
    return result


def load_config(
    options: Options,
    project_root: Path,
    ci: Optional[str] = None,
    command: Optional[Command] = None,
    overrides: Optional[List[str]] = None,
) -> Config:
    """
    Resolve the configuration for one invocation

    Args:
        options: Run options
        project_root: Folder holding package.json
        ci: Value of the ``CI`` environment variable
        command: Command about to run (``None`` if unknown)
        overrides: ``key=value`` overrides from the command line

    Returns:
        The validated, read-only configuration

    Raises:
        ConfigError: If any layer is invalid
    """
    manifest = load_package_manifest(project_root)
    scope, name = component_identity(manifest)

    user_config = apply_cli_overrides(load_user_config(options.user_config_file), overrides)

    auto_loaded = {
        "package": manifest,
        "component": {"name": name, "scope": scope},
    }

    tree = resolve(resolve(default_config(ci), auto_loaded), user_config)
    config = validate_config(tree)

    if needs_build_config(command):
        check_build_config(config)
        if command is Command.TEST:
            require_fields(config, TEST_BUILD_FIELDS)

    logger.debug(f"Resolved config for component '{name}' ({options.env.value})")
    return config
