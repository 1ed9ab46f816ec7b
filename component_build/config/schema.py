"""
Build Configuration Schema

Pydantic models for the resolved configuration tree. Every section and leaf
is optional at the type level; which fields are required depends on the
operation about to run (see ``core.config_loader.require_fields``).

Models are frozen, so attributes can't be reassigned. Free-form leaves
(``build.tools``, ``tests.wctConfig``, ``package``) are plain dicts and are
not deep-frozen: code reading them builds new values instead of editing them
in place.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Section(BaseModel):
    """Base for every config section: camelCase keys, unknown keys kept"""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class ConfigFilesConfig(Section):
    """Tool config files used by a source tree"""
    tsconfig: Optional[str] = Field(None, description="tsconfig file, relative to the tree's path")
    tslint: Optional[str] = Field(None, description="tslint config file")
    style_lint: Optional[str] = Field(None, alias="styleLint", description="stylelint config file")


class OutputKindConfig(Section):
    """Module or script bundle settings"""
    create: Optional[bool] = Field(None, description="Create this bundle kind")
    extension: Optional[str] = Field(None, description="Output file extension")


class CliBundleConfig(Section):
    """Command-line bundle settings"""
    create: Optional[bool] = Field(None, description="Create the cli bundle")
    entrypoint: Optional[str] = Field(None, description="Cli entry file, relative to src.path")
    path: Optional[str] = Field(None, description="Output folder, relative to dist.path")


class BuildConfig(Section):
    """Build settings"""
    module: Optional[OutputKindConfig] = None
    script: Optional[OutputKindConfig] = None
    cli: Optional[CliBundleConfig] = None
    tools: Optional[Dict[str, Optional[Dict[str, Any]]]] = Field(
        None,
        description="Tool option bags keyed by environment",
    )


class PathConfig(Section):
    """Section that only names a folder"""
    path: Optional[str] = None


class DistConfig(PathConfig):
    """Distribution settings"""
    files: Optional[List[str]] = Field(None, description="Extra files copied into the dist folder")


class DocsConfig(PathConfig):
    """Documentation settings"""
    analysis_filename: Optional[str] = Field(None, alias="analysisFilename")
    node_modules_path: Optional[str] = Field(None, alias="nodeModulesPath")


class PublishConfig(Section):
    """Publish settings (consumed by the external packaging tool)"""
    archive_formats: Optional[Dict[str, Any]] = Field(None, alias="archiveFormats")
    check_files: Optional[Dict[str, bool]] = Field(None, alias="checkFiles")
    dryrun: Optional[bool] = None
    force: Optional[bool] = None
    hosted_on_github: Optional[bool] = Field(None, alias="hostedOnGitHub")
    master_branch: Optional[str] = Field(None, alias="masterBranch")
    prerelease_branch_regex: Optional[str] = Field(None, alias="prereleaseBranchRegex")
    run_file_checks: Optional[bool] = Field(None, alias="runFileChecks")
    run_git_checks: Optional[bool] = Field(None, alias="runGitChecks")


class SrcConfig(PathConfig):
    """Source files settings"""
    entrypoint: Optional[str] = Field(None, description="Glob of entry files, relative to path")
    config_files: Optional[ConfigFilesConfig] = Field(None, alias="configFiles")


class TestsConfig(PathConfig):
    """Test settings"""
    test_files: Optional[str] = Field(None, alias="testFiles")
    config_files: Optional[ConfigFilesConfig] = Field(None, alias="configFiles")
    wct_config: Optional[Dict[str, Any]] = Field(None, alias="wctConfig")


class ComponentConfig(Section):
    """Identity of the component, derived from package.json"""
    name: Optional[str] = None
    scope: Optional[str] = None


class Config(Section):
    """Root configuration model"""
    build: Optional[BuildConfig] = None
    demos: Optional[PathConfig] = None
    dist: Optional[DistConfig] = None
    docs: Optional[DocsConfig] = None
    publish: Optional[PublishConfig] = None
    src: Optional[SrcConfig] = None
    temp: Optional[PathConfig] = None
    tests: Optional[TestsConfig] = None

    # Filled in from the project's package.json
    component: Optional[ComponentConfig] = None
    package: Optional[Dict[str, Any]] = None

    def to_tree(self) -> Dict[str, Any]:
        """Plain nested dict with camelCase keys"""
        return self.model_dump(by_alias=True, exclude_none=True)
