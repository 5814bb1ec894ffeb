"""Applies a selection of shared templates to a repository working copy.

This is the step the scheduled GitHub Actions workflow runs inside the target
repository: each enabled template kind is copied from the template repository
checkout to its well-known destination, followed by any additional
``local:remote`` file pairs.
"""

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError
from ruamel.yaml.error import YAMLError

from config_sync_manager.configuration.exceptions import TemplateConfigurationError
from config_sync_manager.utils.helpers import files_are_identical
from config_sync_manager.utils.yaml import load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class TemplateKind(str, Enum):
    """Enum for the kinds of templates the template repository provides."""

    GITIGNORE = "gitignore"
    GITATTRIBUTES = "gitattributes"
    EDITORCONFIG = "editorconfig"
    CLANG_FORMAT = "clang-format"

    @property
    def destination(self) -> str:
        """Path of the template in a target repository."""
        return f".{self.value}"

    @property
    def default_source(self) -> str:
        """Path of the template in the template repository when not overridden."""
        return f"templates/UnrealEngine.{self.value}"


class TemplateSelection(BaseModel):
    """Whether a template kind is synchronized and which source file it comes from."""

    enabled: bool = True
    source: str | None = None


class TemplateSyncConfig(BaseModel):
    """Selection of templates to apply to a repository."""

    templates: dict[TemplateKind, TemplateSelection] = Field(default_factory=dict)
    extra_files: list[str] = Field(default_factory=list)

    def selection_for(self, kind: TemplateKind) -> TemplateSelection:
        """Return the selection for kind, falling back to enabled with the default source."""
        return self.templates.get(kind, TemplateSelection())


@dataclass
class FileCopy:
    """A file to copy from the template repository to the target repository."""

    source: str
    destination: str


class TemplateCopyStatus(Enum):
    """Enum for what happened to a single templated file."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    MISSING_SOURCE = "missing_source"


@dataclass
class TemplateCopyResult:
    """Result of applying one FileCopy."""

    copy: FileCopy
    status: TemplateCopyStatus


def load_template_sync_config(path: Path) -> TemplateSyncConfig:
    """Load and validate a template synchronization configuration YAML file.

    Example file::

        templates:
          gitignore:
            source: templates/Unity.gitignore
          clang-format:
            enabled: false
        extra_files:
          - templates/ci/lint.yml:.github/workflows/lint.yml
    """
    if not path.exists():
        raise TemplateConfigurationError(f"Template configuration file not found: {path.absolute()}")
    try:
        data = load_yaml_file(path)
    except YAMLError as exc:
        raise TemplateConfigurationError(f"Unable to parse template configuration {path}: {exc}") from exc
    try:
        return TemplateSyncConfig.model_validate(data)
    except ValidationError as exc:
        raise TemplateConfigurationError(f"Invalid template configuration in {path}: {exc}") from exc


def parse_file_pair(pair: str) -> FileCopy:
    """Parse a 'local:remote' pair into a FileCopy."""
    local, separator, remote = pair.partition(":")
    if not separator or not local.strip() or not remote.strip():
        raise TemplateConfigurationError(f"File pair must be in the format 'local:remote', got '{pair}'")
    return FileCopy(source=local.strip(), destination=remote.strip())


def plan_template_copies(config: TemplateSyncConfig) -> list[FileCopy]:
    """Return the files to copy: enabled template kinds in catalog order, then extra file pairs."""
    copies: list[FileCopy] = []
    for kind in TemplateKind:
        selection = config.selection_for(kind)
        if not selection.enabled:
            logger.debug("Template disabled", kind=kind.value)
            continue
        copies.append(FileCopy(source=selection.source or kind.default_source, destination=kind.destination))
    copies.extend(parse_file_pair(pair) for pair in config.extra_files)
    return copies


def apply_template_copies(source_dir: Path, target_dir: Path, copies: list[FileCopy]) -> list[TemplateCopyResult]:
    """Copy each planned file from source_dir into target_dir.

    Byte-identical destinations are left untouched. A missing source file is
    reported in its result rather than raised, so the remaining files are
    still applied.
    """
    results: list[TemplateCopyResult] = []
    for file_copy in copies:
        source = source_dir / file_copy.source
        destination = target_dir / file_copy.destination

        if not source.is_file():
            logger.warning("Template source file not found", source=str(source))
            results.append(TemplateCopyResult(file_copy, TemplateCopyStatus.MISSING_SOURCE))
            continue

        if files_are_identical(source, destination):
            logger.info("Template already up to date", destination=file_copy.destination)
            results.append(TemplateCopyResult(file_copy, TemplateCopyStatus.UNCHANGED))
            continue

        status = TemplateCopyStatus.UPDATED if destination.exists() else TemplateCopyStatus.CREATED
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        logger.info("Applied template", source=file_copy.source, destination=file_copy.destination, status=status.value)
        results.append(TemplateCopyResult(file_copy, status))
    return results


def apply_overrides(
    config: TemplateSyncConfig,
    disabled: list[TemplateKind] | None = None,
    sources: list[str] | None = None,
    extra_files: list[str] | None = None,
) -> TemplateSyncConfig:
    """Return a copy of config with command line overrides applied.

    Args:
        config: The configuration loaded from file (or the default configuration).
        disabled: Template kinds to turn off.
        sources: Source overrides in the format 'KIND=PATH', e.g. 'gitignore=templates/Unity.gitignore'.
        extra_files: Additional 'local:remote' pairs appended after the configured ones.
    """
    templates = {kind: selection.model_copy() for kind, selection in config.templates.items()}

    for override in sources or []:
        kind_name, separator, source = override.partition("=")
        if not separator or not source.strip():
            raise TemplateConfigurationError(f"Source override must be in the format 'KIND=PATH', got '{override}'")
        try:
            kind = TemplateKind(kind_name.strip())
        except ValueError as exc:
            valid = ", ".join(k.value for k in TemplateKind)
            raise TemplateConfigurationError(f"Unknown template kind '{kind_name}' (expected one of: {valid})") from exc
        templates.setdefault(kind, TemplateSelection()).source = source.strip()

    for kind in disabled or []:
        templates.setdefault(kind, TemplateSelection()).enabled = False

    # Validate pairs up front so a bad pair fails before anything is copied.
    extras = [*config.extra_files, *(extra_files or [])]
    for pair in extras:
        parse_file_pair(pair)

    return TemplateSyncConfig(templates=templates, extra_files=extras)
