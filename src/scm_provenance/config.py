"""Configuration loading for SCM provenance.

Configuration sources are merged in priority order:
    1. Defaults (defined in ProvenanceConfig)
    2. Project config (./scm-provenance.toml)
    3. Explicit config file
    4. Environment variables (SCM_PROVENANCE_* prefix)
    5. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True)
    >>> config.verbosity
    'verbose'
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "SCM_PROVENANCE_"
PROJECT_CONFIG_NAME = "scm-provenance.toml"


def _default_repository_path() -> str:
    try:
        return os.getcwd()
    except OSError:
        return "."


@dataclass(frozen=True)
class ProvenanceConfig:
    """Settings for repository access and output.

    Attributes:
        repository_path: Checkout to read (defaults to the working directory)
        git_binary: git executable to invoke
        git_timeout_seconds: Per-command timeout for git subprocesses
        remote_name: Remote whose URLs become ``scm.repository``
        verbosity: Logging verbosity level
    """

    repository_path: str = field(default_factory=_default_repository_path)
    git_binary: str = "git"
    git_timeout_seconds: int = 10
    remote_name: str = "origin"
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        if not self.repository_path:
            raise InvalidConfigError("repository_path", self.repository_path, "must not be empty")
        if not self.git_binary:
            raise InvalidConfigError("git_binary", self.git_binary, "must not be empty")
        if self.git_timeout_seconds < 1:
            raise InvalidConfigError(
                "git_timeout_seconds", self.git_timeout_seconds, "must be at least 1"
            )
        if not self.remote_name:
            raise InvalidConfigError("remote_name", self.remote_name, "must not be empty")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )

    @property
    def repository(self) -> Path:
        return Path(self.repository_path)


def load_config(config_file: Optional[Path] = None, **overrides) -> ProvenanceConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None`` values are ignored

    Returns:
        Validated ProvenanceConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a value is rejected
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    if "repository_path" in merged:
        merged["repository_path"] = str(merged["repository_path"])

    known = {f.name for f in fields(ProvenanceConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(
            f"Invalid configuration: unknown key(s) {', '.join(unknown)}",
            details={"unknown": ", ".join(unknown)},
        )

    return ProvenanceConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from SCM_PROVENANCE_* environment variables.

    Supported environment variables:
        SCM_PROVENANCE_REPOSITORY_PATH: str
        SCM_PROVENANCE_GIT_BINARY: str
        SCM_PROVENANCE_GIT_TIMEOUT_SECONDS: int
        SCM_PROVENANCE_REMOTE_NAME: str
        SCM_PROVENANCE_VERBOSITY: quiet/normal/verbose
    """
    type_hints = get_type_hints(ProvenanceConfig)
    result: dict[str, Any] = {}

    for f in fields(ProvenanceConfig):
        env_key = f"{ENV_PREFIX}{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        if type_hints.get(f.name) is int:
            try:
                result[f.name] = int(env_value)
            except ValueError:
                raise InvalidConfigError(env_key, env_value, "expected an integer")
        else:
            result[f.name] = env_value

    return result


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file, accepting either top-level keys or a [scm-provenance] table."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}", details={"path": str(path)})

    section = data.get("scm-provenance")
    if isinstance(section, dict):
        return dict(section)
    return data
