"""tinhorn configuration system.

Configuration is YAML with two sections, `output` and `markdown`. String
values may reference environment variables as `${VAR}` or `${VAR:-fallback}`.

Config file selection:
1. CLI --config argument
2. The nearest `.tinhorn/config.yaml` or `tinhorn.yaml` at or above the
   working directory
"""

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Output file path (None writes to stdout)
        encoding: Text encoding for template, data and output files
    """

    path: str | None = None
    encoding: str = "utf-8"


@dataclass
class MarkdownConfig:
    """Markdown conversion configuration.

    Attributes:
        extensions: Python-Markdown extensions enabled for markdown fields
    """

    extensions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate markdown configuration."""
        if not all(isinstance(name, str) for name in self.extensions):
            raise ValueError(f"Markdown extensions must be names (got {self.extensions!r})")


@dataclass
class TinhornConfig:
    """Top-level tinhorn configuration.

    Attributes:
        output: Output path and encoding
        markdown: Markdown conversion settings
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

# ${NAME} or ${NAME:-fallback}
_ENV_VAR_RE = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def substitute_env_vars(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Expand ``${NAME}`` and ``${NAME:-fallback}`` references in config values.

    Strings inside nested dicts and lists are expanded too; other values are
    returned as they are.

    Args:
        value: Parsed YAML value
        environ: Variables to expand from (default: ``os.environ``)

    Returns:
        Value with references expanded

    Raises:
        ValueError: If a referenced variable is unset and has no fallback
    """
    env = os.environ if environ is None else environ

    if isinstance(value, dict):
        return {key: substitute_env_vars(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item, env) for item in value]
    if not isinstance(value, str):
        return value

    def expand(match: re.Match[str]) -> str:
        name, default = match.group("name", "default")
        if name in env:
            return env[name]
        if default is None:
            raise ValueError(f"Environment variable not set: {name}")
        return default

    return _ENV_VAR_RE.sub(expand, value)


# =============================================================================
# Config File Discovery
# =============================================================================

# Checked in order inside each directory
CONFIG_CANDIDATES = (Path(".tinhorn") / "config.yaml", Path("tinhorn.yaml"))


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest config file at or above a directory.

    Each directory from ``start_path`` up to the filesystem root is checked
    for ``.tinhorn/config.yaml`` and then ``tinhorn.yaml``; the first hit
    wins, so a project config shadows one further up.

    Args:
        start_path: Directory to start from (default: cwd)

    Returns:
        Path to the config file, or None if there is none
    """
    directory = (start_path or Path.cwd()).resolve()

    for base in (directory, *directory.parents):
        for candidate in CONFIG_CANDIDATES:
            path = base / candidate
            if path.is_file():
                return path

    return None


# =============================================================================
# Config Loading
# =============================================================================

_SECTIONS = ("output", "markdown")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def load_config_from_dict(data: dict[str, Any]) -> TinhornConfig:
    """Build configuration from parsed YAML.

    Missing or empty sections keep their defaults.

    Raises:
        ValueError: On an unknown or malformed section, or an unset variable
    """
    unknown = sorted(set(data) - set(_SECTIONS))
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")

    data = substitute_env_vars(data)
    output = _section(data, "output")
    markdown = _section(data, "markdown")

    defaults = OutputConfig()
    return TinhornConfig(
        output=OutputConfig(
            path=output.get("path", defaults.path),
            encoding=output.get("encoding", defaults.encoding),
        ),
        markdown=MarkdownConfig(extensions=list(markdown.get("extensions") or [])),
    )


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> TinhornConfig:
    """Load configuration from an explicit or discovered file.

    Args:
        config_path: Explicit config file
        auto_discover: Search for a config file when none is given

    Returns:
        Loaded configuration, or the defaults when there is no file

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        ValueError: If the file is not a YAML mapping or fails validation
    """
    if config_path is None:
        config_path = find_config_file() if auto_discover else None
        if config_path is None:
            return TinhornConfig()
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    config = load_config_from_dict(data)
    config._config_path = config_path
    logger.debug("Loaded config from %s", config_path)
    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# tinhorn configuration

# Output settings
output:
  # path: "build/index.html"  # Omit to write to stdout
  encoding: "utf-8"

# Markdown conversion for fields marked markdown=True
markdown:
  extensions: []  # e.g. ["tables", "fenced_code"]
'''
