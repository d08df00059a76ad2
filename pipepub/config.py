"""
Configuration management for pipepub.

Two concerns live here:
- Output-location intake: raw JSON/YAML-shaped entries are parsed into
  OutputDeclarations at construction time and validated fail-fast.
- The settings file: ``$PIPEPUB_HOME/config.yaml`` (default
  ``~/.config/pipepub/config.yaml``).
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from dotenv import load_dotenv

from pipepub.errors import ConfigError
from pipepub.schemas import OutputDeclaration

__all__ = [
    "ConfigError",
    "MAX_OUTPUTS",
    "PublisherConfig",
    "get_pipepub_home",
    "load_config",
    "parse_output_locations",
    "sanitize",
    "validate_output_count",
]

# Upper bound on outputs a single build step may publish
MAX_OUTPUTS = 5

# Control characters and characters unsafe in an artifact path/name
UNSAFE_CHARS = re.compile(r"[\x00-\x1f\x7f<>\"'`;|*?$]")


def sanitize(value: str) -> str:
    """Strip characters that are unsafe in an output path or artifact name."""
    return UNSAFE_CHARS.sub("", value)


def parse_output_locations(entries: Optional[Iterable[Any]]) -> list[OutputDeclaration]:
    """
    Parse configured output locations.

    Each entry is a mapping with an ``output`` string. Values are trimmed and
    sanitized; entries that are missing or end up empty are dropped.

    Args:
        entries: Raw entries (None means no outputs)

    Returns:
        OutputDeclarations in configuration order

    Raises:
        ConfigError: If an entry is not a mapping or its output is not a string
    """
    outputs: list[OutputDeclaration] = []
    if entries is None:
        return outputs

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(
                f"Output location {index}: expected a mapping, got {type(entry).__name__}"
            )
        raw = entry.get("output")
        if raw is None:
            continue
        if not isinstance(raw, str):
            raise ConfigError(
                f"Output location {index}: 'output' must be a string, got {type(raw).__name__}"
            )
        value = sanitize(raw.strip()).strip()
        if value:
            outputs.append(OutputDeclaration(value))

    return outputs


def validate_output_count(outputs: list[OutputDeclaration], maximum: int = MAX_OUTPUTS) -> None:
    """
    Raises:
        ConfigError: If more than ``maximum`` outputs are configured
    """
    if len(outputs) > maximum:
        raise ConfigError(
            f"Too many outputs: {len(outputs)}. The maximum number of outputs is: {maximum}"
        )


def get_pipepub_home() -> Path:
    """Configuration directory; PIPEPUB_HOME overrides the default."""
    env_home = os.environ.get("PIPEPUB_HOME")
    if env_home:
        return Path(env_home)
    return Path("~/.config/pipepub").expanduser()


@dataclass
class PublisherConfig:
    """Settings for the publish step."""
    output_locations: list[dict[str, Any]] = field(default_factory=list)
    max_outputs: int = MAX_OUTPUTS
    artifact_root: Optional[str] = None
    env_file: Optional[str] = None
    logging: dict[str, Any] = field(default_factory=dict)

    def outputs(self) -> list[OutputDeclaration]:
        """Parse and validate the configured output locations."""
        outputs = parse_output_locations(self.output_locations)
        validate_output_count(outputs, self.max_outputs)
        return outputs

    def get_artifact_root(self) -> Path:
        if self.artifact_root:
            return Path(self.artifact_root).expanduser()
        return get_pipepub_home() / "artifacts"

    def get_log_level(self) -> str:
        return str(self.logging.get("level", "INFO")).upper()

    def get_log_format(self) -> str:
        """Get log format (structured or pretty)."""
        return self.logging.get("format", "pretty")

    def get_log_file_path(self) -> Optional[Path]:
        log_file = self.logging.get("file")
        return Path(log_file).expanduser() if log_file else None

    def should_log_to_console(self) -> bool:
        return bool(self.logging.get("console", True))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublisherConfig":
        known = {"output_locations", "max_outputs", "artifact_root", "env_file", "logging"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")

        output_locations = data.get("output_locations") or []
        if not isinstance(output_locations, list):
            raise ConfigError("'output_locations' must be a list")
        logging_cfg = data.get("logging") or {}
        if not isinstance(logging_cfg, dict):
            raise ConfigError("'logging' must be a mapping")

        raw_max = data.get("max_outputs", MAX_OUTPUTS)
        if isinstance(raw_max, bool):
            raise ConfigError(f"'max_outputs' must be a positive integer, got {raw_max!r}")
        try:
            max_outputs = int(raw_max)
        except (TypeError, ValueError):
            raise ConfigError(f"'max_outputs' must be a positive integer, got {raw_max!r}")
        if max_outputs < 1:
            raise ConfigError(f"'max_outputs' must be a positive integer, got {raw_max!r}")

        return cls(
            output_locations=output_locations,
            max_outputs=max_outputs,
            artifact_root=data.get("artifact_root"),
            env_file=data.get("env_file"),
            logging=logging_cfg,
        )


def load_config(config_path: Optional[Path] = None) -> PublisherConfig:
    """
    Load publisher configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $PIPEPUB_HOME/config.yaml

    Returns:
        PublisherConfig instance

    Raises:
        FileNotFoundError: If the config file is missing
        ConfigError: If config is invalid
    """
    if config_path is None:
        config_path = get_pipepub_home() / "config.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"pipepub config.yaml not found at {config_path}. Run 'pipepub init' first."
        )

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    config = PublisherConfig.from_dict(data)

    if config.env_file:
        env_path = Path(config.env_file).expanduser()
        if env_path.exists():
            load_dotenv(env_path)

    return config
