"""
Configuration management for dep-licenses.

Provides configurable settings for evidence collection, license matching and
logging. Settings are read from a JSON or YAML config file and then from
environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console

from .structured_logging import configure_logging

console = Console(stderr=True)


@dataclass
class DetectionConfig:
    """Evidence collection configuration.

    The filename tables map a file to its evidence class. Names are compared
    case-insensitively; ``license_extensions`` lists the suffixes allowed after
    a license stem ("" means no suffix).
    """

    license_stems: List[str] = field(
        default_factory=lambda: [
            "license",
            "licence",
            "copying",
            "copyright",
            "unlicense",
            "mit-license",
            "license-mit",
            "licence-mit",
            "license-apache",
            "license-apache-2.0",
            "copying.lesser",
            "copying.lib",
            "ofl",
            "patents",
        ]
    )
    license_extensions: List[str] = field(
        default_factory=lambda: ["", ".md", ".txt", ".markdown", ".rst", ".html"]
    )
    notice_stems: List[str] = field(
        default_factory=lambda: ["authors", "notice", "legal"]
    )
    readme_filenames: List[str] = field(
        default_factory=lambda: [
            "readme",
            "readme.md",
            "readme.markdown",
            "readme.mdown",
            "readme.txt",
            "readme.rst",
            "readme.rdoc",
        ]
    )
    max_file_size_mb: int = 5

    @property
    def max_file_size_bytes(self) -> int:
        """Convert MB to bytes for internal use."""
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class MatchingConfig:
    """License oracle configuration."""

    # Lowest spdx_lookup match confidence accepted, as a fraction
    min_confidence: float = 0.9


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "WARNING"
    enable_json: bool = True


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_global_config: Optional[ComprehensiveConfig] = None


def validate_config_values(config: ComprehensiveConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    if config.detection.max_file_size_mb <= 0:
        errors.append("detection.max_file_size_mb must be positive")
    if not config.detection.license_stems:
        errors.append("detection.license_stems must not be empty")
    if not (0.0 < config.matching.min_confidence <= 1.0):
        errors.append("matching.min_confidence must be in (0.0, 1.0]")
    if config.logging.log_level.upper() not in {
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
        "CRITICAL",
    }:
        errors.append(f"logging.log_level is not a valid level: {config.logging.log_level}")

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() in [".yaml", ".yml"]:
                return yaml.safe_load(f)
            elif config_path.suffix.lower() == ".json":
                return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"⚠️  Error loading config from {config_path}: {e}", style="yellow")

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".dep-licenses.json",
        Path.cwd() / ".dep-licenses.yaml",
        Path.cwd() / ".dep-licenses.yml",
        Path.home() / ".config" / "dep-licenses" / "config.json",
        Path.home() / ".config" / "dep-licenses" / "config.yaml",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_int(key: str) -> Optional[int]:
        try:
            return int(os.environ[key]) if key in os.environ else None
        except ValueError:
            console.print(f"⚠️  Invalid integer value for {key}, using default", style="yellow")
            return None

    def get_env_float(key: str) -> Optional[float]:
        try:
            return float(os.environ[key]) if key in os.environ else None
        except ValueError:
            console.print(f"⚠️  Invalid float value for {key}, using default", style="yellow")
            return None

    if max_file_size := get_env_int("DEP_LICENSES_MAX_FILE_SIZE_MB"):
        config.detection.max_file_size_mb = max_file_size
    if min_confidence := get_env_float("DEP_LICENSES_MIN_CONFIDENCE"):
        config.matching.min_confidence = min_confidence
    if log_level := os.environ.get("DEP_LICENSES_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def coerce_config_value(current: Any, value: Any) -> Any:
    """
    Convert a config file value to the type of the setting it replaces.

    Raises:
        TypeError: If the value cannot stand in for the current setting
        ValueError: If a string cannot be converted to a number
    """
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise TypeError(f"expected a boolean, got {type(value).__name__}")
        return value
    if isinstance(current, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        return type(current)(value)
    if isinstance(current, list):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise TypeError("expected a list of strings")
        return list(value)
    if isinstance(current, str):
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {type(value).__name__}")
        return value
    return value


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            try:
                setattr(config, key, coerce_config_value(getattr(config, key), value))
            except (TypeError, ValueError):
                console.print(
                    f"⚠️  Invalid value for {section_name}.{key}: {value!r}, using default",
                    style="yellow",
                )
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )


def load_config() -> ComprehensiveConfig:
    """Load configuration from file and environment."""
    config = ComprehensiveConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if isinstance(file_config, dict):
            for section in ("detection", "matching", "logging"):
                if isinstance(file_config.get(section), dict):
                    apply_config_section(
                        getattr(config, section), file_config[section], section
                    )

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        defaults = ComprehensiveConfig()
        for error in validation_errors:
            section, _, key = error.split(" ", 1)[0].partition(".")
            setattr(getattr(config, section), key, getattr(getattr(defaults, section), key))

    return config


def get_config() -> ComprehensiveConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
        configure_logging(
            _global_config.logging.log_level, _global_config.logging.enable_json
        )
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None
