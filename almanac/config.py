"""Configuration file management for almanac."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from almanac.domain.comments import StrayPolicy
from almanac.domain.grid import CALENDAR_COLORS, FALLBACK_COLOR
from almanac.domain.models import Color
from almanac.domain.query import DEFAULT_PAGE_SIZE
from almanac.errors import ConfigurationError

DEFAULT_BROWSE_URI = "/calendar/query/{query_key}/"


@dataclass(frozen=True)
class Settings:
    """Immutable, validated settings."""

    timezone: str = "local"
    palette: tuple[Color, ...] = CALENDAR_COLORS
    fallback_color: Color = FALLBACK_COLOR
    stray_comments: StrayPolicy = StrayPolicy.REJECT
    page_size: int = DEFAULT_PAGE_SIZE
    browse_uri: str = DEFAULT_BROWSE_URI


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "almanac" / "config.toml"


def default_config() -> dict[str, Any]:
    defaults = Settings()
    return {
        "timezone": defaults.timezone,
        "palette": list(defaults.palette),
        "fallback_color": defaults.fallback_color,
        "stray_comments": defaults.stray_comments.value,
        "page_size": defaults.page_size,
        "browse_uri": defaults.browse_uri,
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    save_config(default_config(), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def settings_from_config(config: dict[str, Any]) -> Settings:
    """Validate a configuration dictionary into Settings.

    Missing keys fall back to defaults.

    Raises:
        ConfigurationError: If a value is present but unusable.
    """
    defaults = Settings()

    palette = config.get("palette", list(defaults.palette))
    if not isinstance(palette, list) or not palette:
        raise ConfigurationError("'palette' must be a non-empty list of color names")

    try:
        stray_comments = StrayPolicy(config.get("stray_comments", defaults.stray_comments.value))
    except ValueError as e:
        raise ConfigurationError("'stray_comments' must be 'reject' or 'drop'") from e

    page_size = config.get("page_size", defaults.page_size)
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise ConfigurationError("'page_size' must be a positive integer")

    return Settings(
        timezone=str(config.get("timezone", defaults.timezone)),
        palette=tuple(Color(str(c)) for c in palette),
        fallback_color=Color(str(config.get("fallback_color", defaults.fallback_color))),
        stray_comments=stray_comments,
        page_size=page_size,
        browse_uri=str(config.get("browse_uri", defaults.browse_uri)),
    )


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings, using defaults when no config file exists.

    Args:
        config_path: Path to config file. If None, uses default location.

    Raises:
        ConfigurationError: If the file is not valid TOML or has bad values.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return Settings()
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Config file is not valid TOML: {e}") from e

    return settings_from_config(config)
