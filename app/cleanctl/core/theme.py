"""Color theme for cleanctl output.

The bundled ``cleanctl.data/theme.toml`` holds the defaults. A user file at
``~/.config/cleanctl/theme.toml`` may override any subset of its
``[colors]`` keys.
"""

import logging
import sys
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from cleanctl.core.paths import get_theme_path

logger = logging.getLogger(__name__)


def _check_hex(name: str, value: object) -> str:
    """Return a normalized #RGB/#RRGGBB color or raise ValueError."""
    if not isinstance(value, str):
        msg = f"{name}: color must be a string"
        raise ValueError(msg)
    color = value.strip()
    if not color.startswith("#"):
        msg = f"{name}: color must start with '#'"
        raise ValueError(msg)
    digits = color[1:]
    if len(digits) not in (3, 6):
        msg = f"{name}: color must be #RGB or #RRGGBB format"
        raise ValueError(msg)
    if any(c not in "0123456789abcdefABCDEF" for c in digits):
        msg = f"{name}: invalid hex color '{color}'"
        raise ValueError(msg)
    return color


class ThemeColors(BaseModel):
    """Palette used by the CLI. Every value is a hex color."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    junk: str = "#f5b332"
    duplicate: str = "#d44ebc"
    large: str = "#0e8ac8"

    size_small: str = "#b2bec3"
    size_medium: str = "#faf870"
    size_large: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        return _check_hex(info.field_name, v)


# Rich style name -> (palette field, bold)
_STYLES: dict[str, tuple[str, bool]] = {
    "text": ("text", False),
    "muted": ("muted", False),
    "dim": ("muted", False),
    "header": ("header", False),
    "bold_header": ("header", True),
    "border": ("border", False),
    "success": ("success", False),
    "warning": ("warning", False),
    "error": ("error", True),
    "info": ("info", False),
    "junk": ("junk", False),
    "duplicate": ("duplicate", True),
    "large": ("large", False),
    "size.small": ("size_small", False),
    "size.medium": ("size_medium", False),
    "size.large": ("size_large", True),
    "file.name": ("text", True),
    "file.path": ("muted", False),
}


def get_bundled_theme_path() -> Path:
    """Return the location of the bundled default theme."""
    return resources.files("cleanctl.data").joinpath("theme.toml")  # type: ignore[return-value]


def _read_colors(path: Path) -> dict[str, str] | None:
    """Read the [colors] table of a theme file.

    Returns:
        Mapping of color name to value, or None if the file is missing
        or unusable.
    """
    try:
        with open(path, "rb") as f:
            section = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", path, e)
        print(f"Warning: Failed to parse {path}: {e}", file=sys.stderr)
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    if not isinstance(section, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return None
    return {str(k): v for k, v in section.items() if isinstance(v, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the palette, applying user overrides on top of the bundled one.

    An invalid palette falls back to the built-in defaults with a warning.

    Args:
        user_path: Override for the user theme location.
    """
    colors = _read_colors(Path(get_bundled_theme_path()))
    if colors is None:
        logger.error("Failed to load bundled theme - installation may be corrupted")
        colors = {}

    user_path = user_path or get_theme_path()
    overrides = _read_colors(user_path)
    if overrides:
        logger.debug("Loaded user theme overrides from %s", user_path)
        colors.update(overrides)

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        print(f"Warning: Invalid theme configuration: {e}", file=sys.stderr)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a palette (loaded from disk if omitted)."""
    palette = (colors or load_theme()).model_dump()
    return Theme(
        {
            style: f"bold {palette[name]}" if bold else palette[name]
            for style, (name, bold) in _STYLES.items()
        }
    )


_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the process-wide Rich theme, loading it on first use."""
    global _theme
    if _theme is None:
        _theme = get_rich_theme()
    return _theme
