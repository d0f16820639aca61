"""Configuration management module.

This module loads the build matrix and the site layout from a TOML file.
The file is project-local (./wdiodocs.toml by default) because it
describes one documentation repository, not a user.

Example wdiodocs.toml:

    clean = true

    [[builds]]
    apiVersion = "v3.4.0"
    webdriverio = "3.4.0"
    wddoc = "0.3.0"

    [layout]
    verification_file = "google0123456789abcdef"
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for newer Python versions
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

from wdiodocs.exceptions import BuildError

logger = logging.getLogger(__name__)

# Row keys in hexo plugin style first, then snake_case
ROW_KEYS = {
    "api_version": ("apiVersion", "api_version"),
    "library_version": ("webdriverio", "library_version"),
    "doc_tool_version": ("wddoc", "doc_tool_version"),
}


class ConfigError(BuildError):
    """Raised when configuration operations fail."""

    pass


@dataclass(frozen=True)
class VersionSpec:
    """One row of the build matrix."""

    api_version: str
    library_version: str
    doc_tool_version: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionSpec":
        """Create from a configuration row.

        Raises:
            ConfigError: If a field is missing or not a non-empty string
        """
        values = {}
        for attr, keys in ROW_KEYS.items():
            value = next((data[key] for key in keys if key in data), None)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(
                    f"Build row {data!r} needs a non-empty string for '{keys[0]}'"
                )
            values[attr] = value.strip()
        return cls(**values)


@dataclass(frozen=True)
class SiteLayout:
    """Filesystem layout and endpoints used by the build."""

    content_root: Path = Path("source")
    api_folder: str = "api"
    node_modules: Path = Path("node_modules")
    public_dir: Path = Path("public")
    theme_css_dir: Path = Path("themes/webdriver.io/source/css")
    library_package: str = "webdriverio"
    doc_tool_package: str = "wddoc"
    doc_tool_template: Path = Path("node_modules/wddoc/templates/template.md.ejs")
    contribute_title: str = "WebdriverIO - Contributing"
    registry_url: str = "https://registry.npmjs.org"
    source_archive_url: str = "https://github.com/webdriverio/webdriverio/archive"
    verification_file: str = "googleb498eedc81b2abab"
    npm: str = "npm"
    site_generator: str = "hexo"
    stylesheet_compiler: str = "compass"
    minifier: str = "yuicompressor"

    @property
    def library_dir(self) -> Path:
        return self.node_modules / self.library_package

    @property
    def doc_tool_binary(self) -> Path:
        return self.node_modules / ".bin" / self.doc_tool_package

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteLayout":
        """Create from the [layout] table, converting path fields.

        Raises:
            ConfigError: If the table holds unknown keys or non-string values
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown layout keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            if not isinstance(value, str):
                raise ConfigError(f"Layout key '{key}' must be a string")
            values[key] = Path(value) if known[key].type is Path else value
        return cls(**values)


@dataclass
class BuildOptions:
    """Options owned by one orchestrator instance."""

    clean: bool = True
    builds: tuple[VersionSpec, ...] = ()
    layout: SiteLayout = field(default_factory=SiteLayout)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildOptions":
        """Create from a parsed configuration document."""
        clean = data.get("clean", True)
        if not isinstance(clean, bool):
            raise ConfigError("'clean' must be true or false")

        rows = data.get("builds", [])
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise ConfigError("'builds' must be an array of tables")

        layout = data.get("layout", {})
        if not isinstance(layout, dict):
            raise ConfigError("'layout' must be a table")

        return cls(
            clean=clean,
            builds=tuple(VersionSpec.from_dict(row) for row in rows),
            layout=SiteLayout.from_dict(layout),
        )

    def merged(self, **overrides: Any) -> "BuildOptions":
        """Return a copy with caller-supplied values applied over these options.

        None values are ignored so unset CLI flags keep the configured value.
        """
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"Unknown build option: {key}")
            if value is not None:
                values[key] = value
        return BuildOptions(**values)


class ConfigManager:
    """Locate and load the wdiodocs configuration file."""

    DEFAULT_CONFIG_FILE = Path("wdiodocs.toml")

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path was given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> BuildOptions:
        """Load build options from file.

        A missing default config file yields default options.

        Raises:
            ConfigError: If loading or validation fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return BuildOptions()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        options = BuildOptions.from_dict(data)
        logger.debug(f"Loaded config from: {config_path} ({len(options.builds)} builds)")
        return options


__all__ = [
    "BuildOptions",
    "ConfigError",
    "ConfigManager",
    "SiteLayout",
    "VersionSpec",
]
