# proxmenux_installer/settings.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from proxmenux_installer import constants

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the installer settings file cannot be used."""

    pass


@dataclass
class PathsConfig:
    """Filesystem locations the installer reads and writes."""

    base_dir: str = constants.BASE_DIR
    bin_dir: str = constants.BIN_DIR
    venv_path: str = constants.VENV_PATH
    service_file: str = constants.MONITOR_SERVICE_FILE
    bashrc: str = constants.BASHRC_PATH
    motd: str = constants.MOTD_PATH
    jq_fallback: str = constants.JQ_FALLBACK_PATH

    @property
    def config_file(self) -> str:
        return os.path.join(self.base_dir, constants.CONFIG_FILENAME)

    @property
    def cache_file(self) -> str:
        return os.path.join(self.base_dir, constants.CACHE_FILENAME)

    @property
    def utils_file(self) -> str:
        return os.path.join(self.base_dir, constants.UTILS_FILENAME)

    @property
    def version_file(self) -> str:
        return os.path.join(self.base_dir, constants.VERSION_FILENAME)

    @property
    def installer_copy(self) -> str:
        return os.path.join(self.base_dir, constants.INSTALLER_FILENAME)

    @property
    def scripts_dir(self) -> str:
        return os.path.join(self.base_dir, constants.SCRIPTS_DIR)

    @property
    def launcher(self) -> str:
        return os.path.join(self.bin_dir, constants.MENU_SCRIPT)

    @property
    def venv_activate(self) -> str:
        return os.path.join(self.venv_path, "bin", "activate")

    @property
    def venv_pip(self) -> str:
        return os.path.join(self.venv_path, "bin", "pip")

    @property
    def monitor_dir(self) -> str:
        # The monitor shares the base directory
        return self.base_dir


@dataclass
class SourceConfig:
    """Where the toolkit sources and fallback binaries are fetched from."""

    repo_url: str = constants.REPO_URL
    jq_url: str = constants.JQ_FALLBACK_URL


@dataclass
class MonitorConfig:
    """Companion monitor service settings."""

    service: str = constants.MONITOR_SERVICE
    port: int = constants.MONITOR_PORT


@dataclass
class LoggingConfig:
    """Diagnostic logging settings."""

    debug: bool = False
    log_file: str | None = None


@dataclass
class InstallerSettings:
    """Top-level installer settings aggregating all subsections."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_section(cls, raw, section: str):
    """Instantiate a settings dataclass from a raw YAML mapping.

    Unknown keys are rejected, and values must match the type of the
    field default (``None`` defaults accept strings).
    """
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"{section} must be a mapping")
    defaults = cls()
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in raw.items():
        if key not in known:
            raise ConfigError(f"Unknown setting: {section}.{key}")
        default = getattr(defaults, key)
        expected = str if default is None else type(default)
        if value is not None and not isinstance(value, expected):
            raise ConfigError(
                f"{section}.{key} must be of type {expected.__name__}"
            )
        if isinstance(value, bool) and expected is int:
            raise ConfigError(f"{section}.{key} must be of type int")
        kwargs[key] = value
    return cls(**kwargs)


def settings_path() -> str:
    """Return the settings file location, honouring the environment override."""
    return os.environ.get(constants.SETTINGS_ENV_VAR) or constants.SETTINGS_PATH


def load_settings(path: str | None = None) -> InstallerSettings:
    """Load installer settings from a YAML file.

    A missing file is not an error: the built-in defaults are returned.

    Args:
        path: Settings file to read. Defaults to :func:`settings_path`.

    Returns:
        A fully populated InstallerSettings instance.

    Raises:
        ConfigError: If the file is not valid YAML, is not a mapping, or
            holds unknown or wrongly typed settings.
    """
    settings_file = Path(path or settings_path())
    if not settings_file.exists():
        logger.debug("No settings file at %s, using defaults", settings_file)
        return InstallerSettings()

    try:
        with open(settings_file) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid settings file {settings_file}: {e}") from e

    # An empty file loads as None
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {settings_file} must hold a mapping")

    unknown = set(raw) - {"paths", "source", "monitor", "logging"}
    if unknown:
        raise ConfigError(f"Unknown settings section: {sorted(unknown)[0]}")

    logger.debug("Loaded settings from %s", settings_file)
    return InstallerSettings(
        paths=_build_section(PathsConfig, raw.get("paths"), "paths"),
        source=_build_section(SourceConfig, raw.get("source"), "source"),
        monitor=_build_section(MonitorConfig, raw.get("monitor"), "monitor"),
        logging=_build_section(LoggingConfig, raw.get("logging"), "logging"),
    )
