# proxmenux_installer/detect.py
from __future__ import annotations

import logging
import os
from enum import Enum

from proxmenux_installer.config_store import ConfigStore, is_valid_json
from proxmenux_installer.settings import PathsConfig

logger = logging.getLogger(__name__)


class InstallationType(Enum):
    """Kind of installation found on the host."""

    NONE = "none"
    NORMAL = "normal"
    TRANSLATION = "translation"
    UNKNOWN = "unknown"


def has_launcher(paths: PathsConfig) -> bool:
    return os.path.isfile(paths.launcher)


def has_venv(paths: PathsConfig) -> bool:
    """A venv counts only when both the directory and its activate script exist."""
    return os.path.isdir(paths.venv_path) and os.path.isfile(paths.venv_activate)


def detect_installation(paths: PathsConfig) -> InstallationType:
    """Classify the current installation from the launcher, venv and language.

    A record that is not valid JSON is deleted before the language is read.
    """
    if os.path.isfile(paths.config_file) and not is_valid_json(paths.config_file):
        logger.warning("Corrupted config file %s detected, removing", paths.config_file)
        os.remove(paths.config_file)

    menu = has_launcher(paths)
    venv = has_venv(paths)
    language = ConfigStore(paths.config_file).read_language() is not None
    logger.debug("Detection inputs: menu=%s venv=%s language=%s", menu, venv, language)

    if venv and language:
        return InstallationType.TRANSLATION
    if menu and not venv:
        return InstallationType.NORMAL
    if menu:
        return InstallationType.UNKNOWN
    return InstallationType.NONE
