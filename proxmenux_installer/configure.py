# proxmenux_installer/configure.py
"""Menu language selection for translation installs.

The language is asked for once. Later runs find it in the install record
and reuse it without prompting.
"""
from __future__ import annotations

import logging

from proxmenux_installer import ui
from proxmenux_installer.config_store import ConfigStore
from proxmenux_installer.constants import LANGUAGES
from proxmenux_installer.errors import InstallCancelled

logger = logging.getLogger(__name__)


def validate_language(code: str | None) -> bool:
    """Return True if ``code`` is one of the supported menu languages."""
    return code in {key for key, _ in LANGUAGES}


def select_language(store: ConfigStore, prompt=None) -> str:
    """Return the stored language, or ask for one and store it.

    Raises:
        InstallCancelled: If no language was selected.
    """
    existing = store.read_language()
    if existing:
        ui.msg_ok(f"Using existing language configuration: {existing}")
        return existing

    prompt = prompt or ui.choose
    language = prompt("Choose a language for the menu:", list(LANGUAGES))
    if not validate_language(language):
        raise InstallCancelled("No language selected. Exiting.")

    store.record_language(language)
    logger.debug("Language set to %s", language)
    ui.msg_ok(f"Language set to: {language}")
    return language
