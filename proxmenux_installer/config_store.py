# proxmenux_installer/config_store.py
"""Persisted install record: component statuses and the menu language.

The record is a JSON object kept at ``<base_dir>/config.json``::

    {
      "jq": {"status": "installed", "timestamp": "2025-01-01T00:00:00Z"},
      "language": "es"
    }

Every write goes to a temporary file in the same directory which then
replaces the record with :func:`os.replace`, so an interrupted run leaves
either the old or the new record on disk, never a truncated one.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone

from proxmenux_installer.constants import LANGUAGE_PLACEHOLDERS, STATUSES, TRACKED_COMPONENTS

logger = logging.getLogger(__name__)


def is_valid_json(path: str) -> bool:
    """Return True if ``path`` holds syntactically valid JSON."""
    try:
        with open(path, encoding="utf-8") as f:
            json.load(f)
    except (OSError, ValueError):
        return False
    return True


def atomic_write_json(path: str, obj) -> None:
    """Write ``obj`` as JSON to ``path`` via a temp file and an atomic replace."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    temp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=directory,
            prefix=os.path.basename(path) + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            temp_path = tmp.name
            json.dump(obj, tmp, indent=2)
            tmp.write("\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
        temp_path = None
    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ConfigStore:
    """Reads and updates the install record at a fixed path."""

    def __init__(self, config_file: str, cache_file: str | None = None):
        self.config_file = config_file
        self.cache_file = cache_file

    def discard_corrupted(self) -> list[str]:
        """Delete the record and cache files if they are not valid JSON.

        Returns the paths that were removed.
        """
        removed = []
        for path in (self.config_file, self.cache_file):
            if path and os.path.isfile(path) and not is_valid_json(path):
                logger.warning("Removing corrupted file %s", path)
                os.remove(path)
                removed.append(path)
        return removed

    def load(self) -> dict:
        """Return the current record, resetting it to ``{}`` when unusable."""
        if not os.path.isfile(self.config_file):
            return {}
        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            data = None
        if not isinstance(data, dict):
            logger.warning("Install record %s is corrupted, resetting it", self.config_file)
            atomic_write_json(self.config_file, {})
            return {}
        return data

    def ensure_exists(self):
        """Create an empty record if none exists yet."""
        if not os.path.isfile(self.config_file):
            atomic_write_json(self.config_file, {})

    def record_status(self, component: str, status: str) -> bool:
        """Store ``status`` for ``component``. Untracked components are ignored.

        Returns True if the record was written.
        """
        if component not in TRACKED_COMPONENTS:
            logger.debug("Not recording untracked component %s", component)
            return False
        if status not in STATUSES:
            raise ValueError(f"Unknown component status: {status}")
        data = self.load()
        data[component] = {"status": status, "timestamp": _utc_timestamp()}
        atomic_write_json(self.config_file, data)
        logger.debug("Recorded %s=%s", component, status)
        return True

    def record_language(self, language: str):
        data = self.load()
        data["language"] = language
        atomic_write_json(self.config_file, data)

    def read_language(self) -> str | None:
        """Return the stored language, or None when absent or a placeholder."""
        language = self.load().get("language")
        if not isinstance(language, str) or language.strip() in LANGUAGE_PLACEHOLDERS:
            return None
        return language

    def status_of(self, component: str) -> str | None:
        entry = self.load().get(component)
        if isinstance(entry, dict):
            return entry.get("status")
        return None
