# proxmenux_installer/services.py
"""ProxMenux Monitor: AppImage installation and its systemd unit."""
from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass

from proxmenux_installer import constants
from proxmenux_installer.config_store import ConfigStore
from proxmenux_installer.platform import run, succeeded
from proxmenux_installer.settings import MonitorConfig, PathsConfig

logger = logging.getLogger(__name__)

_APPIMAGE_RE = re.compile(r"^ProxMenux-(\d+)\.(\d+)\.(\d+)\.AppImage$")


def generate_systemd_unit(install_dir: str, port: int) -> str:
    """Generate the systemd unit file for the monitor."""
    appimage = os.path.join(install_dir, constants.MONITOR_APPIMAGE_NAME)
    return f"""[Unit]
Description=ProxMenux Monitor - Web Dashboard
After=network.target

[Service]
Type=simple
User=root
WorkingDirectory={install_dir}
ExecStart={appimage}
Restart=on-failure
RestartSec=10
Environment="PORT={port}"

[Install]
WantedBy=multi-user.target
"""


def find_latest_appimage(checkout: str) -> str | None:
    """Return the highest-versioned ``ProxMenux-x.y.z.AppImage`` in the checkout."""
    appimage_dir = os.path.join(checkout, constants.MONITOR_APPIMAGE_DIR)
    if not os.path.isdir(appimage_dir):
        return None
    candidates = []
    for name in os.listdir(appimage_dir):
        m = _APPIMAGE_RE.match(name)
        path = os.path.join(appimage_dir, name)
        if m and os.path.isfile(path):
            candidates.append((tuple(int(p) for p in m.groups()), path))
    if not candidates:
        return None
    return max(candidates)[1]


def appimage_version(path: str) -> str | None:
    m = _APPIMAGE_RE.match(os.path.basename(path))
    return ".".join(m.groups()) if m else None


@dataclass
class MonitorService:
    """Installs, upgrades and removes the monitor and its systemd unit."""

    paths: PathsConfig
    config: MonitorConfig

    @property
    def appimage_path(self) -> str:
        return os.path.join(self.paths.monitor_dir, constants.MONITOR_APPIMAGE_NAME)

    @property
    def version_file(self) -> str:
        return os.path.join(self.paths.monitor_dir, constants.MONITOR_VERSION_FILENAME)

    def installed_version(self) -> str | None:
        try:
            with open(self.version_file) as f:
                return f.read().strip() or None
        except OSError:
            return None

    def is_active(self) -> bool:
        return succeeded(["systemctl", "is-active", "--quiet", self.config.service])

    def is_enabled(self) -> bool:
        return succeeded(["systemctl", "is-enabled", "--quiet", self.config.service])

    def install(self, checkout: str, store: ConfigStore) -> str:
        """Install or upgrade the monitor from a checkout.

        Returns the status recorded for ``proxmenux_monitor``: ``installed``
        for a fresh install, ``updated`` when a different version replaced
        the installed one, ``already_installed`` when nothing changed, or
        ``failed`` when any part of the install did not succeed.
        """
        source = find_latest_appimage(checkout)
        if source is None:
            logger.warning("No monitor AppImage found in %s", checkout)
            store.record_status("proxmenux_monitor", constants.FAILED)
            return constants.FAILED

        version = appimage_version(source)
        current = self.installed_version()
        present = os.path.isfile(self.appimage_path)
        if present and current == version and os.path.isfile(self.paths.service_file):
            store.record_status("proxmenux_monitor", constants.ALREADY_INSTALLED)
            return constants.ALREADY_INSTALLED

        was_active = present and self.is_active()
        if was_active:
            run(["systemctl", "stop", self.config.service])
        try:
            os.makedirs(self.paths.monitor_dir, exist_ok=True)
            shutil.copy2(source, self.appimage_path)
            os.chmod(self.appimage_path, 0o755)
            with open(self.version_file, "w") as f:
                f.write(f"{version}\n")
        except OSError as e:
            logger.warning("Could not install monitor AppImage: %s", e)
            store.record_status("proxmenux_monitor", constants.FAILED)
            return constants.FAILED

        if present and os.path.isfile(self.paths.service_file):
            run(["systemctl", "daemon-reload"])
            run(["systemctl", "restart", self.config.service])
            status = constants.UPDATED
        else:
            try:
                enabled = self.create_service()
            except OSError as e:
                logger.warning("Could not write %s: %s", self.paths.service_file, e)
                enabled = False
            status = constants.INSTALLED if enabled else constants.FAILED
        store.record_status("proxmenux_monitor", status)
        return status

    def create_service(self) -> bool:
        """Write the unit file, then enable and start the service."""
        content = generate_systemd_unit(self.paths.monitor_dir, self.config.port)
        os.makedirs(os.path.dirname(self.paths.service_file), exist_ok=True)
        with open(self.paths.service_file, "w") as f:
            f.write(content)
        logger.debug("Service file written to %s", self.paths.service_file)
        run(["systemctl", "daemon-reload"])
        if not succeeded(["systemctl", "enable", "--now", self.config.service]):
            logger.warning("Failed to enable %s", self.config.service)
            return False
        return True

    def stop(self):
        if self.is_active():
            run(["systemctl", "stop", self.config.service])

    def disable(self):
        if self.is_enabled():
            run(["systemctl", "disable", self.config.service])

    def remove_service_file(self) -> bool:
        if not os.path.isfile(self.paths.service_file):
            return False
        os.remove(self.paths.service_file)
        run(["systemctl", "daemon-reload"])
        return True
