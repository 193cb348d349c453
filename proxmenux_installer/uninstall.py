# proxmenux_installer/uninstall.py
"""Uninstaller for ProxMenux: reverses the install, best effort."""
from __future__ import annotations

import logging
import os
import shutil

from proxmenux_installer import constants, ui
from proxmenux_installer.detect import InstallationType
from proxmenux_installer.platform import run
from proxmenux_installer.services import MonitorService
from proxmenux_installer.settings import InstallerSettings

logger = logging.getLogger(__name__)


class Uninstaller:
    """Removes the monitor, the venv, installed files and restores system files.

    Each step is independent: a failing step is logged and the remaining
    steps still run. Steps whose target is already gone are skipped, so
    running the uninstaller twice is harmless.
    """

    def __init__(self, settings: InstallerSettings, confirm=None,
                 checklist=None, quiet: bool = False):
        self.settings = settings
        self.paths = settings.paths
        self.monitor = MonitorService(settings.paths, settings.monitor)
        self._confirm = confirm or ui.confirm
        self._checklist = checklist or ui.checklist
        self.quiet = quiet
        self.failed_steps: list[str] = []

    def _say(self, message: str):
        if not self.quiet:
            print(message)

    def run(self, install_type: InstallationType, force: bool = False) -> bool:
        """Uninstall. Returns False only when the operator declined."""
        if not force:
            if not self._confirm("Are you sure you want to uninstall ProxMenux?",
                                 default_yes=False):
                return False

        self._say("Uninstalling ProxMenux...")
        steps = [
            ("stop monitor", self._stop_monitor),
            ("remove monitor service", self._remove_monitor_service),
            ("remove monitor directory", self._remove_monitor_dir),
            ("remove virtual environment", self._remove_venv),
        ]
        if install_type is InstallationType.TRANSLATION and not force:
            steps.append(("remove translation dependencies", self._remove_translation_deps))
        steps += [
            ("remove launcher", self._remove_launcher),
            ("remove base directory", self._remove_base_dir),
            ("restore bashrc", self._restore_bashrc),
            ("restore motd", self._restore_motd),
        ]
        for name, step in steps:
            try:
                step()
            except OSError as e:
                logger.warning("Uninstall step '%s' failed: %s", name, e)
                self.failed_steps.append(name)

        if self.failed_steps:
            ui.msg_warn(f"ProxMenux uninstalled with errors: {', '.join(self.failed_steps)}")
        else:
            self._say("ProxMenux has been uninstalled.")
        return True

    def _stop_monitor(self):
        if self.monitor.is_active():
            self._say("Stopping ProxMenux Monitor service...")
            self.monitor.stop()
        if self.monitor.is_enabled():
            self._say("Disabling ProxMenux Monitor service...")
            self.monitor.disable()

    def _remove_monitor_service(self):
        if os.path.isfile(self.paths.service_file):
            self._say("Removing ProxMenux Monitor service file...")
            self.monitor.remove_service_file()

    def _remove_monitor_dir(self):
        if os.path.isdir(self.paths.monitor_dir):
            self._say("Removing ProxMenux Monitor directory...")
            shutil.rmtree(self.paths.monitor_dir)

    def _remove_venv(self):
        if not os.path.isfile(self.paths.venv_activate):
            return
        self._say(f"Removing {constants.TRANSLATION_LIBRARY} and virtual environment...")
        run([self.paths.venv_pip, "uninstall", "-y", constants.TRANSLATION_LIBRARY])
        shutil.rmtree(self.paths.venv_path)

    def _remove_translation_deps(self):
        selected = self._checklist(
            "Select translation-specific dependencies to remove:",
            list(constants.TRANSLATION_REMOVABLE_PACKAGES),
        )
        if not selected:
            return
        self._say("Removing selected dependencies...")
        for dep in selected:
            self._say(f"Removing {dep}...")
            run(["apt-mark", "auto", dep])
            run(["apt-get", "-y", "--purge", "autoremove", dep])
        run(["apt-get", "autoremove", "-y", "--purge"])

    def _remove_launcher(self):
        if os.path.lexists(self.paths.launcher):
            os.remove(self.paths.launcher)

    def _remove_base_dir(self):
        if os.path.isdir(self.paths.base_dir):
            shutil.rmtree(self.paths.base_dir)

    def _restore_bashrc(self):
        backup = self.paths.bashrc + ".bak"
        if os.path.isfile(backup):
            os.replace(backup, self.paths.bashrc)

    def _restore_motd(self):
        backup = self.paths.motd + ".bak"
        if os.path.isfile(backup):
            os.replace(backup, self.paths.motd)
            return
        if not os.path.isfile(self.paths.motd):
            return
        with open(self.paths.motd) as f:
            lines = f.readlines()
        kept = [line for line in lines if constants.MOTD_MARKER not in line]
        if len(kept) != len(lines):
            with open(self.paths.motd, "w") as f:
                f.writelines(kept)
