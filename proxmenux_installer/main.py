# proxmenux_installer/main.py
"""Main install orchestrator for ProxMenux."""
from __future__ import annotations

import logging
import os
import shutil
import signal
import stat
import sys

from proxmenux_installer import constants, ui
from proxmenux_installer.config_store import ConfigStore
from proxmenux_installer.configure import select_language
from proxmenux_installer.detect import InstallationType, detect_installation
from proxmenux_installer.errors import InstallCancelled, InstallerError, PrivilegeError
from proxmenux_installer.health import print_health_report, run_health_checks
from proxmenux_installer.log_setup import setup_logging
from proxmenux_installer.platform import PlatformInfo, detect_platform, get_server_ip, is_root
from proxmenux_installer.prerequisites import DependencyInstaller
from proxmenux_installer.reconcile import handle_installation_change
from proxmenux_installer.services import MonitorService
from proxmenux_installer.settings import ConfigError, InstallerSettings, load_settings
from proxmenux_installer.source import SourceCheckout
from proxmenux_installer.uninstall import Uninstaller

logger = logging.getLogger(__name__)

UNINSTALL = "uninstall"

_MENU_TITLES = {
    InstallationType.TRANSLATION: "ProxMenux Update - Translation Version Detected",
    InstallationType.NORMAL: "ProxMenux Update - Normal Version Detected",
    InstallationType.UNKNOWN: "ProxMenux Update - Existing Installation Detected",
}

_CONFIRMATIONS = {
    InstallationType.NORMAL: (
        "ProxMenux Normal Version will install:\n\n"
        "  - dialog (interactive menus)\n"
        "  - curl (file downloads)\n"
        "  - jq (JSON processing)\n"
        "  - git (repository download)\n"
        f"  - ProxMenux core files ({constants.BASE_DIR})\n"
        f"  - ProxMenux Monitor (web dashboard on port {constants.MONITOR_PORT})\n\n"
        "This is a lightweight installation with minimal dependencies.\n\n"
        "Proceed with installation?"
    ),
    InstallationType.TRANSLATION: (
        "ProxMenux Translation Version will install:\n\n"
        "  - dialog, curl, jq, git\n"
        "  - python3 + python3-venv + python3-pip\n"
        f"  - Google Translate library ({constants.TRANSLATION_LIBRARY})\n"
        f"  - Virtual environment ({constants.VENV_PATH})\n"
        "  - Translation cache system\n"
        "  - ProxMenux core files\n"
        f"  - ProxMenux Monitor (web dashboard on port {constants.MONITOR_PORT})\n\n"
        "This version requires more dependencies for translation support.\n\n"
        "Proceed with installation?"
    ),
}


def _make_executable(path: str):
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _make_tree_executable(root: str):
    """Add execute bits to every file and directory below ``root``."""
    _make_executable(root)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            _make_executable(os.path.join(dirpath, name))


class Installer:
    """Orchestrates detection, type selection and the install variants."""

    def __init__(self, settings: InstallerSettings, platform: PlatformInfo | None = None):
        self.settings = settings
        self.paths = settings.paths
        self.platform = platform
        self.store = ConfigStore(self.paths.config_file, self.paths.cache_file)
        self.monitor = MonitorService(self.paths, settings.monitor)
        self.deps = DependencyInstaller(self.store, self.paths, settings.source.jq_url)

    def run(self):
        """Execute the full interactive flow."""
        if self.platform is None:
            self.platform = detect_platform()
        self.store.discard_corrupted()

        current = detect_installation(self.paths)
        logger.info("Detected installation type: %s", current.value)
        choice = self.choose_install_type(current)

        if choice == UNINSTALL:
            if not Uninstaller(self.settings).run(current):
                raise InstallCancelled("Uninstall cancelled.")
            return

        if current is InstallationType.NONE:
            self.confirm_new_install(choice)
        handle_installation_change(current, choice, Uninstaller(self.settings))

        with SourceCheckout(self.settings.source.repo_url) as checkout:
            if choice is InstallationType.TRANSLATION:
                ui.msg_title("Installing ProxMenux - Translation Version")
                self.install_translation(checkout)
            else:
                ui.msg_title("Installing ProxMenux - Normal Version")
                self.install_normal(checkout)
        self.print_summary()

    def choose_install_type(self, current: InstallationType):
        """Ask which variant to install. Returns an InstallationType or UNINSTALL."""
        options = [(InstallationType.NORMAL, "Normal Version      (English only)")]
        pve_major = self.platform.pve_major if self.platform else None
        if pve_major is None or pve_major < constants.TRANSLATION_MAX_PVE_MAJOR:
            options.append((InstallationType.TRANSLATION,
                            "Translation Version (Multi-language support)"))
        if current is not InstallationType.NONE:
            options.append((UNINSTALL, "Uninstall ProxMenux"))

        title = _MENU_TITLES.get(current, "ProxMenux Installation")
        choice = ui.choose(f"{title}\n\nChoose installation type:", options)
        if choice is None:
            raise InstallCancelled("Installation cancelled.")
        return choice

    def confirm_new_install(self, install_type: InstallationType):
        if not ui.confirm(_CONFIRMATIONS[install_type]):
            raise InstallCancelled("Installation cancelled.")

    def install_normal(self, checkout: SourceCheckout):
        total = 5
        ui.show_progress(1, total, "Installing basic dependencies.")
        self.deps.ensure_jq()
        self.deps.ensure(constants.BASIC_PACKAGES)
        ui.msg_ok("jq, dialog, curl and git installed successfully.")

        ui.show_progress(2, total, "Install ProxMenux repository")
        repo = checkout.clone()
        ui.msg_ok("Repository cloned successfully.")

        ui.show_progress(3, total, "Creating directories and configuration")
        self._prepare_dirs()
        ui.msg_ok("Directories and configuration created.")

        ui.show_progress(4, total, "Copying necessary files")
        self._copy_files(repo, with_cache=False)
        ui.msg_ok("Necessary files created.")

        ui.show_progress(5, total, "Installing ProxMenux Monitor")
        self._install_monitor(repo)
        ui.msg_ok("ProxMenux Normal Version installation completed successfully.")

    def install_translation(self, checkout: SourceCheckout):
        total = 6
        ui.show_progress(1, total, "Language selection")
        select_language(self.store)

        ui.show_progress(2, total, "Installing system dependencies")
        self.deps.ensure_jq()
        self.deps.ensure(constants.TRANSLATION_PACKAGES)
        ui.msg_ok("jq, dialog, curl, git, python3, python3-venv and "
                  "python3-pip installed successfully.")

        ui.show_progress(3, total, "Setting up translation environment")
        self.deps.setup_translation_env()
        ui.msg_ok("Translation environment ready.")

        ui.show_progress(4, total, "Cloning ProxMenux repository")
        repo = checkout.clone()
        ui.msg_ok("Repository cloned successfully.")

        ui.show_progress(5, total, "Copying necessary files")
        self._prepare_dirs()
        self._copy_files(repo, with_cache=True)
        ui.msg_ok("Necessary files created.")

        ui.show_progress(6, total, "Installing ProxMenux Monitor")
        self._install_monitor(repo)
        ui.msg_ok("ProxMenux Translation Version installation completed successfully.")

    def _prepare_dirs(self):
        os.makedirs(self.paths.base_dir, exist_ok=True)
        os.makedirs(self.paths.bin_dir, exist_ok=True)
        self.store.ensure_exists()

    def _copy_files(self, repo: str, with_cache: bool):
        """Copy the launcher, utilities and scripts from the checkout."""
        try:
            if with_cache:
                shutil.copy2(os.path.join(repo, "json", constants.CACHE_FILENAME),
                             self.paths.cache_file)
                ui.msg_ok("Cache file copied with translations.")
            shutil.copy2(os.path.join(repo, constants.SCRIPTS_DIR, constants.UTILS_FILENAME),
                         self.paths.utils_file)
            shutil.copy2(os.path.join(repo, constants.MENU_SCRIPT), self.paths.launcher)
            shutil.copy2(os.path.join(repo, constants.VERSION_FILENAME),
                         self.paths.version_file)
            shutil.copy2(os.path.join(repo, constants.INSTALLER_FILENAME),
                         self.paths.installer_copy)
            shutil.copytree(os.path.join(repo, constants.SCRIPTS_DIR),
                            self.paths.scripts_dir, dirs_exist_ok=True)
        except OSError as e:
            raise InstallerError(f"Failed to copy files from the repository: {e}") from e

        _make_tree_executable(self.paths.scripts_dir)
        _make_executable(self.paths.installer_copy)
        _make_executable(self.paths.launcher)

    def _install_monitor(self, repo: str):
        status = self.monitor.install(repo, self.store)
        if status == constants.FAILED:
            ui.msg_warn("ProxMenux Monitor could not be installed.")
        elif status == constants.UPDATED:
            ui.msg_ok("ProxMenux Monitor updated successfully.")
        elif status == constants.INSTALLED:
            ui.msg_ok("ProxMenux Monitor installed successfully.")
        else:
            ui.msg_ok("ProxMenux Monitor is up to date.")

    def print_summary(self):
        ui.msg_title("ProxMenux has been installed successfully")
        print_health_report(run_health_checks(self.paths, self.monitor))
        print()
        if self.monitor.is_active():
            print(f"{ui.GN}ProxMenux Monitor activated{ui.CL}: "
                  f"{ui.BL}http://{get_server_ip()}:{self.settings.monitor.port}{ui.CL}\n")
        sys.stdout.write(ui.GN)
        ui.type_text("To run ProxMenux, simply execute this command in the console or terminal:")
        print(f"{ui.YWB}    {constants.MENU_SCRIPT}{ui.CL}\n")


def _raise_system_exit(signum, frame):
    # Unwinds through SourceCheckout so the temporary clone is removed
    raise SystemExit(1)


def main():
    """Entry point for the proxmenux-install console script."""
    try:
        if not is_root():
            raise PrivilegeError("This script must be run as root.")
        settings = load_settings()
    except (PrivilegeError, ConfigError) as e:
        ui.msg_error(str(e))
        sys.exit(1)

    setup_logging(debug=settings.logging.debug, log_file=settings.logging.log_file)
    for signum in (signal.SIGTERM, signal.SIGHUP):
        signal.signal(signum, _raise_system_exit)

    try:
        Installer(settings).run()
    except InstallCancelled as e:
        ui.msg_warn(str(e))
        sys.exit(1)
    except InstallerError as e:
        logger.debug("Install failed", exc_info=True)
        ui.msg_error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.debug("Install failed", exc_info=True)
        ui.msg_error(f"System error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        ui.msg_warn("Installation interrupted.")
        sys.exit(1)


if __name__ == "__main__":
    main()
