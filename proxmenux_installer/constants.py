# proxmenux_installer/constants.py
"""Fixed names, paths and enumerations used by the installer."""
from __future__ import annotations

# Filesystem layout
BASE_DIR = "/usr/local/share/proxmenux"
BIN_DIR = "/usr/local/bin"
MENU_SCRIPT = "menu"
CONFIG_FILENAME = "config.json"
CACHE_FILENAME = "cache.json"
UTILS_FILENAME = "utils.sh"
VERSION_FILENAME = "version.txt"
INSTALLER_FILENAME = "install_proxmenux.sh"
SCRIPTS_DIR = "scripts"
VENV_PATH = "/opt/googletrans-env"

# Files restored on uninstall
BASHRC_PATH = "/root/.bashrc"
MOTD_PATH = "/etc/motd"
MOTD_MARKER = "This system is optimised by: ProxMenux"

# Settings file for path/URL overrides
SETTINGS_PATH = "/etc/proxmenux/installer.yaml"
SETTINGS_ENV_VAR = "PROXMENUX_INSTALLER_CONFIG"

# Remote sources
REPO_URL = "https://github.com/MacRimi/ProxMenux.git"
JQ_FALLBACK_URL = (
    "https://github.com/jqlang/jq/releases/download/jq-1.7.1/jq-linux-amd64"
)
JQ_FALLBACK_PATH = "/usr/local/bin/jq"
CHECKOUT_PREFIX = "proxmenux-install-"

# Companion monitor service
MONITOR_SERVICE = "proxmenux-monitor.service"
MONITOR_SERVICE_FILE = "/etc/systemd/system/proxmenux-monitor.service"
MONITOR_PORT = 8008
MONITOR_APPIMAGE_DIR = "AppImage"
MONITOR_APPIMAGE_NAME = "ProxMenux-Monitor.AppImage"
MONITOR_VERSION_FILENAME = "monitor_version.txt"

# Translation support
TRANSLATION_LIBRARY = "googletrans"
TRANSLATION_LIBRARY_VERSION = "4.0.0-rc1"

# Package sets
JQ_PACKAGE = "jq"
BASIC_PACKAGES = ("dialog", "curl", "git")
TRANSLATION_PACKAGES = BASIC_PACKAGES + ("python3", "python3-venv", "python3-pip")
TRANSLATION_REMOVABLE_PACKAGES = (
    ("python3-venv", "Python virtual environment"),
    ("python3-pip", "Python package installer"),
    ("python3", "Python interpreter"),
)

# Components allowed in the install record
TRACKED_COMPONENTS = frozenset({
    "dialog", "curl", "jq", "git",
    "python3", "python3-venv", "python3-pip",
    "virtual_environment", "pip", TRANSLATION_LIBRARY, "proxmenux_monitor",
})

# Component status values
ALREADY_INSTALLED = "already_installed"
INSTALLED = "installed"
INSTALLED_FROM_GITHUB = "installed_from_github"
FAILED = "failed"
CREATED = "created"
ALREADY_EXISTS = "already_exists"
UPGRADED = "upgraded"
UPGRADE_FAILED = "upgrade_failed"
UPDATED = "updated"

STATUSES = frozenset({
    ALREADY_INSTALLED, INSTALLED, INSTALLED_FROM_GITHUB, FAILED,
    CREATED, ALREADY_EXISTS, UPGRADED, UPGRADE_FAILED, UPDATED,
})

# Menu languages, in display order
LANGUAGES = (
    ("en", "English (Recommended)"),
    ("es", "Spanish"),
    ("fr", "French"),
    ("de", "German"),
    ("it", "Italian"),
    ("pt", "Portuguese"),
)
LANGUAGE_PLACEHOLDERS = frozenset({"", "null", "empty"})

# Translation installs are offered only below this Proxmox VE major version
TRANSLATION_MAX_PVE_MAJOR = 9
