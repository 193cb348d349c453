# proxmenux_installer/__init__.py
"""Installer for ProxMenux: detect, install, switch type or uninstall."""

__version__ = "1.4.0"
