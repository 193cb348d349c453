# proxmenux_installer/errors.py
from __future__ import annotations


class InstallerError(Exception):
    """Base class for failures that end an install run with exit status 1."""

    pass


class PrivilegeError(InstallerError):
    """Raised when the installer is not running as root."""

    pass


class DependencyError(InstallerError):
    """Raised when a package or library could not be installed."""

    def __init__(self, component: str, message: str):
        super().__init__(message)
        self.component = component


class FetchError(InstallerError):
    """Raised when the source repository could not be cloned."""

    pass


class InstallCancelled(InstallerError):
    """Raised when the operator declines a confirmation or selection."""

    pass
