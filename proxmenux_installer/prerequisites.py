# proxmenux_installer/prerequisites.py
from __future__ import annotations

import logging
import os
import shutil
import urllib.error
import urllib.request
from proxmenux_installer import constants
from proxmenux_installer.config_store import ConfigStore
from proxmenux_installer.detect import has_venv
from proxmenux_installer.errors import DependencyError
from proxmenux_installer.platform import run
from proxmenux_installer.settings import PathsConfig
from proxmenux_installer.ui import Spinner

logger = logging.getLogger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def is_package_installed(package: str) -> bool:
    """Check the dpkg database for an installed package."""
    result = run(["dpkg-query", "-W", "-f=${Status}", package])
    return result.returncode == 0 and "install ok installed" in result.stdout


def _apt_env() -> dict:
    env = dict(os.environ)
    env.update(_APT_ENV)
    return env


class DependencyInstaller:
    """Ensures OS packages and the translation environment are present.

    Every outcome is written to the install record. A failure is recorded
    first and then raised as :class:`DependencyError`.
    """

    def __init__(self, store: ConfigStore, paths: PathsConfig,
                 jq_url: str = constants.JQ_FALLBACK_URL):
        self.store = store
        self.paths = paths
        self.jq_url = jq_url
        self._apt_updated = False

    def _record(self, name: str, status: str):
        self.store.record_status(name, status)

    def _fail(self, name: str, status: str, message: str):
        self._record(name, status)
        raise DependencyError(name, message)

    def _apt_update(self):
        if self._apt_updated:
            return
        run(["apt-get", "update"], env=_apt_env())
        self._apt_updated = True

    def _apt_install(self, package: str) -> bool:
        self._apt_update()
        with Spinner(f"Installing {package}..."):
            result = run(["apt-get", "install", "-y", package], env=_apt_env())
        return result.returncode == 0

    def _download_jq(self) -> bool:
        """Fetch the prebuilt jq binary and mark it executable."""
        target = self.paths.jq_fallback
        temp = target + ".download"
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with urllib.request.urlopen(self.jq_url) as resp, open(temp, "wb") as f:
                shutil.copyfileobj(resp, f)
            os.chmod(temp, 0o755)
            os.replace(temp, target)
        except (urllib.error.URLError, OSError) as e:
            logger.warning("Downloading jq from %s failed: %s", self.jq_url, e)
            if os.path.exists(temp):
                os.remove(temp)
            return False
        return True

    def ensure_jq(self) -> str:
        """Install jq through apt, falling back to the release binary."""
        name = constants.JQ_PACKAGE
        if shutil.which(name):
            self._record(name, constants.ALREADY_INSTALLED)
            return constants.ALREADY_INSTALLED

        if self._apt_install(name) and shutil.which(name):
            self._record(name, constants.INSTALLED)
            return constants.INSTALLED

        logger.info("apt could not install jq, trying %s", self.jq_url)
        if not self._download_jq():
            self._fail(name, constants.FAILED,
                       "Failed to install jq from both APT and GitHub. "
                       "Please install it manually.")
        if not shutil.which(name):
            self._fail(name, constants.FAILED,
                       "Failed to install jq. Please install it manually.")
        self._record(name, constants.INSTALLED_FROM_GITHUB)
        return constants.INSTALLED_FROM_GITHUB

    def ensure(self, packages):
        """Install each missing package, stopping at the first failure."""
        for package in packages:
            if is_package_installed(package):
                self._record(package, constants.ALREADY_INSTALLED)
                continue
            if self._apt_install(package):
                self._record(package, constants.INSTALLED)
            else:
                self._fail(package, constants.FAILED,
                           f"Failed to install {package}. Please install it manually.")

    def setup_translation_env(self):
        """Create the venv if needed, upgrade pip and install the translation library."""
        if has_venv(self.paths):
            self._record("virtual_environment", constants.ALREADY_EXISTS)
        else:
            with Spinner("Creating virtual environment..."):
                run(["python3", "-m", "venv", "--system-site-packages",
                     self.paths.venv_path])
            if not os.path.isfile(self.paths.venv_activate):
                self._fail("virtual_environment", constants.FAILED,
                           "Failed to create virtual environment. "
                           "Please check your Python installation.")
            self._record("virtual_environment", constants.CREATED)

        pip = self.paths.venv_pip
        with Spinner("Upgrading pip..."):
            ok = run([pip, "install", "--upgrade", "pip"]).returncode == 0
        if not ok:
            self._fail("pip", constants.UPGRADE_FAILED, "Failed to upgrade pip.")
        self._record("pip", constants.UPGRADED)

        requirement = (
            f"{constants.TRANSLATION_LIBRARY}=={constants.TRANSLATION_LIBRARY_VERSION}"
        )
        with Spinner(f"Installing {constants.TRANSLATION_LIBRARY}..."):
            ok = run([pip, "install", "--break-system-packages", "--no-cache-dir",
                      requirement]).returncode == 0
        if not ok:
            self._fail(constants.TRANSLATION_LIBRARY, constants.FAILED,
                       f"Failed to install {constants.TRANSLATION_LIBRARY}. "
                       "Please check your internet connection.")
        self._record(constants.TRANSLATION_LIBRARY, constants.INSTALLED)
