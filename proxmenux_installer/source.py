# proxmenux_installer/source.py
"""Shallow checkout of the toolkit repository into a throwaway directory."""
from __future__ import annotations

import logging
import os
import shutil
import tempfile

from proxmenux_installer.constants import CHECKOUT_PREFIX, REPO_URL
from proxmenux_installer.errors import FetchError
from proxmenux_installer.platform import run
from proxmenux_installer.ui import Spinner

logger = logging.getLogger(__name__)


class SourceCheckout:
    """Context manager owning a temporary clone of the repository.

    The directory is removed when the block exits, including on errors and
    KeyboardInterrupt. Call :meth:`cleanup` from a signal handler to remove
    it on other interruptions.
    """

    def __init__(self, repo_url: str = REPO_URL, parent_dir: str | None = None):
        self.repo_url = repo_url
        self.parent_dir = parent_dir
        self.path: str | None = None

    def clone(self) -> str:
        """Clone the repository. Raises FetchError on any failure."""
        if self.path is None:
            self.path = tempfile.mkdtemp(prefix=CHECKOUT_PREFIX, dir=self.parent_dir)
        target = os.path.join(self.path, "repo")
        with Spinner("Cloning ProxMenux repository..."):
            result = run(["git", "clone", "--depth", "1", self.repo_url, target])
        if result.returncode != 0 or not os.path.isdir(target):
            raise FetchError(f"Failed to clone repository from {self.repo_url}")
        logger.debug("Cloned %s into %s", self.repo_url, target)
        return target

    def cleanup(self):
        if self.path and os.path.isdir(self.path):
            shutil.rmtree(self.path, ignore_errors=True)
            logger.debug("Removed checkout %s", self.path)
        self.path = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False
