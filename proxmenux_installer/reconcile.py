# proxmenux_installer/reconcile.py
"""Decides what happens when the requested install type differs from the current one."""
from __future__ import annotations

import logging
from enum import Enum

from proxmenux_installer import ui
from proxmenux_installer.detect import InstallationType
from proxmenux_installer.errors import InstallCancelled

logger = logging.getLogger(__name__)


class ChangeAction(Enum):
    """What a (current, requested) pair requires before installing."""

    PROCEED = "proceed"
    CONFIRM_AND_TEARDOWN = "confirm_and_teardown"
    CONFIRM = "confirm"


_PROMPTS = {
    (InstallationType.TRANSLATION, InstallationType.NORMAL):
        "Switch from Translation to Normal Version?\n"
        "This will remove translation components.",
    (InstallationType.NORMAL, InstallationType.TRANSLATION):
        "Switch from Normal to Translation Version?\n"
        "This will add translation components.",
}


def plan_change(current: InstallationType, requested: InstallationType) -> ChangeAction:
    if current is requested:
        return ChangeAction.PROCEED
    if current is InstallationType.TRANSLATION and requested is InstallationType.NORMAL:
        return ChangeAction.CONFIRM_AND_TEARDOWN
    if current is InstallationType.NORMAL and requested is InstallationType.TRANSLATION:
        return ChangeAction.CONFIRM
    return ChangeAction.PROCEED


def handle_installation_change(current: InstallationType, requested: InstallationType,
                               uninstaller, confirm=None) -> ChangeAction:
    """Confirm and prepare a change of installation type.

    Switching from Translation to Normal force-uninstalls the translation
    components (no prompts) after the operator confirms.

    Raises:
        InstallCancelled: If the operator declines the change.
    """
    action = plan_change(current, requested)
    if action is ChangeAction.PROCEED:
        return action

    confirm = confirm or ui.confirm
    if not confirm(_PROMPTS[(current, requested)]):
        raise InstallCancelled("Installation cancelled.")

    if action is ChangeAction.CONFIRM_AND_TEARDOWN:
        logger.info("Removing %s components before installing %s",
                    current.value, requested.value)
        print("Preparing for installation type change...")
        uninstaller.quiet = True
        uninstaller.run(current, force=True)
    return action
