# proxmenux_installer/platform.py
from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PlatformInfo:
    """Detected host information."""
    pve_major: int | None    # Proxmox VE major version, None when not a PVE host


def run(cmd: list[str], **kwargs) -> subprocess.CompletedProcess:
    """Run a command with output captured. Never raises for a missing binary."""
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, check=False, **kwargs,
        )
    except (FileNotFoundError, OSError) as e:
        logger.debug("Could not run %s: %s", cmd[0], e)
        return subprocess.CompletedProcess(cmd, 127, "", str(e))
    if result.returncode != 0:
        logger.debug("%s exited with %d: %s", cmd[0], result.returncode,
                     (result.stderr or "").strip())
    return result


def succeeded(cmd: list[str], **kwargs) -> bool:
    return run(cmd, **kwargs).returncode == 0


def _run_quiet(cmd: list[str]) -> str:
    """Run a command and return stdout, or empty string on failure."""
    result = run(cmd)
    return result.stdout.strip() if result.returncode == 0 else ""


def _detect_pve_major() -> int | None:
    """Read the Proxmox VE major version from ``pveversion``."""
    if not shutil.which("pveversion"):
        return None
    m = re.search(r"pve-manager/(\d+)", _run_quiet(["pveversion"]))
    return int(m.group(1)) if m else None


def is_root() -> bool:
    return os.geteuid() == 0


def detect_platform() -> PlatformInfo:
    """Detect the Proxmox VE version of this host."""
    return PlatformInfo(pve_major=_detect_pve_major())


def get_server_ip() -> str:
    """Return the primary IP address, falling back to ``localhost``."""
    m = re.search(r"src (\S+)", _run_quiet(["ip", "route", "get", "1.1.1.1"]))
    if m:
        return m.group(1)
    addresses = _run_quiet(["hostname", "-I"]).split()
    if addresses:
        return addresses[0]
    return "localhost"
