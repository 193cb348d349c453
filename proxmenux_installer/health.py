# proxmenux_installer/health.py
"""Post-install checks shown in the completion summary."""
from __future__ import annotations

import os
from dataclasses import dataclass

from proxmenux_installer.config_store import is_valid_json
from proxmenux_installer.services import MonitorService
from proxmenux_installer.settings import PathsConfig


@dataclass
class CheckResult:
    """Result of a single health check."""
    name: str
    passed: bool
    detail: str
    suggestion: str = ""


def _check_launcher(paths: PathsConfig) -> CheckResult:
    if not os.path.isfile(paths.launcher):
        return CheckResult("Launcher", False, "not found",
                           "Re-run the installer")
    if not os.access(paths.launcher, os.X_OK):
        return CheckResult("Launcher", False, "not executable",
                           f"Run: chmod +x {paths.launcher}")
    return CheckResult("Launcher", True, paths.launcher)


def _check_scripts(paths: PathsConfig) -> CheckResult:
    if os.path.isdir(paths.scripts_dir) and os.listdir(paths.scripts_dir):
        return CheckResult("Scripts", True, paths.scripts_dir)
    return CheckResult("Scripts", False, "scripts directory missing or empty",
                       "Re-run the installer")


def _check_config(paths: PathsConfig) -> CheckResult:
    if not os.path.isfile(paths.config_file):
        return CheckResult("Config file", False, "not found")
    if not is_valid_json(paths.config_file):
        return CheckResult("Config file", False, "not valid JSON",
                           f"Remove {paths.config_file} and re-run the installer")
    return CheckResult("Config file", True, "valid")


def _check_monitor(monitor: MonitorService) -> CheckResult:
    if not os.path.isfile(monitor.paths.service_file):
        return CheckResult("Monitor", False, "service not installed")
    if monitor.is_active():
        return CheckResult("Monitor", True, f"active on port {monitor.config.port}")
    return CheckResult("Monitor", False, "service not running",
                       f"Run: systemctl start {monitor.config.service}")


def run_health_checks(paths: PathsConfig, monitor: MonitorService) -> list[CheckResult]:
    """Run all health checks and return results."""
    return [
        _check_launcher(paths),
        _check_scripts(paths),
        _check_config(paths),
        _check_monitor(monitor),
    ]


def print_health_report(results: list[CheckResult]) -> bool:
    """Print health check results. Returns True if all passed."""
    all_passed = True
    for r in results:
        icon = "✓" if r.passed else "✗"
        print(f"  {icon} {r.name:20s} {r.detail}")
        if not r.passed:
            all_passed = False
            if r.suggestion:
                print(f"    -> {r.suggestion}")
    return all_passed
