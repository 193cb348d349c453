import subprocess
from unittest.mock import patch

from proxmenux_installer.platform import (
    PlatformInfo,
    _detect_pve_major,
    detect_platform,
    get_server_ip,
    is_root,
    run,
)


def _out(stdout, returncode=0):
    return subprocess.CompletedProcess([], returncode, stdout, "")


class TestRun:
    def test_missing_binary_reports_127(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            result = run(["definitely-not-a-command"])
        assert result.returncode == 127


class TestDetectPlatform:
    @patch("proxmenux_installer.platform.shutil.which", return_value="/usr/bin/pveversion")
    @patch("proxmenux_installer.platform.run",
           return_value=_out("pve-manager/8.2.4/faa83925c9641325 (running kernel: 6.8.8-2-pve)"))
    def test_pve_major(self, mock_run, mock_which):
        assert _detect_pve_major() == 8

    @patch("proxmenux_installer.platform.shutil.which", return_value=None)
    def test_not_a_pve_host(self, mock_which):
        assert _detect_pve_major() is None

    @patch("proxmenux_installer.platform._detect_pve_major", return_value=9)
    def test_detect_platform_on_pve9(self, mock_major):
        assert detect_platform() == PlatformInfo(pve_major=9)


class TestIsRoot:
    @patch("proxmenux_installer.platform.os.geteuid", return_value=0)
    def test_root(self, mock_euid):
        assert is_root() is True

    @patch("proxmenux_installer.platform.os.geteuid", return_value=1000)
    def test_unprivileged(self, mock_euid):
        assert is_root() is False


class TestServerIp:
    def test_from_route(self):
        with patch("proxmenux_installer.platform.run",
                   return_value=_out("1.1.1.1 via 192.168.1.1 dev vmbr0 src 192.168.1.20 uid 0")):
            assert get_server_ip() == "192.168.1.20"

    def test_hostname_fallback(self):
        with patch("proxmenux_installer.platform.run",
                   side_effect=[_out("", 2), _out("10.0.0.7 fd00::7")]):
            assert get_server_ip() == "10.0.0.7"

    def test_localhost_last_resort(self):
        with patch("proxmenux_installer.platform.run", return_value=_out("", 1)):
            assert get_server_ip() == "localhost"
