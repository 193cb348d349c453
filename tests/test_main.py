import json
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from proxmenux_installer import main as main_module
from proxmenux_installer.config_store import atomic_write_json
from proxmenux_installer.detect import InstallationType
from proxmenux_installer.errors import FetchError, InstallCancelled
from proxmenux_installer.main import UNINSTALL, Installer, main
from proxmenux_installer.platform import PlatformInfo
from proxmenux_installer.source import SourceCheckout


def _platform(pve_major=8):
    return PlatformInfo(pve_major=pve_major)


def _ok(*args, **kwargs):
    return subprocess.CompletedProcess([], 0, "", "")


def _dpkg_run(installed):
    def fake_run(cmd, **kwargs):
        if cmd[0] == "dpkg-query":
            if cmd[-1] in installed:
                return subprocess.CompletedProcess(cmd, 0, "install ok installed", "")
            return subprocess.CompletedProcess(cmd, 1, "", "")
        if cmd[:3] == ["python3", "-m", "venv"]:
            activate = os.path.join(cmd[-1], "bin", "activate")
            os.makedirs(os.path.dirname(activate), exist_ok=True)
            open(activate, "w").close()
        return subprocess.CompletedProcess(cmd, 0, "", "")
    return fake_run


@pytest.fixture
def system(fake_repo):
    """Patch every subprocess and network boundary the installer crosses."""
    with patch("proxmenux_installer.prerequisites.run", side_effect=_dpkg_run({"curl"})), \
            patch("proxmenux_installer.prerequisites.shutil.which", return_value="/usr/bin/jq"), \
            patch("proxmenux_installer.services.run", side_effect=_ok), \
            patch("proxmenux_installer.services.succeeded", return_value=True), \
            patch("proxmenux_installer.uninstall.run", side_effect=_ok), \
            patch.object(SourceCheckout, "clone", return_value=str(fake_repo)), \
            patch("proxmenux_installer.main.get_server_ip", return_value="10.0.0.5"), \
            patch("proxmenux_installer.ui.type_text"):
        yield


class TestCopyFiles:
    def test_copies_layout_and_sets_exec_bits(self, settings, paths, fake_repo):
        installer = Installer(settings, platform=_platform())
        installer._prepare_dirs()
        installer._copy_files(str(fake_repo), with_cache=False)
        assert os.path.isfile(paths.launcher)
        assert os.access(paths.launcher, os.X_OK)
        assert os.path.isfile(os.path.join(paths.scripts_dir, "menus", "main_menu.sh"))
        assert os.access(os.path.join(paths.scripts_dir, "menus", "main_menu.sh"), os.X_OK)
        assert os.path.isfile(paths.utils_file)
        assert os.path.isfile(paths.installer_copy)
        with open(paths.version_file) as f:
            assert f.read() == "1.4.0\n"
        assert not os.path.exists(paths.cache_file)

    def test_translation_copies_cache(self, settings, paths, fake_repo):
        installer = Installer(settings, platform=_platform())
        installer._prepare_dirs()
        installer._copy_files(str(fake_repo), with_cache=True)
        with open(paths.cache_file) as f:
            assert json.load(f) == {"hello": {"es": "hola"}}

    def test_missing_source_file_fails(self, settings, tmp_path):
        installer = Installer(settings, platform=_platform())
        installer._prepare_dirs()
        with pytest.raises(Exception, match="Failed to copy files"):
            installer._copy_files(str(tmp_path / "empty"), with_cache=False)


class TestInstallTypeMenu:
    def test_translation_offered_before_pve9(self, settings):
        with patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL) as choose:
            Installer(settings, platform=_platform(8)).choose_install_type(InstallationType.NONE)
        keys = [key for key, _ in choose.call_args.args[1]]
        assert keys == [InstallationType.NORMAL, InstallationType.TRANSLATION]

    def test_only_normal_on_pve9(self, settings):
        with patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL) as choose:
            Installer(settings, platform=_platform(9)).choose_install_type(InstallationType.NONE)
        keys = [key for key, _ in choose.call_args.args[1]]
        assert keys == [InstallationType.NORMAL]

    def test_uninstall_offered_for_existing_install(self, settings):
        with patch("proxmenux_installer.ui.choose", return_value=UNINSTALL) as choose:
            choice = Installer(settings, platform=_platform(9)).choose_install_type(
                InstallationType.NORMAL)
        assert choice == UNINSTALL
        assert "Normal Version Detected" in choose.call_args.args[0]

    def test_empty_choice_cancels(self, settings):
        with patch("proxmenux_installer.ui.choose", return_value=None):
            with pytest.raises(InstallCancelled):
                Installer(settings, platform=_platform()).choose_install_type(
                    InstallationType.NONE)


class TestEndToEnd:
    def test_normal_install_on_clean_system(self, settings, paths, system):
        with patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL), \
                patch("proxmenux_installer.ui.confirm", return_value=True):
            Installer(settings, platform=_platform()).run()

        assert os.access(paths.launcher, os.X_OK)
        assert os.path.isdir(paths.scripts_dir)
        with open(paths.config_file) as f:
            record = json.load(f)
        for pkg in ("jq", "dialog", "curl", "git"):
            assert record[pkg]["status"] in ("installed", "already_installed")
        assert record["curl"]["status"] == "already_installed"
        assert record["proxmenux_monitor"]["status"] == "installed"
        assert "language" not in record
        assert os.path.isfile(paths.service_file)

    def test_translation_install_persists_language(self, settings, paths, system):
        choices = [InstallationType.TRANSLATION, "fr"]
        with patch("proxmenux_installer.ui.choose", side_effect=choices), \
                patch("proxmenux_installer.ui.confirm", return_value=True):
            Installer(settings, platform=_platform()).run()

        with open(paths.config_file) as f:
            record = json.load(f)
        assert record["language"] == "fr"
        assert record["googletrans"]["status"] == "installed"
        assert record["virtual_environment"]["status"] == "created"
        assert os.path.isfile(paths.cache_file)

        with patch("proxmenux_installer.ui.choose") as choose:
            from proxmenux_installer.configure import select_language
            assert select_language(Installer(settings).store) == "fr"
        choose.assert_not_called()

    def test_declined_switch_keeps_translation(self, settings, paths, system):
        os.makedirs(os.path.dirname(paths.venv_activate))
        open(paths.venv_activate, "w").close()
        atomic_write_json(paths.config_file, {"language": "es"})
        os.makedirs(paths.bin_dir)
        open(paths.launcher, "w").close()

        with patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL), \
                patch("proxmenux_installer.ui.confirm", return_value=False):
            with pytest.raises(InstallCancelled):
                Installer(settings, platform=_platform()).run()
        assert os.path.isfile(paths.venv_activate)
        assert Installer(settings).store.read_language() == "es"

    def test_declined_first_install(self, settings, paths, system):
        with patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL), \
                patch("proxmenux_installer.ui.confirm", return_value=False):
            with pytest.raises(InstallCancelled):
                Installer(settings, platform=_platform()).run()
        assert not os.path.exists(paths.launcher)

    def test_clone_failure_is_fatal(self, settings, paths, system):
        with patch.object(SourceCheckout, "clone", side_effect=FetchError("clone failed")), \
                patch("proxmenux_installer.ui.choose", return_value=InstallationType.NORMAL), \
                patch("proxmenux_installer.ui.confirm", return_value=True):
            with pytest.raises(FetchError):
                Installer(settings, platform=_platform()).run()
        assert not os.path.exists(paths.launcher)

    def test_uninstall_choice(self, settings, paths, system):
        os.makedirs(paths.bin_dir)
        open(paths.launcher, "w").close()
        with patch("proxmenux_installer.ui.choose", return_value=UNINSTALL), \
                patch("proxmenux_installer.ui.confirm", return_value=True):
            Installer(settings, platform=_platform()).run()
        assert not os.path.exists(paths.launcher)


class TestMainEntryPoint:
    def test_requires_root(self):
        with patch("proxmenux_installer.main.is_root", return_value=False), \
                patch("proxmenux_installer.main.load_settings") as load:
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == 1
        load.assert_not_called()

    @pytest.mark.parametrize("error", [
        InstallCancelled("Installation cancelled."),
        FetchError("Failed to clone repository"),
        PermissionError(13, "Permission denied"),
        KeyboardInterrupt(),
    ])
    def test_failures_exit_one(self, settings, error):
        with patch("proxmenux_installer.main.is_root", return_value=True), \
                patch("proxmenux_installer.main.load_settings", return_value=settings), \
                patch("proxmenux_installer.main.setup_logging"), \
                patch("proxmenux_installer.main.signal.signal"), \
                patch.object(main_module.Installer, "run", side_effect=error):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == 1

    def test_success_returns_normally(self, settings):
        with patch("proxmenux_installer.main.is_root", return_value=True), \
                patch("proxmenux_installer.main.load_settings", return_value=settings), \
                patch("proxmenux_installer.main.setup_logging"), \
                patch("proxmenux_installer.main.signal.signal"), \
                patch.object(main_module.Installer, "run", MagicMock()):
            main()

    def test_os_error_is_reported(self, settings, capsys):
        with patch("proxmenux_installer.main.is_root", return_value=True), \
                patch("proxmenux_installer.main.load_settings", return_value=settings), \
                patch("proxmenux_installer.main.setup_logging"), \
                patch("proxmenux_installer.main.signal.signal"), \
                patch.object(main_module.Installer, "run",
                             side_effect=OSError(28, "No space left on device")):
            with pytest.raises(SystemExit):
                main()
        assert "[ERROR] System error" in capsys.readouterr().err
