import pytest

from proxmenux_installer.config_store import ConfigStore
from proxmenux_installer.settings import InstallerSettings, PathsConfig


@pytest.fixture
def paths(tmp_path):
    """PathsConfig with every location redirected under tmp_path."""
    root = tmp_path / "root"
    (root / "etc").mkdir(parents=True)
    return PathsConfig(
        base_dir=str(root / "share" / "proxmenux"),
        bin_dir=str(root / "bin"),
        venv_path=str(root / "opt" / "googletrans-env"),
        service_file=str(root / "etc" / "systemd" / "proxmenux-monitor.service"),
        bashrc=str(root / "root" / ".bashrc"),
        motd=str(root / "etc" / "motd"),
        jq_fallback=str(root / "bin" / "jq"),
    )


@pytest.fixture
def settings(paths):
    return InstallerSettings(paths=paths)


@pytest.fixture
def store(paths):
    return ConfigStore(paths.config_file, paths.cache_file)


@pytest.fixture
def fake_repo(tmp_path):
    """A directory laid out like a ProxMenux checkout."""
    repo = tmp_path / "checkout"
    (repo / "scripts" / "menus").mkdir(parents=True)
    (repo / "scripts" / "utils.sh").write_text("#!/bin/bash\n")
    (repo / "scripts" / "menus" / "main_menu.sh").write_text("#!/bin/bash\n")
    (repo / "json").mkdir()
    (repo / "json" / "cache.json").write_text('{"hello": {"es": "hola"}}')
    (repo / "menu").write_text("#!/bin/bash\n")
    (repo / "version.txt").write_text("1.4.0\n")
    (repo / "install_proxmenux.sh").write_text("#!/bin/bash\n")
    (repo / "AppImage").mkdir()
    (repo / "AppImage" / "ProxMenux-1.0.9.AppImage").write_bytes(b"old")
    (repo / "AppImage" / "ProxMenux-1.0.10.AppImage").write_bytes(b"new")
    return repo
