import tarfile

import pytest
from click.testing import CliRunner

from vmpreflight import cli as cli_module
from vmpreflight.cli import EXIT_FAILED, EXIT_REBOOT_REQUIRED, cli
from vmpreflight.preflight import NetworkMode, Platform
from vmpreflight.state import SetupState


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    monkeypatch.setenv("VMPREFLIGHT_HOME", str(home_dir))
    for name in ("NETWORK_MODE", "PRESET", "BUNDLE", "SKIP_CHECKS", "WARN_CHECKS"):
        monkeypatch.delenv(f"VMPREFLIGHT_{name}", raising=False)
    return home_dir


@pytest.fixture
def windows_host(home, fake_ops, monkeypatch):
    monkeypatch.setattr(cli_module, "current_platform", lambda: Platform.WINDOWS)
    monkeypatch.setattr(cli_module, "get_operations", lambda platform, home_dir: fake_ops)
    return fake_ops


@pytest.fixture
def bundle(tmp_path):
    payload = tmp_path / "disk.img"
    payload.write_text("disk")
    path = tmp_path / "test.crcbundle"
    with tarfile.open(path, "w") as archive:
        archive.add(payload, arcname="disk.img")
    return path


def test_setup_success_records_state(windows_host, home, bundle):
    result = CliRunner().invoke(cli, ["setup", "--bundle", str(bundle)])

    assert result.exit_code == 0, result.output
    assert "Setup is complete" in result.output
    assert SetupState.load(home).setup_completed


def test_setup_failure_exit_code(windows_host, home, bundle):
    windows_host.edition = "Core"
    result = CliRunner().invoke(cli, ["setup", "--bundle", str(bundle)])

    assert result.exit_code == EXIT_FAILED
    assert "Windows Home edition is not supported" in result.output
    assert not SetupState.load(home).setup_completed


def test_setup_reboot_exit_code(windows_host, bundle):
    windows_host.hyperv_admin = False
    result = CliRunner().invoke(cli, ["setup", "--bundle", str(bundle)])

    assert result.exit_code == EXIT_REBOOT_REQUIRED
    assert "Reboot Required" in result.output


def test_skip_check_option(windows_host, bundle):
    windows_host.edition = "Core"
    result = CliRunner().invoke(cli, ["setup", "--bundle", str(bundle), "--skip-check", "check-windows-edition"])
    assert result.exit_code == 0, result.output


def test_start_after_setup_skips_startup_checks(windows_host, home, bundle):
    runner = CliRunner()
    assert runner.invoke(cli, ["setup", "--bundle", str(bundle)]).exit_code == 0

    # Startup-only checks are not rerun on a warm start
    windows_host.edition = "Core"
    result = runner.invoke(cli, ["start", "--bundle", str(bundle)])
    assert result.exit_code == 0, result.output

    # Unless the network mode changed
    result = runner.invoke(cli, ["start", "--bundle", str(bundle), "--network-mode", "user"])
    assert result.exit_code == EXIT_FAILED


def test_start_before_setup_fixes(windows_host, home, bundle):
    windows_host.task_running = False
    result = CliRunner().invoke(cli, ["start", "--bundle", str(bundle)])

    assert result.exit_code == 0, result.output
    assert "start_daemon_task" in windows_host.calls
    assert SetupState.load(home).setup_completed


def test_check_never_fixes(windows_host, bundle):
    windows_host.task_running = False
    result = CliRunner().invoke(cli, ["check", "--all", "--bundle", str(bundle)])

    assert result.exit_code == EXIT_FAILED
    assert windows_host.calls == []


def test_cleanup_clears_state(windows_host, home):
    SetupState(home).mark_setup_completed(NetworkMode.SYSTEM)
    result = CliRunner().invoke(cli, ["cleanup"])

    assert result.exit_code == 0, result.output
    assert "remove_daemon_task" in windows_host.calls
    assert not SetupState.load(home).setup_completed


def test_list_shows_keys(windows_host):
    result = CliRunner().invoke(cli, ["list"])

    assert result.exit_code == 0, result.output
    assert "check-hyperv-installed" in result.output


def test_invalid_config_file(windows_host, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("network_mode: bridged\n")
    result = CliRunner().invoke(cli, ["--config", str(path), "check"])

    assert result.exit_code == EXIT_FAILED
    assert "Error loading configuration" in result.output


def test_invalid_skip_check_option(windows_host, bundle):
    result = CliRunner().invoke(cli, ["setup", "--bundle", str(bundle), "--skip-check", "windows-edition"])

    assert result.exit_code == EXIT_FAILED
    assert "Error loading configuration" in result.output
    assert windows_host.calls == []
