import os
import subprocess
from unittest.mock import patch

import pytest

from vmpreflight.platform import powershell
from vmpreflight.platform.powershell import CommandError
from vmpreflight.platform.windows import WindowsOperations


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@patch("subprocess.run")
def test_execute_success(mock_run):
    mock_run.return_value = completed(stdout="Running\n")
    result = powershell.execute("(Get-Service vmms).Status")

    assert result.success
    assert result.stdout == "Running\n"
    args = mock_run.call_args[0][0]
    assert args[0] == powershell.POWERSHELL
    assert args[-1] == "(Get-Service vmms).Status"


@patch("subprocess.run")
def test_execute_failure_raises(mock_run):
    mock_run.return_value = completed(stderr="Get-Service : Cannot find any service", returncode=1)
    with pytest.raises(CommandError) as context:
        powershell.execute("Get-Service nope")

    assert context.value.return_code == 1
    assert "Cannot find any service" in str(context.value)


@patch("subprocess.run", side_effect=FileNotFoundError("powershell.exe"))
def test_missing_powershell(mock_run):
    with pytest.raises(CommandError, match="not available"):
        powershell.execute("Get-VM")


@patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="powershell.exe", timeout=5))
def test_timeout(mock_run):
    with pytest.raises(CommandError, match="timed out"):
        powershell.execute("Get-VM", timeout=5)


@patch("subprocess.run")
def test_execute_as_admin_removes_script(mock_run):
    mock_run.return_value = completed()
    powershell.execute_as_admin("creating a group", "New-LocalGroup -Name test")

    elevate = mock_run.call_args[0][0][-1]
    assert "-Verb RunAs" in elevate
    script = elevate.split("'-File', '")[1].split("'")[0]
    assert not os.path.exists(script)


@patch("subprocess.run")
def test_execute_as_admin_failure_names_reason(mock_run):
    mock_run.return_value = completed(returncode=1)
    with pytest.raises(CommandError, match="Failed while creating a group"):
        powershell.execute_as_admin("creating a group", "New-LocalGroup -Name test")


@patch("subprocess.run")
def test_is_admin(mock_run):
    mock_run.return_value = completed(stdout="True\r\n")
    assert powershell.is_admin()

    mock_run.return_value = completed(returncode=1)
    assert not powershell.is_admin()


@patch("subprocess.run")
def test_windows_release_id(mock_run, tmp_path):
    ops = WindowsOperations(tmp_path)

    mock_run.return_value = completed(stdout="2009\n")
    assert ops.windows_release_id() == 2009

    mock_run.return_value = completed(stdout="unknown\n")
    with pytest.raises(CommandError, match="Failed to parse"):
        ops.windows_release_id()


@patch("subprocess.run")
def test_find_virtual_switch(mock_run, tmp_path):
    ops = WindowsOperations(tmp_path)

    mock_run.return_value = completed(stdout="Default Switch\r\nvmpreflight\r\n")
    assert ops.find_virtual_switch("vmpreflight") == "vmpreflight"

    mock_run.return_value = completed(stdout="Default Switch\r\n")
    assert ops.find_virtual_switch("vmpreflight") == "Default Switch"

    mock_run.return_value = completed(stdout="")
    assert ops.find_virtual_switch("vmpreflight") is None


@patch("subprocess.run")
def test_missing_service_status(mock_run, tmp_path):
    mock_run.return_value = completed(returncode=1)
    assert WindowsOperations(tmp_path).service_status("vmms") is None


def elevated_scripts(switch_listing):
    """subprocess.run replacement recording the scripts run as admin."""
    scripts = []

    def run(args, **kwargs):
        command = args[-1]
        if command.startswith("Get-VMSwitch"):
            return switch_listing
        script = command.split("'-File', '")[1].split("'")[0]
        with open(script) as f:
            scripts.append(f.read())
        return completed()

    return run, scripts


def test_reset_dns_servers_includes_default_switch(tmp_path):
    run, scripts = elevated_scripts(completed(stdout="Default Switch\r\n"))
    with patch("subprocess.run", side_effect=run):
        WindowsOperations(tmp_path).reset_dns_servers()

    assert '"vEthernet (Default Switch)","vEthernet (vmpreflight)"' in scripts[0]


def test_reset_dns_servers_without_switch_access(tmp_path):
    denied = completed(stderr="Get-VMSwitch : You do not have the required permission", returncode=1)
    run, scripts = elevated_scripts(denied)
    with patch("subprocess.run", side_effect=run):
        WindowsOperations(tmp_path).reset_dns_servers()

    assert len(scripts) == 1
    assert "-InterfaceAlias (\"vEthernet (vmpreflight)\")" in scripts[0]
    assert "Default Switch" not in scripts[0]
