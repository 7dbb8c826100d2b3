from __future__ import annotations

import pytest

from conftest import FakeRunner, run
from winsys.errors import ExternalCommandError
from winsys.tools.services import ServiceTool


def test_list_services_without_filters(runner) -> None:
    text = run(ServiceTool(runner).call({"action": "list_services"}))
    [command] = runner.commands
    assert command.startswith("Get-Service | Select-Object -First 50 ")
    assert "Status Filter: all\nStartup Type Filter: all\nLimit: 50" in text


def test_list_services_combines_filters(runner) -> None:
    run(
        ServiceTool(runner).call(
            {
                "action": "list_services",
                "status_filter": "running",
                "startup_type_filter": "automatic",
                "limit": 5,
            }
        )
    )
    command = runner.commands[0]
    assert "Where-Object {$_.Status -eq 'Running' -and $_.StartType -eq 'Automatic'}" in command
    assert "-First 5 " in command


@pytest.mark.parametrize(
    ("action", "expected_command", "title"),
    [
        ("start_service", "Start-Service -Name 'Spooler' -ErrorAction Stop", "Service Start Operation"),
        ("stop_service", "Stop-Service -Name 'Spooler' -Force -ErrorAction Stop", "Service Stop Operation"),
        (
            "restart_service",
            "Restart-Service -Name 'Spooler' -Force -ErrorAction Stop",
            "Service Restart Operation",
        ),
    ],
)
def test_control_actions_report_current_status(runner, action, expected_command, title) -> None:
    runner.default_output = "Spooler Running"
    text = run(ServiceTool(runner).call({"action": action, "service_name": "Spooler"}))
    control, status = runner.commands
    assert control == expected_command
    assert status.startswith("Get-Service -Name 'Spooler' ")
    assert text.startswith(f"# {title}\n\n✅ Attempted to ")
    assert "## Current Status\n```\nSpooler Running\n```" in text


def test_failed_control_skips_status_check() -> None:
    runner = FakeRunner(failures={"Stop-Service": "Cannot stop service 'RpcSs'"})
    with pytest.raises(ExternalCommandError):
        run(ServiceTool(runner).call({"action": "stop_service", "service_name": "RpcSs"}))
    assert len(runner.calls) == 1


def test_service_details_escapes_filter(runner) -> None:
    text = run(ServiceTool(runner).call({"action": "get_service_details", "service_name": "a'b"}))
    basic, extended, dependencies = runner.commands
    assert basic.startswith("Get-Service -Name 'a''b' -ErrorAction Stop")
    assert "-Filter 'Name=''a\\''b'''" in extended
    assert "ServicesDependedOn" in dependencies
    for heading in ("Basic Information", "Extended Information", "Dependencies"):
        assert f"## {heading}" in text


def test_find_service_matches_name_or_display_name(runner) -> None:
    run(ServiceTool(runner).call({"action": "find_service", "search_term": "update"}))
    assert "$_.Name -like '*update*' -or $_.DisplayName -like '*update*'" in runner.commands[0]


def test_running_and_startup_services(runner) -> None:
    tool = ServiceTool(runner)
    run(tool.call({"action": "get_running_services", "limit": 3}))
    text = run(tool.call({"action": "get_startup_services"}))
    running, startup = runner.commands
    assert "$_.Status -eq 'Running'" in running and "-First 3 " in running
    assert "$_.StartMode -eq 'Auto'" in startup and "-First 50 " in startup
    assert text.startswith("# Automatic Startup Services\n\nLimit: 50")
