from __future__ import annotations

import os

from conftest import FakeRunner, run
from winsys.tools.system import MAX_PATH_ENTRIES, SystemInfoTool, collect_host_facts


def _tool(runner, host_facts, environ=None) -> SystemInfoTool:
    return SystemInfoTool(runner, facts=lambda: host_facts, environ=environ or {})


def test_overview_combines_local_facts_and_command_output(host_facts) -> None:
    runner = FakeRunner(default_output="WindowsProductName : Windows 11 Pro")
    text = run(_tool(runner, host_facts).call({"action": "get_system_overview"}))
    assert "- **Hostname**: WORKSTATION-01" in text
    assert "- **CPU Cores**: 8" in text
    assert "- **Total Memory**: 16.00 GB" in text
    assert "- **Free Memory**: 4.00 GB" in text
    assert "- **System Uptime**: 1d 1h 1m 1s" in text
    assert "## Windows Details\n```\nWindowsProductName : Windows 11 Pro\n```" in text


def test_hardware_info_single_category(runner, host_facts) -> None:
    text = run(_tool(runner, host_facts).call({"action": "get_hardware_info", "category": "disk"}))
    [command] = runner.commands
    assert "Win32_DiskDrive" in command
    assert "## Disk Information" in text
    assert "## CPU Information" not in text


def test_hardware_info_all_categories_in_order(runner, host_facts) -> None:
    run(_tool(runner, host_facts).call({"action": "get_hardware_info"}))
    classes = [command.split()[2] for command in runner.commands]
    assert classes == [
        "Win32_Processor",
        "Win32_PhysicalMemory",
        "Win32_DiskDrive",
        "Win32_NetworkAdapter",
    ]


def test_os_info_limits_hotfixes(runner, host_facts) -> None:
    text = run(_tool(runner, host_facts).call({"action": "get_os_info"}))
    assert "Select-Object -First 10 HotFixID" in runner.commands[1]
    assert "## Recent Updates" in text


def test_environment_vars_filter(runner, host_facts) -> None:
    text = run(_tool(runner, host_facts).call({"action": "get_environment_vars", "filter": "path"}))
    assert "$_.Name -like '*path*' -or $_.Value -like '*path*'" in runner.commands[0]
    assert 'Filter: "path"' in text


def test_installed_software_filters_on_name(runner, host_facts) -> None:
    run(_tool(runner, host_facts).call({"action": "get_installed_software", "filter": "Office"}))
    assert "Where-Object {$_.Name -like '*Office*'}" in runner.commands[0]


def test_uptime_uses_local_clock(runner, host_facts) -> None:
    text = run(_tool(runner, host_facts).call({"action": "get_system_uptime"}))
    assert "**Current Uptime**: 1d 1h 1m 1s" in text
    assert "LastBootUpTime" in runner.commands[0]


def test_user_info_runs_whoami_natively(runner, host_facts) -> None:
    text = run(_tool(runner, host_facts).call({"action": "get_user_info"}))
    kinds = [(call.kind, call.command) for call in runner.calls]
    assert ("native", "whoami /all") in kinds
    assert text.index("## Current User Details") < text.index("## All User Accounts")


def test_system_paths_reads_environment(runner, host_facts) -> None:
    entries = [f"\\tools\\bin{i}" for i in range(30)]
    environ = {"SystemRoot": "C:\\Windows", "PATH": os.pathsep.join(entries)}
    text = run(_tool(runner, host_facts, environ).call({"action": "get_system_paths"}))
    assert "- **System Root**: C:\\Windows" in text
    assert "- **Temp**: N/A" in text
    assert "\\tools\\bin19" in text
    assert "\\tools\\bin20" not in text
    assert f"## PATH Environment (First {MAX_PATH_ENTRIES} entries)" in text
    assert runner.calls == []


def test_collect_host_facts_reads_live_host() -> None:
    facts = collect_host_facts()
    assert facts.cpu_count >= 1
    assert facts.total_memory > 0
    assert facts.uptime_seconds >= 0
