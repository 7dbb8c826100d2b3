from __future__ import annotations

from conftest import run
from winsys.tools.process import ProcessTool


def test_list_processes_defaults(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "list_processes"}))
    [command] = runner.commands
    assert command.startswith("Get-Process | Sort-Object CPU -Descending | Select-Object -First 20 ")
    assert "Sorted by: cpu\nLimit: 20\nInclude System: true" in text


def test_list_processes_can_exclude_session_zero(runner) -> None:
    run(
        ProcessTool(runner).call(
            {"action": "list_processes", "include_system": False, "sort_by": "memory", "limit": 5}
        )
    )
    command = runner.commands[0]
    assert "Where-Object {$_.SessionId -ne 0}" in command
    assert "Sort-Object WorkingSet" in command
    assert "-First 5 " in command


def test_top_processes_default_to_ten(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "get_top_processes", "sort_by": "name"}))
    assert "Sort-Object Name -Descending | Select-Object -First 10 " in runner.commands[0]
    assert text.startswith("# Top 10 Processes\n\nSorted by: name")


def test_find_process_escapes_pattern(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "find_process", "process_name": "o'brien"}))
    assert "$_.Name -like '*o''brien*'" in runner.commands[0]
    assert 'Search term: "o\'brien"' in text


def test_process_details_by_name(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "get_process_details", "process_name": "notepad"}))
    basic, extended = runner.commands
    assert basic.startswith("Get-Process -Name 'notepad' -ErrorAction Stop")
    assert "-Filter 'Name=''notepad.exe'''" in extended
    assert "## Basic Information" in text and "## Extended Information" in text


def test_process_details_prefers_pid(runner) -> None:
    run(
        ProcessTool(runner).call(
            {"action": "get_process_details", "process_id": 4242, "process_name": "ignored"}
        )
    )
    assert runner.commands[0].startswith("Get-Process -Id 4242 ")
    assert "-Filter 'ProcessId=4242'" in runner.commands[1]


def test_kill_process_reports_target(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "kill_process", "process_id": 77}))
    assert runner.commands == ["Stop-Process -Id 77 -Force -ErrorAction Stop"]
    assert text == "# Process Terminated\n\n✅ Successfully terminated PID 77"


def test_process_tree(runner) -> None:
    text = run(ProcessTool(runner).call({"action": "get_process_tree"}))
    assert "ParentProcessId" in runner.commands[0]
    assert text.startswith("# Process Tree")
