from __future__ import annotations

import pytest

from conftest import run
from winsys.tools.performance import (
    CPU_TOTAL,
    SAMPLING_GRACE_SECONDS,
    PerformanceTool,
    counters,
)


@pytest.fixture
def tool(runner, host_facts) -> PerformanceTool:
    return PerformanceTool(runner, facts=lambda: host_facts)


def test_counter_paths_are_single_quoted() -> None:
    assert counters(CPU_TOTAL) == "'\\Processor(_Total)\\% Processor Time'"
    assert counters("\\A", "\\B") == "'\\A', '\\B'"


def test_cpu_usage_samples_for_duration(tool, runner) -> None:
    text = run(tool.call({"action": "get_cpu_usage", "duration": 5}))
    overall, per_core = runner.calls
    assert "-SampleInterval 1 -MaxSamples 5" in overall.command
    assert overall.timeout == 5 + SAMPLING_GRACE_SECONDS
    assert per_core.timeout is None
    assert "- **Cores**: 8" in text
    assert "- **Monitoring Duration**: 5 seconds" in text


def test_duration_is_bounded(tool, runner) -> None:
    with pytest.raises(ValueError):
        run(tool.call({"action": "get_cpu_usage", "duration": 301}))
    assert runner.calls == []


def test_memory_usage_reports_percentage(tool) -> None:
    text = run(tool.call({"action": "get_memory_usage"}))
    assert "- **Total Memory**: 16.00 GB" in text
    assert "- **Used Memory**: 12.00 GB" in text
    assert "- **Free Memory**: 4.00 GB" in text
    assert "- **Usage Percentage**: 75.00%" in text


def test_top_processes_honour_count(tool, runner) -> None:
    text = run(tool.call({"action": "get_top_processes_by_memory", "process_count": 3}))
    assert "Sort-Object WorkingSet -Descending | Select-Object -First 3 " in runner.commands[0]
    assert text.startswith("# Top 3 Processes by Memory Usage")


def test_named_counter_is_quoted(tool, runner) -> None:
    text = run(
        tool.call({"action": "get_performance_counters", "counter_name": "\\Memory\\Page Faults/sec"})
    )
    assert runner.commands[0].startswith("Get-Counter '\\Memory\\Page Faults/sec' ")
    assert text.startswith("# Performance Counter: \\Memory\\Page Faults/sec")


def test_counter_sets_listed_without_name(tool, runner) -> None:
    text = run(tool.call({"action": "get_performance_counters", "counter_name": "  "}))
    assert runner.commands[0].startswith("Get-Counter -ListSet *")
    assert text.startswith("# Available Performance Counter Categories")


def test_monitor_real_time_budget(tool, runner) -> None:
    text = run(tool.call({"action": "monitor_real_time", "duration": 4, "interval": 2}))
    [call] = runner.calls
    assert "$i -le 4" in call.command
    assert "Start-Sleep -Seconds 2" in call.command
    assert call.timeout == 4 * 3 + SAMPLING_GRACE_SECONDS
    assert "Duration: 4 seconds\nInterval: 2 second(s)" in text
