"""Performance counters, resource usage and short sampling sessions."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Mapping

from pydantic import Field

from ..formatting import bullet, code_block, format_bytes, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import CommandRunner, quote_literal
from .system import HostFacts, collect_host_facts

# Added on top of the sampling time when a command samples counters.
SAMPLING_GRACE_SECONDS = 30.0

CPU_TOTAL = r"\Processor(_Total)\% Processor Time"
CPU_PER_CORE = r"\Processor(*)\% Processor Time"
MEMORY_AVAILABLE = r"\Memory\Available MBytes"
DISK_TIME_PER_DISK = r"\PhysicalDisk(*)\% Disk Time"
NETWORK_TOTAL = r"\Network Interface(*)\Bytes Total/sec"


def counters(*paths: str) -> str:
    """Quote one or more counter paths for ``Get-Counter``."""
    return ", ".join(quote_literal(path) for path in paths)


class PerformanceAction(str, Enum):
    GET_CPU_USAGE = "get_cpu_usage"
    GET_MEMORY_USAGE = "get_memory_usage"
    GET_DISK_USAGE = "get_disk_usage"
    GET_DISK_IO = "get_disk_io"
    GET_NETWORK_IO = "get_network_io"
    GET_SYSTEM_PERFORMANCE = "get_system_performance"
    GET_TOP_PROCESSES_BY_CPU = "get_top_processes_by_cpu"
    GET_TOP_PROCESSES_BY_MEMORY = "get_top_processes_by_memory"
    GET_PERFORMANCE_COUNTERS = "get_performance_counters"
    MONITOR_REAL_TIME = "monitor_real_time"


class PerformanceInput(ToolInputModel):
    action: PerformanceAction = Field(..., description="The performance monitoring action to perform")
    duration: int = Field(
        default=10, ge=1, le=300, description="Duration in seconds for monitoring (default: 10)"
    )
    interval: int = Field(
        default=1, ge=1, le=60, description="Interval in seconds between measurements (default: 1)"
    )
    process_count: int = Field(
        default=10, ge=1, description="Number of top processes to show (default: 10)"
    )
    counter_name: str | None = Field(
        default=None, description="Specific performance counter name to query"
    )


class PerformanceTool(MCPTool):
    name = "performance"
    description = (
        "System performance monitoring including CPU usage, memory usage, disk I/O, "
        "network I/O, and system performance counters"
    )
    label = "Performance monitoring operation"
    actions = PerformanceAction
    input_model = PerformanceInput

    def __init__(
        self,
        runner: CommandRunner,
        facts: Callable[[], HostFacts] = collect_host_facts,
    ):
        super().__init__(runner)
        self._facts = facts

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            PerformanceAction.GET_CPU_USAGE: self.get_cpu_usage,
            PerformanceAction.GET_MEMORY_USAGE: self.get_memory_usage,
            PerformanceAction.GET_DISK_USAGE: self.get_disk_usage,
            PerformanceAction.GET_DISK_IO: self.get_disk_io,
            PerformanceAction.GET_NETWORK_IO: self.get_network_io,
            PerformanceAction.GET_SYSTEM_PERFORMANCE: self.get_system_performance,
            PerformanceAction.GET_TOP_PROCESSES_BY_CPU: self.get_top_processes_by_cpu,
            PerformanceAction.GET_TOP_PROCESSES_BY_MEMORY: self.get_top_processes_by_memory,
            PerformanceAction.GET_PERFORMANCE_COUNTERS: self.get_performance_counters,
            PerformanceAction.MONITOR_REAL_TIME: self.monitor_real_time,
        }

    async def get_cpu_usage(self, payload: PerformanceInput) -> str:
        facts = self._facts()
        overall = await self.runner.run_powershell(
            f"Get-Counter {counters(CPU_TOTAL)}"
            f" -SampleInterval 1 -MaxSamples {payload.duration}"
            " | Select-Object -ExpandProperty CounterSamples | Select-Object CookedValue"
            " | Measure-Object -Property CookedValue -Average -Maximum -Minimum",
            timeout=payload.duration + SAMPLING_GRACE_SECONDS,
        )
        per_core = await self.runner.run_powershell(
            f"Get-Counter {counters(CPU_PER_CORE)} -MaxSamples 1"
            " | Select-Object -ExpandProperty CounterSamples"
            " | Where-Object {$_.InstanceName -ne '_total'}"
            " | Select-Object InstanceName, CookedValue | Format-Table -AutoSize"
        )
        info = "\n".join(
            [
                "## CPU Information",
                bullet("Model", facts.cpu_model),
                bullet("Cores", facts.cpu_count),
                bullet("Monitoring Duration", f"{payload.duration} seconds"),
            ]
        )
        return report(
            "CPU Usage Analysis",
            info,
            section("Overall CPU Usage Statistics", overall),
            section("Per-Core Usage (Current)", per_core),
        )

    async def get_memory_usage(self, payload: PerformanceInput) -> str:
        facts = self._facts()
        used = facts.total_memory - facts.free_memory
        percent = (used / facts.total_memory * 100) if facts.total_memory else 0.0
        detail = await self.runner.run_powershell(
            "Get-Counter "
            + counters(
                r"\Memory\Available MBytes",
                r"\Memory\Committed Bytes",
                r"\Memory\Pool Nonpaged Bytes",
                r"\Memory\Pool Paged Bytes",
            )
            + " | Select-Object -ExpandProperty CounterSamples | Select-Object Path, CookedValue"
            " | Format-Table -AutoSize"
        )
        top = await self.runner.run_powershell(
            "Get-Process | Sort-Object WorkingSet -Descending | Select-Object -First 10 Name,"
            " @{Name='MemoryMB';Expression={[math]::Round($_.WorkingSet/1MB,2)}} | Format-Table -AutoSize"
        )
        overall = "\n".join(
            [
                "## Overall Memory Status",
                bullet("Total Memory", format_bytes(facts.total_memory)),
                bullet("Used Memory", format_bytes(used)),
                bullet("Free Memory", format_bytes(facts.free_memory)),
                bullet("Usage Percentage", f"{percent:.2f}%"),
            ]
        )
        return report(
            "Memory Usage Analysis",
            overall,
            section("Detailed Memory Counters", detail),
            section("Top 10 Processes by Memory Usage", top),
        )

    async def get_disk_usage(self, payload: PerformanceInput) -> str:
        output = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_LogicalDisk | Select-Object DeviceID,"
            " @{Name='SizeGB';Expression={[math]::Round($_.Size/1GB,2)}},"
            " @{Name='FreeSpaceGB';Expression={[math]::Round($_.FreeSpace/1GB,2)}},"
            " @{Name='UsedSpaceGB';Expression={[math]::Round(($_.Size-$_.FreeSpace)/1GB,2)}},"
            " @{Name='PercentFree';Expression={if ($_.Size) {[math]::Round(($_.FreeSpace/$_.Size)*100,2)}}}"
            " | Format-Table -AutoSize"
        )
        return report("Disk Usage Analysis", code_block(output))

    async def get_disk_io(self, payload: PerformanceInput) -> str:
        overall = await self.runner.run_powershell(
            "Get-Counter "
            + counters(
                r"\PhysicalDisk(_Total)\Disk Reads/sec",
                r"\PhysicalDisk(_Total)\Disk Writes/sec",
                r"\PhysicalDisk(_Total)\Disk Read Bytes/sec",
                r"\PhysicalDisk(_Total)\Disk Write Bytes/sec",
                r"\PhysicalDisk(_Total)\% Disk Time",
            )
            + " | Select-Object -ExpandProperty CounterSamples | Select-Object Path, CookedValue"
            " | Format-Table -AutoSize"
        )
        per_disk = await self.runner.run_powershell(
            f"Get-Counter {counters(DISK_TIME_PER_DISK)}"
            " | Select-Object -ExpandProperty CounterSamples"
            " | Where-Object {$_.InstanceName -ne '_total'}"
            " | Select-Object InstanceName, CookedValue | Format-Table -AutoSize"
        )
        return report(
            "Disk I/O Performance",
            section("Overall Disk I/O", overall),
            section("Per-Disk Usage", per_disk),
        )

    async def get_network_io(self, payload: PerformanceInput) -> str:
        total = await self.runner.run_powershell(
            f"Get-Counter {counters(NETWORK_TOTAL)}"
            " | Select-Object -ExpandProperty CounterSamples | Where-Object {$_.CookedValue -gt 0}"
            " | Select-Object InstanceName, CookedValue | Format-Table -AutoSize"
        )
        detail = await self.runner.run_powershell(
            "Get-Counter "
            + counters(
                r"\Network Interface(*)\Bytes Received/sec",
                r"\Network Interface(*)\Bytes Sent/sec",
            )
            + " | Select-Object -ExpandProperty CounterSamples | Where-Object {$_.CookedValue -gt 0}"
            " | Select-Object InstanceName, Path, CookedValue | Format-Table -AutoSize"
        )
        return report(
            "Network I/O Performance",
            section("Total Network Traffic", total),
            section("Detailed Network Statistics", detail),
        )

    async def get_system_performance(self, payload: PerformanceInput) -> str:
        indicators = await self.runner.run_powershell(
            "Get-Counter "
            + counters(
                r"\Processor(_Total)\% Processor Time",
                r"\Memory\Available MBytes",
                r"\PhysicalDisk(_Total)\% Disk Time",
                r"\System\Processor Queue Length",
                r"\System\Context Switches/sec",
            )
            + " | Select-Object -ExpandProperty CounterSamples | Select-Object Path, CookedValue"
            " | Format-Table -AutoSize"
        )
        uptime = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_OperatingSystem | Select-Object LastBootUpTime,"
            " @{Name='UptimeHours';Expression={((Get-Date) - $_.LastBootUpTime).TotalHours}}"
            " | Format-List"
        )
        return report(
            "System Performance Overview",
            section("Key Performance Indicators", indicators),
            section("System Uptime", uptime),
        )

    async def get_top_processes_by_cpu(self, payload: PerformanceInput) -> str:
        output = await self.runner.run_powershell(
            f"Get-Process | Sort-Object CPU -Descending | Select-Object -First {payload.process_count}"
            " Name, Id, @{Name='CPU%';Expression={$_.CPU}},"
            " @{Name='MemoryMB';Expression={[math]::Round($_.WorkingSet/1MB,2)}}, StartTime"
            " | Format-Table -AutoSize"
        )
        return report(f"Top {payload.process_count} Processes by CPU Usage", code_block(output))

    async def get_top_processes_by_memory(self, payload: PerformanceInput) -> str:
        output = await self.runner.run_powershell(
            f"Get-Process | Sort-Object WorkingSet -Descending | Select-Object -First {payload.process_count}"
            " Name, Id, @{Name='MemoryMB';Expression={[math]::Round($_.WorkingSet/1MB,2)}},"
            " @{Name='CPU%';Expression={$_.CPU}}, StartTime | Format-Table -AutoSize"
        )
        return report(f"Top {payload.process_count} Processes by Memory Usage", code_block(output))

    async def get_performance_counters(self, payload: PerformanceInput) -> str:
        if payload.counter_name and payload.counter_name.strip():
            output = await self.runner.run_powershell(
                f"Get-Counter {counters(payload.counter_name)}"
                " | Select-Object -ExpandProperty CounterSamples"
                " | Select-Object Path, CookedValue, RawValue | Format-List"
            )
            return report(f"Performance Counter: {payload.counter_name}", code_block(output))
        output = await self.runner.run_powershell(
            "Get-Counter -ListSet * | Select-Object CounterSetName, Description"
            " | Sort-Object CounterSetName | Format-Table -AutoSize"
        )
        return report("Available Performance Counter Categories", code_block(output))

    async def monitor_real_time(self, payload: PerformanceInput) -> str:
        script = (
            "$samples = @(); "
            f"for ($i = 1; $i -le {payload.duration}; $i++) {{ "
            f"$cpu = Get-Counter {counters(CPU_TOTAL)} -MaxSamples 1; "
            f"$mem = Get-Counter {counters(MEMORY_AVAILABLE)} -MaxSamples 1; "
            '$samples += "Sample $i - CPU: $([math]::Round($cpu.CounterSamples.CookedValue,2))%'
            ' Memory Available: $([math]::Round($mem.CounterSamples.CookedValue,2))MB"; '
            f"Start-Sleep -Seconds {payload.interval} }}; $samples"
        )
        # Each iteration also spends about a second inside Get-Counter.
        budget = payload.duration * (payload.interval + 1) + SAMPLING_GRACE_SECONDS
        output = await self.runner.run_powershell(script, timeout=budget)
        header = f"Duration: {payload.duration} seconds\nInterval: {payload.interval} second(s)"
        return report("Real-time Performance Monitoring", header, code_block(output))
