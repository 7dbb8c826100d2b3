"""Process listing, inspection and termination."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import Field

from ..errors import MissingParameterError
from ..formatting import code_block, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import quote_literal, wildcard, wql_escape

DEFAULT_LIST_LIMIT = 20
DEFAULT_TOP_LIMIT = 10


class ProcessAction(str, Enum):
    LIST_PROCESSES = "list_processes"
    GET_PROCESS_DETAILS = "get_process_details"
    KILL_PROCESS = "kill_process"
    FIND_PROCESS = "find_process"
    GET_TOP_PROCESSES = "get_top_processes"
    GET_PROCESS_TREE = "get_process_tree"


class ProcessSortKey(str, Enum):
    CPU = "cpu"
    MEMORY = "memory"
    NAME = "name"
    PID = "pid"


SORT_PROPERTIES = {
    ProcessSortKey.CPU: "CPU",
    ProcessSortKey.MEMORY: "WorkingSet",
    ProcessSortKey.NAME: "Name",
    ProcessSortKey.PID: "Id",
}


class ProcessInput(ToolInputModel):
    action: ProcessAction = Field(..., description="The process management action to perform")
    process_id: int | None = Field(
        default=None, ge=0, description="Process ID for specific process operations"
    )
    process_name: str | None = Field(
        default=None, description="Process name for searching or filtering"
    )
    sort_by: ProcessSortKey = Field(
        default=ProcessSortKey.CPU,
        description="Sort processes by specified criteria (default: cpu)",
    )
    limit: int | None = Field(
        default=None, ge=1, description="Limit number of results (default: 20)"
    )
    include_system: bool = Field(
        default=True, description="Include system processes (default: true)"
    )


class ProcessTool(MCPTool):
    name = "process_manager"
    description = (
        "Comprehensive process management including listing processes, getting "
        "process details, killing processes, and monitoring resource usage"
    )
    label = "Process management operation"
    actions = ProcessAction
    input_model = ProcessInput
    required = {ProcessAction.FIND_PROCESS: ("process_name",)}

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            ProcessAction.LIST_PROCESSES: self.list_processes,
            ProcessAction.GET_PROCESS_DETAILS: self.get_process_details,
            ProcessAction.KILL_PROCESS: self.kill_process,
            ProcessAction.FIND_PROCESS: self.find_process,
            ProcessAction.GET_TOP_PROCESSES: self.get_top_processes,
            ProcessAction.GET_PROCESS_TREE: self.get_process_tree,
        }

    async def list_processes(self, payload: ProcessInput) -> str:
        limit = payload.limit or DEFAULT_LIST_LIMIT
        system_filter = "" if payload.include_system else " | Where-Object {$_.SessionId -ne 0}"
        command = (
            f"Get-Process{system_filter}"
            f" | Sort-Object {SORT_PROPERTIES[payload.sort_by]} -Descending"
            f" | Select-Object -First {limit} Name, Id, CPU, WorkingSet, VirtualMemorySize, SessionId, StartTime"
            " | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        header = "\n".join(
            [
                f"Sorted by: {payload.sort_by.value}",
                f"Limit: {limit}",
                f"Include System: {str(payload.include_system).lower()}",
            ]
        )
        return report("Process List", header, code_block(output))

    async def get_process_details(self, payload: ProcessInput) -> str:
        selector = _process_selector(payload)
        basic = await self.runner.run_powershell(
            f"Get-Process {selector} -ErrorAction Stop | Select-Object *"
        )
        if payload.process_id is not None:
            wql = f"ProcessId={payload.process_id}"
        else:
            wql = f"Name='{wql_escape(payload.process_name)}.exe'"
        extended = await self.runner.run_powershell(
            f"Get-CimInstance -ClassName Win32_Process -Filter {quote_literal(wql)}"
            " | Select-Object CommandLine, CreationDate, ExecutablePath, PageFileUsage, ThreadCount"
        )
        return report(
            "Process Details",
            section("Basic Information", basic),
            section("Extended Information", extended),
        )

    async def kill_process(self, payload: ProcessInput) -> str:
        selector = _process_selector(payload)
        if payload.process_id is not None:
            identifier = f"PID {payload.process_id}"
        else:
            identifier = f'process "{payload.process_name}"'
        await self.runner.run_powershell(f"Stop-Process {selector} -Force -ErrorAction Stop")
        return report("Process Terminated", f"✅ Successfully terminated {identifier}")

    async def find_process(self, payload: ProcessInput) -> str:
        command = (
            f"Get-Process | Where-Object {{$_.Name -like {wildcard(payload.process_name)}}}"
            " | Select-Object Name, Id, CPU, WorkingSet, StartTime | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        return report(
            "Process Search Results",
            f'Search term: "{payload.process_name}"',
            code_block(output),
        )

    async def get_top_processes(self, payload: ProcessInput) -> str:
        limit = payload.limit or DEFAULT_TOP_LIMIT
        command = (
            f"Get-Process | Sort-Object {SORT_PROPERTIES[payload.sort_by]} -Descending"
            f" | Select-Object -First {limit} Name, Id,"
            " @{Name='CPU%';Expression={$_.CPU}},"
            " @{Name='MemoryMB';Expression={[math]::Round($_.WorkingSet/1MB,2)}},"
            " @{Name='ThreadCount';Expression={$_.Threads.Count}}, StartTime"
            " | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        return report(
            f"Top {limit} Processes",
            f"Sorted by: {payload.sort_by.value}",
            code_block(output),
        )

    async def get_process_tree(self, payload: ProcessInput) -> str:
        command = (
            "Get-CimInstance -ClassName Win32_Process"
            " | Select-Object Name, ProcessId, ParentProcessId, CommandLine"
            " | Sort-Object ParentProcessId, ProcessId | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        return report("Process Tree", code_block(output))


def _process_selector(payload: ProcessInput) -> str:
    if payload.process_id is not None:
        return f"-Id {payload.process_id}"
    if payload.process_name and payload.process_name.strip():
        return f"-Name {quote_literal(payload.process_name)}"
    raise MissingParameterError(["process_id", "process_name"], alternatives=True)
