"""Windows service inspection and control."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import Field

from ..formatting import code_block, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import quote_literal, wildcard, wql_escape

DEFAULT_LIMIT = 50


class ServiceAction(str, Enum):
    LIST_SERVICES = "list_services"
    GET_SERVICE_DETAILS = "get_service_details"
    START_SERVICE = "start_service"
    STOP_SERVICE = "stop_service"
    RESTART_SERVICE = "restart_service"
    GET_SERVICE_STATUS = "get_service_status"
    FIND_SERVICE = "find_service"
    GET_RUNNING_SERVICES = "get_running_services"
    GET_STARTUP_SERVICES = "get_startup_services"


class ServiceStatusFilter(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    PAUSED = "paused"
    ALL = "all"


class StartupTypeFilter(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    DISABLED = "disabled"
    ALL = "all"


# (verb, past-tense label, extra flags) for state-changing actions.
_CONTROL_VERBS = {
    ServiceAction.START_SERVICE: ("Start-Service", "start", ""),
    ServiceAction.STOP_SERVICE: ("Stop-Service", "stop", " -Force"),
    ServiceAction.RESTART_SERVICE: ("Restart-Service", "restart", " -Force"),
}


class ServiceInput(ToolInputModel):
    action: ServiceAction = Field(..., description="The service management action to perform")
    service_name: str | None = Field(
        default=None, description="Service name for specific service operations"
    )
    status_filter: ServiceStatusFilter = Field(
        default=ServiceStatusFilter.ALL, description="Filter services by status (default: all)"
    )
    startup_type_filter: StartupTypeFilter = Field(
        default=StartupTypeFilter.ALL,
        description="Filter services by startup type (default: all)",
    )
    search_term: str | None = Field(default=None, description="Search term for finding services")
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, description="Limit number of results (default: 50)")


class ServiceTool(MCPTool):
    name = "service_manager"
    description = (
        "Windows service management including listing services, getting service "
        "details, starting/stopping services, and monitoring service status"
    )
    label = "Service management operation"
    actions = ServiceAction
    input_model = ServiceInput
    required = {
        ServiceAction.GET_SERVICE_DETAILS: ("service_name",),
        ServiceAction.START_SERVICE: ("service_name",),
        ServiceAction.STOP_SERVICE: ("service_name",),
        ServiceAction.RESTART_SERVICE: ("service_name",),
        ServiceAction.GET_SERVICE_STATUS: ("service_name",),
        ServiceAction.FIND_SERVICE: ("search_term",),
    }

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            ServiceAction.LIST_SERVICES: self.list_services,
            ServiceAction.GET_SERVICE_DETAILS: self.get_service_details,
            ServiceAction.START_SERVICE: self.control_service,
            ServiceAction.STOP_SERVICE: self.control_service,
            ServiceAction.RESTART_SERVICE: self.control_service,
            ServiceAction.GET_SERVICE_STATUS: self.get_service_status,
            ServiceAction.FIND_SERVICE: self.find_service,
            ServiceAction.GET_RUNNING_SERVICES: self.get_running_services,
            ServiceAction.GET_STARTUP_SERVICES: self.get_startup_services,
        }

    async def list_services(self, payload: ServiceInput) -> str:
        conditions = []
        if payload.status_filter is not ServiceStatusFilter.ALL:
            conditions.append(f"$_.Status -eq '{payload.status_filter.value.capitalize()}'")
        if payload.startup_type_filter is not StartupTypeFilter.ALL:
            conditions.append(f"$_.StartType -eq '{payload.startup_type_filter.value.capitalize()}'")
        clause = f" | Where-Object {{{' -and '.join(conditions)}}}" if conditions else ""
        output = await self.runner.run_powershell(
            f"Get-Service{clause} | Select-Object -First {payload.limit} Name, DisplayName, Status, StartType"
            " | Sort-Object DisplayName | Format-Table -AutoSize"
        )
        header = "\n".join(
            [
                f"Status Filter: {payload.status_filter.value}",
                f"Startup Type Filter: {payload.startup_type_filter.value}",
                f"Limit: {payload.limit}",
            ]
        )
        return report("Windows Services", header, code_block(output))

    async def get_service_details(self, payload: ServiceInput) -> str:
        name = quote_literal(payload.service_name)
        wql = quote_literal(f"Name='{wql_escape(payload.service_name)}'")
        basic = await self.runner.run_powershell(
            f"Get-Service -Name {name} -ErrorAction Stop | Select-Object * | Format-List"
        )
        extended = await self.runner.run_powershell(
            f"Get-CimInstance -ClassName Win32_Service -Filter {wql}"
            " | Select-Object Name, DisplayName, Description, PathName, StartMode, StartName,"
            " State, ProcessId, ServiceType | Format-List"
        )
        dependencies = await self.runner.run_powershell(
            f"Get-Service -Name {name} | Select-Object -ExpandProperty ServicesDependedOn"
            " | Select-Object Name, Status | Format-Table -AutoSize"
        )
        return report(
            f"Service Details: {payload.service_name}",
            section("Basic Information", basic),
            section("Extended Information", extended),
            section("Dependencies", dependencies),
        )

    async def control_service(self, payload: ServiceInput) -> str:
        verb, label, flags = _CONTROL_VERBS[payload.action]
        name = quote_literal(payload.service_name)
        await self.runner.run_powershell(f"{verb} -Name {name}{flags} -ErrorAction Stop")
        status = await self.runner.run_powershell(
            f"Get-Service -Name {name} | Select-Object Name, Status"
        )
        return report(
            f"Service {label.capitalize()} Operation",
            f"✅ Attempted to {label} service: {payload.service_name}",
            section("Current Status", status),
        )

    async def get_service_status(self, payload: ServiceInput) -> str:
        output = await self.runner.run_powershell(
            f"Get-Service -Name {quote_literal(payload.service_name)} -ErrorAction Stop"
            " | Select-Object Name, DisplayName, Status, StartType | Format-List"
        )
        return report(f"Service Status: {payload.service_name}", code_block(output))

    async def find_service(self, payload: ServiceInput) -> str:
        pattern = wildcard(payload.search_term)
        output = await self.runner.run_powershell(
            f"Get-Service | Where-Object {{$_.Name -like {pattern} -or $_.DisplayName -like {pattern}}}"
            " | Select-Object Name, DisplayName, Status, StartType | Sort-Object DisplayName"
            " | Format-Table -AutoSize"
        )
        return report(
            "Service Search Results",
            f'Search term: "{payload.search_term}"',
            code_block(output),
        )

    async def get_running_services(self, payload: ServiceInput) -> str:
        output = await self.runner.run_powershell(
            "Get-Service | Where-Object {$_.Status -eq 'Running'}"
            f" | Select-Object -First {payload.limit} Name, DisplayName, Status"
            " | Sort-Object DisplayName | Format-Table -AutoSize"
        )
        return report("Running Services", f"Limit: {payload.limit}", code_block(output))

    async def get_startup_services(self, payload: ServiceInput) -> str:
        output = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_Service | Where-Object {$_.StartMode -eq 'Auto'}"
            f" | Select-Object -First {payload.limit} Name, DisplayName, State, StartMode"
            " | Sort-Object DisplayName | Format-Table -AutoSize"
        )
        return report("Automatic Startup Services", f"Limit: {payload.limit}", code_block(output))
