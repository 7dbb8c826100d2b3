"""Hardware, operating system, account and environment information."""

from __future__ import annotations

import os
import platform
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

import psutil
from pydantic import Field

from ..formatting import bullet, code_block, format_bytes, format_uptime, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import CommandRunner, wildcard

MAX_HOTFIXES = 10
MAX_PATH_ENTRIES = 20
NOT_AVAILABLE = "N/A"

SYSTEM_PATH_VARIABLES = (
    ("System Root", "SystemRoot"),
    ("Program Files", "ProgramFiles"),
    ("Program Files (x86)", "ProgramFiles(x86)"),
    ("User Profile", "USERPROFILE"),
    ("AppData", "APPDATA"),
    ("Local AppData", "LOCALAPPDATA"),
    ("Temp", "TEMP"),
    ("Windows Directory", "windir"),
)


@dataclass(frozen=True)
class HostFacts:
    hostname: str
    platform: str
    architecture: str
    cpu_model: str
    cpu_count: int
    total_memory: int
    free_memory: int
    uptime_seconds: float


def collect_host_facts() -> HostFacts:
    memory = psutil.virtual_memory()
    return HostFacts(
        hostname=socket.gethostname(),
        platform=platform.system().lower(),
        architecture=platform.machine(),
        cpu_model=platform.processor() or platform.machine() or "unknown",
        cpu_count=psutil.cpu_count(logical=True) or 0,
        total_memory=memory.total,
        free_memory=memory.available,
        uptime_seconds=time.time() - psutil.boot_time(),
    )


class SystemInfoAction(str, Enum):
    GET_SYSTEM_OVERVIEW = "get_system_overview"
    GET_HARDWARE_INFO = "get_hardware_info"
    GET_OS_INFO = "get_os_info"
    GET_ENVIRONMENT_VARS = "get_environment_vars"
    GET_INSTALLED_SOFTWARE = "get_installed_software"
    GET_SYSTEM_UPTIME = "get_system_uptime"
    GET_USER_INFO = "get_user_info"
    GET_SYSTEM_PATHS = "get_system_paths"


class HardwareCategory(str, Enum):
    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    ALL = "all"


HARDWARE_QUERIES = (
    (
        HardwareCategory.CPU,
        "CPU Information",
        "Get-CimInstance -ClassName Win32_Processor | Select-Object Name, Manufacturer,"
        " MaxClockSpeed, NumberOfCores, NumberOfLogicalProcessors, Architecture | Format-List",
    ),
    (
        HardwareCategory.MEMORY,
        "Memory Information",
        "Get-CimInstance -ClassName Win32_PhysicalMemory | Select-Object Manufacturer, Capacity,"
        " Speed, MemoryType, FormFactor | Format-Table -AutoSize",
    ),
    (
        HardwareCategory.DISK,
        "Disk Information",
        "Get-CimInstance -ClassName Win32_DiskDrive | Select-Object Model, Size, MediaType,"
        " InterfaceType | Format-Table -AutoSize",
    ),
    (
        HardwareCategory.NETWORK,
        "Network Adapters",
        "Get-CimInstance -ClassName Win32_NetworkAdapter | Where-Object {$_.NetConnectionStatus -eq 2}"
        " | Select-Object Name, MACAddress, Speed, AdapterType | Format-Table -AutoSize",
    ),
)


class SystemInfoInput(ToolInputModel):
    action: SystemInfoAction = Field(..., description="The system information action to perform")
    category: HardwareCategory = Field(
        default=HardwareCategory.ALL,
        description="Hardware category to focus on (for hardware_info action)",
    )
    filter: str | None = Field(
        default=None,
        description="Filter for environment variables or software (supports wildcards)",
    )


class SystemInfoTool(MCPTool):
    name = "system_info"
    description = (
        "Comprehensive system information including hardware details, OS info, "
        "environment variables, and system configuration"
    )
    label = "System information operation"
    actions = SystemInfoAction
    input_model = SystemInfoInput

    def __init__(
        self,
        runner: CommandRunner,
        facts: Callable[[], HostFacts] = collect_host_facts,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(runner)
        self._facts = facts
        self._environ = environ if environ is not None else os.environ

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            SystemInfoAction.GET_SYSTEM_OVERVIEW: self.get_system_overview,
            SystemInfoAction.GET_HARDWARE_INFO: self.get_hardware_info,
            SystemInfoAction.GET_OS_INFO: self.get_os_info,
            SystemInfoAction.GET_ENVIRONMENT_VARS: self.get_environment_vars,
            SystemInfoAction.GET_INSTALLED_SOFTWARE: self.get_installed_software,
            SystemInfoAction.GET_SYSTEM_UPTIME: self.get_system_uptime,
            SystemInfoAction.GET_USER_INFO: self.get_user_info,
            SystemInfoAction.GET_SYSTEM_PATHS: self.get_system_paths,
        }

    async def get_system_overview(self, payload: SystemInfoInput) -> str:
        facts = self._facts()
        details = await self.runner.run_powershell(
            "Get-ComputerInfo | Select-Object WindowsProductName, WindowsVersion,"
            " TotalPhysicalMemory, CsProcessors, CsSystemType, TimeZone | Format-List"
        )
        basics = "\n".join(
            [
                "## Basic Information",
                bullet("Hostname", facts.hostname),
                bullet("Platform", facts.platform),
                bullet("Architecture", facts.architecture),
                bullet("CPU Cores", facts.cpu_count),
                bullet("Total Memory", format_bytes(facts.total_memory)),
                bullet("Free Memory", format_bytes(facts.free_memory)),
                bullet("System Uptime", format_uptime(facts.uptime_seconds)),
            ]
        )
        return report("System Overview", basics, section("Windows Details", details))

    async def get_hardware_info(self, payload: SystemInfoInput) -> str:
        sections = []
        for category, title, command in HARDWARE_QUERIES:
            if payload.category in (HardwareCategory.ALL, category):
                sections.append(section(title, await self.runner.run_powershell(command)))
        return report("Hardware Information", *sections)

    async def get_os_info(self, payload: SystemInfoInput) -> str:
        details = await self.runner.run_powershell(
            "Get-ComputerInfo | Select-Object WindowsProductName, WindowsVersion,"
            " WindowsBuildLabEx, WindowsInstallationType, WindowsRegisteredOwner, TimeZone,"
            " BootupState, ThermalState, PowerPlatformRole | Format-List"
        )
        hotfixes = await self.runner.run_powershell(
            "Get-HotFix | Sort-Object InstalledOn -Descending"
            f" | Select-Object -First {MAX_HOTFIXES} HotFixID, Description, InstalledOn"
            " | Format-Table -AutoSize"
        )
        return report(
            "Operating System Information",
            section("System Details", details),
            section("Recent Updates", hotfixes),
        )

    async def get_environment_vars(self, payload: SystemInfoInput) -> str:
        clause = ""
        if payload.filter:
            pattern = wildcard(payload.filter)
            clause = f" | Where-Object {{$_.Name -like {pattern} -or $_.Value -like {pattern}}}"
        output = await self.runner.run_powershell(
            f"Get-ChildItem Env:{clause} | Sort-Object Name | Format-Table Name, Value -AutoSize"
        )
        return report("Environment Variables", _filter_line(payload.filter), code_block(output))

    async def get_installed_software(self, payload: SystemInfoInput) -> str:
        clause = ""
        if payload.filter:
            clause = f" | Where-Object {{$_.Name -like {wildcard(payload.filter)}}}"
        output = await self.runner.run_powershell(
            f"Get-CimInstance -ClassName Win32_Product{clause}"
            " | Select-Object Name, Version, Vendor, InstallDate | Sort-Object Name"
            " | Format-Table -AutoSize"
        )
        return report("Installed Software", _filter_line(payload.filter), code_block(output))

    async def get_system_uptime(self, payload: SystemInfoInput) -> str:
        boot = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_OperatingSystem"
            " | Select-Object LastBootUpTime, LocalDateTime | Format-List"
        )
        uptime = format_uptime(self._facts().uptime_seconds)
        return report("System Uptime", f"**Current Uptime**: {uptime}", section("Boot Information", boot))

    async def get_user_info(self, payload: SystemInfoInput) -> str:
        accounts = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_UserAccount | Select-Object Name, FullName,"
            " Description, Disabled, LocalAccount, SID | Format-Table -AutoSize"
        )
        current = await self.runner.run_native(["whoami", "/all"])
        return report(
            "User Information",
            section("Current User Details", current),
            section("All User Accounts", accounts),
        )

    async def get_system_paths(self, payload: SystemInfoInput) -> str:
        directories = "\n".join(
            ["## Important Directories"]
            + [
                bullet(label, self._environ.get(variable) or NOT_AVAILABLE)
                for label, variable in SYSTEM_PATH_VARIABLES
            ]
        )
        raw_path = self._environ.get("PATH", "")
        path_listing = "\n".join(raw_path.split(os.pathsep)[:MAX_PATH_ENTRIES]) or NOT_AVAILABLE
        return report(
            "System Paths",
            directories,
            section(f"PATH Environment (First {MAX_PATH_ENTRIES} entries)", path_listing),
        )


def _filter_line(value: str | None) -> str:
    return f'Filter: "{value}"' if value else ""
