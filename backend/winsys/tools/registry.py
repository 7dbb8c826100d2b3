"""Read-only Windows registry queries."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping

from pydantic import Field

from ..errors import ExternalCommandError
from ..formatting import bullet, code_block, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import quote_literal, wildcard

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 20
UNAVAILABLE_LOCATION = "*No entries or access denied*"
UNAVAILABLE_VALUE = "*Not available*"

STARTUP_LOCATIONS = (
    "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Run",
    "HKCU\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Run",
    "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\RunOnce",
    "HKCU\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\RunOnce",
)

UNINSTALL_LOCATIONS = (
    "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall",
    "HKLM\\SOFTWARE\\WOW6432Node\\Microsoft\\Windows\\CurrentVersion\\Uninstall",
    "HKCU\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall",
)

SYSTEM_VALUES = (
    (
        "Windows Version",
        "HKLM\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion",
        ("ProductName", "ReleaseId", "CurrentBuild", "UBR"),
    ),
    (
        "Computer Info",
        "HKLM\\SYSTEM\\CurrentControlSet\\Control\\ComputerName\\ComputerName",
        ("ComputerName",),
    ),
    (
        "Processor Info",
        "HKLM\\HARDWARE\\DESCRIPTION\\System\\CentralProcessor\\0",
        ("ProcessorNameString", "~MHz"),
    ),
)


class RegistryAction(str, Enum):
    READ_KEY = "read_key"
    READ_VALUE = "read_value"
    SEARCH_KEYS = "search_keys"
    LIST_SUBKEYS = "list_subkeys"
    GET_STARTUP_PROGRAMS = "get_startup_programs"
    GET_INSTALLED_PROGRAMS = "get_installed_programs"
    GET_SYSTEM_INFO_FROM_REGISTRY = "get_system_info_from_registry"


class RegistryHive(str, Enum):
    HKLM = "HKLM"
    HKCU = "HKCU"
    HKCR = "HKCR"
    HKU = "HKU"
    HKCC = "HKCC"


class RegistryInput(ToolInputModel):
    action: RegistryAction = Field(..., description="The registry operation to perform")
    key_path: str | None = Field(
        default=None,
        description="Registry key path (e.g., HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion)",
    )
    value_name: str | None = Field(default=None, description="Registry value name to read")
    search_term: str | None = Field(
        default=None, description="Search term for finding registry keys or values"
    )
    hive: RegistryHive = Field(
        default=RegistryHive.HKLM, description="Registry hive to search in (default: HKLM)"
    )
    max_depth: int = Field(
        default=2, description="Maximum depth for recursive operations (default: 2)"
    )


def registry_path(key_path: str) -> str:
    """Quote a key path for the provider-qualified ``Registry::`` form."""
    return quote_literal(f"Registry::{key_path}")


class RegistryTool(MCPTool):
    name = "registry"
    description = (
        "Windows Registry operations including reading registry keys, values, "
        "and searching registry entries"
    )
    label = "Registry operation"
    actions = RegistryAction
    input_model = RegistryInput
    required = {
        RegistryAction.READ_KEY: ("key_path",),
        RegistryAction.READ_VALUE: ("key_path", "value_name"),
        RegistryAction.SEARCH_KEYS: ("search_term",),
        RegistryAction.LIST_SUBKEYS: ("key_path",),
    }

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            RegistryAction.READ_KEY: self.read_key,
            RegistryAction.READ_VALUE: self.read_value,
            RegistryAction.SEARCH_KEYS: self.search_keys,
            RegistryAction.LIST_SUBKEYS: self.list_subkeys,
            RegistryAction.GET_STARTUP_PROGRAMS: self.get_startup_programs,
            RegistryAction.GET_INSTALLED_PROGRAMS: self.get_installed_programs,
            RegistryAction.GET_SYSTEM_INFO_FROM_REGISTRY: self.get_system_info_from_registry,
        }

    async def read_key(self, payload: RegistryInput) -> str:
        output = await self.runner.run_powershell(
            f"Get-ItemProperty -Path {registry_path(payload.key_path)} -ErrorAction Stop | Format-List"
        )
        return report(f"Registry Key: {payload.key_path}", code_block(output))

    async def read_value(self, payload: RegistryInput) -> str:
        output = await self.runner.run_powershell(
            f"Get-ItemPropertyValue -Path {registry_path(payload.key_path)}"
            f" -Name {quote_literal(payload.value_name)} -ErrorAction Stop"
        )
        details = "\n".join(
            [
                f"**Key**: {payload.key_path}",
                f"**Value Name**: {payload.value_name}",
                f"**Value**: {output.strip()}",
            ]
        )
        return report("Registry Value", details)

    async def search_keys(self, payload: RegistryInput) -> str:
        hive = payload.hive.value
        root = registry_path(hive + "\\")
        output = await self.runner.run_powershell(
            f"Get-ChildItem -Path {root} -Recurse -ErrorAction SilentlyContinue"
            f" | Where-Object {{$_.Name -like {wildcard(payload.search_term)}}}"
            f" | Select-Object Name -First {MAX_SEARCH_RESULTS} | Format-Table -AutoSize"
        )
        header = "\n".join(
            [
                f'Search term: "{payload.search_term}"',
                f"Hive: {hive}",
                f"Limit: {MAX_SEARCH_RESULTS} results",
            ]
        )
        return report("Registry Key Search Results", header, code_block(output))

    async def list_subkeys(self, payload: RegistryInput) -> str:
        depth = f" -Recurse -Depth {payload.max_depth - 1}" if payload.max_depth > 1 else ""
        output = await self.runner.run_powershell(
            f"Get-ChildItem -Path {registry_path(payload.key_path)}{depth} -ErrorAction SilentlyContinue"
            " | Select-Object Name, Property | Format-Table -AutoSize"
        )
        header = f"Parent Key: {payload.key_path}\nMax Depth: {payload.max_depth}"
        return report("Registry Subkeys", header, code_block(output))

    async def get_startup_programs(self, payload: RegistryInput) -> str:
        sections = []
        for location in STARTUP_LOCATIONS:
            sections.append(
                await self._location_section(
                    location,
                    f"Get-ItemProperty -Path {registry_path(location)} -ErrorAction SilentlyContinue"
                    " | Format-List",
                )
            )
        return report("Startup Programs from Registry", *sections)

    async def get_installed_programs(self, payload: RegistryInput) -> str:
        sections = []
        for location in UNINSTALL_LOCATIONS:
            sections.append(
                await self._location_section(
                    location,
                    f"Get-ChildItem -Path {registry_path(location)} -ErrorAction SilentlyContinue"
                    " | Get-ItemProperty | Where-Object {$_.DisplayName}"
                    " | Select-Object DisplayName, DisplayVersion, Publisher, InstallDate"
                    " | Sort-Object DisplayName | Format-Table -AutoSize",
                )
            )
        return report("Installed Programs from Registry", *sections)

    async def get_system_info_from_registry(self, payload: RegistryInput) -> str:
        groups = []
        for title, key_path, value_names in SYSTEM_VALUES:
            lines = [f"## {title}"]
            for value_name in value_names:
                try:
                    output = await self.runner.run_powershell(
                        f"Get-ItemPropertyValue -Path {registry_path(key_path)}"
                        f" -Name {quote_literal(value_name)} -ErrorAction SilentlyContinue"
                    )
                except ExternalCommandError as exc:
                    logger.debug("registry value %s\\%s unavailable: %s", key_path, value_name, exc)
                    lines.append(bullet(value_name, UNAVAILABLE_VALUE))
                    continue
                if output.strip():
                    lines.append(bullet(value_name, output.strip()))
            groups.append("\n".join(lines))
        return report("System Information from Registry", *groups)

    async def _location_section(self, location: str, command: str) -> str:
        """Run one per-location query; failures render inline instead of aborting."""
        try:
            output = await self.runner.run_powershell(command)
        except ExternalCommandError as exc:
            logger.debug("registry location %s unavailable: %s", location, exc)
            return f"## {location}\n{UNAVAILABLE_LOCATION}"
        if not output.strip():
            return ""
        return section(location, output)
