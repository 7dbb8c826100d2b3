"""The tools exposed by the server, in advertisement order."""

from __future__ import annotations

from ..settings import Settings
from ..shell import CommandRunner
from ..mcp.server import MCPTool
from .filesystem import FileSystemTool
from .network import NetworkTool
from .performance import PerformanceTool
from .process import ProcessTool
from .registry import RegistryTool
from .services import ServiceTool
from .system import SystemInfoTool


def build_tools(runner: CommandRunner, settings: Settings) -> list[MCPTool]:
    """Instantiate every tool against a shared command runner."""
    return [
        FileSystemTool(runner),
        ProcessTool(runner),
        SystemInfoTool(runner),
        RegistryTool(runner),
        ServiceTool(runner),
        NetworkTool(runner, probe_timeout=settings.scan.probe_timeout_seconds),
        PerformanceTool(runner),
    ]


__all__ = [
    "FileSystemTool",
    "NetworkTool",
    "PerformanceTool",
    "ProcessTool",
    "RegistryTool",
    "ServiceTool",
    "SystemInfoTool",
    "build_tools",
]
