"""Explicit dependency container for the server process.

Importing this module has no side effects; ``build_container`` wires the
runner, the tools, the registry and the dispatcher from settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .mcp.dispatcher import ToolDispatcher
    from .mcp.registry import ToolRegistry
    from .settings import Settings
    from .shell import CommandRunner


@dataclass
class ServerContainer:
    """Holds the constructed runtime dependencies for the server."""

    settings: Settings
    runner: CommandRunner
    registry: ToolRegistry
    dispatcher: ToolDispatcher


def build_container(
    *,
    settings: "Settings" | None = None,
    runner: "CommandRunner" | None = None,
) -> ServerContainer:
    """Construct the dependency graph without touching the transport."""

    from .mcp.dispatcher import ToolDispatcher
    from .mcp.registry import ToolRegistry
    from .settings import get_settings
    from .shell import PowerShellRunner
    from .tools import build_tools

    settings = settings or get_settings()
    runner = runner or PowerShellRunner(settings.shell)
    registry = ToolRegistry(build_tools(runner, settings))
    dispatcher = ToolDispatcher(registry)
    return ServerContainer(
        settings=settings,
        runner=runner,
        registry=registry,
        dispatcher=dispatcher,
    )
