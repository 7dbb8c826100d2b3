"""Registry of the tools exposed by this server."""

from __future__ import annotations

from typing import Iterable, Mapping

from .schema import ToolDescriptor
from .server import MCPTool


class ToolRegistry:
    """In-memory mapping of tool name to tool instance."""

    def __init__(self, tools: Iterable[MCPTool] = ()) -> None:
        self._tools: dict[str, MCPTool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: MCPTool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"duplicate tool name {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> MCPTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[ToolDescriptor]:
        """Return the descriptor of every registered tool, in registration order."""
        return [tool.descriptor() for tool in self._tools.values()]

    def describe(self) -> Mapping[str, ToolDescriptor]:
        """Return a mapping of tool name to descriptor (mainly for diagnostics)."""
        return {descriptor.name: descriptor for descriptor in self.list_tools()}
