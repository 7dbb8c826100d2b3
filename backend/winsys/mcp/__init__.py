"""MCP-facing contracts: schemas, tool base class, registry and dispatcher."""

from .dispatcher import ToolDispatcher
from .registry import ToolRegistry
from .schema import ToolCallRequest, ToolCallResult, ToolDescriptor
from .server import MCPTool, ToolInputModel

__all__ = [
    "MCPTool",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolDispatcher",
    "ToolInputModel",
    "ToolRegistry",
]
