"""MCP server exposing Windows administration tools over stdio."""

__version__ = "1.0.0"
