"""Exception types shared by the dispatcher, the tools and the command runner."""

from __future__ import annotations

from typing import Sequence


class WinsysError(Exception):
    """Base class for failures that end a single tool request."""


class UnknownToolError(WinsysError):
    """Raised when a request names a tool that is not registered."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class UnknownActionError(WinsysError):
    """Raised when the action is not one of the tool's declared actions."""

    def __init__(self, tool_name: str, action: object):
        self.tool_name = tool_name
        self.action = action
        super().__init__(f"Unknown action: {action}")


class MissingParameterError(WinsysError):
    """Raised when an action is invoked without its identifying parameters."""

    def __init__(self, names: Sequence[str], *, alternatives: bool = False):
        if not names:
            raise ValueError("MissingParameterError requires at least one parameter name")
        self.names = tuple(names)
        self.alternatives = alternatives
        if alternatives:
            joined = " or ".join(self.names)
            message = f"Either {joined} must be provided"
        elif len(self.names) == 1:
            message = f"Missing required parameter: {self.names[0]}"
        else:
            message = f"Missing required parameters: {', '.join(self.names)}"
        super().__init__(message)


class InvalidParameterError(WinsysError):
    """Raised when a parameter is present but cannot be interpreted."""


class ToolOperationError(WinsysError):
    """Raised by handlers that fail locally, without an external process."""


class ExternalCommandError(WinsysError):
    """Raised when an external process fails, times out or cannot be started.

    The message is the process's own diagnostic output whenever it produced
    any, so callers see the underlying reason unchanged.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
