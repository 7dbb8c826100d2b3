"""Routes tool calls to handlers and turns every outcome into a result envelope."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping
from uuid import uuid4

from pydantic import ValidationError

from ..errors import UnknownToolError, WinsysError
from .registry import ToolRegistry
from .schema import ToolCallRequest, ToolCallResult

logger = logging.getLogger(__name__)

ERROR_MARKER = "❌"


class ToolDispatcher:
    """Single conversion point between handler failures and failure results."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def execute(self, request: ToolCallRequest) -> ToolCallResult:
        return await self.handle(request.tool_name, request.arguments)

    async def handle(
        self, tool_name: str, arguments: Mapping[str, Any] | None = None
    ) -> ToolCallResult:
        request_id = uuid4().hex[:12]
        extra = {"request_id": request_id}
        arguments = arguments or {}

        tool = self.registry.get(tool_name)
        if tool is None:
            logger.warning("unknown tool requested tool=%s", tool_name, extra=extra)
            return ToolCallResult(
                tool_name=tool_name,
                error=f"{ERROR_MARKER} {UnknownToolError(tool_name)}",
            )

        logger.info(
            "tool requested tool=%s action=%s",
            tool_name,
            arguments.get("action"),
            extra=extra,
        )
        started = time.monotonic()
        try:
            report = await tool.call(arguments)
        except ValidationError as exc:
            message = describe_validation_error(exc)
        except WinsysError as exc:
            message = str(exc)
        except Exception as exc:
            logger.exception("tool handler crashed tool=%s", tool_name, extra=extra)
            message = str(exc) or exc.__class__.__name__
        else:
            logger.info(
                "tool completed tool=%s duration_ms=%d",
                tool_name,
                (time.monotonic() - started) * 1000,
                extra=extra,
            )
            return ToolCallResult(tool_name=tool_name, output=report)

        logger.warning(
            "tool failed tool=%s duration_ms=%d error=%s",
            tool_name,
            (time.monotonic() - started) * 1000,
            message,
            extra=extra,
        )
        return ToolCallResult(
            tool_name=tool_name,
            error=f"{ERROR_MARKER} {tool.label} failed: {message}",
        )


def describe_validation_error(exc: ValidationError) -> str:
    """Condense pydantic errors into one line naming each offending field."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "Invalid arguments: " + "; ".join(problems)
