"""Shared MCP schema models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ToolDescriptor(BaseModel):
    """Structured metadata describing a tool advertised to the client."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)


class ToolCallRequest(BaseModel):
    """Request envelope for a single tool invocation."""

    model_config = ConfigDict(extra="forbid")

    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResult(BaseModel):
    """Response envelope: report text on success or an error message."""

    model_config = ConfigDict(extra="forbid")

    tool_name: str
    output: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _validate_payloads(self) -> "ToolCallResult":
        if self.output is None and self.error is None:
            raise ValueError("tool call result requires output or error payload")
        if self.output is not None and self.error is not None:
            raise ValueError("tool call result cannot include both output and error")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def text(self) -> str:
        return self.error if self.error is not None else self.output or ""
