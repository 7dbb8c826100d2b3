"""Abstract contract shared by every tool exposed through the server."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict

from ..errors import MissingParameterError, UnknownActionError
from ..shell import CommandRunner
from .schema import ToolDescriptor


class ToolInputModel(BaseModel):
    """Base class with common config for tool argument schemas.

    Subclasses must declare an ``action`` field typed with their action enum.
    """

    model_config = ConfigDict(extra="forbid")


ActionHandler = Callable[[Any], Awaitable[str]]


class MCPTool(ABC):
    """A named group of actions backed by external commands.

    Subclasses declare a closed ``Enum`` of actions, a pydantic input model and
    one handler per action. Unknown actions and missing required parameters
    are rejected here, before any handler builds a command.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    label: ClassVar[str]
    actions: ClassVar[type[Enum]]
    input_model: ClassVar[type[ToolInputModel]]
    required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {}

    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self._handlers = dict(self.handlers())
        missing = [action.value for action in self.actions if action not in self._handlers]
        if missing:
            raise ValueError(f"{self.name} tool has no handler for {missing}")

    @abstractmethod
    def handlers(self) -> Mapping[Enum, ActionHandler]:
        """Return the handler coroutine for each declared action."""

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=self.input_model.model_json_schema(),
        )

    def parse_arguments(self, arguments: Mapping[str, Any]) -> ToolInputModel:
        """Validate raw arguments into the tool's input model."""
        raw_action = arguments.get("action")
        if raw_action is None:
            raise MissingParameterError(["action"])
        if raw_action not in [action.value for action in self.actions]:
            raise UnknownActionError(self.name, raw_action)
        payload = self.input_model.model_validate(dict(arguments))
        missing = [
            field_name
            for field_name in self.required.get(payload.action, ())
            if _is_blank(getattr(payload, field_name))
        ]
        if missing:
            raise MissingParameterError(missing)
        return payload

    async def call(self, arguments: Mapping[str, Any]) -> str:
        payload = self.parse_arguments(arguments)
        handler = self._handlers[payload.action]
        return await handler(payload)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()
