from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

import pytest

from winsys.errors import ExternalCommandError
from winsys.settings import ScanSettings, ServerSettings, Settings, ShellSettings
from winsys.tools.system import HostFacts


@dataclass
class RecordedCall:
    kind: str
    command: str
    timeout: float | None


class FakeRunner:
    """Command runner double that records commands instead of spawning processes.

    ``outputs`` and ``failures`` map a substring of the command to the text to
    return or the error to raise; a string failure becomes ExternalCommandError.
    """

    def __init__(self, outputs=None, failures=None, default_output: str = "ok"):
        self.outputs = dict(outputs or {})
        self.failures = dict(failures or {})
        self.default_output = default_output
        self.calls: list[RecordedCall] = []

    async def run_powershell(self, script: str, *, timeout: float | None = None) -> str:
        return self._respond("powershell", script, timeout)

    async def run_native(self, args: Sequence[str], *, timeout: float | None = None) -> str:
        return self._respond("native", " ".join(args), timeout)

    @property
    def commands(self) -> list[str]:
        return [call.command for call in self.calls]

    def _respond(self, kind: str, command: str, timeout: float | None) -> str:
        self.calls.append(RecordedCall(kind=kind, command=command, timeout=timeout))
        for needle, failure in self.failures.items():
            if needle in command:
                if isinstance(failure, BaseException):
                    raise failure
                raise ExternalCommandError(failure, command=command, exit_code=1)
        for needle, output in self.outputs.items():
            if needle in command:
                return output
        return self.default_output


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        shell=ShellSettings(powershell_exe=None, command_timeout_seconds=60.0),
        scan=ScanSettings(probe_timeout_seconds=3.0),
        server=ServerSettings(name="windows-system-mcp", version="1.0.0", log_level="INFO"),
    )


@pytest.fixture
def host_facts() -> HostFacts:
    return HostFacts(
        hostname="WORKSTATION-01",
        platform="windows",
        architecture="AMD64",
        cpu_model="Intel64 Family 6 Model 154",
        cpu_count=8,
        total_memory=16 * 1024**3,
        free_memory=4 * 1024**3,
        uptime_seconds=90061,
    )
