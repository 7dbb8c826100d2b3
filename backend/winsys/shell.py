"""External process invoker used by every command-backed tool handler."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Protocol, Sequence

from .errors import ExternalCommandError
from .formatting import preview_command
from .settings import ShellSettings

logger = logging.getLogger(__name__)

POWERSHELL_CANDIDATES = ("pwsh", "powershell.exe")
POWERSHELL_FLAGS = ("-NoLogo", "-NoProfile", "-NonInteractive", "-Command")
# Forces UTF-8 on the pipe so non-ASCII names survive decoding.
UTF8_PREAMBLE = "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "


class CommandRunner(Protocol):
    """Anything able to run a command and hand back its standard output."""

    async def run_powershell(self, script: str, *, timeout: float | None = None) -> str:
        ...

    async def run_native(self, args: Sequence[str], *, timeout: float | None = None) -> str:
        ...


def quote_literal(value: object) -> str:
    """Render a value as a single-quoted PowerShell string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def wildcard(value: str) -> str:
    """Quote a substring match pattern for ``-like``."""
    return quote_literal(f"*{value}*")


def wql_escape(value: str) -> str:
    """Escape a value for use inside a single-quoted WQL string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class PowerShellRunner:
    """Runs PowerShell scripts and native executables as child processes."""

    def __init__(self, settings: ShellSettings):
        self.settings = settings
        self._powershell: str | None = None

    def resolve_powershell(self) -> str:
        if self._powershell:
            return self._powershell
        candidates: list[str] = []
        if self.settings.powershell_exe:
            candidates.append(self.settings.powershell_exe)
        candidates.extend(POWERSHELL_CANDIDATES)
        for candidate in candidates:
            path = shutil.which(candidate)
            if path:
                self._powershell = path
                logger.info("using powershell executable %s", path)
                return path
        raise ExternalCommandError(
            f"No PowerShell executable found (tried {', '.join(candidates)})."
        )

    async def run_powershell(self, script: str, *, timeout: float | None = None) -> str:
        executable = self.resolve_powershell()
        argv = [executable, *POWERSHELL_FLAGS, UTF8_PREAMBLE + script]
        return await self._run(argv, display=script, timeout=timeout)

    async def run_native(self, args: Sequence[str], *, timeout: float | None = None) -> str:
        if not args:
            raise ValueError("run_native requires a command")
        return await self._run(list(args), display=" ".join(args), timeout=timeout)

    async def _run(self, argv: list[str], *, display: str, timeout: float | None) -> str:
        limit = timeout if timeout is not None else self.settings.command_timeout_seconds
        logger.debug("run command: %s", preview_command(display))
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise ExternalCommandError(
                f"Command not found: {argv[0]}", command=display
            ) from exc
        except PermissionError as exc:
            raise ExternalCommandError(
                f"Permission denied starting {argv[0]}", command=display
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=limit)
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ExternalCommandError(
                f"Command timed out after {limit:g} seconds", command=display
            ) from exc

        out = _decode(stdout)
        err = _decode(stderr)
        logger.debug(
            "command finished: code=%s stdout=%s bytes stderr=%s bytes",
            process.returncode,
            len(stdout or b""),
            len(stderr or b""),
        )
        if process.returncode != 0:
            message = err.strip() or out.strip() or (
                f"Command failed with exit code {process.returncode}"
            )
            raise ExternalCommandError(
                message, command=display, exit_code=process.returncode
            )
        return out


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


__all__ = ["CommandRunner", "PowerShellRunner", "quote_literal", "wildcard", "wql_escape"]
