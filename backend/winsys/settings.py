"""Application-wide settings read from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip()
    return normalized or default


@dataclass(frozen=True)
class ShellSettings:
    """How external commands are launched."""

    powershell_exe: str | None
    command_timeout_seconds: float

    @classmethod
    def from_env(cls) -> "ShellSettings":
        return cls(
            powershell_exe=_env_str("POWERSHELL_EXE"),
            command_timeout_seconds=max(
                1.0, _env_float("WINSYS_COMMAND_TIMEOUT_SECONDS", 60.0)
            ),
        )


@dataclass(frozen=True)
class ScanSettings:
    """Port probing limits."""

    probe_timeout_seconds: float

    @classmethod
    def from_env(cls) -> "ScanSettings":
        return cls(
            probe_timeout_seconds=max(
                0.1, _env_float("WINSYS_PORT_PROBE_TIMEOUT_SECONDS", 3.0)
            ),
        )


@dataclass(frozen=True)
class ServerSettings:
    """Identity and logging for the MCP server process."""

    name: str
    version: str
    log_level: str

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            name=_env_str("WINSYS_SERVER_NAME", "windows-system-mcp") or "windows-system-mcp",
            version=_env_str("WINSYS_SERVER_VERSION", "1.0.0") or "1.0.0",
            log_level=(_env_str("WINSYS_LOG_LEVEL", "INFO") or "INFO").upper(),
        )


class Settings:
    """Container for application settings."""

    def __init__(
        self,
        *,
        shell: ShellSettings,
        scan: ScanSettings,
        server: ServerSettings,
    ) -> None:
        self.shell = shell
        self.scan = scan
        self.server = server

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            shell=ShellSettings.from_env(),
            scan=ScanSettings.from_env(),
            server=ServerSettings.from_env(),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Return a cached Settings instance built from the current environment."""

    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""

    global _SETTINGS
    _SETTINGS = None


__all__ = [
    "ScanSettings",
    "ServerSettings",
    "Settings",
    "ShellSettings",
    "get_settings",
    "reset_settings",
]
