"""File system browsing, reading and searching."""

from __future__ import annotations

import asyncio
import os
from enum import Enum
from typing import Mapping

from pydantic import Field

from ..errors import ToolOperationError
from ..formatting import bullet, code_block, format_bytes, format_timestamp, report
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import quote_literal
from .walker import render_listing, walk_directory

DEFAULT_ROOT = "C:\\"
MAX_READ_BYTES = 1024 * 1024


class FileSystemAction(str, Enum):
    LIST_DIRECTORY = "list_directory"
    READ_FILE = "read_file"
    SEARCH_FILES = "search_files"
    GET_FILE_INFO = "get_file_info"
    FIND_LARGE_FILES = "find_large_files"
    GET_DISK_USAGE = "get_disk_usage"


class FileSystemInput(ToolInputModel):
    action: FileSystemAction = Field(..., description="The file system action to perform")
    path: str | None = Field(
        default=None, description="File or directory path (required for most actions)"
    )
    pattern: str | None = Field(
        default=None, description="Search pattern for file searching (supports wildcards)"
    )
    recursive: bool = Field(
        default=False, description="Whether to search recursively (default: false)"
    )
    max_depth: int = Field(
        default=3, description="Maximum depth for recursive operations (default: 3)"
    )
    size_threshold: float = Field(
        default=100, ge=0, description="Size threshold in MB for finding large files (default: 100)"
    )


class FileSystemTool(MCPTool):
    name = "filesystem"
    description = (
        "Comprehensive file system operations including directory browsing, "
        "file reading, searching, and basic file operations"
    )
    label = "File system operation"
    actions = FileSystemAction
    input_model = FileSystemInput
    required = {
        FileSystemAction.READ_FILE: ("path",),
        FileSystemAction.GET_FILE_INFO: ("path",),
        FileSystemAction.SEARCH_FILES: ("pattern",),
    }

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            FileSystemAction.LIST_DIRECTORY: self.list_directory,
            FileSystemAction.READ_FILE: self.read_file,
            FileSystemAction.SEARCH_FILES: self.search_files,
            FileSystemAction.GET_FILE_INFO: self.get_file_info,
            FileSystemAction.FIND_LARGE_FILES: self.find_large_files,
            FileSystemAction.GET_DISK_USAGE: self.get_disk_usage,
        }

    async def list_directory(self, payload: FileSystemInput) -> str:
        path = payload.path or DEFAULT_ROOT
        try:
            listing = await asyncio.to_thread(
                walk_directory, path, payload.recursive, payload.max_depth
            )
        except OSError as exc:
            raise ToolOperationError(
                f"Cannot list directory {path}: {exc.strerror or exc}"
            ) from exc
        return render_listing(listing)

    async def read_file(self, payload: FileSystemInput) -> str:
        path = payload.path
        content = await asyncio.to_thread(_read_text, path)
        return f"# File Content: {path}\n\n{code_block(content)}"

    async def search_files(self, payload: FileSystemInput) -> str:
        path = payload.path or DEFAULT_ROOT
        command = (
            f"Get-ChildItem -Path {quote_literal(path)} -Filter {quote_literal(payload.pattern)}"
            f"{' -Recurse' if payload.recursive else ''} -ErrorAction SilentlyContinue"
            " | Select-Object FullName, Length, LastWriteTime | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        header = "\n".join(
            [
                f"Pattern: {payload.pattern}",
                f"Path: {path}",
                f"Recursive: {str(payload.recursive).lower()}",
            ]
        )
        return report("File Search Results", header, code_block(output))

    async def get_file_info(self, payload: FileSystemInput) -> str:
        path = payload.path
        try:
            stat = await asyncio.to_thread(os.stat, path)
        except OSError as exc:
            raise ToolOperationError(
                f"Cannot get file info for {path}: {exc.strerror or exc}"
            ) from exc
        created = getattr(stat, "st_birthtime", stat.st_ctime)
        is_dir = os.path.isdir(path)
        lines = [
            bullet("Type", "Directory" if is_dir else "File"),
            bullet("Size", format_bytes(stat.st_size)),
            bullet("Created", format_timestamp(created)),
            bullet("Modified", format_timestamp(stat.st_mtime)),
            bullet("Accessed", format_timestamp(stat.st_atime)),
            bullet("Permissions", format(stat.st_mode, "o")),
        ]
        return report(f"File Information: {path}", "\n".join(lines))

    async def find_large_files(self, payload: FileSystemInput) -> str:
        path = payload.path or DEFAULT_ROOT
        threshold_bytes = int(payload.size_threshold * 1024 * 1024)
        command = (
            f"Get-ChildItem -Path {quote_literal(path)} -Recurse -File -ErrorAction SilentlyContinue"
            f" | Where-Object {{$_.Length -gt {threshold_bytes}}}"
            " | Sort-Object Length -Descending"
            " | Select-Object FullName, @{Name='SizeMB';Expression={[math]::Round($_.Length/1MB,2)}}, LastWriteTime"
            " | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        return report(
            f"Large Files (>{payload.size_threshold:g}MB)",
            f"Search Path: {path}",
            code_block(output),
        )

    async def get_disk_usage(self, payload: FileSystemInput) -> str:
        command = (
            "Get-CimInstance -ClassName Win32_LogicalDisk | Select-Object DeviceID,"
            " @{Name='SizeGB';Expression={[math]::Round($_.Size/1GB,2)}},"
            " @{Name='FreeSpaceGB';Expression={[math]::Round($_.FreeSpace/1GB,2)}},"
            " @{Name='UsedSpaceGB';Expression={[math]::Round(($_.Size-$_.FreeSpace)/1GB,2)}},"
            " @{Name='PercentFree';Expression={if ($_.Size) {[math]::Round(($_.FreeSpace/$_.Size)*100,2)}}}"
            " | Format-Table -AutoSize"
        )
        output = await self.runner.run_powershell(command)
        return report("Disk Usage Information", code_block(output))


def _read_text(path: str) -> str:
    try:
        if os.path.isdir(path):
            raise ToolOperationError(f"Cannot read file {path}: Path is a directory, not a file")
        size = os.path.getsize(path)
        if size > MAX_READ_BYTES:
            raise ToolOperationError(
                f"Cannot read file {path}: File too large (>1MB). Use file info to check size first."
            )
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError as exc:
        raise ToolOperationError(f"Cannot read file {path}: {exc.strerror or exc}") from exc
