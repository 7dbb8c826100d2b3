"""Stateless report formatting helpers."""

from __future__ import annotations

from datetime import datetime, timezone

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(num_bytes: float) -> str:
    """Scale a byte count to the largest unit that keeps the value below 1024."""
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def format_uptime(seconds: float) -> str:
    total = max(0, int(seconds))
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"


def format_date(timestamp: float) -> str:
    """Return the UTC calendar date for a POSIX timestamp."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


def format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def code_block(text: str) -> str:
    return f"```\n{text}\n```"


def section(title: str, body: str) -> str:
    """Render a level-two heading followed by the raw command output."""
    return f"## {title}\n{code_block(body)}"


def bullet(label: str, value: object) -> str:
    return f"- **{label}**: {value}"


def report(title: str, *parts: str) -> str:
    """Join a report title and its parts with blank lines between them."""
    return "\n\n".join([f"# {title}", *[part for part in parts if part]])


def preview_command(command: str, limit: int = 160) -> str:
    one_line = " ".join(command.splitlines()).strip()
    if len(one_line) <= limit:
        return one_line
    return one_line[: limit - 3] + "..."
