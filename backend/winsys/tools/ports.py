"""Port specification expansion and sequential TCP probing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Sequence

from ..errors import InvalidParameterError

logger = logging.getLogger(__name__)

DEFAULT_PORT_SPEC = "80,443,22,21,25,53,110,993,995"
# A range never yields more than RANGE_EXPANSION_CAP + 1 ports.
RANGE_EXPANSION_CAP = 100
MAX_PROBED_PORTS = 20


class PortState(str, Enum):
    OPEN = "open"
    CLOSED = "closed_or_filtered"
    ERROR = "timeout_or_error"


_STATE_LABELS = {
    PortState.OPEN: ("✅", "Open"),
    PortState.CLOSED: ("❌", "Closed/Filtered"),
    PortState.ERROR: ("❌", "Timeout/Error"),
}


@dataclass(frozen=True)
class PortProbeResult:
    port: int
    state: PortState

    def render(self) -> str:
        icon, label = _STATE_LABELS[self.state]
        return f"{icon} Port {self.port}: {label}"


ProbeFn = Callable[[str, int, float], Awaitable[PortState]]


def _parse_port(token: str) -> int:
    try:
        port = int(token)
    except ValueError:
        raise InvalidParameterError(f"Invalid port: {token!r}") from None
    if not 1 <= port <= 65535:
        raise InvalidParameterError(f"Port out of range: {port}")
    return port


def expand_port_spec(spec: str | None) -> list[int]:
    """Turn ``"80-443"`` or ``"22, 80"`` into the ordered list of ports to consider."""
    text = (spec or "").strip() or DEFAULT_PORT_SPEC
    if "-" in text:
        start_raw, _, end_raw = text.partition("-")
        start = _parse_port(start_raw.strip())
        end = _parse_port(end_raw.strip())
        return list(range(start, min(end, start + RANGE_EXPANSION_CAP) + 1))
    return [_parse_port(token.strip()) for token in text.split(",") if token.strip()]


async def probe_tcp_port(host: str, port: int, timeout: float) -> PortState:
    """Attempt one TCP connection and classify the outcome."""
    try:
        _reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except ConnectionRefusedError:
        return PortState.CLOSED
    except (asyncio.TimeoutError, OSError):
        return PortState.ERROR
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as exc:
        logger.debug("error closing probe connection to %s:%s: %s", host, port, exc)
    return PortState.OPEN


async def scan_ports(
    host: str,
    ports: Sequence[int],
    *,
    timeout: float,
    probe: ProbeFn = probe_tcp_port,
) -> list[PortProbeResult]:
    """Probe at most MAX_PROBED_PORTS ports one after another, in the given order."""
    results: list[PortProbeResult] = []
    for port in list(ports)[:MAX_PROBED_PORTS]:
        try:
            state = await probe(host, port, timeout)
        except Exception as exc:
            logger.debug("probe failed for %s:%s: %s", host, port, exc)
            state = PortState.ERROR
        results.append(PortProbeResult(port=port, state=state))
    return results
