from __future__ import annotations

import socket

import pytest

from conftest import run
from winsys.errors import InvalidParameterError
from winsys.tools.ports import (
    DEFAULT_PORT_SPEC,
    MAX_PROBED_PORTS,
    PortProbeResult,
    PortState,
    expand_port_spec,
    probe_tcp_port,
    scan_ports,
)


def test_range_expansion_is_capped() -> None:
    ports = expand_port_spec("80-443")
    assert len(ports) == min(443 - 80 + 1, 101)
    assert ports[0] == 80
    assert ports[-1] == 180


def test_short_range_is_inclusive() -> None:
    assert expand_port_spec(" 20 - 25 ") == [20, 21, 22, 23, 24, 25]


def test_reversed_range_is_empty() -> None:
    assert expand_port_spec("500-100") == []


def test_comma_list_is_trimmed_and_blanks_dropped() -> None:
    assert expand_port_spec(" 22, 80,,443 ,") == [22, 80, 443]


def test_missing_spec_uses_defaults() -> None:
    expected = [int(port) for port in DEFAULT_PORT_SPEC.split(",")]
    assert expand_port_spec(None) == expected
    assert expand_port_spec("   ") == expected


@pytest.mark.parametrize("spec", ["http", "0", "65536", "1-70000", "22,abc", "-5"])
def test_malformed_specs_are_rejected(spec) -> None:
    with pytest.raises(InvalidParameterError):
        expand_port_spec(spec)


def test_scan_probes_first_twenty_ports_in_order() -> None:
    probed = []

    async def probe(host, port, timeout):
        probed.append((host, port, timeout))
        return PortState.OPEN if port % 2 else PortState.CLOSED

    results = run(scan_ports("10.0.0.5", expand_port_spec("1-500"), timeout=1.5, probe=probe))

    assert [port for _, port, _ in probed] == list(range(1, MAX_PROBED_PORTS + 1))
    assert {host for host, _, _ in probed} == {"10.0.0.5"}
    assert {timeout for _, _, timeout in probed} == {1.5}
    assert [result.port for result in results] == list(range(1, 21))
    assert results[0].render() == "✅ Port 1: Open"
    assert results[1].render() == "❌ Port 2: Closed/Filtered"


def test_failing_probe_is_classified_and_scan_continues() -> None:
    async def probe(host, port, timeout):
        if port == 22:
            raise RuntimeError("probe exploded")
        return PortState.OPEN

    results = run(scan_ports("host", [22, 80], timeout=1.0, probe=probe))
    assert [result.state for result in results] == [PortState.ERROR, PortState.OPEN]
    assert results[0].render() == "❌ Port 22: Timeout/Error"


def test_probe_result_render() -> None:
    assert PortProbeResult(443, PortState.ERROR).render() == "❌ Port 443: Timeout/Error"


def test_probe_detects_listening_socket() -> None:
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    port = server.getsockname()[1]
    try:
        assert run(probe_tcp_port("127.0.0.1", port, 2.0)) is PortState.OPEN
    finally:
        server.close()


def test_probe_classifies_closed_port() -> None:
    placeholder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    placeholder.bind(("127.0.0.1", 0))
    port = placeholder.getsockname()[1]
    placeholder.close()
    state = run(probe_tcp_port("127.0.0.1", port, 2.0))
    assert state in (PortState.CLOSED, PortState.ERROR)


def test_probe_unresolvable_host_is_an_error() -> None:
    assert run(probe_tcp_port("host.invalid", 80, 2.0)) is PortState.ERROR
