"""Network configuration, diagnostics and TCP port probing."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping

from pydantic import Field

from ..errors import InvalidParameterError
from ..formatting import code_block, report, section
from ..mcp.server import ActionHandler, MCPTool, ToolInputModel
from ..shell import CommandRunner
from .ports import DEFAULT_PORT_SPEC, ProbeFn, expand_port_spec, probe_tcp_port, scan_ports

logger = logging.getLogger(__name__)

MAX_DNS_CACHE_ROWS = 20
TRACE_ROUTE_TIMEOUT_SECONDS = 180.0


class NetworkAction(str, Enum):
    GET_NETWORK_ADAPTERS = "get_network_adapters"
    GET_ACTIVE_CONNECTIONS = "get_active_connections"
    GET_LISTENING_PORTS = "get_listening_ports"
    GET_ROUTING_TABLE = "get_routing_table"
    PING_HOST = "ping_host"
    TRACE_ROUTE = "trace_route"
    GET_DNS_INFO = "get_dns_info"
    GET_NETWORK_STATISTICS = "get_network_statistics"
    SCAN_OPEN_PORTS = "scan_open_ports"
    GET_WIFI_PROFILES = "get_wifi_profiles"


class NetworkProtocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ALL = "all"


class NetworkInput(ToolInputModel):
    action: NetworkAction = Field(..., description="The network operation to perform")
    host: str | None = Field(
        default=None, description="Target host for ping, traceroute, or port scanning"
    )
    port: int | None = Field(
        default=None, ge=1, le=65535, description="Specific port number for port-related operations"
    )
    port_range: str | None = Field(
        default=None, description="Port range for scanning (e.g., '80-443' or '22,80,443')"
    )
    protocol: NetworkProtocol = Field(
        default=NetworkProtocol.ALL,
        description="Protocol filter for connections and ports (default: all)",
    )
    count: int = Field(
        default=4, ge=1, le=100, description="Number of ping packets to send (default: 4)"
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Timeout in seconds for each port probe"
    )


def validate_host(host: str) -> str:
    """Reject host strings that a native command would read as options or extra arguments."""
    host = host.strip()
    if host.startswith("-") or any(char.isspace() for char in host):
        raise InvalidParameterError(f"Invalid host: {host!r}")
    return host


class NetworkTool(MCPTool):
    name = "network"
    description = (
        "Network information and diagnostics including network adapters, "
        "connections, ports, routing, and network testing"
    )
    label = "Network operation"
    actions = NetworkAction
    input_model = NetworkInput
    required = {
        NetworkAction.PING_HOST: ("host",),
        NetworkAction.TRACE_ROUTE: ("host",),
        NetworkAction.SCAN_OPEN_PORTS: ("host",),
    }

    def __init__(
        self,
        runner: CommandRunner,
        probe_timeout: float = 3.0,
        probe: ProbeFn = probe_tcp_port,
    ):
        super().__init__(runner)
        self.probe_timeout = probe_timeout
        self._probe = probe

    def handlers(self) -> Mapping[Enum, ActionHandler]:
        return {
            NetworkAction.GET_NETWORK_ADAPTERS: self.get_network_adapters,
            NetworkAction.GET_ACTIVE_CONNECTIONS: self.get_active_connections,
            NetworkAction.GET_LISTENING_PORTS: self.get_listening_ports,
            NetworkAction.GET_ROUTING_TABLE: self.get_routing_table,
            NetworkAction.PING_HOST: self.ping_host,
            NetworkAction.TRACE_ROUTE: self.trace_route,
            NetworkAction.GET_DNS_INFO: self.get_dns_info,
            NetworkAction.GET_NETWORK_STATISTICS: self.get_network_statistics,
            NetworkAction.SCAN_OPEN_PORTS: self.scan_open_ports,
            NetworkAction.GET_WIFI_PROFILES: self.get_wifi_profiles,
        }

    async def get_network_adapters(self, payload: NetworkInput) -> str:
        adapters = await self.runner.run_powershell(
            "Get-NetAdapter | Select-Object Name, InterfaceDescription, Status, LinkSpeed,"
            " MediaType, PhysicalMediaType | Format-Table -AutoSize"
        )
        addresses = await self.runner.run_powershell(
            "Get-NetIPAddress | Where-Object {$_.AddressFamily -eq 'IPv4'}"
            " | Select-Object InterfaceAlias, IPAddress, PrefixLength | Format-Table -AutoSize"
        )
        return report(
            "Network Adapters",
            section("Adapter Information", adapters),
            section("IP Configuration", addresses),
        )

    async def get_active_connections(self, payload: NetworkInput) -> str:
        sections = []
        if payload.protocol in (NetworkProtocol.ALL, NetworkProtocol.TCP):
            tcp = await self.runner.run_powershell(
                "Get-NetTCPConnection -State Established"
                " | Select-Object LocalAddress, LocalPort, RemoteAddress, RemotePort, State, OwningProcess"
                " | Format-Table -AutoSize"
            )
            sections.append(section("TCP Connections", tcp))
        if payload.protocol in (NetworkProtocol.ALL, NetworkProtocol.UDP):
            udp = await self.runner.run_powershell(
                "Get-NetUDPEndpoint | Select-Object LocalAddress, LocalPort, OwningProcess"
                " | Format-Table -AutoSize"
            )
            sections.append(section("UDP Endpoints", udp))
        header = f"Protocol: {payload.protocol.value}\nState: Established"
        return report("Active Network Connections", header, *sections)

    async def get_listening_ports(self, payload: NetworkInput) -> str:
        sections = []
        if payload.protocol in (NetworkProtocol.ALL, NetworkProtocol.TCP):
            tcp = await self.runner.run_powershell(
                "Get-NetTCPConnection -State Listen | Select-Object LocalAddress, LocalPort, OwningProcess"
                " | Sort-Object LocalPort | Format-Table -AutoSize"
            )
            sections.append(section("TCP Listening Ports", tcp))
        if payload.protocol in (NetworkProtocol.ALL, NetworkProtocol.UDP):
            udp = await self.runner.run_powershell(
                "Get-NetUDPEndpoint | Select-Object LocalAddress, LocalPort, OwningProcess"
                " | Sort-Object LocalPort | Format-Table -AutoSize"
            )
            sections.append(section("UDP Listening Ports", udp))
        return report("Listening Ports", *sections)

    async def get_routing_table(self, payload: NetworkInput) -> str:
        output = await self.runner.run_powershell(
            "Get-NetRoute | Where-Object {$_.AddressFamily -eq 'IPv4'}"
            " | Select-Object DestinationPrefix, NextHop, InterfaceAlias, RouteMetric"
            " | Sort-Object RouteMetric | Format-Table -AutoSize"
        )
        return report("IPv4 Routing Table", code_block(output))

    async def ping_host(self, payload: NetworkInput) -> str:
        host = validate_host(payload.host)
        output = await self.runner.run_native(["ping", "-n", str(payload.count), host])
        return report(
            "Ping Results",
            f"Target: {host}\nCount: {payload.count}",
            code_block(output),
        )

    async def trace_route(self, payload: NetworkInput) -> str:
        host = validate_host(payload.host)
        output = await self.runner.run_native(
            ["tracert", host], timeout=TRACE_ROUTE_TIMEOUT_SECONDS
        )
        return report("Traceroute Results", f"Target: {host}", code_block(output))

    async def get_dns_info(self, payload: NetworkInput) -> str:
        servers = await self.runner.run_powershell(
            "Get-DnsClientServerAddress -AddressFamily IPv4"
            " | Select-Object InterfaceAlias, ServerAddresses | Format-Table -AutoSize"
        )
        cache = await self.runner.run_powershell(
            f"Get-DnsClientCache | Select-Object -First {MAX_DNS_CACHE_ROWS}"
            " Name, Type, Status, Section, TimeToLive | Format-Table -AutoSize"
        )
        return report(
            "DNS Information",
            section("DNS Servers", servers),
            section(f"DNS Cache (First {MAX_DNS_CACHE_ROWS} entries)", cache),
        )

    async def get_network_statistics(self, payload: NetworkInput) -> str:
        adapters = await self.runner.run_powershell(
            "Get-NetAdapterStatistics | Select-Object Name, BytesReceived, BytesSent,"
            " PacketsReceived, PacketsSent | Format-Table -AutoSize"
        )
        protocols = await self.runner.run_native(["netstat", "-s"])
        return report(
            "Network Statistics",
            section("Adapter Statistics", adapters),
            section("Protocol Statistics", protocols),
        )

    async def scan_open_ports(self, payload: NetworkInput) -> str:
        host = validate_host(payload.host)
        if payload.port_range and payload.port_range.strip():
            spec = payload.port_range.strip()
        elif payload.port is not None:
            spec = str(payload.port)
        else:
            spec = DEFAULT_PORT_SPEC
        ports = expand_port_spec(spec)
        timeout = payload.timeout or self.probe_timeout
        logger.info("scanning %d candidate ports on %s", len(ports), host)
        results = await scan_ports(host, ports, timeout=timeout, probe=self._probe)
        lines = "\n".join(result.render() for result in results)
        return report("Port Scan Results", f"Target: {host}\nPorts: {spec}", lines)

    async def get_wifi_profiles(self, payload: NetworkInput) -> str:
        output = await self.runner.run_native(["netsh", "wlan", "show", "profiles"])
        return report("WiFi Profiles", code_block(output))
