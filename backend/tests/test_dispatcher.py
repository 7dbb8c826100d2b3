from __future__ import annotations

import pytest

from conftest import FakeRunner, run
from winsys.container import build_container
from winsys.errors import MissingParameterError
from winsys.mcp.dispatcher import ToolDispatcher
from winsys.mcp.registry import ToolRegistry
from winsys.mcp.schema import ToolCallRequest, ToolCallResult

TOOL_NAMES = [
    "filesystem",
    "process_manager",
    "system_info",
    "registry",
    "service_manager",
    "network",
    "performance",
]


def _dispatcher(settings, runner: FakeRunner) -> ToolDispatcher:
    return build_container(settings=settings, runner=runner).dispatcher


def test_registry_advertises_seven_tools_with_action_enums(settings, runner) -> None:
    registry = build_container(settings=settings, runner=runner).registry
    assert registry.names() == TOOL_NAMES
    for descriptor in registry.list_tools():
        schema = descriptor.input_schema
        assert "action" in schema["required"]
        assert schema.get("additionalProperties") is False
        assert descriptor.description
    network = registry.describe()["network"].input_schema
    assert "scan_open_ports" in str(network)


def test_registry_rejects_duplicate_names(settings, runner) -> None:
    registry = build_container(settings=settings, runner=runner).registry
    tool = registry.get("network")
    with pytest.raises(ValueError):
        ToolRegistry([tool, tool])


def test_unknown_tool_fails_without_running_anything(settings, runner) -> None:
    result = run(_dispatcher(settings, runner).handle("defrag", {"action": "run"}))
    assert result.is_error
    assert result.error == "❌ Unknown tool: defrag"
    assert runner.calls == []


def test_unknown_action_names_the_tool_label(settings, runner) -> None:
    result = run(_dispatcher(settings, runner).handle("filesystem", {"action": "explode"}))
    assert result.error == "❌ File system operation failed: Unknown action: explode"
    assert runner.calls == []


def test_missing_action(settings, runner) -> None:
    result = run(_dispatcher(settings, runner).handle("registry", {}))
    assert result.error == "❌ Registry operation failed: Missing required parameter: action"


def test_unhashable_action_is_an_unknown_action(settings, runner) -> None:
    result = run(_dispatcher(settings, runner).handle("registry", {"action": ["read_key"]}))
    assert result.error == "❌ Registry operation failed: Unknown action: ['read_key']"


def test_missing_required_parameter_is_rejected_before_any_command(settings, runner) -> None:
    dispatcher = _dispatcher(settings, runner)
    result = run(dispatcher.handle("network", {"action": "ping_host"}))
    assert result.error == "❌ Network operation failed: Missing required parameter: host"
    result = run(dispatcher.handle("registry", {"action": "read_value", "key_path": "  "}))
    assert result.error == (
        "❌ Registry operation failed: Missing required parameters: key_path, value_name"
    )
    assert runner.calls == []


def test_alternative_parameters(settings, runner) -> None:
    result = run(_dispatcher(settings, runner).handle("process_manager", {"action": "kill_process"}))
    assert result.error == (
        "❌ Process management operation failed: "
        "Either process_id or process_name must be provided"
    )
    assert runner.calls == []


def test_validation_errors_name_the_field(settings, runner) -> None:
    dispatcher = _dispatcher(settings, runner)
    result = run(dispatcher.handle("network", {"action": "ping_host", "host": "a", "count": "many"}))
    assert result.is_error
    assert "Invalid arguments: count:" in result.error
    result = run(dispatcher.handle("network", {"action": "get_dns_info", "colour": "blue"}))
    assert "Invalid arguments: colour:" in result.error
    result = run(dispatcher.handle("service_manager", {"action": "list_services", "status_filter": "zombie"}))
    assert "status_filter" in result.error
    assert runner.calls == []


def test_external_failure_message_passes_through_verbatim(settings) -> None:
    runner = FakeRunner(failures={"Get-Service": "Cannot find any service with service name 'nope'."})
    result = run(
        _dispatcher(settings, runner).handle(
            "service_manager", {"action": "get_service_status", "service_name": "nope"}
        )
    )
    assert result.error == (
        "❌ Service management operation failed: "
        "Cannot find any service with service name 'nope'."
    )


def test_unexpected_exceptions_become_failure_results(settings) -> None:
    runner = FakeRunner(failures={"Get-NetRoute": RuntimeError("pipe closed")})
    result = run(_dispatcher(settings, runner).handle("network", {"action": "get_routing_table"}))
    assert result.error == "❌ Network operation failed: pipe closed"


def test_success_carries_report_text(settings) -> None:
    runner = FakeRunner(default_output="route table")
    result = run(
        _dispatcher(settings, runner).execute(
            ToolCallRequest(tool_name="network", arguments={"action": "get_routing_table"})
        )
    )
    assert not result.is_error
    assert result.output.startswith("# IPv4 Routing Table")
    assert "route table" in result.text


def test_result_envelope_requires_exactly_one_payload() -> None:
    with pytest.raises(ValueError):
        ToolCallResult(tool_name="x")
    with pytest.raises(ValueError):
        ToolCallResult(tool_name="x", output="a", error="b")


def test_missing_parameter_messages() -> None:
    assert str(MissingParameterError(["path"])) == "Missing required parameter: path"
    with pytest.raises(ValueError):
        MissingParameterError([])
