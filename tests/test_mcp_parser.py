from __future__ import annotations

import json

import pytest
from pydantic import TypeAdapter

from plugscout.core.env_value import EnvReference, LiteralValue
from plugscout.core.errors import ParseError, UnsupportedConfigError
from plugscout.core.harness import HarnessKind
from plugscout.core.mcp import (
    HttpMcpServer,
    McpServer,
    SseMcpServer,
    StdioMcpServer,
    parse_mcp_config,
    parse_mcp_json,
    parse_mcp_server,
    parse_mcp_servers,
)


def test_untyped_command_parses_to_stdio_with_disabled_flag() -> None:
    server = parse_mcp_server({"command": "node", "args": ["x.js"], "disabled": True})
    assert server == StdioMcpServer(command="node", args=["x.js"], enabled=False)


def test_stdio_fields_are_extracted() -> None:
    server = parse_mcp_server(
        {
            "type": "stdio",
            "command": "npx",
            "args": ["-y", "pkg"],
            "env": {"TOKEN": "${TOKEN}", "MODE": "fast"},
            "cwd": "/srv",
            "timeout": 5000,
        }
    )
    assert isinstance(server, StdioMcpServer)
    assert server.env == {"TOKEN": EnvReference(name="TOKEN"), "MODE": LiteralValue(value="fast")}
    assert server.cwd == "/srv"
    assert server.timeout_ms == 5000
    assert server.enabled is True


@pytest.mark.parametrize("server_type", ["http", "streamable-http"])
def test_http_types_parse_to_http(server_type: str) -> None:
    server = parse_mcp_server(
        {
            "type": server_type,
            "url": "https://mcp.example.com",
            "headers": {"Authorization": "${AUTH}"},
        }
    )
    assert isinstance(server, HttpMcpServer)
    assert server.headers == {"Authorization": EnvReference(name="AUTH")}
    assert server.oauth is None


def test_typed_sse_and_untyped_url_parse_to_sse() -> None:
    typed = parse_mcp_server({"type": "sse", "url": "https://a"})
    untyped = parse_mcp_server({"url": "https://a"})
    assert typed == untyped == SseMcpServer(url="https://a")


def test_untyped_object_with_url_and_command_is_stdio() -> None:
    server = parse_mcp_server({"url": "https://a", "command": "run"})
    assert isinstance(server, StdioMcpServer)


def test_null_type_falls_back_to_untyped_detection() -> None:
    assert parse_mcp_server({"type": None, "url": "https://a"}) == SseMcpServer(url="https://a")
    assert parse_mcp_server({"type": None, "command": "run"}) == StdioMcpServer(command="run")


def test_droid_shares_the_claude_code_dialect() -> None:
    raw = {"type": "streamable-http", "url": "https://a"}
    assert parse_mcp_server(raw, HarnessKind.DROID) == parse_mcp_server(raw)
    sse = parse_mcp_server({"type": "sse", "url": "https://a"}, HarnessKind.DROID)
    assert isinstance(sse, SseMcpServer)


def test_http_without_url_is_unsupported() -> None:
    with pytest.raises(UnsupportedConfigError, match="url"):
        parse_mcp_server({"type": "http"})


def test_unknown_type_names_the_type() -> None:
    with pytest.raises(UnsupportedConfigError) as excinfo:
        parse_mcp_server({"type": "websocket", "url": "wss://x"}, HarnessKind.DROID)
    assert "websocket" in excinfo.value.reason
    assert excinfo.value.harness == "Droid"


def test_missing_command_is_unsupported() -> None:
    with pytest.raises(UnsupportedConfigError, match="command"):
        parse_mcp_server({"args": ["x"]})


@pytest.mark.parametrize(
    "raw, fragment",
    [
        ({"type": "http", "url": "u", "headers": []}, "'headers' must be an object"),
        ({"type": "http", "url": "u", "headers": {"X-Key": 1}}, "Header 'X-Key' must be a string"),
        ({"command": "c", "args": "x"}, "'args' must be an array"),
        ({"command": "c", "args": ["ok", 2]}, "args[1] must be a string"),
        ({"command": "c", "env": ["A"]}, "'env' must be an object"),
        ({"command": "c", "env": {"A": True}}, "Environment variable 'A' must be a string"),
        ({"command": 3}, "'command' must be a string"),
        ({"type": 1}, "'type' must be a string"),
        ("npx", "Server config must be an object"),
    ],
)
def test_wrong_json_kinds_name_the_field(raw, fragment: str) -> None:
    with pytest.raises(UnsupportedConfigError) as excinfo:
        parse_mcp_server(raw)
    assert fragment in str(excinfo.value)


@pytest.mark.parametrize("timeout", ["100", 1.5, -1, True])
def test_non_integer_timeouts_are_ignored(timeout) -> None:
    server = parse_mcp_server({"command": "c", "timeout": timeout})
    assert server.timeout_ms is None


def test_non_boolean_disabled_keeps_server_enabled() -> None:
    assert parse_mcp_server({"command": "c", "disabled": "yes"}).enabled is True


def test_full_config_requires_collection_key() -> None:
    with pytest.raises(UnsupportedConfigError, match="Config missing 'mcpServers' object"):
        parse_mcp_servers({"servers": {}}, HarnessKind.DROID)


def test_full_config_errors_name_the_server() -> None:
    with pytest.raises(UnsupportedConfigError, match="Server 'remote'"):
        parse_mcp_servers({"mcpServers": {"remote": {"type": "http"}}})


def test_wrapped_shape_is_preferred() -> None:
    servers = parse_mcp_config({"mcpServers": {"a": {"command": "x"}}})
    assert list(servers) == ["a"]


def test_flat_shape_is_the_fallback() -> None:
    servers = parse_mcp_config({"a": {"command": "x"}, "b": {"url": "https://b"}})
    assert isinstance(servers["a"], StdioMcpServer)
    assert isinstance(servers["b"], SseMcpServer)


def test_failed_wrapped_and_flat_reports_wrapped_error() -> None:
    with pytest.raises(UnsupportedConfigError, match="Server 'bad'"):
        parse_mcp_config({"mcpServers": {"bad": {"type": "http"}}})


def test_parse_mcp_json_rejects_invalid_json() -> None:
    with pytest.raises(ParseError):
        parse_mcp_json("{not json")


def test_server_round_trips_through_json() -> None:
    adapter = TypeAdapter(McpServer)
    servers = [
        parse_mcp_server({"command": "node", "env": {"K": "${K}"}, "timeout": 10}),
        parse_mcp_server({"type": "http", "url": "https://h", "headers": {"A": "b"}}),
        parse_mcp_server({"url": "https://s", "disabled": True}),
    ]
    for server in servers:
        encoded = json.dumps(adapter.dump_python(server, mode="json"))
        assert adapter.validate_json(encoded) == server


@pytest.mark.parametrize(
    "raw",
    [
        {"command": "a"},
        {"type": "stdio", "command": "a", "url": "https://x"},
    ],
)
def test_stdio_shapes_never_parse_as_remote(raw) -> None:
    assert not isinstance(parse_mcp_server(raw), (HttpMcpServer, SseMcpServer))
