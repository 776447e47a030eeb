"""MCP server configuration parsing.

Servers are described by JSON objects in one of several shapes:

- typed: ``{"type": "stdio" | "http" | "streamable-http" | "sse", ...}``
- untyped remote: ``{"url": ...}`` (treated as SSE)
- untyped local: ``{"command": ..., "args": [...], "env": {...}}``

A config file either wraps its servers in ``{"mcpServers": {...}}`` or lists
them flat at the top level.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from plugscout.core.env_value import EnvValue, parse_env_value
from plugscout.core.errors import ParseError, UnsupportedConfigError
from plugscout.core.harness import HarnessKind
from plugscout.utils.log import get_logger

logger = get_logger()

MCP_SERVERS_KEY = "mcpServers"
HTTP_TYPES = ("http", "streamable-http")


class OAuthConfig(BaseModel):
    """OAuth settings for HTTP servers; passed through untouched."""

    model_config = ConfigDict(extra="allow")

    client_id: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)


class StdioMcpServer(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport: Literal["stdio"] = "stdio"
    command: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, EnvValue] = Field(default_factory=dict)
    cwd: Optional[str] = None
    enabled: bool = True
    timeout_ms: Optional[int] = None


class HttpMcpServer(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport: Literal["http"] = "http"
    url: str
    headers: Dict[str, EnvValue] = Field(default_factory=dict)
    oauth: Optional[OAuthConfig] = None
    enabled: bool = True
    timeout_ms: Optional[int] = None


class SseMcpServer(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport: Literal["sse"] = "sse"
    url: str
    headers: Dict[str, EnvValue] = Field(default_factory=dict)
    enabled: bool = True
    timeout_ms: Optional[int] = None


McpServer = Annotated[
    Union[StdioMcpServer, HttpMcpServer, SseMcpServer],
    Field(discriminator="transport"),
]
AnyMcpServer = Union[StdioMcpServer, HttpMcpServer, SseMcpServer]


def _unsupported(harness: HarnessKind, reason: str) -> UnsupportedConfigError:
    return UnsupportedConfigError(harness.display_name, reason)


def _env_value_map(
    raw: Any,
    harness: HarnessKind,
    *,
    field: str,
    label: str,
) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise _unsupported(harness, f"'{field}' must be an object")
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(value, str):
            raise _unsupported(harness, f"{label} '{key}' must be a string")
        values[str(key)] = parse_env_value(value)
    return values


def _string_list(raw: Any, harness: HarnessKind, *, field: str) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise _unsupported(harness, f"'{field}' must be an array")
    items: List[str] = []
    for index, item in enumerate(raw):
        if not isinstance(item, str):
            raise _unsupported(harness, f"{field}[{index}] must be a string")
        items.append(item)
    return items


def _required_string(raw: Dict[str, Any], key: str, harness: HarnessKind) -> str:
    value = raw.get(key)
    if value is None:
        raise _unsupported(harness, f"Server missing '{key}' field")
    if not isinstance(value, str):
        raise _unsupported(harness, f"'{key}' must be a string")
    return value


def _enabled(raw: Dict[str, Any]) -> bool:
    disabled = raw.get("disabled")
    return not disabled if isinstance(disabled, bool) else True


def _timeout_ms(raw: Dict[str, Any]) -> Optional[int]:
    value = raw.get("timeout")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _parse_stdio(raw: Dict[str, Any], harness: HarnessKind) -> StdioMcpServer:
    cwd = raw.get("cwd")
    if cwd is not None and not isinstance(cwd, str):
        raise _unsupported(harness, "'cwd' must be a string")
    return StdioMcpServer(
        command=_required_string(raw, "command", harness),
        args=_string_list(raw.get("args"), harness, field="args"),
        env=_env_value_map(raw.get("env"), harness, field="env", label="Environment variable"),
        cwd=cwd,
        enabled=_enabled(raw),
        timeout_ms=_timeout_ms(raw),
    )


def _parse_http(raw: Dict[str, Any], harness: HarnessKind) -> HttpMcpServer:
    return HttpMcpServer(
        url=_required_string(raw, "url", harness),
        headers=_env_value_map(raw.get("headers"), harness, field="headers", label="Header"),
        enabled=_enabled(raw),
        timeout_ms=_timeout_ms(raw),
    )


def _parse_sse(raw: Dict[str, Any], harness: HarnessKind) -> SseMcpServer:
    return SseMcpServer(
        url=_required_string(raw, "url", harness),
        headers=_env_value_map(raw.get("headers"), harness, field="headers", label="Header"),
        enabled=_enabled(raw),
        timeout_ms=_timeout_ms(raw),
    )


def parse_mcp_server(raw: Any, harness: HarnessKind = HarnessKind.CLAUDE_CODE) -> AnyMcpServer:
    """Parse one server entry into its transport variant.

    Claude Code and Droid share one dialect table: both accept ``stdio``,
    ``http``, ``streamable-http`` and ``sse`` types, and an untyped entry is
    SSE when it has a ``url`` but no ``command``. ``harness`` only labels the
    errors. A ``null`` type counts as absent.
    """
    if not isinstance(raw, dict):
        raise _unsupported(harness, "Server config must be an object")

    server_type = raw.get("type")
    if server_type is not None:
        if not isinstance(server_type, str):
            raise _unsupported(harness, "'type' must be a string")
        if server_type in HTTP_TYPES:
            return _parse_http(raw, harness)
        if server_type == "sse":
            return _parse_sse(raw, harness)
        if server_type == "stdio":
            return _parse_stdio(raw, harness)
        raise _unsupported(harness, f"Unsupported MCP server type '{server_type}'")

    if "url" in raw and "command" not in raw:
        return _parse_sse(raw, harness)
    return _parse_stdio(raw, harness)


def _parse_server_map(
    servers: Dict[str, Any], harness: HarnessKind
) -> Dict[str, AnyMcpServer]:
    parsed: Dict[str, AnyMcpServer] = {}
    for name, raw in servers.items():
        try:
            parsed[str(name)] = parse_mcp_server(raw, harness)
        except UnsupportedConfigError as exc:
            raise _unsupported(harness, f"Server '{name}': {exc.reason}") from exc
    return parsed


def parse_mcp_servers(
    config: Any, harness: HarnessKind = HarnessKind.CLAUDE_CODE
) -> Dict[str, AnyMcpServer]:
    """Parse a full config object whose servers live under ``mcpServers``."""
    servers = config.get(MCP_SERVERS_KEY) if isinstance(config, dict) else None
    if not isinstance(servers, dict):
        raise _unsupported(harness, f"Config missing '{MCP_SERVERS_KEY}' object")
    return _parse_server_map(servers, harness)


def parse_mcp_config(
    data: Any, harness: HarnessKind = HarnessKind.CLAUDE_CODE
) -> Dict[str, AnyMcpServer]:
    """Parse a wrapped config, falling back to the flat ``name -> server`` shape.

    When both shapes fail, the error from the wrapped attempt is raised if
    the config carried an ``mcpServers`` key; otherwise the flat error.
    """
    try:
        return parse_mcp_servers(data, harness)
    except UnsupportedConfigError as wrapped_error:
        if not isinstance(data, dict):
            raise _unsupported(harness, "MCP config must be a JSON object") from wrapped_error
        try:
            return _parse_server_map(data, harness)
        except UnsupportedConfigError:
            if MCP_SERVERS_KEY in data:
                raise wrapped_error
            raise


def parse_mcp_json(
    text: str, harness: HarnessKind = HarnessKind.CLAUDE_CODE
) -> Dict[str, AnyMcpServer]:
    """Parse the text of an ``.mcp.json`` file."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid MCP JSON: {exc}") from exc
    servers = parse_mcp_config(data, harness)
    logger.debug(
        "[mcp] Parsed MCP config",
        extra={"harness": harness.value, "server_count": len(servers)},
    )
    return servers


__all__ = [
    "AnyMcpServer",
    "HttpMcpServer",
    "McpServer",
    "OAuthConfig",
    "SseMcpServer",
    "StdioMcpServer",
    "parse_mcp_config",
    "parse_mcp_json",
    "parse_mcp_server",
    "parse_mcp_servers",
]
