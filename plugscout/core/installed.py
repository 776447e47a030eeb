"""Read MCP and hooks configuration from a locally installed harness."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from plugscout.core.errors import ParseError
from plugscout.core.harness import (
    GlobalScope,
    HarnessKind,
    Scope,
    hooks_config_path,
    mcp_config_path,
)
from plugscout.core.hooks import HooksConfig, parse_hooks
from plugscout.core.mcp import MCP_SERVERS_KEY, AnyMcpServer, parse_mcp_config, parse_mcp_servers
from plugscout.utils.log import get_logger

logger = get_logger()


def _read_json(path: Path) -> Optional[Any]:
    if not path.exists():
        logger.debug("[harness] Config file not found", extra={"path": str(path)})
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"Invalid JSON in {path}: {exc}") from exc


def load_installed_mcp_servers(
    kind: HarnessKind,
    scope: Scope,
    *,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, AnyMcpServer]:
    """Parse the MCP servers configured for ``kind`` at ``scope``.

    A missing config file yields no servers.
    """
    path = mcp_config_path(kind, scope, home=home, environ=environ)
    data = _read_json(path)
    if data is None:
        return {}
    if kind is HarnessKind.DROID:
        servers = parse_mcp_servers(data, kind)
    elif isinstance(scope, GlobalScope) and isinstance(data, dict) and MCP_SERVERS_KEY not in data:
        # ~/.claude.json holds unrelated settings until a user server is added.
        servers = {}
    else:
        servers = parse_mcp_config(data, kind)
    logger.debug(
        "[harness] Loaded installed MCP servers",
        extra={"harness": kind.value, "path": str(path), "server_count": len(servers)},
    )
    return servers


def load_installed_hooks(
    kind: HarnessKind,
    scope: Scope,
    *,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[HooksConfig]:
    """Parse the ``hooks`` section of the harness settings file, if any."""
    path = hooks_config_path(kind, scope, home=home, environ=environ)
    data = _read_json(path)
    if not isinstance(data, dict) or "hooks" not in data:
        return None
    hooks = parse_hooks(data)
    return None if hooks.is_empty() else hooks


__all__ = ["load_installed_hooks", "load_installed_mcp_servers"]
