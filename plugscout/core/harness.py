"""Locations of locally installed harness configuration.

Each harness keeps its configuration in a directory that depends on the
scope being inspected:

- ``GlobalScope``: the user's configuration directory.
- ``ProjectScope(root)``: a project-local directory under ``root``.
- ``CustomScope(path)``: an explicit configuration directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

CLAUDE_CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"
HOOKS_SETTINGS_FILE = "settings.json"


class HarnessKind(str, Enum):
    """Supported coding-agent harnesses."""

    CLAUDE_CODE = "claude-code"
    DROID = "droid"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    HarnessKind.CLAUDE_CODE: "Claude Code",
    HarnessKind.DROID: "Droid",
}


@dataclass(frozen=True)
class GlobalScope:
    pass


@dataclass(frozen=True)
class ProjectScope:
    root: Path


@dataclass(frozen=True)
class CustomScope:
    path: Path


Scope = Union[GlobalScope, ProjectScope, CustomScope]


def _home(home: Optional[Path]) -> Path:
    return (home or Path.home()).expanduser()


def _claude_global_dir(home: Optional[Path], environ: Optional[Mapping[str, str]]) -> Path:
    env = os.environ if environ is None else environ
    override = (env.get(CLAUDE_CONFIG_DIR_ENV) or "").strip()
    if override:
        candidate = Path(override).expanduser()
        # Relative overrides are ignored.
        if candidate.is_absolute():
            return candidate
    return _home(home) / ".claude"


def config_dir(
    kind: HarnessKind,
    scope: Scope,
    *,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return the harness configuration directory for ``scope``."""
    if isinstance(scope, CustomScope):
        return scope.path
    if kind is HarnessKind.CLAUDE_CODE:
        if isinstance(scope, ProjectScope):
            return scope.root / ".claude"
        return _claude_global_dir(home, environ)
    if isinstance(scope, ProjectScope):
        return scope.root / ".factory"
    return _home(home) / ".factory"


def commands_dir(kind: HarnessKind, scope: Scope, **kwargs) -> Path:
    return config_dir(kind, scope, **kwargs) / "commands"


def skills_dir(kind: HarnessKind, scope: Scope, **kwargs) -> Optional[Path]:
    """Return the standalone skills directory, if the harness has one.

    Claude Code only loads skills bundled inside plugins.
    """
    if kind is HarnessKind.CLAUDE_CODE:
        return None
    return config_dir(kind, scope, **kwargs) / "skills"


def agents_dir(kind: HarnessKind, scope: Scope, **kwargs) -> Path:
    sub = "droids" if kind is HarnessKind.DROID else "agents"
    return config_dir(kind, scope, **kwargs) / sub


def mcp_config_path(
    kind: HarnessKind,
    scope: Scope,
    *,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return the file holding MCP server definitions for ``scope``.

    Claude Code keeps project servers in ``<root>/.mcp.json`` and user
    servers in ``~/.claude.json``; Droid uses ``mcp.json`` inside its
    configuration directory.
    """
    if kind is HarnessKind.DROID:
        return config_dir(kind, scope, home=home, environ=environ) / "mcp.json"
    if isinstance(scope, ProjectScope):
        return scope.root / ".mcp.json"
    if isinstance(scope, CustomScope):
        return scope.path / ".mcp.json"
    return _home(home) / ".claude.json"


def hooks_config_path(kind: HarnessKind, scope: Scope, **kwargs) -> Path:
    return config_dir(kind, scope, **kwargs) / HOOKS_SETTINGS_FILE


__all__ = [
    "CustomScope",
    "GlobalScope",
    "HarnessKind",
    "ProjectScope",
    "Scope",
    "agents_dir",
    "commands_dir",
    "config_dir",
    "hooks_config_path",
    "mcp_config_path",
    "skills_dir",
]
