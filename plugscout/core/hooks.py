"""Hook configuration parsing.

A hooks file maps event names to groups of actions::

    {
      "PreToolUse": [
        {"matcher": "Bash", "hooks": ["./check.sh", {"command": "lint", "timeout": 30}]}
      ]
    }

The same mapping may also be wrapped in a top-level ``"hooks"`` key, as in
harness ``settings.json`` files. A file that does not match this shape is
rejected as a whole.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from plugscout.core.errors import ParseError


class HookEvent(str, Enum):
    """Lifecycle events a hook can be attached to."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    NOTIFICATION = "Notification"
    STOP = "Stop"
    SUBAGENT_STOP = "SubagentStop"


class ExtendedHookAction(BaseModel):
    command: str
    timeout: Optional[int] = Field(default=None, ge=0)
    background: Optional[bool] = None


HookAction = Union[str, ExtendedHookAction]


class HookGroup(BaseModel):
    """Actions that run for one event, optionally filtered by a matcher."""

    matcher: Optional[str] = None
    hooks: List[HookAction] = Field(default_factory=list)


class HooksConfig(BaseModel):
    hooks: Dict[HookEvent, List[HookGroup]] = Field(default_factory=dict)

    def groups_for(self, event: HookEvent) -> List[HookGroup]:
        return self.hooks.get(event, [])

    def commands(self) -> List[str]:
        """Return every hook command in event and group order."""
        result: List[str] = []
        for groups in self.hooks.values():
            for group in groups:
                for action in group.hooks:
                    result.append(action if isinstance(action, str) else action.command)
        return result

    def is_empty(self) -> bool:
        return not self.hooks


def parse_hooks(data: Any) -> HooksConfig:
    """Validate an already-decoded hooks mapping."""
    if not isinstance(data, dict):
        raise ParseError("Hooks config must be a JSON object")
    hooks_data = data["hooks"] if isinstance(data.get("hooks"), dict) else data
    try:
        return HooksConfig(hooks=hooks_data)
    except ValidationError as exc:
        raise ParseError(f"Invalid hooks config: {exc}") from exc


def parse_hooks_json(text: str) -> HooksConfig:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid hooks JSON: {exc}") from exc
    return parse_hooks(data)


__all__ = [
    "ExtendedHookAction",
    "HookAction",
    "HookEvent",
    "HookGroup",
    "HooksConfig",
    "parse_hooks",
    "parse_hooks_json",
]
