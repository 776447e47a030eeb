"""Parsers for plugin component files.

Skills, commands and agents are Markdown files with a YAML frontmatter block;
plugin manifests are JSON. Each parser raises ``ParseError`` for a file it
cannot use, and callers scanning many files skip the failures.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field

from plugscout.core.errors import ParseError

COMMAND_KIND = "command"


class SkillDescriptor(BaseModel):
    name: str
    description: Optional[str] = None
    triggers: List[str] = Field(default_factory=list)


class CommandDescriptor(BaseModel):
    name: str
    description: Optional[str] = None
    kind: str = COMMAND_KIND
    argument_hint: Optional[str] = None
    allowed_tools: List[str] = Field(default_factory=list)


class AgentDescriptor(BaseModel):
    name: str
    description: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
    model: Optional[str] = None


class PluginManifest(BaseModel):
    """Fields read from a ``plugin.json`` manifest."""

    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    mcp_servers: Dict[str, Any] = Field(default_factory=dict)


def split_frontmatter(raw_text: str) -> Tuple[Dict[str, Any], str]:
    """Extract YAML frontmatter and body content from a Markdown file."""
    lines = raw_text.splitlines()
    if not lines or lines[0].strip() != "---":
        raise ParseError("Missing frontmatter block")
    for idx in range(1, len(lines)):
        if lines[idx].strip() == "---":
            frontmatter_text = "\n".join(lines[1:idx])
            body = "\n".join(lines[idx + 1 :])
            try:
                frontmatter = yaml.safe_load(frontmatter_text) or {}
            except yaml.YAMLError as exc:
                raise ParseError(f"Invalid frontmatter: {exc}") from exc
            if not isinstance(frontmatter, dict):
                raise ParseError("Frontmatter must be a mapping")
            return frontmatter, body
    raise ParseError("Unterminated frontmatter block")


def _required_name(frontmatter: Dict[str, Any]) -> str:
    raw_name = frontmatter.get("name")
    if not isinstance(raw_name, str) or not raw_name.strip():
        raise ParseError('Missing required "name" field')
    return raw_name.strip()


def _optional_text(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_items(value: object) -> List[str]:
    """Accept a comma-separated string or a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def parse_skill_descriptor(text: str) -> SkillDescriptor:
    frontmatter, _ = split_frontmatter(text)
    triggers = frontmatter.get("triggers")
    if isinstance(triggers, str):
        triggers = [triggers]
    elif not isinstance(triggers, list):
        # Scalars such as `triggers: 5` carry no usable phrases.
        triggers = []
    return SkillDescriptor(
        name=_required_name(frontmatter),
        description=_optional_text(frontmatter.get("description")),
        triggers=[item for item in triggers if isinstance(item, str) and item],
    )


def parse_command_descriptor(text: str, kind: str = COMMAND_KIND) -> CommandDescriptor:
    """Parse a command file, tagging it with the ``kind`` it was scanned as."""
    frontmatter, _ = split_frontmatter(text)
    return CommandDescriptor(
        name=_required_name(frontmatter),
        description=_optional_text(frontmatter.get("description")),
        kind=kind,
        argument_hint=_optional_text(
            frontmatter.get("argument-hint") or frontmatter.get("argument_hint")
        ),
        allowed_tools=_string_items(
            frontmatter.get("allowed-tools") or frontmatter.get("allowed_tools")
        ),
    )


def parse_agent_descriptor(text: str) -> AgentDescriptor:
    frontmatter, _ = split_frontmatter(text)
    return AgentDescriptor(
        name=_required_name(frontmatter),
        description=_optional_text(frontmatter.get("description")),
        tools=_string_items(frontmatter.get("tools")),
        model=_optional_text(frontmatter.get("model")),
    )


def parse_manifest(text: str) -> PluginManifest:
    """Parse a ``plugin.json`` manifest.

    ``author`` may be a string or an object with a ``name``; inline
    ``mcpServers`` are kept raw for the MCP parser.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid plugin manifest JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("Plugin manifest must be a JSON object")

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise ParseError("Plugin manifest 'name' must be a string")

    author = data.get("author")
    if isinstance(author, dict):
        author = author.get("name")

    mcp_servers = data.get("mcpServers")
    return PluginManifest(
        name=name.strip() if name else None,
        description=_optional_text(data.get("description")),
        version=_optional_text(data.get("version")),
        author=_optional_text(author),
        mcp_servers=mcp_servers if isinstance(mcp_servers, dict) else {},
    )


__all__ = [
    "AgentDescriptor",
    "COMMAND_KIND",
    "CommandDescriptor",
    "PluginManifest",
    "SkillDescriptor",
    "parse_agent_descriptor",
    "parse_command_descriptor",
    "parse_manifest",
    "parse_skill_descriptor",
    "split_frontmatter",
]
