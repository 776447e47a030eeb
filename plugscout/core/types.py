"""Discovered plugin descriptors and aggregated discovery results."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from plugscout.core.components import AgentDescriptor, CommandDescriptor, SkillDescriptor
from plugscout.core.hooks import HooksConfig
from plugscout.core.mcp import McpServer


def _drop_empty(value: Any) -> Any:
    """Recursively remove ``None`` values and empty lists or objects."""
    if isinstance(value, dict):
        pruned = {key: _drop_empty(item) for key, item in value.items()}
        return {key: item for key, item in pruned.items() if item not in (None, [], {})}
    if isinstance(value, list):
        return [_drop_empty(item) for item in value]
    return value


class PluginDescriptor(BaseModel):
    """One plugin and the components found inside it.

    ``path`` is relative to the archive root and is ``None`` when the plugin
    occupies the whole repository.
    """

    name: str
    path: Optional[str] = None
    description: Optional[str] = None
    skills: List[SkillDescriptor] = Field(default_factory=list)
    commands: List[CommandDescriptor] = Field(default_factory=list)
    agents: List[AgentDescriptor] = Field(default_factory=list)
    hooks: Optional[HooksConfig] = None
    mcp_servers: Dict[str, McpServer] = Field(default_factory=dict)

    def to_json_dict(self) -> Dict[str, Any]:
        return _drop_empty(self.model_dump(mode="json"))


class DiscoveryResult(BaseModel):
    plugins: List[PluginDescriptor] = Field(default_factory=list)
    all_skills: List[SkillDescriptor] = Field(default_factory=list)
    all_commands: List[CommandDescriptor] = Field(default_factory=list)
    all_agents: List[AgentDescriptor] = Field(default_factory=list)
    all_mcp_servers: Dict[str, McpServer] = Field(default_factory=dict)

    @classmethod
    def from_plugins(cls, plugins: Sequence[PluginDescriptor]) -> "DiscoveryResult":
        """Build the flattened views over ``plugins`` in order.

        Later plugins replace earlier MCP servers that share a name.
        """
        all_skills: List[SkillDescriptor] = []
        all_commands: List[CommandDescriptor] = []
        all_agents: List[AgentDescriptor] = []
        all_mcp_servers: Dict[str, Any] = {}
        for plugin in plugins:
            all_skills.extend(plugin.skills)
            all_commands.extend(plugin.commands)
            all_agents.extend(plugin.agents)
            all_mcp_servers.update(plugin.mcp_servers)
        return cls(
            plugins=list(plugins),
            all_skills=all_skills,
            all_commands=all_commands,
            all_agents=all_agents,
            all_mcp_servers=all_mcp_servers,
        )

    def is_empty(self) -> bool:
        return not self.plugins

    def to_json_dict(self) -> Dict[str, Any]:
        return _drop_empty(self.model_dump(mode="json"))


__all__ = ["DiscoveryResult", "PluginDescriptor"]
