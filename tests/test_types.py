from __future__ import annotations

import json

from plugscout.core.components import AgentDescriptor, CommandDescriptor, SkillDescriptor
from plugscout.core.env_value import EnvReference
from plugscout.core.hooks import ExtendedHookAction, HookEvent, HookGroup, HooksConfig
from plugscout.core.mcp import HttpMcpServer, SseMcpServer, StdioMcpServer
from plugscout.core.types import DiscoveryResult, PluginDescriptor


def _full_plugin() -> PluginDescriptor:
    return PluginDescriptor(
        name="full",
        path="plugins/full",
        description="Everything",
        skills=[SkillDescriptor(name="s", triggers=["go"])],
        commands=[CommandDescriptor(name="c", allowed_tools=["Bash"])],
        agents=[AgentDescriptor(name="a", model="sonnet")],
        hooks=HooksConfig(
            hooks={
                HookEvent.PRE_TOOL_USE: [
                    HookGroup(matcher="Edit", hooks=["x", ExtendedHookAction(command="y", timeout=5)])
                ]
            }
        ),
        mcp_servers={
            "local": StdioMcpServer(command="node", args=["s.js"], env={"K": EnvReference(name="K")}),
            "remote": HttpMcpServer(url="https://h", enabled=False, timeout_ms=100),
        },
    )


def test_empty_result_serializes_to_empty_object() -> None:
    assert DiscoveryResult().to_json_dict() == {}
    assert DiscoveryResult.from_plugins([]).to_json_dict() == {}


def test_minimal_plugin_serializes_to_name_only() -> None:
    assert PluginDescriptor(name="minimal").to_json_dict() == {"name": "minimal"}


def test_serialized_plugin_omits_empty_nested_fields() -> None:
    data = _full_plugin().to_json_dict()
    assert data["skills"] == [{"name": "s", "triggers": ["go"]}]
    assert data["commands"] == [{"name": "c", "kind": "command", "allowed_tools": ["Bash"]}]
    assert data["mcp_servers"]["local"] == {
        "transport": "stdio",
        "command": "node",
        "args": ["s.js"],
        "env": {"K": {"type": "env", "name": "K"}},
        "enabled": True,
    }
    assert data["mcp_servers"]["remote"] == {
        "transport": "http",
        "url": "https://h",
        "enabled": False,
        "timeout_ms": 100,
    }
    assert data["hooks"] == {
        "hooks": {"PreToolUse": [{"matcher": "Edit", "hooks": ["x", {"command": "y", "timeout": 5}]}]}
    }


def test_plugin_descriptor_round_trips_through_json() -> None:
    for plugin in (_full_plugin(), PluginDescriptor(name="minimal")):
        encoded = json.dumps(plugin.to_json_dict())
        assert PluginDescriptor.model_validate_json(encoded) == plugin


def test_flattened_views_follow_plugin_order() -> None:
    first = PluginDescriptor(
        name="one",
        skills=[SkillDescriptor(name="a")],
        mcp_servers={"dup": SseMcpServer(url="https://one"), "solo": SseMcpServer(url="https://s")},
    )
    second = PluginDescriptor(
        name="two",
        skills=[SkillDescriptor(name="b")],
        agents=[AgentDescriptor(name="ag")],
        mcp_servers={"dup": SseMcpServer(url="https://two")},
    )
    result = DiscoveryResult.from_plugins([first, second])
    assert [skill.name for skill in result.all_skills] == ["a", "b"]
    assert [agent.name for agent in result.all_agents] == ["ag"]
    assert result.all_commands == []
    assert result.all_mcp_servers == {
        "dup": SseMcpServer(url="https://two"),
        "solo": SseMcpServer(url="https://s"),
    }


def test_flattening_is_idempotent() -> None:
    result = DiscoveryResult.from_plugins([_full_plugin(), PluginDescriptor(name="other")])
    assert DiscoveryResult.from_plugins(result.plugins) == result


def test_discovery_result_round_trips_through_json() -> None:
    result = DiscoveryResult.from_plugins([_full_plugin()])
    encoded = json.dumps(result.to_json_dict())
    assert DiscoveryResult.model_validate_json(encoded) == result
