"""Command-line interface for plugscout."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from plugscout import __version__
from plugscout.core.discovery import discover_all, discover_plugins
from plugscout.core.errors import PlugscoutError
from plugscout.core.harness import CustomScope, GlobalScope, HarnessKind, ProjectScope, Scope
from plugscout.core.installed import load_installed_hooks, load_installed_mcp_servers
from plugscout.core.mcp import AnyMcpServer, parse_mcp_json
from plugscout.core.types import DiscoveryResult, PluginDescriptor
from plugscout.utils.log import init_logger

console = Console()

_HARNESS_CHOICES = click.Choice([kind.value for kind in HarnessKind])


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _server_target(server: AnyMcpServer) -> str:
    if server.transport == "stdio":
        return " ".join([server.command, *server.args])
    return server.url


def _servers_table(servers: Dict[str, AnyMcpServer], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Transport")
    table.add_column("Target")
    table.add_column("Enabled")
    for name, server in servers.items():
        table.add_row(
            escape(name),
            server.transport,
            escape(_server_target(server)),
            "yes" if server.enabled else "no",
        )
    return table


def _plugins_table(plugins: list[PluginDescriptor]) -> Table:
    table = Table(title="Plugins")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("Skills", justify="right")
    table.add_column("Commands", justify="right")
    table.add_column("Agents", justify="right")
    table.add_column("Hooks")
    table.add_column("MCP", justify="right")
    for plugin in plugins:
        table.add_row(
            escape(plugin.name),
            escape(plugin.path or "."),
            str(len(plugin.skills)),
            str(len(plugin.commands)),
            str(len(plugin.agents)),
            "yes" if plugin.hooks else "-",
            str(len(plugin.mcp_servers)),
        )
    return table


def _print_result(result: DiscoveryResult) -> None:
    if result.is_empty():
        console.print("[yellow]No plugins found.[/yellow]")
        return
    console.print(_plugins_table(result.plugins))
    if result.all_mcp_servers:
        console.print(_servers_table(result.all_mcp_servers, "MCP servers"))


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Also write structured debug logs to this directory.",
)
def cli(log_dir: Optional[Path]) -> None:
    """Discover coding-agent plugins hosted on GitHub."""
    if log_dir is not None:
        init_logger(log_dir=log_dir)


@cli.command(name="discover")
@click.argument("repo")
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
def discover_cmd(repo: str, json_output: bool) -> None:
    """Discover every plugin in REPO (URL or owner/repo[@ref])."""
    try:
        result = discover_all(repo)
    except PlugscoutError as exc:
        raise click.ClickException(str(exc)) from exc
    if json_output:
        _echo_json(result.to_json_dict())
        return
    _print_result(result)


@cli.command(name="marketplace")
@click.argument("repo")
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
def marketplace_cmd(repo: str, json_output: bool) -> None:
    """List the plugins declared by REPO's marketplace."""
    try:
        plugins = discover_plugins(repo)
    except PlugscoutError as exc:
        raise click.ClickException(str(exc)) from exc
    if json_output:
        _echo_json([plugin.to_json_dict() for plugin in plugins])
        return
    _print_result(DiscoveryResult.from_plugins(plugins))


@cli.command(name="mcp")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--harness", type=_HARNESS_CHOICES, default=HarnessKind.CLAUDE_CODE.value)
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
def mcp_cmd(config_file: Path, harness: str, json_output: bool) -> None:
    """Parse the MCP servers in CONFIG_FILE."""
    try:
        servers = parse_mcp_json(config_file.read_text(encoding="utf-8"), HarnessKind(harness))
    except PlugscoutError as exc:
        raise click.ClickException(str(exc)) from exc
    if json_output:
        _echo_json(
            {
                name: server.model_dump(mode="json", exclude_none=True)
                for name, server in servers.items()
            }
        )
        return
    console.print(_servers_table(servers, str(config_file)))


def _scope_from_options(scope: str, path: Optional[Path]) -> Scope:
    if scope == "global":
        return GlobalScope()
    if path is None:
        raise click.UsageError(f"--path is required for --scope {scope}")
    if scope == "project":
        return ProjectScope(root=path)
    return CustomScope(path=path)


@cli.command(name="local")
@click.option("--harness", type=_HARNESS_CHOICES, default=HarnessKind.CLAUDE_CODE.value)
@click.option(
    "--scope",
    type=click.Choice(["global", "project", "custom"]),
    default="global",
    show_default=True,
)
@click.option("--path", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
def local_cmd(harness: str, scope: str, path: Optional[Path], json_output: bool) -> None:
    """Show MCP servers and hooks configured in an installed harness."""
    kind = HarnessKind(harness)
    resolved_scope = _scope_from_options(scope, path)
    try:
        servers = load_installed_mcp_servers(kind, resolved_scope)
        hooks = load_installed_hooks(kind, resolved_scope)
    except PlugscoutError as exc:
        raise click.ClickException(str(exc)) from exc

    if json_output:
        payload: Dict[str, Any] = {
            "harness": kind.value,
            "mcp_servers": {
                name: server.model_dump(mode="json", exclude_none=True)
                for name, server in servers.items()
            },
        }
        if hooks is not None:
            payload["hooks"] = hooks.model_dump(mode="json", exclude_none=True)["hooks"]
        _echo_json(payload)
        return

    console.print(_servers_table(servers, f"{kind.display_name} MCP servers"))
    if hooks is None:
        console.print("No hooks configured.")
        return
    console.print("[bold]Hooks:[/bold]")
    for command in hooks.commands():
        console.print(f"  - {escape(command)}")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
