"""Plugin discovery for GitHub repositories.

``discover_all`` downloads a repository archive once, detects the plugin
roots inside it and assembles a descriptor for each. Problems with a single
component file only drop that file; problems with a candidate's manifest or
hooks file drop that candidate. Reference parsing, fetch errors and a
repository without any candidate propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from plugscout.core.archive import (
    Archive,
    archive_root_prefix,
    extract_file,
    fetch_bytes,
    has_file,
    list_files,
)
from plugscout.core.components import (
    COMMAND_KIND,
    parse_agent_descriptor,
    parse_command_descriptor,
    parse_manifest,
    parse_skill_descriptor,
)
from plugscout.core.detect import (
    MARKETPLACE_FILE,
    PLUGIN_MANIFEST_FILE,
    DetectionMethod,
    detect_plugins,
    load_marketplace,
)
from plugscout.core.errors import NotFoundError, ParseError, UnsupportedConfigError
from plugscout.core.github import GitHubRef
from plugscout.core.hooks import HooksConfig, parse_hooks_json
from plugscout.core.marketplace import (
    AnyPluginSource,
    GitHubSource,
    RelativeSource,
    source_path,
)
from plugscout.core.mcp import AnyMcpServer, parse_mcp_config, parse_mcp_json
from plugscout.core.types import DiscoveryResult, PluginDescriptor
from plugscout.utils.log import get_logger

logger = get_logger()

Fetcher = Callable[[str], bytes]
T = TypeVar("T")

ALT_PLUGIN_MANIFEST_FILE = "plugin.json"
HOOKS_FILES = (".claude-plugin/hooks.json", "hooks/hooks.json")
MCP_FILES = (".mcp.json", ".claude-plugin/.mcp.json")


def _fetch_archive(github_ref: GitHubRef, fetcher: Optional[Fetcher]) -> Archive:
    url = github_ref.archive_url()
    data = (fetcher or fetch_bytes)(url)
    archive = Archive.from_bytes(data)
    logger.debug(
        "[discovery] Loaded archive",
        extra={"repo": str(github_ref), "url": url, "entries": len(archive)},
    )
    return archive


def plugin_base(prefix: str, plugin_path: str) -> str:
    """Return the archive path prefix under which a plugin's files live."""
    if not plugin_path:
        return prefix
    return f"{prefix}{plugin_path}/"


def derive_plugin_name(plugin_path: str, github_ref: GitHubRef) -> str:
    if not plugin_path:
        return github_ref.repo
    return plugin_path.rsplit("/", 1)[-1] or github_ref.repo


def scan_components(
    archive: Archive,
    base: str,
    subdir: str,
    suffix: str,
    parser: Callable[[str], T],
) -> List[T]:
    """Parse every ``suffix`` file below ``base + subdir``, skipping bad files."""
    dir_prefix = f"{base}{subdir}"
    found: List[T] = []
    for path in list_files(archive, suffix):
        if not path.startswith(dir_prefix):
            continue
        try:
            found.append(parser(extract_file(archive, path)))
        except ParseError as exc:
            logger.debug(
                "[discovery] Skipping component file: %s",
                exc,
                extra={"path": path},
            )
    return found


def _scan_hooks(archive: Archive, base: str) -> Optional[HooksConfig]:
    for name in HOOKS_FILES:
        path = f"{base}{name}"
        if has_file(archive, path):
            hooks = parse_hooks_json(extract_file(archive, path))
            return None if hooks.is_empty() else hooks
    return None


def _scan_mcp_servers(
    archive: Archive,
    base: str,
    inline_servers: Optional[Dict[str, Any]] = None,
) -> Dict[str, AnyMcpServer]:
    servers: Dict[str, AnyMcpServer] = {}
    if inline_servers:
        try:
            servers.update(parse_mcp_config({"mcpServers": inline_servers}))
        except UnsupportedConfigError as exc:
            logger.debug("[discovery] Ignoring inline MCP servers: %s", exc, extra={"base": base})
    for name in MCP_FILES:
        path = f"{base}{name}"
        if not has_file(archive, path):
            continue
        try:
            servers.update(parse_mcp_json(extract_file(archive, path)))
        except (ParseError, UnsupportedConfigError) as exc:
            logger.debug(
                "[discovery] Ignoring MCP config: %s: %s",
                type(exc).__name__,
                exc,
                extra={"path": path},
            )
    return servers


def _assemble(
    archive: Archive,
    prefix: str,
    plugin_path: str,
    *,
    name: str,
    description: Optional[str] = None,
    inline_servers: Optional[Dict[str, Any]] = None,
) -> PluginDescriptor:
    base = plugin_base(prefix, plugin_path)
    return PluginDescriptor(
        name=name,
        path=plugin_path or None,
        description=description,
        skills=scan_components(archive, base, "skills/", "SKILL.md", parse_skill_descriptor),
        commands=scan_components(
            archive,
            base,
            "commands/",
            ".md",
            lambda text: parse_command_descriptor(text, COMMAND_KIND),
        ),
        agents=scan_components(archive, base, "agents/", ".md", parse_agent_descriptor),
        hooks=_scan_hooks(archive, base),
        mcp_servers=_scan_mcp_servers(archive, base, inline_servers),
    )


def discover_single_plugin(
    archive: Archive,
    prefix: str,
    plugin_path: str,
    *,
    fallback_name: str = "",
) -> PluginDescriptor:
    """Assemble a plugin from its manifest and components.

    Raises ``NotFoundError`` when neither manifest location exists and
    ``ParseError`` when the manifest or hooks file is malformed.
    """
    base = plugin_base(prefix, plugin_path)
    try:
        manifest_text = extract_file(archive, f"{base}{PLUGIN_MANIFEST_FILE}")
    except NotFoundError:
        manifest_text = extract_file(archive, f"{base}{ALT_PLUGIN_MANIFEST_FILE}")
    manifest = parse_manifest(manifest_text)
    return _assemble(
        archive,
        prefix,
        plugin_path,
        name=manifest.name or fallback_name,
        description=manifest.description,
        inline_servers=manifest.mcp_servers,
    )


def discover_synthetic_plugin(
    archive: Archive,
    prefix: str,
    plugin_path: str,
    name: str,
) -> PluginDescriptor:
    """Assemble a plugin that has components but no manifest."""
    return _assemble(archive, prefix, plugin_path, name=name)


def discover_all(repo: str, *, fetcher: Optional[Fetcher] = None) -> DiscoveryResult:
    """Discover every plugin in a GitHub repository."""
    github_ref = GitHubRef.parse(repo)
    archive = _fetch_archive(github_ref, fetcher)
    prefix = archive_root_prefix(archive)

    detected = detect_plugins(archive, prefix)
    if not detected:
        raise NotFoundError(
            PLUGIN_MANIFEST_FILE,
            f"No plugin manifest, marketplace or component directories found in {github_ref}",
        )

    plugins: List[PluginDescriptor] = []
    for candidate in detected:
        derived_name = derive_plugin_name(candidate.path, github_ref)
        try:
            if candidate.method is DetectionMethod.COMPONENT_HEURISTIC:
                plugin = discover_synthetic_plugin(archive, prefix, candidate.path, derived_name)
            else:
                plugin = discover_single_plugin(
                    archive, prefix, candidate.path, fallback_name=derived_name
                )
        except (NotFoundError, ParseError) as exc:
            logger.warning(
                "[discovery] Skipping plugin candidate: %s: %s",
                type(exc).__name__,
                exc,
                extra={"path": candidate.path, "method": candidate.method.value},
            )
            continue
        plugins.append(plugin)

    logger.info(
        "[discovery] Discovered plugins",
        extra={"repo": str(github_ref), "plugin_count": len(plugins)},
    )
    return DiscoveryResult.from_plugins(plugins)


def discover_plugins(repo: str, *, fetcher: Optional[Fetcher] = None) -> List[PluginDescriptor]:
    """Discover the plugins listed by a repository's marketplace.

    Unlike ``discover_all`` this requires a marketplace and ignores the other
    detection tiers.
    """
    github_ref = GitHubRef.parse(repo)
    archive = _fetch_archive(github_ref, fetcher)
    prefix = archive_root_prefix(archive)

    marketplace = load_marketplace(archive)
    if marketplace is None:
        raise NotFoundError(MARKETPLACE_FILE)

    plugins: List[PluginDescriptor] = []
    for entry in marketplace.plugins:
        plugin_path = source_path(entry.source)
        try:
            plugins.append(
                discover_single_plugin(
                    archive,
                    prefix,
                    plugin_path,
                    fallback_name=derive_plugin_name(plugin_path, github_ref),
                )
            )
        except (NotFoundError, ParseError) as exc:
            logger.warning(
                "[discovery] Skipping marketplace entry: %s: %s",
                type(exc).__name__,
                exc,
                extra={"path": plugin_path},
            )
    return plugins


def discover_from_source(
    source: AnyPluginSource, *, fetcher: Optional[Fetcher] = None
) -> List[PluginDescriptor]:
    """Discover the marketplace plugins behind a single plugin source."""
    if isinstance(source, RelativeSource):
        raise NotFoundError(
            source.path, "Cannot discover from relative path without base URL"
        )
    repo = source.repo if isinstance(source, GitHubSource) else source.url
    return discover_plugins(repo, fetcher=fetcher)


__all__ = [
    "derive_plugin_name",
    "discover_all",
    "discover_from_source",
    "discover_plugins",
    "discover_single_plugin",
    "discover_synthetic_plugin",
    "plugin_base",
    "scan_components",
]
