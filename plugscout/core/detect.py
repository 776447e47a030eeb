"""Plugin boundary detection inside a repository archive.

Candidates are gathered from four tiers, in priority order:

1. the paths listed by a ``.claude-plugin/marketplace.json`` marketplace;
2. the archive root, when ``.claude-plugin/plugin.json`` exists there;
3. ``plugins/<name>`` for every ``plugin.json`` below ``plugins/``;
4. the archive root again, when no tier above found anything and at least
   two of ``skills/``, ``commands/`` and ``agents/`` are present.

Every tier runs, but a path already claimed by an earlier tier is not
registered again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set

from plugscout.core.archive import Archive, extract_file, has_file, list_files
from plugscout.core.errors import ParseError
from plugscout.core.marketplace import Marketplace, parse_marketplace, source_path
from plugscout.utils.log import get_logger

logger = get_logger()

MARKETPLACE_FILE = ".claude-plugin/marketplace.json"
PLUGIN_MANIFEST_FILE = ".claude-plugin/plugin.json"
PLUGINS_DIR = "plugins/"
COMPONENT_DIRS = ("skills/", "commands/", "agents/")
MIN_COMPONENT_DIRS = 2


class DetectionMethod(str, Enum):
    """How a candidate plugin root was found."""

    MARKETPLACE = "marketplace"
    PLUGIN_JSON = "plugin-json"
    PLUGINS_DIR = "plugins-dir"
    COMPONENT_HEURISTIC = "component-heuristic"


@dataclass(frozen=True)
class DetectedPlugin:
    path: str
    method: DetectionMethod


def find_marketplace_json(archive: Archive) -> Optional[str]:
    for path in list_files(archive, "marketplace.json"):
        if MARKETPLACE_FILE in path:
            return path
    return None


def load_marketplace(archive: Archive) -> Optional[Marketplace]:
    """Parse the archive's marketplace, or return ``None`` if it has none."""
    path = find_marketplace_json(archive)
    if path is None:
        return None
    return parse_marketplace(extract_file(archive, path))


def extract_plugins_dir_path(file_path: str, prefix: str) -> Optional[str]:
    """Map ``<prefix>plugins/<name>/...`` to ``plugins/<name>``."""
    if not file_path.startswith(prefix):
        return None
    relative = file_path[len(prefix) :]
    if not relative.startswith(PLUGINS_DIR):
        return None
    plugin_name = relative[len(PLUGINS_DIR) :].split("/", 1)[0]
    return f"{PLUGINS_DIR}{plugin_name}"


def has_component_dirs(archive: Archive, prefix: str) -> bool:
    present = 0
    for directory in COMPONENT_DIRS:
        dir_prefix = f"{prefix}{directory}"
        if any(name.startswith(dir_prefix) for name in archive.entries):
            present += 1
    return present >= MIN_COMPONENT_DIRS


def detect_plugins(archive: Archive, prefix: str) -> List[DetectedPlugin]:
    """Return candidate plugin roots in priority order.

    A malformed marketplace only raises when no other tier yields a
    candidate; otherwise it is logged and ignored.
    """
    detected: List[DetectedPlugin] = []
    seen: Set[str] = set()

    def register(path: str, method: DetectionMethod) -> None:
        if path in seen:
            return
        seen.add(path)
        detected.append(DetectedPlugin(path=path, method=method))

    marketplace_error: Optional[ParseError] = None
    try:
        marketplace = load_marketplace(archive)
    except ParseError as exc:
        marketplace_error = exc
        marketplace = None
        logger.warning(
            "[detect] Ignoring malformed marketplace: %s",
            exc,
            extra={"prefix": prefix},
        )
    if marketplace is not None:
        for entry in marketplace.plugins:
            register(source_path(entry.source), DetectionMethod.MARKETPLACE)

    if has_file(archive, f"{prefix}{PLUGIN_MANIFEST_FILE}"):
        register("", DetectionMethod.PLUGIN_JSON)

    for file_path in list_files(archive, "plugin.json"):
        plugin_path = extract_plugins_dir_path(file_path, prefix)
        if plugin_path is not None:
            register(plugin_path, DetectionMethod.PLUGINS_DIR)

    if not detected and has_component_dirs(archive, prefix):
        register("", DetectionMethod.COMPONENT_HEURISTIC)

    if not detected and marketplace_error is not None:
        raise marketplace_error

    logger.debug(
        "[detect] Detected plugin candidates",
        extra={
            "prefix": prefix,
            "candidates": [(item.path, item.method.value) for item in detected],
        },
    )
    return detected


__all__ = [
    "COMPONENT_DIRS",
    "DetectedPlugin",
    "DetectionMethod",
    "detect_plugins",
    "extract_plugins_dir_path",
    "find_marketplace_json",
    "has_component_dirs",
    "load_marketplace",
]
