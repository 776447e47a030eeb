"""Marketplace manifest parsing.

A marketplace (``.claude-plugin/marketplace.json``) lists member plugins::

    {
      "name": "my-marketplace",
      "plugins": [
        {"name": "review", "source": "./plugins/review"},
        {"name": "remote", "source": {"github": "owner/repo"}},
        {"name": "mirror", "source": {"url": "https://example.com/plugin.git"}}
      ]
    }

``{"source": "github", "repo": "owner/repo"}`` is accepted as an alias of
the ``github`` form.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from plugscout.core.errors import ParseError


class GitHubSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["github"] = "github"
    repo: str

    def to_native(self) -> Any:
        return {"github": self.repo}


class UrlSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    url: str

    def to_native(self) -> Any:
        return {"url": self.url}


class RelativeSource(BaseModel):
    """A path relative to the repository holding the marketplace."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["relative"] = "relative"
    path: str

    def to_native(self) -> Any:
        return self.path


PluginSource = Annotated[
    Union[GitHubSource, UrlSource, RelativeSource],
    Field(discriminator="kind"),
]
AnyPluginSource = Union[GitHubSource, UrlSource, RelativeSource]


class MarketplaceEntry(BaseModel):
    source: PluginSource
    name: Optional[str] = None
    description: Optional[str] = None


class Marketplace(BaseModel):
    name: Optional[str] = None
    plugins: List[MarketplaceEntry] = Field(default_factory=list)


def parse_plugin_source(raw: Any) -> AnyPluginSource:
    if isinstance(raw, str):
        return RelativeSource(path=raw)
    if isinstance(raw, dict):
        for key in ("github", "repo"):
            value = raw.get(key)
            if isinstance(value, str):
                return GitHubSource(repo=value)
        url = raw.get("url")
        if isinstance(url, str):
            return UrlSource(url=url)
    raise ParseError(f"Unrecognized plugin source: {raw!r}")


def source_path(source: AnyPluginSource) -> str:
    """Return the candidate path a source contributes inside its archive.

    Relative paths lose a leading ``./`` and any trailing slash.
    """
    if isinstance(source, RelativeSource):
        path = source.path.removeprefix("./").rstrip("/")
        return "" if path == "." else path
    if isinstance(source, GitHubSource):
        return source.repo
    return source.url


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_marketplace(text: str) -> Marketplace:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid marketplace JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("Marketplace must be a JSON object")
    raw_plugins = data.get("plugins")
    if not isinstance(raw_plugins, list):
        raise ParseError("Marketplace missing 'plugins' array")

    entries: List[MarketplaceEntry] = []
    for index, raw_entry in enumerate(raw_plugins):
        if not isinstance(raw_entry, dict) or "source" not in raw_entry:
            raise ParseError(f"plugins[{index}] must be an object with a 'source'")
        entries.append(
            MarketplaceEntry(
                source=parse_plugin_source(raw_entry["source"]),
                name=_optional_str(raw_entry.get("name")),
                description=_optional_str(raw_entry.get("description")),
            )
        )
    return Marketplace(name=_optional_str(data.get("name")), plugins=entries)


__all__ = [
    "AnyPluginSource",
    "GitHubSource",
    "Marketplace",
    "MarketplaceEntry",
    "PluginSource",
    "RelativeSource",
    "UrlSource",
    "parse_marketplace",
    "parse_plugin_source",
    "source_path",
]
