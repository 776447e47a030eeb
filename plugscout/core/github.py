"""GitHub repository references.

A reference is parsed from one of:

- ``https://github.com/owner/repo`` (optionally ``.git``, ``/tree/<ref>``)
- ``git@github.com:owner/repo.git``
- ``github:owner/repo`` or bare ``owner/repo``, each with an optional ``@ref``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from plugscout.core.errors import ParseError

DEFAULT_REF = "HEAD"
GITHUB_WEB_ROOT = "https://github.com"
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_URL_PREFIXES = (
    "https://github.com/",
    "http://github.com/",
    "https://www.github.com/",
    "http://www.github.com/",
    "github.com/",
)
_SSH_PREFIX = "git@github.com:"


@dataclass(frozen=True)
class GitHubRef:
    """Owner, repository and ref of a GitHub repository."""

    owner: str
    repo: str
    ref: str = DEFAULT_REF

    @classmethod
    def parse(cls, raw: str) -> "GitHubRef":
        source = raw.strip()
        if not source:
            raise ParseError("Empty repository reference")

        for prefix in _URL_PREFIXES:
            if source.startswith(prefix):
                return cls._from_url_path(raw, source[len(prefix) :])
        if source.startswith(_SSH_PREFIX):
            owner, repo = _split_owner_repo(raw, source[len(_SSH_PREFIX) :].strip("/"))
            return cls(owner=owner, repo=repo)
        if source.startswith(("http://", "https://")):
            raise ParseError(f"Not a GitHub URL: {raw!r}")

        source = source.removeprefix("github:")
        ref: Optional[str] = None
        if "@" in source:
            source, ref = source.split("@", 1)
            if not ref:
                raise ParseError(f"Empty ref in repository reference: {raw!r}")
        owner, repo = _split_owner_repo(raw, source)
        return cls(owner=owner, repo=repo, ref=ref or DEFAULT_REF)

    @classmethod
    def _from_url_path(cls, raw: str, remainder: str) -> "GitHubRef":
        remainder = remainder.split("?", 1)[0].split("#", 1)[0].strip("/")
        parts = remainder.split("/")
        if len(parts) < 2:
            raise ParseError(f"GitHub URL is missing owner or repository: {raw!r}")
        owner, repo = _split_owner_repo(raw, "/".join(parts[:2]))
        rest = parts[2:]
        if not rest:
            return cls(owner=owner, repo=repo)
        if rest[0] == "tree" and len(rest) > 1:
            return cls(owner=owner, repo=repo, ref="/".join(rest[1:]))
        raise ParseError(f"Unrecognized GitHub URL: {raw!r}")

    @property
    def owner_repo(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def is_default_ref(self) -> bool:
        return self.ref == DEFAULT_REF

    def archive_url(self) -> str:
        """Return the zip download URL for this reference."""
        return f"{GITHUB_WEB_ROOT}/{self.owner}/{self.repo}/archive/{self.ref}.zip"

    def web_url(self) -> str:
        if self.is_default_ref:
            return f"{GITHUB_WEB_ROOT}/{self.owner}/{self.repo}"
        return f"{GITHUB_WEB_ROOT}/{self.owner}/{self.repo}/tree/{self.ref}"

    def __str__(self) -> str:
        if self.is_default_ref:
            return self.owner_repo
        return f"{self.owner_repo}@{self.ref}"


def _split_owner_repo(raw: str, value: str) -> Tuple[str, str]:
    parts = value.split("/")
    if len(parts) != 2:
        raise ParseError(f"Expected 'owner/repo', got {raw!r}")
    owner, repo = parts
    repo = repo.removesuffix(".git")
    if not _NAME_RE.match(owner) or not _NAME_RE.match(repo):
        raise ParseError(f"Invalid owner or repository name in {raw!r}")
    return owner, repo


__all__ = ["DEFAULT_REF", "GitHubRef"]
