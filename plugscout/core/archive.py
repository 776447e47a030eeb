"""Fetching and reading repository archives.

GitHub archives nest every entry under one synthetic top-level directory
(``repo-<ref>/``). All path computations in discovery are made relative to
that root prefix.
"""

from __future__ import annotations

import io
import tarfile
import zipfile
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import httpx

from plugscout.core.config import DiscoveryConfig, load_config
from plugscout.core.errors import NetworkError, NotFoundError, ParseError
from plugscout.utils.log import get_logger

logger = get_logger()

_ZIP_MAGIC = (b"PK\x03\x04", b"PK\x05\x06")
_GZIP_MAGIC = b"\x1f\x8b"


@dataclass(frozen=True)
class Archive:
    """Read-only view over the file entries of a downloaded archive.

    ``entries`` preserves the archive's listing order. Directory entries are
    not included.
    """

    entries: Mapping[str, bytes]

    @classmethod
    def from_bytes(cls, data: bytes) -> "Archive":
        if data.startswith(_ZIP_MAGIC):
            return cls(MappingProxyType(_read_zip(data)))
        if data.startswith(_GZIP_MAGIC):
            return cls(MappingProxyType(_read_tar(data)))
        raise ParseError("Unrecognized archive format (expected zip or tar.gz)")

    @classmethod
    def from_files(cls, files: Mapping[str, bytes | str]) -> "Archive":
        """Build an archive directly from ``path -> content`` pairs."""
        entries: Dict[str, bytes] = {}
        for name, content in files.items():
            entries[name] = content.encode("utf-8") if isinstance(content, str) else content
        return cls(MappingProxyType(entries))

    def __len__(self) -> int:
        return len(self.entries)


def _read_zip(data: bytes) -> Dict[str, bytes]:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            return {
                info.filename: archive.read(info)
                for info in archive.infolist()
                if not info.is_dir()
            }
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as exc:
        raise ParseError(f"Invalid zip archive: {exc}") from exc


def _read_tar(data: bytes) -> Dict[str, bytes]:
    entries: Dict[str, bytes] = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                entries[member.name] = handle.read()
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise ParseError(f"Invalid tar archive: {exc}") from exc
    return entries


def fetch_bytes(
    url: str,
    *,
    config: Optional[DiscoveryConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """Download ``url`` and return the response body.

    Raises ``NetworkError`` on transport failures, HTTP error statuses and
    bodies larger than ``config.max_archive_bytes``.
    """
    cfg = config or load_config()
    chunks: List[bytes] = []
    total = 0
    logger.debug("[archive] Fetching archive", extra={"url": url})
    try:
        with httpx.Client(
            timeout=cfg.timeout_seconds,
            follow_redirects=True,
            headers=cfg.request_headers(),
            transport=transport,
        ) as client:
            with client.stream("GET", url) as response:
                if response.status_code >= 400:
                    raise NetworkError(
                        f"GET {url} failed with HTTP {response.status_code}",
                        url=url,
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes():
                    total += len(chunk)
                    if total > cfg.max_archive_bytes:
                        raise NetworkError(
                            f"Archive at {url} exceeds {cfg.max_archive_bytes} bytes",
                            url=url,
                            status_code=response.status_code,
                        )
                    chunks.append(chunk)
    except httpx.HTTPError as exc:
        raise NetworkError(f"GET {url} failed: {type(exc).__name__}: {exc}", url=url) from exc
    logger.debug("[archive] Fetched archive", extra={"url": url, "bytes": total})
    return b"".join(chunks)


def list_files(archive: Archive, suffix: str) -> List[str]:
    """Return archive paths ending with ``suffix``, in listing order."""
    return [name for name in archive.entries if name.endswith(suffix)]


def extract_file(archive: Archive, path: str) -> str:
    """Return the UTF-8 text of the entry at ``path``."""
    try:
        content = archive.entries[path]
    except KeyError:
        raise NotFoundError(path) from None
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path} is not valid UTF-8: {exc}") from exc


def has_file(archive: Archive, path: str) -> bool:
    return path in archive.entries


def archive_root_prefix(archive: Archive) -> str:
    """Return the top-level directory shared by every entry, with its slash.

    An archive whose first entry sits at the top level has an empty prefix.
    """
    for name in archive.entries:
        head, sep, _ = name.partition("/")
        return f"{head}{sep}" if sep else ""
    return ""


__all__ = [
    "Archive",
    "archive_root_prefix",
    "extract_file",
    "fetch_bytes",
    "has_file",
    "list_files",
]
