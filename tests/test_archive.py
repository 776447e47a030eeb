from __future__ import annotations

import io
import tarfile

import httpx
import pytest

from plugscout.core.archive import (
    Archive,
    archive_root_prefix,
    extract_file,
    fetch_bytes,
    has_file,
    list_files,
)
from plugscout.core.config import DiscoveryConfig
from plugscout.core.errors import NetworkError, NotFoundError, ParseError


def _tar_gz(files: dict) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def test_zip_archive_lists_files_in_order_without_directories(zip_archive) -> None:
    archive = Archive.from_bytes(
        zip_archive({"b/plugin.json": "{}", "a/plugin.json": "{}", "README.md": "hi"})
    )
    assert list_files(archive, "") == [
        "repo-main/b/plugin.json",
        "repo-main/a/plugin.json",
        "repo-main/README.md",
    ]
    assert list_files(archive, "plugin.json") == [
        "repo-main/b/plugin.json",
        "repo-main/a/plugin.json",
    ]


def test_suffix_match_is_literal_not_glob(zip_archive) -> None:
    archive = Archive.from_bytes(zip_archive({"x.md": "", "y.mdx": "", "*.md": ""}))
    assert list_files(archive, "*.md") == ["repo-main/*.md"]
    assert list_files(archive, ".md") == ["repo-main/x.md", "repo-main/*.md"]


def test_extract_file_returns_text_and_raises_not_found(zip_archive) -> None:
    archive = Archive.from_bytes(zip_archive({"README.md": "héllo"}))
    assert extract_file(archive, "repo-main/README.md") == "héllo"
    assert has_file(archive, "repo-main/README.md")
    with pytest.raises(NotFoundError) as excinfo:
        extract_file(archive, "repo-main/missing.md")
    assert excinfo.value.path == "repo-main/missing.md"


def test_tar_gz_archives_are_supported() -> None:
    archive = Archive.from_bytes(_tar_gz({"repo-v1/skills/a/SKILL.md": "x"}))
    assert archive_root_prefix(archive) == "repo-v1/"
    assert extract_file(archive, "repo-v1/skills/a/SKILL.md") == "x"


def test_unknown_archive_format_is_parse_error() -> None:
    with pytest.raises(ParseError):
        Archive.from_bytes(b"not an archive")


def test_root_prefix_comes_from_first_entry() -> None:
    archive = Archive.from_files({"owner-repo-abc123/a.txt": "", "other/b.txt": ""})
    assert archive_root_prefix(archive) == "owner-repo-abc123/"
    assert archive_root_prefix(Archive.from_files({"flat.txt": ""})) == ""
    assert archive_root_prefix(Archive.from_files({})) == ""


def test_archive_entries_are_read_only() -> None:
    archive = Archive.from_files({"r/a.txt": "x"})
    with pytest.raises(TypeError):
        archive.entries["r/b.txt"] = b"y"  # type: ignore[index]


def test_fetch_bytes_returns_body_and_sends_headers() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["user_agent"] = request.headers.get("user-agent")
        seen["authorization"] = request.headers.get("authorization")
        return httpx.Response(200, content=b"payload")

    config = DiscoveryConfig(user_agent="tests/1.0", github_token="tok")
    body = fetch_bytes(
        "https://example.test/archive.zip",
        config=config,
        transport=httpx.MockTransport(handler),
    )
    assert body == b"payload"
    assert seen == {"user_agent": "tests/1.0", "authorization": "Bearer tok"}


def test_fetch_bytes_raises_network_error_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    with pytest.raises(NetworkError) as excinfo:
        fetch_bytes("https://example.test/x.zip", config=DiscoveryConfig(), transport=transport)
    assert excinfo.value.status_code == 404
    assert excinfo.value.url == "https://example.test/x.zip"


def test_fetch_bytes_wraps_transport_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError, match="ConnectError"):
        fetch_bytes(
            "https://example.test/x.zip",
            config=DiscoveryConfig(),
            transport=httpx.MockTransport(handler),
        )


def test_fetch_bytes_enforces_size_limit() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x" * 64))
    with pytest.raises(NetworkError, match="exceeds"):
        fetch_bytes(
            "https://example.test/x.zip",
            config=DiscoveryConfig(max_archive_bytes=16),
            transport=transport,
        )
