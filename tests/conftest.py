"""Pytest configuration and fixtures for all tests."""

from __future__ import annotations

import io
import json
import zipfile
from typing import Callable, Dict, List, Union

import pytest

FileMap = Dict[str, Union[str, dict, list]]


def build_zip(files: FileMap, root: str = "repo-main/") -> bytes:
    """Build a GitHub-style zip archive with every file nested under ``root``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        if root:
            archive.writestr(root, "")
        for name, content in files.items():
            if not isinstance(content, str):
                content = json.dumps(content)
            archive.writestr(f"{root}{name}", content)
    return buffer.getvalue()


class RecordingFetcher:
    """Serve a fixed archive and remember which URLs were requested."""

    def __init__(self, payload: bytes):
        self.payload = payload
        self.urls: List[str] = []

    def __call__(self, url: str) -> bytes:
        self.urls.append(url)
        return self.payload


@pytest.fixture
def zip_archive() -> Callable[..., bytes]:
    return build_zip


@pytest.fixture
def fetcher_for() -> Callable[..., RecordingFetcher]:
    def _make(files: FileMap, root: str = "repo-main/") -> RecordingFetcher:
        return RecordingFetcher(build_zip(files, root=root))

    return _make
