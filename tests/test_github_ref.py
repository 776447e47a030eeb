from __future__ import annotations

import pytest

from plugscout.core.errors import ParseError
from plugscout.core.github import DEFAULT_REF, GitHubRef


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://github.com/owner/repo", GitHubRef("owner", "repo")),
        ("https://github.com/owner/repo/", GitHubRef("owner", "repo")),
        ("https://github.com/owner/repo.git", GitHubRef("owner", "repo")),
        ("http://www.github.com/owner/repo", GitHubRef("owner", "repo")),
        ("github.com/owner/repo", GitHubRef("owner", "repo")),
        ("https://github.com/owner/repo/tree/dev", GitHubRef("owner", "repo", "dev")),
        (
            "https://github.com/owner/repo/tree/feature/nested",
            GitHubRef("owner", "repo", "feature/nested"),
        ),
        ("git@github.com:owner/repo.git", GitHubRef("owner", "repo")),
        ("owner/repo", GitHubRef("owner", "repo")),
        ("owner/repo@v1.2.0", GitHubRef("owner", "repo", "v1.2.0")),
        ("github:owner/my.repo", GitHubRef("owner", "my.repo")),
        ("  owner/repo  ", GitHubRef("owner", "repo")),
    ],
)
def test_parse_accepts_urls_and_shorthand(raw: str, expected: GitHubRef) -> None:
    assert GitHubRef.parse(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "repo",
        "owner/repo/extra",
        "owner/repo@",
        "https://gitlab.com/owner/repo",
        "https://github.com/owner",
        "https://github.com/owner/repo/blob/main/README.md",
        "own er/repo",
    ],
)
def test_parse_rejects_unrecognized_input(raw: str) -> None:
    with pytest.raises(ParseError):
        GitHubRef.parse(raw)


def test_ref_defaults_to_head() -> None:
    ref = GitHubRef.parse("owner/repo")
    assert ref.ref == DEFAULT_REF
    assert ref.is_default_ref
    assert str(ref) == "owner/repo"


def test_archive_url_uses_ref() -> None:
    assert GitHubRef.parse("owner/repo").archive_url() == (
        "https://github.com/owner/repo/archive/HEAD.zip"
    )
    assert GitHubRef.parse("owner/repo@v2").archive_url() == (
        "https://github.com/owner/repo/archive/v2.zip"
    )


def test_web_url_and_str_include_non_default_ref() -> None:
    ref = GitHubRef.parse("owner/repo@dev")
    assert ref.web_url() == "https://github.com/owner/repo/tree/dev"
    assert str(ref) == "owner/repo@dev"
