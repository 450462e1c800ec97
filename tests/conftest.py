"""
Shared fixtures for the balancer test suite.

Settings are read at import time of `config`, so the environment they need is
prepared here before any test module imports application code.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

os.environ.setdefault("GITHUB_TOKEN", "test-token")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="crbalancer-logs-"))

from platforms.base import PullRequestPlatform  # noqa: E402
from platforms.models import PullRequest  # noqa: E402
from storage.models import Repository, Reviewer, Team  # noqa: E402
from storage.repository_store import JsonRepositoryStore  # noqa: E402
from storage.reviewer_store import JsonReviewerStore  # noqa: E402
from storage.team_store import JsonTeamStore  # noqa: E402

NOW = datetime.now(timezone.utc)


@pytest.fixture
def make_pr():
    """Factory for pull requests targeting the default branch."""

    def _make_pr(number: int = 1, **overrides) -> PullRequest:
        fields = dict(
            number=number,
            title=f"Add feature {number}",
            is_draft=False,
            target_branch="main",
            default_branch="main",
            author_id="id-bob",
            author_alias="bob",
            repository_id="test/repo",
            url=f"https://github.com/test/repo/pull/{number}",
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(overrides)
        return PullRequest(**fields)

    return _make_pr


@pytest.fixture
def repository():
    """A tracked, recently reconciled repository."""
    return Repository(
        id="test/repo",
        project_name="test",
        name="repo",
        enabled=True,
        last_reconciled=NOW,
        default_branch="main",
    )


@pytest.fixture
def reviewer_store(tmp_path):
    """Reviewer store seeded with alice, bob, carol and dave, oldest first."""
    store = JsonReviewerStore(str(tmp_path))
    for offset, alias in enumerate(["alice", "bob", "carol", "dave"]):
        store.save_reviewer(
            Reviewer(
                platform_id=f"id-{alias}",
                alias=alias,
                last_reviewed=NOW - timedelta(days=10 - offset),
            )
        )
    return store


@pytest.fixture
def team_store(tmp_path):
    """Team store with a single "Core Team" roster."""
    store = JsonTeamStore(str(tmp_path))
    store.save_team(Team(name="Core Team", members={"alice", "carol", "dave"}))
    return store


@pytest.fixture
def repository_store(tmp_path):
    return JsonRepositoryStore(str(tmp_path))


@pytest.fixture
def ownership_files():
    """Ownership file contents by path; tests add entries as needed."""
    return {"owners.txt": "alice\nbob\n"}


@pytest.fixture
def mock_platform(make_pr, ownership_files):
    """Mock pull request platform with one open pull request by bob."""
    platform = Mock(spec=PullRequestPlatform)
    platform.list_open_pull_requests = AsyncMock(return_value=[make_pr()])
    platform.list_comments = AsyncMock(return_value=[])
    platform.add_reviewer = AsyncMock(return_value=None)
    platform.post_comment = AsyncMock(return_value=None)
    platform.list_changed_paths = AsyncMock(return_value=["src/app.py"])
    platform.get_file_contents = AsyncMock(
        side_effect=lambda repository, path, ref: ownership_files.get(path)
    )
    platform.get_repository_metadata = AsyncMock()
    platform.list_collaborators = AsyncMock(return_value=[])
    return platform
