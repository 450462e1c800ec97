"""
Pull Request Platform Data Models.

Defines the platform-neutral views the balancer reads from a pull request
platform. Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

REF_PREFIX = "refs/heads/"


def to_ref_name(branch: str) -> str:
    """Return the fully qualified ref for a branch name."""
    if branch.startswith(REF_PREFIX):
        return branch
    return f"{REF_PREFIX}{branch}"


class PullRequest(BaseModel):
    """Read-only view of an open pull request."""

    number: int
    title: str
    is_draft: bool = False
    target_branch: str
    default_branch: str
    author_id: str
    author_alias: str
    repository_id: str
    url: str
    created_at: datetime
    updated_at: datetime

    @property
    def target_ref_name(self) -> str:
        return to_ref_name(self.target_branch)

    @property
    def default_ref_name(self) -> str:
        return to_ref_name(self.default_branch)


class Comment(BaseModel):
    """A comment in a pull request discussion."""

    body: Optional[str] = None


class Collaborator(BaseModel):
    """A platform user with access to a repository."""

    platform_id: str
    alias: str


class RepositoryMetadata(BaseModel):
    """Repository attributes refreshed during reconciliation."""

    id: str
    project_name: str
    name: str
    default_branch: str
