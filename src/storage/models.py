"""
Store Data Models.

Records owned by the reviewer, team and repository stores.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class Reviewer(BaseModel):
    """A person who can be requested as a reviewer."""

    platform_id: str
    alias: str
    last_reviewed: Optional[datetime] = None  # None sorts as least recently used


class Team(BaseModel):
    """A named roster of reviewer aliases."""

    name: str
    members: Set[str] = Field(default_factory=set)


class Repository(BaseModel):
    """A repository tracked by the balancer."""

    id: str
    project_name: str
    name: str
    enabled: bool = True
    last_reconciled: Optional[datetime] = None
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.project_name}/{self.name}"


def get_reviewers_alias(reviewers: List[Reviewer]) -> List[str]:
    """Return the aliases of the given reviewers, preserving order."""
    return [reviewer.alias for reviewer in reviewers]
