"""
Abstract Base Classes for Balancer Stores.

Defines the storage contracts the balancer core consumes. Any backend
(JSON files, a document database, ...) can be plugged in as long as
`ReviewerStore.pop_least_recently_used` stays atomic across every process
sharing the backend.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from storage.models import Repository, Reviewer, Team


class ReviewerStore(ABC):
    """Owns reviewer records and the "last reviewed" fairness clock."""

    @abstractmethod
    def pop_least_recently_used(self, candidates: Iterable[str]) -> Optional[Reviewer]:
        """
        Select the candidate reviewed least recently and stamp it with now.

        Selection and stamping happen as one atomic operation.

        Args:
            candidates (Iterable[str]): Reviewer aliases eligible for this slot.

        Returns:
            Optional[Reviewer]: The selected reviewer with its updated timestamp,
                or None when no candidate is known to the store.
        """
        pass

    @abstractmethod
    def get_reviewer_by_platform_id(self, platform_id: str) -> Optional[Reviewer]:
        pass

    @abstractmethod
    def get_reviewer_by_alias(self, alias: str) -> Optional[Reviewer]:
        pass

    @abstractmethod
    def save_reviewer(self, reviewer: Reviewer) -> None:
        pass

    @abstractmethod
    def list_reviewers(self) -> List[Reviewer]:
        pass


class TeamStore(ABC):
    """Read access to team rosters."""

    @abstractmethod
    def get_team(self, name: str) -> Optional[Team]:
        """Return the team with the given name, or None if it is not registered."""
        pass

    @abstractmethod
    def save_team(self, team: Team) -> None:
        pass


class RepositoryStore(ABC):
    """Tracked repositories and their reconciliation state."""

    @abstractmethod
    def list_repositories(self) -> List[Repository]:
        pass

    @abstractmethod
    def list_enabled_repositories(self) -> List[Repository]:
        pass

    @abstractmethod
    def save_repository(self, repository: Repository) -> None:
        pass
