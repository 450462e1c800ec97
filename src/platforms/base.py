"""
Abstract Base Class for Pull Request Platforms.

Defines the interface the balancer uses to read and mutate pull requests.
All platform clients (GitHub, Azure DevOps, etc.) should implement this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from platforms.models import (
    Collaborator,
    Comment,
    PullRequest,
    RepositoryMetadata,
)
from storage.models import Repository, Reviewer


class PullRequestPlatform(ABC):
    """
    Abstract base class for pull request platforms.

    Implementations should handle:
    - Authentication with the platform
    - Pagination of list endpoints
    - Transformation of platform objects to common models
    - Raising `TransportError` when a call fails
    """

    @abstractmethod
    async def list_open_pull_requests(self, repository: Repository) -> List[PullRequest]:
        """
        List the open pull requests of a repository.

        Args:
            repository (Repository): Tracked repository.

        Returns:
            List[PullRequest]: Open pull requests.

        Raises:
            TransportError: If the platform call fails.
        """
        pass

    @abstractmethod
    async def list_comments(self, repository: Repository, number: int) -> List[Comment]:
        """Return every comment of the pull request discussion."""
        pass

    @abstractmethod
    async def add_reviewer(
        self, repository: Repository, number: int, reviewer: Reviewer, required: bool
    ) -> None:
        pass

    @abstractmethod
    async def post_comment(self, repository: Repository, number: int, body: str) -> None:
        pass

    @abstractmethod
    async def list_changed_paths(self, repository: Repository, number: int) -> List[str]:
        """Return the repository-relative paths changed by the pull request."""
        pass

    @abstractmethod
    async def get_file_contents(
        self, repository: Repository, path: str, ref: str
    ) -> Optional[str]:
        """
        Read a text file at the given ref.

        Returns:
            Optional[str]: File contents, or None if the file does not exist.
        """
        pass

    @abstractmethod
    async def get_repository_metadata(self, repository: Repository) -> RepositoryMetadata:
        pass

    @abstractmethod
    async def list_collaborators(self, repository: Repository) -> List[Collaborator]:
        pass
