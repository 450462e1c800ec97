"""
Repository Storage Module.

This module handles the persistent storage of the repositories tracked by the
balancer: which ones are enabled and when each was last reconciled against
the pull request platform.
"""

from pathlib import Path
from typing import List

from config import logger
from storage.base import RepositoryStore
from storage.json_document import JsonDocument
from storage.models import Repository


class JsonRepositoryStore(RepositoryStore):
    """
    Manages persistent storage of tracked repositories.
    Records are kept in `repositories.json`, keyed by platform repository id.
    """

    def __init__(self, data_dir: str, file_name: str = "repositories.json"):
        """Initialize the repository storage system.

        Args:
            data_dir (str): Base directory path for storing repository data.
            file_name (str): Name of the repository document.
        """
        self.document = JsonDocument(Path(data_dir) / file_name)

    def list_repositories(self) -> List[Repository]:
        """Load every tracked repository.

        Returns:
            List[Repository]: Tracked repositories sorted by full name.
        """
        repositories = [
            Repository.model_validate(item) for item in self.document.read().values()
        ]
        repositories.sort(key=lambda repo: repo.full_name)
        return repositories

    def list_enabled_repositories(self) -> List[Repository]:
        """Load the repositories the balancer should iterate.

        Returns:
            List[Repository]: Enabled repositories sorted by full name.
        """
        return [repo for repo in self.list_repositories() if repo.enabled]

    def save_repository(self, repository: Repository) -> None:
        """Insert or replace a tracked repository.

        Args:
            repository (Repository): Repository record to save.
        """
        with self.document.transaction() as data:
            data[repository.id] = repository.model_dump(mode="json")

        logger.info(
            {
                "message": "Repository saved",
                "repository": repository.full_name,
                "enabled": repository.enabled,
            }
        )
