"""
Repository Reconciliation Module.

Refreshes a tracked repository from the pull request platform: its names and
default branch, and a reviewer record for every collaborator so that new
people enter the least-recently-used rotation.
"""

import asyncio
from datetime import datetime, timezone

from config import logger
from platforms.base import PullRequestPlatform
from storage.base import RepositoryStore, ReviewerStore
from storage.models import Repository, Reviewer


class Reconciler:
    """Brings repository and reviewer records in line with the platform."""

    def __init__(
        self,
        platform: PullRequestPlatform,
        repository_store: RepositoryStore,
        reviewer_store: ReviewerStore,
    ):
        self.platform = platform
        self.repository_store = repository_store
        self.reviewer_store = reviewer_store

    async def reconcile(self, repository: Repository) -> Repository:
        """
        Refresh a repository and register its collaborators as reviewers.

        Existing reviewer records, including their last reviewed time, are
        left untouched.

        Returns:
            Repository: The refreshed and saved repository record.
        """
        metadata = await self.platform.get_repository_metadata(repository)
        collaborators = await self.platform.list_collaborators(repository)

        added = 0
        for collaborator in collaborators:
            known = await asyncio.to_thread(
                self.reviewer_store.get_reviewer_by_alias, collaborator.alias
            )
            if known is not None:
                continue
            await asyncio.to_thread(
                self.reviewer_store.save_reviewer,
                Reviewer(platform_id=collaborator.platform_id, alias=collaborator.alias),
            )
            added += 1

        refreshed = repository.model_copy(
            update={
                "project_name": metadata.project_name,
                "name": metadata.name,
                "default_branch": metadata.default_branch,
                "last_reconciled": datetime.now(timezone.utc),
            }
        )
        await asyncio.to_thread(self.repository_store.save_repository, refreshed)

        logger.info(
            {
                "message": "Reconciled repository",
                "repository": refreshed.full_name,
                "default_branch": refreshed.default_branch,
                "collaborators": len(collaborators),
                "reviewers_added": added,
            }
        )
        return refreshed
