"""
Multi-Repository Balancing Module.

Runs one balancing cycle over every enabled repository: reconcile the
repository when its metadata is stale, then balance its open pull requests.
Repositories are processed one after another.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from balancer.auto_reviewer import AutoReviewer, BalanceOutcome, BalancerOptions
from balancer.idempotency import DEFAULT_BOT_IDENTIFIER
from balancer.reconcile import Reconciler
from config import logger
from platforms.base import PullRequestPlatform
from storage.base import RepositoryStore, ReviewerStore, TeamStore
from storage.models import Repository

DEFAULT_RECONCILE_PERIOD = timedelta(hours=24)


class Manager:
    """
    Coordinates reviewer balancing across all enabled repositories.

    The enabled repository list is read from the repository store at the start
    of every cycle, so enabling or disabling a repository takes effect on the
    next run.

    Attributes:
        platform (PullRequestPlatform): Pull request platform client.
        repository_store (RepositoryStore): Tracked repositories.
        reviewer_store (ReviewerStore): Reviewer records and fairness clock.
        team_store (TeamStore): Team rosters.
        reconciler (Reconciler): Refreshes stale repositories.
        reconcile_period (timedelta): Maximum age of repository metadata.
    """

    def __init__(
        self,
        platform: PullRequestPlatform,
        repository_store: RepositoryStore,
        reviewer_store: ReviewerStore,
        team_store: TeamStore,
        options: Optional[BalancerOptions] = None,
        bot_identifier: str = DEFAULT_BOT_IDENTIFIER,
        ownership_file_name: str = "owners.txt",
        reconcile_period: timedelta = DEFAULT_RECONCILE_PERIOD,
        reconciler: Optional[Reconciler] = None,
    ):
        self.platform = platform
        self.repository_store = repository_store
        self.reviewer_store = reviewer_store
        self.team_store = team_store
        self.options = options
        self.bot_identifier = bot_identifier
        self.ownership_file_name = ownership_file_name
        self.reconcile_period = reconcile_period
        self.reconciler = reconciler or Reconciler(platform, repository_store, reviewer_store)

    def needs_reconcile(self, repository: Repository, now: Optional[datetime] = None) -> bool:
        if repository.last_reconciled is None:
            return True

        now = now or datetime.now(timezone.utc)
        last_reconciled = repository.last_reconciled
        if last_reconciled.tzinfo is None:
            last_reconciled = last_reconciled.replace(tzinfo=timezone.utc)
        return last_reconciled + self.reconcile_period < now

    def _auto_reviewer(self, repository: Repository) -> AutoReviewer:
        return AutoReviewer(
            self.platform,
            repository,
            self.reviewer_store,
            self.team_store,
            options=self.options,
            bot_identifier=self.bot_identifier,
            ownership_file_name=self.ownership_file_name,
        )

    async def run(self) -> Dict[str, List[BalanceOutcome]]:
        """
        Run one balancing cycle over all enabled repositories.

        Returns:
            Dict[str, List[BalanceOutcome]]: Outcomes keyed by repository full name.

        Raises:
            BalancerError: The first repository failure; later repositories are
                not processed in this cycle.
        """
        results = {}
        repositories = await asyncio.to_thread(self.repository_store.list_enabled_repositories)
        for repository in repositories:
            try:
                if self.needs_reconcile(repository):
                    logger.info(
                        {"message": "Reconciling repository", "repository": repository.full_name}
                    )
                    repository = await self.reconciler.reconcile(repository)

                logger.info(
                    {"message": "Starting balancing cycle", "repository": repository.full_name}
                )
                outcomes = await self._auto_reviewer(repository).run()
                results[repository.full_name] = outcomes
                logger.info(
                    {
                        "message": "Finished balancing cycle",
                        "repository": repository.full_name,
                        "pull_requests": len(outcomes),
                    }
                )

            except Exception as e:
                logger.error(
                    {
                        "message": "Balancing cycle failed",
                        "repository": repository.full_name,
                        "error": str(e),
                    }
                )
                raise

        return results
