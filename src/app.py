"""
Main Application Entry Point.

This module serves as the primary entry point for the reviewer balancer.
It wires the configured collaborators together:
- GitHub platform client
- Reviewer, team and repository stores
- Pull request filters and reviewer triggers
- Balancing cycles, once or on a fixed interval

Failed cycles are logged; when running on an interval the next cycle is the retry.
"""

import asyncio
from datetime import timedelta

from config import settings, logger
from balancer.auto_reviewer import BalancerOptions
from balancer.filters import filters_from_names
from balancer.manager import Manager
from balancer.triggers import triggers_from_names
from platforms.base import PullRequestPlatform
from platforms.github_platform import GitHubPlatform
from storage.repository_store import JsonRepositoryStore
from storage.reviewer_store import JsonReviewerStore
from storage.team_store import JsonTeamStore


def build_manager() -> Manager:
    """
    Build a balancing manager from application settings.

    Returns:
        Manager: Manager over the configured stores and GitHub platform.

    Raises:
        KeyError: If a configured filter or trigger name is unknown.
    """
    logger.debug("initializing github platform...")
    platform: PullRequestPlatform = GitHubPlatform(
        settings.github_token.get_secret_value(),
        settings.github_base_url,
    )

    logger.debug("initializing stores...")
    repository_store = JsonRepositoryStore(settings.data_dir)
    reviewer_store = JsonReviewerStore(settings.data_dir)
    team_store = JsonTeamStore(settings.data_dir)

    options = BalancerOptions(
        filters=filters_from_names(settings.filters),
        triggers=triggers_from_names(settings.triggers),
    )

    return Manager(
        platform,
        repository_store,
        reviewer_store,
        team_store,
        options=options,
        bot_identifier=settings.bot_identifier,
        ownership_file_name=settings.ownership_file_name,
        reconcile_period=timedelta(hours=settings.reconcile_period_hours),
    )


async def main() -> None:
    """
    Execute balancing cycles.

    Runs a single cycle when `run_interval_seconds` is 0, otherwise runs a
    cycle every `run_interval_seconds` until cancelled.

    Raises:
        BalancerError: If a single-run cycle fails.
    """
    manager = build_manager()

    if settings.run_interval_seconds <= 0:
        await manager.run()
        logger.info("application finished")
        return

    while True:
        try:
            await manager.run()
        except Exception as e:
            logger.error({"message": "Balancing cycle failed", "error": str(e)})
        await asyncio.sleep(settings.run_interval_seconds)


if __name__ == "__main__":
    logger.info("Starting application ...")
    asyncio.run(main())
