"""
Repository Reviewer Balancing Module.

Balances the open pull requests of one repository. Each pull request moves
through:

    fetched -> filtered? -> already balanced? -> owners resolved
    -> reviewers selected -> reviewers assigned -> comment posted
    -> triggers fired

A slot that finds no reviewer stays empty and the pull request still gets its
comment and triggers. Anything failing before the comment is posted aborts the
repository run and propagates. Trigger failures are logged only.

Store calls may wait on a file lock held by another engine, so they run in
worker threads where cancellation and timeouts of the run can reach them.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from balancer.filters import DEFAULT_FILTERS, Filter, should_filter
from balancer.idempotency import (
    DEFAULT_BOT_IDENTIFIER,
    build_reviewer_comment,
    is_already_balanced,
)
from balancer.ownership import OwnershipResolver
from balancer.selector import ReviewerSelection, ReviewerSelector
from balancer.triggers import ReviewerTrigger, fire_triggers
from config import logger
from platforms.base import PullRequestPlatform
from platforms.models import PullRequest
from storage.base import ReviewerStore, TeamStore
from storage.models import Repository, Reviewer, get_reviewers_alias


class BalanceStatus(Enum):
    """
    Final state of a pull request after a balancing attempt.

    Attributes:
        FILTERED: Excluded by the filter pipeline
        ALREADY_BALANCED: Discussion already carries the bot signature
        BALANCED: Reviewers assigned, possibly none, and comment posted
    """

    FILTERED = "filtered"
    ALREADY_BALANCED = "already_balanced"
    BALANCED = "balanced"


class BalanceOutcome(BaseModel):
    """Result of balancing one pull request."""

    number: int
    status: BalanceStatus
    required: List[Reviewer] = Field(default_factory=list)
    optional: List[Reviewer] = Field(default_factory=list)


@dataclass
class BalancerOptions:
    """
    Pluggable policies of a balancer.

    Attributes:
        filters: Pull request filters. None selects the default filters; any
            list, including an empty one, replaces them.
        triggers: Reviewer triggers fired after a successful assignment.
    """

    filters: Optional[List[Filter]] = None
    triggers: List[ReviewerTrigger] = field(default_factory=list)


class AutoReviewer:
    """
    Adds least-recently-used reviewers to the open pull requests of a repository.

    Attributes:
        platform (PullRequestPlatform): Pull request platform client.
        repository (Repository): Repository being balanced.
        reviewer_store (ReviewerStore): Reviewer records and fairness clock.
        resolver (OwnershipResolver): Ownership file and team resolution.
        selector (ReviewerSelector): Least-recently-used selection.
        options (BalancerOptions): Filters and triggers.
        bot_identifier (str): Signature embedded in balancer comments.
    """

    def __init__(
        self,
        platform: PullRequestPlatform,
        repository: Repository,
        reviewer_store: ReviewerStore,
        team_store: TeamStore,
        options: Optional[BalancerOptions] = None,
        bot_identifier: str = DEFAULT_BOT_IDENTIFIER,
        ownership_file_name: str = "owners.txt",
    ):
        options = options or BalancerOptions()
        if options.filters is None:
            options = BalancerOptions(filters=list(DEFAULT_FILTERS), triggers=options.triggers)

        self.platform = platform
        self.repository = repository
        self.reviewer_store = reviewer_store
        self.resolver = OwnershipResolver(team_store, ownership_file_name)
        self.selector = ReviewerSelector(reviewer_store)
        self.options = options
        self.bot_identifier = bot_identifier

    async def run(self) -> List[BalanceOutcome]:
        """
        Balance every open pull request of the repository, in order.

        Returns:
            List[BalanceOutcome]: One outcome per open pull request.

        Raises:
            BalancerError: If a pull request fails before its comment is posted.
        """
        pull_requests = await self.platform.list_open_pull_requests(self.repository)

        outcomes = []
        for pr in pull_requests:
            if should_filter(pr, self.options.filters):
                logger.debug(
                    {
                        "message": "Pull request filtered",
                        "repository": self.repository.full_name,
                        "pull_request": pr.number,
                    }
                )
                outcomes.append(BalanceOutcome(number=pr.number, status=BalanceStatus.FILTERED))
                continue

            try:
                outcomes.append(await self.balance_review(pr))
            except Exception as e:
                logger.error(
                    {
                        "message": "Failed to balance reviewers",
                        "repository": self.repository.full_name,
                        "pull_request": pr.number,
                        "error": str(e),
                    }
                )
                raise

        return outcomes

    async def balance_review(self, pr: PullRequest) -> BalanceOutcome:
        """Balance a single pull request that passed the filters."""
        if await is_already_balanced(self.platform, self.repository, pr, self.bot_identifier):
            return BalanceOutcome(number=pr.number, status=BalanceStatus.ALREADY_BALANCED)

        selection, no_notify = await self.get_reviewers(pr)
        if not selection.required and not selection.optional:
            logger.warning(
                {
                    "message": "No reviewer candidates for pull request",
                    "repository": self.repository.full_name,
                    "pull_request": pr.number,
                }
            )

        await self.add_reviewers(pr.number, selection.required, selection.optional)

        comment = build_reviewer_comment(selection.required, self.bot_identifier)
        try:
            await self.platform.post_comment(self.repository, pr.number, comment)
        except Exception:
            # Reviewers stay assigned; without the comment the next cycle may assign again.
            logger.error(
                {
                    "message": "Reviewers assigned but balancer comment failed",
                    "repository": self.repository.full_name,
                    "pull_request": pr.number,
                    "required": get_reviewers_alias(selection.required),
                }
            )
            raise

        fire_triggers(
            self.options.triggers,
            [r for r in selection.required if r.alias not in no_notify],
            [r for r in selection.optional if r.alias not in no_notify],
            pr.url,
        )

        logger.info(
            {
                "message": "Successfully added reviewers",
                "repository": self.repository.full_name,
                "pull_request": pr.number,
                "required": get_reviewers_alias(selection.required),
                "optional": get_reviewers_alias(selection.optional),
            }
        )
        return BalanceOutcome(
            number=pr.number,
            status=BalanceStatus.BALANCED,
            required=selection.required,
            optional=selection.optional,
        )

    async def get_reviewers(self, pr: PullRequest) -> Tuple[ReviewerSelection, Set[str]]:
        """
        Resolve ownership for a pull request and select its reviewers.

        Returns:
            Tuple[ReviewerSelection, Set[str]]: Selected reviewers and the
                owners that must not be notified.
        """
        groups = await self.resolver.get_reviewer_groups(self.platform, self.repository, pr)

        excluded = {pr.author_alias}
        creator = await asyncio.to_thread(
            self.reviewer_store.get_reviewer_by_platform_id, pr.author_id
        )
        if creator is not None:
            excluded.add(creator.alias)

        pools = await asyncio.to_thread(self.resolver.resolve, groups, excluded)
        return await self.selector.select(pools), pools.no_notify

    async def add_reviewers(
        self, number: int, required: List[Reviewer], optional: List[Reviewer]
    ) -> None:
        for reviewer in required:
            await self.platform.add_reviewer(self.repository, number, reviewer, required=True)
        for reviewer in optional:
            await self.platform.add_reviewer(self.repository, number, reviewer, required=False)
