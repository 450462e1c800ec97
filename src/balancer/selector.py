"""
Reviewer Selection Module.

Picks at most one reviewer from the owner pool and at most one from the team
member pool, least recently used first. The fairness clock belongs to the
reviewer store; nothing here caches it between calls.
"""

import asyncio
from typing import List, Optional, Set

from pydantic import BaseModel, Field

from balancer.ownership import CandidatePools
from config import logger
from storage.base import ReviewerStore
from storage.models import Reviewer


class ReviewerSelection(BaseModel):
    """Reviewers picked for one pull request."""

    required: List[Reviewer] = Field(default_factory=list)
    # Never filled by the current policy; carried through for callers and triggers.
    optional: List[Reviewer] = Field(default_factory=list)


class ReviewerSelector:
    """Least-recently-used reviewer selection over resolved candidate pools."""

    def __init__(self, reviewer_store: ReviewerStore):
        self.reviewer_store = reviewer_store

    async def _pop(self, slot: str, candidates: Set[str]) -> Optional[Reviewer]:
        # The store may block on a lock held by another engine.
        reviewer = await asyncio.to_thread(
            self.reviewer_store.pop_least_recently_used, sorted(candidates)
        )
        if reviewer is None and candidates:
            logger.info(
                {
                    "message": "No stored reviewer for slot",
                    "slot": slot,
                    "candidates": sorted(candidates),
                }
            )
        return reviewer

    async def select(self, pools: CandidatePools) -> ReviewerSelection:
        """
        Select the required reviewers for a pull request.

        Args:
            pools (CandidatePools): Resolved owner and team member pools.

        Returns:
            ReviewerSelection: The owner slot reviewer followed by the team slot
                reviewer, each present only if its pool produced one.
        """
        selection = ReviewerSelection()

        owner = await self._pop("owner", pools.required_owners)
        if owner is not None:
            selection.required.append(owner)

        team_member = await self._pop("team", pools.required_team_members)
        if team_member is not None:
            selection.required.append(team_member)

        return selection
