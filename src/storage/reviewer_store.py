"""
Reviewer Storage Module.

JSON-file backed reviewer store. Holds one record per reviewer alias and the
"last reviewed" timestamp the selector uses for least-recently-used fairness.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from config import logger
from storage.base import ReviewerStore
from storage.json_document import JsonDocument
from storage.models import Reviewer

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _lru_key(reviewer: Reviewer):
    last_reviewed = reviewer.last_reviewed or _OLDEST
    if last_reviewed.tzinfo is None:
        last_reviewed = last_reviewed.replace(tzinfo=timezone.utc)
    return (last_reviewed, reviewer.alias)


class JsonReviewerStore(ReviewerStore):
    """
    Reviewer store persisted as `reviewers.json` under the data directory.
    """

    def __init__(self, data_dir: str, file_name: str = "reviewers.json"):
        """Initialize the reviewer store.

        Args:
            data_dir (str): Base directory for store documents.
            file_name (str): Name of the reviewer document.
        """
        self.document = JsonDocument(Path(data_dir) / file_name)

    def pop_least_recently_used(self, candidates: Iterable[str]) -> Optional[Reviewer]:
        aliases = set(candidates)
        if not aliases:
            return None

        with self.document.transaction() as data:
            known = [
                Reviewer.model_validate(data[alias]) for alias in aliases if alias in data
            ]
            if not known:
                logger.debug(
                    {
                        "message": "No stored reviewer matches candidates",
                        "candidates": sorted(aliases),
                    }
                )
                return None

            reviewer = min(known, key=_lru_key)
            reviewer.last_reviewed = datetime.now(timezone.utc)
            data[reviewer.alias] = reviewer.model_dump(mode="json")

        logger.debug(
            {
                "message": "Popped least recently used reviewer",
                "reviewer": reviewer.alias,
                "candidates": sorted(aliases),
            }
        )
        return reviewer

    def get_reviewer_by_platform_id(self, platform_id: str) -> Optional[Reviewer]:
        for item in self.document.read().values():
            if item.get("platform_id") == platform_id:
                return Reviewer.model_validate(item)
        return None

    def get_reviewer_by_alias(self, alias: str) -> Optional[Reviewer]:
        item = self.document.read().get(alias)
        return Reviewer.model_validate(item) if item else None

    def save_reviewer(self, reviewer: Reviewer) -> None:
        with self.document.transaction() as data:
            data[reviewer.alias] = reviewer.model_dump(mode="json")

    def list_reviewers(self) -> List[Reviewer]:
        return [Reviewer.model_validate(item) for item in self.document.read().values()]
