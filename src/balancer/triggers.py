"""
Reviewer Triggers.

A reviewer trigger is called with the required reviewers, the optional
reviewers and the pull request URL after reviewers have been assigned, e.g. to
send a chat notification. A trigger signals failure by raising; failures are
logged and never undo the assignment.
"""

from typing import Callable, Dict, List, Sequence

from config import logger
from storage.models import Reviewer, get_reviewers_alias

ReviewerTrigger = Callable[[List[Reviewer], List[Reviewer], str], None]


def log_trigger(required: List[Reviewer], optional: List[Reviewer], url: str) -> None:
    logger.info(
        {
            "message": "Reviewers assigned",
            "pull_request_url": url,
            "required": get_reviewers_alias(required),
            "optional": get_reviewers_alias(optional),
        }
    )


TRIGGER_REGISTRY: Dict[str, ReviewerTrigger] = {
    "log": log_trigger,
}


def triggers_from_names(names: Sequence[str]) -> List[ReviewerTrigger]:
    """
    Look up reviewer triggers by configured name.

    Raises:
        KeyError: If a name is not registered.
    """
    unknown = [name for name in names if name not in TRIGGER_REGISTRY]
    if unknown:
        raise KeyError(f"unknown reviewer triggers: {', '.join(unknown)}")
    return [TRIGGER_REGISTRY[name] for name in names]


def fire_triggers(
    triggers: Sequence[ReviewerTrigger],
    required: List[Reviewer],
    optional: List[Reviewer],
    url: str,
) -> int:
    """
    Call every trigger, isolating failures.

    Returns:
        int: Number of triggers that raised.
    """
    failures = 0
    for trigger in triggers:
        try:
            trigger(required, optional, url)
        except Exception as e:
            failures += 1
            logger.error(
                {
                    "message": "Reviewer trigger failed",
                    "trigger": getattr(trigger, "__name__", repr(trigger)),
                    "pull_request_url": url,
                    "error": str(e),
                }
            )
    return failures
