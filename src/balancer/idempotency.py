"""
Balancer Comment Module.

The balancer signs every comment it posts with a fixed bot identifier. A pull
request whose discussion already holds that identifier has been balanced and
is never touched again.
"""

from typing import Iterable, List

from platforms.base import PullRequestPlatform
from platforms.models import Comment, PullRequest
from storage.models import Repository, Reviewer, get_reviewers_alias

DEFAULT_BOT_IDENTIFIER = "b03f5f7f11d50a3a"

COMMENT_TEMPLATE = (
    "Hello {aliases},\r\n\r\n"
    "You are randomly selected as the **required** code reviewers of this change. \r\n\r\n"
    "Your responsibility is to review **each** iteration of this CR until signoff. "
    "You should provide no more than 48 hour SLA for each iteration.\r\n\r\n"
    "Thank you.\r\n\r\n"
    "CR Balancer\r\n"
    "{bot_identifier}"
)


def build_reviewer_comment(
    required: List[Reviewer], bot_identifier: str = DEFAULT_BOT_IDENTIFIER
) -> str:
    """Render the comment announcing the required reviewers."""
    return COMMENT_TEMPLATE.format(
        aliases=",".join(get_reviewers_alias(required)),
        bot_identifier=bot_identifier,
    )


def contains_bot_signature(comments: Iterable[Comment], bot_identifier: str) -> bool:
    for comment in comments:
        if comment.body is None:
            continue
        if bot_identifier in comment.body:
            return True
    return False


async def is_already_balanced(
    platform: PullRequestPlatform,
    repository: Repository,
    pr: PullRequest,
    bot_identifier: str = DEFAULT_BOT_IDENTIFIER,
) -> bool:
    """
    Check whether the balancer already commented on a pull request.

    The whole discussion is read. Read failures propagate so that a pull
    request is never balanced twice because of a transient error.
    """
    comments = await platform.list_comments(repository, pr.number)
    return contains_bot_signature(comments, bot_identifier)
