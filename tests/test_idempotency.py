import pytest

from balancer.errors import TransportError
from balancer.idempotency import (
    DEFAULT_BOT_IDENTIFIER,
    build_reviewer_comment,
    contains_bot_signature,
    is_already_balanced,
)
from platforms.models import Comment
from storage.models import Reviewer


def test_comment_body_format():
    required = [
        Reviewer(platform_id="1", alias="alice"),
        Reviewer(platform_id="2", alias="carol"),
    ]

    body = build_reviewer_comment(required, "sig123")

    assert body == (
        "Hello alice,carol,\r\n\r\n"
        "You are randomly selected as the **required** code reviewers of this change. \r\n\r\n"
        "Your responsibility is to review **each** iteration of this CR until signoff. "
        "You should provide no more than 48 hour SLA for each iteration.\r\n\r\n"
        "Thank you.\r\n\r\n"
        "CR Balancer\r\n"
        "sig123"
    )


def test_posted_comment_is_detected():
    body = build_reviewer_comment([Reviewer(platform_id="1", alias="alice")])

    assert contains_bot_signature([Comment(body="LGTM"), Comment(body=body)], DEFAULT_BOT_IDENTIFIER)


def test_comments_without_signature():
    comments = [Comment(body=None), Comment(body="Please take a look"), Comment()]

    assert not contains_bot_signature(comments, DEFAULT_BOT_IDENTIFIER)
    assert not contains_bot_signature([], DEFAULT_BOT_IDENTIFIER)


@pytest.mark.asyncio
async def test_is_already_balanced(mock_platform, repository, make_pr):
    mock_platform.list_comments.return_value = [Comment(body=f"done {DEFAULT_BOT_IDENTIFIER}")]

    assert await is_already_balanced(mock_platform, repository, make_pr())


@pytest.mark.asyncio
async def test_read_failure_propagates(mock_platform, repository, make_pr):
    mock_platform.list_comments.side_effect = TransportError("discussion unavailable")

    with pytest.raises(TransportError):
        await is_already_balanced(mock_platform, repository, make_pr())
