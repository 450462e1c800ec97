"""
GitHub Pull Request Platform Module.

Implements the pull request platform interface on top of PyGithub. PyGithub is
blocking, so every call runs in a worker thread; cancelling the awaiting task
abandons the call instead of stalling the event loop.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from github import Auth, Github, GithubException, UnknownObjectException
from github.PullRequest import PullRequest as GitHubPullRequest
from github.Repository import Repository as GitHubRepository

from balancer.errors import OwnershipFileError, TransportError
from config import settings, logger
from platforms.base import PullRequestPlatform
from platforms.models import (
    Collaborator,
    Comment,
    PullRequest,
    RepositoryMetadata,
)
from storage.models import Repository, Reviewer


class GitHubPlatform(PullRequestPlatform):
    """
    GitHubPlatform reads open pull requests from GitHub and requests reviews on them.
    Reviewers are addressed by their GitHub login, which is the reviewer alias.
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        base_url: Optional[str] = None,
        github: Optional[Github] = None,
    ):
        """Initialize the GitHub client.

        Args:
            github_token (Optional[str]): GitHub API token for authentication.
            base_url (Optional[str]): GitHub Enterprise API URL.
            github (Optional[Github]): Preconfigured client, mainly for tests.
        """
        if github is None:
            token = github_token or settings.github_token.get_secret_value()
            kwargs: Dict[str, Any] = {"auth": Auth.Token(token)}
            if base_url or settings.github_base_url:
                kwargs["base_url"] = base_url or settings.github_base_url
            github = Github(**kwargs)
        self.github = github
        self._repos: Dict[str, GitHubRepository] = {}

    async def _call(self, action: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except GithubException as e:
            logger.error(
                {
                    "message": "GitHub call failed",
                    "action": action,
                    "status": e.status,
                    "error": str(e),
                }
            )
            raise TransportError(f"GitHub {action} failed: {e}") from e

    def _check_rate_limit(self, check_name: str = None) -> None:
        """
        Check and log the GitHub API rate limit status.

        Args:
            check_name (Optional[str]): Identifier for the rate limit check point.

        Raises:
            TransportError: Raised when the rate limit is exhausted.
        """
        remaining, limit = self.github.rate_limiting
        reset_time = datetime.fromtimestamp(
            self.github.rate_limiting_resettime, timezone.utc
        )
        now = datetime.now(timezone.utc)

        logger.debug(
            {
                "message": f"{check_name} API rate limit status",
                "remaining_points": remaining,
                "total_points": limit,
                "reset_time": reset_time.isoformat(),
            }
        )

        # If less than 10% of rate limit remains, log a warning
        if remaining < (limit * 0.1) and remaining > 0:
            logger.warning(
                {
                    "message": "GitHub API rate limit running low",
                    "remaining_points": remaining,
                    "reset_time": reset_time.isoformat(),
                }
            )

        if remaining == 0:
            wait_time = (reset_time - now).total_seconds()
            logger.critical(
                {
                    "message": "GitHub API rate limit exhausted",
                    "reset_time": reset_time.isoformat(),
                    "wait_time_seconds": wait_time,
                }
            )
            raise TransportError(
                f"GitHub API rate limit exhausted. Resets in {wait_time/60:.1f} minutes"
            )

    async def _get_repo(self, repository: Repository) -> GitHubRepository:
        repo = self._repos.get(repository.full_name)
        if repo is None:
            repo = await self._call("get repository", self.github.get_repo, repository.full_name)
            self._repos[repository.full_name] = repo
        return repo

    async def _get_pull(self, repository: Repository, number: int) -> GitHubPullRequest:
        repo = await self._get_repo(repository)
        return await self._call("get pull request", repo.get_pull, number)

    def _get_pr_data(
        self, pr: GitHubPullRequest, repository: Repository, default_branch: str
    ) -> PullRequest:
        """Convert a GitHub PullRequest object to a Pydantic model.

        Args:
            pr (GitHubPullRequest): The GitHub PullRequest object.
            repository (Repository): Repository the pull request belongs to.
            default_branch (str): The repository's main branch.

        Returns:
            PullRequest: A Pydantic model representing the pull request.
        """
        return PullRequest(
            number=pr.number,
            title=pr.title or "",
            is_draft=bool(pr.draft),
            target_branch=pr.base.ref,
            default_branch=default_branch,
            author_id=str(pr.user.id),
            author_alias=pr.user.login,
            repository_id=repository.id,
            url=pr.html_url,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
        )

    async def list_open_pull_requests(self, repository: Repository) -> List[PullRequest]:
        repo = await self._get_repo(repository)
        self._check_rate_limit("Pull request listing")

        pulls = await self._call(
            "list pull requests",
            lambda: list(repo.get_pulls(state="open", sort="created", direction="asc")),
        )
        default_branch = repo.default_branch or repository.default_branch
        return [self._get_pr_data(pr, repository, default_branch) for pr in pulls]

    async def list_comments(self, repository: Repository, number: int) -> List[Comment]:
        pr = await self._get_pull(repository, number)

        def _read_discussion() -> List[Comment]:
            comments = [Comment(body=c.body) for c in pr.get_issue_comments()]
            comments.extend(Comment(body=r.body) for r in pr.get_reviews())
            return comments

        return await self._call("list comments", _read_discussion)

    async def add_reviewer(
        self, repository: Repository, number: int, reviewer: Reviewer, required: bool
    ) -> None:
        # GitHub review requests carry no required flag; branch protection decides.
        pr = await self._get_pull(repository, number)
        await self._call(
            "request review", pr.create_review_request, reviewers=[reviewer.alias]
        )
        logger.debug(
            {
                "message": "Requested review",
                "repository": repository.full_name,
                "pull_request": number,
                "reviewer": reviewer.alias,
                "required": required,
            }
        )

    async def post_comment(self, repository: Repository, number: int, body: str) -> None:
        pr = await self._get_pull(repository, number)
        await self._call("post comment", pr.create_issue_comment, body)

    async def list_changed_paths(self, repository: Repository, number: int) -> List[str]:
        pr = await self._get_pull(repository, number)
        return await self._call(
            "list changed files", lambda: [f.filename for f in pr.get_files()]
        )

    async def get_file_contents(
        self, repository: Repository, path: str, ref: str
    ) -> Optional[str]:
        repo = await self._get_repo(repository)

        def _read() -> Optional[str]:
            try:
                contents = repo.get_contents(path, ref=ref)
            except UnknownObjectException:
                return None
            if isinstance(contents, list):
                # path is a directory
                return None
            try:
                return contents.decoded_content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise OwnershipFileError(f"{path} is not UTF-8 text") from e

        return await self._call("get file contents", _read)

    async def get_repository_metadata(self, repository: Repository) -> RepositoryMetadata:
        # Reconciliation must see fresh metadata
        self._repos.pop(repository.full_name, None)
        repo = await self._get_repo(repository)
        return RepositoryMetadata(
            id=repository.id,
            project_name=repo.owner.login,
            name=repo.name,
            default_branch=repo.default_branch,
        )

    async def list_collaborators(self, repository: Repository) -> List[Collaborator]:
        repo = await self._get_repo(repository)
        return await self._call(
            "list collaborators",
            lambda: [
                Collaborator(platform_id=str(user.id), alias=user.login)
                for user in repo.get_collaborators()
            ],
        )
