"""
Ownership Resolution Module.

Turns ownership declaration files into candidate reviewer pools.

An ownership file holds one entry per line:

    ; comment
    [Group]Payments Team
    *quiet-owner
    alice

`[Group]` lines name a team, `*` lines name an owner who is still a reviewer
candidate but must not be notified by reviewer triggers, and any other
non-blank line names an owner. Every directory may carry its own ownership
file; a pull request is governed by the files found in the directories of its
changed paths and all of their ancestors.
"""

import posixpath
from typing import Iterable, List, Set

from pydantic import BaseModel, Field

from balancer.errors import OwnershipFileError, TeamNotFoundError
from config import logger
from platforms.base import PullRequestPlatform
from platforms.models import PullRequest
from storage.base import TeamStore
from storage.models import Repository

PREFIX_COMMENT = ";"
PREFIX_GROUP = "[Group]"
PREFIX_NO_NOTIFY = "*"


class ReviewerGroup(BaseModel):
    """Owners and teams declared by one or more ownership files."""

    owners: Set[str] = Field(default_factory=set)
    teams: Set[str] = Field(default_factory=set)
    no_notify: Set[str] = Field(default_factory=set)

    @classmethod
    def union(cls, groups: Iterable["ReviewerGroup"]) -> "ReviewerGroup":
        merged = cls()
        for group in groups:
            if group is None:
                continue
            merged.owners |= group.owners
            merged.teams |= group.teams
            merged.no_notify |= group.no_notify
        return merged


class CandidatePools(BaseModel):
    """Deduplicated reviewer aliases eligible for each selection slot."""

    required_owners: Set[str] = Field(default_factory=set)
    required_team_members: Set[str] = Field(default_factory=set)
    no_notify: Set[str] = Field(default_factory=set)


def parse_ownership_file(contents: str) -> ReviewerGroup:
    """
    Parse the text of an ownership file.

    Args:
        contents (str): Raw file contents.

    Returns:
        ReviewerGroup: Declared owners and teams.

    Raises:
        OwnershipFileError: If a `[Group]` or `*` marker is not followed by a name.
    """
    group = ReviewerGroup()
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(PREFIX_COMMENT):
            continue

        if line.startswith(PREFIX_GROUP):
            team = line[len(PREFIX_GROUP):].strip()
            if not team:
                raise OwnershipFileError(f"missing team name after {PREFIX_GROUP} marker")
            group.teams.add(team)
        elif line.startswith(PREFIX_NO_NOTIFY):
            owner = line[len(PREFIX_NO_NOTIFY):].strip()
            if not owner:
                raise OwnershipFileError(f"missing owner name after {PREFIX_NO_NOTIFY} marker")
            group.owners.add(owner)
            group.no_notify.add(owner)
        else:
            group.owners.add(line)

    return group


def ownership_file_paths(changed_paths: Iterable[str], file_name: str) -> List[str]:
    """
    List the ownership files governing a set of changed paths.

    Every directory from each changed path up to the repository root
    contributes one candidate file. The result is sorted and deduplicated.
    """
    directories = {""}
    for path in changed_paths:
        directory = posixpath.dirname(path.strip("/"))
        while directory:
            directories.add(directory)
            directory = posixpath.dirname(directory)

    return sorted(posixpath.join(directory, file_name) for directory in directories)


class OwnershipResolver:
    """
    Resolves ownership declarations into candidate reviewer pools.

    Attributes:
        team_store (TeamStore): Roster lookup for team references.
        ownership_file_name (str): Name of the per-directory ownership file.
    """

    def __init__(self, team_store: TeamStore, ownership_file_name: str = "owners.txt"):
        self.team_store = team_store
        self.ownership_file_name = ownership_file_name

    async def get_reviewer_groups(
        self, platform: PullRequestPlatform, repository: Repository, pr: PullRequest
    ) -> List[ReviewerGroup]:
        """
        Read and parse every ownership file relevant to a pull request.

        Files are read from the pull request's target branch. Directories
        without an ownership file are skipped.

        Raises:
            TransportError: If the changed paths or a file cannot be read.
            OwnershipFileError: If an ownership file is malformed.
        """
        changed_paths = await platform.list_changed_paths(repository, pr.number)

        groups = []
        for path in ownership_file_paths(changed_paths, self.ownership_file_name):
            contents = await platform.get_file_contents(repository, path, pr.target_branch)
            if contents is None:
                continue
            try:
                groups.append(parse_ownership_file(contents))
            except OwnershipFileError as e:
                logger.error(
                    {
                        "message": "Malformed ownership file",
                        "repository": repository.full_name,
                        "pull_request": pr.number,
                        "path": path,
                        "error": str(e),
                    }
                )
                raise

        logger.debug(
            {
                "message": "Loaded ownership declarations",
                "repository": repository.full_name,
                "pull_request": pr.number,
                "changed_paths": len(changed_paths),
                "declarations": len(groups),
            }
        )
        return groups

    def _team_members(self, team_name: str) -> Set[str]:
        team = self.team_store.get_team(team_name)
        if team is None:
            raise TeamNotFoundError(team_name)
        return set(team.members)

    def resolve(
        self, groups: Iterable[ReviewerGroup], excluded_aliases: Iterable[str] = ()
    ) -> CandidatePools:
        """
        Expand reviewer groups into owner and team member pools.

        Owners that are really team names are expanded as teams. Excluded
        aliases (the pull request author) are removed from both pools, and
        anybody in the owner pool is removed from the team member pool.

        Raises:
            TeamNotFoundError: If a declared team is not in the team store.
        """
        merged = ReviewerGroup.union(groups)

        owners: Set[str] = set()
        team_members: Set[str] = set()

        for team_name in merged.teams:
            team_members |= self._team_members(team_name)

        for owner in merged.owners:
            team = self.team_store.get_team(owner)
            if team is not None:
                logger.warning(
                    {
                        "message": "Owner entry names a team, expanding as team",
                        "team": owner,
                    }
                )
                team_members |= set(team.members)
                continue
            owners.add(owner)

        excluded = set(excluded_aliases)
        owners -= excluded
        team_members -= excluded
        team_members -= owners

        return CandidatePools(
            required_owners=owners,
            required_team_members=team_members,
            no_notify=merged.no_notify & owners,
        )
