"""
Ownership Resolution Test Suite.

This module contains tests for ownership files and team expansion, covering:
- Line grammar (comments, blank lines, group and no-notify markers)
- Ownership file discovery for changed paths
- Owner precedence over team membership
- Author exclusion
- Configuration errors for unknown teams and malformed declarations
"""

import pytest

from balancer.errors import ConfigurationError, OwnershipFileError, TeamNotFoundError
from balancer.ownership import (
    PREFIX_GROUP,
    PREFIX_NO_NOTIFY,
    OwnershipResolver,
    ReviewerGroup,
    ownership_file_paths,
    parse_ownership_file,
)
from storage.models import Team


def ownership_file(lines):
    """Render lines the way ownership files are usually indented."""
    return "\n".join(f"    {line}" for line in lines) + "\n"


@pytest.mark.parametrize(
    "lines, expected_owners, expected_teams",
    [
        (
            [PREFIX_GROUP + "Team A", PREFIX_NO_NOTIFY + "bob", "alice", ";x", ""],
            {"bob", "alice"},
            {"Team A"},
        ),
        (
            [PREFIX_GROUP + "Team A", PREFIX_GROUP + "Team B", "alice", ";comment", ""],
            {"alice"},
            {"Team A", "Team B"},
        ),
        (["alice", "bob", ";only people"], {"alice", "bob"}, set()),
        ([PREFIX_GROUP + "Team A", "; nobody else"], set(), {"Team A"}),
        ([";just a comment", "", "   "], set(), set()),
    ],
)
def test_parse_ownership_file(lines, expected_owners, expected_teams):
    group = parse_ownership_file(ownership_file(lines))

    assert group.owners == expected_owners
    assert group.teams == expected_teams


@pytest.mark.parametrize(
    "lines",
    [
        [PREFIX_GROUP, "alice"],
        ["alice", PREFIX_GROUP + "   "],
        [PREFIX_NO_NOTIFY, "alice"],
        [PREFIX_NO_NOTIFY + " "],
    ],
)
def test_marker_without_name_is_configuration_error(lines):
    with pytest.raises(ConfigurationError):
        parse_ownership_file(ownership_file(lines))


def test_no_notify_owner_is_still_an_owner():
    group = parse_ownership_file(ownership_file([PREFIX_NO_NOTIFY + "bob", "alice"]))

    assert group.owners == {"alice", "bob"}
    assert group.no_notify == {"bob"}


def test_union_merges_groups():
    merged = ReviewerGroup.union(
        [
            ReviewerGroup(owners={"alice"}, teams={"Team A"}),
            None,
            ReviewerGroup(owners={"bob"}, teams={"Team A", "Team B"}, no_notify={"bob"}),
        ]
    )

    assert merged.owners == {"alice", "bob"}
    assert merged.teams == {"Team A", "Team B"}
    assert merged.no_notify == {"bob"}


def test_ownership_file_paths_walks_to_root():
    paths = ownership_file_paths(
        ["src/api/handlers.py", "src/api/models.py", "README.md"], "owners.txt"
    )

    assert paths == ["owners.txt", "src/api/owners.txt", "src/owners.txt"]


def test_ownership_file_paths_without_changes():
    assert ownership_file_paths([], "owners.txt") == ["owners.txt"]


def test_resolve_expands_teams(team_store):
    resolver = OwnershipResolver(team_store)

    pools = resolver.resolve([ReviewerGroup(teams={"Core Team"})])

    assert pools.required_owners == set()
    assert pools.required_team_members == {"alice", "carol", "dave"}


def test_owner_precedence_over_team_membership(team_store):
    """A named owner is never also part of the team member pool."""
    resolver = OwnershipResolver(team_store)

    pools = resolver.resolve(
        [ReviewerGroup(owners={"alice"}), ReviewerGroup(teams={"Core Team"})]
    )

    assert pools.required_owners == {"alice"}
    assert pools.required_team_members == {"carol", "dave"}
    assert not pools.required_owners & pools.required_team_members


@pytest.mark.parametrize("author", ["alice", "carol", "bob", "zoe"])
def test_author_excluded_from_both_pools(team_store, author):
    resolver = OwnershipResolver(team_store)

    pools = resolver.resolve(
        [ReviewerGroup(owners={"alice", "bob"}, teams={"Core Team"})],
        excluded_aliases={author},
    )

    assert author not in pools.required_owners
    assert author not in pools.required_team_members


def test_owner_naming_a_team_is_expanded(team_store):
    resolver = OwnershipResolver(team_store)

    pools = resolver.resolve([ReviewerGroup(owners={"Core Team", "bob"})])

    assert pools.required_owners == {"bob"}
    assert pools.required_team_members == {"alice", "carol", "dave"}


def test_unknown_team_is_configuration_error(team_store):
    resolver = OwnershipResolver(team_store)

    with pytest.raises(TeamNotFoundError) as exc_info:
        resolver.resolve([ReviewerGroup(owners={"alice"}, teams={"Ghost Team"})])

    assert exc_info.value.team_name == "Ghost Team"
    assert isinstance(exc_info.value, ConfigurationError)


def test_no_notify_limited_to_owner_pool(team_store):
    team_store.save_team(Team(name="Quiet Team", members={"erin"}))
    resolver = OwnershipResolver(team_store)

    pools = resolver.resolve(
        [ReviewerGroup(owners={"bob", "alice"}, no_notify={"bob"}, teams={"Quiet Team"})],
        excluded_aliases={"bob"},
    )

    assert pools.no_notify == set()
    assert pools.required_team_members == {"erin"}


@pytest.mark.asyncio
async def test_get_reviewer_groups_reads_ancestor_files(
    team_store, mock_platform, ownership_files, repository, make_pr
):
    ownership_files["src/owners.txt"] = f"{PREFIX_GROUP}Core Team\n"
    resolver = OwnershipResolver(team_store)
    pr = make_pr(target_branch="main")

    groups = await resolver.get_reviewer_groups(mock_platform, repository, pr)

    merged = ReviewerGroup.union(groups)
    assert merged.owners == {"alice", "bob"}
    assert merged.teams == {"Core Team"}
    requested = [call.args[1] for call in mock_platform.get_file_contents.call_args_list]
    assert requested == ["owners.txt", "src/owners.txt"]
    assert all(call.args[2] == "main" for call in mock_platform.get_file_contents.call_args_list)


@pytest.mark.asyncio
async def test_get_reviewer_groups_rejects_malformed_file(
    team_store, mock_platform, ownership_files, repository, make_pr
):
    ownership_files["src/owners.txt"] = f"{PREFIX_NO_NOTIFY}\nalice\n"
    resolver = OwnershipResolver(team_store)

    with pytest.raises(OwnershipFileError):
        await resolver.get_reviewer_groups(mock_platform, repository, make_pr())
