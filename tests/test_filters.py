"""
Pull Request Filter Test Suite.

Covers the default filters, the filter factories, name lookup and the
any-match pipeline semantics.
"""

import pytest

from balancer.filters import (
    DEFAULT_FILTERS,
    filter_draft,
    filter_main_branch_only,
    filter_wip,
    filters_from_names,
    should_filter,
    target_ref_only,
    title_keyword_required,
)


@pytest.mark.parametrize(
    "title",
    ["WIP: new endpoint", "[WIP] refactor", "Refactor parser WIP"],
)
def test_wip_titles_always_filtered(make_pr, title):
    """WIP pull requests are excluded whatever their other fields."""
    pr = make_pr(title=title, is_draft=False, target_branch="main")
    assert filter_wip(pr)
    assert should_filter(pr, DEFAULT_FILTERS)


def test_wip_match_is_case_sensitive(make_pr):
    assert not filter_wip(make_pr(title="wip: lower case marker"))


def test_draft_filtered(make_pr):
    assert filter_draft(make_pr(is_draft=True))
    assert not filter_draft(make_pr(is_draft=False))


@pytest.mark.parametrize("target", ["develop", "release/1.0", "feature/main"])
def test_non_main_branch_filtered(make_pr, target):
    assert filter_main_branch_only(make_pr(target_branch=target))


@pytest.mark.parametrize("target", ["main", "MAIN", "Main", "refs/heads/main"])
def test_main_branch_not_filtered(make_pr, target):
    """Main-branch comparison ignores case and accepts full refs."""
    pr = make_pr(target_branch=target)
    assert not filter_main_branch_only(pr)
    assert not should_filter(pr, DEFAULT_FILTERS)


def test_master_default_branch(make_pr):
    pr = make_pr(target_branch="master", default_branch="master")
    assert not filter_main_branch_only(pr)
    assert filter_main_branch_only(make_pr(target_branch="main", default_branch="master"))


def test_target_ref_only(make_pr):
    only_master = target_ref_only("refs/heads/master")
    assert not only_master(make_pr(target_branch="Master"))
    assert only_master(make_pr(target_branch="main"))


def test_title_keyword_required(make_pr):
    botv2_only = title_keyword_required("botv2")
    assert not botv2_only(make_pr(title="BotV2: rotate keys"))
    assert botv2_only(make_pr(title="Rotate keys"))


def test_empty_filter_list_disables_filtering(make_pr):
    pr = make_pr(title="WIP", is_draft=True, target_branch="develop")
    assert not should_filter(pr, [])
    assert not should_filter(pr, None)


def test_custom_filters_replace_defaults(make_pr):
    pr = make_pr(title="WIP", target_branch="main")
    assert not should_filter(pr, [filter_draft])


def test_filters_from_names():
    assert filters_from_names(["wip", "draft"]) == [filter_wip, filter_draft]
    assert filters_from_names([]) == []
    with pytest.raises(KeyError):
        filters_from_names(["wip", "unknown"])


def test_filters_from_names_builds_parameterized_filters(make_pr):
    target_release, needs_keyword = filters_from_names(
        ["target_ref:release", "title_keyword:botv2"]
    )

    assert target_release(make_pr(target_branch="main"))
    assert not target_release(make_pr(target_branch="release"))
    assert needs_keyword(make_pr(title="Add pagination"))
    assert not needs_keyword(make_pr(title="[BotV2] Add pagination"))


@pytest.mark.parametrize("name", ["target_ref:", "title_keyword:  ", "target_ref", "branch:main"])
def test_filters_from_names_rejects_bad_parameterized_names(name):
    with pytest.raises(KeyError):
        filters_from_names([name])
