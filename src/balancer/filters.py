"""
Pull Request Filters.

A filter returns True when a pull request must be left alone. The pipeline
excludes a pull request as soon as any filter matches.
"""

from typing import Callable, Dict, List, Optional, Sequence

from platforms.models import PullRequest, to_ref_name

Filter = Callable[[PullRequest], bool]


def filter_wip(pr: PullRequest) -> bool:
    return "WIP" in pr.title


def filter_draft(pr: PullRequest) -> bool:
    return pr.is_draft


def filter_main_branch_only(pr: PullRequest) -> bool:
    """Exclude pull requests that do not target the repository's main branch."""
    return pr.target_ref_name.lower() != pr.default_ref_name.lower()


def target_ref_only(ref: str) -> Filter:
    """Build a filter excluding pull requests that do not target `ref`."""
    canonical = to_ref_name(ref).lower()

    def _filter(pr: PullRequest) -> bool:
        return pr.target_ref_name.lower() != canonical

    return _filter


def title_keyword_required(keyword: str) -> Filter:
    """Build a filter excluding pull requests whose title lacks `keyword` (any case)."""
    keyword = keyword.lower()

    def _filter(pr: PullRequest) -> bool:
        return keyword not in pr.title.lower()

    return _filter


DEFAULT_FILTERS: List[Filter] = [
    filter_wip,
    filter_main_branch_only,
    filter_draft,
]

FILTER_REGISTRY: Dict[str, Filter] = {
    "wip": filter_wip,
    "main_branch_only": filter_main_branch_only,
    "draft": filter_draft,
}

# Filters taking an argument are configured as `<name>:<argument>`.
FILTER_FACTORIES: Dict[str, Callable[[str], Filter]] = {
    "target_ref": target_ref_only,
    "title_keyword": title_keyword_required,
}


def filter_from_name(name: str) -> Filter:
    """
    Look up one filter by configured name.

    Plain names come from `FILTER_REGISTRY`. A name such as
    `target_ref:release` or `title_keyword:botv2` builds a filter from
    `FILTER_FACTORIES`.

    Raises:
        KeyError: If the name is not registered or its argument is empty.
    """
    if name in FILTER_REGISTRY:
        return FILTER_REGISTRY[name]

    factory_name, sep, argument = name.partition(":")
    argument = argument.strip()
    if sep and factory_name in FILTER_FACTORIES and argument:
        return FILTER_FACTORIES[factory_name](argument)

    raise KeyError(name)


def filters_from_names(names: Sequence[str]) -> List[Filter]:
    """
    Look up filters by configured name.

    Raises:
        KeyError: If a name is not registered.
    """
    filters = []
    unknown = []
    for name in names:
        try:
            filters.append(filter_from_name(name))
        except KeyError:
            unknown.append(name)
    if unknown:
        raise KeyError(f"unknown pull request filters: {', '.join(unknown)}")
    return filters


def should_filter(pr: PullRequest, filters: Optional[Sequence[Filter]]) -> bool:
    if not filters:
        return False
    return any(f(pr) for f in filters)
