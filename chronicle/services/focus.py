import logging
from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel

from chronicle.api.schemas.stats import FocusNarrative
from chronicle.models import RepoCommitActivity


logger = logging.getLogger(__name__)

DEFAULT_FOCUS = "Research"
DEFAULT_NARRATIVE = "Structuring ideas into reality."
DEFAULT_FOCUS_LANGUAGE = "Code"
NARRATIVE_TEMPLATE = (
    "{month} saw a significant shift towards {activity}, with heavy activity in "
    "{language} configurations for the {repository} setup."
)

ACTIVITY_BY_LANGUAGE = {
    "Rust": "systems programming",
    "Go": "backend services",
    "TypeScript": "application development",
    "JavaScript": "interactive interfaces",
    "Python": "data processing",
    "Lua": "configuration & scripting",
    "Nix": "reproducible infrastructure",
    "HTML": "structure & layout",
    "CSS": "visual styling",
    "C++": "performance engineering",
    "C": "low-level system logic",
    "Shell": "automation scripts",
}


class MonthlyFocus(BaseModel):
    repository: str
    narrative: FocusNarrative


def activity_type(language: str | None) -> str:
    """Describe the kind of work a primary language usually stands for."""

    if not language:
        return "general development"
    return ACTIVITY_BY_LANGUAGE.get(language, "coding activity")


def monthly_commit_totals(
    activity: Iterable[RepoCommitActivity], month: int
) -> dict[str, int]:
    """Sum commits per repository for one calendar month.

    Repositories keep the order in which they were first seen.
    """

    totals: dict[str, int] = {}
    for repo in activity:
        for node in repo.commits:
            if node.occurred_at.month == month:
                totals[repo.repo_name] = (
                    totals.get(repo.repo_name, 0) + node.commit_count
                )
    return totals


def monthly_focus(activity: Iterable[RepoCommitActivity], today: date) -> MonthlyFocus:
    activity = list(activity)
    totals = monthly_commit_totals(activity, today.month)

    top_repo: str | None = None
    top_total = 0
    for repo_name, total in totals.items():
        if total > top_total:
            top_repo = repo_name
            top_total = total

    if top_repo is None:
        return MonthlyFocus(
            repository=DEFAULT_FOCUS,
            narrative=FocusNarrative(text=DEFAULT_NARRATIVE),
        )

    language = DEFAULT_FOCUS_LANGUAGE
    for repo in activity:
        if repo.repo_name == top_repo and repo.language:
            language = repo.language

    fields = {
        "month": f"{today:%B}",
        "activity": activity_type(language),
        "language": language,
        "repository": top_repo,
    }
    logger.debug("Monthly focus is %s with %d commits", top_repo, top_total)
    return MonthlyFocus(
        repository=top_repo,
        narrative=FocusNarrative(text=NARRATIVE_TEMPLATE.format(**fields), **fields),
    )
