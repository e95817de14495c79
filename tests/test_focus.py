from datetime import date
from datetime import datetime
from datetime import UTC

from chronicle.models import CommitNode
from chronicle.models import RepoCommitActivity
from chronicle.services.focus import DEFAULT_FOCUS
from chronicle.services.focus import DEFAULT_NARRATIVE
from chronicle.services.focus import activity_type
from chronicle.services.focus import monthly_focus


TODAY = date(2026, 3, 15)


def activity(
    name: str, language: str | None, *commits: tuple[int, int]
) -> RepoCommitActivity:
    return RepoCommitActivity(
        repo_name=name,
        language=language,
        commits=tuple(
            CommitNode(
                occurred_at=datetime(2026, month, 2, 9, 30, tzinfo=UTC),
                commit_count=count,
            )
            for month, count in commits
        ),
    )


def test_monthly_focus_picks_repository_with_most_commits() -> None:
    focus = monthly_focus(
        [activity("dots", "Nix", (3, 3)), activity("oxicord", "Rust", (3, 7))],
        today=TODAY,
    )

    assert focus.repository == "oxicord"
    assert focus.narrative.month == "March"
    assert focus.narrative.activity == "systems programming"
    assert focus.narrative.language == "Rust"
    assert focus.narrative.repository == "oxicord"
    assert focus.narrative.text == (
        "March saw a significant shift towards systems programming, with heavy "
        "activity in Rust configurations for the oxicord setup."
    )


def test_monthly_focus_prefers_first_repository_on_tie() -> None:
    focus = monthly_focus(
        [activity("first", "Go", (3, 5)), activity("second", "Lua", (3, 2), (3, 3))],
        today=TODAY,
    )

    assert focus.repository == "first"


def test_monthly_focus_ignores_other_months() -> None:
    focus = monthly_focus(
        [activity("old", "Python", (2, 40)), activity("new", "HTML", (3, 1))],
        today=TODAY,
    )

    assert focus.repository == "new"
    assert focus.narrative.activity == "structure & layout"


def test_monthly_focus_defaults_without_activity_this_month() -> None:
    focus = monthly_focus([activity("old", "Python", (2, 40))], today=TODAY)

    assert focus.repository == DEFAULT_FOCUS
    assert focus.narrative.text == DEFAULT_NARRATIVE
    assert focus.narrative.repository is None


def test_monthly_focus_without_primary_language_uses_generic_phrase() -> None:
    focus = monthly_focus([activity("notes", None, (3, 2))], today=TODAY)

    assert focus.narrative.language == "Code"
    assert focus.narrative.activity == "coding activity"


def test_activity_type_lookup() -> None:
    assert activity_type("C++") == "performance engineering"
    assert activity_type("Haskell") == "coding activity"
    assert activity_type(None) == "general development"
