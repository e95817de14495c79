from datetime import date
from datetime import datetime
from datetime import UTC

import httpx
import pytest

from chronicle.errors import GitHubAPIError
from chronicle.errors import InvalidGitHubTokenError
from chronicle.errors import MissingCredentialError
from chronicle.models import ActivitySnapshot
from chronicle.models import CommitNode
from chronicle.models import ContributionDay
from chronicle.models import LanguageEdge
from chronicle.models import PinnedRepoConfig
from chronicle.models import PinnedRepository
from chronicle.models import RepoCommitActivity
from chronicle.models import Repository
from chronicle.services.stats_service import build_stats
from chronicle.services.stats_service import generate_stats
from chronicle.services.stats_service import get_profile_stats
from chronicle.settings import Settings


TODAY = date(2026, 3, 3)


def sample_snapshot() -> ActivitySnapshot:
    return ActivitySnapshot(
        follower_count=12,
        open_issue_count=2,
        total_repository_count=40,
        repositories=(
            Repository(
                name="kaku",
                stargazer_count=30,
                primary_language="Nix",
                languages=(LanguageEdge(name="Nix", color="#7e7eff", byte_size=70),),
            ),
            Repository(
                name="oxicord",
                stargazer_count=5,
                primary_language="Rust",
                languages=(LanguageEdge(name="Rust", color="#dea584", byte_size=30),),
            ),
        ),
        current_year_days=(
            ContributionDay(date=date(2026, 3, 1), weekday=0, count=2),
            ContributionDay(date=date(2026, 3, 2), weekday=1, count=6),
            ContributionDay(date=date(2026, 3, 3), weekday=2, count=0),
        ),
        current_year_commit_activity=(
            RepoCommitActivity(
                repo_name="oxicord",
                language="Rust",
                commits=(
                    CommitNode(
                        occurred_at=datetime(2026, 3, 2, tzinfo=UTC), commit_count=6
                    ),
                ),
            ),
        ),
        last_year_total_contributions=4,
        pinned_repositories={
            "kaku": PinnedRepository(
                name="kaku",
                description="NixOS flake",
                stargazer_count=30,
                watcher_count=3,
                url="https://github.com/octocat/kaku",
                language_name="Nix",
                language_color="#7e7eff",
            ),
            "keystroke": PinnedRepository(
                name="keystroke",
                stargazer_count=1,
                url="https://github.com/octocat/keystroke",
            ),
        },
    )


PINNED = [
    PinnedRepoConfig(name="kaku", topic="NixOS Configuration Flake"),
    PinnedRepoConfig(name="gone", topic="Deleted Repository"),
    PinnedRepoConfig(name="keystroke", topic="Keyboard Visualizer"),
]


def test_build_stats_overview_totals() -> None:
    stats = build_stats(sample_snapshot(), today=TODAY)

    assert stats.overview.model_dump() == {
        "total_repos": 40,
        "total_stars": 35,
        "total_followers": 12,
        "total_issues": 2,
    }


def test_build_stats_drops_unresolved_pinned_repositories() -> None:
    stats = build_stats(sample_snapshot(), pinned_config=PINNED, today=TODAY)

    assert [project.title for project in stats.pinned] == ["kaku", "keystroke"]
    assert stats.pinned[0].topic == "NixOS Configuration Flake"
    assert stats.pinned[1].language == "N/A"
    assert stats.pinned[1].language_color == "#ccc"
    assert stats.pinned[1].description is None


def test_build_stats_chronicle() -> None:
    stats = build_stats(sample_snapshot(), stack=["NixOS", "Neovim"], today=TODAY)
    chronicle = stats.chronicle

    assert chronicle.total_contribution_volume == 8
    assert chronicle.growth_percentage == "100.0%"
    assert chronicle.current_streak == 2
    assert chronicle.peak_activity_day.model_dump() == {"date": "Mar 2", "count": 6}
    assert chronicle.monthly_focus == "oxicord"
    assert chronicle.most_productive_day == "Monday"
    assert chronicle.most_used_language is not None
    assert chronicle.most_used_language.name == "Nix"
    assert chronicle.stack == ["NixOS", "Neovim"]
    assert chronicle.timeline[0].model_dump() == {"date": "2026-03-01", "count": 2}


def test_build_stats_serializes_with_stable_keys() -> None:
    document = build_stats(sample_snapshot(), today=TODAY).model_dump(mode="json")

    assert set(document) == {"overview", "pinned", "chronicle"}
    assert set(document["chronicle"]) == {
        "total_contribution_volume",
        "growth_percentage",
        "most_used_language",
        "current_streak",
        "peak_activity_day",
        "top_activities",
        "monthly_focus",
        "monthly_focus_narrative",
        "most_productive_day",
        "languages",
        "stack",
        "timeline",
    }


def test_build_stats_for_empty_snapshot() -> None:
    chronicle = build_stats(ActivitySnapshot(), today=TODAY).chronicle

    assert chronicle.total_contribution_volume == 0
    assert chronicle.growth_percentage == "0.0%"
    assert chronicle.most_used_language is None
    assert chronicle.languages == []
    assert chronicle.monthly_focus == "Research"


def test_generate_stats_requires_token() -> None:
    settings = Settings(github_token=None, github_username="octocat")

    with pytest.raises(MissingCredentialError):
        generate_stats(settings)


def test_generate_stats_fetches_configured_user(
    monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict[str, object]] = []

    def fake_fetch_snapshot(**kwargs):
        calls.append(kwargs)
        return sample_snapshot()

    monkeypatch.setattr(
        "chronicle.services.stats_service.fetch_snapshot", fake_fetch_snapshot
    )
    settings = Settings(github_token="secret", github_username="octocat", pinned=PINNED)

    stats = generate_stats(settings, now=datetime(2026, 3, 3, 12, tzinfo=UTC))

    assert calls[0]["username"] == "octocat"
    assert calls[0]["token"] == "secret"
    assert len(stats.pinned) == 2


def http_status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.github.com/graphql")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("GitHub error", request=request, response=response)


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [
        (401, InvalidGitHubTokenError),
        (403, InvalidGitHubTokenError),
        (500, GitHubAPIError),
    ],
)
def test_get_profile_stats_maps_http_errors(
    monkeypatch: pytest.MonkeyPatch, status_code: int, expected: type[Exception]
) -> None:
    def fake_fetch_snapshot(**kwargs):
        raise http_status_error(status_code)

    monkeypatch.setattr(
        "chronicle.services.stats_service.fetch_snapshot", fake_fetch_snapshot
    )

    with pytest.raises(expected):
        get_profile_stats("secret", Settings(github_username="octocat"))


def test_get_profile_stats_resolves_token_owner(
    monkeypatch: pytest.MonkeyPatch
) -> None:
    usernames: list[str] = []

    def fake_fetch_snapshot(**kwargs):
        usernames.append(kwargs["username"])
        return sample_snapshot()

    monkeypatch.setattr(
        "chronicle.services.stats_service.fetch_authenticated_user",
        lambda token: {"id": 1, "login": "octocat"},
    )
    monkeypatch.setattr(
        "chronicle.services.stats_service.fetch_snapshot", fake_fetch_snapshot
    )

    get_profile_stats("secret", Settings(github_username=None))

    assert usernames == ["octocat"]


def test_build_stats_keeps_reported_total_when_calendar_disagrees(
    caplog: pytest.LogCaptureFixture,
) -> None:
    snapshot = ActivitySnapshot(
        current_year_days=(ContributionDay(date=TODAY, weekday=2, count=2),),
        current_year_total_contributions=5,
    )

    with caplog.at_level("WARNING", logger="chronicle.services.stats_service"):
        chronicle = build_stats(snapshot, today=TODAY).chronicle

    assert chronicle.total_contribution_volume == 5
    assert "sums to 2 but GitHub reported 5" in caplog.text


def test_build_stats_is_quiet_when_calendar_matches_total(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level("WARNING", logger="chronicle.services.stats_service"):
        build_stats(sample_snapshot(), today=TODAY)

    assert caplog.records == []
