import logging
from collections.abc import Sequence
from datetime import date
from datetime import datetime
from datetime import UTC

import httpx

from chronicle.api.schemas.stats import Chronicle
from chronicle.api.schemas.stats import Overview
from chronicle.api.schemas.stats import PinnedProject
from chronicle.api.schemas.stats import StatsResponse
from chronicle.api.schemas.stats import TimelineDay
from chronicle.errors import GitHubAPIError
from chronicle.errors import InvalidGitHubTokenError
from chronicle.errors import MissingCredentialError
from chronicle.github_api import fetch_authenticated_user
from chronicle.github_api import fetch_snapshot
from chronicle.models import ActivitySnapshot
from chronicle.models import DEFAULT_LANGUAGE_COLOR
from chronicle.models import PinnedRepoConfig
from chronicle.services.calendar import analyze_calendar
from chronicle.services.focus import monthly_focus
from chronicle.services.growth import growth_percentage
from chronicle.services.languages import language_distribution
from chronicle.settings import Settings


logger = logging.getLogger(__name__)


def build_overview(snapshot: ActivitySnapshot) -> Overview:
    return Overview(
        total_repos=snapshot.total_repository_count,
        total_stars=sum(repo.stargazer_count for repo in snapshot.repositories),
        total_followers=snapshot.follower_count,
        total_issues=snapshot.open_issue_count,
    )


def build_pinned(
    snapshot: ActivitySnapshot, pinned_config: Sequence[PinnedRepoConfig]
) -> list[PinnedProject]:
    """Resolve configured pinned repositories, skipping any GitHub did not return."""

    projects: list[PinnedProject] = []
    for config in pinned_config:
        repo = snapshot.pinned_repositories.get(config.name)
        if repo is None:
            logger.debug("Pinned repository %s was not found, skipping", config.name)
            continue
        projects.append(
            PinnedProject(
                title=repo.name,
                description=repo.description,
                language=repo.language_name or "N/A",
                language_color=repo.language_color or DEFAULT_LANGUAGE_COLOR,
                stars=repo.stargazer_count,
                watches=repo.watcher_count,
                url=repo.url,
                topic=config.topic,
            )
        )
    return projects


def build_chronicle(
    snapshot: ActivitySnapshot, stack: Sequence[str], today: date
) -> Chronicle:
    days = snapshot.current_year_days
    total = snapshot.current_year_total_contributions

    day_sum = sum(day.count for day in days)
    if day_sum != total:
        logger.warning(
            "Contribution calendar sums to %d but GitHub reported %d", day_sum, total
        )

    calendar = analyze_calendar(days, today)
    languages = language_distribution(snapshot.repositories)
    focus = monthly_focus(snapshot.current_year_commit_activity, today)

    return Chronicle(
        total_contribution_volume=total,
        growth_percentage=growth_percentage(
            total, snapshot.last_year_total_contributions
        ),
        most_used_language=languages[0] if languages else None,
        current_streak=calendar.current_streak,
        peak_activity_day=calendar.peak_day,
        top_activities=calendar.top_activities,
        monthly_focus=focus.repository,
        monthly_focus_narrative=focus.narrative,
        most_productive_day=calendar.most_productive_day,
        languages=languages,
        stack=list(stack),
        timeline=[
            TimelineDay(date=day.date.isoformat(), count=day.count) for day in days
        ],
    )


def build_stats(
    snapshot: ActivitySnapshot,
    pinned_config: Sequence[PinnedRepoConfig] = (),
    stack: Sequence[str] = (),
    today: date | None = None,
) -> StatsResponse:
    """Derive the overview, pinned projects and chronicle from one snapshot."""

    today = today or date.today()
    return StatsResponse(
        overview=build_overview(snapshot),
        pinned=build_pinned(snapshot, pinned_config),
        chronicle=build_chronicle(snapshot, stack, today),
    )


def generate_stats(
    settings: Settings,
    username: str | None = None,
    now: datetime | None = None,
) -> StatsResponse:
    """Fetch a snapshot for the configured user and derive its stats.

    Raises:
        MissingCredentialError: If no token or username is configured.
        UpstreamQueryError: If the GraphQL response reports errors.
        httpx.HTTPError: If the request itself fails.
    """

    username = username or settings.github_username
    if not settings.github_token:
        raise MissingCredentialError("GITHUB_TOKEN is missing")
    if not username:
        raise MissingCredentialError("GITHUB_USERNAME is missing")

    now = now or datetime.now(UTC)
    logger.info("Fetching GitHub activity for %s", username)
    snapshot = fetch_snapshot(
        username=username,
        token=settings.github_token,
        graphql_url=settings.github_graphql_url,
        pinned=settings.pinned,
        now=now,
        timeout=settings.http_timeout_seconds,
    )
    return build_stats(snapshot, settings.pinned, settings.stack, today=now.date())


def get_profile_stats(token: str, settings: Settings) -> StatsResponse:
    """Build stats for the GitHub user linked to token."""

    username = settings.github_username
    try:
        if not username:
            username = str(fetch_authenticated_user(token)["login"])
        return generate_stats(
            settings.model_copy(update={"github_token": token}), username=username
        )
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in {401, 403}:
            raise InvalidGitHubTokenError from exc
        raise GitHubAPIError from exc
    except httpx.HTTPError as exc:
        raise GitHubAPIError from exc
