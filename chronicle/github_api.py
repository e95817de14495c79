from collections.abc import Mapping
from collections.abc import Sequence
from datetime import date
from datetime import datetime
from datetime import UTC
from typing import Any

import httpx

from chronicle.errors import GitHubAPIError
from chronicle.errors import MissingCredentialError
from chronicle.errors import UpstreamQueryError
from chronicle.models import ActivitySnapshot
from chronicle.models import CommitNode
from chronicle.models import ContributionDay
from chronicle.models import DEFAULT_LANGUAGE_COLOR
from chronicle.models import LanguageEdge
from chronicle.models import PinnedRepoConfig
from chronicle.models import PinnedRepository
from chronicle.models import RepoCommitActivity
from chronicle.models import Repository


USER_AGENT = "profile-chronicle"

STATS_QUERY = """
query($username: String!, $currentYearStart: DateTime!, $currentYearEnd: DateTime!, $lastYearStart: DateTime!, $lastYearEnd: DateTime!) {
  user(login: $username) {
    followers {
      totalCount
    }
    issues(states: OPEN) {
      totalCount
    }
    repositories(first: 100, ownerAffiliations: OWNER, isFork: false, orderBy: {field: STARGAZERS, direction: DESC}) {
      totalCount
      nodes {
        name
        stargazerCount
        primaryLanguage {
          name
          color
        }
        languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
          edges {
            size
            node {
              name
              color
            }
          }
        }
      }
    }
    currentYear: contributionsCollection(from: $currentYearStart, to: $currentYearEnd) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
            weekday
          }
        }
      }
      commitContributionsByRepository(maxRepositories: 100) {
        repository {
          name
          primaryLanguage {
            name
          }
        }
        contributions(first: 100) {
          nodes {
            occurredAt
            commitCount
          }
        }
      }
    }
    lastYear: contributionsCollection(from: $lastYearStart, to: $lastYearEnd) {
      contributionCalendar {
        totalContributions
      }
    }
  }
%s
}
"""

PINNED_REPO_FRAGMENT = """
  repo%d: repository(owner: $username, name: %s) {
    name
    description
    stargazerCount
    primaryLanguage {
      name
      color
    }
    watchers {
      totalCount
    }
    url
  }
"""


def fetch_authenticated_user(token: str) -> dict[str, str | int]:
    """Fetch basic profile data for the token owner from GitHub REST API."""

    response = httpx.get(
        "https://api.github.com/user",
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        },
        timeout=15.0,
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise GitHubAPIError("GitHub user response is invalid")

    raw_id = payload.get("id")
    raw_login = payload.get("login")
    if not isinstance(raw_id, int) or not isinstance(raw_login, str) or not raw_login:
        raise GitHubAPIError("GitHub user response is missing required fields")

    return {"id": raw_id, "login": raw_login}


def build_stats_query(pinned: Sequence[PinnedRepoConfig]) -> str:
    """Build the stats query with one aliased lookup per pinned repository."""

    fragments = [
        PINNED_REPO_FRAGMENT % (index, _graphql_string(repo.name))
        for index, repo in enumerate(pinned)
    ]
    return STATS_QUERY % "".join(fragments)


def _graphql_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def year_ranges(now: datetime) -> dict[str, str]:
    """Return the GraphQL variables for this year so far and all of last year."""

    current_year_start = datetime(now.year, 1, 1, tzinfo=UTC)
    last_year_start = datetime(now.year - 1, 1, 1, tzinfo=UTC)
    last_year_end = datetime(now.year - 1, 12, 31, 23, 59, 59, tzinfo=UTC)
    return {
        "currentYearStart": current_year_start.isoformat(),
        "currentYearEnd": now.astimezone(UTC).isoformat(),
        "lastYearStart": last_year_start.isoformat(),
        "lastYearEnd": last_year_end.isoformat(),
    }


def fetch_stats_payload(
    username: str,
    token: str | None,
    graphql_url: str,
    pinned: Sequence[PinnedRepoConfig] = (),
    now: datetime | None = None,
    timeout: float = 20.0,
) -> Mapping[str, Any]:
    """Run the stats query and return its `data` object."""

    if not token:
        raise MissingCredentialError("GITHUB_TOKEN is required for GraphQL requests")

    variables: dict[str, str] = {"username": username}
    variables.update(year_ranges(now or datetime.now(UTC)))

    response = httpx.post(
        graphql_url,
        json={"query": build_stats_query(pinned), "variables": variables},
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        },
        timeout=timeout,
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise GitHubAPIError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if errors:
        raise UpstreamQueryError(errors)

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise GitHubAPIError("GitHub GraphQL data is missing")
    return data


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _total_count(value: Any) -> int:
    raw_count = _mapping(value).get("totalCount")
    return raw_count if isinstance(raw_count, int) else 0


def parse_repository(node: Mapping[str, Any]) -> Repository:
    languages = []
    for edge in _list(_mapping(node.get("languages")).get("edges")):
        language = _mapping(_mapping(edge).get("node"))
        raw_size = _mapping(edge).get("size")
        if not isinstance(language.get("name"), str) or not isinstance(raw_size, int):
            continue
        languages.append(
            LanguageEdge(
                name=language["name"],
                color=language.get("color") or DEFAULT_LANGUAGE_COLOR,
                byte_size=raw_size,
            )
        )

    return Repository(
        name=node["name"],
        stargazer_count=node.get("stargazerCount") or 0,
        primary_language=_mapping(node.get("primaryLanguage")).get("name"),
        languages=tuple(languages),
    )


def parse_contribution_days(calendar: Mapping[str, Any]) -> list[ContributionDay]:
    days: list[ContributionDay] = []
    for week in _list(calendar.get("weeks")):
        for item in _list(_mapping(week).get("contributionDays")):
            item = _mapping(item)
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            if not isinstance(raw_date, str) or not isinstance(raw_count, int):
                continue
            parsed_day = date.fromisoformat(raw_date)
            raw_weekday = item.get("weekday")
            if not isinstance(raw_weekday, int):
                raw_weekday = (parsed_day.weekday() + 1) % 7
            days.append(
                ContributionDay(date=parsed_day, weekday=raw_weekday, count=raw_count)
            )
    return days


def parse_commit_activity(entries: Any) -> list[RepoCommitActivity]:
    activity: list[RepoCommitActivity] = []
    for entry in _list(entries):
        repository = _mapping(_mapping(entry).get("repository"))
        if not isinstance(repository.get("name"), str):
            continue

        commits = []
        for node in _list(_mapping(_mapping(entry).get("contributions")).get("nodes")):
            node = _mapping(node)
            raw_occurred_at = node.get("occurredAt")
            raw_count = node.get("commitCount")
            if not isinstance(raw_occurred_at, str) or not isinstance(raw_count, int):
                continue
            commits.append(
                CommitNode(
                    occurred_at=parse_github_datetime(raw_occurred_at),
                    commit_count=raw_count,
                )
            )

        activity.append(
            RepoCommitActivity(
                repo_name=repository["name"],
                language=_mapping(repository.get("primaryLanguage")).get("name"),
                commits=tuple(commits),
            )
        )
    return activity


def parse_pinned_repository(node: Mapping[str, Any]) -> PinnedRepository:
    language = _mapping(node.get("primaryLanguage"))
    return PinnedRepository(
        name=node["name"],
        description=node.get("description"),
        stargazer_count=node.get("stargazerCount") or 0,
        watcher_count=_total_count(node.get("watchers")),
        url=node.get("url") or "",
        language_name=language.get("name"),
        language_color=language.get("color"),
    )


def parse_github_datetime(raw_value: str) -> datetime:
    return datetime.fromisoformat(raw_value.replace("Z", "+00:00"))


def parse_snapshot(
    data: Mapping[str, Any], pinned: Sequence[PinnedRepoConfig] = ()
) -> ActivitySnapshot:
    """Normalize the GraphQL `data` object into an activity snapshot.

    Missing pinned repositories are left out of `pinned_repositories`.

    Raises:
        GitHubAPIError: If the user block or its contribution calendar is missing,
            or a value does not fit the snapshot model (e.g. a weekday of 9).
    """

    try:
        return _snapshot_from_data(data, pinned)
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError, as are bad ISO dates.
        raise GitHubAPIError("GitHub GraphQL data is malformed") from exc


def _snapshot_from_data(
    data: Mapping[str, Any], pinned: Sequence[PinnedRepoConfig]
) -> ActivitySnapshot:
    user = data.get("user")
    if not isinstance(user, Mapping):
        raise GitHubAPIError("GitHub user not found")

    current_year = _mapping(user.get("currentYear"))
    calendar = current_year.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise GitHubAPIError("GitHub contributionCalendar is missing")

    repositories = _mapping(user.get("repositories"))
    last_year_calendar = _mapping(
        _mapping(user.get("lastYear")).get("contributionCalendar")
    )

    pinned_repositories: dict[str, PinnedRepository] = {}
    for index, config in enumerate(pinned):
        node = data.get(f"repo{index}")
        if isinstance(node, Mapping) and isinstance(node.get("name"), str):
            pinned_repositories[config.name] = parse_pinned_repository(node)

    raw_total = calendar.get("totalContributions")
    raw_repo_count = repositories.get("totalCount")
    return ActivitySnapshot(
        follower_count=_total_count(user.get("followers")),
        open_issue_count=_total_count(user.get("issues")),
        total_repository_count=(
            raw_repo_count if isinstance(raw_repo_count, int) else None
        ),
        repositories=tuple(
            parse_repository(node)
            for node in _list(repositories.get("nodes"))
            if isinstance(node, Mapping) and isinstance(node.get("name"), str)
        ),
        current_year_days=tuple(parse_contribution_days(calendar)),
        current_year_total_contributions=(
            raw_total if isinstance(raw_total, int) else None
        ),
        current_year_commit_activity=tuple(
            parse_commit_activity(current_year.get("commitContributionsByRepository"))
        ),
        last_year_total_contributions=last_year_calendar.get("totalContributions") or 0,
        pinned_repositories=pinned_repositories,
    )


def fetch_snapshot(
    username: str,
    token: str | None,
    graphql_url: str,
    pinned: Sequence[PinnedRepoConfig] = (),
    now: datetime | None = None,
    timeout: float = 20.0,
) -> ActivitySnapshot:
    """Fetch one activity snapshot for a user from GitHub GraphQL API."""

    data = fetch_stats_payload(
        username=username,
        token=token,
        graphql_url=graphql_url,
        pinned=pinned,
        now=now,
        timeout=timeout,
    )
    return parse_snapshot(data, pinned)
