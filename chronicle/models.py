from collections.abc import Mapping
from datetime import date
from datetime import datetime
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator


DEFAULT_LANGUAGE_COLOR = "#ccc"


class SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ContributionDay(SnapshotModel):
    """One calendar day of the contribution calendar."""

    date: date
    weekday: int = Field(ge=0, le=6)
    count: int = Field(ge=0)


class CommitNode(SnapshotModel):
    occurred_at: datetime
    commit_count: int = Field(ge=0)


class RepoCommitActivity(SnapshotModel):
    """Commit contributions the user made to one repository."""

    repo_name: str
    language: str | None = None
    commits: tuple[CommitNode, ...] = ()


class LanguageEdge(SnapshotModel):
    name: str
    color: str = DEFAULT_LANGUAGE_COLOR
    byte_size: int = Field(ge=0)


class Repository(SnapshotModel):
    """Owned, non-fork repository with its language breakdown."""

    name: str
    stargazer_count: int = 0
    primary_language: str | None = None
    languages: tuple[LanguageEdge, ...] = ()


class PinnedRepository(SnapshotModel):
    name: str
    description: str | None = None
    stargazer_count: int = 0
    watcher_count: int = 0
    url: str
    language_name: str | None = None
    language_color: str | None = None


class PinnedRepoConfig(SnapshotModel):
    """Statically configured repository to surface with live metrics."""

    name: str = Field(min_length=1)
    topic: str


class ActivitySnapshot(SnapshotModel):
    """Normalized result of one GitHub fetch.

    `total_repository_count` defaults to the number of fetched repositories and
    `current_year_total_contributions` to the sum of the calendar day counts.
    """

    follower_count: int = 0
    open_issue_count: int = 0
    total_repository_count: int = Field(default=0, ge=0)
    repositories: tuple[Repository, ...] = ()
    current_year_days: tuple[ContributionDay, ...] = ()
    current_year_total_contributions: int = Field(default=0, ge=0)
    current_year_commit_activity: tuple[RepoCommitActivity, ...] = ()
    last_year_total_contributions: int = Field(default=0, ge=0)
    pinned_repositories: dict[str, PinnedRepository] = {}

    @model_validator(mode="before")
    @classmethod
    def fill_reported_totals(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        data = dict(data)
        if data.get("total_repository_count") is None:
            data["total_repository_count"] = len(data.get("repositories") or ())
        if data.get("current_year_total_contributions") is None:
            data["current_year_total_contributions"] = sum(
                ContributionDay.model_validate(day).count
                for day in data.get("current_year_days") or ()
            )
        return data
