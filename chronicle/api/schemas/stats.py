from pydantic import BaseModel


class DayActivity(BaseModel):
    """Single day item with a display date, e.g. `Mar 5`."""

    date: str
    count: int


class TimelineDay(BaseModel):
    """Single day of the raw timeline with an ISO date."""

    date: str
    count: int


class LanguageShare(BaseModel):
    name: str
    percent: int
    color: str


class FocusNarrative(BaseModel):
    """Monthly focus sentence plus the fields it was rendered from."""

    text: str
    month: str | None = None
    activity: str | None = None
    language: str | None = None
    repository: str | None = None


class Overview(BaseModel):
    total_repos: int
    total_stars: int
    total_followers: int
    total_issues: int


class PinnedProject(BaseModel):
    title: str
    description: str | None
    language: str
    language_color: str
    stars: int
    watches: int
    url: str
    topic: str


class Chronicle(BaseModel):
    """Derived activity metrics for the current year."""

    total_contribution_volume: int
    growth_percentage: str
    most_used_language: LanguageShare | None
    current_streak: int
    peak_activity_day: DayActivity
    top_activities: list[DayActivity]
    monthly_focus: str
    monthly_focus_narrative: FocusNarrative
    most_productive_day: str
    languages: list[LanguageShare]
    stack: list[str]
    timeline: list[TimelineDay]


class StatsResponse(BaseModel):
    """Profile stats document consumed by the renderer and static server."""

    overview: Overview
    pinned: list[PinnedProject]
    chronicle: Chronicle
