from collections.abc import Sequence
from datetime import date

from pydantic import BaseModel

from chronicle.api.schemas.stats import DayActivity
from chronicle.models import ContributionDay


WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
TOP_ACTIVITY_LIMIT = 3


class CalendarSummary(BaseModel):
    current_streak: int
    peak_day: DayActivity
    top_activities: list[DayActivity]
    most_productive_day: str


def display_date(day: date) -> str:
    """Format a day the short way the profile card shows it, e.g. `Mar 5`."""

    return f"{day:%b} {day.day}"


def sunday_based_weekday(day: date) -> int:
    """Return the weekday index of day with 0 meaning Sunday."""

    return (day.weekday() + 1) % 7


def current_streak(days: Sequence[ContributionDay], today: date) -> int:
    """Count consecutive active days walking backward from today.

    A zero on the starting day does not end the streak because that day is not
    over yet. When today is not in the range the walk starts at the last day.
    """

    if not days:
        return 0

    start_index = len(days) - 1
    for index, day in enumerate(days):
        if day.date == today:
            start_index = index
            break

    streak = 0
    for index in range(start_index, -1, -1):
        count = days[index].count
        if count > 0:
            streak += 1
        elif index == start_index:
            continue
        else:
            break
    return streak


def rank_days(days: Sequence[ContributionDay]) -> list[ContributionDay]:
    """Sort days by descending count; ties keep chronological order."""

    return sorted(days, key=lambda day: day.count, reverse=True)


def peak_day(days: Sequence[ContributionDay]) -> DayActivity:
    ranked = rank_days(days)
    if not ranked:
        return DayActivity(date="", count=0)
    return DayActivity(date=display_date(ranked[0].date), count=ranked[0].count)


def top_activities(
    days: Sequence[ContributionDay], limit: int = TOP_ACTIVITY_LIMIT
) -> list[DayActivity]:
    return [
        DayActivity(date=display_date(day.date), count=day.count)
        for day in rank_days(days)[:limit]
    ]


def most_productive_weekday(days: Sequence[ContributionDay], today: date) -> str:
    """Name the weekday with the most contributions in today's month.

    Lower weekday indexes win ties. Without any activity this month the
    result is today's weekday.
    """

    totals = [0] * 7
    for day in days:
        if day.date.month == today.month:
            totals[day.weekday] += day.count

    best_index = sunday_based_weekday(today)
    best_total = 0
    for weekday, total in enumerate(totals):
        if total > best_total:
            best_index = weekday
            best_total = total
    return WEEKDAY_NAMES[best_index]


def analyze_calendar(days: Sequence[ContributionDay], today: date) -> CalendarSummary:
    return CalendarSummary(
        current_streak=current_streak(days, today),
        peak_day=peak_day(days),
        top_activities=top_activities(days),
        most_productive_day=most_productive_weekday(days, today),
    )
