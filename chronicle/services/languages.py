import math
from collections.abc import Iterable

from chronicle.api.schemas.stats import LanguageShare
from chronicle.models import Repository


LANGUAGE_LIMIT = 5


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def language_distribution(
    repositories: Iterable[Repository], limit: int = LANGUAGE_LIMIT
) -> list[LanguageShare]:
    """Rank languages by their share of bytes across all repositories.

    A language keeps the color seen on its first edge. Percentages are rounded
    independently, so the shares may sum to slightly more or less than 100.
    """

    sizes: dict[str, int] = {}
    colors: dict[str, str] = {}
    total_size = 0

    for repository in repositories:
        for edge in repository.languages:
            if edge.name not in sizes:
                sizes[edge.name] = 0
                colors[edge.name] = edge.color
            sizes[edge.name] += edge.byte_size
            total_size += edge.byte_size

    if total_size == 0:
        return []

    shares = [
        LanguageShare(
            name=name,
            percent=round_half_up(size / total_size * 100),
            color=colors[name],
        )
        for name, size in sizes.items()
    ]
    shares.sort(key=lambda share: share.percent, reverse=True)
    return shares[:limit]
