def growth_percentage(current_total: int, last_year_total: int) -> str:
    """Return year-over-year change formatted like `12.3%`.

    Without any contributions last year the growth is reported as `0.0%`.
    """

    if current_total < 0 or last_year_total < 0:
        raise ValueError("contribution totals cannot be negative")

    growth = 0.0
    if last_year_total > 0:
        growth = (current_total - last_year_total) / last_year_total * 100
    return f"{growth:.1f}%"
