from fastapi import FastAPI

from chronicle.api.routes.stats import router
from chronicle.core.middleware import StatsRateLimitMiddleware
from chronicle.core.observability import configure_logging
from chronicle.core.observability import init_sentry
from chronicle.settings import Settings


def create_app() -> FastAPI:
    """Build the FastAPI app serving cached and live profile stats."""

    settings = Settings()
    configure_logging(settings.log_level)
    init_sentry(settings)

    app = FastAPI(title="Profile Chronicle")
    app.add_middleware(
        StatsRateLimitMiddleware,
        requests_per_window=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.include_router(router)
    return app


app = create_app()
