import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi import HTTPException
from fastapi import Security
from fastapi.responses import FileResponse
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials

from chronicle.api.schemas.stats import StatsResponse
from chronicle.core.security import bearer_scheme
from chronicle.core.security import extract_bearer_token
from chronicle.errors import GitHubAPIError
from chronicle.errors import InvalidGitHubTokenError
from chronicle.errors import UpstreamQueryError
from chronicle.services.stats_service import get_profile_stats
from chronicle.settings import Settings


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service greeting."""

    return {"message": "Hello World"}


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/data.json")
def get_cached_stats() -> Response:
    """Serve the stats document written by `chronicle generate`."""

    data_file = Path(Settings().output_path)
    if not data_file.is_file():
        return JSONResponse(status_code=404, content={"error": "Data not found"})
    return FileResponse(data_file, media_type="application/json")


@router.get("/stats/me", response_model=StatsResponse)
def get_authenticated_user_stats(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> StatsResponse:
    """Return live profile stats for the authenticated GitHub user."""

    token = extract_bearer_token(credentials)

    try:
        return get_profile_stats(token=token, settings=Settings())
    except InvalidGitHubTokenError as exc:
        raise HTTPException(status_code=401, detail="GitHub token is invalid") from exc
    except UpstreamQueryError as exc:
        logger.error("GitHub GraphQL returned errors: %s", exc.errors)
        raise HTTPException(
            status_code=502,
            detail={"message": "GitHub GraphQL returned errors", "errors": exc.errors},
        ) from exc
    except GitHubAPIError as exc:
        raise HTTPException(
            status_code=502, detail="GitHub API request failed"
        ) from exc
