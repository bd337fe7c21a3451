"""Health check endpoints."""

from fastapi import APIRouter, Request

from campus_feed.config import Settings, get_settings


router = APIRouter(prefix="/health", tags=["health"])


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness probe - checks that the feed and pipeline are wired up."""
    settings = _settings(request)
    repository_ready = getattr(request.app.state, "feed_repository", None) is not None
    pipeline_ready = (
        getattr(request.app.state, "submission_pipeline", None) is not None
    )
    return {
        "status": "ready" if repository_ready and pipeline_ready else "starting",
        "environment": settings.environment,
        "debug": settings.debug,
        "repository": repository_ready,
        "pipeline": pipeline_ready,
    }


@router.get("")
async def health(request: Request) -> dict[str, str]:
    """General health check endpoint."""
    settings = _settings(request)
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
