"""Campus Feed API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_feed.config import Settings, get_settings
from campus_feed.core.context import get_request_id
from campus_feed.core.logging import configure_structlog, get_logger
from campus_feed.core.middleware import RequestContextMiddleware
from campus_feed.feed.repository import FeedRepository
from campus_feed.feed.router import router as feed_router
from campus_feed.health import router as health_router
from campus_feed.submissions.classification import ClassifierGateway, LLMClassifier
from campus_feed.submissions.client import LLMClient
from campus_feed.submissions.images import LLMImageGenerator
from campus_feed.submissions.moderation import LLMModerator, ModeratorGateway
from campus_feed.submissions.router import router as submissions_router
from campus_feed.submissions.service import SubmissionPipeline


logger = get_logger(__name__)


def build_pipeline(settings: Settings, client: LLMClient) -> SubmissionPipeline:
    """Wire the LLM-backed gateways into a submission pipeline."""
    moderator = ModeratorGateway(
        LLMModerator(
            client,
            model=settings.moderation_model,
            temperature=settings.moderation_temperature,
        )
    )
    classifier = ClassifierGateway(
        LLMClassifier(
            client,
            model=settings.classification_model,
            temperature=settings.classification_temperature,
        )
    )
    image_generator = LLMImageGenerator(
        client, model=settings.image_model, size=settings.image_size
    )
    return SubmissionPipeline(
        moderator=moderator,
        classifier=classifier,
        image_generator=image_generator,
        meme_prefix=settings.meme_command_prefix,
        max_length=settings.max_submission_length,
    )


def _lifespan(
    settings: Settings,
    repository: FeedRepository | None,
    pipeline: SubmissionPipeline | None,
):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info(
            "starting_application",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
        )

        client: LLMClient | None = None
        submission_pipeline = pipeline
        if submission_pipeline is None:
            if not settings.llm_configured:
                logger.warning(
                    "llm_not_configured",
                    message="No API key set - moderation fails open and "
                    "classification falls back to General Post",
                )
            client = LLMClient(
                base_url=settings.llm_api_base_url,
                api_key=settings.llm_api_key,
                timeout=settings.llm_timeout_seconds,
            )
            submission_pipeline = build_pipeline(settings, client)
            logger.info("submission_pipeline_initialized")

        feed_repository = repository or FeedRepository(submission_pipeline)
        logger.info("feed_repository_initialized")

        app.state.submission_pipeline = submission_pipeline
        app.state.feed_repository = feed_repository

        yield

        # Shutdown
        logger.info("shutting_down_application")
        app.state.submission_pipeline = None
        app.state.feed_repository = None
        if client is not None:
            await client.aclose()

    return lifespan


def create_app(
    settings: Settings | None = None,
    repository: FeedRepository | None = None,
    pipeline: SubmissionPipeline | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``repository`` and ``pipeline`` replace the ones the lifespan would
    build, which is how tests plug in fake collaborators.
    """
    settings = settings or get_settings()
    configure_structlog(settings)

    # debug stays off so Starlette never renders stack traces in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Campus social feed - API",
        debug=False,
        lifespan=_lifespan(settings, repository, pipeline),
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )
    app.state.settings = settings

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    def _error_body(
        request: Request, status_code: int, code: str, message: str
    ) -> dict[str, Any]:
        return {
            "success": False,
            "error": True,
            "code": code,
            "message": message,
            "status_code": status_code,
            "request_id": _get_request_id_safe(request),
        }

    # Global exception handlers (never expose stack traces)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions; domain errors carry ``{code, message}``."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        if isinstance(exc.detail, dict):
            code = str(exc.detail.get("code", "http_error"))
            message = str(exc.detail.get("message", ""))
        else:
            code = "http_error"
            message = str(exc.detail)
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR and (
            code == "http_error"
        ):
            message = "Internal server error"

        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        content = _error_body(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation error",
        )
        content["details"] = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Details are logged internally; the client gets a generic message.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "internal_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(submissions_router)
    app.include_router(feed_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Campus Feed API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "campus_feed.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_config=None,
    )


if __name__ == "__main__":
    run()
