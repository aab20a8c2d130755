"""movie-catalog FastAPI application.

Responsibilities:
- Serve CRUD endpoints for movies under `/movies`.
- Gate them behind a bearer timestamp (see `auth`).
- Publish a change event per successful mutation (in the background).

Every response body is an envelope: `{status, data}`, `{status, error}`
or `{status, message}`.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .adapter import INTERNAL_ERROR, MovieAdapter
from .auth import issue_token, movie_id_param, require_token
from .config import EVENT_LOG_PATH, LOG_LEVEL
from .event_log import EventLogWriter
from .exceptions import InvalidMovieIdError, UnauthorizedError
from .kafka_producer import MovieEventPublisher
from .logging_setup import setup_logging
from .models import MovieCreate, MovieUpdate
from .mongo import MongoMovieStore, get_database
from .responses import error_response, format_response
from .service import MovieService

logger = logging.getLogger(__name__)


def build_service() -> MovieService:
    """Wire the production service: MongoDB store, Kafka publisher, mirror file."""
    store = MongoMovieStore.from_database(get_database())
    publisher = MovieEventPublisher(EventLogWriter(EVENT_LOG_PATH))
    return MovieService(MovieAdapter(store), publisher)


def get_service(request: Request) -> MovieService:
    return request.app.state.service


def _json_body(model) -> dict[str, Any]:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


def create_app(service: MovieService | None = None) -> FastAPI:
    """Build the app. Pass `service` to skip wiring MongoDB and Kafka."""
    app = FastAPI(title="Movie Catalog")
    app.state.service = service

    @app.on_event("startup")
    def on_startup() -> None:
        setup_logging(LOG_LEVEL)
        if app.state.service is None:
            app.state.service = build_service()
        logger.info("Movie catalog started")

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        # Lets in-flight publishes finish and reach the mirror.
        if app.state.service is not None:
            app.state.service.publisher.shutdown(wait=True)

    @app.exception_handler(UnauthorizedError)
    def unauthorized(request: Request, exc: UnauthorizedError):
        return error_response(401, exc.message)

    @app.exception_handler(InvalidMovieIdError)
    def invalid_movie_id(request: Request, exc: InvalidMovieIdError):
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    def invalid_request(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request body")

    @app.exception_handler(Exception)
    def unexpected(request: Request, exc: Exception):
        logger.error("Unhandled error", extra={"path": request.url.path}, exc_info=exc)
        return error_response(500, INTERNAL_ERROR)

    @app.get("/")
    def health() -> dict[str, str]:
        """Basic liveness endpoint."""
        return {"message": "Server is running"}

    @app.get("/auth/fake-token")
    def fake_token() -> dict[str, str]:
        """Hand out a bearer token: the current timestamp."""
        return {"token": issue_token()}

    @app.get("/movies", dependencies=[Depends(require_token)])
    def get_movies(name: str | None = None, service: MovieService = Depends(get_service)):
        """Return all movies, or the one named `name`."""
        if name:
            return format_response(service.get_movie_by_name(name))
        return format_response(service.get_movies())

    @app.get("/movies/{id}", dependencies=[Depends(require_token)])
    def get_movie(
        movie_id: int = Depends(movie_id_param),
        service: MovieService = Depends(get_service),
    ):
        return format_response(service.get_movie_by_id(movie_id))

    @app.post(
        "/movies",
        dependencies=[Depends(require_token)],
        openapi_extra=_json_body(MovieCreate),
    )
    def add_movie(body: Any = Body(default=None), service: MovieService = Depends(get_service)):
        """Create a movie. Returns 409 if the name is taken."""
        return format_response(service.add_movie(body))

    @app.put(
        "/movies/{id}",
        dependencies=[Depends(require_token)],
        openapi_extra=_json_body(MovieUpdate),
    )
    def update_movie(
        body: Any = Body(default=None),
        movie_id: int = Depends(movie_id_param),
        service: MovieService = Depends(get_service),
    ):
        return format_response(service.update_movie(body, movie_id))

    @app.delete("/movies/{id}", dependencies=[Depends(require_token)])
    def delete_movie(
        movie_id: int = Depends(movie_id_param),
        service: MovieService = Depends(get_service),
    ):
        return format_response(service.delete_movie_by_id(movie_id))

    return app


app = create_app()
