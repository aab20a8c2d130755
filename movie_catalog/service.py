"""Domain service for movies.

Validate, call the adapter, then (for a successful mutation) hand a change
event to the publisher in the background. The envelope returned to the
caller is always the adapter's; publishing cannot change it.
"""

from __future__ import annotations

import logging
from typing import Any

from .adapter import MovieAdapter
from .kafka_producer import MovieEventPublisher
from .models import DataOutcome, ErrorOutcome, MessageOutcome, Movie, MovieAction
from .validation import ValidationFailure, validate_create, validate_update

logger = logging.getLogger(__name__)


class MovieService:
    def __init__(self, adapter: MovieAdapter, publisher: MovieEventPublisher):
        self.adapter = adapter
        self.publisher = publisher

    def get_movies(self) -> DataOutcome:
        return self.adapter.get_movies()

    def get_movie_by_id(self, movie_id: int) -> DataOutcome:
        return self.adapter.get_movie_by_id(movie_id)

    def get_movie_by_name(self, name: str) -> DataOutcome:
        return self.adapter.get_movie_by_name(name)

    def add_movie(
        self, data: Any, movie_id: int | None = None
    ) -> DataOutcome | ErrorOutcome:
        """Create a movie.

        `movie_id` wins over an `id` in the body; both are only meant for
        the event consistency harness.
        """
        movie = validate_create(data)
        if isinstance(movie, ValidationFailure):
            return ErrorOutcome(status=400, error=movie.message)

        result = self.adapter.add_movie(movie.fields(), movie_id or movie.id)
        if result.ok and isinstance(result.data, Movie):
            self._emit(result.data, "created")
        return result

    def update_movie(self, data: Any, movie_id: int) -> DataOutcome | ErrorOutcome:
        patch = validate_update(data)
        if isinstance(patch, ValidationFailure):
            return ErrorOutcome(status=400, error=patch.message)

        result = self.adapter.update_movie(patch.changes(), movie_id)
        if result.ok and isinstance(result.data, Movie):
            self._emit(result.data, "updated")
        return result

    def delete_movie_by_id(self, movie_id: int) -> MessageOutcome | ErrorOutcome:
        # The deleted event carries the record exactly as the store removed it.
        result = self.adapter.delete_movie_by_id(movie_id)
        if isinstance(result, MessageOutcome) and result.movie is not None:
            self._emit(result.movie, "deleted")
        return result

    def _emit(self, movie: Movie, action: MovieAction) -> None:
        logger.debug("Queueing movie event", extra={"action": action, "movie_id": movie.id})
        self.publisher.publish_async(movie, action)
