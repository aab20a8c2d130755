"""Persistence adapter: service intent in, outcome envelopes out.

The adapter is the only place that looks at store exceptions. Every method
returns an envelope for expected conditions (found, missing, duplicate).
The one exception is `delete_movie_by_id`, which re-raises failures it
does not recognize: a delete that failed for an unknown reason must not
look like success to the caller.

Read paths degrade to `data: None` on an unexpected store failure, which
the HTTP layer reports as "No movies found". The failure itself is logged
at ERROR.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo import errors

from .exceptions import RecordNotFoundError
from .models import DataOutcome, ErrorOutcome, MessageOutcome
from .mongo import MongoMovieStore

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


def not_found(movie_id: int) -> ErrorOutcome:
    return ErrorOutcome(status=404, error=f"Movie with ID {movie_id} not found")


def conflict(name: str) -> ErrorOutcome:
    return ErrorOutcome(status=409, error=f"Movie {name} already exists")


class MovieAdapter:
    def __init__(self, store: MongoMovieStore):
        self.store = store

    def get_movies(self) -> DataOutcome:
        try:
            return DataOutcome(data=self.store.find_all())
        except Exception as e:
            self._handle_error(e)
            return DataOutcome(data=None)

    def get_movie_by_id(self, movie_id: int) -> DataOutcome:
        try:
            return DataOutcome(data=self.store.find_by_id(movie_id))
        except Exception as e:
            self._handle_error(e, movie_id)
            return DataOutcome(data=None)

    def get_movie_by_name(self, name: str) -> DataOutcome:
        try:
            return DataOutcome(data=self.store.find_by_name(name))
        except Exception as e:
            self._handle_error(e)
            return DataOutcome(data=None)

    def add_movie(
        self, movie: dict[str, Any], movie_id: int | None = None
    ) -> DataOutcome | ErrorOutcome:
        """Create a movie unless one with the same name exists.

        The name probe answers the common case without a write. The unique
        index on `name` catches the race where two creates pass the probe
        together.
        """
        name = movie["name"]
        try:
            if self.store.find_by_name(name) is not None:
                return conflict(name)
            created = self.store.create(movie, movie_id)
            return DataOutcome(data=created)
        except errors.DuplicateKeyError:
            logger.warning("Duplicate movie rejected by unique index", extra={"movie_name": name})
            return conflict(name)
        except Exception as e:
            return self._handle_error(e, movie_id) or ErrorOutcome(
                status=500, error=INTERNAL_ERROR
            )

    def update_movie(
        self, patch: dict[str, Any], movie_id: int
    ) -> DataOutcome | ErrorOutcome:
        try:
            if self.store.find_by_id(movie_id) is None:
                return not_found(movie_id)
            updated = self.store.update(movie_id, patch)
            return DataOutcome(data=updated)
        except errors.DuplicateKeyError:
            return conflict(patch.get("name", ""))
        except Exception as e:
            return self._handle_error(e, movie_id) or ErrorOutcome(
                status=500, error=INTERNAL_ERROR
            )

    def delete_movie_by_id(self, movie_id: int) -> MessageOutcome | ErrorOutcome:
        try:
            deleted = self.store.delete(movie_id)
            return MessageOutcome(message=f"Movie {movie_id} has been deleted", movie=deleted)
        except Exception as e:
            outcome = self._handle_error(e, movie_id)
            if outcome is not None:
                return outcome
            raise

    def _handle_error(
        self, error: Exception, movie_id: int | None = None
    ) -> ErrorOutcome | None:
        """Classify a store failure.

        Returns the 404 envelope for a recognized missing record, and None
        for anything else (logged, treated as internal).
        """
        if isinstance(error, RecordNotFoundError) and movie_id is not None:
            return not_found(movie_id)

        logger.error(
            "Unexpected store error",
            extra={"movie_id": movie_id, "error": str(error)},
            exc_info=error,
        )
        return None
