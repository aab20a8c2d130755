"""Exceptions raised inside movie-catalog.

Only a few of these ever cross a module boundary:

- `RecordNotFoundError` is the store's "mutation target does not exist"
  signal. The adapter turns it into a 404 envelope.
- `BrokerUnavailableError` is raised by a broker session and caught by the
  publisher. It never reaches the service.
- `UnauthorizedError` and `InvalidMovieIdError` are raised by HTTP
  dependencies and rendered by the app's exception handlers.
"""

from __future__ import annotations


class MovieCatalogError(Exception):
    """Base class for movie-catalog errors."""


class RecordNotFoundError(MovieCatalogError):
    """An update or delete targeted an id the store does not hold."""

    def __init__(self, movie_id: int):
        super().__init__(f"Record {movie_id} does not exist")
        self.movie_id = movie_id


class BrokerUnavailableError(MovieCatalogError):
    """The broker could not accept an event within the client's retry budget."""


class UnauthorizedError(MovieCatalogError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidMovieIdError(MovieCatalogError):
    def __init__(self, raw_id: str | None):
        super().__init__("Invalid movie ID provided")
        self.raw_id = raw_id
