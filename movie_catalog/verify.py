"""End-to-end check of CRUD plus event mirroring against a running service.

Creates, reads, updates and deletes one movie through the HTTP API and
waits for the matching `movie-created`, `movie-updated` and
`movie-deleted` records to show up in the mirror file. Works whether or
not Kafka is running, since the mirror is written either way.
"""

from __future__ import annotations

import logging
import random
import uuid
from pathlib import Path
from typing import Any

from .api_client import MovieApiClient
from .event_log import wait_for_event
from .exceptions import MovieCatalogError
from .models import MovieTopic

logger = logging.getLogger(__name__)


class VerificationError(MovieCatalogError):
    pass


def generate_movie() -> dict[str, Any]:
    return {
        "name": f"verify-{uuid.uuid4().hex[:12]}",
        "year": random.randint(1975, 2024),
        "rating": round(random.uniform(1, 10), 1),
    }


def _expect(condition: bool, what: str, got: Any) -> None:
    if not condition:
        raise VerificationError(f"{what}; got {got!r}")


def _check_event(movie: dict[str, Any], topic: MovieTopic, log_path: Path, timeout: float) -> None:
    events = wait_for_event(movie["id"], topic, log_path, timeout=timeout)
    _expect(len(events) == 1, f"exactly one {topic} event", len(events))
    event = events[0]
    _expect(event.key == str(movie["id"]), f"{topic} key", event.key)
    _expect(event.movie.model_dump() == movie, f"{topic} movie", event.movie.model_dump())
    logger.info("Found mirrored event", extra={"topic": topic, "key": event.key})


def run_crud_event_check(
    client: MovieApiClient, log_path: str | Path, timeout: float = 10.0
) -> int:
    """Run the scenario; return the id of the movie it used.

    Raises:
        VerificationError on the first response or event that does not match.
        TimeoutError if an expected event never reaches the mirror.
    """
    log_path = Path(log_path)
    movie = generate_movie()

    created = client.add_movie(movie)
    _expect(created.get("status") == 200, "create returns 200", created)
    movie_id = created["data"]["id"]
    expected = {"id": movie_id, **movie}
    _expect(created["data"] == expected, "created movie", created["data"])
    _check_event(expected, "movie-created", log_path, timeout)

    by_id = client.get_movie_by_id(movie_id)
    _expect(by_id.get("data") == expected, "movie by id", by_id)
    by_name = client.get_movie_by_name(movie["name"])
    _expect(by_name.get("data") == expected, "movie by name", by_name)

    changes = generate_movie()
    updated = client.update_movie(movie_id, changes)
    expected = {"id": movie_id, **changes}
    _expect(updated.get("data") == expected, "updated movie", updated)
    _check_event(expected, "movie-updated", log_path, timeout)

    deleted = client.delete_movie(movie_id)
    _expect(
        deleted == {"status": 200, "message": f"Movie {movie_id} has been deleted"},
        "delete message",
        deleted,
    )
    _check_event(expected, "movie-deleted", log_path, timeout)

    again = client.delete_movie(movie_id, allowed_to_fail=True)
    _expect(
        again == {"status": 404, "error": f"Movie with ID {movie_id} not found"},
        "second delete is 404",
        again,
    )
    return movie_id
