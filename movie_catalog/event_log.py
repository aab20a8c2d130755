"""Durable mirror of emitted movie events.

The mirror is an append-only UTF-8 file with one JSON object per line:

    {"topic": "movie-created", "messages": [{"key": "1", "value": "{\\"id\\":1,...}"}]}

`EventLogWriter` is the write side used by the publisher. Each append is a
single `write` of a complete line under a process-wide lock, in append
mode, so lines from overlapping requests never interleave.

The read side (`read_events`, `find_events`, `wait_for_event`) is for
verification only. It reshapes each line into `{topic, key, movie}`.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path

from pydantic import BaseModel

from .config import EVENT_LOG_PATH
from .models import Movie, MovieEvent, MovieEventRecord, MovieTopic

logger = logging.getLogger(__name__)

# Shared by every writer in the process, whatever path it points at.
_append_lock = threading.Lock()


class EventLogWriter:
    def __init__(self, path: str | Path = EVENT_LOG_PATH):
        self.path = Path(path)

    def append(self, event: MovieEvent) -> None:
        line = event.to_record().model_dump_json() + "\n"
        with _append_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
        logger.debug("Mirrored event", extra={"topic": event.topic, "key": event.key})


class LoggedEvent(BaseModel):
    """A mirror line reshaped for assertions."""

    topic: MovieTopic
    key: str
    movie: Movie


def _reshape(record: MovieEventRecord) -> LoggedEvent:
    message = record.messages[0]
    return LoggedEvent(
        topic=record.topic,
        key=message.key,
        movie=Movie.model_validate_json(message.value),
    )


def read_events(path: str | Path = EVENT_LOG_PATH) -> list[LoggedEvent]:
    """Parse every line of the mirror. A missing file means no events yet."""
    path = Path(path)
    if not path.exists():
        return []

    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []

    return [
        _reshape(MovieEventRecord.model_validate(json.loads(line)))
        for line in text.split("\n")
    ]


def filter_events(
    events: list[LoggedEvent], movie_id: int, topic: MovieTopic
) -> list[LoggedEvent]:
    return [e for e in events if e.topic == topic and e.movie.id == movie_id]


def find_events(
    movie_id: int, topic: MovieTopic, path: str | Path = EVENT_LOG_PATH
) -> list[LoggedEvent]:
    return filter_events(read_events(path), movie_id, topic)


def wait_for_event(
    movie_id: int,
    topic: MovieTopic,
    path: str | Path = EVENT_LOG_PATH,
    timeout: float = 10.0,
    interval: float = 0.5,
) -> list[LoggedEvent]:
    """Poll the mirror until an event for `movie_id` on `topic` shows up.

    Raises:
        TimeoutError if nothing matched within `timeout` seconds.
    """
    deadline = time.monotonic() + timeout
    while True:
        matches = find_events(movie_id, topic, path)
        if matches:
            return matches
        if time.monotonic() >= deadline:
            raise TimeoutError(f"No {topic} event for movie {movie_id} within {timeout}s")
        time.sleep(interval)
