"""Pydantic models for movie-catalog.

Three groups live here:

- Movie records and the create/update payloads checked by `validation`.
- Outcome envelopes returned by the adapter and the service.
- Movie events: the in-memory `MovieEvent` and its wire/mirror record.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

MovieAction = Literal["created", "updated", "deleted"]
MovieTopic = Literal["movie-created", "movie-updated", "movie-deleted"]

MIN_YEAR = 1900
MAX_YEAR = 2024


class Movie(BaseModel):
    """A movie as stored. `id` is always assigned by the store."""

    id: int = Field(gt=0)
    name: str = Field(min_length=1)
    year: int | None = None
    rating: float


class MovieCreate(BaseModel):
    """Body of `POST /movies`.

    Strict mode keeps primitive kinds honest: `"2010"` is not a year and
    `true` is not a rating. `id` is optional and only set by the event
    consistency harness; normal traffic lets the store assign it.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    # Defaults are not validated, so an absent field stays None while an
    # explicit null is rejected like any other wrong kind.
    id: int = Field(default=None, gt=0)
    name: str = Field(min_length=1)
    year: int = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    rating: float

    def fields(self) -> dict[str, Any]:
        """Field values to persist, without the caller-supplied id."""
        return self.model_dump(exclude={"id"})


class MovieUpdate(BaseModel):
    """Body of `PUT /movies/{id}`. Absent fields are left unchanged."""

    model_config = ConfigDict(strict=True, extra="ignore")

    name: str = Field(default=None, min_length=1)
    year: int = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    rating: float = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# --- Outcome envelopes -------------------------------------------------------
# Exactly one of data / error / message per result. `kind` is the tag; it is
# never part of the HTTP body.


class _Envelope(BaseModel):
    status: int

    @property
    def ok(self) -> bool:
        return self.status == 200

    def body(self) -> dict[str, Any]:
        return self.model_dump(exclude={"kind"})


class DataOutcome(_Envelope):
    kind: Literal["data"] = "data"
    status: int = 200
    data: Movie | list[Movie] | None = None


class ErrorOutcome(_Envelope):
    kind: Literal["error"] = "error"
    error: str

    @property
    def ok(self) -> bool:
        return False


class MessageOutcome(_Envelope):
    kind: Literal["message"] = "message"
    status: int = 200
    message: str
    # The record a delete removed. Feeds the deleted event, never the body.
    movie: Movie | None = Field(default=None, exclude=True)


Outcome = Annotated[
    Union[DataOutcome, ErrorOutcome, MessageOutcome],
    Field(discriminator="kind"),
]


# --- Events ------------------------------------------------------------------


class MovieEventMessage(BaseModel):
    """One Kafka message: key is the movie id, value is the JSON-encoded movie."""

    key: str
    value: str


class MovieEventRecord(BaseModel):
    """Wire shape of an event, also used verbatim as one mirror line."""

    topic: MovieTopic
    messages: list[MovieEventMessage]


class MovieEvent(BaseModel):
    """A change event for one movie mutation.

    Built by the service right after a successful mutation and handed to the
    publisher once. Frozen so nothing downstream can rewrite what was emitted.
    """

    model_config = ConfigDict(frozen=True)

    topic: MovieTopic
    key: str
    value: Movie

    @classmethod
    def for_movie(cls, movie: Movie, action: MovieAction) -> "MovieEvent":
        return cls(topic=f"movie-{action}", key=str(movie.id), value=movie)

    def serialized_value(self) -> str:
        return self.value.model_dump_json()

    def to_record(self) -> MovieEventRecord:
        return MovieEventRecord(
            topic=self.topic,
            messages=[MovieEventMessage(key=self.key, value=self.serialized_value())],
        )
