"""MongoDB access for movie records.

This module has one job: talk to MongoDB. It knows nothing about HTTP
status codes or envelopes; `adapter.MovieAdapter` does that translation.

Storage layout:
- Each movie is one document whose `_id` is the integer movie id.
- Ids come from a `counters` document incremented atomically with
  `find_one_and_update`, so ids stay small, positive and increasing.
- `name` has a unique index. Two concurrent creates with the same name
  cannot both land; the loser gets `DuplicateKeyError`.

Updates and deletes of a missing id raise `RecordNotFoundError`, the one
store signal the adapter recognizes as "not found".
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo import ASCENDING, MongoClient, ReturnDocument

from .config import MONGO_COLLECTION, MONGO_COUNTERS_COLLECTION, MONGO_DB, MONGO_URI
from .exceptions import RecordNotFoundError
from .models import Movie

logger = logging.getLogger(__name__)

MOVIE_SEQUENCE = "movies"


def get_database(uri: str = MONGO_URI, db_name: str = MONGO_DB):
    """Connect to MongoDB and return the configured database handle."""
    client = MongoClient(uri)
    return client[db_name]


def _to_movie(doc: dict[str, Any]) -> Movie:
    fields = {k: v for k, v in doc.items() if k != "_id"}
    return Movie(id=doc["_id"], **fields)


class MongoMovieStore:
    """Movie persistence on top of two MongoDB collections."""

    def __init__(self, collection, counters):
        self.collection = collection
        self.counters = counters

    @classmethod
    def from_database(
        cls,
        db,
        collection: str = MONGO_COLLECTION,
        counters: str = MONGO_COUNTERS_COLLECTION,
    ) -> "MongoMovieStore":
        store = cls(db[collection], db[counters])
        store.ensure_indexes()
        return store

    def ensure_indexes(self) -> None:
        # Creating indexes at startup is fine here; there are no migrations.
        self.collection.create_index([("name", ASCENDING)], unique=True)

    def find_all(self) -> list[Movie]:
        return [_to_movie(doc) for doc in self.collection.find().sort("_id", ASCENDING)]

    def find_by_id(self, movie_id: int) -> Movie | None:
        doc = self.collection.find_one({"_id": movie_id})
        return _to_movie(doc) if doc else None

    def find_by_name(self, name: str) -> Movie | None:
        doc = self.collection.find_one({"name": name})
        return _to_movie(doc) if doc else None

    def create(self, fields: dict[str, Any], movie_id: int | None = None) -> Movie:
        """Insert a movie and return it with its id.

        A caller-supplied id also pushes the sequence forward so later
        store-assigned ids never collide with it.
        """
        if movie_id is None:
            movie_id = self._next_id()
        else:
            self.counters.update_one(
                {"_id": MOVIE_SEQUENCE}, {"$max": {"seq": movie_id}}, upsert=True
            )

        doc = {"_id": movie_id, **fields}
        self.collection.insert_one(doc)
        logger.info("Inserted movie", extra={"movie_id": movie_id})
        return _to_movie(doc)

    def update(self, movie_id: int, changes: dict[str, Any]) -> Movie:
        if not changes:
            current = self.find_by_id(movie_id)
            if current is None:
                raise RecordNotFoundError(movie_id)
            return current

        doc = self.collection.find_one_and_update(
            {"_id": movie_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise RecordNotFoundError(movie_id)
        return _to_movie(doc)

    def delete(self, movie_id: int) -> Movie:
        doc = self.collection.find_one_and_delete({"_id": movie_id})
        if doc is None:
            raise RecordNotFoundError(movie_id)
        return _to_movie(doc)

    def _next_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {"_id": MOVIE_SEQUENCE},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]
