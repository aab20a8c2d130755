"""
pytest fixtures for movie-catalog tests.

Provides:
- An in-memory MongoDB (mongomock) behind the real store and adapter
- A fake confluent-kafka producer that can succeed or fail delivery
- A publisher writing its mirror under tmp_path with no debounce
- A FastAPI TestClient wired to all of the above
"""

from typing import Generator

import mongomock
import pytest
from confluent_kafka import KafkaError
from fastapi.testclient import TestClient

from movie_catalog.adapter import MovieAdapter
from movie_catalog.auth import issue_token
from movie_catalog.event_log import EventLogWriter
from movie_catalog.kafka_producer import BrokerSession, MovieEventPublisher
from movie_catalog.main import create_app
from movie_catalog.mongo import MongoMovieStore
from movie_catalog.service import MovieService


class FakeMessage:
    def __init__(self, topic: str):
        self._topic = topic

    def topic(self) -> str:
        return self._topic

    def partition(self) -> int:
        return 0

    def offset(self) -> int:
        return 0


class FakeProducer:
    """Stands in for confluent_kafka.Producer.

    Delivery callbacks fire on flush(), with `error` (None on success).
    """

    def __init__(self, error=None):
        self.error = error
        self.produced = []
        self.purged = False
        self._callbacks = []

    def produce(self, topic, key=None, value=None, callback=None):
        self.produced.append({"topic": topic, "key": key, "value": value})
        self._callbacks.append((callback, FakeMessage(topic)))

    def flush(self, timeout=None) -> int:
        callbacks, self._callbacks = self._callbacks, []
        for callback, msg in callbacks:
            if callback is not None:
                callback(self.error, msg)
        return 0

    def purge(self, *args, **kwargs) -> None:
        self.purged = True


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["movies_test"]


@pytest.fixture
def store(mongo_db) -> MongoMovieStore:
    return MongoMovieStore.from_database(mongo_db)


@pytest.fixture
def adapter(store) -> MovieAdapter:
    return MovieAdapter(store)


@pytest.fixture
def event_log_path(tmp_path):
    return tmp_path / "kafka-events.log"


@pytest.fixture
def producer() -> FakeProducer:
    return FakeProducer()


@pytest.fixture
def unreachable_producer() -> FakeProducer:
    return FakeProducer(error=KafkaError(KafkaError._MSG_TIMED_OUT))


def make_publisher(path, producer, **kwargs) -> MovieEventPublisher:
    return MovieEventPublisher(
        EventLogWriter(path),
        session_factory=lambda: BrokerSession(producer_factory=lambda: producer),
        debounce_seconds=0,
        **kwargs,
    )


@pytest.fixture
def publisher_factory(event_log_path):
    """Build publishers on the test's mirror path; all are shut down afterwards."""
    created = []

    def factory(producer, **kwargs) -> MovieEventPublisher:
        publisher = make_publisher(event_log_path, producer, **kwargs)
        created.append(publisher)
        return publisher

    yield factory
    for publisher in created:
        publisher.shutdown(wait=True)


@pytest.fixture
def publisher(publisher_factory, producer) -> MovieEventPublisher:
    return publisher_factory(producer)


@pytest.fixture
def service(adapter, publisher) -> MovieService:
    return MovieService(adapter, publisher)


@pytest.fixture
def client(service) -> Generator[TestClient, None, None]:
    with TestClient(create_app(service)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {issue_token()}"}
