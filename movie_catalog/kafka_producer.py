"""Kafka publishing of movie change events.

Key points:

1) One publisher per process
`MovieEventPublisher` is created once at startup, injected into the service
and shut down with the app. It owns a worker thread so publishing never
delays an HTTP response. Events queue up in the order they were emitted
and, with the default single worker, reach the mirror in that order.

2) One broker session per event
Each event gets its own connect -> send -> disconnect cycle
(`BrokerSession`). Sessions never share a producer, so one failed publish
cannot poison the next one.

3) Retries belong to the client
The retry budget (2 retries, backoff from 100ms capped at 300ms) and the
message timeout are librdkafka settings in `create_producer`. The
publisher itself never loops.

4) Best effort, always mirrored
Any broker or client failure is logged as a warning and swallowed.
Whatever happened, the event is appended to the mirror file after a short
debounce, so the mirror records every mutation even when Kafka is down.
"""

from __future__ import annotations

import enum
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

from confluent_kafka import KafkaError, KafkaException, Producer

from .config import (
    EVENT_LOG_DEBOUNCE_SECONDS,
    KAFKA_BOOTSTRAP_SERVERS,
    KAFKA_CLIENT_ID,
    KAFKA_FLUSH_TIMEOUT_SECONDS,
    KAFKA_MESSAGE_TIMEOUT_MS,
    KAFKA_RETRIES,
    KAFKA_RETRY_BACKOFF_MAX_MS,
    KAFKA_RETRY_BACKOFF_MS,
    PUBLISH_WORKERS,
)
from .event_log import EventLogWriter
from .exceptions import BrokerUnavailableError
from .models import Movie, MovieAction, MovieEvent

logger = logging.getLogger(__name__)


def create_producer(bootstrap_servers: str = KAFKA_BOOTSTRAP_SERVERS) -> Producer:
    """Create and configure a Confluent Kafka Producer."""
    conf: dict[str, Any] = {
        "bootstrap.servers": bootstrap_servers,
        "client.id": KAFKA_CLIENT_ID,
        "enable.idempotence": True,
        "retries": KAFKA_RETRIES,
        "retry.backoff.ms": KAFKA_RETRY_BACKOFF_MS,
        "retry.backoff.max.ms": KAFKA_RETRY_BACKOFF_MAX_MS,
        "reconnect.backoff.ms": KAFKA_RETRY_BACKOFF_MS,
        "reconnect.backoff.max.ms": KAFKA_RETRY_BACKOFF_MAX_MS,
        # Without this an unreachable broker holds a message for 5 minutes.
        "message.timeout.ms": KAFKA_MESSAGE_TIMEOUT_MS,
    }
    return Producer(conf)


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    PUBLISHING = "publishing"
    DISCONNECTING = "disconnecting"


class BrokerSession:
    """A single connect/send/disconnect cycle against Kafka.

    Usable as a context manager:

        with BrokerSession() as session:
            session.send("movie-created", b"1", b"{...}")

    Any client-level failure surfaces as `BrokerUnavailableError`.
    """

    def __init__(
        self,
        producer_factory: Callable[[], Producer] = create_producer,
        flush_timeout: float = KAFKA_FLUSH_TIMEOUT_SECONDS,
    ):
        self._producer_factory = producer_factory
        self._flush_timeout = flush_timeout
        self._producer: Producer | None = None
        self.state = SessionState.DISCONNECTED

    def connect(self) -> None:
        self.state = SessionState.CONNECTING
        try:
            self._producer = self._producer_factory()
        except KafkaException as e:
            self.state = SessionState.DISCONNECTED
            raise BrokerUnavailableError(f"Could not create producer: {e}") from e
        self.state = SessionState.CONNECTED

    def send(self, topic: str, key: bytes, value: bytes) -> None:
        if self.state is not SessionState.CONNECTED or self._producer is None:
            raise RuntimeError("Session not connected. Call connect() first.")

        failures: list[KafkaError] = []

        def on_delivery(err, msg) -> None:
            if err is not None:
                failures.append(err)
            else:
                logger.info(
                    "Delivered event",
                    extra={"topic": msg.topic(), "partition": msg.partition(), "offset": msg.offset()},
                )

        self.state = SessionState.PUBLISHING
        try:
            self._producer.produce(topic=topic, key=key, value=value, callback=on_delivery)
            # Blocks until delivered, failed, or the flush timeout expires.
            remaining = self._producer.flush(self._flush_timeout)
        except (KafkaException, BufferError) as e:
            raise BrokerUnavailableError(f"Produce failed: {e}") from e
        finally:
            self.state = SessionState.CONNECTED

        if failures:
            raise BrokerUnavailableError(f"Delivery failed: {failures[0]}")
        if remaining:
            raise BrokerUnavailableError(
                f"{remaining} message(s) undelivered after {self._flush_timeout}s"
            )

    def disconnect(self) -> None:
        self.state = SessionState.DISCONNECTING
        producer, self._producer = self._producer, None
        try:
            if producer is not None:
                # Drop anything still queued; the event is mirrored regardless.
                producer.purge()
                producer.flush(0)
        except KafkaException as e:
            logger.debug("Ignoring error while closing producer", extra={"error": str(e)})
        finally:
            self.state = SessionState.DISCONNECTED

    def __enter__(self) -> "BrokerSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()


class MovieEventPublisher:
    """Process-scoped publisher of movie change events."""

    def __init__(
        self,
        event_log: EventLogWriter,
        session_factory: Callable[[], BrokerSession] = BrokerSession,
        debounce_seconds: float = EVENT_LOG_DEBOUNCE_SECONDS,
        max_workers: int = PUBLISH_WORKERS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.event_log = event_log
        self._session_factory = session_factory
        self._debounce_seconds = debounce_seconds
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="movie-events"
        )
        self._closed = False

    def publish(self, movie: Movie, action: MovieAction) -> MovieEvent:
        """Publish one event and mirror it. Never raises on broker failure.

        Returns the in-memory event so callers can inspect what was emitted.
        """
        event = MovieEvent.for_movie(movie, action)
        logger.info("Publishing event", extra={"topic": event.topic, "key": event.key})

        try:
            with self._session_factory() as session:
                session.send(
                    event.topic,
                    event.key.encode("utf-8"),
                    event.serialized_value().encode("utf-8"),
                )
        except BrokerUnavailableError as e:
            logger.warning(
                "Kafka broker unavailable, skipping event publication",
                extra={"topic": event.topic, "key": event.key, "error": str(e)},
            )
        except Exception as e:
            logger.warning(
                "Kafka publish failed, skipping event publication",
                extra={"topic": event.topic, "key": event.key, "error": repr(e)},
                exc_info=e,
            )
        finally:
            # The mirror records the event whatever happened above.
            self._sleep(self._debounce_seconds)
            self.event_log.append(event)
        return event

    def publish_async(self, movie: Movie, action: MovieAction) -> Future[MovieEvent] | None:
        """Run `publish` in the background. The caller is not expected to wait."""
        if self._closed:
            logger.warning(
                "Publisher is shut down, dropping event",
                extra={"action": action, "movie_id": movie.id},
            )
            return None

        future = self._executor.submit(self.publish, movie, action)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting events. With `wait`, pending publishes finish first."""
        self._closed = True
        self._executor.shutdown(wait=wait)


def _log_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error("Background publish failed", exc_info=error)
