"""movie-catalog configuration.

Everything is read from environment variables so the service runs the same
way locally, in CI, or inside Docker. Defaults target a local development
stack (MongoDB on 27017, Kafka on 29092).
"""

from __future__ import annotations

import os

# --- MongoDB -----------------------------------------------------------------
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "movies_db")
MONGO_COLLECTION: str = os.getenv("MONGO_COLLECTION", "movies")

# Holds one document per sequence; `movies` is the id sequence for movie records.
MONGO_COUNTERS_COLLECTION: str = os.getenv("MONGO_COUNTERS_COLLECTION", "counters")

# --- Kafka -------------------------------------------------------------------
KAFKA_BOOTSTRAP_SERVERS: str = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:29092")
KAFKA_CLIENT_ID: str = os.getenv("KAFKA_CLIENT_ID", "movie-provider")

# Retry budget handed to librdkafka. Kept small so a missing broker
# costs a CRUD call well under a second of background work.
KAFKA_RETRIES: int = int(os.getenv("KAFKA_RETRIES", "2"))
KAFKA_RETRY_BACKOFF_MS: int = int(os.getenv("KAFKA_RETRY_BACKOFF_MS", "100"))
KAFKA_RETRY_BACKOFF_MAX_MS: int = int(os.getenv("KAFKA_RETRY_BACKOFF_MAX_MS", "300"))

# Upper bound on how long a single message may stay undelivered.
KAFKA_MESSAGE_TIMEOUT_MS: int = int(os.getenv("KAFKA_MESSAGE_TIMEOUT_MS", "1000"))
KAFKA_FLUSH_TIMEOUT_SECONDS: float = float(os.getenv("KAFKA_FLUSH_TIMEOUT_SECONDS", "2.0"))

# --- Event mirror ------------------------------------------------------------
# Append-only JSON-lines file with one record per emitted event.
EVENT_LOG_PATH: str = os.getenv("EVENT_LOG_PATH", "./kafka-events.log")
EVENT_LOG_DEBOUNCE_SECONDS: float = float(os.getenv("EVENT_LOG_DEBOUNCE_SECONDS", "1.0"))

# Threads available for detached publishes. With more than one, mirror
# lines are no longer guaranteed to follow emission order.
PUBLISH_WORKERS: int = int(os.getenv("PUBLISH_WORKERS", "1"))

# --- HTTP --------------------------------------------------------------------
PORT: int = int(os.getenv("PORT", "3001"))
TOKEN_MAX_AGE_SECONDS: int = int(os.getenv("TOKEN_MAX_AGE_SECONDS", "3600"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Base URL used by the verification client.
MOVIE_SERVICE_URL: str = os.getenv("MOVIE_SERVICE_URL", f"http://localhost:{PORT}")
