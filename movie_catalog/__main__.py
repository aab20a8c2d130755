"""Command line entry point.

    python -m movie_catalog serve [--port 3001]
    python -m movie_catalog openapi [-o openapi.json]
    python -m movie_catalog verify [--url http://localhost:3001]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import EVENT_LOG_PATH, LOG_LEVEL, MOVIE_SERVICE_URL, PORT
from .logging_setup import setup_logging

logger = logging.getLogger("movie_catalog")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("movie_catalog.main:app", host=args.host, port=args.port)
    return 0


def _openapi(args: argparse.Namespace) -> int:
    from .main import create_app

    document = json.dumps(create_app().openapi(), indent=2)
    if args.output == "-":
        print(document)
    else:
        Path(args.output).write_text(document + "\n", encoding="utf-8")
        logger.info("Wrote OpenAPI document to %s", args.output)
    return 0


def _verify(args: argparse.Namespace) -> int:
    from .api_client import MovieApiClient
    from .verify import VerificationError, run_crud_event_check

    with MovieApiClient(args.url) as client:
        try:
            movie_id = run_crud_event_check(client, args.event_log, timeout=args.timeout)
        except (VerificationError, TimeoutError) as e:
            logger.error("Verification failed: %s", e)
            return 1
    logger.info("Verification passed for movie %s", movie_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="movie_catalog", description="Movie catalog service")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=PORT)
    serve.set_defaults(func=_serve)

    openapi = sub.add_parser("openapi", help="Write the OpenAPI document")
    openapi.add_argument("-o", "--output", default="openapi.json", help="File path, or - for stdout")
    openapi.set_defaults(func=_openapi)

    verify = sub.add_parser("verify", help="Run CRUD against a live service and check the event mirror")
    verify.add_argument("--url", default=MOVIE_SERVICE_URL)
    verify.add_argument("--event-log", default=EVENT_LOG_PATH)
    verify.add_argument("--timeout", type=float, default=10.0)
    verify.set_defaults(func=_verify)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
