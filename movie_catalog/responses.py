"""Turn outcome envelopes into HTTP responses."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from .models import DataOutcome, Outcome

NO_MOVIES_FOUND = "No movies found"


def format_response(outcome: Outcome) -> JSONResponse:
    """Render an envelope. A lookup that found nothing becomes a 404."""
    if isinstance(outcome, DataOutcome) and outcome.data is None:
        return error_response(404, NO_MOVIES_FOUND)
    return JSONResponse(status_code=outcome.status, content=outcome.body())


def error_response(status: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"status": status, "error": error})
