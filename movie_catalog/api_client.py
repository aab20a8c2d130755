"""HTTP client for a running movie-catalog service.

Used by `verify` to drive the API the way an external consumer would.
Responses are returned as parsed envelopes; non-2xx statuses are not
raised unless `allowed_to_fail` is False.
"""

from __future__ import annotations

from typing import Any

import httpx

from .config import MOVIE_SERVICE_URL


class MovieApiClient:
    def __init__(
        self,
        base_url: str = MOVIE_SERVICE_URL,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ):
        # httpx.Client keeps connections alive across the calls of one run.
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._token: str | None = None

    def __enter__(self) -> "MovieApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def token(self) -> str:
        """Fetch a bearer token once and reuse it."""
        if self._token is None:
            resp = self._client.get("/auth/fake-token")
            resp.raise_for_status()
            self._token = resp.json()["token"]
        return self._token

    def _request(
        self, method: str, url: str, allowed_to_fail: bool = False, **kwargs
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.token()}"}
        resp = self._client.request(method, url, headers=headers, **kwargs)
        if not allowed_to_fail:
            resp.raise_for_status()
        return resp.json()

    def get_all_movies(self) -> dict[str, Any]:
        return self._request("GET", "/movies")

    def get_movie_by_id(self, movie_id: int, allowed_to_fail: bool = False) -> dict[str, Any]:
        return self._request("GET", f"/movies/{movie_id}", allowed_to_fail)

    def get_movie_by_name(self, name: str, allowed_to_fail: bool = False) -> dict[str, Any]:
        return self._request("GET", "/movies", allowed_to_fail, params={"name": name})

    def add_movie(self, movie: dict[str, Any], allowed_to_fail: bool = False) -> dict[str, Any]:
        return self._request("POST", "/movies", allowed_to_fail, json=movie)

    def update_movie(self, movie_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/movies/{movie_id}", json=changes)

    def delete_movie(self, movie_id: int, allowed_to_fail: bool = False) -> dict[str, Any]:
        return self._request("DELETE", f"/movies/{movie_id}", allowed_to_fail)
