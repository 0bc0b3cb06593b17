"""Async client for the Joplin Data API (Web Clipper)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from .errors import ErrorKind, JoplinApiError
from .options import RequestOptions, merge_request_options

logger = logging.getLogger(__name__)

PING_RESPONSE = "JoplinClipperServer"

# Option keys handed to httpx as-is; everything else except ``query`` is ignored.
_TRANSPORT_FIELDS = ("headers", "timeout")


@dataclass(frozen=True, slots=True)
class JoplinClientConfig:
    """Connection settings for a single :class:`JoplinClient`."""

    token: str
    port: int = 41184
    host: str = "127.0.0.1"
    timeout_seconds: float = 15.0
    max_pages: int = 1000

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class JoplinClient:
    """Thin wrapper around Joplin's REST API."""

    def __init__(self, config: JoplinClientConfig) -> None:
        if not config.token:
            raise ValueError("A Joplin API token is required")
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    @property
    def config(self) -> JoplinClientConfig:
        return self._config

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> JoplinClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def service_available(self) -> bool:
        """Return True only when ``/ping`` answers 200 with the Web Clipper marker."""
        try:
            resp = await self._client.get("/ping")
        except httpx.HTTPError as exc:
            logger.warning("Error checking Joplin service availability: %s", exc)
            return False
        return resp.status_code == 200 and resp.text == PING_RESPONSE

    async def read(self, path: str, options: RequestOptions | None = None) -> Any:
        return await self.request_json("GET", path, options=options)

    async def create(
        self, path: str, body: Any, options: RequestOptions | None = None
    ) -> Any:
        return await self.request_json("POST", path, json_body=body, options=options)

    async def replace(
        self, path: str, body: Any, options: RequestOptions | None = None
    ) -> Any:
        return await self.request_json("PUT", path, json_body=body, options=options)

    async def remove(self, path: str, options: RequestOptions | None = None) -> Any:
        return await self.request_json("DELETE", path, options=options)

    async def read_all_pages(
        self, path: str, options: RequestOptions | None = None
    ) -> list[Any]:
        """Follow ``has_more`` from page 1 and return every item in order."""
        items: list[Any] = []
        page = 1
        while True:
            data = await self.read(
                path, merge_request_options(options, {"query": {"page": page}})
            )
            if not isinstance(data, dict) or not isinstance(data.get("items"), list):
                logger.warning("Unexpected paginated response for %s (page %d)", path, page)
                raise JoplinApiError(
                    kind=ErrorKind.UNEXPECTED_SHAPE,
                    method="GET",
                    path=path,
                    detail=f"Unexpected response format from Joplin API for path: {path}",
                )

            items.extend(data["items"])
            if not data.get("has_more"):
                return items

            if page >= self._config.max_pages:
                raise JoplinApiError(
                    kind=ErrorKind.PAGINATION_LIMIT,
                    method="GET",
                    path=path,
                    detail=(
                        f"Pagination limit exceeded: still has_more after "
                        f"{self._config.max_pages} pages"
                    ),
                )
            page += 1

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        options: RequestOptions | None = None,
    ) -> Any:
        method = method.upper()
        url_path = path if path.startswith("/") else f"/{path}"
        merged = merge_request_options({"query": {"token": self._config.token}}, options)
        extra = {k: merged[k] for k in _TRANSPORT_FIELDS if k in merged}

        try:
            resp = await self._client.request(
                method, url_path, params=merged["query"], json=json_body, **extra
            )
        except httpx.HTTPError as exc:
            logger.warning("Error in %s request for path %s: %s", method, url_path, exc)
            raise JoplinApiError(
                kind=ErrorKind.TRANSPORT,
                method=method,
                path=url_path,
                detail=str(exc) or type(exc).__name__,
            ) from exc

        if resp.status_code >= 400:
            logger.warning(
                "Error in %s request for path %s: HTTP %d", method, url_path, resp.status_code
            )
            raise JoplinApiError(
                kind=ErrorKind.NOT_FOUND if resp.status_code == 404 else ErrorKind.HTTP_STATUS,
                method=method,
                path=url_path,
                detail=(resp.text or "").strip(),
                status_code=resp.status_code,
            )

        # DELETE answers with an empty body.
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("Invalid JSON from %s %s", method, url_path)
            raise JoplinApiError(
                kind=ErrorKind.DECODE,
                method=method,
                path=url_path,
                detail=f"Invalid JSON in response: {exc}",
                status_code=resp.status_code,
            ) from exc
