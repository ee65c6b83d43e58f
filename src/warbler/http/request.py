"""Immutable HTTP request.

Frozen metadata with async body access. The locale middleware hands a
copy with the locale prefix stripped from ``path`` to the router;
``raw_path`` always holds the path as received.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from warbler._internal.asgi import Receive
from warbler.http.cookies import parse_cookies
from warbler.http.headers import Headers
from warbler.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.form()``.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    http_version: str
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def is_fragment(self) -> bool:
        """True if this is an htmx fragment request (HX-Request header)."""
        return self.headers.get("hx-request") == "true"

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request path as received, plus the query string."""
        qs = self.query.raw
        if qs:
            return f"{self.raw_path}?{qs.decode('latin-1')}"
        return self.raw_path

    def with_path(self, path: str) -> Request:
        """Return a copy routed to *path*; ``raw_path`` is preserved."""
        return replace(self, path=path)

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy carrying the matched route parameters.

        Shares the body cache, so data read by middleware isn't lost.
        """
        return replace(self, path_params=path_params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first call."""
        if "_body" not in self._cache:
            chunks = [chunk async for chunk in self.stream()]
            self._cache["_body"] = b"".join(chunks)
        return self._cache["_body"]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        return json_module.loads(await self.body())

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        return (await self.body()).decode("utf-8")

    async def form(self) -> QueryParams:
        """Parse an ``application/x-www-form-urlencoded`` body.

        Raises:
            ValueError: If the Content-Type is set and is not urlencoded.
        """
        if "_form" not in self._cache:
            ct = self.content_type or "application/x-www-form-urlencoded"
            if not ct.startswith("application/x-www-form-urlencoded"):
                msg = f"Cannot parse form data from Content-Type {ct!r}"
                raise ValueError(msg)
            self._cache["_form"] = QueryParams(await self.body())
        return self._cache["_form"]

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            raw_path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
