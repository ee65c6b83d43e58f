"""ASGI response sending: translates a warbler Response into ASGI messages."""

from warbler._internal.asgi import Send
from warbler.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether the response to *method* with *status* carries a body."""
    # 1xx, 204 and 304 responses never include a body; HEAD responses omit it.
    return method != "HEAD" and not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* as one ``http.response.start`` and one body message."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in response.cookies
    )

    body = response.body_bytes
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    if not _body_allowed(response.status, method):
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
