"""Client identity for audit events, derived from the raw ASGI request."""

from __future__ import annotations

from collections.abc import Iterable


def header_value(headers: Iterable[tuple[bytes, bytes]], name: str) -> str | None:
    """Return the first value for name (case-insensitive) from ASGI headers."""
    want = name.lower().encode()
    for key, value in headers:
        if key.lower() == want:
            return value.decode("utf-8", errors="replace")
    return None


def client_identity(scope: dict) -> tuple[str | None, str | None]:
    """Return (ip_address, user_agent) for the request in scope.

    IP is the first X-Forwarded-For hop when present, else the socket peer.
    """
    headers = scope.get("headers", [])
    forwarded = header_value(headers, "X-Forwarded-For")
    client = scope.get("client")
    peer = client[0] if client else None
    ip_address = (forwarded.split(",")[0].strip() if forwarded else None) or peer
    return ip_address, header_value(headers, "User-Agent")
