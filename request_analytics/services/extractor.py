"""Build a ``Fingerprint`` from an incoming Starlette request."""

from __future__ import annotations

from typing import Any, Mapping

from starlette.requests import Request

from request_analytics.models.fingerprint import Fingerprint

# Fingerprint field -> request header, for the plain header-copy fields.
HEADER_FIELDS: tuple[tuple[str, str], ...] = (
    ("user_agent", "user-agent"),
    ("accept_language", "accept-language"),
    ("accept_encoding", "accept-encoding"),
    ("accept_charset", "accept-charset"),
    ("accept", "accept"),
    ("connection", "connection"),
    ("x_forwarded_for", "x-forwarded-for"),
    ("referer", "referer"),
    ("cookie", "cookie"),
    ("dnt", "dnt"),
    ("upgrade_insecure_requests", "upgrade-insecure-requests"),
    ("cache_control", "cache-control"),
    ("pragma", "pragma"),
    ("via", "via"),
    ("forwarded", "forwarded"),
    ("x_real_ip", "x-real-ip"),
    ("x_forwarded_proto", "x-forwarded-proto"),
    ("x_forwarded_host", "x-forwarded-host"),
    ("x_forwarded_port", "x-forwarded-port"),
    ("x_amz_date", "x-amz-date"),
    ("x_api_key", "x-api-key"),
    ("x_request_id", "x-request-id"),
    ("authorization", "authorization"),
    ("content_type", "content-type"),
)


def extract_fingerprint(request: Request) -> Fingerprint:
    """Read the tracked request attributes into an immutable fingerprint."""

    headers = request.headers
    header_values = {field: headers.get(name, "") for field, name in HEADER_FIELDS}

    transfer_encoding = _parse_transfer_encoding(headers.get("transfer-encoding", ""))
    tls_version, tls_cipher_suite = _tls_parameters(request.scope)

    return Fingerprint(
        **header_values,
        ip_address=request.client.host if request.client else "",
        host=headers.get("host") or request.url.netloc,
        content_length=_content_length(headers.get("content-length"), transfer_encoding),
        method=request.method,
        request_uri=_request_uri(request.scope),
        protocol=f"HTTP/{request.scope.get('http_version', '1.1')}",
        transfer_encoding=transfer_encoding,
        tls_version=tls_version,
        tls_cipher_suite=tls_cipher_suite,
    )


def _parse_transfer_encoding(raw_value: str) -> tuple[str, ...]:
    """Split a Transfer-Encoding header into lower-cased tokens."""

    return tuple(
        token.strip().lower() for token in raw_value.split(",") if token.strip()
    )


def _content_length(raw_value: str | None, transfer_encoding: tuple[str, ...]) -> int:
    """Return the declared body length, -1 when it cannot be known up front."""

    if raw_value is None:
        return -1 if transfer_encoding else 0

    try:
        length = int(raw_value.strip())
    except ValueError:
        return -1
    return length if length >= 0 else -1


def _request_uri(scope: Mapping[str, Any]) -> str:
    """Return the unmodified request target (path plus query string)."""

    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = scope.get("path", "")

    query_string = scope.get("query_string", b"")
    if query_string:
        return f"{path}?{query_string.decode('latin-1')}"
    return path


def _tls_parameters(scope: Mapping[str, Any]) -> tuple[int, int]:
    """Return (tls_version, cipher_suite) from the ASGI TLS extension."""

    extensions = scope.get("extensions") or {}
    tls_info = extensions.get("tls")
    if not tls_info:
        return 0, 0

    return (
        _as_uint16(tls_info.get("tls_version")),
        _as_uint16(tls_info.get("cipher_suite")),
    )


def _as_uint16(value: Any) -> int:
    if isinstance(value, int) and 0 <= value <= 0xFFFF:
        return value
    return 0


__all__ = ["HEADER_FIELDS", "extract_fingerprint"]
