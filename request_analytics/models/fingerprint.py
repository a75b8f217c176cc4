"""Per-request fingerprint record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """Connection and header metadata captured from a single HTTP request.

    One instance becomes exactly one row in the fingerprint table. String
    fields default to the empty string when the request does not carry the
    corresponding header, and both TLS fields stay at zero for plaintext
    connections.
    """

    user_agent: str = ""
    ip_address: str = ""
    accept_language: str = ""
    accept_encoding: str = ""
    accept_charset: str = ""
    accept: str = ""
    connection: str = ""
    host: str = ""
    x_forwarded_for: str = ""
    referer: str = ""
    cookie: str = ""
    dnt: str = ""
    upgrade_insecure_requests: str = ""
    cache_control: str = ""
    pragma: str = ""
    via: str = ""
    forwarded: str = ""
    x_real_ip: str = ""
    x_forwarded_proto: str = ""
    x_forwarded_host: str = ""
    x_forwarded_port: str = ""
    x_amz_date: str = ""
    x_api_key: str = ""
    x_request_id: str = ""
    authorization: str = ""
    content_type: str = ""
    content_length: int = -1
    method: str = ""
    request_uri: str = ""
    protocol: str = ""
    transfer_encoding: tuple[str, ...] = ()
    tls_version: int = 0
    tls_cipher_suite: int = 0


__all__ = ["Fingerprint"]
