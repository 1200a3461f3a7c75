"""HTTP front end of the speed test service."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Protocol, Union
from urllib.parse import parse_qs, urlsplit

from .server_config import ServerConfig
from .speedtest_client import SPEEDTEST_METHOD, SpeedTestResult

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")

Query = Mapping[str, Union[str, Sequence[str]]]
Reply = tuple[HTTPStatus, str, bytes]


class Measurer(Protocol):
    def measure(
        self, app_id: int, app_hash: str, proxy_address: str, file_size_mb: int, chat_id: int
    ) -> SpeedTestResult: ...


@dataclass(frozen=True)
class SpeedTestRequest:
    chat_id: int
    app_id: int
    app_hash: str
    proxy_address: str
    file_size_mb: int


class BadRequest(ValueError):
    """Raised when a request carries invalid parameters."""


def _first(query: Query, name: str) -> str:
    value = query.get(name, "")
    if isinstance(value, str):
        return value
    return value[0] if value else ""


def _int_or_none(text: str) -> int | None:
    if _INT_RE.fullmatch(text) and -(2**63) <= int(text) < 2**63:
        return int(text)
    return None


def parse_speedtest_query(query: Query, config: ServerConfig) -> SpeedTestRequest:
    """Validate a speed test query, filling in defaults from ``config``."""
    chat_id = _int_or_none(_first(query, "chat_id"))
    if chat_id is None:
        raise BadRequest("invalid chat_id parameter")
    app_id = _int_or_none(_first(query, "app_id") or config.app_id)
    if app_id is None:
        raise BadRequest("invalid app_id parameter")
    file_size_mb = _int_or_none(_first(query, "mb")) or 0
    return SpeedTestRequest(
        chat_id=chat_id,
        app_id=app_id,
        app_hash=_first(query, "app_hash") or config.app_hash,
        proxy_address=_first(query, "proxy"),
        file_size_mb=file_size_mb if file_size_mb > 0 else 10,
    )


def _text(status: HTTPStatus, message: str) -> Reply:
    return status, "text/plain; charset=utf-8", (message + "\n").encode()


def handle_speedtest(tester: Measurer, config: ServerConfig, query: Query) -> Reply:
    """Serve one speed test request; return status, content type and body."""
    try:
        req = parse_speedtest_query(query, config)
    except BadRequest as exc:
        return _text(HTTPStatus.BAD_REQUEST, str(exc))
    logger.info("starting speed test with %d MB file for chat %d", req.file_size_mb, req.chat_id)
    try:
        result = tester.measure(req.app_id, req.app_hash, req.proxy_address, req.file_size_mb, req.chat_id)
    except Exception as exc:
        logger.error("speed test failed: %s", exc)
        return _text(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")
    return HTTPStatus.OK, "application/json", (json.dumps(result.to_dict()) + "\n").encode()


def make_server(tester: Measurer, config: ServerConfig, host: str = "") -> ThreadingHTTPServer:
    """Create an HTTP server serving ``GET /speedtest`` on ``config.port``."""

    class Handler(BaseHTTPRequestHandler):
        def _serve(self, get: bool, send_body: bool = True) -> None:
            url = urlsplit(self.path)
            allow = None
            if url.path != SPEEDTEST_METHOD:
                status, ctype, body = _text(HTTPStatus.NOT_FOUND, "404 page not found")
            elif not get:
                status, ctype, body = _text(HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed")
                allow = "GET, HEAD"
            else:
                status, ctype, body = handle_speedtest(
                    tester, config, parse_qs(url.query, keep_blank_values=True)
                )
            self.send_response(status)
            self.send_header("Content-Type", ctype)
            self.send_header("Content-Length", str(len(body)))
            if allow:
                self.send_header("Allow", allow)
            self.end_headers()
            if send_body:
                self.wfile.write(body)

        def do_GET(self) -> None:
            self._serve(True)

        def do_HEAD(self) -> None:
            self._serve(True, send_body=False)

        def do_POST(self) -> None:
            self._serve(False)

        do_PUT = do_DELETE = do_PATCH = do_POST

    addr_host, _, port_text = config.port.rpartition(":")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid listen address: {config.port!r}") from None
    return ThreadingHTTPServer((addr_host or host, port), Handler)