"""
JSON-RPC transports.

Two implementations share one contract, ``request(method, params) -> result``:

- ``HttpTransport``: a persistent httpx client (optionally via a proxy;
  SOCKS proxies need the ``httpx[socks]`` extra)
- ``WebSocketTransport``: a persistent websocket (websockets' sync client;
  SOCKS proxies need ``python-socks``)

Library failures are mapped onto the ledgerline taxonomy here, so callers
only ever see ``TransportError`` (with a category), ``ProtocolError`` or
``RpcError``.
"""

from __future__ import annotations

import itertools
import json
import logging
import socket
from dataclasses import dataclass
from typing import Any, Optional, Protocol
from urllib.parse import urlsplit

import httpx
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.sync.client import ClientConnection, connect

from ..errors import ConfigError, ProtocolError, RpcError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "name resolution",
    "getaddrinfo",
    "no address associated",
)


@dataclass(frozen=True)
class TransportConfig:
    """Where and how to reach the node."""

    url: str
    proxy: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def kind(self) -> str:
        scheme = urlsplit(self.url).scheme.lower()
        if scheme in ("ws", "wss"):
            return "ws"
        if scheme in ("http", "https"):
            return "http"
        raise ConfigError(f"Unsupported node URL scheme: {scheme!r}")

    @property
    def endpoint(self) -> str:
        """URL without path/query, safe to log (paths often carry API keys)."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.hostname}"


class Transport(Protocol):
    def request(self, method: str, params: list) -> Any: ...

    def close(self) -> None: ...


def _connect_category(exc: BaseException) -> str:
    if isinstance(exc, socket.gaierror):
        return "dns"
    text = str(exc).lower()
    if any(marker in text for marker in _DNS_MARKERS):
        return "dns"
    return "connection"


def _unwrap(data: Any, method: str) -> Any:
    """Extract ``result`` from a JSON-RPC response body."""
    if not isinstance(data, dict) or data.get("jsonrpc") != "2.0":
        raise ProtocolError(
            f"Malformed JSON-RPC response to {method}",
            details={"response": data},
        )
    if data.get("error") is not None:
        error = data["error"]
        if isinstance(error, dict):
            raise RpcError(
                f"RPC error from {method}: {error.get('message', error)}",
                code=error.get("code"),
                data=error.get("data"),
            )
        raise RpcError(f"RPC error from {method}: {error}")
    if "result" not in data:
        raise ProtocolError(
            f"JSON-RPC response to {method} has neither result nor error",
            details={"response": data},
        )
    return data["result"]


class HttpTransport:
    """JSON-RPC over one persistent HTTP(S) connection pool."""

    def __init__(
        self,
        config: TransportConfig,
        http_transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            timeout=config.timeout,
            proxy=config.proxy,
            transport=http_transport,
        )
        self._closed = False

    def request(self, method: str, params: list) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        endpoint = self.config.endpoint

        try:
            response = self._client.post(self.config.url, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"{method}: request timed out: {exc}", category="timeout", endpoint=endpoint
            ) from exc
        except (httpx.ConnectError, httpx.ProxyError) as exc:
            raise TransportError(
                f"{method}: connection failed: {exc}",
                category=_connect_category(exc),
                endpoint=endpoint,
            ) from exc
        except (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError) as exc:
            raise TransportError(
                f"{method}: stream terminated: {exc}", category="stream", endpoint=endpoint
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{method}: {exc}", endpoint=endpoint) from exc

        if response.status_code >= 500 or response.status_code == 429:
            raise TransportError(
                f"{method}: node returned HTTP {response.status_code}",
                category="http_status",
                endpoint=endpoint,
                details={"status_code": response.status_code},
            )
        if response.status_code >= 400:
            raise ProtocolError(
                f"{method}: node rejected request with HTTP {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:500]},
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError(f"{method}: response is not JSON") from exc

        return _unwrap(data, method)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._client.close()


class WebSocketTransport:
    """JSON-RPC over one persistent websocket, opened on first use."""

    def __init__(self, config: TransportConfig):
        self.config = config
        self._ids = itertools.count(1)
        self._ws: Optional[ClientConnection] = None
        self._closed = False

    def _connection(self) -> ClientConnection:
        if self._ws is not None:
            return self._ws
        endpoint = self.config.endpoint
        try:
            self._ws = connect(
                self.config.url,
                open_timeout=self.config.timeout,
                proxy=self.config.proxy,
            )
        except TimeoutError as exc:
            raise TransportError(
                f"websocket connect timed out: {exc}", category="timeout", endpoint=endpoint
            ) from exc
        except InvalidURI as exc:
            raise ProtocolError(f"Invalid websocket URL: {exc}") from exc
        except InvalidHandshake as exc:
            raise TransportError(
                f"websocket handshake failed: {exc}", category="connection", endpoint=endpoint
            ) from exc
        except OSError as exc:
            raise TransportError(
                f"websocket connect failed: {exc}",
                category=_connect_category(exc),
                endpoint=endpoint,
            ) from exc
        logger.debug("Websocket connected: %s", endpoint)
        return self._ws

    def request(self, method: str, params: list) -> Any:
        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": request_id}
        ws = self._connection()
        endpoint = self.config.endpoint

        try:
            ws.send(json.dumps(payload))
            while True:
                raw = ws.recv(timeout=self.config.timeout)
                try:
                    data = json.loads(raw)
                except ValueError as exc:
                    raise ProtocolError(f"{method}: response is not JSON") from exc
                # Subscription notifications carry no id; skip anything not ours.
                if isinstance(data, dict) and data.get("id") == request_id:
                    break
        except TimeoutError as exc:
            raise TransportError(
                f"{method}: response timed out", category="timeout", endpoint=endpoint
            ) from exc
        except ConnectionClosed as exc:
            self._ws = None
            raise TransportError(
                f"{method}: websocket closed: {exc}", category="stream", endpoint=endpoint
            ) from exc
        except OSError as exc:
            self._ws = None
            raise TransportError(
                f"{method}: {exc}", category="connection", endpoint=endpoint
            ) from exc

        return _unwrap(data, method)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._ws is not None:
            self._ws.close()
            self._ws = None


def open_transport(config: TransportConfig) -> Transport:
    """Create the transport matching the URL scheme."""
    if config.kind == "ws":
        return WebSocketTransport(config)
    return HttpTransport(config)
