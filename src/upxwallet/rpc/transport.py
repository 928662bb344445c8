"""
HTTP transport for the wallet daemon's ``/json_rpc`` endpoint.

Uses httpx.AsyncClient, one client per call, optionally with Digest
authentication. ``send`` never raises for daemon, network or decoding
failures; it resolves an RpcOutcome instead.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx
from loguru import logger

from .outcome import (
    UNEXPECTED_RESPONSE,
    UNREACHABLE,
    ParseError,
    RpcError,
    RpcOutcome,
    Success,
    TransportError,
)
from .request import JSONRPC_VERSION, REQUEST_ID, RpcRequest

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 17092
DEFAULT_TIMEOUT = 30.0
RPC_PATH = "/json_rpc"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Where and how to reach the wallet daemon.

    Attributes:
        host: Hostname or IP, optionally with a scheme (default http)
        port: wallet-rpc port
        username: Enables Digest auth when set
        password: Digest auth password
        timeout: Seconds before a request is abandoned
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: Optional[str] = None
    password: str = ""
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.host or not isinstance(self.host, str):
            raise ValueError("host must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ValueError(f"port must be an integer in 1..65535, got {self.port!r}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @property
    def url(self) -> str:
        host = self.host.rstrip("/")
        if "://" not in host:
            host = f"http://{host}"
        return f"{host}:{self.port}{RPC_PATH}"

    def auth(self) -> Optional[httpx.DigestAuth]:
        if not self.username:
            return None
        return httpx.DigestAuth(self.username, self.password or "")


def encode_body(request: Union[RpcRequest, Mapping[str, Any], Any]) -> bytes:
    """Serialize a request, adding the JSON-RPC envelope fields if absent."""
    if isinstance(request, RpcRequest):
        body = request.to_dict()
    elif isinstance(request, Mapping):
        body = dict(request)
    else:
        body = {}
    body.setdefault("jsonrpc", JSONRPC_VERSION)
    body.setdefault("id", REQUEST_ID)
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def normalize_response(status_code: int, text: str) -> RpcOutcome:
    """Map a completed HTTP exchange onto an outcome."""
    try:
        payload = json.loads(text)
    except ValueError as exc:
        logger.warning(f"Unparseable wallet response (HTTP {status_code}): {exc}")
        return ParseError(message=str(exc), raw_body=text, status_code=status_code)

    if isinstance(payload, dict):
        if payload.get("result") is not None:
            return Success(result=payload["result"])
        error = payload.get("error")
        if error is not None:
            return RpcError.from_daemon(error)
        if "result" in payload:
            return Success(result=None)

    logger.warning(f"Unexpected wallet response (HTTP {status_code})")
    return RpcError(code=status_code, message=UNEXPECTED_RESPONSE, raw=text)


class Transport:
    """Sends one request per call to the configured wallet daemon."""

    def __init__(
        self,
        config: ConnectionConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=self.config.auth(),
            timeout=self.config.timeout,
            transport=self._transport,
        )

    async def _post(self, content: bytes, headers: dict[str, str]) -> httpx.Response:
        async with self._client() as client:
            return await client.post(self.config.url, content=content, headers=headers)

    async def send(self, request: Union[RpcRequest, Mapping[str, Any]]) -> RpcOutcome:
        """
        Deliver a request and resolve exactly one outcome.

        Args:
            request: RpcRequest or a request mapping

        Returns:
            Success, RpcError, TransportError or ParseError
        """
        content = encode_body(request)
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(content)),
        }
        method = getattr(request, "method", None) or (
            request.get("method") if isinstance(request, Mapping) else None
        )
        logger.debug(f"POST {self.config.url} method={method} ({len(content)} bytes)")

        try:
            response = await asyncio.wait_for(self._post(content, headers), self.config.timeout)
        except (httpx.HTTPError, asyncio.TimeoutError) as exc:
            logger.warning(f"Wallet RPC {method} failed: {exc!r}")
            return TransportError(message=UNREACHABLE)

        return normalize_response(response.status_code, response.text)
