"""
Transport tests.

The wallet daemon is replaced by httpx.MockTransport handlers, so these
run offline.
"""

from __future__ import annotations

import asyncio
import json
import time

import httpx
import pytest

from upxwallet.errors import DaemonError, ResponseFormatError, WalletUnreachableError
from upxwallet.rpc.outcome import ParseError, RpcError, Success, TransportError
from upxwallet.rpc.request import build_request
from upxwallet.rpc.transport import ConnectionConfig, Transport, encode_body, normalize_response


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers requests and counts closes."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []
        self.closed = 0

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    async def aclose(self) -> None:
        self.closed += 1


def reply(payload, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    return handler


def raising(exc_type):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return handler


def make_transport(handler, **config) -> tuple[Transport, RecordingTransport]:
    mock = RecordingTransport(handler)
    return Transport(ConnectionConfig(**config), transport=mock), mock


# ============ ConnectionConfig ============


class TestConnectionConfig:
    def test_defaults(self) -> None:
        config = ConnectionConfig()
        assert config.url == "http://127.0.0.1:17092/json_rpc"
        assert config.timeout == 30.0
        assert config.auth() is None

    def test_scheme_kept(self) -> None:
        assert ConnectionConfig(host="https://wallet.local", port=443).url == "https://wallet.local:443/json_rpc"

    def test_digest_auth_when_username_set(self) -> None:
        assert isinstance(ConnectionConfig(username="rpc", password="pw").auth(), httpx.DigestAuth)

    @pytest.mark.parametrize("port", [0, 70000, "17092", True])
    def test_invalid_port_raises(self, port) -> None:
        with pytest.raises(ValueError):
            ConnectionConfig(port=port)

    def test_empty_host_raises(self) -> None:
        with pytest.raises(ValueError):
            ConnectionConfig(host="")

    def test_non_positive_timeout_raises(self) -> None:
        with pytest.raises(ValueError):
            ConnectionConfig(timeout=0)

    def test_frozen(self) -> None:
        config = ConnectionConfig()
        with pytest.raises(AttributeError):
            config.port = 1  # type: ignore[misc]


# ============ Encoding ============


class TestEncodeBody:
    def test_envelope_added_to_mapping(self) -> None:
        original = {"method": "getbalance"}
        body = json.loads(encode_body(original))
        assert body == {"method": "getbalance", "jsonrpc": "2.0", "id": "0"}
        assert original == {"method": "getbalance"}

    def test_existing_envelope_kept(self) -> None:
        body = json.loads(encode_body({"method": "x", "jsonrpc": "2.0", "id": "7"}))
        assert body["id"] == "7"

    def test_non_mapping_becomes_empty_body(self) -> None:
        assert json.loads(encode_body(None)) == {"jsonrpc": "2.0", "id": "0"}

    def test_utf8(self) -> None:
        content = encode_body(build_request("create_wallet", {"language": "Español"}))
        assert "Español".encode("utf-8") in content


# ============ Response normalization ============


class TestNormalizeResponse:
    def test_result(self) -> None:
        assert normalize_response(200, '{"result": {"balance": 100}}') == Success(result={"balance": 100})

    @pytest.mark.parametrize("value", [False, 0, None, "", []])
    def test_falsy_result_is_success(self, value) -> None:
        outcome = normalize_response(200, json.dumps({"result": value}))
        assert isinstance(outcome, Success)
        assert outcome.result == value

    def test_daemon_error_passed_through(self) -> None:
        error = {"code": -1, "message": "x"}
        outcome = normalize_response(200, json.dumps({"id": "0", "error": error}))
        assert isinstance(outcome, RpcError)
        assert outcome.raw == error
        assert outcome.code == -1
        assert outcome.message == "x"
        assert outcome.to_dict() == {"error": error}

    def test_result_wins_when_both_present(self) -> None:
        body = '{"result": {"balance": 1}, "error": {"code": -1, "message": "x"}}'
        assert normalize_response(200, body) == Success(result={"balance": 1})

    def test_error_wins_over_null_result(self) -> None:
        outcome = normalize_response(200, '{"result": null, "error": {"code": -4, "message": "m"}}')
        assert isinstance(outcome, RpcError)
        assert outcome.code == -4

    def test_null_error_with_result_is_success(self) -> None:
        assert normalize_response(200, '{"result": 1, "error": null}') == Success(result=1)

    @pytest.mark.parametrize("body", ['{"jsonrpc": "2.0"}', "[1, 2]", "42"])
    def test_anomalous_response_keeps_status(self, body) -> None:
        outcome = normalize_response(500, body)
        assert isinstance(outcome, RpcError)
        assert outcome.code == 500
        assert outcome.message == "unexpected response from RPC wallet"
        assert outcome.raw == body

    def test_malformed_json(self) -> None:
        outcome = normalize_response(401, "<html>Unauthorized</html>")
        assert isinstance(outcome, ParseError)
        assert outcome.raw_body == "<html>Unauthorized</html>"
        assert outcome.status_code == 401
        assert outcome.message


# ============ send ============


class TestSend:
    @pytest.mark.asyncio
    async def test_posts_json_rpc(self) -> None:
        transport, mock = make_transport(reply({"result": {"balance": 100}}))

        outcome = await transport.send(build_request("getbalance"))

        assert outcome == Success(result={"balance": 100})
        request = mock.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://127.0.0.1:17092/json_rpc"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["content-length"] == str(len(request.content))
        assert json.loads(request.content) == {"jsonrpc": "2.0", "id": "0", "method": "getbalance"}

    @pytest.mark.asyncio
    async def test_content_length_counts_utf8_bytes(self) -> None:
        transport, mock = make_transport(reply({"result": {}}))

        await transport.send(build_request("create_wallet", {"filename": "monedero", "language": "Español"}))

        request = mock.requests[0]
        assert "Español".encode("utf-8") in request.content
        assert int(request.headers["content-length"]) == len(request.content)
        assert len(request.content) > len(request.content.decode("utf-8"))

    @pytest.mark.asyncio
    async def test_custom_host_and_port(self) -> None:
        transport, mock = make_transport(reply({"result": {}}), host="10.0.0.5", port=18082)
        await transport.send(build_request("store"))
        assert str(mock.requests[0].url) == "http://10.0.0.5:18082/json_rpc"

    @pytest.mark.asyncio
    async def test_daemon_error_resolves(self) -> None:
        transport, _ = make_transport(reply({"error": {"code": -1, "message": "x"}}))
        outcome = await transport.send(build_request("getbalance"))
        assert isinstance(outcome, RpcError)
        assert outcome.raw == {"code": -1, "message": "x"}

    @pytest.mark.asyncio
    async def test_malformed_body_resolves_parse_error(self) -> None:
        transport, _ = make_transport(reply("not json{", status=200))
        outcome = await transport.send(build_request("getbalance"))
        assert isinstance(outcome, ParseError)
        assert outcome.raw_body == "not json{"

    @pytest.mark.asyncio
    async def test_anomalous_response_carries_status(self) -> None:
        transport, _ = make_transport(reply({"id": "0"}, status=503))
        outcome = await transport.send(build_request("getbalance"))
        assert isinstance(outcome, RpcError)
        assert outcome.code == 503

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc_type",
        [httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout, httpx.RemoteProtocolError],
    )
    async def test_transport_failure_resolves(self, exc_type) -> None:
        transport, _ = make_transport(raising(exc_type))
        outcome = await transport.send(build_request("getbalance"))
        assert outcome == TransportError(message="unable to resolve RPC wallet")
        assert outcome.ok is False

    @pytest.mark.asyncio
    async def test_client_closed_on_every_path(self) -> None:
        for handler in (
            reply({"result": 1}),
            reply({"error": {"code": 1, "message": "m"}}),
            reply("garbage"),
            raising(httpx.ConnectError),
        ):
            transport, mock = make_transport(handler)
            await transport.send(build_request("getheight"))
            assert mock.closed == 1

    @pytest.mark.asyncio
    async def test_no_auth_header_without_username(self) -> None:
        transport, mock = make_transport(reply({"result": {}}))
        await transport.send(build_request("getheight"))
        assert "authorization" not in mock.requests[0].headers

    @pytest.mark.asyncio
    async def test_digest_auth_with_username(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "authorization" not in request.headers:
                return httpx.Response(
                    401,
                    headers={
                        "WWW-Authenticate": 'Digest realm="wallet-rpc", nonce="3a2b1c", qop="auth", algorithm=MD5'
                    },
                )
            return httpx.Response(200, json={"result": {"height": 12}})

        transport, mock = make_transport(handler, username="rpcuser", password="secret")
        outcome = await transport.send(build_request("getheight"))

        assert outcome == Success(result={"height": 12})
        assert len(mock.requests) == 2
        authorization = mock.requests[1].headers["authorization"]
        assert authorization.startswith("Digest ")
        assert 'username="rpcuser"' in authorization


# ============ unwrap ============


class TestUnwrap:
    def test_success_returns_result(self) -> None:
        assert Success(result={"a": 1}).unwrap() == {"a": 1}

    def test_rpc_error_raises_daemon_error(self) -> None:
        with pytest.raises(DaemonError) as info:
            RpcError(code=-2, message="bad").unwrap()
        assert info.value.code == -2
        assert info.value.exit_code == 2

    def test_transport_error_raises(self) -> None:
        with pytest.raises(WalletUnreachableError) as info:
            TransportError().unwrap()
        assert info.value.exit_code == 3

    def test_parse_error_raises(self) -> None:
        with pytest.raises(ResponseFormatError):
            ParseError(message="Expecting value", raw_body="x").unwrap()


# ============ Overall deadline ============


async def _trickle_daemon(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Answer with headers at once, then dribble the body one byte at a time."""
    try:
        head = await reader.readuntil(b"\r\n\r\n")
        length = 0
        for line in head.split(b"\r\n"):
            if line.lower().startswith(b"content-length:"):
                length = int(line.split(b":", 1)[1])
        await reader.readexactly(length)
        writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 200\r\n\r\n")
        await writer.drain()
        for _ in range(200):
            if writer.is_closing() or reader.at_eof():
                break
            writer.write(b" ")
            await writer.drain()
            await asyncio.sleep(0.1)
    except (ConnectionError, asyncio.IncompleteReadError):
        pass
    finally:
        writer.close()


class TestDeadline:
    @pytest.mark.asyncio
    async def test_slow_body_abandoned_within_timeout(self) -> None:
        handlers: list[asyncio.Task] = []

        async def handle(reader, writer) -> None:
            handlers.append(asyncio.current_task())
            await _trickle_daemon(reader, writer)

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            transport = Transport(ConnectionConfig(host="127.0.0.1", port=port, timeout=0.5))

            started = time.monotonic()
            outcome = await transport.send(build_request("getbalance"))
            elapsed = time.monotonic() - started

            assert outcome == TransportError(message="unable to resolve RPC wallet")
            assert elapsed < 3.0
        finally:
            for task in handlers:
                task.cancel()
            await asyncio.gather(*handlers, return_exceptions=True)
            server.close()
            await server.wait_closed()
