"""
Ultrapoint wallet client.

One coroutine per ``ultrapoint-wallet-rpc`` method. Every coroutine
resolves to an RpcOutcome (Success, RpcError, TransportError or
ParseError) and never raises for daemon or network failures.

Calls are independent: issuing two transfers concurrently gives no
ordering guarantee, and nothing is retried. Await a transfer before
submitting the next one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import httpx

from .config import load_config
from .rpc.outcome import RpcOutcome
from .rpc.request import TRANSFER, TRANSFER_SPLIT, RpcRequest, build_request, build_transfer
from .rpc.transport import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, ConnectionConfig, Transport

DEFAULT_WALLET_FILE = "upx_wallet"
DEFAULT_WALLET_PASSWORD = "ultrapoint"
DEFAULT_LANGUAGE = "English"


class Wallet:
    def __init__(
        self,
        hostname: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        username: Optional[str] = None,
        password: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = ConnectionConfig(
            host=hostname,
            port=port,
            username=username,
            password=password,
            timeout=timeout,
        )
        self._transport = Transport(config, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Wallet":
        return cls(
            config.host,
            config.port,
            config.username,
            config.password,
            timeout=config.timeout,
            transport=transport,
        )

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **overrides: Any,
    ) -> "Wallet":
        """Build a wallet from ~/.upxwallet/.env, UPX_WALLET_* variables and overrides."""
        return cls.from_config(load_config(env_path, **overrides), transport=transport)

    @property
    def config(self) -> ConnectionConfig:
        return self._transport.config

    async def _request(self, request: RpcRequest) -> RpcOutcome:
        return await self._transport.send(request)

    async def _call(self, method: str, params: Optional[dict[str, Any]] = None) -> RpcOutcome:
        return await self._request(build_request(method, params))

    # ------------------------------------------------------------------
    # Balance / identity
    # ------------------------------------------------------------------

    async def get_balance(self) -> RpcOutcome:
        return await self._call("getbalance")

    async def get_address(self) -> RpcOutcome:
        return await self._call("getaddress")

    async def get_height(self) -> RpcOutcome:
        return await self._call("getheight")

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    async def transfer(self, options: Any = None) -> RpcOutcome:
        """
        Send UPX to one recipient or a group of recipients.

        Args:
            options: TransferOptions or a mapping with ``destinations``
                     (amounts in UPX) and optional mixin, unlockTime, pid,
                     doNotRelay, priority, getTxHex, getTxKey

        Returns:
            RpcOutcome; on success ``result`` holds tx_hash (and tx_key /
            tx_blob when requested)
        """
        return await self._request(build_transfer(TRANSFER, options))

    async def transfer_split(self, options: Any = None) -> RpcOutcome:
        """Like transfer, but lets the daemon split it into several transactions.

        Also honours ``newAlgorithm``.
        """
        return await self._request(build_transfer(TRANSFER_SPLIT, options))

    async def sweep_dust(self) -> RpcOutcome:
        return await self._call("sweep_dust")

    async def sweep_all(self, address: str) -> RpcOutcome:
        return await self._call("sweep_all", {"address": address})

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def get_payments(self, pid: str) -> RpcOutcome:
        return await self._call("get_payments", {"payment_id": pid})

    async def get_bulk_payments(self, pids: Any, min_height: int) -> RpcOutcome:
        return await self._call(
            "get_bulk_payments",
            {"payment_ids": pids, "min_block_height": min_height},
        )

    async def incoming_transfers(self, transfer_type: str = "all") -> RpcOutcome:
        """transfer_type is "all", "available" or "unavailable"."""
        return await self._call("incoming_transfers", {"transfer_type": transfer_type})

    # ------------------------------------------------------------------
    # Keys and addresses
    # ------------------------------------------------------------------

    async def query_key(self, key_type: str) -> RpcOutcome:
        """key_type is "mnemonic" or "view_key"."""
        return await self._call("query_key", {"key_type": key_type})

    async def make_integrated_address(self, pid: str) -> RpcOutcome:
        return await self._call("make_integrated_address", {"payment_id": pid})

    async def split_integrated_address(self, address: str) -> RpcOutcome:
        return await self._call("split_integrated_address", {"integrated_address": address})

    # ------------------------------------------------------------------
    # Wallet file management
    # ------------------------------------------------------------------

    async def store(self) -> RpcOutcome:
        return await self._call("store")

    async def create_wallet(
        self,
        filename: str = DEFAULT_WALLET_FILE,
        password: str = DEFAULT_WALLET_PASSWORD,
        language: str = DEFAULT_LANGUAGE,
    ) -> RpcOutcome:
        return await self._call(
            "create_wallet",
            {"filename": filename, "password": password, "language": language},
        )

    async def open_wallet(
        self,
        filename: str = DEFAULT_WALLET_FILE,
        password: str = DEFAULT_WALLET_PASSWORD,
    ) -> RpcOutcome:
        return await self._call("open_wallet", {"filename": filename, "password": password})

    async def stop_wallet(self) -> RpcOutcome:
        return await self._call("stop_wallet")
