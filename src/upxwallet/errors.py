"""
Exceptions raised by ``RpcOutcome.unwrap()``.

The client never raises these on its own: every call resolves to an
outcome value. Callers who prefer exceptions opt in with ``unwrap()``.
"""

from __future__ import annotations

from typing import Any


class WalletError(RuntimeError):
    exit_code: int = 1

    def __init__(self, message: str, outcome: Any = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class DaemonError(WalletError):
    """The wallet daemon answered with a JSON-RPC error object."""

    exit_code = 2

    @property
    def code(self) -> Any:
        return getattr(self.outcome, "code", None)


class WalletUnreachableError(WalletError):
    exit_code = 3


class ResponseFormatError(WalletError):
    exit_code = 4
