"""
Normalized results of a wallet RPC call.

Exactly one of these is produced per call. Check ``outcome.ok`` (or use
``isinstance``) to tell success from failure; ``unwrap()`` converts the
failure variants to exceptions for callers who want them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import DaemonError, ResponseFormatError, WalletUnreachableError

UNEXPECTED_RESPONSE = "unexpected response from RPC wallet"
UNREACHABLE = "unable to resolve RPC wallet"


@dataclass(frozen=True)
class Success:
    result: Any
    ok = True

    def unwrap(self) -> Any:
        return self.result

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result}


@dataclass(frozen=True)
class RpcError:
    """
    The daemon reported an error, or answered with neither result nor error.

    For a daemon error object ``raw`` is that object verbatim; for an
    anomalous response ``code`` is the HTTP status and ``raw`` the body text.
    """
    code: Any
    message: str
    raw: Any = None
    ok = False

    @classmethod
    def from_daemon(cls, error: Any) -> "RpcError":
        if isinstance(error, dict):
            return cls(code=error.get("code"), message=str(error.get("message", "")), raw=error)
        return cls(code=None, message=str(error), raw=error)

    def unwrap(self) -> Any:
        raise DaemonError(f"RPC error {self.code}: {self.message}", self)

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.raw, dict):
            return {"error": self.raw}
        return {"error": {"code": self.code, "message": self.message, "response": self.raw}}


@dataclass(frozen=True)
class TransportError:
    message: str = UNREACHABLE
    ok = False

    def unwrap(self) -> Any:
        raise WalletUnreachableError(self.message, self)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"message": self.message}}


@dataclass(frozen=True)
class ParseError:
    message: str
    raw_body: str
    status_code: Optional[int] = None
    ok = False

    def unwrap(self) -> Any:
        raise ResponseFormatError(f"Parser: {self.message}", self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.status_code,
                "message": f"Parser: {self.message}",
                "response": self.raw_body,
            }
        }


RpcOutcome = Union[Success, RpcError, TransportError, ParseError]
