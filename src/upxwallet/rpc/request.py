"""
JSON-RPC request construction for the Ultrapoint wallet daemon.

Pure functions only: nothing here performs I/O, and nothing here raises
for malformed caller input. Bad option values degrade to their defaults
and the daemon gets to reject the request.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from ..utils import parse_int_prefix, to_atomic_units

JSONRPC_VERSION = "2.0"
REQUEST_ID = "0"

TRANSFER = "transfer"
TRANSFER_SPLIT = "transfer_split"
TRANSFER_METHODS = frozenset({TRANSFER, TRANSFER_SPLIT})

DEFAULT_MIXIN = 4
DEFAULT_UNLOCK_TIME = 0
DEFAULT_PRIORITY = 0


@dataclass(frozen=True)
class RpcRequest:
    method: str
    params: Optional[dict[str, Any]] = None
    jsonrpc: str = JSONRPC_VERSION
    id: str = REQUEST_ID

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
        }
        if self.params is not None:
            body["params"] = self.params
        return body


@dataclass(frozen=True)
class Destination:
    """
    A transfer recipient.

    Attributes:
        address: Recipient UPX address
        amount: Amount in major units (UPX); int, float, str or Decimal
    """
    address: Any
    amount: Any

    @classmethod
    def from_value(cls, value: Any) -> "Destination":
        if isinstance(value, Destination):
            return value
        if isinstance(value, Mapping):
            return cls(address=value.get("address"), amount=value.get("amount"))
        return cls(address=getattr(value, "address", None), amount=getattr(value, "amount", None))

    def to_params(self) -> dict[str, Any]:
        return {"address": self.address, "amount": to_atomic_units(self.amount)}


# Mapping keys accepted for each TransferOptions field, first match wins.
_OPTION_KEYS: dict[str, tuple[str, ...]] = {
    "destinations": ("destinations",),
    "mixin": ("mixin",),
    "unlock_time": ("unlock_time", "unlockTime"),
    "pid": ("pid", "payment_id", "paymentId"),
    "do_not_relay": ("do_not_relay", "doNotRelay"),
    "priority": ("priority",),
    "get_tx_hex": ("get_tx_hex", "getTxHex"),
    "get_tx_key": ("get_tx_key", "getTxKey"),
    "new_algorithm": ("new_algorithm", "newAlgorithm"),
}


@dataclass
class TransferOptions:
    """
    Options for ``transfer`` and ``transfer_split``.

    ``None`` means "not given" for every field; the default is applied
    when the request is built, so an explicit ``0`` or ``False`` is kept.

    Attributes:
        destinations: One destination or a sequence of them
        mixin: Ring size parameter (default 4)
        unlock_time: Blocks before the outputs unlock (default 0)
        pid: Payment ID (default null)
        do_not_relay: Build the transaction without broadcasting (default False)
        priority: Fee priority (default 0)
        get_tx_hex: Return the raw transaction hex (default False)
        get_tx_key: Return the transaction key (default False)
        new_algorithm: Use the new split algorithm, transfer_split only (default False)
    """
    destinations: Any = field(default_factory=list)
    mixin: Any = None
    unlock_time: Any = None
    pid: Any = None
    do_not_relay: Any = None
    priority: Any = None
    get_tx_hex: Any = None
    get_tx_key: Any = None
    new_algorithm: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "TransferOptions":
        """
        Coerce a loosely-typed options value.

        Accepts a TransferOptions, a mapping with camelCase or snake_case
        keys, or anything else (treated as an empty options set).
        """
        if isinstance(value, TransferOptions):
            return value
        if not isinstance(value, Mapping):
            return cls()
        kwargs: dict[str, Any] = {}
        for name, keys in _OPTION_KEYS.items():
            for key in keys:
                if value.get(key) is not None:
                    kwargs[name] = value[key]
                    break
        return cls(**kwargs)

    def normalized_destinations(self) -> list[Destination]:
        dests = self.destinations
        if dests is None:
            return []
        if isinstance(dests, (Mapping, Destination)):
            return [Destination.from_value(dests)]
        if isinstance(dests, Sequence) and not isinstance(dests, (str, bytes)):
            return [Destination.from_value(d) for d in dests]
        return []


def _int_or_default(value: Any, default: int) -> int:
    parsed = parse_int_prefix(value)
    return default if parsed is None else parsed


def _bool_or_default(value: Any, default: bool = False) -> bool:
    return default if value is None else bool(value)


def build_request(method: str, params: Optional[dict[str, Any]] = None) -> RpcRequest:
    """Build a request for any method without monetary parameters."""
    return RpcRequest(method=method, params=dict(params) if params is not None else None)


def build_transfer(method: str, options: Any = None) -> RpcRequest:
    """
    Build a ``transfer`` or ``transfer_split`` request.

    Args:
        method: "transfer" or "transfer_split"
        options: TransferOptions, a mapping, or anything else

    Returns:
        RpcRequest with destinations converted to atomic units and
        defaults filled for absent fields
    """
    opts = TransferOptions.from_value(options)

    params: dict[str, Any] = {
        # Fresh dicts: the caller's destination objects are never touched,
        # so each amount is converted exactly once per request.
        "destinations": [d.to_params() for d in opts.normalized_destinations()],
        "mixin": _int_or_default(opts.mixin, DEFAULT_MIXIN),
        "unlock_time": _int_or_default(opts.unlock_time, DEFAULT_UNLOCK_TIME),
        "payment_id": str(opts.pid) if opts.pid not in (None, "") else None,
        "do_not_relay": _bool_or_default(opts.do_not_relay),
        "priority": _int_or_default(opts.priority, DEFAULT_PRIORITY),
        "get_tx_hex": _bool_or_default(opts.get_tx_hex),
        "get_tx_key": _bool_or_default(opts.get_tx_key),
    }

    if method == TRANSFER_SPLIT:
        params["new_algorithm"] = _bool_or_default(opts.new_algorithm)

    return RpcRequest(method=method, params=params)
