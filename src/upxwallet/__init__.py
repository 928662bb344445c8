__version__ = "1.0.0"

__all__ = [
    # Client
    "Wallet",
    # Configuration
    "ConnectionConfig",
    "load_config",
    # Requests
    "Destination",
    "RpcRequest",
    "TransferOptions",
    "build_request",
    "build_transfer",
    # Outcomes
    "ParseError",
    "RpcError",
    "RpcOutcome",
    "Success",
    "TransportError",
    # Errors
    "DaemonError",
    "ResponseFormatError",
    "WalletError",
    "WalletUnreachableError",
    # Units
    "to_atomic_units",
    "from_atomic_units",
]

from loguru import logger

from .config import load_config
from .errors import DaemonError, ResponseFormatError, WalletError, WalletUnreachableError
from .rpc.outcome import ParseError, RpcError, RpcOutcome, Success, TransportError
from .rpc.request import Destination, RpcRequest, TransferOptions, build_request, build_transfer
from .rpc.transport import ConnectionConfig
from .utils import from_atomic_units, to_atomic_units
from .wallet import Wallet

# Library code stays quiet unless the application opts in.
logger.disable("upxwallet")
