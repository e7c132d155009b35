"""
Moonveil Automation - Testnet faucet, transfer and bridge automation

Provides, per account:
- Faucet claim with rate-limit detection and balance confirmation
- Transfer of a share of the native balance back to self
- Randomized Moonveil <-> Sepolia bridge operations

All on-chain operations share one nonce cache, adaptive gas pricing and
a retry controller with exponential backoff.
"""

from .client import AutomationClient
from .config import AutomationSettings, DirectionSettings, config, setup_logging
from .types import (
    Account,
    NetworkContext,
    OperationKind,
    BridgeDirection,
    TransactionIntent,
    BridgeOperationSpec,
    OutcomeKind,
    AttemptOutcome,
    FaucetClaimResult,
    AccountReport,
)
from .errors import (
    AutomationError,
    RpcError,
    InsufficientFunds,
    TransactionError,
    FaucetError,
    SignerError,
    ConfigurationError,
    ErrorCode,
)

__all__ = [
    # Client
    "AutomationClient",
    # Config
    "AutomationSettings",
    "DirectionSettings",
    "config",
    "setup_logging",
    # Types
    "Account",
    "NetworkContext",
    "OperationKind",
    "BridgeDirection",
    "TransactionIntent",
    "BridgeOperationSpec",
    "OutcomeKind",
    "AttemptOutcome",
    "FaucetClaimResult",
    "AccountReport",
    # Errors
    "AutomationError",
    "RpcError",
    "InsufficientFunds",
    "TransactionError",
    "FaucetError",
    "SignerError",
    "ConfigurationError",
    "ErrorCode",
]

__version__ = "0.1.0"
