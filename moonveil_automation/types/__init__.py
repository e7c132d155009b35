"""
Type definitions for Moonveil automation
"""

from .account import Account, NetworkContext
from .intent import (
    MOONVEIL,
    SEPOLIA,
    BRIDGE_NETWORK_IDS,
    OperationKind,
    BridgeDirection,
    TransactionIntent,
    BridgeOperationSpec,
)
from .result import (
    OutcomeKind,
    AttemptOutcome,
    FaucetClaimResult,
    AccountReport,
)

__all__ = [
    # Accounts and networks
    "Account",
    "NetworkContext",
    "MOONVEIL",
    "SEPOLIA",
    "BRIDGE_NETWORK_IDS",
    # Intents
    "OperationKind",
    "BridgeDirection",
    "TransactionIntent",
    "BridgeOperationSpec",
    # Results
    "OutcomeKind",
    "AttemptOutcome",
    "FaucetClaimResult",
    "AccountReport",
]
