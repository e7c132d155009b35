"""
Error definitions for Moonveil automation
"""

from .exceptions import (
    ErrorCode,
    AutomationError,
    RpcError,
    InsufficientFunds,
    TransactionError,
    FaucetError,
    SignerError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "AutomationError",
    "RpcError",
    "InsufficientFunds",
    "TransactionError",
    "FaucetError",
    "SignerError",
    "ConfigurationError",
]
