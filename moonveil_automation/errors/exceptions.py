"""
Exception definitions for Moonveil automation
"""

from enum import Enum
from typing import Optional
from decimal import Decimal


class ErrorCode(Enum):
    """
    Unified error codes for automation operations

    1xxx - RPC errors
    2xxx - Transaction errors
    3xxx - Faucet errors
    6xxx - Signer errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_INSUFFICIENT_FUNDS = "2004"
    TX_NONCE_TOO_LOW = "2005"
    TX_UNDERPRICED = "2006"
    TX_REVERTED = "2007"
    TX_MALFORMED = "2008"

    # Faucet errors
    FAUCET_RATE_LIMITED = "3001"
    FAUCET_REQUEST_FAILED = "3002"
    FAUCET_INVALID_RESPONSE = "3003"
    FAUCET_REJECTED = "3004"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class AutomationError(Exception):
    """
    Base exception for all automation errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class RpcError(AutomationError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )


class InsufficientFunds(AutomationError):
    """
    Insufficient balance - not recoverable without deposit

    Raised when:
    - Wallet balance can't cover the bridged amount
    - Native balance too low for gas
    """

    def __init__(
        self,
        message: str,
        network: Optional[str] = None,
        required: Optional[Decimal] = None,
        available: Optional[Decimal] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_INSUFFICIENT_FUNDS,
            recoverable=False,
            details={
                "network": network,
                "required": str(required) if required is not None else None,
                "available": str(available) if available is not None else None,
            },
        )
        self.network = network
        self.required = required
        self.available = available

    @classmethod
    def native_balance(cls, network: str, symbol: str, required: Decimal, available: Decimal) -> "InsufficientFunds":
        return cls(
            f"Insufficient {symbol} balance on {network}: need {required}, have {available}",
            network=network,
            required=required,
            available=available,
        )


class TransactionError(AutomationError):
    """
    Transaction execution errors

    Raised when:
    - Broadcast is rejected by the node
    - Transaction reverts on-chain
    - Confirmation fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        tx_hash: Optional[str] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            details={"tx_hash": tx_hash},
        )
        self.tx_hash = tx_hash

    @classmethod
    def send_failed(cls, error: str) -> "TransactionError":
        # Some send failures are recoverable (network issues)
        recoverable = "timeout" in error.lower() or "connection" in error.lower()
        return cls(
            f"Failed to send transaction: {error}",
            ErrorCode.TX_SEND_FAILED,
            recoverable=recoverable,
        )

    @classmethod
    def nonce_too_low(cls, error: str) -> "TransactionError":
        return cls(
            f"Nonce already used: {error}",
            ErrorCode.TX_NONCE_TOO_LOW,
            recoverable=True,
        )

    @classmethod
    def underpriced(cls, error: str) -> "TransactionError":
        return cls(
            f"Gas price too low: {error}",
            ErrorCode.TX_UNDERPRICED,
            recoverable=True,
        )

    @classmethod
    def reverted(cls, tx_hash: str) -> "TransactionError":
        return cls(
            f"Transaction reverted: {tx_hash}",
            ErrorCode.TX_REVERTED,
            tx_hash=tx_hash,
            recoverable=False,
        )


class FaucetError(AutomationError):
    """
    Faucet request errors

    Raised when:
    - The faucet endpoint can't be reached
    - The faucet answers with something we can't interpret
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.FAUCET_REQUEST_FAILED,
        status_code: Optional[int] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            details={"status_code": status_code},
        )
        self.status_code = status_code

    @classmethod
    def request_failed(cls, url: str, error: Exception) -> "FaucetError":
        return cls(
            f"Faucet request to {url} failed: {error}",
            ErrorCode.FAUCET_REQUEST_FAILED,
            recoverable=True,
        )

    @classmethod
    def invalid_response(cls, status_code: int, reason: str) -> "FaucetError":
        return cls(
            f"Unparseable faucet response (HTTP {status_code}): {reason}",
            ErrorCode.FAUCET_INVALID_RESPONSE,
            status_code=status_code,
        )


class SignerError(AutomationError):
    """
    Signing-related errors

    Raised when:
    - No private key configured
    - Signing operation fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        recoverable: bool = False,
    ):
        super().__init__(message, code, recoverable=recoverable)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No private key configured for this account.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED)


class ConfigurationError(AutomationError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
