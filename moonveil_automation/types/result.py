"""
Result type definitions for attempts, faucet claims and account passes
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from ..errors import ErrorCode


class OutcomeKind(Enum):
    """Outcome of a single attempt"""
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass(frozen=True)
class AttemptOutcome:
    """
    Tagged result of one attempt of a fallible operation

    Attributes:
        kind: Which of the four outcomes this is
        tx_hash: Transaction hash (Success only, may be None)
        reason: Failure or rate-limit reason
        error_code: Error code for programmatic handling
        confirmed: Receipt confirmation state for broadcast transactions
            (None when no confirmation was requested or nothing was sent)
    """
    kind: OutcomeKind
    tx_hash: Optional[str] = None
    reason: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    confirmed: Optional[bool] = None

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def is_rate_limited(self) -> bool:
        return self.kind == OutcomeKind.RATE_LIMITED

    @property
    def is_retryable(self) -> bool:
        return self.kind == OutcomeKind.RETRYABLE

    @property
    def is_fatal(self) -> bool:
        return self.kind == OutcomeKind.FATAL

    @property
    def is_terminal_success(self) -> bool:
        """Success and RateLimited both end the retry loop without error"""
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.RATE_LIMITED)

    @classmethod
    def success(cls, tx_hash: Optional[str] = None, confirmed: Optional[bool] = None,
                reason: Optional[str] = None) -> "AttemptOutcome":
        return cls(OutcomeKind.SUCCESS, tx_hash=tx_hash, confirmed=confirmed, reason=reason)

    @classmethod
    def rate_limited(cls, reason: Optional[str] = None) -> "AttemptOutcome":
        return cls(OutcomeKind.RATE_LIMITED, reason=reason, error_code=ErrorCode.FAUCET_RATE_LIMITED)

    @classmethod
    def retryable(cls, reason: str, error_code: Optional[ErrorCode] = None) -> "AttemptOutcome":
        return cls(OutcomeKind.RETRYABLE, reason=reason, error_code=error_code)

    @classmethod
    def fatal(cls, reason: str, error_code: Optional[ErrorCode] = None) -> "AttemptOutcome":
        return cls(OutcomeKind.FATAL, reason=reason, error_code=error_code)

    def __str__(self) -> str:
        if self.is_success:
            hash_display = f"{self.tx_hash[:18]}..." if self.tx_hash else "no hash"
            return f"AttemptOutcome(SUCCESS, {hash_display})"
        return f"AttemptOutcome({self.kind.value}, reason={self.reason})"


@dataclass(frozen=True)
class FaucetClaimResult:
    """
    Result of a faucet claim

    Attributes:
        outcome: Final outcome of the retry loop
        rate_limited: True when the faucet asked us to come back later
        balance_confirmed: True if the balance increase was observed,
            False on timeout, None when no wait was performed
    """
    outcome: AttemptOutcome
    rate_limited: bool = False
    balance_confirmed: Optional[bool] = None

    @property
    def is_success(self) -> bool:
        return self.outcome.is_terminal_success


@dataclass
class AccountReport:
    """Summary of one account pass (faucet -> transfer -> bridge)"""
    index: int
    address: Optional[str] = None
    faucet: Optional[FaucetClaimResult] = None
    transfer: Optional[AttemptOutcome] = None
    bridge_successes: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        if self.error is not None:
            return False
        if self.faucet is not None and not self.faucet.is_success:
            return False
        if self.transfer is not None and not self.transfer.is_terminal_success:
            return False
        return all(count > 0 for count in self.bridge_successes.values())
