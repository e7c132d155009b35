"""
Retry Logic Helper Module

Drives repeated attempts of faucet calls and sign-and-broadcast attempts with
exponential backoff and jitter. Includes structured logging with correlation
IDs so every line of one account pass can be traced together.
"""

import logging
import random
import time
import uuid
import contextvars
from typing import Callable, Optional, Tuple

from ..types import AttemptOutcome
from ..errors import AutomationError, ErrorCode, TransactionError
from ..config import config as global_config

logger = logging.getLogger(__name__)

# Upper bound for a single backoff before jitter, in seconds
MAX_BACKOFF_SECONDS = 300

# Context variable for correlation ID
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for tracing one account pass."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("wallet3") as cid:
            logger.info(f"[{cid}] Starting account pass")
            outcome = controller.run(...)
    """

    def __init__(self, prefix: Optional[str] = None):
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def _log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    **extra
):
    """
    Log message with correlation ID and structured context.

    Args:
        level: Logging level
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_attempts: Maximum number of attempts
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    if attempt is not None and max_attempts is not None:
        parts.append(f"[{attempt}/{max_attempts}]")
    parts.append(message)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        "attempt": attempt,
        "max_attempts": max_attempts,
        **extra
    }

    logger.log(level, " ".join(parts), extra=extra_context)


# Error keywords for classification of exceptions raised inside an attempt
RECOVERABLE_KEYWORDS = [
    "timeout", "timed out", "connection", "network", "rate limit",
    "too many requests", "503", "502", "504",
    "temporarily unavailable", "service unavailable",
    "econnreset", "enotfound", "etimedout",
    "socket hang up", "request failed",
]


def classify_error(error: Exception) -> Tuple[bool, Optional[ErrorCode]]:
    """
    Classify an exception raised by an attempt.

    Args:
        error: The exception to classify

    Returns:
        Tuple of (is_recoverable, error_code)
    """
    if isinstance(error, AutomationError):
        return error.recoverable, error.code

    error_str = str(error).lower()
    is_recoverable = any(keyword in error_str for keyword in RECOVERABLE_KEYWORDS)

    error_code = None
    if is_recoverable:
        if "timeout" in error_str or "timed out" in error_str:
            error_code = ErrorCode.RPC_TIMEOUT
        elif any(kw in error_str for kw in ["connection", "network", "socket"]):
            error_code = ErrorCode.RPC_CONNECTION_FAILED
        elif "rate limit" in error_str or "too many requests" in error_str:
            error_code = ErrorCode.RPC_RATE_LIMITED
        else:
            error_code = ErrorCode.RPC_INVALID_RESPONSE

    return is_recoverable, error_code


# Broadcast rejections that a later attempt (new nonce, higher fee) can fix
BROADCAST_RETRYABLE_KEYWORDS = [
    "timeout", "timed out", "connection", "network",
    "nonce too low", "underpriced", "replacement transaction",
    "already known", "too many requests", "rate limit",
    "502", "503", "504", "temporarily unavailable",
]

# Checked first: rejections no retry can fix
BROADCAST_FATAL_KEYWORDS = [
    "insufficient funds", "invalid sender", "malformed",
    "invalid transaction", "intrinsic gas too low",
    "execution reverted", "exceeds block gas limit", "rlp",
]


def classify_broadcast_error(error: Exception) -> AttemptOutcome:
    """
    Classify an error raised by the broadcast capability.

    Unknown errors are fatal: a transaction that may have reached the
    mempool must not be blindly re-sent.
    """
    if isinstance(error, AutomationError):
        if error.recoverable:
            return AttemptOutcome.retryable(error.message, error.code)
        return AttemptOutcome.fatal(error.message, error.code)

    error_str = str(error).lower()

    if any(kw in error_str for kw in BROADCAST_FATAL_KEYWORDS):
        if "insufficient funds" in error_str:
            code = ErrorCode.TX_INSUFFICIENT_FUNDS
        elif "reverted" in error_str:
            code = ErrorCode.TX_REVERTED
        else:
            code = ErrorCode.TX_MALFORMED
        return AttemptOutcome.fatal(str(error), code)

    if any(kw in error_str for kw in BROADCAST_RETRYABLE_KEYWORDS):
        if "nonce too low" in error_str:
            tx_error = TransactionError.nonce_too_low(str(error))
        elif "underpriced" in error_str or "replacement transaction" in error_str:
            tx_error = TransactionError.underpriced(str(error))
        elif "timeout" in error_str or "timed out" in error_str:
            return AttemptOutcome.retryable(str(error), ErrorCode.RPC_TIMEOUT)
        else:
            tx_error = TransactionError.send_failed(str(error))
        return AttemptOutcome.retryable(tx_error.message, tx_error.code)

    return AttemptOutcome.fatal(str(error), ErrorCode.TX_SEND_FAILED)


def compute_backoff(attempt_index: int, base_wait: float, jitter: float) -> float:
    """min(300, base_wait * 2 ** attempt_index) * jitter"""
    return min(MAX_BACKOFF_SECONDS, base_wait * (2 ** attempt_index)) * jitter


class RetryController:
    """
    Run an attempt function until it succeeds, is rate-limited, fails
    fatally, or runs out of attempts.

    The attempt function receives the 0-based attempt index (used by callers
    to escalate gas price) and returns an AttemptOutcome.

    Usage:
        controller = RetryController(base_wait_time=10)

        def attempt(index: int) -> AttemptOutcome:
            return pipeline.submit(intent, network, account, index)

        outcome = controller.run(attempt, max_attempts=3, operation_name="transfer")
    """

    def __init__(
        self,
        base_wait_time: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.base_wait_time = (
            base_wait_time if base_wait_time is not None else global_config.retry.base_wait_time
        )
        self.max_attempts = max_attempts if max_attempts is not None else global_config.retry.max_retries

    def backoff(self, attempt_index: int) -> float:
        """Seconds to wait after the given (failed) attempt, jitter in [0.5, 1.5)"""
        jitter = 0.5 + random.random()
        return compute_backoff(attempt_index, self.base_wait_time, jitter)

    def run(
        self,
        operation: Callable[[int], AttemptOutcome],
        max_attempts: Optional[int] = None,
        operation_name: str = "operation",
        on_retry: Optional[Callable[[int], None]] = None,
    ) -> AttemptOutcome:
        """
        Execute an attempt function with exponential backoff on retryable failures.

        Args:
            operation: Callable taking the attempt index, returning AttemptOutcome
            max_attempts: Maximum attempts (defaults to the controller setting)
            operation_name: Name for logging purposes
            on_retry: Called with the next attempt index before each retry
                (e.g. to rotate the proxy)

        Returns:
            The last AttemptOutcome
        """
        max_attempts = max_attempts if max_attempts is not None else self.max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        outcome = AttemptOutcome.retryable("not attempted")

        for attempt in range(max_attempts):
            try:
                outcome = operation(attempt)
            except Exception as e:
                is_recoverable, error_code = classify_error(e)
                outcome = (
                    AttemptOutcome.retryable(str(e), error_code) if is_recoverable
                    else AttemptOutcome.fatal(str(e), error_code)
                )

            if outcome.is_success:
                if attempt > 0:
                    _log_with_correlation(
                        logging.INFO,
                        f"Succeeded after {attempt + 1} attempts",
                        operation_name,
                        attempt + 1,
                        max_attempts,
                        tx_hash=outcome.tx_hash,
                    )
                return outcome

            if outcome.is_rate_limited:
                _log_with_correlation(
                    logging.WARNING,
                    f"Rate limited: {outcome.reason}",
                    operation_name,
                    attempt + 1,
                    max_attempts,
                )
                return outcome

            if outcome.is_fatal:
                _log_with_correlation(
                    logging.ERROR,
                    f"Failed: {outcome.reason}",
                    operation_name,
                    attempt + 1,
                    max_attempts,
                    error_type="fatal",
                )
                return outcome

            # Retryable
            if attempt + 1 >= max_attempts:
                break

            wait = self.backoff(attempt)
            _log_with_correlation(
                logging.WARNING,
                f"Recoverable error: {outcome.reason}, retrying in {wait:.1f}s",
                operation_name,
                attempt + 1,
                max_attempts,
                error_type="recoverable",
            )
            time.sleep(wait)

            if on_retry is not None:
                on_retry(attempt + 1)

        _log_with_correlation(
            logging.ERROR,
            f"Max attempts ({max_attempts}) exceeded. Last error: {outcome.reason}",
            operation_name,
            max_attempts,
            max_attempts,
        )
        return outcome
