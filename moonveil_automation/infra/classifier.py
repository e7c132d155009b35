"""
Faucet response classification

Maps a raw (status code, body) pair onto one of the four attempt outcomes
using an enumerated table, so call sites never inspect response text.

Note: rate-limit detection matches operator-written prose. The trigger
phrases below are kept exactly as the faucet emits them and will silently
stop matching if the faucet rewords its messages.
"""

import json
import logging
from typing import Optional, Union

from ..types import AttemptOutcome
from ..errors import ErrorCode, FaucetError

logger = logging.getLogger(__name__)

# Case-sensitive substrings that mark a rate-limit message
RATE_LIMIT_PHRASES = (
    "exceeded the rate limit",
    "wait",
    "hour",
)

TX_HASH_MARKER = "Txhash:"

RATE_LIMIT_STATUS = 429
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

Body = Union[str, bytes, dict, None]


class UnparseableBody(ValueError):
    """Raised when a response body can't be turned into a message"""


def extract_message(body: Body) -> str:
    """
    Pull the human-readable message out of a faucet response body.

    Only the "msg" (or "message") field of a JSON object is a message; any
    other JSON value, or an object without either field, yields "".

    Raises:
        UnparseableBody: body is not JSON (HTML pages, plain text, empty text)
    """
    if body is None:
        return ""
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnparseableBody(f"body is not valid UTF-8: {e}") from e
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError as e:
            raise UnparseableBody(f"body is not JSON: {body[:80]!r}") from e
    if isinstance(body, dict):
        message = body.get("msg", body.get("message"))
        return "" if message is None else str(message)
    if isinstance(body, (list, int, float, bool, str)):
        return ""
    raise UnparseableBody(f"unsupported body type: {type(body).__name__}")


def matches_rate_limit(message: str) -> Optional[str]:
    """Return the first rate-limit phrase found in message, if any"""
    for phrase in RATE_LIMIT_PHRASES:
        if phrase in message:
            return phrase
    return None


def split_tx_hash(message: str) -> Optional[str]:
    """Text after the hash marker, stripped (None when there is no marker)"""
    if TX_HASH_MARKER not in message:
        return None
    return message.split(TX_HASH_MARKER)[1].strip()


class ResponseClassifier:
    """
    Classify a faucet response.

    Table (first match wins):
        429                                   -> RateLimited
        message contains a rate-limit phrase  -> RateLimited
        2xx with "Txhash:" marker             -> Success(hash)
        other 2xx                             -> Success()
        408/500/502/503/504                   -> RetryableFailure
        anything else                         -> FatalFailure

    A body that is not JSON (an HTML error page, plain text) is never read
    as a message: it is RetryableFailure on a retryable status and
    FatalFailure otherwise, even on 2xx.
    """

    def classify(self, status_code: int, body: Body) -> AttemptOutcome:
        logger.debug(f"Classifying faucet response: HTTP {status_code}")
        if status_code == RATE_LIMIT_STATUS:
            return AttemptOutcome.rate_limited(f"HTTP {status_code}")

        try:
            message = extract_message(body)
        except UnparseableBody as e:
            if status_code in RETRYABLE_STATUS_CODES:
                return AttemptOutcome.retryable(f"HTTP {status_code}", ErrorCode.FAUCET_REQUEST_FAILED)
            error = FaucetError.invalid_response(status_code, str(e))
            return AttemptOutcome.fatal(error.message, error.code)

        if matches_rate_limit(message):
            return AttemptOutcome.rate_limited(message)

        if 200 <= status_code < 300:
            tx_hash = split_tx_hash(message)
            return AttemptOutcome.success(tx_hash=tx_hash or None, reason=message or None)

        if status_code in RETRYABLE_STATUS_CODES:
            return AttemptOutcome.retryable(
                f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}",
                ErrorCode.FAUCET_REQUEST_FAILED,
            )

        return AttemptOutcome.fatal(
            f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}",
            ErrorCode.FAUCET_REJECTED,
        )
