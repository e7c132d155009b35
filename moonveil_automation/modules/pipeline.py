"""
Transaction Pipeline

One sign-and-broadcast attempt: nonce -> gas price -> gas limit ->
assemble -> sign -> advance nonce -> broadcast -> optional receipt wait.
Every failure comes back as an AttemptOutcome for RetryController to act on.
"""

import logging
from typing import Callable, Optional

from ..types import Account, AttemptOutcome, NetworkContext, TransactionIntent
from ..infra.nonce import NonceSequencer
from ..infra.gas import GasPriceEstimator, GasLimitEstimator
from ..infra.retry import classify_error, classify_broadcast_error
from ..infra.chain_client import ReceiptTimeout
from ..errors import ErrorCode, TransactionError
from ..config import config as global_config

logger = logging.getLogger(__name__)

# finalize(intent, gas_limit, gas_price) -> intent to send, or None to skip
Finalizer = Callable[[TransactionIntent, int, int], Optional[TransactionIntent]]


class TransactionPipeline:
    """
    Sign-and-broadcast pipeline shared by transfer and bridge flows

    Usage:
        pipeline = TransactionPipeline(NonceSequencer())
        outcome = pipeline.submit(intent, network, account, attempt_index=0)
    """

    def __init__(
        self,
        nonces: NonceSequencer,
        gas_price: Optional[GasPriceEstimator] = None,
        gas_limit: Optional[GasLimitEstimator] = None,
        wait_for_receipt: Optional[bool] = None,
        receipt_timeout: Optional[float] = None,
    ):
        self.nonces = nonces
        self.gas_price = gas_price or GasPriceEstimator()
        self.gas_limit = gas_limit or GasLimitEstimator()
        self.wait_for_receipt = (
            wait_for_receipt if wait_for_receipt is not None else global_config.tx.wait_for_receipt
        )
        self.receipt_timeout = (
            receipt_timeout if receipt_timeout is not None else global_config.tx.receipt_timeout
        )

    def submit(
        self,
        intent: TransactionIntent,
        network: NetworkContext,
        account: Account,
        attempt_index: int = 0,
        finalize: Optional[Finalizer] = None,
    ) -> AttemptOutcome:
        """
        Run one attempt.

        Args:
            intent: What to send
            network: Network to send on
            account: Signing account
            attempt_index: Retry attempt number, escalates gas price
            finalize: Optional hook run once fees are known; may rewrite the
                intent's value or return None to skip sending

        Returns:
            AttemptOutcome (Success carries the tx hash)
        """
        address = account.address_on(network.name)

        try:
            nonce = self.nonces.next(address, network)
        except Exception as e:
            is_recoverable, error_code = classify_error(e)
            reason = f"Failed to read {network.name} nonce: {e}"
            logger.warning(reason)
            if is_recoverable:
                return AttemptOutcome.retryable(reason, error_code)
            return AttemptOutcome.fatal(reason, error_code)

        gas_price = self.gas_price.price(network, attempt_index)
        call = intent.to_call_dict(network.chain_id, nonce)
        gas_limit = self.gas_limit.limit(call, network, intent.kind)

        if finalize is not None:
            finalized = finalize(intent, gas_limit, gas_price)
            if finalized is None:
                logger.info(f"Nothing to send on {network.name}, skipping")
                return AttemptOutcome.success(reason="nothing to send")
            intent = finalized

        tx = intent.to_call_dict(network.chain_id, nonce)
        tx["gas"] = gas_limit
        tx["gasPrice"] = gas_price

        try:
            raw_tx = network.client.sign(tx, account.private_key)
        except Exception as e:
            logger.error(f"Failed to sign {network.name} transaction: {e}")
            return AttemptOutcome.fatal(f"Signing failed: {e}", ErrorCode.SIGNER_FAILED)

        # Consumed from here on, whether or not the broadcast succeeds
        self.nonces.advance(address, network)

        try:
            tx_hash = network.client.broadcast(raw_tx)
        except Exception as e:
            outcome = classify_broadcast_error(e)
            logger.warning(f"Broadcast on {network.name} failed (nonce {nonce}): {e}")
            if outcome.error_code == ErrorCode.TX_NONCE_TOO_LOW:
                try:
                    self.nonces.resync(address, network)
                except Exception as resync_error:
                    logger.warning(f"Nonce resync on {network.name} failed: {resync_error}")
            return outcome

        logger.info(f"Transaction sent: {network.tx_url(tx_hash)}")

        if not self.wait_for_receipt:
            return AttemptOutcome.success(tx_hash=tx_hash)

        return self._confirm(tx_hash, network)

    def _confirm(self, tx_hash: str, network: NetworkContext) -> AttemptOutcome:
        # Never re-send a transaction that may already be in the mempool
        try:
            receipt = network.client.wait_for_receipt(tx_hash, self.receipt_timeout)
        except ReceiptTimeout:
            logger.warning(f"No receipt for {tx_hash} after {self.receipt_timeout}s, treating as sent")
            return AttemptOutcome.success(tx_hash=tx_hash, confirmed=False)
        except Exception as e:
            logger.warning(f"Failed to fetch receipt for {tx_hash}: {e}")
            return AttemptOutcome.success(tx_hash=tx_hash, confirmed=False)

        if receipt.get("status") == 0:
            logger.error(f"Transaction reverted: {network.tx_url(tx_hash)}")
            error = TransactionError.reverted(tx_hash)
            return AttemptOutcome.fatal(error.message, error.code)

        logger.info(f"Transaction confirmed in block {receipt.get('blockNumber')}")
        return AttemptOutcome.success(tx_hash=tx_hash, confirmed=True)
