"""
Self Transfer Module

Sends a percentage of the native balance back to the same address, net of
gas cost. Runs through RetryController and TransactionPipeline like every
other on-chain operation.
"""

import logging
from typing import Optional

from web3 import Web3

from ..types import Account, AttemptOutcome, NetworkContext, OperationKind, TransactionIntent
from ..infra.retry import RetryController
from .pipeline import TransactionPipeline
from ..config import config as global_config

logger = logging.getLogger(__name__)


class SelfTransferFlow:
    """
    Transfer to self on one network

    Usage:
        flow = SelfTransferFlow(pipeline, RetryController(), moonveil)
        outcome = flow.transfer_to_self(account)
    """

    def __init__(
        self,
        pipeline: TransactionPipeline,
        retry: RetryController,
        network: NetworkContext,
        percentage: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        self.pipeline = pipeline
        self.retry = retry
        self.network = network
        self.percentage = percentage if percentage is not None else global_config.tx.transfer_amount_percentage
        self.max_attempts = max_attempts

    def compute_amount(self, balance: int, gas_limit: int, gas_price: int) -> int:
        """balance * percentage / 100 - gas cost (may be <= 0)"""
        return balance * self.percentage // 100 - gas_limit * gas_price

    def transfer_to_self(self, account: Account) -> AttemptOutcome:
        network = self.network
        address = account.address_on(network.name)
        symbol = network.currency_symbol

        logger.info(f"Transferring {symbol} to self on {network.name}...")

        balance = network.client.get_balance(address)
        if balance == 0:
            logger.warning("No balance to transfer")
            return AttemptOutcome.success(reason="no balance")

        intent = TransactionIntent(
            sender=address,
            to=address,
            value=0,
            data="0x",
            network=network.name,
            kind=OperationKind.TRANSFER,
        )

        def finalize(draft: TransactionIntent, gas_limit: int, gas_price: int) -> Optional[TransactionIntent]:
            amount = self.compute_amount(balance, gas_limit, gas_price)
            if amount <= 0:
                logger.warning("Balance too low to cover gas")
                return None
            logger.info(f"Sending transfer of {Web3.from_wei(amount, 'ether')} {symbol} to self")
            return draft.with_value(amount)

        def attempt(index: int) -> AttemptOutcome:
            return self.pipeline.submit(intent, network, account, index, finalize=finalize)

        outcome = self.retry.run(attempt, max_attempts=self.max_attempts, operation_name="transfer")
        if outcome.is_success and outcome.tx_hash:
            logger.info(f"Transfer successful: {network.tx_url(outcome.tx_hash)}")
        elif not outcome.is_success:
            logger.error(f"Error transferring: {outcome.reason}")
        return outcome
