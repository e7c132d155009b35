"""
Bridge Module

Runs a randomized number of bridge operations for one direction, each with
an independently drawn amount, through RetryController and
TransactionPipeline.
"""

import logging
import random
import time
from decimal import Decimal, ROUND_DOWN
from typing import Dict, List, Optional

from web3 import Web3

from ..types import (
    Account,
    AttemptOutcome,
    BridgeDirection,
    BridgeOperationSpec,
    NetworkContext,
    OperationKind,
    TransactionIntent,
)
from ..config import DirectionSettings, config as global_config
from ..errors import ConfigurationError, ErrorCode, InsufficientFunds
from ..infra.retry import RetryController
from ..protocols.bridge import BridgePayloadEncoder
from .pipeline import TransactionPipeline

logger = logging.getLogger(__name__)

AMOUNT_QUANTUM = Decimal("0.00000001")

# Pause between operations of one direction, in seconds
PAUSE_MIN = 3
PAUSE_MAX = 7


def draw_count(settings: DirectionSettings) -> int:
    """Uniform in [max(1, min), max(that, max)]"""
    low = max(1, settings.count_min)
    high = max(low, settings.count_max)
    return random.randint(low, high)


def draw_amount(settings: DirectionSettings) -> Decimal:
    """Uniform in [amount_min, amount_max], truncated to 8 decimals"""
    low, high = settings.amount_min, settings.amount_max
    amount = low + (high - low) * Decimal(str(random.random()))
    amount = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)
    return min(max(amount, low), high)


class BridgeOperationScheduler:
    """
    Bridge operations for one account

    Usage:
        scheduler = BridgeOperationScheduler(pipeline, RetryController(), networks)
        successes = scheduler.run(account, BridgeDirection.TO_SEPOLIA, settings.direction(...))
    """

    def __init__(
        self,
        pipeline: TransactionPipeline,
        retry: RetryController,
        networks: Dict[str, NetworkContext],
        contract_address: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            pipeline: Transaction pipeline
            retry: Retry controller
            networks: Network contexts by name (both bridge ends)
            contract_address: Bridge contract (default from config)
            max_attempts: Attempts per operation (default: controller setting)
        """
        self.pipeline = pipeline
        self.retry = retry
        self.networks = networks
        self.contract_address = (
            contract_address if contract_address is not None else global_config.bridge.contract_address
        )
        self.max_attempts = max_attempts

    def plan(self, direction: BridgeDirection, settings: DirectionSettings) -> List[BridgeOperationSpec]:
        """Draw the operation count and one amount per operation"""
        count = draw_count(settings)
        return [
            BridgeOperationSpec(
                direction=direction,
                amount=draw_amount(settings),
                count_range=(settings.count_min, settings.count_max),
                amount_range=(settings.amount_min, settings.amount_max),
            )
            for _ in range(count)
        ]

    def run(self, account: Account, direction: BridgeDirection, settings: DirectionSettings) -> int:
        """
        Execute the bridge operations of one direction

        Returns:
            Number of operations that succeeded (0 when disabled)
        """
        if not settings.enabled:
            logger.warning(f"Bridge {direction.value} is disabled in config")
            return 0

        if not self.contract_address:
            raise ConfigurationError.missing("BRIDGE_CONTRACT_ADDRESS")

        operations = self.plan(direction, settings)
        source = self.networks[direction.source_network]
        logger.info(f"Will perform {len(operations)} bridge operations {direction.value}")

        successes = 0
        for i, operation in enumerate(operations):
            logger.info(
                f"Bridge operation {i + 1}/{len(operations)}: {operation.amount} {source.currency_symbol}"
            )
            outcome = self.execute(account, operation)
            if outcome.is_success:
                successes += 1

            if i < len(operations) - 1:
                wait_time = random.randint(PAUSE_MIN, PAUSE_MAX)
                logger.info(f"Waiting {wait_time} seconds before next bridge operation...")
                time.sleep(wait_time)

        logger.info(f"Completed {successes}/{len(operations)} bridge operations {direction.value}")
        return successes

    def execute(self, account: Account, operation: BridgeOperationSpec) -> AttemptOutcome:
        """Single bridge operation with retries"""
        direction = operation.direction
        source = self.networks[direction.source_network]
        sender = account.address_on(source.name)
        recipient = account.address_on(direction.target_network)
        amount_wei = Web3.to_wei(operation.amount, "ether")

        logger.info(f"Initiating bridge from {source.name} to {direction.target_network}...")

        intent = TransactionIntent(
            sender=sender,
            to=self.contract_address,
            value=amount_wei,
            data=BridgePayloadEncoder.encode_hex(direction.destination_network_id, recipient, amount_wei),
            network=source.name,
            kind=OperationKind.BRIDGE,
        )

        def attempt(index: int) -> AttemptOutcome:
            balance = source.client.get_balance(sender)
            logger.info(f"{source.name} balance: {Web3.from_wei(balance, 'ether')}")
            if balance < amount_wei:
                error = InsufficientFunds.native_balance(
                    source.name,
                    source.currency_symbol,
                    operation.amount,
                    Decimal(str(Web3.from_wei(balance, "ether"))),
                )
                return AttemptOutcome.fatal(error.message, ErrorCode.TX_INSUFFICIENT_FUNDS)
            return self.pipeline.submit(intent, source, account, index)

        outcome = self.retry.run(
            attempt,
            max_attempts=self.max_attempts,
            operation_name=f"bridge_{direction.value}",
        )

        if outcome.is_success:
            logger.info(f"Bridge transaction sent successfully! Amount: {operation.amount} {source.currency_symbol}")
            if outcome.tx_hash:
                logger.info(f"View transaction: {source.tx_url(outcome.tx_hash)}")
            logger.info("Bridge transactions typically take 10-30 minutes to complete")
        else:
            logger.error(f"Bridge error: {outcome.reason}")
        return outcome
