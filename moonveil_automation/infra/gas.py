"""
Gas price and gas limit estimation

Both estimators degrade to safe defaults instead of raising: an estimator
outage must never block a transaction attempt.
"""

import logging
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, Optional

from ..types import NetworkContext, OperationKind
from ..config import config as global_config

logger = logging.getLogger(__name__)

GWEI = 10 ** 9


def _to_gwei(wei: int) -> str:
    return f"{Decimal(wei) / GWEI:.4f}"


class GasPriceEstimator:
    """
    Adaptive gas price: network price * base multiplier * growth ** attempt,
    clamped to the network's [min_fee, max_fee].

    Usage:
        estimator = GasPriceEstimator()
        gas_price = estimator.price(network, attempt_index=0)
    """

    def __init__(self, retry_growth_factor: Optional[float] = None):
        self._growth = Decimal(str(
            retry_growth_factor if retry_growth_factor is not None
            else global_config.gas.retry_increase
        ))

    def multiplier(self, network: NetworkContext, attempt_index: int = 0) -> Decimal:
        return Decimal(str(network.base_multiplier)) * (self._growth ** attempt_index)

    def price(self, network: NetworkContext, attempt_index: int = 0) -> int:
        """
        Gas price in wei for an attempt.

        Args:
            network: Network context (fee bounds and base multiplier)
            attempt_index: 0 for the first try, escalates on retries

        Returns:
            Gas price in wei, always within [min_fee, max_fee]
        """
        try:
            network_price = int(network.client.get_gas_price())
        except Exception as e:
            logger.warning(
                f"Error getting {network.name} gas price: {e}; "
                f"using fallback {_to_gwei(network.min_fee)} gwei"
            )
            return network.min_fee

        multiplier = self.multiplier(network, attempt_index)
        adjusted = int((Decimal(network_price) * multiplier).to_integral_value(rounding=ROUND_FLOOR))

        if adjusted < network.min_fee:
            logger.warning(f"{network.name} gas price below minimum, using: {_to_gwei(network.min_fee)} gwei")
            return network.min_fee
        if adjusted > network.max_fee:
            logger.warning(f"{network.name} gas price above maximum, using: {_to_gwei(network.max_fee)} gwei")
            return network.max_fee

        logger.info(
            f"{network.name} gas price: {_to_gwei(network_price)} gwei, "
            f"using: {_to_gwei(adjusted)} gwei ({multiplier:.2f}x)"
        )
        return adjusted


class GasLimitEstimator:
    """
    Gas limit from the node's estimate plus a safety buffer, with a static
    per-operation fallback when estimation fails.
    """

    def __init__(self, buffer: Optional[float] = None):
        self._buffer = Decimal(str(buffer if buffer is not None else global_config.gas.limit_buffer))

    def limit(
        self,
        call: Dict[str, Any],
        network: NetworkContext,
        kind: OperationKind = OperationKind.TRANSFER,
    ) -> int:
        """
        Args:
            call: Gas-less transaction dict
            network: Network context
            kind: Operation kind, selects the fallback value

        Returns:
            Gas limit in gas units
        """
        try:
            estimated = int(network.client.estimate_gas(call))
        except Exception as e:
            fallback = network.default_gas_for(kind)
            logger.warning(
                f"Gas estimation failed for {network.name}: {e}; using default gas limit: {fallback}"
            )
            return fallback

        with_buffer = int((Decimal(estimated) * self._buffer).to_integral_value(rounding=ROUND_FLOOR))
        logger.info(f"Estimated gas for {network.name}: {estimated}, with buffer: {with_buffer}")
        return with_buffer
