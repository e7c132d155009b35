"""
Unit tests for gas price and gas limit estimation
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from mocks import GWEI, make_client, make_network
from moonveil_automation.infra.gas import GasPriceEstimator, GasLimitEstimator
from moonveil_automation.types import OperationKind


class TestGasPriceEstimator(unittest.TestCase):
    """Tests for GasPriceEstimator"""

    def setUp(self):
        self.client = make_client(gas_price=GWEI)
        self.estimator = GasPriceEstimator(retry_growth_factor=1.1)

    def test_first_attempt_uses_base_multiplier(self):
        network = make_network(client=self.client, base_multiplier=1.5)
        self.assertEqual(self.estimator.price(network), 1_500_000_000)

    def test_retries_escalate_price(self):
        network = make_network(client=self.client)
        self.assertEqual(self.estimator.price(network, 0), 1_000_000_000)
        self.assertEqual(self.estimator.price(network, 1), 1_100_000_000)
        self.assertEqual(self.estimator.price(network, 2), 1_210_000_000)

    def test_result_is_floored(self):
        self.client.get_gas_price.return_value = 3
        network = make_network(client=self.client, min_fee=0, base_multiplier=1.5)
        self.assertEqual(self.estimator.price(network), 4)

    def test_clamped_to_max_fee(self):
        self.client.get_gas_price.return_value = 1000 * GWEI
        network = make_network(client=self.client)
        self.assertEqual(self.estimator.price(network), network.max_fee)

    def test_clamped_to_min_fee(self):
        self.client.get_gas_price.return_value = 1
        network = make_network(client=self.client)
        self.assertEqual(self.estimator.price(network), network.min_fee)

    def test_fetch_failure_falls_back_to_min_fee(self):
        self.client.get_gas_price.side_effect = ConnectionError("rpc down")
        network = make_network(client=self.client)
        self.assertEqual(self.estimator.price(network, 3), network.min_fee)


class TestGasLimitEstimator(unittest.TestCase):
    """Tests for GasLimitEstimator"""

    def setUp(self):
        self.client = make_client(gas_estimate=21_000)
        self.network = make_network(client=self.client)
        self.estimator = GasLimitEstimator(buffer=1.2)

    def test_estimate_with_buffer(self):
        self.assertEqual(self.estimator.limit({"to": "0x0"}, self.network), 25_200)

    def test_buffer_result_floored(self):
        self.client.estimate_gas.return_value = 100_001
        self.assertEqual(self.estimator.limit({}, self.network), 120_001)

    def test_transfer_fallback(self):
        self.client.estimate_gas.side_effect = ValueError("execution reverted")
        self.assertEqual(self.estimator.limit({}, self.network, OperationKind.TRANSFER), 21_000)

    def test_bridge_fallback_per_network(self):
        self.client.estimate_gas.side_effect = ValueError("execution reverted")
        self.assertEqual(self.estimator.limit({}, self.network, OperationKind.BRIDGE), 194_919)


if __name__ == "__main__":
    unittest.main()
