"""
Unit tests for bridge operation scheduling
"""

import sys
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from moonveil_automation.modules import (
    BridgeOperationScheduler,
    TransactionPipeline,
    draw_amount,
    draw_count,
)
from moonveil_automation.infra import NonceSequencer, GasPriceEstimator, GasLimitEstimator, RetryController
from moonveil_automation.config import DirectionSettings
from moonveil_automation.types import MOONVEIL, SEPOLIA, BridgeDirection
from moonveil_automation.protocols.bridge import BridgePayloadEncoder
from moonveil_automation.errors import ConfigurationError, ErrorCode

from mocks import BRIDGE_CONTRACT, TEST_ADDRESS, make_account, make_networks


def direction_settings(enabled=True, amount_min="0.00001", amount_max="0.00001", count_min=1, count_max=1):
    return DirectionSettings(
        enabled=enabled,
        amount_min=Decimal(amount_min),
        amount_max=Decimal(amount_max),
        count_min=count_min,
        count_max=count_max,
    )


@patch("moonveil_automation.modules.bridge.time.sleep")
class TestBridgeOperationScheduler(unittest.TestCase):
    """Tests for BridgeOperationScheduler.run"""

    def setUp(self):
        self.networks = make_networks()
        self.moonveil = self.networks[MOONVEIL].client
        self.sepolia = self.networks[SEPOLIA].client
        self.account = make_account()
        self.pipeline = TransactionPipeline(
            NonceSequencer(),
            gas_price=GasPriceEstimator(1.1),
            gas_limit=GasLimitEstimator(1.2),
            wait_for_receipt=False,
        )
        self.scheduler = BridgeOperationScheduler(
            self.pipeline,
            RetryController(base_wait_time=1, max_attempts=2),
            self.networks,
            contract_address=BRIDGE_CONTRACT,
        )

    def test_disabled_direction_does_nothing(self, mock_sleep):
        pipeline = MagicMock(spec=TransactionPipeline)
        scheduler = BridgeOperationScheduler(
            pipeline, RetryController(1, 2), self.networks, contract_address=BRIDGE_CONTRACT
        )
        successes = scheduler.run(self.account, BridgeDirection.TO_SEPOLIA, direction_settings(enabled=False))

        self.assertEqual(successes, 0)
        pipeline.submit.assert_not_called()

    def test_runs_drawn_number_of_operations(self, mock_sleep):
        successes = self.scheduler.run(
            self.account, BridgeDirection.TO_SEPOLIA, direction_settings(count_min=2, count_max=2)
        )

        self.assertEqual(successes, 2)
        self.assertEqual(self.moonveil.broadcast.call_count, 2)
        self.sepolia.broadcast.assert_not_called()
        # Pause between operations only
        self.assertEqual(mock_sleep.call_count, 1)
        pause = mock_sleep.call_args[0][0]
        self.assertTrue(3 <= pause <= 7)

    def test_transaction_shape(self, mock_sleep):
        self.scheduler.run(self.account, BridgeDirection.TO_SEPOLIA, direction_settings())

        tx = self.moonveil.sign.call_args[0][0]
        self.assertEqual(tx["to"], BRIDGE_CONTRACT)
        self.assertEqual(tx["value"], 10 ** 13)
        self.assertTrue(tx["data"].startswith("0xcd586579"))
        self.assertEqual(tx["data"], BridgePayloadEncoder.encode_hex(0, TEST_ADDRESS, 10 ** 13))
        self.assertEqual(tx["chainId"], 1337)

    def test_to_moonveil_uses_sepolia(self, mock_sleep):
        successes = self.scheduler.run(self.account, BridgeDirection.TO_MOONVEIL, direction_settings())

        self.assertEqual(successes, 1)
        self.moonveil.broadcast.assert_not_called()
        tx = self.sepolia.sign.call_args[0][0]
        self.assertEqual(tx["data"], BridgePayloadEncoder.encode_hex(22, TEST_ADDRESS, 10 ** 13))
        self.assertEqual(tx["chainId"], 11155111)

    def test_insufficient_balance_sends_nothing(self, mock_sleep):
        self.moonveil.get_balance.return_value = 0
        successes = self.scheduler.run(self.account, BridgeDirection.TO_SEPOLIA, direction_settings())

        self.assertEqual(successes, 0)
        self.moonveil.sign.assert_not_called()
        self.moonveil.broadcast.assert_not_called()

    def test_insufficient_balance_outcome(self, mock_sleep):
        self.moonveil.get_balance.return_value = 10 ** 12
        operation = self.scheduler.plan(BridgeDirection.TO_SEPOLIA, direction_settings())[0]
        outcome = self.scheduler.execute(self.account, operation)

        self.assertTrue(outcome.is_fatal)
        self.assertEqual(outcome.error_code, ErrorCode.TX_INSUFFICIENT_FUNDS)

    def test_failed_operation_does_not_stop_the_rest(self, mock_sleep):
        self.moonveil.broadcast.side_effect = [ValueError("execution reverted"), "0x" + "cd" * 32]
        successes = self.scheduler.run(
            self.account, BridgeDirection.TO_SEPOLIA, direction_settings(count_min=2, count_max=2)
        )

        self.assertEqual(successes, 1)
        self.assertEqual(self.moonveil.broadcast.call_count, 2)

    def test_missing_contract_address(self, mock_sleep):
        scheduler = BridgeOperationScheduler(
            self.pipeline, RetryController(1, 2), self.networks, contract_address=""
        )
        with self.assertRaises(ConfigurationError) as ctx:
            scheduler.run(self.account, BridgeDirection.TO_SEPOLIA, direction_settings())
        self.assertEqual(ctx.exception.code, ErrorCode.CONFIG_MISSING)

    def test_plan_draws_amounts_within_range(self, mock_sleep):
        settings = direction_settings(amount_min="0.00001", amount_max="0.0001", count_min=3, count_max=3)
        plan = self.scheduler.plan(BridgeDirection.TO_SEPOLIA, settings)

        self.assertEqual(len(plan), 3)
        for operation in plan:
            self.assertTrue(Decimal("0.00001") <= operation.amount <= Decimal("0.0001"))
            self.assertEqual(operation.direction, BridgeDirection.TO_SEPOLIA)


class TestDraws(unittest.TestCase):
    """Tests for count and amount draws"""

    def test_count_at_least_one(self):
        self.assertEqual(draw_count(direction_settings(count_min=0, count_max=0)), 1)

    def test_count_max_below_min(self):
        self.assertEqual(draw_count(direction_settings(count_min=3, count_max=1)), 3)

    def test_count_within_range(self):
        for _ in range(20):
            self.assertIn(draw_count(direction_settings(count_min=2, count_max=4)), (2, 3, 4))

    @patch("moonveil_automation.modules.bridge.random.random", return_value=0.5)
    def test_amount_midpoint(self, _):
        amount = draw_amount(direction_settings(amount_min="0.00001", amount_max="0.0001"))
        self.assertEqual(amount, Decimal("0.00005500"))

    def test_fixed_amount(self):
        amount = draw_amount(direction_settings(amount_min="0.00002", amount_max="0.00002"))
        self.assertEqual(amount, Decimal("0.00002"))

    def test_amount_truncated_to_eight_decimals(self):
        amount = draw_amount(direction_settings(amount_min="0.1", amount_max="0.2"))
        self.assertLessEqual(-amount.as_tuple().exponent, 8)


if __name__ == "__main__":
    unittest.main()
