"""
Unit tests for the faucet claim flow
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from moonveil_automation.modules import FaucetClaimFlow
from moonveil_automation.infra import FaucetHttpClient, HttpResponse, RetryController
from moonveil_automation.types import MOONVEIL
from moonveil_automation.errors import ConfigurationError, ErrorCode

from mocks import ETHER, TEST_ADDRESS, make_account, make_client, make_network

FAUCET_URL = "https://faucet.example/api/claim"


@patch("moonveil_automation.infra.retry.random.random", return_value=0.5)
@patch("moonveil_automation.modules.faucet.time.sleep")
class TestFaucetClaimFlow(unittest.TestCase):
    """Tests for FaucetClaimFlow.claim"""

    def setUp(self):
        self.client = make_client(balance=ETHER)
        self.network = make_network(MOONVEIL, self.client)
        self.account = make_account()
        self.http = MagicMock(spec=FaucetHttpClient)
        self.http.proxy = None
        self.http.rotate_proxy.return_value = "http://10.0.0.2:8080"
        self.flow = self._flow()

    def _flow(self, url=FAUCET_URL):
        return FaucetClaimFlow(
            self.http,
            RetryController(base_wait_time=1, max_attempts=3),
            self.network,
            url=url,
            headers={"Content-Type": "application/json"},
            poll_interval=5,
            confirmation_timeout=15,
        )

    def test_success_with_balance_confirmation(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, {"msg": "Txhash: 0xabc"})
        self.client.get_balance.side_effect = [ETHER, ETHER, 2 * ETHER]

        result = self.flow.claim(self.account)

        self.assertTrue(result.is_success)
        self.assertFalse(result.rate_limited)
        self.assertEqual(result.outcome.tx_hash, "0xabc")
        self.assertTrue(result.balance_confirmed)
        self.http.post.assert_called_once_with(
            FAUCET_URL, {"Content-Type": "application/json"}, {"address": TEST_ADDRESS}
        )
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [5, 5])

    def test_rate_limited_skips_polling(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, {"msg": "You have exceeded the rate limit"})

        result = self.flow.claim(self.account)

        self.assertTrue(result.rate_limited)
        self.assertTrue(result.is_success)
        self.assertIsNone(result.balance_confirmed)
        self.assertEqual(self.client.get_balance.call_count, 1)
        self.assertEqual(self.http.post.call_count, 1)

    def test_retry_rotates_proxy(self, mock_sleep, _):
        self.http.post.side_effect = [
            HttpResponse(503, "Service Unavailable"),
            HttpResponse(200, {"msg": "Txhash: 0x1"}),
        ]
        self.client.get_balance.side_effect = [ETHER, 2 * ETHER]

        result = self.flow.claim(self.account)

        self.assertTrue(result.is_success)
        self.assertEqual(self.http.post.call_count, 2)
        # once for the account, once before the retry
        self.assertEqual(self.http.rotate_proxy.call_count, 2)

    def test_transport_errors_exhaust_attempts(self, mock_sleep, _):
        self.http.post.side_effect = httpx.ConnectError("connection refused")

        result = self.flow.claim(self.account)

        self.assertFalse(result.is_success)
        self.assertTrue(result.outcome.is_retryable)
        self.assertEqual(result.outcome.error_code, ErrorCode.FAUCET_REQUEST_FAILED)
        self.assertEqual(self.http.post.call_count, 3)
        self.assertEqual(self.http.rotate_proxy.call_count, 3)

    def test_balance_never_increases(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, {"msg": "ok"})

        result = self.flow.claim(self.account)

        self.assertTrue(result.is_success)
        self.assertIsNone(result.outcome.tx_hash)
        self.assertFalse(result.balance_confirmed)
        # 1 pre-claim read + 15s / 5s polls
        self.assertEqual(self.client.get_balance.call_count, 4)

    def test_poll_errors_are_tolerated(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, {"msg": "ok"})
        self.client.get_balance.side_effect = [ETHER, ConnectionError("reset"), 2 * ETHER]

        result = self.flow.claim(self.account)

        self.assertTrue(result.balance_confirmed)

    def test_unreadable_balance_skips_confirmation(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, {"msg": "ok"})
        self.client.get_balance.side_effect = ConnectionError("refused")

        result = self.flow.claim(self.account)

        self.assertTrue(result.is_success)
        self.assertIsNone(result.balance_confirmed)

    def test_rejection_is_not_retried(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(400, {"msg": "invalid address"})

        result = self.flow.claim(self.account)

        self.assertFalse(result.is_success)
        self.assertEqual(result.outcome.error_code, ErrorCode.FAUCET_REJECTED)
        self.assertEqual(self.http.post.call_count, 1)
        self.http.rotate_proxy.assert_called_once()

    def test_each_claim_starts_on_a_fresh_proxy(self, mock_sleep, _):
        order = []
        self.http.rotate_proxy.side_effect = lambda: order.append("rotate")
        self.http.post.side_effect = lambda *a: order.append("post") or HttpResponse(200, {"msg": "ok"})

        self.flow.claim(self.account)
        self.flow.claim(self.account)

        self.assertEqual(order, ["rotate", "post", "rotate", "post"])

    def test_html_page_fails_without_polling(self, mock_sleep, _):
        self.http.post.return_value = HttpResponse(200, "<html><body>Just a moment...</body></html>")

        result = self.flow.claim(self.account)

        self.assertFalse(result.is_success)
        self.assertEqual(result.outcome.error_code, ErrorCode.FAUCET_INVALID_RESPONSE)
        self.assertEqual(self.http.post.call_count, 1)
        self.assertEqual(self.client.get_balance.call_count, 1)

    def test_missing_url(self, mock_sleep, _):
        with self.assertRaises(ConfigurationError) as ctx:
            self._flow(url="").claim(self.account)
        self.assertEqual(ctx.exception.code, ErrorCode.CONFIG_MISSING)
        self.http.post.assert_not_called()


if __name__ == "__main__":
    unittest.main()
