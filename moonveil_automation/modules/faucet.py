"""
Faucet Module

Claims testnet funds from the Moonveil faucet and waits for the balance to
reflect the claim.
"""

import logging
import time
from typing import Dict, Optional

import httpx

from ..types import Account, AttemptOutcome, FaucetClaimResult, NetworkContext
from ..errors import ConfigurationError, FaucetError
from ..infra.classifier import ResponseClassifier
from ..infra.http import FaucetHttpClient
from ..infra.retry import RetryController
from ..config import config as global_config

logger = logging.getLogger(__name__)


class FaucetClaimFlow:
    """
    Faucet claim for one account

    Usage:
        flow = FaucetClaimFlow(FaucetHttpClient(proxies), RetryController(), moonveil)
        result = flow.claim(account)
        if result.rate_limited:
            ...
    """

    def __init__(
        self,
        http: FaucetHttpClient,
        retry: RetryController,
        network: NetworkContext,
        classifier: Optional[ResponseClassifier] = None,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        poll_interval: Optional[float] = None,
        confirmation_timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.http = http
        self.retry = retry
        self.network = network
        self.classifier = classifier or ResponseClassifier()
        self.url = url if url is not None else global_config.faucet.url
        self.headers = headers if headers is not None else dict(global_config.faucet.headers)
        self.poll_interval = (
            poll_interval if poll_interval is not None else global_config.faucet.poll_interval
        )
        self.confirmation_timeout = (
            confirmation_timeout if confirmation_timeout is not None
            else global_config.faucet.confirmation_timeout
        )
        self.max_attempts = max_attempts

    def _request(self, address: str) -> AttemptOutcome:
        """One POST, classified"""
        try:
            response = self.http.post(self.url, self.headers, {"address": address})
        except httpx.HTTPError as e:
            error = FaucetError.request_failed(self.url, e)
            logger.warning(f"Request error: {e}")
            return AttemptOutcome.retryable(error.message, error.code)

        logger.info(f"Server response: HTTP {response.status_code} {response.body}")
        return self.classifier.classify(response.status_code, response.body)

    def _rotate(self, next_attempt: int) -> None:
        proxy = self.http.rotate_proxy()
        if proxy:
            logger.info(f"Attempt {next_attempt + 1} via proxy: {proxy}")

    def claim(self, account: Account) -> FaucetClaimResult:
        """
        Claim from the faucet

        Returns:
            FaucetClaimResult; rate limiting counts as success with
            rate_limited=True
        """
        if not self.url:
            raise ConfigurationError.missing("FAUCET_URL")

        network = self.network
        address = account.address_on(network.name)
        logger.info(f"Claiming from Moonveil faucet for address: {address}")
        # Fresh proxy per account
        self.http.rotate_proxy()
        if self.http.proxy:
            logger.info(f"Using proxy: {self.http.proxy}")

        try:
            balance_before: Optional[int] = network.client.get_balance(address)
        except Exception as e:
            logger.warning(f"Could not read {network.name} balance before claim: {e}")
            balance_before = None

        outcome = self.retry.run(
            lambda index: self._request(address),
            max_attempts=self.max_attempts,
            operation_name="faucet",
            on_retry=self._rotate,
        )

        if outcome.is_rate_limited:
            logger.warning("Rate limited, moving to next operation")
            return FaucetClaimResult(outcome=outcome, rate_limited=True)

        if not outcome.is_success:
            logger.error(f"Faucet claim failed: {outcome.reason}")
            return FaucetClaimResult(outcome=outcome)

        if outcome.tx_hash:
            logger.info(f"Success! Transaction: {network.tx_url(outcome.tx_hash)}")
        else:
            logger.info(f"Faucet accepted the claim: {outcome.reason}")

        if balance_before is None:
            return FaucetClaimResult(outcome=outcome)

        confirmed = self.wait_for_balance(address, balance_before)
        return FaucetClaimResult(outcome=outcome, balance_confirmed=confirmed)

    def wait_for_balance(self, address: str, balance_before: int) -> bool:
        """
        Poll until the balance is strictly above balance_before

        Returns:
            True if the increase was seen, False on timeout
        """
        network = self.network
        polls = int(self.confirmation_timeout // self.poll_interval) if self.poll_interval > 0 else 0

        for _ in range(polls):
            time.sleep(self.poll_interval)
            try:
                balance = network.client.get_balance(address)
            except Exception as e:
                logger.warning(f"Balance poll failed: {e}")
                continue
            if balance > balance_before:
                logger.info(f"Faucet funds arrived: {balance_before} -> {balance} wei")
                return True

        logger.warning(
            f"Balance did not increase within {self.confirmation_timeout}s, continuing"
        )
        return False
