"""
AutomationClient - Unified entry point for Moonveil testnet automation

Runs the per-account sequence (faucet claim -> transfer to self -> bridge
operations) for a list of private keys, one account at a time.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Dict, List, Optional

from .config import AutomationSettings, config as global_config
from .infra import (
    CorrelationContext,
    FaucetHttpClient,
    NonceSequencer,
    RetryController,
    build_network_context,
)
from .modules import (
    BridgeOperationScheduler,
    FaucetClaimFlow,
    SelfTransferFlow,
    TransactionPipeline,
)
from .types import MOONVEIL, Account, AccountReport, NetworkContext

logger = logging.getLogger(__name__)


class AutomationClient:
    """
    Batch runner over a list of accounts

    Usage:
        settings = AutomationSettings.load("config.json")
        with AutomationClient(settings, proxies=proxies) as client:
            reports = client.run(private_keys)
    """

    def __init__(
        self,
        settings: Optional[AutomationSettings] = None,
        proxies: Optional[List[str]] = None,
        networks: Optional[Dict[str, NetworkContext]] = None,
        http: Optional[FaucetHttpClient] = None,
    ):
        """
        Args:
            settings: Run settings (defaults when None)
            proxies: Proxies for faucet requests
            networks: Pre-built network contexts by name (built lazily from
                config when missing)
            http: Faucet HTTP client (default: FaucetHttpClient(proxies))
        """
        self.settings = settings or AutomationSettings()
        self._networks: Dict[str, NetworkContext] = dict(networks or {})
        self._http = http or FaucetHttpClient(proxies=proxies)
        self.retry = RetryController(
            base_wait_time=self.settings.base_wait_time,
            max_attempts=self.settings.max_retries,
        )

    def network(self, name: str) -> NetworkContext:
        """Get or create the NetworkContext for a network"""
        if name not in self._networks:
            self._networks[name] = build_network_context(
                global_config.network(name),
                self.settings.gas_price_multiplier,
            )
        return self._networks[name]

    def process_account(self, private_key: str, index: int) -> AccountReport:
        """
        Run every enabled step for one account

        Args:
            private_key: Hex private key (with or without 0x)
            index: 1-based account number, used in logs

        Returns:
            AccountReport; failures are recorded, never raised
        """
        report = AccountReport(index=index)
        settings = self.settings

        with CorrelationContext(f"wallet{index}"):
            try:
                account = Account.from_private_key(private_key)
                report.address = account.address

                # Fresh nonce cache per account
                pipeline = TransactionPipeline(NonceSequencer())

                if settings.enable_faucet:
                    faucet = FaucetClaimFlow(self._http, self.retry, self.network(MOONVEIL))
                    report.faucet = faucet.claim(account)

                if settings.enable_transfer:
                    transfer = SelfTransferFlow(
                        pipeline,
                        self.retry,
                        self.network(MOONVEIL),
                        percentage=settings.transfer_amount_percentage,
                    )
                    report.transfer = transfer.transfer_to_self(account)

                if settings.enable_bridge:
                    self._run_bridge(account, pipeline, report)

            except Exception as e:
                logger.error(f"Wallet {index} failed: {e}")
                report.error = str(e)

        return report

    def _run_bridge(self, account: Account, pipeline: TransactionPipeline, report: AccountReport) -> None:
        directions = self.settings.enabled_directions
        if not directions:
            logger.warning("No bridge direction enabled in config, skipping bridge operations")
            return

        networks = {d.source_network: self.network(d.source_network) for d in directions}
        scheduler = BridgeOperationScheduler(pipeline, self.retry, networks)

        for direction in directions:
            logger.info(f"Running {direction.source_network} -> {direction.target_network} bridge operations...")
            successes = scheduler.run(account, direction, self.settings.direction(direction))
            report.bridge_successes[direction.value] = successes
            if successes == 0:
                logger.warning(f"{direction.source_network} -> {direction.target_network} bridge operations failed")

    def run(self, private_keys: List[str]) -> List[AccountReport]:
        """
        Process accounts sequentially with a random pause between them

        Returns:
            One AccountReport per key, in order
        """
        reports: List[AccountReport] = []
        total = len(private_keys)
        logger.info(f"Processing {total} wallets...")

        for i, private_key in enumerate(private_keys):
            index = i + 1
            logger.info(f"=== Processing Wallet {index}/{total} ===")
            reports.append(self.process_account(private_key, index))

            if i < total - 1:
                wait_time = random.randint(
                    global_config.tx.account_pause_min,
                    global_config.tx.account_pause_max,
                )
                logger.info(f"Waiting {wait_time} seconds before next wallet...")
                time.sleep(wait_time)

        succeeded = sum(1 for r in reports if r.succeeded)
        logger.info(f"Wallet processing completed: {succeeded}/{total} succeeded")
        return reports

    def close(self):
        """Close client connections and release resources"""
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"AutomationClient(networks={sorted(self._networks)})"
