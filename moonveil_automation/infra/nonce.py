"""
Per-account, per-network nonce cache

The chain is queried once per (address, network); after that the cached
value is handed out and advanced locally after each broadcast, so retries
never reuse a nonce that may already sit in the mempool.
"""

import logging
from typing import Dict, Optional, Tuple

from ..types import NetworkContext

logger = logging.getLogger(__name__)


class NonceSequencer:
    """
    Nonce cache for sequential, single-account processing.

    No locking: one account is processed at a time. Anything that
    parallelizes across accounts must give each account its own instance.

    Usage:
        nonces = NonceSequencer()
        nonce = nonces.next(address, network)
        # ... sign ...
        nonces.advance(address, network)   # before broadcasting
        # ... broadcast ...
        nonces.reset()                      # next account
    """

    def __init__(self):
        # {(address, network name): next nonce to use}
        self._nonces: Dict[Tuple[str, str], int] = {}

    @staticmethod
    def _key(address: str, network: NetworkContext) -> Tuple[str, str]:
        return address.lower(), network.name

    def next(self, address: str, network: NetworkContext) -> int:
        """
        Get the nonce to use for the next transaction.

        The first call per (address, network) queries the chain; later calls
        return the cached value unchanged until advance() is called.

        Args:
            address: Sender address
            network: Network context

        Returns:
            Next nonce to use
        """
        key = self._key(address, network)
        cached = self._nonces.get(key)
        if cached is not None:
            logger.debug(f"Using tracked {network.name} nonce: {cached}")
            return cached

        chain_nonce = network.client.get_transaction_count(address)
        self._nonces[key] = chain_nonce
        logger.info(f"Initial {network.name} nonce from network: {chain_nonce}")
        return chain_nonce

    def advance(self, address: str, network: NetworkContext) -> Optional[int]:
        """
        Increment the cached nonce by exactly one.

        Called once per transaction handed to the broadcast capability,
        whether or not the broadcast later fails.

        Returns:
            The new cached value, or None if nothing was cached yet
        """
        key = self._key(address, network)
        cached = self._nonces.get(key)
        if cached is None:
            return None
        self._nonces[key] = cached + 1
        logger.debug(f"Incremented {network.name} nonce to: {cached + 1}")
        return cached + 1

    def resync(self, address: str, network: NetworkContext) -> int:
        """
        Re-read the chain nonce after a nonce-too-low rejection.

        Uses the higher of chain and cached value so the sequence never
        goes backwards.
        """
        key = self._key(address, network)
        chain_nonce = network.client.get_transaction_count(address)
        cached = self._nonces.get(key, chain_nonce)
        synced = max(chain_nonce, cached)
        self._nonces[key] = synced
        logger.info(
            f"Resynced {network.name} nonce: chain={chain_nonce} tracked={cached} using={synced}"
        )
        return synced

    def peek(self, address: str, network: NetworkContext) -> Optional[int]:
        """Cached value without touching the chain (None = unknown)"""
        return self._nonces.get(self._key(address, network))

    def reset(self) -> None:
        """Forget every cached nonce (new account)"""
        self._nonces.clear()
