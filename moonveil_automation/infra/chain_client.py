"""
Chain access using web3.py

ChainClient is the capability the pipeline and flows depend on; tests swap
in MagicMock(spec=ChainClient). Web3ChainClient is the real implementation
on a web3 HTTPProvider with local eth_account signing.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from web3 import Web3, HTTPProvider
from web3.exceptions import TimeExhausted
from eth_account import Account as _EthAccount

from ..config import NetworkConfig
from ..errors import ConfigurationError, RpcError
from ..types import NetworkContext

logger = logging.getLogger(__name__)

GWEI = 10 ** 9


class ReceiptTimeout(Exception):
    """Transaction was broadcast but no receipt arrived in time"""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"No receipt for {tx_hash} after {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class ChainClient(ABC):
    """Read, sign and broadcast on one EVM chain"""

    @property
    @abstractmethod
    def chain_id(self) -> int:
        """Chain id reported by the node"""

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """Native balance in wei"""

    @abstractmethod
    def get_transaction_count(self, address: str) -> int:
        """Next nonce, including pending transactions"""

    @abstractmethod
    def get_gas_price(self) -> int:
        """Current network gas price in wei"""

    @abstractmethod
    def estimate_gas(self, call: Dict[str, Any]) -> int:
        """Gas estimate for a gas-less transaction dict"""

    @abstractmethod
    def sign(self, tx: Dict[str, Any], private_key: str) -> bytes:
        """Sign a complete transaction dict, return the raw transaction"""

    @abstractmethod
    def broadcast(self, raw_tx: bytes) -> str:
        """Send a raw transaction, return its hash (0x-prefixed hex)"""

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Dict[str, Any]:
        """
        Block until the transaction is mined.

        Raises:
            ReceiptTimeout: no receipt within timeout
        """


def _hex(value: Any) -> str:
    text = value.hex() if hasattr(value, "hex") else str(value)
    return text if text.startswith("0x") else "0x" + text


class Web3ChainClient(ChainClient):
    """
    ChainClient on a Web3 instance

    Usage:
        client = Web3ChainClient.from_rpc("https://rpc.ankr.com/eth_sepolia")
        balance = client.get_balance("0x...")
    """

    def __init__(self, web3: Web3):
        self.web3 = web3

    @classmethod
    def from_rpc(cls, rpc_url: str, timeout: int = 30) -> "Web3ChainClient":
        """
        Create client for an RPC endpoint

        Args:
            rpc_url: RPC endpoint URL
            timeout: Request timeout in seconds
        """
        if not rpc_url:
            raise ConfigurationError.missing("rpc_url")

        provider = HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": timeout},
        )
        return cls(Web3(provider))

    @property
    def chain_id(self) -> int:
        return self.web3.eth.chain_id

    def get_balance(self, address: str) -> int:
        return self.web3.eth.get_balance(Web3.to_checksum_address(address))

    def get_transaction_count(self, address: str) -> int:
        return self.web3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending")

    def get_gas_price(self) -> int:
        return self.web3.eth.gas_price

    def estimate_gas(self, call: Dict[str, Any]) -> int:
        call = dict(call)
        for key in ("from", "to"):
            if call.get(key):
                call[key] = Web3.to_checksum_address(call[key])
        return self.web3.eth.estimate_gas(call)

    def sign(self, tx: Dict[str, Any], private_key: str) -> bytes:
        tx = dict(tx)
        tx["to"] = Web3.to_checksum_address(tx["to"])
        # Sender is derived from the key
        tx.pop("from", None)
        signed = _EthAccount.sign_transaction(tx, private_key)
        return signed.raw_transaction

    def broadcast(self, raw_tx: bytes) -> str:
        tx_hash = self.web3.eth.send_raw_transaction(raw_tx)
        return _hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Dict[str, Any]:
        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise ReceiptTimeout(tx_hash, timeout) from e
        return dict(receipt)


def build_network_context(
    network_config: NetworkConfig,
    gas_multiplier: float,
    client: Optional[ChainClient] = None,
) -> NetworkContext:
    """
    Create the NetworkContext for a configured network

    Args:
        network_config: Network settings (fee bounds in gwei)
        gas_multiplier: Base gas price multiplier for this run
        client: Chain client to use (default: Web3ChainClient on rpc_url)

    Returns:
        NetworkContext with fee bounds in wei
    """
    if client is None:
        client = Web3ChainClient.from_rpc(network_config.rpc_url)

    chain_id = network_config.chain_id
    if chain_id is None:
        try:
            chain_id = client.chain_id
        except Exception as e:
            raise RpcError.connection_failed(network_config.rpc_url, e) from e
        logger.info(f"Detected {network_config.name} chain ID from RPC: {chain_id}")

    return NetworkContext(
        name=network_config.name,
        chain_id=int(chain_id),
        client=client,
        min_fee=int(network_config.min_gas_gwei * GWEI),
        max_fee=int(network_config.max_gas_gwei * GWEI),
        base_multiplier=gas_multiplier,
        currency_symbol=network_config.currency_symbol,
        explorer_url=network_config.explorer_url,
        default_transfer_gas=network_config.default_transfer_gas,
        default_bridge_gas=network_config.default_bridge_gas,
    )
