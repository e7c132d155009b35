"""
Account and network context types
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from eth_account import Account as _EthAccount

from .intent import OperationKind
from ..errors import SignerError

if TYPE_CHECKING:
    from ..infra.chain_client import ChainClient


@dataclass(frozen=True)
class Account:
    """
    Key-derived account

    Owned by the caller for one processing pass and never persisted.
    """
    private_key: str = field(repr=False)
    address: str = ""

    @classmethod
    def from_private_key(cls, private_key: str) -> "Account":
        """
        Create account from private key

        Args:
            private_key: Hex-encoded private key (with or without 0x prefix)
        """
        private_key = private_key.strip()
        if not private_key:
            raise SignerError.not_configured()

        # Ensure 0x prefix
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        try:
            local = _EthAccount.from_key(private_key)
        except Exception as e:
            raise SignerError.failed(f"invalid private key: {e}") from e
        return cls(private_key=private_key, address=local.address)

    def address_on(self, network: str) -> str:
        """Public address on a network (EVM networks share one address)"""
        return self.address


@dataclass(frozen=True)
class NetworkContext:
    """
    Everything the core needs to know about one chain

    Immutable after construction; shared read-only by every component.
    Fees are in wei.
    """
    name: str
    chain_id: int
    client: "ChainClient" = field(repr=False)
    min_fee: int
    max_fee: int
    base_multiplier: float = 1.0
    currency_symbol: str = "ETH"
    explorer_url: str = ""
    default_transfer_gas: int = 21_000
    default_bridge_gas: int = 300_000

    def __post_init__(self):
        if self.min_fee > self.max_fee:
            from ..errors import ConfigurationError
            raise ConfigurationError.invalid(
                f"{self.name}.gas_bounds",
                f"min fee {self.min_fee} is above max fee {self.max_fee}",
            )

    def default_gas_for(self, kind: OperationKind) -> int:
        if kind == OperationKind.BRIDGE:
            return self.default_bridge_gas
        return self.default_transfer_gas

    def tx_url(self, tx_hash: str) -> str:
        if not self.explorer_url:
            return tx_hash
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"
