"""
Transaction intents and bridge operation descriptions
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Tuple


MOONVEIL = "moonveil"
SEPOLIA = "sepolia"

# Network ids understood by the bridge contract (not EVM chain ids)
BRIDGE_NETWORK_IDS = {
    SEPOLIA: 0,
    MOONVEIL: 22,
}


class OperationKind(Enum):
    """Kind of on-chain operation, selects the static gas fallback"""
    TRANSFER = "transfer"
    BRIDGE = "bridge"


class BridgeDirection(Enum):
    """Bridge direction, named after the target network"""
    TO_SEPOLIA = "to_sepolia"
    TO_MOONVEIL = "to_moonveil"

    @property
    def target_network(self) -> str:
        return SEPOLIA if self == BridgeDirection.TO_SEPOLIA else MOONVEIL

    @property
    def source_network(self) -> str:
        return MOONVEIL if self == BridgeDirection.TO_SEPOLIA else SEPOLIA

    @property
    def destination_network_id(self) -> int:
        return BRIDGE_NETWORK_IDS[self.target_network]

    @classmethod
    def from_string(cls, value: str) -> "BridgeDirection":
        """Convert 'to_sepolia' / 'sepolia' style strings (case-insensitive)"""
        value_lower = value.lower()
        for direction in cls:
            if value_lower in (direction.value, direction.target_network):
                return direction
        from ..errors import ConfigurationError
        raise ConfigurationError.invalid(
            "bridge.direction",
            f"Unknown direction: {value}. Supported: {', '.join(d.value for d in cls)}",
        )


@dataclass(frozen=True)
class TransactionIntent:
    """
    What we want to send, before nonce and fees are known

    Built fresh per attempt and never mutated; use with_value() to derive a
    copy with a different value.
    """
    sender: str
    to: str
    value: int
    data: str
    network: str
    kind: OperationKind = OperationKind.TRANSFER

    def with_value(self, value: int) -> "TransactionIntent":
        return replace(self, value=value)

    def to_call_dict(self, chain_id: int, nonce: int) -> Dict[str, Any]:
        """Gas-less transaction dict used for estimation"""
        return {
            "from": self.sender,
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "nonce": nonce,
            "chainId": chain_id,
        }


@dataclass(frozen=True)
class BridgeOperationSpec:
    """One bridge operation with its independently drawn amount"""
    direction: BridgeDirection
    amount: Decimal
    count_range: Tuple[int, int]
    amount_range: Tuple[Decimal, Decimal]
