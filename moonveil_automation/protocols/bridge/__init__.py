"""
Moonveil bridge protocol

Calldata encoding for the bridge contract's native-asset transfer.
"""

from .api import (
    BRIDGE_ASSET_SELECTOR,
    BYTES_OFFSET,
    MOONVEIL_NETWORK_ID,
    PAYLOAD_LENGTH,
    SEPOLIA_NETWORK_ID,
    WORD_SIZE,
    ZERO_ADDRESS,
)
from .encoder import BridgePayloadEncoder

__all__ = [
    "BridgePayloadEncoder",
    "BRIDGE_ASSET_SELECTOR",
    "BYTES_OFFSET",
    "MOONVEIL_NETWORK_ID",
    "PAYLOAD_LENGTH",
    "SEPOLIA_NETWORK_ID",
    "WORD_SIZE",
    "ZERO_ADDRESS",
]
