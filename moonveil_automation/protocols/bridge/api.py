"""
Moonveil Bridge Contract Constants

Function selector and ABI layout of the bridge call, plus the bridge's own
network ids (not EVM chain ids).
"""

from ...types.intent import BRIDGE_NETWORK_IDS, MOONVEIL, SEPOLIA

# bridgeAsset(uint32,address,uint256,address,bool,bytes)
BRIDGE_ASSET_SELECTOR = bytes.fromhex("cd586579")

# Native asset: token address is zero
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

BRIDGE_ASSET_ARG_TYPES = ["uint32", "address", "uint256", "address", "bool", "bytes"]

WORD_SIZE = 32

# Offset of the trailing dynamic bytes argument (6 head words)
BYTES_OFFSET = 6 * WORD_SIZE  # 0xc0

# selector + 6 head words + 1 length word (empty bytes, no data words)
PAYLOAD_LENGTH = len(BRIDGE_ASSET_SELECTOR) + 7 * WORD_SIZE  # 228

SEPOLIA_NETWORK_ID = BRIDGE_NETWORK_IDS[SEPOLIA]
MOONVEIL_NETWORK_ID = BRIDGE_NETWORK_IDS[MOONVEIL]
