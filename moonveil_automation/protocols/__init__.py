"""
Protocol encoders

- bridge: Moonveil <-> Sepolia bridge contract
"""

from .bridge import BridgePayloadEncoder

__all__ = ["BridgePayloadEncoder"]
