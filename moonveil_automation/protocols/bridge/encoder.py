"""
Bridge call payload encoding

Pure function of its inputs: same arguments, same bytes.
"""

from eth_abi import encode
from web3 import Web3

from .api import (
    BRIDGE_ASSET_ARG_TYPES,
    BRIDGE_ASSET_SELECTOR,
    ZERO_ADDRESS,
)
from ...errors import ConfigurationError


class BridgePayloadEncoder:
    """
    Encodes bridgeAsset() calldata for native-asset transfers

    Usage:
        data = BridgePayloadEncoder.encode(0, "0xabc...", 10 ** 13)
        tx["data"] = BridgePayloadEncoder.encode_hex(0, "0xabc...", 10 ** 13)
    """

    @staticmethod
    def encode(
        destination_network_id: int,
        destination_address: str,
        amount: int,
        force_update: bool = True,
    ) -> bytes:
        """
        Args:
            destination_network_id: Bridge network id of the target (0 or 22)
            destination_address: Recipient on the target network
            amount: Amount in wei
            force_update: forceUpdateGlobalExitRoot flag

        Returns:
            228-byte calldata: selector followed by the ABI-encoded arguments
        """
        if amount < 0:
            raise ConfigurationError.invalid("bridge.amount", f"must not be negative: {amount}")
        if not Web3.is_address(destination_address):
            raise ConfigurationError.invalid("bridge.destination", f"not an address: {destination_address}")

        args = encode(
            BRIDGE_ASSET_ARG_TYPES,
            [
                destination_network_id,
                Web3.to_checksum_address(destination_address),
                amount,
                ZERO_ADDRESS,
                force_update,
                b"",
            ],
        )
        payload = BRIDGE_ASSET_SELECTOR + args
        return payload

    @classmethod
    def encode_hex(
        cls,
        destination_network_id: int,
        destination_address: str,
        amount: int,
        force_update: bool = True,
    ) -> str:
        """0x-prefixed hex of encode()"""
        return "0x" + cls.encode(destination_network_id, destination_address, amount, force_update).hex()
