"""
Functional modules for AutomationClient

Provides the per-account operations:
- TransactionPipeline: single sign-and-broadcast attempt
- SelfTransferFlow: transfer a share of the balance back to self
- BridgeOperationScheduler: randomized bridge operations per direction
- FaucetClaimFlow: faucet claim with balance confirmation
"""

from .pipeline import TransactionPipeline
from .transfer import SelfTransferFlow
from .bridge import BridgeOperationScheduler, draw_amount, draw_count
from .faucet import FaucetClaimFlow

__all__ = [
    "TransactionPipeline",
    "SelfTransferFlow",
    "BridgeOperationScheduler",
    "FaucetClaimFlow",
    "draw_amount",
    "draw_count",
]
