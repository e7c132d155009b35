"""
Infrastructure layer for Moonveil automation

Provides:
- NonceSequencer: per-account nonce cache
- GasPriceEstimator / GasLimitEstimator: fee and gas limit estimation
- ResponseClassifier: faucet response classification
- RetryController: backoff-driven attempt loop with correlation IDs
- ChainClient / Web3ChainClient: chain access using web3.py
- FaucetHttpClient: httpx client with proxy rotation
"""

from .nonce import NonceSequencer
from .gas import GasPriceEstimator, GasLimitEstimator
from .classifier import ResponseClassifier
from .retry import (
    RetryController,
    CorrelationContext,
    classify_error,
    classify_broadcast_error,
    get_correlation_id,
)
from .chain_client import (
    ChainClient,
    Web3ChainClient,
    ReceiptTimeout,
    build_network_context,
)
from .http import FaucetHttpClient, HttpResponse, load_proxies

__all__ = [
    "NonceSequencer",
    "GasPriceEstimator",
    "GasLimitEstimator",
    "ResponseClassifier",
    "RetryController",
    "CorrelationContext",
    "classify_error",
    "classify_broadcast_error",
    "get_correlation_id",
    "ChainClient",
    "Web3ChainClient",
    "ReceiptTimeout",
    "build_network_context",
    "FaucetHttpClient",
    "HttpResponse",
    "load_proxies",
]
