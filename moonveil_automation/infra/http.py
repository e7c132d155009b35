"""
HTTP client for the faucet endpoint

Thin wrapper over httpx with optional proxy rotation. Responses come back
as raw (status code, body) pairs; interpreting them is the classifier's job.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import config as global_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Raw response: body is parsed JSON when possible, else text"""
    status_code: int
    body: Union[dict, list, str, None]


def _normalize_proxy(proxy: str) -> str:
    proxy = proxy.strip()
    if "://" not in proxy:
        proxy = "http://" + proxy
    return proxy


def load_proxies(path: str) -> List[str]:
    """Read one proxy per line, skipping blanks"""
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


class FaucetHttpClient:
    """
    HTTP client with proxy rotation

    Usage:
        http = FaucetHttpClient(proxies=["1.2.3.4:8080"])
        response = http.post(url, headers, {"address": "0x..."})
        http.rotate_proxy()   # before a retry
    """

    def __init__(
        self,
        proxies: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            proxies: Proxy URLs or host:port strings (none = direct)
            timeout: Request timeout in seconds (default from config)
        """
        self._proxies = [_normalize_proxy(p) for p in (proxies or []) if p.strip()]
        self._timeout = timeout if timeout is not None else global_config.faucet.timeout
        self._proxy: Optional[str] = random.choice(self._proxies) if self._proxies else None
        self._client: Optional[httpx.Client] = None

    @property
    def proxy(self) -> Optional[str]:
        return self._proxy

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client for the current proxy"""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout, proxy=self._proxy)
        return self._client

    def rotate_proxy(self) -> Optional[str]:
        """Switch to a random proxy; the next request opens a new connection"""
        if not self._proxies:
            return None
        self._proxy = random.choice(self._proxies)
        self.close()
        logger.info(f"Switched to proxy: {self._proxy}")
        return self._proxy

    def post(self, url: str, headers: Dict[str, str], json_body: Dict[str, Any]) -> HttpResponse:
        """
        POST a JSON body

        Raises:
            httpx.HTTPError: transport failure (no response)
        """
        client = self._get_client()
        response = client.post(url, headers=headers, json=json_body)
        try:
            body = response.json()
        except ValueError:
            body = response.text
        logger.debug(f"POST {url} -> HTTP {response.status_code}")
        return HttpResponse(status_code=response.status_code, body=body)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FaucetHttpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
