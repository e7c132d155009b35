"""
Command line entry point

    python -m moonveil_automation --config config.json --keys pk.txt [--proxies proxy.txt]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .client import AutomationClient
from .config import AutomationSettings, setup_logging
from .errors import AutomationError
from .infra.http import load_proxies

logger = logging.getLogger("moonveil_automation")


def _read_keys(path: Path) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Moonveil testnet automation: faucet, transfer, bridge")
    parser.add_argument("--config", "-c", type=Path, default=Path("config.json"),
                        help="Run settings JSON (default: config.json)")
    parser.add_argument("--keys", "-k", type=Path, default=Path("pk.txt"),
                        help="Private keys, one per line (default: pk.txt)")
    parser.add_argument("--proxies", "-p", type=Path, default=Path("proxy.txt"),
                        help="Proxies, one per line (default: proxy.txt, optional)")
    args = parser.parse_args(argv)

    setup_logging()
    logger.info("=== Moonveil Testnet Automation Tool ===")

    try:
        settings = AutomationSettings.load(args.config)
    except AutomationError as e:
        logger.error(f"Error loading configuration: {e}")
        return 2

    if not args.keys.exists():
        logger.error(f"Private key file not found: {args.keys}")
        return 2
    private_keys = _read_keys(args.keys)
    logger.info(f"Found {len(private_keys)} private keys")

    proxies: List[str] = []
    if args.proxies.exists():
        proxies = load_proxies(str(args.proxies))
        logger.info(f"Successfully loaded {len(proxies)} proxies")
    else:
        logger.warning(f"{args.proxies} not found, will not use proxies")

    with AutomationClient(settings, proxies=proxies) as client:
        reports = client.run(private_keys)

    return 0 if all(r.succeeded for r in reports) else 1


if __name__ == "__main__":
    sys.exit(main())
