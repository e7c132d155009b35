"""
Configuration management for Moonveil automation

Infrastructure settings (RPC endpoints, fee bounds, retry defaults, logging)
load from environment variables and .env file. Per-run settings
(enable flags, bridge directions, amounts) load from a JSON config file and
fall back to the environment defaults.
"""

import json
import os
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .types.intent import BridgeDirection


def _load_env_file():
    """Load .env file from project root"""
    # Look for .env next to the package
    current = Path(__file__).parent.parent  # moonveil_automation package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: Optional[int]) -> Optional[int]:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class NetworkConfig:
    """Per-network connection and fee settings"""
    name: str
    rpc_url: str = ""
    # None = detect from RPC
    chain_id: Optional[int] = None
    min_gas_gwei: float = 0.1
    max_gas_gwei: float = 100.0
    currency_symbol: str = "ETH"
    explorer_url: str = ""
    default_transfer_gas: int = 21_000
    default_bridge_gas: int = 300_000

    @classmethod
    def from_env(cls, prefix: str, name: str, **defaults: Any) -> "NetworkConfig":
        """
        Build from <PREFIX>_* environment variables

        Example:
            MOONVEIL_RPC_URL, MOONVEIL_CHAIN_ID, MOONVEIL_MIN_GAS_GWEI,
            MOONVEIL_MAX_GAS_GWEI, MOONVEIL_EXPLORER_URL, MOONVEIL_BRIDGE_GAS
        """
        base = cls(name=name, **defaults)
        return cls(
            name=name,
            rpc_url=_get_env(f"{prefix}_RPC_URL", base.rpc_url),
            chain_id=_get_env_int(f"{prefix}_CHAIN_ID", base.chain_id),
            min_gas_gwei=_get_env_float(f"{prefix}_MIN_GAS_GWEI", base.min_gas_gwei),
            max_gas_gwei=_get_env_float(f"{prefix}_MAX_GAS_GWEI", base.max_gas_gwei),
            currency_symbol=_get_env(f"{prefix}_CURRENCY_SYMBOL", base.currency_symbol),
            explorer_url=_get_env(f"{prefix}_EXPLORER_URL", base.explorer_url),
            default_transfer_gas=_get_env_int(f"{prefix}_TRANSFER_GAS", base.default_transfer_gas),
            default_bridge_gas=_get_env_int(f"{prefix}_BRIDGE_GAS", base.default_bridge_gas),
        )


def _moonveil_network() -> NetworkConfig:
    # Static gas fallbacks observed on successful bridge transactions
    return NetworkConfig.from_env(
        "MOONVEIL",
        "moonveil",
        currency_symbol="MORE",
        default_bridge_gas=194_919,
    )


def _sepolia_network() -> NetworkConfig:
    return NetworkConfig.from_env(
        "SEPOLIA",
        "sepolia",
        rpc_url="https://rpc.ankr.com/eth_sepolia",
        chain_id=11155111,
        currency_symbol="ETH",
        explorer_url="https://sepolia.etherscan.io",
        default_bridge_gas=327_633,
    )


@dataclass
class GasConfig:
    """Gas price and gas limit settings"""
    # Base multiplier applied to the network gas price
    price_multiplier: float = field(default_factory=lambda: _get_env_float("GAS_PRICE_MULTIPLIER", 1.1))
    # Extra multiplier per retry attempt (price * increase ** attempt)
    retry_increase: float = field(default_factory=lambda: _get_env_float("GAS_RETRY_INCREASE", 1.1))
    # Safety buffer applied to gas estimates
    limit_buffer: float = field(default_factory=lambda: _get_env_float("GAS_LIMIT_BUFFER", 1.2))


@dataclass
class RetryConfig:
    """Retry settings shared by faucet, transfer and bridge"""
    max_retries: int = field(default_factory=lambda: _get_env_int("MAX_RETRIES", 3))
    base_wait_time: float = field(default_factory=lambda: _get_env_float("BASE_WAIT_TIME", 10.0))


@dataclass
class FaucetConfig:
    """Faucet endpoint configuration (URL must be configured in .env)"""
    url: str = field(default_factory=lambda: _get_env("FAUCET_URL", ""))
    timeout: float = field(default_factory=lambda: _get_env_float("FAUCET_TIMEOUT", 30.0))
    # Balance confirmation after a successful claim
    poll_interval: float = field(default_factory=lambda: _get_env_float("FAUCET_POLL_INTERVAL", 5.0))
    confirmation_timeout: float = field(default_factory=lambda: _get_env_float("FAUCET_CONFIRMATION_TIMEOUT", 120.0))
    headers: Dict[str, str] = field(default_factory=lambda: {
        "Accept": "application/json, text/plain, */*",
        "Content-Type": "application/json",
        "User-Agent": _get_env(
            "FAUCET_USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        ),
    })


@dataclass
class BridgeConfig:
    """Bridge contract configuration (address must be configured in .env)"""
    contract_address: str = field(default_factory=lambda: _get_env("BRIDGE_CONTRACT_ADDRESS", ""))
    min_amount: str = field(default_factory=lambda: _get_env("BRIDGE_MIN_AMOUNT", "0.00001"))


@dataclass
class TxConfig:
    """Transaction submission and batch pacing"""
    wait_for_receipt: bool = field(default_factory=lambda: _get_env_bool("TX_WAIT_FOR_RECEIPT", True))
    receipt_timeout: float = field(default_factory=lambda: _get_env_float("TX_RECEIPT_TIMEOUT", 120.0))
    transfer_amount_percentage: int = field(default_factory=lambda: _get_env_int("TRANSFER_AMOUNT_PERCENTAGE", 90))
    # Pause between accounts, in seconds
    account_pause_min: int = field(default_factory=lambda: _get_env_int("ACCOUNT_PAUSE_MIN", 5))
    account_pause_max: int = field(default_factory=lambda: _get_env_int("ACCOUNT_PAUSE_MAX", 15))


def _get_default_log_path() -> str:
    """Get default log file path under moonveil_automation/log/ with UTC timestamp"""
    from datetime import datetime, timezone
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(__file__).parent / "log"
    return str(log_dir / f"moonveil_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging configuration with file output and correlation ID support.

    Environment variables:
        LOG_FILE: Path to log file (overrides default)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", _get_default_log_path()))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from moonveil_automation.config import config

        print(config.moonveil.rpc_url)
        print(config.retry.max_retries)
    """
    moonveil: NetworkConfig = field(default_factory=_moonveil_network)
    sepolia: NetworkConfig = field(default_factory=_sepolia_network)
    gas: GasConfig = field(default_factory=GasConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    faucet: FaucetConfig = field(default_factory=FaucetConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def network(self, name: str) -> NetworkConfig:
        if name == self.moonveil.name:
            return self.moonveil
        if name == self.sepolia.name:
            return self.sepolia
        raise ConfigurationError.invalid("network", f"Unknown network: {name}")

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


# ---------------------------------------------------------------------------
# Run settings (config.json)
# ---------------------------------------------------------------------------


def _to_decimal(value: Any, param: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigurationError.invalid(param, f"not a number: {value!r}") from e
    if result < 0:
        raise ConfigurationError.invalid(param, f"must not be negative: {value!r}")
    return result


def _to_int(value: Any, param: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError.invalid(param, f"not an integer: {value!r}") from e


def _to_bool(value: Any, param: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise ConfigurationError.invalid(param, f"not a boolean: {value!r}")


def _to_block(value: Any, param: str) -> Dict[str, Any]:
    """JSON object option (missing or null = empty)"""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError.invalid(param, f"must be an object, got {value!r}")
    return value


@dataclass
class DirectionSettings:
    """bridge.to_<direction> block"""
    enabled: bool
    amount_min: Decimal
    amount_max: Decimal
    count_min: int = 1
    count_max: int = 1

    @classmethod
    def default(cls, enabled: bool, min_amount: Optional[str] = None) -> "DirectionSettings":
        amount = _to_decimal(min_amount or config.bridge.min_amount, "bridge.min_amount")
        return cls(enabled=enabled, amount_min=amount, amount_max=amount)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], defaults: "DirectionSettings", param: str) -> "DirectionSettings":
        """Merge a user block onto defaults, key by key"""
        data = _to_block(data, param)
        amount = _to_block(data.get("amount"), f"{param}.amount")
        count = _to_block(data.get("count"), f"{param}.count")

        amount_min = _to_decimal(amount.get("min", defaults.amount_min), f"{param}.amount.min")
        # max falls back to min, as a single fixed amount
        amount_max = _to_decimal(amount.get("max", amount_min if "min" in amount else defaults.amount_max),
                                 f"{param}.amount.max")
        if amount_max < amount_min:
            raise ConfigurationError.invalid(f"{param}.amount", f"max {amount_max} is below min {amount_min}")

        return cls(
            enabled=_to_bool(data.get("enabled", defaults.enabled), f"{param}.enabled"),
            amount_min=amount_min,
            amount_max=amount_max,
            count_min=_to_int(count.get("min", defaults.count_min), f"{param}.count.min"),
            count_max=_to_int(count.get("max", defaults.count_max), f"{param}.count.max"),
        )


def _default_directions() -> Dict[BridgeDirection, DirectionSettings]:
    return {
        BridgeDirection.TO_SEPOLIA: DirectionSettings.default(enabled=True),
        BridgeDirection.TO_MOONVEIL: DirectionSettings.default(enabled=False),
    }


@dataclass
class AutomationSettings:
    """
    Per-run settings parsed from config.json

    Recognized options:
        enable_faucet, enable_transfer, enable_bridge, gas_price_multiplier,
        max_retries, base_wait_time, transfer_amount_percentage,
        bridge.to_<direction>.{enabled, amount.{min,max}, count.{min,max}}
    """
    enable_faucet: bool = True
    enable_transfer: bool = True
    enable_bridge: bool = True
    gas_price_multiplier: float = field(default_factory=lambda: config.gas.price_multiplier)
    max_retries: int = field(default_factory=lambda: config.retry.max_retries)
    base_wait_time: float = field(default_factory=lambda: config.retry.base_wait_time)
    transfer_amount_percentage: int = field(default_factory=lambda: config.tx.transfer_amount_percentage)
    bridge: Dict[BridgeDirection, DirectionSettings] = field(default_factory=_default_directions)

    def __post_init__(self):
        if self.max_retries < 1:
            raise ConfigurationError.invalid("max_retries", "must be at least 1")
        if self.base_wait_time < 0:
            raise ConfigurationError.invalid("base_wait_time", "must not be negative")
        if self.gas_price_multiplier <= 0:
            raise ConfigurationError.invalid("gas_price_multiplier", "must be positive")
        if not 0 <= self.transfer_amount_percentage <= 100:
            raise ConfigurationError.invalid("transfer_amount_percentage", "must be between 0 and 100")

    def direction(self, direction: BridgeDirection) -> DirectionSettings:
        return self.bridge.get(direction) or DirectionSettings.default(enabled=False)

    @property
    def enabled_directions(self) -> List[BridgeDirection]:
        return [d for d in BridgeDirection if self.direction(d).enabled]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutomationSettings":
        if not isinstance(data, dict):
            raise ConfigurationError.invalid("config", "top level must be a JSON object")

        defaults = cls()
        bridge = _default_directions()
        bridge_data = _to_block(data.get("bridge"), "bridge")

        if "direction" in bridge_data:
            # Legacy form: {"direction": "to_sepolia", "amount": "0.00001"}
            direction = BridgeDirection.from_string(str(bridge_data["direction"]))
            amount = bridge_data.get("amount", config.bridge.min_amount)
            for other in bridge:
                bridge[other].enabled = False
            bridge[direction] = DirectionSettings.from_dict(
                {"enabled": True, "amount": {"min": amount, "max": amount}},
                bridge[direction],
                f"bridge.{direction.value}",
            )
        else:
            for direction in BridgeDirection:
                block = bridge_data.get(direction.value)
                if block is not None:
                    bridge[direction] = DirectionSettings.from_dict(
                        block, bridge[direction], f"bridge.{direction.value}"
                    )

        try:
            return cls(
                enable_faucet=_to_bool(data.get("enable_faucet", defaults.enable_faucet), "enable_faucet"),
                enable_transfer=_to_bool(data.get("enable_transfer", defaults.enable_transfer), "enable_transfer"),
                enable_bridge=_to_bool(data.get("enable_bridge", defaults.enable_bridge), "enable_bridge"),
                gas_price_multiplier=float(data.get("gas_price_multiplier", defaults.gas_price_multiplier)),
                max_retries=_to_int(data.get("max_retries", defaults.max_retries), "max_retries"),
                base_wait_time=float(data.get("base_wait_time", defaults.base_wait_time)),
                transfer_amount_percentage=_to_int(
                    data.get("transfer_amount_percentage", defaults.transfer_amount_percentage),
                    "transfer_amount_percentage",
                ),
                bridge=bridge,
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError.invalid("config", str(e)) from e

    @classmethod
    def load(cls, path: Union[str, Path] = "config.json") -> "AutomationSettings":
        """
        Load settings from a JSON file

        A missing file yields defaults; malformed JSON raises ConfigurationError.
        """
        logger = logging.getLogger(__name__)
        path = Path(path)
        if not path.exists():
            logger.warning(f"No configuration file found at {path}, using defaults")
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError.invalid(str(path), f"malformed JSON: {e}") from e

        logger.info(f"Loaded configuration from {path}")
        return cls.from_dict(data)


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "moonveil_automation",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close handlers before removing to flush buffers and release file handles
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    # File handler with rotation
    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger
