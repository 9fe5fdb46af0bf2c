"""Configuration module for the MonScreener service."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, List, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from monscreener.constants import (
    DEFAULT_RPC_ENDPOINTS,
    DEXSCREENER_API_URL,
    MONAD_CHAIN_ID,
)

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except Exception as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def positive_int_validator(value: str) -> int:
    """Validate a strictly positive integer."""
    number = int_validator(value)
    if number < 1:
        raise ValueError(f"'{value}' must be a positive integer")
    return number


def float_validator(value: str) -> float:
    """Validate and convert string to float."""
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")


def url_validator(value: str) -> str:
    """Validate URL format.

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def url_list_validator(value: str) -> List[str]:
    """Validate a comma separated list of URLs."""
    urls = [url_validator(part.strip()) for part in value.split(",") if part.strip()]
    if not urls:
        raise ValueError("At least one URL is required")
    return urls


def log_level_validator(value: str) -> str:
    """Validate log level.

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


def environment_validator(value: str) -> str:
    """Validate environment name.

    Raises:
        ValueError: If not a valid environment name
    """
    valid_environments = ("development", "testing", "staging", "production")
    if value.lower() not in valid_environments:
        raise ValueError(f"Environment must be one of: {', '.join(valid_environments)}")
    return value.lower()


def decimal_validator(value: str) -> Decimal:
    """Validate and convert string to Decimal.

    Raises:
        ValueError: If not a valid decimal number
    """
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid decimal number")


@dataclass
class RpcConfig:
    """Configuration for the Monad JSON-RPC endpoint pool."""

    endpoints: List[str] = field(default_factory=lambda: list(DEFAULT_RPC_ENDPOINTS))
    timeout: float = 30.0  # seconds
    max_retries: int = 2
    retry_base_delay: float = 0.5  # seconds

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.endpoints:
            raise ValueError("At least one RPC endpoint is required")
        if self.max_retries < 1:
            raise ValueError(f"Invalid max_retries: {self.max_retries}")


@lru_cache()
def get_rpc_config() -> RpcConfig:
    """Get RPC configuration from environment variables.

    Returns:
        RpcConfig instance

    Raises:
        ValueError: If environment variables fail validation
    """
    return RpcConfig(
        endpoints=get_env_var("MONAD_RPC_URLS", list(DEFAULT_RPC_ENDPOINTS),
                              validator=url_list_validator),
        timeout=get_env_var("RPC_TIMEOUT", 30.0, validator=float_validator),
        max_retries=get_env_var("RPC_MAX_RETRIES", 2, validator=positive_int_validator),
        retry_base_delay=get_env_var("RPC_RETRY_BASE_DELAY", 0.5, validator=float_validator)
    )


@dataclass
class DexScreenerConfig:
    """Configuration for the DEXScreener REST API."""

    base_url: str = DEXSCREENER_API_URL
    chain_id: str = MONAD_CHAIN_ID
    timeout: float = 15.0  # seconds
    min_request_interval: float = 0.2  # 300 req/min
    max_retries: int = 3
    retry_base_delay: float = 1.0  # seconds
    max_addresses_per_request: int = 30


@lru_cache()
def get_dexscreener_config() -> DexScreenerConfig:
    """Get DEXScreener configuration from environment variables."""
    return DexScreenerConfig(
        base_url=get_env_var("DEXSCREENER_API_URL", DEXSCREENER_API_URL, validator=url_validator),
        chain_id=get_env_var("DEXSCREENER_CHAIN_ID", MONAD_CHAIN_ID),
        timeout=get_env_var("DEXSCREENER_TIMEOUT", 15.0, validator=float_validator),
        min_request_interval=get_env_var("DEXSCREENER_MIN_INTERVAL", 0.2, validator=float_validator),
        max_retries=get_env_var("DEXSCREENER_MAX_RETRIES", 3, validator=positive_int_validator),
        retry_base_delay=get_env_var("DEXSCREENER_RETRY_BASE_DELAY", 1.0, validator=float_validator)
    )


@dataclass
class ScanConfig:
    """Configuration for log scanning and on-chain discovery."""

    chunk_size: int = 100  # max block range per eth_getLogs call
    parallel_chunks: int = 10
    bonding_curve_window: int = 20_000  # blocks, ~2.7 hours on Monad
    transfer_lookback: int = 50_000  # blocks, ~7 hours on Monad
    max_discovered_tokens: int = 200
    token_batch_size: int = 10
    max_transfers: int = 100
    block_time_seconds: float = 0.5
    assumed_total_supply: int = 1_000_000_000
    mon_usd_price: Decimal = Decimal("1.0")  # placeholder until a price feed exists
    recent_transaction_blocks: int = 100
    recent_transaction_limit: int = 50


@lru_cache()
def get_scan_config() -> ScanConfig:
    """Get scan configuration from environment variables."""
    return ScanConfig(
        chunk_size=get_env_var("SCAN_CHUNK_SIZE", 100, validator=positive_int_validator),
        parallel_chunks=get_env_var("SCAN_PARALLEL_CHUNKS", 10, validator=positive_int_validator),
        bonding_curve_window=get_env_var("BONDING_CURVE_WINDOW", 20_000, validator=positive_int_validator),
        transfer_lookback=get_env_var("TRANSFER_LOOKBACK", 50_000, validator=positive_int_validator),
        max_discovered_tokens=get_env_var("MAX_DISCOVERED_TOKENS", 200, validator=positive_int_validator),
        token_batch_size=get_env_var("TOKEN_BATCH_SIZE", 10, validator=positive_int_validator),
        max_transfers=get_env_var("MAX_TRANSFERS", 100, validator=positive_int_validator),
        block_time_seconds=get_env_var("BLOCK_TIME_SECONDS", 0.5, validator=float_validator),
        mon_usd_price=get_env_var("MON_USD_PRICE", Decimal("1.0"), validator=decimal_validator)
    )


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def bind_address(self) -> str:
        """Get the bind address for the server."""
        return f"{self.host}:{self.port}"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.environment not in ("development", "testing", "staging", "production"):
            raise ValueError(f"Invalid environment: {self.environment}")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")


@lru_cache()
def get_server_config() -> ServerConfig:
    """Get server configuration from environment variables.

    Raises:
        ValueError: If environment variables fail validation
    """
    return ServerConfig(
        host=get_env_var("HOST", "0.0.0.0"),
        port=get_env_var("PORT", 8000, validator=int_validator),
        debug=get_env_var("DEBUG", False, validator=bool_validator),
        environment=get_env_var("ENVIRONMENT", "development", validator=environment_validator),
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator),
        cors_origins=get_env_var("CORS_ORIGINS", "*").split(",")
    )


@dataclass
class AppConfig:
    """Comprehensive application configuration."""

    rpc: RpcConfig = field(default_factory=get_rpc_config)
    dexscreener: DexScreenerConfig = field(default_factory=get_dexscreener_config)
    scan: ScanConfig = field(default_factory=get_scan_config)
    server: ServerConfig = field(default_factory=get_server_config)


def get_app_config() -> AppConfig:
    """Get the comprehensive application configuration."""
    return AppConfig()
