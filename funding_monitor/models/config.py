"""
Configuration Models - Pydantic-validated monitor configuration
==============================================================

Models holding the monitor configuration with automatic validation,
defaults and inline documentation. Values come from (in order of precedence)
environment variables, an optional YAML file, then the defaults below.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from enum import Enum
import os


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ExchangeName(str, Enum):
    """Supported exchanges, in fetch order"""
    BINANCE = "binance"
    OKX = "okx"
    BYBIT = "bybit"


EXCHANGE_ORDER = [exchange.value for exchange in ExchangeName]


# =============================================================================
# BOT CONFIGURATION
# =============================================================================

class BotConfig(BaseModel):
    """General monitor settings"""

    name: str = Field(default="FundingMonitor", description="Monitor name")

    poll_interval_ms: int = Field(
        default=5000,
        ge=100,
        le=3_600_000,
        description="Interval between detection cycles in milliseconds"
    )

    persist_funding_rates: bool = Field(
        default=True,
        description="Also store the funding rates of symbols that produced opportunities"
    )


# =============================================================================
# DETECTION CONFIGURATION
# =============================================================================

class DetectionConfig(BaseModel):
    """Opportunity detection thresholds (percent units)"""

    min_profit_spread_percent: float = Field(
        default=0.3,
        gt=0,
        le=100,
        description="Minimum funding rate spread to report (0.3% by default)"
    )

    max_price_spread_percent: float = Field(
        default=0.5,
        ge=0,
        le=100,
        description="Maximum mark price divergence between the two legs"
    )


# =============================================================================
# FETCHER CONFIGURATION
# =============================================================================

class FetcherConfig(BaseModel):
    """Rate cache and request pacing"""

    cache_ttl_ms: int = Field(
        default=300_000,
        ge=0,
        le=86_400_000,
        description="Lifetime of a three-exchange fetch in the cache"
    )

    exchange_request_delay_ms: int = Field(
        default=200,
        ge=0,
        le=60_000,
        description="Pause between two consecutive exchange calls"
    )


# =============================================================================
# EXCHANGE CONFIGURATION
# =============================================================================

class ExchangeConfig(BaseModel):
    """Configuration of one exchange"""

    enabled: bool = Field(default=True, description="Exchange enabled")
    name: str = Field(default="", description="Display name")

    timeout_ms: int = Field(
        default=10_000,
        ge=1000,
        le=120_000,
        description="Per-request timeout"
    )

    # CCXT configuration
    ccxt_config: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra CCXT constructor options"
    )


class ExchangesConfig(BaseModel):
    """Configuration of all exchanges"""

    binance: ExchangeConfig = Field(
        default_factory=lambda: ExchangeConfig(name="Binance USDM Futures")
    )

    okx: ExchangeConfig = Field(
        default_factory=lambda: ExchangeConfig(name="OKX Swaps")
    )

    bybit: ExchangeConfig = Field(
        default_factory=lambda: ExchangeConfig(name="Bybit Linear")
    )


# =============================================================================
# LOGGING
# =============================================================================

class LoggingConfig(BaseModel):
    """Log output configuration"""

    model_config = ConfigDict(use_enum_values=True)

    level: LogLevel = Field(default=LogLevel.INFO)
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file: Optional[str] = Field(default=None, description="Optional log file path")
    max_size_mb: int = Field(default=100, ge=1, le=10_000)
    backup_count: int = Field(default=10, ge=0, le=100)

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


# =============================================================================
# MAIN CONFIGURATION
# =============================================================================

# Flat setting name -> section, for runtime updates
SETTING_SECTIONS = {
    'poll_interval_ms': 'bot',
    'persist_funding_rates': 'bot',
    'min_profit_spread_percent': 'detection',
    'max_price_spread_percent': 'detection',
    'cache_ttl_ms': 'fetcher',
    'exchange_request_delay_ms': 'fetcher',
}


class MonitorConfig(BaseModel):
    """Complete monitor configuration"""

    bot: BotConfig = Field(default_factory=BotConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    exchanges: ExchangesConfig = Field(default_factory=ExchangesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode='after')
    def validate_config_consistency(self):
        """At least two exchanges are needed to compare anything"""
        if len(self.get_enabled_exchanges()) < 2:
            raise ValueError("At least two exchanges must be enabled")
        return self

    # Shortcuts for the settings read by the core
    @property
    def poll_interval_ms(self) -> int:
        return self.bot.poll_interval_ms

    @property
    def min_profit_spread_percent(self) -> float:
        return self.detection.min_profit_spread_percent

    @property
    def max_price_spread_percent(self) -> float:
        return self.detection.max_price_spread_percent

    @property
    def cache_ttl_ms(self) -> int:
        return self.fetcher.cache_ttl_ms

    @property
    def exchange_request_delay_ms(self) -> int:
        return self.fetcher.exchange_request_delay_ms

    def get_exchange_config(self, exchange_name: str) -> Optional[ExchangeConfig]:
        """Configuration of one exchange"""
        return getattr(self.exchanges, exchange_name.lower(), None)

    def is_exchange_enabled(self, exchange_name: str) -> bool:
        """Check whether an exchange is enabled"""
        config = self.get_exchange_config(exchange_name)
        return config.enabled if config else False

    def get_enabled_exchanges(self) -> List[str]:
        """Enabled exchanges in fetch order"""
        return [name for name in EXCHANGE_ORDER if self.is_exchange_enabled(name)]

    def updated(self, **changes: Any) -> "MonitorConfig":
        """
        Return a validated copy with some settings replaced

        Args:
            **changes: flat setting names (see SETTING_SECTIONS)

        Raises:
            KeyError: unknown setting name
            pydantic.ValidationError: invalid value
        """
        data = self.model_dump()
        for key, value in changes.items():
            section = SETTING_SECTIONS.get(key)
            if section is None:
                raise KeyError(f"Unknown setting: {key}")
            data[section][key] = value
        return MonitorConfig(**data)

    def summary(self) -> Dict[str, Any]:
        """Flat view of the settings read by the core"""
        return {key: getattr(getattr(self, section), key) for key, section in SETTING_SECTIONS.items()}


# =============================================================================
# CONFIGURATION LOADER
# =============================================================================

def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else None


def load_config_from_env() -> Dict[str, Any]:
    """Load configuration overrides from environment variables"""
    config: Dict[str, Any] = {}

    bot_vars = {
        'CHECK_INTERVAL_MS': ('poll_interval_ms', _env_int),
    }
    detection_vars = {
        'MIN_PROFIT_THRESHOLD': ('min_profit_spread_percent', _env_float),
        'MAX_PRICE_SPREAD': ('max_price_spread_percent', _env_float),
    }
    fetcher_vars = {
        'FUNDING_RATES_CACHE_TTL_MS': ('cache_ttl_ms', _env_int),
        'EXCHANGE_REQUEST_DELAY_MS': ('exchange_request_delay_ms', _env_int),
    }

    for section, variables in (('bot', bot_vars), ('detection', detection_vars), ('fetcher', fetcher_vars)):
        for env_var, (config_key, parse) in variables.items():
            value = parse(env_var)
            if value is not None:
                config.setdefault(section, {})[config_key] = value

    if os.getenv('LOG_LEVEL'):
        config.setdefault('logging', {})['level'] = os.getenv('LOG_LEVEL').upper()

    if os.getenv('LOG_FILE'):
        config.setdefault('logging', {})['file'] = os.getenv('LOG_FILE')

    # Exchanges
    exchanges_config: Dict[str, Dict[str, Any]] = {}

    timeout_ms = _env_int('EXCHANGE_TIMEOUT_MS')
    if timeout_ms is not None:
        for name in EXCHANGE_ORDER:
            exchanges_config.setdefault(name, {})['timeout_ms'] = timeout_ms

    if os.getenv('ENABLED_EXCHANGES'):
        enabled = {name.strip().lower() for name in os.getenv('ENABLED_EXCHANGES').split(',') if name.strip()}
        for name in EXCHANGE_ORDER:
            exchanges_config.setdefault(name, {})['enabled'] = name in enabled

    if exchanges_config:
        config['exchanges'] = exchanges_config

    return config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base (returns base)"""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def create_config(config_file: Optional[str] = None,
                  env_override: bool = True) -> MonitorConfig:
    """
    Build a complete configuration

    Args:
        config_file: Path to a YAML configuration file
        env_override: If True, environment variables override the file
    """
    import yaml

    # Start with defaults
    config_dict: Dict[str, Any] = MonitorConfig().model_dump()

    # Load from file if provided
    if config_file and os.path.exists(config_file):
        with open(config_file, 'r') as f:
            file_config = yaml.safe_load(f)
            if file_config:
                _deep_merge(config_dict, file_config)

    # Override with environment variables
    if env_override:
        _deep_merge(config_dict, load_config_from_env())

    # Create and validate config
    return MonitorConfig(**config_dict)
