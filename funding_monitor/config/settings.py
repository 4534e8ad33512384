"""
Configuration file management.
Loads, validates and writes the YAML configuration of the monitor.
"""

import os
import yaml
import logging
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from funding_monitor.models.config import MonitorConfig, create_config


DEFAULT_LOCATIONS = [
    "config.yaml",
    "conf/config.yaml",
    os.path.expanduser("~/.funding-monitor/config.yaml"),
]


def find_config_file(config_file: Optional[str] = None) -> Optional[str]:
    """Return the first existing configuration file, explicit path first"""
    for location in [config_file] + DEFAULT_LOCATIONS:
        if location and os.path.exists(location):
            return location
    return None


def load_config(config_file: Optional[str] = None, load_env_file: bool = True) -> MonitorConfig:
    """
    Load configuration from YAML file and environment.

    Args:
        config_file: Path to config file. If None, uses default locations.
        load_env_file: Read a .env file into the environment first.

    Returns:
        Validated MonitorConfig

    Raises:
        pydantic.ValidationError: invalid configuration values
    """
    logger = logging.getLogger("config")

    if load_env_file:
        load_dotenv()

    config_path = find_config_file(config_file)
    if config_path:
        logger.info(f"Loading configuration from {config_path}")
    else:
        logger.info("No config file found, using defaults and environment")

    return create_config(config_path)


def save_config(config: MonitorConfig, config_file: str = "config.yaml"):
    """Save configuration to YAML file"""
    os.makedirs(os.path.dirname(config_file) or ".", exist_ok=True)

    with open(config_file, 'w') as f:
        yaml.safe_dump(config.model_dump(mode='json'), f, default_flow_style=False, indent=2, sort_keys=False)

    logging.getLogger("config").info(f"Configuration saved to {config_file}")


SAMPLE_CONFIG = """# Funding Monitor Configuration
# Copy this file to config.yaml and adjust. Environment variables
# (CHECK_INTERVAL_MS, MIN_PROFIT_THRESHOLD, ...) override these values.

bot:
  poll_interval_ms: 5000          # Interval between detection cycles
  persist_funding_rates: true     # Store rates of symbols with opportunities

detection:
  min_profit_spread_percent: 0.3  # Minimum funding spread (%) to report
  max_price_spread_percent: 0.5   # Maximum mark price divergence (%) between legs

fetcher:
  cache_ttl_ms: 300000            # Reuse a three-exchange fetch for 5 minutes
  exchange_request_delay_ms: 200  # Pause between exchange calls

# Public endpoints only, no credentials needed
exchanges:
  binance:
    enabled: true
    name: "Binance USDM Futures"
    timeout_ms: 10000
  okx:
    enabled: true
    name: "OKX Swaps"
    timeout_ms: 10000
  bybit:
    enabled: true
    name: "Bybit Linear"
    timeout_ms: 10000

logging:
  level: "INFO"
  file: null                      # e.g. "logs/monitor.log"
  max_size_mb: 100
  backup_count: 10
"""


def create_sample_config(filename: str = "config.sample.yaml"):
    """Create a sample configuration file"""
    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)

    with open(filename, 'w') as f:
        f.write(SAMPLE_CONFIG)

    logging.getLogger("config").info(f"Sample configuration created: {filename}")


# ========== Configuration Validation ==========

def validate_config_file(config_file: str) -> Tuple[bool, List[str], Optional[MonitorConfig]]:
    """
    Validate a configuration file without environment overrides.

    Returns:
        Tuple of (is_valid, list_of_errors, config or None)
    """
    try:
        with open(config_file, 'r') as f:
            raw: Dict[str, Any] = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        return False, [f"Cannot read {config_file}: {e}"], None

    if not isinstance(raw, dict):
        return False, ["Top level of the configuration must be a mapping"], None

    try:
        config = create_config(config_file, env_override=False)
    except ValidationError as e:
        errors = [f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                  for error in e.errors()]
        return False, errors, None

    return True, [], config
