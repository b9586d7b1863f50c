"""Configuration management for the blocked-IP ledger job."""
import codecs
import logging
import os
import yaml
from typing import Optional
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)

DEFAULT_FILE_PREFIX = "fwddmp.log.tmp"
DEFAULT_LEDGER_PATH = "events.csv"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SourceConfig:
    """Firewall log source configuration."""
    file_prefix: str = DEFAULT_FILE_PREFIX
    encoding: str = "utf-8"


@dataclass
class LedgerConfig:
    """Output ledger configuration."""
    path: str = DEFAULT_LEDGER_PATH


@dataclass
class LoggingConfig:
    """Console logging configuration."""
    level: str = "INFO"


@dataclass
class Config:
    """Main configuration class."""
    source: SourceConfig = field(default_factory=SourceConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    log: LoggingConfig = field(default_factory=LoggingConfig)


def _section(config_data: dict, name: str) -> dict:
    """Return a top-level config section, empty when absent."""
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section {name!r} must be a mapping")
    return section


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file or environment variables.

    Args:
        config_path: Path to YAML config file. If None, looks for config.yaml in current directory.

    Returns:
        Config object with loaded settings.

    Raises:
        ValueError: If the file or a section is not a mapping, a required setting
            is empty, or the log level or encoding is unknown.
    """
    if config_path is None:
        config_path = "config.yaml"

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")

    if not isinstance(config_data, dict):
        raise ValueError(f"Config file {config_path} must be a mapping")

    source_cfg = _section(config_data, 'source')
    ledger_cfg = _section(config_data, 'ledger')
    logging_cfg = _section(config_data, 'logging')

    # Override with environment variables if present
    source_config = SourceConfig(
        file_prefix=os.getenv('LOG_FILE_PREFIX', source_cfg.get('file_prefix', DEFAULT_FILE_PREFIX)),
        encoding=os.getenv('LOG_FILE_ENCODING', source_cfg.get('encoding', 'utf-8')),
    )

    ledger_config = LedgerConfig(
        path=os.getenv('LEDGER_PATH', ledger_cfg.get('path', DEFAULT_LEDGER_PATH)),
    )

    logging_config = LoggingConfig(
        level=str(os.getenv('LOG_LEVEL', logging_cfg.get('level', 'INFO'))).upper(),
    )

    # Validate required fields
    if not source_config.file_prefix:
        raise ValueError("LOG_FILE_PREFIX or source.file_prefix must be set")
    if not ledger_config.path:
        raise ValueError("LEDGER_PATH or ledger.path must be set")
    if logging_config.level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level {logging_config.level!r}")
    try:
        codecs.lookup(source_config.encoding)
    except LookupError:
        raise ValueError(f"Unknown log file encoding {source_config.encoding!r}")

    return Config(source=source_config, ledger=ledger_config, log=logging_config)
