# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Configuration loader for the vital sign extractor.

Loads configuration from a YAML (or JSON) file with environment variable
substitution. Every section has defaults, so a partial file is fine.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Default config file locations (in order of priority)
CONFIG_PATHS = [
    "config.local.yaml",  # Local overrides (not in git)
    "config.yaml",        # Default config
    "config.json",        # Legacy JSON config
]

SOURCE_TYPES = ("camera", "file", "stream")


@dataclass
class AppConfig:
    """Application settings."""
    name: str = "VitalSignExtractor"
    version: str = "1.0.0"
    debug_mode: bool = False


@dataclass
class VideoConfig:
    """Video source and sampling settings."""
    # camera | file | stream
    source_type: str = "file"
    source_path: str = ""
    camera_index: int = 0
    frame_width: int = 640
    frame_height: int = 480
    # Run OCR + classification on every Nth frame
    processing_interval: int = 300
    reconnect_attempts: int = 5
    reconnect_delay_ms: int = 2000

    @property
    def descriptor(self):
        """What to hand to the video source: camera index or path/URL."""
        if self.source_type == "camera":
            return self.camera_index
        return self.source_path


@dataclass
class OCRConfig:
    """Tesseract settings."""
    language: str = "eng"
    # Tokens below this confidence (0-100) are discarded
    confidence_threshold: int = 50
    tesseract_config: str = ""
    page_segmentation_mode: int = 3


@dataclass
class VitalSignsConfig:
    """Vital sign extraction settings.

    Attributes:
        default_spo2: SpO2 substituted before any valid reading was seen
        labels: Label slots looked up on the display
        spo2_history_size: Number of accepted SpO2 readings kept
    """
    default_spo2: str = "81"
    labels: List[str] = field(default_factory=lambda: ["HR", "SpO2", "ABP"])
    spo2_history_size: int = 10
    hr_min: int = 30
    hr_max: int = 200
    spo2_min: int = 70
    spo2_max: int = 100
    abp_systolic_min: int = 70
    abp_systolic_max: int = 200
    abp_diastolic_min: int = 40
    abp_diastolic_max: int = 130


@dataclass
class MLModelConfig:
    """ECG classifier settings."""
    enabled: bool = True
    model_path: str = ""
    # Overridden by the model's own metadata once loaded
    input_width: int = 96
    input_height: int = 96
    confidence_threshold: float = 0.7


@dataclass
class DatabaseConfig:
    """Database sink settings."""
    enabled: bool = False
    path: str = "data/vital_signs.db"
    retry_attempts: int = 3
    retry_delay_ms: int = 1000
    retention_days: int = 30


@dataclass
class OutputConfig:
    """CSV and console output settings."""
    csv_enabled: bool = True
    csv_file: str = "live_vital_signs_output.csv"
    console_output: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    console_enabled: bool = True
    file: str = "logs/vitalsign.log"
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class MonitoringConfig:
    """Periodic health check settings."""
    health_check_interval_sec: int = 60


@dataclass
class Config:
    """Main configuration container.

    This is the root configuration object containing all settings.
    """
    mock_mode: bool = False
    app: AppConfig = field(default_factory=AppConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    vital_signs: VitalSignsConfig = field(default_factory=VitalSignsConfig)
    ml_model: MLModelConfig = field(default_factory=MLModelConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # Internal: base path for resolving relative paths
    _base_path: Path = field(default_factory=Path.cwd)

    def resolve_path(self, path: str) -> Path:
        """Resolve a path relative to the config file location."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self._base_path / p


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR} patterns with environment variables.

    Args:
        value: Value to process (can be str, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace_env(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name, "")
            if not env_value:
                logger.warning(f"Environment variable {var_name} not set")
            return env_value

        return re.sub(pattern, replace_env, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]

    return value


def _dict_to_dataclass(cls, data: Optional[Dict[str, Any]]):
    """Convert a dictionary to a dataclass, handling nested structures.

    Args:
        cls: The dataclass type to create
        data: Dictionary of values

    Returns:
        Instance of cls populated with data
    """
    if data is None:
        return cls()

    field_types = {f.name: f.type for f in cls.__dataclass_fields__.values()}

    kwargs = {}
    for field_name, field_type in field_types.items():
        if field_name.startswith('_'):
            continue

        if field_name not in data:
            continue

        value = data[field_name]

        # Handle nested dataclasses
        if hasattr(field_type, '__dataclass_fields__'):
            kwargs[field_name] = _dict_to_dataclass(field_type, value)
        else:
            kwargs[field_name] = value

    return cls(**kwargs)


def load_config(config_path: Optional[str] = None, base_path: Optional[Path] = None) -> Config:
    """Load configuration from a YAML or JSON file.

    Args:
        config_path: Path to config file. If None, searches default locations.
        base_path: Base path for resolving relative paths. Defaults to cwd.

    Returns:
        Config object with all settings loaded

    Raises:
        FileNotFoundError: If no config file is found
        yaml.YAMLError: If config file is invalid
        ValueError: If required settings are missing
    """
    # Load .env file if present
    env_path = Path(base_path or Path.cwd()) / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded environment from {env_path}")

    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        base = base_path or Path.cwd()
        config_file = None
        for path in CONFIG_PATHS:
            candidate = base / path
            if candidate.exists():
                config_file = candidate
                break

        if config_file is None:
            raise FileNotFoundError(
                f"No config file found. Searched: {', '.join(CONFIG_PATHS)}"
            )

    logger.info(f"Loading config from {config_file}")

    # JSON is a subset of YAML, so one loader handles both
    with open(config_file, 'r') as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raw_config = {}

    config_data = _substitute_env_vars(raw_config)

    if os.environ.get("MOCK_HARDWARE", "").lower() in ("true", "1", "yes"):
        logger.info("MOCK_HARDWARE environment variable set - enabling mock mode")
        config_data["mock_mode"] = True

    config = _dict_to_dataclass(Config, config_data)
    config._base_path = config_file.parent

    _validate_config(config)

    return config


def _validate_config(config: Config) -> None:
    """Validate configuration settings.

    Out-of-range values are clamped with a warning. Only settings that make
    startup impossible raise.

    Args:
        config: Config object to validate

    Raises:
        ValueError: If required settings are missing or invalid
    """
    errors = []

    video = config.video
    if video.source_type not in SOURCE_TYPES:
        errors.append(
            f"video.source_type must be one of {', '.join(SOURCE_TYPES)} (got {video.source_type!r})"
        )
    elif video.source_type != "camera" and not video.source_path and not config.mock_mode:
        errors.append(f"video.source_path is required for source_type {video.source_type!r}")

    if video.processing_interval < 1:
        logger.warning("video.processing_interval must be at least 1, using 1")
        video.processing_interval = 1

    if video.reconnect_attempts < 1:
        logger.warning("video.reconnect_attempts must be at least 1, using 1")
        video.reconnect_attempts = 1

    if video.reconnect_delay_ms < 0:
        logger.warning("video.reconnect_delay_ms must be positive, using 0")
        video.reconnect_delay_ms = 0

    if config.ocr.confidence_threshold < 0 or config.ocr.confidence_threshold > 100:
        logger.warning("ocr.confidence_threshold must be 0-100, clamping to valid range")
        config.ocr.confidence_threshold = max(0, min(100, config.ocr.confidence_threshold))

    if config.ml_model.confidence_threshold < 0 or config.ml_model.confidence_threshold > 1:
        logger.warning("ml_model.confidence_threshold must be 0-1, clamping to valid range")
        config.ml_model.confidence_threshold = max(0.0, min(1.0, config.ml_model.confidence_threshold))

    if config.database.retry_attempts < 1:
        logger.warning("database.retry_attempts must be at least 1, using 1")
        config.database.retry_attempts = 1

    if config.database.retry_delay_ms < 0:
        logger.warning("database.retry_delay_ms must be positive, using 0")
        config.database.retry_delay_ms = 0

    if not config.vital_signs.labels:
        errors.append("vital_signs.labels must not be empty")
    elif "ABP" not in config.vital_signs.labels:
        # ABP drives the record validation gate
        errors.append("vital_signs.labels must include ABP")

    if errors:
        raise ValueError("Configuration errors:\n  " + "\n  ".join(errors))


def get_default_config() -> Config:
    """Get a Config object with all default values.

    Useful for testing or when no config file exists.

    Returns:
        Config with default values
    """
    return Config()
