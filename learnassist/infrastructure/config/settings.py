"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.learnassist/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
import yaml

from learnassist.domain.models.tasks import TaskKind

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".learnassist"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_API_BASE_URL = "https://api.example.com"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_CACHE_TTL_SECONDS = 5 * 60
DEFAULT_CACHE_MAX_ITEMS = 100
DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF_SECONDS = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_SUPPORTED_IMAGE_TYPES = ["jpg", "jpeg", "png", "heic"]
DEFAULT_TOKEN_STORAGE_KEY = "auth_token"
DEFAULT_MOCK_OCR_DELAY_SECONDS = 2.0
DEFAULT_MOCK_ANALYSIS_DELAY_SECONDS = 3.0

# (max_attempts, interval_seconds) per task family
DEFAULT_POLL_SETTINGS: Dict[TaskKind, Tuple[int, float]] = {
    TaskKind.OCR: (10, 2.0),
    TaskKind.ANALYSIS: (15, 2.0),
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to the getters

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")

def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ('api': {'base_url'} -> 'api.base_url')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat

def _coerce(value: str) -> Any:
    """Converts common string forms from the environment."""
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key, e.g. 'API_URL' or 'cache.ttl_seconds'
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    try:
        cwd = Path.cwd()
        for path in [cwd] + list(cwd.parents):
            env_path = path / ENV_FILE_NAME
            if env_path.is_file():
                return env_path
    except OSError as e:
        logger.warning(f"Error searching for .env file: {e}")
    return None

def _as_bool(flag: Any, default: bool) -> bool:
    if isinstance(flag, str):
        if flag.lower() in ('true', '1', 'yes'):
            return True
        if flag.lower() in ('false', '0', 'no'):
            return False
        logger.warning(f"Unexpected string value for boolean flag: '{flag}'. Defaulting to {default}.")
        return default
    if flag is None:
        return default
    return bool(flag)

# --- Convenience Functions ---

def get_api_base_url() -> str:
    """Base URL of the backend. Checks ENV API_URL first, then yaml api.base_url."""
    url = get_config('API_URL') or get_config('api.base_url', DEFAULT_API_BASE_URL)
    return str(url).rstrip('/')

def get_request_timeout() -> float:
    return float(get_config('api.timeout_seconds', DEFAULT_REQUEST_TIMEOUT_SECONDS))

def use_mock_data() -> bool:
    """Whether to serve fixtures instead of calling the backend."""
    return _as_bool(get_config('USE_MOCK_DATA', get_config('api.use_mock_data', False)), False)

def get_cache_ttl_seconds() -> float:
    return float(get_config('cache.ttl_seconds', DEFAULT_CACHE_TTL_SECONDS))

def get_cache_max_items() -> int:
    return int(get_config('cache.max_items', DEFAULT_CACHE_MAX_ITEMS))

def get_retry_settings() -> Tuple[int, float, float]:
    """Returns (max_retries, initial_backoff_s, backoff_factor)."""
    return (
        int(get_config('retry.max_retries', DEFAULT_MAX_RETRIES)),
        float(get_config('retry.initial_backoff_seconds', DEFAULT_INITIAL_BACKOFF_SECONDS)),
        float(get_config('retry.backoff_factor', DEFAULT_BACKOFF_FACTOR)),
    )

def get_poll_settings(kind: TaskKind) -> Tuple[int, float]:
    """Returns (max_attempts, interval_s) for the given task family."""
    default_attempts, default_interval = DEFAULT_POLL_SETTINGS[kind]
    return (
        int(get_config(f'polling.{kind.value}.max_attempts', default_attempts)),
        float(get_config(f'polling.{kind.value}.interval_seconds', default_interval)),
    )

def get_max_upload_bytes() -> int:
    return int(get_config('image.max_file_size', DEFAULT_MAX_UPLOAD_BYTES))

def get_supported_image_types() -> List[str]:
    types = get_config('image.supported_types', DEFAULT_SUPPORTED_IMAGE_TYPES)
    if isinstance(types, str):
        types = [t.strip() for t in types.split(',') if t.strip()]
    return [str(t).lower() for t in types]

def get_storage_dir() -> Path:
    return Path(get_config('storage.dir', DEFAULT_CONFIG_DIR / "storage")).expanduser()

def get_token_storage_key() -> str:
    return str(get_config('auth.token_storage_key', DEFAULT_TOKEN_STORAGE_KEY))

def get_mock_delays() -> Tuple[float, float]:
    """Returns (ocr_delay_s, analysis_delay_s) used by the fixture sources."""
    return (
        float(get_config('mock.ocr_delay_seconds', DEFAULT_MOCK_OCR_DELAY_SECONDS)),
        float(get_config('mock.analysis_delay_seconds', DEFAULT_MOCK_ANALYSIS_DELAY_SECONDS)),
    )

def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the running process."""
    logger.debug(f"Setting config: {key} = {value}")
    _config[key] = value

def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")

def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")

# Load configuration when the module is imported
load_configuration()
