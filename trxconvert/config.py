"""
Environment configuration for trxconvert.
"""
import os
from pathlib import Path
from typing import Dict, Optional, Any
from dotenv import load_dotenv

from .logger import get_logger

logger = get_logger("config")

ENV_PREFIX = "TRXCONVERT_"

# Option name -> type used to coerce the environment value
ENV_OPTIONS: Dict[str, type] = {
    'merge': bool,
    'continue_on_error': bool,
    'max_detail_length': int,
    'jobs': int,
    'strict': bool,
    'merged_name': str,
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off', '')


class Config:
    """Reads conversion defaults from the environment.

    A ``.env`` file in the working directory (or the given file) is loaded
    first; variables already set in the process environment win.
    """

    def __init__(self, env_file: Optional[str] = None):
        self.env_file = env_file or '.env'
        self._load_env()

    def _load_env(self):
        """Load environment variables from the .env file, if present."""
        env_path = Path(self.env_file)
        if env_path.exists():
            logger.debug(f"Loading environment from {env_path}")
            load_dotenv(env_path, override=False)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a raw configuration value.

        Args:
            key: Option name without prefix, e.g. 'max_detail_length'
            default: Default value if the variable is not set

        Returns:
            The environment value or default
        """
        return os.environ.get(f"{ENV_PREFIX}{key.upper()}", default)

    def get_options(self) -> Dict[str, Any]:
        """
        Collect conversion options set in the environment.

        Values are coerced to the option type; values that cannot be coerced
        are passed through as strings so validation can report them.

        Returns:
            Dictionary of option name to value
        """
        options = {}
        for key, option_type in ENV_OPTIONS.items():
            raw = self.get(key)
            if raw is None:
                continue
            options[key] = _coerce(raw, option_type)
        return options


def _coerce(raw: str, option_type: type) -> Any:
    value = raw.strip()
    if option_type is bool:
        if value.lower() in _TRUE_VALUES:
            return True
        if value.lower() in _FALSE_VALUES:
            return False
        return raw
    if option_type is int:
        try:
            return int(value)
        except ValueError:
            return raw
    return value


def get_config(env_file: Optional[str] = None) -> Config:
    """
    Create a Config instance.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config: The environment configuration
    """
    return Config(env_file)
