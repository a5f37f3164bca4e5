"""Configuration management for the convert command.

This module provides a high-level interface for assembling conversion
options from a YAML configuration file, the environment and the command
line, then validating them into a ConversionOptions object.

Precedence, highest first: command line, environment, configuration file,
built-in defaults.
"""

from pathlib import Path
from typing import Dict, Any, Optional, Sequence

import yaml

from ...config import get_config
from ...logger import get_logger
from .errors import ConfigurationError
from .models import ConversionOptions, Result
from .config_validator import ConfigurationValidator
from .types import ConfigErrorKind, DEFAULT_CONFIG_FILE

logger = get_logger("config")


class ConfigurationManager:
    """Manages conversion option loading and validation."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            env_file: Optional .env file with TRXCONVERT_* variables
        """
        self.validator = ConfigurationValidator()
        self.env_file = env_file

    def load_configuration(
        self,
        inputs: Sequence[str],
        output_dir: str,
        cli_options: Optional[Dict[str, Any]] = None,
        config_path: Optional[Path] = None
    ) -> Result[ConversionOptions]:
        """Load and validate conversion options.

        Args:
            inputs: Input paths or glob patterns
            output_dir: Output directory
            cli_options: Options given on the command line; None values are
                treated as not given
            config_path: Explicit configuration file; when omitted,
                ``trxconvert.yaml`` in the working directory is used if present

        Returns:
            Result containing the validated options or a ConfigurationError
        """
        if config_path is None and Path(DEFAULT_CONFIG_FILE).is_file():
            config_path = Path(DEFAULT_CONFIG_FILE)

        data: Dict[str, Any] = {}
        if config_path is not None:
            file_result = self.load_file(config_path)
            if not file_result.is_success:
                return file_result
            data.update(file_result.value)

        data.update(get_config(self.env_file).get_options())
        data.update({
            key: value for key, value in (cli_options or {}).items()
            if value is not None
        })
        data['inputs'] = list(inputs)
        data['output_dir'] = output_dir

        validation = self.validator.validate(data)
        if not validation.is_success:
            return validation

        options = ConversionOptions.from_dict(validation.value, config_path=config_path)
        logger.debug(f"Conversion options: {options}")
        return Result.success(options)

    def load_file(self, config_path: Path) -> Result[Dict[str, Any]]:
        """Read option defaults from a YAML file.

        Unknown keys are ignored with a warning; ``inputs`` and
        ``output_dir`` can only be given on the command line.

        Args:
            config_path: Path to the configuration file

        Returns:
            Result containing the option dictionary or a ConfigurationError
        """
        try:
            with open(config_path, 'r') as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            return Result.failure(ConfigurationError(
                ConfigErrorKind.INVALID_OPTION,
                f"Invalid YAML in config file {config_path}: {str(e)}"
            ))
        except OSError as e:
            return Result.failure(ConfigurationError(
                ConfigErrorKind.INVALID_OPTION,
                f"Cannot read config file {config_path}: {str(e)}"
            ))

        if raw is None:
            return Result.success({})
        if not isinstance(raw, dict):
            return Result.failure(ConfigurationError(
                ConfigErrorKind.INVALID_OPTION,
                f"Config file {config_path} must contain a mapping"
            ))

        allowed = set(self.validator.known_fields) - {'inputs', 'output_dir'}
        options = {}
        for key, value in raw.items():
            if key in allowed:
                options[key] = value
            else:
                logger.warning(f"Ignoring unknown option '{key}' in {config_path}")
        return Result.success(options)
