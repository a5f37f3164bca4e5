"""Configuration validation for the convert command.

This module provides validation functionality for conversion options,
ensuring that all required fields are present and valid.
"""

from pathlib import Path
from typing import Dict, Any, List, Optional, Callable, Tuple, Union
from dataclasses import dataclass

from .errors import ConfigurationError
from .models import Result
from .types import ConfigErrorKind


def _positive(value: Any) -> None:
    if isinstance(value, bool) or value < 1:
        raise ValueError(f"must be a positive integer, got {value!r}")


def _not_empty(value: Any) -> None:
    if not value:
        raise ValueError("at least one input path or glob is required")


def _plain_file_name(value: str) -> None:
    if not value or Path(value).name != value:
        raise ValueError(f"must be a plain file name, got {value!r}")


@dataclass
class ValidationRule:
    """A validation rule for configuration fields.

    Attributes:
        field: The field name to validate
        required: Whether the field is required
        type: The expected type (or tuple of types) of the field
        validator: Optional custom validation function raising ValueError
    """
    field: str
    required: bool = True
    type: Optional[Union[type, Tuple[type, ...]]] = None
    validator: Optional[Callable[[Any], None]] = None


class ConfigurationValidator:
    """Validates conversion option data.

    This class provides methods to validate option dictionaries assembled from
    the configuration file, the environment and the command line.
    """

    def __init__(self):
        """Initialize the validator with default rules."""
        self.rules = [
            ValidationRule('inputs', type=(list, tuple), validator=_not_empty),
            ValidationRule('output_dir', type=(str, Path)),
            ValidationRule('merge', required=False, type=bool),
            ValidationRule('continue_on_error', required=False, type=bool),
            ValidationRule('strict', required=False, type=bool),
            ValidationRule('max_detail_length', required=False, type=int, validator=_positive),
            ValidationRule('jobs', required=False, type=int, validator=_positive),
            ValidationRule('merged_name', required=False, type=str, validator=_plain_file_name),
            ValidationRule('summary_file', required=False, type=(str, Path)),
        ]

    @property
    def known_fields(self) -> List[str]:
        return [rule.field for rule in self.rules]

    def validate(self, config_data: Dict[str, Any]) -> Result[Dict[str, Any]]:
        """Validate option data.

        Args:
            config_data: The option data to validate

        Returns:
            Result containing the validated data or a ConfigurationError
        """
        if not isinstance(config_data, dict):
            return Result.failure(
                ConfigurationError(
                    ConfigErrorKind.INVALID_OPTION,
                    "Invalid configuration format: expected a mapping",
                    {"config": config_data}
                )
            )

        missing_fields = self._validate_required_fields(config_data)
        if missing_fields:
            return Result.failure(
                ConfigurationError(
                    ConfigErrorKind.INVALID_OPTION,
                    f"Missing required fields: {', '.join(missing_fields)}",
                    {"missing_fields": missing_fields}
                )
            )

        type_errors = self._validate_field_types(config_data)
        if type_errors:
            return Result.failure(
                ConfigurationError(
                    ConfigErrorKind.INVALID_OPTION,
                    f"Type validation errors: {', '.join(type_errors)}",
                    {"type_errors": type_errors}
                )
            )

        value_errors = self._validate_field_values(config_data)
        if value_errors:
            return Result.failure(
                ConfigurationError(
                    ConfigErrorKind.INVALID_OPTION,
                    f"Value validation errors: {', '.join(value_errors)}",
                    {"value_errors": value_errors}
                )
            )

        return Result.success(config_data)

    def _validate_required_fields(self, config_data: Dict[str, Any]) -> List[str]:
        """Return the required fields missing from ``config_data``."""
        return [
            rule.field for rule in self.rules
            if rule.required and rule.field not in config_data
        ]

    def _validate_field_types(self, config_data: Dict[str, Any]) -> List[str]:
        """Return type errors for fields present in ``config_data``."""
        type_errors = []
        for rule in self.rules:
            if rule.field not in config_data or rule.type is None:
                continue
            value = config_data[rule.field]
            # bool is an int subclass; reject it where a number is expected
            wrong_bool = rule.type is int and isinstance(value, bool)
            if wrong_bool or not isinstance(value, rule.type):
                type_errors.append(
                    f"Field '{rule.field}' must be of type {_type_name(rule.type)}, "
                    f"got {type(value).__name__}"
                )
        return type_errors

    def _validate_field_values(self, config_data: Dict[str, Any]) -> List[str]:
        """Return errors reported by the custom validators."""
        value_errors = []
        for rule in self.rules:
            if rule.field in config_data and rule.validator is not None:
                try:
                    rule.validator(config_data[rule.field])
                except ValueError as e:
                    value_errors.append(f"Field '{rule.field}': {str(e)}")
        return value_errors


def _type_name(expected: Union[type, Tuple[type, ...]]) -> str:
    if isinstance(expected, tuple):
        return ' or '.join(t.__name__ for t in expected)
    return expected.__name__
