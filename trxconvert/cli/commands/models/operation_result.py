"""Operation result model.

Used where a failure is a value rather than an exception: option loading
returns one, and worker threads hand parsed runs back to the driver in one.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Type, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    """Operation result with success/failure status.

    Attributes:
        is_success: Whether operation succeeded
        value: Result value if successful
        error: Exception describing the failure
    """
    is_success: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> 'Result[T]':
        return cls(is_success=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> 'Result[T]':
        return cls(is_success=False, error=error)

    @classmethod
    def capture(cls, func: Callable[[], T], *errors: Type[Exception]) -> 'Result[T]':
        """Call ``func`` and turn the listed exceptions into a failed result.

        Exceptions not listed propagate.

        Args:
            func: Zero-argument callable producing the value
            errors: Exception types to capture

        Returns:
            Success with the return value, or failure with the exception
        """
        try:
            return cls.success(func())
        except errors as e:
            return cls.failure(e)

    def map(self, func: Callable[[T], T]) -> 'Result[T]':
        """Apply ``func`` to the value of a successful result."""
        if not self.is_success:
            return self
        return Result.success(func(self.value))
