"""
Custom exceptions for the RideMatch optimizer.
Provides specific exception classes for different error types.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional


class RideMatchException(Exception):
    """Base exception for the RideMatch optimizer."""

    def __init__(self, message: str = "", details: dict = None):
        """
        Initialize RideMatch exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidInputError(RideMatchException, ValueError):
    """Raised when vehicles, passengers or times cannot be used as given."""

    def __init__(self, reason: str = None, field: str = None, value: Any = None):
        """
        Initialize invalid input error.

        Args:
            reason: Why the input was rejected
            field: Name of the offending input
            value: Offending value
        """
        message = "Invalid input"
        details = {}

        if field:
            details['field'] = field
        if value is not None:
            details['value'] = value

        if reason:
            message += f": {reason}"

        super().__init__(message, details)


class InvalidConfigurationError(RideMatchException):
    """Raised when configuration parameters are invalid."""

    def __init__(self, parameter: str = None, value: Any = None,
                 expected: str = None):
        """
        Initialize invalid configuration error.

        Args:
            parameter: Parameter name
            value: Invalid value
            expected: Expected value or range
        """
        message = "Invalid configuration parameter"
        details = {}

        if parameter:
            details['parameter'] = parameter
        if value is not None:
            details['value'] = value
        if expected:
            details['expected'] = expected

        if parameter:
            message += f": {parameter} = {value}"
            if expected:
                message += f" (expected: {expected})"

        super().__init__(message, details)


class InfeasibleScheduleError(RideMatchException):
    """Raised when a computed pickup time is already in the past."""

    def __init__(self, vehicle_id: int = None, passenger_id: int = None,
                 pickup_time: Optional[datetime] = None, now: Optional[datetime] = None):
        message = "Pickup schedule is infeasible"
        details = {}

        if vehicle_id is not None:
            details['vehicle_id'] = vehicle_id
        if passenger_id is not None:
            details['passenger_id'] = passenger_id
        if pickup_time is not None:
            details['pickup_time'] = pickup_time.isoformat()
        if now is not None:
            details['now'] = now.isoformat()

        if pickup_time is not None and now is not None:
            message += (f": passenger {passenger_id} on vehicle {vehicle_id} would be picked up "
                        f"at {pickup_time:%H:%M}, before {now:%H:%M}")

        super().__init__(message, details)


class ConstraintViolationError(RideMatchException):
    """Raised on request when a solution breaks capacity or assignment rules."""

    def __init__(self, violations: List[str] = None):
        violations = violations or []
        message = "Solution violates constraints"
        if violations:
            message += f": {'; '.join(violations)}"
        details: Dict[str, Any] = {'violation_count': len(violations)}
        super().__init__(message, details)
        self.violations = violations
