"""
Solution validator for ride-sharing problems.
Checks capacity, duplicate assignment and coverage of available passengers.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from ridematch.core.exceptions import ConstraintViolationError
from ridematch.models.ride_model import Passenger
from ridematch.models.solution import Solution


@dataclass
class ValidationReport:
    """Diagnostic result of validating one solution."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    unassigned_passenger_ids: List[int] = field(default_factory=list)
    over_capacity_vehicle_ids: List[int] = field(default_factory=list)
    duplicate_passenger_ids: List[int] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """No errors; unassigned passengers are only a warning."""
        return not self.errors

    @property
    def is_complete(self) -> bool:
        return self.is_valid and not self.warnings

    def format(self) -> str:
        """Human readable summary, one issue per line."""
        issues = self.warnings + self.errors
        if not issues:
            return "Solution is valid."
        return "\n".join(issues)

    def raise_for_errors(self):
        """Raise ConstraintViolationError if the report holds any error."""
        if self.errors:
            raise ConstraintViolationError(list(self.errors))

    def to_dict(self) -> Dict:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'unassigned_passenger_ids': list(self.unassigned_passenger_ids),
            'over_capacity_vehicle_ids': list(self.over_capacity_vehicle_ids),
            'duplicate_passenger_ids': list(self.duplicate_passenger_ids)
        }


class SolutionValidator:
    """Validates ride-sharing solutions against the passenger roster."""

    def __init__(self, passengers: List[Passenger]):
        """
        Initialize solution validator.

        Args:
            passengers: All passengers; only available ones must be assigned
        """
        self.passengers = passengers

    def validate(self, solution: Solution) -> ValidationReport:
        """
        Validate a solution.

        Args:
            solution: Solution to validate

        Returns:
            ValidationReport with errors (capacity, duplicates) and warnings (unassigned)
        """
        report = ValidationReport()

        assignments: Dict[int, List[int]] = {}
        for vehicle in solution.vehicles:
            for passenger in vehicle.passengers:
                assignments.setdefault(passenger.id, []).append(vehicle.id)

        unassigned = [p.id for p in self.passengers
                      if p.is_available and p.id not in assignments]
        if unassigned:
            report.unassigned_passenger_ids = unassigned
            report.warnings.append(
                f"Warning: {len(unassigned)} available passengers are not assigned."
            )

        for vehicle in solution.vehicles:
            if len(vehicle.passengers) > vehicle.capacity:
                report.over_capacity_vehicle_ids.append(vehicle.id)
                report.errors.append(
                    f"Error: Vehicle {vehicle.id} has {len(vehicle.passengers)} passengers "
                    f"but capacity is {vehicle.capacity}."
                )

        for passenger_id, vehicle_ids in assignments.items():
            if len(vehicle_ids) > 1:
                report.duplicate_passenger_ids.append(passenger_id)
                report.errors.append(
                    f"Error: Passenger {passenger_id} is assigned to multiple vehicles: "
                    f"{', '.join(str(v) for v in vehicle_ids)}."
                )

        return report

    def validate_solution(self, solution: Solution) -> str:
        """Validate and return the formatted report text."""
        return self.validate(solution).format()
