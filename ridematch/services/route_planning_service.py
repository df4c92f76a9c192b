"""
Route planning service.
Runs one scheduling pass: optimize assignments, schedule pickups, validate.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np

from ridematch.algorithms.genetic_algorithm import GeneticAlgorithm
from ridematch.core.exceptions import InfeasibleScheduleError, InvalidInputError
from ridematch.evaluation.validator import SolutionValidator, ValidationReport
from ridematch.models.ride_model import Destination, Passenger, RideSharingProblem, Vehicle
from ridematch.models.route_details import RouteDetails
from ridematch.models.solution import Solution
from ridematch.scheduling.pickup_scheduler import PickupTimeScheduler, TargetTime, parse_target_time

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """Everything a scheduling pass produces."""
    solution: Solution
    schedules: Dict[int, RouteDetails]
    report: ValidationReport
    target_time: datetime
    statistics: Dict = field(default_factory=dict)
    evolution_data: List[Dict] = field(default_factory=list)
    convergence_data: Dict = field(default_factory=dict)

    @property
    def warnings(self) -> List[str]:
        """Schedule warnings from every route."""
        return [w for details in self.schedules.values() for w in details.warnings]

    def summary(self) -> Dict:
        return {
            'target_time': self.target_time.strftime('%Y-%m-%d %H:%M'),
            'vehicles_used': self.solution.get_used_vehicle_count(),
            'passengers_assigned': self.solution.get_assigned_passenger_count(),
            'total_distance_km': round(self.solution.get_total_distance(), 3),
            'total_time_min': round(self.solution.get_total_time(), 2),
            'fitness': round(self.solution.fitness, 3),
            'is_valid': self.report.is_valid,
            'validation': self.report.format(),
            'schedule_warnings': len(self.warnings),
            'generations': self.statistics.get('generations'),
            'termination_reason': self.statistics.get('termination_reason'),
            'execution_time': self.statistics.get('execution_time')
        }


class RoutePlanningService:
    """Plans daily routes and pickup times for a fleet and its passengers."""

    def __init__(self, ga_config: Optional[Dict] = None,
                 fitness_config: Optional[Dict] = None,
                 average_speed_kmh: Optional[float] = None,
                 strict_schedule: bool = False):
        """
        Initialize planning service.

        Args:
            ga_config: GA configuration overrides
            fitness_config: Fitness weight overrides
            average_speed_kmh: Speed used for travel times
            strict_schedule: Raise InfeasibleScheduleError instead of warning
                when a pickup would be in the past
        """
        self.ga_config = ga_config or {}
        self.fitness_config = fitness_config or {}
        self.average_speed_kmh = average_speed_kmh
        self.strict_schedule = strict_schedule
        self.last_population: List[Solution] = []

    def plan(self, vehicles: List[Vehicle], passengers: List[Passenger],
             destination: Destination, target_time: Optional[TargetTime] = None,
             now: Optional[datetime] = None,
             initial_population: Optional[List[Solution]] = None,
             seed: Optional[int] = None,
             cancel_event: Optional[threading.Event] = None,
             distance_matrix: Optional[np.ndarray] = None) -> PlanResult:
        """
        Optimize assignments, compute pickup times and validate the result.

        Caller records are not modified; use apply_assignments for that.

        Args:
            vehicles: Fleet (only available vehicles are used)
            passengers: Passengers (only available ones are routed)
            destination: Shared destination
            target_time: Arrival deadline (defaults to destination.target_time,
                then the configured default)
            now: Current time; enables the past-pickup check
            initial_population: Solutions from an earlier run to seed the GA
            seed: Random seed
            cancel_event: Event that stops the GA between generations
            distance_matrix: Optional node-indexed matrix replacing haversine

        Returns:
            PlanResult

        Raises:
            InvalidInputError: No available vehicles or passengers, or malformed input
            InfeasibleScheduleError: Only with strict_schedule, when a pickup is in the past
        """
        if not any(p.is_available for p in passengers or []):
            raise InvalidInputError("No available passengers found", field='passengers')

        target = parse_target_time(target_time or destination.target_time,
                                   now.date() if now else None)

        problem = RideSharingProblem(vehicles, passengers, destination,
                                     distance_matrix=distance_matrix,
                                     average_speed_kmh=self.average_speed_kmh)
        logger.info(f"Planning routes for {len(problem.passengers)} passengers with "
                    f"{len(problem.vehicles)} vehicles, arrival by {target:%H:%M}")

        ga = GeneticAlgorithm(problem, self.ga_config, self.fitness_config,
                              seed=seed, cancel_event=cancel_event)
        solution, evolution_data = ga.evolve(initial_population=initial_population)
        self.last_population = ga.get_latest_population()

        scheduler = PickupTimeScheduler(destination, problem.average_speed_kmh, problem=problem)
        schedules = scheduler.schedule_solution(solution, target, now)

        if self.strict_schedule:
            self._raise_if_infeasible(schedules, now)

        report = SolutionValidator(passengers).validate(solution)

        logger.info(f"Routes generated: {solution.get_used_vehicle_count()}, "
                    f"Passengers assigned: {solution.get_assigned_passenger_count()}")
        if report.is_complete:
            logger.info(report.format())
        else:
            for line in report.format().splitlines():
                logger.warning(line)

        return PlanResult(
            solution=solution,
            schedules=schedules,
            report=report,
            target_time=target,
            statistics=ga.get_statistics(),
            evolution_data=evolution_data,
            convergence_data=ga.get_convergence_data()
        )

    @staticmethod
    def _raise_if_infeasible(schedules: Dict[int, RouteDetails],
                             now: Optional[datetime]):
        for vehicle_id, details in schedules.items():
            for stop in details.stop_details:
                if stop.is_infeasible:
                    raise InfeasibleScheduleError(vehicle_id, stop.passenger_id,
                                                  stop.arrival_time, now)


def apply_assignments(result: PlanResult, passengers: List[Passenger]) -> int:
    """
    Write vehicle assignments and pickup times onto the caller's passengers.

    Returns:
        Number of passengers that received an assignment
    """
    return result.solution.apply_to(passengers)
