"""
Fitness evaluation for ride-sharing solutions.
Route cost plus penalty terms; lower fitness is better.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from config import FITNESS_CONFIG
from ridematch.core.validators import ConfigValidator
from ridematch.models.ride_model import RideSharingProblem, Vehicle
from ridematch.models.solution import Solution

logger = logging.getLogger(__name__)


class FitnessEvaluator:
    """Evaluates fitness of ride-sharing solutions."""

    def __init__(self, problem: RideSharingProblem, config: Optional[Dict] = None):
        """
        Initialize fitness evaluator.

        Args:
            problem: Ride-sharing problem instance
            config: Fitness weights and penalties (defaults to FITNESS_CONFIG)
        """
        self.problem = problem
        self.config = {**FITNESS_CONFIG, **(config or {})}
        ConfigValidator.validate_fitness_config(self.config)

        self.capacity_penalty = self.config['capacity_penalty']
        self.unassigned_penalty = self.config['unassigned_penalty']
        self.duplicate_penalty = self.config['duplicate_penalty']
        self.distance_weight = self.config['distance_weight']
        self.time_weight = self.config['time_weight']
        self.vehicle_weight = self.config['vehicle_weight']

        self._available_ids = set(problem.get_passenger_ids())
        # (vehicle id, passenger id sequence) -> (distance, time)
        self._route_cache: Dict[Tuple[int, Tuple[int, ...]], Tuple[float, float]] = {}
        self.evaluation_count = 0

    def route_cost(self, vehicle: Vehicle) -> Tuple[float, float]:
        """Distance (km) and time (minutes) of one vehicle's route, memoized."""
        if not vehicle.passengers:
            return 0.0, 0.0

        key = (vehicle.id, tuple(p.id for p in vehicle.passengers))
        cached = self._route_cache.get(key)
        if cached is not None:
            return cached

        cost = self.problem.calculate_route_metrics(vehicle)
        self._route_cache[key] = cost
        return cost

    def get_breakdown(self, solution: Solution) -> Dict[str, float]:
        """
        Compute every fitness component of a solution.

        Args:
            solution: Solution to score

        Returns:
            Dictionary with distance, time, violation counts and the weighted total
        """
        total_distance = 0.0
        total_time = 0.0
        over_capacity = 0
        used_vehicles = 0
        seen = set()
        duplicates = 0

        for vehicle in solution.vehicles:
            if not vehicle.passengers:
                continue
            used_vehicles += 1
            distance, time = self.route_cost(vehicle)
            total_distance += distance
            total_time += time
            if vehicle.is_over_capacity():
                over_capacity += 1
            for passenger in vehicle.passengers:
                if passenger.id in seen:
                    duplicates += 1
                else:
                    seen.add(passenger.id)

        unassigned = len(self._available_ids - seen)

        route_cost = self.distance_weight * total_distance + self.time_weight * total_time
        penalty = (over_capacity * self.capacity_penalty +
                   unassigned * self.unassigned_penalty +
                   duplicates * self.duplicate_penalty)
        vehicle_cost = used_vehicles * self.vehicle_weight

        return {
            'total_distance': total_distance,
            'total_time': total_time,
            'route_cost': route_cost,
            'over_capacity_vehicles': over_capacity,
            'unassigned_passengers': unassigned,
            'duplicate_assignments': duplicates,
            'used_vehicles': used_vehicles,
            'vehicle_cost': vehicle_cost,
            'penalty': penalty,
            'fitness': route_cost + penalty + vehicle_cost
        }

    def evaluate_fitness(self, solution: Solution) -> float:
        """
        Evaluate fitness of a solution and store the result on it.

        Args:
            solution: Solution to evaluate

        Returns:
            Fitness value (lower is better)
        """
        self.evaluation_count += 1
        return self._score(solution)

    def _score(self, solution: Solution) -> float:
        breakdown = self.get_breakdown(solution)
        solution.fitness = breakdown['fitness']
        solution.penalty = breakdown['penalty']
        solution.total_distance = breakdown['total_distance']
        solution.total_time = breakdown['total_time']
        solution.is_valid = breakdown['penalty'] == 0
        return solution.fitness

    def evaluate_population(self, population: List[Solution], n_workers: int = 1) -> List[Solution]:
        """
        Evaluate fitness for an entire population.

        Args:
            population: List of solutions
            n_workers: Thread count; each worker scores its own solutions

        Returns:
            Population with updated fitness values
        """
        if n_workers > 1 and len(population) > 1:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                list(executor.map(self._score, population))
        else:
            for solution in population:
                self._score(solution)

        # Counted here, not per worker
        self.evaluation_count += len(population)
        return population

    def is_feasible_solution(self, solution: Solution) -> bool:
        """No capacity violation, duplicate or unassigned passenger."""
        return self.get_breakdown(solution)['penalty'] == 0

    def clear_cache(self):
        self._route_cache.clear()


def evaluate_fitness(solution: Solution, problem: RideSharingProblem,
                     config: Optional[Dict] = None) -> float:
    """
    Convenience function to evaluate fitness.

    Args:
        solution: Solution to evaluate
        problem: Ride-sharing problem instance
        config: Optional fitness weight overrides

    Returns:
        Fitness value
    """
    evaluator = FitnessEvaluator(problem, config)
    return evaluator.evaluate_fitness(solution)
