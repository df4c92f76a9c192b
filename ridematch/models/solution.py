"""
Solution representation for ride-sharing problems.
Defines Solution and Population classes for the GA.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from ridematch.models.ride_model import Passenger, Vehicle


@dataclass
class Solution:
    """A candidate assignment: every vehicle with its ordered pickup route."""
    vehicles: List[Vehicle] = field(default_factory=list)
    fitness: float = 0.0
    penalty: float = 0.0
    total_distance: float = 0.0
    total_time: float = 0.0
    is_valid: bool = True

    def copy(self) -> 'Solution':
        """Create a deep copy of the solution."""
        return Solution(
            vehicles=[v.clone() for v in self.vehicles],
            fitness=self.fitness,
            penalty=self.penalty,
            total_distance=self.total_distance,
            total_time=self.total_time,
            is_valid=self.is_valid
        )

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def get_total_distance(self) -> float:
        """Sum of the per-vehicle route distances in km."""
        return sum(v.total_distance for v in self.vehicles)

    def get_total_time(self) -> float:
        """Sum of the per-vehicle route times in minutes."""
        return sum(v.total_time for v in self.vehicles)

    def get_used_vehicles(self) -> List[Vehicle]:
        return [v for v in self.vehicles if v.passengers]

    def get_used_vehicle_count(self) -> int:
        return len(self.get_used_vehicles())

    def get_assigned_passenger_ids(self) -> List[int]:
        """Passenger ids in route order, duplicates included."""
        return [p.id for v in self.vehicles for p in v.passengers]

    def get_assigned_passenger_count(self) -> int:
        return len(set(self.get_assigned_passenger_ids()))

    def assignment_map(self) -> Dict[int, int]:
        """Map passenger id -> vehicle id (first occurrence wins)."""
        mapping: Dict[int, int] = {}
        for vehicle in self.vehicles:
            for passenger in vehicle.passengers:
                mapping.setdefault(passenger.id, vehicle.id)
        return mapping

    def apply_to(self, passengers: Iterable[Passenger]) -> int:
        """
        Write the assignment back onto caller-owned passenger records.

        Assigned passengers receive their vehicle id and pickup time;
        passengers missing from every route have both cleared.

        Args:
            passengers: Caller's passenger instances

        Returns:
            Number of passengers that received an assignment
        """
        routed = {}
        for vehicle in self.vehicles:
            for passenger in vehicle.passengers:
                routed.setdefault(passenger.id, (vehicle.id, passenger.pickup_time))

        assigned = 0
        for passenger in passengers:
            if passenger.id in routed:
                passenger.assigned_vehicle_id, passenger.pickup_time = routed[passenger.id]
                assigned += 1
            else:
                passenger.assigned_vehicle_id = None
                passenger.pickup_time = None
        return assigned

    def to_dict(self) -> Dict:
        """Convert solution to dictionary."""
        return {
            'fitness': float(self.fitness) if self.fitness is not None else None,
            'penalty': float(self.penalty) if self.penalty is not None else None,
            'total_distance': float(self.get_total_distance()),
            'total_time': float(self.get_total_time()),
            'is_valid': bool(self.is_valid),
            'used_vehicles': int(self.get_used_vehicle_count()),
            'assigned_passengers': int(self.get_assigned_passenger_count()),
            'vehicles': [v.to_dict() for v in self.vehicles]
        }


class Population:
    """A population of candidate solutions. Lower fitness is better."""

    def __init__(self, solutions: Optional[List[Solution]] = None):
        """
        Initialize population.

        Args:
            solutions: List of solutions (empty if None)
        """
        self.solutions = solutions or []
        self.generation = 0

    def __len__(self) -> int:
        return len(self.solutions)

    def __iter__(self):
        return iter(self.solutions)

    def add_solution(self, solution: Solution):
        self.solutions.append(solution)

    def get_best_solution(self) -> Optional[Solution]:
        """Get the best (lowest fitness) solution in the population."""
        if not self.solutions:
            return None
        return min(self.solutions, key=lambda s: s.fitness)

    def get_worst_solution(self) -> Optional[Solution]:
        if not self.solutions:
            return None
        return max(self.solutions, key=lambda s: s.fitness)

    def sort_by_fitness(self):
        """Sort solutions ascending by fitness (best first)."""
        self.solutions.sort(key=lambda s: s.fitness)

    def get_fitness_values(self) -> List[float]:
        return [s.fitness for s in self.solutions]

    def get_best_fitness(self) -> float:
        if not self.solutions:
            return 0.0
        return min(s.fitness for s in self.solutions)

    def get_avg_fitness(self) -> float:
        if not self.solutions:
            return 0.0
        return sum(s.fitness for s in self.solutions) / len(self.solutions)

    def get_worst_fitness(self) -> float:
        if not self.solutions:
            return 0.0
        return max(s.fitness for s in self.solutions)

    def calculate_diversity(self, passenger_ids: Optional[List[int]] = None) -> float:
        """
        Calculate population diversity from vehicle assignments.

        Each solution is encoded as the vehicle id serving every passenger
        (-1 when unassigned); diversity is the fraction of positions where two
        solutions differ, averaged over all pairs.

        Args:
            passenger_ids: Passenger order for the encoding (defaults to every
                passenger seen in the population)

        Returns:
            Diversity measure (0-1, higher means more diverse)
        """
        if len(self.solutions) < 2:
            return 0.0

        if passenger_ids is None:
            passenger_ids = sorted({pid for s in self.solutions for pid in s.get_assigned_passenger_ids()})
        if not passenger_ids:
            return 0.0

        assignments = np.full((len(self.solutions), len(passenger_ids)), -1, dtype=np.int64)
        column = {pid: j for j, pid in enumerate(passenger_ids)}
        for i, solution in enumerate(self.solutions):
            for pid, vid in solution.assignment_map().items():
                j = column.get(pid)
                if j is not None:
                    assignments[i, j] = vid

        n = len(self.solutions)
        total_differences = 0
        for i in range(n - 1):
            total_differences += int(np.sum(assignments[i + 1:] != assignments[i]))
        total_comparisons = (n * (n - 1) // 2) * len(passenger_ids)

        return total_differences / total_comparisons

    def apply_elitism(self, elite_count: int) -> List[Solution]:
        """
        Select elite solutions for next generation.

        Args:
            elite_count: Number of elite solutions to select

        Returns:
            Deep copies of the best solutions, best first
        """
        if not self.solutions:
            return []

        ranked = sorted(self.solutions, key=lambda s: s.fitness)
        elite_count = min(elite_count, len(ranked))
        return [ranked[i].copy() for i in range(elite_count)]

    def replace_solutions(self, new_solutions: List[Solution]):
        self.solutions = new_solutions

    def next_generation(self):
        self.generation += 1

    def get_statistics(self) -> Dict:
        """Get population statistics."""
        fitness_values = self.get_fitness_values()
        return {
            'size': len(self.solutions),
            'generation': self.generation,
            'best_fitness': self.get_best_fitness(),
            'avg_fitness': self.get_avg_fitness(),
            'worst_fitness': self.get_worst_fitness(),
            'fitness_std': float(np.std(fitness_values)) if fitness_values else 0.0
        }
