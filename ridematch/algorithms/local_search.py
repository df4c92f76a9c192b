"""
2-opt local search optimization for ride-sharing routes.
Implements intra-route reordering and exact metric recomputation.
"""

import random
import logging
from typing import List, Optional

from config import GA_CONFIG
from ridematch.models.ride_model import Passenger, RideSharingProblem, Vehicle
from ridematch.models.solution import Solution

logger = logging.getLogger(__name__)


class TwoOptOptimizer:
    """2-opt local search optimizer for vehicle pickup routes."""

    def __init__(self, problem: RideSharingProblem, max_iterations: Optional[int] = None):
        """
        Initialize 2-opt optimizer.

        Args:
            problem: Ride-sharing problem instance
            max_iterations: Cap on improvement rounds per route
        """
        self.problem = problem
        if max_iterations is None:
            max_iterations = GA_CONFIG.get('local_search_iterations', 50)
        self.max_iterations = max_iterations

    def optimize_vehicle(self, vehicle: Vehicle, max_iterations: Optional[int] = None) -> bool:
        """
        Apply 2-opt to one vehicle's passenger order in place.

        Args:
            vehicle: Vehicle whose route is reordered
            max_iterations: Maximum improvement rounds (defaults to the optimizer cap)

        Returns:
            True if the route got shorter
        """
        if len(vehicle.passengers) < 2:
            return False

        max_iterations = self.max_iterations if max_iterations is None else max_iterations
        current_route = list(vehicle.passengers)
        best_distance = self.problem.calculate_route_distance(vehicle, current_route)
        improved_any = False
        improved = True
        iteration = 0

        while improved and iteration < max_iterations:
            improved = False
            iteration += 1

            # Try all possible segment reversals
            for i in range(len(current_route) - 1):
                for j in range(i + 1, len(current_route)):
                    new_route = self._reverse_segment(current_route, i, j)
                    new_distance = self.problem.calculate_route_distance(vehicle, new_route)

                    if new_distance < best_distance:
                        current_route = new_route
                        best_distance = new_distance
                        improved = True
                        improved_any = True
                        break

                if improved:
                    break

        vehicle.passengers = current_route
        return improved_any

    def optimize_random_vehicle(self, solution: Solution, rng: random.Random) -> bool:
        """2-opt one randomly chosen vehicle that has at least three passengers."""
        candidates = [v for v in solution.vehicles if len(v.passengers) >= 3]
        if not candidates:
            return False
        return self.optimize_vehicle(rng.choice(candidates))

    def optimize_solution(self, solution: Solution) -> Solution:
        """
        2-opt every vehicle of a solution in place.

        Args:
            solution: Solution to optimize

        Returns:
            The same solution, with reordered routes
        """
        improved = 0
        for vehicle in solution.vehicles:
            if self.optimize_vehicle(vehicle):
                improved += 1
        if improved:
            logger.debug(f"2-opt shortened {improved} route(s)")
        return solution

    def reorder_by_swaps(self, vehicle: Vehicle) -> bool:
        """
        Pairwise swap improvement: keep a swap of two passengers when it
        shortens the route.

        Returns:
            True if any swap was kept
        """
        passengers = vehicle.passengers
        if len(passengers) < 2:
            return False

        improved = False
        current_distance = self.problem.calculate_route_distance(vehicle)
        for i in range(len(passengers) - 1):
            for j in range(i + 1, len(passengers)):
                passengers[i], passengers[j] = passengers[j], passengers[i]
                new_distance = self.problem.calculate_route_distance(vehicle)
                if new_distance < current_distance:
                    current_distance = new_distance
                    improved = True
                else:
                    passengers[i], passengers[j] = passengers[j], passengers[i]
        return improved

    def calculate_exact_metrics(self, solution: Solution) -> Solution:
        """
        Recompute every vehicle's total distance and time by replaying its route.

        Args:
            solution: Solution to update in place

        Returns:
            The same solution with authoritative per-vehicle metrics
        """
        for vehicle in solution.vehicles:
            if not vehicle.passengers:
                vehicle.total_distance = 0.0
                vehicle.total_time = 0.0
                continue
            vehicle.total_distance, vehicle.total_time = self.problem.calculate_route_metrics(vehicle)

        solution.total_distance = solution.get_total_distance()
        solution.total_time = solution.get_total_time()
        return solution

    @staticmethod
    def _reverse_segment(route: List[Passenger], i: int, j: int) -> List[Passenger]:
        """Route with the segment between positions i and j (inclusive) reversed."""
        new_route = route.copy()
        new_route[i:j + 1] = reversed(new_route[i:j + 1])
        return new_route
