"""
Population seeding strategies for the ride-sharing GA.
Greedy, even-distribution and random constructions plus re-binding of
previously found solutions.
"""

import random
import logging
from typing import List, Optional

from ridematch.models.ride_model import Passenger, RideSharingProblem, Vehicle
from ridematch.models.solution import Solution

logger = logging.getLogger(__name__)


class PopulationInitializer:
    """Builds initial candidate solutions for a ride-sharing problem."""

    def __init__(self, problem: RideSharingProblem, rng: Optional[random.Random] = None):
        """
        Initialize the seeding strategies.

        Args:
            problem: Ride-sharing problem instance
            rng: Random source shared with the engine
        """
        self.problem = problem
        self.rng = rng or random.Random()

    def _empty_solution(self) -> Solution:
        return Solution(vehicles=self.problem.clone_fleet())

    def _passenger_pool(self) -> List[Passenger]:
        return [p.clone() for p in self.problem.passengers]

    def create_greedy_solution(self) -> Solution:
        """
        Repeatedly assign the globally closest (vehicle, passenger) pair.

        Distance is measured from the vehicle start. Ties keep the first pair
        found scanning vehicles in fleet order, then passengers in input order.
        """
        solution = self._empty_solution()
        unassigned = self._passenger_pool()

        while unassigned:
            best_vehicle = None
            best_index = -1
            best_distance = float('inf')

            for vehicle in solution.vehicles:
                if not vehicle.has_capacity():
                    continue
                for index, passenger in enumerate(unassigned):
                    distance = self.problem.distance_from_start(vehicle, passenger)
                    if distance < best_distance:
                        best_distance = distance
                        best_vehicle = vehicle
                        best_index = index

            if best_vehicle is None:
                break
            best_vehicle.passengers.append(unassigned.pop(best_index))

        return solution

    def create_even_distribution_solution(self) -> Solution:
        """Round-robin passengers over the fleet, skipping full vehicles."""
        solution = self._empty_solution()
        vehicles = solution.vehicles
        vehicle_index = 0

        for passenger in self._passenger_pool():
            for _ in range(len(vehicles)):
                vehicle = vehicles[vehicle_index]
                vehicle_index = (vehicle_index + 1) % len(vehicles)
                if vehicle.has_capacity():
                    vehicle.passengers.append(passenger)
                    break
            else:
                # Fleet is full
                break

        return solution

    def create_random_subset_solution(self) -> Solution:
        """
        Shuffle passengers and vehicles; each vehicle takes a random number
        of passengers from the head of the pool.
        """
        solution = self._empty_solution()
        pool = self._passenger_pool()
        self.rng.shuffle(pool)
        vehicles = list(solution.vehicles)
        self.rng.shuffle(vehicles)

        for vehicle in vehicles:
            if not pool:
                break
            count = self.rng.randint(1, min(vehicle.capacity, len(pool)))
            vehicle.passengers.extend(pool[:count])
            del pool[:count]

        return solution

    def create_random_assignment_solution(self) -> Solution:
        """Send each passenger to a uniformly random vehicle with a free seat."""
        solution = self._empty_solution()
        for passenger in self._passenger_pool():
            open_vehicles = [v for v in solution.vehicles if v.has_capacity()]
            if not open_vehicles:
                break
            self.rng.choice(open_vehicles).passengers.append(passenger)
        return solution

    def create_from_previous(self, previous: Solution) -> Solution:
        """
        Re-bind an earlier solution to the current fleet and passengers.

        Vehicles and passengers that are no longer available are dropped,
        repeated passengers keep their first placement, routes are trimmed
        to capacity and leftovers are placed greedily.

        Args:
            previous: Solution produced for an earlier run

        Returns:
            Independent solution over the current problem
        """
        solution = self._empty_solution()
        placed = set()

        for old_vehicle in previous.vehicles:
            vehicle = solution.get_vehicle(old_vehicle.id)
            if vehicle is None:
                continue
            for old_passenger in old_vehicle.passengers:
                passenger = self.problem.get_passenger_by_id(old_passenger.id)
                if passenger is None or passenger.id in placed:
                    continue
                if not vehicle.has_capacity():
                    break
                vehicle.passengers.append(passenger.clone())
                placed.add(passenger.id)

        leftovers = [p.clone() for p in self.problem.passengers if p.id not in placed]
        insert_greedily(self.problem, solution.vehicles, leftovers)
        return solution

    def create_random_solution(self) -> Solution:
        """Pick one of the random constructions."""
        if self.rng.random() < 0.5:
            return self.create_random_subset_solution()
        return self.create_random_assignment_solution()

    def initialize(self, population_size: int,
                   initial_population: Optional[List[Solution]] = None) -> List[Solution]:
        """
        Build a full initial population.

        Previous solutions come first, then one greedy and one even
        distribution solution, then random solutions up to the target size.

        Args:
            population_size: Number of candidates to create
            initial_population: Optional previously found solutions

        Returns:
            List of independent solutions
        """
        solutions: List[Solution] = []

        for previous in initial_population or []:
            if len(solutions) >= population_size:
                break
            solutions.append(self.create_from_previous(previous))

        if len(solutions) < population_size:
            solutions.append(self.create_greedy_solution())
        if len(solutions) < population_size:
            solutions.append(self.create_even_distribution_solution())
        while len(solutions) < population_size:
            solutions.append(self.create_random_solution())

        logger.debug(f"Seeded {len(solutions)} solutions "
                     f"({len(initial_population or [])} from previous runs)")
        return solutions


def insert_greedily(problem: RideSharingProblem, vehicles: List[Vehicle],
                    passengers: List[Passenger]) -> List[Passenger]:
    """
    Append each passenger to the closest vehicle (by start location) that
    still has a free seat.

    Args:
        problem: Problem supplying distances
        vehicles: Vehicles to fill, modified in place
        passengers: Passengers to place, in order

    Returns:
        Passengers that could not be placed
    """
    remaining = []
    for passenger in passengers:
        best_vehicle = None
        best_distance = float('inf')
        for vehicle in vehicles:
            if not vehicle.has_capacity():
                continue
            distance = problem.distance_from_start(vehicle, passenger)
            if distance < best_distance:
                best_distance = distance
                best_vehicle = vehicle
        if best_vehicle is None:
            remaining.append(passenger)
        else:
            best_vehicle.passengers.append(passenger)
    return remaining
