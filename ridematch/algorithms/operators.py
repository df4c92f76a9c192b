"""
Genetic Algorithm operators for ride-sharing.
Implements selection, route crossover and mutation operators.
"""

import random
from typing import List, Optional

from ridematch.algorithms.initialization import insert_greedily
from ridematch.algorithms.local_search import TwoOptOptimizer
from ridematch.models.ride_model import RideSharingProblem
from ridematch.models.solution import Solution


class SelectionOperator:
    """Selection operators for GA."""

    @staticmethod
    def tournament_selection(population: List[Solution],
                             tournament_size: int = 3,
                             num_parents: int = 2,
                             rng: Optional[random.Random] = None) -> List[Solution]:
        """
        Tournament selection operator.

        Args:
            population: List of solutions
            tournament_size: Candidates drawn (with replacement) per tournament
            num_parents: Number of parents to select
            rng: Random source

        Returns:
            List of selected parents (lowest fitness wins each tournament)
        """
        rng = rng or random.Random()
        parents = []

        for _ in range(num_parents):
            tournament = [rng.choice(population) for _ in range(tournament_size)]
            winner = min(tournament, key=lambda s: s.fitness)
            parents.append(winner)

        return parents


class CrossoverOperator:
    """Crossover operators for GA."""

    @staticmethod
    def route_crossover(parent1: Solution, parent2: Solution,
                        problem: RideSharingProblem,
                        rng: Optional[random.Random] = None) -> Solution:
        """
        Whole-route crossover.

        Half of parent1's used vehicles (chosen at random) are selected,
        followed by parent2's used vehicles not yet selected. Each selected
        vehicle inherits its whole route from parent1 when parent1 uses it,
        otherwise from parent2. A passenger already placed in the child is
        skipped. Passengers that either parent assigned but the child lost
        are placed greedily in the closest vehicle with a free seat.

        Args:
            parent1: First parent
            parent2: Second parent
            problem: Problem instance (fleet and distances)
            rng: Random source

        Returns:
            New child solution
        """
        rng = rng or random.Random()

        parent1_used = [v for v in parent1.vehicles if v.passengers]
        rng.shuffle(parent1_used)
        selected_ids = [v.id for v in parent1_used[:len(parent1_used) // 2]]
        for vehicle in parent2.vehicles:
            if vehicle.passengers and vehicle.id not in selected_ids:
                selected_ids.append(vehicle.id)

        child = Solution(vehicles=problem.clone_fleet())
        placed = set()

        for vehicle_id in selected_ids:
            target = child.get_vehicle(vehicle_id)
            if target is None:
                continue
            source = parent1.get_vehicle(vehicle_id)
            if source is None or not source.passengers:
                source = parent2.get_vehicle(vehicle_id)
            for passenger in source.passengers:
                if passenger.id in placed:
                    continue
                target.passengers.append(passenger.clone())
                placed.add(passenger.id)

        missing = []
        for parent in (parent1, parent2):
            for vehicle in parent.vehicles:
                for passenger in vehicle.passengers:
                    if passenger.id not in placed:
                        missing.append(passenger.clone())
                        placed.add(passenger.id)

        if missing:
            insert_greedily(problem, child.vehicles, missing)

        return child


class MutationOperator:
    """Mutation operators for GA. All mutations modify the solution in place."""

    def __init__(self, problem: RideSharingProblem,
                 optimizer: Optional[TwoOptOptimizer] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize mutation operator.

        Args:
            problem: Problem instance
            optimizer: Local optimizer used by the reorder and 2-opt mutations
            rng: Random source
        """
        self.problem = problem
        self.optimizer = optimizer or TwoOptOptimizer(problem)
        self.rng = rng or random.Random()
        self.mutations = [
            self.swap_passengers,
            self.reorder_passengers,
            self.move_passenger,
            self.two_opt_random_vehicle
        ]

    def mutate(self, solution: Solution) -> Solution:
        """Apply one uniformly chosen mutation."""
        mutation = self.rng.choice(self.mutations)
        mutation(solution)
        return solution

    def swap_passengers(self, solution: Solution) -> bool:
        """Exchange one random passenger between two vehicles."""
        used = [v for v in solution.vehicles if v.passengers]
        if len(used) < 2:
            return False

        vehicle1, vehicle2 = self.rng.sample(used, 2)
        i = self.rng.randrange(len(vehicle1.passengers))
        j = self.rng.randrange(len(vehicle2.passengers))
        vehicle1.passengers[i], vehicle2.passengers[j] = vehicle2.passengers[j], vehicle1.passengers[i]
        return True

    def reorder_passengers(self, solution: Solution) -> bool:
        """Pairwise swap improvement inside one random vehicle."""
        candidates = [v for v in solution.vehicles if len(v.passengers) > 1]
        if not candidates:
            return False
        return self.optimizer.reorder_by_swaps(self.rng.choice(candidates))

    def move_passenger(self, solution: Solution) -> bool:
        """Move a random passenger to another vehicle that has a free seat."""
        used = [v for v in solution.vehicles if v.passengers]
        if not used:
            return False

        source = self.rng.choice(used)
        targets = [v for v in solution.vehicles if v is not source and v.has_capacity()]
        if not targets:
            return False

        target = self.rng.choice(targets)
        passenger = source.passengers.pop(self.rng.randrange(len(source.passengers)))
        target.passengers.append(passenger)
        return True

    def two_opt_random_vehicle(self, solution: Solution) -> bool:
        return self.optimizer.optimize_random_vehicle(solution, self.rng)
