"""
Main Genetic Algorithm engine for ride-sharing.
Implements the complete GA workflow with population management.
"""

import math
import random
import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

import numpy as np

from config import GA_CONFIG
from ridematch.algorithms.fitness import FitnessEvaluator
from ridematch.algorithms.initialization import PopulationInitializer
from ridematch.algorithms.local_search import TwoOptOptimizer
from ridematch.algorithms.operators import (
    CrossoverOperator, MutationOperator, SelectionOperator
)
from ridematch.core.validators import ConfigValidator
from ridematch.models.ride_model import RideSharingProblem
from ridematch.models.solution import Population, Solution

logger = logging.getLogger(__name__)


class GeneticAlgorithm:
    """Main Genetic Algorithm engine for ride-sharing optimization."""

    def __init__(self, problem: RideSharingProblem, config: Optional[Dict] = None,
                 fitness_config: Optional[Dict] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 cancel_event: Optional[threading.Event] = None):
        """
        Initialize GA engine.

        Args:
            problem: Ride-sharing problem instance
            config: GA configuration overrides (merged over GA_CONFIG)
            fitness_config: Fitness weight overrides (merged over FITNESS_CONFIG)
            seed: Seed for the engine's random source
            rng: Random source to use instead of seeding a new one
            cancel_event: Event polled between generations to stop early
        """
        self.problem = problem
        self.config = {**GA_CONFIG, **(config or {})}
        ConfigValidator.validate_ga_config(self.config)

        self.rng = rng or random.Random(seed)
        self.cancel_event = cancel_event or threading.Event()

        # Initialize components
        self.fitness_evaluator = FitnessEvaluator(problem, fitness_config)
        self.local_search = TwoOptOptimizer(problem, self.config.get('local_search_iterations'))
        self.initializer = PopulationInitializer(problem, self.rng)
        self.mutation_operator = MutationOperator(problem, self.local_search, self.rng)

        # GA state
        self.population = Population()
        self.generation = 0
        self.best_solution: Optional[Solution] = None
        self.execution_time = 0.0
        self.termination_reason: Optional[str] = None

        # Statistics
        self.stats = {
            'generations': 0,
            'total_evaluations': 0,
            'best_fitness_history': [],
            'avg_fitness_history': [],
            'diversity_history': [],
            'convergence_generation': None
        }

    def initialize_population(self, initial_population: Optional[List[Solution]] = None) -> Population:
        """
        Initialize population from previous solutions and seeding heuristics.

        Args:
            initial_population: Optional solutions from an earlier run

        Returns:
            Initialized population
        """
        solutions = self.initializer.initialize(self.config['population_size'], initial_population)
        self.population = Population(solutions)
        return self.population

    def cancel(self):
        """Ask a running evolution to stop after the current generation."""
        self.cancel_event.set()

    def evolve(self, max_generations: Optional[int] = None,
               initial_population: Optional[List[Solution]] = None) -> Tuple[Solution, List[Dict]]:
        """
        Run GA evolution process.

        Args:
            max_generations: Maximum number of generations
            initial_population: Optional solutions from an earlier run

        Returns:
            Tuple of (best_solution, evolution_data)
        """
        max_generations = max_generations or self.config['generations']
        start_time = time.time()
        evolution_data: List[Dict] = []

        if not self.problem.passengers:
            self.best_solution = Solution(vehicles=self.problem.clone_fleet())
            self.fitness_evaluator.evaluate_fitness(self.best_solution)
            self.termination_reason = 'no_passengers'
            self.execution_time = time.time() - start_time
            logger.info("No available passengers, returning empty routes")
            return self.best_solution, evolution_data

        if initial_population is not None or not len(self.population):
            self.initialize_population(initial_population)

        logger.info(f"Starting GA: {len(self.problem.passengers)} passengers, "
                    f"{len(self.problem.vehicles)} vehicles, population "
                    f"{self.config['population_size']}, up to {max_generations} generations")

        best: Optional[Solution] = None
        stagnation = 0
        n_workers = self.config.get('n_workers', 1)
        log_every = self.config.get('log_every') or 0

        for generation in range(max_generations):
            self.generation = generation
            self.population.generation = generation

            self.fitness_evaluator.evaluate_population(self.population.solutions, n_workers)
            self.stats['total_evaluations'] += len(self.population)
            self.population.sort_by_fitness()

            current_best = self.population.solutions[0]
            if best is None or self._is_better(current_best, best):
                best = current_best.copy()
                stagnation = 0
                self.stats['convergence_generation'] = generation
            else:
                stagnation += 1

            gen_data = self._collect_generation_data(generation, best)
            evolution_data.append(gen_data)

            if log_every and generation % log_every == 0:
                logger.debug(f"Generation {generation}: best={gen_data['min_fitness']:.3f}, "
                             f"avg={gen_data['avg_fitness']:.3f}, "
                             f"diversity={gen_data['diversity']:.3f}")

            reason = self._check_termination(best, stagnation, start_time)
            if reason is None and generation == max_generations - 1:
                reason = 'max_generations'
            if reason is not None:
                self.termination_reason = reason
                break

            self._create_next_generation()

        self.stats['generations'] = self.generation + 1
        self.best_solution = self._finalize(best)
        self.execution_time = time.time() - start_time

        logger.info(f"GA finished after {self.stats['generations']} generations "
                    f"({self.termination_reason}); best fitness {self.best_solution.fitness:.3f}, "
                    f"{self.best_solution.get_assigned_passenger_count()}/"
                    f"{len(self.problem.passengers)} passengers assigned")

        return self.best_solution, evolution_data

    @staticmethod
    def _is_better(candidate: Solution, incumbent: Solution) -> bool:
        """A capacity-respecting solution beats any over-capacity one, then lower fitness wins."""
        candidate_over = any(v.is_over_capacity() for v in candidate.vehicles)
        incumbent_over = any(v.is_over_capacity() for v in incumbent.vehicles)
        if candidate_over != incumbent_over:
            return incumbent_over
        return candidate.fitness < incumbent.fitness

    def _collect_generation_data(self, generation: int, best: Solution) -> Dict:
        fitness_values = self.population.get_fitness_values()
        diversity = self.population.calculate_diversity(self.problem.get_passenger_ids())

        self.stats['best_fitness_history'].append(best.fitness)
        self.stats['avg_fitness_history'].append(float(np.mean(fitness_values)))
        self.stats['diversity_history'].append(diversity)

        return {
            'generation': generation,
            'evaluated_solutions': len(fitness_values),
            'min_fitness': float(np.min(fitness_values)),
            'max_fitness': float(np.max(fitness_values)),
            'avg_fitness': float(np.mean(fitness_values)),
            'std_fitness': float(np.std(fitness_values)),
            'best_fitness': best.fitness,
            'best_distance': self.population.solutions[0].total_distance,
            'avg_distance': float(np.mean([s.total_distance for s in self.population.solutions])),
            'diversity': diversity
        }

    def _check_termination(self, best: Solution, stagnation: int, start_time: float) -> Optional[str]:
        """
        Check the stop conditions between generations.

        Returns:
            Termination reason, or None to keep evolving
        """
        if self.cancel_event.is_set():
            return 'cancelled'

        if best.fitness < self.config.get('near_optimal_threshold', 0.1):
            return 'near_optimal'

        if stagnation >= self.config.get('stagnation_limit', 20):
            return 'stagnation'

        time_limit = self.config.get('time_limit')
        if time_limit is not None and time.time() - start_time >= time_limit:
            return 'time_limit'

        return None

    def _create_next_generation(self):
        """Create next generation using elitism, selection, crossover and mutation."""
        population_size = self.config['population_size']
        elite_count = min(population_size, math.ceil(population_size * self.config['elitism_rate']))
        new_solutions = self.population.apply_elitism(elite_count)

        while len(new_solutions) < population_size:
            parent1, parent2 = SelectionOperator.tournament_selection(
                self.population.solutions, self.config['tournament_size'], 2, self.rng
            )

            if self.rng.random() < self.config['crossover_prob']:
                child = CrossoverOperator.route_crossover(parent1, parent2, self.problem, self.rng)
            else:
                child = (parent1 if self.rng.random() < 0.5 else parent2).copy()

            if self.rng.random() < self.config['mutation_prob']:
                self.mutation_operator.mutate(child)

            new_solutions.append(child)

        self.population.replace_solutions(new_solutions)
        self.population.next_generation()

    def _finalize(self, best: Solution) -> Solution:
        """2-opt every route of the incumbent and recompute exact metrics."""
        final = best.copy()
        if self.config.get('final_local_search', True):
            self.local_search.optimize_solution(final)
        self.local_search.calculate_exact_metrics(final)
        self.fitness_evaluator.evaluate_fitness(final)
        return final

    def get_statistics(self) -> Dict:
        """Get GA execution statistics."""
        best = self.best_solution
        return {
            'generations': self.stats['generations'],
            'total_evaluations': self.stats['total_evaluations'],
            'execution_time': self.execution_time,
            'convergence_generation': self.stats['convergence_generation'],
            'termination_reason': self.termination_reason,
            'best_fitness': best.fitness if best else None,
            'avg_fitness': self.population.get_avg_fitness(),
            'diversity': self.stats['diversity_history'][-1] if self.stats['diversity_history'] else 0.0,
            'population_size': len(self.population)
        }

    def get_convergence_data(self) -> Dict:
        """Get convergence data for visualization."""
        return {
            'generations': list(range(len(self.stats['best_fitness_history']))),
            'best_fitness': self.stats['best_fitness_history'],
            'avg_fitness': self.stats['avg_fitness_history'],
            'diversity': self.stats['diversity_history']
        }

    def get_latest_population(self) -> List[Solution]:
        """Copies of the final population, usable to seed a later run."""
        return [s.copy() for s in self.population.solutions]


def run_genetic_algorithm(problem: RideSharingProblem,
                          config: Optional[Dict] = None,
                          max_generations: Optional[int] = None,
                          seed: Optional[int] = None) -> Tuple[Solution, Dict, List[Dict]]:
    """
    Convenience function to run GA.

    Args:
        problem: Ride-sharing problem instance
        config: GA configuration
        max_generations: Maximum generations
        seed: Random seed

    Returns:
        Tuple of (best_solution, statistics, evolution_data)
    """
    ga = GeneticAlgorithm(problem, config, seed=seed)
    best_solution, evolution_data = ga.evolve(max_generations)
    statistics = ga.get_statistics()

    return best_solution, statistics, evolution_data
