"""
Genetic Algorithm components for ride-sharing assignment.

This package contains:
- Fitness evaluation with capacity and coverage penalties
- Population seeding strategies
- Selection, crossover and mutation operators
- 2-opt route improvement
"""

from .fitness import FitnessEvaluator
from .genetic_algorithm import GeneticAlgorithm, run_genetic_algorithm
from .initialization import PopulationInitializer
from .local_search import TwoOptOptimizer
from .operators import CrossoverOperator, MutationOperator, SelectionOperator

__all__ = ['FitnessEvaluator', 'GeneticAlgorithm', 'run_genetic_algorithm', 'PopulationInitializer',
           'TwoOptOptimizer', 'CrossoverOperator', 'MutationOperator', 'SelectionOperator']
