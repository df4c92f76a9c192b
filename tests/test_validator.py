"""
Unit tests for solution validation, configuration checks and exceptions.
"""

import os
import sys
import unittest
from datetime import datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import FITNESS_CONFIG, GA_CONFIG, GA_PRESETS, MOCKUP_CONFIG
from ridematch.core.exceptions import (
    ConstraintViolationError, InfeasibleScheduleError, InvalidConfigurationError,
    InvalidInputError, RideMatchException
)
from ridematch.core.validators import ConfigValidator, InputValidator
from ridematch.evaluation.validator import SolutionValidator

from sample_problems import build_solution, make_passengers, make_problem


class TestSolutionValidator(unittest.TestCase):
    """Test the validation report and its messages."""

    def setUp(self):
        self.problem = make_problem()
        self.validator = SolutionValidator(make_passengers())

    def test_valid_solution(self):
        report = self.validator.validate(build_solution(self.problem, {1: [1, 2], 2: [3, 4]}))
        self.assertTrue(report.is_valid)
        self.assertTrue(report.is_complete)
        self.assertEqual(report.format(), "Solution is valid.")

    def test_unassigned_is_a_warning(self):
        report = self.validator.validate(build_solution(self.problem, {1: [1, 2], 2: [3]}))

        self.assertTrue(report.is_valid)
        self.assertFalse(report.is_complete)
        self.assertEqual(report.unassigned_passenger_ids, [4])
        self.assertEqual(report.format(), "Warning: 1 available passengers are not assigned.")

    def test_unavailable_passengers_need_no_assignment(self):
        passengers = make_passengers()
        passengers[3].is_available = False
        report = SolutionValidator(passengers).validate(build_solution(self.problem, {1: [1, 2], 2: [3]}))
        self.assertTrue(report.is_complete)

    def test_capacity_error(self):
        report = self.validator.validate(build_solution(self.problem, {1: [1, 2, 3], 2: [4]}))

        self.assertFalse(report.is_valid)
        self.assertEqual(report.over_capacity_vehicle_ids, [1])
        self.assertIn("Error: Vehicle 1 has 3 passengers but capacity is 2.", report.errors)

    def test_duplicate_error(self):
        report = self.validator.validate(build_solution(self.problem, {1: [1, 2], 2: [2, 3]}))

        self.assertEqual(report.duplicate_passenger_ids, [2])
        self.assertEqual(report.format().splitlines(), [
            "Warning: 1 available passengers are not assigned.",
            "Error: Passenger 2 is assigned to multiple vehicles: 1, 2.",
        ])
        self.assertEqual(self.validator.validate_solution(build_solution(self.problem, {1: [1, 2], 2: [2, 3]})),
                         report.format())

    def test_raise_for_errors(self):
        report = self.validator.validate(build_solution(self.problem, {1: [1, 2, 3]}))
        with self.assertRaises(ConstraintViolationError) as ctx:
            report.raise_for_errors()
        self.assertEqual(ctx.exception.violations, report.errors)

        # Warnings alone do not raise
        self.validator.validate(build_solution(self.problem, {1: [1]})).raise_for_errors()

    def test_to_dict(self):
        data = self.validator.validate(build_solution(self.problem, {1: [1, 2]})).to_dict()
        self.assertTrue(data['is_valid'])
        self.assertEqual(data['unassigned_passenger_ids'], [3, 4])


class TestConfigValidator(unittest.TestCase):
    """Test configuration validation."""

    def test_default_configs_are_valid(self):
        self.assertTrue(ConfigValidator.validate_ga_config(GA_CONFIG))
        self.assertTrue(ConfigValidator.validate_fitness_config(FITNESS_CONFIG))
        self.assertTrue(ConfigValidator.validate_mockup_config(MOCKUP_CONFIG))

    def test_presets_are_valid(self):
        for preset in GA_PRESETS.values():
            self.assertTrue(ConfigValidator.validate_ga_config({**GA_CONFIG, **preset}))

    def test_missing_key(self):
        config = dict(GA_CONFIG)
        del config['generations']
        with self.assertRaises(InvalidConfigurationError):
            ConfigValidator.validate_ga_config(config)

    def test_out_of_range_values(self):
        for override in ({'generations': 0}, {'crossover_prob': -0.1}, {'elitism_rate': 2},
                         {'tournament_size': 0}, {'stagnation_limit': 0}, {'n_workers': 0},
                         {'time_limit': 0}):
            with self.assertRaises(InvalidConfigurationError):
                ConfigValidator.validate_ga_config({**GA_CONFIG, **override})

    def test_mockup_config(self):
        with self.assertRaises(InvalidConfigurationError):
            ConfigValidator.validate_mockup_config({**MOCKUP_CONFIG, 'capacity_max': 1})
        with self.assertRaises(InvalidConfigurationError):
            ConfigValidator.validate_mockup_config({**MOCKUP_CONFIG, 'radius_km': 0})

    def test_error_message(self):
        error = InvalidConfigurationError('population_size', 1, '>= 2')
        self.assertIn("population_size = 1 (expected: >= 2)", str(error))
        self.assertEqual(error.details['expected'], '>= 2')


class TestInputValidator(unittest.TestCase):
    """Test record validation."""

    def test_coordinate(self):
        self.assertTrue(InputValidator.validate_coordinate(45.0, 90.0))
        with self.assertRaises(InvalidInputError) as ctx:
            InputValidator.validate_coordinate(100.0, 0.0, field='passenger 3')
        self.assertEqual(ctx.exception.details['field'], 'passenger 3')

    def test_missing_lists(self):
        with self.assertRaises(InvalidInputError):
            InputValidator.validate_vehicles(None)
        with self.assertRaises(InvalidInputError):
            InputValidator.validate_passengers(None)


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_hierarchy(self):
        self.assertTrue(issubclass(InvalidInputError, RideMatchException))
        self.assertTrue(issubclass(InvalidInputError, ValueError))
        self.assertTrue(issubclass(InfeasibleScheduleError, RideMatchException))
        self.assertTrue(issubclass(ConstraintViolationError, RideMatchException))

    def test_infeasible_schedule_message(self):
        error = InfeasibleScheduleError(2, 7, datetime(2026, 3, 2, 7, 40), datetime(2026, 3, 2, 7, 50))
        self.assertIn("passenger 7 on vehicle 2 would be picked up at 07:40, before 07:50", str(error))
        self.assertEqual(error.details['vehicle_id'], 2)

    def test_plain_message(self):
        self.assertEqual(str(RideMatchException("boom")), "boom")


if __name__ == '__main__':
    unittest.main()
