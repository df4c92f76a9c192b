"""
Unit tests for the ride-sharing models.
Tests distance helpers, problem construction, solutions and populations.
"""

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ridematch.core.exceptions import InvalidInputError
from ridematch.data_processing.distance import (
    DistanceCalculator, haversine_distance, is_valid_location, route_distance, travel_time_minutes
)
from ridematch.models.ride_model import Coordinate, Passenger, RideSharingProblem, Vehicle
from ridematch.models.solution import Population, Solution

from sample_problems import (
    KM_PER_DEGREE, build_solution, degrees_to_km, make_destination, make_passengers,
    make_problem, make_vehicles
)


class TestDistance(unittest.TestCase):
    """Test haversine helpers."""

    def test_haversine_identical_points(self):
        self.assertEqual(haversine_distance((32.08, 34.78), (32.08, 34.78)), 0.0)

    def test_haversine_one_degree_on_equator(self):
        self.assertAlmostEqual(haversine_distance((0.0, 0.0), (0.0, 1.0)), KM_PER_DEGREE, places=6)

    def test_haversine_is_symmetric(self):
        a, b = (32.0853, 34.7818), (31.7683, 35.2137)
        self.assertAlmostEqual(haversine_distance(a, b), haversine_distance(b, a), places=9)
        # Tel Aviv to Jerusalem is roughly 54 km in a straight line
        self.assertTrue(50 < haversine_distance(a, b) < 60)

    def test_route_distance(self):
        points = [(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)]
        self.assertAlmostEqual(route_distance(points), KM_PER_DEGREE, places=6)
        self.assertEqual(route_distance([(0.0, 0.0)]), 0.0)
        self.assertEqual(route_distance([]), 0.0)

    def test_travel_time(self):
        self.assertAlmostEqual(travel_time_minutes(15.0, 30.0), 30.0)
        self.assertAlmostEqual(travel_time_minutes(10.0), 20.0)

    def test_valid_location(self):
        self.assertTrue(is_valid_location(90, 180))
        self.assertFalse(is_valid_location(91, 0))
        self.assertFalse(is_valid_location(0, -181))
        self.assertFalse(is_valid_location(float('nan'), 0))
        self.assertFalse(is_valid_location(None, 0))

    def test_distance_matrix(self):
        calculator = DistanceCalculator()
        matrix = calculator.calculate_distance_matrix([(0.0, 0.0), (0.0, 1.0), (1.0, 0.0)])

        self.assertEqual(matrix.shape, (3, 3))
        self.assertTrue(np.allclose(matrix, matrix.T))
        self.assertTrue(np.all(np.diag(matrix) == 0))
        self.assertAlmostEqual(calculator.get_distance(0, 1), KM_PER_DEGREE, places=6)
        self.assertAlmostEqual(calculator.get_route_distance([1, 0, 2]), 2 * KM_PER_DEGREE, places=6)

    def test_distance_matrix_not_calculated(self):
        with self.assertRaises(ValueError):
            DistanceCalculator().get_distance(0, 1)


class TestRecords(unittest.TestCase):
    """Test passenger and vehicle records."""

    def test_vehicle_capacity(self):
        vehicle = Vehicle(1, 0.0, 0.0, 2)
        self.assertTrue(vehicle.has_capacity())
        vehicle.passengers = [Passenger(1, 0, 0), Passenger(2, 0, 0)]
        self.assertFalse(vehicle.has_capacity())
        self.assertEqual(vehicle.remaining_capacity, 0)
        self.assertFalse(vehicle.is_over_capacity())
        vehicle.passengers.append(Passenger(3, 0, 0))
        self.assertTrue(vehicle.is_over_capacity())

    def test_vehicle_clone_is_independent(self):
        vehicle = Vehicle(1, 0.0, 0.0, 3, passengers=[Passenger(1, 0.0, 0.1)])
        clone = vehicle.clone()
        clone.passengers[0].name = "changed"
        clone.passengers.append(Passenger(2, 0.0, 0.2))

        self.assertEqual(vehicle.get_passenger_ids(), [1])
        self.assertEqual(vehicle.passengers[0].name, "")
        self.assertEqual(vehicle.clone(include_passengers=False).passengers, [])

    def test_coordinate_distance(self):
        self.assertAlmostEqual(Coordinate(0.0, 0.0).distance_to(Coordinate(0.0, 1.0)),
                               KM_PER_DEGREE, places=6)

    def test_passenger_to_dict(self):
        data = Passenger(7, 1.5, 2.5, name="Dana").to_dict()
        self.assertEqual(data['id'], 7)
        self.assertIsNone(data['pickup_time'])
        self.assertIsNone(data['assigned_vehicle_id'])


class TestRideSharingProblem(unittest.TestCase):
    """Test problem construction and route distances."""

    def test_node_layout(self):
        problem = make_problem()
        self.assertEqual(problem.num_nodes, 7)
        self.assertEqual(problem.vehicle_index, {1: 0, 2: 1})
        self.assertEqual(problem.passenger_index[1], 2)
        self.assertEqual(problem.destination_index, 6)
        self.assertEqual(problem.distance_matrix.shape, (7, 7))

    def test_unavailable_records_are_ignored(self):
        vehicles = make_vehicles()
        vehicles[1].is_available = False
        passengers = make_passengers()
        passengers[0].is_available = False

        problem = RideSharingProblem(vehicles, passengers, make_destination())
        self.assertEqual([v.id for v in problem.vehicles], [1])
        self.assertEqual(problem.get_passenger_ids(), [2, 3, 4])

    def test_no_available_vehicles(self):
        vehicles = make_vehicles()
        for vehicle in vehicles:
            vehicle.is_available = False
        with self.assertRaises(InvalidInputError):
            RideSharingProblem(vehicles, make_passengers(), make_destination())

    def test_invalid_records(self):
        with self.assertRaises(InvalidInputError):
            RideSharingProblem([Vehicle(1, 0, 0, 0)], make_passengers(), make_destination())
        with self.assertRaises(InvalidInputError):
            RideSharingProblem(make_vehicles() + [Vehicle(1, 0, 0, 2)], make_passengers())
        with self.assertRaises(InvalidInputError):
            RideSharingProblem(make_vehicles(), [Passenger(1, 95.0, 0.0)])
        # InvalidInputError is also a ValueError
        with self.assertRaises(ValueError):
            RideSharingProblem(make_vehicles(), make_passengers() + [Passenger(1, 0, 0)])

    def test_distance_matrix_shape_mismatch(self):
        with self.assertRaises(InvalidInputError):
            make_problem(distance_matrix=np.zeros((3, 3)))

    def test_route_distance_includes_destination(self):
        problem = make_problem()
        vehicle = problem.clone_fleet()[0]
        self.assertEqual(problem.calculate_route_distance(vehicle), 0.0)

        vehicle.passengers = [problem.get_passenger_by_id(1), problem.get_passenger_by_id(2)]
        self.assertAlmostEqual(problem.calculate_route_distance(vehicle), degrees_to_km(0.10), places=6)

        reversed_order = [problem.get_passenger_by_id(2), problem.get_passenger_by_id(1)]
        self.assertAlmostEqual(problem.calculate_route_distance(vehicle, reversed_order),
                               degrees_to_km(0.13), places=6)

    def test_route_without_destination_ends_at_last_pickup(self):
        problem = RideSharingProblem(make_vehicles(), make_passengers())
        vehicle = problem.clone_fleet()[0]
        vehicle.passengers = [problem.get_passenger_by_id(1)]
        self.assertIsNone(problem.destination_index)
        self.assertAlmostEqual(problem.calculate_route_distance(vehicle), degrees_to_km(0.02), places=6)

    def test_custom_distance_matrix(self):
        matrix = np.ones((7, 7))
        np.fill_diagonal(matrix, 0.0)
        problem = make_problem(distance_matrix=matrix)
        vehicle = problem.clone_fleet()[0]
        vehicle.passengers = [problem.get_passenger_by_id(1), problem.get_passenger_by_id(3)]
        self.assertAlmostEqual(problem.calculate_route_distance(vehicle), 3.0)

    def test_route_metrics(self):
        problem = make_problem(average_speed_kmh=60.0)
        vehicle = problem.clone_fleet()[0]
        vehicle.passengers = [problem.get_passenger_by_id(1)]
        distance, minutes = problem.calculate_route_metrics(vehicle)
        self.assertAlmostEqual(minutes, distance)

    def test_problem_info(self):
        info = make_problem().get_problem_info()
        self.assertEqual(info['num_vehicles'], 2)
        self.assertEqual(info['num_passengers'], 4)
        self.assertEqual(info['total_capacity'], 4)
        self.assertTrue(info['capacity_sufficient'])


class TestSolution(unittest.TestCase):
    """Test solution helpers."""

    def setUp(self):
        self.problem = make_problem()

    def test_copy_is_deep(self):
        solution = build_solution(self.problem, {1: [1, 2], 2: [3]})
        copy = solution.copy()
        copy.vehicles[0].passengers.pop()

        self.assertEqual(solution.vehicles[0].get_passenger_ids(), [1, 2])

    def test_counts(self):
        solution = build_solution(self.problem, {1: [1, 2], 2: [2]})
        self.assertEqual(solution.get_used_vehicle_count(), 2)
        self.assertEqual(solution.get_assigned_passenger_ids(), [1, 2, 2])
        self.assertEqual(solution.get_assigned_passenger_count(), 2)
        self.assertEqual(solution.assignment_map(), {1: 1, 2: 1})

    def test_apply_to_caller_records(self):
        solution = build_solution(self.problem, {1: [1], 2: [3]})
        passengers = make_passengers()
        passengers[1].assigned_vehicle_id = 9

        assigned = solution.apply_to(passengers)

        self.assertEqual(assigned, 2)
        self.assertEqual(passengers[0].assigned_vehicle_id, 1)
        self.assertEqual(passengers[2].assigned_vehicle_id, 2)
        self.assertIsNone(passengers[1].assigned_vehicle_id)

    def test_to_dict(self):
        data = build_solution(self.problem, {1: [1, 2]}).to_dict()
        self.assertEqual(data['used_vehicles'], 1)
        self.assertEqual(data['assigned_passengers'], 2)
        self.assertEqual(len(data['vehicles']), 2)


class TestPopulation(unittest.TestCase):
    """Test population statistics and elitism."""

    def setUp(self):
        self.problem = make_problem()

    def _solution(self, routes, fitness):
        solution = build_solution(self.problem, routes)
        solution.fitness = fitness
        return solution

    def test_best_and_sorting(self):
        population = Population([
            self._solution({1: [1]}, 5.0),
            self._solution({1: [2]}, 1.0),
            self._solution({1: [3]}, 3.0),
        ])

        self.assertEqual(population.get_best_solution().fitness, 1.0)
        self.assertEqual(population.get_worst_solution().fitness, 5.0)
        self.assertAlmostEqual(population.get_avg_fitness(), 3.0)
        population.sort_by_fitness()
        self.assertEqual(population.get_fitness_values(), [1.0, 3.0, 5.0])

    def test_empty_population(self):
        population = Population()
        self.assertIsNone(population.get_best_solution())
        self.assertEqual(population.get_best_fitness(), 0.0)
        self.assertEqual(population.apply_elitism(3), [])
        self.assertEqual(population.calculate_diversity(), 0.0)

    def test_elitism_returns_copies(self):
        best = self._solution({1: [1, 2]}, 1.0)
        population = Population([self._solution({2: [3]}, 4.0), best])

        elite = population.apply_elitism(1)
        self.assertEqual(len(elite), 1)
        self.assertEqual(elite[0].fitness, 1.0)
        self.assertIsNot(elite[0], best)
        self.assertEqual(len(population.apply_elitism(10)), 2)

    def test_diversity(self):
        ids = [1, 2, 3, 4]
        same = Population([self._solution({1: [1, 2], 2: [3, 4]}, 0.0) for _ in range(3)])
        self.assertEqual(same.calculate_diversity(ids), 0.0)

        opposite = Population([
            self._solution({1: [1, 2], 2: [3, 4]}, 0.0),
            self._solution({2: [1, 2], 1: [3, 4]}, 0.0),
        ])
        self.assertEqual(opposite.calculate_diversity(ids), 1.0)

        half = Population([
            self._solution({1: [1, 2], 2: [3, 4]}, 0.0),
            self._solution({1: [1, 2]}, 0.0),
        ])
        self.assertEqual(half.calculate_diversity(ids), 0.5)


if __name__ == '__main__':
    unittest.main()
