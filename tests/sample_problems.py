"""
Shared test instances.

Every point lies on the equator, so distances are proportional to the
longitude difference: 0.01 degree is about 1.112 km.
"""

import math

from ridematch.models.ride_model import Destination, Passenger, RideSharingProblem, Vehicle
from ridematch.models.solution import Solution

KM_PER_DEGREE = 6371.0 * math.pi / 180.0


def degrees_to_km(degrees: float) -> float:
    return degrees * KM_PER_DEGREE


def make_vehicles(capacity=2):
    return [
        Vehicle(1, 0.0, 0.10, capacity, driver_name="Alice"),
        Vehicle(2, 0.0, -0.10, capacity, driver_name="Bob"),
    ]


def make_passengers():
    return [
        Passenger(1, 0.0, 0.08, name="P1"),
        Passenger(2, 0.0, 0.05, name="P2"),
        Passenger(3, 0.0, -0.08, name="P3"),
        Passenger(4, 0.0, -0.05, name="P4"),
    ]


def make_destination(target_time="08:00"):
    return Destination(0.0, 0.0, name="Office", target_time=target_time)


def make_problem(capacity=2, **kwargs):
    return RideSharingProblem(make_vehicles(capacity), make_passengers(), make_destination(), **kwargs)


def build_solution(problem, routes):
    """Solution over the problem fleet with routes given as {vehicle_id: [passenger ids]}."""
    solution = Solution(vehicles=problem.clone_fleet())
    for vehicle_id, passenger_ids in routes.items():
        vehicle = solution.get_vehicle(vehicle_id)
        vehicle.passengers = [problem.get_passenger_by_id(pid).clone() for pid in passenger_ids]
    return solution


# Optimal total distance of the standard instance: each vehicle drives 0.10 degree
OPTIMAL_DISTANCE_KM = degrees_to_km(0.20)
