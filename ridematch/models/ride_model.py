"""
Ride-sharing problem model and data structures.
Defines passengers, vehicles, the shared destination and the problem instance.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import numpy as np

from config import SCHEDULE_CONFIG
from ridematch.core.exceptions import InvalidInputError
from ridematch.core.validators import InputValidator
from ridematch.data_processing.distance import (
    DistanceCalculator, haversine_distance, travel_time_minutes
)


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""
    latitude: float
    longitude: float

    def distance_to(self, other: 'Coordinate') -> float:
        """Haversine distance in km to another coordinate."""
        return haversine_distance(self.as_tuple(), other.as_tuple())

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass
class Passenger:
    """A passenger waiting to be picked up and driven to the destination."""
    id: int
    latitude: float
    longitude: float
    name: str = ""
    is_available: bool = True
    assigned_vehicle_id: Optional[int] = None
    pickup_time: Optional[datetime] = None
    address: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    def distance_to(self, latitude: float, longitude: float) -> float:
        """Distance in km from this passenger to a location."""
        return haversine_distance((self.latitude, self.longitude), (latitude, longitude))

    def clone(self) -> 'Passenger':
        """Create an independent copy of the passenger."""
        return Passenger(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            name=self.name,
            is_available=self.is_available,
            assigned_vehicle_id=self.assigned_vehicle_id,
            pickup_time=self.pickup_time,
            address=self.address
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'latitude': float(self.latitude),
            'longitude': float(self.longitude),
            'is_available': bool(self.is_available),
            'assigned_vehicle_id': self.assigned_vehicle_id,
            'pickup_time': self.pickup_time.isoformat() if self.pickup_time else None,
            'address': self.address
        }


@dataclass
class Vehicle:
    """A driver's vehicle: start location, seats and the ordered pickup route."""
    id: int
    latitude: float
    longitude: float
    capacity: int
    driver_name: str = ""
    is_available: bool = True
    passengers: List[Passenger] = field(default_factory=list)
    total_distance: float = 0.0
    total_time: float = 0.0
    address: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @property
    def remaining_capacity(self) -> int:
        return self.capacity - len(self.passengers)

    def distance_to(self, latitude: float, longitude: float) -> float:
        """Distance in km from the vehicle start to a location."""
        return haversine_distance((self.latitude, self.longitude), (latitude, longitude))

    def has_capacity(self, required_seats: int = 1) -> bool:
        """Check if the vehicle has room for more passengers."""
        return len(self.passengers) + required_seats <= self.capacity

    def is_over_capacity(self) -> bool:
        return len(self.passengers) > self.capacity

    def get_passenger_ids(self) -> List[int]:
        return [p.id for p in self.passengers]

    def clone(self, include_passengers: bool = True) -> 'Vehicle':
        """Create a deep copy of the vehicle (passengers cloned too)."""
        return Vehicle(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            capacity=self.capacity,
            driver_name=self.driver_name,
            is_available=self.is_available,
            passengers=[p.clone() for p in self.passengers] if include_passengers else [],
            total_distance=self.total_distance if include_passengers else 0.0,
            total_time=self.total_time if include_passengers else 0.0,
            address=self.address
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'driver_name': self.driver_name,
            'latitude': float(self.latitude),
            'longitude': float(self.longitude),
            'capacity': int(self.capacity),
            'total_distance': float(self.total_distance),
            'total_time': float(self.total_time),
            'passengers': [p.to_dict() for p in self.passengers]
        }


@dataclass
class Destination:
    """The shared drop-off point every route ends at."""
    latitude: float
    longitude: float
    name: str = "Destination"
    target_time: Optional[str] = None
    address: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


class RideSharingProblem:
    """
    A complete ride-sharing instance.

    Holds the available fleet and passengers, the shared destination and a
    node-indexed distance matrix. Node layout: vehicle starts first, then
    passengers, then the destination (when present).
    """

    def __init__(self,
                 vehicles: List[Vehicle],
                 passengers: List[Passenger],
                 destination: Optional[Destination] = None,
                 distance_matrix: Optional[np.ndarray] = None,
                 average_speed_kmh: Optional[float] = None):
        """
        Initialize ride-sharing problem.

        Args:
            vehicles: Fleet (unavailable vehicles are ignored)
            passengers: Passengers (unavailable passengers are ignored)
            destination: Shared destination, or None to end routes at the last pickup
            distance_matrix: Optional pre-computed matrix in km over the node layout
            average_speed_kmh: Speed used to turn distances into minutes

        Raises:
            InvalidInputError: If no vehicle is available or records are malformed
        """
        InputValidator.validate_vehicles(vehicles)
        InputValidator.validate_passengers(passengers)
        if destination is not None:
            InputValidator.validate_coordinate(destination.latitude, destination.longitude,
                                               field='destination')

        self.vehicles = [v for v in vehicles if v.is_available]
        if not self.vehicles:
            raise InvalidInputError("No available vehicles found", field='vehicles')

        self.passengers = [p for p in passengers if p.is_available]
        self.destination = destination
        self.average_speed_kmh = average_speed_kmh or SCHEDULE_CONFIG['average_speed_kmh']
        if self.average_speed_kmh <= 0:
            raise InvalidInputError("Average speed must be positive",
                                    field='average_speed_kmh', value=self.average_speed_kmh)

        self.vehicle_index = {v.id: i for i, v in enumerate(self.vehicles)}
        offset = len(self.vehicles)
        self.passenger_index = {p.id: offset + i for i, p in enumerate(self.passengers)}
        self.destination_index = offset + len(self.passengers) if destination is not None else None
        self.num_nodes = offset + len(self.passengers) + (1 if destination is not None else 0)

        self._passengers_by_id = {p.id: p for p in self.passengers}
        self._vehicles_by_id = {v.id: v for v in self.vehicles}

        if distance_matrix is None:
            distance_matrix = DistanceCalculator().calculate_distance_matrix(self.get_all_coordinates())
        else:
            distance_matrix = np.asarray(distance_matrix, dtype=float)
            if distance_matrix.shape != (self.num_nodes, self.num_nodes):
                raise InvalidInputError(
                    f"Distance matrix shape {distance_matrix.shape} does not match "
                    f"{self.num_nodes} nodes",
                    field='distance_matrix'
                )
        self.distance_matrix = distance_matrix
        # Plain lists index faster than numpy scalars in the hot loops
        self._distance_rows = distance_matrix.tolist()

    def get_all_coordinates(self) -> List[Tuple[float, float]]:
        """Coordinates in node order: vehicles, passengers, destination."""
        coords = [(v.latitude, v.longitude) for v in self.vehicles]
        coords.extend((p.latitude, p.longitude) for p in self.passengers)
        if self.destination is not None:
            coords.append((self.destination.latitude, self.destination.longitude))
        return coords

    def get_passenger_by_id(self, passenger_id: int) -> Optional[Passenger]:
        return self._passengers_by_id.get(passenger_id)

    def get_vehicle_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        return self._vehicles_by_id.get(vehicle_id)

    def get_passenger_ids(self) -> List[int]:
        return [p.id for p in self.passengers]

    def get_distance(self, from_idx: int, to_idx: int) -> float:
        """Distance in km between two node indices."""
        return self._distance_rows[from_idx][to_idx]

    def distance_from_start(self, vehicle: Vehicle, passenger: Passenger) -> float:
        """Distance in km from a vehicle's start location to a passenger."""
        v_idx = self.vehicle_index.get(vehicle.id)
        p_idx = self.passenger_index.get(passenger.id)
        if v_idx is None or p_idx is None:
            return haversine_distance((vehicle.latitude, vehicle.longitude),
                                      (passenger.latitude, passenger.longitude))
        return self._distance_rows[v_idx][p_idx]

    def travel_time(self, distance_km: float) -> float:
        """Minutes needed to cover a distance at the average speed."""
        return travel_time_minutes(distance_km, self.average_speed_kmh)

    def calculate_route_distance(self, vehicle: Vehicle, passengers: Optional[List[Passenger]] = None) -> float:
        """
        Distance of start -> passengers in order -> destination.

        Args:
            vehicle: Vehicle whose start location opens the route
            passengers: Visiting order (defaults to the vehicle's own route)

        Returns:
            Route distance in km (0.0 for an empty route)
        """
        passengers = vehicle.passengers if passengers is None else passengers
        if not passengers:
            return 0.0

        rows = self._distance_rows
        current = self.vehicle_index.get(vehicle.id)
        current_point = (vehicle.latitude, vehicle.longitude)
        total = 0.0
        for passenger in passengers:
            node = self.passenger_index.get(passenger.id)
            point = (passenger.latitude, passenger.longitude)
            if current is not None and node is not None:
                total += rows[current][node]
            else:
                total += haversine_distance(current_point, point)
            current, current_point = node, point

        if self.destination is not None:
            dest_point = (self.destination.latitude, self.destination.longitude)
            if current is not None:
                total += rows[current][self.destination_index]
            else:
                total += haversine_distance(current_point, dest_point)
        return total

    def calculate_route_metrics(self, vehicle: Vehicle) -> Tuple[float, float]:
        """Return (distance in km, time in minutes) of the vehicle's route."""
        distance = self.calculate_route_distance(vehicle)
        return distance, self.travel_time(distance)

    def clone_fleet(self) -> List[Vehicle]:
        """Fresh copies of every available vehicle with an empty route."""
        return [v.clone(include_passengers=False) for v in self.vehicles]

    def total_capacity(self) -> int:
        return sum(v.capacity for v in self.vehicles)

    def is_capacity_sufficient(self) -> bool:
        """Check if the fleet can seat every available passenger."""
        return self.total_capacity() >= len(self.passengers)

    def get_problem_info(self) -> Dict:
        """Get problem information summary."""
        return {
            'num_vehicles': len(self.vehicles),
            'num_passengers': len(self.passengers),
            'total_capacity': int(self.total_capacity()),
            'capacity_sufficient': bool(self.is_capacity_sufficient()),
            'has_destination': self.destination is not None,
            'average_speed_kmh': float(self.average_speed_kmh)
        }
