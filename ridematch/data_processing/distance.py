"""
Distance calculation for ride-sharing routes.
Great-circle (haversine) distances between latitude/longitude pairs.
"""

import math
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from config import SCHEDULE_CONFIG

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = SCHEDULE_CONFIG.get('earth_radius_km', 6371.0)

# (latitude, longitude) in degrees
LatLng = Tuple[float, float]


def haversine_distance(point1: LatLng, point2: LatLng) -> float:
    """
    Great-circle distance in kilometers between two (lat, lon) points.

    Args:
        point1: First point (latitude, longitude)
        point2: Second point (latitude, longitude)

    Returns:
        Distance in km (0.0 for identical points)
    """
    lat1, lon1 = point1[0], point1[1]
    lat2, lon2 = point2[0], point2[1]
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def route_distance(points: Sequence[LatLng]) -> float:
    """Sum of consecutive distances along an ordered sequence of points."""
    if points is None or len(points) < 2:
        return 0.0
    return sum(haversine_distance(points[i], points[i + 1]) for i in range(len(points) - 1))


def travel_time_minutes(distance_km: float, speed_kmh: Optional[float] = None) -> float:
    """Convert a distance to minutes of driving at the average urban speed."""
    speed_kmh = speed_kmh or SCHEDULE_CONFIG['average_speed_kmh']
    return (distance_km / speed_kmh) * 60.0


def is_valid_location(latitude: float, longitude: float) -> bool:
    """Check that coordinates fall inside the valid lat/lon ranges."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


class DistanceCalculator:
    """Builds node-indexed distance matrices for a problem instance."""

    def __init__(self, earth_radius_km: float = EARTH_RADIUS_KM):
        """
        Initialize distance calculator.

        Args:
            earth_radius_km: Sphere radius used by the haversine formula
        """
        self.earth_radius_km = earth_radius_km
        self.distance_matrix: Optional[np.ndarray] = None

    def calculate_distance_matrix(self, coordinates: List[LatLng]) -> np.ndarray:
        """
        Calculate haversine distance matrix using vectorized NumPy operations.

        Args:
            coordinates: List of (latitude, longitude) tuples

        Returns:
            Symmetric distance matrix in km with a zero diagonal
        """
        n_points = len(coordinates)
        if n_points == 0:
            self.distance_matrix = np.zeros((0, 0))
            return self.distance_matrix

        coords_array = np.asarray(coordinates, dtype=float).reshape(n_points, 2)
        lat_rad = np.radians(coords_array[:, 0])
        lon_rad = np.radians(coords_array[:, 1])

        # Pairwise differences via broadcasting: d[i, j] = x[i] - x[j]
        dlat = lat_rad[:, np.newaxis] - lat_rad[np.newaxis, :]
        dlon = lon_rad[:, np.newaxis] - lon_rad[np.newaxis, :]

        a = (np.sin(dlat / 2) ** 2 +
             np.cos(lat_rad[:, np.newaxis]) * np.cos(lat_rad[np.newaxis, :]) *
             np.sin(dlon / 2) ** 2)
        a = np.clip(a, 0.0, 1.0)
        c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

        distance_matrix = self.earth_radius_km * c
        # Force exact symmetry and zero diagonal against rounding noise
        distance_matrix = (distance_matrix + distance_matrix.T) / 2.0
        np.fill_diagonal(distance_matrix, 0.0)

        self.distance_matrix = distance_matrix
        logger.debug(f"Computed {n_points}x{n_points} haversine distance matrix")
        return distance_matrix

    def get_distance(self, from_idx: int, to_idx: int) -> float:
        """Get distance between two matrix indices."""
        if self.distance_matrix is None:
            raise ValueError("Distance matrix not calculated")
        return float(self.distance_matrix[from_idx, to_idx])

    def get_route_distance(self, route: List[int]) -> float:
        """Total distance of a route given as matrix indices."""
        if len(route) < 2:
            return 0.0
        return sum(self.get_distance(route[i], route[i + 1]) for i in range(len(route) - 1))
