"""
Encoded polyline format (1e-5 precision) for route geometry.
Used by the map-rendering layer to draw vehicle routes compactly.
"""

from typing import List, Optional, Sequence, Tuple

import polyline as pl

from ridematch.models.ride_model import Destination, Vehicle

PRECISION = 5


def encode(points: Sequence[Tuple[float, float]]) -> str:
    """
    Encode (lat, lon) points as a polyline string.

    Args:
        points: Ordered (latitude, longitude) pairs

    Returns:
        Encoded polyline ("" for no points)
    """
    if not points:
        return ""
    return pl.encode([(float(lat), float(lon)) for lat, lon in points], precision=PRECISION)


def decode(encoded: str) -> List[Tuple[float, float]]:
    """
    Decode a polyline string back into (lat, lon) points.

    Raises:
        ValueError: If the string ends in the middle of a value
    """
    if not encoded:
        return []
    try:
        return [tuple(point) for point in pl.decode(encoded, precision=PRECISION)]
    except IndexError as err:
        raise ValueError("Truncated polyline string") from err


def route_polyline(vehicle: Vehicle, destination: Optional[Destination] = None) -> str:
    """Polyline through the vehicle start, its pickups and the destination."""
    points = [(vehicle.latitude, vehicle.longitude)]
    points.extend((p.latitude, p.longitude) for p in vehicle.passengers)
    if destination is not None:
        points.append((destination.latitude, destination.longitude))
    return encode(points)
