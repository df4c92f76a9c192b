"""
Per-stop route breakdown for display and scheduling.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

# Passenger id shown on the closing destination stop
DESTINATION_STOP_ID = 0


@dataclass
class StopDetail:
    """One stop of a route with leg and cumulative metrics."""
    stop_number: int
    passenger_id: int
    passenger_name: str
    distance_from_previous: float
    time_from_previous: float
    cumulative_distance: float = 0.0
    cumulative_time: float = 0.0
    arrival_time: Optional[datetime] = None
    is_infeasible: bool = False
    is_destination: bool = False

    def calculate_arrival_time(self, start_time: datetime) -> datetime:
        """Arrival at this stop when the route leaves at start_time."""
        return start_time + timedelta(minutes=self.cumulative_time)

    def get_formatted_time(self) -> str:
        return self.arrival_time.strftime('%H:%M') if self.arrival_time else '--:--'

    def to_dict(self) -> Dict:
        return {
            'stop_number': self.stop_number,
            'passenger_id': self.passenger_id,
            'passenger_name': self.passenger_name,
            'distance_from_previous': float(self.distance_from_previous),
            'time_from_previous': float(self.time_from_previous),
            'cumulative_distance': float(self.cumulative_distance),
            'cumulative_time': float(self.cumulative_time),
            'arrival_time': self.arrival_time.isoformat() if self.arrival_time else None,
            'is_infeasible': bool(self.is_infeasible),
            'is_destination': bool(self.is_destination)
        }


@dataclass
class RouteDetails:
    """Stop-by-stop breakdown of one vehicle's route."""
    vehicle_id: int
    driver_name: str = ""
    total_distance: float = 0.0
    total_time: float = 0.0
    stop_details: List[StopDetail] = field(default_factory=list)
    departure_time: Optional[datetime] = None
    warnings: List[str] = field(default_factory=list)

    def add_stop(self, passenger_id: int, passenger_name: str,
                 distance_from_previous: float, time_from_previous: float,
                 is_destination: bool = False) -> StopDetail:
        stop = StopDetail(
            stop_number=len(self.stop_details) + 1,
            passenger_id=passenger_id,
            passenger_name=passenger_name,
            distance_from_previous=distance_from_previous,
            time_from_previous=time_from_previous,
            is_destination=is_destination
        )
        self.stop_details.append(stop)
        return stop

    def calculate_cumulatives(self):
        """Fill cumulative distance/time on every stop and the route totals."""
        cumulative_distance = 0.0
        cumulative_time = 0.0
        for stop in self.stop_details:
            cumulative_distance += stop.distance_from_previous
            cumulative_time += stop.time_from_previous
            stop.cumulative_distance = cumulative_distance
            stop.cumulative_time = cumulative_time

        self.total_distance = cumulative_distance
        self.total_time = cumulative_time

    def get_passenger_stops(self) -> List[StopDetail]:
        return [s for s in self.stop_details if not s.is_destination]

    def has_infeasible_stops(self) -> bool:
        return any(s.is_infeasible for s in self.stop_details)

    def to_dict(self) -> Dict:
        return {
            'vehicle_id': self.vehicle_id,
            'driver_name': self.driver_name,
            'total_distance': float(self.total_distance),
            'total_time': float(self.total_time),
            'departure_time': self.departure_time.isoformat() if self.departure_time else None,
            'warnings': list(self.warnings),
            'stops': [s.to_dict() for s in self.stop_details]
        }
