"""
Pickup-time scheduling.
Propagates the destination arrival deadline backwards along each route.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, Optional, Tuple, Union

from config import SCHEDULE_CONFIG
from ridematch.core.exceptions import InvalidInputError
from ridematch.data_processing.distance import haversine_distance, travel_time_minutes
from ridematch.models.ride_model import Destination, RideSharingProblem, Vehicle
from ridematch.models.route_details import DESTINATION_STOP_ID, RouteDetails
from ridematch.models.solution import Solution

logger = logging.getLogger(__name__)

TargetTime = Union[datetime, time, str]
DistanceFn = Callable[[Tuple[float, float], Tuple[float, float]], float]


def parse_target_time(value: Optional[TargetTime], on_date: Optional[date] = None) -> datetime:
    """
    Turn a target arrival time into a datetime.

    Args:
        value: datetime (returned unchanged), time, or "HH:MM" string;
            None falls back to the configured default
        on_date: Day the time refers to (defaults to today)

    Returns:
        Target arrival datetime

    Raises:
        InvalidInputError: If the string is not a valid HH:MM time
    """
    if value is None:
        value = SCHEDULE_CONFIG['default_target_time']
    if isinstance(value, datetime):
        return value

    on_date = on_date or date.today()
    if isinstance(value, time):
        return datetime.combine(on_date, value)

    if not isinstance(value, str):
        raise InvalidInputError("Target time must be a datetime, time or HH:MM string",
                                field='target_time', value=repr(value))
    try:
        parsed = datetime.strptime(value.strip(), '%H:%M')
    except ValueError as err:
        raise InvalidInputError(f"Malformed target time '{value}', expected HH:MM",
                                field='target_time', value=value) from err

    return datetime.combine(on_date, parsed.time())


class PickupTimeScheduler:
    """Computes per-stop pickup times that meet the destination deadline."""

    def __init__(self, destination: Optional[Destination] = None,
                 average_speed_kmh: Optional[float] = None,
                 distance_fn: Optional[DistanceFn] = None,
                 problem: Optional[RideSharingProblem] = None):
        """
        Initialize scheduler.

        Args:
            destination: Shared destination closing every route
                (defaults to the problem's destination)
            average_speed_kmh: Speed used to convert km into minutes
            distance_fn: Distance between two (lat, lon) points (haversine by default)
            problem: Problem whose distance matrix gives the leg distances
                between its own nodes; other legs use distance_fn
        """
        self.problem = problem
        if destination is None and problem is not None:
            destination = problem.destination
        self.destination = destination
        self.average_speed_kmh = (average_speed_kmh or
                                  (problem.average_speed_kmh if problem is not None else None) or
                                  SCHEDULE_CONFIG['average_speed_kmh'])
        self.distance_fn = distance_fn or haversine_distance

    def _leg_distance(self, from_node: Optional[int], to_node: Optional[int],
                      from_point: Tuple[float, float], to_point: Tuple[float, float]) -> float:
        if self.problem is not None and from_node is not None and to_node is not None:
            return self.problem.get_distance(from_node, to_node)
        return self.distance_fn(from_point, to_point)

    def build_route_details(self, vehicle: Vehicle) -> RouteDetails:
        """
        Stop-by-stop breakdown of a vehicle's route.

        One stop per passenger in visiting order, then the destination stop
        (passenger id 0, name "Destination", flagged is_destination), with
        cumulative totals.
        """
        details = RouteDetails(vehicle_id=vehicle.id, driver_name=vehicle.driver_name)
        problem = self.problem
        current = (vehicle.latitude, vehicle.longitude)
        current_node = problem.vehicle_index.get(vehicle.id) if problem is not None else None

        for passenger in vehicle.passengers:
            point = (passenger.latitude, passenger.longitude)
            node = problem.passenger_index.get(passenger.id) if problem is not None else None
            distance = self._leg_distance(current_node, node, current, point)
            details.add_stop(passenger.id, passenger.name, distance,
                             travel_time_minutes(distance, self.average_speed_kmh))
            current, current_node = point, node

        if self.destination is not None and vehicle.passengers:
            point = (self.destination.latitude, self.destination.longitude)
            node = None
            if problem is not None and problem.destination is self.destination:
                node = problem.destination_index
            distance = self._leg_distance(current_node, node, current, point)
            details.add_stop(DESTINATION_STOP_ID, self.destination.name or "Destination", distance,
                             travel_time_minutes(distance, self.average_speed_kmh),
                             is_destination=True)

        details.calculate_cumulatives()
        return details

    def schedule_vehicle(self, vehicle: Vehicle, target_time: TargetTime,
                         now: Optional[datetime] = None) -> RouteDetails:
        """
        Compute pickup times for one vehicle.

        pickup(stop) = target - (total route time - cumulative time at stop).
        Writes the pickup time onto each passenger and stop, the departure
        time onto the route and the route totals onto the vehicle. When now
        is given, stops whose pickup precedes it are flagged infeasible and
        reported as warnings.

        Args:
            vehicle: Vehicle with an ordered route
            target_time: Required arrival time at the destination
            now: Current time for the feasibility check

        Returns:
            Scheduled route details
        """
        target = parse_target_time(target_time, now.date() if now else None)
        details = self.build_route_details(vehicle)

        vehicle.total_distance = details.total_distance
        vehicle.total_time = details.total_time
        if not details.stop_details:
            return details

        last_cumulative = details.stop_details[-1].cumulative_time
        details.departure_time = target - timedelta(minutes=last_cumulative)

        for index, stop in enumerate(details.stop_details):
            stop.arrival_time = target - timedelta(minutes=last_cumulative - stop.cumulative_time)
            if index < len(vehicle.passengers):
                vehicle.passengers[index].pickup_time = stop.arrival_time

            if now is not None and not stop.is_destination and stop.arrival_time < now:
                stop.is_infeasible = True
                details.warnings.append(
                    f"Passenger {stop.passenger_id} pickup at {stop.arrival_time:%H:%M} "
                    f"is before current time {now:%H:%M}"
                )

        if details.warnings:
            logger.warning(f"Vehicle {vehicle.id}: {len(details.warnings)} infeasible pickup(s)")

        return details

    def schedule_solution(self, solution: Solution, target_time: TargetTime,
                          now: Optional[datetime] = None) -> Dict[int, RouteDetails]:
        """
        Schedule every vehicle that carries passengers.

        Returns:
            Mapping vehicle id -> scheduled route details
        """
        target = parse_target_time(target_time, now.date() if now else None)
        schedules = {}
        for vehicle in solution.vehicles:
            if vehicle.passengers:
                schedules[vehicle.id] = self.schedule_vehicle(vehicle, target, now)
        return schedules
