"""
Result export module for the RideMatch optimizer.
Exports routes, pickup schedules and GA evolution data for analysis.
"""

import csv
import json
import os
import logging
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from ridematch.models.route_details import RouteDetails
from ridematch.models.solution import Solution

logger = logging.getLogger(__name__)

ROUTE_COLUMNS = [
    'vehicle_id', 'driver_name', 'stop_number', 'passenger_id', 'passenger_name',
    'distance_from_previous', 'time_from_previous', 'cumulative_distance',
    'cumulative_time', 'pickup_time', 'is_infeasible', 'is_destination'
]


def routes_to_dataframe(solution: Solution,
                        schedules: Optional[Dict[int, RouteDetails]] = None) -> pd.DataFrame:
    """
    One row per stop of every used vehicle.

    Args:
        solution: Final solution
        schedules: Scheduled route details keyed by vehicle id; when missing,
            rows carry the passenger order only

    Returns:
        DataFrame with ROUTE_COLUMNS
    """
    rows = []
    for vehicle in solution.get_used_vehicles():
        details = (schedules or {}).get(vehicle.id)
        if details is not None:
            for stop in details.stop_details:
                rows.append({
                    'vehicle_id': vehicle.id,
                    'driver_name': vehicle.driver_name,
                    'stop_number': stop.stop_number,
                    'passenger_id': stop.passenger_id,
                    'passenger_name': stop.passenger_name,
                    'distance_from_previous': round(stop.distance_from_previous, 3),
                    'time_from_previous': round(stop.time_from_previous, 2),
                    'cumulative_distance': round(stop.cumulative_distance, 3),
                    'cumulative_time': round(stop.cumulative_time, 2),
                    'pickup_time': stop.get_formatted_time(),
                    'is_infeasible': stop.is_infeasible,
                    'is_destination': stop.is_destination
                })
        else:
            for number, passenger in enumerate(vehicle.passengers, start=1):
                rows.append({
                    'vehicle_id': vehicle.id,
                    'driver_name': vehicle.driver_name,
                    'stop_number': number,
                    'passenger_id': passenger.id,
                    'passenger_name': passenger.name,
                    'pickup_time': passenger.pickup_time.strftime('%H:%M') if passenger.pickup_time else None,
                    'is_destination': False
                })

    return pd.DataFrame(rows, columns=ROUTE_COLUMNS)


def vehicles_to_dataframe(solution: Solution) -> pd.DataFrame:
    """One summary row per vehicle."""
    rows = [{
        'vehicle_id': v.id,
        'driver_name': v.driver_name,
        'capacity': v.capacity,
        'passengers': len(v.passengers),
        'total_distance': round(v.total_distance, 3),
        'total_time': round(v.total_time, 2)
    } for v in solution.vehicles]
    return pd.DataFrame(rows, columns=['vehicle_id', 'driver_name', 'capacity', 'passengers',
                                       'total_distance', 'total_time'])


class ResultExporter:
    """Exports RideMatch results in various formats."""

    def __init__(self, output_dir: str = "results"):
        """
        Initialize result exporter.

        Args:
            output_dir: Output directory for results
        """
        self.output_dir = output_dir
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        os.makedirs(output_dir, exist_ok=True)

    def export_evolution_data(self, evolution_data: List[Dict],
                              filename: Optional[str] = None) -> str:
        """
        Export GA evolution data to CSV.

        Args:
            evolution_data: List of generation data
            filename: Output filename (auto-generated if None)

        Returns:
            Path to exported file
        """
        if filename is None:
            filename = f"evolution_data_{self.timestamp}.csv"

        filepath = os.path.join(self.output_dir, filename)

        csv_data = []
        for gen_data in evolution_data:
            csv_data.append({
                'generation': gen_data.get('generation', 0),
                'evaluated_solutions': gen_data.get('evaluated_solutions', 0),
                'min_fitness': gen_data.get('min_fitness', 0),
                'max_fitness': gen_data.get('max_fitness', 0),
                'avg_fitness': gen_data.get('avg_fitness', 0),
                'std_fitness': gen_data.get('std_fitness', 0),
                'best_fitness': gen_data.get('best_fitness', 0),
                'best_distance': gen_data.get('best_distance', 0),
                'avg_distance': gen_data.get('avg_distance', 0),
                'diversity': gen_data.get('diversity', 0)
            })

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            if csv_data:
                writer = csv.DictWriter(f, fieldnames=csv_data[0].keys())
                writer.writeheader()
                writer.writerows(csv_data)

        logger.info(f"Evolution data exported to: {filepath}")
        return filepath

    def export_routes(self, solution: Solution,
                      schedules: Optional[Dict[int, RouteDetails]] = None,
                      filename: Optional[str] = None) -> str:
        """
        Export the stop-by-stop pickup schedule to CSV.

        Returns:
            Path to exported file
        """
        if filename is None:
            filename = f"routes_{self.timestamp}.csv"

        filepath = os.path.join(self.output_dir, filename)
        routes_to_dataframe(solution, schedules).to_csv(filepath, index=False)

        logger.info(f"Routes exported to: {filepath}")
        return filepath

    def export_vehicle_summary(self, solution: Solution, filename: Optional[str] = None) -> str:
        if filename is None:
            filename = f"vehicles_{self.timestamp}.csv"

        filepath = os.path.join(self.output_dir, filename)
        vehicles_to_dataframe(solution).to_csv(filepath, index=False)

        logger.info(f"Vehicle summary exported to: {filepath}")
        return filepath

    def export_solution_json(self, solution: Solution, statistics: Optional[Dict] = None,
                             schedules: Optional[Dict[int, RouteDetails]] = None,
                             filename: Optional[str] = None) -> str:
        """
        Save the solution, its schedules and run statistics as JSON.

        Returns:
            Path to exported file
        """
        if filename is None:
            filename = f"solution_{self.timestamp}.json"

        filepath = os.path.join(self.output_dir, filename)
        payload = {
            'solution': solution.to_dict(),
            'schedules': {str(vid): details.to_dict() for vid, details in (schedules or {}).items()},
            'statistics': statistics or {}
        }
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, default=str)

        logger.info(f"Solution exported to: {filepath}")
        return filepath


def export_all_results(solution: Solution, statistics: Dict, evolution_data: List[Dict],
                       schedules: Optional[Dict[int, RouteDetails]] = None,
                       output_dir: str = "results") -> Dict[str, str]:
    """
    Export all result files.

    Args:
        solution: Final solution
        statistics: GA execution statistics
        evolution_data: GA evolution data
        schedules: Scheduled route details keyed by vehicle id
        output_dir: Output directory

    Returns:
        Dictionary of exported file paths
    """
    exporter = ResultExporter(output_dir)

    exported_files = {}
    exported_files['evolution'] = exporter.export_evolution_data(evolution_data)
    exported_files['routes'] = exporter.export_routes(solution, schedules)
    exported_files['vehicles'] = exporter.export_vehicle_summary(solution)
    exported_files['solution'] = exporter.export_solution_json(solution, statistics, schedules)

    return exported_files
