"""
Mockup data generator for ride-sharing problems.
Creates synthetic drivers and passengers scattered around a destination.
"""

import math
import os
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from config import MOCKUP_CONFIG, SCHEDULE_CONFIG
from ridematch.core.validators import ConfigValidator

# Approximate km per degree of latitude
KM_PER_DEGREE = 111.32


class MockupDataGenerator:
    """Generates synthetic ride-sharing problem instances."""

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize generator with configuration.

        Args:
            config: Configuration overrides merged over MOCKUP_CONFIG
        """
        self.config = {**MOCKUP_CONFIG, **(config or {})}
        ConfigValidator.validate_mockup_config(self.config)
        self.rng = np.random.default_rng(self.config['seed'])
        self.center = tuple(self.config['center'])

    def _random_points(self, n_points: int) -> List[Tuple[float, float]]:
        """Uniform points in a disc of radius_km around the centre."""
        if n_points <= 0:
            return []
        lat0, lon0 = self.center
        radius = self.config['radius_km'] * np.sqrt(self.rng.random(n_points))
        angle = self.rng.uniform(0.0, 2 * math.pi, n_points)

        lats = lat0 + (radius * np.cos(angle)) / KM_PER_DEGREE
        lons = lon0 + (radius * np.sin(angle)) / (KM_PER_DEGREE * math.cos(math.radians(lat0)))
        return [(round(float(lat), 6), round(float(lon), 6)) for lat, lon in zip(lats, lons)]

    def generate_destination(self, target_time: Optional[str] = None) -> Dict:
        lat, lon = self.center
        return {
            'latitude': lat,
            'longitude': lon,
            'name': 'Destination',
            'target_time': target_time or SCHEDULE_CONFIG['default_target_time']
        }

    def generate_vehicles(self, n_vehicles: Optional[int] = None) -> List[Dict]:
        n_vehicles = self.config['n_vehicles'] if n_vehicles is None else n_vehicles
        points = self._random_points(n_vehicles)
        capacities = self.rng.integers(self.config['capacity_min'], self.config['capacity_max'] + 1,
                                       size=n_vehicles)
        return [
            {
                'id': i + 1,
                'latitude': lat,
                'longitude': lon,
                'capacity': int(capacities[i]),
                'driver_name': f"Driver {i + 1}",
                'is_available': True
            }
            for i, (lat, lon) in enumerate(points)
        ]

    def generate_passengers(self, n_passengers: Optional[int] = None) -> List[Dict]:
        n_passengers = self.config['n_passengers'] if n_passengers is None else n_passengers
        return [
            {
                'id': i + 1,
                'latitude': lat,
                'longitude': lon,
                'name': f"Passenger {i + 1}",
                'is_available': True
            }
            for i, (lat, lon) in enumerate(self._random_points(n_passengers))
        ]

    def generate_dataset(self, target_time: Optional[str] = None) -> Dict:
        """
        Generate a complete dataset dictionary.

        Returns:
            Dictionary with 'destination', 'vehicles', 'passengers' and 'metadata'
        """
        vehicles = self.generate_vehicles()
        passengers = self.generate_passengers()
        return {
            'metadata': {
                'name': f"mockup_{len(vehicles)}v_{len(passengers)}p",
                'source': 'generated',
                'seed': self.config['seed'],
                'radius_km': self.config['radius_km']
            },
            'destination': self.generate_destination(target_time),
            'vehicles': vehicles,
            'passengers': passengers
        }

    @staticmethod
    def export_to_csv(data: Dict, directory: str) -> Dict[str, str]:
        """
        Export generated vehicles and passengers to CSV files.

        Args:
            data: Dataset dictionary from generate_dataset
            directory: Output directory

        Returns:
            Mapping of table name to written file path
        """
        os.makedirs(directory, exist_ok=True)
        paths = {}
        for table in ('vehicles', 'passengers'):
            path = os.path.join(directory, f"{table}.csv")
            pd.DataFrame(data[table]).to_csv(path, index=False)
            paths[table] = path
        return paths


def generate_mockup_data(n_vehicles: int, n_passengers: int,
                         seed: Optional[int] = None,
                         output_dir: Optional[str] = None) -> Dict:
    """
    Convenience function to generate mockup data.

    Args:
        n_vehicles: Number of drivers
        n_passengers: Number of passengers
        seed: Random seed (defaults to MOCKUP_CONFIG)
        output_dir: Optional directory for CSV export

    Returns:
        Dataset dictionary
    """
    config = {'n_vehicles': n_vehicles, 'n_passengers': n_passengers}
    if seed is not None:
        config['seed'] = seed

    generator = MockupDataGenerator(config)
    data = generator.generate_dataset()

    if output_dir:
        generator.export_to_csv(data, output_dir)

    return data
