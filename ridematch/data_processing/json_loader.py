"""
JSON dataset loader for ride-sharing problems.
Loads destination, vehicles and passengers from JSON files.
"""

import json
import os
import logging
from typing import Dict, List, Optional, Tuple

from ridematch.core.exceptions import InvalidInputError
from ridematch.models.ride_model import Destination, Passenger, Vehicle

logger = logging.getLogger(__name__)

VEHICLE_FIELDS = ['id', 'latitude', 'longitude', 'capacity']
PASSENGER_FIELDS = ['id', 'latitude', 'longitude']
DESTINATION_FIELDS = ['latitude', 'longitude']


def _require(record: Dict, fields: List[str], kind: str):
    for field in fields:
        if field not in record:
            raise InvalidInputError(f"{kind} missing required field: {field}", field=field)


def vehicle_from_dict(record: Dict) -> Vehicle:
    _require(record, VEHICLE_FIELDS, 'Vehicle')
    return Vehicle(
        id=int(record['id']),
        latitude=float(record['latitude']),
        longitude=float(record['longitude']),
        capacity=int(record['capacity']),
        driver_name=record.get('driver_name', ''),
        is_available=bool(record.get('is_available', True)),
        address=record.get('address')
    )


def passenger_from_dict(record: Dict) -> Passenger:
    _require(record, PASSENGER_FIELDS, 'Passenger')
    return Passenger(
        id=int(record['id']),
        latitude=float(record['latitude']),
        longitude=float(record['longitude']),
        name=record.get('name', ''),
        is_available=bool(record.get('is_available', True)),
        address=record.get('address')
    )


def destination_from_dict(record: Dict) -> Destination:
    _require(record, DESTINATION_FIELDS, 'Destination')
    return Destination(
        latitude=float(record['latitude']),
        longitude=float(record['longitude']),
        name=record.get('name', 'Destination'),
        target_time=record.get('target_time'),
        address=record.get('address')
    )


class JSONDatasetLoader:
    """Loads ride-sharing datasets from JSON format."""

    def __init__(self, datasets_dir: str = "data"):
        """
        Initialize JSON dataset loader.

        Args:
            datasets_dir: Directory searched for dataset names without a path
        """
        self.datasets_dir = datasets_dir

    def _resolve(self, dataset_name: str) -> str:
        if os.path.exists(dataset_name):
            return dataset_name
        if not dataset_name.endswith('.json'):
            dataset_name += '.json'
        filepath = os.path.join(self.datasets_dir, dataset_name)
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Dataset not found: {dataset_name}")
        return filepath

    def load_dataset(self, dataset_name: str) -> Dict:
        """
        Load raw dataset dictionary.

        Args:
            dataset_name: File path, or name inside datasets_dir (with or without .json)

        Returns:
            Dictionary with 'destination', 'vehicles', 'passengers' and 'metadata'
        """
        filepath = self._resolve(dataset_name)
        with open(filepath, 'r', encoding='utf-8') as f:
            json_data = json.load(f)

        for key in ('destination', 'vehicles', 'passengers'):
            if key not in json_data:
                raise InvalidInputError(f"Dataset missing section: {key}", field=key)

        metadata = json_data.get('metadata', {}).copy()
        metadata.setdefault('name', os.path.splitext(os.path.basename(filepath))[0])

        logger.info(f"Loaded dataset {metadata['name']}: {len(json_data['vehicles'])} vehicles, "
                    f"{len(json_data['passengers'])} passengers")
        return {
            'destination': json_data['destination'],
            'vehicles': json_data['vehicles'],
            'passengers': json_data['passengers'],
            'metadata': metadata
        }

    def load_models(self, dataset_name: str) -> Tuple[List[Vehicle], List[Passenger], Destination]:
        """Load a dataset and build model objects from it."""
        return models_from_dict(self.load_dataset(dataset_name))

    def list_available_datasets(self) -> List[Dict]:
        """
        List datasets found in datasets_dir.

        Returns:
            List of dataset information
        """
        datasets = []
        if not os.path.isdir(self.datasets_dir):
            return datasets

        for filename in sorted(os.listdir(self.datasets_dir)):
            if not filename.endswith('.json'):
                continue
            try:
                data = self.load_dataset(os.path.join(self.datasets_dir, filename))
            except (InvalidInputError, ValueError, OSError) as e:
                logger.warning(f"Error reading {filename}: {e}")
                continue
            datasets.append({
                'name': filename.replace('.json', ''),
                'filename': filename,
                'metadata': data['metadata'],
                'num_vehicles': len(data['vehicles']),
                'num_passengers': len(data['passengers'])
            })

        return datasets


def models_from_dict(data: Dict) -> Tuple[List[Vehicle], List[Passenger], Destination]:
    """Build (vehicles, passengers, destination) from a dataset dictionary."""
    vehicles = [vehicle_from_dict(v) for v in data['vehicles']]
    passengers = [passenger_from_dict(p) for p in data['passengers']]
    destination = destination_from_dict(data['destination'])
    return vehicles, passengers, destination


def save_dataset(data: Dict, filepath: str):
    """Write a dataset dictionary as JSON."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def load_json_dataset(dataset_name: str,
                      datasets_dir: str = "data") -> Tuple[List[Vehicle], List[Passenger], Destination]:
    """
    Convenience function to load a JSON dataset as model objects.

    Args:
        dataset_name: Name or path of the dataset
        datasets_dir: Directory containing datasets

    Returns:
        Tuple of (vehicles, passengers, destination)
    """
    loader = JSONDatasetLoader(datasets_dir)
    return loader.load_models(dataset_name)
