"""
Unit tests for data processing: dataset loading, mockup generation and polylines.
"""

import json
import os
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ridematch.core.exceptions import InvalidConfigurationError, InvalidInputError
from ridematch.data_processing.distance import haversine_distance
from ridematch.data_processing.generator import MockupDataGenerator, generate_mockup_data
from ridematch.data_processing.json_loader import (
    JSONDatasetLoader, load_json_dataset, models_from_dict, passenger_from_dict, save_dataset,
    vehicle_from_dict
)
from ridematch.data_processing.polyline import decode, encode, route_polyline
from ridematch.models.ride_model import Destination, Passenger, Vehicle

SAMPLE_DATASET = {
    'metadata': {'name': 'office', 'description': 'Two drivers, three riders'},
    'destination': {'latitude': 32.0853, 'longitude': 34.7818, 'name': 'HQ', 'target_time': '08:30'},
    'vehicles': [
        {'id': 1, 'latitude': 32.10, 'longitude': 34.80, 'capacity': 3, 'driver_name': 'Noa'},
        {'id': 2, 'latitude': 32.05, 'longitude': 34.76, 'capacity': 2, 'is_available': False},
    ],
    'passengers': [
        {'id': 10, 'latitude': 32.09, 'longitude': 34.79, 'name': 'Lior'},
        {'id': 11, 'latitude': 32.07, 'longitude': 34.77},
        {'id': 12, 'latitude': 32.08, 'longitude': 34.78, 'address': 'Herzl 1'},
    ],
}


class TestJSONDatasetLoader(unittest.TestCase):
    """Test loading datasets from JSON."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, 'office.json')
        save_dataset(SAMPLE_DATASET, self.path)
        self.loader = JSONDatasetLoader(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_load_by_name_and_path(self):
        by_name = self.loader.load_dataset('office')
        by_path = self.loader.load_dataset(self.path)

        self.assertEqual(by_name['metadata']['name'], 'office')
        self.assertEqual(by_name['vehicles'], by_path['vehicles'])

    def test_load_models(self):
        vehicles, passengers, destination = self.loader.load_models('office.json')

        self.assertEqual([v.id for v in vehicles], [1, 2])
        self.assertFalse(vehicles[1].is_available)
        self.assertEqual(vehicles[0].driver_name, 'Noa')
        self.assertEqual(passengers[0].name, 'Lior')
        self.assertEqual(passengers[2].address, 'Herzl 1')
        self.assertEqual(destination.target_time, '08:30')
        self.assertEqual(destination.name, 'HQ')

    def test_missing_dataset(self):
        with self.assertRaises(FileNotFoundError):
            self.loader.load_dataset('nowhere')

    def test_missing_section(self):
        path = os.path.join(self.tmpdir.name, 'broken.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({'vehicles': [], 'passengers': []}, f)
        with self.assertRaises(InvalidInputError):
            self.loader.load_dataset(path)

    def test_missing_record_field(self):
        with self.assertRaises(InvalidInputError):
            vehicle_from_dict({'id': 1, 'latitude': 0.0, 'longitude': 0.0})
        with self.assertRaises(InvalidInputError):
            passenger_from_dict({'latitude': 0.0, 'longitude': 0.0})

    def test_list_available_datasets(self):
        with open(os.path.join(self.tmpdir.name, 'notes.txt'), 'w', encoding='utf-8') as f:
            f.write('ignored')
        with open(os.path.join(self.tmpdir.name, 'corrupt.json'), 'w', encoding='utf-8') as f:
            f.write('{not json')

        datasets = self.loader.list_available_datasets()
        self.assertEqual([d['name'] for d in datasets], ['office'])
        self.assertEqual(datasets[0]['num_vehicles'], 2)
        self.assertEqual(datasets[0]['num_passengers'], 3)

    def test_list_missing_directory(self):
        self.assertEqual(JSONDatasetLoader(os.path.join(self.tmpdir.name, 'none')).list_available_datasets(), [])

    def test_convenience_function(self):
        vehicles, passengers, destination = load_json_dataset('office', self.tmpdir.name)
        self.assertEqual(len(vehicles), 2)
        self.assertEqual(len(passengers), 3)
        self.assertIsInstance(destination, Destination)


class TestMockupDataGenerator(unittest.TestCase):
    """Test synthetic instance generation."""

    def test_counts_ids_and_capacities(self):
        data = MockupDataGenerator({'n_vehicles': 4, 'n_passengers': 9, 'seed': 5}).generate_dataset('07:45')

        self.assertEqual([v['id'] for v in data['vehicles']], [1, 2, 3, 4])
        self.assertEqual([p['id'] for p in data['passengers']], list(range(1, 10)))
        for vehicle in data['vehicles']:
            self.assertTrue(2 <= vehicle['capacity'] <= 5)
        self.assertEqual(data['destination']['target_time'], '07:45')
        self.assertEqual(data['metadata']['source'], 'generated')

    def test_points_within_radius(self):
        generator = MockupDataGenerator({'radius_km': 3.0, 'n_passengers': 50, 'seed': 8})
        center = generator.center
        for passenger in generator.generate_passengers():
            distance = haversine_distance(center, (passenger['latitude'], passenger['longitude']))
            self.assertLessEqual(distance, 3.0 * 1.01)

    def test_same_seed_same_data(self):
        first = MockupDataGenerator({'seed': 11}).generate_dataset()
        second = MockupDataGenerator({'seed': 11}).generate_dataset()
        self.assertEqual(first, second)

    def test_generated_data_builds_models(self):
        vehicles, passengers, destination = models_from_dict(generate_mockup_data(3, 7, seed=2))
        self.assertEqual(len(vehicles), 3)
        self.assertEqual(len(passengers), 7)
        self.assertTrue(all(isinstance(v, Vehicle) for v in vehicles))

    def test_invalid_config(self):
        with self.assertRaises(InvalidConfigurationError):
            MockupDataGenerator({'n_vehicles': -1})

    def test_export_to_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = generate_mockup_data(2, 5, seed=1, output_dir=tmpdir)
            self.assertTrue(os.path.exists(os.path.join(tmpdir, 'vehicles.csv')))
            with open(os.path.join(tmpdir, 'passengers.csv'), encoding='utf-8') as f:
                lines = f.read().strip().splitlines()
            self.assertEqual(len(lines), len(data['passengers']) + 1)


class TestPolyline(unittest.TestCase):
    """Test the encoded polyline format."""

    REFERENCE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
    REFERENCE_ENCODING = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"

    def test_encode_reference(self):
        self.assertEqual(encode(self.REFERENCE_POINTS), self.REFERENCE_ENCODING)

    def test_decode_reference(self):
        decoded = decode(self.REFERENCE_ENCODING)
        self.assertEqual(len(decoded), 3)
        for (lat, lon), (exp_lat, exp_lon) in zip(decoded, self.REFERENCE_POINTS):
            self.assertAlmostEqual(lat, exp_lat, places=5)
            self.assertAlmostEqual(lon, exp_lon, places=5)

    def test_empty(self):
        self.assertEqual(encode([]), "")
        self.assertEqual(decode(""), [])

    def test_truncated(self):
        with self.assertRaises(ValueError):
            decode(self.REFERENCE_ENCODING[:-1])

    def test_route_polyline(self):
        vehicle = Vehicle(1, 38.5, -120.2, 2, passengers=[Passenger(1, 40.7, -120.95)])
        destination = Destination(43.252, -126.453)
        self.assertEqual(route_polyline(vehicle, destination), self.REFERENCE_ENCODING)
        self.assertEqual(len(decode(route_polyline(vehicle))), 2)


if __name__ == '__main__':
    unittest.main()
