"""
Validation layer for the RideMatch optimizer.
Provides validators for configuration and input records.
"""

from typing import Dict, List, Optional

from ridematch.core.exceptions import InvalidConfigurationError, InvalidInputError
from ridematch.data_processing.distance import is_valid_location


class ConfigValidator:
    """Validate configuration parameters."""

    @staticmethod
    def validate_ga_config(config: Dict) -> bool:
        """
        Validate GA configuration.

        Args:
            config: GA configuration dictionary

        Returns:
            True if valid, raises InvalidConfigurationError otherwise

        Raises:
            InvalidConfigurationError: If configuration is invalid
        """
        required_keys = [
            'population_size',
            'generations',
            'crossover_prob',
            'mutation_prob',
            'tournament_size',
            'elitism_rate'
        ]

        for key in required_keys:
            if key not in config:
                raise InvalidConfigurationError(
                    parameter=key,
                    value=None,
                    expected="Required parameter"
                )

        if config['population_size'] < 2:
            raise InvalidConfigurationError(
                parameter='population_size',
                value=config['population_size'],
                expected=">= 2"
            )

        if config['generations'] < 1:
            raise InvalidConfigurationError(
                parameter='generations',
                value=config['generations'],
                expected=">= 1"
            )

        for key in ('crossover_prob', 'mutation_prob', 'elitism_rate'):
            if not 0 <= config[key] <= 1:
                raise InvalidConfigurationError(
                    parameter=key,
                    value=config[key],
                    expected="[0, 1]"
                )

        if config['tournament_size'] < 1:
            raise InvalidConfigurationError(
                parameter='tournament_size',
                value=config['tournament_size'],
                expected=">= 1"
            )

        if config['tournament_size'] > config['population_size']:
            raise InvalidConfigurationError(
                parameter='tournament_size',
                value=config['tournament_size'],
                expected=f"<= population_size ({config['population_size']})"
            )

        if config.get('stagnation_limit', 1) < 1:
            raise InvalidConfigurationError(
                parameter='stagnation_limit',
                value=config['stagnation_limit'],
                expected=">= 1"
            )

        if config.get('n_workers', 1) < 1:
            raise InvalidConfigurationError(
                parameter='n_workers',
                value=config['n_workers'],
                expected=">= 1"
            )

        time_limit = config.get('time_limit')
        if time_limit is not None and time_limit <= 0:
            raise InvalidConfigurationError(
                parameter='time_limit',
                value=time_limit,
                expected="> 0 or None"
            )

        return True

    @staticmethod
    def validate_fitness_config(config: Dict) -> bool:
        """
        Validate fitness weights and penalties.

        All weights must be non-negative, and an over-capacity vehicle must
        never be cheaper than one unassigned passenger.
        """
        for key in ('capacity_penalty', 'unassigned_penalty', 'duplicate_penalty',
                    'distance_weight', 'time_weight', 'vehicle_weight'):
            if key in config and config[key] < 0:
                raise InvalidConfigurationError(
                    parameter=key,
                    value=config[key],
                    expected=">= 0"
                )

        if 'capacity_penalty' in config and 'unassigned_penalty' in config:
            if config['capacity_penalty'] < config['unassigned_penalty']:
                raise InvalidConfigurationError(
                    parameter='capacity_penalty',
                    value=config['capacity_penalty'],
                    expected=f">= unassigned_penalty ({config['unassigned_penalty']})"
                )

        return True

    @staticmethod
    def validate_mockup_config(config: Dict) -> bool:
        """Validate mockup data generation configuration."""
        for key in ('n_vehicles', 'n_passengers'):
            if key in config and config[key] < 0:
                raise InvalidConfigurationError(
                    parameter=key,
                    value=config[key],
                    expected=">= 0"
                )

        if 'capacity_min' in config and 'capacity_max' in config:
            if config['capacity_min'] < 1:
                raise InvalidConfigurationError(
                    parameter='capacity_min',
                    value=config['capacity_min'],
                    expected=">= 1"
                )
            if config['capacity_max'] < config['capacity_min']:
                raise InvalidConfigurationError(
                    parameter='capacity_max',
                    value=config['capacity_max'],
                    expected=f">= capacity_min ({config['capacity_min']})"
                )

        if 'radius_km' in config and config['radius_km'] <= 0:
            raise InvalidConfigurationError(
                parameter='radius_km',
                value=config['radius_km'],
                expected="> 0"
            )

        return True


class InputValidator:
    """Validate vehicle and passenger records before they reach the solver."""

    @staticmethod
    def validate_coordinate(latitude: float, longitude: float,
                            field: Optional[str] = None) -> bool:
        if not is_valid_location(latitude, longitude):
            raise InvalidInputError(
                f"Invalid coordinates ({latitude}, {longitude})",
                field=field,
                value=(latitude, longitude)
            )
        return True

    @staticmethod
    def validate_vehicles(vehicles: List) -> bool:
        """
        Validate vehicle records.

        Args:
            vehicles: List of Vehicle objects

        Returns:
            True if valid

        Raises:
            InvalidInputError: On duplicate ids, non-positive capacity or bad coordinates
        """
        if vehicles is None:
            raise InvalidInputError("Vehicle list is required", field='vehicles')

        seen = set()
        for vehicle in vehicles:
            if vehicle.id in seen:
                raise InvalidInputError("Duplicate vehicle id", field='vehicles', value=vehicle.id)
            seen.add(vehicle.id)

            if vehicle.capacity is None or vehicle.capacity <= 0:
                raise InvalidInputError(
                    f"Vehicle {vehicle.id} must have a positive capacity",
                    field='capacity',
                    value=vehicle.capacity
                )
            InputValidator.validate_coordinate(vehicle.latitude, vehicle.longitude,
                                               field=f'vehicle {vehicle.id}')
        return True

    @staticmethod
    def validate_passengers(passengers: List) -> bool:
        """Validate passenger records (unique ids, valid coordinates)."""
        if passengers is None:
            raise InvalidInputError("Passenger list is required", field='passengers')

        seen = set()
        for passenger in passengers:
            if passenger.id in seen:
                raise InvalidInputError("Duplicate passenger id", field='passengers',
                                        value=passenger.id)
            seen.add(passenger.id)
            InputValidator.validate_coordinate(passenger.latitude, passenger.longitude,
                                               field=f'passenger {passenger.id}')
        return True
