# Configuration parameters for the RideMatch optimizer
# All weights and limits live here so their relative priority stays explicit

# Genetic Algorithm Configuration
GA_CONFIG = {
    'population_size': 100,      # Candidate solutions kept per generation
    'generations': 1000,         # Hard generation cap
    'elitism_rate': 0.20,        # Top 20% copied unchanged (rounded up)
    'crossover_prob': 1.0,       # Every child comes from route crossover
    'mutation_prob': 0.01,       # Per-child mutation probability
    'tournament_size': 3,        # Candidates sampled per tournament

    # Convergence
    'stagnation_limit': 20,      # Stop after 20 generations without improvement
    'near_optimal_threshold': 0.1,  # Stop once best fitness drops below this

    # Local search
    'local_search_iterations': 50,  # 2-opt improvement rounds per vehicle
    'final_local_search': True,  # 2-opt every route of the returned solution

    # Execution
    'n_workers': 1,              # >1 evaluates candidates in a thread pool
    'time_limit': None,          # Wall-clock budget in seconds (None = unbounded)
    'log_every': 50,             # Progress log interval in generations
}

# GA Preset Configurations
GA_PRESETS = {
    'fast': {
        'population_size': 30,
        'generations': 100,
        'elitism_rate': 0.20,
        'crossover_prob': 1.0,
        'mutation_prob': 0.05,
        'tournament_size': 3,
        'stagnation_limit': 15,
    },
    'standard': {
        # Mirrors the scheduled daily run
        'population_size': 50,
        'generations': 100,
        'elitism_rate': 0.20,
        'crossover_prob': 0.8,
        'mutation_prob': 0.2,
        'tournament_size': 3,
        'stagnation_limit': 20,
    },
    'thorough': {
        'population_size': 100,
        'generations': 1000,
        'elitism_rate': 0.20,
        'crossover_prob': 1.0,
        'mutation_prob': 0.05,
        'tournament_size': 5,
        'stagnation_limit': 50,
    },
}

# Fitness Configuration (lower fitness is better)
# capacity_penalty > unassigned_penalty: an over-capacity vehicle costs more
# than leaving one passenger behind.
FITNESS_CONFIG = {
    'capacity_penalty': 1000.0,    # Per vehicle exceeding its seat capacity
    'unassigned_penalty': 100.0,   # Per available passenger left unassigned
    'duplicate_penalty': 1000.0,   # Per extra occurrence of the same passenger
    'distance_weight': 1.0,        # Per km of route distance
    'time_weight': 0.0,            # Per minute of route time
    'vehicle_weight': 0.0,         # Per vehicle used
}

# Pickup Schedule Configuration
SCHEDULE_CONFIG = {
    'average_speed_kmh': 30.0,     # Urban average speed used for travel times
    'default_target_time': '08:00',  # Arrival deadline when none is configured
    'earth_radius_km': 6371.0,
}

# Mockup Data Generation Configuration
MOCKUP_CONFIG = {
    'n_vehicles': 5,
    'n_passengers': 20,
    'capacity_min': 2,
    'capacity_max': 5,
    'center': (32.0853, 34.7818),  # (lat, lon) of the shared destination
    'radius_km': 10.0,
    'seed': 42,
}

# Visualization Configuration
VIZ_CONFIG = {
    'figure_size': (12, 8),
    'dpi': 150,
    'colors': ['#FF0000', '#0000FF', '#00FF00', '#FFA500', '#800080', '#A52A2A', '#FFC0CB', '#808080'],
    'line_width': 2,
    'font_size': 12
}

# File Paths
PATHS = {
    'data': 'data/',
    'results': 'results/',
    'logs': 'logs/',
}
