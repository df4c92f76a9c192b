"""
Main application entry point for the RideMatch optimizer.
Provides a CLI for planning routes from a JSON dataset or generated data.
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Dict

from ridematch.core.logger import setup_logger
from ridematch.core.exceptions import RideMatchException
from ridematch.data_processing.generator import MockupDataGenerator
from ridematch.data_processing.json_loader import JSONDatasetLoader, models_from_dict, save_dataset
from ridematch.evaluation.result_exporter import export_all_results
from ridematch.services.route_planning_service import PlanResult, RoutePlanningService
from config import GA_CONFIG, GA_PRESETS, MOCKUP_CONFIG, PATHS


def main():
    """Main application entry point."""
    parser = create_argument_parser()
    args = parser.parse_args()

    logger = setup_logger('ridematch', log_dir=PATHS['logs'].rstrip('/'),
                          level=logging.DEBUG if args.verbose else logging.INFO)
    logger.info("=" * 60)
    logger.info("RideMatch Optimizer Starting")
    logger.info("=" * 60)

    try:
        if args.list_datasets:
            list_datasets(args.data_dir)
            return

        if args.dataset:
            data = JSONDatasetLoader(args.data_dir).load_dataset(args.dataset)
        elif args.generate:
            data = generate_dataset(args)
        else:
            parser.print_help()
            sys.exit(1)

        result = run_planning(data, args)
        print_result(result)

        if args.export_dir:
            exported = export_all_results(result.solution, result.statistics,
                                          result.evolution_data, result.schedules,
                                          output_dir=args.export_dir)
            for kind, path in exported.items():
                print(f"  {kind}: {path}")

        if args.plot:
            plot_results(result, data, args.export_dir or PATHS['results'])

    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except RideMatchException as e:
        logger.error(f"RideMatch Error: {e}")
        print(f"Error: {e}")
        sys.exit(1)
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"Error: {e}")
        sys.exit(1)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="RideMatch: ride-sharing route planner using a Genetic Algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plan routes for a JSON dataset
  python main.py --dataset data/office.json --target-time 08:30

  # Generate a random instance and solve it with the fast preset
  python main.py --generate --vehicles 6 --passengers 25 --preset fast --seed 7

  # Export CSV/JSON results and plots
  python main.py --dataset office --export-dir results --plot
        """
    )

    data_group = parser.add_mutually_exclusive_group(required=False)
    data_group.add_argument('--dataset', type=str,
                            help='JSON dataset path or name inside --data-dir')
    data_group.add_argument('--generate', action='store_true',
                            help='Generate mockup data')
    parser.add_argument('--data-dir', type=str, default=PATHS['data'].rstrip('/'),
                        help='Directory of JSON datasets (default: data)')
    parser.add_argument('--list-datasets', action='store_true',
                        help='List datasets in --data-dir')

    # Mockup generation options
    parser.add_argument('--vehicles', type=int, default=MOCKUP_CONFIG['n_vehicles'],
                        help=f"Number of generated vehicles (default: {MOCKUP_CONFIG['n_vehicles']})")
    parser.add_argument('--passengers', type=int, default=MOCKUP_CONFIG['n_passengers'],
                        help=f"Number of generated passengers (default: {MOCKUP_CONFIG['n_passengers']})")
    parser.add_argument('--radius', type=float, default=MOCKUP_CONFIG['radius_km'],
                        help=f"Generation radius in km (default: {MOCKUP_CONFIG['radius_km']})")
    parser.add_argument('--save-dataset', type=str,
                        help='Write the generated dataset to this JSON file')

    # GA parameters
    parser.add_argument('--preset', type=str, choices=sorted(GA_PRESETS),
                        help='Named GA parameter preset')
    parser.add_argument('--generations', type=int,
                        help=f"Number of GA generations (default: {GA_CONFIG['generations']})")
    parser.add_argument('--population', type=int,
                        help=f"Population size (default: {GA_CONFIG['population_size']})")
    parser.add_argument('--crossover-prob', type=float,
                        help=f"Crossover probability (default: {GA_CONFIG['crossover_prob']})")
    parser.add_argument('--mutation-prob', type=float,
                        help=f"Mutation probability (default: {GA_CONFIG['mutation_prob']})")
    parser.add_argument('--tournament-size', type=int,
                        help=f"Tournament size (default: {GA_CONFIG['tournament_size']})")
    parser.add_argument('--elitism-rate', type=float,
                        help=f"Elitism rate (default: {GA_CONFIG['elitism_rate']})")
    parser.add_argument('--time-limit', type=float,
                        help='Wall-clock limit for the GA in seconds')
    parser.add_argument('--workers', type=int,
                        help='Threads used for fitness evaluation')
    parser.add_argument('--no-local-search', action='store_true',
                        help='Skip the final 2-opt pass')

    # Scheduling
    parser.add_argument('--target-time', type=str,
                        help='Arrival time at the destination, HH:MM (default: dataset value)')
    parser.add_argument('--now', type=str,
                        help='Current time (HH:MM or ISO datetime) for the past-pickup check')
    parser.add_argument('--strict', action='store_true',
                        help='Fail when a pickup time is already in the past')

    # Output options
    parser.add_argument('--export-dir', type=str,
                        help='Write routes, vehicles, solution and evolution files here')
    parser.add_argument('--plot', action='store_true',
                        help='Save convergence, route and load plots')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')
    parser.add_argument('--seed', type=int,
                        help='Random seed for reproducibility')

    return parser


def build_ga_config(args) -> Dict:
    """GA overrides from the preset and explicit flags."""
    config = dict(GA_PRESETS[args.preset]) if args.preset else {}
    overrides = {
        'generations': args.generations,
        'population_size': args.population,
        'crossover_prob': args.crossover_prob,
        'mutation_prob': args.mutation_prob,
        'tournament_size': args.tournament_size,
        'elitism_rate': args.elitism_rate,
        'time_limit': args.time_limit,
        'n_workers': args.workers
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    if args.no_local_search:
        config['final_local_search'] = False
    return config


def parse_now(value: str) -> datetime:
    """Accept HH:MM (today) or a full ISO datetime."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        parsed = datetime.strptime(value, '%H:%M')
        return datetime.combine(datetime.now().date(), parsed.time())


def generate_dataset(args) -> Dict:
    """Generate a mockup dataset from CLI options."""
    config = {
        'n_vehicles': args.vehicles,
        'n_passengers': args.passengers,
        'radius_km': args.radius
    }
    if args.seed is not None:
        config['seed'] = args.seed

    data = MockupDataGenerator(config).generate_dataset(args.target_time)
    if args.save_dataset:
        save_dataset(data, args.save_dataset)
        print(f"Dataset saved to: {args.save_dataset}")
    return data


def run_planning(data: Dict, args) -> PlanResult:
    """Run one planning pass over a dataset dictionary."""
    logger = logging.getLogger('ridematch.cli')
    vehicles, passengers, destination = models_from_dict(data)
    now = parse_now(args.now) if args.now else None

    print("=" * 60)
    print(f"RideMatch - {data.get('metadata', {}).get('name', 'dataset')}")
    print("=" * 60)
    print(f"Vehicles: {len(vehicles)}, Passengers: {len(passengers)}")

    service = RoutePlanningService(ga_config=build_ga_config(args), strict_schedule=args.strict)
    result = service.plan(vehicles, passengers, destination,
                          target_time=args.target_time, now=now, seed=args.seed)
    logger.debug(f"Summary: {result.summary()}")
    return result


def print_result(result: PlanResult):
    """Print routes and pickup times."""
    summary = result.summary()
    print(f"\nArrival target: {summary['target_time']}")
    print(f"Vehicles used: {summary['vehicles_used']}, "
          f"passengers assigned: {summary['passengers_assigned']}")
    print(f"Total distance: {summary['total_distance_km']:.2f} km, "
          f"total time: {summary['total_time_min']:.1f} min")
    print(f"Generations: {summary['generations']} ({summary['termination_reason']}), "
          f"time: {summary['execution_time']:.2f}s")

    for vehicle in result.solution.get_used_vehicles():
        details = result.schedules.get(vehicle.id)
        departure = details.departure_time.strftime('%H:%M') if details and details.departure_time else '--:--'
        print(f"\nVehicle {vehicle.id} {vehicle.driver_name} "
              f"({len(vehicle.passengers)}/{vehicle.capacity}), departs {departure}")
        if details is None:
            continue
        for stop in details.stop_details:
            flag = " (in the past)" if stop.is_infeasible else ""
            print(f"  {stop.stop_number:>2}. {stop.get_formatted_time()}  "
                  f"{stop.passenger_name or stop.passenger_id}  "
                  f"+{stop.distance_from_previous:.2f} km{flag}")

    print(f"\n{result.report.format()}")


def plot_results(result: PlanResult, data: Dict, output_dir: str):
    """Save convergence, route and load plots."""
    import matplotlib.pyplot as plt
    from ridematch.data_processing.json_loader import destination_from_dict
    from ridematch.visualization.plotter import Plotter

    os.makedirs(output_dir, exist_ok=True)
    plotter = Plotter()
    figures = {
        'convergence.png': plotter.plot_convergence(result.convergence_data),
        'routes.png': plotter.plot_routes(result.solution, destination_from_dict(data['destination'])),
        'vehicle_loads.png': plotter.plot_vehicle_loads(result.solution)
    }
    for filename, fig in figures.items():
        path = os.path.join(output_dir, filename)
        fig.savefig(path, dpi=plotter.dpi, bbox_inches='tight')
        plt.close(fig)
        print(f"  plot: {path}")


def list_datasets(data_dir: str):
    """List available datasets."""
    datasets = JSONDatasetLoader(data_dir).list_available_datasets()
    if not datasets:
        print(f"No datasets found in {data_dir}")
        return

    print(f"{'Name':<30} {'Vehicles':>9} {'Passengers':>11}")
    for dataset in datasets:
        print(f"{dataset['name']:<30} {dataset['num_vehicles']:>9} {dataset['num_passengers']:>11}")


if __name__ == "__main__":
    main()
