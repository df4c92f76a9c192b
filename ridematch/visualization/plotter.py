"""
Plotting utilities for ride-sharing analysis.
Creates convergence plots, route maps and vehicle load charts.
"""

from typing import Dict, Optional

import matplotlib.pyplot as plt
import seaborn as sns

from config import VIZ_CONFIG
from ridematch.models.ride_model import Destination
from ridematch.models.solution import Solution


class Plotter:
    """Creates various plots for ride-sharing analysis."""

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize plotter.

        Args:
            config: Visualization configuration
        """
        self.config = config or VIZ_CONFIG.copy()

        plt.style.use('default')
        sns.set_palette("husl")

        self.fig_size = self.config['figure_size']
        self.dpi = self.config['dpi']
        self.font_size = self.config['font_size']
        self.colors = self.config['colors']
        self.line_width = self.config['line_width']

    def _save(self, fig: plt.Figure, save_path: Optional[str]):
        if save_path:
            fig.savefig(save_path, dpi=self.dpi, bbox_inches='tight')

    def plot_convergence(self, convergence_data: Dict,
                         title: str = "GA Convergence",
                         save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot GA convergence over generations.

        Args:
            convergence_data: Dictionary with convergence data
            title: Plot title
            save_path: Optional path to save plot

        Returns:
            Matplotlib figure
        """
        generations = convergence_data['generations']
        best_fitness = convergence_data['best_fitness']
        avg_fitness = convergence_data['avg_fitness']
        diversity = convergence_data.get('diversity', [])

        fig, axes = plt.subplots(1, 2, figsize=(self.fig_size[0] * 1.5, self.fig_size[1] * 0.7))

        # Fitness plot (lower is better)
        axes[0].plot(generations, best_fitness, 'b-', linewidth=2, label='Best Fitness')
        axes[0].plot(generations, avg_fitness, 'g--', linewidth=1.5, label='Average Fitness')
        axes[0].set_xlabel('Generation', fontsize=self.font_size)
        axes[0].set_ylabel('Fitness', fontsize=self.font_size)
        axes[0].set_title('Fitness Evolution', fontsize=self.font_size)
        axes[0].grid(True, alpha=0.3)
        axes[0].legend()

        if diversity:
            axes[1].plot(generations, diversity, 'm-', linewidth=2, label='Population Diversity')
            axes[1].set_xlabel('Generation', fontsize=self.font_size)
            axes[1].set_ylabel('Diversity', fontsize=self.font_size)
            axes[1].set_title('Population Diversity', fontsize=self.font_size)
            axes[1].grid(True, alpha=0.3)
            axes[1].legend()

        fig.suptitle(title, fontsize=self.font_size + 2, fontweight='bold')
        fig.tight_layout()
        self._save(fig, save_path)

        return fig

    def plot_routes(self, solution: Solution, destination: Optional[Destination] = None,
                    title: str = "Vehicle Routes",
                    save_path: Optional[str] = None) -> plt.Figure:
        """
        Draw each used vehicle's route on a longitude/latitude plane.

        Args:
            solution: Solution to draw
            destination: Shared destination (drawn as a star)
            title: Plot title
            save_path: Optional path to save plot

        Returns:
            Matplotlib figure
        """
        fig, ax = plt.subplots(figsize=self.fig_size)

        for i, vehicle in enumerate(solution.get_used_vehicles()):
            color = self.colors[i % len(self.colors)]
            lats = [vehicle.latitude] + [p.latitude for p in vehicle.passengers]
            lons = [vehicle.longitude] + [p.longitude for p in vehicle.passengers]
            if destination is not None:
                lats.append(destination.latitude)
                lons.append(destination.longitude)

            ax.plot(lons, lats, '-', color=color, linewidth=self.line_width,
                    label=f"Vehicle {vehicle.id} ({len(vehicle.passengers)}/{vehicle.capacity})")
            ax.scatter([vehicle.longitude], [vehicle.latitude], color=color, marker='s', s=80)
            ax.scatter(lons[1:len(vehicle.passengers) + 1], lats[1:len(vehicle.passengers) + 1],
                       color=color, s=40)

        if destination is not None:
            ax.scatter([destination.longitude], [destination.latitude], color='black',
                       marker='*', s=250, label=destination.name, zorder=5)

        ax.set_xlabel('Longitude', fontsize=self.font_size)
        ax.set_ylabel('Latitude', fontsize=self.font_size)
        ax.set_title(title, fontsize=self.font_size + 2)
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=self.font_size - 2)
        fig.tight_layout()
        self._save(fig, save_path)

        return fig

    def plot_vehicle_loads(self, solution: Solution,
                           title: str = "Seats Used per Vehicle",
                           save_path: Optional[str] = None) -> plt.Figure:
        """Bar chart of assigned passengers against capacity per vehicle."""
        labels = [str(v.id) for v in solution.vehicles]
        loads = [len(v.passengers) for v in solution.vehicles]
        capacities = [v.capacity for v in solution.vehicles]

        fig, ax = plt.subplots(figsize=self.fig_size)
        sns.barplot(x=labels, y=capacities, color='lightgray', ax=ax, label='Capacity')
        sns.barplot(x=labels, y=loads, ax=ax, label='Passengers')
        ax.set_xlabel('Vehicle', fontsize=self.font_size)
        ax.set_ylabel('Seats', fontsize=self.font_size)
        ax.set_title(title, fontsize=self.font_size + 2)
        ax.legend()
        fig.tight_layout()
        self._save(fig, save_path)

        return fig


def plot_convergence(convergence_data: Dict, title: str = "GA Convergence",
                     save_path: Optional[str] = None) -> plt.Figure:
    """Convenience function to plot convergence and release the figure when saved."""
    plotter = Plotter()
    fig = plotter.plot_convergence(convergence_data, title, save_path)
    if save_path:
        plt.close(fig)
    return fig
