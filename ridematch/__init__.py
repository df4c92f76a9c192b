"""
RideMatch: ride-sharing route planning with a Genetic Algorithm.
"""

__version__ = "1.0.0"
