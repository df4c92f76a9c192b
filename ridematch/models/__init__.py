"""Data models for vehicles, passengers, solutions and scheduled routes."""
