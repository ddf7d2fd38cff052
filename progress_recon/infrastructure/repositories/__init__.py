"""
Repository implementations for data access layer.
"""
from .base_repository import BaseRepository
from .calculation_repository import ActivityCalculationRepository, ProjectCalculationRepository

__all__ = [
    'BaseRepository',
    'ActivityCalculationRepository',
    'ProjectCalculationRepository',
]
