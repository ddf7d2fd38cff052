"""
Infrastructure Layer - Repository implementations for the write-back path.
"""

from .repositories import (
    BaseRepository,
    ActivityCalculationRepository,
    ProjectCalculationRepository,
)

__all__ = [
    'BaseRepository',
    'ActivityCalculationRepository',
    'ProjectCalculationRepository',
]
