"""Generator module for vial puzzle levels."""

from .levels import Level, load_levels, save_levels
from .generator import LevelGenerator

__all__ = ["Level", "load_levels", "save_levels", "LevelGenerator"]
