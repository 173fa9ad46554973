"""Random level generator."""

from __future__ import annotations
import json
import os
import random
from typing import List, Optional

from .levels import Level


class LevelGenerator:
    """
    Generator for random vial puzzles.

    Algorithm:
    1. Lay out ``vial_height`` items of each color.
    2. Shuffle them uniformly.
    3. Deal them into ``num_colors`` full vials and add the empty vials.

    No check is made that a generated level can be won; crawl it to find out.
    """

    MAX_COLORS = 12

    def __init__(self, vial_height: int = 4, empty_vials: int = 2, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            vial_height: Items per vial (default 4).
            empty_vials: Empty vials added to each level (default 2).
            seed: Random seed for reproducibility.
        """
        if vial_height < 1:
            raise ValueError(f"Vial height must be positive, got {vial_height}")
        if empty_vials < 0:
            raise ValueError(f"Empty vials must not be negative, got {empty_vials}")
        self.vial_height = vial_height
        self.empty_vials = empty_vials
        self.rng = random.Random(seed)

    def generate(self, num_colors: int) -> Level:
        """
        Generate a shuffled level.

        Args:
            num_colors: Number of colors (1 to MAX_COLORS).

        Returns:
            A Level with ``num_colors`` full vials and the empty vials.
        """
        if not 1 <= num_colors <= self.MAX_COLORS:
            raise ValueError(f"Number of colors must be 1-{self.MAX_COLORS}, got {num_colors}")

        items = [color for color in range(num_colors) for _ in range(self.vial_height)]
        self.rng.shuffle(items)
        h = self.vial_height
        raw_vials = [items[i * h:(i + 1) * h] for i in range(num_colors)]
        return Level(raw_vials, vial_height=h, num_colors=num_colors, empty_vials=self.empty_vials)

    def generate_batch(self, count: int, num_colors: int) -> List[Level]:
        """Generate multiple levels with the same number of colors."""
        return [self.generate(num_colors) for _ in range(count)]

    @staticmethod
    def save_to_folder(levels: List[Level], folder_path: str, prefix: str = "level") -> None:
        """
        Save levels to a folder, one JSON file each.

        Args:
            levels: Levels to save.
            folder_path: Directory to save the levels.
            prefix: Prefix for the filename (default: "level").
        """
        os.makedirs(folder_path, exist_ok=True)

        for i, level in enumerate(levels, 1):
            file_path = os.path.join(folder_path, f"{prefix}_{i}.json")
            with open(file_path, "w") as f:
                json.dump(level.to_dict(), f, indent=2)
