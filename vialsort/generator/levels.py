"""Level descriptions and their conversion to playable states."""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.state import GameState, PuzzleParams, RawVial, Vial


@dataclass
class Level:
    """
    An abstract level: filled vials plus a count of extra empty vials.

    Each raw vial lists its items top first.
    """
    raw_vials: List[RawVial]
    vial_height: int = 4
    num_colors: Optional[int] = None
    empty_vials: int = 2
    name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.num_colors is None:
            self.num_colors = len({item for vial in self.raw_vials for item in vial})

    @property
    def params(self) -> PuzzleParams:
        # Empty lists in raw_vials are empty vials too
        total_vials = len(self.raw_vials) + self.empty_vials
        return PuzzleParams(self.vial_height, self.num_colors, total_vials - self.num_colors)

    def to_state(self) -> GameState:
        """Convert the level into a playable GameState."""
        vials = []
        for idx, raw in enumerate(self.raw_vials):
            if len(raw) > self.vial_height:
                raise ValueError(
                    f"Vial {idx} height exceeds maximum vial height {self.vial_height}"
                )
            vials.append(Vial.from_items(raw))
        vials.extend(Vial() for _ in range(self.empty_vials))
        return GameState(tuple(vials), self.params)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "raw_vials": self.raw_vials,
            "vial_height": self.vial_height,
            "num_colors": self.num_colors,
            "empty_vials": self.empty_vials,
        }
        if self.name:
            data["name"] = self.name
        return {**data, **self.extra}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Level:
        known = {"raw_vials", "vial_height", "num_colors", "empty_vials", "name"}
        return cls(
            raw_vials=[list(v) for v in data["raw_vials"]],
            vial_height=data.get("vial_height", 4),
            num_colors=data.get("num_colors"),
            empty_vials=data.get("empty_vials", 2),
            name=data.get("name", ""),
            extra={k: v for k, v in data.items() if k not in known},
        )

    @classmethod
    def from_string(cls, s: str, vial_height: int = 4, empty_vials: int = 2) -> Level:
        """
        Parse a level such as ``"8,5,0,5/1,0,2,3"``.

        Vials are separated by '/', items by ','. An empty segment is an
        empty vial that counts as part of the listed vials.
        """
        raw_vials = []
        for segment in s.strip().split("/"):
            segment = segment.strip()
            raw_vials.append([int(x) for x in segment.split(",")] if segment else [])
        return cls(raw_vials, vial_height=vial_height, empty_vials=empty_vials)

    def to_string(self) -> str:
        return "/".join(",".join(str(i) for i in vial) for vial in self.raw_vials)


def load_levels(path: str) -> List[Level]:
    """Load a JSON file holding one level object or a list of them."""
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    return [Level.from_dict(item) for item in data]


def save_levels(levels: List[Level], path: str) -> None:
    with open(path, "w") as f:
        json.dump([level.to_dict() for level in levels], f, indent=2)
