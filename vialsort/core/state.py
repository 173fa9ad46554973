"""Vial puzzle state representation and canonical state identity."""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, NewType, Optional, Sequence, Tuple


Item = int
RawVial = List[Item]
StateId = NewType("StateId", str)


@dataclass(frozen=True)
class ItemGroup:
    """A maximal run of identical items at the top of a vial."""
    item: Item
    count: int


@dataclass(frozen=True)
class Vial:
    """
    An ordered stack of item groups.

    The first group is the topmost (removable) one. ``height`` caches the
    total number of items held by the vial.
    """
    groups: Tuple[ItemGroup, ...] = ()
    height: int = 0

    @classmethod
    def from_items(cls, items: Sequence[Item]) -> Vial:
        """Build a vial from a flat item sequence, top first."""
        groups: List[ItemGroup] = []
        for item in items:
            if groups and groups[-1].item == item:
                groups[-1] = ItemGroup(item, groups[-1].count + 1)
            else:
                groups.append(ItemGroup(item, 1))
        return cls(tuple(groups), len(items))

    @property
    def top(self) -> Optional[ItemGroup]:
        """The removable group, or None for an empty vial."""
        return self.groups[0] if self.groups else None

    def is_empty(self) -> bool:
        return self.height == 0

    def is_pure(self) -> bool:
        """True if the vial holds exactly one group."""
        return len(self.groups) == 1

    def to_items(self) -> RawVial:
        """Expand the vial to its flat item sequence, top first."""
        items: RawVial = []
        for group in self.groups:
            items.extend([group.item] * group.count)
        return items


@dataclass(frozen=True)
class PuzzleParams:
    """
    Static per-puzzle parameters.

    ``empty_vials`` counts the vials beyond ``num_colors``; a consistent
    puzzle holds ``num_colors + empty_vials`` vials.
    """
    vial_height: int
    num_colors: int
    empty_vials: int

    @property
    def num_vials(self) -> int:
        return self.num_colors + self.empty_vials


@dataclass(frozen=True)
class GameState:
    """
    An immutable puzzle configuration.

    Every transition produces a new GameState. Vials that a move does not
    touch are shared between the old and the new state, which is safe
    because vials are frozen.

    Construction raises ValueError unless the state holds exactly
    ``num_colors + empty_vials`` vials and every color ``0..num_colors-1``
    appears exactly ``vial_height`` times.
    """
    vials: Tuple[Vial, ...]
    params: PuzzleParams
    _id: Optional[StateId] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "vials", tuple(self.vials))
        params = self.params
        for idx, vial in enumerate(self.vials):
            _check_vial(vial, idx, params)

        if params.empty_vials < 0:
            raise ValueError(f"Empty vial count must not be negative, got {params.empty_vials}")
        if len(self.vials) != params.num_vials:
            raise ValueError(
                f"Expected {params.num_vials} vials ({params.num_colors} colors + "
                f"{params.empty_vials} empty), got {len(self.vials)}"
            )
        counts = self.item_counts()
        for color in range(params.num_colors):
            if counts[color] != params.vial_height:
                raise ValueError(
                    f"Item {color} appears {counts[color]} times, expected {params.vial_height}"
                )

    @classmethod
    def from_raw_vials(
        cls,
        raw_vials: Sequence[Sequence[Item]],
        vial_height: int,
        num_colors: Optional[int] = None,
        empty_vials: Optional[int] = None,
    ) -> GameState:
        """
        Create a state from flat item lists (top first).

        Args:
            raw_vials: One item list per vial, including empty lists.
            vial_height: Maximum number of items per vial.
            num_colors: Number of colors. Defaults to the number of
                distinct items present.
            empty_vials: Number of vials beyond ``num_colors``. Defaults to
                ``len(raw_vials) - num_colors``.
        """
        if num_colors is None:
            num_colors = len({item for vial in raw_vials for item in vial})
        if empty_vials is None:
            empty_vials = len(raw_vials) - num_colors
        params = PuzzleParams(vial_height, num_colors, empty_vials)
        return cls(tuple(Vial.from_items(list(v)) for v in raw_vials), params)

    def to_raw_vials(self) -> List[RawVial]:
        return [vial.to_items() for vial in self.vials]

    @property
    def state_id(self) -> StateId:
        """Canonical, vial-order independent identity (cached)."""
        if self._id is None:
            object.__setattr__(self, "_id", get_state_id(self))
        return self._id

    def replace_vials(self, new_vials: Dict[int, Vial]) -> GameState:
        """Return a new state with the given vial indices replaced."""
        vials = tuple(new_vials.get(idx, vial) for idx, vial in enumerate(self.vials))
        return GameState(vials, self.params)

    def permuted(self, order: Sequence[int]) -> GameState:
        """Return the same configuration with vials reordered."""
        if sorted(order) != list(range(len(self.vials))):
            raise ValueError(f"Not a permutation of {len(self.vials)} vials: {list(order)}")
        return GameState(tuple(self.vials[i] for i in order), self.params)

    def item_counts(self) -> Counter:
        """Count how many of each item the state holds."""
        counts: Counter = Counter()
        for vial in self.vials:
            for group in vial.groups:
                counts[group.item] += group.count
        return counts

    def to_string(self) -> str:
        """Compact form: items joined by ',' and vials by '/'."""
        return "/".join(",".join(str(i) for i in items) for items in self.to_raw_vials())

    def __str__(self) -> str:
        """Draw the vials side by side, top row first."""
        height = self.params.vial_height
        width = max([len(str(i)) for v in self.vials for i in v.to_items()] + [1])
        columns = []
        for vial in self.vials:
            items = vial.to_items()
            padded = ["." * width] * (height - len(items)) + [str(i).rjust(width) for i in items]
            columns.append(padded)
        lines = []
        for row in range(height):
            lines.append("|" + "|".join(col[row] for col in columns) + "|")
        lines.append("+" + "+".join("-" * width for _ in columns) + "+")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"GameState({self.to_string()!r}, vial_height={self.params.vial_height})"


def _check_vial(vial: Vial, idx: int, params: PuzzleParams) -> None:
    vial_height = params.vial_height
    total = 0
    previous: Optional[Item] = None
    for group in vial.groups:
        if not 0 <= group.item < params.num_colors:
            raise ValueError(
                f"Vial {idx} holds item {group.item}; items must be 0-{params.num_colors - 1}"
            )
        if group.count < 1:
            raise ValueError(f"Vial {idx} has a group with count {group.count}")
        if group.item == previous:
            raise ValueError(f"Vial {idx} has two adjacent groups of item {group.item}")
        previous = group.item
        total += group.count
    if total != vial.height:
        raise ValueError(f"Vial {idx} height {vial.height} does not match its {total} items")
    if vial.height > vial_height:
        raise ValueError(f"Vial {idx} height {vial.height} exceeds maximum vial height {vial_height}")


def get_state_id(state: GameState) -> StateId:
    """
    Compute the canonical fingerprint of a state.

    Vials are expanded to their flat item sequences, sorted by length and
    then element by element. Items are joined with ',' and vials with ';'
    so that multi-digit items cannot collide.
    """
    raw_vials = sorted(state.to_raw_vials(), key=lambda items: (len(items), items))
    return StateId(";".join(",".join(str(i) for i in items) for items in raw_vials))


def win_condition(state: GameState) -> bool:
    """Check if every vial is empty or a single full group."""
    for vial in state.vials:
        if vial.is_empty():
            continue
        if not vial.is_pure() or vial.height != state.params.vial_height:
            return False
    return True


def winning_state(params: PuzzleParams) -> GameState:
    """Build the sorted configuration for a puzzle's static parameters."""
    full = [Vial((ItemGroup(color, params.vial_height),), params.vial_height)
            for color in range(params.num_colors)]
    empty = [Vial() for _ in range(params.empty_vials)]
    return GameState(tuple(full + empty), params)


def get_winning_state_id(params: PuzzleParams) -> StateId:
    return get_state_id(winning_state(params))
