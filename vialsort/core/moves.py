"""Move generation and move application."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional

from .errors import InvalidMoveError, InvariantViolation
from .state import GameState, ItemGroup, StateId, Vial


class Move(NamedTuple):
    """Pour the top group of vial ``src`` into vial ``dst``."""
    src: int
    dst: int


class MoveErrorKind(Enum):
    """Reasons a move can be rejected, with the message shown to players."""
    EMPTY_SOURCE = "Nothing to move!"
    COLOR_MISMATCH = "Wrong color on top of the new vial!"
    NO_CAPACITY = "No space in vial!"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class MoveResult:
    """Outcome of ``calc_move``: either a new state or an error kind."""
    state: Optional[GameState] = None
    error: Optional[MoveErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""


class MovedState(NamedTuple):
    move: Move
    state: GameState
    state_id: StateId


def get_valid_moves(state: GameState) -> List[Move]:
    """
    List every useful legal move from a state.

    Moves between vials sharing a top color are listed when the destination
    has room. If there is an empty vial, the first one receives a move from
    every non-empty vial holding more than one group. Pouring a pure vial
    into an empty one gains nothing, so those moves are left out.

    Returns:
        Moves ordered by color, then source, then destination.
    """
    num_colors = state.params.num_colors
    vial_height = state.params.vial_height

    empty_idxs: List[int] = []
    by_color: List[List[int]] = [[] for _ in range(num_colors)]
    for idx, vial in enumerate(state.vials):
        if vial.is_empty():
            empty_idxs.append(idx)
        else:
            by_color[vial.top.item].append(idx)

    moves: List[Move] = []
    for idxs in by_color:
        for src in idxs:
            for dst in idxs:
                if src == dst:
                    continue
                # A full vial is never a destination
                if state.vials[dst].height == vial_height:
                    continue
                moves.append(Move(src, dst))

    if empty_idxs:
        target = empty_idxs[0]
        for idxs in by_color:
            for src in idxs:
                if state.vials[src].is_pure():
                    continue
                moves.append(Move(src, target))

    return moves


def calc_move(state: GameState, move: Move) -> MoveResult:
    """
    Compute the state produced by a move without touching the input.

    Args:
        state: The current state.
        move: Source and destination vial indices.

    Returns:
        MoveResult holding either the new state or the rejection reason.

    Raises:
        InvariantViolation: If a vial index is out of range.
    """
    num_vials = len(state.vials)
    for idx in move:
        if not 0 <= idx < num_vials:
            raise InvariantViolation(f"Vial index {idx} out of range for {num_vials} vials")

    src_vial = state.vials[move.src]
    dst_vial = state.vials[move.dst]
    if src_vial.is_empty():
        return MoveResult(error=MoveErrorKind.EMPTY_SOURCE)

    group = src_vial.top
    if not dst_vial.is_empty() and dst_vial.top.item != group.item:
        return MoveResult(error=MoveErrorKind.COLOR_MISMATCH)

    # Moving a vial onto itself leaves no room either
    free = state.params.vial_height - dst_vial.height
    to_move = min(free, group.count) if move.src != move.dst else 0
    if to_move <= 0:
        return MoveResult(error=MoveErrorKind.NO_CAPACITY)

    if group.count == to_move:
        src_groups = src_vial.groups[1:]
    else:
        src_groups = (ItemGroup(group.item, group.count - to_move),) + src_vial.groups[1:]
    new_src = Vial(src_groups, src_vial.height - to_move)

    if dst_vial.is_empty():
        dst_groups = (ItemGroup(group.item, to_move),)
    else:
        dst_groups = (ItemGroup(group.item, dst_vial.top.count + to_move),) + dst_vial.groups[1:]
    new_dst = Vial(dst_groups, dst_vial.height + to_move)

    return MoveResult(state=state.replace_vials({move.src: new_src, move.dst: new_dst}))


def apply_move(state: GameState, move: Move) -> GameState:
    """Like ``calc_move`` but raise InvalidMoveError on rejection."""
    result = calc_move(state, move)
    if not result.ok:
        raise InvalidMoveError(move, result.error)
    return result.state


def get_valid_moved_states(state: GameState) -> List[MovedState]:
    """Apply every valid move and pair it with the resulting state and id."""
    moved = []
    for move in get_valid_moves(state):
        new_state = apply_move(state, move)
        moved.append(MovedState(move, new_state, new_state.state_id))
    return moved
