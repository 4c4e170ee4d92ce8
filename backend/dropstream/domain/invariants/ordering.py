from typing import Iterable

from .exceptions import InvariantViolation


def assert_dense_positions(positions: Iterable[int], *, label: str = "collection") -> None:
    """
    Positions of a parent's children must be exactly {0, ..., N-1}.
    """
    positions = list(positions)
    if not positions:
        return

    expected = list(range(len(positions)))
    if sorted(positions) != expected:
        raise InvariantViolation(
            f"{label} positions are not consecutive starting from 0: {sorted(positions)}"
        )
