"""Combination-lock enumeration of version selections.

Each name being selected has a *dial*: its candidate options ordered from
most to least preferred (newest version first). A selection is a tuple of
dial positions. Turning the lock yields the next selection in preference
order, so every combination is visited exactly once, most recent first.

Dials are given in priority order. The last dial turns fastest; the first
dial only moves once every dial after it has been exhausted, which keeps the
highest-priority name at its newest version for as long as possible.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any


def next_combination(
    dials: Sequence[Sequence[Any]], positions: Sequence[int]
) -> tuple[int, ...] | None:
    """Return the selection after *positions*, or None when exhausted.

    Scans from the lowest-priority dial upwards. A dial that can move to a
    less preferred option does so and the scan stops. A dial already at its
    last option wraps back to position 0 and the scan continues with the next
    dial. If every dial wraps there is no further combination.

    Args:
        dials: Options per name, most preferred first.
        positions: The last tried position on each dial.

    Raises:
        ValueError: If *positions* does not match *dials*.
    """
    if len(dials) != len(positions):
        raise ValueError(
            f"Expected {len(dials)} dial positions, got {len(positions)}"
        )
    turned = list(positions)
    for index in reversed(range(len(dials))):
        if turned[index] + 1 < len(dials[index]):
            turned[index] += 1
            return tuple(turned)
        turned[index] = 0
    return None


def iter_combinations(dials: Sequence[Sequence[Any]]) -> Iterator[tuple[int, ...]]:
    """Yield every selection of *dials* in preference order.

    Nothing is yielded if any dial is empty.
    """
    if any(len(dial) == 0 for dial in dials):
        return
    positions: tuple[int, ...] | None = tuple(0 for _ in dials)
    while positions is not None:
        yield positions
        positions = next_combination(dials, positions)
