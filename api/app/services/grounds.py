"""The venue's grounds.

The set is fixed: each ground is an independent resource with its own
schedule and player capacity.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Ground:
    number: int
    name: str
    format: str
    capacity: int
    facilities: tuple[str, ...]


GROUNDS: dict[int, Ground] = {
    1: Ground(
        number=1,
        name="Football Ground",
        format="7 vs 7",
        capacity=14,
        facilities=("Floodlights", "Changing Rooms", "Water Facility"),
    ),
    2: Ground(
        number=2,
        name="Cricket Ground",
        format="6 vs 6",
        capacity=12,
        facilities=("Floodlights", "Changing Rooms", "Boundary Ropes", "Scoreboard"),
    ),
}


def get_ground(number: int) -> Ground | None:
    return GROUNDS.get(number)
