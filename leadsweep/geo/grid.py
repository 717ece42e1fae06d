"""
Sweep Point Generation

Expands a city center into a plus-shaped set of query points. The search
service caps results per query, so querying a few nearby points surfaces
businesses that fall outside the first query's result window.
"""

from dataclasses import dataclass
from typing import List

from ..config import DEFAULT_GRID_OFFSET
from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees"""
    lat: float
    lng: float

    @classmethod
    def parse(cls, value: str) -> "Coordinate":
        """
        Parse a "lat,lng" string.

        Raises:
            ConfigurationError: If the string is not two comma-separated numbers
        """
        parts = str(value).split(",")
        if len(parts) != 2:
            raise ConfigurationError(f"Invalid coordinate {value!r}: expected 'lat,lng'")
        try:
            return cls(float(parts[0]), float(parts[1]))
        except ValueError:
            raise ConfigurationError(f"Invalid coordinate {value!r}: expected 'lat,lng'")

    def __str__(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True)
class City:
    """A named city with the center point its sweep is built around"""
    name: str
    center: Coordinate


def generate_sweep_points(center: Coordinate, offset: float = DEFAULT_GRID_OFFSET) -> List[Coordinate]:
    """
    Generate the sweep points for a city.

    Returns the center followed by the four points offset by +/- offset along
    latitude and longitude (a cross, not a full 3x3 grid).

    Args:
        center: The city center
        offset: Offset in decimal degrees (0.03 is roughly 3 km)

    Returns:
        List of 5 Coordinate objects, center first

    Raises:
        ValueError: If offset is not positive or too small to yield 5 distinct points
    """
    if offset <= 0:
        raise ValueError(f"offset must be positive, got {offset}")

    points = [
        center,
        Coordinate(center.lat + offset, center.lng),
        Coordinate(center.lat - offset, center.lng),
        Coordinate(center.lat, center.lng + offset),
        Coordinate(center.lat, center.lng - offset),
    ]
    # An offset below float resolution at this center collapses the cross.
    if len(set(points)) != len(points):
        raise ValueError(f"offset {offset} is too small to move away from {center}")
    return points
