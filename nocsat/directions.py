"""Compass directions of links in a mesh NoC.
"""

from enum import IntEnum

from nocsat.utils.docstrings import add_int_enums_to_docstring


@add_int_enums_to_docstring
class Direction(IntEnum):
    """Enumeration of the directions a NoC link may travel in the plane.

    The directions are ordered consecutively in anticlockwise order meaning
    the opposite direction is `(direction+2)%4`.
    """

    east = 0
    north = 1
    west = 2
    south = 3

    @classmethod
    def from_vector(cls, vector):
        """Get the direction of travel along a vector.

        Only the sign of each component matters: routers in an FPGA NoC are
        usually spaced several grid cells apart.

        Parameters
        ----------
        vector : (dx, dy)

        Raises
        ------
        ValueError
            If the vector is not strictly horizontal or vertical.
        """
        dx, dy = vector
        if dx != 0 and dy == 0:
            return cls.east if dx > 0 else cls.west
        elif dx == 0 and dy != 0:
            return cls.north if dy > 0 else cls.south
        else:
            raise ValueError(
                "Vector {} is neither horizontal nor vertical.".format(
                    (dx, dy)))

    def to_vector(self):
        """Return the unit (dx, dy) vector of this direction."""
        return _direction_to_vector[self]

    @property
    def opposite(self):
        """Get the opposite direction."""
        return Direction((self + 2) % 4)

    @property
    def is_horizontal(self):
        """True iff the direction is east or west."""
        return self in (Direction.east, Direction.west)


_direction_to_vector = {
    Direction.east: (1, 0),
    Direction.north: (0, 1),
    Direction.west: (-1, 0),
    Direction.south: (0, -1),
}
