"""Defines the physical tile grid of an FPGA device as seen by NoC setup.

Only the information needed to locate hard NoC router tiles is modelled: the
name and footprint of the tile type occupying each grid cell and the offset of
the cell within that footprint.
"""

from collections import namedtuple


class PhysicalTileType(object):
    """A type of physical tile which may be placed in a device grid.

    Attributes
    ----------
    name : str
        The name used for the tile type in the architecture description.
    width : int
        The number of grid cells the tile spans in the x direction.
    height : int
        The number of grid cells the tile spans in the y direction.
    """

    __slots__ = ["name", "width", "height"]

    def __init__(self, name, width=1, height=1):
        if width < 1 or height < 1:
            raise ValueError("Tiles must be at least one cell in size.")
        self.name = name
        self.width = width
        self.height = height

    def __repr__(self):
        return "<{} {!r} {}x{}>".format(self.__class__.__name__,
                                        self.name, self.width, self.height)


"""The tile type of every grid cell which has not been given a tile."""
EMPTY_TILE_TYPE = PhysicalTileType("EMPTY")


class GridTile(namedtuple("GridTile", "type width_offset height_offset")):
    """The contents of a single grid cell.

    Parameters
    ----------
    type : :py:class:`.PhysicalTileType`
        The tile type covering this cell.
    width_offset : int
        The x-distance of this cell from the tile's bottom-left (origin) cell.
    height_offset : int
        The y-distance of this cell from the tile's bottom-left (origin) cell.
    """


_EMPTY_CELL = GridTile(EMPTY_TILE_TYPE, 0, 0)


class DeviceGrid(object):
    """The grid of physical tiles which make up a device.

    Attributes
    ----------
    width : int
        Grid cells have x-coordinates between 0 and width-1 inclusive.
    height : int
        Grid cells have y-coordinates between 0 and height-1 inclusive.
    num_layers : int
        The number of die layers (greater than one for 3-D devices).
    """

    __slots__ = ["width", "height", "num_layers", "_cells"]

    def __init__(self, width, height, num_layers=1):
        self.width = width
        self.height = height
        self.num_layers = num_layers

        # {(x, y, layer): GridTile, ...} for all occupied cells
        self._cells = {}

    def place_tile(self, tile_type, x, y, layer=0):
        """Place a tile with its bottom-left corner at the given cell.

        Every cell covered by the tile's footprint is filled in with the
        appropriate offsets.

        Raises
        ------
        ValueError
            If the tile does not fit within the grid or overlaps another tile.
        """
        if not (0 <= x and x + tile_type.width <= self.width and
                0 <= y and y + tile_type.height <= self.height and
                0 <= layer < self.num_layers):
            raise ValueError(
                "{} at ({}, {}, {}) does not fit in the grid.".format(
                    tile_type, x, y, layer))

        cells = [(x + dx, y + dy, layer)
                 for dx in range(tile_type.width)
                 for dy in range(tile_type.height)]
        for cell in cells:
            if cell in self._cells:
                raise ValueError(
                    "{} at ({}, {}, {}) overlaps {} at {}.".format(
                        tile_type, x, y, layer, self._cells[cell].type, cell))

        for cx, cy, layer in cells:
            self._cells[(cx, cy, layer)] = GridTile(tile_type, cx - x, cy - y)

    def __getitem__(self, location):
        """Get the :py:class:`.GridTile` at `(x, y)` or `(x, y, layer)`.

        Raises
        ------
        IndexError
            If the location lies outside the grid.
        """
        if len(location) == 2:
            x, y = location
            layer = 0
        else:
            x, y, layer = location

        if not (0 <= x < self.width and 0 <= y < self.height and
                0 <= layer < self.num_layers):
            raise IndexError(
                "{} is not part of the grid.".format(repr(location)))

        return self._cells.get((x, y, layer), _EMPTY_CELL)

    def __iter__(self):
        """Iterate over all `(x, y, layer)` cell locations.

        Within each layer, x is the outer and y the inner loop.
        """
        for layer in range(self.num_layers):
            for x in range(self.width):
                for y in range(self.height):
                    yield (x, y, layer)
