"""Build a NoC topology from an architecture description and a device grid.

Every logical router declared in the architecture is mapped onto the physical
router tile nearest to its declared position; links are then created from the
declared router connections. Any inconsistency between the architecture and
the device is a fatal :py:exc:`~nocsat.exceptions.NocConfigurationError`.
"""

import logging

from collections import namedtuple

import numpy as np

import sentinel

from nocsat.topology import NocTopology

from nocsat.exceptions import NocConfigurationError


logger = logging.getLogger(__name__)

"""Marks a physical router tile which no logical router has claimed yet."""
NotAssigned = sentinel.create("NotAssigned")


class RouterTilePosition(namedtuple("RouterTilePosition",
                                    "x y layer centroid_x centroid_y")):
    """The location of a physical router tile.

    Parameters
    ----------
    x, y, layer : int
        The grid location of the tile's bottom-left cell.
    centroid_x, centroid_y : float
        The centre of the tile's footprint.
    """


def identify_router_tile_positions(device_grid, router_tile_name):
    """Find all physical NoC router tiles in a device grid.

    Tiles spanning several grid cells are reported once, at the cell where
    both footprint offsets are zero.

    Returns
    -------
    [:py:class:`.RouterTilePosition`, ...]
        In grid scan order (see :py:meth:`nocsat.device.DeviceGrid.__iter__`).
    """
    positions = []
    for x, y, layer in device_grid:
        tile = device_grid[x, y, layer]
        if (tile.type.name == router_tile_name and
                tile.width_offset == 0 and tile.height_offset == 0):
            positions.append(RouterTilePosition(
                x, y, layer,
                (tile.type.width - 1) / 2.0 + x,
                (tile.type.height - 1) / 2.0 + y))
    return positions


def create_noc_routers(architecture, topology, router_tile_positions):
    """Assign every logical router to its nearest physical router tile and add
    the resulting routers to the topology.

    Raises
    ------
    NocConfigurationError
        If a logical router is equally close to two physical router tiles or
        if two logical routers are closest to the same tile.
    """
    centroids = np.array([(p.centroid_x, p.centroid_y, p.layer)
                          for p in router_tile_positions], dtype=float)

    # The logical router id assigned to each physical tile
    assignments = [NotAssigned] * len(router_tile_positions)

    for logical_router in architecture.routers:
        hint = np.array([logical_router.x, logical_router.y,
                         logical_router.layer], dtype=float)
        distances = np.sqrt(np.sum((centroids - hint) ** 2, axis=1))
        closest = int(np.argmin(distances))

        ties = np.flatnonzero(np.isclose(distances, distances[closest],
                                         rtol=1e-9, atol=0.0))
        if len(ties) > 1:
            a, b = (router_tile_positions[i] for i in ties[:2])
            raise NocConfigurationError(
                "Router with ID '{}' has the same distance to physical router "
                "tiles located at position ({},{}) and ({},{}). Therefore, no "
                "router assignment could be made.".format(
                    logical_router.id, a.x, a.y, b.x, b.y))

        position = router_tile_positions[closest]
        if assignments[closest] is not NotAssigned:
            raise NocConfigurationError(
                "Routers with IDs '{}' and '{}' are both closest to physical "
                "router tile located at ({},{}) and the physical router could "
                "not be assigned multiple times.".format(
                    logical_router.id, assignments[closest],
                    position.x, position.y))

        topology.add_router(logical_router.id,
                            position.x, position.y, position.layer)
        assignments[closest] = logical_router.id


def create_noc_links(architecture, topology):
    """Create the links declared by each logical router's connection list."""
    for logical_router in architecture.routers:
        source = topology.convert_router_id(logical_router.id)
        for connected_id in logical_router.connections:
            topology.add_link(source, topology.convert_router_id(connected_id))


def setup_noc(architecture, device_grid):
    """Build the NoC topology described by an architecture on a device.

    Parameters
    ----------
    architecture : :py:class:`~nocsat.architecture.NocArchitecture`
    device_grid : :py:class:`~nocsat.device.DeviceGrid`

    Returns
    -------
    :py:class:`~nocsat.topology.NocTopology`
        A finished (read-only) topology. Routers are indexed in the order they
        were declared in the architecture, links in the order of the
        declared connection lists.

    Raises
    ------
    NocConfigurationError
        If the device has no router tiles, if the number of declared routers
        differs from the number of router tiles, or if routers cannot be
        unambiguously assigned to tiles.
    """
    router_tile_positions = identify_router_tile_positions(
        device_grid, architecture.router_tile_name)

    num_declared = len(architecture.routers)
    num_physical = len(router_tile_positions)
    if num_physical == 0:
        raise NocConfigurationError(
            "No physical NoC routers were found on the FPGA device. Either "
            "the provided name for the physical router tile ('{}') was "
            "incorrect or the FPGA device has no routers.".format(
                architecture.router_tile_name))
    elif num_physical < num_declared:
        raise NocConfigurationError(
            "The NoC topology in the architecture has more routers ({}) than "
            "are available in the FPGA device ({}).".format(
                num_declared, num_physical))
    elif num_physical > num_declared:
        raise NocConfigurationError(
            "The NoC topology in the architecture uses fewer routers ({}) "
            "than are available in the FPGA device ({}).".format(
                num_declared, num_physical))

    topology = NocTopology(architecture.link_bandwidth,
                           architecture.link_latency,
                           architecture.router_latency)
    create_noc_routers(architecture, topology, router_tile_positions)
    create_noc_links(architecture, topology)
    topology.finished_building()

    logger.info("Built NoC with %d routers and %d links.",
                len(topology.routers), len(topology.links))

    return topology
