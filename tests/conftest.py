import pytest

from nocsat.architecture import NocArchitecture, LogicalRouter

from nocsat.device import DeviceGrid, PhysicalTileType

from nocsat.directions import Direction


ROUTER_TILE = "noc_router"


def make_mesh(width, height, spacing=1, link_bandwidth=100.0,
              link_latency=1.0, router_latency=0.0, one_way=False):
    """Build the architecture and device grid of a width x height mesh NoC.

    Router (x, y) has id `y * width + x` and sits at grid location
    `(x * spacing, y * spacing)`. Routers are declared in id order and each
    connects to its east, north, west and south neighbours (in that order).
    If `one_way` is True, only east and north links are declared.
    """
    router_tile = PhysicalTileType(ROUTER_TILE)
    device_grid = DeviceGrid(width * spacing, height * spacing)

    directions = list(Direction)
    if one_way:
        directions = [Direction.east, Direction.north]

    routers = []
    for y in range(height):
        for x in range(width):
            device_grid.place_tile(router_tile, x * spacing, y * spacing)
            connections = []
            for direction in directions:
                dx, dy = direction.to_vector()
                if 0 <= x + dx < width and 0 <= y + dy < height:
                    connections.append((y + dy) * width + (x + dx))
            routers.append(LogicalRouter(y * width + x, x * spacing,
                                         y * spacing, connections))

    architecture = NocArchitecture(ROUTER_TILE, link_bandwidth, link_latency,
                                   router_latency, routers)
    return architecture, device_grid


@pytest.fixture
def mesh():
    """A function which builds (architecture, device_grid) of a mesh NoC."""
    return make_mesh


def find_link(topology, source_id, sink_id):
    """Get the index of the link between two routers (given by user id)."""
    source = topology.convert_router_id(source_id)
    sink = topology.convert_router_id(sink_id)
    for link in topology.outgoing_links(source):
        if topology.links[link].sink == sink:
            return link
    raise KeyError((source_id, sink_id))


@pytest.fixture
def link_between():
    """A function which finds the link between two routers by user id."""
    return find_link
