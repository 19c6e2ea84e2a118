import pytest

from nocsat.setup_noc import \
    setup_noc, identify_router_tile_positions, RouterTilePosition

from nocsat.architecture import NocArchitecture, LogicalRouter

from nocsat.device import DeviceGrid, PhysicalTileType

from nocsat.exceptions import NocConfigurationError


ROUTER = PhysicalTileType("noc_router")


def make_grid(width, height, router_locations, tile_type=ROUTER):
    grid = DeviceGrid(width, height)
    for x, y in router_locations:
        grid.place_tile(tile_type, x, y)
    return grid


def test_identify_router_tile_positions():
    grid = DeviceGrid(6, 4)
    grid.place_tile(PhysicalTileType("noc_router", 2, 2), 0, 0)
    grid.place_tile(PhysicalTileType("clb"), 2, 0)
    grid.place_tile(PhysicalTileType("noc_router", 2, 2), 4, 2)

    # Multi-cell tiles are reported once, at their origin
    assert identify_router_tile_positions(grid, "noc_router") == [
        RouterTilePosition(0, 0, 0, 0.5, 0.5),
        RouterTilePosition(4, 2, 0, 4.5, 2.5),
    ]
    assert identify_router_tile_positions(grid, "nothing") == []


def test_setup_noc_mesh(mesh, link_between):
    architecture, grid = mesh(3, 2, spacing=2)
    topology = setup_noc(architecture, grid)

    assert topology.built
    assert topology.link_bandwidth == 100.0

    # One router per declared logical router, in declaration order
    assert [r.user_id for r in topology.routers] == list(range(6))
    assert [r.position for r in topology.routers] == [
        (0, 0, 0), (2, 0, 0), (4, 0, 0),
        (0, 2, 0), (2, 2, 0), (4, 2, 0),
    ]

    # Exactly the declared connections are present, in declaration order
    declared = [(r.id, c) for r in architecture.routers
                for c in r.connections]
    assert [(topology.routers[l.source].user_id,
             topology.routers[l.sink].user_id)
            for l in topology.links] == declared
    assert link_between(topology, 0, 1) == 0


def test_setup_noc_nearest_tile():
    grid = make_grid(10, 10, [(0, 0), (9, 0), (0, 9)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0, [
        # Hints only approximate the tile positions
        LogicalRouter(7, 1.5, 8.2, [8]),
        LogicalRouter(8, 0.7, 0.1, [9, 7]),
        LogicalRouter(9, 6.0, 2.0, [8]),
    ])
    topology = setup_noc(architecture, grid)

    assert [(r.user_id, r.position) for r in topology.routers] == [
        (7, (0, 9, 0)), (8, (0, 0, 0)), (9, (9, 0, 0)),
    ]
    assert [(l.source, l.sink) for l in topology.links] == [
        (0, 1), (1, 2), (1, 0), (2, 1),
    ]


def test_setup_noc_is_idempotent(mesh):
    architecture, grid = mesh(3, 3)
    a = setup_noc(architecture, grid)
    b = setup_noc(architecture, grid)

    assert ([(r.index, r.user_id, r.position) for r in a.routers] ==
            [(r.index, r.user_id, r.position) for r in b.routers])
    assert ([(l.index, l.source, l.sink, l.direction) for l in a.links] ==
            [(l.index, l.source, l.sink, l.direction) for l in b.links])


def test_no_router_tiles():
    grid = make_grid(2, 2, [(0, 0)], PhysicalTileType("clb"))
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 0, 0)])
    with pytest.raises(NocConfigurationError) as exc_info:
        setup_noc(architecture, grid)
    assert "No physical NoC routers" in str(exc_info.value)


def test_more_routers_declared_than_tiles():
    grid = make_grid(2, 2, [(0, 0)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 0, 0),
                                    LogicalRouter(1, 1, 1)])
    with pytest.raises(NocConfigurationError) as exc_info:
        setup_noc(architecture, grid)
    assert "more routers (2)" in str(exc_info.value)


def test_fewer_routers_declared_than_tiles():
    grid = make_grid(2, 2, [(0, 0), (1, 1)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 0, 0)])
    with pytest.raises(NocConfigurationError) as exc_info:
        setup_noc(architecture, grid)
    assert "fewer routers (1)" in str(exc_info.value)


def test_equidistant_tiles():
    grid = make_grid(3, 1, [(0, 0), (2, 0)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 1, 0),
                                    LogicalRouter(1, 2, 0)])
    with pytest.raises(NocConfigurationError) as exc_info:
        setup_noc(architecture, grid)
    message = str(exc_info.value)
    assert "same distance" in message
    assert "(0,0)" in message
    assert "(2,0)" in message


def test_two_routers_closest_to_same_tile():
    grid = make_grid(4, 1, [(0, 0), (3, 0)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 0, 0),
                                    LogicalRouter(1, 1, 0)])
    with pytest.raises(NocConfigurationError) as exc_info:
        setup_noc(architecture, grid)
    message = str(exc_info.value)
    assert "'1' and '0'" in message
    assert "(0,0)" in message


def test_unknown_connection():
    grid = make_grid(2, 1, [(0, 0), (1, 0)])
    architecture = NocArchitecture("noc_router", 1.0, 1.0, 1.0,
                                   [LogicalRouter(0, 0, 0, [5]),
                                    LogicalRouter(1, 1, 0)])
    with pytest.raises(NocConfigurationError):
        setup_noc(architecture, grid)
