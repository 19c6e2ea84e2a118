"""Architecture-level description of a NoC.

These data structures hold what an architecture description file declares
about the NoC: the device-wide link and router properties, the logical routers
(with the approximate grid position the user intends for each) and the
connections between them. Parsing the architecture file itself is left to the
caller.
"""


class LogicalRouter(object):
    """A router declared in the architecture description.

    Attributes
    ----------
    id : int
        The user-facing identifier of the router.
    x : float
        Intended x-position of the router on the device grid. The router is
        mapped onto the physical router tile closest to this position.
    y : float
        Intended y-position of the router on the device grid.
    layer : int
        Intended die layer of the router.
    connections : [int, ...]
        The user-facing ids of the routers this router has an outgoing link
        to. Bidirectional connections must be declared in both routers.
    """

    __slots__ = ["id", "x", "y", "layer", "connections"]

    def __init__(self, id, x, y, connections=(), layer=0):
        self.id = id
        self.x = x
        self.y = y
        self.layer = layer
        self.connections = list(connections)

    def __repr__(self):
        return "<{} {} at ({}, {}, {})>".format(
            self.__class__.__name__, self.id, self.x, self.y, self.layer)


class NocArchitecture(object):
    """The NoC section of an architecture description.

    Attributes
    ----------
    router_tile_name : str
        The name of the physical tile type which implements a NoC router.
    link_bandwidth : float
        The bandwidth of every NoC link.
    link_latency : float
        The latency of every NoC link.
    router_latency : float
        The latency of every NoC router.
    routers : [:py:class:`.LogicalRouter`, ...]
        The declared routers, in declaration order.
    """

    __slots__ = ["router_tile_name", "link_bandwidth", "link_latency",
                 "router_latency", "routers"]

    def __init__(self, router_tile_name, link_bandwidth, link_latency,
                 router_latency, routers=()):
        if link_bandwidth <= 0:
            raise ValueError("NoC link bandwidth must be positive.")
        if link_latency < 0 or router_latency < 0:
            raise ValueError("NoC latencies must not be negative.")
        self.router_tile_name = router_tile_name
        self.link_bandwidth = link_bandwidth
        self.link_latency = link_latency
        self.router_latency = router_latency
        self.routers = list(routers)
