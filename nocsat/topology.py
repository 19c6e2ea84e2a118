"""The in-memory model of a NoC: routers, the directed links between them and
the device-wide link/router properties.

The model is built once (usually by :py:func:`nocsat.setup_noc.setup_noc`) and
is read-only from then on. Routers and links are identified by dense integer
indices assigned in creation order so that per-router and per-link data can be
stored in plain lists.
"""

from nocsat.directions import Direction

from nocsat.exceptions import NocConfigurationError


class Router(object):
    """A hard NoC router.

    Attributes
    ----------
    index : int
        Dense internal identifier.
    user_id : int
        The identifier given to the router in the architecture description.
    x, y, layer : int
        The grid position of the bottom-left corner of the router's tile.
    """

    __slots__ = ["index", "user_id", "x", "y", "layer"]

    def __init__(self, index, user_id, x, y, layer=0):
        self.index = index
        self.user_id = user_id
        self.x = x
        self.y = y
        self.layer = layer

    @property
    def position(self):
        return (self.x, self.y, self.layer)

    def __repr__(self):
        return "<Router {} (id {}) at {}>".format(
            self.index, self.user_id, self.position)


class Link(object):
    """A directed NoC link.

    Attributes
    ----------
    index : int
        Dense internal identifier.
    source : int
        Index of the router the link leaves.
    sink : int
        Index of the router the link arrives at.
    direction : :py:class:`~nocsat.directions.Direction` or None
        The direction the link travels in the plane. None for links which
        connect vertically adjacent layers only.
    bandwidth : float
    latency : float
    """

    __slots__ = ["index", "source", "sink", "direction",
                 "bandwidth", "latency"]

    def __init__(self, index, source, sink, direction, bandwidth, latency):
        self.index = index
        self.source = source
        self.sink = sink
        self.direction = direction
        self.bandwidth = bandwidth
        self.latency = latency

    def __repr__(self):
        return "<Link {}: {} -> {}>".format(self.index, self.source, self.sink)


def _link_direction(source, sink):
    """Infer the direction of a link from its endpoint routers.

    Returns None for links which change layer only.

    Raises
    ------
    NocConfigurationError
        If the link is neither horizontal nor vertical.
    """
    dx = sink.x - source.x
    dy = sink.y - source.y
    if dx == 0 and dy == 0:
        return None
    try:
        return Direction.from_vector((dx, dy))
    except ValueError:
        raise NocConfigurationError(
            "NoC link from router {} at {} to router {} at {} is neither "
            "horizontal nor vertical.".format(
                source.user_id, source.position,
                sink.user_id, sink.position))


class NocTopology(object):
    """Routers and links of a NoC.

    Attributes
    ----------
    link_bandwidth : float
        The bandwidth shared by all links.
    link_latency : float
        The latency shared by all links.
    router_latency : float
        The latency shared by all routers.
    routers : [:py:class:`.Router`, ...]
        All routers, indexed by :py:attr:`.Router.index`.
    links : [:py:class:`.Link`, ...]
        All links, indexed by :py:attr:`.Link.index`.
    """

    def __init__(self, link_bandwidth, link_latency, router_latency):
        self.link_bandwidth = link_bandwidth
        self.link_latency = link_latency
        self.router_latency = router_latency

        self.routers = []
        self.links = []

        # {user_id: index, ...}
        self._user_ids = {}
        # {(x, y, layer): index, ...}
        self._locations = {}
        # Per-router lists of link indices
        self._outgoing = []
        self._incoming = []
        # Per-router (x, y) positions in a grid containing only routers
        self._compressed = None

    @property
    def built(self):
        """True once :py:meth:`.finished_building` has been called."""
        return self._compressed is not None

    def _check_not_built(self):
        if self.built:
            raise RuntimeError("The NoC topology has already been built.")

    def add_router(self, user_id, x, y, layer=0):
        """Create a router at the given grid position.

        Returns
        -------
        :py:class:`.Router`

        Raises
        ------
        NocConfigurationError
            If the id or the position is already in use.
        """
        self._check_not_built()
        if user_id in self._user_ids:
            raise NocConfigurationError(
                "Router ID '{}' was declared more than once.".format(user_id))
        if (x, y, layer) in self._locations:
            raise NocConfigurationError(
                "Routers with IDs '{}' and '{}' occupy the same position "
                "{}.".format(
                    self.routers[self._locations[(x, y, layer)]].user_id,
                    user_id, (x, y, layer)))

        router = Router(len(self.routers), user_id, x, y, layer)
        self.routers.append(router)
        self._user_ids[user_id] = router.index
        self._locations[(x, y, layer)] = router.index
        self._outgoing.append([])
        self._incoming.append([])
        return router

    def add_link(self, source, sink):
        """Create a directed link between two routers (given by index).

        Returns
        -------
        :py:class:`.Link`

        Raises
        ------
        NocConfigurationError
            If either router does not exist, the link is a self loop or it is
            not axis-aligned.
        """
        self._check_not_built()
        for router in (source, sink):
            if not 0 <= router < len(self.routers):
                raise NocConfigurationError(
                    "Router index {} does not exist.".format(router))
        if source == sink:
            raise NocConfigurationError(
                "Router '{}' cannot be linked to itself.".format(
                    self.routers[source].user_id))

        direction = _link_direction(self.routers[source], self.routers[sink])
        link = Link(len(self.links), source, sink, direction,
                    self.link_bandwidth, self.link_latency)
        self.links.append(link)
        self._outgoing[source].append(link.index)
        self._incoming[sink].append(link.index)
        return link

    def finished_building(self):
        """Freeze the topology.

        Compressed router coordinates are computed here: a router's compressed
        x-coordinate is the rank of its x-coordinate amongst the distinct
        x-coordinates of all routers (and likewise for y).
        """
        self._check_not_built()
        xs = sorted(set(r.x for r in self.routers))
        ys = sorted(set(r.y for r in self.routers))
        x_rank = {x: i for i, x in enumerate(xs)}
        y_rank = {y: i for i, y in enumerate(ys)}
        self._compressed = [(x_rank[r.x], y_rank[r.y], r.layer)
                            for r in self.routers]

    def convert_router_id(self, user_id):
        """Get the index of the router with the given user-facing id.

        Raises
        ------
        NocConfigurationError
            If no such router exists.
        """
        try:
            return self._user_ids[user_id]
        except KeyError:
            raise NocConfigurationError(
                "No router with ID '{}' exists in the NoC.".format(user_id))

    def get_router_at_grid_location(self, x, y, layer=0):
        """Get the index of the router whose tile is anchored at a location.

        Raises
        ------
        KeyError
            If no router is located there.
        """
        return self._locations[(x, y, layer)]

    def outgoing_links(self, router):
        """Indices of the links leaving a router."""
        return self._outgoing[router]

    def incoming_links(self, router):
        """Indices of the links arriving at a router."""
        return self._incoming[router]

    def compressed_location(self, router):
        """The (x, y, layer) location of a router in the compressed grid."""
        if not self.built:
            raise RuntimeError("The NoC topology has not been built yet.")
        return self._compressed[router]

    def link_direction(self, link):
        return self.links[link].direction

    def __repr__(self):
        return "<NocTopology with {} routers and {} links>".format(
            len(self.routers), len(self.links))
