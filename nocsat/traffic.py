"""Traffic flows: the communication requirements routed over the NoC.

A traffic flow connects two router *blocks* (logical routers in the user's
netlist). Which hard router a block sits on is decided by placement and only
resolved at routing time (see :py:class:`nocsat.context.NocContext`).
"""


class TrafficFlow(object):
    """A required communication path between two router blocks.

    Attributes
    ----------
    id : int
        Dense identifier, assigned by :py:class:`.TrafficFlowStorage`.
    source : object
        The router block the traffic originates at.
    sink : object
        The router block the traffic is destined for.
    bandwidth : float
        The bandwidth demanded by the flow.
    max_latency : float or None
        The maximum end-to-end latency permitted. None (or any non-positive
        value) means the flow is not latency constrained.
    name : str or None
        An optional name used when reporting on the flow.
    route : [int, ...]
        Indices of the links of a previously known route for this flow. Only
        ever used as a hint to the router. Empty if no route is known.
    """

    __slots__ = ["id", "source", "sink", "bandwidth", "max_latency", "name",
                 "route"]

    def __init__(self, id, source, sink, bandwidth, max_latency=None,
                 name=None, route=()):
        self.id = id
        self.source = source
        self.sink = sink
        self.bandwidth = bandwidth
        self.max_latency = max_latency
        self.name = name
        self.route = list(route)

    @property
    def is_latency_constrained(self):
        return self.max_latency is not None and self.max_latency > 0

    def __repr__(self):
        return "<TrafficFlow {} {!r} -> {!r} ({})>".format(
            self.id if self.name is None else self.name,
            self.source, self.sink, self.bandwidth)


class TrafficFlowStorage(object):
    """An ordered collection of traffic flows.

    Flows are identified by their position in the collection which is also
    their :py:attr:`~.TrafficFlow.id`.
    """

    def __init__(self):
        self._flows = []

    def add_flow(self, source, sink, bandwidth, max_latency=None, name=None,
                 route=()):
        """Add a new traffic flow.

        Returns
        -------
        :py:class:`.TrafficFlow`

        Raises
        ------
        ValueError
            If the bandwidth is negative.
        """
        if bandwidth < 0:
            raise ValueError(
                "Traffic flow bandwidth must not be negative "
                "(got {}).".format(bandwidth))
        flow = TrafficFlow(len(self._flows), source, sink, bandwidth,
                           max_latency, name, route)
        self._flows.append(flow)
        return flow

    def set_route(self, flow_id, route):
        """Record a known route (a list of link indices) for a flow."""
        self._flows[flow_id].route = list(route)

    @property
    def router_blocks(self):
        """The set of router blocks taking part in any traffic flow."""
        blocks = set()
        for flow in self._flows:
            blocks.add(flow.source)
            blocks.add(flow.sink)
        return blocks

    def __getitem__(self, flow_id):
        return self._flows[flow_id]

    def __iter__(self):
        return iter(self._flows)

    def __len__(self):
        return len(self._flows)
