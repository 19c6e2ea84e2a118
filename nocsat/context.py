"""The explicit context in which NoC routing takes place.
"""

from nocsat.exceptions import NocConfigurationError

from nocsat.setup_noc import setup_noc

from nocsat.turn_model import XYRouting


class NocContext(object):
    """Everything the SAT router reads while building its model.

    A context is a snapshot: it must not be modified while a routing call is
    in progress. Concurrent routing calls should each use their own context
    (the topology may be shared since it is read-only once built).

    Attributes
    ----------
    topology : :py:class:`~nocsat.topology.NocTopology`
    traffic_flows : :py:class:`~nocsat.traffic.TrafficFlowStorage`
    placement : {block: (x, y) or (x, y, layer), ...}
        The grid location of every router block taking part in a traffic
        flow.
    turn_model : :py:class:`~nocsat.turn_model.TurnModel`
        Supplies the turns no traffic flow may take.
    device_grid : :py:class:`~nocsat.device.DeviceGrid` or None
    architecture : :py:class:`~nocsat.architecture.NocArchitecture` or None
    """

    __slots__ = ["topology", "traffic_flows", "placement", "turn_model",
                 "device_grid", "architecture"]

    def __init__(self, topology, traffic_flows, placement, turn_model=None,
                 device_grid=None, architecture=None):
        self.topology = topology
        self.traffic_flows = traffic_flows
        self.placement = placement
        self.turn_model = turn_model if turn_model is not None else XYRouting()
        self.device_grid = device_grid
        self.architecture = architecture

    @classmethod
    def from_architecture(cls, architecture, device_grid, traffic_flows,
                          placement, turn_model=None):
        """Build the NoC topology and wrap it up in a new context.

        Raises
        ------
        NocConfigurationError
            See :py:func:`~nocsat.setup_noc.setup_noc`.
        """
        topology = setup_noc(architecture, device_grid)
        return cls(topology, traffic_flows, placement, turn_model,
                   device_grid, architecture)

    def block_router(self, block):
        """Get the index of the router a router block is placed on.

        Raises
        ------
        NocConfigurationError
            If the block is not placed or is not placed on a router.
        """
        try:
            location = tuple(self.placement[block])
        except KeyError:
            raise NocConfigurationError(
                "Router block {!r} has not been placed.".format(block))
        try:
            return self.topology.get_router_at_grid_location(*location)
        except KeyError:
            raise NocConfigurationError(
                "Router block {!r} is placed at {} where there is no NoC "
                "router.".format(block, location))

    def flow_routers(self, flow):
        """Get the (source, sink) router indices of a traffic flow."""
        return (self.block_router(flow.source), self.block_router(flow.sink))
