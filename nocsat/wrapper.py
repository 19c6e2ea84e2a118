"""High-level wrapper around NoC setup and routing.
"""

from nocsat.context import NocContext

from nocsat.route import route as default_route


def noc_route_wrapper(architecture, device_grid, traffic_flows, placement,
                      turn_model=None, route=default_route, **route_kwargs):
    """Build the NoC of a device and route a set of traffic flows over it.

    Parameters
    ----------
    architecture : :py:class:`~nocsat.architecture.NocArchitecture`
        The NoC described by the architecture.
    device_grid : :py:class:`~nocsat.device.DeviceGrid`
        The device whose router tiles implement the NoC.
    traffic_flows : :py:class:`~nocsat.traffic.TrafficFlowStorage`
        The flows to route.
    placement : {block: (x, y) or (x, y, layer), ...}
        The grid location of every router block used by a traffic flow.
    turn_model : :py:class:`~nocsat.turn_model.TurnModel`
        **Optional.** The turns no flow may take. Defaults to
        :py:class:`~nocsat.turn_model.XYRouting`.
    route : function (Default: :py:func:`nocsat.route.route`)
        **Optional.** Routing algorithm to use.
    **route_kwargs
        Algorithm-specific arguments for the router.

    Returns
    -------
    topology : :py:class:`~nocsat.topology.NocTopology`
        The NoC built for the device. Routes refer to its link indices.
    result : :py:class:`~nocsat.route.RoutingResult`

    Raises
    ------
    NocConfigurationError
        If the NoC cannot be built or a flow cannot be resolved to routers.
    """
    context = NocContext.from_architecture(architecture, device_grid,
                                           traffic_flows, placement,
                                           turn_model)
    return context.topology, route(context, **route_kwargs)
