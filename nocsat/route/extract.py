"""Convert solved routing variables into ordered routes.
"""

from nocsat.exceptions import RouteChainError


def sort_links_in_chain_order(links, topology, source=None, sink=None):
    """Order an unordered collection of links into a chain.

    The chain starts at the unique link whose source router is not the sink
    of any other link and follows source-to-sink adjacency from there.

    Parameters
    ----------
    links : [link, ...]
        Link indices, in any order.
    topology : :py:class:`~nocsat.topology.NocTopology`
    source, sink : int or None
        If given, the router index the chain must start (end) at.

    Returns
    -------
    [link, ...]

    Raises
    ------
    RouteChainError
        If the links do not form exactly one simple chain (with the given
        endpoints).
    """
    links = list(links)
    if not links:
        if source is not None and sink is not None and source != sink:
            raise RouteChainError(
                "No links connect router {} to router {}.".format(
                    source, sink))
        return []

    # {router: link leaving it, ...}
    by_source = {}
    sinks = set()
    for link in links:
        link_source = topology.links[link].source
        if link_source in by_source:
            raise RouteChainError(
                "Route branches at router {}.".format(link_source), links)
        by_source[link_source] = link
        sinks.add(topology.links[link].sink)

    starts = [link for link in links
              if topology.links[link].source not in sinks]
    if len(starts) != 1:
        raise RouteChainError(
            "Route has {} starting links.".format(len(starts)), links)

    chain = []
    link = starts[0]
    visited = set([topology.links[link].source])
    while link is not None:
        chain.append(link)
        next_router = topology.links[link].sink
        if next_router in visited:
            raise RouteChainError(
                "Route visits router {} twice.".format(next_router), links)
        visited.add(next_router)
        link = by_source.get(next_router)

    if len(chain) != len(links):
        raise RouteChainError(
            "{} links are not part of the route.".format(
                len(links) - len(chain)), links)

    if source is not None and topology.links[chain[0]].source != source:
        raise RouteChainError(
            "Route starts at router {} instead of {}.".format(
                topology.links[chain[0]].source, source), links)
    if sink is not None and topology.links[chain[-1]].sink != sink:
        raise RouteChainError(
            "Route ends at router {} instead of {}.".format(
                topology.links[chain[-1]].sink, sink), links)

    return chain


def convert_vars_to_routes(model, solver, context):
    """Read the route of every flow from a solved routing model.

    Parameters
    ----------
    model : :py:class:`~nocsat.route.model.NocRoutingModel`
    solver : :py:class:`~nocsat.route.solver.Solver`
        A solver holding a feasible solution of the model.
    context : :py:class:`~nocsat.context.NocContext`

    Returns
    -------
    [[link, ...], ...]
        The ordered route of each flow, indexed by flow id.
    """
    topology = context.topology
    routes = []
    for flow in context.traffic_flows:
        selected = [link.index for link in topology.links
                    if solver.boolean_value(
                        model.flow_link_vars[(flow.id, link.index)])]
        source, sink = model.flow_routers[flow.id]
        routes.append(sort_links_in_chain_order(selected, topology,
                                                source, sink))
    return routes
