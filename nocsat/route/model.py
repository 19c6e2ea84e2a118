"""Build the constraint model which routes traffic flows over a NoC.

The model has one boolean decision variable per (traffic flow, link) pair
which is true iff the flow is routed over the link. The following constraint
families restrict these variables:

* Continuity: the links selected for a flow form a single simple path from
  the flow's source router to its sink router.
* Geometric progress: the number of links a flow takes in each direction
  matches the displacement between its source and sink.
* Deadlock avoidance: no flow takes a turn forbidden by the turn model.
* Congestion: each link has a boolean indicating whether the flows routed over
  it demand more bandwidth than it provides.
* Latency: each latency-constrained flow has a counter of the links it uses
  beyond its hop budget.

The objective minimises, in strict order of priority, the total latency
overrun, the number of congested links and the aggregate bandwidth routed.
"""

import logging

from collections import defaultdict

from nocsat.directions import Direction

from nocsat.route.solver import LinearExpr

from nocsat.route.utils import \
    rescale_traffic_flow_bandwidths, comp_max_number_of_traversed_links, \
    group_links_by_direction, objective_weights, MAX_LATENCY_OVERRUN


logger = logging.getLogger(__name__)


class NocRoutingModel(object):
    """The variables and objective terms of a NoC routing model.

    Attributes
    ----------
    context : :py:class:`~nocsat.context.NocContext`
    solver : :py:class:`~nocsat.route.solver.Solver`
        The solver the model was built in.
    flow_routers : {flow_id: (source, sink), ...}
        The router indices each flow's endpoints are placed on.
    flow_link_vars : {(flow_id, link): var, ...}
        Dense over all flows and links.
    latency_overrun_vars : {flow_id: var, ...}
        One entry per latency-constrained flow.
    congested_link_vars : [var, ...]
        Indexed by link.
    rescaled_bandwidths : [int, ...]
        Indexed by flow id.
    hop_budgets : {flow_id: int, ...}
        One entry per latency-constrained flow.
    latency_weight, congestion_weight : int
        Objective weights (see
        :py:func:`~nocsat.route.utils.objective_weights`).
    total_latency_overrun, total_congested_links, aggregate_bandwidth : \
            :py:class:`~nocsat.route.solver.LinearExpr`
        The three terms of the objective.
    objective : :py:class:`~nocsat.route.solver.LinearExpr`
    """

    def __init__(self, context, solver, bandwidth_resolution):
        self.context = context
        self.solver = solver
        self.bandwidth_resolution = bandwidth_resolution

        self.flow_routers = {}
        self.flow_link_vars = {}
        self.latency_overrun_vars = {}
        self.congested_link_vars = []
        self.rescaled_bandwidths = []
        self.hop_budgets = {}

        self.latency_weight = None
        self.congestion_weight = None
        self.total_latency_overrun = LinearExpr()
        self.total_congested_links = LinearExpr()
        self.aggregate_bandwidth = LinearExpr()
        self.objective = LinearExpr()

    def flow_vars(self, flow_id, links=None):
        """Get the decision variables of a flow.

        Parameters
        ----------
        flow_id : int
        links : [link, ...] or None
            The links to get the variables of. All links if None.
        """
        if links is None:
            links = range(len(self.context.topology.links))
        return [self.flow_link_vars[(flow_id, link)] for link in links]


def create_flow_link_vars(model):
    """Create a boolean for every (flow, link) pair."""
    for flow in model.context.traffic_flows:
        for link in model.context.topology.links:
            model.flow_link_vars[(flow.id, link.index)] = \
                model.solver.new_bool_var(
                    "flow{}_link{}".format(flow.id, link.index))


def add_latency_overrun_constraints(model,
                                    max_latency_overrun=MAX_LATENCY_OVERRUN):
    """Count the links each latency-constrained flow uses beyond its hop
    budget.

    The counter is constrained to `max(0, links_used - hop_budget)`. Its upper
    bound is widened beyond `max_latency_overrun` whenever the topology is
    large enough to produce a greater overrun.
    """
    topology = model.context.topology
    num_links = len(topology.links)

    for flow in model.context.traffic_flows:
        if not flow.is_latency_constrained:
            continue

        budget = comp_max_number_of_traversed_links(
            topology.link_latency, topology.router_latency, flow.max_latency)
        model.hop_budgets[flow.id] = budget

        overrun = model.solver.new_int_var(
            0, max(max_latency_overrun, num_links - budget),
            "flow{}_latency_overrun".format(flow.id))
        model.latency_overrun_vars[flow.id] = overrun

        model.solver.add_max_equality(
            overrun, [LinearExpr.sum(model.flow_vars(flow.id), -budget),
                      LinearExpr()])

    logger.debug("Added %d latency overrun counters.",
                 len(model.latency_overrun_vars))


def add_congestion_constraints(model):
    """Tie a congestion indicator to the bandwidth routed over every link."""
    solver = model.solver
    resolution = model.bandwidth_resolution
    flows = list(model.context.traffic_flows)

    for link in model.context.topology.links:
        congested = solver.new_bool_var("link{}_congested".format(link.index))
        model.congested_link_vars.append(congested)

        routed = LinearExpr.weighted_sum(
            [model.flow_link_vars[(flow.id, link.index)] for flow in flows],
            [model.rescaled_bandwidths[flow.id] for flow in flows])
        solver.add_linear(routed, upper_bound=resolution,
                          enforce_if=solver.negated(congested))
        solver.add_linear(routed, lower_bound=resolution + 1,
                          enforce_if=congested)

    logger.debug("Added %d congestion indicators.",
                 len(model.congested_link_vars))


def add_turn_model_constraints(model):
    """Forbid every flow from taking an illegal turn."""
    solver = model.solver
    illegal_turns = model.context.turn_model.illegal_turns(
        model.context.topology)

    for flow in model.context.traffic_flows:
        for link1, link2 in illegal_turns:
            solver.add_bool_or([
                solver.negated(model.flow_link_vars[(flow.id, link1)]),
                solver.negated(model.flow_link_vars[(flow.id, link2)])])

    logger.debug("Forbade %d illegal turns for %d traffic flows.",
                 len(illegal_turns), len(model.context.traffic_flows))


def _add_unused(solver, variables):
    for var in variables:
        solver.add_bool_or([solver.negated(var)])


def _add_exactly_one(solver, variables):
    if variables:
        solver.add_exactly_one(variables)
    else:
        # No links to choose from: unroutable
        solver.add_linear(LinearExpr(), 1, 1)


def add_continuity_constraints(model):
    """Force the links selected for each flow to form a simple path from its
    source router to its sink router.

    Degree constraints give every flow exactly one path. A circuit constraint
    (closed by an extra sink-to-source arc, with self loops letting unused
    routers drop out) additionally excludes cycles detached from that path.
    """
    solver = model.solver
    topology = model.context.topology

    for flow in model.context.traffic_flows:
        source, sink = model.flow_routers[flow.id]

        if source == sink:
            # Nothing to route
            _add_unused(solver, model.flow_vars(flow.id))
            continue

        _add_exactly_one(
            solver, model.flow_vars(flow.id, topology.outgoing_links(source)))
        _add_exactly_one(
            solver, model.flow_vars(flow.id, topology.incoming_links(sink)))
        _add_unused(solver,
                    model.flow_vars(flow.id, topology.incoming_links(source)))
        _add_unused(solver,
                    model.flow_vars(flow.id, topology.outgoing_links(sink)))

        for router in topology.routers:
            if router.index in (source, sink):
                continue
            incoming = model.flow_vars(flow.id,
                                       topology.incoming_links(router.index))
            outgoing = model.flow_vars(flow.id,
                                       topology.outgoing_links(router.index))
            solver.add_linear(
                LinearExpr.sum(incoming) - LinearExpr.sum(outgoing), 0, 0)
            if incoming:
                solver.add_at_most_one(incoming)
            if outgoing:
                solver.add_at_most_one(outgoing)

        _add_flow_circuit(model, flow, source, sink)


def _add_flow_circuit(model, flow, source, sink):
    solver = model.solver
    topology = model.context.topology

    # Parallel links share a single arc. Links entering the source or leaving
    # the sink are already unused and are left out.
    pair_links = defaultdict(list)
    for link in topology.links:
        if link.sink != source and link.source != sink:
            pair_links[(link.source, link.sink)].append(link.index)

    arcs = []
    for (tail, head), links in sorted(pair_links.items()):
        variables = model.flow_vars(flow.id, links)
        if len(variables) == 1:
            arc = variables[0]
        else:
            arc = solver.new_bool_var(
                "flow{}_arc{}_{}".format(flow.id, tail, head))
            solver.add_linear(
                LinearExpr.sum(variables) - LinearExpr.sum([arc]), 0, 0)
        arcs.append((tail, head, arc))

    closing = solver.new_bool_var("flow{}_return".format(flow.id))
    solver.add_bool_or([closing])
    arcs.append((sink, source, closing))

    for router in topology.routers:
        if router.index not in (source, sink):
            arcs.append((router.index, router.index, solver.new_bool_var(
                "flow{}_skip{}".format(flow.id, router.index))))

    solver.add_circuit(arcs)


def add_distance_constraints(model):
    """Force every flow to make exactly the net progress, in each axis,
    between its source and sink routers (in compressed coordinates).
    """
    topology = model.context.topology
    groups = group_links_by_direction(topology)

    for flow in model.context.traffic_flows:
        source, sink = model.flow_routers[flow.id]
        if source == sink:
            continue

        sx, sy, _ = topology.compressed_location(source)
        dx, dy, _ = topology.compressed_location(sink)
        for positive, negative, delta in ((Direction.east, Direction.west,
                                           dx - sx),
                                          (Direction.north, Direction.south,
                                           dy - sy)):
            progress = (
                LinearExpr.sum(model.flow_vars(flow.id, groups[positive])) -
                LinearExpr.sum(model.flow_vars(flow.id, groups[negative])))
            model.solver.add_linear(progress, delta, delta)


def add_objective(model):
    """Set the objective: latency overrun, then congestion, then bandwidth."""
    num_links = len(model.context.topology.links)
    model.latency_weight, model.congestion_weight = objective_weights(
        model.rescaled_bandwidths, num_links)

    model.total_latency_overrun = LinearExpr.sum(
        model.latency_overrun_vars[flow_id]
        for flow_id in sorted(model.latency_overrun_vars))
    model.total_congested_links = LinearExpr.sum(model.congested_link_vars)

    keys = sorted(model.flow_link_vars)
    model.aggregate_bandwidth = LinearExpr.weighted_sum(
        [model.flow_link_vars[key] for key in keys],
        [model.rescaled_bandwidths[flow_id] for flow_id, _ in keys])

    model.objective = (
        model.total_latency_overrun * model.latency_weight +
        model.total_congested_links * model.congestion_weight +
        model.aggregate_bandwidth)
    model.solver.minimize(model.objective)


def add_route_hints(model):
    """Hint the previously known route of every flow which has one."""
    num_hinted = 0
    for flow in model.context.traffic_flows:
        if not flow.route:
            continue
        route = set(flow.route)
        for link in model.context.topology.links:
            model.solver.add_hint(model.flow_link_vars[(flow.id, link.index)],
                                  1 if link.index in route else 0)
        num_hinted += 1

    logger.debug("Hinted known routes for %d traffic flows.", num_hinted)


def build_routing_model(context, solver, bandwidth_resolution,
                        max_latency_overrun=MAX_LATENCY_OVERRUN):
    """Build the complete routing model for a context.

    Parameters
    ----------
    context : :py:class:`~nocsat.context.NocContext`
    solver : :py:class:`~nocsat.route.solver.Solver`
        A fresh solver to build the model in.
    bandwidth_resolution : int
        The number of integer units a link's bandwidth is divided into.
    max_latency_overrun : int
        The smallest upper bound of each latency overrun counter.

    Returns
    -------
    :py:class:`.NocRoutingModel`

    Raises
    ------
    NocConfigurationError
        If a flow endpoint is not placed on a router or the latency
        parameters cannot produce a hop budget.
    """
    topology = context.topology

    model = NocRoutingModel(context, solver, bandwidth_resolution)
    for flow in context.traffic_flows:
        model.flow_routers[flow.id] = context.flow_routers(flow)
    model.rescaled_bandwidths = rescale_traffic_flow_bandwidths(
        context.traffic_flows, topology.link_bandwidth, bandwidth_resolution)

    create_flow_link_vars(model)
    add_latency_overrun_constraints(model, max_latency_overrun)
    add_congestion_constraints(model)
    add_turn_model_constraints(model)
    add_continuity_constraints(model)
    add_distance_constraints(model)
    add_objective(model)
    add_route_hints(model)

    logger.debug("Built routing model for %d traffic flows over %d links.",
                 len(context.traffic_flows), len(topology.links))

    return model
