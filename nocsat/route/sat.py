"""Route traffic flows over a NoC by solving a constraint optimisation model.
"""

import logging
import time

from collections import namedtuple

from nocsat.route.solver import CpSatSolver, SolveStatus

from nocsat.route.model import build_routing_model

from nocsat.route.extract import convert_vars_to_routes

from nocsat.route.utils import DEFAULT_BANDWIDTH_RESOLUTION


"""
This logger is used by the router to indicate progress.
"""
logger = logging.getLogger(__name__)


class RoutingResult(namedtuple("RoutingResult", "status routes")):
    """The outcome of a call to :py:func:`.route`.

    Parameters
    ----------
    status : :py:class:`~nocsat.route.solver.SolveStatus`
    routes : [[link, ...], ...]
        The ordered links of each flow's route, indexed by flow id. Empty if
        no feasible routing was found.
    """

    @property
    def routed(self):
        """True iff a feasible routing was found."""
        return self.status.is_feasible


def _pin_and_minimize_bandwidth(model, solver, solve_kwargs):
    """Re-solve a solved model, minimising the aggregate bandwidth only while
    holding the latency overrun and congestion at their achieved levels.

    Returns
    -------
    :py:class:`~nocsat.route.solver.SolveStatus`
    """
    overrun = sum(solver.value(var)
                  for _, var in sorted(model.latency_overrun_vars.items()))
    congested = sum(int(solver.boolean_value(var))
                    for var in model.congested_link_vars)
    hints = [(var, int(solver.boolean_value(var)))
             for _, var in sorted(model.flow_link_vars.items())]

    logger.info("Minimising aggregate bandwidth with latency overrun %d and "
                "%d congested links.", overrun, congested)

    solver.add_linear(model.total_latency_overrun, upper_bound=overrun)
    solver.add_linear(model.total_congested_links, upper_bound=congested)

    solver.clear_hints()
    for var, value in hints:
        solver.add_hint(var, value)

    solver.minimize(model.aggregate_bandwidth)
    return solver.solve(**solve_kwargs)


def route(context, bandwidth_resolution=DEFAULT_BANDWIDTH_RESOLUTION, seed=0,
          minimize_aggregate_bandwidth=False, time_limit=None, num_workers=1,
          log_search_progress=False, solver=None):
    """Route every traffic flow in a context.

    Parameters
    ----------
    context : :py:class:`~nocsat.context.NocContext`
    bandwidth_resolution : int
        The number of integer units a link's bandwidth is divided into when
        computing congestion. Greater values are more precise but produce
        harder models.
    seed : int
        Random seed for the solver. Identical inputs and seeds produce
        identical routes (when `num_workers` is 1).
    minimize_aggregate_bandwidth : bool
        If True, the routing found is refined by a second solve which
        minimises only the aggregate bandwidth routed while keeping the
        latency overrun and number of congested links no worse.
    time_limit : float or None
        Time budget (in seconds) shared by every solve. If exhausted, the best
        solution found so far is used. The bandwidth minimisation solve only
        gets the time left over by the first solve and is skipped if there
        is none.
    num_workers : int or None
        Number of solver search threads.
    log_search_progress : bool
        Enable the solver's own search log.
    solver : :py:class:`~nocsat.route.solver.Solver` or None
        A fresh solver to build the model in. A
        :py:class:`~nocsat.route.solver.CpSatSolver` if None.

    Returns
    -------
    :py:class:`.RoutingResult`
        If no feasible routing is found, the status says why and the list of
        routes is empty.

    Raises
    ------
    NocConfigurationError
        If the context is inconsistent (e.g. a flow endpoint is not placed on
        a router).
    """
    if len(context.traffic_flows) == 0:
        logger.info("No traffic flows to route.")
        return RoutingResult(SolveStatus.optimal, [])

    if solver is None:
        solver = CpSatSolver()

    start_time = time.time()
    model = build_routing_model(context, solver, bandwidth_resolution)
    solve_kwargs = dict(time_limit=time_limit, seed=seed,
                        num_workers=num_workers,
                        log_search_progress=log_search_progress)

    logger.info("Routing %d traffic flows over %d links.",
                len(context.traffic_flows), len(context.topology.links))
    solve_start_time = time.time()
    status = solver.solve(**solve_kwargs)
    if not status.is_feasible:
        logger.info("No routing found (%s) after %0.2f s.",
                    status.name, time.time() - start_time)
        return RoutingResult(status, [])

    routes = convert_vars_to_routes(model, solver, context)

    if minimize_aggregate_bandwidth and time_limit is not None:
        solve_kwargs["time_limit"] = \
            time_limit - (time.time() - solve_start_time)
        if solve_kwargs["time_limit"] <= 0:
            logger.info("No time left to minimise aggregate bandwidth; "
                        "keeping the first routing.")
            minimize_aggregate_bandwidth = False

    if minimize_aggregate_bandwidth:
        second_status = _pin_and_minimize_bandwidth(model, solver,
                                                    solve_kwargs)
        if second_status.is_feasible:
            status = second_status
            routes = convert_vars_to_routes(model, solver, context)
        else:
            logger.info("Bandwidth minimisation found no solution (%s); "
                        "keeping the first routing.", second_status.name)

    logger.info("Routing finished (%s) after %0.2f s.",
                status.name, time.time() - start_time)

    return RoutingResult(status, routes)
