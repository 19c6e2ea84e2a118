import importlib

import pytest

import mock

from nocsat.route import route, RoutingResult, SolveStatus, CpSatSolver

from nocsat.context import NocContext

from nocsat.setup_noc import setup_noc

from nocsat.traffic import TrafficFlowStorage

from nocsat.turn_model import TurnModel, XYRouting


class CountingSolver(CpSatSolver):
    """Records solver calls, optionally failing every solve after the first.
    """

    def __init__(self, fail_after_first=False):
        super(CountingSolver, self).__init__()
        self.fail_after_first = fail_after_first
        self.solve_kwargs = []
        self.num_hints = 0
        self.num_clears = 0

    def add_hint(self, variable, value):
        self.num_hints += 1
        super(CountingSolver, self).add_hint(variable, value)

    def clear_hints(self):
        self.num_clears += 1
        super(CountingSolver, self).clear_hints()

    def solve(self, **kwargs):
        self.solve_kwargs.append(kwargs)
        if self.fail_after_first and len(self.solve_kwargs) > 1:
            return SolveStatus.unknown
        return super(CountingSolver, self).solve(**kwargs)


class FakeClock(object):
    """Stands in for the time module, advanced only by a SlowSolver."""

    def __init__(self):
        self.now = 0.0

    def time(self):
        return self.now


class SlowSolver(CountingSolver):
    """Every solve takes `solve_time` seconds on a fake clock."""

    def __init__(self, clock, solve_time):
        super(SlowSolver, self).__init__()
        self.clock = clock
        self.solve_time = solve_time

    def solve(self, **kwargs):
        status = super(SlowSolver, self).solve(**kwargs)
        self.clock.now += self.solve_time
        return status


def check_route(topology, context, flow, links):
    """The route is a simple path between the flow's routers."""
    source, sink = context.flow_routers(flow)
    visited = [source]
    for link in links:
        assert topology.links[link].source == visited[-1]
        visited.append(topology.links[link].sink)
    assert visited[-1] == sink
    assert len(set(visited)) == len(visited)


@pytest.fixture
def line_context(mesh):
    topology = setup_noc(*mesh(4, 1))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "d", 10.0)
    return NocContext(topology, flows, {"a": (0, 0), "d": (3, 0)})


def test_no_flows(mesh):
    topology = setup_noc(*mesh(2, 2))
    context = NocContext(topology, TrafficFlowStorage(), {})
    solver = mock.Mock()

    result = route(context, solver=solver)

    assert result == RoutingResult(SolveStatus.optimal, [])
    assert result.routed
    assert solver.mock_calls == []


def test_straight_line(line_context, link_between):
    topology = line_context.topology
    result = route(line_context, bandwidth_resolution=100)

    assert result.status == SolveStatus.optimal
    assert result.routes == [[link_between(topology, 0, 1),
                              link_between(topology, 1, 2),
                              link_between(topology, 2, 3)]]


def test_split_flows(mesh):
    topology = setup_noc(*mesh(2, 2))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "b", 75.0)
    flows.add_flow("a", "b", 75.0)
    context = NocContext(topology, flows, {"a": (0, 0), "b": (1, 1)},
                         TurnModel())

    result = route(context, bandwidth_resolution=100)

    assert result.status == SolveStatus.optimal
    for flow, links in zip(flows, result.routes):
        assert len(links) == 2
        check_route(topology, context, flow, links)
    assert not set(result.routes[0]) & set(result.routes[1])


def test_xy_routing(mesh, link_between):
    topology = setup_noc(*mesh(2, 2))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "b", 75.0)
    flows.add_flow("a", "b", 75.0)
    context = NocContext(topology, flows, {"a": (0, 0), "b": (1, 1)},
                         XYRouting())

    result = route(context, bandwidth_resolution=100)

    path = [link_between(topology, 0, 1), link_between(topology, 1, 3)]
    assert result.routes == [path, path]


def test_routes_are_simple_paths(mesh):
    topology = setup_noc(*mesh(3, 3))
    flows = TrafficFlowStorage()
    placement = {}
    for x in range(3):
        for y in range(3):
            placement[(x, y)] = (x, y)
    for source in [(0, 0), (2, 1), (1, 2)]:
        for sink in [(2, 2), (0, 1), (1, 0)]:
            flows.add_flow(source, sink, 30.0)
    context = NocContext(topology, flows, placement)

    result = route(context)

    assert result.status == SolveStatus.optimal
    assert len(result.routes) == len(flows)
    for flow, links in zip(flows, result.routes):
        check_route(topology, context, flow, links)


def test_deterministic(mesh):
    topology = setup_noc(*mesh(3, 3))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "b", 60.0)
    flows.add_flow("a", "b", 60.0)
    flows.add_flow("b", "a", 60.0)
    context = NocContext(topology, flows, {"a": (0, 0), "b": (2, 2)},
                         TurnModel())

    first = route(context, seed=1)
    assert first.routed
    for _ in range(3):
        assert route(context, seed=1) == first


def test_infeasible(mesh):
    topology = setup_noc(*mesh(2, 2, one_way=True))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "b", 10.0)
    context = NocContext(topology, flows, {"a": (1, 0), "b": (0, 1)})

    result = route(context)

    assert result == RoutingResult(SolveStatus.infeasible, [])
    assert not result.routed


def test_solver_parameters(line_context):
    solver = CountingSolver()
    route(line_context, seed=7, time_limit=5.0, num_workers=2, solver=solver)
    assert solver.solve_kwargs == [dict(time_limit=5.0, seed=7,
                                        num_workers=2,
                                        log_search_progress=False)]


def test_minimize_aggregate_bandwidth(mesh, link_between):
    topology = setup_noc(*mesh(4, 1))
    flows = TrafficFlowStorage()
    flows.add_flow("a", "c", 10.0, max_latency=1.0)
    flows.add_flow("a", "c", 10.0)
    context = NocContext(topology, flows, {"a": (0, 0), "c": (2, 0)})
    solver = CountingSolver()

    result = route(context, minimize_aggregate_bandwidth=True, solver=solver)

    path = [link_between(topology, 0, 1), link_between(topology, 1, 2)]
    assert result == RoutingResult(SolveStatus.optimal, [path, path])

    # The second solve is hinted with the first solution
    assert len(solver.solve_kwargs) == 2
    assert solver.num_clears == 1
    assert solver.num_hints == 2 * len(topology.links)


def test_minimize_aggregate_bandwidth_falls_back(line_context,
                                                 link_between):
    topology = line_context.topology
    solver = CountingSolver(fail_after_first=True)

    result = route(line_context, minimize_aggregate_bandwidth=True,
                   solver=solver)

    assert len(solver.solve_kwargs) == 2
    assert result == RoutingResult(SolveStatus.optimal,
                                   [[link_between(topology, 0, 1),
                                     link_between(topology, 1, 2),
                                     link_between(topology, 2, 3)]])


def test_minimize_aggregate_bandwidth_shares_time_limit(line_context,
                                                        monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr(importlib.import_module("nocsat.route.sat"), "time", clock)
    solver = SlowSolver(clock, 3.0)

    result = route(line_context, minimize_aggregate_bandwidth=True,
                   time_limit=5.0, solver=solver)

    assert result.routed
    assert [kwargs["time_limit"] for kwargs in solver.solve_kwargs] == \
        [5.0, 2.0]


def test_minimize_aggregate_bandwidth_out_of_time(line_context, monkeypatch,
                                                  link_between):
    topology = line_context.topology
    clock = FakeClock()
    monkeypatch.setattr(importlib.import_module("nocsat.route.sat"), "time", clock)
    solver = SlowSolver(clock, 6.0)

    result = route(line_context, minimize_aggregate_bandwidth=True,
                   time_limit=5.0, solver=solver)

    # The first solve used the whole budget so no second solve happens
    assert len(solver.solve_kwargs) == 1
    assert solver.num_clears == 0
    assert result == RoutingResult(SolveStatus.optimal,
                                   [[link_between(topology, 0, 1),
                                     link_between(topology, 1, 2),
                                     link_between(topology, 2, 3)]])
