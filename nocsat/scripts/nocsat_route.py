"""A command-line utility which routes the traffic flows of a NoC routing
problem described in a JSON file.

Installed as "nocsat-route" by setuptools.

The problem file is a JSON object of the form::

    {
        "grid": {"width": 4, "height": 4, "layers": 1,
                 "tiles": [{"name": "noc_router", "x": 0, "y": 0,
                            "width": 1, "height": 1, "layer": 0}, ...]},
        "architecture": {"router_tile": "noc_router",
                         "link_bandwidth": 1000.0,
                         "link_latency": 1.0,
                         "router_latency": 1.0,
                         "routers": [{"id": 0, "x": 0, "y": 0,
                                      "connections": [1, 2]}, ...]},
        "placement": {"block_a": [0, 0], ...},
        "flows": [{"source": "block_a", "sink": "block_b",
                   "bandwidth": 100.0, "max_latency": 4.0,
                   "name": "a_to_b", "route": [0, 4]}, ...]
    }

"layers", tile sizes and layers, "max_latency", "name" and "route" are
optional. A flow's "route" is a previously known route, given as link indices
(links are numbered in the order the routers' "connections" declare them), and
is only used as a hint.
"""

import sys
import argparse
import json
import logging

import nocsat

from nocsat.device import DeviceGrid, PhysicalTileType

from nocsat.architecture import NocArchitecture, LogicalRouter

from nocsat.traffic import TrafficFlowStorage

from nocsat.turn_model import TURN_MODELS

from nocsat.exceptions import NocConfigurationError

from nocsat.wrapper import noc_route_wrapper

from nocsat.route.utils import DEFAULT_BANDWIDTH_RESOLUTION


def load_problem(problem):
    """Convert a decoded JSON problem description into NoC data structures.

    Returns
    -------
    (device_grid, architecture, traffic_flows, placement)

    Raises
    ------
    NocConfigurationError
        If a required field is missing.
    """
    try:
        grid_desc = problem["grid"]
        device_grid = DeviceGrid(grid_desc["width"], grid_desc["height"],
                                 grid_desc.get("layers", 1))
        tile_types = {}
        for tile in grid_desc.get("tiles", []):
            size = (tile["name"], tile.get("width", 1), tile.get("height", 1))
            if size not in tile_types:
                tile_types[size] = PhysicalTileType(*size)
            device_grid.place_tile(tile_types[size], tile["x"], tile["y"],
                                   tile.get("layer", 0))

        arch_desc = problem["architecture"]
        architecture = NocArchitecture(
            arch_desc["router_tile"],
            arch_desc["link_bandwidth"],
            arch_desc["link_latency"],
            arch_desc["router_latency"],
            [LogicalRouter(r["id"], r["x"], r["y"],
                           r.get("connections", []), r.get("layer", 0))
             for r in arch_desc["routers"]])

        placement = {block: tuple(location)
                     for block, location in problem["placement"].items()}

        traffic_flows = TrafficFlowStorage()
        for flow in problem["flows"]:
            traffic_flows.add_flow(flow["source"], flow["sink"],
                                   flow["bandwidth"],
                                   flow.get("max_latency"),
                                   flow.get("name"),
                                   flow.get("route", ()))
    except KeyError as e:
        raise NocConfigurationError(
            "Problem description is missing the field {}.".format(e))

    return (device_grid, architecture, traffic_flows, placement)


def format_route(topology, placement, flow, links):
    """Describe the route of a flow as the sequence of router ids it visits.
    """
    name = flow.name if flow.name is not None else "flow {}".format(flow.id)
    if links:
        routers = [topology.links[links[0]].source]
        routers.extend(topology.links[link].sink for link in links)
    else:
        routers = [topology.get_router_at_grid_location(
            *placement[flow.source])]
    return "{}: {}".format(
        name, " -> ".join(str(topology.routers[r].user_id) for r in routers))


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Route the traffic flows of a NoC routing problem")
    parser.add_argument("--version", "-V", action="version",
                        version="%(prog)s {}".format(nocsat.__version__))

    parser.add_argument("problem", type=str,
                        help="JSON file describing the routing problem")

    parser.add_argument("--resolution", "-r", type=int,
                        default=DEFAULT_BANDWIDTH_RESOLUTION,
                        help="number of units a link's bandwidth is divided "
                             "into (default: %(default)s)")
    parser.add_argument("--seed", "-s", type=int, default=0,
                        help="random seed of the solver "
                             "(default: %(default)s)")
    parser.add_argument("--time-limit", "-t", type=float, default=None,
                        help="total solver time limit in seconds, shared with "
                             "--minimize-bandwidth")
    parser.add_argument("--workers", "-w", type=int, default=1,
                        help="number of solver threads "
                             "(default: %(default)s)")
    parser.add_argument("--turn-model", choices=sorted(TURN_MODELS),
                        default="xy",
                        help="turns forbidden to avoid deadlock "
                             "(default: %(default)s)")
    parser.add_argument("--minimize-bandwidth", "-b", action="store_true",
                        help="re-solve to minimise the aggregate bandwidth "
                             "routed")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="log progress (repeat for more detail)")

    args = parser.parse_args(args)

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO if args.verbose == 1 else logging.DEBUG)

    try:
        with open(args.problem, "r") as f:
            problem = json.load(f)
        device_grid, architecture, traffic_flows, placement = \
            load_problem(problem)

        topology, result = noc_route_wrapper(
            architecture, device_grid, traffic_flows, placement,
            turn_model=TURN_MODELS[args.turn_model](),
            bandwidth_resolution=args.resolution,
            seed=args.seed,
            minimize_aggregate_bandwidth=args.minimize_bandwidth,
            time_limit=args.time_limit,
            num_workers=args.workers)
    except (IOError, ValueError, TypeError, NocConfigurationError) as e:
        sys.stderr.write("{}: error: {}\n".format(parser.prog, e))
        return 2

    if not result.routed:
        sys.stderr.write("{}: error: no routing found ({})\n".format(
            parser.prog, result.status.name))
        return 1

    for flow, links in zip(traffic_flows, result.routes):
        print(format_route(topology, placement, flow, links))

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
