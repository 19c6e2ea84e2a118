"""Constraint-based routing of traffic flows over FPGA Networks-on-Chip.

Users are referred to :py:func:`nocsat.noc_route_wrapper` for the common case
of building the NoC of a device and routing a set of traffic flows over it.
"""

from nocsat.version import __version__

from nocsat.exceptions import NocConfigurationError, RouteChainError

# Interfaces to the rest of the CAD flow
from nocsat.device import DeviceGrid, PhysicalTileType
from nocsat.architecture import NocArchitecture, LogicalRouter
from nocsat.traffic import TrafficFlow, TrafficFlowStorage

# NoC model
from nocsat.topology import NocTopology
from nocsat.setup_noc import setup_noc
from nocsat.context import NocContext
from nocsat.turn_model import \
    TurnModel, XYRouting, WestFirstRouting, NorthLastRouting, \
    NegativeFirstRouting

# Routing
from nocsat.route import route, RoutingResult, SolveStatus

# High-Level Wrapper
from nocsat.wrapper import noc_route_wrapper
