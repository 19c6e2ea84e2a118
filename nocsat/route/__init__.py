"""Constraint-based routing of traffic flows over a NoC.

The routing function :py:func:`.route` builds a CP-SAT model of the routing
problem (see :py:mod:`nocsat.route.model`), solves it and reads the resulting
route of every traffic flow.
"""

# Default routing algorithm
from nocsat.route.sat import route, RoutingResult

from nocsat.route.solver import Solver, CpSatSolver, SolveStatus

from nocsat.route.utils import DEFAULT_BANDWIDTH_RESOLUTION
