"""Exceptions which NoC setup and routing can throw to indicate standard types
of problem.

Note that failing to find a feasible routing is *not* an exception: it is
reported as a :py:class:`~nocsat.route.solver.SolveStatus` so the caller may
fall back on another routing strategy.
"""


class NocConfigurationError(Exception):
    """Indication that the supplied device, architecture or traffic
    description is malformed.

    These errors are not retryable: they are raised before any routing model
    is built.
    """
    pass


class RouteChainError(AssertionError):
    """Indication that the links selected for a traffic flow do not form a
    single chain from its source to its sink.

    This can only result from a defect in the routing model and is never a
    legitimate routing outcome.

    Attributes
    ----------
    links : [link, ...]
        The (unordered) link indices which were selected.
    """

    def __init__(self, message, links=()):
        super(RouteChainError, self).__init__(message)
        self.links = list(links)
