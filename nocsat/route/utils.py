"""Utility functions shared by the SAT routing model builder.
"""

import math

import numpy as np

from nocsat.directions import Direction

from nocsat.exceptions import NocConfigurationError


"""The default integer precision to which bandwidths are rescaled: a link's
capacity corresponds to this many units."""
DEFAULT_BANDWIDTH_RESOLUTION = 128

"""The smallest upper bound given to latency overrun variables."""
MAX_LATENCY_OVERRUN = 20


def rescale_traffic_flow_bandwidths(traffic_flows, link_bandwidth,
                                    bandwidth_resolution):
    """Convert real-valued flow bandwidths into integers.

    A flow demanding bandwidth `b` is rescaled to `floor((b / link_bandwidth)
    * bandwidth_resolution)` so that a fully loaded link carries
    `bandwidth_resolution` units.

    Returns
    -------
    [int, ...]
        Indexed by flow id.
    """
    if len(traffic_flows) == 0:
        return []
    bandwidths = np.array([flow.bandwidth for flow in traffic_flows],
                          dtype=float)
    rescaled = np.floor((bandwidths / link_bandwidth) * bandwidth_resolution)
    return [int(b) for b in rescaled]


def comp_max_number_of_traversed_links(link_latency, router_latency,
                                       max_latency):
    """Compute the largest number of links a flow may traverse without
    exceeding its latency requirement (its hop budget).

    A path of `n` links traverses `n + 1` routers, hence the budget is
    `floor((max_latency - router_latency) / (link_latency + router_latency))`.

    Raises
    ------
    NocConfigurationError
        If both link and router latency are zero.
    """
    per_hop = link_latency + router_latency
    if per_hop == 0:
        raise NocConfigurationError(
            "Link and router latency cannot both be zero when traffic flows "
            "have latency requirements.")
    return int(math.floor((max_latency - router_latency) / per_hop))


def group_links_by_direction(topology):
    """Group the links of a topology by the direction they travel in.

    Returns
    -------
    {:py:class:`~nocsat.directions.Direction`: [link, ...], ...}
        Every direction is present. Links which only change layer appear in no
        group.
    """
    groups = {direction: [] for direction in Direction}
    for link in topology.links:
        if link.direction is not None:
            groups[link.direction].append(link.index)
    return groups


def objective_weights(rescaled_bandwidths, num_links):
    """Weights which make the routing objective lexicographic.

    The aggregate bandwidth term can never exceed every flow using every
    link, so a congestion weight one greater than that bound makes a single
    congested link outweigh any bandwidth saving. Likewise the latency weight
    outweighs every link being congested.

    Returns
    -------
    (latency_weight, congestion_weight)
    """
    congestion_weight = sum(rescaled_bandwidths) * num_links + 1
    latency_weight = congestion_weight * (num_links + 1)
    return (latency_weight, congestion_weight)
