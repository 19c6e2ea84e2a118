import pytest

from nocsat.route.utils import \
    rescale_traffic_flow_bandwidths, comp_max_number_of_traversed_links, \
    group_links_by_direction, objective_weights

from nocsat.traffic import TrafficFlowStorage

from nocsat.setup_noc import setup_noc

from nocsat.directions import Direction

from nocsat.exceptions import NocConfigurationError


def test_rescale_traffic_flow_bandwidths():
    flows = TrafficFlowStorage()
    for bandwidth in (1000.0, 500.0, 1.0, 0.0, 1999.0):
        flows.add_flow("a", "b", bandwidth)
    assert rescale_traffic_flow_bandwidths(flows, 1000.0, 128) == \
        [128, 64, 0, 0, 255]

    assert rescale_traffic_flow_bandwidths(TrafficFlowStorage(),
                                           1000.0, 128) == []


def test_rescale_rounds_down():
    flows = TrafficFlowStorage()
    flows.add_flow("a", "b", 99.9)
    flows.add_flow("a", "b", 10.0)
    assert rescale_traffic_flow_bandwidths(flows, 100.0, 100) == [99, 10]


@pytest.mark.parametrize("link_latency,router_latency,max_latency,hops", [
    (1.0, 0.5, 4.0, 2),
    (1.0, 0.0, 3.0, 3),
    (1.0, 1.0, 1.0, 0),
    (0.0, 1.0, 5.0, 4),
    (2.0, 1.0, 9.9, 2),
])
def test_comp_max_number_of_traversed_links(link_latency, router_latency,
                                            max_latency, hops):
    assert comp_max_number_of_traversed_links(
        link_latency, router_latency, max_latency) == hops


def test_comp_max_number_of_traversed_links_no_latency():
    with pytest.raises(NocConfigurationError):
        comp_max_number_of_traversed_links(0.0, 0.0, 4.0)


def test_group_links_by_direction(mesh):
    topology = setup_noc(*mesh(2, 2))
    assert group_links_by_direction(topology) == {
        Direction.east: [0, 4],
        Direction.north: [1, 2],
        Direction.west: [3, 6],
        Direction.south: [5, 7],
    }


def test_objective_weights():
    latency_weight, congestion_weight = objective_weights([10, 20], 4)
    assert congestion_weight == 121
    assert latency_weight == 605

    # One congested link outweighs every flow on every link; one unit of
    # overrun outweighs every link being congested.
    assert congestion_weight > (10 + 20) * 4
    assert latency_weight > congestion_weight * 4 + (10 + 20) * 4
