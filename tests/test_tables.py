from netpolkit.kube.labelselector import serialize_label_selector
from netpolkit.kube.model import (
    IntOrString,
    IPBlock,
    LabelSelector,
    NetworkPolicy,
    NetworkPolicyEgressRule,
    NetworkPolicyIngressRule,
    NetworkPolicyPeer,
    NetworkPolicyPort,
    NetworkPolicySpec,
    ObjectMeta,
    PolicyType,
    Protocol,
)
from netpolkit.kube.tables import (
    network_policies_to_table,
    print_ip_block,
    print_ns_pod_peer,
    print_peers,
    print_ports,
)
import pytest


def test_print_ip_block_joins_exceptions():
    block = IPBlock(cidr="10.0.0.0/16", except_=["10.0.0.0/28", "10.0.0.64/28"])
    assert print_ip_block(block) == "10.0.0.0/16 except [10.0.0.0/28,10.0.0.64/28]"


def test_print_ip_block_without_exceptions():
    assert print_ip_block(IPBlock(cidr="1.2.3.0/24")) == "1.2.3.0/24 except []"


def test_print_peers_empty():
    assert print_peers([]) == "all peers"


def test_print_peers_joins_with_blank_line():
    peers = [
        NetworkPolicyPeer(ip_block=IPBlock(cidr="1.2.3.0/24")),
        NetworkPolicyPeer(namespace_selector=LabelSelector()),
    ]
    text = print_peers(peers)
    first, second = text.split("\n\n")
    assert first == print_ip_block(IPBlock(cidr="1.2.3.0/24"))
    assert second == print_ns_pod_peer(LabelSelector(), None)


def test_print_ns_pod_peer_nil():
    assert print_ns_pod_peer(None, None) == "ns/pod selector:\n - ns: nil\n - pod: nil"


def test_print_ns_pod_peer_uses_serialized_selector():
    selector = LabelSelector(match_labels={"pod": "a"})
    text = print_ns_pod_peer(None, selector)
    assert text.endswith(" - pod: " + serialize_label_selector(selector))


def test_print_ports_empty():
    assert print_ports([]) == "all ports, all protocols"


def test_print_ports_variants():
    ports = [
        NetworkPolicyPort(),
        NetworkPolicyPort(protocol=Protocol.UDP, port=IntOrString.from_int(80)),
        NetworkPolicyPort(protocol=Protocol.SCTP, port=IntOrString.from_string("serve-81-sctp")),
        NetworkPolicyPort(port=IntOrString.from_int(53), end_port=80),
    ]
    assert print_ports(ports).split("\n") == [
        "all ports on TCP",
        "port 80 on UDP",
        "port serve-81-sctp on SCTP",
        "[53, 80] on TCP",
    ]


def test_print_ports_range_without_start_raises():
    with pytest.raises(ValueError):
        print_ports([NetworkPolicyPort(end_port=80)])


def _policy(ingress, egress, types):
    return NetworkPolicy(
        metadata=ObjectMeta(name="p", namespace="x"),
        spec=NetworkPolicySpec(ingress=ingress, egress=egress, policy_types=types),
    )


def test_table_has_header_and_none_rows():
    table = network_policies_to_table([_policy([], [], [PolicyType.INGRESS, PolicyType.EGRESS])])
    for header in ("Policy", "Target", "Direction", "Peer", "Port/Protocol"):
        assert header in table
    assert "x/p" in table
    assert "all pods" in table
    assert table.count("none") == 4
    assert "ingress" in table and "egress" in table


def test_table_merges_repeated_cells():
    rules = [
        NetworkPolicyIngressRule(ports=[NetworkPolicyPort(port=IntOrString.from_int(80))]),
        NetworkPolicyIngressRule(ports=[NetworkPolicyPort(port=IntOrString.from_int(81))]),
    ]
    table = network_policies_to_table([_policy(rules, [], [PolicyType.INGRESS])])
    assert table.count("x/p") == 1
    assert "port 80 on TCP" in table
    assert "port 81 on TCP" in table


def test_table_egress_rules_rendered():
    rules = [NetworkPolicyEgressRule(to=[NetworkPolicyPeer(ip_block=IPBlock(cidr="0.0.0.0/0"))])]
    table = network_policies_to_table([_policy([], rules, [PolicyType.EGRESS])])
    assert "0.0.0.0/0 except []" in table
    assert "all ports, all protocols" in table