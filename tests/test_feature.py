import pytest

from netpolkit.generator import feature as f
from netpolkit.generator.netpol import (
    ALLOW_ALL_RULES,
    DENY_ALL_RULES,
    Netpol,
    NetpolPeers,
    NetpolTarget,
    Rule,
    build_policy,
    set_rules,
)
from netpolkit.kube.model import (
    IntOrString,
    IPBlock,
    LabelSelector,
    NetworkPolicyPeer,
    NetworkPolicyPort,
    Protocol,
)


def test_general_traverser_on_base_policy():
    features = f.GENERAL_NETPOL_TRAVERSER.traverse(build_policy())
    assert features == {
        f.POLICY_FEATURE_INGRESS,
        f.POLICY_FEATURE_EGRESS,
        f.POLICY_FEATURE_INGRESS_AND_EGRESS,
        f.TARGET_FEATURE_SPECIFIC_NAMESPACE,
        f.TARGET_FEATURE_POD_SELECTOR_MATCH_LABELS,
    }


def test_ingress_traverser_on_base_policy():
    features = f.INGRESS_NETPOL_TRAVERSER.traverse(build_policy())
    assert features == {
        f.RULE_FEATURE_SLICE_SIZE_1,
        f.PEER_FEATURE_PEER_SLICE_SIZE_1,
        f.PEER_FEATURE_POD_SELECTOR_MATCH_EXPRESSIONS,
        f.PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_EXPRESSIONS,
        f.PEER_FEATURE_PORT_SLICE_SIZE_1,
        f.PEER_FEATURE_NUMBERED_PORT,
        f.PEER_FEATURE_TCP_PROTOCOL,
    }


def test_egress_traverser_on_base_policy():
    features = f.EGRESS_NETPOL_TRAVERSER.traverse(build_policy())
    assert f.RULE_FEATURE_SLICE_SIZE_2_PLUS in features
    assert f.PEER_FEATURE_PEER_SLICE_EMPTY in features
    assert f.PEER_FEATURE_PORT_SLICE_SIZE_2_PLUS in features
    assert f.PEER_FEATURE_UDP_PROTOCOL in features
    assert f.RULE_FEATURE_ALL_PEERS_ALL_PORTS_ALL_PROTOCOLS not in features


def test_ingress_traverser_ignores_egress():
    policy = build_policy(set_rules(True, DENY_ALL_RULES))
    features = f.INGRESS_NETPOL_TRAVERSER.traverse(policy)
    assert features == {f.RULE_FEATURE_SLICE_EMPTY}


def test_allow_all_rule_feature():
    policy = build_policy(set_rules(False, ALLOW_ALL_RULES))
    features = f.EGRESS_NETPOL_TRAVERSER.traverse(policy)
    assert f.RULE_FEATURE_ALL_PEERS_ALL_PORTS_ALL_PROTOCOLS in features
    assert f.RULE_FEATURE_SLICE_SIZE_1 in features


def test_policy_features_without_egress():
    policy = Netpol(name="p", target=NetpolTarget("x"), ingress=NetpolPeers([Rule()]))
    features = set()
    f.default_policy_features(policy, features)
    assert features == {f.POLICY_FEATURE_INGRESS}


def test_target_features_empty():
    features = set()
    f.default_target_features(NetpolTarget(namespace=""), features)
    assert features == {f.TARGET_FEATURE_NAMESPACE_EMPTY, f.TARGET_FEATURE_POD_SELECTOR_EMPTY}


@pytest.mark.parametrize(
    "peer, expected",
    [
        (NetworkPolicyPeer(ip_block=IPBlock(cidr="10.0.0.0/8")), {f.PEER_FEATURE_IP_BLOCK_EMPTY_EXCEPT}),
        (
            NetworkPolicyPeer(ip_block=IPBlock(cidr="10.0.0.0/8", except_=["10.0.0.0/16"])),
            {f.PEER_FEATURE_IP_BLOCK_NONEMPTY_EXCEPT},
        ),
        (
            NetworkPolicyPeer(),
            {f.PEER_FEATURE_POD_SELECTOR_NIL, f.PEER_FEATURE_NAMESPACE_SELECTOR_NIL},
        ),
        (
            NetworkPolicyPeer(
                pod_selector=LabelSelector(), namespace_selector=LabelSelector(match_labels={"ns": "x"})
            ),
            {f.PEER_FEATURE_POD_SELECTOR_EMPTY, f.PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_LABELS},
        ),
    ],
)
def test_single_peer_feature(peer, expected):
    features = set()
    f.default_single_peer_feature(True, peer, features)
    assert features == expected


@pytest.mark.parametrize(
    "port, expected",
    [
        (NetworkPolicyPort(), {f.PEER_FEATURE_NIL_PORT, f.PEER_FEATURE_NIL_PROTOCOL}),
        (
            NetworkPolicyPort(protocol=Protocol.SCTP, port=IntOrString.from_string("serve-80-sctp")),
            {f.PEER_FEATURE_NAMED_PORT, f.PEER_FEATURE_SCTP_PROTOCOL},
        ),
        (
            NetworkPolicyPort(protocol=Protocol.UDP, port=IntOrString.from_int(53)),
            {f.PEER_FEATURE_NUMBERED_PORT, f.PEER_FEATURE_UDP_PROTOCOL},
        ),
    ],
)
def test_single_port_feature(port, expected):
    features = set()
    f.default_single_port_feature(False, port, features)
    assert features == expected


@pytest.mark.parametrize(
    "count, expected",
    [(0, f.PEER_FEATURE_PORT_SLICE_EMPTY), (1, f.PEER_FEATURE_PORT_SLICE_SIZE_1), (3, f.PEER_FEATURE_PORT_SLICE_SIZE_2_PLUS)],
)
def test_port_slice_sizes(count, expected):
    features = set()
    f.default_port_features(True, [NetworkPolicyPort()] * count, features)
    assert features == {expected}


def test_ingress_or_egress_features_none_adds_nothing():
    features = set()
    f.default_ingress_or_egress_features(True, None, features)
    assert features == set()


def test_empty_traverser_finds_nothing():
    assert f.NetpolTraverser().traverse(build_policy()) == set()