"""Features of test cases: which actions they take and which policy shapes they use."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from netpolkit.generator.netpol import Netpol, NetpolPeers, NetpolTarget, Rule
from netpolkit.kube.model import LabelSelector, NetworkPolicyPeer, NetworkPolicyPort, Protocol

ACTION_FEATURE_CREATE_POLICY = "action: create policy"
ACTION_FEATURE_UPDATE_POLICY = "action: update policy"
ACTION_FEATURE_DELETE_POLICY = "action: delete policy"
ACTION_FEATURE_CREATE_NAMESPACE = "action: create namespace"
ACTION_FEATURE_SET_NAMESPACE_LABELS = "action: set namespace labels"
ACTION_FEATURE_DELETE_NAMESPACE = "action: delete namespace"
ACTION_FEATURE_READ_POLICIES = "action: read policies"
ACTION_FEATURE_CREATE_POD = "action: create pod"
ACTION_FEATURE_SET_POD_LABELS = "action: set pod labels"
ACTION_FEATURE_DELETE_POD = "action: delete pod"

POLICY_FEATURE_INGRESS = "policy with ingress"
POLICY_FEATURE_EGRESS = "policy with egress"
POLICY_FEATURE_INGRESS_AND_EGRESS = "policy with both ingress and egress"

TARGET_FEATURE_SPECIFIC_NAMESPACE = "target: specific namespace"
TARGET_FEATURE_NAMESPACE_EMPTY = "target: empty namespace"
TARGET_FEATURE_POD_SELECTOR_EMPTY = "target: empty pod selector"
TARGET_FEATURE_POD_SELECTOR_MATCH_LABELS = "target: pod selector match labels"
TARGET_FEATURE_POD_SELECTOR_MATCH_EXPRESSIONS = "target: pod selector match expression"

RULE_FEATURE_ALL_PEERS_ALL_PORTS_ALL_PROTOCOLS = "all peers on all ports/protocols"
RULE_FEATURE_SLICE_EMPTY = "0 rules"
RULE_FEATURE_SLICE_SIZE_1 = "1 rule"
RULE_FEATURE_SLICE_SIZE_2_PLUS = "2+ rules"

PEER_FEATURE_PORT_SLICE_EMPTY = "0 port/protocols"
PEER_FEATURE_PORT_SLICE_SIZE_1 = "1 port/protocol"
PEER_FEATURE_PORT_SLICE_SIZE_2_PLUS = "2+ port/protocols"
PEER_FEATURE_NUMBERED_PORT = "numbered port"
PEER_FEATURE_NAMED_PORT = "named port"
PEER_FEATURE_NIL_PORT = "nil port"
PEER_FEATURE_NIL_PROTOCOL = "nil protocol"
PEER_FEATURE_TCP_PROTOCOL = "policy on TCP"
PEER_FEATURE_UDP_PROTOCOL = "policy on UDP"
PEER_FEATURE_SCTP_PROTOCOL = "policy on SCTP"

PEER_FEATURE_PEER_SLICE_EMPTY = "0 peers"
PEER_FEATURE_PEER_SLICE_SIZE_1 = "1 peer"
PEER_FEATURE_PEER_SLICE_SIZE_2_PLUS = "2+ peers"
PEER_FEATURE_IP_BLOCK_EMPTY_EXCEPT = "IPBlock (no except)"
PEER_FEATURE_IP_BLOCK_NONEMPTY_EXCEPT = "IPBlock with except"
PEER_FEATURE_POD_SELECTOR_NIL = "peer pod selector nil"
PEER_FEATURE_POD_SELECTOR_EMPTY = "peer pod selector empty"
PEER_FEATURE_POD_SELECTOR_MATCH_LABELS = "peer pod selector match labels"
PEER_FEATURE_POD_SELECTOR_MATCH_EXPRESSIONS = "peer pod selector match expression"
PEER_FEATURE_NAMESPACE_SELECTOR_NIL = "peer namespace selector nil"
PEER_FEATURE_NAMESPACE_SELECTOR_EMPTY = "peer namespace selector empty"
PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_LABELS = "peer namespace selector match labels"
PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_EXPRESSIONS = "peer namespace selector match expression"

Features = set[str]


def _size_feature(count: int, empty: str, one: str, more: str) -> str:
    if count == 0:
        return empty
    if count == 1:
        return one
    return more


def _rule_count(peers: NetpolPeers | None) -> int:
    return 0 if peers is None else len(peers.rules)


def default_policy_features(policy: Netpol, features: Features) -> None:
    has_ingress = _rule_count(policy.ingress) > 0
    has_egress = _rule_count(policy.egress) > 0
    if has_ingress:
        features.add(POLICY_FEATURE_INGRESS)
    if has_egress:
        features.add(POLICY_FEATURE_EGRESS)
    if has_ingress and has_egress:
        features.add(POLICY_FEATURE_INGRESS_AND_EGRESS)


def default_target_features(target: NetpolTarget, features: Features) -> None:
    if target.namespace == "":
        features.add(TARGET_FEATURE_NAMESPACE_EMPTY)
    else:
        features.add(TARGET_FEATURE_SPECIFIC_NAMESPACE)
    selector = target.pod_selector
    if not selector.match_labels and not selector.match_expressions:
        features.add(TARGET_FEATURE_POD_SELECTOR_EMPTY)
    if selector.match_labels:
        features.add(TARGET_FEATURE_POD_SELECTOR_MATCH_LABELS)
    if selector.match_expressions:
        features.add(TARGET_FEATURE_POD_SELECTOR_MATCH_EXPRESSIONS)


def default_ingress_or_egress_features(
    is_ingress: bool, peers: NetpolPeers | None, features: Features
) -> None:
    if peers is not None:
        features.add(_size_feature(
            len(peers.rules),
            RULE_FEATURE_SLICE_EMPTY,
            RULE_FEATURE_SLICE_SIZE_1,
            RULE_FEATURE_SLICE_SIZE_2_PLUS,
        ))


def default_rule_feature(is_ingress: bool, rule: Rule, features: Features) -> None:
    if not rule.ports and not rule.peers:
        features.add(RULE_FEATURE_ALL_PEERS_ALL_PORTS_ALL_PROTOCOLS)


def default_peer_features(
    is_ingress: bool, peers: Sequence[NetworkPolicyPeer], features: Features
) -> None:
    features.add(_size_feature(
        len(peers),
        PEER_FEATURE_PEER_SLICE_EMPTY,
        PEER_FEATURE_PEER_SLICE_SIZE_1,
        PEER_FEATURE_PEER_SLICE_SIZE_2_PLUS,
    ))


def _selector_features(
    selector: LabelSelector | None,
    features: Features,
    nil: str,
    empty: str,
    labels: str,
    expressions: str,
) -> None:
    if selector is None:
        features.add(nil)
        return
    if not selector.match_labels and not selector.match_expressions:
        features.add(empty)
    if selector.match_labels:
        features.add(labels)
    if selector.match_expressions:
        features.add(expressions)


def default_single_peer_feature(is_ingress: bool, peer: NetworkPolicyPeer, features: Features) -> None:
    if peer.ip_block is not None:
        if peer.ip_block.except_:
            features.add(PEER_FEATURE_IP_BLOCK_NONEMPTY_EXCEPT)
        else:
            features.add(PEER_FEATURE_IP_BLOCK_EMPTY_EXCEPT)
        return
    _selector_features(
        peer.pod_selector,
        features,
        PEER_FEATURE_POD_SELECTOR_NIL,
        PEER_FEATURE_POD_SELECTOR_EMPTY,
        PEER_FEATURE_POD_SELECTOR_MATCH_LABELS,
        PEER_FEATURE_POD_SELECTOR_MATCH_EXPRESSIONS,
    )
    _selector_features(
        peer.namespace_selector,
        features,
        PEER_FEATURE_NAMESPACE_SELECTOR_NIL,
        PEER_FEATURE_NAMESPACE_SELECTOR_EMPTY,
        PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_LABELS,
        PEER_FEATURE_NAMESPACE_SELECTOR_MATCH_EXPRESSIONS,
    )


def default_port_features(
    is_ingress: bool, ports: Sequence[NetworkPolicyPort], features: Features
) -> None:
    features.add(_size_feature(
        len(ports),
        PEER_FEATURE_PORT_SLICE_EMPTY,
        PEER_FEATURE_PORT_SLICE_SIZE_1,
        PEER_FEATURE_PORT_SLICE_SIZE_2_PLUS,
    ))


_PROTOCOL_FEATURES = {
    Protocol.TCP: PEER_FEATURE_TCP_PROTOCOL,
    Protocol.UDP: PEER_FEATURE_UDP_PROTOCOL,
    Protocol.SCTP: PEER_FEATURE_SCTP_PROTOCOL,
}


def default_single_port_feature(is_ingress: bool, port: NetworkPolicyPort, features: Features) -> None:
    if port.port is None:
        features.add(PEER_FEATURE_NIL_PORT)
    elif port.port.is_int:
        features.add(PEER_FEATURE_NUMBERED_PORT)
    else:
        features.add(PEER_FEATURE_NAMED_PORT)
    if port.protocol is None:
        features.add(PEER_FEATURE_NIL_PROTOCOL)
    elif port.protocol in _PROTOCOL_FEATURES:
        features.add(_PROTOCOL_FEATURES[port.protocol])


_DirectionHook = Callable[[bool, NetpolPeers, Features], None]
_RuleHook = Callable[[bool, Rule, Features], None]
_PeersHook = Callable[[bool, Sequence[NetworkPolicyPeer], Features], None]
_PeerHook = Callable[[bool, NetworkPolicyPeer, Features], None]
_PortsHook = Callable[[bool, Sequence[NetworkPolicyPort], Features], None]
_PortHook = Callable[[bool, NetworkPolicyPort, Features], None]


def _traverse_direction(
    is_ingress: bool,
    netpol_peers: NetpolPeers,
    features: Features,
    direction: _DirectionHook | None,
    rule_hook: _RuleHook | None,
    peers_hook: _PeersHook | None,
    peer_hook: _PeerHook | None,
    ports_hook: _PortsHook | None,
    port_hook: _PortHook | None,
) -> None:
    if direction is not None:
        direction(is_ingress, netpol_peers, features)
    for rule in netpol_peers.rules:
        if rule_hook is not None:
            rule_hook(is_ingress, rule, features)
        if peers_hook is not None:
            peers_hook(is_ingress, rule.peers, features)
        if peer_hook is not None:
            for peer in rule.peers:
                peer_hook(is_ingress, peer, features)
        if ports_hook is not None:
            ports_hook(is_ingress, rule.ports, features)
        if port_hook is not None:
            for port in rule.ports:
                port_hook(is_ingress, port, features)


@dataclass(frozen=True)
class NetpolTraverser:
    """Walks a policy, letting each configured hook record features."""

    policy: Callable[[Netpol, Features], None] | None = None
    target: Callable[[NetpolTarget, Features], None] | None = None
    ingress: _DirectionHook | None = None
    ingress_rule: _RuleHook | None = None
    ingress_peers: _PeersHook | None = None
    ingress_peer: _PeerHook | None = None
    ingress_ports: _PortsHook | None = None
    ingress_port: _PortHook | None = None
    egress: _DirectionHook | None = None
    egress_rule: _RuleHook | None = None
    egress_peers: _PeersHook | None = None
    egress_peer: _PeerHook | None = None
    egress_ports: _PortsHook | None = None
    egress_port: _PortHook | None = None

    def traverse(self, policy: Netpol) -> set[str]:
        features: set[str] = set()
        if self.policy is not None:
            self.policy(policy, features)
        if self.target is not None:
            self.target(policy.target, features)
        if policy.ingress is not None:
            _traverse_direction(
                True, policy.ingress, features, self.ingress, self.ingress_rule,
                self.ingress_peers, self.ingress_peer, self.ingress_ports, self.ingress_port,
            )
        if policy.egress is not None:
            _traverse_direction(
                False, policy.egress, features, self.egress, self.egress_rule,
                self.egress_peers, self.egress_peer, self.egress_ports, self.egress_port,
            )
        return features


GENERAL_NETPOL_TRAVERSER = NetpolTraverser(
    policy=default_policy_features,
    target=default_target_features,
)

INGRESS_NETPOL_TRAVERSER = NetpolTraverser(
    ingress=default_ingress_or_egress_features,
    ingress_rule=default_rule_feature,
    ingress_peers=default_peer_features,
    ingress_peer=default_single_peer_feature,
    ingress_ports=default_port_features,
    ingress_port=default_single_port_feature,
)

EGRESS_NETPOL_TRAVERSER = NetpolTraverser(
    egress=default_ingress_or_egress_features,
    egress_rule=default_rule_feature,
    egress_peers=default_peer_features,
    egress_peer=default_single_peer_feature,
    egress_ports=default_port_features,
    egress_port=default_single_port_feature,
)