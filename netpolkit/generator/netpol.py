"""Network policies split into target and peers, and builders for test policies."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from netpolkit.kube.model import (
    DEFAULT_NAMESPACE_LABEL,
    IntOrString,
    LabelSelector,
    LabelSelectorOperator,
    LabelSelectorRequirement,
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

SCTP = Protocol.SCTP
TCP = Protocol.TCP
UDP = Protocol.UDP

PORT_53 = IntOrString.from_int(53)
PORT_79 = IntOrString.from_int(79)
PORT_80 = IntOrString.from_int(80)
PORT_81 = IntOrString.from_int(81)
PORT_82 = IntOrString.from_int(82)
PORT_7981 = IntOrString.from_int(7981)

PORT_SERVE_79_TCP = IntOrString.from_string("serve-79-tcp")
PORT_SERVE_80_TCP = IntOrString.from_string("serve-80-tcp")
PORT_SERVE_81_TCP = IntOrString.from_string("serve-81-tcp")
PORT_SERVE_80_UDP = IntOrString.from_string("serve-80-udp")
PORT_SERVE_81_UDP = IntOrString.from_string("serve-81-udp")
PORT_SERVE_7981_UDP = IntOrString.from_string("serve-7981-udp")
PORT_SERVE_80_SCTP = IntOrString.from_string("serve-80-sctp")
PORT_SERVE_81_SCTP = IntOrString.from_string("serve-81-sctp")


def _in_selector(key: str, values: list[str]) -> LabelSelector:
    return LabelSelector(match_expressions=[
        LabelSelectorRequirement(key=key, operator=LabelSelectorOperator.IN, values=values)
    ])


EMPTY_SELECTOR = LabelSelector()
POD_A_MATCH_LABELS_SELECTOR = LabelSelector(match_labels={"pod": "a"})
POD_C_MATCH_LABELS_SELECTOR = LabelSelector(match_labels={"pod": "c"})
POD_AB_MATCH_EXPRESSIONS_SELECTOR = _in_selector("pod", ["a", "b"])
POD_BC_MATCH_EXPRESSIONS_SELECTOR = _in_selector("pod", ["b", "c"])
NS_X_MATCH_LABELS_SELECTOR = LabelSelector(match_labels={"ns": "x"})
NS_XY_MATCH_EXPRESSIONS_SELECTOR = _in_selector("ns", ["x", "y"])
NS_YZ_MATCH_EXPRESSIONS_SELECTOR = _in_selector("ns", ["y", "z"])
NS_Z_MATCH_DEFAULT_LABELS_SELECTOR = LabelSelector(match_labels={DEFAULT_NAMESPACE_LABEL: "z"})


@dataclass
class Rule:
    """One rule: the ports it opens and the peers it admits."""

    ports: list[NetworkPolicyPort] = field(default_factory=list)
    peers: list[NetworkPolicyPeer] = field(default_factory=list)

    def ingress(self) -> NetworkPolicyIngressRule:
        return NetworkPolicyIngressRule(ports=list(self.ports), from_=list(self.peers))

    def egress(self) -> NetworkPolicyEgressRule:
        return NetworkPolicyEgressRule(ports=list(self.ports), to=list(self.peers))


@dataclass
class NetpolPeers:
    rules: list[Rule] = field(default_factory=list)


@dataclass
class NetpolTarget:
    namespace: str
    pod_selector: LabelSelector = field(default_factory=LabelSelector)

    @classmethod
    def from_labels(
        cls,
        namespace: str,
        match_labels: dict[str, str] | None = None,
        match_expressions: list[LabelSelectorRequirement] | None = None,
    ) -> NetpolTarget:
        return cls(
            namespace=namespace,
            pod_selector=LabelSelector(
                match_labels=dict(match_labels or {}),
                match_expressions=list(match_expressions or []),
            ),
        )


@dataclass
class Netpol:
    """A policy as a target plus optional ingress and egress peers."""

    name: str
    target: NetpolTarget
    description: str = ""
    ingress: NetpolPeers | None = None
    egress: NetpolPeers | None = None

    @classmethod
    def from_network_policy(cls, policy: NetworkPolicy) -> Netpol:
        ingress = NetpolPeers(rules=[
            Rule(ports=list(rule.ports), peers=list(rule.from_)) for rule in policy.spec.ingress
        ])
        egress = NetpolPeers(rules=[
            Rule(ports=list(rule.ports), peers=list(rule.to)) for rule in policy.spec.egress
        ])
        return cls(
            name=policy.namespace,
            description="generated from networkingv1.NetworkPolicy",
            target=NetpolTarget(namespace=policy.namespace, pod_selector=policy.spec.pod_selector),
            ingress=ingress,
            egress=egress,
        )

    def network_policy(self) -> NetworkPolicy:
        return NetworkPolicy(
            metadata=ObjectMeta(name=self.name, namespace=self.target.namespace),
            spec=self.network_policy_spec(),
            kind="NetworkPolicy",
            api_version="networking.k8s.io/v1",
        )

    def network_policy_spec(self) -> NetworkPolicySpec:
        """The spec, with a policy type for each of ingress and egress that is present."""
        types: list[PolicyType] = []
        ingress: list[NetworkPolicyIngressRule] = []
        egress: list[NetworkPolicyEgressRule] = []
        if self.ingress is not None:
            types.append(PolicyType.INGRESS)
            ingress = [rule.ingress() for rule in self.ingress.rules]
        if self.egress is not None:
            types.append(PolicyType.EGRESS)
            egress = [rule.egress() for rule in self.egress.rules]
        if not types:
            raise ValueError("cannot have 0 policy types")
        return NetworkPolicySpec(
            pod_selector=self.target.pod_selector,
            ingress=ingress,
            egress=egress,
            policy_types=types,
        )


DENY_ALL_RULES: tuple[Rule, ...] = ()
ALLOW_ALL_RULES: tuple[Rule, ...] = (Rule(),)

ALLOW_DNS_RULE = Rule(ports=[
    NetworkPolicyPort(protocol=UDP, port=PORT_53),
    NetworkPolicyPort(protocol=TCP, port=PORT_53),
])
ALLOW_DNS_PEERS = NetpolPeers(rules=[ALLOW_DNS_RULE])


def allow_dns_policy(source: NetpolTarget) -> Netpol:
    """An egress policy that opens DNS on UDP and TCP port 53."""
    return Netpol(
        name="allow-dns",
        target=source,
        egress=NetpolPeers(rules=[copy.deepcopy(ALLOW_DNS_RULE)]),
    )


Setter = Callable[[Netpol], None]


def _peers(policy: Netpol, is_ingress: bool) -> NetpolPeers:
    peers = policy.ingress if is_ingress else policy.egress
    if peers is None:
        raise ValueError(f"policy has no {'ingress' if is_ingress else 'egress'}")
    return peers


def set_description(description: str) -> Setter:
    def setter(policy: Netpol) -> None:
        policy.description = description
    return setter


def set_namespace(namespace: str) -> Setter:
    def setter(policy: Netpol) -> None:
        policy.target.namespace = namespace
    return setter


def set_rules(is_ingress: bool, rules: Iterable[Rule]) -> Setter:
    def setter(policy: Netpol) -> None:
        _peers(policy, is_ingress).rules = copy.deepcopy(list(rules))
    return setter


def set_pod_selector(selector: LabelSelector) -> Setter:
    def setter(policy: Netpol) -> None:
        policy.target.pod_selector = selector
    return setter


def set_ports(is_ingress: bool, ports: Iterable[NetworkPolicyPort]) -> Setter:
    """Replace the ports of the first ingress or egress rule."""
    def setter(policy: Netpol) -> None:
        _peers(policy, is_ingress).rules[0].ports = list(ports)
    return setter


def set_peers(is_ingress: bool, peers: Iterable[NetworkPolicyPeer]) -> Setter:
    """Replace the peers of the first ingress or egress rule."""
    def setter(policy: Netpol) -> None:
        _peers(policy, is_ingress).rules[0].peers = list(peers)
    return setter


def _base_test_policy() -> Netpol:
    return Netpol(
        name="base",
        target=NetpolTarget(namespace="x", pod_selector=LabelSelector(match_labels={"pod": "a"})),
        ingress=NetpolPeers(rules=[Rule(
            ports=[NetworkPolicyPort(port=PORT_80, protocol=TCP)],
            peers=[NetworkPolicyPeer(
                pod_selector=POD_BC_MATCH_EXPRESSIONS_SELECTOR,
                namespace_selector=NS_XY_MATCH_EXPRESSIONS_SELECTOR,
            )],
        )]),
        egress=NetpolPeers(rules=[
            Rule(
                ports=[NetworkPolicyPort(port=PORT_80, protocol=TCP)],
                peers=[NetworkPolicyPeer(
                    pod_selector=POD_AB_MATCH_EXPRESSIONS_SELECTOR,
                    namespace_selector=NS_YZ_MATCH_EXPRESSIONS_SELECTOR,
                )],
            ),
            copy.deepcopy(ALLOW_DNS_RULE),
        ]),
    )


def build_policy(*args: Setter) -> Netpol:
    """A fresh base test policy with the setters applied in order."""
    policy = _base_test_policy()
    for setter in args:
        setter(policy)
    return policy