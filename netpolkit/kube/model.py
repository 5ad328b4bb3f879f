"""Data model for Kubernetes network policies and the cluster objects around them."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_NAMESPACE_LABEL = "kubernetes.io/metadata.name"


class Protocol(str, enum.Enum):
    """Transport protocol of a network policy port."""

    TCP = "TCP"
    UDP = "UDP"
    SCTP = "SCTP"

    def __str__(self) -> str:
        return self.value


class PolicyType(str, enum.Enum):
    """Direction a network policy applies to."""

    INGRESS = "Ingress"
    EGRESS = "Egress"

    def __str__(self) -> str:
        return self.value


class LabelSelectorOperator(str, enum.Enum):
    """Operator of a set-based label selector requirement."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntOrString:
    """A port given either by number or by name."""

    value: int | str

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, str)):
            raise TypeError(f"IntOrString needs an int or a str, got {self.value!r}")

    @classmethod
    def from_int(cls, value: int) -> IntOrString:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected an int, got {value!r}")
        return cls(value)

    @classmethod
    def from_string(cls, value: str) -> IntOrString:
        if not isinstance(value, str):
            raise TypeError(f"expected a str, got {value!r}")
        return cls(value)

    @property
    def is_int(self) -> bool:
        return isinstance(self.value, int)

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class LabelSelectorRequirement:
    key: str
    operator: LabelSelectorOperator
    values: list[str] = field(default_factory=list)


@dataclass
class LabelSelector:
    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: list[LabelSelectorRequirement] = field(default_factory=list)


@dataclass
class IPBlock:
    cidr: str
    except_: list[str] = field(default_factory=list)


@dataclass
class NetworkPolicyPeer:
    pod_selector: LabelSelector | None = None
    namespace_selector: LabelSelector | None = None
    ip_block: IPBlock | None = None


@dataclass
class NetworkPolicyPort:
    protocol: Protocol | None = None
    port: IntOrString | None = None
    end_port: int | None = None


@dataclass
class NetworkPolicyIngressRule:
    ports: list[NetworkPolicyPort] = field(default_factory=list)
    from_: list[NetworkPolicyPeer] = field(default_factory=list)


@dataclass
class NetworkPolicyEgressRule:
    ports: list[NetworkPolicyPort] = field(default_factory=list)
    to: list[NetworkPolicyPeer] = field(default_factory=list)


@dataclass
class NetworkPolicySpec:
    pod_selector: LabelSelector = field(default_factory=LabelSelector)
    ingress: list[NetworkPolicyIngressRule] = field(default_factory=list)
    egress: list[NetworkPolicyEgressRule] = field(default_factory=list)
    policy_types: list[PolicyType] = field(default_factory=list)


@dataclass
class ObjectMeta:
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)


class _Named:
    metadata: ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.labels

    @labels.setter
    def labels(self, value: dict[str, str]) -> None:
        self.metadata.labels = value


# ---- strict parsing helpers -------------------------------------------------

_OBJECT_META_FIELDS = frozenset({
    "name", "generateName", "namespace", "selfLink", "uid", "resourceVersion",
    "generation", "creationTimestamp", "deletionTimestamp",
    "deletionGracePeriodSeconds", "labels", "annotations", "ownerReferences",
    "finalizers", "managedFields",
})
_LIST_META_FIELDS = frozenset({"selfLink", "resourceVersion", "continue", "remainingItemCount"})


def _mapping(data: Any, where: str) -> Mapping:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{where}: expected a mapping, got {type(data).__name__}")
    return data


def _fields(data: Any, allowed: frozenset[str] | set[str], where: str) -> Mapping:
    data = _mapping(data, where)
    for key in data:
        if key not in allowed:
            raise ValueError(f"{where}: unknown field {key!r}")
    return data


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected a string, got {value!r}")
    return value


def _sequence(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _string_map(value: Any, where: str) -> dict[str, str]:
    return {
        _string(key, where): _string(val, f"{where}.{key}")
        for key, val in _mapping(value, where).items()
    }


def _string_list(value: Any, where: str) -> list[str]:
    return [_string(item, f"{where}[{i}]") for i, item in enumerate(_sequence(value, where))]


def _parse_enum(enum_type: type[enum.Enum], value: Any, where: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ValueError(f"{where}: invalid value {value!r}") from exc


def _parse_requirement(data: Any, where: str) -> LabelSelectorRequirement:
    data = _fields(data, {"key", "operator", "values"}, where)
    return LabelSelectorRequirement(
        key=_string(data.get("key"), f"{where}.key"),
        operator=_parse_enum(LabelSelectorOperator, data.get("operator"), f"{where}.operator"),
        values=_string_list(data.get("values"), f"{where}.values"),
    )


def _parse_selector(data: Any, where: str) -> LabelSelector:
    data = _fields(data, {"matchLabels", "matchExpressions"}, where)
    expressions = _sequence(data.get("matchExpressions"), f"{where}.matchExpressions")
    return LabelSelector(
        match_labels=_string_map(data.get("matchLabels"), f"{where}.matchLabels"),
        match_expressions=[
            _parse_requirement(item, f"{where}.matchExpressions[{i}]")
            for i, item in enumerate(expressions)
        ],
    )


def _optional_selector(data: Mapping, key: str, where: str) -> LabelSelector | None:
    value = data.get(key)
    return None if value is None else _parse_selector(value, f"{where}.{key}")


def _parse_peer(data: Any, where: str) -> NetworkPolicyPeer:
    data = _fields(data, {"podSelector", "namespaceSelector", "ipBlock"}, where)
    ip_block = None
    if data.get("ipBlock") is not None:
        block = _fields(data["ipBlock"], {"cidr", "except"}, f"{where}.ipBlock")
        ip_block = IPBlock(
            cidr=_string(block.get("cidr"), f"{where}.ipBlock.cidr"),
            except_=_string_list(block.get("except"), f"{where}.ipBlock.except"),
        )
    return NetworkPolicyPeer(
        pod_selector=_optional_selector(data, "podSelector", where),
        namespace_selector=_optional_selector(data, "namespaceSelector", where),
        ip_block=ip_block,
    )


def _parse_port(data: Any, where: str) -> NetworkPolicyPort:
    data = _fields(data, {"protocol", "port", "endPort"}, where)
    protocol = data.get("protocol")
    port = data.get("port")
    end_port = data.get("endPort")
    if port is not None and (isinstance(port, bool) or not isinstance(port, (int, str))):
        raise ValueError(f"{where}.port: expected an int or a string, got {port!r}")
    if end_port is not None and (isinstance(end_port, bool) or not isinstance(end_port, int)):
        raise ValueError(f"{where}.endPort: expected an int, got {end_port!r}")
    return NetworkPolicyPort(
        protocol=None if protocol is None else _parse_enum(Protocol, protocol, f"{where}.protocol"),
        port=None if port is None else IntOrString(port),
        end_port=end_port,
    )


def _parse_ports(value: Any, where: str) -> list[NetworkPolicyPort]:
    return [_parse_port(item, f"{where}[{i}]") for i, item in enumerate(_sequence(value, where))]


def _parse_peers(value: Any, where: str) -> list[NetworkPolicyPeer]:
    return [_parse_peer(item, f"{where}[{i}]") for i, item in enumerate(_sequence(value, where))]


def _parse_spec(data: Any, where: str) -> NetworkPolicySpec:
    data = _fields(data, {"podSelector", "ingress", "egress", "policyTypes"}, where)
    ingress = []
    for i, item in enumerate(_sequence(data.get("ingress"), f"{where}.ingress")):
        rule_where = f"{where}.ingress[{i}]"
        rule = _fields(item, {"ports", "from"}, rule_where)
        ingress.append(NetworkPolicyIngressRule(
            ports=_parse_ports(rule.get("ports"), f"{rule_where}.ports"),
            from_=_parse_peers(rule.get("from"), f"{rule_where}.from"),
        ))
    egress = []
    for i, item in enumerate(_sequence(data.get("egress"), f"{where}.egress")):
        rule_where = f"{where}.egress[{i}]"
        rule = _fields(item, {"ports", "to"}, rule_where)
        egress.append(NetworkPolicyEgressRule(
            ports=_parse_ports(rule.get("ports"), f"{rule_where}.ports"),
            to=_parse_peers(rule.get("to"), f"{rule_where}.to"),
        ))
    policy_types = [
        _parse_enum(PolicyType, item, f"{where}.policyTypes[{i}]")
        for i, item in enumerate(_sequence(data.get("policyTypes"), f"{where}.policyTypes"))
    ]
    return NetworkPolicySpec(
        pod_selector=_parse_selector(data.get("podSelector"), f"{where}.podSelector"),
        ingress=ingress,
        egress=egress,
        policy_types=policy_types,
    )


def _parse_meta(data: Any, where: str) -> ObjectMeta:
    data = _fields(data, _OBJECT_META_FIELDS, where)
    return ObjectMeta(
        name=_string(data.get("name"), f"{where}.name"),
        namespace=_string(data.get("namespace"), f"{where}.namespace"),
        labels=_string_map(data.get("labels"), f"{where}.labels"),
    )


# ---- serialisation helpers --------------------------------------------------

def _selector_to_dict(selector: LabelSelector) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if selector.match_labels:
        out["matchLabels"] = dict(selector.match_labels)
    if selector.match_expressions:
        expressions = []
        for exp in selector.match_expressions:
            item: dict[str, Any] = {"key": exp.key, "operator": str(exp.operator)}
            if exp.values:
                item["values"] = list(exp.values)
            expressions.append(item)
        out["matchExpressions"] = expressions
    return out


def _peer_to_dict(peer: NetworkPolicyPeer) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if peer.pod_selector is not None:
        out["podSelector"] = _selector_to_dict(peer.pod_selector)
    if peer.namespace_selector is not None:
        out["namespaceSelector"] = _selector_to_dict(peer.namespace_selector)
    if peer.ip_block is not None:
        block: dict[str, Any] = {"cidr": peer.ip_block.cidr}
        if peer.ip_block.except_:
            block["except"] = list(peer.ip_block.except_)
        out["ipBlock"] = block
    return out


def _port_to_dict(port: NetworkPolicyPort) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if port.protocol is not None:
        out["protocol"] = str(port.protocol)
    if port.port is not None:
        out["port"] = port.port.value
    if port.end_port is not None:
        out["endPort"] = port.end_port
    return out


def _rule_to_dict(ports: list[NetworkPolicyPort], peers: list[NetworkPolicyPeer], peer_key: str) -> dict:
    out: dict[str, Any] = {}
    if ports:
        out["ports"] = [_port_to_dict(p) for p in ports]
    if peers:
        out[peer_key] = [_peer_to_dict(p) for p in peers]
    return out


@dataclass
class NetworkPolicy(_Named):
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: NetworkPolicySpec = field(default_factory=NetworkPolicySpec)
    kind: str = ""
    api_version: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> NetworkPolicy:
        """Parse a policy from its YAML/JSON form, rejecting unknown fields."""
        data = _fields(data, {"apiVersion", "kind", "metadata", "spec"}, "NetworkPolicy")
        return cls(
            metadata=_parse_meta(data.get("metadata"), "metadata"),
            spec=_parse_spec(data.get("spec"), "spec"),
            kind=_string(data.get("kind"), "kind"),
            api_version=_string(data.get("apiVersion"), "apiVersion"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the policy in its YAML/JSON form, leaving out empty fields."""
        out: dict[str, Any] = {}
        if self.api_version:
            out["apiVersion"] = self.api_version
        if self.kind:
            out["kind"] = self.kind
        meta: dict[str, Any] = {}
        if self.metadata.name:
            meta["name"] = self.metadata.name
        if self.metadata.namespace:
            meta["namespace"] = self.metadata.namespace
        if self.metadata.labels:
            meta["labels"] = dict(self.metadata.labels)
        out["metadata"] = meta
        spec: dict[str, Any] = {"podSelector": _selector_to_dict(self.spec.pod_selector)}
        if self.spec.ingress:
            spec["ingress"] = [_rule_to_dict(r.ports, r.from_, "from") for r in self.spec.ingress]
        if self.spec.egress:
            spec["egress"] = [_rule_to_dict(r.ports, r.to, "to") for r in self.spec.egress]
        if self.spec.policy_types:
            spec["policyTypes"] = [str(t) for t in self.spec.policy_types]
        out["spec"] = spec
        return out


@dataclass
class NetworkPolicyList:
    items: list[NetworkPolicy] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> NetworkPolicyList:
        """Parse a policy list, rejecting unknown fields."""
        data = _fields(data, {"apiVersion", "kind", "metadata", "items"}, "NetworkPolicyList")
        _fields(data.get("metadata"), _LIST_META_FIELDS, "metadata")
        items = _sequence(data.get("items"), "items")
        parsed = []
        for i, item in enumerate(items):
            try:
                parsed.append(NetworkPolicy.from_dict(item))
            except ValueError as exc:
                raise ValueError(f"items[{i}]: {exc}") from exc
        return cls(items=parsed)


@dataclass
class Namespace(_Named):
    metadata: ObjectMeta = field(default_factory=ObjectMeta)


@dataclass
class Container:
    name: str
    image: str = ""


@dataclass
class Pod(_Named):
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    containers: list[Container] = field(default_factory=list)
    phase: str = ""
    pod_ip: str = ""


@dataclass
class Service(_Named):
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    selector: dict[str, str] = field(default_factory=dict)
    cluster_ip: str = ""


_PROTOCOLS = {
    "tcp": Protocol.TCP, "TCP": Protocol.TCP,
    "udp": Protocol.UDP, "UDP": Protocol.UDP,
    "sctp": Protocol.SCTP, "SCTP": Protocol.SCTP,
}


def parse_protocol(protocol: str) -> Protocol:
    """Parse a protocol name written in all lower or all upper case."""
    try:
        return _PROTOCOLS[protocol]
    except KeyError:
        raise ValueError(f"invalid protocol {protocol}") from None


def qualified_service_address(service_name: str, namespace: str) -> str:
    """Address that reaches a service from any namespace of the cluster."""
    return f"{service_name}.{namespace}.svc.cluster.local"