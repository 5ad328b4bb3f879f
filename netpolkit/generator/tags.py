"""Tags that classify generated test cases, grouped under primary tags."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from collections.abc import Set as AbstractSet
from typing import Any

TAG_ACTION = "action"
TAG_TARGET = "target"
TAG_DIRECTION = "direction"
TAG_POLICY_STACK = "policy-stack"
TAG_RULE = "rule"
TAG_PROTOCOL = "protocol"
TAG_PORT = "port"
TAG_PEER_IPBLOCK = "peer-ipblock"
TAG_PEER_PODS = "peer-pods"
TAG_MISCELLANEOUS = "miscellaneous"

TAG_CREATE_POLICY = "create-policy"
TAG_DELETE_POLICY = "delete-policy"
TAG_UPDATE_POLICY = "update-policy"
TAG_CREATE_POD = "create-pod"
TAG_DELETE_POD = "delete-pod"
TAG_SET_POD_LABELS = "set-pod-labels"
TAG_CREATE_NAMESPACE = "create-namespace"
TAG_DELETE_NAMESPACE = "delete-namespace"
TAG_SET_NAMESPACE_LABELS = "set-namespace-labels"

TAG_TARGET_NAMESPACE = "target-namespace"
TAG_TARGET_POD_SELECTOR = "target-pod-selector"

TAG_INGRESS = "ingress"
TAG_EGRESS = "egress"

TAG_DENY_ALL = "deny-all"
TAG_ALLOW_ALL = "allow-all"
TAG_ANY_PEER = "any-peer"
TAG_ANY_PORT_PROTOCOL = "any-port-protocol"
TAG_MULTI_PEER = "multi-peer"
TAG_MULTI_PORT_PROTOCOL = "multi-port/protocol"

TAG_ALL_PODS = "all-pods"
TAG_PODS_BY_LABEL = "pods-by-label"
TAG_ALL_NAMESPACES = "all-namespaces"
TAG_NAMESPACES_BY_LABEL = "namespaces-by-label"
TAG_POLICY_NAMESPACE = "policy-namespace"
TAG_NAMESPACES_BY_DEFAULT_LABEL = "namespaces-by-default-label"

TAG_IP_BLOCK_NO_EXCEPT = "ip-block-no-except"
TAG_IP_BLOCK_WITH_EXCEPT = "ip-block-with-except"

TAG_ANY_PORT = "any-port"
TAG_NUMBERED_PORT = "numbered-port"
TAG_NAMED_PORT = "named-port"
TAG_END_PORT = "end-port"

TAG_TCP_PROTOCOL = "tcp"
TAG_UDP_PROTOCOL = "udp"
TAG_SCTP_PROTOCOL = "sctp"

TAG_PATHOLOGICAL = "pathological"
TAG_CONFLICT = "conflict"
TAG_EXAMPLE = "example"
TAG_UPSTREAM_E2E = "upstream-e2e"

ALL_TAGS: Mapping[str, tuple[str, ...]] = {
    TAG_ACTION: (
        TAG_CREATE_POLICY,
        TAG_DELETE_POLICY,
        TAG_UPDATE_POLICY,
        TAG_CREATE_POD,
        TAG_DELETE_POD,
        TAG_SET_POD_LABELS,
        TAG_CREATE_NAMESPACE,
        TAG_DELETE_NAMESPACE,
        TAG_SET_NAMESPACE_LABELS,
    ),
    TAG_TARGET: (TAG_TARGET_NAMESPACE, TAG_TARGET_POD_SELECTOR),
    TAG_DIRECTION: (TAG_INGRESS, TAG_EGRESS),
    TAG_POLICY_STACK: (),
    TAG_RULE: (
        TAG_DENY_ALL,
        TAG_ALLOW_ALL,
        TAG_ANY_PEER,
        TAG_ANY_PORT_PROTOCOL,
        TAG_MULTI_PEER,
        TAG_MULTI_PORT_PROTOCOL,
    ),
    TAG_PEER_PODS: (
        TAG_ALL_PODS,
        TAG_PODS_BY_LABEL,
        TAG_ALL_NAMESPACES,
        TAG_NAMESPACES_BY_LABEL,
        TAG_POLICY_NAMESPACE,
        TAG_NAMESPACES_BY_DEFAULT_LABEL,
    ),
    TAG_PEER_IPBLOCK: (TAG_IP_BLOCK_NO_EXCEPT, TAG_IP_BLOCK_WITH_EXCEPT),
    TAG_PORT: (TAG_ANY_PORT, TAG_NUMBERED_PORT, TAG_NAMED_PORT, TAG_END_PORT),
    TAG_PROTOCOL: (TAG_TCP_PROTOCOL, TAG_UDP_PROTOCOL, TAG_SCTP_PROTOCOL),
    TAG_MISCELLANEOUS: (TAG_PATHOLOGICAL, TAG_CONFLICT, TAG_EXAMPLE, TAG_UPSTREAM_E2E),
}


def _index_subordinates(all_tags: Mapping[str, Sequence[str]]) -> dict[str, str]:
    sub_to_primary: dict[str, str] = {}
    for primary, subs in all_tags.items():
        for sub in subs:
            if sub in sub_to_primary:
                raise ValueError(
                    f"subordinate tag {sub} has multiple owners: {sub_to_primary[sub]}, {primary}"
                )
            sub_to_primary[sub] = primary
    return sub_to_primary


TAG_SUB_TO_PRIMARY: Mapping[str, str] = _index_subordinates(ALL_TAGS)
TAG_SET: frozenset[str] = frozenset(ALL_TAGS) | frozenset(TAG_SUB_TO_PRIMARY)
TAG_SLICE: tuple[str, ...] = tuple(sorted(TAG_SET))


def must_get_primary_tag(subordinate_tag: str) -> str:
    """The primary tag owning a subordinate tag; ValueError if there is none."""
    try:
        return TAG_SUB_TO_PRIMARY[subordinate_tag]
    except KeyError:
        raise ValueError(f"no primary tag found for {subordinate_tag}") from None


def validate_tags(tags: Iterable[str]) -> None:
    """Raise ValueError naming every tag that is not known."""
    invalid = [tag for tag in tags if tag not in TAG_SET]
    if invalid:
        raise ValueError(f"invalid tags: {', '.join(invalid)}")


class StringSet(AbstractSet):
    """A set of subordinate tags that also holds the primary tag of each one."""

    def __init__(self, *args: str) -> None:
        self._tags: set[str] = set()
        for tag in args:
            self.add(tag)

    @classmethod
    def _from_iterable(cls, it: Iterable[str]) -> frozenset[str]:
        return frozenset(it)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"StringSet({', '.join(repr(t) for t in self.keys())})"

    def add(self, key: str) -> None:
        """Add a subordinate tag together with its primary tag."""
        primary = must_get_primary_tag(key)
        self._tags.add(key)
        self._tags.add(primary)

    def group_tags(self) -> dict[str, list[str]]:
        """Map each primary tag present to its sorted subordinate tags present."""
        grouped: dict[str, list[str]] = {}
        for tag in sorted(self._tags):
            if tag in ALL_TAGS:
                grouped.setdefault(tag, [])
            elif tag in TAG_SUB_TO_PRIMARY:
                grouped.setdefault(TAG_SUB_TO_PRIMARY[tag], []).append(tag)
            else:
                raise ValueError(f"tag {tag} is neither primary nor subordinate")
        return grouped

    def keys(self) -> list[str]:
        return sorted(self._tags)

    def contains_any(self, tags: Iterable[str]) -> bool:
        return any(tag in self._tags for tag in tags)


def count_test_cases_by_tag(test_cases: Iterable[Any]) -> dict[str, int]:
    """How many test cases carry each tag; every known tag is counted, if only as 0."""
    counts = dict.fromkeys(TAG_SLICE, 0)
    for test_case in test_cases:
        for key in test_case.tags.keys():
            counts[key] = counts.get(key, 0) + 1
    return counts