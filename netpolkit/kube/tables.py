"""Tabular and textual rendering of network policies."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tabulate import tabulate

from netpolkit.kube.labelselector import label_selector_table_lines, serialize_label_selector
from netpolkit.kube.model import (
    IPBlock,
    LabelSelector,
    NetworkPolicy,
    NetworkPolicyPeer,
    NetworkPolicyPort,
    PolicyType,
)

_HEADER = ["Policy", "Target", "Direction", "Peer", "Port/Protocol"]


def _merge_repeated(rows: Sequence[Sequence[str]]) -> list[list[str]]:
    """Blank out a cell that repeats the non-empty cell directly above it."""
    merged: list[list[str]] = []
    previous: Sequence[str] | None = None
    for row in rows:
        if previous is None:
            merged.append(list(row))
        else:
            merged.append(["" if cell and cell == above else cell for cell, above in zip(row, previous)])
        previous = row
    return merged


def network_policies_to_table(policies: Iterable[NetworkPolicy]) -> str:
    """One row per rule of each policy, with a blank row after each policy."""
    rows: list[list[str]] = []
    for policy in policies:
        name = f"{policy.namespace}/{policy.name}"
        target = label_selector_table_lines(policy.spec.pod_selector)
        for policy_type in policy.spec.policy_types:
            if policy_type == PolicyType.INGRESS:
                if not policy.spec.ingress:
                    rows.append([name, target, "ingress", "none", "none"])
                else:
                    rows.extend(
                        [name, target, "ingress", print_peers(rule.from_), print_ports(rule.ports)]
                        for rule in policy.spec.ingress
                    )
            elif policy_type == PolicyType.EGRESS:
                if not policy.spec.egress:
                    rows.append([name, target, "egress", "none", "none"])
                else:
                    rows.extend(
                        [name, target, "egress", print_peers(rule.to), print_ports(rule.ports)]
                        for rule in policy.spec.egress
                    )
        rows.append(["", "", "", "", ""])
    table = tabulate(_merge_repeated(rows), headers=_HEADER, tablefmt="grid", disable_numparse=True)
    return table + "\n"


def print_peers(peers: Sequence[NetworkPolicyPeer]) -> str:
    if not peers:
        return "all peers"
    lines = [
        print_ip_block(peer.ip_block)
        if peer.ip_block is not None
        else print_ns_pod_peer(peer.namespace_selector, peer.pod_selector)
        for peer in peers
    ]
    return "\n\n".join(lines)


def print_ip_block(ip_block: IPBlock) -> str:
    return f"{ip_block.cidr} except [{','.join(ip_block.except_)}]"


def print_ns_pod_peer(ns_selector: LabelSelector | None, pod_selector: LabelSelector | None) -> str:
    ns = "nil" if ns_selector is None else serialize_label_selector(ns_selector)
    pod = "nil" if pod_selector is None else serialize_label_selector(pod_selector)
    return f"ns/pod selector:\n - ns: {ns}\n - pod: {pod}"


def print_ports(ports: Sequence[NetworkPolicyPort]) -> str:
    if not ports:
        return "all ports, all protocols"
    lines = []
    for npp in ports:
        port = "all ports" if npp.port is None else f"port {npp.port}"
        protocol = "TCP" if npp.protocol is None else str(npp.protocol)
        if npp.end_port is None:
            lines.append(f"{port} on {protocol}")
        else:
            if npp.port is None:
                raise ValueError("a port range needs a start port")
            lines.append(f"[{npp.port}, {npp.end_port}] on {protocol}")
    return "\n".join(lines)