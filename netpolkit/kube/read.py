"""Reading network policies from YAML files or from a cluster."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import yaml

from netpolkit.kube.mock import get_network_policies_in_namespaces
from netpolkit.kube.model import NetworkPolicy, NetworkPolicyList


def _walk_files(path: Path) -> Iterator[Path]:
    """Files under the path in lexical order, depth first."""
    if not path.is_dir():
        yield path
        return
    for entry in sorted(path.iterdir(), key=lambda p: p.name):
        yield from _walk_files(entry)


def _parse_file(path: Path) -> list[NetworkPolicy]:
    try:
        document = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"unable to parse yaml at {path}: {exc}") from exc
    try:
        return NetworkPolicyList.from_dict(document).items
    except ValueError:
        pass
    try:
        return [NetworkPolicy.from_dict(document)]
    except ValueError as exc:
        raise ValueError(f"unable to parse single policy from yaml at {path}: {exc}") from exc


def read_network_policies_from_path(policy_path: str | os.PathLike[str]) -> list[NetworkPolicy]:
    """Read every policy in a file, or in all files below a directory.

    Each file holds either a NetworkPolicyList or a single NetworkPolicy.
    Every policy must list its policy types.
    """
    root = Path(policy_path)
    if not root.exists():
        raise FileNotFoundError(f"unable to walk path {root}")
    policies = [policy for path in _walk_files(root) for policy in _parse_file(path)]
    for policy in policies:
        if not policy.spec.policy_types:
            raise ValueError(
                f"missing spec.policyTypes from network policy {policy.namespace}/{policy.name}"
            )
    return policies


def read_network_policies_from_kube(kubernetes: Any, namespaces: Iterable[str]) -> list[NetworkPolicy]:
    """All policies in the given namespaces of a cluster client."""
    return get_network_policies_in_namespaces(kubernetes, namespaces)