"""Steps a test case performs on the cluster; each action is one of these classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from netpolkit.kube.model import NetworkPolicy


@dataclass
class CreatePolicyAction:
    policy: NetworkPolicy


@dataclass
class UpdatePolicyAction:
    policy: NetworkPolicy


@dataclass
class DeletePolicyAction:
    namespace: str
    name: str


@dataclass
class CreateNamespaceAction:
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class SetNamespaceLabelsAction:
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class DeleteNamespaceAction:
    namespace: str


@dataclass
class ReadNetworkPoliciesAction:
    namespaces: list[str] = field(default_factory=list)


@dataclass
class CreatePodAction:
    namespace: str
    pod: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class SetPodLabelsAction:
    namespace: str
    pod: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class DeletePodAction:
    namespace: str
    pod: str


Action = Union[
    CreatePolicyAction,
    UpdatePolicyAction,
    DeletePolicyAction,
    CreateNamespaceAction,
    SetNamespaceLabelsAction,
    DeleteNamespaceAction,
    ReadNetworkPoliciesAction,
    CreatePodAction,
    SetPodLabelsAction,
    DeletePodAction,
]