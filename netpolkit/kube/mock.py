"""In-memory stand-in for a Kubernetes cluster, plus helpers over many namespaces."""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from netpolkit.kube.model import (
    DEFAULT_NAMESPACE_LABEL,
    Namespace,
    NetworkPolicy,
    ObjectMeta,
    Pod,
    Service,
)


class KubeError(Exception):
    """A requested object is missing, or already present."""


@dataclass
class MockNamespace:
    namespace_object: Namespace
    netpols: dict[str, NetworkPolicy] = field(default_factory=dict)
    pods: dict[str, Pod] = field(default_factory=dict)
    services: dict[str, Service] = field(default_factory=dict)


class MockKubernetes:
    """Keeps namespaces, policies, pods and services in dictionaries."""

    _MAX_PODS = 254

    def __init__(self, pass_rate: float) -> None:
        self.namespaces: dict[str, MockNamespace] = {}
        self.pass_rate = pass_rate
        self._pod_id = 1

    def _namespace_object(self, namespace: str) -> MockNamespace:
        try:
            return self.namespaces[namespace]
        except KeyError:
            raise KubeError(f"namespace {namespace} not found") from None

    def get_namespace(self, namespace: str) -> Namespace:
        """A copy of the namespace, with the default name label added."""
        ns = self._namespace_object(namespace)
        labels = dict(ns.namespace_object.labels)
        labels[DEFAULT_NAMESPACE_LABEL] = namespace
        return Namespace(metadata=ObjectMeta(name=ns.namespace_object.name, labels=labels))

    def set_namespace_labels(self, namespace: str, labels: Mapping[str, str]) -> Namespace:
        ns = self.get_namespace(namespace)
        ns.labels = dict(labels)
        return ns

    def delete_namespace(self, namespace: str) -> None:
        if namespace not in self.namespaces:
            raise KubeError(f"namespace {namespace} not found")
        del self.namespaces[namespace]

    def get_all_namespaces(self) -> list[Namespace]:
        return [self.get_namespace(name) for name in self.namespaces]

    def create_namespace(self, namespace: Namespace) -> Namespace:
        if namespace.name in self.namespaces:
            raise KubeError(f"namespace {namespace.name} already present")
        self.namespaces[namespace.name] = MockNamespace(namespace_object=namespace)
        return namespace

    def delete_all_network_policies_in_namespace(self, namespace: str) -> None:
        self._namespace_object(namespace).netpols = {}

    def delete_network_policy(self, namespace: str, name: str) -> None:
        ns = self._namespace_object(namespace)
        if name not in ns.netpols:
            raise KubeError(f"network policy {namespace}/{name} not found")
        del ns.netpols[name]

    def get_network_policies_in_namespace(self, namespace: str) -> list[NetworkPolicy]:
        return list(self._namespace_object(namespace).netpols.values())

    def update_network_policy(self, policy: NetworkPolicy) -> NetworkPolicy:
        ns = self._namespace_object(policy.namespace)
        if policy.name not in ns.netpols:
            raise KubeError(f"network policy {policy.namespace}/{policy.name} not found")
        ns.netpols[policy.name] = policy
        return policy

    def create_network_policy(self, policy: NetworkPolicy) -> NetworkPolicy:
        ns = self._namespace_object(policy.namespace)
        if policy.name in ns.netpols:
            raise KubeError(f"network policy {policy.namespace}/{policy.name} already present")
        ns.netpols[policy.name] = policy
        return policy

    def get_service(self, namespace: str, name: str) -> Service:
        ns = self._namespace_object(namespace)
        try:
            return ns.services[name]
        except KeyError:
            raise KubeError(f"service {namespace}/{name} not found") from None

    def create_service(self, service: Service) -> Service:
        ns = self._namespace_object(service.namespace)
        if service.name in ns.services:
            raise KubeError(f"service {service.namespace}/{service.name} already present")
        ns.services[service.name] = service
        return service

    def delete_service(self, namespace: str, name: str) -> None:
        ns = self._namespace_object(namespace)
        if name not in ns.services:
            raise KubeError(f"service {namespace}/{name} not found")
        del ns.services[name]

    def get_services_in_namespace(self, namespace: str) -> list[Service]:
        return list(self._namespace_object(namespace).services.values())

    def get_pods_in_namespace(self, namespace: str) -> list[Pod]:
        return list(self._namespace_object(namespace).pods.values())

    def get_pod(self, namespace: str, pod_name: str) -> Pod:
        ns = self._namespace_object(namespace)
        try:
            return ns.pods[pod_name]
        except KeyError:
            raise KubeError(f"pod {namespace}/{pod_name} not found") from None

    def set_pod_labels(self, namespace: str, pod_name: str, labels: Mapping[str, str]) -> Pod:
        pod = self.get_pod(namespace, pod_name)
        pod.labels = dict(labels)
        return pod

    def create_pod(self, pod: Pod) -> Pod:
        """Store the pod as running, with the next free address in 192.168.1.0/24."""
        ns = self._namespace_object(pod.namespace)
        if pod.name in ns.pods:
            raise KubeError(f"pod {pod.namespace}/{pod.name} already exists")
        if self._pod_id > self._MAX_PODS:
            raise KubeError("unable to handle more than 254 pods in mock")
        pod.phase = "Running"
        pod.pod_ip = f"192.168.1.{self._pod_id}"
        self._pod_id += 1
        ns.pods[pod.name] = pod
        return pod

    def delete_pod(self, namespace: str, pod_name: str) -> None:
        ns = self._namespace_object(namespace)
        if pod_name not in ns.pods:
            raise KubeError(f"pod {namespace}/{pod_name} not found")
        del ns.pods[pod_name]

    def execute_remote_command(
        self, namespace: str, pod: str, container: str, command: list[str]
    ) -> tuple[str, str, KubeError | None]:
        """Return (stdout, stderr, command error); fails at random by the pass rate.

        Raises KubeError when the namespace, pod or container does not exist.
        """
        ns = self._namespace_object(namespace)
        pod_object = ns.pods.get(pod)
        if pod_object is None:
            raise KubeError(f"pod {namespace}/{pod} not found")
        if not any(cont.name == container for cont in pod_object.containers):
            raise KubeError(f"container {namespace}/{pod}/{container} not found")
        if random.random() > self.pass_rate:
            return "", "", KubeError("mock call randomly failed")
        return "", "", None


def get_network_policies_in_namespaces(kubernetes: Any, namespaces: Iterable[str]) -> list[NetworkPolicy]:
    return [
        policy
        for ns in namespaces
        for policy in kubernetes.get_network_policies_in_namespace(ns)
    ]


def delete_all_network_policies_in_namespaces(kubernetes: Any, namespaces: Iterable[str]) -> None:
    for ns in namespaces:
        kubernetes.delete_all_network_policies_in_namespace(ns)


def get_pods_in_namespaces(kubernetes: Any, namespaces: Iterable[str]) -> list[Pod]:
    return [pod for ns in namespaces for pod in kubernetes.get_pods_in_namespace(ns)]


def get_services_in_namespaces(kubernetes: Any, namespaces: Iterable[str]) -> list[Service]:
    return [svc for ns in namespaces for svc in kubernetes.get_services_in_namespace(ns)]