# netpolkit

Tools for working with Kubernetes NetworkPolicies in Python.

- `netpolkit.kube.model` – dataclasses for network policies, label selectors,
  IP blocks, namespaces, pods and services. `NetworkPolicy.from_dict` parses
  the usual YAML/JSON dictionary form (unknown fields are rejected with
  `ValueError`) and `NetworkPolicy.to_dict` renders it back, leaving out empty
  fields. Also `parse_protocol` and `qualified_service_address`.
- `netpolkit.kube.labelselector` – matching labels against selectors and
  rendering selectors as text.
- `netpolkit.kube.ipaddress` – CIDR membership, IP block matching and
  normalised CIDR construction, for IPv4 and IPv6.
- `netpolkit.kube.tables` – a grid table of policies, one row per rule.
- `netpolkit.kube.read` – loading policies from YAML files or directories.
- `netpolkit.kube.mock` – `MockKubernetes`, an in-memory stand-in for a
  cluster.
- `netpolkit.generator` – building blocks for network policy test cases:
  tags, actions, a policy builder and feature extraction.

## Installation

```
pip install netpolkit
```

## Matching

```python
from netpolkit.kube.ipaddress import is_ip_in_cidr, make_cidr_from_zeroes, make_cidr_from_ones
from netpolkit.kube.labelselector import is_labels_match_label_selector
from netpolkit.kube.model import LabelSelector

is_ip_in_cidr("1.2.3.3", "1.2.3.0/30")                       # True
make_cidr_from_zeroes("255.255.255.255", 8)                  # "255.255.255.0/24"
make_cidr_from_ones("ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff", 64)  # "ffff:ffff:ffff:ffff::/64"
is_labels_match_label_selector({}, LabelSelector(match_labels={"pod": "b"}))  # False
```

`is_ip_address_match_for_ip_block` checks an address against an `IPBlock`'s
CIDR and its exceptions. Malformed addresses or CIDRs raise `ValueError`.

## Reading and printing policies

```python
from netpolkit.kube.read import read_network_policies_from_path
from netpolkit.kube.tables import network_policies_to_table

policies = read_network_policies_from_path("policies/")
print(network_policies_to_table(policies))
```

A path may be a single file or a directory, which is walked recursively in
lexical order. Each file holds either a `NetworkPolicyList` or a single
`NetworkPolicy`. Every policy must list its `spec.policyTypes`, or
`ValueError` is raised. A missing path raises `FileNotFoundError`.

`read_network_policies_from_kube(client, namespaces)` gathers the policies of
the given namespaces from any object that has a
`get_network_policies_in_namespace(namespace)` method, such as
`MockKubernetes`.

## The in-memory cluster

```python
from netpolkit.kube.mock import KubeError, MockKubernetes
from netpolkit.kube.model import Namespace, ObjectMeta, Pod

cluster = MockKubernetes(pass_rate=1.0)
cluster.create_namespace(Namespace(metadata=ObjectMeta(name="x", labels={"ns": "x"})))
cluster.get_namespace("x").labels
# {"ns": "x", "kubernetes.io/metadata.name": "x"}

pod = cluster.create_pod(Pod(metadata=ObjectMeta(name="a", namespace="x")))
pod.pod_ip, pod.phase   # ("192.168.1.1", "Running")
```

Missing or duplicate objects raise `KubeError`. Pods get addresses from
`192.168.1.1` upwards, at most 254 of them. `execute_remote_command` runs
nothing: it checks that the pod and container exist and returns
`(stdout, stderr, error)`, where `error` is a `KubeError` at random, by the
cluster's pass rate.

## Test-case building blocks

```python
from netpolkit.generator.feature import INGRESS_NETPOL_TRAVERSER
from netpolkit.generator.netpol import PORT_SERVE_81_UDP, UDP, Netpol, build_policy, set_ports
from netpolkit.generator.tags import StringSet
from netpolkit.kube.model import NetworkPolicyPort

netpol = build_policy(set_ports(True, [NetworkPolicyPort(protocol=UDP, port=PORT_SERVE_81_UDP)]))
policy = netpol.network_policy()          # a NetworkPolicy in namespace "x"
features = INGRESS_NETPOL_TRAVERSER.traverse(Netpol.from_network_policy(policy))
# includes "named port" and "policy on UDP"

tags = StringSet("named-port", "ingress")
tags.keys()   # ["direction", "ingress", "named-port", "port"]
```

- `netpolkit.generator.tags` – the known tags grouped under primary tags,
  `StringSet` (adding a tag also adds its primary tag), `validate_tags`,
  `must_get_primary_tag` and `count_test_cases_by_tag`, which counts the
  tags of any objects that have a `tags` attribute with a `keys()` method.
- `netpolkit.generator.action` – one dataclass per action: create, update or
  delete a policy; create, relabel or delete a namespace or pod; read
  policies.
- `netpolkit.generator.netpol` – `Netpol`, a policy split into target and
  ingress/egress rules; setters (`set_namespace`, `set_pod_selector`,
  `set_rules`, `set_ports`, `set_peers`, `set_description`) applied by
  `build_policy` to a fixed base policy; `allow_dns_policy`; and common
  ports and selectors.
- `netpolkit.generator.feature` – `NetpolTraverser` and the general, ingress
  and egress traversers that list the features a policy uses.

## What this package does not do

- It does not connect to a real cluster; `MockKubernetes` is the only cluster
  object it provides.
- It does not probe connectivity between pods or check whether traffic is
  allowed.
- It has no command-line tool.
- It provides the pieces for test cases (tags, actions, policy builders and
  feature extraction), but no ready-made catalogue of test cases, no test-case
  or step types, and no probe settings.