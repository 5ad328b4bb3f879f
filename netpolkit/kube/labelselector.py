"""Matching of labels against Kubernetes label selectors, and their rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping

from netpolkit.kube.model import LabelSelector, LabelSelectorOperator, LabelSelectorRequirement


def is_name_match(object_name: str, matcher: str) -> bool:
    """An empty matcher matches every name; otherwise the names must be equal."""
    if matcher == "":
        return True
    return object_name == matcher


def is_match_expression_match_for_labels(
    labels: Mapping[str, str], exp: LabelSelectorRequirement
) -> bool:
    """Whether the labels satisfy one set-based requirement."""
    operator = exp.operator
    if operator == LabelSelectorOperator.IN:
        return exp.key in labels and labels[exp.key] in exp.values
    if operator == LabelSelectorOperator.NOT_IN:
        # a missing key is not a match, even for NotIn
        return exp.key in labels and labels[exp.key] not in exp.values
    if operator == LabelSelectorOperator.EXISTS:
        return exp.key in labels
    if operator == LabelSelectorOperator.DOES_NOT_EXIST:
        return exp.key not in labels
    raise ValueError(f"invalid operator {operator!r}")


def is_labels_match_label_selector(labels: Mapping[str, str], label_selector: LabelSelector) -> bool:
    """Match labels and expressions are ANDed; an empty selector matches everything."""
    if any(labels.get(key, "") != val for key, val in label_selector.match_labels.items()):
        return False
    return all(
        is_match_expression_match_for_labels(labels, exp)
        for exp in label_selector.match_expressions
    )


def is_label_selector_empty(selector: LabelSelector) -> bool:
    return not selector.match_labels and not selector.match_expressions


def _requirement_json(exp: LabelSelectorRequirement) -> dict:
    out = {"key": exp.key, "operator": str(exp.operator)}
    if exp.values:
        out["values"] = list(exp.values)
    return out


def serialize_label_selector(selector: LabelSelector) -> str:
    """Deterministic one-line JSON rendering of a selector."""
    key_vals = [f"{key}: {selector.match_labels[key]}" for key in sorted(selector.match_labels)]
    expressions = [_requirement_json(exp) for exp in selector.match_expressions]
    payload = [
        "MatchLabels",
        key_vals or None,
        "MatchExpression",
        expressions or None,
    ]
    return json.dumps(payload, separators=(",", ":"))


def label_selector_table_lines(selector: LabelSelector) -> str:
    """Multi-line description of a selector for table cells."""
    if is_label_selector_empty(selector):
        return "all pods"
    lines = []
    if selector.match_labels:
        lines.append("Match labels:")
        lines.extend(f"  {key}: {selector.match_labels[key]}" for key in sorted(selector.match_labels))
    if selector.match_expressions:
        lines.append("Match expressions:")
        for exp in sorted(selector.match_expressions, key=lambda e: e.key):
            values = " ".join(sorted(exp.values))
            lines.append(f"  {exp.key} {exp.operator} [{values}]")
    return "\n".join(lines)