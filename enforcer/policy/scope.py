"""
Scope Resolver — namespace and label filtering.

At both layers exclusion is checked first and always wins over inclusion.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..workload.models import Workload
from .models import LabelFilter, NamespaceFilter, ScopeSpec
from .patterns import matches


def namespace_in_scope(namespace: str, ns_filter: NamespaceFilter) -> bool:
    if any(matches(p, namespace) for p in ns_filter.exclude):
        return False
    # empty include list matches nothing
    return any(matches(p, namespace) for p in ns_filter.include)


def labels_match(labels: Mapping[str, str], label_filter: Optional[LabelFilter]) -> bool:
    if label_filter is None:
        return True

    for key, value in (label_filter.exclude or {}).items():
        if key in labels and labels[key] == value:
            return False

    for key, value in (label_filter.match or {}).items():
        if key not in labels or labels[key] != value:
            return False
    return True


def in_scope(workload: Workload, scope: Optional[ScopeSpec]) -> bool:
    if scope is None:
        return True
    return namespace_in_scope(workload.namespace, scope.namespaces) and labels_match(
        workload.labels, scope.labels
    )
