"""
L3 Detection — Resource dependency checks.

A layer option may require cluster resources (today: a Secret with
certain keys) to exist in the install namespace. These checks only
read the cluster; they never create or modify anything.
"""

from __future__ import annotations

import logging

from meshhub.adapters.base import ClusterClient, ClusterQueryError
from meshhub.core.models.application import Layer, LayerOption, ResourceDependency
from meshhub.core.services.render.errors import MissingDependency

logger = logging.getLogger(__name__)


def check_resource_dependencies(
    layer: Layer,
    option: LayerOption,
    namespace: str,
    cluster: ClusterClient | None,
) -> list[MissingDependency]:
    """Check every dependency of one selected layer option.

    All dependencies are checked (no short-circuit) so the caller can
    report them together.

    Returns:
        One MissingDependency per unmet dependency (empty = all met).
    """
    missing: list[MissingDependency] = []
    for dep in option.resource_dependencies:
        reason = _check_one(dep, namespace, cluster)
        if reason:
            missing.append(MissingDependency(
                f"Layer '{layer.id}' option '{option.id}' requires "
                f"{dep.describe()}: {reason}",
                layer=layer.id,
                option=option.id,
                dependency=dep.describe(),
                reason=reason,
            ))
    if option.resource_dependencies and not missing:
        logger.debug(
            "Layer %s:%s — %d dependencies satisfied",
            layer.id, option.id, len(option.resource_dependencies),
        )
    return missing


def _check_one(
    dep: ResourceDependency,
    namespace: str,
    cluster: ClusterClient | None,
) -> str:
    """Return a failure reason, or an empty string if satisfied."""
    if dep.secret_dependency is not None:
        secret = dep.secret_dependency
        if cluster is None:
            return "no cluster client available to verify it"
        try:
            data = cluster.get_secret(namespace, secret.name)
        except ClusterQueryError as e:
            return f"cluster query failed: {e}"
        if data is None:
            return f"Secret '{secret.name}' not found in namespace '{namespace}'"
        absent = [k for k in secret.keys if k not in data]
        if absent:
            return f"Secret '{secret.name}' is missing key(s): {', '.join(absent)}"
        return ""
    raise TypeError(f"Unhandled resource dependency: {dep!r}")
