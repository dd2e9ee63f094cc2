"""
L4 Execution — Post-processing of the rendered batch.

Two passes, in this order:
    1. required-label filter (keep only resources carrying every pair)
    2. namespace rewrite (unless the version respects manifest namespaces)
"""

from __future__ import annotations

import logging

from meshhub.core.models.application import VersionedApplicationSpec
from meshhub.core.models.manifest import Resource

logger = logging.getLogger(__name__)


def filter_required_labels(
    resources: list[Resource],
    required_labels: dict[str, str],
) -> list[Resource]:
    """Keep resources carrying all required label pairs, order preserved.

    An empty ``required_labels`` keeps everything.
    """
    if not required_labels:
        return list(resources)
    kept = [r for r in resources if r.has_labels(required_labels)]
    dropped = len(resources) - len(kept)
    if dropped:
        logger.debug(
            "Required labels %s dropped %d of %d resources",
            required_labels, dropped, len(resources),
        )
    return kept


def rewrite_namespaces(resources: list[Resource], namespace: str) -> list[Resource]:
    """Set every resource's namespace to ``namespace``."""
    return [r if r.namespace == namespace else r.with_namespace(namespace) for r in resources]


def postprocess(
    resources: list[Resource],
    version: VersionedApplicationSpec,
    install_namespace: str,
) -> list[Resource]:
    """Apply the version's label filter and namespace policy."""
    result = filter_required_labels(resources, version.required_labels)
    if not version.respect_manifest_namespaces:
        result = rewrite_namespaces(result, install_namespace)
    return result
