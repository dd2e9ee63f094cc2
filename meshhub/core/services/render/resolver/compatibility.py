"""
L2 Resolver — Flavor compatibility.

A flavor applies to a target mesh if at least one of its requirement
sets is satisfied. A requirement set is satisfied when the mesh type
matches and the mesh version falls inside the inclusive allowed range.
A flavor with no requirement sets applies everywhere.
"""

from __future__ import annotations

import logging

from meshhub.core.models.application import (
    CompatibleFlavorMeshPair,
    Flavor,
    RequirementSet,
    VersionedApplicationSpec,
)
from meshhub.core.models.request import TargetRuntime
from meshhub.core.services.render.domain.versions import check_version_range
from meshhub.core.services.render.errors import FlavorIncompatible

logger = logging.getLogger(__name__)


def describe_requirement_set(req: RequirementSet) -> str:
    mr = req.mesh_requirement
    versions = mr.versions
    if versions is None or not (versions.min_version or versions.max_version):
        return f"{mr.mesh_type.value} (any version)"
    lo = versions.min_version or "*"
    hi = versions.max_version or "*"
    return f"{mr.mesh_type.value} [{lo}, {hi}]"


def check_requirement_set(req: RequirementSet, runtime: TargetRuntime) -> dict:
    """Evaluate one requirement set against the target runtime.

    Returns:
        ``{"satisfied": True}`` or ``{"satisfied": False, "reason": "..."}``
    """
    mr = req.mesh_requirement
    if mr.mesh_type != runtime.mesh_type:
        return {
            "satisfied": False,
            "reason": f"requires {mr.mesh_type.value}, target is {runtime.mesh_type.value}",
        }

    if mr.versions is None:
        return {"satisfied": True}

    result = check_version_range(
        runtime.version,
        mr.versions.min_version,
        mr.versions.max_version,
    )
    if result["valid"]:
        return {"satisfied": True}
    return {"satisfied": False, "reason": result["message"]}


def check_flavor_compatibility(
    flavor: Flavor,
    runtime: TargetRuntime | None,
) -> dict:
    """Decide whether a flavor applies to the target runtime.

    Every requirement set is evaluated (no short-circuit on failure) so
    the report names all unmet sets.

    Returns:
        {
            "applicable": bool,
            "satisfied_by": str | None,      # first satisfied set
            "unmet": [{"requirement": str, "reason": str}, ...],
        }
    """
    if not flavor.requirement_sets:
        return {"applicable": True, "satisfied_by": None, "unmet": []}

    if runtime is None:
        return {
            "applicable": False,
            "satisfied_by": None,
            "unmet": [
                {"requirement": describe_requirement_set(r), "reason": "no target runtime given"}
                for r in flavor.requirement_sets
            ],
        }

    unmet: list[dict] = []
    for req in flavor.requirement_sets:
        check = check_requirement_set(req, runtime)
        if check["satisfied"]:
            return {
                "applicable": True,
                "satisfied_by": describe_requirement_set(req),
                "unmet": [],
            }
        unmet.append({
            "requirement": describe_requirement_set(req),
            "reason": check["reason"],
        })

    return {"applicable": False, "satisfied_by": None, "unmet": unmet}


def ensure_flavor_compatible(flavor: Flavor, runtime: TargetRuntime | None) -> None:
    """Raise FlavorIncompatible unless the flavor applies to ``runtime``."""
    result = check_flavor_compatibility(flavor, runtime)
    if result["applicable"]:
        logger.debug(
            "Flavor %s applicable (%s)",
            flavor.name, result["satisfied_by"] or "no requirements",
        )
        return

    target = runtime.describe() if runtime else "no target runtime"
    raise FlavorIncompatible(
        f"Flavor '{flavor.name}' is not compatible with {target}: "
        + "; ".join(f"{u['requirement']}: {u['reason']}" for u in result["unmet"]),
        flavor=flavor.name,
        unmet=result["unmet"],
    )


def list_compatible_flavors(
    version: VersionedApplicationSpec,
    runtimes: list[TargetRuntime],
) -> list[CompatibleFlavorMeshPair]:
    """Every (flavor, mesh) pair of a version that is compatible.

    Pairs are ordered by runtime, then by flavor declaration order.
    """
    pairs: list[CompatibleFlavorMeshPair] = []
    for runtime in runtimes:
        for flavor in version.flavors:
            if check_flavor_compatibility(flavor, runtime)["applicable"]:
                pairs.append(CompatibleFlavorMeshPair(
                    flavor=flavor,
                    mesh_name=runtime.name,
                    mesh_type=runtime.mesh_type,
                    mesh_version=runtime.version,
                ))
    return pairs
