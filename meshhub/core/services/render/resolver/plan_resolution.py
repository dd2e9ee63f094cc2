"""
L2 Resolver — Plan resolution (render entry point).

Combines version lookup, flavor compatibility, layer selection,
parameter resolution, and step rendering into the final ordered,
labeled, filtered, and namespace-normalized resource batch.

Order of checks:
    1. everything decidable without I/O (version, install source,
       flavor, layer selection, required parameters)
    2. layer resource dependencies (cluster reads)
    3. secret resolution (cluster / file reads)
    4. templating, one call per step, then layer fragments

Nothing reaches the templating engine until steps 1–3 pass.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

import yaml

from meshhub.adapters.base import ClusterClient, TemplatingEngine
from meshhub.core.config.settings import RenderSettings, load_settings
from meshhub.core.models.application import (
    ApplicationSpec,
    Flavor,
    VersionedApplicationSpec,
)
from meshhub.core.models.manifest import Resource, dump_manifests
from meshhub.core.models.request import RenderRequest
from meshhub.core.services.render.detection.secrets import SecretResolver
from meshhub.core.services.render.domain.params import (
    ParameterSource,
    check_required,
    merge_parameter_sources,
    resolve_parameters,
)
from meshhub.core.services.render.domain.values import parse_values
from meshhub.core.services.render.errors import (
    ApplicationNotFound,
    FlavorNotFound,
    RenderError,
    ValidationFailed,
    VersionNotFound,
)
from meshhub.core.services.render.execution.postprocess import postprocess
from meshhub.core.services.render.execution.steps import StepOrchestrator, plan_steps
from meshhub.core.services.render.resolver.compatibility import ensure_flavor_compatible
from meshhub.core.services.render.resolver.layers import (
    check_layer_dependencies,
    compose_layers,
    parameter_scopes,
    select_layers,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderPlan:
    """The resolved installation plan for one request."""

    application: str = ""
    version: str = ""
    flavor: str | None = None
    install_namespace: str = ""
    step_label_key: str = ""
    steps: list[str] = field(default_factory=list)
    layers: list[str] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)

    @property
    def total_resources(self) -> int:
        return len(self.resources)

    def resources_for_step(self, step: str) -> list[Resource]:
        return [r for r in self.resources if r.labels.get(self.step_label_key) == step]

    def to_yaml(self) -> str:
        """The resource batch as multi-document YAML, in apply order."""
        return dump_manifests(self.resources)

    def to_dict(self) -> dict:
        return {
            "application": self.application,
            "version": self.version,
            "flavor": self.flavor,
            "install_namespace": self.install_namespace,
            "steps": list(self.steps),
            "layers": list(self.layers),
            "total_resources": self.total_resources,
            "resources": [r.to_manifest() for r in self.resources],
        }


def _find_version(spec: ApplicationSpec, version: str) -> VersionedApplicationSpec:
    found = spec.get_version(version)
    if found is None:
        raise VersionNotFound(
            f"Application '{spec.name}' has no version '{version}'",
            application=spec.name,
            version=version,
            available=spec.version_names,
        )
    return found


def _find_flavor(version: VersionedApplicationSpec, name: str | None) -> Flavor | None:
    if not name:
        return None
    flavor = version.get_flavor(name)
    if flavor is None:
        raise FlavorNotFound(
            f"Version {version.version} has no flavor '{name}'",
            version=version.version,
            flavor=name,
            available=[f.name for f in version.flavors],
        )
    return flavor


def _split_overrides(
    merged: dict[str, ParameterSource],
    params: dict[str, str],
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolved parameters split into scope defaults and caller overrides."""
    defaults = {n: v for n, v in params.items() if merged[n].override is None}
    overrides = {n: v for n, v in params.items() if merged[n].override is not None}
    return defaults, overrides


def resolve_plan(
    spec: ApplicationSpec,
    request: RenderRequest,
    engine: TemplatingEngine,
    *,
    cluster: ClusterClient | None = None,
    settings: RenderSettings | None = None,
    cancel: threading.Event | None = None,
    check_dependencies: bool = True,
) -> RenderPlan:
    """Produce the ordered resource batch for one installation request.

    Safe to call concurrently for different requests against the same
    spec: every call builds its own working state and never mutates
    ``spec``.

    Args:
        spec: The application spec (read-only).
        request: What to install, where, and how.
        engine: Templating engine used once per step.
        cluster: Cluster client for secret and dependency lookups.
        settings: Render settings (default: from environment).
        cancel: When set, aborts before the next unstarted step.
        check_dependencies: Verify layer option resource dependencies
            against ``cluster``.

    Returns:
        RenderPlan with resources in apply order.

    Raises:
        RenderError: Any render failure. Validation problems found
            before rendering are grouped in a ValidationFailed.
    """
    settings = settings or load_settings()

    if request.application_name and request.application_name != spec.name:
        raise ApplicationNotFound(
            f"Requested application '{request.application_name}' but spec is '{spec.name}'",
            application=request.application_name,
        )

    logger.info(
        "Resolving %s %s (flavor=%s, namespace=%s)",
        spec.name, request.version, request.flavor or "-", request.install_namespace,
    )

    # ── 1. Checks without I/O ────────────────────────────────────
    version = _find_version(spec, request.version)
    steps = plan_steps(version)
    flavor = _find_flavor(version, request.flavor)
    if flavor is not None:
        ensure_flavor_compatible(flavor, request.target_runtime)

    selections, errors = select_layers(flavor, request.layers)
    scopes = parameter_scopes(version, flavor, selections)
    merged = merge_parameter_sources(scopes, request.params)
    errors.extend(check_required(scopes, merged))
    if errors:
        raise ValidationFailed(errors)

    # ── 2. Layer dependencies (cluster reads) ────────────────────
    if check_dependencies:
        missing: list[RenderError] = list(
            check_layer_dependencies(selections, request.install_namespace, cluster)
        )
        if missing:
            raise ValidationFailed(missing)

    # ── 3. Parameters and values ─────────────────────────────────
    secrets = SecretResolver(request.install_namespace, cluster)
    params = resolve_parameters(merged, secrets)
    defaults, overrides = _split_overrides(merged, params)
    composed = compose_layers(
        parse_values(version.values_yaml, origin=f"version {version.version} values"),
        selections,
        defaults=defaults,
        user_values=parse_values(request.user_values, origin="caller values"),
        params=overrides,
    )
    logger.debug("Resolved %d parameters: %s", len(params), sorted(params))

    # ── 4. Render ────────────────────────────────────────────────
    orchestrator = StepOrchestrator(
        engine,
        step_label_key=settings.step_label_key,
        release_name=spec.name,
        namespace=request.install_namespace,
        cancel=cancel,
    )
    output = orchestrator.run(steps, composed.values, composed.fragments)

    resources = postprocess(output.resources, version, request.install_namespace)

    plan = RenderPlan(
        application=spec.name,
        version=version.version,
        flavor=flavor.name if flavor else None,
        install_namespace=request.install_namespace,
        step_label_key=settings.step_label_key,
        steps=[s.name for s in steps],
        layers=[sel.key for sel in selections],
        resources=resources,
    )
    logger.info(
        "Resolved %s %s → %d resources across %d step(s)",
        spec.name, version.version, plan.total_resources, len(plan.steps),
    )
    return plan


def render_values_preview(
    spec: ApplicationSpec,
    request: RenderRequest,
) -> str:
    """The composed value map (secrets excluded) as YAML, for inspection.

    Runs only the I/O-free checks. Secret-typed parameters are left
    out rather than resolved.
    """
    version = _find_version(spec, request.version)
    flavor = _find_flavor(version, request.flavor)
    selections, errors = select_layers(flavor, request.layers)
    if errors:
        raise ValidationFailed(errors)
    scopes = parameter_scopes(version, flavor, selections)
    merged = merge_parameter_sources(scopes, request.params)
    public = {
        name: source for name, source in merged.items()
        if source.default is None or source.default.secret_value is None
    }
    params = resolve_parameters(public, SecretResolver(request.install_namespace))
    defaults, overrides = _split_overrides(public, params)
    composed = compose_layers(
        parse_values(version.values_yaml),
        selections,
        defaults=defaults,
        user_values=parse_values(request.user_values),
        params=overrides,
    )
    return yaml.safe_dump(composed.values, default_flow_style=False, sort_keys=True)
