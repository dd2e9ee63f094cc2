"""
L2 Resolver — Layer selection and composition.

Validates the caller's layer choices against a flavor's declared
layers, checks the chosen options' cluster dependencies, and composes
the value map handed to the templating engine.

Value precedence, lowest to highest:
    version values_yaml → parameter defaults (any scope)
    → layer option helm_values (declaration order)
    → caller values YAML → caller parameter overrides
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from meshhub.adapters.base import ClusterClient
from meshhub.core.models.application import (
    Flavor,
    InlineManifests,
    Layer,
    LayerOption,
    VersionedApplicationSpec,
)
from meshhub.core.services.render.detection.dependencies import check_resource_dependencies
from meshhub.core.services.render.domain.params import ParameterScope
from meshhub.core.services.render.domain.values import (
    apply_parameters,
    deep_merge,
    parse_values,
)
from meshhub.core.services.render.errors import (
    InvalidLayerSelection,
    LayerSelectionRequired,
    MissingDependency,
    RenderError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerSelection:
    """An enabled layer and the option chosen for it."""

    layer: Layer
    option: LayerOption

    @property
    def key(self) -> str:
        return f"{self.layer.id}:{self.option.id}"


@dataclass
class ComposedValues:
    """Output of layer composition for one render call."""

    values: dict[str, Any] = field(default_factory=dict)
    fragments: list[InlineManifests] = field(default_factory=list)


def select_layers(
    flavor: Flavor | None,
    choices: dict[str, str | None],
) -> tuple[list[LayerSelection], list[RenderError]]:
    """Match layer choices to the flavor's declared layers.

    Walks every declared layer (declaration order) and collects all
    problems instead of stopping at the first:

    - a non-optional layer without a chosen option → LayerSelectionRequired
    - an unknown option id → InvalidLayerSelection
    - a choice for a layer the flavor does not declare → InvalidLayerSelection

    Optional layers without a choice are disabled and contribute nothing.

    Returns:
        (selections in declaration order, errors)
    """
    selections: list[LayerSelection] = []
    errors: list[RenderError] = []
    declared = flavor.customization_layers if flavor else []
    flavor_name = flavor.name if flavor else None

    for layer in declared:
        option_id = choices.get(layer.id)
        if not option_id:
            if not layer.optional:
                errors.append(LayerSelectionRequired(
                    f"Layer '{layer.id}' is not optional; choose one of: "
                    + ", ".join(o.id for o in layer.options),
                    layer=layer.id,
                    options=[o.id for o in layer.options],
                ))
            continue

        option = layer.get_option(option_id)
        if option is None:
            errors.append(InvalidLayerSelection(
                f"Layer '{layer.id}' has no option '{option_id}'",
                layer=layer.id,
                option=option_id,
                options=[o.id for o in layer.options],
            ))
            continue
        selections.append(LayerSelection(layer=layer, option=option))

    known = {layer.id for layer in declared}
    for layer_id in sorted(choices):
        if layer_id in known or not choices[layer_id]:
            continue
        where = f"flavor '{flavor_name}'" if flavor_name else "this version (no flavor selected)"
        errors.append(InvalidLayerSelection(
            f"Layer '{layer_id}' is not declared by {where}",
            layer=layer_id,
            flavor=flavor_name,
        ))

    return selections, errors


def parameter_scopes(
    version: VersionedApplicationSpec,
    flavor: Flavor | None,
    selections: list[LayerSelection],
) -> list[ParameterScope]:
    """Parameter scopes in precedence order (lowest first)."""
    scopes = [ParameterScope(name=f"version {version.version}", parameters=version.parameters)]
    if flavor is not None:
        scopes.append(ParameterScope(name=f"flavor {flavor.name}", parameters=flavor.parameters))
    for sel in selections:
        scopes.append(ParameterScope(name=f"layer {sel.key}", parameters=sel.option.parameters))
    return scopes


def check_layer_dependencies(
    selections: list[LayerSelection],
    namespace: str,
    cluster: ClusterClient | None,
) -> list[MissingDependency]:
    """Dependency problems across every selected option."""
    missing: list[MissingDependency] = []
    for sel in selections:
        missing.extend(check_resource_dependencies(sel.layer, sel.option, namespace, cluster))
    return missing


def compose_layers(
    base_values: dict[str, Any],
    selections: list[LayerSelection],
    *,
    defaults: dict[str, str] | None = None,
    user_values: dict[str, Any] | None = None,
    params: dict[str, str] | None = None,
) -> ComposedValues:
    """Merge layer overrides onto the base values.

    Parameter ``defaults`` are part of the base. Later layers win over
    earlier ones and over the base; caller values come next, and the
    caller's parameter overrides (``params``) are applied last so they
    always win.

    Raises:
        ValueError: If a layer option's helm_values is not a YAML mapping.
    """
    values = dict(base_values)
    if defaults:
        values = apply_parameters(values, defaults)
    fragments: list[InlineManifests] = []

    for sel in selections:
        overrides = parse_values(sel.option.helm_values, origin=f"layer {sel.key}")
        if overrides:
            values = deep_merge(values, overrides)
        if sel.option.manifests.strip():
            fragments.append(InlineManifests(
                content=sel.option.manifests,
                origin=f"layer {sel.key}",
            ))
        logger.debug(
            "Applied layer %s (%d value overrides, %s manifests)",
            sel.key, len(overrides), "with" if sel.option.manifests.strip() else "no",
        )

    if user_values:
        values = deep_merge(values, user_values)
    if params:
        values = apply_parameters(values, params)

    return ComposedValues(values=values, fragments=fragments)
