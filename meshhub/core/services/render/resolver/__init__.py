"""
L2 Resolver — ``__init__.py`` re-exports all resolver functions.

These functions turn a spec plus a render request into concrete
choices: an applicable flavor, validated layer selections, composed
values, and finally the resolved plan.
"""

from meshhub.core.services.render.resolver.compatibility import (  # noqa: F401
    check_flavor_compatibility,
    check_requirement_set,
    ensure_flavor_compatible,
    list_compatible_flavors,
)
from meshhub.core.services.render.resolver.layers import (  # noqa: F401
    ComposedValues,
    LayerSelection,
    check_layer_dependencies,
    compose_layers,
    parameter_scopes,
    select_layers,
)
from meshhub.core.services.render.resolver.plan_resolution import (  # noqa: F401
    RenderPlan,
    render_values_preview,
    resolve_plan,
)
