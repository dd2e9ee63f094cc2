"""
Render service — package re-exports.

Turns (application, version, flavor, layer choices, parameter
overrides) into an ordered, fully-parameterized resource batch::

    from meshhub.core.services.render import resolve_plan

Each symbol lives in its single-responsibility module inside the
appropriate layer (domain → resolver → detection → execution).
"""

# ── Errors ──
from meshhub.core.services.render.errors import (  # noqa: F401
    RenderError,
    ValidationFailed,
)

# ── L1: Domain ──
from meshhub.core.services.render.domain.params import (  # noqa: F401
    display_parameter_value,
    param_value_to_string,
)

# ── L2: Resolver ──
from meshhub.core.services.render.resolver.compatibility import (  # noqa: F401
    check_flavor_compatibility,
    list_compatible_flavors,
)
from meshhub.core.services.render.resolver.plan_resolution import (  # noqa: F401
    RenderPlan,
    render_values_preview,
    resolve_plan,
)

# ── L3: Detection ──
from meshhub.core.services.render.detection.secrets import SecretResolver  # noqa: F401
