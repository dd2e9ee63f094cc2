"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from meshhub.core.services.render.domain.params import (  # noqa: F401
    ParameterScope,
    ParameterSource,
    check_required,
    display_parameter_value,
    format_date,
    format_float,
    merge_parameter_sources,
    param_value_to_string,
    resolve_parameters,
)
from meshhub.core.services.render.domain.values import (  # noqa: F401
    apply_parameters,
    deep_merge,
    parse_values,
    set_path,
    typed_value,
)
from meshhub.core.services.render.domain.versions import (  # noqa: F401
    check_version_range,
    compare_versions,
    parse_version,
)
