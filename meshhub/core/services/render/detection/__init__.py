"""
L3 Detection — lookups against cluster and local filesystem state.
"""

from meshhub.core.services.render.detection.dependencies import (  # noqa: F401
    check_resource_dependencies,
)
from meshhub.core.services.render.detection.secrets import SecretResolver  # noqa: F401
