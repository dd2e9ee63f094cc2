"""
Render settings — process-wide knobs read from the environment.

    MESHHUB_STEP_LABEL      label key stamped on every step's resources
    MESHHUB_HELM_BIN        helm binary used by the Helm templating engine
    MESHHUB_HELM_TIMEOUT    seconds before a helm template call is aborted
    MESHHUB_KUBECTL_TIMEOUT seconds before a kubectl lookup is aborted
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from pydantic import BaseModel, ValidationError

from meshhub.core.config.loader import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_STEP_LABEL = "meshhub.io/install-step"

_ENV_KEYS = {
    "step_label_key": "MESHHUB_STEP_LABEL",
    "helm_bin": "MESHHUB_HELM_BIN",
    "helm_timeout": "MESHHUB_HELM_TIMEOUT",
    "kubectl_timeout": "MESHHUB_KUBECTL_TIMEOUT",
}


class RenderSettings(BaseModel):
    step_label_key: str = DEFAULT_STEP_LABEL
    helm_bin: str = "helm"
    helm_timeout: int = 60
    kubectl_timeout: int = 15


def load_settings(environ: Mapping[str, str] | None = None) -> RenderSettings:
    """Build settings from environment variables (unset → defaults).

    Raises:
        ConfigError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    data = {field: env[key] for field, key in _ENV_KEYS.items() if env.get(key)}
    try:
        settings = RenderSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid MESHHUB_* environment settings: {e}") from e
    if data:
        logger.debug("Render settings from environment: %s", sorted(data))
    return settings
