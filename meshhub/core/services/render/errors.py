"""
Render errors — one exception class per failure kind.

Every error carries a stable ``kind`` string and structured
``details`` so callers (CLI, API layers) can report it without
parsing messages. Layer and dependency problems are collected into a
single ``ValidationFailed`` instead of being raised one at a time.
"""

from __future__ import annotations

from typing import Any


class RenderError(Exception):
    """Base class for everything the render engine reports."""

    kind = "RenderError"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.details:
            result["details"] = dict(self.details)
        return result


class ApplicationNotFound(RenderError):
    kind = "ApplicationNotFound"


class VersionNotFound(RenderError):
    kind = "VersionNotFound"


class FlavorNotFound(RenderError):
    kind = "FlavorNotFound"


class FlavorIncompatible(RenderError):
    kind = "FlavorIncompatible"


class NoInstallSourceDefined(RenderError):
    kind = "NoInstallSourceDefined"


class LayerSelectionRequired(RenderError):
    kind = "LayerSelectionRequired"


class InvalidLayerSelection(RenderError):
    """The request names a layer or option the flavor does not declare."""

    kind = "InvalidLayerSelection"


class MissingDependency(RenderError):
    kind = "MissingDependency"


class MissingRequiredParameter(RenderError):
    kind = "MissingRequiredParameter"


class SecretNotFound(RenderError):
    kind = "SecretNotFound"


class SecretSourceUnavailable(RenderError):
    kind = "SecretSourceUnavailable"


class SecretParameterRenderingUnsupported(RenderError):
    """A secret-typed value reached a path that cannot resolve secrets.

    Only the display helper (``display_parameter_value``) hits this;
    it renders such values as an empty string. Resolution paths always
    go through the secret resolver instead.
    """

    kind = "SecretParameterRenderingUnsupported"


class TemplatingFailed(RenderError):
    kind = "TemplatingFailed"


class RenderCancelled(RenderError):
    kind = "RenderCancelled"


class ValidationFailed(RenderError):
    """Composite of every validation error found before rendering."""

    kind = "ValidationFailed"

    def __init__(self, errors: list[RenderError]):
        self.errors = list(errors)
        summary = "; ".join(e.message for e in self.errors)
        super().__init__(
            f"{len(self.errors)} validation error(s): {summary}",
        )

    @property
    def kinds(self) -> list[str]:
        return [e.kind for e in self.errors]

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["errors"] = [e.to_dict() for e in self.errors]
        return result
