"""
Render request models — what the caller asks the engine to produce.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from meshhub.core.models.application import MeshType, check_values_yaml


class TargetRuntime(BaseModel):
    """The mesh instance an application is being installed against."""

    mesh_type: MeshType
    version: str
    name: str = ""        # mesh instance name, informational

    def describe(self) -> str:
        label = f"{self.mesh_type.value} {self.version}"
        return f"{self.name} ({label})" if self.name else label


class RenderRequest(BaseModel):
    """One installation request.

    ``layers`` maps layer id → chosen option id. A layer mapped to
    ``None`` (or absent) is disabled.
    """

    application_name: str
    version: str
    flavor: str | None = None
    layers: dict[str, str | None] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    user_values: str = ""                 # caller-supplied values YAML
    install_namespace: str = "default"
    target_runtime: TargetRuntime | None = None

    @field_validator("user_values")
    @classmethod
    def _user_values_yaml(cls, v: str) -> str:
        return check_values_yaml(v)

    @property
    def selected_layers(self) -> dict[str, str]:
        """Only the layers that have an option chosen."""
        return {k: v for k, v in self.layers.items() if v}
