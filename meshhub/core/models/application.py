"""
Application models — the static description of a packaged application.

An ApplicationSpec holds metadata common to every release and an
ordered list of VersionedApplicationSpec. Each version says how to
install the application (a chart, an archive, or ordered steps),
which flavors it offers, and which parameters it accepts.

These objects are read-only inputs to the render engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from meshhub.core.models.parameter import Parameter, check_unique_parameters


class ApplicationType(str, Enum):
    EXTENSION = "EXTENSION"
    DEMO = "DEMO"
    MESH = "MESH"


class MeshType(str, Enum):
    ISTIO = "ISTIO"
    LINKERD = "LINKERD"
    AWS_APP_MESH = "AWS_APP_MESH"


# ── Install locations ───────────────────────────────────────────


class GithubRepositoryLocation(BaseModel):
    """A directory inside a GitHub repo containing a Helm chart."""

    org: str
    repo: str
    ref: str = "master"
    directory: str = ""

    def describe(self) -> str:
        path = f"/{self.directory}" if self.directory else ""
        return f"github.com/{self.org}/{self.repo}@{self.ref}{path}"


class TgzLocation(BaseModel):
    """Location of a gzipped tar file."""

    uri: str

    def describe(self) -> str:
        return self.uri


class HelmArchiveLocation(TgzLocation):
    """A tgz containing a Helm chart."""


class ManifestsArchiveLocation(TgzLocation):
    """A tgz containing one or more YAML manifests."""


class InlineManifests(BaseModel):
    """Manifest template text carried inside the spec (layer fragments)."""

    content: str
    origin: str = ""

    def describe(self) -> str:
        return self.origin or "inline"


InstallSource = Union[
    GithubRepositoryLocation,
    HelmArchiveLocation,
    ManifestsArchiveLocation,
    InlineManifests,
]

_SOURCE_FIELDS = ("github_chart", "helm_archive", "manifests_archive")


def _install_sources(model: BaseModel) -> list[str]:
    return [f for f in _SOURCE_FIELDS if getattr(model, f) is not None]


def check_values_yaml(text: str) -> str:
    """Values blobs must be empty or a YAML mapping."""
    if not text.strip():
        return text
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid values YAML: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"values YAML must be a mapping, got {type(data).__name__}")
    return text


# ── Installation steps ──────────────────────────────────────────


class Step(BaseModel):
    """One named stage of a multi-stage install.

    A step has exactly one single-source install location; steps
    never nest.
    """

    name: str
    github_chart: GithubRepositoryLocation | None = None
    helm_archive: HelmArchiveLocation | None = None
    manifests_archive: ManifestsArchiveLocation | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> Step:
        set_ = _install_sources(self)
        if len(set_) != 1:
            raise ValueError(
                f"step '{self.name}' must set exactly one of "
                f"{', '.join(_SOURCE_FIELDS)} (got {set_ or 'none'})"
            )
        return self

    @property
    def install_source(self) -> InstallSource:
        source = self.github_chart or self.helm_archive or self.manifests_archive
        assert source is not None  # guaranteed by validator
        return source


class InstallationSteps(BaseModel):
    """An ordered list of installation steps, applied in array order."""

    steps: list[Step] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> InstallationSteps:
        seen: set[str] = set()
        for step in self.steps:
            if step.name in seen:
                raise ValueError(f"duplicate installation step '{step.name}'")
            seen.add(step.name)
        return self


# ── Requirements ────────────────────────────────────────────────


class AllowedVersions(BaseModel):
    """Inclusive version range. An empty bound is unbounded."""

    min_version: str = ""
    max_version: str = ""


class MeshRequirement(BaseModel):
    mesh_type: MeshType
    versions: AllowedVersions | None = None


class RequirementSet(BaseModel):
    """Conditions that must all hold. Currently a single mesh requirement."""

    mesh_requirement: MeshRequirement


# ── Resource dependencies ───────────────────────────────────────


class SecretDependency(BaseModel):
    """A Secret (in the install namespace) that must carry these keys."""

    name: str
    keys: list[str] = Field(default_factory=list)


class ResourceDependency(BaseModel):
    """Cluster state a layer option needs. Checked, never rendered."""

    secret_dependency: SecretDependency | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> ResourceDependency:
        if self.secret_dependency is None:
            raise ValueError("resource dependency must set secret_dependency")
        return self

    def describe(self) -> str:
        if self.secret_dependency is not None:
            return f"Secret/{self.secret_dependency.name}"
        raise TypeError("ResourceDependency has no variant set")


# ── Flavors and layers ──────────────────────────────────────────


class LayerOption(BaseModel):
    """One concrete choice for a layer.

    ``helm_values`` overrides chart values; ``manifests`` is extra
    manifest template text appended after every step has rendered.
    """

    id: str
    display_name: str = ""
    description: str = ""
    helm_values: str = ""
    manifests: str = ""
    parameters: list[Parameter] = Field(default_factory=list)
    resource_dependencies: list[ResourceDependency] = Field(default_factory=list)

    @field_validator("helm_values")
    @classmethod
    def _helm_values_yaml(cls, v: str) -> str:
        return check_values_yaml(v)

    @model_validator(mode="after")
    def _unique_parameters(self) -> LayerOption:
        check_unique_parameters(self.parameters, f"layer option '{self.id}'")
        return self


class Layer(BaseModel):
    """A customization axis within a flavor, e.g. ``mtls``."""

    id: str
    display_name: str = ""
    description: str = ""
    optional: bool = False
    options: list[LayerOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_options(self) -> Layer:
        ids = [o.id for o in self.options]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate option id in layer '{self.id}'")
        return self

    def get_option(self, option_id: str) -> LayerOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class Flavor(BaseModel):
    """A named customization bundle.

    The flavor is applicable if any of its requirement sets is
    satisfied; with no requirement sets it applies everywhere.
    """

    name: str
    description: str = ""
    customization_layers: list[Layer] = Field(default_factory=list)
    requirement_sets: list[RequirementSet] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_children(self) -> Flavor:
        ids = [layer.id for layer in self.customization_layers]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate layer id in flavor '{self.name}'")
        check_unique_parameters(self.parameters, f"flavor '{self.name}'")
        return self

    def get_layer(self, layer_id: str) -> Layer | None:
        for layer in self.customization_layers:
            if layer.id == layer_id:
                return layer
        return None


# ── Versions and applications ───────────────────────────────────


class VersionedApplicationSpec(BaseModel):
    """One release of an application."""

    version: str
    date_published: datetime | None = None

    # install location (oneof; none set → NoInstallSourceDefined at render)
    github_chart: GithubRepositoryLocation | None = None
    helm_archive: HelmArchiveLocation | None = None
    manifests_archive: ManifestsArchiveLocation | None = None
    installation_steps: InstallationSteps | None = None

    values_yaml: str = ""
    required_labels: dict[str, str] = Field(default_factory=dict)
    flavors: list[Flavor] = Field(default_factory=list)
    respect_manifest_namespaces: bool = False
    parameters: list[Parameter] = Field(default_factory=list)

    @field_validator("values_yaml")
    @classmethod
    def _values_yaml(cls, v: str) -> str:
        return check_values_yaml(v)

    @model_validator(mode="after")
    def _check(self) -> VersionedApplicationSpec:
        set_ = _install_sources(self)
        if self.installation_steps is not None:
            set_.append("installation_steps")
        if len(set_) > 1:
            raise ValueError(
                f"version {self.version} sets more than one install location: "
                f"{', '.join(set_)}"
            )
        names = [f.name for f in self.flavors]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate flavor name in version {self.version}")
        check_unique_parameters(self.parameters, f"version {self.version}")
        return self

    @property
    def single_source(self) -> InstallSource | None:
        """The single-source install location, if this version has one."""
        return self.github_chart or self.helm_archive or self.manifests_archive

    def get_flavor(self, name: str) -> Flavor | None:
        for flavor in self.flavors:
            if flavor.name == name:
                return flavor
        return None


class ApplicationSpec(BaseModel):
    """Static identity of a packaged application plus its versions."""

    type: ApplicationType = ApplicationType.EXTENSION
    name: str
    logo_url: str = ""
    short_description: str = ""
    long_description: str = ""
    documentation_url: str = ""
    repository_url: str = ""
    application_creator: str = ""
    application_provider: str = ""
    application_maintainer: str = ""
    date_created: datetime | None = None

    versions: list[VersionedApplicationSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_versions(self) -> ApplicationSpec:
        seen: set[str] = set()
        for v in self.versions:
            if v.version in seen:
                raise ValueError(f"duplicate version '{v.version}' in {self.name}")
            seen.add(v.version)
        return self

    def get_version(self, version: str) -> VersionedApplicationSpec | None:
        for v in self.versions:
            if v.version == version:
                return v
        return None

    @property
    def version_names(self) -> list[str]:
        return [v.version for v in self.versions]


class CompatibleFlavorMeshPair(BaseModel):
    """A flavor and the mesh instance it is compatible with."""

    flavor: Flavor
    mesh_name: str = ""
    mesh_type: MeshType
    mesh_version: str = ""
