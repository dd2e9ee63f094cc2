"""
Domain models — Pydantic types for the render engine.

All models are re-exported here for convenient access:

    from meshhub.core.models import ApplicationSpec, Flavor, Resource, RenderRequest
"""

from meshhub.core.models.application import (
    AllowedVersions,
    ApplicationSpec,
    ApplicationType,
    CompatibleFlavorMeshPair,
    Flavor,
    GithubRepositoryLocation,
    HelmArchiveLocation,
    InlineManifests,
    InstallationSteps,
    InstallSource,
    Layer,
    LayerOption,
    ManifestsArchiveLocation,
    MeshRequirement,
    MeshType,
    RequirementSet,
    ResourceDependency,
    SecretDependency,
    Step,
    TgzLocation,
    VersionedApplicationSpec,
)
from meshhub.core.models.manifest import Resource, dump_manifests, parse_manifests
from meshhub.core.models.parameter import (
    Parameter,
    ParameterType,
    ParameterValue,
    SecretRef,
    SecretValue,
)
from meshhub.core.models.request import RenderRequest, TargetRuntime

__all__ = [
    # application.py
    "AllowedVersions",
    "ApplicationSpec",
    "ApplicationType",
    "CompatibleFlavorMeshPair",
    "Flavor",
    "GithubRepositoryLocation",
    "HelmArchiveLocation",
    "InlineManifests",
    "InstallSource",
    "InstallationSteps",
    "Layer",
    "LayerOption",
    "ManifestsArchiveLocation",
    "MeshRequirement",
    "MeshType",
    # parameter.py
    "Parameter",
    "ParameterType",
    "ParameterValue",
    # request.py
    "RenderRequest",
    "RequirementSet",
    # manifest.py
    "Resource",
    "ResourceDependency",
    "SecretDependency",
    "SecretRef",
    "SecretValue",
    "Step",
    "TargetRuntime",
    "TgzLocation",
    "VersionedApplicationSpec",
    "dump_manifests",
    "parse_manifests",
]
