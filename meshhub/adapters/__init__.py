"""Adapters — bindings to helm, kubectl, and artifact storage.

Public re-exports for convenient access.
"""

from meshhub.adapters.base import (
    ArtifactFetcher,
    ClusterClient,
    ClusterQueryError,
    FetchError,
    TemplatingEngine,
    TemplatingError,
)
from meshhub.adapters.fetch import LocalArtifactFetcher
from meshhub.adapters.helm import HelmTemplateEngine
from meshhub.adapters.kubectl import KubectlClusterClient
from meshhub.adapters.mock import InMemoryClusterClient, MockTemplatingEngine

__all__ = [
    "ArtifactFetcher",
    "ClusterClient",
    "ClusterQueryError",
    "FetchError",
    "HelmTemplateEngine",
    "InMemoryClusterClient",
    "KubectlClusterClient",
    "LocalArtifactFetcher",
    "MockTemplatingEngine",
    "TemplatingEngine",
    "TemplatingError",
]
