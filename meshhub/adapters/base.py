"""
Adapter base — the contracts between the render engine and the outside.

The engine never shells out, reads archives, or queries the cluster
itself. It talks to three collaborators through these interfaces:

    TemplatingEngine   install source + values → resources
    ClusterClient      secret lookups in a namespace
    ArtifactFetcher    install location → local path

To add a new backend:
    1. Subclass the matching ABC
    2. Implement its abstract methods
    3. Pass the instance to ``resolve_plan`` (or the use case)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from meshhub.core.models.application import InstallSource
from meshhub.core.models.manifest import Resource


class TemplatingError(Exception):
    """The templating engine could not render a source."""


class ClusterQueryError(Exception):
    """A cluster lookup failed for a reason other than "not found"."""


class FetchError(Exception):
    """An install location could not be made available locally."""


class TemplatingEngine(ABC):
    """Turns an install source plus a value map into resources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The engine identifier (e.g. 'helm', 'mock')."""

    @abstractmethod
    def render(
        self,
        source: InstallSource,
        values: dict[str, Any],
        *,
        release_name: str = "",
        namespace: str = "",
    ) -> list[Resource]:
        """Render ``source`` with ``values``.

        Returns resources in the order the engine emitted them.

        Raises:
            TemplatingError: On any rendering failure.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ClusterClient(ABC):
    """Read-only view of cluster state needed during a render."""

    @abstractmethod
    def get_secret(self, namespace: str, name: str) -> dict[str, str] | None:
        """Return the decoded data map of a Secret, or None if it does not exist.

        Raises:
            ClusterQueryError: If the cluster cannot be queried.
        """


class ArtifactFetcher(ABC):
    """Makes a remote install location available on the local filesystem."""

    @abstractmethod
    def fetch(self, source: InstallSource) -> Path:
        """Return a local path for ``source`` (chart dir, tgz, or manifest dir).

        Raises:
            FetchError: If the location cannot be fetched.
        """
