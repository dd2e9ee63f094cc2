"""
Local artifact fetcher — resolves install locations on the local disk.

Supports plain paths and ``file://`` URIs for archives, and a local
directory of GitHub checkouts laid out as ``<root>/<org>/<repo>``.
Remote downloads are left to a dedicated fetcher implementation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from meshhub.adapters.base import ArtifactFetcher, FetchError
from meshhub.core.models.application import (
    GithubRepositoryLocation,
    InstallSource,
    TgzLocation,
)

logger = logging.getLogger(__name__)


class LocalArtifactFetcher(ArtifactFetcher):
    """Fetcher for locations that already exist on this machine.

    Args:
        base_dir: Directory relative archive paths resolve against
            (typically the directory holding the spec file).
        github_root: Directory containing ``<org>/<repo>`` checkouts.
    """

    def __init__(self, base_dir: Path | None = None, github_root: Path | None = None):
        self._base_dir = base_dir or Path.cwd()
        self._github_root = github_root

    def fetch(self, source: InstallSource) -> Path:
        if isinstance(source, TgzLocation):
            path = self._local_path(source.uri)
        elif isinstance(source, GithubRepositoryLocation):
            path = self._github_path(source)
        else:
            raise FetchError(f"{type(source).__name__} has no fetchable location")

        if not path.exists():
            raise FetchError(f"{source.describe()} not found at {path}")
        logger.debug("Fetched %s → %s", source.describe(), path)
        return path

    def _local_path(self, uri: str) -> Path:
        parsed = urlparse(uri)
        if parsed.scheme in ("", "file"):
            raw = unquote(parsed.path) if parsed.scheme == "file" else uri
            path = Path(raw).expanduser()
            return path if path.is_absolute() else (self._base_dir / path)
        raise FetchError(f"Cannot fetch {uri}: only local paths and file:// URIs are supported")

    def _github_path(self, source: GithubRepositoryLocation) -> Path:
        if self._github_root is None:
            raise FetchError(
                f"Cannot fetch {source.describe()}: no local GitHub checkout root configured"
            )
        path = self._github_root / source.org / source.repo
        if source.directory:
            path = path / source.directory
        return path
