"""
Helm templating engine — renders charts with ``helm template``.

Charts (directories or .tgz) and layer fragments go through
``helm template`` with the composed values written to a temporary
values file. Manifest archives are read as-is: their YAML documents
are parsed in archive member order, without value substitution.
"""

from __future__ import annotations

import logging
import subprocess
import tarfile
import tempfile
from pathlib import Path
from typing import Any

import yaml

from meshhub.adapters.base import ArtifactFetcher, FetchError, TemplatingEngine, TemplatingError
from meshhub.adapters.fetch import LocalArtifactFetcher
from meshhub.core.models.application import (
    GithubRepositoryLocation,
    HelmArchiveLocation,
    InlineManifests,
    InstallSource,
    ManifestsArchiveLocation,
)
from meshhub.core.models.manifest import Resource, parse_manifests

logger = logging.getLogger(__name__)

_MANIFEST_SUFFIXES = (".yaml", ".yml")

# Chart wrapper used to template inline fragments
_FRAGMENT_CHART = "apiVersion: v2\nname: layer-fragment\nversion: 0.0.0\n"


class HelmTemplateEngine(TemplatingEngine):
    """Templating engine backed by the helm CLI."""

    def __init__(
        self,
        fetcher: ArtifactFetcher | None = None,
        *,
        helm_bin: str = "helm",
        timeout: int = 60,
    ):
        self._fetcher = fetcher or LocalArtifactFetcher()
        self._helm_bin = helm_bin
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "helm"

    def render(
        self,
        source: InstallSource,
        values: dict[str, Any],
        *,
        release_name: str = "",
        namespace: str = "",
    ) -> list[Resource]:
        release = release_name or "release"
        if isinstance(source, ManifestsArchiveLocation):
            return self._read_manifests(self._fetch(source))
        elif isinstance(source, (HelmArchiveLocation, GithubRepositoryLocation)):
            return self._helm_template(self._fetch(source), values, release, namespace)
        elif isinstance(source, InlineManifests):
            return self._render_fragment(source, values, release, namespace)
        raise TypeError(f"Unhandled install source: {type(source).__name__}")

    # ── Sources ─────────────────────────────────────────────────

    def _fetch(self, source: InstallSource) -> Path:
        try:
            return self._fetcher.fetch(source)
        except FetchError as e:
            raise TemplatingError(str(e)) from e

    def _render_fragment(
        self,
        fragment: InlineManifests,
        values: dict[str, Any],
        release: str,
        namespace: str,
    ) -> list[Resource]:
        with tempfile.TemporaryDirectory(prefix="meshhub-fragment-") as tmpdir:
            chart = Path(tmpdir) / "fragment"
            (chart / "templates").mkdir(parents=True)
            (chart / "Chart.yaml").write_text(_FRAGMENT_CHART, encoding="utf-8")
            (chart / "templates" / "fragment.yaml").write_text(fragment.content, encoding="utf-8")
            return self._helm_template(chart, values, release, namespace)

    def _read_manifests(self, path: Path) -> list[Resource]:
        """Parse every YAML file of a manifests archive (or directory)."""
        texts: list[tuple[str, str]] = []
        try:
            if path.is_dir():
                for f in sorted(path.rglob("*")):
                    if f.is_file() and f.suffix in _MANIFEST_SUFFIXES:
                        texts.append((str(f), f.read_text(encoding="utf-8")))
            else:
                with tarfile.open(path, "r:*") as tar:
                    for member in sorted(tar.getmembers(), key=lambda m: m.name):
                        if not member.isfile() or not member.name.endswith(_MANIFEST_SUFFIXES):
                            continue
                        extracted = tar.extractfile(member)
                        if extracted is None:
                            continue
                        texts.append((member.name, extracted.read().decode("utf-8")))
        except (OSError, tarfile.TarError, UnicodeDecodeError) as e:
            raise TemplatingError(f"Cannot read manifests from {path}: {e}") from e

        resources: list[Resource] = []
        for name, text in texts:
            try:
                resources.extend(parse_manifests(text))
            except (yaml.YAMLError, ValueError) as e:
                raise TemplatingError(f"Invalid manifest in {name}: {e}") from e
        return resources

    # ── helm CLI ────────────────────────────────────────────────

    def _helm_template(
        self,
        chart: Path,
        values: dict[str, Any],
        release: str,
        namespace: str,
    ) -> list[Resource]:
        with tempfile.TemporaryDirectory(prefix="meshhub-values-") as tmpdir:
            values_file = Path(tmpdir) / "values.yaml"
            values_file.write_text(
                yaml.safe_dump(values, default_flow_style=False), encoding="utf-8",
            )

            cmd = [self._helm_bin, "template", release, str(chart), "--values", str(values_file)]
            if namespace:
                cmd.extend(["--namespace", namespace])

            logger.debug("Running %s", " ".join(cmd[:4]))
            try:
                r = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
            except FileNotFoundError as e:
                raise TemplatingError(f"helm CLI not found ({self._helm_bin})") from e
            except subprocess.TimeoutExpired as e:
                raise TemplatingError(f"helm template timed out after {self._timeout}s") from e

        if r.returncode != 0:
            raise TemplatingError(r.stderr.strip() or "helm template failed")

        try:
            return parse_manifests(r.stdout)
        except (yaml.YAMLError, ValueError) as e:
            raise TemplatingError(f"helm produced an invalid manifest: {e}") from e
