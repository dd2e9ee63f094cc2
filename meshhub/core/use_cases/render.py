"""
Render use case — from a spec file and CLI-style inputs to a plan.

Loads the application spec, builds the request, wires the adapters,
and runs the plan resolver. Errors come back on the result object
(structured, with their kind) instead of being raised, so every
entrypoint reports them the same way.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from meshhub.adapters.base import ClusterClient, TemplatingEngine
from meshhub.adapters.fetch import LocalArtifactFetcher
from meshhub.adapters.helm import HelmTemplateEngine
from meshhub.adapters.kubectl import KubectlClusterClient
from meshhub.adapters.mock import InMemoryClusterClient, MockTemplatingEngine
from meshhub.core.config.loader import ConfigError, load_application_spec
from meshhub.core.config.settings import RenderSettings, load_settings
from meshhub.core.models.application import ApplicationSpec, CompatibleFlavorMeshPair
from meshhub.core.models.request import RenderRequest, TargetRuntime
from meshhub.core.services.render.errors import RenderError, VersionNotFound
from meshhub.core.services.render.resolver.compatibility import list_compatible_flavors
from meshhub.core.services.render.resolver.plan_resolution import (
    RenderPlan,
    render_values_preview,
    resolve_plan,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Result of rendering one application version."""

    plan: RenderPlan | None = None
    spec_path: Path | None = None
    error: dict | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.plan is not None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result: dict = {"spec_path": str(self.spec_path) if self.spec_path else None}
        if self.plan:
            result["plan"] = self.plan.to_dict()
        return result


@dataclass
class FlavorsResult:
    """Compatible (flavor, mesh) pairs for one version."""

    application: str = ""
    version: str = ""
    pairs: list[CompatibleFlavorMeshPair] = field(default_factory=list)
    error: dict | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "application": self.application,
            "version": self.version,
            "pairs": [p.model_dump(mode="json") for p in self.pairs],
        }


@dataclass
class SpecCheckResult:
    """Outcome of loading and validating a spec file."""

    spec: ApplicationSpec | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.spec is not None and not self.errors

    def to_dict(self) -> dict:
        result: dict = {"valid": self.valid, "errors": self.errors, "warnings": self.warnings}
        if self.spec:
            result["application"] = self.spec.name
            result["versions"] = self.spec.version_names
        return result


def _config_error(e: ConfigError) -> dict:
    return {"kind": "ConfigError", "message": str(e)}


def _invalid_request(e: ValidationError) -> dict:
    return {"kind": "InvalidRequest", "message": str(e)}


def _build_adapters(
    spec_path: Path,
    settings: RenderSettings,
    *,
    mock: bool,
    github_root: Path | None,
) -> tuple[TemplatingEngine, ClusterClient]:
    if mock:
        return MockTemplatingEngine(), InMemoryClusterClient()
    fetcher = LocalArtifactFetcher(base_dir=spec_path.parent, github_root=github_root)
    engine = HelmTemplateEngine(
        fetcher, helm_bin=settings.helm_bin, timeout=settings.helm_timeout,
    )
    return engine, KubectlClusterClient(timeout=settings.kubectl_timeout)


def render_application(
    spec_path: Path,
    version: str,
    *,
    flavor: str | None = None,
    layers: dict[str, str | None] | None = None,
    params: dict[str, str] | None = None,
    values_file: Path | None = None,
    namespace: str = "default",
    runtime: TargetRuntime | None = None,
    mock: bool = False,
    engine: TemplatingEngine | None = None,
    cluster: ClusterClient | None = None,
    github_root: Path | None = None,
    check_dependencies: bool = True,
    cancel: threading.Event | None = None,
) -> RenderResult:
    """Render one version of the application described by ``spec_path``.

    Args:
        spec_path: Path to the application spec YAML.
        version: Version string to render.
        flavor: Optional flavor name.
        layers: Layer id → option id (None disables the layer).
        params: Parameter overrides.
        values_file: Optional caller values YAML.
        namespace: Install namespace.
        runtime: Target mesh, used for flavor compatibility.
        mock: Use the mock engine and an empty in-memory cluster.
        engine: Explicit templating engine (overrides ``mock``).
        cluster: Explicit cluster client (overrides ``mock``).
        github_root: Local directory of ``<org>/<repo>`` checkouts.
        check_dependencies: Verify layer resource dependencies.
        cancel: Event that aborts rendering before the next step.

    Returns:
        RenderResult with the plan or a structured error.
    """
    result = RenderResult(spec_path=spec_path)

    try:
        settings = load_settings()
        spec = load_application_spec(spec_path)
        user_values = ""
        if values_file is not None:
            try:
                user_values = values_file.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigError(f"Cannot read values file {values_file}: {e}") from e
    except ConfigError as e:
        result.error = _config_error(e)
        return result

    try:
        request = RenderRequest(
            application_name=spec.name,
            version=version,
            flavor=flavor,
            layers=layers or {},
            params=params or {},
            user_values=user_values,
            install_namespace=namespace,
            target_runtime=runtime,
        )
    except ValidationError as e:
        result.error = _invalid_request(e)
        return result

    default_engine, default_cluster = _build_adapters(
        spec_path, settings, mock=mock, github_root=github_root,
    )

    try:
        result.plan = resolve_plan(
            spec,
            request,
            engine or default_engine,
            cluster=cluster or default_cluster,
            settings=settings,
            cancel=cancel,
            check_dependencies=check_dependencies,
        )
    except RenderError as e:
        logger.info("Render of %s %s failed: %s", spec.name, version, e.kind)
        result.error = e.to_dict()

    return result


def preview_values(
    spec_path: Path,
    version: str,
    *,
    flavor: str | None = None,
    layers: dict[str, str | None] | None = None,
    params: dict[str, str] | None = None,
) -> tuple[str | None, dict | None]:
    """Composed values YAML (secrets excluded), or a structured error."""
    try:
        spec = load_application_spec(spec_path)
        request = RenderRequest(
            application_name=spec.name,
            version=version,
            flavor=flavor,
            layers=layers or {},
            params=params or {},
        )
        return render_values_preview(spec, request), None
    except ConfigError as e:
        return None, _config_error(e)
    except ValidationError as e:
        return None, _invalid_request(e)
    except RenderError as e:
        return None, e.to_dict()


def list_flavors(
    spec_path: Path,
    version: str,
    runtimes: list[TargetRuntime],
) -> FlavorsResult:
    """Every flavor of ``version`` that is compatible with one of ``runtimes``."""
    result = FlavorsResult(version=version)
    try:
        spec = load_application_spec(spec_path)
    except ConfigError as e:
        result.error = _config_error(e)
        return result

    result.application = spec.name
    versioned = spec.get_version(version)
    if versioned is None:
        result.error = VersionNotFound(
            f"Application '{spec.name}' has no version '{version}'",
            application=spec.name,
            version=version,
            available=spec.version_names,
        ).to_dict()
        return result

    result.pairs = list_compatible_flavors(versioned, runtimes)
    return result


def check_spec(spec_path: Path) -> SpecCheckResult:
    """Load a spec file and report problems a render would hit later."""
    result = SpecCheckResult()
    try:
        spec = load_application_spec(spec_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.spec = spec
    for v in spec.versions:
        if v.single_source is None and v.installation_steps is None:
            result.warnings.append(f"Version {v.version} declares no install source")
        elif v.installation_steps and not v.installation_steps.steps:
            result.warnings.append(f"Version {v.version} has an empty installation step list")
        for f in v.flavors:
            for layer in f.customization_layers:
                if not layer.options:
                    result.warnings.append(
                        f"Version {v.version} flavor '{f.name}' layer '{layer.id}' has no options"
                    )
    return result
