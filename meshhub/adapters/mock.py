"""
Mock adapters — test doubles for templating and cluster access.

Used in mock mode to render plans without helm or a cluster.
``MockTemplatingEngine`` substitutes ``{{ .Values.a.b }}`` references
in configured (or inline) manifest text, which is enough to observe
how values flow into each step.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from meshhub.adapters.base import (
    ClusterClient,
    ClusterQueryError,
    TemplatingEngine,
    TemplatingError,
)
from meshhub.core.models.application import InlineManifests, InstallSource
from meshhub.core.models.manifest import Resource, parse_manifests

_VALUE_REF = re.compile(r"\{\{-?\s*\.Values\.([A-Za-z0-9_.\-]+)\s*-?\}\}")


@dataclass
class RenderCall:
    """One recorded call to ``MockTemplatingEngine.render``."""

    source: str
    values: dict[str, Any] = field(default_factory=dict)
    release_name: str = ""
    namespace: str = ""


def lookup_value(values: dict[str, Any], path: str) -> Any:
    """Walk a dotted path through nested maps; None when absent."""
    current: Any = values
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def substitute_values(text: str, values: dict[str, Any]) -> str:
    """Replace ``{{ .Values.x }}`` references with their values.

    Missing values render as an empty string. Booleans render the way
    Go templates print them (true/false).
    """

    def _replace(match: re.Match[str]) -> str:
        value = lookup_value(values, match.group(1))
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    return _VALUE_REF.sub(_replace, text)


class MockTemplatingEngine(TemplatingEngine):
    """Templating engine that never shells out.

    By default, inline manifests are templated and every other source
    renders to nothing. Outputs and failures can be configured per
    source, keyed by ``source.describe()``.
    """

    def __init__(self, engine_name: str = "mock"):
        self._name = engine_name
        self._outputs: dict[str, str] = {}
        self._failures: dict[str, str] = {}
        self._call_log: list[RenderCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[RenderCall]:
        """All render calls this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_output(self, source_key: str, manifests: str) -> None:
        """Set the manifest text (a template) rendered for a source."""
        self._outputs[source_key] = manifests

    def set_failure(self, source_key: str, error: str = "Mock failure") -> None:
        """Configure a specific source to fail."""
        self._failures[source_key] = error

    def render(
        self,
        source: InstallSource,
        values: dict[str, Any],
        *,
        release_name: str = "",
        namespace: str = "",
    ) -> list[Resource]:
        key = source.describe()
        self._call_log.append(RenderCall(
            source=key,
            values=copy.deepcopy(values),
            release_name=release_name,
            namespace=namespace,
        ))

        if key in self._failures:
            raise TemplatingError(self._failures[key])

        if key in self._outputs:
            template = self._outputs[key]
        elif isinstance(source, InlineManifests):
            template = source.content
        else:
            return []

        try:
            return parse_manifests(substitute_values(template, values))
        except (yaml.YAMLError, ValueError) as e:
            raise TemplatingError(f"Invalid manifest for {key}: {e}") from e

    def reset(self) -> None:
        """Clear call log, outputs, and failures."""
        self._call_log.clear()
        self._outputs.clear()
        self._failures.clear()


class InMemoryClusterClient(ClusterClient):
    """Cluster client backed by a dict of secrets.

    Lookups are recorded as ``(namespace, name)`` pairs. Setting
    ``unavailable`` makes every lookup raise ClusterQueryError.
    """

    def __init__(self, *, unavailable: bool = False):
        self._secrets: dict[tuple[str, str], dict[str, str]] = {}
        self._lookups: list[tuple[str, str]] = []
        self.unavailable = unavailable

    @property
    def lookups(self) -> list[tuple[str, str]]:
        return self._lookups

    def add_secret(self, namespace: str, name: str, data: dict[str, str]) -> None:
        self._secrets[(namespace, name)] = dict(data)

    def get_secret(self, namespace: str, name: str) -> dict[str, str] | None:
        self._lookups.append((namespace, name))
        if self.unavailable:
            raise ClusterQueryError("cluster unreachable")
        data = self._secrets.get((namespace, name))
        return dict(data) if data is not None else None
