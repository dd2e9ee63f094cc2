"""
L4 Execution — Step orchestration.

Renders a version's install steps strictly in declaration order,
labels each step's resources with the step name, and appends the
resources contributed by layer options last (unlabeled).

State machine per render call:

    NOT_STARTED → (RENDERING → LABELING)* → LAYERS_APPLIED → DONE
                         └──────────── any failure ──────────→ FAILED

A failure in any step is fatal: no partial output is returned.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from meshhub.adapters.base import TemplatingEngine, TemplatingError
from meshhub.core.models.application import (
    InlineManifests,
    InstallSource,
    VersionedApplicationSpec,
)
from meshhub.core.models.manifest import Resource
from meshhub.core.services.render.errors import (
    NoInstallSourceDefined,
    RenderCancelled,
    TemplatingFailed,
)

logger = logging.getLogger(__name__)

# Name given to the single step of a version without installation_steps
IMPLICIT_STEP_NAME = "install"


class RenderState(str, Enum):
    NOT_STARTED = "not_started"
    RENDERING = "rendering"
    LABELING = "labeling"
    LAYERS_APPLIED = "layers_applied"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PlannedStep:
    """One step to render: its name and install source."""

    name: str
    source: InstallSource
    implicit: bool = False


@dataclass
class StepOutput:
    """Resources produced by the orchestrator, in final order."""

    resources: list[Resource] = field(default_factory=list)
    step_resources: dict[str, int] = field(default_factory=dict)
    layer_resources: int = 0


def plan_steps(version: VersionedApplicationSpec) -> list[PlannedStep]:
    """The ordered steps of a version.

    A single-source version becomes one implicit step.

    Raises:
        NoInstallSourceDefined: If the version has no install location,
            or an empty installation_steps list.
    """
    if version.installation_steps is not None:
        steps = [
            PlannedStep(name=s.name, source=s.install_source)
            for s in version.installation_steps.steps
        ]
        if steps:
            return steps
    else:
        source = version.single_source
        if source is not None:
            return [PlannedStep(name=IMPLICIT_STEP_NAME, source=source, implicit=True)]

    raise NoInstallSourceDefined(
        f"Version {version.version} defines no install location",
        version=version.version,
    )


class StepOrchestrator:
    """Drives the templating engine over a version's steps.

    One orchestrator per render call; it holds only that call's state.
    """

    def __init__(
        self,
        engine: TemplatingEngine,
        *,
        step_label_key: str,
        release_name: str = "",
        namespace: str = "",
        cancel: threading.Event | None = None,
    ):
        self._engine = engine
        self._step_label_key = step_label_key
        self._release_name = release_name
        self._namespace = namespace
        self._cancel = cancel
        self._state = RenderState.NOT_STARTED
        self._current_step: str | None = None

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def current_step(self) -> str | None:
        return self._current_step

    def run(
        self,
        steps: list[PlannedStep],
        values: dict[str, Any],
        fragments: list[InlineManifests] | None = None,
    ) -> StepOutput:
        """Render every step, then every layer fragment.

        Raises:
            TemplatingFailed: A step or fragment failed to render.
            RenderCancelled: The cancel event was set before a step started.
        """
        output = StepOutput()
        try:
            for step in steps:
                self._check_cancelled(step.name)
                self._current_step = step.name
                rendered = self._render(step.name, step.source, values)

                self._state = RenderState.LABELING
                labels = {self._step_label_key: step.name}
                output.resources.extend(r.with_labels(labels) for r in rendered)
                output.step_resources[step.name] = len(rendered)
                logger.info("✓ step %s → %d resources", step.name, len(rendered))

            for fragment in fragments or []:
                self._check_cancelled(fragment.describe())
                self._current_step = fragment.describe()
                rendered = self._render(fragment.describe(), fragment, values)
                output.resources.extend(rendered)
                output.layer_resources += len(rendered)
                logger.info("✓ %s → %d resources", fragment.describe(), len(rendered))

            self._state = RenderState.LAYERS_APPLIED
        except Exception:
            self._state = RenderState.FAILED
            raise

        self._current_step = None
        self._state = RenderState.DONE
        return output

    def _check_cancelled(self, next_step: str) -> None:
        if self._cancel is not None and self._cancel.is_set():
            logger.info("Render cancelled before step %s", next_step)
            raise RenderCancelled(
                f"Render cancelled before step '{next_step}'",
                step=next_step,
            )

    def _render(
        self,
        step_name: str,
        source: InstallSource,
        values: dict[str, Any],
    ) -> list[Resource]:
        self._state = RenderState.RENDERING
        logger.debug("Rendering %s from %s", step_name, source.describe())
        try:
            return self._engine.render(
                source,
                values,
                release_name=self._release_name,
                namespace=self._namespace,
            )
        except TemplatingError as e:
            logger.info("✗ step %s failed: %s", step_name, e)
            raise TemplatingFailed(
                f"Rendering step '{step_name}' failed: {e}",
                step=step_name,
                source=source.describe(),
                error=str(e),
            ) from e
