"""
Tests for step planning, orchestration, and post-processing.
"""

import threading

import pytest

from meshhub.adapters.mock import MockTemplatingEngine
from meshhub.core.models.application import InlineManifests, VersionedApplicationSpec
from meshhub.core.models.manifest import Resource
from meshhub.core.services.render.errors import (
    NoInstallSourceDefined,
    RenderCancelled,
    TemplatingFailed,
)
from meshhub.core.services.render.execution.postprocess import (
    filter_required_labels,
    postprocess,
    rewrite_namespaces,
)
from meshhub.core.services.render.execution.steps import (
    IMPLICIT_STEP_NAME,
    RenderState,
    StepOrchestrator,
    plan_steps,
)

LABEL = "meshhub.io/install-step"


def _cm(name: str, namespace: str = "", **labels: str) -> str:
    meta = f"  name: {name}\n"
    if namespace:
        meta += f"  namespace: {namespace}\n"
    if labels:
        meta += "  labels:\n" + "".join(f"    {k}: {v}\n" for k, v in labels.items())
    return f"apiVersion: v1\nkind: ConfigMap\nmetadata:\n{meta}"


def _three_steps() -> VersionedApplicationSpec:
    return VersionedApplicationSpec.model_validate({
        "version": "1.0.0",
        "installation_steps": {"steps": [
            {"name": "pre-install", "manifests_archive": {"uri": "pre.tgz"}},
            {"name": "core", "helm_archive": {"uri": "core.tgz"}},
            {"name": "post-install", "manifests_archive": {"uri": "post.tgz"}},
        ]},
    })


# ═══════════════════════════════════════════════════════════════════
#  1. PLANNING
# ═══════════════════════════════════════════════════════════════════


class TestPlanSteps:
    def test_single_source_is_implicit_step(self):
        version = VersionedApplicationSpec(version="1.0.0", helm_archive={"uri": "app.tgz"})
        steps = plan_steps(version)
        assert len(steps) == 1
        assert steps[0].name == IMPLICIT_STEP_NAME
        assert steps[0].implicit

    def test_declared_order(self):
        assert [s.name for s in plan_steps(_three_steps())] == ["pre-install", "core", "post-install"]

    def test_no_location(self):
        with pytest.raises(NoInstallSourceDefined):
            plan_steps(VersionedApplicationSpec(version="1.0.0"))

    def test_empty_step_list(self):
        version = VersionedApplicationSpec(version="1.0.0", installation_steps={"steps": []})
        with pytest.raises(NoInstallSourceDefined):
            plan_steps(version)


# ═══════════════════════════════════════════════════════════════════
#  2. ORCHESTRATION
# ═══════════════════════════════════════════════════════════════════


class TestStepOrchestrator:
    def _engine(self) -> MockTemplatingEngine:
        engine = MockTemplatingEngine()
        engine.set_output("pre.tgz", _cm("crds"))
        engine.set_output("core.tgz", _cm("gloo") + "---\n" + _cm("gateway"))
        engine.set_output("post.tgz", _cm("smoke-test"))
        return engine

    def test_steps_concatenated_and_labeled(self):
        engine = self._engine()
        orch = StepOrchestrator(engine, step_label_key=LABEL)
        output = orch.run(plan_steps(_three_steps()), {})

        assert [r.name for r in output.resources] == ["crds", "gloo", "gateway", "smoke-test"]
        assert [r.labels[LABEL] for r in output.resources] == [
            "pre-install", "core", "core", "post-install",
        ]
        assert output.step_resources == {"pre-install": 1, "core": 2, "post-install": 1}
        assert orch.state == RenderState.DONE
        assert orch.current_step is None

    def test_engine_called_once_per_step_in_order(self):
        engine = self._engine()
        StepOrchestrator(engine, step_label_key=LABEL, release_name="gloo", namespace="ns").run(
            plan_steps(_three_steps()), {"a": 1},
        )
        assert [c.source for c in engine.call_log] == ["pre.tgz", "core.tgz", "post.tgz"]
        assert all(c.values == {"a": 1} for c in engine.call_log)
        assert {(c.release_name, c.namespace) for c in engine.call_log} == {("gloo", "ns")}

    def test_fragments_appended_unlabeled(self):
        engine = self._engine()
        fragment = InlineManifests(content=_cm("extra"), origin="layer mtls:strict")
        output = StepOrchestrator(engine, step_label_key=LABEL).run(
            plan_steps(_three_steps()), {}, [fragment],
        )
        assert output.resources[-1].name == "extra"
        assert LABEL not in output.resources[-1].labels
        assert output.layer_resources == 1

    def test_step_failure_is_fatal(self):
        engine = self._engine()
        engine.set_failure("core.tgz", "chart not found")
        orch = StepOrchestrator(engine, step_label_key=LABEL)
        with pytest.raises(TemplatingFailed) as exc:
            orch.run(plan_steps(_three_steps()), {})
        assert exc.value.details["step"] == "core"
        assert "chart not found" in exc.value.message
        assert orch.state == RenderState.FAILED
        assert engine.call_count == 2  # post-install never attempted

    def test_cancel_before_first_step(self):
        engine = self._engine()
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RenderCancelled):
            StepOrchestrator(engine, step_label_key=LABEL, cancel=cancel).run(
                plan_steps(_three_steps()), {},
            )
        assert engine.call_count == 0

    def test_cancel_between_steps(self):
        cancel = threading.Event()

        class CancellingEngine(MockTemplatingEngine):
            def render(self, source, values, **kwargs):
                resources = super().render(source, values, **kwargs)
                cancel.set()
                return resources

        engine = CancellingEngine()
        with pytest.raises(RenderCancelled) as exc:
            StepOrchestrator(engine, step_label_key=LABEL, cancel=cancel).run(
                plan_steps(_three_steps()), {},
            )
        assert exc.value.details["step"] == "core"
        assert engine.call_count == 1


# ═══════════════════════════════════════════════════════════════════
#  3. POST-PROCESSING
# ═══════════════════════════════════════════════════════════════════


class TestPostprocess:
    def _resources(self) -> list[Resource]:
        return [
            Resource(kind="Deployment", name="kiali", namespace="a", labels={"app": "kiali"}),
            Resource(kind="Deployment", name="grafana", namespace="b", labels={"app": "grafana"}),
            Resource(kind="ClusterRole", name="kiali", labels={"app": "kiali", "tier": "x"}),
        ]

    def test_filter_keeps_matching_in_order(self):
        kept = filter_required_labels(self._resources(), {"app": "kiali"})
        assert [r.kind for r in kept] == ["Deployment", "ClusterRole"]

    def test_filter_needs_every_pair(self):
        kept = filter_required_labels(self._resources(), {"app": "kiali", "tier": "x"})
        assert [r.kind for r in kept] == ["ClusterRole"]

    def test_empty_filter_keeps_all(self):
        assert len(filter_required_labels(self._resources(), {})) == 3

    def test_rewrite_all_namespaces(self):
        rewritten = rewrite_namespaces(self._resources(), "prod")
        assert {r.namespace for r in rewritten} == {"prod"}

    def test_respect_manifest_namespaces(self):
        version = VersionedApplicationSpec(version="1", respect_manifest_namespaces=True)
        result = postprocess(self._resources(), version, "prod")
        assert [r.namespace for r in result] == ["a", "b", ""]

    def test_filter_then_rewrite(self):
        version = VersionedApplicationSpec(version="1", required_labels={"app": "kiali"})
        result = postprocess(self._resources(), version, "prod")
        assert [(r.name, r.namespace) for r in result] == [("kiali", "prod"), ("kiali", "prod")]
