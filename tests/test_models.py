"""
Tests for domain models — load-time invariants and the Resource model.
"""

import pytest
from pydantic import ValidationError

from meshhub.core.models.application import (
    ApplicationSpec,
    Flavor,
    InstallationSteps,
    Layer,
    LayerOption,
    ResourceDependency,
    Step,
    VersionedApplicationSpec,
)
from meshhub.core.models.manifest import Resource, dump_manifests, parse_manifests
from meshhub.core.models.parameter import (
    Parameter,
    ParameterType,
    ParameterValue,
    SecretValue,
)
from meshhub.core.models.request import RenderRequest, TargetRuntime


# ═══════════════════════════════════════════════════════════════════
#  1. ONEOF VARIANTS
# ═══════════════════════════════════════════════════════════════════


class TestParameterValue:
    """Exactly one field of a ParameterValue may be set."""

    def test_single_field(self):
        v = ParameterValue(int_value=3)
        assert v.kind() == "int_value"
        assert v.value_type == ParameterType.INT

    def test_false_counts_as_set(self):
        v = ParameterValue(boolean_value=False)
        assert v.kind() == "boolean_value"

    def test_none_set_rejected(self):
        with pytest.raises(ValidationError):
            ParameterValue()

    def test_two_set_rejected(self):
        with pytest.raises(ValidationError):
            ParameterValue(int_value=1, string_value="1")


class TestSecretValue:
    def test_kinds(self):
        assert SecretValue(plain_text="x").kind() == "plain_text"
        assert SecretValue(file_path="/tmp/x").kind() == "file_path"
        assert SecretValue(secret_ref={"name": "db", "key": "pw"}).kind() == "secret_ref"

    def test_two_sources_rejected(self):
        with pytest.raises(ValidationError):
            SecretValue(plain_text="x", file_path="/tmp/x")


class TestParameter:
    def test_default_must_match_type(self):
        with pytest.raises(ValidationError, match="declared BOOL"):
            Parameter(name="p", type=ParameterType.BOOL, default={"string_value": "yes"})

    def test_matching_default(self):
        p = Parameter(name="p", type=ParameterType.FLOAT, default={"float_value": 1.5})
        assert p.has_default

    def test_secret_default(self):
        p = Parameter(
            name="db.password",
            type=ParameterType.SECRET,
            default={"secret_value": {"secret_ref": {"name": "db", "key": "password"}}},
        )
        assert p.default is not None
        assert p.default.secret_value is not None


class TestInstallSources:
    """Steps need exactly one source; versions at most one location."""

    def test_step_without_source(self):
        with pytest.raises(ValidationError, match="exactly one"):
            Step(name="core")

    def test_step_with_two_sources(self):
        with pytest.raises(ValidationError):
            Step(
                name="core",
                helm_archive={"uri": "a.tgz"},
                manifests_archive={"uri": "b.tgz"},
            )

    def test_step_source(self):
        step = Step(name="crds", manifests_archive={"uri": "crds.tgz"})
        assert step.install_source.describe() == "crds.tgz"

    def test_version_without_location_loads(self):
        v = VersionedApplicationSpec(version="1.0.0")
        assert v.single_source is None
        assert v.installation_steps is None

    def test_version_with_two_locations(self):
        with pytest.raises(ValidationError, match="more than one install location"):
            VersionedApplicationSpec(
                version="1.0.0",
                helm_archive={"uri": "a.tgz"},
                installation_steps={"steps": [{"name": "s", "helm_archive": {"uri": "b.tgz"}}]},
            )

    def test_github_describe(self):
        v = VersionedApplicationSpec(
            version="1.0.0",
            github_chart={"org": "solo-io", "repo": "gloo", "directory": "install/helm"},
        )
        assert v.single_source is not None
        assert v.single_source.describe() == "github.com/solo-io/gloo@master/install/helm"


# ═══════════════════════════════════════════════════════════════════
#  2. UNIQUENESS INVARIANTS
# ═══════════════════════════════════════════════════════════════════


class TestUniqueness:
    def test_duplicate_versions(self):
        with pytest.raises(ValidationError, match="duplicate version"):
            ApplicationSpec(name="app", versions=[{"version": "1.0"}, {"version": "1.0"}])

    def test_duplicate_step_names(self):
        with pytest.raises(ValidationError, match="duplicate installation step"):
            InstallationSteps(steps=[
                {"name": "core", "helm_archive": {"uri": "a.tgz"}},
                {"name": "core", "helm_archive": {"uri": "b.tgz"}},
            ])

    def test_duplicate_flavors(self):
        with pytest.raises(ValidationError, match="duplicate flavor"):
            VersionedApplicationSpec(version="1.0", flavors=[{"name": "a"}, {"name": "a"}])

    def test_duplicate_layers(self):
        with pytest.raises(ValidationError, match="duplicate layer"):
            Flavor(name="f", customization_layers=[{"id": "mtls"}, {"id": "mtls"}])

    def test_duplicate_options(self):
        with pytest.raises(ValidationError, match="duplicate option"):
            Layer(id="mtls", options=[{"id": "strict"}, {"id": "strict"}])

    def test_duplicate_parameters_in_scope(self):
        with pytest.raises(ValidationError, match="duplicate parameter"):
            LayerOption(id="o", parameters=[{"name": "p"}, {"name": "p"}])

    def test_same_parameter_in_different_scopes(self):
        f = Flavor(
            name="f",
            parameters=[{"name": "p"}],
            customization_layers=[{"id": "l", "options": [{"id": "o", "parameters": [{"name": "p"}]}]}],
        )
        assert f.get_layer("l") is not None


class TestValuesYaml:
    def test_list_rejected(self):
        with pytest.raises(ValidationError, match="mapping"):
            LayerOption(id="o", helm_values="- a\n- b\n")

    def test_broken_yaml_rejected(self):
        with pytest.raises(ValidationError, match="invalid values YAML"):
            VersionedApplicationSpec(version="1", values_yaml="a: [1, 2")

    def test_request_user_values_checked(self):
        with pytest.raises(ValidationError):
            RenderRequest(application_name="a", version="1", user_values="just a string")


class TestResourceDependency:
    def test_requires_variant(self):
        with pytest.raises(ValidationError):
            ResourceDependency()

    def test_describe(self):
        dep = ResourceDependency(secret_dependency={"name": "certs", "keys": ["tls.crt"]})
        assert dep.describe() == "Secret/certs"


# ═══════════════════════════════════════════════════════════════════
#  3. RESOURCES
# ═══════════════════════════════════════════════════════════════════


class TestResource:
    MANIFEST = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": "settings",
            "namespace": "gloo-system",
            "labels": {"app": "gloo"},
            "annotations": {"note": "x"},
        },
        "data": {"k": "v"},
    }

    def test_from_manifest_lifts_metadata(self):
        r = Resource.from_manifest(self.MANIFEST)
        assert r.kind == "ConfigMap"
        assert r.name == "settings"
        assert r.namespace == "gloo-system"
        assert r.labels == {"app": "gloo"}
        assert r.body["metadata"] == {"annotations": {"note": "x"}}
        assert r.resource_id == "ConfigMap/gloo-system/settings"

    def test_to_manifest_restores_document(self):
        assert Resource.from_manifest(self.MANIFEST).to_manifest() == self.MANIFEST

    def test_input_not_mutated(self):
        doc = {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "x"}}
        Resource.from_manifest(doc)
        assert doc["metadata"] == {"name": "x"}

    def test_with_labels_is_copy(self):
        r = Resource.from_manifest(self.MANIFEST)
        labeled = r.with_labels({"step": "core"})
        assert labeled.labels == {"app": "gloo", "step": "core"}
        assert r.labels == {"app": "gloo"}

    def test_with_namespace_is_copy(self):
        r = Resource.from_manifest(self.MANIFEST)
        moved = r.with_namespace("prod")
        assert moved.namespace == "prod"
        assert r.namespace == "gloo-system"

    def test_has_labels(self):
        r = Resource.from_manifest(self.MANIFEST)
        assert r.has_labels({})
        assert r.has_labels({"app": "gloo"})
        assert not r.has_labels({"app": "other"})

    def test_labels_must_be_mapping(self):
        doc = {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "x", "labels": ["a", "b"]}}
        with pytest.raises(ValueError, match="ConfigMap/x: metadata.labels must be a mapping"):
            Resource.from_manifest(doc)

    def test_metadata_must_be_mapping(self):
        with pytest.raises(ValueError, match="metadata must be a mapping"):
            Resource.from_manifest({"kind": "ConfigMap", "metadata": "settings"})


class TestParseManifests:
    def test_skips_empty_and_kindless_documents(self):
        text = "---\n# only a comment\n---\nfoo: bar\n---\napiVersion: v1\nkind: Service\nmetadata:\n  name: s\n"
        resources = parse_manifests(text)
        assert [r.kind for r in resources] == ["Service"]

    def test_flattens_lists(self):
        text = (
            "apiVersion: v1\nkind: List\nitems:\n"
            "  - {apiVersion: v1, kind: ConfigMap, metadata: {name: a}}\n"
            "  - {apiVersion: v1, kind: Secret, metadata: {name: b}}\n"
        )
        assert [r.name for r in parse_manifests(text)] == ["a", "b"]

    def test_dump_keeps_order(self):
        text = (
            "apiVersion: v1\nkind: ConfigMap\nmetadata: {name: z}\n---\n"
            "apiVersion: v1\nkind: ConfigMap\nmetadata: {name: a}\n"
        )
        dumped = dump_manifests(parse_manifests(text))
        assert dumped.index("name: z") < dumped.index("name: a")


class TestTargetRuntime:
    def test_describe(self):
        rt = TargetRuntime(mesh_type="ISTIO", version="1.5.0")
        assert rt.describe() == "ISTIO 1.5.0"
        named = TargetRuntime(mesh_type="ISTIO", version="1.5.0", name="mesh-a")
        assert named.describe() == "mesh-a (ISTIO 1.5.0)"

    def test_selected_layers_drops_disabled(self):
        req = RenderRequest(
            application_name="a", version="1",
            layers={"mtls": "strict", "tracing": None},
        )
        assert req.selected_layers == {"mtls": "strict"}
