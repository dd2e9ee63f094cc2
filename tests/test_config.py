"""
Tests for configuration — spec loading and render settings.
"""

import re
import textwrap
from pathlib import Path

import pytest

from meshhub.core.config.loader import (
    ConfigError,
    find_spec_file,
    load_application_spec,
    load_application_specs,
)
from meshhub.core.config.settings import DEFAULT_STEP_LABEL, load_settings
from meshhub.core.models.application import ApplicationType, HelmArchiveLocation


# ═══════════════════════════════════════════════════════════════════
#  1. SPEC LOADER
# ═══════════════════════════════════════════════════════════════════


class TestLoadApplicationSpec:
    def test_fixture_spec(self, gloo_spec_path: Path):
        spec = load_application_spec(gloo_spec_path)
        assert spec.name == "gloo"
        assert spec.type == ApplicationType.EXTENSION
        assert spec.version_names == ["v1.3.0", "v1.4.0"]
        v13 = spec.get_version("v1.3.0")
        assert v13 is not None
        assert isinstance(v13.single_source, HelmArchiveLocation)
        assert [f.name for f in v13.flavors] == ["istio", "plain"]

    def test_description_file_overrides(self, gloo_spec_path: Path):
        spec = load_application_spec(gloo_spec_path)
        assert spec.long_description.startswith("# Gloo")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_application_spec(tmp_path / "spec.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "spec.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_application_spec(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "spec.yaml"
        path.write_text("- gloo\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_application_spec(path)

    def test_schema_violation_names_path(self, tmp_path: Path):
        path = tmp_path / "spec.yaml"
        path.write_text(textwrap.dedent("""\
            name: broken
            versions:
              - version: "1.0"
                helm_archive: {uri: a.tgz}
                manifests_archive: {uri: b.tgz}
        """))
        with pytest.raises(ConfigError, match=re.escape(str(path))):
            load_application_spec(path)

    def test_parameter_type_mismatch(self, tmp_path: Path):
        path = tmp_path / "spec.yaml"
        path.write_text(textwrap.dedent("""\
            name: broken
            versions:
              - version: "1.0"
                parameters:
                  - name: replicas
                    type: INT
                    default: {string_value: "3"}
        """))
        with pytest.raises(ConfigError, match="declared INT"):
            load_application_spec(path)


class TestLoadApplicationSpecs:
    def test_fixture_directory(self, fixtures_dir: Path):
        specs = load_application_specs(fixtures_dir / "specs")
        assert sorted(specs) == ["gloo", "kiali"]
        kiali = specs["kiali"].get_version("v1.18.0")
        assert kiali is not None
        assert kiali.required_labels == {"app": "kiali"}

    def test_missing_directory(self, tmp_path: Path):
        assert load_application_specs(tmp_path / "nope") == {}

    def test_duplicate_names(self, tmp_path: Path):
        for d in ("a", "b"):
            (tmp_path / d).mkdir()
            (tmp_path / d / "spec.yml").write_text("name: same\n")
        with pytest.raises(ConfigError, match="Duplicate application 'same'"):
            load_application_specs(tmp_path)

    def test_find_spec_file(self, tmp_path: Path):
        assert find_spec_file(tmp_path) is None
        (tmp_path / "spec.yml").write_text("name: x\n")
        assert find_spec_file(tmp_path) == tmp_path / "spec.yml"


# ═══════════════════════════════════════════════════════════════════
#  2. SETTINGS
# ═══════════════════════════════════════════════════════════════════


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings({})
        assert settings.step_label_key == DEFAULT_STEP_LABEL
        assert settings.helm_bin == "helm"
        assert settings.helm_timeout == 60
        assert settings.kubectl_timeout == 15

    def test_from_environment(self):
        settings = load_settings({
            "MESHHUB_STEP_LABEL": "example.com/step",
            "MESHHUB_HELM_BIN": "/opt/helm3",
            "MESHHUB_HELM_TIMEOUT": "120",
        })
        assert settings.step_label_key == "example.com/step"
        assert settings.helm_bin == "/opt/helm3"
        assert settings.helm_timeout == 120

    def test_empty_values_ignored(self):
        assert load_settings({"MESHHUB_STEP_LABEL": ""}).step_label_key == DEFAULT_STEP_LABEL

    def test_invalid_value(self):
        with pytest.raises(ConfigError, match="MESHHUB_"):
            load_settings({"MESHHUB_KUBECTL_TIMEOUT": "soon"})

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MESHHUB_STEP_LABEL", "env.example/step")
        assert load_settings().step_label_key == "env.example/step"
