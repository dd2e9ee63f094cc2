"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from meshhub.adapters.mock import InMemoryClusterClient, MockTemplatingEngine
from meshhub.core.config.settings import RenderSettings

STEP_LABEL = "meshhub.io/install-step"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def gloo_spec_path(fixtures_dir: Path) -> Path:
    """The sample gloo application spec."""
    return fixtures_dir / "specs" / "gloo" / "spec.yaml"


@pytest.fixture
def engine() -> MockTemplatingEngine:
    return MockTemplatingEngine()


@pytest.fixture
def cluster() -> InMemoryClusterClient:
    return InMemoryClusterClient()


@pytest.fixture
def settings() -> RenderSettings:
    """Settings pinned to defaults, independent of MESHHUB_* env vars."""
    return RenderSettings(step_label_key=STEP_LABEL)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MESHHUB_* variables from the developer's shell out of tests."""
    for key in (
        "MESHHUB_STEP_LABEL",
        "MESHHUB_HELM_BIN",
        "MESHHUB_HELM_TIMEOUT",
        "MESHHUB_KUBECTL_TIMEOUT",
        "MESHHUB_LOG_LEVEL",
        "MESHHUB_LOG_FILE",
        "MESHHUB_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
