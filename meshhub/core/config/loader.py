"""
Spec loader — reads application spec YAML into domain models.

This is the local stand-in for the spec store. It reads YAML,
validates against the Pydantic schemas, and returns typed
ApplicationSpec objects.

Layout for a directory of applications::

    specs/
        gloo/
            spec.yaml
            description.md     # optional, replaces long_description
        kiali/
            spec.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from meshhub.core.models.application import ApplicationSpec

logger = logging.getLogger(__name__)

SPEC_FILE_NAMES = ("spec.yaml", "spec.yml")
DESCRIPTION_FILE = "description.md"


class ConfigError(Exception):
    """Raised when a spec file or setting is invalid or missing."""


def load_application_spec(path: Path) -> ApplicationSpec:
    """Load and validate one application spec file.

    If a ``description.md`` sits next to the spec, its content
    overrides ``long_description``.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Spec file not found: {path}")

    logger.debug("Loading application spec from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    description = path.parent / DESCRIPTION_FILE
    if description.is_file():
        try:
            data["long_description"] = description.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {description}: {e}") from e

    try:
        spec = ApplicationSpec.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid application spec {path}: {e}") from e

    logger.info("Loaded application '%s' with %d versions", spec.name, len(spec.versions))
    return spec


def find_spec_file(directory: Path) -> Path | None:
    """Return the spec file inside ``directory``, if any."""
    for name in SPEC_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_application_specs(specs_dir: Path) -> dict[str, ApplicationSpec]:
    """Load every ``<app>/spec.yaml`` under ``specs_dir``, keyed by name.

    Raises:
        ConfigError: If any spec is invalid or two specs share a name.
    """
    specs: dict[str, ApplicationSpec] = {}

    if not specs_dir.is_dir():
        logger.debug("Specs directory not found: %s", specs_dir)
        return specs

    for child in sorted(specs_dir.iterdir()):
        if not child.is_dir():
            continue
        spec_file = find_spec_file(child)
        if spec_file is None:
            continue
        spec = load_application_spec(spec_file)
        if spec.name in specs:
            raise ConfigError(f"Duplicate application '{spec.name}' in {spec_file}")
        specs[spec.name] = spec

    logger.info("Discovered %d application specs: %s", len(specs), list(specs.keys()))
    return specs
