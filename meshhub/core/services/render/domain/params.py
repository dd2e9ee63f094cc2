"""
L1 Domain — Parameter resolution (pure).

Merges parameter defaults from several scopes plus caller overrides
into one flat ``name → string`` map. No I/O: secrets are resolved
through the callable handed in by the caller.

Precedence, lowest to highest:
    version defaults → flavor defaults → layer-option defaults → caller overrides

A higher scope replaces a lower one's value for the same name; values
are never merged within a single parameter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Callable

from meshhub.core.models.parameter import Parameter, ParameterValue, SecretValue
from meshhub.core.services.render.errors import (
    MissingRequiredParameter,
    SecretParameterRenderingUnsupported,
)

SecretLookup = Callable[[SecretValue], str]

# What display_parameter_value shows for a secret-typed value.
SECRET_DISPLAY_PLACEHOLDER = ""


@dataclass(frozen=True)
class ParameterScope:
    """Parameters declared at one level (version, flavor, layer option)."""

    name: str
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class ParameterSource:
    """Where the winning value for one parameter came from."""

    scope: str
    default: ParameterValue | None = None
    override: str | None = None


# ── Value formatting ────────────────────────────────────────────


def format_float(value: float) -> str:
    """Shortest decimal representation, never in exponent form.

    ``1.0`` → ``"1"``, ``1e-07`` → ``"0.0000001"``, ``2.5`` → ``"2.5"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_date(value: datetime) -> str:
    """Canonical UTC timestamp, e.g. ``2020-01-02T03:04:05Z``.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def param_value_to_string(
    value: ParameterValue,
    resolve_secret: SecretLookup | None = None,
) -> str:
    """Render a typed value as the string handed to the templating engine.

    Raises:
        SecretParameterRenderingUnsupported: For a secret value when no
            ``resolve_secret`` is available.
    """
    kind = value.kind()
    if kind == "string_value":
        assert value.string_value is not None
        return value.string_value
    elif kind == "boolean_value":
        return "true" if value.boolean_value else "false"
    elif kind == "int_value":
        return str(value.int_value)
    elif kind == "float_value":
        assert value.float_value is not None
        return format_float(value.float_value)
    elif kind == "date_value":
        assert value.date_value is not None
        return format_date(value.date_value)
    elif kind == "secret_value":
        assert value.secret_value is not None
        if resolve_secret is None:
            raise SecretParameterRenderingUnsupported(
                "Secret values cannot be rendered without a secret resolver",
            )
        return resolve_secret(value.secret_value)
    raise TypeError(f"Unhandled parameter value kind: {kind}")


def display_parameter_value(value: ParameterValue | None) -> str:
    """Render a default for listings (``meshhub spec show``).

    Secret-typed values are shown as SECRET_DISPLAY_PLACEHOLDER: this
    path never touches the cluster or the filesystem.
    """
    if value is None:
        return ""
    try:
        return param_value_to_string(value)
    except SecretParameterRenderingUnsupported:
        return SECRET_DISPLAY_PLACEHOLDER


# ── Merging ─────────────────────────────────────────────────────


def merge_parameter_sources(
    scopes: list[ParameterScope],
    overrides: dict[str, str],
) -> dict[str, ParameterSource]:
    """Pick the winning source for every parameter that has a value.

    Parameters without a default and without an override are absent
    from the result. Caller overrides may name parameters no scope
    declares; they are passed through.
    """
    merged: dict[str, ParameterSource] = {}
    for scope in scopes:
        for param in scope.parameters:
            if param.default is not None:
                merged[param.name] = ParameterSource(scope=scope.name, default=param.default)
    for name, value in overrides.items():
        merged[name] = ParameterSource(scope="overrides", override=value)
    return merged


def check_required(
    scopes: list[ParameterScope],
    merged: dict[str, ParameterSource],
) -> list[MissingRequiredParameter]:
    """Required parameters (at any level) that ended up with no value."""
    missing: list[MissingRequiredParameter] = []
    reported: set[str] = set()
    for scope in scopes:
        for param in scope.parameters:
            if not param.required or param.name in merged or param.name in reported:
                continue
            reported.add(param.name)
            missing.append(MissingRequiredParameter(
                f"Parameter '{param.name}' is required but has no value",
                parameter=param.name,
                scope=scope.name,
            ))
    return missing


def resolve_parameters(
    merged: dict[str, ParameterSource],
    resolve_secret: SecretLookup,
) -> dict[str, str]:
    """Turn merged sources into literal strings, resolving secrets.

    Output keys are sorted so the value map is deterministic.
    """
    resolved: dict[str, str] = {}
    for name in sorted(merged):
        source = merged[name]
        if source.override is not None:
            resolved[name] = source.override
        else:
            assert source.default is not None
            resolved[name] = param_value_to_string(source.default, resolve_secret)
    return resolved
