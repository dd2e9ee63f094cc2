"""
Shared click option parsing for render commands.
"""

from __future__ import annotations

import click

from meshhub.core.models.application import MeshType
from meshhub.core.models.request import TargetRuntime


def _split_pair(raw: str, sep: str, what: str) -> tuple[str, str]:
    key, found, value = raw.partition(sep)
    if not found or not key.strip():
        raise click.BadParameter(f"expected {what}, got '{raw}'")
    return key.strip(), value.strip()


def parse_layers(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...],
) -> dict[str, str | None]:
    """``id=option`` pairs; ``id=`` disables an optional layer."""
    layers: dict[str, str | None] = {}
    for raw in values:
        layer_id, option_id = _split_pair(raw, "=", "LAYER=OPTION")
        layers[layer_id] = option_id or None
    return layers


def parse_params(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...],
) -> dict[str, str]:
    params: dict[str, str] = {}
    for raw in values:
        key, value = _split_pair(raw, "=", "NAME=VALUE")
        params[key] = value
    return params


def parse_runtime(raw: str) -> TargetRuntime:
    """``TYPE:VERSION`` or ``NAME=TYPE:VERSION`` → TargetRuntime."""
    name = ""
    if "=" in raw:
        name, raw = _split_pair(raw, "=", "NAME=TYPE:VERSION")
    mesh, version = _split_pair(raw, ":", "TYPE:VERSION")
    try:
        mesh_type = MeshType(mesh.upper())
    except ValueError:
        choices = ", ".join(m.value for m in MeshType)
        raise click.BadParameter(f"unknown mesh type '{mesh}' (expected one of {choices})") from None
    if not version:
        raise click.BadParameter(f"missing mesh version in '{raw}'")
    return TargetRuntime(mesh_type=mesh_type, version=version, name=name)


def parse_runtime_option(
    ctx: click.Context, param: click.Parameter, value: str | None,
) -> TargetRuntime | None:
    return parse_runtime(value) if value else None


def parse_runtimes_option(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...],
) -> list[TargetRuntime]:
    return [parse_runtime(v) for v in values]
